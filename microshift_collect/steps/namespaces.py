#!/usr/bin/env python3
"""Application namespace discovery and per-namespace 'oc adm inspect'."""

import logging
from pathlib import Path

from tqdm import tqdm

from ..common.results import StepResult, OK, SKIPPED, WARNING
from ..common.utils import run_command

logger = logging.getLogger(__name__)

LIST_STEP = "list_namespaces"
INSPECT_STEP = "inspect"

SYSTEM_NAMESPACES = frozenset({
    'default',
    'kube-system',
    'kube-public',
    'kube-node-lease',
    'openshift'
})
SYSTEM_SUBSTRINGS = ('openshift', 'kube')


def is_system_namespace(name, extra_excludes=()):
    """
    Decide whether a namespace belongs to the platform rather than a user.

    A name is excluded when it is a reserved name, contains 'openshift' or
    'kube', or is listed in extra_excludes.
    """
    if name in SYSTEM_NAMESPACES or name in extra_excludes:
        return True
    return any(part in name for part in SYSTEM_SUBSTRINGS)


def parse_namespaces(output, query_style="jsonpath"):
    """
    Split 'oc get namespaces' output into names.

    Args:
        output: Raw stdout of the query
        query_style: 'jsonpath' (space separated) or 'name' (namespace/<name> lines)

    Returns:
        list: Namespace names in output order
    """
    if not output:
        return []
    names = []
    for token in output.split():
        if query_style == "name":
            token = token.split("/", 1)[-1]
        if token:
            names.append(token)
    return names


def filter_namespaces(names, extra_excludes=()):
    """Drop system namespaces and duplicates, keeping first-seen order."""
    seen = set()
    filtered = []
    for name in names:
        if name in seen or is_system_namespace(name, extra_excludes):
            continue
        seen.add(name)
        filtered.append(name)
    return tuple(filtered)


class NamespaceInspector:
    """List application namespaces and inspect each one into the workspace."""

    def __init__(self, config, runner=run_command):
        """
        Args:
            config: CollectionConfig instance
            runner: Callable with run_command's signature
        """
        self.config = config
        self.runner = runner

    def list_command(self):
        oc = self.config.oc_binary
        if self.config.namespace_query == "name":
            return [oc, "get", "namespaces", "-o", "name"]
        return [oc, "get", "namespaces", "-o", "jsonpath={.items[*].metadata.name}"]

    def inspect_command(self, namespace, dest_dir):
        return [self.config.oc_binary, "adm", "inspect", f"ns/{namespace}", f"--dest-dir={dest_dir}"]

    def list_namespaces(self, env):
        """
        Query the cluster for application namespaces.

        Returns:
            tuple: (StepResult, tuple of namespace names)
        """
        logger.info("Getting list of application namespaces...")
        output, error = self.runner(self.list_command(), env=env, timeout=self.config.command_timeout)

        if error:
            logger.warning(f"Failed to list namespaces: {error}")
            return StepResult(LIST_STEP, WARNING, "Namespace query failed", {'error': error}), ()

        names = filter_namespaces(
            parse_namespaces(output, self.config.namespace_query),
            self.config.exclude_namespaces
        )

        if not names:
            logger.info("No application namespaces found.")
            return StepResult(LIST_STEP, SKIPPED, "No application namespaces found", {'namespaces': []}), ()

        logger.info(f"Found application namespaces: {' '.join(names)}")
        return StepResult(LIST_STEP, OK, f"Found {len(names)} namespace(s)",
                          {'namespaces': list(names)}), names

    def inspect(self, namespaces, workspace, env):
        """
        Run 'oc adm inspect' for each namespace, one at a time.

        Each namespace gets its own '<workspace>/<namespace>' directory. A
        failed namespace is recorded and the loop moves on.

        Returns:
            tuple: (StepResult, list of successfully inspected directories)
        """
        if not namespaces:
            logger.info("Skipping 'oc adm inspect' as no application namespaces were found.")
            return StepResult(INSPECT_STEP, SKIPPED, "No namespaces to inspect"), []

        logger.info("Running 'oc adm inspect' for each application namespace...")
        succeeded = []
        failed = {}

        for namespace in tqdm(namespaces, desc="Inspecting namespaces", unit="ns",
                              disable=not self.config.show_progress):
            dest_dir = Path(workspace) / namespace
            logger.info(f"  - Inspecting namespace: {namespace}")
            _, error = self.runner(self.inspect_command(namespace, dest_dir), env=env,
                                   timeout=self.config.command_timeout)
            if error:
                logger.warning(f"    'oc adm inspect' failed for namespace '{namespace}': {error}. Continuing.")
                failed[namespace] = error
            else:
                succeeded.append(dest_dir)

        logger.info("'oc adm inspect' collection complete.")
        details = {
            'succeeded': [p.name for p in succeeded],
            'failed': failed
        }

        if failed:
            return StepResult(INSPECT_STEP, WARNING,
                              f"{len(failed)} of {len(namespaces)} namespace(s) failed", details), succeeded
        return StepResult(INSPECT_STEP, OK, f"Inspected {len(succeeded)} namespace(s)", details), succeeded
