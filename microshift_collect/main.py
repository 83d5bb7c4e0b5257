#!/usr/bin/env python3
"""
Main entry point for MicroShift report collection.

Collects, for one MicroShift host:
- a MicroShift SOS report
- 'oc adm inspect' output for every application namespace
- a tar.gz of the inspect output

The 'fetch' subcommand runs the same collection on remote hosts over SSH
and copies the results back to this machine.
"""

import argparse
import logging
import sys

from .common import (
    CollectionConfig,
    CollectionError,
    RunSummary,
    StepResult,
    run_command,
    setup_logging
)
from .common.config import SOS_MODES, NAMESPACE_QUERIES, KUBEADMIN_KUBECONFIG
from .common.results import FATAL
from .exporters import JSONExporter
from .remote import RemoteFetcher, load_inventory, DEFAULT_GROUP
from .remote.fetcher import DEFAULT_LOCAL_DEST, DEFAULT_REMOTE_BASE_DIR, DEFAULT_REMOTE_COMMAND
from .steps import (
    prepare_workspace,
    kubeconfig_env,
    SosReportCollector,
    NamespaceInspector,
    archive_inspections
)

logger = logging.getLogger(__name__)

SUBCOMMANDS = ('run', 'fetch')


class CollectionOrchestrator:
    """Runs the collection steps in order and records each outcome."""

    def __init__(self, config, runner=run_command):
        """
        Initialize the orchestrator.

        Args:
            config: CollectionConfig instance
            runner: Callable used for every external command
        """
        self.config = config
        self.runner = runner
        self.sos_collector = SosReportCollector(config, runner=runner)
        self.inspector = NamespaceInspector(config, runner=runner)

    def run(self):
        """
        Execute the whole workflow.

        Workspace and credential failures stop the run and are recorded as
        fatal; every other failure is recorded as a warning.

        Returns:
            RunSummary
        """
        summary = RunSummary(timestamp=self.config.timestamp)
        logger.info("Starting MicroShift report collection...")

        try:
            workspace, result = prepare_workspace(self.config)
            summary.workspace = workspace
            summary.add(result)

            with kubeconfig_env(self.config.kubeconfig) as (env, result):
                summary.add(result)
                self._collect(workspace, env, summary)
        except CollectionError as e:
            logger.error(str(e))
            summary.add(StepResult(e.step, FATAL, str(e)))

        return summary

    def _collect(self, workspace, env, summary):
        result, sos_reports = self.sos_collector.collect(workspace, env)
        summary.add(result)
        summary.artifacts.sos_reports = sos_reports

        result, namespaces = self.inspector.list_namespaces(env)
        summary.add(result)

        result, inspected = self.inspector.inspect(namespaces, workspace, env)
        summary.add(result)
        summary.artifacts.inspect_dirs = inspected

        result, archive = archive_inspections(workspace, self.config.archive_name, inspected)
        summary.add(result)
        summary.artifacts.archive = archive


def print_summary(summary):
    """Log a summary of the run."""
    logger.info("=" * 60)
    logger.info("COLLECTION SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Workspace: {summary.workspace}")
    for result in summary.steps:
        logger.info(f"  [{result.status.upper():7}] {result.step}: {result.message}")
    artifacts = summary.artifacts
    for report in artifacts.sos_reports:
        logger.info(f"SOS report: {report}")
    if artifacts.archive:
        logger.info(f"Inspect archive: {artifacts.archive}")
    logger.info("=" * 60)


def _common_parser():
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument('--log-file', default='microshift_collect.log',
                        help='Log file path (default: microshift_collect.log)')
    parser.add_argument('--no-log-file', action='store_true', help='Log to stderr only')
    parser.add_argument('--debug', action='store_true', help='Enable debug output')
    parser.add_argument('--no-progress', action='store_true', help='Hide progress bars')
    parser.add_argument('--summary-json', metavar='PATH',
                        help="Write the result summary as JSON ('-' for stdout)")
    return parser


def _collection_options(parser):
    parser.add_argument('--kubeconfig', help='Kubeconfig path (default: /var/lib/microshift/resources/kubeconfig)')
    parser.add_argument('--kubeadmin', action='store_true',
                        help=f'Use the kubeadmin kubeconfig ({KUBEADMIN_KUBECONFIG})')
    parser.add_argument('--sos-mode', choices=SOS_MODES,
                        help="'direct': <tool> report -o <dir>; 'tmpdir': <tool> --tmp-dir <dir> then move")
    parser.add_argument('--namespace-query', choices=NAMESPACE_QUERIES,
                        help="Output format used to list namespaces (default: jsonpath)")


def parse_arguments(argv=None):
    """Parse command-line arguments."""
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] not in SUBCOMMANDS + ('-h', '--help'):
        argv.insert(0, 'run')

    common = _common_parser()
    parser = argparse.ArgumentParser(
        prog='microshift-collect',
        description="Collect MicroShift SOS reports and 'oc adm inspect' output",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Collect on this host into /var/tmp/microshift_reports/<timestamp>
  microshift-collect run

  # Use the kubeadmin kubeconfig and the older sos tool
  microshift-collect run --kubeadmin --sos-mode tmpdir

  # Collect from every host of an inventory group
  microshift-collect fetch --inventory hosts.yml --group local-lab
        """
    )
    subparsers = parser.add_subparsers(dest='command')

    run = subparsers.add_parser('run', parents=[common], help='Collect reports on this host')
    _collection_options(run)
    run.add_argument('--config', help='YAML file with collection settings')
    run.add_argument('--base-dir', help='Base directory for reports (default: /var/tmp/microshift_reports)')
    run.add_argument('--workspace-prefix', help='Prefix for the timestamped workspace name')
    run.add_argument('--sos-tool', help='SOS report executable (default depends on --sos-mode)')
    run.add_argument('--sos-tmp-dir', help="Parent of the scratch directory used by 'tmpdir' mode")
    run.add_argument('--skip-sos', action='store_true', default=None, help='Do not collect an SOS report')
    run.add_argument('--exclude-namespace', action='append', metavar='NAME',
                     help='Additional namespace to leave out (repeatable)')
    run.add_argument('--oc-binary', help='Cluster CLI executable (default: oc)')
    run.add_argument('--become', action='store_true', default=None,
                     help="Run the SOS report tool through 'sudo -n'")
    run.add_argument('--command-timeout', type=int, help='Timeout in seconds for each external command')

    fetch = subparsers.add_parser('fetch', parents=[common], help='Collect on remote hosts and fetch results')
    _collection_options(fetch)
    fetch.add_argument('--inventory', required=True, help='YAML inventory file')
    fetch.add_argument('--group', default=DEFAULT_GROUP, help=f'Inventory group (default: {DEFAULT_GROUP})')
    fetch.add_argument('--local-dest', default=DEFAULT_LOCAL_DEST,
                       help=f'Local directory for fetched reports (default: {DEFAULT_LOCAL_DEST})')
    fetch.add_argument('--remote-base-dir', default=DEFAULT_REMOTE_BASE_DIR,
                       help=f'Report directory on the hosts (default: {DEFAULT_REMOTE_BASE_DIR})')
    fetch.add_argument('--remote-command', default=DEFAULT_REMOTE_COMMAND,
                       help=f'Collector executable on the hosts (default: {DEFAULT_REMOTE_COMMAND})')
    fetch.add_argument('--forks', type=int, default=1, help='Hosts processed in parallel (default: 1)')
    fetch.add_argument('--no-become', action='store_true', help="Do not use 'sudo -n' on the hosts")
    fetch.add_argument('--no-cleanup', action='store_true', help='Keep the remote workspace')

    return parser.parse_args(argv)


def _kubeconfig(args):
    return KUBEADMIN_KUBECONFIG if args.kubeadmin and not args.kubeconfig else args.kubeconfig


def run_collection(args):
    """Run the local workflow and return the process exit code."""
    try:
        config = CollectionConfig.from_sources(
            config_file=args.config,
            base_dir=args.base_dir,
            kubeconfig=_kubeconfig(args),
            sos_mode=args.sos_mode,
            sos_tool=args.sos_tool,
            sos_tmp_parent=args.sos_tmp_dir,
            skip_sos=args.skip_sos,
            namespace_query=args.namespace_query,
            exclude_namespaces=args.exclude_namespace,
            oc_binary=args.oc_binary,
            become=args.become,
            command_timeout=args.command_timeout,
            workspace_prefix=args.workspace_prefix,
            show_progress=not args.no_progress
        )
    except CollectionError as e:
        logger.error(str(e))
        return 1

    summary = CollectionOrchestrator(config).run()
    print_summary(summary)

    if args.summary_json:
        JSONExporter().save(summary.to_dict(), args.summary_json)

    if summary.exit_code == 0:
        logger.info(f"Report collection complete. All collected reports are located in: {summary.workspace}")
    return summary.exit_code


def run_fetch(args):
    """Run the remote workflow and return the process exit code."""
    try:
        hosts = load_inventory(args.inventory, args.group)
    except CollectionError as e:
        logger.error(str(e))
        return 1

    collect_args = []
    kubeconfig = _kubeconfig(args)
    if kubeconfig:
        collect_args += ['--kubeconfig', kubeconfig]
    if args.sos_mode:
        collect_args += ['--sos-mode', args.sos_mode]
    if args.namespace_query:
        collect_args += ['--namespace-query', args.namespace_query]

    fetcher = RemoteFetcher(
        local_dest=args.local_dest,
        remote_command=args.remote_command,
        remote_base_dir=args.remote_base_dir,
        collect_args=collect_args,
        become=not args.no_become,
        cleanup=not args.no_cleanup,
        forks=args.forks,
        show_progress=not args.no_progress
    )
    results = fetcher.fetch_all(hosts)

    for result in results:
        status = "ok" if result.ok else f"failed: {result.failure}"
        logger.info(f"  {result.host}: {status}, {len(result.fetched)} file(s) fetched")

    if args.summary_json:
        JSONExporter().save([r.to_dict() for r in results], args.summary_json)

    return 0 if any(r.ok for r in results) else 1


def main(argv=None):
    """Main entry point."""
    args = parse_arguments(argv)
    setup_logging(log_file=None if args.no_log_file else args.log_file, debug=args.debug)
    try:
        if args.command == 'fetch':
            return run_fetch(args)
        return run_collection(args)
    except KeyboardInterrupt:
        logger.warning("Collection interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
