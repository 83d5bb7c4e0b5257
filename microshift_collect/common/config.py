#!/usr/bin/env python3
"""Configuration management for MicroShift report collection."""

import os
from pathlib import Path

import yaml

from .errors import ConfigError
from .utils import get_timestamp

DEFAULT_BASE_DIR = "/var/tmp/microshift_reports"
DEFAULT_KUBECONFIG = "/var/lib/microshift/resources/kubeconfig"
KUBEADMIN_KUBECONFIG = "/var/lib/microshift/resources/kubeadmin/kubeconfig"

SOS_MODES = ('direct', 'tmpdir')
SOS_TOOLS = {
    'direct': 'microshift-sos',
    'tmpdir': 'microshift-sos-report'
}
NAMESPACE_QUERIES = ('jsonpath', 'name')

SOS_REPORT_PATTERN = "sosreport-microshift-*.tar.xz"
ARCHIVE_PATTERN = "oc_adm_inspect_reports_*.tar.gz"

LIST_KEYS = frozenset({'exclude_namespaces'})
BOOL_KEYS = frozenset({'skip_sos', 'become'})
INT_KEYS = frozenset({'command_timeout'})


class CollectionConfig:
    """Configuration for a single collection run."""

    FILE_KEYS = {
        'report_base_dir': 'base_dir',
        'kubeconfig': 'kubeconfig',
        'sos_mode': 'sos_mode',
        'sos_tool': 'sos_tool',
        'sos_tmp_parent': 'sos_tmp_parent',
        'skip_sos': 'skip_sos',
        'namespace_query': 'namespace_query',
        'exclude_namespaces': 'exclude_namespaces',
        'oc_binary': 'oc_binary',
        'become': 'become',
        'command_timeout': 'command_timeout',
        'workspace_prefix': 'workspace_prefix'
    }

    def __init__(
        self,
        base_dir=None,
        kubeconfig=None,
        sos_mode="direct",
        sos_tool=None,
        sos_tmp_parent=None,
        skip_sos=False,
        namespace_query="jsonpath",
        exclude_namespaces=None,
        oc_binary="oc",
        become=False,
        command_timeout=None,
        workspace_prefix="",
        timestamp=None,
        show_progress=True
    ):
        """
        Initialize collection configuration.

        Args:
            base_dir: Directory holding one timestamped workspace per run
            kubeconfig: Path to the cluster kubeconfig
            sos_mode: 'direct' (tool writes to the workspace) or 'tmpdir'
            sos_tool: SOS report binary, defaults per sos_mode
            sos_tmp_parent: Parent for the tmpdir strategy's scratch directory
            skip_sos: Do not run the SOS report tool at all
            namespace_query: 'jsonpath' or 'name' output for 'oc get namespaces'
            exclude_namespaces: Extra namespace names to leave out
            oc_binary: Cluster CLI binary
            become: Prefix the SOS report tool with 'sudo -n'
            command_timeout: Timeout in seconds for each external command
            workspace_prefix: Prepended to the timestamp in the workspace name
            timestamp: Fixed timestamp, generated when omitted
            show_progress: Show a progress bar over namespace inspections
        """
        if sos_mode not in SOS_MODES:
            raise ConfigError(f"Unknown sos_mode '{sos_mode}', expected one of {', '.join(SOS_MODES)}")
        if namespace_query not in NAMESPACE_QUERIES:
            raise ConfigError(
                f"Unknown namespace_query '{namespace_query}', expected one of {', '.join(NAMESPACE_QUERIES)}"
            )

        self.base_dir = Path(
            base_dir or os.environ.get("MICROSHIFT_REPORT_DIR") or DEFAULT_BASE_DIR
        ).expanduser()
        self.kubeconfig = kubeconfig or os.environ.get("MICROSHIFT_KUBECONFIG") or DEFAULT_KUBECONFIG
        self.sos_mode = sos_mode
        self.sos_tool = sos_tool or SOS_TOOLS[sos_mode]
        self.sos_tmp_parent = sos_tmp_parent
        self.skip_sos = skip_sos
        self.namespace_query = namespace_query
        if isinstance(exclude_namespaces, str):
            exclude_namespaces = (exclude_namespaces,)
        self.exclude_namespaces = tuple(exclude_namespaces or ())
        self.oc_binary = oc_binary
        self.become = become
        self.command_timeout = command_timeout
        self.workspace_prefix = workspace_prefix or ""
        self.timestamp = timestamp or get_timestamp()
        self.show_progress = show_progress

    @property
    def workspace(self):
        """Path of this run's workspace directory."""
        return self.base_dir / f"{self.workspace_prefix}{self.timestamp}"

    @property
    def archive_name(self):
        return f"oc_adm_inspect_reports_{self.timestamp}.tar.gz"

    @classmethod
    def load_file(cls, path):
        """
        Read a YAML config file into constructor keyword arguments.

        Args:
            path: Path to the YAML file

        Returns:
            dict: Keyword arguments for CollectionConfig
        """
        try:
            with open(Path(path).expanduser(), encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        unknown = set(data) - set(cls.FILE_KEYS)
        if unknown:
            raise ConfigError(f"Unknown keys in {path}: {', '.join(sorted(unknown))}")

        kwargs = {}
        for key, value in data.items():
            if value is None:
                continue
            kwargs[cls.FILE_KEYS[key]] = cls._coerce(key, value, path)
        return kwargs

    @staticmethod
    def _coerce(key, value, path):
        """Check a config file value against the type its setting expects."""
        if key in LIST_KEYS:
            if isinstance(value, str):
                return (value,)
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"'{key}' in {path} must be a name or a list of names")
            return tuple(value)

        if key in BOOL_KEYS:
            if not isinstance(value, bool):
                raise ConfigError(f"'{key}' in {path} must be true or false")
            return value

        if key in INT_KEYS:
            if isinstance(value, bool):
                raise ConfigError(f"'{key}' in {path} must be a whole number of seconds")
            try:
                number = int(value)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"'{key}' in {path} must be a whole number of seconds") from e
            if number <= 0 or (isinstance(value, float) and number != value):
                raise ConfigError(f"'{key}' in {path} must be a whole number of seconds")
            return number

        if not isinstance(value, str):
            raise ConfigError(f"'{key}' in {path} must be a string")
        return value

    @classmethod
    def from_sources(cls, config_file=None, **overrides):
        """
        Build a config from an optional YAML file plus explicit overrides.

        Overrides set to None fall back to the file value, then the default.
        """
        kwargs = cls.load_file(config_file) if config_file else {}
        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)
