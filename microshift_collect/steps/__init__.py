"""Collection workflow steps."""

from .workspace import prepare_workspace
from .credentials import resolve_kubeconfig, kubeconfig_env
from .sos_report import SosReportCollector, DirectSosReport, TmpDirSosReport, build_strategy
from .namespaces import NamespaceInspector, filter_namespaces, is_system_namespace, parse_namespaces
from .archiver import archive_inspections

__all__ = [
    'prepare_workspace',
    'resolve_kubeconfig',
    'kubeconfig_env',
    'SosReportCollector',
    'DirectSosReport',
    'TmpDirSosReport',
    'build_strategy',
    'NamespaceInspector',
    'filter_namespaces',
    'is_system_namespace',
    'parse_namespaces',
    'archive_inspections'
]
