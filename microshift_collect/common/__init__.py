"""Common utilities for MicroShift report collection."""

from .utils import setup_logging, run_command, get_timestamp
from .config import CollectionConfig
from .errors import (
    CollectionError,
    ConfigError,
    WorkspaceError,
    CredentialError,
    CredentialNotFoundError,
    CredentialNotReadableError,
    InventoryError,
    RemoteError
)
from .results import StepResult, RunSummary, Artifacts

__all__ = [
    'setup_logging',
    'run_command',
    'get_timestamp',
    'CollectionConfig',
    'CollectionError',
    'ConfigError',
    'WorkspaceError',
    'CredentialError',
    'CredentialNotFoundError',
    'CredentialNotReadableError',
    'InventoryError',
    'RemoteError',
    'StepResult',
    'RunSummary',
    'Artifacts'
]
