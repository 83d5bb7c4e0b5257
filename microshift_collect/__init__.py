"""
MicroShift Report Collector

Gathers diagnostic data from a MicroShift edge cluster:
- MicroShift SOS report (direct or scratch-directory tool invocation)
- 'oc adm inspect' output for every application namespace
- A single tar.gz of the inspect output
- Optional collection from remote hosts over SSH
"""

__version__ = "1.0.0"

from .main import main, CollectionOrchestrator
from .common import CollectionConfig, RunSummary, StepResult
from .remote import RemoteFetcher

__all__ = [
    'main',
    'CollectionOrchestrator',
    'CollectionConfig',
    'RunSummary',
    'StepResult',
    'RemoteFetcher'
]
