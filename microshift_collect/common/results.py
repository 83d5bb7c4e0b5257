#!/usr/bin/env python3
"""Step outcomes and the per-run summary built from them."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

OK = "ok"
SKIPPED = "skipped"
WARNING = "warning"
FATAL = "fatal"


@dataclass
class StepResult:
    """Outcome of a single workflow step."""
    step: str
    status: str
    message: str = ""
    details: Dict = field(default_factory=dict)

    @property
    def succeeded(self):
        return self.status == OK

    def to_dict(self):
        return {
            'step': self.step,
            'status': self.status,
            'message': self.message,
            'details': self.details
        }


@dataclass
class Artifacts:
    """Files and directories a run left in its workspace."""
    sos_reports: List[Path] = field(default_factory=list)
    inspect_dirs: List[Path] = field(default_factory=list)
    archive: Optional[Path] = None

    def to_dict(self):
        return {
            'sos_reports': [str(p) for p in self.sos_reports],
            'inspect_dirs': [str(p) for p in self.inspect_dirs],
            'archive': str(self.archive) if self.archive else None
        }


@dataclass
class RunSummary:
    """Aggregated result of one collection run."""
    timestamp: str
    workspace: Optional[Path] = None
    steps: List[StepResult] = field(default_factory=list)
    artifacts: Artifacts = field(default_factory=Artifacts)

    def add(self, result):
        self.steps.append(result)
        return result

    def step(self, name):
        for result in self.steps:
            if result.step == name:
                return result
        return None

    @property
    def fatal(self):
        return any(r.status == FATAL for r in self.steps)

    @property
    def warnings(self):
        return [r for r in self.steps if r.status == WARNING]

    @property
    def exit_code(self):
        return 1 if self.fatal else 0

    def to_dict(self):
        return {
            'timestamp': self.timestamp,
            'workspace': str(self.workspace) if self.workspace else None,
            'exit_code': self.exit_code,
            'steps': [r.to_dict() for r in self.steps],
            'artifacts': self.artifacts.to_dict()
        }
