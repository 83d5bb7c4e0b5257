#!/usr/bin/env python3
"""SOS report collection with two tool invocation styles."""

import logging
import shutil
import tempfile
from pathlib import Path

from ..common.config import SOS_REPORT_PATTERN
from ..common.results import StepResult, OK, SKIPPED, WARNING
from ..common.utils import run_command

logger = logging.getLogger(__name__)

STEP = "sos_report"


def find_sos_reports(directory):
    """Return SOS report archives directly inside a directory, sorted."""
    return sorted(Path(directory).glob(SOS_REPORT_PATTERN))


class SosReportStrategy:
    """Base class for a way of running the SOS report tool."""

    name = None

    def __init__(self, tool, become=False, tmp_parent=None):
        self.tool = tool
        self.become = become
        self.tmp_parent = tmp_parent

    def _prefix(self):
        return ["sudo", "-n"] if self.become else []

    def run(self, workspace, env, runner, timeout=None):
        """
        Produce SOS report archives inside the workspace.

        Returns:
            tuple: (list of archive Paths, error message or None)
        """
        raise NotImplementedError


class DirectSosReport(SosReportStrategy):
    """Tool writes its archive straight into the workspace: '<tool> report -o <dir>'."""

    name = "direct"

    def command(self, dest):
        return self._prefix() + [self.tool, "report", "-o", str(dest)]

    def run(self, workspace, env, runner, timeout=None):
        _, error = runner(self.command(workspace), env=env, timeout=timeout)
        if error:
            return [], error
        return find_sos_reports(workspace), None


class TmpDirSosReport(SosReportStrategy):
    """Tool writes to a scratch directory; archives are found by pattern and moved."""

    name = "tmpdir"

    def command(self, dest):
        return self._prefix() + [self.tool, "--tmp-dir", str(dest)]

    def run(self, workspace, env, runner, timeout=None):
        scratch = Path(tempfile.mkdtemp(prefix="microshift-sos-", dir=self.tmp_parent))
        try:
            _, error = runner(self.command(scratch), env=env, timeout=timeout)
            if error:
                return [], error

            moved = []
            for archive in find_sos_reports(scratch):
                target = Path(workspace) / archive.name
                shutil.move(str(archive), str(target))
                logger.info(f"Moved {archive.name} into {workspace}")
                moved.append(target)
            return moved, None
        except OSError as e:
            return [], f"failed to move SOS report into workspace: {e}"
        finally:
            shutil.rmtree(scratch, ignore_errors=True)


STRATEGIES = {
    DirectSosReport.name: DirectSosReport,
    TmpDirSosReport.name: TmpDirSosReport
}


def build_strategy(config):
    """Create the SOS report strategy selected by the configuration."""
    strategy_cls = STRATEGIES[config.sos_mode]
    return strategy_cls(config.sos_tool, become=config.become, tmp_parent=config.sos_tmp_parent)


class SosReportCollector:
    """Collect a MicroShift SOS report into the workspace."""

    def __init__(self, config, runner=run_command, strategy=None):
        """
        Args:
            config: CollectionConfig instance
            runner: Callable with run_command's signature
            strategy: SosReportStrategy, chosen from config when omitted
        """
        self.config = config
        self.runner = runner
        self.strategy = strategy or build_strategy(config)

    def collect(self, workspace, env):
        """
        Run the SOS report tool unless a report is already present.

        Returns:
            tuple: (StepResult, list of report Paths, empty when none)
        """
        if self.config.skip_sos:
            logger.info("SOS report collection disabled. Skipping.")
            return StepResult(STEP, SKIPPED, "Disabled by configuration"), []

        existing = find_sos_reports(workspace)
        if existing:
            logger.info(f"MicroShift SOS report already exists in {workspace}. Skipping sos report collection.")
            return StepResult(STEP, SKIPPED, "SOS report already present",
                              {'paths': [str(p) for p in existing]}), existing

        logger.info(f"Collecting microshift-sos-report with {self.strategy.tool} ({self.strategy.name})...")
        reports, error = self.strategy.run(workspace, env, self.runner, timeout=self.config.command_timeout)

        if error:
            logger.warning(f"{self.strategy.tool} failed: {error}. Continuing with other tasks.")
            return StepResult(STEP, WARNING, f"{self.strategy.tool} failed",
                              {'tool': self.strategy.tool, 'error': error}), []

        if not reports:
            logger.warning(f"{self.strategy.tool} exited cleanly but produced no {SOS_REPORT_PATTERN}.")
            return StepResult(STEP, WARNING, "No SOS report archive produced",
                              {'tool': self.strategy.tool}), []

        for report in reports:
            logger.info(f"MicroShift SOS report collected: {report}")
        return StepResult(STEP, OK, f"Collected {len(reports)} SOS report(s)",
                          {'paths': [str(p) for p in reports]}), reports
