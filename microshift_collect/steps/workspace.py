#!/usr/bin/env python3
"""Workspace preparation: one timestamped directory per run."""

import logging

from ..common.errors import WorkspaceError
from ..common.results import StepResult, OK

logger = logging.getLogger(__name__)

STEP = "workspace"


def prepare_workspace(config):
    """
    Create the run's workspace directory.

    Args:
        config: CollectionConfig instance

    Returns:
        tuple: (workspace Path, StepResult)

    Raises:
        WorkspaceError: If the directory cannot be created
    """
    workspace = config.workspace
    logger.info(f"Reports will be saved in: {workspace}")

    try:
        workspace.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WorkspaceError(f"Failed to create report directory {workspace}: {e}") from e

    logger.info(f"Created report directory: {workspace}")
    return workspace, StepResult(STEP, OK, f"Created {workspace}", {'path': str(workspace)})
