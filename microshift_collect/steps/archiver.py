#!/usr/bin/env python3
"""Aggregate archive of the per-namespace inspection output."""

import fnmatch
import logging
import tarfile
from pathlib import Path

from ..common.config import SOS_REPORT_PATTERN, ARCHIVE_PATTERN
from ..common.results import StepResult, OK, SKIPPED, WARNING

logger = logging.getLogger(__name__)

STEP = "archive"

EXCLUDE_PATTERNS = (SOS_REPORT_PATTERN, ARCHIVE_PATTERN)


def is_excluded(name):
    """True if a member's base name matches an SOS report or aggregate archive."""
    base = Path(name).name
    return any(fnmatch.fnmatch(base, pattern) for pattern in EXCLUDE_PATTERNS)


def _exclude_filter(tarinfo):
    if is_excluded(tarinfo.name):
        logger.debug(f"Excluding {tarinfo.name} from archive")
        return None
    return tarinfo


def archive_inspections(workspace, archive_name, inspected_dirs):
    """
    Compress inspection directories into one tar.gz inside the workspace.

    Only top-level workspace directories that came from a successful
    inspection are included.

    Args:
        workspace: Workspace Path
        archive_name: File name of the aggregate archive
        inspected_dirs: Directories produced by successful inspections

    Returns:
        tuple: (StepResult, archive Path or None)
    """
    workspace = Path(workspace)
    if not inspected_dirs:
        logger.info("No 'oc adm inspect' output to compress. Skipping archive.")
        return StepResult(STEP, SKIPPED, "No inspection output"), None

    wanted = {Path(d).name for d in inspected_dirs}
    members = sorted(
        p for p in workspace.iterdir()
        if p.is_dir() and p.name in wanted and not is_excluded(p.name)
    )
    if not members:
        logger.warning("Inspection succeeded but no output directories were found in the workspace.")
        return StepResult(STEP, WARNING, "Inspection directories missing"), None

    archive_path = workspace / archive_name
    logger.info("Compressing 'oc adm inspect' reports...")
    try:
        with tarfile.open(archive_path, "w:gz") as tar:
            for member in members:
                tar.add(member, arcname=member.name, filter=_exclude_filter)
    except (OSError, tarfile.TarError) as e:
        logger.warning(f"Failed to compress 'oc adm inspect' reports: {e}")
        archive_path.unlink(missing_ok=True)
        return StepResult(STEP, WARNING, "Archive creation failed", {'error': str(e)}), None

    logger.info(f"Compressed 'oc adm inspect' reports to: {archive_path}")
    return StepResult(STEP, OK, f"Archived {len(members)} directories",
                      {'path': str(archive_path), 'members': [m.name for m in members]}), archive_path
