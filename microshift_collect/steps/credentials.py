#!/usr/bin/env python3
"""Kubeconfig validation and run-scoped cluster access."""

import logging
import os
from contextlib import contextmanager
from pathlib import Path

from ..common.errors import CredentialNotFoundError, CredentialNotReadableError
from ..common.results import StepResult, OK

logger = logging.getLogger(__name__)

STEP = "credentials"


def resolve_kubeconfig(path):
    """
    Expand and validate a kubeconfig path.

    Args:
        path: Configured kubeconfig path (may contain ~ or $VARS)

    Returns:
        Path: The validated kubeconfig

    Raises:
        CredentialNotFoundError: The file does not exist
        CredentialNotReadableError: The file exists but cannot be read
    """
    kubeconfig = Path(os.path.expanduser(os.path.expandvars(str(path))))

    if not kubeconfig.exists():
        raise CredentialNotFoundError(f"Kubeconfig not found: {kubeconfig}")
    if not kubeconfig.is_file() or not os.access(kubeconfig, os.R_OK):
        raise CredentialNotReadableError(f"Kubeconfig is not readable: {kubeconfig}")

    return kubeconfig


@contextmanager
def kubeconfig_env(path):
    """
    Yield a child-process environment with KUBECONFIG set.

    The process environment itself is never modified; the mapping is
    cleared when the block exits so it cannot be reused afterwards.

    Yields:
        tuple: (env dict, StepResult)
    """
    kubeconfig = resolve_kubeconfig(path)
    env = os.environ.copy()
    env["KUBECONFIG"] = str(kubeconfig)
    logger.info(f"KUBECONFIG set to: {kubeconfig}")
    try:
        yield env, StepResult(STEP, OK, f"Using kubeconfig {kubeconfig}", {'kubeconfig': str(kubeconfig)})
    finally:
        env.clear()
        logger.debug("KUBECONFIG released")
