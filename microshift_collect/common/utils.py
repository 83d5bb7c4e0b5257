#!/usr/bin/env python3
"""Common utility functions for MicroShift report collection."""

import logging
import subprocess
from datetime import datetime

logger = logging.getLogger(__name__)

LOG_FORMAT = '[%(asctime)s] %(levelname)s: %(message)s'
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def setup_logging(log_file="microshift_collect.log", debug=False):
    """
    Configure root logging for a collection run.

    Args:
        log_file: Path of the log file, or None to log to the stream only
        debug: Enable DEBUG level output
    """
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers
    )


def get_timestamp(now=None):
    """Get timestamp in format YYYYMMDDHHMMSS."""
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def run_command(command, env=None, timeout=None):
    """
    Run an external command and return stdout and an error message.

    A missing binary, a non-zero exit and a timeout are all reported the
    same way so callers only need to check the error slot.

    Args:
        command: Command as a list of arguments
        env: Environment mapping for the child process
        timeout: Optional timeout in seconds

    Returns:
        tuple: (stdout, None) on success or (None, error_message)
    """
    logger.debug(f"Running: {' '.join(command)}")
    try:
        result = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            env=env,
            timeout=timeout
        )
    except FileNotFoundError:
        return None, f"command not found: {command[0]}"
    except subprocess.TimeoutExpired:
        return None, f"timed out after {timeout}s: {' '.join(command)}"
    except OSError as e:
        return None, str(e)

    logger.debug(f"Return code: {result.returncode}")
    if result.returncode != 0:
        stderr = result.stderr.strip()
        logger.debug(f"STDERR: {stderr}")
        return None, stderr or f"exit code {result.returncode}"

    return result.stdout.strip(), None
