#!/usr/bin/env python3
"""
Run the collector on remote hosts over SSH and pull the results back.

For every host of an inventory group the fetcher:
  1. runs 'microshift-collect run ... --summary-json -' on the target,
  2. reads the JSON run summary from the command's stdout,
  3. copies every SOS report and the aggregate inspect archive (when present)
     into '<local_dest>/<host>/' over SFTP,
  4. removes the remote workspace.

The collector must be installed on each target.
"""

import json
import logging
import posixpath
import shlex
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import paramiko
from tqdm import tqdm

from ..common.errors import RemoteError

logger = logging.getLogger(__name__)

DEFAULT_REMOTE_BASE_DIR = "/tmp/microshift_reports"
DEFAULT_LOCAL_DEST = "./collected_microshift_reports"
DEFAULT_REMOTE_COMMAND = "microshift-collect"


@dataclass
class HostResult:
    """What happened on one remote host."""
    host: str
    summary: Optional[Dict] = None
    fetched: List[Path] = field(default_factory=list)
    fetch_errors: Dict[str, str] = field(default_factory=dict)
    cleaned: bool = False
    error: Optional[str] = None

    @property
    def ok(self):
        """The remote run completed without a fatal error and nothing failed here."""
        return (
            self.error is None
            and self.summary is not None
            and self.summary.get('exit_code') == 0
        )

    @property
    def failure(self):
        if self.error:
            return self.error
        if self.summary is None:
            return "no summary"
        if self.summary.get('exit_code') != 0:
            return f"remote run exited {self.summary.get('exit_code')}"
        return None

    def to_dict(self):
        return {
            'host': self.host,
            'summary': self.summary,
            'fetched': [str(p) for p in self.fetched],
            'fetch_errors': self.fetch_errors,
            'cleaned': self.cleaned,
            'error': self.error
        }


def connect_ssh(host, timeout=30):
    """Open an SSH connection to an inventory host."""
    ssh = paramiko.SSHClient()
    ssh.load_system_host_keys()
    ssh.set_missing_host_key_policy(paramiko.AutoAddPolicy())
    ssh.connect(
        host.host,
        port=host.port,
        username=host.user,
        key_filename=host.key_file,
        password=host.password,
        timeout=timeout
    )
    return ssh


def exec_command(ssh, command):
    """
    Run a command over SSH.

    Returns:
        tuple: (exit_status, stdout, stderr)
    """
    logger.debug(f"Remote: {command}")
    _, stdout, stderr = ssh.exec_command(command)
    out = stdout.read().decode('utf-8', errors='replace')
    err = stderr.read().decode('utf-8', errors='replace')
    status = stdout.channel.recv_exit_status()
    return status, out, err


class RemoteFetcher:
    """Collect reports on remote hosts and fetch them to the control host."""

    def __init__(
        self,
        local_dest=DEFAULT_LOCAL_DEST,
        remote_command=DEFAULT_REMOTE_COMMAND,
        remote_base_dir=DEFAULT_REMOTE_BASE_DIR,
        collect_args=(),
        become=True,
        cleanup=True,
        forks=1,
        connect=connect_ssh,
        show_progress=True
    ):
        """
        Args:
            local_dest: Local directory receiving one subdirectory per host
            remote_command: Collector executable on the targets
            remote_base_dir: --base-dir passed to the remote run
            collect_args: Extra arguments for the remote 'run' subcommand
            become: Run the remote collector and cleanup through 'sudo -n'
            cleanup: Remove the remote workspace after fetching
            forks: Number of hosts processed at the same time
            connect: Callable(host) returning a connected paramiko.SSHClient
            show_progress: Show a progress bar over hosts
        """
        self.local_dest = Path(local_dest)
        self.remote_command = remote_command
        self.remote_base_dir = remote_base_dir
        self.collect_args = list(collect_args)
        self.become = become
        self.cleanup = cleanup
        self.forks = max(1, int(forks))
        self.connect = connect
        self.show_progress = show_progress

    def _sudo(self):
        return ["sudo", "-n"] if self.become else []

    def build_command(self, host):
        """Remote shell command running the collector for one host."""
        args = self._sudo() + [
            self.remote_command, "run",
            "--base-dir", self.remote_base_dir,
            "--workspace-prefix", f"{host.name}-",
            "--summary-json", "-",
            "--no-log-file",
            "--no-progress"
        ] + self.collect_args
        return shlex.join(args)

    def _check_workspace(self, workspace):
        base = posixpath.normpath(self.remote_base_dir)
        path = posixpath.normpath(workspace)
        if posixpath.dirname(path) != base:
            raise RemoteError(f"Refusing to remove {workspace}: not inside {self.remote_base_dir}")
        return path

    def run_remote(self, ssh, host):
        """Run the collector on the host and return the parsed summary."""
        status, out, err = exec_command(ssh, self.build_command(host))
        try:
            summary = json.loads(out)
        except json.JSONDecodeError as e:
            raise RemoteError(
                f"Remote collector on {host.name} exited {status} without a summary: {err.strip() or e}"
            ) from e
        if status != 0:
            logger.warning(f"[{host.name}] Remote collector exited {status}")
        return summary

    def fetch_artifacts(self, ssh, host, summary, result):
        """Copy every SOS report and the aggregate archive into '<local_dest>/<host>/'."""
        artifacts = summary.get('artifacts') or {}
        remote_paths = list(artifacts.get('sos_reports') or [])
        if artifacts.get('archive'):
            remote_paths.append(artifacts['archive'])
        if not remote_paths:
            logger.info(f"[{host.name}] No artifacts to fetch")
            return

        host_dir = self.local_dest / host.name
        host_dir.mkdir(parents=True, exist_ok=True)

        sftp = ssh.open_sftp()
        try:
            for remote_path in remote_paths:
                local_path = host_dir / posixpath.basename(remote_path)
                try:
                    sftp.get(remote_path, str(local_path))
                except (OSError, paramiko.SSHException) as e:
                    logger.warning(f"[{host.name}] Failed to fetch {remote_path}: {e}")
                    result.fetch_errors[remote_path] = str(e)
                    continue
                logger.info(f"[{host.name}] Fetched {remote_path} -> {local_path}")
                result.fetched.append(local_path)
        finally:
            sftp.close()

    def remove_workspace(self, ssh, host, workspace):
        path = self._check_workspace(workspace)
        command = shlex.join(self._sudo() + ["rm", "-rf", "--", path])
        status, _, err = exec_command(ssh, command)
        if status != 0:
            logger.warning(f"[{host.name}] Failed to remove {path}: {err.strip()}")
            return False
        logger.info(f"[{host.name}] Removed remote workspace {path}")
        return True

    def fetch_host(self, host):
        """Collect, fetch and clean up on a single host."""
        result = HostResult(host=host.name)
        logger.info(f"[{host.name}] Connecting to {host.host}:{host.port}")
        try:
            ssh = self.connect(host)
        except (OSError, paramiko.SSHException) as e:
            result.error = f"connection failed: {e}"
            logger.error(f"[{host.name}] {result.error}")
            return result

        try:
            result.summary = self.run_remote(ssh, host)
            self.fetch_artifacts(ssh, host, result.summary, result)
            workspace = result.summary.get('workspace')
            if self.cleanup and workspace:
                result.cleaned = self.remove_workspace(ssh, host, workspace)
        except (RemoteError, OSError, paramiko.SSHException) as e:
            result.error = str(e)
            logger.error(f"[{host.name}] {result.error}")
        finally:
            ssh.close()
        return result

    def fetch_all(self, hosts):
        """
        Process every host, optionally several at a time.

        Returns:
            list: HostResult per host, in inventory order
        """
        self.local_dest.mkdir(parents=True, exist_ok=True)
        results = {}
        with tqdm(total=len(hosts), desc="Collecting from hosts", unit="host",
                  disable=not self.show_progress) as pbar:
            if self.forks == 1:
                for host in hosts:
                    results[host.name] = self.fetch_host(host)
                    pbar.update(1)
            else:
                with ThreadPoolExecutor(max_workers=self.forks) as pool:
                    futures = {pool.submit(self.fetch_host, host): host for host in hosts}
                    for future in as_completed(futures):
                        host = futures[future]
                        results[host.name] = future.result()
                        pbar.update(1)
        return [results[host.name] for host in hosts]
