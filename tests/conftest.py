import json
import shlex
from pathlib import Path

import pytest

from microshift_collect.common import CollectionConfig

TIMESTAMP = "20260101120000"
REMOTE_BASE = "/tmp/microshift_reports"


class FakeRunner:
    """Stands in for run_command: records calls and imitates oc and the SOS tool."""

    def __init__(self, namespaces=(), fail_namespaces=(), list_error=None, sos_error=None,
                 sos_writes_report=True, list_style="jsonpath",
                 sos_report_names=("sosreport-microshift-host-2026-abc.tar.xz",)):
        self.namespaces = list(namespaces)
        self.fail_namespaces = set(fail_namespaces)
        self.list_error = list_error
        self.sos_error = sos_error
        self.sos_writes_report = sos_writes_report
        self.list_style = list_style
        self.sos_report_names = list(sos_report_names)
        self.calls = []
        self.envs = []

    def commands_with(self, word):
        return [c for c in self.calls if word in c]

    def __call__(self, command, env=None, timeout=None):
        self.calls.append(list(command))
        self.envs.append(dict(env) if env is not None else None)
        args = [a for a in command if a not in ("sudo", "-n")]

        if args[1:3] == ["get", "namespaces"]:
            if self.list_error:
                return None, self.list_error
            if self.list_style == "name":
                return "\n".join(f"namespace/{n}" for n in self.namespaces), None
            return " ".join(self.namespaces), None

        if args[1:3] == ["adm", "inspect"]:
            namespace = args[3].split("/", 1)[1]
            dest = Path(args[4].split("=", 1)[1])
            dest.mkdir(parents=True, exist_ok=True)
            if namespace in self.fail_namespaces:
                (dest / "partial.log").write_text("incomplete\n")
                return None, f"error inspecting {namespace}"
            resources = dest / "namespaces" / namespace
            resources.mkdir(parents=True, exist_ok=True)
            (resources / f"{namespace}.yaml").write_text(f"name: {namespace}\n")
            return "", None

        if "report" in args or "--tmp-dir" in args:
            if self.sos_error:
                return None, self.sos_error
            dest = Path(args[-1])
            if self.sos_writes_report:
                for name in self.sos_report_names:
                    (dest / name).write_bytes(b"sos")
            return "", None

        return None, f"unexpected command: {' '.join(command)}"


@pytest.fixture
def kubeconfig(tmp_path):
    path = tmp_path / "kubeconfig"
    path.write_text("apiVersion: v1\nkind: Config\n")
    return path


@pytest.fixture
def make_config(tmp_path, kubeconfig):
    def _make(**overrides):
        settings = {
            'base_dir': tmp_path / "reports",
            'kubeconfig': str(kubeconfig),
            'timestamp': TIMESTAMP,
            'show_progress': False
        }
        settings.update(overrides)
        return CollectionConfig(**settings)
    return _make


@pytest.fixture
def workspace(tmp_path):
    path = tmp_path / "reports" / TIMESTAMP
    path.mkdir(parents=True)
    return path


class FakeChannel:
    def __init__(self, status):
        self.status = status

    def recv_exit_status(self):
        return self.status


class FakeStream:
    def __init__(self, data, status=0):
        self.data = data.encode()
        self.channel = FakeChannel(status)

    def read(self):
        return self.data


class FakeSFTP:
    def __init__(self, ssh):
        self.ssh = ssh
        self.closed = False

    def get(self, remote, local):
        if remote in self.ssh.missing:
            raise FileNotFoundError(remote)
        Path(local).write_text(f"copy of {remote}")
        self.ssh.fetched.append(remote)

    def close(self):
        self.closed = True


class FakeSSH:
    def __init__(self, summary=None, status=0, stderr="", missing=()):
        self.summary = summary
        self.status = status
        self.stderr = stderr
        self.missing = set(missing)
        self.commands = []
        self.fetched = []
        self.sftp = None
        self.closed = False

    def exec_command(self, command):
        self.commands.append(command)
        if "run" in shlex.split(command):
            out = json.dumps(self.summary) if self.summary is not None else ""
            return None, FakeStream(out, self.status), FakeStream(self.stderr)
        return None, FakeStream("", 0), FakeStream("")

    def open_sftp(self):
        self.sftp = FakeSFTP(self)
        return self.sftp

    def close(self):
        self.closed = True


def remote_summary(host, sos_reports=1, archive=True, exit_code=0):
    """Summary JSON as printed by 'microshift-collect run --summary-json -' on a host."""
    workspace = f"{REMOTE_BASE}/{host}-{TIMESTAMP}"
    return {
        'timestamp': TIMESTAMP,
        'workspace': workspace,
        'exit_code': exit_code,
        'steps': [],
        'artifacts': {
            'sos_reports': [f"{workspace}/sosreport-microshift-{host}-{i}.tar.xz" for i in range(1, sos_reports + 1)],
            'inspect_dirs': [],
            'archive': f"{workspace}/oc_adm_inspect_reports_{TIMESTAMP}.tar.gz" if archive else None
        }
    }
