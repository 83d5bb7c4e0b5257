from microshift_collect.common.results import OK, SKIPPED, WARNING
from microshift_collect.steps.sos_report import (
    DirectSosReport,
    SosReportCollector,
    TmpDirSosReport,
    build_strategy
)

from conftest import FakeRunner


def test_strategy_follows_config(make_config):
    direct = build_strategy(make_config())
    tmpdir = build_strategy(make_config(sos_mode="tmpdir"))

    assert isinstance(direct, DirectSosReport)
    assert direct.tool == "microshift-sos"
    assert isinstance(tmpdir, TmpDirSosReport)
    assert tmpdir.tool == "microshift-sos-report"


def test_direct_mode_writes_into_workspace(make_config, workspace):
    runner = FakeRunner()
    result, reports = SosReportCollector(make_config(), runner=runner).collect(workspace, {})

    assert result.status == OK
    assert [r.parent for r in reports] == [workspace]
    assert runner.calls == [["microshift-sos", "report", "-o", str(workspace)]]


def test_tmpdir_mode_moves_report_into_workspace(make_config, workspace, tmp_path):
    scratch_parent = tmp_path / "scratch"
    scratch_parent.mkdir()
    runner = FakeRunner()
    config = make_config(sos_mode="tmpdir", sos_tmp_parent=str(scratch_parent))

    result, reports = SosReportCollector(config, runner=runner).collect(workspace, {})

    assert result.status == OK
    assert reports == [workspace / "sosreport-microshift-host-2026-abc.tar.xz"]
    assert reports[0].exists()
    command = runner.calls[0]
    assert command[:2] == ["microshift-sos-report", "--tmp-dir"]
    assert command[2].startswith(str(scratch_parent))
    assert list(scratch_parent.iterdir()) == []


def test_tmpdir_mode_moves_every_report(make_config, workspace):
    names = ("sosreport-microshift-host-2026-abc.tar.xz", "sosreport-microshift-host-2026-def.tar.xz")
    runner = FakeRunner(sos_report_names=names)

    result, reports = SosReportCollector(make_config(sos_mode="tmpdir"), runner=runner).collect(workspace, {})

    assert result.status == OK
    assert reports == [workspace / name for name in names]
    assert all(r.exists() for r in reports)
    assert result.details['paths'] == [str(workspace / name) for name in names]


def test_tmpdir_mode_without_archive_is_warning(make_config, workspace):
    runner = FakeRunner(sos_writes_report=False)
    result, reports = SosReportCollector(make_config(sos_mode="tmpdir"), runner=runner).collect(workspace, {})

    assert result.status == WARNING
    assert reports == []


def test_tool_failure_is_warning(make_config, workspace):
    runner = FakeRunner(sos_error="command not found: microshift-sos")
    result, reports = SosReportCollector(make_config(), runner=runner).collect(workspace, {})

    assert result.status == WARNING
    assert result.details['tool'] == "microshift-sos"
    assert "command not found" in result.details['error']
    assert reports == []


def test_existing_report_skips_collection(make_config, workspace, caplog):
    existing = workspace / "sosreport-microshift-old-1.tar.xz"
    existing.write_bytes(b"old")
    runner = FakeRunner()

    with caplog.at_level("INFO"):
        result, reports = SosReportCollector(make_config(), runner=runner).collect(workspace, {})

    assert result.status == SKIPPED
    assert reports == [existing]
    assert runner.calls == []
    assert "Skipping sos report collection" in caplog.text


def test_become_prefixes_sudo(make_config, workspace):
    runner = FakeRunner()
    SosReportCollector(make_config(become=True), runner=runner).collect(workspace, {})

    assert runner.calls[0][:3] == ["sudo", "-n", "microshift-sos"]


def test_skip_sos_disables_tool(make_config, workspace):
    runner = FakeRunner()
    result, reports = SosReportCollector(make_config(skip_sos=True), runner=runner).collect(workspace, {})

    assert result.status == SKIPPED
    assert reports == []
    assert runner.calls == []
