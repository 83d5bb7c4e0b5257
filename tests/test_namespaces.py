import pytest

from microshift_collect.common.results import OK, SKIPPED, WARNING
from microshift_collect.steps.namespaces import (
    NamespaceInspector,
    filter_namespaces,
    is_system_namespace,
    parse_namespaces
)

from conftest import FakeRunner


def test_filter_drops_system_namespaces():
    assert filter_namespaces(["kube-system", "app1", "app2", "default"]) == ("app1", "app2")


@pytest.mark.parametrize("name", [
    "default",
    "kube-system",
    "kube-public",
    "kube-node-lease",
    "openshift",
    "openshift-ingress",
    "openshift-dns",
    "kubevirt-hyperconverged",
    "my-kube-tools",
])
def test_system_namespaces(name):
    assert is_system_namespace(name)


@pytest.mark.parametrize("name", ["app1", "payments", "default-backend-app", "edge-sensors"])
def test_application_namespaces(name):
    assert not is_system_namespace(name)


def test_filter_extra_excludes_and_duplicates():
    names = ["app1", "monitoring", "app2", "app1"]
    assert filter_namespaces(names, extra_excludes=("monitoring",)) == ("app1", "app2")


def test_parse_jsonpath_output():
    assert parse_namespaces("app1 app2  kube-system") == ["app1", "app2", "kube-system"]


def test_parse_name_output():
    output = "namespace/app1\nnamespace/default\nnamespace/app2\n"
    assert parse_namespaces(output, "name") == ["app1", "default", "app2"]


def test_parse_empty_output():
    assert parse_namespaces("") == []
    assert parse_namespaces(None) == []


def test_list_namespaces_jsonpath_query(make_config):
    runner = FakeRunner(namespaces=["kube-system", "app1", "app2", "default"])
    inspector = NamespaceInspector(make_config(), runner=runner)

    result, names = inspector.list_namespaces({"KUBECONFIG": "x"})

    assert names == ("app1", "app2")
    assert result.status == OK
    assert runner.calls[0] == ["oc", "get", "namespaces", "-o", "jsonpath={.items[*].metadata.name}"]


def test_list_namespaces_name_query(make_config):
    runner = FakeRunner(namespaces=["app1", "openshift-dns"], list_style="name")
    inspector = NamespaceInspector(make_config(namespace_query="name", oc_binary="/usr/bin/oc"), runner=runner)

    result, names = inspector.list_namespaces({})

    assert names == ("app1",)
    assert runner.calls[0] == ["/usr/bin/oc", "get", "namespaces", "-o", "name"]


def test_list_namespaces_empty_is_skipped(make_config):
    runner = FakeRunner(namespaces=["default", "kube-system"])
    result, names = NamespaceInspector(make_config(), runner=runner).list_namespaces({})

    assert names == ()
    assert result.status == SKIPPED


def test_list_namespaces_query_failure_is_warning(make_config):
    runner = FakeRunner(list_error="connection refused")
    result, names = NamespaceInspector(make_config(), runner=runner).list_namespaces({})

    assert names == ()
    assert result.status == WARNING
    assert result.details['error'] == "connection refused"


def test_inspect_each_namespace_into_own_directory(make_config, workspace):
    runner = FakeRunner()
    env = {"KUBECONFIG": "/tmp/kc"}
    result, inspected = NamespaceInspector(make_config(), runner=runner).inspect(("app1", "app2"), workspace, env)

    assert result.status == OK
    assert inspected == [workspace / "app1", workspace / "app2"]
    assert runner.calls == [
        ["oc", "adm", "inspect", "ns/app1", f"--dest-dir={workspace / 'app1'}"],
        ["oc", "adm", "inspect", "ns/app2", f"--dest-dir={workspace / 'app2'}"],
    ]
    assert all(e["KUBECONFIG"] == "/tmp/kc" for e in runner.envs)


def test_inspect_continues_after_failure(make_config, workspace):
    runner = FakeRunner(fail_namespaces={"ns-a"})
    result, inspected = NamespaceInspector(make_config(), runner=runner).inspect(("ns-a", "ns-b"), workspace, {})

    assert result.status == WARNING
    assert inspected == [workspace / "ns-b"]
    assert result.details['succeeded'] == ["ns-b"]
    assert "ns-a" in result.details['failed']
    assert len(runner.calls) == 2


def test_inspect_without_namespaces_runs_nothing(make_config, workspace):
    runner = FakeRunner()
    result, inspected = NamespaceInspector(make_config(), runner=runner).inspect((), workspace, {})

    assert result.status == SKIPPED
    assert inspected == []
    assert runner.calls == []
    assert list(workspace.iterdir()) == []
