from __future__ import annotations

import types

import pytest

from oci_hosts import cli
from oci_hosts.auth import providers as auth_providers
from oci_hosts.auth.providers import AuthContext
from oci_hosts.config import RunConfig
from oci_hosts.models import Network, PrivateAddress, Subnet
from oci_hosts.oci import clients
from oci_hosts.sync import MARKER_LINE
from oci_hosts.util.errors import ExitCode, OCIClientError, SyncError

ROOT = "ocid1.compartment.oc1..root"
LINE = "10.0.0.5            app1.web.prod.oraclevcn.com app1.web app1\n"


@pytest.fixture
def populated(source):
    source.vcns[ROOT] = [[Network(id="vA", dns_label="prod"), Network(id="vB", dns_label="dev")]]
    source.subnets["vA"] = [[Subnet(id="sA", dns_label="web")]]
    source.subnets["vB"] = [[Subnet(id="sB", dns_label="web")]]
    source.private_ips["sA"] = [
        [PrivateAddress(id="p1", ip_address="10.0.0.5", hostname_label="app1", is_primary=True)]
    ]
    source.private_ips["sB"] = [
        [PrivateAddress(id="p2", ip_address="10.1.0.5", hostname_label="app2", is_primary=True)]
    ]
    return source


def test_run_writes_hosts_file(tmp_path, populated) -> None:
    target = tmp_path / "hosts"
    target.write_text("127.0.0.1 localhost\n", encoding="utf-8")
    cfg = RunConfig(compartment=ROOT, hosts=target, progress=False)

    assert cli.cmd_run(cfg, source=populated) == 0
    assert target.read_text(encoding="utf-8") == (
        "127.0.0.1 localhost\n"
        + MARKER_LINE
        + LINE
        + "10.1.0.5            app2.web.dev.oraclevcn.com app2.web app2\n"
    )


def test_branch_failure_still_succeeds(tmp_path, populated) -> None:
    populated.failures[("subnets", "vB")] = RuntimeError("throttled")
    target = tmp_path / "hosts"
    target.write_text("", encoding="utf-8")
    cfg = RunConfig(compartment=ROOT, hosts=target, progress=False)

    assert cli.cmd_run(cfg, source=populated) == 0
    assert target.read_text(encoding="utf-8") == MARKER_LINE + LINE


def test_print_only_leaves_target_alone(tmp_path, populated, capsys) -> None:
    target = tmp_path / "absent"
    populated.private_ips["sB"] = [[]]
    cfg = RunConfig(compartment=ROOT, hosts=target, progress=False, print_only=True)

    assert cli.cmd_run(cfg, source=populated) == 0
    assert capsys.readouterr().out == MARKER_LINE + LINE
    assert not target.exists()


def test_missing_target_fails_before_discovery(tmp_path, populated) -> None:
    cfg = RunConfig(compartment=ROOT, hosts=tmp_path / "absent", progress=False)

    with pytest.raises(SyncError):
        cli.cmd_run(cfg, source=populated)
    assert populated.calls == []


def test_main_maps_errors_to_exit_codes(monkeypatch, tmp_path) -> None:
    target = tmp_path / "hosts"
    target.write_text("", encoding="utf-8")
    monkeypatch.setattr(cli, "setup_logging", lambda config=None: None)

    def _fail(cfg, source=None):
        raise OCIClientError("Could not retrieve compartments")

    monkeypatch.setattr(cli, "cmd_run", _fail)

    with pytest.raises(SystemExit) as exc:
        cli.main([ROOT, str(target), "--no-progress"])
    assert exc.value.code == int(ExitCode.OCI_ERROR)


def test_main_missing_compartment_is_config_error(monkeypatch) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda config=None: None)
    monkeypatch.delenv("OCI_HOSTS_COMPARTMENT", raising=False)

    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == int(ExitCode.CONFIG_ERROR)


def test_main_runs_with_resolved_source(monkeypatch, tmp_path, populated) -> None:
    target = tmp_path / "hosts"
    target.write_text("", encoding="utf-8")
    monkeypatch.setattr(cli, "setup_logging", lambda config=None: None)
    monkeypatch.setattr(cli, "_resolve_auth", lambda cfg: "ctx")
    monkeypatch.setattr(cli.OCINetworkSource, "from_auth", classmethod(lambda cls, ctx: populated))

    with pytest.raises(SystemExit) as exc:
        cli.main([ROOT, str(target), "--no-progress"])
    assert exc.value.code == 0
    assert LINE in target.read_text(encoding="utf-8")


def test_client_construction_failure_is_an_auth_error(monkeypatch, tmp_path) -> None:
    target = tmp_path / "hosts"
    target.write_text("", encoding="utf-8")
    monkeypatch.setattr(cli, "setup_logging", lambda config=None: None)
    monkeypatch.delenv("OCI_REGION", raising=False)
    monkeypatch.delenv("OCI_CLI_REGION", raising=False)
    fake_oci = types.SimpleNamespace(
        retry=types.SimpleNamespace(),
        identity=types.SimpleNamespace(IdentityClient=object),
        core=types.SimpleNamespace(VirtualNetworkClient=object),
    )
    monkeypatch.setattr(auth_providers, "oci", fake_oci)
    monkeypatch.setattr(clients, "oci", fake_oci)
    signer_ctx = AuthContext(method="instance", config_dict=None, signer=object(), profile=None)
    monkeypatch.setattr(cli, "resolve_auth", lambda method, profile=None, config_file=None: signer_ctx)

    with pytest.raises(SystemExit) as exc:
        cli.main([ROOT, str(target), "--no-progress"])
    assert exc.value.code == int(ExitCode.AUTH_ERROR)
