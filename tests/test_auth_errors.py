from __future__ import annotations

import types

import pytest

from oci_hosts.auth import providers as auth_providers
from oci_hosts.util.errors import OCIClientError


class DummyOciError(Exception):
    __module__ = "oci.exceptions"


def _dummy_oci(from_file):
    return types.SimpleNamespace(config=types.SimpleNamespace(from_file=from_file))


def test_resolve_auth_maps_oci_errors(monkeypatch) -> None:
    def _raise(*args, **kwargs):
        raise DummyOciError("boom")

    monkeypatch.setattr(auth_providers, "oci", _dummy_oci(_raise))

    with pytest.raises(OCIClientError):
        auth_providers.resolve_auth("config")


def test_resolve_auth_wraps_other_config_errors(monkeypatch) -> None:
    def _raise(*args, **kwargs):
        raise KeyError("key_file")

    monkeypatch.setattr(auth_providers, "oci", _dummy_oci(_raise))

    with pytest.raises(auth_providers.AuthError):
        auth_providers.resolve_auth("config")


def test_existing_config_file_is_loaded(monkeypatch, tmp_path) -> None:
    cfg_file = tmp_path / "config"
    cfg_file.write_text("[OPS]\n", encoding="utf-8")
    seen = {}

    def _from_file(**kwargs):
        seen.update(kwargs)
        return {"tenancy": "ocid1.tenancy..x"}

    monkeypatch.setattr(auth_providers, "oci", _dummy_oci(_from_file))

    ctx = auth_providers.resolve_auth("config", profile="OPS", config_file=cfg_file)
    assert seen == {"profile_name": "OPS", "file_location": str(cfg_file)}
    assert ctx.method == "config"
    assert ctx.profile == "OPS"
    assert ctx.config_dict == {"tenancy": "ocid1.tenancy..x"}


def test_missing_config_file_falls_back_to_default(monkeypatch, tmp_path) -> None:
    seen = {}

    def _from_file(**kwargs):
        seen.update(kwargs)
        return {}

    monkeypatch.setattr(auth_providers, "oci", _dummy_oci(_from_file))

    auth_providers.resolve_auth("config", config_file=tmp_path / "missing")
    assert seen == {"profile_name": "DEFAULT"}


def test_unsupported_method(monkeypatch) -> None:
    monkeypatch.setattr(auth_providers, "oci", _dummy_oci(lambda **kw: {}))

    with pytest.raises(auth_providers.AuthError):
        auth_providers.resolve_auth("password")


def test_make_client_requires_region_for_signer(monkeypatch) -> None:
    monkeypatch.setattr(auth_providers, "oci", types.SimpleNamespace(retry=types.SimpleNamespace()))
    monkeypatch.delenv("OCI_REGION", raising=False)
    monkeypatch.delenv("OCI_CLI_REGION", raising=False)
    ctx = auth_providers.AuthContext(method="instance", config_dict=None, signer=object(), profile=None)

    with pytest.raises(auth_providers.AuthError):
        auth_providers.make_client(lambda *a, **k: None, ctx)


def test_make_client_passes_config_and_retry(monkeypatch) -> None:
    strategy = object()
    monkeypatch.setattr(
        auth_providers, "oci", types.SimpleNamespace(retry=types.SimpleNamespace(DEFAULT_RETRY_STRATEGY=strategy))
    )
    ctx = auth_providers.AuthContext(method="config", config_dict={"region": "us-ashburn-1"}, signer=None, profile="DEFAULT")
    built = []

    def _client(cfg, **kwargs):
        built.append((cfg, kwargs))
        return "client"

    assert auth_providers.make_client(_client, ctx) == "client"
    assert built == [({"region": "us-ashburn-1"}, {"retry_strategy": strategy})]
