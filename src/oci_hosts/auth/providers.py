from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ..logging import get_logger
from ..util.errors import OCIClientError, map_oci_error

try:
    import oci  # type: ignore
except Exception:  # pragma: no cover - import error surfaced at runtime/CI
    oci = None  # type: ignore

LOG = get_logger(__name__)

ConfigDict = Dict[str, Any]


@dataclass(frozen=True)
class AuthContext:
    """
    Holds resolved authentication context to construct OCI SDK clients.
    Exactly one of (config_dict, signer) is required (SDK accepts either).
    """

    method: str  # config|instance|resource|security_token (resolved final)
    config_dict: Optional[ConfigDict]
    signer: Optional[Any]
    profile: Optional[str]


class AuthError(RuntimeError):
    pass


def _require_oci() -> None:
    if oci is None:
        raise AuthError(
            "oci Python SDK not installed. Install dependencies and try again: pip install ."
        )


def _detect_region() -> Optional[str]:
    return os.getenv("OCI_REGION") or os.getenv("OCI_CLI_REGION")


def _config_location(config_file: Optional[Path]) -> Optional[str]:
    """
    Return the config file to load, or None to use the SDK default location.
    A path that does not exist falls back to the default location.
    """
    if config_file is None:
        return None
    if not Path(config_file).expanduser().exists():
        LOG.debug("OCI config file not found, using SDK default", extra={"config_file": str(config_file)})
        return None
    return str(config_file)


def resolve_auth(
    method: str,
    profile: Optional[str] = None,
    config_file: Optional[Path] = None,
) -> AuthContext:
    """
    Resolve auth according to requested method.
    - auto: resource principals -> instance principals -> config
    - config: config file (--oci-config or ~/.oci/config), optional profile
    - instance: Instance Principals
    - resource: Resource Principals
    - security_token: session profile in the config file (handled like config)
    """
    _require_oci()
    method = (method or "auto").lower()

    def ctx_from_config() -> AuthContext:
        resolved_profile = profile or "DEFAULT"
        location = _config_location(config_file)
        kwargs: Dict[str, Any] = {"profile_name": resolved_profile}
        if location:
            kwargs["file_location"] = location
        try:
            cfg = oci.config.from_file(**kwargs)  # type: ignore[attr-defined]
        except Exception as e:
            mapped = map_oci_error(e, "OCI SDK error while loading config profile")
            if mapped:
                raise mapped from e
            raise AuthError(f"Failed to load OCI config profile: {e}") from e
        resolved_method = "security_token" if method == "security_token" else "config"
        return AuthContext(method=resolved_method, config_dict=cfg, signer=None, profile=resolved_profile)

    def ctx_from_ip() -> AuthContext:
        try:
            signer = oci.auth.signers.InstancePrincipalsSecurityTokenSigner()  # type: ignore[attr-defined]
        except Exception as e:
            mapped = map_oci_error(e, "OCI SDK error while resolving instance principals")
            if mapped:
                raise mapped from e
            raise AuthError(f"Failed to resolve instance principals: {e}") from e
        return AuthContext(method="instance", config_dict=None, signer=signer, profile=None)

    def ctx_from_rp() -> AuthContext:
        try:
            signer = oci.auth.signers.get_resource_principals_signer()  # type: ignore[attr-defined]
        except Exception as e:
            mapped = map_oci_error(e, "OCI SDK error while resolving resource principals")
            if mapped:
                raise mapped from e
            raise AuthError(f"Failed to resolve resource principals: {e}") from e
        return AuthContext(method="resource", config_dict=None, signer=signer, profile=None)

    if method == "config" or method == "security_token":
        return ctx_from_config()
    if method == "instance":
        return ctx_from_ip()
    if method == "resource":
        return ctx_from_rp()
    if method != "auto":
        raise AuthError(f"Unsupported auth method: {method}")

    # auto resolution order: RP -> IP -> config
    try:
        return ctx_from_rp()
    except Exception as e:
        LOG.debug("Resource principals unavailable", extra={"error": str(e)})
    try:
        return ctx_from_ip()
    except Exception as e:
        LOG.debug("Instance principals unavailable", extra={"error": str(e)})
    try:
        return ctx_from_config()
    except OCIClientError:
        raise
    except Exception as e:
        raise AuthError(
            "Failed to resolve auth in 'auto' mode. Tried resource principals, instance principals, then config.\n"
            f"Last error: {e}"
        ) from e


def make_client(client_cls: Any, ctx: AuthContext, region: Optional[str] = None) -> Any:
    """
    Construct an OCI SDK client of type client_cls using the provided AuthContext.
    When using signer-based auth, a minimal config dict with region must be provided.
    """
    _require_oci()
    retry = getattr(oci.retry, "DEFAULT_RETRY_STRATEGY", None)  # type: ignore[attr-defined]
    kwargs: Dict[str, Any] = {}
    if retry is not None:
        kwargs["retry_strategy"] = retry

    if ctx.config_dict is not None:
        cfg = dict(ctx.config_dict)
        if region:
            cfg["region"] = region
        return client_cls(cfg, **kwargs)
    if ctx.signer is not None:
        detected_region = region or _detect_region()
        if not detected_region:
            raise AuthError(
                "Region is required for signer-based auth. Set OCI_REGION/OCI_CLI_REGION."
            )
        return client_cls({"region": detected_region}, signer=ctx.signer, **kwargs)
    raise AuthError("Invalid AuthContext: neither config_dict nor signer present")
