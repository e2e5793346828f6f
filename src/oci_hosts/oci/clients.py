from __future__ import annotations

from typing import Any, Optional

from ..auth.providers import AuthContext, AuthError, make_client

try:
    import oci  # type: ignore
except Exception:  # pragma: no cover - surfaced when resolving auth
    oci = None  # type: ignore


def get_identity_client(ctx: AuthContext, region: Optional[str] = None) -> Any:
    """
    Create IdentityClient with retry strategy, honoring region when provided.
    """
    if oci is None:  # pragma: no cover
        raise AuthError("oci Python SDK not installed.")
    return make_client(oci.identity.IdentityClient, ctx, region=region)  # type: ignore[attr-defined]


def get_virtual_network_client(ctx: AuthContext, region: Optional[str] = None) -> Any:
    """
    Create VirtualNetworkClient (VCNs, subnets, private IPs).
    """
    if oci is None:  # pragma: no cover
        raise AuthError("oci Python SDK not installed.")
    return make_client(oci.core.VirtualNetworkClient, ctx, region=region)  # type: ignore[attr-defined]
