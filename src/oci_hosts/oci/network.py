from __future__ import annotations

from typing import Any, List, Optional, Tuple

from ..auth.providers import AuthContext
from ..logging import get_logger
from ..models import Network, PrivateAddress, Subnet
from ..util.errors import map_oci_error
from .clients import get_identity_client, get_virtual_network_client

COMPARTMENT_PAGE_LIMIT = 100
DELETED_STATE = "DELETED"

LOG = get_logger(__name__)


def _next_page(resp: Any) -> Optional[str]:
    # pagination via header
    return getattr(resp, "headers", {}).get("opc-next-page")  # type: ignore[no-any-return]


def _call(func: Any, context: str, *args: Any, **kwargs: Any) -> Any:
    try:
        return func(*args, **kwargs)
    except Exception as e:
        mapped = map_oci_error(e, f"OCI SDK error while {context}")
        if mapped:
            raise mapped from e
        raise


class OCINetworkSource:
    """
    Page-at-a-time listing of compartments, VCNs, subnets and private IPs
    through the OCI SDK. Each list_* method returns (items, next_page).
    """

    def __init__(self, identity: Any, network: Any) -> None:
        self._identity = identity
        self._network = network

    @classmethod
    def from_auth(cls, ctx: AuthContext) -> OCINetworkSource:
        return cls(get_identity_client(ctx), get_virtual_network_client(ctx))

    def list_compartments(
        self, parent_id: str, *, subtree: bool, page: Optional[str] = None
    ) -> Tuple[List[str], Optional[str]]:
        resp = _call(
            self._identity.list_compartments,
            f"listing compartments under {parent_id}",
            parent_id,
            compartment_id_in_subtree=subtree,
            limit=COMPARTMENT_PAGE_LIMIT,
            page=page,
        )
        ids: List[str] = []
        for item in getattr(resp, "data", None) or []:
            if getattr(item, "lifecycle_state", None) == DELETED_STATE:
                LOG.debug("Skipping deleted compartment %s", item.id)
                continue
            ids.append(item.id)
        return ids, _next_page(resp)

    def list_vcns(self, compartment_id: str, page: Optional[str] = None) -> Tuple[List[Network], Optional[str]]:
        resp = _call(
            self._network.list_vcns,
            f"listing VCNs in {compartment_id}",
            compartment_id,
            page=page,
        )
        items = [Network(id=v.id, dns_label=v.dns_label) for v in getattr(resp, "data", None) or []]
        return items, _next_page(resp)

    def list_subnets(
        self, compartment_id: str, vcn_id: str, page: Optional[str] = None
    ) -> Tuple[List[Subnet], Optional[str]]:
        resp = _call(
            self._network.list_subnets,
            f"listing subnets in VCN {vcn_id}",
            compartment_id,
            vcn_id=vcn_id,
            page=page,
        )
        items = [Subnet(id=s.id, dns_label=s.dns_label) for s in getattr(resp, "data", None) or []]
        return items, _next_page(resp)

    def list_private_ips(
        self, subnet_id: str, page: Optional[str] = None
    ) -> Tuple[List[PrivateAddress], Optional[str]]:
        resp = _call(
            self._network.list_private_ips,
            f"listing private IPs in subnet {subnet_id}",
            subnet_id=subnet_id,
            page=page,
        )
        items = [
            PrivateAddress(
                id=p.id,
                ip_address=p.ip_address,
                hostname_label=p.hostname_label,
                is_primary=bool(p.is_primary),
            )
            for p in getattr(resp, "data", None) or []
        ]
        return items, _next_page(resp)
