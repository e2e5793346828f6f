from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Protocol, Sequence, Tuple

from .hosts import DEFAULT_DOMAIN_SUFFIX, HostRecord, host_record_from
from .logging import get_logger
from .models import Network, PrivateAddress, Subnet
from .util.errors import OCIClientError
from .util.pagination import paginate

LOG = get_logger(__name__)

TENANCY_MARKER = "tenancy"


class NetworkSource(Protocol):
    """Page-at-a-time listing capability for each level of the hierarchy."""

    def list_compartments(
        self, parent_id: str, *, subtree: bool, page: Optional[str] = None
    ) -> Tuple[Sequence[str], Optional[str]]: ...

    def list_vcns(self, compartment_id: str, page: Optional[str] = None) -> Tuple[Sequence[Network], Optional[str]]: ...

    def list_subnets(
        self, compartment_id: str, vcn_id: str, page: Optional[str] = None
    ) -> Tuple[Sequence[Subnet], Optional[str]]: ...

    def list_private_ips(
        self, subnet_id: str, page: Optional[str] = None
    ) -> Tuple[Sequence[PrivateAddress], Optional[str]]: ...


@dataclass
class WalkStats:
    compartments: int = 0
    networks: int = 0
    subnets: int = 0
    addresses: int = 0
    records: int = 0
    branch_errors: int = 0


def is_tenancy_root(compartment_id: str) -> bool:
    return TENANCY_MARKER in compartment_id


class HierarchyWalker:
    """
    Walks compartments -> VCNs -> subnets -> private IPs and yields one
    HostRecord per primary, named private IP.

    A listing failure below the compartment level is logged and abandons
    only that branch. Failing to resolve the compartments themselves is
    fatal and propagates.
    """

    def __init__(
        self,
        source: NetworkSource,
        *,
        domain_suffix: str = DEFAULT_DOMAIN_SUFFIX,
        on_progress: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._source = source
        self._domain_suffix = domain_suffix
        self._on_progress = on_progress
        self.stats = WalkStats()

    def _tick(self, level: str) -> None:
        if self._on_progress is not None:
            self._on_progress(level)

    def resolve_compartments(self, root: str) -> List[str]:
        """
        Return the compartments to scan for root. The tenancy root expands to
        its whole subtree; any other compartment to its direct children. When
        there are no children, root itself is the only compartment.
        """
        subtree = is_tenancy_root(root)
        try:
            found = list(paginate(lambda page: self._source.list_compartments(root, subtree=subtree, page=page)))
        except OCIClientError:
            raise
        except Exception as e:
            raise OCIClientError(f"Could not retrieve compartments for {root}: {e}") from e
        if not found:
            LOG.debug("No child compartments, scanning %s itself", root)
            return [root]
        return found

    def iter_host_records(self, root: str) -> Iterator[HostRecord]:
        for compartment_id in self.resolve_compartments(root):
            self.stats.compartments += 1
            self._tick("compartment")
            yield from self._walk_compartment(compartment_id)

    def _walk_compartment(self, compartment_id: str) -> Iterator[HostRecord]:
        LOG.debug("Processing compartment %s", compartment_id)
        try:
            for vcn in paginate(lambda page: self._source.list_vcns(compartment_id, page=page)):
                self.stats.networks += 1
                self._tick("network")
                yield from self._walk_vcn(compartment_id, vcn)
        except Exception as e:
            self._branch_failed("Could not list VCNs in compartment %s: %s", compartment_id, e)

    def _walk_vcn(self, compartment_id: str, vcn: Network) -> Iterator[HostRecord]:
        LOG.debug("Processing VCN %s (%s)", vcn.dns_label, vcn.id)
        try:
            for subnet in paginate(lambda page: self._source.list_subnets(compartment_id, vcn.id, page=page)):
                self.stats.subnets += 1
                self._tick("subnet")
                yield from self._walk_subnet(vcn, subnet)
        except Exception as e:
            self._branch_failed("Could not retrieve subnets for VCN %s: %s", vcn.id, e)

    def _walk_subnet(self, vcn: Network, subnet: Subnet) -> Iterator[HostRecord]:
        LOG.debug("Processing Subnet %s (%s)", subnet.dns_label, subnet.id)
        if not vcn.dns_label or not subnet.dns_label:
            LOG.debug("DNS not enabled for subnet %s, skipping", subnet.id)
            return
        try:
            addresses = paginate(lambda page: self._source.list_private_ips(subnet.id, page=page))
            for address in addresses:
                self.stats.addresses += 1
                LOG.debug("Processing Private IP %s", address.ip_address)
                record = host_record_from(address, subnet, vcn, self._domain_suffix)
                if record is None:
                    continue
                self.stats.records += 1
                self._tick("record")
                yield record
        except Exception as e:
            self._branch_failed("Could not retrieve private IPs for subnet %s: %s", subnet.id, e)

    def _branch_failed(self, message: str, node_id: str, exc: BaseException) -> None:
        self.stats.branch_errors += 1
        LOG.error(message, node_id, exc)
