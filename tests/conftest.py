from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from oci_hosts.models import Network, PrivateAddress, Subnet


def _page(pages: Sequence[Sequence[object]], page: Optional[str]) -> Tuple[List[object], Optional[str]]:
    idx = int(page) if page else 0
    items = list(pages[idx]) if pages else []
    next_page = str(idx + 1) if idx + 1 < len(pages) else None
    return items, next_page


class FakeSource:
    """In-memory hierarchy; every level is a list of pages keyed by parent id."""

    def __init__(self) -> None:
        self.compartments: Dict[str, List[List[str]]] = {}
        self.vcns: Dict[str, List[List[Network]]] = {}
        self.subnets: Dict[str, List[List[Subnet]]] = {}
        self.private_ips: Dict[str, List[List[PrivateAddress]]] = {}
        self.failures: Dict[Tuple[str, str], Exception] = {}
        self.calls: List[Tuple[str, str, Optional[str]]] = []

    def _maybe_fail(self, level: str, key: str) -> None:
        exc = self.failures.get((level, key))
        if exc is not None:
            raise exc

    def list_compartments(self, parent_id, *, subtree, page=None):
        self.calls.append(("compartments", parent_id, page))
        self._maybe_fail("compartments", parent_id)
        return _page(self.compartments.get(parent_id, []), page)

    def list_vcns(self, compartment_id, page=None):
        self.calls.append(("vcns", compartment_id, page))
        self._maybe_fail("vcns", compartment_id)
        return _page(self.vcns.get(compartment_id, []), page)

    def list_subnets(self, compartment_id, vcn_id, page=None):
        self.calls.append(("subnets", vcn_id, page))
        self._maybe_fail("subnets", vcn_id)
        return _page(self.subnets.get(vcn_id, []), page)

    def list_private_ips(self, subnet_id, page=None):
        self.calls.append(("private_ips", subnet_id, page))
        self._maybe_fail("private_ips", subnet_id)
        return _page(self.private_ips.get(subnet_id, []), page)


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()

