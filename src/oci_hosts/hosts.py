from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .models import Network, PrivateAddress, Subnet

DEFAULT_DOMAIN_SUFFIX = "oraclevcn.com"
IP_COLUMN_WIDTH = 20


@dataclass(frozen=True)
class HostRecord:
    ip: str
    fqdn: str
    alias: str  # <hostname>.<subnet label>
    short_name: str

    @property
    def names(self) -> Tuple[str, str, str]:
        return (self.fqdn, self.alias, self.short_name)


def host_record_from(
    address: PrivateAddress,
    subnet: Subnet,
    network: Network,
    domain_suffix: str = DEFAULT_DOMAIN_SUFFIX,
) -> Optional[HostRecord]:
    """
    Build the hosts entry for a primary private IP that carries both an IP
    literal and a hostname label. Anything else yields None.
    """
    if not address.is_primary:
        return None
    if not address.ip_address or not address.hostname_label:
        return None
    host = address.hostname_label
    return HostRecord(
        ip=address.ip_address,
        fqdn=f"{host}.{subnet.dns_label}.{network.dns_label}.{domain_suffix}",
        alias=f"{host}.{subnet.dns_label}",
        short_name=host,
    )


def format_host_record(record: HostRecord) -> str:
    return f"{record.ip:<{IP_COLUMN_WIDTH}}{' '.join(record.names)}\n"


def render_host_records(records: Iterable[HostRecord]) -> str:
    return "".join(format_host_record(r) for r in records)
