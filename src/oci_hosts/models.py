from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Network:
    """A VCN; its DNS label is the second-level component of host names."""

    id: str
    dns_label: Optional[str] = None


@dataclass(frozen=True)
class Subnet:
    id: str
    dns_label: Optional[str] = None


@dataclass(frozen=True)
class PrivateAddress:
    id: str
    ip_address: Optional[str] = None
    hostname_label: Optional[str] = None
    is_primary: bool = False
