"""Pydantic models for ASN dataset records and the lookup boundary."""

from __future__ import annotations

from ipaddress import IPv4Network, IPv6Network
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from ipverse_mcp.errors import ParseError

ASN_MAX = 2**32 - 1


class Subnets(BaseModel):
    """IPv4 and IPv6 prefixes announced by an ASN, in upstream order.

    Entries are kept as CIDR strings; the producer owns their syntax.
    Use :meth:`to_strict` to parse them into network objects.
    """

    ipv4: list[str]
    ipv6: list[str]

    def to_strict(self) -> StrictSubnets:
        """Parse every entry as a network. Raises ParseError on bad CIDR."""
        try:
            return StrictSubnets(ipv4=self.ipv4, ipv6=self.ipv6)
        except ValidationError as e:
            raise ParseError(None, str(e), e) from e


class StrictSubnets(BaseModel):
    """Structured variant of :class:`Subnets`."""

    ipv4: list[IPv4Network]
    ipv6: list[IPv6Network]

    def to_subnets(self) -> Subnets:
        return Subnets(
            ipv4=[str(net) for net in self.ipv4],
            ipv6=[str(net) for net in self.ipv6],
        )


class ASNInfo(BaseModel):
    """One ``as/<asn>/aggregated.json`` record."""

    asn: int = Field(ge=0, le=ASN_MAX)
    handle: str
    description: str
    subnets: Subnets

    @classmethod
    def from_json(cls, data: bytes | str, path: Path | None = None) -> ASNInfo:
        """Parse raw file content, raising ParseError on any structural mismatch."""
        try:
            return cls.model_validate_json(data, strict=True)
        except ValidationError as e:
            raise ParseError(path, str(e), e) from e

    def to_json(self, indent: int | None = None) -> str:
        return self.model_dump_json(indent=indent)


class SubnetRequest(BaseModel):
    asn: int = Field(ge=0, le=ASN_MAX, description="Autonomous system number")


class SubnetResponse(BaseModel):
    """Lookup result; ``asn`` echoes the request, not the file content."""

    asn: int
    subnets: Subnets
