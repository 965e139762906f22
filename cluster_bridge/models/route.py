"""Data models for IP routes and DNS zone forwards."""

from pydantic import BaseModel, IPvAnyAddress, IPvAnyNetwork


class Route(BaseModel):
    """A static route installed in a node's kernel routing table.

    Routes are lost when the node restarts and must be re-applied on every
    bring-up.
    """

    node: str
    destination: IPvAnyNetwork
    via: IPvAnyAddress

    def to_command(self) -> list[str]:
        """Build the ``ip route`` invocation that upserts this route."""
        return ["ip", "route", "replace", str(self.destination), "via", str(self.via)]

    def __str__(self) -> str:
        return f"{self.destination} via {self.via}"


class ZoneForward(BaseModel):
    """A CoreDNS server block forwarding a synthetic zone to another cluster."""

    zone: str
    upstream: IPvAnyAddress
    cache_ttl: int = 30
    port: int = 53

    @property
    def key(self) -> str:
        return f"{self.zone}:{self.port}"

    def render(self) -> str:
        """Render the server block in Corefile syntax."""
        return (
            f"{self.key} {{\n"
            "    errors\n"
            f"    cache {self.cache_ttl}\n"
            f"    forward . {self.upstream}\n"
            "}\n"
        )
