"""Narrow interfaces over the external tooling the bootstrap drives.

The reconciliation logic only talks to these protocols, so it can run
against in-memory fakes as well as real clusters.
"""

from ipaddress import IPv4Address, IPv6Address
from pathlib import Path
from typing import Any, Protocol

from cluster_bridge.models import Cluster, Node, Route


class ClusterAdmin(Protocol):
    """Read access to a cluster's node inventory."""

    def list_nodes(self, cluster: Cluster) -> list[Node]:
        """Return the cluster's nodes in API order."""
        ...


class RouteInstaller(Protocol):
    """Installs routes inside a node's network namespace."""

    def replace_route(self, route: Route) -> None:
        """Upsert ``route`` on ``route.node``, replacing any route to the same destination."""
        ...


class DNSConfigStore(Protocol):
    """Read and patch a cluster's DNS forwarder configuration."""

    def dns_service_ip(self, cluster: Cluster) -> IPv4Address | IPv6Address:
        """Return the cluster IP of the cluster's internal DNS service."""
        ...

    def read_corefile(self, cluster: Cluster) -> str:
        """Return the current Corefile text."""
        ...

    def write_corefile(self, cluster: Cluster, corefile: str) -> None:
        """Write the full Corefile back as a merge patch."""
        ...


class CredentialStore(Protocol):
    """Fetch, store, and activate kubeconfig credentials."""

    def fetch_kubeconfig(self, cluster: Cluster) -> dict[str, Any]:
        """Return the cluster's internal-endpoint kubeconfig document."""
        ...

    def write_kubeconfig(self, path: Path, doc: dict[str, Any]) -> None:
        """Overwrite ``path`` with ``doc``."""
        ...

    def use_context(self, context: str) -> None:
        """Switch the operator's active kubectl context."""
        ...
