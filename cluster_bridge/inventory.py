"""Cluster inventory resolution.

Resolves the nodes of each cluster (internal IP, pod network, role) and the
control-plane next hop used for service-network routes.
"""

from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv4Network, IPv6Address, IPv6Network

from cluster_bridge.exceptions import ResourceLookupError
from cluster_bridge.interfaces import ClusterAdmin
from cluster_bridge.logging_config import get_logger
from cluster_bridge.models import Cluster, Node

logger = get_logger(__name__)


def select_control_plane_ip(cluster: Cluster, nodes: list[Node]) -> IPv4Address | IPv6Address:
    """Return the internal IP of the first control-plane node.

    Raises:
        ResourceLookupError: If no node is tagged control-plane
    """
    for node in nodes:
        if node.is_control_plane:
            return node.internal_ip

    logger.error(f"No control-plane node found in cluster '{cluster.name}'")
    raise ResourceLookupError(
        f"No control-plane node found in cluster '{cluster.name}'",
        f"Checked {len(nodes)} node(s) in context '{cluster.context}' for the "
        "node-role.kubernetes.io/control-plane label",
    )


@dataclass
class ClusterInventory:
    """Snapshot of one cluster's topology for a single run."""

    cluster: Cluster
    nodes: list[Node] = field(default_factory=list)

    @property
    def service_network(self) -> IPv4Network | IPv6Network:
        return self.cluster.service_network

    def control_plane_ip(self) -> IPv4Address | IPv6Address:
        return select_control_plane_ip(self.cluster, self.nodes)


class InventoryResolver:
    """Resolves node inventories through a ClusterAdmin."""

    def __init__(self, admin: ClusterAdmin):
        """Initialize the resolver.

        Args:
            admin: Source of node listings
        """
        self.admin = admin

    def list_nodes(self, cluster: Cluster) -> list[Node]:
        """List the cluster's nodes.

        Raises:
            ResourceLookupError: If the cluster has no nodes
        """
        nodes = self.admin.list_nodes(cluster)
        if not nodes:
            raise ResourceLookupError(
                f"No nodes found in cluster '{cluster.name}'",
                f"Check that the cluster is running: kind get nodes --name={cluster.name}",
            )
        logger.debug(f"Cluster '{cluster.name}' has {len(nodes)} node(s)")
        return nodes

    def control_plane_ip(self, cluster: Cluster) -> IPv4Address | IPv6Address:
        return select_control_plane_ip(cluster, self.list_nodes(cluster))

    def service_network(self, cluster: Cluster) -> IPv4Network | IPv6Network:
        # Provisioning-time constant, not checked against the live cluster
        return cluster.service_network

    def resolve(self, cluster: Cluster) -> ClusterInventory:
        """Take a snapshot of the cluster's nodes."""
        inventory = ClusterInventory(cluster=cluster, nodes=self.list_nodes(cluster))
        logger.info(
            f"Resolved inventory for '{cluster.name}': "
            + ", ".join(f"{n.name} ({n.internal_ip}, {n.pod_network})" for n in inventory.nodes)
        )
        return inventory
