"""Route reconciliation between cluster node networks.

For every ordered pair of clusters (source, target), each source node gets
a route to every target node's pod network via that node, and a route to
the target's service network via the target's control-plane node.
"""

from itertools import permutations

from cluster_bridge.interfaces import RouteInstaller
from cluster_bridge.inventory import ClusterInventory
from cluster_bridge.logging_config import get_logger
from cluster_bridge.models import Route

logger = get_logger(__name__)


def plan_routes(source: ClusterInventory, target: ClusterInventory) -> list[Route]:
    """Compute the routes letting ``source`` reach ``target``.

    The control-plane lookup happens before any route is produced, so a
    target without a control plane yields no plan at all.

    Raises:
        ResourceLookupError: If the target has no control-plane node
    """
    control_plane_ip = target.control_plane_ip()

    routes = []
    for node in source.nodes:
        for peer in target.nodes:
            routes.append(Route(node=node.name, destination=peer.pod_network, via=peer.internal_ip))
        routes.append(
            Route(node=node.name, destination=target.service_network, via=control_plane_ip)
        )
    return routes


class RouteReconciler:
    """Installs planned routes, aborting on the first failure."""

    def __init__(self, installer: RouteInstaller):
        self.installer = installer

    def reconcile(self, source: ClusterInventory, target: ClusterInventory) -> list[Route]:
        """Install every route from ``source`` to ``target``.

        Routes installed before a failure are left in place.

        Returns:
            The routes that were installed
        """
        logger.info(f"Reconciling routes {source.cluster.name} -> {target.cluster.name}")
        routes = plan_routes(source, target)
        for route in routes:
            logger.debug(f"Installing route on {route.node}: {route}")
            self.installer.replace_route(route)
        logger.info(
            f"Installed {len(routes)} route(s) on {len(source.nodes)} node(s) "
            f"of '{source.cluster.name}'"
        )
        return routes

    def reconcile_all(self, inventories: list[ClusterInventory]) -> list[Route]:
        """Reconcile every ordered pair of clusters, in configuration order."""
        installed = []
        for source, target in permutations(inventories, 2):
            installed.extend(self.reconcile(source, target))
        return installed
