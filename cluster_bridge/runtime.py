"""Route installation inside kind node containers."""

from collections.abc import Callable

from cluster_bridge.commands import run_command
from cluster_bridge.logging_config import get_logger
from cluster_bridge.models import Route

logger = get_logger(__name__)


class ContainerRouteInstaller:
    """RouteInstaller running ``ip route replace`` in the node's container.

    kind nodes are containers named after the node, so the route lands in
    the node's network namespace.
    """

    def __init__(self, runtime: str = "docker", runner: Callable[..., str] = run_command):
        """Initialize the installer.

        Args:
            runtime: Container runtime CLI (docker or podman)
            runner: Function executing a command and returning its output
        """
        self.runtime = runtime
        self.runner = runner

    def replace_route(self, route: Route) -> None:
        self.runner([self.runtime, "exec", route.node, *route.to_command()])
        logger.debug(f"Route on {route.node}: {route}")
