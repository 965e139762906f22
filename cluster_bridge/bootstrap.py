"""Bootstrap pipeline joining the clusters into one network domain.

The pipeline is strictly linear. Any error moves it to FAILED and is
re-raised unchanged; nothing already applied is rolled back.
"""

from dataclasses import dataclass, field
from enum import Enum

from cluster_bridge.config import BridgeConfig
from cluster_bridge.dns import DNSFederationPatcher
from cluster_bridge.interfaces import ClusterAdmin, CredentialStore, DNSConfigStore, RouteInstaller
from cluster_bridge.inventory import ClusterInventory, InventoryResolver
from cluster_bridge.kind import ClusterProvisioner
from cluster_bridge.kubeconfig import KubeconfigFederator
from cluster_bridge.logging_config import get_logger
from cluster_bridge.models import Route
from cluster_bridge.routes import RouteReconciler

logger = get_logger(__name__)


class BootstrapStage(str, Enum):
    """Stages of the bootstrap, in order."""

    NOT_STARTED = "not-started"
    PROVISIONED = "provisioned"
    INVENTORY_RESOLVED = "inventory-resolved"
    ROUTES_INSTALLED = "routes-installed"
    DNS_FEDERATED = "dns-federated"
    CREDENTIALS_FEDERATED = "credentials-federated"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class BootstrapResult:
    """What a run produced, filled in as stages complete."""

    inventories: list[ClusterInventory] = field(default_factory=list)
    routes: list[Route] = field(default_factory=list)
    corefiles: dict[str, str] = field(default_factory=dict)
    kubeconfig: dict = field(default_factory=dict)


class Bootstrap:
    """Runs the bootstrap stages in sequence."""

    def __init__(
        self,
        config: BridgeConfig,
        admin: ClusterAdmin,
        installer: RouteInstaller,
        dns_store: DNSConfigStore,
        credentials: CredentialStore,
        provisioner: ClusterProvisioner | None = None,
    ):
        """Initialize the pipeline.

        Args:
            config: Clusters and stage settings
            admin: Node inventory source
            installer: Route installer
            dns_store: CoreDNS configuration access
            credentials: Kubeconfig access
            provisioner: If given, clusters are created before anything else
        """
        self.config = config
        self.resolver = InventoryResolver(admin)
        self.reconciler = RouteReconciler(installer)
        self.patcher = DNSFederationPatcher(dns_store, config.dns)
        self.federator = KubeconfigFederator(credentials, config.components_dir)
        self.provisioner = provisioner
        self.stage = BootstrapStage.NOT_STARTED
        self.failed_after: BootstrapStage | None = None
        self.result = BootstrapResult()

    def _advance(self, stage: BootstrapStage) -> None:
        logger.info(f"Bootstrap stage: {self.stage.value} -> {stage.value}")
        self.stage = stage

    def run(self) -> BootstrapResult:
        """Run every stage.

        Raises:
            ClusterBridgeError: From the first failing stage
        """
        if self.stage != BootstrapStage.NOT_STARTED:
            raise RuntimeError(f"Bootstrap already ran (stage: {self.stage.value})")

        clusters = self.config.clusters
        try:
            if self.provisioner is not None:
                for cluster in clusters:
                    self.provisioner.provision(cluster)
                self._advance(BootstrapStage.PROVISIONED)

            self.result.inventories = [self.resolver.resolve(c) for c in clusters]
            self._advance(BootstrapStage.INVENTORY_RESOLVED)

            self.result.routes = self.reconciler.reconcile_all(self.result.inventories)
            self._advance(BootstrapStage.ROUTES_INSTALLED)

            self.result.corefiles = self.patcher.federate(clusters)
            self._advance(BootstrapStage.DNS_FEDERATED)

            self.result.kubeconfig = self.federator.federate(clusters)
            self._advance(BootstrapStage.CREDENTIALS_FEDERATED)
        except Exception:
            logger.error(f"Bootstrap failed after stage '{self.stage.value}'")
            self.failed_after = self.stage
            self.stage = BootstrapStage.FAILED
            raise

        self._advance(BootstrapStage.COMPLETE)
        return self.result
