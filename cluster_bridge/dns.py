"""DNS federation between clusters.

Each cluster's CoreDNS configuration gets a server block forwarding the
other cluster's synthetic zone to that cluster's kube-dns service address.
"""

from ipaddress import IPv4Address, IPv6Address

from cluster_bridge.config import DNSSettings
from cluster_bridge.corefile import Corefile
from cluster_bridge.interfaces import DNSConfigStore
from cluster_bridge.logging_config import get_logger
from cluster_bridge.models import Cluster, ZoneForward

logger = get_logger(__name__)


class DNSFederationPatcher:
    """Patches CoreDNS so every cluster resolves every other cluster's zone."""

    def __init__(self, store: DNSConfigStore, settings: DNSSettings | None = None):
        """Initialize the patcher.

        Args:
            store: Access to DNS service addresses and Corefiles
            settings: Cache TTL and edit strategy; ``append`` adds a block on
                every run, ``upsert`` replaces the block for the same zone
        """
        self.store = store
        self.settings = settings or DNSSettings()

    def patch(self, cluster: Cluster, forward: ZoneForward) -> str:
        """Add ``forward`` to the cluster's Corefile and write it back.

        Returns:
            The Corefile text that was written
        """
        corefile = Corefile.parse(self.store.read_corefile(cluster))

        if self.settings.strategy == "upsert":
            corefile.upsert(forward)
        else:
            if forward.key in corefile.keys():
                logger.warning(
                    f"Corefile of '{cluster.name}' already has a block for {forward.key}, "
                    "appending another one"
                )
            corefile.append(forward)

        text = corefile.render()
        self.store.write_corefile(cluster, text)
        logger.info(f"Patched CoreDNS in '{cluster.name}': {forward.zone} -> {forward.upstream}")
        return text

    def federate(self, clusters: list[Cluster]) -> dict[str, str]:
        """Forward every other cluster's zone from each cluster.

        All DNS service addresses are resolved before the first patch.

        Returns:
            Written Corefile text keyed by cluster name
        """
        dns_ips: dict[str, IPv4Address | IPv6Address] = {}
        for cluster in clusters:
            dns_ips[cluster.name] = self.store.dns_service_ip(cluster)
            logger.debug(f"DNS service of '{cluster.name}' is {dns_ips[cluster.name]}")

        written = {}
        for cluster in clusters:
            for other in clusters:
                if other.name == cluster.name:
                    continue
                forward = ZoneForward(
                    zone=other.dns_zone,
                    upstream=dns_ips[other.name],
                    cache_ttl=self.settings.cache_ttl,
                )
                written[cluster.name] = self.patch(cluster, forward)
        return written
