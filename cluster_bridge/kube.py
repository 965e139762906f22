"""Kubernetes API access for node inventory and CoreDNS configuration."""

from ipaddress import IPv4Address, IPv6Address, ip_address

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from cluster_bridge.config import DNSSettings
from cluster_bridge.exceptions import ExternalCommandError, PreconditionError, ResourceLookupError
from cluster_bridge.logging_config import get_logger
from cluster_bridge.models import Cluster, Node

logger = get_logger(__name__)


def node_from_api(item, cluster_name: str) -> Node:
    """Build a Node from a V1Node object.

    Raises:
        ResourceLookupError: If the node has no internal IP or pod CIDR
    """
    name = item.metadata.name
    addresses = item.status.addresses or []
    internal_ip = next((a.address for a in addresses if a.type == "InternalIP"), None)
    if not internal_ip:
        raise ResourceLookupError(
            f"Node '{name}' in cluster '{cluster_name}' has no InternalIP address"
        )

    pod_cidr = item.spec.pod_cidr
    if not pod_cidr:
        raise ResourceLookupError(
            f"Node '{name}' in cluster '{cluster_name}' has no pod CIDR assigned",
            "The node may still be joining the cluster; wait for it to become Ready",
        )

    return Node(
        cluster=cluster_name,
        name=name,
        internal_ip=internal_ip,
        pod_network=pod_cidr,
        role=Node.role_from_labels(item.metadata.labels),
    )


def _api_error(action: str, cluster: Cluster, e: ApiException) -> ExternalCommandError:
    logger.error(f"Kubernetes API error while trying to {action} in '{cluster.context}': {e}")
    return ExternalCommandError(
        f"Failed to {action} in context '{cluster.context}'",
        f"HTTP {e.status} {e.reason}: {e.body}",
        command=["kubernetes-api", action],
    )


class KubernetesClient:
    """Lazily creates one CoreV1Api per kubeconfig context."""

    def __init__(self, kubeconfig: str | None = None):
        """Initialize the client factory.

        Args:
            kubeconfig: Path to the kubeconfig file, None for the default
        """
        self.kubeconfig = kubeconfig
        self._apis: dict[str, client.CoreV1Api] = {}

    def core_v1(self, cluster: Cluster) -> client.CoreV1Api:
        """Return a CoreV1Api bound to the cluster's context.

        Raises:
            PreconditionError: If the context cannot be loaded
        """
        if cluster.context not in self._apis:
            logger.debug(f"Loading kubeconfig context: {cluster.context}")
            try:
                api_client = config.new_client_from_config(
                    config_file=self.kubeconfig, context=cluster.context
                )
            except (ConfigException, OSError) as e:
                raise PreconditionError(
                    f"Failed to load kubeconfig context '{cluster.context}'",
                    f"{e}\n\nCheck that cluster '{cluster.name}' exists: kind get clusters",
                )
            self._apis[cluster.context] = client.CoreV1Api(api_client)
        return self._apis[cluster.context]


class KubernetesClusterAdmin:
    """ClusterAdmin backed by the Kubernetes API."""

    def __init__(self, kube: KubernetesClient):
        self.kube = kube

    def list_nodes(self, cluster: Cluster) -> list[Node]:
        try:
            response = self.kube.core_v1(cluster).list_node()
        except ApiException as e:
            raise _api_error("list nodes", cluster, e)
        return [node_from_api(item, cluster.name) for item in response.items]


class KubernetesDNSConfigStore:
    """DNSConfigStore reading and patching the CoreDNS ConfigMap."""

    def __init__(self, kube: KubernetesClient, settings: DNSSettings | None = None):
        self.kube = kube
        self.settings = settings or DNSSettings()

    def dns_service_ip(self, cluster: Cluster) -> IPv4Address | IPv6Address:
        """Return the cluster IP of the DNS service.

        Raises:
            ResourceLookupError: If the service is missing or headless
        """
        s = self.settings
        try:
            service = self.kube.core_v1(cluster).read_namespaced_service(s.service, s.namespace)
        except ApiException as e:
            if e.status == 404:
                raise ResourceLookupError(
                    f"Service {s.namespace}/{s.service} not found in context '{cluster.context}'"
                )
            raise _api_error(f"read service {s.namespace}/{s.service}", cluster, e)

        cluster_ip = service.spec.cluster_ip
        if not cluster_ip or cluster_ip == "None":
            raise ResourceLookupError(
                f"Service {s.namespace}/{s.service} in context '{cluster.context}' "
                "has no cluster IP"
            )
        return ip_address(cluster_ip)

    def read_corefile(self, cluster: Cluster) -> str:
        s = self.settings
        try:
            configmap = self.kube.core_v1(cluster).read_namespaced_config_map(
                s.configmap, s.namespace
            )
        except ApiException as e:
            if e.status == 404:
                raise ResourceLookupError(
                    f"ConfigMap {s.namespace}/{s.configmap} not found in context "
                    f"'{cluster.context}'"
                )
            raise _api_error(f"read configmap {s.namespace}/{s.configmap}", cluster, e)

        data = configmap.data or {}
        if s.configmap_key not in data:
            raise ResourceLookupError(
                f"ConfigMap {s.namespace}/{s.configmap} in context '{cluster.context}' "
                f"has no '{s.configmap_key}' key"
            )
        return data[s.configmap_key]

    def write_corefile(self, cluster: Cluster, corefile: str) -> None:
        s = self.settings
        patch = {"data": {s.configmap_key: corefile}}
        try:
            self.kube.core_v1(cluster).patch_namespaced_config_map(s.configmap, s.namespace, patch)
        except ApiException as e:
            raise _api_error(f"patch configmap {s.namespace}/{s.configmap}", cluster, e)
