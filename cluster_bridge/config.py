"""Configuration for the bridge bootstrap."""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from cluster_bridge.exceptions import ConfigurationError
from cluster_bridge.logging_config import get_logger
from cluster_bridge.models.cluster import Cluster

logger = get_logger(__name__)


class DeployToolSettings(BaseModel):
    """Toggles for the skaffold deployment tool.

    Passed explicitly into each provisioning invocation instead of being
    exported into the process environment.
    """

    detect_minikube: bool = False
    interactive: bool = False
    skip_tests: bool = True
    update_check: bool = False

    def to_env(self) -> dict[str, str]:
        """Render the settings as skaffold environment variables."""
        return {
            "SKAFFOLD_DETECT_MINIKUBE": str(self.detect_minikube).lower(),
            "SKAFFOLD_INTERACTIVE": str(self.interactive).lower(),
            "SKAFFOLD_SKIP_TESTS": str(self.skip_tests).lower(),
            "SKAFFOLD_UPDATE_CHECK": str(self.update_check).lower(),
        }


class DNSSettings(BaseModel):
    """Where CoreDNS lives and how forwarding stanzas are written."""

    namespace: str = "kube-system"
    configmap: str = "coredns"
    configmap_key: str = "Corefile"
    service: str = "kube-dns"
    cache_ttl: int = 30
    strategy: Literal["append", "upsert"] = "append"

    @field_validator("cache_ttl")
    @classmethod
    def validate_cache_ttl(cls, v: int) -> int:
        """Validate the cache TTL is positive."""
        if v <= 0:
            raise ValueError("cache_ttl must be positive")
        return v


def default_clusters() -> list[Cluster]:
    """The two-cluster layout of the xDS workshop kind configs."""
    return [
        Cluster(
            name="grpc-xds",
            context="kind-grpc-xds",
            service_network="10.110.0.0/16",
            dns_zone="cluster.example.com",
            kubeconfig_context="grpc-xds-1",
            kind_config="hack/kind-cluster-config.yaml",
            deploy_modules=["cert-manager", "root-ca"],
        ),
        Cluster(
            name="grpc-xds-2",
            context="kind-grpc-xds-2",
            service_network="10.220.0.0/16",
            dns_zone="cluster2.example.com",
            kubeconfig_context="grpc-xds-2",
            kind_config="hack/kind-cluster-config-2.yaml",
            deploy_modules=["cert-manager", "root-ca-external"],
        ),
    ]


class BridgeConfig(BaseModel):
    """Top-level bootstrap configuration."""

    clusters: list[Cluster] = Field(default_factory=default_clusters)
    base_dir: Path = Path(".")
    kubeconfig_dir: Path = Path("k8s/control-plane/components/kubeconfig")
    container_runtime: str = "docker"
    dns: DNSSettings = Field(default_factory=DNSSettings)
    deploy: DeployToolSettings = Field(default_factory=DeployToolSettings)

    @field_validator("clusters")
    @classmethod
    def validate_clusters(cls, v: list[Cluster]) -> list[Cluster]:
        """Validate there are at least two uniquely named clusters."""
        if len(v) < 2:
            raise ValueError("at least two clusters are required")
        for attr in ("name", "context", "kubeconfig_context", "dns_zone"):
            values = [getattr(c, attr) for c in v]
            if len(set(values)) != len(values):
                raise ValueError(f"cluster {attr} values must be unique, got {values}")
        return v

    @property
    def components_dir(self) -> Path:
        """Directory receiving the generated kubeconfig files."""
        return self.base_dir / self.kubeconfig_dir

    def save(self, path: str | Path) -> None:
        """Save configuration to YAML file."""
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(mode="json"), f, default_flow_style=False)

    @classmethod
    def load(cls, path: str | Path | None = None) -> "BridgeConfig":
        """Load configuration from a YAML file, or return the defaults.

        Raises:
            ConfigurationError: If the file is missing, unparsable, or invalid
        """
        if path is None:
            logger.debug("No configuration file given, using defaults")
            return cls()

        path = Path(path)
        logger.debug(f"Reading configuration file: {path}")
        if not path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {path}",
                f"Expected location: {path.absolute()}",
            )

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse configuration file: {path}", str(e))

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping: {path}",
                f"Got {type(data).__name__} instead",
            )

        try:
            return cls(**data)
        except ValidationError as e:
            problems = "\n".join(
                f"  - {'.'.join(str(x) for x in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigurationError(f"Invalid configuration in {path}", problems)
