"""Data models for cluster identity and provisioning parameters."""

import re

from pydantic import BaseModel, Field, IPvAnyNetwork, field_validator

_DNS_NAME = re.compile(
    r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$", re.IGNORECASE
)


class Cluster(BaseModel):
    """A kind cluster taking part in the bridged network.

    ``service_network`` is a provisioning-time constant: it must match
    ``networking.serviceSubnet`` of the kind config the cluster was created
    from. It is never read back from the live cluster.
    """

    name: str
    context: str
    service_network: IPvAnyNetwork
    dns_zone: str
    kubeconfig_context: str

    # Provisioning parameters, only used with --provision
    kind_config: str | None = None
    namespace: str = "xds"
    deploy_file: str = "k8s/cert-manager/skaffold.yaml"
    deploy_modules: list[str] = Field(default_factory=list)

    @field_validator("name", "context", "kubeconfig_context")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Validate identifiers are not empty."""
        if not v:
            raise ValueError("value cannot be empty")
        return v

    @field_validator("dns_zone")
    @classmethod
    def validate_dns_zone(cls, v: str) -> str:
        """Validate the synthetic zone is a DNS name."""
        v = v.rstrip(".")
        if not v or not _DNS_NAME.match(v):
            raise ValueError(f"dns_zone '{v}' must be a valid DNS name (e.g., cluster.example.com)")
        return v
