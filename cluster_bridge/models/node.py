"""Data models for cluster nodes."""

import re

from pydantic import BaseModel, IPvAnyAddress, IPvAnyNetwork, field_validator

CONTROL_PLANE = "control-plane"
WORKER = "worker"

# Labels that mark a node as part of the control plane
CONTROL_PLANE_LABELS = (
    "node-role.kubernetes.io/control-plane",
    "node-role.kubernetes.io/master",
)


class Node(BaseModel):
    """A node discovered in a cluster.

    Nodes are transient: they are rediscovered on every run and never
    persisted.
    """

    cluster: str
    name: str
    internal_ip: IPvAnyAddress
    pod_network: IPvAnyNetwork
    role: str = WORKER

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate node name follows DNS naming conventions."""
        if not v:
            raise ValueError("name cannot be empty")
        if len(v) > 253:
            raise ValueError("name cannot exceed 253 characters")
        # RFC 1123 hostname validation
        hostname_pattern = re.compile(
            r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$", re.IGNORECASE
        )
        if not hostname_pattern.match(v):
            raise ValueError(
                f"name '{v}' must contain only alphanumeric characters, "
                "hyphens, and dots, and cannot start or end with a hyphen"
            )
        return v

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str) -> str:
        """Validate role is either control-plane or worker."""
        allowed_roles = [CONTROL_PLANE, WORKER]
        if v not in allowed_roles:
            raise ValueError(f"role must be one of {allowed_roles}, got '{v}'")
        return v

    @property
    def is_control_plane(self) -> bool:
        return self.role == CONTROL_PLANE

    @staticmethod
    def role_from_labels(labels: dict[str, str] | None) -> str:
        """Derive the node role from its Kubernetes labels."""
        labels = labels or {}
        if any(label in labels for label in CONTROL_PLANE_LABELS):
            return CONTROL_PLANE
        return WORKER
