"""Data models for clusters, nodes, and routes."""

from cluster_bridge.models.cluster import Cluster
from cluster_bridge.models.node import CONTROL_PLANE, WORKER, Node
from cluster_bridge.models.route import Route, ZoneForward

__all__ = [
    "CONTROL_PLANE",
    "WORKER",
    "Cluster",
    "Node",
    "Route",
    "ZoneForward",
]
