"""Pytest configuration and shared fixtures."""

import pytest
from hypothesis import Verbosity, settings

from tests.fakes import (
    KIND_COREFILE,
    FakeClusterAdmin,
    FakeCredentialStore,
    FakeDNSConfigStore,
    FakeRouteInstaller,
    kind_kubeconfig,
    make_cluster,
    make_node,
)

# Configure Hypothesis for property-based testing
settings.register_profile("default", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=10, verbosity=Verbosity.verbose)

# Load the default profile
settings.load_profile("default")


@pytest.fixture
def cluster_a():
    return make_cluster("grpc-xds", "10.110.0.0/16", 1, zone="cluster.example.com")


@pytest.fixture
def cluster_b():
    return make_cluster("grpc-xds-2", "10.220.0.0/16", 2, zone="cluster2.example.com")


@pytest.fixture
def topology(cluster_a, cluster_b):
    """Two clusters with a control plane and a worker each."""
    return {
        cluster_a.name: [
            make_node(
                cluster_a.name,
                "grpc-xds-control-plane",
                "172.18.0.2",
                "10.244.0.0/24",
                role="control-plane",
            ),
            make_node(cluster_a.name, "grpc-xds-worker", "172.18.0.4", "10.244.1.0/24"),
        ],
        cluster_b.name: [
            make_node(
                cluster_b.name,
                "grpc-xds-2-control-plane",
                "172.18.0.5",
                "10.245.0.0/24",
                role="control-plane",
            ),
            make_node(cluster_b.name, "grpc-xds-2-worker", "172.18.0.3", "10.245.1.0/24"),
        ],
    }


@pytest.fixture
def admin(topology):
    return FakeClusterAdmin(topology)


@pytest.fixture
def installer():
    return FakeRouteInstaller()


@pytest.fixture
def dns_store(cluster_a, cluster_b):
    return FakeDNSConfigStore(
        corefiles={cluster_a.name: KIND_COREFILE, cluster_b.name: KIND_COREFILE},
        dns_ips={cluster_a.name: "10.110.0.10", cluster_b.name: "10.220.0.10"},
    )


@pytest.fixture
def credential_store(cluster_a, cluster_b):
    return FakeCredentialStore(
        {
            cluster_a.name: kind_kubeconfig("kind-grpc-xds", "https://grpc-xds-control-plane:6443"),
            cluster_b.name: kind_kubeconfig(
                "kind-grpc-xds-2", "https://grpc-xds-2-control-plane:6443"
            ),
        }
    )
