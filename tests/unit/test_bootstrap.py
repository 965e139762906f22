"""Unit tests for the bootstrap pipeline."""

import pytest

from cluster_bridge.bootstrap import Bootstrap, BootstrapStage
from cluster_bridge.config import BridgeConfig, DeployToolSettings
from cluster_bridge.exceptions import ExternalCommandError, ResourceLookupError
from cluster_bridge.kind import ClusterProvisioner
from tests.fakes import KIND_COREFILE, FakeClusterAdmin, FakeRouteInstaller, make_node


@pytest.fixture
def config(tmp_path, cluster_a, cluster_b):
    return BridgeConfig(clusters=[cluster_a, cluster_b], base_dir=tmp_path)


def make_bootstrap(config, admin, installer, dns_store, credential_store, provisioner=None):
    return Bootstrap(
        config,
        admin=admin,
        installer=installer,
        dns_store=dns_store,
        credentials=credential_store,
        provisioner=provisioner,
    )


def test_run_completes_every_stage(config, admin, installer, dns_store, credential_store):
    bootstrap = make_bootstrap(config, admin, installer, dns_store, credential_store)

    result = bootstrap.run()

    assert bootstrap.stage == BootstrapStage.COMPLETE
    assert len(result.inventories) == 2
    assert len(result.routes) == 12
    assert set(result.corefiles) == {"grpc-xds", "grpc-xds-2"}
    assert result.kubeconfig["current-context"] == "grpc-xds-1"
    assert credential_store.active_context == "kind-grpc-xds"
    assert config.components_dir / "kubeconfig.yaml" in credential_store.written


def test_run_only_once(config, admin, installer, dns_store, credential_store):
    bootstrap = make_bootstrap(config, admin, installer, dns_store, credential_store)
    bootstrap.run()

    with pytest.raises(RuntimeError):
        bootstrap.run()


def test_route_failure_stops_before_dns(config, admin, dns_store, credential_store):
    installer = FakeRouteInstaller(fail_on={"grpc-xds-2-worker"})
    bootstrap = make_bootstrap(config, admin, installer, dns_store, credential_store)

    with pytest.raises(ExternalCommandError):
        bootstrap.run()

    assert bootstrap.stage == BootstrapStage.FAILED
    assert bootstrap.failed_after == BootstrapStage.INVENTORY_RESOLVED
    # Routes from the first direction remain, nothing after them ran
    assert "grpc-xds-worker" in installer.tables
    assert dns_store.writes == []
    assert credential_store.written == {}


def test_missing_control_plane_keeps_earlier_pairing(
    tmp_path, cluster_a, cluster_b, dns_store, credential_store
):
    """B has no control plane; with B listed first, B->A routes stay and A->B never starts."""
    admin = FakeClusterAdmin(
        {
            cluster_a.name: [
                make_node(cluster_a.name, "a-cp", "172.18.0.2", "10.244.0.0/24", "control-plane")
            ],
            cluster_b.name: [make_node(cluster_b.name, "b-worker", "172.18.0.3", "10.245.0.0/24")],
        }
    )
    installer = FakeRouteInstaller()
    config = BridgeConfig(clusters=[cluster_b, cluster_a], base_dir=tmp_path)
    bootstrap = make_bootstrap(config, admin, installer, dns_store, credential_store)

    with pytest.raises(ResourceLookupError):
        bootstrap.run()

    assert bootstrap.stage == BootstrapStage.FAILED
    assert installer.tables == {
        "b-worker": {"10.244.0.0/24": "172.18.0.2", "10.110.0.0/16": "172.18.0.2"}
    }


def test_dns_rerun_is_not_idempotent(config, admin, installer, dns_store, credential_store):
    make_bootstrap(config, admin, installer, dns_store, credential_store).run()
    make_bootstrap(config, admin, installer, dns_store, credential_store).run()

    corefile = dns_store.corefiles["grpc-xds"]
    assert corefile.startswith(KIND_COREFILE)
    assert corefile.count("cluster2.example.com:53 {") == 2


def test_provisioning_runs_first(config, admin, installer, dns_store, credential_store):
    commands = []

    def runner(command, env=None):
        commands.append((command, env))
        return ""

    config.clusters[0].kind_config = "hack/kind-cluster-config.yaml"
    config.clusters[0].deploy_modules = ["cert-manager", "root-ca"]
    provisioner = ClusterProvisioner(DeployToolSettings(), config.base_dir, runner=runner)
    bootstrap = make_bootstrap(
        config, admin, installer, dns_store, credential_store, provisioner=provisioner
    )

    bootstrap.run()

    assert bootstrap.stage == BootstrapStage.COMPLETE
    assert commands[0][0] == [
        "kind",
        "create",
        "cluster",
        "--name=grpc-xds",
        f"--config={config.base_dir / 'hack/kind-cluster-config.yaml'}",
    ]
    skaffold = [c for c in commands if c[0][0] == "skaffold"]
    assert [c[0][3] for c in skaffold] == ["--module=cert-manager", "--module=root-ca"]
    assert all(c[1]["SKAFFOLD_INTERACTIVE"] == "false" for c in skaffold)
