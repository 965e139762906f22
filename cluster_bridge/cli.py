"""Main CLI entry point for the cluster bridge."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from cluster_bridge.config import BridgeConfig
from cluster_bridge.exceptions import ClusterBridgeError, ExternalCommandError
from cluster_bridge.logging_config import get_logger, setup_logging

app = typer.Typer(
    name="cluster-bridge",
    help="Join kind clusters into one routable network for multi-cluster xDS testing",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)

CONFIG_HELP = "Path to bridge configuration YAML (defaults to the two-cluster workshop layout)"
KUBECONFIG_HELP = "Kubeconfig used to reach the clusters' APIs (defaults to $KUBECONFIG)"


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: str | None = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Global options for all commands."""
    log_path = Path(log_file) if log_file else None
    setup_logging(verbose=verbose, log_file=log_path)
    logger.debug("Logging initialized")


def _report_failure(e: ClusterBridgeError) -> None:
    """Print the error and exit with the failed tool's status, or 1."""
    code = e.returncode if isinstance(e, ExternalCommandError) else 1
    title = type(e).__name__
    logger.error(f"{title}: {e.message}")
    console.print(f"[red]{title}:[/red] {e.message}")
    if e.details:
        console.print(f"\n{e.details}")
    raise typer.Exit(code=code)


def _load_config(config_path: str | None) -> BridgeConfig:
    return BridgeConfig.load(config_path)


@app.command()
def version() -> None:
    """Show version information."""
    from cluster_bridge import __version__

    typer.echo(f"cluster-bridge version {__version__}")


@app.command()
def up(
    config_path: str | None = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    kubeconfig: str | None = typer.Option(None, "--kubeconfig", help=KUBECONFIG_HELP),
    provision: bool = typer.Option(
        False, "--provision", help="Create the kind clusters and deploy base modules first"
    ),
) -> None:
    """
    Run the full bootstrap: routes, DNS federation, and kubeconfig federation.

    Stops at the first failure. Routes and DNS patches applied before the
    failure stay in place.
    """
    from cluster_bridge.bootstrap import Bootstrap
    from cluster_bridge.commands import require_tools
    from cluster_bridge.kind import ClusterProvisioner, KindCredentialStore
    from cluster_bridge.kube import (
        KubernetesClient,
        KubernetesClusterAdmin,
        KubernetesDNSConfigStore,
    )
    from cluster_bridge.runtime import ContainerRouteInstaller

    try:
        config = _load_config(config_path)
        tools = [config.container_runtime, "kind", "kubectl"]
        if provision:
            tools.append("skaffold")
        require_tools(tools)

        kube = KubernetesClient(kubeconfig)
        provisioner = None
        if provision:
            provisioner = ClusterProvisioner(config.deploy, config.base_dir)

        bootstrap = Bootstrap(
            config,
            admin=KubernetesClusterAdmin(kube),
            installer=ContainerRouteInstaller(config.container_runtime),
            dns_store=KubernetesDNSConfigStore(kube, config.dns),
            credentials=KindCredentialStore(),
            provisioner=provisioner,
        )

        console.print("[bold cyan]Bootstrapping cluster bridge[/bold cyan]")
        result = bootstrap.run()

        console.print(f"[green]✓[/green] Installed {len(result.routes)} routes")
        console.print(f"[green]✓[/green] Patched CoreDNS in {len(result.corefiles)} clusters")
        console.print(
            f"[green]✓[/green] Wrote kubeconfig files to {config.components_dir} "
            f"(current context: {result.kubeconfig['current-context']})"
        )
    except ClusterBridgeError as e:
        _report_failure(e)
    except KeyboardInterrupt:
        console.print("\n[yellow]Bootstrap interrupted by user[/yellow]")
        raise typer.Exit(code=130)


@app.command()
def routes(
    config_path: str | None = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    kubeconfig: str | None = typer.Option(None, "--kubeconfig", help=KUBECONFIG_HELP),
) -> None:
    """Install routes between the pod and service networks of every cluster pair."""
    from cluster_bridge.commands import require_tools
    from cluster_bridge.inventory import InventoryResolver
    from cluster_bridge.kube import KubernetesClient, KubernetesClusterAdmin
    from cluster_bridge.routes import RouteReconciler
    from cluster_bridge.runtime import ContainerRouteInstaller

    try:
        config = _load_config(config_path)
        require_tools([config.container_runtime])

        resolver = InventoryResolver(KubernetesClusterAdmin(KubernetesClient(kubeconfig)))
        inventories = [resolver.resolve(c) for c in config.clusters]
        reconciler = RouteReconciler(ContainerRouteInstaller(config.container_runtime))
        installed = reconciler.reconcile_all(inventories)

        table = Table(title="Installed Routes")
        table.add_column("Node", style="cyan")
        table.add_column("Destination", style="magenta")
        table.add_column("Via", style="yellow")
        for route in installed:
            table.add_row(route.node, str(route.destination), str(route.via))
        console.print(table)
    except ClusterBridgeError as e:
        _report_failure(e)


@app.command()
def dns(
    config_path: str | None = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    kubeconfig: str | None = typer.Option(None, "--kubeconfig", help=KUBECONFIG_HELP),
    strategy: str | None = typer.Option(
        None, "--strategy", "-s", help="Corefile edit strategy: append or upsert"
    ),
) -> None:
    """
    Forward each cluster's synthetic DNS zone from every other cluster.

    With the default append strategy, running this twice adds the
    forwarding block twice.
    """
    from cluster_bridge.dns import DNSFederationPatcher
    from cluster_bridge.kube import KubernetesClient, KubernetesDNSConfigStore

    try:
        config = _load_config(config_path)
        settings = config.dns
        if strategy is not None:
            if strategy not in ("append", "upsert"):
                console.print(
                    f"[red]Error:[/red] Invalid strategy '{strategy}'. Must be one of: append, upsert"
                )
                raise typer.Exit(code=1)
            settings = settings.model_copy(update={"strategy": strategy})

        store = KubernetesDNSConfigStore(KubernetesClient(kubeconfig), settings)
        written = DNSFederationPatcher(store, settings).federate(config.clusters)
        for name in written:
            console.print(f"[green]✓[/green] Patched CoreDNS in '{name}'")
    except ClusterBridgeError as e:
        _report_failure(e)


@app.command("kubeconfig")
def kubeconfig_command(
    config_path: str | None = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
) -> None:
    """Write per-cluster and merged kubeconfig files for the control plane."""
    from cluster_bridge.commands import require_tools
    from cluster_bridge.kind import KindCredentialStore
    from cluster_bridge.kubeconfig import KubeconfigFederator

    try:
        config = _load_config(config_path)
        require_tools(["kind", "kubectl"])

        merged = KubeconfigFederator(KindCredentialStore(), config.components_dir).federate(
            config.clusters
        )
        console.print(f"[green]✓[/green] Wrote kubeconfig files to {config.components_dir}")
        console.print(f"  Contexts: {', '.join(c['name'] for c in merged['contexts'])}")
        console.print(f"  Current context: {merged['current-context']}")
    except ClusterBridgeError as e:
        _report_failure(e)


@app.command()
def nodes(
    config_path: str | None = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    kubeconfig: str | None = typer.Option(None, "--kubeconfig", help=KUBECONFIG_HELP),
) -> None:
    """Show the node inventory of every cluster."""
    from cluster_bridge.inventory import InventoryResolver
    from cluster_bridge.kube import KubernetesClient, KubernetesClusterAdmin

    try:
        config = _load_config(config_path)
        resolver = InventoryResolver(KubernetesClusterAdmin(KubernetesClient(kubeconfig)))

        table = Table(title="Cluster Nodes")
        table.add_column("Cluster", style="cyan")
        table.add_column("Node", style="magenta")
        table.add_column("Role", style="green")
        table.add_column("Internal IP", style="yellow")
        table.add_column("Pod Network", style="blue")
        table.add_column("Service Network")

        for cluster in config.clusters:
            for node in resolver.list_nodes(cluster):
                table.add_row(
                    cluster.name,
                    node.name,
                    node.role,
                    str(node.internal_ip),
                    str(node.pod_network),
                    str(resolver.service_network(cluster)),
                )
        console.print(table)
    except ClusterBridgeError as e:
        _report_failure(e)


if __name__ == "__main__":
    app()
