"""kind, kubectl, and skaffold tooling: credentials and cluster provisioning."""

import io
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from cluster_bridge.commands import run_command
from cluster_bridge.config import DeployToolSettings
from cluster_bridge.exceptions import ExternalCommandError
from cluster_bridge.logging_config import get_logger
from cluster_bridge.models import Cluster

logger = get_logger(__name__)


def _yaml() -> YAML:
    yaml = YAML()
    yaml.preserve_quotes = True
    yaml.default_flow_style = False
    yaml.indent(mapping=2, sequence=2, offset=0)
    return yaml


class KindCredentialStore:
    """CredentialStore using ``kind get kubeconfig`` and ``kubectl config``."""

    def __init__(self, runner: Callable[..., str] = run_command):
        self.runner = runner
        self.yaml = _yaml()

    def fetch_kubeconfig(self, cluster: Cluster) -> dict[str, Any]:
        """Fetch the kubeconfig using the cluster's internal endpoint.

        Raises:
            ExternalCommandError: If kind fails or prints something that is not YAML
        """
        command = ["kind", "get", "kubeconfig", "--internal", f"--name={cluster.name}"]
        output = self.runner(command)
        try:
            doc = self.yaml.load(output)
        except YAMLError as e:
            raise ExternalCommandError(
                f"kind returned an unparsable kubeconfig for '{cluster.name}'", str(e), command
            )
        if not isinstance(doc, dict):
            raise ExternalCommandError(
                f"kind returned an empty kubeconfig for '{cluster.name}'", None, command
            )
        return doc

    def write_kubeconfig(self, path: Path, doc: dict[str, Any]) -> None:
        """Overwrite ``path`` with ``doc``, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        buffer = io.StringIO()
        self.yaml.dump(doc, buffer)
        path.write_text(buffer.getvalue())
        logger.debug(f"Wrote kubeconfig file: {path}")

    def use_context(self, context: str) -> None:
        self.runner(["kubectl", "config", "use-context", context])
        logger.info(f"Switched kubectl context to {context}")


class ClusterProvisioner:
    """Creates kind clusters and deploys their base workloads with skaffold."""

    def __init__(
        self,
        deploy: DeployToolSettings,
        base_dir: Path = Path("."),
        runner: Callable[..., str] = run_command,
    ):
        """Initialize the provisioner.

        Args:
            deploy: skaffold toggles passed to every skaffold invocation
            base_dir: Directory the kind configs and skaffold files are relative to
            runner: Function executing a command and returning its output
        """
        self.deploy = deploy
        self.base_dir = Path(base_dir)
        self.runner = runner

    def provision(self, cluster: Cluster) -> None:
        """Create the cluster, set its default namespace, and deploy its modules."""
        logger.info(f"Creating kind cluster '{cluster.name}'")
        create = ["kind", "create", "cluster", f"--name={cluster.name}"]
        if cluster.kind_config:
            create.append(f"--config={self.base_dir / cluster.kind_config}")
        self.runner(create)

        self.runner(
            ["kubectl", "config", "set-context", "--current", f"--namespace={cluster.namespace}"]
        )

        env = self.deploy.to_env()
        for module in cluster.deploy_modules:
            logger.info(f"Deploying module '{module}' to '{cluster.name}'")
            self.runner(
                [
                    "skaffold",
                    "run",
                    f"--filename={self.base_dir / cluster.deploy_file}",
                    f"--module={module}",
                    f"--kube-context={cluster.context}",
                ],
                env=env,
            )
