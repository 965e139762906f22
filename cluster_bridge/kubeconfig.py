"""Kubeconfig federation.

Fetches each cluster's internal-endpoint kubeconfig, gives its context a
cluster-qualified name, and merges the results into one self-contained file
for clients that only accept a single kubeconfig.
"""

import base64
import copy
from pathlib import Path
from typing import Any

from cluster_bridge.exceptions import ResourceLookupError
from cluster_bridge.interfaces import CredentialStore
from cluster_bridge.logging_config import get_logger
from cluster_bridge.models import Cluster

logger = get_logger(__name__)

MERGED_FILENAME = "kubeconfig.yaml"

# (list name, inner key) pairs making up a kubeconfig
NAMED_SECTIONS = (("clusters", "cluster"), ("contexts", "context"), ("users", "user"))

# File reference -> inline data field
FILE_REFERENCES = {
    "cluster": {"certificate-authority": "certificate-authority-data"},
    "user": {
        "client-certificate": "client-certificate-data",
        "client-key": "client-key-data",
    },
}


def kubeconfig_filename(index: int) -> str:
    """Name of the per-cluster file for the cluster at 1-based ``index``."""
    return f"kubeconfig-{index}.yaml"


def rename_context(doc: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a copy of ``doc`` whose current and first context are named ``name``.

    Raises:
        ResourceLookupError: If the kubeconfig declares no contexts
    """
    contexts = doc.get("contexts") or []
    if not contexts:
        raise ResourceLookupError(
            "Kubeconfig declares no contexts", f"Cannot rename context to '{name}'"
        )
    renamed = copy.deepcopy(doc)
    renamed["current-context"] = name
    renamed["contexts"][0]["name"] = name
    return renamed


def flatten_kubeconfig(doc: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    """Return a copy of ``doc`` with certificate and key files embedded inline.

    Relative file references are resolved against ``base_dir``.

    Raises:
        ResourceLookupError: If a referenced file does not exist
    """
    flattened = copy.deepcopy(doc)
    for section, inner in (("clusters", "cluster"), ("users", "user")):
        for entry in flattened.get(section) or []:
            body = entry.get(inner) or {}
            for file_key, data_key in FILE_REFERENCES[inner].items():
                if file_key not in body:
                    continue
                path = Path(body.pop(file_key)).expanduser()
                if not path.is_absolute():
                    path = base_dir / path
                if not path.exists():
                    raise ResourceLookupError(
                        f"File referenced by kubeconfig not found: {path}",
                        f"Referenced as {file_key} of {inner} '{entry.get('name')}'",
                    )
                body[data_key] = base64.b64encode(path.read_bytes()).decode("ascii")
    return flattened


def merge_kubeconfigs(docs: list[dict[str, Any]]) -> dict[str, Any]:
    """Merge kubeconfig documents, earlier documents taking precedence.

    Named entries are concatenated; on a name clash the first one listed
    wins. ``current-context`` and each preference come from the first
    document that sets them.
    """
    merged: dict[str, Any] = {
        "apiVersion": "v1",
        "kind": "Config",
        "preferences": {},
        "clusters": [],
        "contexts": [],
        "users": [],
        "current-context": "",
    }
    for section, _ in NAMED_SECTIONS:
        seen = set()
        entries = []
        for doc in docs:
            for entry in doc.get(section) or []:
                if entry.get("name") in seen:
                    logger.debug(f"Skipping duplicate {section} entry '{entry.get('name')}'")
                    continue
                seen.add(entry.get("name"))
                entries.append(copy.deepcopy(entry))
        merged[section] = sorted(entries, key=lambda e: e.get("name") or "")

    for doc in docs:
        if not merged["current-context"] and doc.get("current-context"):
            merged["current-context"] = doc["current-context"]
        for key, value in (doc.get("preferences") or {}).items():
            merged["preferences"].setdefault(key, value)

    return merged


class KubeconfigFederator:
    """Writes per-cluster and merged kubeconfig files."""

    def __init__(self, store: CredentialStore, output_dir: Path):
        """Initialize the federator.

        Args:
            store: Source of kubeconfigs and target of written files
            output_dir: Components directory receiving the kubeconfig files
        """
        self.store = store
        self.output_dir = Path(output_dir)

    def federate(self, clusters: list[Cluster]) -> dict[str, Any]:
        """Write renamed per-cluster files and the merged file.

        Afterwards the operator's active context is the first cluster's.

        Returns:
            The merged kubeconfig document
        """
        renamed = []
        for index, cluster in enumerate(clusters, start=1):
            doc = rename_context(self.store.fetch_kubeconfig(cluster), cluster.kubeconfig_context)
            path = self.output_dir / kubeconfig_filename(index)
            self.store.write_kubeconfig(path, doc)
            logger.info(f"Wrote kubeconfig for '{cluster.name}' to {path}")
            renamed.append(doc)

        merged = merge_kubeconfigs([flatten_kubeconfig(doc, self.output_dir) for doc in renamed])
        merged_path = self.output_dir / MERGED_FILENAME
        self.store.write_kubeconfig(merged_path, merged)
        logger.info(
            f"Wrote merged kubeconfig to {merged_path} "
            f"(current context: {merged['current-context']})"
        )

        self.store.use_context(clusters[0].context)
        return merged
