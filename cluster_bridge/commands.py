"""Blocking invocation of external command-line tools."""

import os
import shlex
import shutil
import subprocess

from cluster_bridge.exceptions import ExternalCommandError, PreconditionError
from cluster_bridge.logging_config import get_logger

logger = get_logger(__name__)

INSTALL_HINTS = {
    "docker": "Install Docker, or put a `docker` symlink to `podman` on your PATH",
    "podman": "Install podman from https://podman.io",
    "kind": "Install kind from https://kind.sigs.k8s.io/docs/user/quick-start/",
    "kubectl": "Install kubectl from https://kubernetes.io/docs/tasks/tools/",
    "skaffold": "Install skaffold from https://skaffold.dev/docs/install/",
}


def require_tools(tools: list[str]) -> None:
    """Check that every tool is available on PATH.

    Raises:
        PreconditionError: For the first tool that is missing
    """
    for tool in tools:
        if shutil.which(tool) is None:
            logger.error(f"Required tool not found in PATH: {tool}")
            raise PreconditionError(
                f"You must have `{tool}` on your PATH",
                INSTALL_HINTS.get(tool, f"Install {tool} and make sure it is on your PATH"),
            )
        logger.debug(f"Found required tool: {tool}")


def run_command(
    command: list[str],
    env: dict[str, str] | None = None,
    timeout: float | None = None,
) -> str:
    """Run a command to completion and return its standard output.

    Args:
        command: Program and arguments
        env: Extra environment variables layered over the current environment
        timeout: Seconds to wait before giving up, None to wait forever

    Returns:
        The command's standard output

    Raises:
        PreconditionError: If the program is not installed
        ExternalCommandError: If the program exits non-zero or times out
    """
    printable = shlex.join(command)
    logger.debug(f"Running: {printable}")

    full_env = None
    if env:
        full_env = {**os.environ, **env}

    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            check=True,
            env=full_env,
            timeout=timeout,
        )
    except FileNotFoundError:
        logger.error(f"{command[0]} binary not found in PATH")
        raise PreconditionError(
            f"{command[0]} is not installed or not in PATH",
            INSTALL_HINTS.get(command[0], f"Install {command[0]} and make sure it is on your PATH"),
        )
    except subprocess.CalledProcessError as e:
        logger.error(f"Command failed with return code {e.returncode}: {printable}")
        raise ExternalCommandError(
            f"Command failed: {printable}",
            (e.stderr or "").strip() or None,
            command=command,
            returncode=e.returncode,
        )
    except subprocess.TimeoutExpired:
        logger.error(f"Command timed out after {timeout} seconds: {printable}")
        raise ExternalCommandError(
            f"Command timed out: {printable}",
            f"No result within {timeout} seconds",
            command=command,
            returncode=124,
        )

    logger.debug(f"Command completed with return code {result.returncode}")
    return result.stdout
