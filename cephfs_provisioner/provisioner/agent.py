"""Allocation agent invocation.

The agent is an external executable that creates or removes a CephFS share
and its client user:

    <agent> -n <share> -u <user>        create, prints {"path", "user", "auth"}
    <agent> -r -n <share> -u <user>     destroy

Cluster access is passed through CLUSTER_NAME, MONITORS, AUTH_ID and AUTH_KEY.
"""

import json
import subprocess
from typing import Dict, List

from oslo_log import log as logging

from .exceptions import AgentError, AgentInvalidOutput
from .models import AllocationResult, ClusterConnection

LOG = logging.getLogger(__name__)

DEFAULT_AGENT_PATH = "/usr/local/bin/cephfs_provisioner"

MODE_CREATE = "create"
MODE_DESTROY = "destroy"


def agent_environment(connection: ClusterConnection) -> Dict[str, str]:
    """Build the agent's complete environment (nothing is inherited)."""
    return {
        "CLUSTER_NAME": connection.cluster,
        "MONITORS": ",".join(connection.monitors),
        "AUTH_ID": connection.admin_id,
        "AUTH_KEY": connection.admin_secret,
    }


def agent_arguments(mode: str, share: str, user: str) -> List[str]:
    if mode == MODE_CREATE:
        return ["-n", share, "-u", user]
    if mode == MODE_DESTROY:
        return ["-r", "-n", share, "-u", user]
    raise ValueError(f"Invalid agent mode: {mode}")


def parse_create_output(stdout: str) -> AllocationResult:
    """
    Parse the agent's create output.

    Args:
        stdout: Agent standard output

    Returns:
        AllocationResult

    Raises:
        AgentInvalidOutput: Output is not a JSON object or a field is empty
    """
    try:
        record = json.loads(stdout)
    except ValueError as e:
        raise AgentInvalidOutput(details=f"not JSON ({e})", output=stdout)

    if not isinstance(record, dict):
        raise AgentInvalidOutput(details="expected a JSON object", output=stdout)

    path = record.get("path") or ""
    user = record.get("user") or ""
    secret = record.get("auth") or ""
    missing = [k for k, v in (("path", path), ("user", user), ("auth", secret)) if not v]
    if missing:
        raise AgentInvalidOutput(details=f"missing {', '.join(missing)}", output=stdout)

    return AllocationResult(path=str(path), user=str(user), secret=str(secret))


class AllocationAgentClient:
    """Runs the allocation agent synchronously.

    Output is decoded as UTF-8 with undecodable bytes replaced.
    There is no timeout: the call blocks until the agent exits, and any
    deadline is the caller's to enforce.
    """

    def __init__(self, agent_path: str = DEFAULT_AGENT_PATH):
        self.agent_path = agent_path

    def _run(self, mode: str, share: str, user: str, connection: ClusterConnection) -> str:
        cmd = [self.agent_path] + agent_arguments(mode, share, user)
        try:
            result = subprocess.run(
                cmd,
                env=agent_environment(connection),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as e:
            LOG.error("Failed to start allocation agent %s: %s", self.agent_path, e)
            raise AgentError(details=f"cannot execute {self.agent_path}: {e}")

        output = (result.stdout or "") + (result.stderr or "")
        if result.returncode != 0:
            LOG.error(
                "failed to %s share %s for %s, exit status: %s, output: %s",
                mode,
                share,
                user,
                result.returncode,
                output,
            )
            raise AgentError(
                details=f"{mode} of share {share} exited with status {result.returncode}",
                output=output,
                returncode=result.returncode,
            )
        return result.stdout or ""

    def create(self, share: str, user: str, connection: ClusterConnection) -> AllocationResult:
        """Create ``share`` and a client ``user`` with access to it.

        Raises:
            AgentError: Agent could not run or exited non-zero
            AgentInvalidOutput: Output lacks path, user or auth
        """
        stdout = self._run(MODE_CREATE, share, user, connection)
        try:
            return parse_create_output(stdout)
        except AgentInvalidOutput as e:
            LOG.error("invalid provisioner output for share %s: %s", share, e)
            raise

    def destroy(self, share: str, user: str, connection: ClusterConnection) -> None:
        """Remove ``share`` and ``user``. Only the exit status is checked."""
        self._run(MODE_DESTROY, share, user, connection)
