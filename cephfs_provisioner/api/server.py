"""
Uvicorn server entrypoint for the CephFS Provisioner API.
"""

from __future__ import annotations

import argparse

import uvicorn
from oslo_config import cfg
from oslo_log import log as logging

from cephfs_provisioner.api.services import provision_service
from cephfs_provisioner.provisioner import configuration
from cephfs_provisioner.provisioner.agent import AllocationAgentClient
from cephfs_provisioner.provisioner.driver import CephFSProvisioner
from cephfs_provisioner.provisioner.kube import KubeClient

LOG = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cephfs-provisioner-api", description="CephFS Provisioner REST API server"
    )
    parser.add_argument(
        "--config-file",
        action="append",
        default=[],
        help="oslo.config file (may be repeated; default: /etc/cephfs-provisioner/cephfs-provisioner.conf)",
    )
    parser.add_argument("--host", default=None, help="Bind host (default: from config or 127.0.0.1)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: from config or 8080)")
    parser.add_argument("--log-level", default="info", help="Uvicorn log level (default: info)")
    return parser


def build_provisioner(group) -> CephFSProvisioner:
    """Create the process-wide provisioner from configuration."""
    kube = KubeClient.from_config(group)
    return CephFSProvisioner(
        secrets=kube,
        classes=kube,
        agent=AllocationAgentClient(group.agent_path),
        provisioner_name=group.provisioner_name,
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    conf = cfg.CONF
    logging.register_options(conf)
    group = configuration.load_config(conf, args.config_file)
    logging.setup(conf, configuration.PROJECT)

    provisioner = build_provisioner(group)
    provision_service.set_provisioner(provisioner)
    LOG.info(
        "Starting %s provisioner with identity %s",
        provisioner.provisioner_name,
        provisioner.identity,
    )

    host = args.host or group.api_host
    port = args.port or group.api_port
    uvicorn.run("cephfs_provisioner.api.main:app", host=host, port=port, log_level=args.log_level)
    return 0
