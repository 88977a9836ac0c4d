"""
Integration tests for the API server entrypoint.
"""

from unittest.mock import patch

import pytest

from cephfs_provisioner.api import server
from cephfs_provisioner.api.services import provision_service


class TestServer:
    """Tests for the cephfs-provisioner-api entrypoint."""

    @pytest.mark.integration
    def test_parser_defaults(self):
        args = server.build_parser().parse_args([])

        assert args.config_file == []
        assert args.host is None
        assert args.port is None

    @pytest.mark.integration
    def test_main_starts_uvicorn(self, temp_dir):
        config_file = temp_dir / "cephfs-provisioner.conf"
        config_file.write_text(
            "[cephfs_provisioner]\n"
            "kube_api_endpoint = https://k8s:6443\n"
            "agent_path = /opt/agent\n"
            "api_port = 9090\n"
        )

        with patch("cephfs_provisioner.api.server.uvicorn.run") as run, patch(
            "cephfs_provisioner.api.server.cfg.CONF", server.cfg.ConfigOpts()
        ):
            rc = server.main(["--config-file", str(config_file), "--host", "0.0.0.0"])

        try:
            assert rc == 0
            run.assert_called_once_with(
                "cephfs_provisioner.api.main:app", host="0.0.0.0", port=9090, log_level="info"
            )
            provisioner = provision_service.get_provisioner()
            assert provisioner.agent.agent_path == "/opt/agent"
            assert provisioner.provisioner_name == "ceph.com/cephfs"
        finally:
            provision_service.set_provisioner(None)
