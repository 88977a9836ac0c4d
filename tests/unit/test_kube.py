"""
Unit tests for the Kubernetes API client.
"""

import base64
from unittest.mock import Mock, patch

import pytest
import requests

from cephfs_provisioner.provisioner.exceptions import (
    KubeAPIConnectionError,
    KubeAPIError,
    KubeAPITimeout,
    SecretAlreadyExists,
    SecretNotFound,
    StorageClassNotFound,
)
from cephfs_provisioner.provisioner.kube import KubeClient, in_cluster_endpoint


def _response(status_code=200, body=None, text=""):
    response = Mock(status_code=status_code, text=text)
    response.json.return_value = body if body is not None else {}
    return response


@pytest.fixture
def client():
    return KubeClient("https://10.0.0.1:6443/", token="sa-token", timeout=5)


class TestKubeClient:
    """Tests for KubeClient setup."""

    @pytest.mark.unit
    def test_bearer_token(self, client):
        assert client.session.headers["Authorization"] == "Bearer sa-token"
        assert client.base_url == "https://10.0.0.1:6443"

    @pytest.mark.unit
    def test_ca_bundle_used_when_present(self, temp_dir):
        ca = temp_dir / "ca.crt"
        ca.write_text("cert")

        assert KubeClient("https://k8s", ca_bundle=str(ca)).verify_ssl == str(ca)
        assert KubeClient("https://k8s", ca_bundle=str(temp_dir / "missing")).verify_ssl is True
        assert KubeClient("https://k8s", verify_ssl=False, ca_bundle=str(ca)).verify_ssl is False

    @pytest.mark.unit
    def test_from_config(self, temp_dir):
        token = temp_dir / "token"
        token.write_text("file-token\n")
        conf = Mock(
            kube_api_endpoint="https://k8s:6443",
            kube_api_token_file=str(token),
            kube_api_timeout=10,
            kube_api_retry_count=2,
            kube_api_verify_ssl=True,
            kube_api_ca_bundle=None,
        )

        client = KubeClient.from_config(conf)

        assert client.base_url == "https://k8s:6443"
        assert client.session.headers["Authorization"] == "Bearer file-token"
        assert client.timeout == 10

    @pytest.mark.unit
    def test_from_config_in_cluster(self, temp_dir):
        conf = Mock(
            kube_api_endpoint=None,
            kube_api_token_file=str(temp_dir / "missing"),
            kube_api_timeout=30,
            kube_api_retry_count=3,
            kube_api_verify_ssl=True,
            kube_api_ca_bundle=None,
        )
        env = {"KUBERNETES_SERVICE_HOST": "10.96.0.1", "KUBERNETES_SERVICE_PORT": "443"}

        with patch.dict("os.environ", env, clear=True):
            client = KubeClient.from_config(conf)

        assert client.base_url == "https://10.96.0.1:443"
        assert "Authorization" not in client.session.headers

    @pytest.mark.unit
    def test_from_config_no_endpoint(self):
        conf = Mock(kube_api_endpoint=None)

        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(ValueError, match="kube_api_endpoint"):
                KubeClient.from_config(conf)

    @pytest.mark.unit
    def test_in_cluster_ipv6(self):
        env = {"KUBERNETES_SERVICE_HOST": "fd00::1", "KUBERNETES_SERVICE_PORT": "6443"}

        with patch.dict("os.environ", env, clear=True):
            assert in_cluster_endpoint() == "https://[fd00::1]:6443"


class TestSecrets:
    """Tests for secret calls."""

    @pytest.mark.unit
    def test_get_secret(self, client):
        body = {"data": {"key": base64.b64encode(b"AQBadminkey==").decode()}}

        with patch.object(client.session, "request", return_value=_response(body=body)) as request:
            data = client.get_secret("kube-system", "ceph-admin")

        assert data == {"key": b"AQBadminkey=="}
        kwargs = request.call_args.kwargs
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == "https://10.0.0.1:6443/api/v1/namespaces/kube-system/secrets/ceph-admin"
        assert kwargs["timeout"] == 5

    @pytest.mark.unit
    def test_get_secret_without_data(self, client):
        with patch.object(client.session, "request", return_value=_response(body={"kind": "Secret"})):
            assert client.get_secret("ns", "empty") == {}

    @pytest.mark.unit
    def test_get_secret_not_found(self, client):
        with patch.object(client.session, "request", return_value=_response(404)):
            with pytest.raises(SecretNotFound, match="ns/absent"):
                client.get_secret("ns", "absent")

    @pytest.mark.unit
    def test_create_secret(self, client):
        with patch.object(client.session, "request", return_value=_response(201)) as request:
            client.create_secret("team-a", "ceph-u1-secret", {"key": b"AQDuserkey=="})

        kwargs = request.call_args.kwargs
        assert kwargs["method"] == "POST"
        assert kwargs["url"].endswith("/api/v1/namespaces/team-a/secrets")
        assert kwargs["json"] == {
            "apiVersion": "v1",
            "kind": "Secret",
            "metadata": {"name": "ceph-u1-secret", "namespace": "team-a"},
            "type": "Opaque",
            "data": {"key": base64.b64encode(b"AQDuserkey==").decode()},
        }

    @pytest.mark.unit
    def test_create_secret_conflict(self, client):
        with patch.object(client.session, "request", return_value=_response(409)):
            with pytest.raises(SecretAlreadyExists):
                client.create_secret("team-a", "ceph-u1-secret", {"key": b"x"})


class TestStorageClasses:
    """Tests for storage class lookup."""

    @pytest.mark.unit
    def test_get_storage_class(self, client):
        body = {
            "metadata": {"name": "cephfs"},
            "provisioner": "ceph.com/cephfs",
            "parameters": {"monitors": "m1"},
        }

        with patch.object(client.session, "request", return_value=_response(body=body)) as request:
            storage_class = client.get_storage_class("cephfs")

        assert storage_class.name == "cephfs"
        assert storage_class.provisioner == "ceph.com/cephfs"
        assert storage_class.parameters == {"monitors": "m1"}
        assert request.call_args.kwargs["url"].endswith("/apis/storage.k8s.io/v1/storageclasses/cephfs")

    @pytest.mark.unit
    def test_get_storage_class_not_found(self, client):
        with patch.object(client.session, "request", return_value=_response(404)):
            with pytest.raises(StorageClassNotFound):
                client.get_storage_class("gone")


class TestErrors:
    """Tests for request error mapping."""

    @pytest.mark.unit
    def test_timeout(self, client):
        with patch.object(client.session, "request", side_effect=requests.exceptions.Timeout()):
            with pytest.raises(KubeAPITimeout) as exc_info:
                client.get_secret("ns", "s")

        assert exc_info.value.retryable is True

    @pytest.mark.unit
    def test_connection_error(self, client):
        error = requests.exceptions.ConnectionError("refused")

        with patch.object(client.session, "request", side_effect=error):
            with pytest.raises(KubeAPIConnectionError, match="refused"):
                client.get_secret("ns", "s")

    @pytest.mark.unit
    def test_status_message(self, client):
        response = _response(403, body={"message": "secrets is forbidden"})

        with patch.object(client.session, "request", return_value=response):
            with pytest.raises(KubeAPIError, match="HTTP 403: secrets is forbidden"):
                client.get_secret("ns", "s")

    @pytest.mark.unit
    def test_non_json_error(self, client):
        response = _response(500, text="upstream failure")
        response.json.side_effect = ValueError("no json")

        with patch.object(client.session, "request", return_value=response):
            with pytest.raises(KubeAPIError, match="upstream failure"):
                client.get_storage_class("cephfs")

    @pytest.mark.unit
    def test_error_body_not_object(self, client):
        response = _response(500, body=["unexpected"], text='["unexpected"]')

        with patch.object(client.session, "request", return_value=response):
            with pytest.raises(KubeAPIError, match=r"HTTP 500: \[\"unexpected\"\]"):
                client.get_secret("ns", "s")

    @pytest.mark.unit
    def test_success_body_not_json(self, client):
        response = _response(200, text="<html>proxy</html>")
        response.json.side_effect = ValueError("no json")

        with patch.object(client.session, "request", return_value=response):
            with pytest.raises(KubeAPIError, match="invalid JSON response"):
                client.get_secret("ns", "s")

    @pytest.mark.unit
    def test_success_body_not_object(self, client):
        with patch.object(client.session, "request", return_value=_response(200, body="text")):
            with pytest.raises(KubeAPIError, match="expected a JSON object"):
                client.get_storage_class("cephfs")
