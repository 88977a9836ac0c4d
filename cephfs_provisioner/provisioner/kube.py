"""Kubernetes REST API client for the CephFS provisioner.

Only the handful of calls the provisioner needs: reading and creating
Secrets, and reading StorageClasses.
"""

import base64
import os
from typing import Any, Dict, Optional

import requests
from oslo_log import log as logging
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import (
    KubeAPIConnectionError,
    KubeAPIError,
    KubeAPITimeout,
    SecretAlreadyExists,
    SecretNotFound,
    StorageClassNotFound,
)
from .models import StorageClass

LOG = logging.getLogger(__name__)


def in_cluster_endpoint() -> Optional[str]:
    """API server URL from the service environment, if running in a pod."""
    host = os.environ.get("KUBERNETES_SERVICE_HOST")
    port = os.environ.get("KUBERNETES_SERVICE_PORT", "443")
    if not host:
        return None
    if ":" in host:
        host = f"[{host}]"
    return f"https://{host}:{port}"


def _read_token(path: Optional[str]) -> Optional[str]:
    if not path or not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as file:
        return file.read().strip() or None


class KubeClient:
    """Thin client for the Kubernetes core and storage APIs.

    Implements both the secret store and the storage class lookup used by
    the provisioner.
    """

    def __init__(
        self,
        api_endpoint: str,
        token: Optional[str] = None,
        timeout: int = 30,
        retry_count: int = 3,
        verify_ssl: bool = True,
        ca_bundle: Optional[str] = None,
    ):
        """Initialize the Kubernetes API client.

        Args:
            api_endpoint: API server URL (e.g., https://10.0.0.1:6443)
            token: Bearer token (service account token)
            timeout: HTTP request timeout in seconds
            retry_count: Number of retries for GET requests
            verify_ssl: Whether to verify SSL certificates
            ca_bundle: Path to CA bundle file for SSL verification
        """
        self.base_url = api_endpoint.rstrip("/")
        self.timeout = timeout
        self.retry_count = retry_count

        if ca_bundle and verify_ssl and os.path.exists(ca_bundle):
            self.verify_ssl = ca_bundle
        else:
            self.verify_ssl = verify_ssl

        self.session = requests.Session()
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

        # Secret creation is not idempotent, so only GET is retried
        retry_strategy = Retry(
            total=retry_count,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    @classmethod
    def from_config(cls, conf) -> "KubeClient":
        """Build a client from the ``cephfs_provisioner`` option group.

        Raises:
            ValueError: If no API endpoint is configured and the process is not
                running inside a cluster
        """
        endpoint = conf.kube_api_endpoint or in_cluster_endpoint()
        if not endpoint:
            raise ValueError(
                "kube_api_endpoint must be set when not running inside a Kubernetes cluster"
            )
        return cls(
            api_endpoint=endpoint,
            token=_read_token(conf.kube_api_token_file),
            timeout=conf.kube_api_timeout,
            retry_count=conf.kube_api_retry_count,
            verify_ssl=conf.kube_api_verify_ssl,
            ca_bundle=conf.kube_api_ca_bundle,
        )

    def _make_request(
        self,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
        not_found: Optional[Exception] = None,
        conflict: Optional[Exception] = None,
    ) -> Dict[str, Any]:
        """Make an HTTP request to the Kubernetes API.

        Args:
            method: HTTP method
            path: API path (e.g., /api/v1/namespaces/default/secrets/x)
            json_data: Request body
            not_found: Exception to raise on 404
            conflict: Exception to raise on 409

        Returns:
            Decoded JSON response

        Raises:
            KubeAPIConnectionError: Connection failed
            KubeAPITimeout: Request timed out
            KubeAPIError: Any other error status
        """
        url = self.base_url + path
        LOG.debug("Making %s request to %s", method, path)

        try:
            response = self.session.request(
                method=method,
                url=url,
                json=json_data,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
        except requests.exceptions.Timeout:
            LOG.error("Request timeout after %ss: %s", self.timeout, path)
            raise KubeAPITimeout(timeout=self.timeout)
        except requests.exceptions.ConnectionError as e:
            LOG.error("Connection error: %s, %s", path, e)
            raise KubeAPIConnectionError(details=str(e))
        except requests.exceptions.RequestException as e:
            LOG.error("Request exception: %s, %s", path, e)
            raise KubeAPIError(details=str(e))

        if response.status_code == 404 and not_found is not None:
            raise not_found
        if response.status_code == 409 and conflict is not None:
            raise conflict
        if response.status_code >= 400:
            # Kubernetes returns a Status object ({"message": "..."})
            try:
                status = response.json()
            except ValueError:
                status = None
            error_msg = response.text
            if isinstance(status, dict) and status.get("message"):
                error_msg = status["message"]
            LOG.error("API error: HTTP %s, %s", response.status_code, error_msg)
            raise KubeAPIError(details=f"HTTP {response.status_code}: {error_msg}")

        try:
            body = response.json()
        except ValueError:
            LOG.error("Invalid JSON response: HTTP %s, %s", response.status_code, path)
            raise KubeAPIError(details=f"invalid JSON response from {path}")
        if not isinstance(body, dict):
            raise KubeAPIError(details=f"unexpected response from {path}: expected a JSON object")
        return body

    # Secrets

    def get_secret(self, namespace: str, name: str) -> Dict[str, bytes]:
        """Read a secret's data.

        Returns:
            Mapping of key to decoded bytes (empty if the secret has no data)

        Raises:
            SecretNotFound: Secret does not exist
        """
        body = self._make_request(
            "GET",
            f"/api/v1/namespaces/{namespace}/secrets/{name}",
            not_found=SecretNotFound(namespace=namespace, name=name),
        )
        data = body.get("data") or {}
        return {key: base64.b64decode(value) for key, value in data.items()}

    def create_secret(
        self, namespace: str, name: str, data: Dict[str, bytes], secret_type: str = "Opaque"
    ) -> None:
        """Create a secret.

        Raises:
            SecretAlreadyExists: A secret with this name already exists
        """
        body = {
            "apiVersion": "v1",
            "kind": "Secret",
            "metadata": {"name": name, "namespace": namespace},
            "type": secret_type,
            "data": {key: base64.b64encode(value).decode("ascii") for key, value in data.items()},
        }
        self._make_request(
            "POST",
            f"/api/v1/namespaces/{namespace}/secrets",
            json_data=body,
            conflict=SecretAlreadyExists(namespace=namespace, name=name),
        )
        LOG.info("Created secret %s/%s", namespace, name)

    # Storage classes

    def get_storage_class(self, name: str) -> StorageClass:
        """Read a storage class.

        Raises:
            StorageClassNotFound: Storage class does not exist
        """
        body = self._make_request(
            "GET",
            f"/apis/storage.k8s.io/v1/storageclasses/{name}",
            not_found=StorageClassNotFound(name=name),
        )
        return StorageClass(
            name=(body.get("metadata") or {}).get("name", name),
            provisioner=body.get("provisioner", ""),
            parameters=dict(body.get("parameters") or {}),
        )
