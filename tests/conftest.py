"""
Pytest configuration and fixtures.
"""

import shutil
import tempfile
from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

import pytest

from cephfs_provisioner.provisioner.exceptions import SecretAlreadyExists, SecretNotFound
from cephfs_provisioner.provisioner.models import StorageClass

ADMIN_KEY = b"AQBadminkey=="

CLASS_PARAMETERS = {
    "monitors": "10.0.0.1:6789,10.0.0.2:6789",
    "adminSecretName": "ceph-admin",
    "adminSecretNamespace": "kube-system",
}


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: unit tests")
    config.addinivalue_line("markers", "integration: integration tests")


class FakeSecretStore:
    """In-memory secret store keyed by (namespace, name)."""

    def __init__(self, secrets=None):
        self.secrets = dict(secrets or {})
        self.created = []

    def get_secret(self, namespace, name):
        try:
            return dict(self.secrets[(namespace, name)])
        except KeyError:
            raise SecretNotFound(namespace=namespace, name=name)

    def create_secret(self, namespace, name, data, secret_type="Opaque"):
        if (namespace, name) in self.secrets:
            raise SecretAlreadyExists(namespace=namespace, name=name)
        self.secrets[(namespace, name)] = dict(data)
        self.created.append((namespace, name, secret_type))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)


@pytest.fixture
def mock_subprocess():
    """Mock subprocess.run for testing."""
    with patch("subprocess.run") as mock:
        yield mock


@pytest.fixture
def secret_store():
    """Secret store holding the Ceph admin key."""
    return FakeSecretStore({("kube-system", "ceph-admin"): {"key": ADMIN_KEY}})


@pytest.fixture
def storage_classes():
    """Mock storage class lookup returning the 'cephfs' class."""
    classes = Mock()
    classes.get_storage_class.return_value = StorageClass(
        name="cephfs", provisioner="ceph.com/cephfs", parameters=dict(CLASS_PARAMETERS)
    )
    return classes


@pytest.fixture
def agent_create_result():
    """A successful agent 'create' run."""
    return MagicMock(
        returncode=0,
        stdout='{"path": "/volumes/kubernetes/vol1", "user": "dyn-user-1", "auth": "AQDuserkey=="}',
        stderr="",
    )
