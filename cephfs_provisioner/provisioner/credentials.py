"""Admin credential lookup."""

from typing import Dict, Optional, Protocol

from oslo_log import log as logging

from .exceptions import SecretEmpty, SecretInvalid
from .models import ClusterConnection, ClusterParameters, SecretReference

LOG = logging.getLogger(__name__)

PREFERRED_KEY = "key"


class SecretStore(Protocol):
    """Namespaced secret store (Kubernetes Secrets)."""

    def get_secret(self, namespace: str, name: str) -> Dict[str, bytes]:
        ...

    def create_secret(
        self, namespace: str, name: str, data: Dict[str, bytes], secret_type: str = "Opaque"
    ) -> None:
        ...


def _select_entry(data: Dict[str, bytes], ref: SecretReference) -> Optional[bytes]:
    if len(data) == 1:
        return next(iter(data.values()))

    LOG.warning(
        "Secret %s/%s has %d keys; expected exactly one admin key",
        ref.namespace,
        ref.name,
        len(data),
    )
    if PREFERRED_KEY in data:
        return data[PREFERRED_KEY]
    return data[sorted(data)[0]]


def resolve_admin_secret(store: SecretStore, ref: SecretReference) -> str:
    """Fetch the admin key from a secret.

    The key name inside the secret is not standardized, so any single entry
    is accepted. With several entries, ``key`` wins, then the first key in
    sorted order.

    Raises:
        SecretNotFound: Secret does not exist (raised by the store)
        KubeAPIError: Secret store unreachable (raised by the store)
        SecretEmpty: Secret holds no entries or an empty value
        SecretInvalid: Selected value is not valid UTF-8
    """
    data = store.get_secret(ref.namespace, ref.name)
    if not data:
        raise SecretEmpty(namespace=ref.namespace, name=ref.name)

    value = _select_entry(data, ref)
    if isinstance(value, bytes):
        try:
            value = value.decode("utf-8")
        except UnicodeDecodeError:
            raise SecretInvalid(namespace=ref.namespace, name=ref.name)
    if not value:
        raise SecretEmpty(namespace=ref.namespace, name=ref.name)
    return value


def connect(store: SecretStore, params: ClusterParameters) -> ClusterConnection:
    """Resolve the admin secret for ``params`` into a full connection."""
    return params.connect(resolve_admin_secret(store, params.secret_ref))
