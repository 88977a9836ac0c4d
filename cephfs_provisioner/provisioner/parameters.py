"""Storage class parameter parsing.

Recognized keys (case-insensitive):

    cluster               Ceph cluster name (default: ceph)
    monitors              Comma separated monitor endpoints (required)
    adminId               Admin client id (default: admin)
    adminSecretName       Secret holding the admin key (required)
    adminSecretNamespace  Namespace of that secret (default: default)
"""

from typing import Dict, List, Mapping

from .exceptions import DuplicateParameter, InvalidParameter, MissingParameter
from .models import ClusterParameters, SecretReference

DEFAULT_CLUSTER = "ceph"
DEFAULT_ADMIN_ID = "admin"
DEFAULT_ADMIN_SECRET_NAMESPACE = "default"

_KNOWN_KEYS = ("cluster", "monitors", "adminid", "adminsecretname", "adminsecretnamespace")


def parse_monitors(value: str) -> List[str]:
    """Split a comma separated monitor list, dropping empty entries."""
    return [m.strip() for m in value.split(",") if m.strip()]


def resolve_parameters(parameters: Mapping[str, str]) -> ClusterParameters:
    """Validate a configuration bundle.

    The bundle is checked as a whole: nothing is returned unless every key is
    recognized and every required value is present.

    Args:
        parameters: Storage class parameters

    Returns:
        ClusterParameters with monitors and admin secret reference

    Raises:
        InvalidParameter: Unrecognized key
        DuplicateParameter: Key given twice with different case
        MissingParameter: adminSecretName or monitors missing/empty
    """
    normalized: Dict[str, str] = {}
    for key, value in (parameters or {}).items():
        lowered = key.lower()
        if lowered not in _KNOWN_KEYS:
            raise InvalidParameter(option=key)
        if lowered in normalized:
            raise DuplicateParameter(option=key)
        normalized[lowered] = value

    admin_secret_name = normalized.get("adminsecretname", "")
    if not admin_secret_name:
        raise MissingParameter(parameter="admin secret name")

    monitors = parse_monitors(normalized.get("monitors", ""))
    if len(monitors) < 1:
        raise MissingParameter(parameter="monitors")

    return ClusterParameters(
        cluster=normalized.get("cluster") or DEFAULT_CLUSTER,
        admin_id=normalized.get("adminid") or DEFAULT_ADMIN_ID,
        monitors=tuple(monitors),
        secret_ref=SecretReference(
            namespace=normalized.get("adminsecretnamespace") or DEFAULT_ADMIN_SECRET_NAMESPACE,
            name=admin_secret_name,
        ),
    )
