"""CephFS dynamic provisioner.

Provision and Delete are the two operations the external provision
controller calls. Neither keeps state between calls apart from the
provisioner identity, so both are safe to run concurrently for different
volumes.

Architecture:
    - Each claim gets a new CephFS share ``dyn-pvc-<uuid>`` and a dedicated
      Ceph user ``dyn-user-<uuid>``, created by the allocation agent
    - The user's key is published as Secret ``ceph-<user>-secret`` in the
      claim namespace
    - The PersistentVolume is stamped with this instance's identity and the
      share name; only the same instance will delete it
"""

import uuid
from abc import ABC, abstractmethod
from typing import Optional, Protocol

from oslo_log import log as logging

from . import credentials
from . import ownership
from .agent import AllocationAgentClient
from .credentials import SecretStore
from .exceptions import (
    AgentInvalidOutput,
    InvalidVolume,
    OwnershipNotFound,
    SelectorNotSupported,
    VolumeClassMissing,
)
from .models import (
    PROVISIONED_BY_ANNOTATION,
    PROVISIONER_ID_ANNOTATION,
    SHARE_ANNOTATION,
    STORAGE_CLASS_ANNOTATION,
    DeleteResult,
    Ownership,
    ProvisionRequest,
    StorageClass,
    VolumeDescriptor,
)
from .parameters import resolve_parameters

LOG = logging.getLogger(__name__)

DEFAULT_PROVISIONER_NAME = "ceph.com/cephfs"
SHARE_PREFIX = "dyn-pvc-"
USER_PREFIX = "dyn-user-"
SECRET_KEY = "key"


class StorageClassLookup(Protocol):
    def get_storage_class(self, name: str) -> StorageClass:
        ...


class Provisioner(ABC):
    """Capability expected by the provision controller."""

    @abstractmethod
    def provision(self, request: ProvisionRequest) -> VolumeDescriptor:
        """Create storage for ``request`` and describe it as a volume.

        Raises:
            CephFSProvisionerException: Provisioning failed; nothing was published
        """
        pass

    @abstractmethod
    def delete(self, volume: VolumeDescriptor) -> DeleteResult:
        """Remove the storage behind ``volume``.

        Returns:
            DeleteResult; IGNORED when the volume is not ours to delete

        Raises:
            CephFSProvisionerException: Deletion failed
        """
        pass


def secret_name_for_user(user: str) -> str:
    return f"ceph-{user}-secret"


def normalize_export_path(path: str) -> str:
    """Strip anything before the first ``/`` (e.g. a monitor prefix)."""
    idx = path.find("/")
    if idx < 0:
        raise AgentInvalidOutput(details=f"path {path!r} is not absolute", output=path)
    return path[idx:]


class CephFSProvisioner(Provisioner):
    """Provisions CephFS shares through the allocation agent."""

    def __init__(
        self,
        secrets: SecretStore,
        classes: StorageClassLookup,
        agent: Optional[AllocationAgentClient] = None,
        identity: Optional[str] = None,
        provisioner_name: str = DEFAULT_PROVISIONER_NAME,
    ):
        """Initialize the provisioner.

        Args:
            secrets: Secret store used for admin keys and share secrets
            classes: Storage class lookup used on delete
            agent: Allocation agent client (default: agent at the default path)
            identity: Provisioner identity; generated if not given. Must stay
                the same for the lifetime of the process.
            provisioner_name: Name published on provisioned volumes
        """
        self.secrets = secrets
        self.classes = classes
        self.agent = agent or AllocationAgentClient()
        self.provisioner_name = provisioner_name
        self._identity = identity or ownership.new_identity()

    @property
    def identity(self) -> str:
        return self._identity

    def provision(self, request: ProvisionRequest) -> VolumeDescriptor:
        if request.selector is not None:
            raise SelectorNotSupported()

        params = resolve_parameters(request.parameters)
        connection = credentials.connect(self.secrets, params)

        share = f"{SHARE_PREFIX}{uuid.uuid4()}"
        user = f"{USER_PREFIX}{uuid.uuid4()}"

        LOG.info(
            "Provisioning share %s for claim %s/%s (volume %s)",
            share,
            request.namespace,
            request.pvc_name or "-",
            request.pv_name,
        )
        result = self.agent.create(share, user, connection)
        export_path = normalize_export_path(result.path)

        # If this fails the share is left behind; the controller retries
        # with a fresh share name.
        secret_name = secret_name_for_user(user)
        self.secrets.create_secret(
            request.namespace,
            secret_name,
            {SECRET_KEY: result.secret.encode("utf-8")},
        )

        annotations = ownership.stamp(self.identity, share)
        annotations[PROVISIONED_BY_ANNOTATION] = self.provisioner_name
        if request.storage_class:
            annotations[STORAGE_CLASS_ANNOTATION] = request.storage_class

        volume = VolumeDescriptor(
            name=request.pv_name,
            capacity=request.capacity,
            reclaim_policy=request.reclaim_policy,
            monitors=connection.monitors,
            export_path=export_path,
            granted_user=result.user,
            secret_name=secret_name,
            secret_namespace=request.namespace,
            storage_class=request.storage_class,
            annotations=annotations,
        )

        LOG.info(
            "successfully created CephFS share %s: path=%s user=%s monitors=%s",
            share,
            export_path,
            result.user,
            ",".join(connection.monitors),
        )
        return volume

    def delete(self, volume: VolumeDescriptor) -> DeleteResult:
        state = ownership.verify(volume, self.identity)
        if state == Ownership.NOT_FOUND:
            missing = (
                PROVISIONER_ID_ANNOTATION if volume.owner_identity is None else SHARE_ANNOTATION
            )
            raise OwnershipNotFound(annotation=missing, volume=volume.name)
        if state == Ownership.NOT_MINE:
            LOG.debug(
                "Skipping volume %s: owned by provisioner %s", volume.name, volume.owner_identity
            )
            return DeleteResult.ignore("identity annotation on PV does not match ours")

        if not volume.granted_user:
            raise InvalidVolume(volume=volume.name, details="no CephFS user recorded")

        storage_class = self.get_class_for_volume(volume)
        params = resolve_parameters(storage_class.parameters)
        connection = credentials.connect(self.secrets, params)

        self.agent.destroy(volume.share_name, volume.granted_user, connection)
        LOG.info("Deleted CephFS share %s (user %s)", volume.share_name, volume.granted_user)
        return DeleteResult.deleted()

    def get_class_for_volume(self, volume: VolumeDescriptor) -> StorageClass:
        """Look up the storage class the volume was provisioned from.

        Raises:
            VolumeClassMissing: Volume has no class reference
            StorageClassNotFound: Class no longer exists
        """
        class_name = volume.class_name
        if not class_name:
            raise VolumeClassMissing(volume=volume.name)
        return self.classes.get_storage_class(class_name)
