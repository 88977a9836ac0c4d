"""
Provision service layer.

Holds the process-wide provisioner; its identity is fixed for the lifetime
of the process.
"""

from typing import Any, Dict, Optional

from cephfs_provisioner.api.models import ProvisionCreate
from cephfs_provisioner.provisioner.driver import CephFSProvisioner
from cephfs_provisioner.provisioner.models import DeleteResult, ProvisionRequest, VolumeDescriptor

_provisioner: Optional[CephFSProvisioner] = None


def set_provisioner(provisioner: Optional[CephFSProvisioner]) -> None:
    global _provisioner
    _provisioner = provisioner


def get_provisioner() -> CephFSProvisioner:
    """
    Return the configured provisioner.

    Raises:
        RuntimeError: If the server has not configured one
    """
    if _provisioner is None:
        raise RuntimeError("Provisioner is not configured")
    return _provisioner


def provision(data: ProvisionCreate) -> Dict[str, Any]:
    """
    Provision a volume.

    Args:
        data: Provision request

    Returns:
        Dictionary with the volume descriptor and its PersistentVolume manifest
    """
    request = ProvisionRequest(
        pv_name=data.pv_name,
        namespace=data.namespace,
        capacity=data.capacity,
        parameters=dict(data.parameters),
        selector=data.selector,
        reclaim_policy=data.reclaim_policy,
        storage_class=data.storage_class,
        pvc_name=data.pvc_name,
    )
    volume = get_provisioner().provision(request)
    return {"volume": volume.to_dict(), "manifest": volume.to_manifest()}


def delete(manifest: Dict[str, Any]) -> DeleteResult:
    """
    Delete the share behind a PersistentVolume.

    Args:
        manifest: PersistentVolume object

    Returns:
        DeleteResult (deleted or ignored)
    """
    volume = VolumeDescriptor.from_manifest(manifest)
    return get_provisioner().delete(volume)


def identity() -> Dict[str, str]:
    provisioner = get_provisioner()
    return {"provisioner": provisioner.provisioner_name, "identity": provisioner.identity}
