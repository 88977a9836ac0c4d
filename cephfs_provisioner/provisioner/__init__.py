"""CephFS dynamic volume provisioner.

Leaf components (parameters, credentials, agent, ownership) are composed by
``driver.CephFSProvisioner`` into the Provision/Delete capability expected by
the external provision controller.
"""

from .driver import CephFSProvisioner, Provisioner
from .models import DeleteResult, ProvisionRequest, VolumeDescriptor

__all__ = [
    "CephFSProvisioner",
    "DeleteResult",
    "Provisioner",
    "ProvisionRequest",
    "VolumeDescriptor",
]
