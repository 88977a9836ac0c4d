"""Ownership stamps on provisioned volumes."""

import uuid
from typing import Dict

from .models import PROVISIONER_ID_ANNOTATION, SHARE_ANNOTATION, Ownership, VolumeDescriptor


def new_identity() -> str:
    """Generate a provisioner identity; call once per process."""
    return str(uuid.uuid4())


def stamp(identity: str, share: str) -> Dict[str, str]:
    """Annotations recording who created ``share``."""
    return {
        PROVISIONER_ID_ANNOTATION: identity,
        SHARE_ANNOTATION: share,
    }


def verify(volume: VolumeDescriptor, identity: str) -> Ownership:
    """
    Check whether ``volume`` was created by ``identity``.

    Returns:
        NOT_FOUND if the identity annotation is missing,
        NOT_MINE if it names another provisioner instance,
        NOT_FOUND if it matches but the share annotation is missing,
        OWNED otherwise
    """
    owner = volume.owner_identity
    if owner is None:
        return Ownership.NOT_FOUND
    if owner != identity:
        return Ownership.NOT_MINE
    if volume.share_name is None:
        return Ownership.NOT_FOUND
    return Ownership.OWNED
