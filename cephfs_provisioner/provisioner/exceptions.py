"""CephFS provisioner exceptions.

Every exception carries a class-level ``retryable`` flag so that the caller
(the provision controller or the HTTP layer) can decide on backoff without
inspecting messages.
"""


class CephFSProvisionerException(Exception):
    """Base exception for provisioner errors."""

    message = "An unknown exception occurred."
    retryable = False

    def __init__(self, message=None, **kwargs):
        """Initialize exception with optional custom message."""
        self.kwargs = kwargs
        if message:
            self.message = message
        super(CephFSProvisionerException, self).__init__(self.message % kwargs)


# Validation errors: caller must change its input before retrying


class ProvisionValidationError(CephFSProvisionerException):
    """Invalid request or configuration bundle."""

    message = "Invalid provisioning request: %(details)s"


class InvalidParameter(ProvisionValidationError):
    """Unrecognized configuration key.

    Unknown keys are never ignored so that a misspelled key cannot silently
    fall back to a default.
    """

    message = "invalid option %(option)r"


class DuplicateParameter(ProvisionValidationError):
    """The same key was given more than once (case-insensitively)."""

    message = "option %(option)r specified more than once"


class MissingParameter(ProvisionValidationError):
    """Required configuration key is absent or empty."""

    message = "missing Ceph %(parameter)s"


class SelectorNotSupported(ProvisionValidationError):
    """Claim carries a selector."""

    message = "claim Selector is not supported"


class InvalidVolume(ProvisionValidationError):
    """Volume descriptor or manifest cannot be interpreted."""

    message = "Invalid volume %(volume)s: %(details)s"


# Dependency errors: secret store / class lookup, may be transient


class DependencyError(CephFSProvisionerException):
    """External dependency failed or returned nothing usable."""

    message = "Dependency error: %(details)s"
    retryable = True


class SecretNotFound(DependencyError):
    """Secret does not exist."""

    message = "Secret %(namespace)s/%(name)s not found"


class SecretEmpty(DependencyError):
    """Secret exists but holds no usable credential."""

    message = "no secret found in %(namespace)s/%(name)s"


class SecretInvalid(DependencyError):
    """Secret value is not a valid UTF-8 key."""

    message = "Secret %(namespace)s/%(name)s does not hold a valid key"


class SecretAlreadyExists(DependencyError):
    """Secret creation conflicted with an existing object."""

    message = "Secret %(namespace)s/%(name)s already exists"


class StorageClassNotFound(DependencyError):
    """Storage class does not exist."""

    message = "StorageClass %(name)s not found"


class VolumeClassMissing(DependencyError):
    """Volume carries no storage class reference."""

    message = "Volume %(volume)s has no class annotation"
    retryable = False


class KubeAPIError(DependencyError):
    """Kubernetes API returned an error."""

    message = "Kubernetes API error: %(details)s"


class KubeAPIConnectionError(KubeAPIError):
    """Kubernetes API is unreachable."""

    message = "Failed to connect to Kubernetes API: %(details)s"


class KubeAPITimeout(KubeAPIError):
    """Kubernetes API request timed out."""

    message = "Kubernetes API request timed out after %(timeout)s seconds"


# Allocation agent errors


class AgentError(CephFSProvisionerException):
    """Allocation agent failed.

    The combined process output is kept on the exception for diagnostics and
    is never part of a successful result.
    """

    message = "Allocation agent failed: %(details)s"

    def __init__(self, message=None, output="", returncode=None, **kwargs):
        self.output = output
        self.returncode = returncode
        super(AgentError, self).__init__(message, **kwargs)


class AgentInvalidOutput(AgentError):
    """Agent exited cleanly but its output is unusable."""

    message = "invalid provisioner output: %(details)s"


# Ownership


class OwnershipNotFound(CephFSProvisionerException):
    """Ownership annotations are missing from a volume.

    A volume managed by this provisioner always carries them, so this is a
    hard error rather than an ignorable outcome.
    """

    message = "%(annotation)s annotation not found on PV %(volume)s"
