"""Domain errors shared by services and controllers."""


class NotFoundError(LookupError):
    """Upload or file does not exist."""


class SandboxViolationError(PermissionError):
    """A resolved path would leave the storage sandbox."""


class DuplicateUploadIdError(ValueError):
    """An upload with the same id already exists."""
