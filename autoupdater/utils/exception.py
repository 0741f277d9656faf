class UpdateError(Exception):
    """Base exception for update-related errors."""

    pass


class ManifestResolutionError(UpdateError):
    """
    Raised when the update manifest could not be resolved.
    Nothing has been downloaded when this is raised.
    """

    pass


class ManifestUnreachableError(ManifestResolutionError):
    """Raised when the manifest source cannot be fetched."""

    pass


class ManifestMalformedError(ManifestResolutionError):
    """
    Raised when the manifest is not valid XML, has no entry
    for the program, or an entry lacks a required field.
    """

    pass


class DownloadFailedError(UpdateError):
    """Raised when the update package cannot be downloaded."""

    pass


class ExtractFailedError(UpdateError):
    """
    Describes a failed archive extraction.

    Never raised by the update sequence, only carried in an ExtractResult.
    """

    pass


class CleanupFailedError(UpdateError):
    """Raised when the staging folder cannot be removed."""

    pass
