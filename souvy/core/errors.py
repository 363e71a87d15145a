class SouvyError(Exception):
    """Base class for errors raised by the studio."""


class AssetFetchError(SouvyError):
    """An image could not be downloaded, read from disk, or decoded."""
