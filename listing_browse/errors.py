"""Exceptions raised while talking to the remote listing store."""


class BrowseError(Exception):
    """Base class for listing-browse errors."""


class RemoteStoreError(BrowseError):
    """The remote store rejected or failed a request."""


class IndexMissingError(RemoteStoreError):
    """The store has no composite index for the requested constraints + sort."""


class RemoteUnavailableError(RemoteStoreError):
    """Network or availability failure; the same request may succeed later."""
