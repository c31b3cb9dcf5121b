"""Exceptions for sls_toolkit."""

class SlsError(Exception):
    """Base exception for sls_toolkit."""


class SlsConnectionError(SlsError):
    """Connection to the log store failed."""


class InvalidPayloadError(SlsError):
    """Query payload could not be decoded into the expected shape."""


class RemoteFetchError(SlsError):
    """The upstream log search failed."""
