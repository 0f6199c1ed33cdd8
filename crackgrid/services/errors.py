"""
Errors raised by the data access layer.

TransportError means the store could not answer (unreachable, rejected the
request). NotFound means a single-row lookup legitimately matched nothing;
callers treat it as absence, not failure.
"""


class DataAccessError(Exception):
    """Base class for data access failures."""


class TransportError(DataAccessError):
    """The store was unreachable or rejected the request."""


class NotFound(DataAccessError):
    """A single-row lookup returned no row."""
