"""
Persistence faults raised by the gateway.

Business rejections (duplicate email, wrong password) are not errors:
the credential service reports them by returning None.
"""


class PersistenceError(Exception):
    """A read against the store failed."""


class StoreUnavailableError(PersistenceError):
    """The store could not be reached or a session could not be opened."""
