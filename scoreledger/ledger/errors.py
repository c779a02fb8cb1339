"""Error taxonomy shared by the ledger, the stores and the HTTP layer."""

from __future__ import annotations


class LedgerError(Exception):
    pass


class ValidationError(LedgerError):
    """Bad submission or query input. Maps to a 4xx response."""


class StoreUnavailable(LedgerError):
    """Store could not be reached, timed out, or failed mid-operation.

    Retryable by the caller; every store write is all-or-nothing.
    """


class ConfigError(LedgerError):
    """Invalid process configuration. Fatal at startup."""
