from __future__ import annotations


class LedgerError(Exception):
    """Base for every rejected ledger operation. The transaction is always rolled back."""
    code = "ledger_error"
    status_code = 400


class InvalidInput(LedgerError):
    code = "invalid_input"
    status_code = 400


class NotFound(LedgerError):
    code = "not_found"
    status_code = 404


class Unauthorized(LedgerError):
    code = "unauthorized"
    status_code = 403


class AlreadyFinalized(LedgerError):
    code = "already_finalized"
    status_code = 409


class InsufficientFunds(LedgerError):
    code = "insufficient_funds"
    status_code = 402


class TransferFailure(LedgerError):
    code = "transfer_failure"
    status_code = 502


class NotInitialized(LedgerError):
    code = "not_initialized"
    status_code = 503


class AlreadyInitialized(LedgerError):
    code = "already_initialized"
    status_code = 409
