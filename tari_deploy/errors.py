"""
Typed error classes for tari-deploy.

Every failure of the deployment pipeline is raised as a subclass of
`DeployError`, so callers can catch specific failure modes while still being
able to catch the base class. Each error carries the pipeline ``stage`` it
escaped from (set by the deployer once the error crosses a stage boundary).

Categories
----------
- validation   : TemplateReadError, InvalidTemplate
- transport    : WalletTransportError (wallet daemon unreachable)
- protocol     : WalletProtocolError and its subclasses (daemon answered, but
                 broke the expected contract)
- funds        : InsufficientBalance (client-side pre-check)
- outcome      : InvalidTransaction (rejected or partially rejected)
- timeout      : WaitForTransactionTimeout (outcome unknown within the window)
- config       : ConfigError
"""

from __future__ import annotations

from typing import Any, Optional

__all__ = [
    "DeployError",
    "ConfigError",
    "TemplateValidationError",
    "TemplateReadError",
    "InvalidTemplate",
    "WalletError",
    "WalletTransportError",
    "WalletProtocolError",
    "SessionRejected",
    "InvalidResponse",
    "MissingTransactionResult",
    "MissingPublishedTemplate",
    "InsufficientBalance",
    "InvalidTransaction",
    "WaitForTransactionTimeout",
]


class DeployError(Exception):
    """Base class for all tari-deploy errors."""

    category = "error"

    def __init__(self, message: str, *, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        return self.message


class ConfigError(DeployError):
    """Unknown network, unreadable project config or missing account."""

    category = "config"


# ------------------------------ validation -----------------------------------


class TemplateValidationError(DeployError):
    category = "validation"


class TemplateReadError(TemplateValidationError):
    """The template file could not be read."""

    def __init__(self, path: Any, reason: str):
        super().__init__(f"Failed to read template binary at {path}: {reason}")
        self.path = path
        self.reason = reason


class InvalidTemplate(TemplateValidationError):
    """The binary is not a structurally valid template module."""

    def __init__(self, diagnostic: str):
        super().__init__(f"Invalid template: {diagnostic}")
        self.diagnostic = diagnostic


# ------------------------------ wallet daemon ---------------------------------


class WalletError(DeployError):
    """Base class for wallet daemon client errors."""


class WalletTransportError(WalletError):
    """Could not reach the wallet daemon (connection, DNS, TLS, timeout, HTTP status)."""

    category = "transport"

    def __init__(self, message: str, *, method: Optional[str] = None):
        super().__init__(message)
        self.method = method


class WalletProtocolError(WalletError):
    """The wallet daemon responded but violated the expected contract."""

    category = "protocol"

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        code: Optional[int] = None,
        data: Any = None,
    ):
        super().__init__(message)
        self.method = method
        self.code = code
        self.data = data

    def __str__(self) -> str:
        where = []
        if self.method:
            where.append(f"method={self.method}")
        if self.code is not None:
            where.append(f"code={self.code}")
        if not where:
            return self.message
        return f"{self.message} ({', '.join(where)})"


class SessionRejected(WalletProtocolError):
    """The wallet daemon refused the login handshake."""


class InvalidResponse(WalletProtocolError):
    """A response lacked a field the contract guarantees (e.g. the dry-run fee)."""


class MissingTransactionResult(WalletProtocolError):
    def __init__(self, transaction_id: str):
        super().__init__(f"Missing transaction result for {transaction_id}")
        self.transaction_id = transaction_id


class MissingPublishedTemplate(WalletProtocolError):
    def __init__(self, transaction_id: Optional[str] = None):
        suffix = f" in transaction {transaction_id}" if transaction_id else ""
        super().__init__(f"Transaction was accepted but no template substate was created{suffix}")
        self.transaction_id = transaction_id


# ------------------------------ pipeline outcomes -----------------------------


class InsufficientBalance(DeployError):
    category = "funds"

    def __init__(self, current: int, required: int):
        super().__init__(
            f"Insufficient balance! Current balance: {current}, Estimated fee: {required}"
        )
        self.current = current
        self.required = required


class InvalidTransaction(DeployError):
    category = "outcome"

    def __init__(self, transaction_id: str, status: str, reason: str):
        super().__init__(f"Invalid transaction {transaction_id}: {status} - {reason}")
        self.transaction_id = transaction_id
        self.status = status
        self.reason = reason


class WaitForTransactionTimeout(DeployError):
    """Finality was not observed in time. The transaction may still land later."""

    category = "timeout"

    def __init__(self, transaction_id: str):
        super().__init__(
            f"Timed out waiting for transaction {transaction_id}; its outcome is unknown "
            "and it may still be finalized later"
        )
        self.transaction_id = transaction_id
