from __future__ import annotations

"""
Typed data carried through the deployment pipeline.

Submodules:
- template.py → TemplatePath, TemplateBinary, ValidatedTemplate, CheckBalanceResult
- wallet.py   → wallet daemon request/response models (pydantic)
- outcome.py  → SubstateDiff and the TransactionOutcome variants
"""

from .outcome import (
    Accepted,
    PartiallyAccepted,
    Rejected,
    SubstateDiff,
    TimedOut,
    TransactionOutcome,
)
from .template import (
    CheckBalanceResult,
    Template,
    TemplateBinary,
    TemplatePath,
    ValidatedTemplate,
)
from .wallet import (
    AuthAcceptResponse,
    AuthRequestResponse,
    BalanceEntry,
    GetBalancesResponse,
    PublishTemplateRequest,
    PublishTemplateResponse,
    WaitTransactionResultResponse,
)

__all__ = [
    "Accepted",
    "PartiallyAccepted",
    "Rejected",
    "SubstateDiff",
    "TimedOut",
    "TransactionOutcome",
    "CheckBalanceResult",
    "Template",
    "TemplateBinary",
    "TemplatePath",
    "ValidatedTemplate",
    "AuthAcceptResponse",
    "AuthRequestResponse",
    "BalanceEntry",
    "GetBalancesResponse",
    "PublishTemplateRequest",
    "PublishTemplateResponse",
    "WaitTransactionResultResponse",
]
