from __future__ import annotations

"""
Wallet daemon JSON-RPC models.

Requests are built fresh for every call; responses are validated loosely
(unknown fields are ignored) so newer daemons that add fields keep working.
Amounts are integers in micro-units of the native token.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_serializer


class _Response(BaseModel):
    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------------------
# auth.*
# ---------------------------------------------------------------------------


class AuthRequestResponse(_Response):
    auth_token: str = Field(..., min_length=1)
    valid_for_secs: Optional[int] = None


class AuthAcceptResponse(_Response):
    permissions_token: str = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# accounts.get_balances
# ---------------------------------------------------------------------------


class BalanceEntry(_Response):
    resource_address: str
    balance: int = 0
    resource_type: Optional[str] = None
    token_symbol: Optional[str] = None


class GetBalancesResponse(_Response):
    address: Optional[Any] = None
    balances: List[BalanceEntry] = Field(default_factory=list)

    def balance_of(self, resource_address: str) -> int:
        """Balance held in `resource_address`; an absent entry counts as 0."""
        for entry in self.balances:
            if entry.resource_address == resource_address:
                return entry.balance
        return 0


# ---------------------------------------------------------------------------
# templates.publish
# ---------------------------------------------------------------------------


class PublishTemplateRequest(BaseModel):
    """
    Publish a template binary.

    Fields
    ------
    binary: bytes
        Raw WASM bytes; serialized as a JSON array of byte values.
    fee_account: str
        Component address or account name paying the fee.
    max_fee: int
        Upper bound the account agrees to pay.
    detect_inputs: bool
        Let the daemon resolve the transaction inputs.
    dry_run: bool
        Execute without committing; the response then carries `dry_run_fee`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    binary: bytes = Field(..., repr=False)
    fee_account: str = Field(..., min_length=1)
    max_fee: NonNegativeInt
    detect_inputs: bool = True
    dry_run: bool = False

    @field_serializer("binary")
    def _binary_as_byte_list(self, v: bytes) -> List[int]:
        return list(v)


class PublishTemplateResponse(_Response):
    transaction_id: str = Field(..., min_length=1)
    dry_run_fee: Optional[int] = None


# ---------------------------------------------------------------------------
# transactions.wait_result
# ---------------------------------------------------------------------------


class WaitTransactionResultResponse(_Response):
    transaction_id: Optional[str] = None
    timed_out: bool = False
    status: Optional[str] = None
    result: Optional[Any] = None
    final_fee: Optional[int] = None


__all__ = [
    "AuthRequestResponse",
    "AuthAcceptResponse",
    "BalanceEntry",
    "GetBalancesResponse",
    "PublishTemplateRequest",
    "PublishTemplateResponse",
    "WaitTransactionResultResponse",
]
