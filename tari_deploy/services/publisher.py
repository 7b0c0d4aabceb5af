"""
Publisher: submit the real publish transaction and observe its outcome.

After `templates.publish` returns a transaction id the network owns the
outcome. The client makes exactly one `transactions.wait_result` call, bounded
by `wait_timeout`, and classifies what comes back:

- timed out          -> WaitForTransactionTimeout (outcome unknown, not failed)
- no result payload  -> MissingTransactionResult
- Reject / AcceptFeeRejectRest -> InvalidTransaction with the reject reason
- Accept(diff)       -> the diff, for template address extraction
"""

from __future__ import annotations

from ..adapters.wallet_daemon import METHOD_WAIT_RESULT, WalletClient
from ..errors import (
    InvalidResponse,
    InvalidTemplate,
    InvalidTransaction,
    MissingTransactionResult,
    WaitForTransactionTimeout,
)
from ..logging import get_logger
from ..models.outcome import Accepted, SubstateDiff, TimedOut, TransactionOutcome, outcome_from_result
from ..models.template import ValidatedTemplate
from ..models.wallet import PublishTemplateRequest, WaitTransactionResultResponse
from .loader import template_hash
from .stages import STAGE_WAIT, stage_scope

log = get_logger(__name__)


async def submit_template(
    session: WalletClient,
    validated: ValidatedTemplate,
    account: str,
    max_fee: int,
) -> str:
    """Send the publish transaction and return its id."""
    if template_hash(validated.binary) != validated.hash:
        raise InvalidTemplate("template binary changed after validation")
    request = PublishTemplateRequest(
        binary=validated.binary,
        fee_account=account,
        max_fee=max_fee,
        detect_inputs=True,
        dry_run=False,
    )
    response = await session.publish_template(request)
    log.info(
        "template_submitted",
        transaction_id=response.transaction_id,
        template_name=validated.template_name,
        max_fee=max_fee,
    )
    return response.transaction_id


def classify_wait_response(transaction_id: str, response: WaitTransactionResultResponse) -> TransactionOutcome:
    if response.timed_out:
        return TimedOut()
    if response.result is None:
        raise MissingTransactionResult(transaction_id)
    try:
        return outcome_from_result(response.result)
    except ValueError as e:
        raise InvalidResponse(str(e), method=METHOD_WAIT_RESULT, data=response.result) from e


async def wait_for_outcome(session: WalletClient, transaction_id: str, wait_timeout: int) -> SubstateDiff:
    """
    Wait (server-side, bounded) for `transaction_id` to finalize and return
    its state diff when it was fully accepted.
    """
    response = await session.wait_transaction_result(transaction_id, wait_timeout)
    outcome = classify_wait_response(transaction_id, response)
    log.info("transaction_finalized", transaction_id=transaction_id, outcome=outcome.status)

    if isinstance(outcome, TimedOut):
        raise WaitForTransactionTimeout(transaction_id)
    if isinstance(outcome, Accepted):
        return outcome.diff
    raise InvalidTransaction(transaction_id, response.status or outcome.status, outcome.reason)


async def publish_and_wait(
    session: WalletClient,
    validated: ValidatedTemplate,
    account: str,
    max_fee: int,
    wait_timeout: int,
) -> SubstateDiff:
    transaction_id = await submit_template(session, validated, account, max_fee)
    with stage_scope(STAGE_WAIT, transaction_id=transaction_id, timeout_secs=wait_timeout):
        return await wait_for_outcome(session, transaction_id, wait_timeout)


__all__ = ["submit_template", "classify_wait_response", "wait_for_outcome", "publish_and_wait"]
