"""
Fee estimation via a dry-run publish.
"""

from __future__ import annotations

from typing import Optional

from ..adapters.wallet_daemon import METHOD_PUBLISH_TEMPLATE, WalletClient
from ..config import Settings
from ..errors import InvalidResponse
from ..logging import get_logger
from ..models.template import ValidatedTemplate
from ..models.wallet import PublishTemplateRequest
from .session import ClientFactory, with_session

log = get_logger(__name__)

# Upper bound sent with the dry run only; the real publish uses the approved fee.
DRY_RUN_MAX_FEE = 1_000_000


async def dry_run_fee(session: WalletClient, validated: ValidatedTemplate, account: str) -> int:
    request = PublishTemplateRequest(
        binary=validated.binary,
        fee_account=account,
        max_fee=DRY_RUN_MAX_FEE,
        detect_inputs=True,
        dry_run=True,
    )
    response = await session.publish_template(request)
    if response.dry_run_fee is None:
        raise InvalidResponse("Dry run did not report a fee", method=METHOD_PUBLISH_TEMPLATE)
    log.info("fee_estimated", account=account, fee=response.dry_run_fee, size=validated.size)
    return response.dry_run_fee


async def estimate_fee(
    endpoint: str,
    validated: ValidatedTemplate,
    account: str,
    *,
    settings: Optional[Settings] = None,
    client_factory: Optional[ClientFactory] = None,
) -> int:
    """Estimate the fee for publishing `validated` from `account` (fresh session)."""
    return await with_session(
        endpoint,
        lambda session: dry_run_fee(session, validated, account),
        settings=settings,
        client_factory=client_factory,
    )


__all__ = ["DRY_RUN_MAX_FEE", "dry_run_fee", "estimate_fee"]
