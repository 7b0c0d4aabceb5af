"""
Balance guard: refuse to publish when the fee account cannot cover the fee.

Advisory only; the network checks the balance again at submission time.
"""

from __future__ import annotations

from typing import Optional

from ..adapters.wallet_daemon import WalletClient
from ..config import Settings, get_settings
from ..errors import InsufficientBalance
from ..logging import get_logger
from .session import ClientFactory, with_session

log = get_logger(__name__)


async def native_balance(session: WalletClient, account: str, resource_address: str) -> int:
    """Balance of `account` in `resource_address`; 0 when the account holds none."""
    response = await session.get_balances(account, refresh=False)
    return response.balance_of(resource_address)


def ensure_affordable(current: int, fee: int) -> None:
    if fee > current:
        raise InsufficientBalance(current, fee)


async def check_balance(
    endpoint: str,
    account: str,
    fee: int,
    *,
    settings: Optional[Settings] = None,
    client_factory: Optional[ClientFactory] = None,
) -> None:
    """
    Raise InsufficientBalance when `account` holds less native token than
    `fee`. An equal balance is enough.
    """
    settings = settings or get_settings()
    current = await with_session(
        endpoint,
        lambda session: native_balance(session, account, settings.native_resource_address),
        settings=settings,
        client_factory=client_factory,
    )
    log.info("balance_checked", account=account, balance=current, fee=fee)
    ensure_affordable(current, fee)


__all__ = ["native_balance", "ensure_affordable", "check_balance"]
