"""
Wallet session handling.

Every pipeline operation gets its own authenticated session: a fresh client,
a fresh login handshake, and a closed HTTP client afterwards. Tokens are never
shared between operations.

    fee = await with_session(url, lambda s: dry_run_fee(s, validated, account))

    async with wallet_session(url) as session:
        balances = await session.get_balances(account)
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Optional, TypeVar

from ..adapters.wallet_daemon import WalletClient, WalletDaemonClient, WalletDaemonConfig
from ..config import Settings, get_settings
from ..logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

ClientFactory = Callable[[str, Settings], WalletClient]


def default_client_factory(endpoint: str, settings: Settings) -> WalletClient:
    return WalletDaemonClient(WalletDaemonConfig(url=endpoint, timeout_s=settings.http_timeout_secs))


@asynccontextmanager
async def wallet_session(
    endpoint: str,
    *,
    settings: Optional[Settings] = None,
    client_factory: Optional[ClientFactory] = None,
) -> AsyncIterator[WalletClient]:
    """
    Open a client for `endpoint`, log in, and yield the authenticated client.

    Raises WalletTransportError when the daemon cannot be reached and
    SessionRejected when it refuses the login.
    """
    settings = settings or get_settings()
    factory = client_factory or default_client_factory
    client = factory(endpoint, settings)
    try:
        await client.login(list(settings.auth_permissions), settings.session_name)
        log.debug("wallet_session_opened", endpoint=endpoint)
        yield client
    finally:
        await client.aclose()


async def with_session(
    endpoint: str,
    operation: Callable[[WalletClient], Awaitable[T]],
    *,
    settings: Optional[Settings] = None,
    client_factory: Optional[ClientFactory] = None,
) -> T:
    """Run `operation` with a freshly authenticated session and return its result."""
    async with wallet_session(endpoint, settings=settings, client_factory=client_factory) as session:
        return await operation(session)


__all__ = ["ClientFactory", "default_client_factory", "wallet_session", "with_session"]
