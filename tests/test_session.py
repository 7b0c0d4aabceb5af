from __future__ import annotations

import pytest

from tari_deploy.errors import SessionRejected
from tari_deploy.services.session import wallet_session, with_session

from .fakes import ENDPOINT, FakeWalletClient


@pytest.mark.asyncio
async def test_with_session_logs_in_before_operation_and_closes(wallet, settings):
    async def operation(session):
        assert wallet.logins == 1
        return "done"

    result = await with_session(ENDPOINT, operation, settings=settings, client_factory=wallet.factory)

    assert result == "done"
    assert wallet.calls[0] == ("connect", ENDPOINT)
    assert wallet.calls[1] == ("login", (["Admin"], "default"))
    assert wallet.closes == 1


@pytest.mark.asyncio
async def test_every_operation_gets_a_fresh_login(wallet, settings):
    async def noop(session):
        return None

    await with_session(ENDPOINT, noop, settings=settings, client_factory=wallet.factory)
    await with_session(ENDPOINT, noop, settings=settings, client_factory=wallet.factory)

    assert wallet.logins == 2
    assert wallet.closes == 2


@pytest.mark.asyncio
async def test_client_closed_when_operation_fails(wallet, settings):
    async def boom(session):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await with_session(ENDPOINT, boom, settings=settings, client_factory=wallet.factory)
    assert wallet.closes == 1


@pytest.mark.asyncio
async def test_rejected_login_never_runs_operation(settings):
    wallet = FakeWalletClient(reject_login=True)
    ran = []

    with pytest.raises(SessionRejected):
        async with wallet_session(ENDPOINT, settings=settings, client_factory=wallet.factory):
            ran.append(True)

    assert ran == []
    assert wallet.closes == 1


@pytest.mark.asyncio
async def test_session_uses_configured_permissions_and_name(wallet):
    from tari_deploy.config import Settings

    custom = Settings(_env_file=None, auth_permissions=["TemplatesWrite"], session_name="ci")

    async def noop(session):
        return None

    await with_session(ENDPOINT, noop, settings=custom, client_factory=wallet.factory)
    assert ("login", (["TemplatesWrite"], "ci")) in wallet.calls
