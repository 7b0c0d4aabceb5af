from __future__ import annotations

import pytest

from tari_deploy.errors import (
    InsufficientBalance,
    InvalidTemplate,
    MissingPublishedTemplate,
    WaitForTransactionTimeout,
    WalletTransportError,
)
from tari_deploy.models.template import TemplateBinary, TemplatePath
from tari_deploy.services.deployer import TemplateDeployer

from .fakes import ENDPOINT, FakeWalletClient, accepted_result


def _deployer(wallet, settings) -> TemplateDeployer:
    return TemplateDeployer(ENDPOINT, settings=settings, client_factory=wallet.factory)


@pytest.mark.asyncio
async def test_happy_path(wasm_file, settings):
    wallet = FakeWalletClient(fee=1000, balance=5000)
    deployer = _deployer(wallet, settings)

    check = await deployer.check_balance_to_deploy("acc", TemplatePath(wasm_file))
    assert check.fee == 1000
    assert check.binary_size == wasm_file.stat().st_size

    address = await deployer.deploy("acc", TemplatePath(wasm_file), check.fee)

    assert address == "tpl-addr-abc"
    real = [r for r in wallet.publish_requests if not r.dry_run]
    assert len(real) == 1 and real[0].max_fee == 1000
    assert ("wait", ("tx-1", 120)) in wallet.calls
    # one login per operation: dry run, balance, publish+wait
    assert wallet.logins == 3
    assert wallet.closes == 3


@pytest.mark.asyncio
async def test_insufficient_balance_stops_before_publish(wasm_file, settings):
    wallet = FakeWalletClient(fee=1000, balance=500)
    deployer = _deployer(wallet, settings)

    with pytest.raises(InsufficientBalance) as ei:
        await deployer.check_balance_to_deploy("acc", TemplatePath(wasm_file))

    err = ei.value
    assert (err.current, err.required) == (500, 1000)
    assert err.stage == "check_balance"
    assert all(r.dry_run for r in wallet.publish_requests)
    assert "wait" not in wallet.methods()


@pytest.mark.asyncio
async def test_timeout_is_reported_as_timeout(wasm_bytes, settings):
    wallet = FakeWalletClient(wait_result={"timed_out": True, "status": None, "result": None})
    deployer = _deployer(wallet, settings)

    with pytest.raises(WaitForTransactionTimeout) as ei:
        await deployer.deploy("acc", TemplateBinary(wasm_bytes), 1000)

    assert ei.value.transaction_id == "tx-1"
    assert ei.value.stage == "wait"


@pytest.mark.asyncio
async def test_wait_timeout_override(wasm_bytes, settings):
    wallet = FakeWalletClient()
    await _deployer(wallet, settings).deploy("acc", TemplateBinary(wasm_bytes), 1000, wait_timeout=7)
    assert ("wait", ("tx-1", 7)) in wallet.calls


@pytest.mark.asyncio
async def test_accepted_without_template_fails_extraction(wasm_bytes, settings):
    wallet = FakeWalletClient(wait_result=accepted_result({"Component": "component_01"}))
    with pytest.raises(MissingPublishedTemplate) as ei:
        await _deployer(wallet, settings).deploy("acc", TemplateBinary(wasm_bytes), 1000)
    assert ei.value.stage == "extract"


@pytest.mark.asyncio
async def test_invalid_template_never_reaches_wallet(settings):
    wallet = FakeWalletClient()
    with pytest.raises(InvalidTemplate) as ei:
        await _deployer(wallet, settings).check_balance_to_deploy("acc", TemplateBinary(b"\x00asm\x02\x00\x00\x00"))
    assert ei.value.stage == "load"
    assert wallet.calls == []


@pytest.mark.asyncio
async def test_unreachable_daemon_is_tagged_with_stage(wasm_bytes, settings):
    class Unreachable(FakeWalletClient):
        async def login(self, permissions, name):
            raise WalletTransportError("Cannot reach wallet daemon", method="auth.request")

    wallet = Unreachable()
    with pytest.raises(WalletTransportError) as ei:
        await _deployer(wallet, settings).check_balance_to_deploy("acc", TemplateBinary(wasm_bytes))
    assert ei.value.stage == "estimate_fee"

    with pytest.raises(WalletTransportError) as ei:
        await _deployer(wallet, settings).deploy("acc", TemplateBinary(wasm_bytes), 1000)
    assert ei.value.stage == "publish"


@pytest.mark.asyncio
async def test_deploy_leaves_balance_check_to_caller(wasm_bytes, settings):
    wallet = FakeWalletClient(balance=0)
    address = await _deployer(wallet, settings).deploy("acc", TemplateBinary(wasm_bytes), 1000)

    assert address == "tpl-addr-abc"
    assert "get_balances" not in wallet.methods()
    assert wallet.methods() == ["connect", "login", "publish", "wait"]
