from __future__ import annotations

import json

import httpx
import pytest
import respx

from tari_deploy.adapters.wallet_daemon import (
    WAIT_HTTP_MARGIN_SECS,
    WalletDaemonClient,
    WalletDaemonConfig,
)
from tari_deploy.errors import (
    InvalidResponse,
    SessionRejected,
    WalletProtocolError,
    WalletTransportError,
)
from tari_deploy.models.wallet import PublishTemplateRequest

RPC_URL = "http://localhost:12009/json_rpc"


def _ok(result):
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": result})


def _err(code, message):
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": code, "message": message}})


def _client() -> WalletDaemonClient:
    return WalletDaemonClient(WalletDaemonConfig(url=RPC_URL, timeout_s=5.0))


@pytest.mark.asyncio
@respx.mock
async def test_login_handshake_sets_bearer_token():
    route = respx.post(RPC_URL).mock(
        side_effect=[
            _ok({"auth_token": "auth-abc", "valid_for_secs": 60}),
            _ok({"permissions_token": "perm-xyz"}),
            _ok({"balances": []}),
        ]
    )

    async with _client() as client:
        token = await client.login(["Admin"], "default")
        await client.get_balances("acc")

    assert token == "perm-xyz"
    sent = [json.loads(call.request.content) for call in route.calls]
    assert sent[0]["method"] == "auth.request"
    assert sent[0]["params"] == {"permissions": ["Admin"], "duration": None}
    assert sent[1]["method"] == "auth.accept"
    assert sent[1]["params"] == {"auth_token": "auth-abc", "name": "default"}
    assert sent[2]["params"] == {"account": "acc", "refresh": False}
    assert "authorization" not in route.calls[0].request.headers
    assert route.calls[2].request.headers["authorization"] == "Bearer perm-xyz"


@pytest.mark.asyncio
@respx.mock
async def test_login_rejected_is_protocol_error():
    respx.post(RPC_URL).mock(side_effect=[_err(-32001, "Unauthorized")])

    async with _client() as client:
        with pytest.raises(SessionRejected) as ei:
            await client.login(["Admin"], "default")

    assert isinstance(ei.value, WalletProtocolError)
    assert ei.value.code == -32001
    assert "Unauthorized" in str(ei.value)


@pytest.mark.asyncio
@respx.mock
async def test_connection_refused_is_transport_error():
    respx.post(RPC_URL).mock(side_effect=httpx.ConnectError("connection refused"))

    async with _client() as client:
        with pytest.raises(WalletTransportError) as ei:
            await client.get_balances("acc")

    assert ei.value.category == "transport"
    assert ei.value.method == "accounts.get_balances"


@pytest.mark.asyncio
@respx.mock
async def test_read_timeout_is_transport_error():
    respx.post(RPC_URL).mock(side_effect=httpx.ReadTimeout("slow"))

    async with _client() as client:
        with pytest.raises(WalletTransportError):
            await client.get_balances("acc")


@pytest.mark.asyncio
@respx.mock
async def test_http_error_without_body_is_transport_error():
    respx.post(RPC_URL).mock(return_value=httpx.Response(502, text="bad gateway"))

    async with _client() as client:
        with pytest.raises(WalletTransportError) as ei:
            await client.get_balances("acc")
    assert "HTTP 502" in str(ei.value)


@pytest.mark.asyncio
@respx.mock
async def test_non_json_body_is_protocol_error():
    respx.post(RPC_URL).mock(return_value=httpx.Response(200, text="<html>"))

    async with _client() as client:
        with pytest.raises(WalletProtocolError) as ei:
            await client.get_balances("acc")
    assert not isinstance(ei.value, WalletTransportError)


@pytest.mark.asyncio
@respx.mock
async def test_json_rpc_error_carries_code_and_data():
    respx.post(RPC_URL).mock(
        return_value=httpx.Response(
            200,
            json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "bad params", "data": {"x": 1}}},
        )
    )

    async with _client() as client:
        with pytest.raises(WalletProtocolError) as ei:
            await client.get_balances("acc")

    err = ei.value
    assert err.code == -32602
    assert err.data == {"x": 1}
    assert str(err) == "bad params (method=accounts.get_balances, code=-32602)"


@pytest.mark.asyncio
@respx.mock
async def test_malformed_result_is_invalid_response():
    respx.post(RPC_URL).mock(return_value=_ok({"dry_run_fee": 10}))

    request = PublishTemplateRequest(binary=b"\x00asm", fee_account="acc", max_fee=10, dry_run=True)
    async with _client() as client:
        with pytest.raises(InvalidResponse):
            await client.publish_template(request)


@pytest.mark.asyncio
@respx.mock
async def test_publish_sends_binary_as_byte_array():
    route = respx.post(RPC_URL).mock(return_value=_ok({"transaction_id": "tx-9", "dry_run_fee": 321}))

    request = PublishTemplateRequest(
        binary=b"\x00asm\x01", fee_account="acc", max_fee=1_000_000, detect_inputs=True, dry_run=True
    )
    async with _client() as client:
        response = await client.publish_template(request)

    assert response.transaction_id == "tx-9"
    assert response.dry_run_fee == 321
    params = json.loads(route.calls.last.request.content)["params"]
    assert params == {
        "binary": [0, 97, 115, 109, 1],
        "fee_account": "acc",
        "max_fee": 1_000_000,
        "detect_inputs": True,
        "dry_run": True,
    }


@pytest.mark.asyncio
@respx.mock
async def test_wait_result_widens_http_timeout():
    route = respx.post(RPC_URL).mock(
        return_value=_ok({"timed_out": True, "status": None, "result": None})
    )

    async with _client() as client:
        response = await client.wait_transaction_result("tx-1", 120)

    assert response.timed_out is True
    sent = json.loads(route.calls.last.request.content)
    assert sent["method"] == "transactions.wait_result"
    assert sent["params"] == {"transaction_id": "tx-1", "timeout_secs": 120}
    timeout = route.calls.last.request.extensions["timeout"]
    assert timeout["read"] == 120 + WAIT_HTTP_MARGIN_SECS


@pytest.mark.asyncio
@respx.mock
async def test_invalid_url_is_transport_error():
    respx.post(RPC_URL).mock(side_effect=httpx.InvalidURL("Invalid URL component 'host'"))

    async with _client() as client:
        with pytest.raises(WalletTransportError) as ei:
            await client.get_balances("acc")

    assert ei.value.category == "transport"
    assert ei.value.method == "accounts.get_balances"
