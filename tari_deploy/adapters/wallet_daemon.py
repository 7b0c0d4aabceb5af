"""
JSON-RPC client for the Tari wallet daemon.

This adapter provides:
- an async JSON-RPC 2.0 transport over HTTP(S) (httpx), without retries
- typed methods for the endpoints the deployment pipeline needs:
  * auth.request / auth.accept           (login handshake)
  * accounts.get_balances
  * templates.publish                    (dry-run and real)
  * transactions.wait_result             (server-side bounded wait)
- the `WalletClient` protocol the pipeline is written against, so a fake
  implementation can stand in for the daemon in tests

Errors
------
Failures to reach the daemon (connection refused, DNS, TLS, timeouts, an
unusable URL, HTTP status without a JSON-RPC body) raise `WalletTransportError`. Responses that
arrive but break the JSON-RPC contract (error object, non-JSON body, missing or
malformed result) raise `WalletProtocolError` or one of its subclasses.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..errors import InvalidResponse, SessionRejected, WalletProtocolError, WalletTransportError
from ..logging import get_logger
from ..models.wallet import (
    AuthAcceptResponse,
    AuthRequestResponse,
    GetBalancesResponse,
    PublishTemplateRequest,
    PublishTemplateResponse,
    WaitTransactionResultResponse,
)

log = get_logger(__name__)

METHOD_AUTH_REQUEST = "auth.request"
METHOD_AUTH_ACCEPT = "auth.accept"
METHOD_GET_BALANCES = "accounts.get_balances"
METHOD_PUBLISH_TEMPLATE = "templates.publish"
METHOD_WAIT_RESULT = "transactions.wait_result"

# Extra HTTP time granted to the wait call on top of its server-side timeout.
WAIT_HTTP_MARGIN_SECS = 10.0

M = TypeVar("M", bound=BaseModel)


class WalletClient(Protocol):
    """The wallet daemon operations used by the deployment pipeline."""

    async def login(self, permissions: List[str], name: str) -> str:
        ...

    async def get_balances(self, account: str, refresh: bool = False) -> GetBalancesResponse:
        ...

    async def publish_template(self, request: PublishTemplateRequest) -> PublishTemplateResponse:
        ...

    async def wait_transaction_result(
        self, transaction_id: str, timeout_secs: int
    ) -> WaitTransactionResultResponse:
        ...

    async def aclose(self) -> None:
        ...


# ----------------------------- Helpers --------------------------------------


def _build_headers(extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    hdrs = {
        "content-type": "application/json",
        "accept": "application/json",
    }
    if extra:
        hdrs.update(extra)
    return hdrs


def _error_from_payload(method: str, err: Any) -> WalletProtocolError:
    if not isinstance(err, dict):
        return WalletProtocolError(f"Malformed error object: {err!r}", method=method)
    code = err.get("code")
    return WalletProtocolError(
        str(err.get("message") or "Unknown error"),
        method=method,
        code=code if isinstance(code, int) else None,
        data=err.get("data"),
    )


# ----------------------------- Client ---------------------------------------


@dataclass
class WalletDaemonConfig:
    url: str
    timeout_s: float = 30.0
    headers: Optional[Dict[str, str]] = None


class WalletDaemonClient:
    """
    Async JSON-RPC client for the wallet daemon.

    One instance serves one session: `login()` stores the permissions token,
    which is then sent as a bearer token on every following call.
    """

    def __init__(self, config: WalletDaemonConfig, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._cfg = config
        self._transport = transport
        self._id = 0
        self._token: Optional[str] = None
        self._client: Optional[httpx.AsyncClient] = None

    # ---------- lifecycle ----------

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._cfg.timeout_s,
                headers=_build_headers(self._cfg.headers),
                transport=self._transport,
            )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "WalletDaemonClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def set_auth_token(self, token: Optional[str]) -> None:
        self._token = token

    # ---------- core transport ----------

    async def _call(
        self,
        method: str,
        params: Any = None,
        *,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Perform a single JSON-RPC call. No retries: every failure is raised.
        """
        if self._client is None:
            await self.start()

        assert self._client is not None  # for type-checkers

        self._id += 1
        payload = {"jsonrpc": "2.0", "id": self._id, "method": method, "params": params or {}}
        kwargs: Dict[str, Any] = {}
        if self._token:
            kwargs["headers"] = {"authorization": f"Bearer {self._token}"}
        if timeout is not None:
            kwargs["timeout"] = timeout

        log.debug("rpc_call", method=method, id=self._id)
        try:
            resp = await self._client.post(
                self._cfg.url,
                json=payload,
                **kwargs,
            )
        except httpx.TimeoutException as exc:
            raise WalletTransportError(
                f"Timed out talking to wallet daemon at {self._cfg.url}: {exc}", method=method
            ) from exc
        except (httpx.TransportError, httpx.InvalidURL) as exc:
            raise WalletTransportError(
                f"Cannot reach wallet daemon at {self._cfg.url}: {exc}", method=method
            ) from exc

        status = resp.status_code
        try:
            data = json.loads(resp.content)
        except ValueError as exc:
            if status != 200:
                raise WalletTransportError(
                    f"HTTP {status}: {resp.content[:256]!r}", method=method
                ) from exc
            raise WalletProtocolError(
                f"Invalid JSON in response: {resp.content[:256]!r}", method=method
            ) from exc

        if not isinstance(data, dict):
            if status != 200:
                raise WalletTransportError(f"HTTP {status}: {resp.content[:256]!r}", method=method)
            raise WalletProtocolError("JSON-RPC response is not an object", method=method)
        if data.get("error") is not None:
            raise _error_from_payload(method, data["error"])
        if status != 200:
            raise WalletTransportError(f"HTTP {status}: {resp.content[:256]!r}", method=method)
        if "result" not in data:
            raise WalletProtocolError("JSON-RPC response has neither result nor error", method=method)
        return data["result"]

    async def _call_model(
        self,
        method: str,
        params: Any,
        model: Type[M],
        *,
        timeout: Optional[float] = None,
    ) -> M:
        result = await self._call(method, params, timeout=timeout)
        try:
            return model.model_validate(result)
        except ValidationError as exc:
            raise InvalidResponse(f"Malformed result: {exc}", method=method, data=result) from exc

    # ---------- typed methods ----------

    async def login(self, permissions: List[str], name: str) -> str:
        """
        Run the two-step login handshake and keep the permissions token for
        the remaining calls of this client. Protocol failures surface as
        `SessionRejected`; transport failures pass through unchanged.
        """
        try:
            req = await self._call_model(
                METHOD_AUTH_REQUEST,
                {"permissions": list(permissions), "duration": None},
                AuthRequestResponse,
            )
            acc = await self._call_model(
                METHOD_AUTH_ACCEPT,
                {"auth_token": req.auth_token, "name": name},
                AuthAcceptResponse,
            )
        except WalletProtocolError as exc:
            raise SessionRejected(
                f"Wallet daemon rejected login: {exc.message}",
                method=exc.method,
                code=exc.code,
                data=exc.data,
            ) from exc
        self.set_auth_token(acc.permissions_token)
        log.debug("wallet_login_ok", name=name)
        return acc.permissions_token

    async def get_balances(self, account: str, refresh: bool = False) -> GetBalancesResponse:
        return await self._call_model(
            METHOD_GET_BALANCES,
            {"account": account, "refresh": refresh},
            GetBalancesResponse,
        )

    async def publish_template(self, request: PublishTemplateRequest) -> PublishTemplateResponse:
        return await self._call_model(
            METHOD_PUBLISH_TEMPLATE,
            request.model_dump(mode="json"),
            PublishTemplateResponse,
        )

    async def wait_transaction_result(
        self, transaction_id: str, timeout_secs: int
    ) -> WaitTransactionResultResponse:
        """
        Ask the daemon to block until the transaction finalizes or
        `timeout_secs` elapses. The HTTP timeout of this one request is widened
        so the daemon, not the client, decides when the wait is over.
        """
        return await self._call_model(
            METHOD_WAIT_RESULT,
            {"transaction_id": transaction_id, "timeout_secs": timeout_secs},
            WaitTransactionResultResponse,
            timeout=float(timeout_secs) + WAIT_HTTP_MARGIN_SECS,
        )


__all__ = [
    "METHOD_AUTH_REQUEST",
    "METHOD_AUTH_ACCEPT",
    "METHOD_GET_BALANCES",
    "METHOD_PUBLISH_TEMPLATE",
    "METHOD_WAIT_RESULT",
    "WAIT_HTTP_MARGIN_SECS",
    "WalletClient",
    "WalletDaemonConfig",
    "WalletDaemonClient",
]
