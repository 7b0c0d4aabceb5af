"""
TemplateDeployer: the entry point for deploying a template to a network.

    deployer = TemplateDeployer("http://127.0.0.1:12009/json_rpc")
    check = await deployer.check_balance_to_deploy("my-account", TemplatePath("t.wasm"))
    address = await deployer.deploy("my-account", TemplatePath("t.wasm"), max_fee=check.fee)

The pipeline is strictly sequential:

    load -> estimate_fee -> check_balance        (check_balance_to_deploy)
    load -> publish -> wait -> extract           (deploy)

`deploy` does not repeat the balance check: callers run
`check_balance_to_deploy` first and pass the fee it returned (or a higher
approved one) as `max_fee`. The CLI always does. Each stage
opens its own wallet session; errors leave the pipeline tagged with the stage
they escaped from (see `DeployError.stage`).
"""

from __future__ import annotations

from typing import Optional

from ..config import Settings, get_settings
from ..logging import get_logger
from ..models.template import CheckBalanceResult, Template, ValidatedTemplate
from .balance import check_balance
from .extractor import extract_template_address
from .fees import estimate_fee
from .loader import load_and_validate
from .publisher import publish_and_wait
from .session import ClientFactory, wallet_session
from .stages import (
    STAGE_CHECK_BALANCE,
    STAGE_ESTIMATE_FEE,
    STAGE_EXTRACT,
    STAGE_LOAD,
    STAGE_PUBLISH,
    stage_scope,
)

log = get_logger(__name__)


class TemplateDeployer:
    def __init__(
        self,
        endpoint: str,
        settings: Optional[Settings] = None,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.endpoint = endpoint
        self.settings = settings or get_settings()
        self._client_factory = client_factory

    def load(self, template: Template) -> ValidatedTemplate:
        with stage_scope(STAGE_LOAD, template=str(template)):
            return load_and_validate(template)

    async def check_balance_to_deploy(self, account: str, template: Template) -> CheckBalanceResult:
        """
        Validate `template`, estimate its publication fee for `account` and
        make sure the account can pay it.

        Raises InsufficientBalance when it cannot; nothing is submitted.
        """
        validated = self.load(template)
        with stage_scope(STAGE_ESTIMATE_FEE, account=account):
            fee = await estimate_fee(
                self.endpoint,
                validated,
                account,
                settings=self.settings,
                client_factory=self._client_factory,
            )
        with stage_scope(STAGE_CHECK_BALANCE, account=account, fee=fee):
            await check_balance(
                self.endpoint,
                account,
                fee,
                settings=self.settings,
                client_factory=self._client_factory,
            )
        return CheckBalanceResult(fee=fee, binary_size=validated.size)

    async def deploy(
        self,
        account: str,
        template: Template,
        max_fee: int,
        wait_timeout: Optional[int] = None,
    ) -> str:
        """
        Publish `template` paid by `account` (at most `max_fee`) and return the
        new template address.

        A WaitForTransactionTimeout means the outcome is unknown: the
        transaction may still be finalized after the wait window.
        """
        timeout = wait_timeout if wait_timeout is not None else self.settings.wait_timeout_secs
        validated = self.load(template)
        with stage_scope(STAGE_PUBLISH, account=account, max_fee=max_fee):
            async with wallet_session(
                self.endpoint, settings=self.settings, client_factory=self._client_factory
            ) as session:
                diff = await publish_and_wait(session, validated, account, max_fee, timeout)
        with stage_scope(STAGE_EXTRACT):
            address = extract_template_address(diff)
        log.info("template_deployed", address=address, template_name=validated.template_name)
        return address


__all__ = ["TemplateDeployer"]
