"""
tari_deploy.cli
===============

`tari-deploy`: deploy a compiled WASM template to a Tari network through a
wallet daemon.

Examples
--------
    $ tari-deploy deploy ./target/wasm32-unknown-unknown/release/counter.wasm -a my-account
    $ tari-deploy deploy counter.wasm -n custom -c esme --yes --max-fee 5000
    $ tari-deploy version

Configuration
-------------
- Endpoint : `TARI_DEPLOY_WALLET_DAEMON_URL`, else `[networks.<name>]` in
             `<project-folder>/tari.config.toml`, else the local default
- Account  : `--account` or env `TARI_DEPLOY_DEFAULT_ACCOUNT` (prompted otherwise)
- Logging  : `TARI_DEPLOY_LOG_LEVEL`, `TARI_DEPLOY_LOG_FORMAT`
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from .config import Network, Settings, get_settings, resolve_wallet_daemon_url
from .errors import ConfigError, DeployError
from .logging import bind_deploy_context, clear_deploy_context, setup_logging
from .models.template import TemplatePath
from .services.deployer import TemplateDeployer
from .version import version as _version

app = typer.Typer(
    name="tari-deploy",
    help="Deploy compiled WASM templates to a Tari network.",
    no_args_is_help=True,
    add_completion=False,
)

__all__ = ["app", "main"]


def _console(stderr: bool = False) -> Console:
    return Console(stderr=stderr, soft_wrap=True, highlight=False)


def _die(stage: str, message: str) -> None:
    _console(stderr=True).print(f"💥 {stage}: {message}", markup=False)
    raise typer.Exit(code=1)


def _human_bytes(n: int) -> str:
    if n < 1024:
        return f"{n} B"
    if n < 1024 * 1024:
        return f"{n / 1024:.1f} KiB"
    return f"{n / (1024 * 1024):.1f} MiB"


def _resolve_account(account: Optional[str], settings: Settings, yes: bool) -> str:
    account = account or settings.default_account
    if account:
        return account
    if yes:
        raise ConfigError("No account given (use --account or TARI_DEPLOY_DEFAULT_ACCOUNT)")
    return typer.prompt("Fee account (name or component address)").strip()


# ------------------------------ commands --------------------------------------


@app.command("deploy")
def deploy(
    template: Path = typer.Argument(..., help="Compiled template binary (.wasm)"),
    account: Optional[str] = typer.Option(
        None, "--account", "-a", help="Account name or component address paying the fee"
    ),
    network: Network = typer.Option(Network.LOCAL, "--network", "-n", help="Tari network"),
    custom_network: Optional[str] = typer.Option(
        None, "--custom-network", "-c", help="Network name from the project config (with --network custom)"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    max_fee: Optional[int] = typer.Option(
        None, "--max-fee", "-f", min=0, help="Maximum fee in μXTR (defaults to the estimated fee)"
    ),
    wait_timeout: Optional[int] = typer.Option(
        None, "--wait-timeout", min=1, help="Seconds to wait for the transaction to finalize"
    ),
    project_folder: Path = typer.Option(
        Path("."), "--project-folder", help="Folder holding tari.config.toml"
    ),
) -> None:
    """
    Validate, price and publish a template, then print its new address.
    """
    settings = get_settings()
    setup_logging(level=settings.log_level, log_format=settings.log_format)
    console = _console()

    try:
        endpoint = resolve_wallet_daemon_url(
            network=network,
            custom_network=custom_network,
            project_folder=project_folder,
            settings=settings,
        )
        fee_account = _resolve_account(account, settings, yes)
    except ConfigError as e:
        _die("config", e.message)
        return

    bind_deploy_context(network=str(network), account=fee_account)
    deployer = TemplateDeployer(endpoint, settings=settings)
    source = TemplatePath(template)
    try:
        with console.status("Estimating deployment fee"):
            check = asyncio.run(deployer.check_balance_to_deploy(fee_account, source))

        if check.binary_size > settings.binary_size_warning_bytes:
            console.print(
                f"⚠️  Template binary is large ({_human_bytes(check.binary_size)}), "
                "publishing it may be expensive",
                markup=False,
            )

        approved_fee = max_fee if max_fee is not None else check.fee
        if not yes:
            confirmed = typer.confirm(
                f"❓ Deploying this template costs {check.fee} μXTR "
                f"(max fee: {approved_fee} μXTR), are you sure to continue?"
            )
            if not confirmed:
                _die("confirm", "Deployment aborted!")

        with console.status(f"Deploying template to {network} network"):
            address = asyncio.run(
                deployer.deploy(fee_account, source, approved_fee, wait_timeout=wait_timeout)
            )
    except DeployError as e:
        _die(e.stage or e.category, str(e))
        return
    finally:
        clear_deploy_context()

    console.print(f"⭐ Your new template's address: {address}", markup=False)


@app.command("version")
def version_cmd() -> None:
    """Print the tari-deploy version."""
    typer.echo(f"tari-deploy {_version()}")


def main() -> None:  # pragma: no cover - console entry
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
