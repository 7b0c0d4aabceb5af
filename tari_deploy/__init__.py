"""
tari-deploy
===========

Deploy compiled WASM templates to a Tari layer-2 network through a wallet
daemon's JSON-RPC interface.

This package exposes:

- ``__version__``: semantic version string
- ``TemplateDeployer``: the deployment pipeline entry point
- ``TemplatePath`` / ``TemplateBinary``: template inputs

Prefer importing submodules directly for specific concerns:
``tari_deploy.config``, ``tari_deploy.logging``, ``tari_deploy.errors``,
``tari_deploy.services.*``.
"""

from __future__ import annotations

from .version import __version__

__all__ = ["__version__", "TemplateDeployer", "TemplatePath", "TemplateBinary"]


def __getattr__(name: str):
    # Lazy so that `import tari_deploy` stays cheap for version lookups.
    if name == "TemplateDeployer":
        from .services.deployer import TemplateDeployer

        return TemplateDeployer
    if name in ("TemplatePath", "TemplateBinary"):
        from .models import template

        return getattr(template, name)
    raise AttributeError(f"module 'tari_deploy' has no attribute {name!r}")
