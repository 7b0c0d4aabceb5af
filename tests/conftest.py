from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

import pytest
import structlog

from tari_deploy.config import Settings, get_settings

from .fakes import FakeWalletClient
from .wasm_builder import build_wasm


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep host TARI_DEPLOY_* variables, cached settings and logging setup out of tests."""
    for key in list(os.environ):
        if key.startswith("TARI_DEPLOY_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def wasm_bytes() -> bytes:
    return build_wasm("counter")


@pytest.fixture
def wasm_file(tmp_path: Path, wasm_bytes: bytes) -> Path:
    p = tmp_path / "counter.wasm"
    p.write_bytes(wasm_bytes)
    return p


@pytest.fixture
def wallet() -> FakeWalletClient:
    return FakeWalletClient()
