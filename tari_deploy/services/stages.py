"""
Pipeline stage scopes.

Each deployment stage runs inside `stage_scope(name)`: start and finish are
logged, and a `DeployError` escaping the scope is tagged with the stage name
unless an inner scope already tagged it.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from ..errors import DeployError
from ..logging import get_logger

log = get_logger(__name__)

STAGE_LOAD = "load"
STAGE_ESTIMATE_FEE = "estimate_fee"
STAGE_CHECK_BALANCE = "check_balance"
STAGE_PUBLISH = "publish"
STAGE_WAIT = "wait"
STAGE_EXTRACT = "extract"


@contextmanager
def stage_scope(name: str, **context: Any) -> Iterator[None]:
    started = time.monotonic()
    log.info("stage_started", stage=name, **context)
    try:
        yield
    except DeployError as e:
        if e.stage is None:
            e.stage = name
        log.warning("stage_failed", stage=name, error=type(e).__name__, message=e.message)
        raise
    log.info("stage_finished", stage=name, elapsed_ms=int((time.monotonic() - started) * 1000))


__all__ = [
    "STAGE_LOAD",
    "STAGE_ESTIMATE_FEE",
    "STAGE_CHECK_BALANCE",
    "STAGE_PUBLISH",
    "STAGE_WAIT",
    "STAGE_EXTRACT",
    "stage_scope",
]
