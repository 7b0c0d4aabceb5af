from __future__ import annotations

"""
Template inputs and validated template handles.

A template reaches the pipeline either as a path to a compiled `.wasm` file or
as raw bytes already in memory. Both variants are immutable; the loader
dispatches on them exactly once and produces a `ValidatedTemplate`.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from ..adapters.wasm_module import WasmModule


@dataclass(frozen=True)
class TemplatePath:
    """A compiled template on disk."""

    path: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class TemplateBinary:
    """A compiled template held in memory."""

    data: bytes = field(repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))

    def __str__(self) -> str:
        return f"<{len(self.data)} bytes>"


Template = Union[TemplatePath, TemplateBinary]


@dataclass(frozen=True)
class ValidatedTemplate:
    """
    A template binary that passed structural validation.

    `hash` is the 32-byte BLAKE2b digest of `binary`; identical bytes always
    produce the same hash regardless of where they were loaded from.
    """

    binary: bytes = field(repr=False)
    module: WasmModule = field(repr=False)
    hash: bytes

    @property
    def hash_hex(self) -> str:
        return self.hash.hex()

    @property
    def size(self) -> int:
        return len(self.binary)

    @property
    def template_name(self) -> str:
        return self.module.template_name


@dataclass(frozen=True)
class CheckBalanceResult:
    fee: int
    binary_size: int


__all__ = [
    "TemplatePath",
    "TemplateBinary",
    "Template",
    "ValidatedTemplate",
    "CheckBalanceResult",
]
