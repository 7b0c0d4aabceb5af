"""
Structural reader for WebAssembly template binaries.

Only the parts of the binary format needed to vet a template before it is sent
to the network are decoded:

- the 8-byte header (magic ``\\0asm`` + version 1)
- section framing (id byte + LEB128 size), ordering and bounds
- the type, import, function, export and code sections (counts and indices)

Everything else (code bodies, data, custom sections) is skipped by size.

A module is a *template* when it exports a function ``<name>_abi`` together
with a matching function export ``<name>_main``; ``<name>`` becomes the
template name.

API
---
- parse_module(data) -> WasmModule
- load_template_module(data) -> WasmModule   (parse + template export check)
- WasmDecodeError / TemplateAbiError
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

WASM_MAGIC = b"\x00asm"
WASM_VERSION = 1

ABI_SUFFIX = "_abi"
MAIN_SUFFIX = "_main"

# Section ids
SEC_CUSTOM = 0
SEC_TYPE = 1
SEC_IMPORT = 2
SEC_FUNCTION = 3
SEC_TABLE = 4
SEC_MEMORY = 5
SEC_GLOBAL = 6
SEC_EXPORT = 7
SEC_START = 8
SEC_ELEMENT = 9
SEC_CODE = 10
SEC_DATA = 11
SEC_DATA_COUNT = 12

# Required relative order of the known (non-custom) sections.
_SECTION_ORDER: Dict[int, int] = {
    SEC_TYPE: 1,
    SEC_IMPORT: 2,
    SEC_FUNCTION: 3,
    SEC_TABLE: 4,
    SEC_MEMORY: 5,
    SEC_GLOBAL: 6,
    SEC_EXPORT: 7,
    SEC_START: 8,
    SEC_ELEMENT: 9,
    SEC_DATA_COUNT: 10,
    SEC_CODE: 11,
    SEC_DATA: 12,
}

# External kinds (imports and exports)
KIND_FUNC = 0
KIND_TABLE = 1
KIND_MEMORY = 2
KIND_GLOBAL = 3

_EXTERNAL_KINDS = (KIND_FUNC, KIND_TABLE, KIND_MEMORY, KIND_GLOBAL)


class WasmDecodeError(ValueError):
    pass


class TemplateAbiError(WasmDecodeError):
    pass


# -----------------------------------------------------------------------------
# Types
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class WasmImport:
    module: str
    name: str
    kind: int


@dataclass(frozen=True)
class WasmExport:
    name: str
    kind: int
    index: int


@dataclass(frozen=True)
class WasmModule:
    version: int
    section_ids: Tuple[int, ...]
    type_count: int
    imports: Tuple[WasmImport, ...]
    defined_functions: int
    exports: Tuple[WasmExport, ...]
    template_name: str = ""

    @property
    def imported_functions(self) -> int:
        return sum(1 for imp in self.imports if imp.kind == KIND_FUNC)

    @property
    def function_count(self) -> int:
        """Size of the function index space (imported + defined)."""
        return self.imported_functions + self.defined_functions

    def find_export(self, name: str) -> Optional[WasmExport]:
        for exp in self.exports:
            if exp.name == name:
                return exp
        return None


# -----------------------------------------------------------------------------
# Byte reader
# -----------------------------------------------------------------------------


class _Reader:
    __slots__ = ("b", "i", "n")

    def __init__(self, b: bytes, start: int = 0, end: Optional[int] = None):
        self.b = b
        self.i = start
        self.n = len(b) if end is None else end

    @property
    def remaining(self) -> int:
        return self.n - self.i

    def read(self, n: int) -> bytes:
        if n < 0 or self.i + n > self.n:
            raise WasmDecodeError(f"unexpected end of data at offset {self.i}")
        s = self.b[self.i : self.i + n]
        self.i += n
        return s

    def byte(self) -> int:
        return self.read(1)[0]

    def u32(self) -> int:
        """Unsigned LEB128, at most 5 bytes and 32 bits."""
        result = 0
        shift = 0
        for _ in range(5):
            at = self.i
            byte = self.byte()
            result |= (byte & 0x7F) << shift
            if (byte & 0x80) == 0:
                if result > 0xFFFFFFFF:
                    raise WasmDecodeError(f"integer too large at offset {at}")
                return result
            shift += 7
        raise WasmDecodeError(f"integer representation too long at offset {self.i}")

    def name(self) -> str:
        raw = self.read(self.u32())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise WasmDecodeError(f"malformed UTF-8 name at offset {self.i - len(raw)}") from e


# -----------------------------------------------------------------------------
# Section readers
# -----------------------------------------------------------------------------


def _read_limits(r: _Reader) -> None:
    flags = r.byte()
    if flags > 0x07:
        raise WasmDecodeError(f"invalid limits flags 0x{flags:02x}")
    r.u32()
    if flags & 0x01:
        r.u32()


def _read_imports(r: _Reader) -> List[WasmImport]:
    out: List[WasmImport] = []
    for _ in range(r.u32()):
        module = r.name()
        name = r.name()
        kind = r.byte()
        if kind == KIND_FUNC:
            r.u32()  # type index
        elif kind == KIND_TABLE:
            r.byte()  # reftype
            _read_limits(r)
        elif kind == KIND_MEMORY:
            _read_limits(r)
        elif kind == KIND_GLOBAL:
            r.byte()  # valtype
            mut = r.byte()
            if mut > 1:
                raise WasmDecodeError(f"invalid global mutability {mut}")
        else:
            raise WasmDecodeError(f"invalid import kind {kind} for {module}.{name}")
        out.append(WasmImport(module=module, name=name, kind=kind))
    return out


def _read_function_types(r: _Reader) -> List[int]:
    return [r.u32() for _ in range(r.u32())]


def _read_exports(r: _Reader) -> List[WasmExport]:
    out: List[WasmExport] = []
    seen = set()
    for _ in range(r.u32()):
        name = r.name()
        kind = r.byte()
        if kind not in _EXTERNAL_KINDS:
            raise WasmDecodeError(f"invalid export kind {kind} for {name!r}")
        index = r.u32()
        if name in seen:
            raise WasmDecodeError(f"duplicate export name {name!r}")
        seen.add(name)
        out.append(WasmExport(name=name, kind=kind, index=index))
    return out


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------


def parse_module(data: bytes) -> WasmModule:
    """Decode the module structure. Raises WasmDecodeError on malformed input."""
    data = bytes(data)
    r = _Reader(data)
    if r.remaining < 8:
        raise WasmDecodeError("binary too short for a WebAssembly header")
    if r.read(4) != WASM_MAGIC:
        raise WasmDecodeError("bad magic number (not a WebAssembly module)")
    version = int.from_bytes(r.read(4), "little")
    if version != WASM_VERSION:
        raise WasmDecodeError(f"unsupported WebAssembly version {version}")

    section_ids: List[int] = []
    last_order = 0
    type_count = 0
    imports: List[WasmImport] = []
    func_types: List[int] = []
    exports: List[WasmExport] = []
    code_count: Optional[int] = None

    while r.remaining:
        sec_id = r.byte()
        size = r.u32()
        start = r.i
        if size > r.remaining:
            raise WasmDecodeError(
                f"section {sec_id} at offset {start} declares {size} bytes, only {r.remaining} left"
            )
        end = start + size

        if sec_id != SEC_CUSTOM:
            order = _SECTION_ORDER.get(sec_id)
            if order is None:
                raise WasmDecodeError(f"unknown section id {sec_id} at offset {start}")
            if order <= last_order:
                raise WasmDecodeError(f"section {sec_id} is duplicated or out of order")
            last_order = order

        body = _Reader(data, start, end)
        if sec_id == SEC_CUSTOM:
            body.name()
            body.i = end
        elif sec_id == SEC_TYPE:
            type_count = body.u32()
            body.i = end  # signatures are not inspected
        elif sec_id == SEC_IMPORT:
            imports = _read_imports(body)
        elif sec_id == SEC_FUNCTION:
            func_types = _read_function_types(body)
        elif sec_id == SEC_EXPORT:
            exports = _read_exports(body)
        elif sec_id == SEC_CODE:
            code_count = body.u32()
            body.i = end
        else:
            body.i = end

        if body.i != end:
            raise WasmDecodeError(f"section {sec_id} size mismatch at offset {start}")
        section_ids.append(sec_id)
        r.i = end

    for idx in func_types:
        if idx >= type_count:
            raise WasmDecodeError(f"function refers to unknown type index {idx}")
    if code_count is not None and code_count != len(func_types):
        raise WasmDecodeError(
            f"function and code section have inconsistent lengths ({len(func_types)} vs {code_count})"
        )
    if code_count is None and func_types:
        raise WasmDecodeError("function section present without a code section")

    return WasmModule(
        version=version,
        section_ids=tuple(section_ids),
        type_count=type_count,
        imports=tuple(imports),
        defined_functions=len(func_types),
        exports=tuple(exports),
    )


def find_template_name(module: WasmModule) -> str:
    """
    Locate the `<name>_abi` / `<name>_main` function export pair.

    Raises TemplateAbiError when the pair is missing or points past the
    function index space.
    """
    abi = next(
        (e for e in module.exports if e.kind == KIND_FUNC and e.name.endswith(ABI_SUFFIX)),
        None,
    )
    if abi is None:
        raise TemplateAbiError("no template ABI export found (expected a function export '<name>_abi')")
    name = abi.name[: -len(ABI_SUFFIX)]
    if not name:
        raise TemplateAbiError("template ABI export has an empty template name")

    main = module.find_export(name + MAIN_SUFFIX)
    if main is None or main.kind != KIND_FUNC:
        raise TemplateAbiError(f"missing function export '{name}{MAIN_SUFFIX}'")

    for exp in (abi, main):
        if exp.index >= module.function_count:
            raise TemplateAbiError(
                f"export '{exp.name}' refers to function {exp.index}, "
                f"module has {module.function_count} functions"
            )
    return name


def load_template_module(data: bytes) -> WasmModule:
    module = parse_module(data)
    name = find_template_name(module)
    return WasmModule(
        version=module.version,
        section_ids=module.section_ids,
        type_count=module.type_count,
        imports=module.imports,
        defined_functions=module.defined_functions,
        exports=module.exports,
        template_name=name,
    )


__all__ = [
    "WASM_MAGIC",
    "WASM_VERSION",
    "WasmDecodeError",
    "TemplateAbiError",
    "WasmImport",
    "WasmExport",
    "WasmModule",
    "parse_module",
    "find_template_name",
    "load_template_module",
]
