"""
Template loader: read a compiled template, validate its structure and hash it.

The only side effect is the file read for `TemplatePath` inputs.
"""

from __future__ import annotations

import hashlib

from ..adapters.wasm_module import WasmDecodeError, load_template_module
from ..errors import InvalidTemplate, TemplateReadError
from ..logging import get_logger
from ..models.template import Template, TemplateBinary, TemplatePath, ValidatedTemplate

log = get_logger(__name__)

HASH_SIZE = 32


def template_hash(data: bytes) -> bytes:
    """32-byte BLAKE2b digest of the raw template bytes."""
    return hashlib.blake2b(data, digest_size=HASH_SIZE).digest()


def _read_bytes(template: Template) -> bytes:
    if isinstance(template, TemplatePath):
        try:
            return template.path.read_bytes()
        except OSError as e:
            raise TemplateReadError(template.path, e.strerror or str(e)) from e
    if isinstance(template, TemplateBinary):
        return template.data
    raise TypeError(f"Unsupported template source: {type(template).__name__}")


def load_and_validate(template: Template) -> ValidatedTemplate:
    """
    Load `template` and check that it is a well-formed template module.

    Raises:
        TemplateReadError: the file is missing or unreadable.
        InvalidTemplate: the bytes are not a valid template module.
    """
    data = _read_bytes(template)
    try:
        module = load_template_module(data)
    except WasmDecodeError as e:
        raise InvalidTemplate(str(e)) from e

    validated = ValidatedTemplate(binary=data, module=module, hash=template_hash(data))
    log.info(
        "template_validated",
        source=str(template),
        template_name=validated.template_name,
        size=validated.size,
        hash=validated.hash_hex,
    )
    return validated


__all__ = ["HASH_SIZE", "template_hash", "load_and_validate"]
