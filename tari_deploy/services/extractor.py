"""
Find the newly published template in a finalized state diff.

Substate ids come in two encodings depending on the daemon version:
a tagged object (``{"Template": "<address>"}``) or a prefixed string
(``"template_<hex>"``). Both are recognized.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..errors import MissingPublishedTemplate
from ..models.outcome import SubstateDiff

TEMPLATE_KIND = "template"


def substate_kind(substate_id: Any) -> Optional[str]:
    """Lower-case kind of a substate id, e.g. 'component' or 'template'."""
    if isinstance(substate_id, Mapping) and len(substate_id) == 1:
        return str(next(iter(substate_id))).lower()
    if isinstance(substate_id, str) and "_" in substate_id:
        return substate_id.split("_", 1)[0].lower()
    return None


def _template_address(substate_id: Any) -> str:
    if isinstance(substate_id, Mapping):
        return str(next(iter(substate_id.values())))
    return substate_id


def extract_template_address(diff: SubstateDiff, *, transaction_id: Optional[str] = None) -> str:
    """
    Address of the first created template substate, in the order the daemon
    returned them. Raises MissingPublishedTemplate when there is none.
    """
    for substate_id in diff.created:
        if substate_kind(substate_id) == TEMPLATE_KIND:
            return _template_address(substate_id)
    raise MissingPublishedTemplate(transaction_id)


__all__ = ["TEMPLATE_KIND", "substate_kind", "extract_template_address"]
