from __future__ import annotations

"""
Finalized transaction outcomes.

The wallet daemon reports a finalized transaction result as an externally
tagged enum:

    {"Accept": diff}
    {"AcceptFeeRejectRest": [diff, reason]}
    {"Reject": reason}

and a diff as

    {"up_substates": [[id, substate], ...], "down_substates": [[id, version], ...]}

`outcome_from_result` turns that JSON into one of the `TransactionOutcome`
variants below. Depending on the daemon version the tagged enum is either the
`result` itself or nested one level deeper under `result.result` (the full
finalize result); both shapes are accepted.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Tuple, Union

_TAGS = ("Accept", "AcceptFeeRejectRest", "Reject")


def _entry_id(entry: Any) -> Any:
    if isinstance(entry, (list, tuple)):
        if not entry:
            raise ValueError("empty substate entry")
        return entry[0]
    return entry


@dataclass(frozen=True)
class SubstateDiff:
    """Substates created (up) and destroyed (down) by a transaction, in returned order."""

    created: Tuple[Any, ...] = ()
    destroyed: Tuple[Any, ...] = ()

    @classmethod
    def from_raw(cls, raw: Any) -> "SubstateDiff":
        if not isinstance(raw, Mapping):
            raise ValueError(f"substate diff must be an object, got {type(raw).__name__}")
        up = raw.get("up_substates") or []
        down = raw.get("down_substates") or []
        if not isinstance(up, list) or not isinstance(down, list):
            raise ValueError("up_substates/down_substates must be arrays")
        return cls(
            created=tuple(_entry_id(e) for e in up),
            destroyed=tuple(_entry_id(e) for e in down),
        )


def format_reason(reason: Any) -> str:
    """Render a reject reason (plain string or tagged object) as text."""
    if isinstance(reason, str):
        return reason
    if isinstance(reason, Mapping) and len(reason) == 1:
        ((kind, detail),) = reason.items()
        if detail is None or detail == [] or detail == {}:
            return str(kind)
        if isinstance(detail, str):
            return f"{kind}: {detail}"
    return json.dumps(reason, sort_keys=True, separators=(",", ":"))


@dataclass(frozen=True)
class Accepted:
    diff: SubstateDiff
    status = "Accepted"


@dataclass(frozen=True)
class PartiallyAccepted:
    """Fee was charged, everything else rejected."""

    diff: SubstateDiff
    reason: str
    status = "OnlyFeeAccepted"


@dataclass(frozen=True)
class Rejected:
    reason: str
    status = "Rejected"


@dataclass(frozen=True)
class TimedOut:
    status = "TimedOut"


TransactionOutcome = Union[Accepted, PartiallyAccepted, Rejected, TimedOut]


def _unwrap(raw: Any) -> Mapping[str, Any]:
    if isinstance(raw, Mapping):
        if any(tag in raw for tag in _TAGS):
            return raw
        inner = raw.get("result")
        if isinstance(inner, Mapping) and any(tag in inner for tag in _TAGS):
            return inner
    raise ValueError(f"unrecognized transaction result: {raw!r}")


def outcome_from_result(raw: Any) -> TransactionOutcome:
    """
    Classify a finalized transaction result.

    Raises ValueError when the payload matches none of the known variants.
    """
    tagged = _unwrap(raw)
    if "Accept" in tagged:
        return Accepted(diff=SubstateDiff.from_raw(tagged["Accept"]))
    if "AcceptFeeRejectRest" in tagged:
        body = tagged["AcceptFeeRejectRest"]
        if not isinstance(body, (list, tuple)) or len(body) != 2:
            raise ValueError("AcceptFeeRejectRest must be a [diff, reason] pair")
        return PartiallyAccepted(diff=SubstateDiff.from_raw(body[0]), reason=format_reason(body[1]))
    return Rejected(reason=format_reason(tagged["Reject"]))


__all__ = [
    "SubstateDiff",
    "Accepted",
    "PartiallyAccepted",
    "Rejected",
    "TimedOut",
    "TransactionOutcome",
    "format_reason",
    "outcome_from_result",
]
