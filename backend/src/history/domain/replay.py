"""Pure text replay of change ops.

Positions and lengths are measured against the text as it stands when each
op is applied. Anything out of range is rejected, never clamped.
"""

from collections.abc import Iterable, Sequence

from history.domain.entities import ChangeOp, ChangeRecord, DeleteOp, InsertOp, ReplaceOp
from shared.exceptions import MalformedChangeError


def _check_position(text: str, position: int, index: int | None) -> None:
    if position < 0 or position > len(text):
        raise MalformedChangeError(
            f"position {position} outside text of length {len(text)}", index
        )


def _check_span(text: str, position: int, length: int, index: int | None) -> None:
    _check_position(text, position, index)
    if length < 0 or position + length > len(text):
        raise MalformedChangeError(
            f"span {position}+{length} outside text of length {len(text)}", index
        )


def apply_op(text: str, op: ChangeOp, index: int | None = None) -> str:
    match op:
        case InsertOp(position=position, content=content):
            _check_position(text, position, index)
            return text[:position] + content + text[position:]
        case DeleteOp(position=position, length=length):
            _check_span(text, position, length, index)
            return text[:position] + text[position + length:]
        case ReplaceOp(position=position, length=length, content=content):
            _check_span(text, position, length, index)
            return text[:position] + content + text[position + length:]
    raise MalformedChangeError(f"unknown change op {op!r}", index)


def apply_ops(text: str, ops: Sequence[ChangeOp]) -> str:
    """Apply ``ops`` in order. Either every op applies or the error propagates."""
    for index, op in enumerate(ops):
        text = apply_op(text, op, index)
    return text


def replay(base: str, records: Iterable[ChangeRecord], target_version: int) -> str:
    """Replay ``records`` on top of the version-0 ``base`` up to ``target_version``.

    Records must be consecutive versions starting at 1; a gap means the log
    cannot produce the requested version.
    """
    text = base
    expected = 1
    for record in sorted(records, key=lambda r: r.version):
        if record.version > target_version:
            break
        if record.version != expected:
            raise MalformedChangeError(
                f"change log gap: expected version {expected}, found {record.version}"
            )
        text = apply_ops(text, record.ops)
        expected += 1
    if expected - 1 != target_version:
        raise MalformedChangeError(
            f"change log ends at version {expected - 1}, cannot reach {target_version}"
        )
    return text
