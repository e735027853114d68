from collections.abc import Sequence
from typing import Any

from history.domain.entities import ChangeOp, DeleteOp, InsertOp, OpType, ReplaceOp, op_to_dict


def encode_ops(ops: Sequence[ChangeOp]) -> list[dict[str, Any]]:
    return [op_to_dict(op) for op in ops]


def decode_ops(raw: Sequence[dict[str, Any]]) -> tuple[ChangeOp, ...]:
    decoded: list[ChangeOp] = []
    for item in raw:
        op_type = OpType(item["type"])
        if op_type is OpType.INSERT:
            decoded.append(InsertOp(position=item["position"], content=item["content"]))
        elif op_type is OpType.DELETE:
            decoded.append(DeleteOp(position=item["position"], length=item["length"]))
        else:
            decoded.append(
                ReplaceOp(position=item["position"], length=item["length"], content=item["content"])
            )
    return tuple(decoded)
