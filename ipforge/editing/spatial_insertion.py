"""
Insert-and-repack for placed memory map items.

Bit fields sit on a bit axis bounded by the register width; registers
and address blocks sit on an unbounded byte axis. Inserting next to a
selected item places a new item right beside it, then shifts neighbours
on that side by the minimum amount needed to remove any overlap.

Every operation is pure: inputs are never modified, shifted items are
``model_copy`` clones, and a failed insertion hands back the original
list with ``new_index == -1``.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

from ipforge.model.memory_map import (
    DEFAULT_REGISTER_BYTES,
    AccessType,
    AddressBlock,
    BitFieldDef,
    RegisterDef,
)
from ipforge.utils import format_bit_range

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_REGISTER_WIDTH = 32


class InsertionErrorKind(str, Enum):
    """Why an insertion was refused."""

    BOUNDS = "bounds"
    COLLISION = "collision"
    NEGATIVE_OFFSET = "negative_offset"
    INVALID_SELECTION = "invalid_selection"


@dataclass
class InsertionResult(Generic[T]):
    """Outcome of one insertion.

    ``items`` is sorted by position on success and is the caller's
    own collection, untouched, on failure.
    """

    items: Sequence[T]
    new_index: int
    error: Optional[str] = None
    error_kind: Optional[InsertionErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def next_sequential_name(items: Sequence[Any], prefix: str) -> str:
    """``<prefix><N+1>`` where N is the highest existing ``<prefix><int>`` suffix."""
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    highest = 0
    for item in items:
        match = pattern.match(str(getattr(item, "name", "") or ""))
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}{highest + 1}"


class _Axis(Generic[T]):
    """How one kind of item is positioned along its axis."""

    def __init__(
        self,
        kind: str,
        name_prefix: str,
        start: Callable[[T], int],
        size: Callable[[T], int],
        move: Callable[[T, int], T],
        create: Callable[[str, int], T],
        new_size: int,
    ):
        self.kind = kind
        self.name_prefix = name_prefix
        self.start = start
        self.size = size
        self.move = move
        self.create = create
        self.new_size = new_size

    def end(self, item: T) -> int:
        return self.start(item) + self.size(item)


def _move_field(fld: BitFieldDef, offset: int) -> BitFieldDef:
    return fld.model_copy(
        update={"bit_offset": offset, "bits": format_bit_range(offset, fld.bit_width)}
    )


def _new_field(name: str, offset: int) -> BitFieldDef:
    return BitFieldDef(
        name=name,
        bit_offset=offset,
        bit_width=1,
        bits=format_bit_range(offset, 1),
        access=AccessType.READ_WRITE.value,
        reset_value=0,
    )


def _new_register(name: str, offset: int) -> RegisterDef:
    return RegisterDef(name=name, address_offset=offset, access=AccessType.READ_WRITE.value)


def _new_block(name: str, base: int) -> AddressBlock:
    return AddressBlock(
        name=name,
        base_address=base,
        range=DEFAULT_REGISTER_BYTES,
        usage="register",
        registers=[_new_register("reg0", 0)],
    )


FIELD_AXIS: _Axis[BitFieldDef] = _Axis(
    kind="field",
    name_prefix="field",
    start=lambda f: f.bit_offset,
    size=lambda f: f.bit_width,
    move=_move_field,
    create=_new_field,
    new_size=1,
)

REGISTER_AXIS: _Axis[RegisterDef] = _Axis(
    kind="register",
    name_prefix="reg",
    start=lambda r: r.address_offset,
    size=lambda r: r.footprint,
    move=lambda r, offset: r.model_copy(update={"address_offset": offset}),
    create=_new_register,
    new_size=DEFAULT_REGISTER_BYTES,
)

BLOCK_AXIS: _Axis[AddressBlock] = _Axis(
    kind="block",
    name_prefix="block",
    start=lambda b: b.base_address,
    size=lambda b: b.footprint,
    move=lambda b, base: b.model_copy(update={"base_address": base}),
    create=_new_block,
    new_size=DEFAULT_REGISTER_BYTES,
)


def _describe(start: int, size: int, bound: Optional[int]) -> str:
    """Human-readable position: bit range on the bit axis, hex offset on bytes."""
    if bound is not None:
        return f"bits {format_bit_range(start, size)}"
    if start < 0:
        return f"offset -0x{-start:X}"
    return f"offset 0x{start:X}"


def _plan_forward(axis: _Axis[T], later: Sequence[T], cursor: int) -> List[Tuple[T, int]]:
    """New starts for items above ``cursor``, each moved up only as far as needed."""
    plan = []
    for item in later:
        start = max(axis.start(item), cursor)
        plan.append((item, start))
        cursor = max(cursor, start + axis.size(item))
    return plan


def _plan_backward(axis: _Axis[T], earlier: Sequence[T], cursor: int) -> List[Tuple[T, int]]:
    """New starts for items below ``cursor``, each moved down only as far as needed."""
    plan = []
    for item in reversed(earlier):
        start = axis.start(item)
        if start + axis.size(item) > cursor:
            start = cursor - axis.size(item)
        plan.append((item, start))
        cursor = min(cursor, start)
    plan.reverse()
    return plan


class SpatialInsertionService:
    """Insert fields, registers and address blocks next to a selection."""

    # Bit fields

    def insert_field_after(
        self,
        fields: Sequence[BitFieldDef],
        selected_index: int,
        register_width: int = DEFAULT_REGISTER_WIDTH,
    ) -> InsertionResult[BitFieldDef]:
        """Insert a 1-bit field just above the selected field's MSB."""
        width = register_width or DEFAULT_REGISTER_WIDTH
        return self._insert(FIELD_AXIS, fields, selected_index, True, width)

    def insert_field_before(
        self,
        fields: Sequence[BitFieldDef],
        selected_index: int,
        register_width: int = DEFAULT_REGISTER_WIDTH,
    ) -> InsertionResult[BitFieldDef]:
        """Insert a 1-bit field just below the selected field's LSB."""
        width = register_width or DEFAULT_REGISTER_WIDTH
        return self._insert(FIELD_AXIS, fields, selected_index, False, width)

    # Registers

    def insert_register_after(
        self, registers: Sequence[RegisterDef], selected_index: int
    ) -> InsertionResult[RegisterDef]:
        """Insert a register right after the selected register's footprint."""
        return self._insert(REGISTER_AXIS, registers, selected_index, True)

    def insert_register_before(
        self, registers: Sequence[RegisterDef], selected_index: int
    ) -> InsertionResult[RegisterDef]:
        """Insert a register one word below the selected register."""
        return self._insert(REGISTER_AXIS, registers, selected_index, False)

    # Address blocks

    def insert_block_after(
        self, blocks: Sequence[AddressBlock], selected_index: int
    ) -> InsertionResult[AddressBlock]:
        """Insert a one-register block right after the selected block."""
        return self._insert(BLOCK_AXIS, blocks, selected_index, True)

    def insert_block_before(
        self, blocks: Sequence[AddressBlock], selected_index: int
    ) -> InsertionResult[AddressBlock]:
        """Insert a one-register block one word below the selected block."""
        return self._insert(BLOCK_AXIS, blocks, selected_index, False)

    def _insert(
        self,
        axis: _Axis[T],
        items: Sequence[T],
        selected_index: int,
        after: bool,
        bound: Optional[int] = None,
    ) -> InsertionResult[T]:
        original = list(items)
        name = next_sequential_name(original, axis.name_prefix)

        if not original:
            return InsertionResult(items=[axis.create(name, 0)], new_index=0)

        if selected_index < -1 or selected_index >= len(original):
            return self._fail(
                items,
                f"Invalid selection index {selected_index} for {len(original)} {axis.kind}s",
                InsertionErrorKind.INVALID_SELECTION,
            )
        selected = original[selected_index]

        if after:
            new_start = axis.end(selected)
        else:
            new_start = axis.start(selected) - axis.new_size
        where = _describe(new_start, axis.new_size, bound)
        side = "after" if after else "before"

        if bound is not None and (new_start < 0 or new_start + axis.new_size > bound):
            return self._fail(
                items,
                f"Cannot insert {side}: would place {axis.kind} at {where}, outside register bounds",
                InsertionErrorKind.BOUNDS,
            )
        if new_start < 0:
            return self._fail(
                items,
                f"Cannot insert {side}: offset would be negative",
                InsertionErrorKind.NEGATIVE_OFFSET,
            )

        new_item = axis.create(name, new_start)
        ordered = sorted(original, key=axis.start)
        ref_pos = next(i for i, item in enumerate(ordered) if item is selected)

        if after:
            plan = _plan_forward(axis, ordered[ref_pos + 1 :], new_start + axis.new_size)
        else:
            plan = _plan_backward(axis, ordered[:ref_pos], new_start)

        moved = [item for item, start in plan if start != axis.start(item)]
        if moved:
            lowest = min(start for _, start in plan)
            highest = max(start + axis.size(item) for item, start in plan)
            if lowest < 0 or (bound is not None and highest > bound):
                occupied = f"Cannot insert: {where} already occupied by {moved[0].name}"
                if bound is not None:
                    return self._fail(
                        items,
                        f"{occupied}; no room to shift it within register bounds",
                        InsertionErrorKind.COLLISION,
                    )
                return self._fail(
                    items,
                    f"{occupied}; shifting it would make an offset negative",
                    InsertionErrorKind.NEGATIVE_OFFSET,
                )

        shifted = [
            axis.move(item, start) if start != axis.start(item) else item for item, start in plan
        ]
        if after:
            result = ordered[: ref_pos + 1] + [new_item] + shifted
        else:
            result = shifted + [new_item] + ordered[ref_pos:]

        result.sort(key=axis.start)
        new_index = next(i for i, item in enumerate(result) if item is new_item)
        logger.debug(
            "Inserted %s '%s' at %s, %d neighbours shifted", axis.kind, name, where, len(moved)
        )
        return InsertionResult(items=result, new_index=new_index)

    @staticmethod
    def _fail(items: Sequence[T], message: str, kind: InsertionErrorKind) -> InsertionResult[T]:
        logger.debug("Insertion refused: %s", message)
        return InsertionResult(items=items, new_index=-1, error=message, error_kind=kind)
