"""Tests for insert-and-repack of fields, registers and address blocks."""

import pytest

from ipforge.editing import (
    InsertionErrorKind,
    SpatialInsertionService,
    next_sequential_name,
)
from ipforge.model import AddressBlock, BitFieldDef, RegisterDef


def field(name, offset, width=1):
    return BitFieldDef(name=name, bit_offset=offset, bit_width=width)


def register(name, offset, **kwargs):
    return RegisterDef(name=name, address_offset=offset, **kwargs)


def positions(items, attr):
    return [(item.name, getattr(item, attr)) for item in items]


@pytest.fixture
def service():
    return SpatialInsertionService()


class TestNaming:
    def test_next_after_highest_suffix(self):
        items = [field("field3", 0), field("field10", 1), field("other", 2), field("field", 3)]
        assert next_sequential_name(items, "field") == "field11"

    def test_first_name(self):
        assert next_sequential_name([], "reg") == "reg1"

    def test_prefix_is_literal(self):
        assert next_sequential_name([register("reg.5", 0)], "reg") == "reg1"


class TestFieldInsertion:
    def test_after_sole_field(self, service):
        fields = [field("EN", 0)]
        result = service.insert_field_after(fields, 0)
        assert result.ok
        assert positions(result.items, "bit_offset") == [("EN", 0), ("field1", 1)]
        assert result.new_index == 1
        new = result.items[1]
        assert (new.bit_width, new.bits, new.access, new.reset_value) == (1, "[1]", "read-write", 0)

    def test_after_top_bit_fails(self, service):
        fields = [field("MSB", 31)]
        result = service.insert_field_after(fields, 0)
        assert not result.ok
        assert result.new_index == -1
        assert result.error_kind == InsertionErrorKind.BOUNDS
        assert "outside register bounds" in result.error
        assert result.items is fields

    def test_narrow_register_bound(self, service):
        result = service.insert_field_after([field("A", 7)], 0, register_width=8)
        assert result.error_kind == InsertionErrorKind.BOUNDS

    def test_after_repacks_later_fields(self, service):
        fields = [field("A", 0), field("B", 1), field("C", 2, width=2)]
        result = service.insert_field_after(fields, 0)
        assert result.ok
        assert positions(result.items, "bit_offset") == [("A", 0), ("field1", 1), ("B", 2), ("C", 3)]
        assert result.items[3].bits == "[4:3]"
        assert result.new_index == 1

    def test_shift_stops_at_first_gap(self, service):
        fields = [field("A", 0), field("B", 1), field("C", 8)]
        result = service.insert_field_after(fields, 0)
        assert positions(result.items, "bit_offset") == [("A", 0), ("field1", 1), ("B", 2), ("C", 8)]
        assert result.items[3] is fields[2]

    def test_after_repack_beyond_bound_fails(self, service):
        fields = [field("A", 0), field("B", 1, width=31)]
        result = service.insert_field_after(fields, 0)
        assert result.error_kind == InsertionErrorKind.COLLISION
        assert "already occupied by B" in result.error
        assert result.items is fields

    def test_input_not_mutated(self, service):
        fields = [field("A", 0), field("B", 1)]
        result = service.insert_field_after(fields, 0)
        assert [f.bit_offset for f in fields] == [0, 1]
        assert len(fields) == 2
        assert result.items[2] is not fields[1]

    def test_last_item_when_index_is_minus_one(self, service):
        result = service.insert_field_after([field("A", 0), field("B", 4, width=4)], -1)
        assert positions(result.items, "bit_offset")[-1] == ("field1", 8)

    def test_selection_follows_identity_not_position(self, service):
        fields = [field("HIGH", 8), field("LOW", 0)]
        result = service.insert_field_after(fields, 1)
        assert positions(result.items, "bit_offset") == [("LOW", 0), ("field1", 1), ("HIGH", 8)]
        assert result.new_index == 1

    def test_before_with_room(self, service):
        result = service.insert_field_before([field("A", 0), field("B", 5)], 1)
        assert positions(result.items, "bit_offset") == [("A", 0), ("field1", 4), ("B", 5)]
        assert result.new_index == 1

    def test_before_repacks_earlier_fields(self, service):
        fields = [field("A", 2, width=2), field("B", 4)]
        result = service.insert_field_before(fields, 1)
        assert positions(result.items, "bit_offset") == [("A", 1), ("field1", 3), ("B", 4)]
        assert result.items[0].bits == "[2:1]"

    def test_before_bit_zero_fails(self, service):
        result = service.insert_field_before([field("A", 0)], 0)
        assert result.error_kind == InsertionErrorKind.BOUNDS
        assert "outside register bounds" in result.error

    def test_before_repack_below_zero_fails(self, service):
        fields = [field("A", 0), field("B", 1)]
        result = service.insert_field_before(fields, 1)
        assert result.error_kind == InsertionErrorKind.COLLISION
        assert "already occupied by A" in result.error
        assert result.items is fields

    def test_empty_collection(self, service):
        result = service.insert_field_after([], -1)
        assert positions(result.items, "bit_offset") == [("field1", 0)]
        assert result.new_index == 0

    def test_failure_hands_back_callers_collection(self, service):
        fields = (field("MSB", 31),)
        result = service.insert_field_after(fields, 0)
        assert not result.ok
        assert result.items is fields

    @pytest.mark.parametrize("index", [1, 5, -2])
    def test_invalid_selection(self, service, index):
        fields = [field("A", 0)]
        result = service.insert_field_after(fields, index)
        assert result.error_kind == InsertionErrorKind.INVALID_SELECTION
        assert result.new_index == -1
        assert result.items is fields


class TestRegisterInsertion:
    def test_after_array_register(self, service):
        registers = [register("DATA", 0, count=4, stride=8)]
        result = service.insert_register_after(registers, 0)
        assert positions(result.items, "address_offset") == [("DATA", 0), ("reg1", 32)]
        assert result.new_index == 1

    def test_after_repacks_following(self, service):
        registers = [register("A", 0), register("B", 4), register("C", 16)]
        result = service.insert_register_after(registers, 0)
        assert positions(result.items, "address_offset") == [
            ("A", 0),
            ("reg1", 4),
            ("B", 8),
            ("C", 16),
        ]

    def test_after_shifts_array_by_its_footprint(self, service):
        registers = [register("A", 0), register("ARR", 4, count=2, stride=4), register("Z", 12)]
        result = service.insert_register_after(registers, 0)
        assert positions(result.items, "address_offset") == [
            ("A", 0),
            ("reg1", 4),
            ("ARR", 8),
            ("Z", 16),
        ]

    def test_unbounded_axis(self, service):
        result = service.insert_register_after([register("TOP", 0xFFFC)], 0)
        assert result.ok
        assert result.items[1].address_offset == 0x10000

    def test_before_with_room(self, service):
        result = service.insert_register_before([register("A", 0), register("B", 12)], 1)
        assert positions(result.items, "address_offset") == [("A", 0), ("reg1", 8), ("B", 12)]

    def test_before_repacks_earlier(self, service):
        registers = [register("A", 4), register("B", 8), register("C", 12)]
        result = service.insert_register_before(registers, 2)
        assert positions(result.items, "address_offset") == [
            ("A", 0),
            ("B", 4),
            ("reg1", 8),
            ("C", 12),
        ]

    def test_before_first_at_zero_is_negative(self, service):
        result = service.insert_register_before([register("A", 0)], 0)
        assert result.error_kind == InsertionErrorKind.NEGATIVE_OFFSET
        assert "offset would be negative" in result.error

    def test_before_repack_negative(self, service):
        registers = [register("A", 0), register("B", 4)]
        result = service.insert_register_before(registers, 1)
        assert result.error_kind == InsertionErrorKind.NEGATIVE_OFFSET
        assert "already occupied by A" in result.error
        assert "negative" in result.error
        assert result.items is registers

    def test_unsorted_input_result_sorted(self, service):
        registers = [register("B", 8), register("A", 0)]
        result = service.insert_register_after(registers, 0)
        assert positions(result.items, "address_offset") == [("A", 0), ("B", 8), ("reg1", 12)]
        assert result.new_index == 2

    def test_new_register_defaults(self, service):
        new = service.insert_register_after([], 0).items[0]
        assert (new.name, new.address_offset, new.access, new.footprint) == ("reg1", 0, "read-write", 4)


class TestBlockInsertion:
    def test_after_block_with_registers(self, service):
        blocks = [
            AddressBlock(
                name="CTRL", base_address=0, registers=[register("A", 0), register("B", 4)]
            )
        ]
        result = service.insert_block_after(blocks, 0)
        new = result.items[1]
        assert (new.name, new.base_address) == ("block1", 8)
        assert [r.name for r in new.registers] == ["reg0"]
        assert new.footprint == 4

    def test_after_block_owning_array_register(self, service):
        blocks = [
            AddressBlock(
                name="BUF", base_address=0, registers=[register("DATA", 0, count=4, stride=8)]
            )
        ]
        result = service.insert_block_after(blocks, 0)
        assert positions(result.items, "base_address") == [("BUF", 0), ("block1", 4)]

    def test_after_block_with_range_repacks(self, service):
        blocks = [
            AddressBlock(name="MEM", base_address=0, range="4K"),
            AddressBlock(name="IO", base_address=0x1000),
        ]
        result = service.insert_block_after(blocks, 0)
        assert positions(result.items, "base_address") == [
            ("MEM", 0),
            ("block1", 0x1000),
            ("IO", 0x1004),
        ]

    def test_before(self, service):
        result = service.insert_block_before([AddressBlock(name="B", base_address=0x100)], 0)
        assert positions(result.items, "base_address") == [("block1", 0xFC), ("B", 0x100)]
        assert result.new_index == 0

    def test_before_at_zero_is_negative(self, service):
        blocks = [AddressBlock(name="B", base_address=0)]
        result = service.insert_block_before(blocks, 0)
        assert result.error_kind == InsertionErrorKind.NEGATIVE_OFFSET
        assert result.items is blocks
