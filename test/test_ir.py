"""Tests for the IR module."""

import dataclasses

import pytest

from headergen.ir import (
    Argument,
    Bitmask,
    Constant,
    Direction,
    Enum,
    Function,
    NamedValue,
    Object,
    Schema,
    Struct,
    StructMember,
    TypeTable,
)
from headergen.types import Primitive, Reference


class TestDirection:
    def test_parse(self):
        assert Direction.parse("in") is Direction.IN
        assert Direction.parse(" out ") is Direction.OUT

    def test_absent(self):
        assert Direction.parse(None) is None

    def test_blank_is_absent(self):
        assert Direction.parse("") is None
        assert Direction.parse("  ") is None

    def test_case_folded(self):
        assert Direction.parse("In") is Direction.IN
        assert Direction.parse("OUT") is Direction.OUT

    def test_unknown(self):
        with pytest.raises(ValueError):
            Direction.parse("sideways")


class TestRecords:
    def test_constant_str(self):
        assert str(Constant("MAX", Primitive("uint32_t"), "8")) == "#define MAX 8"

    def test_named_value_str(self):
        assert str(NamedValue("MapRead", "1")) == "MapRead = 1"

    def test_enum_and_bitmask_str(self):
        assert str(Enum("SType")) == "enum SType"
        assert str(Bitmask("BufferUsage")) == "bitmask BufferUsage"

    def test_function_defaults(self):
        func = Function("Release")
        assert func.return_type is None
        assert func.is_async is False
        assert func.callback is None
        assert func.args == ()

    def test_function_str(self):
        func = Function("Write", args=(Argument("data", Primitive("void"), "*"), Argument("size", Primitive("size_t"))))
        assert str(func) == "Write(data, size)"

    def test_struct_defaults(self):
        struct = Struct("Extent3D", (StructMember("width", Primitive("uint32_t")),))
        assert struct.methods == {}
        assert struct.extensible is None
        assert struct.chained is None
        assert struct.chained_to == ()
        assert str(struct) == "struct Extent3D"

    def test_object_defaults(self):
        obj = Object("Queue")
        assert obj.methods == {}
        assert obj.refcounted is False

    def test_records_are_frozen(self):
        member = StructMember("width", Primitive("uint32_t"))
        with pytest.raises(dataclasses.FrozenInstanceError):
            member.name = "height"  # type: ignore[misc]


class TestSchema:
    def test_empty(self):
        schema = Schema()
        assert schema.types == TypeTable()
        assert schema.objects == {}

    def test_str_counts(self):
        schema = Schema(
            prefix="WGPU",
            types=TypeTable(structs={"Limits": Struct("Limits")}),
            objects={"Device": Object("Device")},
        )
        text = str(schema)
        assert text.startswith("Schema(WGPU: ")
        assert "1 structs" in text
        assert "1 objects" in text
        assert "0 enums" in text

    def test_reference_member(self):
        member = StructMember("limits", Reference("Limits"))
        assert member.type.name == "Limits"
