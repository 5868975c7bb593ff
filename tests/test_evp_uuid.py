# pylint: disable=missing-module-docstring,missing-function-docstring,missing-class-docstring,protected-access
# pylint: disable=unused-argument,too-few-public-methods,no-member,use-implicit-booleaness-not-comparison,line-too-long
# pylint: disable=invalid-name,wrong-import-position,wrong-import-order,duplicate-code
import pytest
from pydantic import BaseModel, ValidationError

from errors import InvalidFormat
from evp_uuid import UUID


def test_parse_canonicalizes_case():
    value = UUID("6F1B1A4E-5A3C-4C55-9D59-0F6F3A1C2B10")
    assert str(value) == "6f1b1a4e-5a3c-4c55-9d59-0f6f3a1c2b10"
    assert value == UUID.parse("6f1b1a4e-5a3c-4c55-9d59-0f6f3a1c2b10")
    assert hash(value) == hash(UUID("6f1b1a4e-5a3c-4c55-9d59-0f6f3a1c2b10"))


@pytest.mark.parametrize("raw", [
    "",
    "not-a-uuid",
    "6f1b1a4e5a3c4c559d590f6f3a1c2b10",
    "{6f1b1a4e-5a3c-4c55-9d59-0f6f3a1c2b10}",
    "6f1b1a4e-5a3c-4c55-9d59-0f6f3a1c2b1g",
    "6f1b1a4e-5a3c-4c55-9d59-0f6f3a1c2b10\n",
    " 6f1b1a4e-5a3c-4c55-9d59-0f6f3a1c2b10",
    None,
])
def test_invalid_uuid_rejected(raw):
    with pytest.raises(InvalidFormat):
        UUID(raw)
    assert UUID.is_valid(raw) is False


def test_new_generates_distinct_values():
    first = UUID.new()
    second = UUID.new()
    assert first != second
    assert UUID.is_valid(str(first))


def test_uuid_is_immutable_and_usable_as_key():
    value = UUID.new()
    with pytest.raises(AttributeError):
        value._value = "x"
    lookup = {value: "instance"}
    assert lookup[UUID(str(value))] == "instance"


def test_uuid_as_model_field_and_dict_key():
    class Registry(BaseModel):
        owner: UUID
        members: dict[UUID, str] = {}

    registry = Registry(
        owner="6F1B1A4E-5A3C-4C55-9D59-0F6F3A1C2B10",
        members={"0d3e8a2b-77c1-4a0e-b1f4-93c5a6d8e201": "module"},
    )
    assert registry.owner == UUID("6f1b1a4e-5a3c-4c55-9d59-0f6f3a1c2b10")
    assert registry.members[UUID("0d3e8a2b-77c1-4a0e-b1f4-93c5a6d8e201")] == "module"

    with pytest.raises(ValidationError):
        Registry(owner="6f1b1a4e-5a3c-4c55-9d59-0f6f3a1c2b10\n")
