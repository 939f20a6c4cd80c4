"""Tests for entity <-> document conversion."""

from datetime import datetime
from uuid import UUID

from cosmos_repository import MappingCosmosConverter
from cosmos_repository.mapping import from_json_value, to_json_value

from .domain import Address, Contact, Counter, Importance, Memo, Person


class TestWrite:
    def test_id_written_as_id_property(self):
        document = MappingCosmosConverter().write(Contact("c1", "mr", 3, tags=["a"]))
        assert document == {
            "id": "c1",
            "title": "mr",
            "int_value": 3,
            "active": True,
            "tags": ["a"],
        }

    def test_int_id_written_as_string(self):
        assert MappingCosmosConverter().write(Counter(7, "x"))["id"] == "7"

    def test_missing_id_omitted(self):
        assert "id" not in MappingCosmosConverter().write(Contact(title="mr"))

    def test_version_written_only_when_set(self):
        converter = MappingCosmosConverter()
        assert "_etag" not in converter.write(Memo("m1"))
        assert converter.write(Memo("m1", etag='"e1"'))["_etag"] == '"e1"'
        assert "etag" not in converter.write(Memo("m1", etag='"e1"'))

    def test_renamed_and_nested_properties(self):
        person = Person("p1", "Ada", "Lovelace", Address("Main St", "London"), ["math"])
        document = MappingCosmosConverter().write(person)
        assert document["surname"] == "Lovelace"
        assert document["address"] == {"street": "Main St", "city_name": "London"}
        assert "last_name" not in document

    def test_enum_and_datetime(self):
        memo = Memo("m1", "hi", Importance.HIGH, datetime(2024, 1, 2, 3, 4, 5))
        document = MappingCosmosConverter().write(memo)
        assert document["importance"] == "high"
        assert document["created"] == "2024-01-02T03:04:05"


class TestRead:
    def test_round_trip_fields(self):
        converter = MappingCosmosConverter()
        person = Person("p1", "Ada", "Lovelace", Address("Main St", "London"), ["math"], "n")
        assert converter.read(Person, converter.write(person)) == person

    def test_system_properties_ignored(self):
        document = {"id": "c1", "title": "mr", "_rid": "x", "_ts": 1, "_self": "y"}
        contact = MappingCosmosConverter().read(Contact, document)
        assert contact == Contact("c1", "mr")

    def test_etag_read_into_version_field(self):
        memo = MappingCosmosConverter().read(Memo, {"id": "m1", "_etag": '"e1"'})
        assert memo.etag == '"e1"'

    def test_int_id_read_from_string(self):
        assert MappingCosmosConverter().read(Counter, {"id": "7", "label": "x"}) == Counter(7, "x")

    def test_typed_values(self):
        document = {"id": "m1", "importance": "low", "created": "2024-01-02T03:04:05"}
        memo = MappingCosmosConverter().read(Memo, document)
        assert memo.importance is Importance.LOW
        assert memo.created == datetime(2024, 1, 2, 3, 4, 5)


class TestJsonValues:
    def test_to_json_value(self):
        value = {"u": UUID(int=1), "s": {3}, "t": (1, 2)}
        assert to_json_value(value) == {
            "u": "00000000-0000-0000-0000-000000000001",
            "s": [3],
            "t": [1, 2],
        }

    def test_from_json_value(self):
        assert from_json_value([1, 2], list[int]) == [1, 2]
        assert from_json_value([1, 2], tuple[int, ...]) == (1, 2)
        assert from_json_value(3, float) == 3.0
        assert from_json_value(None, int) is None
        assert from_json_value({"a": "low"}, dict[str, Importance]) == {"a": Importance.LOW}
