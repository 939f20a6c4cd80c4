"""Tests for criteria, document queries and Cosmos SQL generation."""

import pytest

from cosmos_repository import (
    Criteria,
    CriteriaType,
    Direction,
    DocumentQuery,
    Order,
    Sort,
    ValidationError,
    get_entity_information,
)
from cosmos_repository.query import QuerySpecGenerator

from .domain import Contact, Importance, Memo, Person


def generate(query: DocumentQuery, domain_class: type = Contact):
    return QuerySpecGenerator(get_entity_information(domain_class)).generate_find(query)


class TestCriteria:
    def test_where_checks_value_count(self):
        with pytest.raises(ValueError):
            Criteria.where("int_value", CriteriaType.BETWEEN, 1)
        with pytest.raises(ValueError):
            Criteria.where("title", CriteriaType.IS_NULL, "x")

    def test_in_requires_collection(self):
        with pytest.raises(ValueError):
            Criteria.where("title", CriteriaType.IN, "abc")
        assert Criteria.where("title", CriteriaType.IN, ["a", "b"]).values == (("a", "b"),)

    def test_composite_types_are_not_leaves(self):
        with pytest.raises(ValueError):
            Criteria.where("title", CriteriaType.AND)

    def test_all_is_identity_for_and(self):
        leaf = Criteria.is_equal("title", "mr")
        assert Criteria.all().and_(leaf) is leaf
        assert leaf.and_(Criteria.all()) is leaf

    def test_operators(self):
        a = Criteria.is_equal("title", "mr")
        b = Criteria.is_equal("int_value", 1)
        assert (a & b).type is CriteriaType.AND
        assert (a | b).type is CriteriaType.OR

    def test_partition_key_value(self):
        title = Criteria.is_equal("title", "mr")
        value = Criteria.where("int_value", CriteriaType.GREATER_THAN, 1)
        assert DocumentQuery(title & value).partition_key_value("title") == "mr"
        assert DocumentQuery(title | value).partition_key_value("title") is None
        assert DocumentQuery(title).partition_key_value(None) is None
        assert DocumentQuery().partition_key_value("title") is None

    def test_offset_limit_validation(self):
        with pytest.raises(ValueError):
            DocumentQuery().with_offset_limit(-1, 10)
        with pytest.raises(ValueError):
            DocumentQuery().with_offset_limit(0, 0)

    def test_with_sort_appends(self):
        query = DocumentQuery(sort=Sort.by("title")).with_sort(Sort.by("int_value"))
        assert [o.property for o in query.sort] == ["title", "int_value"]
        assert DocumentQuery().with_sort(None).sort == Sort()


class TestFindGeneration:
    def test_select_all(self):
        query = generate(DocumentQuery())
        assert query.sql == "SELECT * FROM r"
        assert query.parameters == []

    def test_equality(self):
        query = generate(DocumentQuery(Criteria.is_equal("title", "mr")))
        assert query.sql == "SELECT * FROM r WHERE r.title = @title0"
        assert query.parameters == [{"name": "@title0", "value": "mr"}]

    def test_id_maps_to_id_property_as_string(self):
        query = generate(DocumentQuery(Criteria.is_equal("logic_id", 5)))
        assert query.sql == "SELECT * FROM r WHERE r.id = @logic_id0"
        assert query.parameters == [{"name": "@logic_id0", "value": "5"}]

    def test_and(self):
        criteria = Criteria.is_equal("title", "mr").and_(
            Criteria.where("int_value", CriteriaType.GREATER_THAN, 3)
        )
        query = generate(DocumentQuery(criteria))
        assert query.sql == "SELECT * FROM r WHERE r.title = @title0 AND r.int_value > @int_value1"

    def test_or_is_parenthesized(self):
        criteria = Criteria.is_equal("title", "mr").or_(
            Criteria.where("int_value", CriteriaType.LESS_THAN_EQUAL, 3)
        )
        query = generate(DocumentQuery(criteria))
        assert query.sql == (
            "SELECT * FROM r WHERE (r.title = @title0 OR r.int_value <= @int_value1)"
        )

    @pytest.mark.parametrize(
        "criteria,where",
        [
            (
                Criteria.where("title", CriteriaType.IN, ["a", "b"]),
                "ARRAY_CONTAINS(@title0, r.title)",
            ),
            (
                Criteria.where("title", CriteriaType.NOT_IN, ["a"]),
                "NOT ARRAY_CONTAINS(@title0, r.title)",
            ),
            (
                Criteria.where("tags", CriteriaType.ARRAY_CONTAINS, "x"),
                "ARRAY_CONTAINS(r.tags, @tags0)",
            ),
            (
                Criteria.where("int_value", CriteriaType.BETWEEN, 1, 5),
                "(r.int_value BETWEEN @int_value0 AND @int_value1)",
            ),
            (Criteria.where("title", CriteriaType.IS_NULL), "IS_NULL(r.title)"),
            (Criteria.where("title", CriteriaType.IS_NOT_NULL), "NOT IS_NULL(r.title)"),
            (Criteria.where("active", CriteriaType.TRUE), "r.active = true"),
            (Criteria.where("active", CriteriaType.FALSE), "r.active = false"),
            (Criteria.where("title", CriteriaType.CONTAINING, "m"), "CONTAINS(r.title, @title0)"),
            (
                Criteria.where("title", CriteriaType.STARTS_WITH, "m"),
                "STARTSWITH(r.title, @title0)",
            ),
            (Criteria.where("title", CriteriaType.ENDS_WITH, "r"), "ENDSWITH(r.title, @title0)"),
            (Criteria.where("title", CriteriaType.NOT, "mr"), "r.title <> @title0"),
            (Criteria.where("int_value", CriteriaType.BEFORE, 3), "r.int_value < @int_value0"),
            (Criteria.where("int_value", CriteriaType.AFTER, 3), "r.int_value > @int_value0"),
        ],
    )
    def test_leaf_types(self, criteria, where):
        assert generate(DocumentQuery(criteria)).sql == f"SELECT * FROM r WHERE {where}"

    def test_in_parameter_is_a_list(self):
        query = generate(DocumentQuery(Criteria.where("title", CriteriaType.IN, ("a", "b"))))
        assert query.parameters == [{"name": "@title0", "value": ["a", "b"]}]

    def test_enum_parameter(self):
        query = generate(DocumentQuery(Criteria.is_equal("importance", Importance.HIGH)), Memo)
        assert query.parameters == [{"name": "@importance0", "value": "high"}]

    def test_sort(self):
        sort = Sort.by_orders(Order.desc("int_value"), Order.asc("title"))
        query = generate(DocumentQuery(sort=sort))
        assert query.sql == "SELECT * FROM r ORDER BY r.int_value DESC, r.title ASC"

    def test_sort_by_id_uses_id_property(self):
        query = generate(DocumentQuery(sort=Sort.by("logic_id", direction=Direction.DESC)))
        assert query.sql == "SELECT * FROM r ORDER BY r.id DESC"

    def test_ignore_case_sort_rejected(self):
        sort = Sort.by_orders(Order("title", Direction.ASC, ignore_case=True))
        with pytest.raises(ValidationError):
            generate(DocumentQuery(sort=sort))

    def test_offset_limit(self):
        query = generate(DocumentQuery().with_offset_limit(10, 5))
        assert query.sql == "SELECT * FROM r OFFSET 10 LIMIT 5"

    def test_full_query(self):
        query = generate(
            DocumentQuery(Criteria.is_equal("title", "mr"), Sort.by("int_value")).with_offset_limit(
                0, 10
            )
        )
        assert query.sql == (
            "SELECT * FROM r WHERE r.title = @title0 ORDER BY r.int_value ASC OFFSET 0 LIMIT 10"
        )


class TestCountGeneration:
    def test_count_ignores_sort_and_window(self):
        document_query = DocumentQuery(
            Criteria.is_equal("title", "mr"), Sort.by("int_value")
        ).with_offset_limit(0, 10)
        generator = QuerySpecGenerator(get_entity_information(Contact))
        query = generator.generate_count(document_query)
        assert query.sql == "SELECT VALUE COUNT(1) FROM r WHERE r.title = @title0"
        assert query.is_count_query


class TestPropertyPaths:
    def test_renamed_property(self):
        query = generate(DocumentQuery(Criteria.is_equal("last_name", "L")), Person)
        assert query.sql == "SELECT * FROM r WHERE r.surname = @last_name0"

    def test_nested_and_quoted_paths(self):
        generator = QuerySpecGenerator(get_entity_information(Person))
        assert generator.property_path("address.street") == "r.address.street"
        assert generator.property_path("first-name") == 'r["first-name"]'
