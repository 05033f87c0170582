from urllib.parse import parse_qs

import pytest
from pydantic import ValidationError
from starlette.datastructures import QueryParams

from querybind.schemas.query.discovery import discover
from querybind.schemas.query.params import BindingConfig, resolve
from tests.utils.entities import Customer


@pytest.fixture
def config() -> BindingConfig:
    return BindingConfig(
        entity_type=Customer,
        default_page_size=20,
        max_page_size=100,
        search_attributes=("name",),
        default_sort="id",
        default_direction="asc",
    )


@pytest.fixture
def descriptors(registry):
    return discover(Customer, registry)


def test_defaults_come_from_settings():
    config = BindingConfig(entity_type=Customer)

    assert config.default_page_size == 20
    assert config.max_page_size == 100
    assert config.default_sort == "id"
    assert config.default_direction == "asc"
    assert config.search_attributes == ()


def test_config_is_validated_and_immutable():
    assert BindingConfig(entity_type=Customer, default_direction=" DESC ").default_direction == "desc"
    assert BindingConfig(entity_type=Customer, search_attributes="name, email").search_attributes == ("name", "email")

    with pytest.raises(ValidationError):
        BindingConfig(entity_type=Customer, default_page_size=0)
    with pytest.raises(ValidationError):
        BindingConfig(entity_type=Customer, default_page_size=50, max_page_size=10)
    with pytest.raises(ValidationError):
        BindingConfig(entity_type=Customer, default_direction="sideways")

    config = BindingConfig(entity_type=Customer)
    with pytest.raises(ValidationError):
        config.default_page_size = 5


def test_empty_request_uses_config_defaults(config, descriptors):
    request = resolve({}, config, descriptors)

    assert request.page == 0
    assert request.size == 20
    assert request.sort_field == "id"
    assert request.direction == "asc"
    assert request.search_term is None
    assert request.active_filters == {}
    assert request.offset == 0


@pytest.mark.parametrize(
    "raw, expected",
    [("3", 3), ("-1", 0), ("-100", 0), ("abc", 0), ("", 0), (" 2 ", 2), ("1_0", 0), ("99999999999999999999", 0)],
)
def test_page_is_never_negative(config, descriptors, raw, expected):
    assert resolve({"page": raw}, config, descriptors).page == expected


@pytest.mark.parametrize(
    "raw, expected",
    [("5", 5), ("0", 1), ("-3", 1), ("100", 100), ("101", 100), ("100000", 100), ("x", 20), ("  ", 20)],
)
def test_size_is_clamped(config, descriptors, raw, expected):
    assert resolve({"size": raw}, config, descriptors).size == expected


@pytest.mark.parametrize("raw, expected", [("desc", "desc"), ("DESC", "desc"), ("asc", "asc"), ("down", "asc")])
def test_direction(config, descriptors, raw, expected):
    assert resolve({"direction": raw}, config, descriptors).direction == expected


def test_blank_direction_and_sort_fall_back_to_defaults(descriptors):
    config = BindingConfig(entity_type=Customer, default_sort="name", default_direction="desc")
    request = resolve({"direction": " ", "sort": ""}, config, descriptors)

    assert request.direction == "desc"
    assert request.sort_field == "name"


def test_sort_field_is_not_validated(config, descriptors):
    assert resolve({"sort": "no_such_field"}, config, descriptors).sort_field == "no_such_field"


def test_search_term(config, descriptors):
    assert resolve({"search": "jo"}, config, descriptors).search_term == "jo"
    assert resolve({"search": "   "}, config, descriptors).search_term is None


def test_active_filters_follow_discovery_order(config, descriptors):
    request = resolve(
        {"verified": "true", "status": "active,pending", "name": "  ", "unknown": "x", "id": "7"},
        config,
        descriptors,
    )

    assert [(d.param_name, raw) for d, raw in request.active_filters.items()] == [
        ("id", "7"),
        ("status", "active,pending"),
        ("verified", "true"),
    ]


def test_filters_match_on_param_name(config, descriptors):
    request = resolve({"balance": "10", "min_balance": "20"}, config, descriptors)

    assert {d.attribute_name: raw for d, raw in request.active_filters.items()} == {"balance": "20"}


def test_repeated_keys_use_first_value(config, descriptors):
    params = QueryParams("page=2&page=5&status=active&status=closed")
    request = resolve(params, config, descriptors)

    assert request.page == 2
    assert list(request.active_filters.values()) == ["active"]

    request = resolve(parse_qs("size=7&size=9"), config, descriptors)
    assert request.size == 7


def test_offset(config, descriptors):
    request = resolve({"page": "3", "size": "15"}, config, descriptors)

    assert request.offset == 45


def test_page_whose_offset_overflows_falls_back_to_first_page(config, descriptors):
    request = resolve({"page": str(2**63 - 1), "size": "50"}, config, descriptors)

    assert request.page == 0
    assert request.offset == 0


def test_largest_page_that_fits_is_kept(config, descriptors):
    page = (2**63 - 1) // 50

    assert resolve({"page": str(page), "size": "50"}, config, descriptors).page == page
