"""Tests for query-string parsing."""

import pytest

from src.errors import BadRequestError, CastError
from src.services.query import MAX_LIMIT, QueryFeatures


def test_from_params():
    features = QueryFeatures.from_params(
        {
            "difficulty": "easy",
            "price[lt]": "1500",
            "duration[gte]": "5",
            "sort": "-ratings_average, price",
            "fields": "name,price",
            "page": "2",
            "limit": "10",
        }
    )
    assert features.filters == [
        ("difficulty", "eq", "easy"),
        ("price", "lt", "1500"),
        ("duration", "gte", "5"),
    ]
    assert features.sort == ["-ratings_average", "price"]
    assert features.fields == ["name", "price"]
    assert (features.page, features.limit) == (2, 10)


def test_defaults_apply_when_params_absent():
    features = QueryFeatures.from_params({"sort": "price"}, sort="-created_at", limit="5")
    assert features.sort == ["price"]
    assert features.limit == 5


def test_limit_is_capped():
    assert QueryFeatures.from_params({"limit": "999999"}).limit == MAX_LIMIT


@pytest.mark.parametrize("page", ["0", "-1", "two"])
def test_invalid_page(page):
    with pytest.raises(CastError):
        QueryFeatures.from_params({"page": page})


def test_malformed_filter_key():
    with pytest.raises(BadRequestError):
        QueryFeatures.from_params({"price[between]": "1"})


def test_project_includes_and_excludes():
    document = {"id": 1, "name": "The Forest Hiker", "price": 397, "summary": "Hike"}

    included = QueryFeatures(fields=["name"]).project(document)
    assert included == {"id": 1, "name": "The Forest Hiker"}

    excluded = QueryFeatures(fields=["-summary"]).project(document)
    assert excluded == {"id": 1, "name": "The Forest Hiker", "price": 397}

    assert QueryFeatures().project(document) is document
