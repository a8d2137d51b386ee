"""Tests for utility helpers."""

import uuid
from datetime import timezone

import pytest

from cruxctl.core.utils import (
    is_uuid,
    is_valid_prefix,
    merge_dicts,
    parse_datetime,
    parse_image,
    parse_key_value_pairs,
)


class TestIdentifiers:
    def test_is_uuid(self):
        assert is_uuid(str(uuid.uuid4()))
        assert not is_uuid("abc123")
        assert not is_uuid("")
        assert not is_uuid(None)

    def test_upper_case_uuid_rejected(self):
        value = str(uuid.uuid4())
        assert not is_uuid(value.upper())
        assert not is_uuid("{" + value + "}")

    @pytest.mark.parametrize("prefix", ["shop", "shop-2", "a", "0-9"])
    def test_valid_prefix(self, prefix):
        assert is_valid_prefix(prefix)

    @pytest.mark.parametrize("prefix", ["", "Shop", "shop_2", "shop.io", "shop web"])
    def test_invalid_prefix(self, prefix):
        assert not is_valid_prefix(prefix)


class TestParsing:
    @pytest.mark.parametrize(
        "image,expected",
        [
            ("nginx", ("nginx", "latest")),
            ("nginx:1.25", ("nginx", "1.25")),
            ("ghcr.io/acme/api:2.0.1", ("ghcr.io/acme/api", "2.0.1")),
            ("registry:5000/app", ("registry:5000/app", "latest")),
            ("registry:5000/app:1.0", ("registry:5000/app", "1.0")),
        ],
    )
    def test_parse_image(self, image, expected):
        assert parse_image(image) == expected

    def test_parse_key_value_pairs(self):
        result = parse_key_value_pairs(["A=1", "B = two ", "URL=http://x?a=b", "broken"])
        assert result == {"A": "1", "B": "two", "URL": "http://x?a=b"}

    def test_parse_datetime(self):
        value = parse_datetime("2024-05-01T10:00:00Z")
        assert value.tzinfo == timezone.utc
        assert parse_datetime(None) is None
        assert parse_datetime("") is None

    def test_merge_dicts(self):
        base = {"a": 1, "nested": {"x": 1, "y": 2}}
        result = merge_dicts(base, {"nested": {"y": 3}, "b": 2})
        assert result == {"a": 1, "b": 2, "nested": {"x": 1, "y": 3}}
        assert base["nested"]["y"] == 2
