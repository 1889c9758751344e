"""Tests for order_sync.images: the image reference heuristic.

Covers:
    Name matching      CustomImage, whitespace/case variants, any name containing "image"
    URL fallback       absolute http(s) values count whatever the name
    Empty values       blank or whitespace-only matches are dropped
    Input shapes       non-list input, non-mapping entries, None fields, dataclasses
    Property-based     order preservation; never returns blank values
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from order_sync.images import extract_image_references, is_image_reference
from order_sync.models import LineItemProperty

URL = "https://a/b.png"


class TestNameMatching:
    def test_custom_image(self):
        assert extract_image_references([{"name": "CustomImage", "value": URL}]) == [URL]

    def test_custom_image_with_space(self):
        assert extract_image_references([{"name": "Custom Image", "value": URL}]) == [URL]

    @pytest.mark.parametrize("name", ["customimage", "CUSTOM IMAGE", " Custom\tImage ", "custom\nimage"])
    def test_case_and_whitespace_insensitive(self, name):
        assert extract_image_references([{"name": name, "value": URL}]) == [URL]

    def test_name_containing_image(self):
        props = [{"name": "product_image", "value": "https://cdn.example.com/pic.jpg"}]
        assert extract_image_references(props) == ["https://cdn.example.com/pic.jpg"]

    def test_image_name_with_non_url_value(self):
        """Image-like names match even when the value is not a URL."""
        props = [{"name": "Image", "value": "upload-123.png"}]
        assert extract_image_references(props) == ["upload-123.png"]

    def test_unrelated_name_and_plain_value_ignored(self):
        props = [{"name": "Engraving", "value": "Happy birthday"}]
        assert extract_image_references(props) == []


class TestUrlFallback:
    def test_random_key_with_url_value(self):
        assert extract_image_references([{"name": "random_key", "value": URL}]) == [URL]

    def test_http_scheme_case_insensitive(self):
        props = [{"name": "link", "value": "HTTP://Example.com/x"}]
        assert extract_image_references(props) == ["HTTP://Example.com/x"]

    def test_value_is_trimmed(self):
        props = [{"name": "link", "value": "   https://foo.com/x.png  "}]
        assert extract_image_references(props) == ["https://foo.com/x.png"]

    def test_non_http_scheme_ignored(self):
        props = [{"name": "link", "value": "ftp://foo.com/x.png"}]
        assert extract_image_references(props) == []


class TestEmptyValues:
    @pytest.mark.parametrize("value", ["", "   ", "\t\n", None])
    def test_blank_value_dropped(self, value):
        assert extract_image_references([{"name": "CustomImage", "value": value}]) == []

    def test_is_image_reference_blank(self):
        assert is_image_reference("CustomImage", "   ") is False


class TestInputShapes:
    @pytest.mark.parametrize("props", [None, "CustomImage", {"name": "CustomImage", "value": URL}, 42])
    def test_non_list_input_yields_empty(self, props):
        assert extract_image_references(props) == []

    def test_non_mapping_entries_skipped(self):
        props = ["https://x/y.png", None, {"name": "CustomImage", "value": URL}]
        assert extract_image_references(props) == [URL]

    def test_missing_name(self):
        assert extract_image_references([{"value": URL}]) == [URL]

    def test_accepts_line_item_property_objects(self):
        props = [LineItemProperty("CustomImage", URL), LineItemProperty("Note", "hi")]
        assert extract_image_references(props) == [URL]

    def test_duplicates_kept_within_one_call(self):
        props = [{"name": "CustomImage", "value": URL}, {"name": "Image 2", "value": URL}]
        assert extract_image_references(props) == [URL, URL]

    def test_order_preserved(self):
        props = [
            {"name": "Back image", "value": "https://x/2.png"},
            {"name": "Note", "value": "gift"},
            {"name": "CustomImage", "value": "https://x/1.png"},
        ]
        assert extract_image_references(props) == ["https://x/2.png", "https://x/1.png"]


_names = st.one_of(
    st.sampled_from(["CustomImage", "Custom Image", "image", "note", "link", ""]),
    st.text(max_size=12),
)
_values = st.one_of(
    st.sampled_from(["https://cdn/x.png", "http://a/b", "   ", "", "plain"]),
    st.text(max_size=20),
)
_props = st.lists(st.fixed_dictionaries({"name": _names, "value": _values}), max_size=8)


class TestProperties:
    @given(_props)
    def test_never_returns_blank_values(self, props):
        assert all(v.strip() for v in extract_image_references(props))

    @given(_props)
    def test_is_ordered_subsequence_of_input(self, props):
        """Output follows input order: each match is the next matching property."""
        expected = [
            p["value"].strip() for p in props if is_image_reference(p["name"], p["value"])
        ]
        assert extract_image_references(props) == expected

    @given(_props)
    def test_every_result_comes_from_input(self, props):
        trimmed = {p["value"].strip() for p in props}
        assert set(extract_image_references(props)) <= trimmed
