"""Unit tests for page normalization."""

import pytest
from pydantic import ValidationError

from pagegraph.core.models import RawPage
from pagegraph.core.normalizer import (
    classify_creative_type,
    count_characters,
    extract_links,
    extract_tags,
    normalize_page,
)


# ============================================================
# Tags
# ============================================================


class TestExtractTags:
    def test_basic(self):
        assert extract_tags(["hello #poetry"]) == ("poetry",)

    def test_multiple_on_one_line(self):
        assert extract_tags(["#a #b text #c"]) == ("a", "b", "c")

    def test_deduplicated_first_seen(self):
        assert extract_tags(["#b #a", "#a #b #c"]) == ("b", "a", "c")

    def test_stops_at_embedded_hash(self):
        assert extract_tags(["#one#two"]) == ("one", "two")

    def test_lone_hash_is_not_a_tag(self):
        assert extract_tags(["# heading", "##"]) == ()

    def test_unicode_tag(self):
        assert extract_tags(["読んだ #既読"]) == ("既読",)

    def test_order_independent_as_set(self):
        lines = ["x #a", "y #b #c", "#a again"]
        assert set(extract_tags(lines)) == set(extract_tags(list(reversed(lines))))

    def test_idempotent(self):
        lines = ["#a #b", "#c"]
        assert extract_tags(lines) == extract_tags(lines)


# ============================================================
# Links
# ============================================================


class TestExtractLinks:
    def test_basic(self):
        assert extract_links(["a [link] here"]) == ("link",)

    def test_inner_text_verbatim(self):
        assert extract_links(["[ spaced title ]"]) == (" spaced title ",)

    def test_multiple_and_dedup(self):
        assert extract_links(["[A] [B]", "[A]"]) == ("A", "B")

    def test_unterminated_bracket(self):
        assert extract_links(["broken [link"]) == ()

    def test_empty_brackets(self):
        assert extract_links(["[]"]) == ()


# ============================================================
# Metadata
# ============================================================


class TestMetadata:
    def test_character_count_includes_newlines(self):
        assert count_characters(["abc", "de"]) == 6

    def test_character_count_empty(self):
        assert count_characters([]) == 0

    def test_poetry(self):
        assert classify_creative_type(["A POEM"]) == "poetry"
        assert classify_creative_type(["詩を書いた"]) == "poetry"

    def test_priority_order(self):
        # poetry beats criticism beats essay beats diary
        assert classify_creative_type(["diary essay criticism poem"]) == "poetry"
        assert classify_creative_type(["diary essay criticism"]) == "criticism"
        assert classify_creative_type(["diary essay"]) == "essay"
        assert classify_creative_type(["日記"]) == "diary"

    def test_keyword_across_lines(self):
        assert classify_creative_type(["エッセ", "イ"]) == "note"
        assert classify_creative_type(["エッセイ"]) == "essay"

    def test_default_note(self):
        assert classify_creative_type(["shopping list"]) == "note"


# ============================================================
# normalize_page
# ============================================================


class TestNormalizePage:
    def test_scenario_tags_and_links(self):
        page = normalize_page(RawPage(id="1", title="T", lines=["hello #poetry", "a [link] here"]))
        assert page.tags == ("poetry",)
        assert page.links == ("link",)
        assert page.backlinks == ()
        assert page.metadata.link_count == 1
        assert page.metadata.word_count == len("hello #poetry\na [link] here")

    def test_missing_lines_tolerated(self):
        page = normalize_page(RawPage.model_validate({"id": "1", "title": "Empty"}))
        assert page.lines == ()
        assert page.tags == ()
        assert page.metadata.word_count == 0
        assert page.metadata.creative_type == "note"

    def test_null_fields_default(self):
        raw = RawPage.model_validate({"title": "T", "lines": None, "created": None, "updated": "x"})
        assert raw.id == "T"
        assert raw.lines == []
        assert raw.created == 0
        assert raw.updated == 0

    @pytest.mark.parametrize("lines", [5, True, 1.5, "text", {"text": "x"}])
    def test_scalar_lines_default_to_empty(self, lines):
        raw = RawPage.model_validate({"title": "T", "lines": lines})
        assert raw.lines == []
        assert normalize_page(raw).tags == ()

    def test_overflowing_timestamp_defaults(self):
        raw = RawPage.model_validate({"title": "T", "created": float("inf"), "updated": float("nan")})
        assert raw.created == 0
        assert raw.updated == 0

    def test_metadata_line_objects(self):
        raw = RawPage.model_validate(
            {"title": "T", "lines": [{"text": "T", "userId": "u"}, {"text": "#tag"}]}
        )
        assert raw.lines == ["T", "#tag"]
        assert normalize_page(raw).tags == ("tag",)

    def test_custom_classifier(self):
        page = normalize_page(RawPage(title="T", lines=["poem"]), classifier=lambda lines: "diary")
        assert page.metadata.creative_type == "diary"

    def test_page_is_immutable(self):
        page = normalize_page(RawPage(title="T"))
        with pytest.raises(ValidationError):
            page.title = "other"
