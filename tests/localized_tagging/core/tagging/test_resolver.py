"""
Test turning tag input into Tag rows
"""
from __future__ import annotations

import ddt  # type: ignore[import]
from django.test.testcases import TestCase
from django.utils import translation

from localized_tagging.core.tagging.data import ResolvedRef, TextRef, is_scalar_input, normalize_tag_input, unique_ids
from localized_tagging.core.tagging.exceptions import TaggingError, TagTypeMismatch
from localized_tagging.core.tagging.models import Tag
from localized_tagging.core.tagging.resolver import TagResolver

from .test_models import TestTagMixin


@ddt.ddt
class TestNormalizeTagInput(TestTagMixin, TestCase):
    """
    Test the single normalization step for every accepted input shape.
    """

    def test_scalar_text(self):
        assert normalize_tag_input("red") == [TextRef("red")]
        assert is_scalar_input("red")

    def test_scalar_tag(self):
        assert normalize_tag_input(self.red) == [ResolvedRef(self.red)]
        assert is_scalar_input(self.red)

    def test_mixed_sequence(self):
        refs = normalize_tag_input(["red", self.green, "blue"])
        assert refs == [TextRef("red"), ResolvedRef(self.green), TextRef("blue")]
        assert not is_scalar_input(["red"])

    def test_other_iterables(self):
        assert normalize_tag_input(("a", "b")) == [TextRef("a"), TextRef("b")]
        assert normalize_tag_input(name for name in ["a"]) == [TextRef("a")]
        assert normalize_tag_input(Tag.objects.filter(pk=self.red.pk)) == [ResolvedRef(self.red)]
        assert normalize_tag_input([]) == []

    @ddt.data(
        42,
        None,
        b"red",
        {"en": "red"},
        ["red", 42],
        [None],
    )
    def test_invalid(self, value):
        with self.assertRaises(TypeError):
            normalize_tag_input(value)

    def test_unique_ids(self):
        assert unique_ids([self.green, self.red, self.green]) == [self.green.pk, self.red.pk]


class TestTagResolver(TestTagMixin, TestCase):
    """
    Test resolving tag input within a type scope and a locale.
    """

    def setUp(self):
        super().setUp()
        self.resolver = TagResolver()

    def test_resolve_existing_drops_misses(self):
        tags = self.resolver.resolve_existing(["green", "purple", "red"])
        assert tags == [self.green, self.red]
        assert not Tag.objects.filter(name__en="purple").exists()

    def test_resolve_existing_type_scope(self):
        assert self.resolver.resolve_existing(["red", "blue"], "color") == [self.color_red, self.color_blue]
        assert self.resolver.resolve_existing(["red", "blue"]) == [self.red]

    def test_resolve_existing_keeps_duplicates(self):
        assert self.resolver.resolve_existing(["red", self.red]) == [self.red, self.red]

    def test_resolve_existing_matches_slug(self):
        assert self.resolver.resolve_existing(["dark-red"], "color") == [self.dark_red]

    def test_resolve_existing_locale(self):
        assert self.resolver.resolve_existing(["Donker Rood"], "color", "nl") == [self.dark_red]
        with translation.override("nl"):
            assert self.resolver.resolve_existing(["Donker Rood"], "color") == [self.dark_red]
        assert self.resolver.resolve_existing(["Donker Rood"], "color") == []

    def test_resolved_tags_pass_without_type(self):
        assert self.resolver.resolve_existing([self.size_small]) == [self.size_small]

    def test_type_mismatch(self):
        with self.assertRaises(TagTypeMismatch) as context:
            self.resolver.resolve_existing([self.color_red], "size")
        error = context.exception
        assert isinstance(error, TaggingError)
        assert isinstance(error, ValueError)
        assert error.requested_type == "size"
        assert error.tag == self.color_red
        assert str(error) == "Type was set to size but tag is of type color"

    def test_resolve_or_create(self):
        tags = self.resolver.resolve_or_create(["red", "purple"], "color")
        assert tags[0] == self.color_red
        purple = tags[1]
        assert purple.name == {"en": "purple"}
        assert purple.type == "color"

    def test_resolve_or_create_in_locale(self):
        tag = self.resolver.resolve_or_create(["Rouge"], None, "fr")[0]
        assert tag.name == {"fr": "Rouge"}
        assert tag.slug == {"fr": "rouge"}

    def test_resolve_or_create_mismatch_creates_nothing(self):
        count = Tag.objects.count()
        with self.assertRaises(TagTypeMismatch):
            self.resolver.resolve_or_create(["purple", self.color_red], "size")
        assert Tag.objects.count() == count

    def test_find_or_create_scalar_in_scalar_out(self):
        tag = self.resolver.find_or_create("red", "color")
        assert tag == self.color_red
        assert self.resolver.find_or_create(self.red) == self.red
        assert self.resolver.find_or_create(["red"], "color") == [self.color_red]
        assert self.resolver.find_or_create([self.red]) == [self.red]

    def test_find_or_create_idempotent(self):
        first = self.resolver.find_or_create("purple", "color", "en")
        second = self.resolver.find_or_create("purple", "color", "en")
        assert first.pk == second.pk
        assert Tag.objects.filter(name__en="purple", type="color").count() == 1

    def test_resolve_any_type(self):
        assert self.resolver.resolve_any_type(["red", "purple", self.size_small]) == [
            self.red, self.color_red, self.size_small,
        ]
        assert not Tag.objects.filter(name__en="purple").exists()

    def test_resolve_for_query(self):
        groups = self.resolver.resolve_for_query(["red", "purple", self.green])
        assert groups == [[self.red], [], [self.green]]

    def test_resolve_for_query_any_type(self):
        groups = self.resolver.resolve_for_query(["red", "small"], any_type=True)
        assert groups == [[self.red, self.color_red], [self.size_small]]

    def test_resolve_for_query_logs_missing_text(self):
        with self.assertLogs("localized_tagging.core.tagging.resolver", level="DEBUG") as logs:
            self.resolver.resolve_for_query(["purple"], "color")
        assert "'purple'" in logs.output[0]

    def test_resolve_for_query_type_mismatch(self):
        with self.assertRaises(TagTypeMismatch):
            self.resolver.resolve_for_query([self.color_red], "size")
