"""
Test the tagging base models
"""
from __future__ import annotations

import ddt  # type: ignore[import]
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.test.testcases import TestCase
from django.utils import translation

from localized_tagging.core.tagging.models import Tag, TaggedItem
from test_utils.taggable_app.models import Article, CustomTag, Photo


def make_tag(name: str, tag_type: str | None = None, locale: str = "en") -> Tag:
    """
    Creates a tag named ``name`` in ``locale``.
    """
    return Tag.objects.create(name={locale: name}, type=tag_type)


class TestTagMixin:
    """
    Base class that creates some tags and taggable objects for testing.
    """

    def setUp(self):
        super().setUp()
        self.red = make_tag("red")
        self.green = make_tag("green")
        self.color_red = make_tag("red", "color")
        self.color_blue = make_tag("blue", "color")
        self.size_small = make_tag("small", "size")
        self.dark_red = Tag.objects.create(name={"en": "Dark Red", "nl": "Donker Rood"}, type="color")

        self.article_1 = Article.objects.create(name="Apples")
        self.article_2 = Article.objects.create(name="Bananas")
        self.article_3 = Article.objects.create(name="Cherries")
        self.photo = Photo.objects.create(title="Sunset")


@ddt.ddt
class TestTag(TestTagMixin, TestCase):
    """
    Test the Tag model's properties and methods.
    """

    def test_representations(self):
        assert str(self.red) == "red"
        assert repr(self.red) == f"<Tag> ({self.red.id}) red"
        assert repr(self.color_red) == f"<Tag> ({self.color_red.id}) color:red"

    def test_translated_name(self):
        assert self.dark_red.translated_name == "Dark Red"
        assert self.dark_red.translated_slug == "dark-red"
        with translation.override("nl"):
            assert self.dark_red.translated_name == "Donker Rood"
            assert str(self.dark_red) == "Donker Rood"
        with translation.override("fr"):
            assert self.dark_red.translated_name == ""

    def test_slug_generated_per_locale(self):
        assert self.dark_red.slug == {"en": "dark-red", "nl": "donker-rood"}
        self.dark_red.set_translation("name", "fr", "Rouge Foncé")
        self.dark_red.save()
        self.dark_red.refresh_from_db()
        assert self.dark_red.slug == {"en": "dark-red", "nl": "donker-rood", "fr": "rouge-fonce"}

    def test_slug_saved_with_update_fields(self):
        self.red.name = {"en": "Bright Red"}
        self.red.save(update_fields=["name"])
        self.red.refresh_from_db()
        assert self.red.slug == {"en": "bright-red"}

    def test_order_column_assigned(self):
        tags = [self.red, self.green, self.color_red, self.color_blue, self.size_small, self.dark_red]
        positions = [tag.order_column for tag in tags]
        assert positions == sorted(positions)
        assert len(set(positions)) == len(positions)
        new_tag = make_tag("new")
        assert new_tag.order_column == max(positions) + 1

    def test_order_column_kept(self):
        tag = Tag.objects.create(name={"en": "pinned"}, order_column=100)
        assert tag.order_column == 100

    def test_timestamps(self):
        assert self.red.created is not None
        assert self.red.modified is not None

    def test_translations(self):
        assert self.dark_red.get_translation("name", "nl") == "Donker Rood"
        assert self.dark_red.get_translation("slug", "en") == "dark-red"
        with translation.override("nl"):
            assert self.dark_red.get_translation("name") == "Donker Rood"

        self.dark_red.set_translation("name", "fr", "Rouge")
        assert self.dark_red.name == {"en": "Dark Red", "nl": "Donker Rood", "fr": "Rouge"}
        self.dark_red.forget_translation("name", "nl")
        assert self.dark_red.name == {"en": "Dark Red", "fr": "Rouge"}
        self.dark_red.forget_translation("name", "de")
        assert self.dark_red.name == {"en": "Dark Red", "fr": "Rouge"}

    def test_translations_unknown_field(self):
        with self.assertRaises(ValueError):
            self.red.get_translation("type")
        with self.assertRaises(ValueError):
            self.red.set_translation("order_column", "en", "x")

    @ddt.data(
        {},
        {"en": ""},
        {"en": "   "},
        {"en": "ok", "nl": ""},
    )
    def test_clean_invalid_name(self, name):
        with self.assertRaises(ValidationError):
            Tag(name=name).full_clean()

    def test_clean_blank_type(self):
        with self.assertRaises(ValidationError):
            Tag(name={"en": "ok"}, type=" ").clean()

    def test_clean_valid(self):
        Tag(name={"en": "ok"}, type="color").clean()
        Tag(name={"en": "ok"}, type=None).clean()

    def test_queryset_of_type(self):
        assert list(Tag.objects.of_type(None).ordered()) == [self.red, self.green]
        assert list(Tag.objects.of_type("color").ordered()) == [self.color_red, self.color_blue, self.dark_red]
        assert not Tag.objects.of_type("Color").exists()

    def test_names_not_unique_in_storage(self):
        # Uniqueness of (locale, name, type) is enforced when resolving, not by the table.
        duplicate = make_tag("red")
        assert duplicate.pk != self.red.pk


class TestTaggedItem(TestTagMixin, TestCase):
    """
    Test the association model.
    """

    def test_unique_per_object_and_tag(self):
        self.article_1.attach_tags([self.red])
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                TaggedItem.objects.create(
                    content_object=self.article_1,
                    tag=self.red,
                )

    def test_representation(self):
        self.article_1.attach_tags([self.red])
        item = TaggedItem.objects.get()
        assert str(item) == f"<TaggedItem> {item.content_type_id}:{self.article_1.pk} -> {self.red.pk}"
        assert item.content_object == self.article_1

    def test_table_and_columns(self):
        assert TaggedItem._meta.db_table == "taggables"
        assert TaggedItem._meta.get_field("content_type").column == "taggable_type_id"
        assert TaggedItem._meta.get_field("object_id").column == "taggable_id"

    def test_deleting_tag_removes_associations(self):
        self.article_1.attach_tags([self.red, self.green])
        self.red.delete()
        assert list(TaggedItem.objects.values_list("tag_id", flat=True)) == [self.green.pk]


class TestCustomTagModel(TestTagMixin, TestCase):
    """
    Test the proxy tag model used for the TAG_MODEL setting.
    """

    def test_proxy_of_tag(self):
        assert CustomTag._meta.proxy
        assert CustomTag._meta.concrete_model is Tag
        assert CustomTag._meta.app_label == "localized_tagging"

    def test_shares_rows(self):
        assert CustomTag.objects.get(pk=self.red.pk).label == "RED"
        tag = CustomTag.objects.create(name={"en": "teal"})
        assert Tag.objects.get(pk=tag.pk).translated_name == "teal"
