"""
Test the tagging configuration
"""
from __future__ import annotations

from django.core.exceptions import ImproperlyConfigured
from django.test import TestCase, override_settings

from localized_tagging.core.tagging.conf import DEFAULTS, TaggingConfig, get_config
from localized_tagging.core.tagging.lookups import JSONKeyTextLookup
from localized_tagging.core.tagging.models import Tag
from localized_tagging.core.tagging.store import TagStore


def shout(text: str) -> str:
    """
    Slug generator used to test the SLUGIFY setting.
    """
    return text.upper()


class TestTaggingConfig(TestCase):
    """
    Test reading LOCALIZED_TAGGING into a TaggingConfig.
    """

    def test_defaults(self):
        config = TaggingConfig()
        assert config.tag_model is Tag
        assert isinstance(config.text_lookup, JSONKeyTextLookup)
        assert config.slugify("Dark Red") == "dark-red"
        assert config.type_column == "taggable_type_id"
        assert config.id_column == "taggable_id"
        assert config.table_name == "taggables"

    def test_from_dict(self):
        config = TaggingConfig.from_dict({
            "TAG_MODEL": "localized_tagging.CustomTag",
            "TAGGABLE_MORPH_NAME": "entity",
        })
        assert config.tag_model.__name__ == "CustomTag"
        assert config.type_column == "entity_type_id"
        assert config.id_column == "entity_id"
        assert config.text_lookup_path == DEFAULTS["TEXT_LOOKUP"]

    def test_unknown_key(self):
        with self.assertRaises(ImproperlyConfigured):
            TaggingConfig.from_dict({"TAG_MODEL": "localized_tagging.Tag", "TAGS_TABLE": "x"})

    def test_unknown_model(self):
        with self.assertRaises(ImproperlyConfigured):
            _ = TaggingConfig(tag_model_label="taggable_app.Nope").tag_model
        with self.assertRaises(ImproperlyConfigured):
            _ = TaggingConfig(tag_model_label="not-a-label").tag_model

    def test_model_must_be_a_tag(self):
        with self.assertRaises(ImproperlyConfigured):
            _ = TaggingConfig(tag_model_label="taggable_app.Article").tag_model

    def test_immutable(self):
        config = TaggingConfig()
        with self.assertRaises(AttributeError):
            config.table_name = "other"  # type: ignore[misc]

    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_get_config_follows_settings(self):
        before = get_config()
        with override_settings(LOCALIZED_TAGGING={"SLUGIFY": f"{__name__}.shout"}):
            config = get_config()
            assert config is not before
            assert config.slugify_path == f"{__name__}.shout"
            tag = TagStore(config).create("dark red", None, "en")
            assert tag.slug == {"en": "DARK RED"}
        assert get_config().slugify_path == DEFAULTS["SLUGIFY"]
