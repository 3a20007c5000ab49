"""
Tagging configuration.

Deployments customize the app with a ``LOCALIZED_TAGGING`` dict in their Django
settings, for example::

    LOCALIZED_TAGGING = {
        "TAG_MODEL": "my_app.CustomTag",
        "TAGGABLE_TABLE_NAME": "my_taggables",
    }

The settings are read once into an immutable ``TaggingConfig``, which is then
passed explicitly to the store, resolver and associator.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cached_property, lru_cache
from typing import TYPE_CHECKING, Any, Callable

from django.apps import apps
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

if TYPE_CHECKING:
    from .lookups import TextLookup
    from .models import Tag

log = logging.getLogger(__name__)

SETTINGS_NAME = "LOCALIZED_TAGGING"

DEFAULTS: dict[str, str] = {
    # "app_label.ModelName" of the concrete tag model; must be Tag or a subclass of it.
    "TAG_MODEL": "localized_tagging.Tag",
    # Dotted path of the TextLookup class that builds locale-aware text filters.
    "TEXT_LOOKUP": "localized_tagging.core.tagging.lookups.JSONKeyTextLookup",
    # Dotted path of the callable that turns a tag name into a slug.
    "SLUGIFY": "django.utils.text.slugify",
    # Prefix of the polymorphic reference columns: <morph>_type_id, <morph>_id.
    "TAGGABLE_MORPH_NAME": "taggable",
    # Table holding the association rows.
    "TAGGABLE_TABLE_NAME": "taggables",
}


@dataclass(frozen=True)
class TaggingConfig:
    """
    Which models, tables and collaborators the tagging engine uses.
    """
    tag_model_label: str = DEFAULTS["TAG_MODEL"]
    text_lookup_path: str = DEFAULTS["TEXT_LOOKUP"]
    slugify_path: str = DEFAULTS["SLUGIFY"]
    morph_name: str = DEFAULTS["TAGGABLE_MORPH_NAME"]
    table_name: str = DEFAULTS["TAGGABLE_TABLE_NAME"]

    @classmethod
    def from_dict(cls, values: dict[str, Any]) -> TaggingConfig:
        """
        Build a config from a ``LOCALIZED_TAGGING``-style dict.

        Raises ImproperlyConfigured for keys we don't know about.
        """
        unknown = set(values) - set(DEFAULTS)
        if unknown:
            raise ImproperlyConfigured(
                f"Unknown {SETTINGS_NAME} setting(s): {', '.join(sorted(unknown))}"
            )
        merged = {**DEFAULTS, **values}
        return cls(
            tag_model_label=merged["TAG_MODEL"],
            text_lookup_path=merged["TEXT_LOOKUP"],
            slugify_path=merged["SLUGIFY"],
            morph_name=merged["TAGGABLE_MORPH_NAME"],
            table_name=merged["TAGGABLE_TABLE_NAME"],
        )

    @property
    def tag_model(self) -> type[Tag]:
        """
        The concrete tag model class.
        """
        from .models import Tag  # pylint: disable=import-outside-toplevel

        try:
            model = apps.get_model(self.tag_model_label)
        except (LookupError, ValueError) as exc:
            raise ImproperlyConfigured(
                f"{SETTINGS_NAME}['TAG_MODEL'] refers to an unknown model: {self.tag_model_label}"
            ) from exc
        if not issubclass(model, Tag):
            raise ImproperlyConfigured(
                f"{SETTINGS_NAME}['TAG_MODEL'] must be a subclass of Tag, got {self.tag_model_label}"
            )
        return model

    @cached_property
    def text_lookup(self) -> TextLookup:
        return import_string(self.text_lookup_path)()

    @cached_property
    def slugify(self) -> Callable[[str], str]:
        return import_string(self.slugify_path)

    @property
    def type_column(self) -> str:
        return f"{self.morph_name}_type_id"

    @property
    def id_column(self) -> str:
        return f"{self.morph_name}_id"


@lru_cache(maxsize=None)
def get_config() -> TaggingConfig:
    """
    Return the TaggingConfig built from the current Django settings.
    """
    return TaggingConfig.from_dict(getattr(settings, SETTINGS_NAME, {}))


def reset_config_on_setting_change(setting=None, **kwargs):  # pylint: disable=unused-argument
    """
    ``setting_changed`` receiver that drops the cached config.
    """
    if setting == SETTINGS_NAME:
        log.debug("%s changed, resetting cached tagging config", SETTINGS_NAME)
        get_config.cache_clear()
