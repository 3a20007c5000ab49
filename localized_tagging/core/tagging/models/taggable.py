"""
Mixin that makes any model taggable.
"""
from __future__ import annotations

from typing import Any

from django.contrib.contenttypes.fields import GenericRelation
from django.db import models, transaction
from typing_extensions import Self  # Until we upgrade to python 3.11

from .. import scopes
from ..associator import Associator
from ..conf import TaggingConfig, get_config
from ..data import TagInput
from .base import Tag, TaggedItem, TagQuerySet


class TaggableQuerySet(models.QuerySet):
    """
    QuerySet with tag filters, used as the default manager of taggable models.
    """

    def _config(self) -> TaggingConfig:
        return self.model.get_tagging_config()

    def with_all_tags(self, tags: TagInput, tag_type: str | None = None, locale: str | None = None) -> Self:
        return scopes.with_all_tags(self, tags, tag_type, locale, config=self._config())

    def with_any_tags(self, tags: TagInput, tag_type: str | None = None, locale: str | None = None) -> Self:
        return scopes.with_any_tags(self, tags, tag_type, locale, config=self._config())

    def without_tags(self, tags: TagInput, tag_type: str | None = None, locale: str | None = None) -> Self:
        return scopes.without_tags(self, tags, tag_type, locale, config=self._config())

    def with_all_tags_of_any_type(self, tags: TagInput, locale: str | None = None) -> Self:
        return scopes.with_all_tags_of_any_type(self, tags, locale, config=self._config())

    def with_any_tags_of_any_type(self, tags: TagInput, locale: str | None = None) -> Self:
        return scopes.with_any_tags_of_any_type(self, tags, locale, config=self._config())

    def without_tags_of_any_type(self, tags: TagInput, locale: str | None = None) -> Self:
        return scopes.without_tags_of_any_type(self, tags, locale, config=self._config())


class TaggableMixin(models.Model):
    """
    Abstract model that gives its subclasses tags.

    Usage::

        class Article(TaggableMixin):
            name = models.CharField(max_length=100)

        article = Article.objects.create(name="Hello")
        article.attach_tags(["news", "featured"])
        article.sync_tags_of_type(["red"], "color")
        Article.objects.with_any_tags(["news"])

    Tags set before the first save are queued and attached right after the
    object is created. Deleting the object removes its associations.
    """

    # Field the with_all_tags/without_tags filters order by.
    tag_scope_name_field = "name"

    # Lets Django remove association rows in bulk and cascading deletes too.
    tagged_items = GenericRelation(TaggedItem)

    objects = TaggableQuerySet.as_manager()

    class Meta:
        abstract = True

    @classmethod
    def get_tagging_config(cls) -> TaggingConfig:
        """
        Configuration used for this model's tags. Override to customize per model.
        """
        return get_config()

    def tag_associator(self) -> Associator:
        return Associator(self, self.get_tagging_config())

    def save(self, *args, **kwargs):
        """
        Save, and on the first save attach the tags queued so far.

        The row and the queued tags are written together: if attaching fails,
        the object is left unsaved with its queue intact.
        """
        if not self._state.adding:
            super().save(*args, **kwargs)
            return
        pk = self.pk
        try:
            with transaction.atomic():
                super().save(*args, **kwargs)
                self.tag_associator().on_created()
        except Exception:
            self.pk = pk
            self._state.adding = True
            raise

    def delete(self, *args, **kwargs):
        with transaction.atomic():
            self.tag_associator().on_deleted()
            return super().delete(*args, **kwargs)

    @property
    def tags(self) -> list[Tag]:
        """
        This object's tags in display order, loaded once and kept until they change.
        """
        return self.tag_associator().loaded_tags()

    def refresh_tags(self) -> list[Tag]:
        associator = self.tag_associator()
        associator.forget_loaded_tags()
        return associator.loaded_tags()

    def tags_translated(self, locale: str | None = None) -> TagQuerySet:
        return self.tag_associator().tags_translated(locale)

    def tags_of_type(self, tag_type: str | None = None) -> list[Tag]:
        return self.tag_associator().tags_of_type(tag_type)

    def has_tag(self, name_or_id: Any, tag_type: str | None = None, locale: str | None = None) -> bool:
        return self.tag_associator().has_tag(name_or_id, tag_type, locale)

    def set_tags(self, tags: TagInput) -> None:
        """
        Replace all of this object's tags, or queue them if it isn't saved yet.
        """
        self.tag_associator().sync(tags)

    def attach_tags(self, tags: TagInput, tag_type: str | None = None, locale: str | None = None) -> Self:
        self.tag_associator().attach(tags, tag_type, locale)
        return self

    def attach_tag(self, tag: str | Tag, tag_type: str | None = None, locale: str | None = None) -> Self:
        return self.attach_tags([tag], tag_type, locale)

    def detach_tags(self, tags: TagInput, tag_type: str | None = None, locale: str | None = None) -> Self:
        self.tag_associator().detach(tags, tag_type, locale)
        return self

    def detach_tag_named(self, name: str, tag_type: str | None = None, locale: str | None = None) -> Self:
        self.tag_associator().detach_named(name, tag_type, locale)
        return self

    def sync_tags(self, tags: TagInput, locale: str | None = None) -> Self:
        self.tag_associator().sync(tags, locale)
        return self

    def sync_tags_of_type(self, tags: TagInput, tag_type: str | None = None, locale: str | None = None) -> Self:
        self.tag_associator().sync_within_type(tags, tag_type, locale)
        return self
