"""
Tagging API

Anyone using the localized_tagging app should use these APIs (or the methods
of TaggableMixin, which wrap the same code) instead of creating or modifying
the Tag and TaggedItem models directly, since tag creation and association
changes have rules you may not know about.

No permissions/rules are enforced by these methods -- these must be enforced
by the caller.

Every function takes an optional ``config``; by default the configuration is
read from the ``LOCALIZED_TAGGING`` Django setting.
"""
from __future__ import annotations

from typing import Any, Iterable

from django.db.models import QuerySet

from localized_tagging.lib.fields import current_locale

from . import scopes
from .associator import Associator
from .conf import TaggingConfig, get_config
from .data import TagInput
from .exceptions import TagTypeMismatch
from .models import Tag, TagQuerySet
from .resolver import TagResolver
from .store import TagStore

# Export these as part of the API
TagDoesNotExist = Tag.DoesNotExist
TypeMismatch = TagTypeMismatch


def _store(config: TaggingConfig | None) -> TagStore:
    return TagStore(config or get_config())


def _resolver(config: TaggingConfig | None) -> TagResolver:
    return TagResolver(config or get_config())


def _associator(obj, config: TaggingConfig | None) -> Associator:
    if config is None and hasattr(obj, "get_tagging_config"):
        config = obj.get_tagging_config()
    return Associator(obj, config or get_config())


# Tags

def find_or_create(
    tags: TagInput,
    tag_type: str | None = None,
    locale: str | None = None,
    config: TaggingConfig | None = None,
) -> Tag | list[Tag]:
    """
    Returns the tags with the given names, creating the ones that don't exist.

    A single value gives back a single Tag, and that includes a single Tag
    instance, not only a single name. Any iterable (even with one element)
    gives back a list in the same order. Tag instances are passed through,
    but must be of ``tag_type`` if one is given (raises TagTypeMismatch
    otherwise).
    """
    return _resolver(config).find_or_create(tags, tag_type, locale)


def find_by_text(
    text: str,
    tag_type: str | None = None,
    locale: str | None = None,
    config: TaggingConfig | None = None,
) -> Tag | None:
    """
    Returns the tag of ``tag_type`` whose name or slug is ``text``, or None.

    ``tag_type=None`` means an untyped tag.
    """
    return _store(config).find_exact(text, tag_type, locale or current_locale())


def find_by_text_any_type(
    text: str,
    locale: str | None = None,
    config: TaggingConfig | None = None,
) -> list[Tag]:
    """
    Returns every tag, whatever its type, whose name or slug is ``text``.
    """
    return _store(config).find_exact_any_type(text, locale or current_locale())


def list_by_type(tag_type: str | None = None, config: TaggingConfig | None = None) -> TagQuerySet:
    """
    Returns a QuerySet of the tags of the given type in display order.

    If ``tag_type`` is None, returns all tags.
    """
    return _store(config).with_type(tag_type)


def list_types(config: TaggingConfig | None = None) -> list[str | None]:
    """
    Returns the distinct tag types in use (None stands for untyped tags).
    """
    return _store(config).group_by_type()


def search_tags(text: str, locale: str | None = None, config: TaggingConfig | None = None) -> TagQuerySet:
    """
    Returns tags whose name contains ``text``, ignoring case, in display order.
    """
    return _store(config).containing(text, locale or current_locale())


def set_tag_order(tag_ids: Iterable[int], start: int = 1, config: TaggingConfig | None = None) -> int:
    """
    Reorders tags for display; the first id gets position ``start``.
    """
    return _store(config).set_new_order(tag_ids, start=start)


# Taggable objects

def attach_tags(obj, tags: TagInput, tag_type: str | None = None, config: TaggingConfig | None = None) -> list[Tag]:
    """
    Adds tags to ``obj``, creating missing ones. Already attached tags are kept.

    If ``obj`` has not been saved yet, the tags are attached right after it is.
    """
    return _associator(obj, config).attach(tags, tag_type)


def detach_tags(obj, tags: TagInput, tag_type: str | None = None, config: TaggingConfig | None = None) -> list[int]:
    """
    Removes tags from ``obj``; unknown and unattached tags are ignored.

    Returns the ids of the tags that were removed.
    """
    return _associator(obj, config).detach(tags, tag_type)


def detach_tag_named(
    obj,
    name: str,
    tag_type: str | None = None,
    locale: str | None = None,
    config: TaggingConfig | None = None,
) -> list[int]:
    """
    Removes the tag with exactly this name and type from ``obj``, if attached.
    """
    return _associator(obj, config).detach_named(name, tag_type, locale)


def sync_tags(obj, tags: TagInput, config: TaggingConfig | None = None) -> list[Tag]:
    """
    Makes ``tags`` the complete set of tags on ``obj``, whatever their types.
    """
    return _associator(obj, config).sync(tags)


def sync_tags_of_type(
    obj,
    tags: TagInput,
    tag_type: str | None = None,
    config: TaggingConfig | None = None,
) -> list[Tag]:
    """
    Makes ``tags`` the complete set of ``tag_type`` tags on ``obj``.

    Tags of other types are left as they are.
    """
    return _associator(obj, config).sync_within_type(tags, tag_type)


def has_tag(obj, name_or_id: Any, tag_type: str | None = None, config: TaggingConfig | None = None) -> bool:
    return _associator(obj, config).has_tag(name_or_id, tag_type)


def tags_of_type(obj, tag_type: str | None = None, config: TaggingConfig | None = None) -> list[Tag]:
    return _associator(obj, config).tags_of_type(tag_type)


# Filters

def _queryset_config(queryset: QuerySet, config: TaggingConfig | None) -> TaggingConfig:
    if config is None and hasattr(queryset.model, "get_tagging_config"):
        config = queryset.model.get_tagging_config()
    return config or get_config()


def with_all_tags(
    queryset: QuerySet,
    tags: TagInput,
    tag_type: str | None = None,
    locale: str | None = None,
    config: TaggingConfig | None = None,
) -> QuerySet:
    """
    Objects in ``queryset`` that have every one of ``tags``, ordered by name.

    Text that is not a tag matches nothing, so the result is empty.
    """
    return scopes.with_all_tags(queryset, tags, tag_type, locale, config=_queryset_config(queryset, config))


def with_any_tags(
    queryset: QuerySet,
    tags: TagInput,
    tag_type: str | None = None,
    locale: str | None = None,
    config: TaggingConfig | None = None,
) -> QuerySet:
    """
    Objects in ``queryset`` that have at least one of ``tags``, ordered by id.
    """
    return scopes.with_any_tags(queryset, tags, tag_type, locale, config=_queryset_config(queryset, config))


def without_tags(
    queryset: QuerySet,
    tags: TagInput,
    tag_type: str | None = None,
    locale: str | None = None,
    config: TaggingConfig | None = None,
) -> QuerySet:
    """
    Objects in ``queryset`` that have none of ``tags``, ordered by name.
    """
    return scopes.without_tags(queryset, tags, tag_type, locale, config=_queryset_config(queryset, config))


def with_all_tags_of_any_type(
    queryset: QuerySet,
    tags: TagInput,
    locale: str | None = None,
    config: TaggingConfig | None = None,
) -> QuerySet:
    return scopes.with_all_tags_of_any_type(queryset, tags, locale, config=_queryset_config(queryset, config))


def with_any_tags_of_any_type(
    queryset: QuerySet,
    tags: TagInput,
    locale: str | None = None,
    config: TaggingConfig | None = None,
) -> QuerySet:
    return scopes.with_any_tags_of_any_type(queryset, tags, locale, config=_queryset_config(queryset, config))


def without_tags_of_any_type(
    queryset: QuerySet,
    tags: TagInput,
    locale: str | None = None,
    config: TaggingConfig | None = None,
) -> QuerySet:
    return scopes.without_tags_of_any_type(queryset, tags, locale, config=_queryset_config(queryset, config))
