"""
Read-side filters: taggable objects that have all, any, or none of some tags.

Each function takes a QuerySet of a taggable model and returns a filtered,
ordered QuerySet. Tags are resolved without creating anything. Text that does
not resolve to a tag never matches, so asking for objects tagged with a tag
that doesn't exist gives no results instead of every object.
"""
from __future__ import annotations

from itertools import chain

from django.contrib.contenttypes.models import ContentType
from django.db.models import Exists, OuterRef, QuerySet

from .conf import TaggingConfig, get_config
from .data import TagInput, unique_ids
from .models.base import TaggedItem
from .resolver import TagResolver

# Field used for alphabetical ordering when the model doesn't say otherwise.
DEFAULT_NAME_FIELD = "name"


def _name_field(queryset: QuerySet) -> str:
    return getattr(queryset.model, "tag_scope_name_field", DEFAULT_NAME_FIELD)


def _tagged_with(queryset: QuerySet, tag_ids: list[int]) -> Exists:
    """
    EXISTS(an association row between the outer object and one of ``tag_ids``).
    """
    content_type = ContentType.objects.get_for_model(queryset.model)
    return Exists(
        TaggedItem.objects.filter(
            content_type=content_type,
            object_id=OuterRef("pk"),
            tag_id__in=tag_ids,
        )
    )


def _resolve(values, tag_type, locale, any_type, config) -> list[list]:
    resolver = TagResolver(config or get_config())
    return resolver.resolve_for_query(values, tag_type, locale, any_type=any_type)


def _with_all(queryset: QuerySet, groups: list[list]) -> QuerySet:
    if any(not group for group in groups):
        return queryset.none()
    for tag_id in unique_ids(chain.from_iterable(groups)):
        queryset = queryset.filter(_tagged_with(queryset, [tag_id]))
    return queryset.order_by(_name_field(queryset))


def _with_any(queryset: QuerySet, groups: list[list]) -> QuerySet:
    tag_ids = unique_ids(chain.from_iterable(groups))
    if not tag_ids:
        return queryset.none()
    return queryset.filter(_tagged_with(queryset, tag_ids)).order_by("pk")


def _without(queryset: QuerySet, groups: list[list]) -> QuerySet:
    tag_ids = unique_ids(chain.from_iterable(groups))
    if tag_ids:
        queryset = queryset.filter(~_tagged_with(queryset, tag_ids))
    return queryset.order_by(_name_field(queryset))


def with_all_tags(
    queryset: QuerySet,
    values: TagInput,
    tag_type: str | None = None,
    locale: str | None = None,
    config: TaggingConfig | None = None,
) -> QuerySet:
    """
    Objects that have every one of the given tags, ordered by name.
    """
    return _with_all(queryset, _resolve(values, tag_type, locale, False, config))


def with_any_tags(
    queryset: QuerySet,
    values: TagInput,
    tag_type: str | None = None,
    locale: str | None = None,
    config: TaggingConfig | None = None,
) -> QuerySet:
    """
    Objects that have at least one of the given tags, ordered by id.
    """
    return _with_any(queryset, _resolve(values, tag_type, locale, False, config))


def without_tags(
    queryset: QuerySet,
    values: TagInput,
    tag_type: str | None = None,
    locale: str | None = None,
    config: TaggingConfig | None = None,
) -> QuerySet:
    """
    Objects that have none of the given tags, ordered by name.
    """
    return _without(queryset, _resolve(values, tag_type, locale, False, config))


def with_all_tags_of_any_type(
    queryset: QuerySet,
    values: TagInput,
    locale: str | None = None,
    config: TaggingConfig | None = None,
) -> QuerySet:
    """
    Like with_all_tags, but text matches tags of every type.

    Every type variant of a name is required: if "red" exists as both a
    color and an untyped tag, objects need both.
    """
    return _with_all(queryset, _resolve(values, None, locale, True, config))


def with_any_tags_of_any_type(
    queryset: QuerySet,
    values: TagInput,
    locale: str | None = None,
    config: TaggingConfig | None = None,
) -> QuerySet:
    return _with_any(queryset, _resolve(values, None, locale, True, config))


def without_tags_of_any_type(
    queryset: QuerySet,
    values: TagInput,
    locale: str | None = None,
    config: TaggingConfig | None = None,
) -> QuerySet:
    return _without(queryset, _resolve(values, None, locale, True, config))
