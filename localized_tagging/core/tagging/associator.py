"""
Keeps the set of tags associated with one taggable object in the desired state.

The Associator computes which association rows need to be inserted or
deleted, and applies only those. It does not hook into model signals: the
owning model calls ``on_created()`` after its first save and ``on_deleted()``
when it is deleted (``TaggableMixin`` does both).
"""
from __future__ import annotations

import logging
from typing import Any

from django.contrib.contenttypes.models import ContentType
from django.db import models, transaction
from django.db.models.fields.json import KeyTextTransform

from localized_tagging.lib.fields import current_locale
from localized_tagging.lib.sortable import next_position

from .conf import TaggingConfig, get_config
from .data import TagInput, unique_ids
from .models.base import Tag, TaggedItem, TagQuerySet
from .resolver import TagResolver
from .signals import TAGS_CHANGED

log = logging.getLogger(__name__)

# Attributes stored on the taggable instance.
QUEUED_TAGS_ATTR = "_queued_tags"
TAG_CACHE_ATTR = "_loaded_tags"


class Associator:
    """
    Attach, detach and sync the tags of a single model instance.

    Changes requested before the instance is saved are queued on the
    instance and applied by ``on_created()``.
    """

    def __init__(
        self,
        instance: models.Model,
        config: TaggingConfig | None = None,
        resolver: TagResolver | None = None,
    ):
        self.instance = instance
        self.config = config or get_config()
        self.resolver = resolver or TagResolver(self.config)

    @property
    def is_saved(self) -> bool:
        return not self.instance._state.adding and self.instance.pk is not None

    @property
    def content_type(self) -> ContentType:
        return ContentType.objects.get_for_model(self.instance)

    def rows(self) -> models.QuerySet[TaggedItem]:
        """
        The association rows of this instance.
        """
        return TaggedItem.objects.filter(content_type=self.content_type, object_id=self.instance.pk)

    def tags_query(self) -> TagQuerySet:
        """
        A fresh query for the tags of this instance, in display order.
        """
        return self.config.tag_model.objects.filter(pk__in=self.rows().values("tag_id")).ordered()

    def tags_translated(self, locale: str | None = None) -> TagQuerySet:
        """
        The tags of this instance, annotated with ``name_translated`` and
        ``slug_translated`` in ``locale``.
        """
        locale = locale or current_locale()
        return self.tags_query().annotate(
            name_translated=KeyTextTransform(locale, "name"),
            slug_translated=KeyTextTransform(locale, "slug"),
        )

    def current_tag_ids(self) -> list[int]:
        return list(self.rows().order_by("order", "id").values_list("tag_id", flat=True))

    def current_tag_ids_of_type(self, tag_type: str | None) -> list[int]:
        """
        Ids of the associated tags whose type is exactly ``tag_type`` (None: untyped).
        """
        rows = self.rows()
        if tag_type is None:
            rows = rows.filter(tag__type__isnull=True)
        else:
            rows = rows.filter(tag__type=tag_type)
        return list(rows.order_by("order", "id").values_list("tag_id", flat=True))

    # Loaded tag collection

    def loaded_tags(self) -> list[Tag]:
        """
        The instance's tags, loaded once and then kept on the instance.

        Every write through this class drops the loaded list, so the next
        read reflects the change.
        """
        loaded = self.instance.__dict__.get(TAG_CACHE_ATTR)
        if loaded is None:
            loaded = list(self.tags_query()) if self.is_saved else []
            self.instance.__dict__[TAG_CACHE_ATTR] = loaded
        return loaded

    def forget_loaded_tags(self) -> None:
        self.instance.__dict__.pop(TAG_CACHE_ATTR, None)

    def has_tag(self, name_or_id: Any, tag_type: str | None = None, locale: str | None = None) -> bool:
        """
        Does the loaded tag collection contain this tag?

        ``name_or_id`` may be a Tag, a primary key, or a name in ``locale``
        (default: the current locale). If ``tag_type`` is given, only tags of
        that type are considered.
        """
        tags = self.loaded_tags()
        if tag_type is not None:
            tags = [tag for tag in tags if tag.type == tag_type]
        if isinstance(name_or_id, Tag):
            return any(tag.pk == name_or_id.pk for tag in tags)
        if isinstance(name_or_id, int) and not isinstance(name_or_id, bool):
            return any(tag.pk == name_or_id for tag in tags)
        return any(tag.name.text(locale) == name_or_id for tag in tags)

    def tags_of_type(self, tag_type: str | None = None) -> list[Tag]:
        """
        Loaded tags whose type is exactly ``tag_type`` (None: untyped).
        """
        return [tag for tag in self.loaded_tags() if tag.type == tag_type]

    # Writes

    def queue(self, values: TagInput, tag_type: str | None = None, replace: bool = False) -> None:
        """
        Remember tags to attach once the (unsaved) instance has been created.

        Nothing is resolved or validated until then.
        """
        queued = [] if replace else list(getattr(self.instance, QUEUED_TAGS_ATTR, []))
        queued.append((values, tag_type))
        setattr(self.instance, QUEUED_TAGS_ATTR, queued)

    def queued(self) -> list[tuple[TagInput, str | None]]:
        return list(getattr(self.instance, QUEUED_TAGS_ATTR, []))

    def attach(self, values: TagInput, tag_type: str | None = None, locale: str | None = None) -> list[Tag]:
        """
        Add tags to the instance, creating any that don't exist yet.

        Tags that are already attached are left alone. Returns the resolved
        tags (empty if the instance is unsaved and the request was queued).
        """
        if not self.is_saved:
            self.queue(values, tag_type)
            return []
        with transaction.atomic():
            tags = self.resolver.resolve_or_create(values, tag_type, locale)
            attached = self._insert(unique_ids(tags))
            self._changed(attached=attached)
        return tags

    def detach(self, values: TagInput, tag_type: str | None = None, locale: str | None = None) -> list[int]:
        """
        Remove tags from the instance. Returns the ids that were actually removed.

        Text that matches no tag, and tags that aren't attached, are ignored.
        Without a ``tag_type``, text removes matching tags of every type.
        """
        if not self.is_saved:
            return []
        if tag_type is None:
            tags = self.resolver.resolve_any_type(values, locale)
        else:
            tags = self.resolver.resolve_existing(values, tag_type, locale)
        with transaction.atomic():
            detached = self._delete(unique_ids(tags))
            self._changed(detached=detached)
        return detached

    def detach_named(self, name: str, tag_type: str | None = None, locale: str | None = None) -> list[int]:
        """
        Remove the tag named ``name`` (in ``locale``) of exactly ``tag_type``.

        ``tag_type=None`` only matches an untyped tag. Does nothing if there is
        no such tag.
        """
        if not self.is_saved:
            return []
        tag = self.resolver.store.find_by_name(name, tag_type, locale or current_locale())
        if tag is None:
            return []
        with transaction.atomic():
            detached = self._delete([tag.pk])
            self._changed(detached=detached)
        self.forget_loaded_tags()
        return detached

    def sync(self, values: TagInput, locale: str | None = None) -> list[Tag]:
        """
        Make the instance's tags exactly ``values``, across every type.

        Text is resolved (or created) as untyped tags.
        """
        if not self.is_saved:
            self.queue(values, replace=True)
            return []
        with transaction.atomic():
            tags = self.resolver.resolve_or_create(values, None, locale)
            self._apply(unique_ids(tags), self.current_tag_ids())
        return tags

    def sync_within_type(self, values: TagInput, tag_type: str | None = None, locale: str | None = None) -> list[Tag]:
        """
        Make the instance's tags of type ``tag_type`` exactly ``values``.

        Tags of other types are not touched. If nothing needs to change,
        nothing is written and TAGS_CHANGED is not sent.
        """
        if not self.is_saved:
            queued = [(v, t) for v, t in self.queued() if t != tag_type]
            setattr(self.instance, QUEUED_TAGS_ATTR, queued)
            self.queue(values, tag_type)
            return []
        with transaction.atomic():
            tags = self.resolver.resolve_or_create(values, tag_type, locale)
            self._apply(unique_ids(tags), self.current_tag_ids_of_type(tag_type))
        return tags

    # Lifecycle

    def on_created(self) -> None:
        """
        Attach the tags queued before the instance was saved, exactly once.
        """
        queued = self.queued()
        for values, tag_type in queued:
            self.attach(values, tag_type)
        # Only forget the queue once every entry went through.
        self.instance.__dict__.pop(QUEUED_TAGS_ATTR, None)

    def on_deleted(self) -> None:
        """
        Remove every association of the instance. Call before the row is deleted.
        """
        if not self.is_saved:
            return
        detached = self.current_tag_ids()
        self.rows().delete()
        self._changed(detached=detached)

    # Internals

    def _apply(self, desired: list[int], current: list[int]) -> None:
        """
        Delete ``current - desired``, then insert ``desired - current``.
        """
        current_set = set(current)
        desired_set = set(desired)
        to_detach = [pk for pk in current if pk not in desired_set]
        to_attach = [pk for pk in desired if pk not in current_set]
        if not to_detach and not to_attach:
            return
        detached = self._delete(to_detach)
        attached = self._insert(to_attach)
        self._changed(attached=attached, detached=detached)

    def _insert(self, tag_ids: list[int]) -> list[int]:
        if not tag_ids:
            return []
        rows = self.rows()
        existing = set(rows.filter(tag_id__in=tag_ids).values_list("tag_id", flat=True))
        new_ids = [pk for pk in tag_ids if pk not in existing]
        if not new_ids:
            return []
        start = next_position(rows, "order")
        TaggedItem.objects.bulk_create([
            TaggedItem(
                content_type=self.content_type,
                object_id=self.instance.pk,
                tag_id=tag_id,
                order=order,
            )
            for order, tag_id in enumerate(new_ids, start=start)
        ])
        return new_ids

    def _delete(self, tag_ids: list[int]) -> list[int]:
        if not tag_ids:
            return []
        rows = self.rows().filter(tag_id__in=tag_ids)
        deleted_ids = list(rows.values_list("tag_id", flat=True))
        if deleted_ids:
            rows.delete()
        return deleted_ids

    def _changed(self, attached: list[int] | None = None, detached: list[int] | None = None) -> None:
        attached = attached or []
        detached = detached or []
        if not attached and not detached:
            return
        self.forget_loaded_tags()
        log.debug(
            "Tags of %s %s changed: attached=%s detached=%s",
            self.instance.__class__.__name__, self.instance.pk, attached, detached,
        )
        TAGS_CHANGED.send(
            sender=self.instance.__class__,
            instance=self.instance,
            attached=attached,
            detached=detached,
        )
