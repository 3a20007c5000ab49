"""
Persistence operations on tags.

The TagStore is the only place that queries or creates Tag rows. Text
matching is delegated to the configured TextLookup, so nothing here depends
on how a given database stores JSON.
"""
from __future__ import annotations

import logging
from typing import Iterable

from django.db import IntegrityError, transaction
from django.db.models import Q

from localized_tagging.lib.sortable import set_new_order

from .conf import TaggingConfig, get_config
from .models.base import Tag, TagQuerySet

log = logging.getLogger(__name__)


class TagStore:
    """
    Finds and creates tags of the configured tag model.
    """

    def __init__(self, config: TaggingConfig | None = None):
        self.config = config or get_config()

    @property
    def model(self) -> type[Tag]:
        return self.config.tag_model

    def query(self) -> TagQuerySet:
        return self.model.objects.all()

    def text_match(self, text: str, locale: str, include_slug: bool = True) -> Q:
        """
        Filter for tags whose name (or slug) in ``locale`` is exactly ``text``.
        """
        lookup = self.config.text_lookup
        condition = lookup.exact("name", locale, text)
        if include_slug:
            condition |= lookup.exact("slug", locale, text)
        return condition

    def find_exact(self, text: str, tag_type: str | None, locale: str) -> Tag | None:
        """
        Find the tag of type ``tag_type`` whose name or slug in ``locale`` is ``text``.

        ``tag_type=None`` only matches untyped tags. If several tags match
        (which only happens after a create race), the first in display order
        wins.
        """
        return self.query().of_type(tag_type).filter(self.text_match(text, locale)).ordered().first()

    def find_by_name(self, text: str, tag_type: str | None, locale: str) -> Tag | None:
        """
        Like find_exact, but only compares names, never slugs.
        """
        return (
            self.query()
            .of_type(tag_type)
            .filter(self.text_match(text, locale, include_slug=False))
            .ordered()
            .first()
        )

    def find_exact_any_type(self, text: str, locale: str) -> list[Tag]:
        """
        Every tag, of any type, whose name or slug in ``locale`` is ``text``.
        """
        return list(self.query().filter(self.text_match(text, locale)).ordered())

    def create(self, text: str, tag_type: str | None, locale: str) -> Tag:
        """
        Create a tag named ``text`` in ``locale``.

        The slug and display order are filled in by Tag.save(). Two concurrent
        requests can both miss the lookup and create duplicate tags; there is
        no lock. If the database has a unique constraint that turns the second
        insert into an IntegrityError, we return the row that won instead.
        """
        try:
            with transaction.atomic():
                tag = self.model.objects.create(name={locale: text}, type=tag_type)
        except IntegrityError:
            existing = self.find_by_name(text, tag_type, locale)
            if existing is None:
                raise
            log.info("Tag %r (type=%r, locale=%s) was created concurrently; using %r", text, tag_type, locale, existing)
            return existing
        log.debug("Created %r", tag)
        return tag

    def with_type(self, tag_type: str | None = None) -> TagQuerySet:
        """
        Tags of the given type in display order; all tags if ``tag_type`` is None.
        """
        queryset = self.query()
        if tag_type is not None:
            queryset = queryset.filter(type=tag_type)
        return queryset.ordered()

    def group_by_type(self) -> list[str | None]:
        """
        The distinct tag types in use. Untyped tags show up as None.
        """
        return list(self.query().order_by("type").values_list("type", flat=True).distinct())

    def containing(self, text: str, locale: str) -> TagQuerySet:
        """
        Tags whose name in ``locale`` contains ``text``, ignoring case.

        This is a search helper. It is never used to decide which tag a piece
        of text refers to.
        """
        return self.query().filter(self.config.text_lookup.contains("name", locale, text)).ordered()

    def set_new_order(self, ids: Iterable[int], start: int = 1) -> int:
        """
        Put the tags with the given ids in that display order.
        """
        return set_new_order(Tag.objects.all(), ids, "order_column", start=start)
