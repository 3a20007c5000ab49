"""
Turns tag text and Tag instances into canonical Tag rows.
"""
from __future__ import annotations

import logging

from django.db import transaction

from localized_tagging.lib.fields import current_locale

from .conf import TaggingConfig, get_config
from .data import ResolvedRef, TagInput, TagRef, TextRef, is_scalar_input, normalize_tag_input
from .exceptions import TagTypeMismatch
from .models.base import Tag
from .store import TagStore

log = logging.getLogger(__name__)


class TagResolver:
    """
    Resolves user-supplied tags within a type scope and a locale.

    Text is matched exactly against tag names and slugs in one locale. A
    ``tag_type`` of None means the untyped scope, not "any type"; use
    ``resolve_any_type`` for that. When no locale is given, the active Django
    language is used.
    """

    def __init__(self, config: TaggingConfig | None = None, store: TagStore | None = None):
        self.config = config or get_config()
        self.store = store or TagStore(self.config)

    @staticmethod
    def check_types(refs: list[TagRef], tag_type: str | None) -> None:
        """
        Raise TagTypeMismatch if any already-resolved tag is not of ``tag_type``.

        No check is made when ``tag_type`` is None.
        """
        if tag_type is None:
            return
        for ref in refs:
            if isinstance(ref, ResolvedRef) and ref.tag.type != tag_type:
                raise TagTypeMismatch(tag_type, ref.tag)

    def resolve_existing(
        self,
        values: TagInput,
        tag_type: str | None = None,
        locale: str | None = None,
    ) -> list[Tag]:
        """
        Resolve ``values`` to existing tags, dropping text that matches nothing.

        Never creates tags. Keeps the input order.
        """
        locale = locale or current_locale()
        refs = normalize_tag_input(values)
        self.check_types(refs, tag_type)

        tags = []
        for ref in refs:
            if isinstance(ref, ResolvedRef):
                tags.append(ref.tag)
                continue
            tag = self.store.find_exact(ref.text, tag_type, locale)
            if tag is not None:
                tags.append(tag)
        return tags

    def resolve_or_create(
        self,
        values: TagInput,
        tag_type: str | None = None,
        locale: str | None = None,
    ) -> list[Tag]:
        """
        Resolve ``values`` to tags, creating a tag for any text that matches nothing.

        Types are checked for every element before anything is created, so a
        TagTypeMismatch never leaves new tags behind.
        """
        locale = locale or current_locale()
        refs = normalize_tag_input(values)
        self.check_types(refs, tag_type)

        tags = []
        with transaction.atomic():
            for ref in refs:
                if isinstance(ref, ResolvedRef):
                    tags.append(ref.tag)
                    continue
                tag = self.store.find_exact(ref.text, tag_type, locale)
                if tag is None:
                    tag = self.store.create(ref.text, tag_type, locale)
                tags.append(tag)
        return tags

    def find_or_create(
        self,
        values: TagInput,
        tag_type: str | None = None,
        locale: str | None = None,
    ) -> Tag | list[Tag]:
        """
        Like resolve_or_create, but a scalar input gives back a single Tag.

        Both a single string and a single Tag instance count as scalar; any
        iterable, including a one-element list, gives back a list.
        """
        tags = self.resolve_or_create(values, tag_type, locale)
        if is_scalar_input(values):
            return tags[0]
        return tags

    def resolve_any_type(self, values: TagInput, locale: str | None = None) -> list[Tag]:
        """
        Resolve text to every tag with that name or slug, whatever its type.

        Never creates tags. Tag instances are passed through without a type check.
        """
        locale = locale or current_locale()
        tags = []
        for ref in normalize_tag_input(values):
            if isinstance(ref, ResolvedRef):
                tags.append(ref.tag)
            else:
                tags.extend(self.store.find_exact_any_type(ref.text, locale))
        return tags

    def resolve_for_query(
        self,
        values: TagInput,
        tag_type: str | None = None,
        locale: str | None = None,
        any_type: bool = False,
    ) -> list[list[Tag]]:
        """
        Resolve each element of ``values`` separately, for use in query filters.

        Returns one list per input element. Text that matches nothing gives an
        empty list, so filters can tell "required a tag that doesn't exist"
        apart from "required nothing".
        """
        locale = locale or current_locale()
        refs = normalize_tag_input(values)
        if not any_type:
            self.check_types(refs, tag_type)

        groups: list[list[Tag]] = []
        for ref in refs:
            if isinstance(ref, ResolvedRef):
                groups.append([ref.tag])
            elif any_type:
                groups.append(self.store.find_exact_any_type(ref.text, locale))
            else:
                tag = self.store.find_exact(ref.text, tag_type, locale)
                groups.append([tag] if tag is not None else [])
            if isinstance(ref, TextRef) and not groups[-1]:
                log.debug("Tag %r (type=%r, locale=%s) does not exist; it will match nothing", ref.text, tag_type, locale)
        return groups
