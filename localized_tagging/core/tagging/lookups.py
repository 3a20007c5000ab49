"""
Locale-aware text matching against translatable (JSON) fields.

The store and scopes never build backend-specific SQL themselves; they ask a
``TextLookup`` for a ``Q`` object instead. Swap the implementation with the
``TEXT_LOOKUP`` key of the ``LOCALIZED_TAGGING`` setting, e.g. to match
against a normalized side table.
"""
from __future__ import annotations

from typing import Protocol

from django.db.models import Q


class TextLookup(Protocol):
    """
    Builds filters on a translatable field for a single locale.
    """

    def exact(self, field: str, locale: str, text: str) -> Q:
        """
        Case-sensitive, whole-value match of ``field[locale]``.
        """

    def contains(self, field: str, locale: str, substring: str) -> Q:
        """
        Case-insensitive substring match of ``field[locale]``.
        """


class JSONKeyTextLookup:
    """
    TextLookup using Django's JSONField key transforms.

    Works on SQLite, MySQL/MariaDB and PostgreSQL: Django compiles
    ``name__en__exact`` to the vendor's JSON path extraction. The lookup is
    always spelled out, otherwise a locale that is also a lookup name
    (``lt``, ``in``) would be read as that lookup instead of a key.
    """

    def exact(self, field: str, locale: str, text: str) -> Q:
        return Q(**{f"{field}__{locale}__exact": text})

    def contains(self, field: str, locale: str, substring: str) -> Q:
        return Q(**{f"{field}__{locale}__icontains": substring})
