"""
Convenience functions and field classes to make consistent field conventions easier.

We have helpers to make case sensitivity consistent across backends. MySQL is
case-insensitive by default, SQLite and Postgres are case-sensitive.

Translatable text (tag names and slugs) is stored as a JSON object mapping
locale codes to text, and surfaces in Python as a ``LocaleField``.
"""
from __future__ import annotations

import json

from django.conf import settings
from django.db import models
from django.db.models.query_utils import DeferredAttribute
from django.utils import translation


def current_locale() -> str:
    """
    Return the locale code of the active Django language.

    Falls back to ``settings.LANGUAGE_CODE`` when translations are deactivated.
    """
    return translation.get_language() or settings.LANGUAGE_CODE


class LocaleField(dict):
    """
    A map from locale code to text, e.g. ``{"en": "Red", "nl": "Rood"}``.

    Being a ``dict``, it compares equal to a plain dict with the same
    translations and serializes to JSON as-is. ``get(locale)`` returns ``None``
    for a locale that has no translation.
    """

    @property
    def locales(self) -> list[str]:
        return list(self.keys())

    def text(self, locale: str | None = None, default: str = "") -> str:
        """
        Text for ``locale`` (the current locale if omitted), or ``default``.
        """
        value = self.get(locale or current_locale())
        return default if value is None else value

    def matches(self, locale: str, text: str) -> bool:
        """
        Exact, case-sensitive comparison against a single locale.

        This is the identity used when resolving text into tags.
        """
        return self.get(locale) == text

    def contains(self, locale: str, substring: str) -> bool:
        """
        Case-insensitive substring search within a single locale.
        """
        value = self.get(locale)
        if value is None:
            return False
        return substring.lower() in value.lower()

    def copy(self) -> LocaleField:
        return LocaleField(self)

    def __repr__(self):
        return f"{self.__class__.__name__}({dict.__repr__(self)})"


def to_locale_field(value) -> LocaleField:
    """
    Coerce ``None``, a dict or a ``LocaleField`` into a ``LocaleField``.
    """
    if value is None:
        return LocaleField()
    if isinstance(value, LocaleField):
        return value
    if isinstance(value, dict):
        return LocaleField(value)
    raise TypeError(f"Cannot store {value!r} as translations; expected a dict or a string.")


class LocaleFieldDescriptor(DeferredAttribute):
    """
    Attribute access for ``LocaleTextField``.

    Assigning a plain string stores it as the translation for the current
    locale and keeps the other locales. Assigning a dict replaces every
    translation.
    """

    def __set__(self, instance, value):
        attname = self.field.attname
        if hasattr(value, "resolve_expression"):
            instance.__dict__[attname] = value
            return
        if isinstance(value, str):
            translations = to_locale_field(instance.__dict__.get(attname)).copy()
            translations[current_locale()] = value
            value = translations
        instance.__dict__[attname] = to_locale_field(value)


class LocaleTextField(models.JSONField):
    """
    JSONField holding one text value per locale.

    Always yields a ``LocaleField`` (empty when the column is NULL or unset).
    Key lookups such as ``name__en="Red"`` work as for any JSONField.
    """

    descriptor_class = LocaleFieldDescriptor

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("default", dict)
        super().__init__(*args, **kwargs)

    def from_db_value(self, value, expression, connection):
        value = super().from_db_value(value, expression, connection)
        # Key transforms (e.g. ``values("name__en")``) come through here as plain text.
        if value is None or isinstance(value, dict):
            return to_locale_field(value)
        return value

    def to_python(self, value):
        if isinstance(value, str):
            value = json.loads(value, cls=self.decoder)
        return to_locale_field(value)


def case_sensitive_char_field(**kwargs) -> MultiCollationCharField:
    """
    Return a case-sensitive ``MultiCollationCharField``.

    This means that entries will sort in a case-sensitive manner, and that
    "abc" and "ABC" are distinct values on every database backend.

    You may override any argument that you would normally pass into
    ``MultiCollationCharField`` (which is itself a subclass of ``CharField``).
    """
    final_kwargs = {
        "null": False,
        "db_collations": {
            "sqlite": "BINARY",
            "mysql": "utf8mb4_bin",
        },
    }
    final_kwargs.update(kwargs)

    return MultiCollationCharField(**final_kwargs)


class MultiCollationCharField(models.CharField):
    """
    CharField with one collation per database vendor, e.g.
    ``{"sqlite": "BINARY", "mysql": "utf8mb4_bin"}``.

    Django's own ``db_collation`` takes a single name, which no two backends
    agree on. Vendors missing from ``db_collations`` use the column default.
    """

    def __init__(self, *args, db_collations=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.db_collations = db_collations or {}

    def db_parameters(self, connection):
        db_params = super().db_parameters(connection)
        collation = self.db_collations.get(connection.vendor)
        if collation:
            db_params["collation"] = collation
        return db_params

    def deconstruct(self):
        name, path, args, kwargs = super().deconstruct()
        if self.db_collations:
            kwargs["db_collations"] = self.db_collations
        return name, path, args, kwargs
