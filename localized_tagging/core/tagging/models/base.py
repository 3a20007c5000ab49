"""
Tagging app base data models
"""
from __future__ import annotations


from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _
from model_utils.models import TimeStampedModel
from typing_extensions import Self  # Until we upgrade to python 3.11

from localized_tagging.lib.fields import LocaleField, LocaleTextField, case_sensitive_char_field
from localized_tagging.lib.sortable import next_position

from ..conf import get_config

# Table and column names of the association model are fixed when the models load.
_config = get_config()


class TagQuerySet(models.QuerySet):
    """
    QuerySet helpers shared by every tag model.
    """

    def ordered(self) -> Self:
        """
        Tags in their display order.
        """
        return self.order_by("order_column", "id")

    def of_type(self, tag_type: str | None) -> Self:
        """
        Tags whose type is exactly ``tag_type``; ``None`` selects untyped tags.
        """
        if tag_type is None:
            return self.filter(type__isnull=True)
        return self.filter(type=tag_type)


class Tag(TimeStampedModel):
    """
    A reusable label that can be attached to any taggable object.

    A tag has a name in one or more locales, a slug per locale derived from
    that name, and an optional type. Tags of different types live in separate
    namespaces: "red" the color and "red" the wine style are two tags. A tag
    with no type is in the "untyped" namespace, which is distinct from every
    typed one.

    Names are only unique per (locale, type) by convention: the resolver
    always looks a name up before creating it, but the table has no unique
    constraint on it.
    """

    id = models.BigAutoField(primary_key=True)
    name = LocaleTextField(
        help_text=_("Display name of the tag, as an object mapping locale codes to text."),
    )
    slug = LocaleTextField(
        blank=True,
        help_text=_("URL-safe version of the name for each locale. Generated from the name on save."),
    )
    type = case_sensitive_char_field(
        max_length=255,
        null=True,
        blank=True,
        default=None,
        db_index=True,
        help_text=_("Namespace of the tag, e.g. 'color' or 'size'. Empty for untyped tags."),
    )
    order_column = models.PositiveIntegerField(
        null=True,
        blank=True,
        db_index=True,
        help_text=_("Display order among tags. Assigned automatically when the tag is created."),
    )

    objects = TagQuerySet.as_manager()

    translatable_fields = ("name", "slug")

    def __repr__(self):
        """
        Developer-facing representation of a Tag.
        """
        if self.type:
            return f"<{self.__class__.__name__}> ({self.id}) {self.type}:{self.translated_name}"
        return f"<{self.__class__.__name__}> ({self.id}) {self.translated_name}"

    def __str__(self):
        """
        User-facing string representation of a Tag: its name in the current locale.
        """
        return self.translated_name

    @property
    def translated_name(self) -> str:
        """
        Name in the current locale, or "" if the tag has no name in it.
        """
        return self.name.text()

    @property
    def translated_slug(self) -> str:
        return self.slug.text()

    def _translations(self, field: str) -> LocaleField:
        if field not in self.translatable_fields:
            raise ValueError(f"{field} is not a translatable field of {self.__class__.__name__}")
        return getattr(self, field)

    def get_translation(self, field: str, locale: str | None = None) -> str:
        """
        Text of ``field`` in ``locale`` (default: the current locale), or "".
        """
        return self._translations(field).text(locale)

    def set_translation(self, field: str, locale: str, value: str) -> Self:
        """
        Set the text of ``field`` in one locale, keeping the other locales.

        Does not save.
        """
        translations = self._translations(field).copy()
        translations[locale] = value
        setattr(self, field, translations)
        return self

    def forget_translation(self, field: str, locale: str) -> Self:
        """
        Remove the text of ``field`` in one locale. Does not save.
        """
        translations = self._translations(field).copy()
        translations.pop(locale, None)
        setattr(self, field, translations)
        return self

    def clean(self):
        """
        Validate this tag before saving
        """
        if not self.name:
            raise ValidationError(_("Tags must have a name in at least one locale."))
        for locale, text in self.name.items():
            if not isinstance(text, str) or not text.strip():
                raise ValidationError(
                    _("Tag name for locale '{locale}' cannot be empty.").format(locale=locale)
                )
        if self.type is not None and not self.type.strip():
            raise ValidationError(_("Tag type cannot be blank; use None for untyped tags."))

    def save(self, *args, **kwargs):
        """
        Regenerate the slug for every locale of the name, and put new tags
        after every existing tag in display order.
        """
        slugify = get_config().slugify
        slug = self.slug.copy()
        for locale, text in self.name.items():
            slug[locale] = slugify(text)
        self.slug = slug

        if self.order_column is None:
            self.order_column = next_position(Tag.objects.all(), "order_column")

        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "name" in update_fields:
            kwargs["update_fields"] = {*update_fields, "slug"}

        super().save(*args, **kwargs)


class TaggedItem(models.Model):
    """
    Associates one Tag with one taggable object.

    The object is referenced polymorphically by its content type and primary
    key, so any model can be tagged without a schema change. There is at most
    one row per (object, tag).
    """

    id = models.BigAutoField(primary_key=True)
    tag = models.ForeignKey(
        Tag,
        on_delete=models.CASCADE,
        related_name="tagged_items",
        help_text=_("Tag applied to the object."),
    )
    content_type = models.ForeignKey(
        ContentType,
        on_delete=models.CASCADE,
        related_name="+",
        db_column=_config.type_column,
        help_text=_("Model of the tagged object."),
    )
    object_id = models.PositiveBigIntegerField(
        db_column=_config.id_column,
        help_text=_("Primary key of the tagged object."),
    )
    content_object = GenericForeignKey("content_type", "object_id")
    order = models.PositiveIntegerField(
        default=0,
        help_text=_("Position of this tag among the object's tags, in the order they were attached."),
    )

    class Meta:
        db_table = _config.table_name
        unique_together = [
            ("content_type", "object_id", "tag"),
        ]

    def __repr__(self):
        return str(self)

    def __str__(self):
        return f"<{self.__class__.__name__}> {self.content_type_id}:{self.object_id} -> {self.tag_id}"
