"""
Taggable models for the tests.
"""
from django.db import models

from localized_tagging.core.tagging.models import Tag, TaggableMixin


class Article(TaggableMixin):
    """
    A taggable model ordered by its "name" column.
    """
    name = models.CharField(max_length=255, null=True, blank=True)

    def __str__(self):
        return f"<Article> ({self.id}) {self.name}"


class Photo(TaggableMixin):
    """
    A second taggable model, to check that tags are scoped per model.
    """
    title = models.CharField(max_length=255, null=True, blank=True)

    tag_scope_name_field = "title"

    def __str__(self):
        return f"<Photo> ({self.id}) {self.title}"


class CustomTag(Tag):
    """
    Proxy tag model used to check the TAG_MODEL setting.
    """

    class Meta:
        managed = False
        proxy = True
        app_label = "localized_tagging"

    @property
    def label(self) -> str:
        return self.translated_name.upper()
