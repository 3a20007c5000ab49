"""
Core models for Tagging
"""
from .base import Tag, TaggedItem, TagQuerySet
from .taggable import TaggableMixin, TaggableQuerySet
