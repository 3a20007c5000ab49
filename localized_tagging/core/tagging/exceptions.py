"""
Exceptions raised by the tagging engine
"""
from __future__ import annotations

import typing

from django.utils.translation import gettext as _

if typing.TYPE_CHECKING:
    from .models import Tag


class TaggingError(Exception):
    """
    Base exception for tagging
    """

    def __init__(self, message: str = ""):
        super().__init__()
        self.message = message

    def __str__(self):
        return str(self.message)

    def __repr__(self):
        return f"{self.__class__.__name__}({str(self)})"


class TagTypeMismatch(TaggingError, ValueError):
    """
    A tag of one type was passed to an operation scoped to another type.

    Tags are never silently moved between types, since other callers filter on
    the type partition.
    """

    def __init__(self, requested_type: str, tag: Tag):
        super().__init__()
        self.requested_type = requested_type
        self.tag = tag
        self.message = _(
            "Type was set to {requested_type} but tag is of type {tag_type}"
        ).format(requested_type=requested_type, tag_type=tag.type)
