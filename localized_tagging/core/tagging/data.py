"""
Data types used by the tag resolver.

Callers may hand the tagging API a single string, a single Tag, or any
iterable mixing the two. ``normalize_tag_input`` turns all of these into a list
of ``TagRef`` values before any resolution logic runs.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Union

from typing_extensions import TypeAlias

from .models.base import Tag


@dataclass(frozen=True)
class TextRef:
    """
    Tag text that still has to be looked up (and maybe created).
    """
    text: str


@dataclass(frozen=True)
class ResolvedRef:
    """
    A Tag the caller already loaded.
    """
    tag: Tag


TagRef: TypeAlias = Union[TextRef, ResolvedRef]

# Anything the public API accepts where it takes "tags".
TagInput: TypeAlias = Union[str, Tag, Iterable[Union[str, Tag]]]


def is_scalar_input(values: TagInput) -> bool:
    """
    True if ``values`` is a single string or Tag rather than a collection.
    """
    return isinstance(values, (str, Tag))


def normalize_tag_input(values: TagInput) -> list[TagRef]:
    """
    Convert any accepted input shape into a list of TagRefs, keeping order.

    Raises TypeError for anything that is not a string, a Tag, or an iterable
    of strings and Tags.
    """
    if is_scalar_input(values):
        values = [values]  # type: ignore[list-item]
    elif isinstance(values, (bytes, Mapping)) or not isinstance(values, Iterable):
        raise TypeError(f"Expected a tag name, a Tag, or an iterable of them; got {type(values).__name__}")

    refs: list[TagRef] = []
    for value in values:  # type: ignore[union-attr]
        if isinstance(value, Tag):
            refs.append(ResolvedRef(value))
        elif isinstance(value, str):
            refs.append(TextRef(value))
        else:
            raise TypeError(f"Expected a tag name or a Tag; got {type(value).__name__}: {value!r}")
    return refs


def unique_ids(tags: Iterable[Tag]) -> list[int]:
    """
    Primary keys of ``tags``, without duplicates, in first-seen order.
    """
    return list(dict.fromkeys(tag.pk for tag in tags))
