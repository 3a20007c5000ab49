"""
Helpers for models that keep a stable, integer display order.

The convention is a nullable ``PositiveIntegerField`` that gets the next
available position when a row is first saved, and which can later be
rewritten in bulk when a user reorders things.
"""
from __future__ import annotations

from typing import Iterable

from django.db import models
from django.db.transaction import atomic


def next_position(queryset: models.QuerySet, field: str) -> int:
    """
    Return the position that goes after every row in ``queryset``.
    """
    highest = queryset.aggregate(highest=models.Max(field))["highest"]
    return 1 if highest is None else highest + 1


def set_new_order(queryset: models.QuerySet, ids: Iterable[int], field: str, start: int = 1) -> int:
    """
    Rewrite ``field`` so the rows with the given ``ids`` are ordered as listed.

    Returns the number of rows updated. Rows of ``queryset`` that are not
    listed keep their current position.
    """
    updated = 0
    with atomic():
        for position, pk in enumerate(ids, start=start):
            updated += queryset.filter(pk=pk).update(**{field: position})
    return updated
