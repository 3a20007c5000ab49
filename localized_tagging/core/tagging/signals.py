"""
Tagging related, process-internal signals.
"""
from django.dispatch import Signal


# TAGS_CHANGED is sent AFTER the association rows of a single taggable object
# have been inserted and/or deleted, in the same transaction as those writes.
# It is not sent when an operation turns out to be a no-op (e.g. syncing to
# the set of tags the object already has).
#
# Catch it to refresh things derived from an object's tags, like a search
# index entry or a "modified" timestamp on the owning object. Handlers should
# be simple and fast; raising an exception aborts the caller's transaction.
#
# providing_args=[
#     'instance',  # the taggable model instance
#     'attached',  # list of tag ids that were attached
#     'detached',  # list of tag ids that were detached
# ]
TAGS_CHANGED = Signal()
