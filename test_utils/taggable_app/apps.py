"""
Test-only app with taggable models.
"""
from django.apps import AppConfig


class TaggableAppConfig(AppConfig):
    name = "test_utils.taggable_app"
    label = "taggable_app"
    default_auto_field = "django.db.models.BigAutoField"
