"""
tagging Django application initialization.
"""

from django.apps import AppConfig


class TaggingConfig(AppConfig):
    """
    Configuration for the tagging Django application.
    """

    name = "localized_tagging.core.tagging"
    verbose_name = "Localized Tagging"
    default_auto_field = "django.db.models.BigAutoField"
    label = "localized_tagging"

    def ready(self):
        """
        Reset cached tagging configuration whenever Django settings change.
        """
        from django.core.signals import setting_changed  # pylint: disable=import-outside-toplevel

        from .conf import reset_config_on_setting_change  # pylint: disable=import-outside-toplevel

        setting_changed.connect(reset_config_on_setting_change, dispatch_uid="localized_tagging.reset_config")
