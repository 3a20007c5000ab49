"""
Initial tagging tables.

The association table and its reference columns are named by the
LOCALIZED_TAGGING setting, so they are read from the tagging config here,
the same way the models read them.
"""
import django.db.models.deletion
import django.utils.timezone
import model_utils.fields
from django.db import migrations, models

import localized_tagging.lib.fields
from localized_tagging.core.tagging.conf import get_config

config = get_config()


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("contenttypes", "0002_remove_content_type_name"),
    ]

    operations = [
        migrations.CreateModel(
            name="Tag",
            fields=[
                (
                    "created",
                    model_utils.fields.AutoCreatedField(
                        default=django.utils.timezone.now, editable=False, verbose_name="created"
                    ),
                ),
                (
                    "modified",
                    model_utils.fields.AutoLastModifiedField(
                        default=django.utils.timezone.now, editable=False, verbose_name="modified"
                    ),
                ),
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                (
                    "name",
                    localized_tagging.lib.fields.LocaleTextField(
                        default=dict,
                        help_text="Display name of the tag, as an object mapping locale codes to text.",
                    ),
                ),
                (
                    "slug",
                    localized_tagging.lib.fields.LocaleTextField(
                        blank=True,
                        default=dict,
                        help_text="URL-safe version of the name for each locale. Generated from the name on save.",
                    ),
                ),
                (
                    "type",
                    localized_tagging.lib.fields.MultiCollationCharField(
                        blank=True,
                        db_collations={"mysql": "utf8mb4_bin", "sqlite": "BINARY"},
                        db_index=True,
                        default=None,
                        help_text="Namespace of the tag, e.g. 'color' or 'size'. Empty for untyped tags.",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "order_column",
                    models.PositiveIntegerField(
                        blank=True,
                        db_index=True,
                        help_text="Display order among tags. Assigned automatically when the tag is created.",
                        null=True,
                    ),
                ),
            ],
            options={
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="TaggedItem",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                (
                    "object_id",
                    models.PositiveBigIntegerField(
                        db_column=config.id_column,
                        help_text="Primary key of the tagged object.",
                    ),
                ),
                (
                    "order",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Position of this tag among the object's tags, in the order they were attached.",
                    ),
                ),
                (
                    "content_type",
                    models.ForeignKey(
                        db_column=config.type_column,
                        help_text="Model of the tagged object.",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to="contenttypes.contenttype",
                    ),
                ),
                (
                    "tag",
                    models.ForeignKey(
                        help_text="Tag applied to the object.",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tagged_items",
                        to="localized_tagging.tag",
                    ),
                ),
            ],
            options={
                "db_table": config.table_name,
                "unique_together": {("content_type", "object_id", "tag")},
            },
        ),
    ]
