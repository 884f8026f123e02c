from django.apps import AppConfig


class RecordsCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "records_core"
    verbose_name = "Business records"
