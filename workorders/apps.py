from django.apps import AppConfig


class WorkOrdersConfig(AppConfig):
    name = 'workorders'
    verbose_name = 'Work Orders'
    default_auto_field = 'django.db.models.BigAutoField'
