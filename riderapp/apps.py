from django.apps import AppConfig


class RiderappConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'riderapp'
    verbose_name = 'RiderApp Console'
