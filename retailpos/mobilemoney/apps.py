from django.apps import AppConfig


class MobilemoneyConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'retailpos.mobilemoney'
    verbose_name = 'Mobile money'
