from django.apps import AppConfig


class PerfumeConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'retailpos.perfume'
