"""
WSGI config for the retail POS project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'retailpos.config.settings')

application = get_wsgi_application()
