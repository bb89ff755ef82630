"""
WSGI config for the Autobook car booking service.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'autobook.settings.production')

application = get_wsgi_application()
