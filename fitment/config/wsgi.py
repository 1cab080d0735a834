"""
WSGI config for the fitment catalog project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'fitment.config.settings')

application = get_wsgi_application()
