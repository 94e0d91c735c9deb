"""
WSGI config for the pokeshop project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "pokeshop.settings")

application = get_wsgi_application()
