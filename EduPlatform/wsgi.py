"""WSGI config for the EduPlatform project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "EduPlatform.settings")

application = get_wsgi_application()
