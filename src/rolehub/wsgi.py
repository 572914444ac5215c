"""WSGI config for rolehub project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "rolehub.settings")

application = get_wsgi_application()
