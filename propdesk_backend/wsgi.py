"""
WSGI config for PropDesk Backend.

Served by gunicorn, see gunicorn.conf.py.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'propdesk_backend.settings')

application = get_wsgi_application()
