"""
ASGI config for PropDesk Backend.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'propdesk_backend.settings')

application = get_asgi_application()
