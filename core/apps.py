from django.apps import AppConfig
import logging
from django.conf import settings


class CoreConfig(AppConfig):
    name = 'core'
    default_auto_field = 'django.db.models.BigAutoField'

    def ready(self):
        """Log the notification wiring once on startup."""
        logger = logging.getLogger(__name__)
        notifications = settings.PROPDESK_NOTIFICATIONS
        logger.info(f"NOTIFICATION DELIVERY: {notifications['DELIVERY_STRATEGY']}")
        logger.info(f"RECIPIENT RESOLVER: {notifications['RECIPIENT_RESOLVER']}")
