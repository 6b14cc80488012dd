from django.apps import AppConfig
from django.conf import settings


class ContactMgrConfig(AppConfig):
    """Configure the registrant contact manager Django application."""

    name = "contactmgr"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        if settings.REGISTRAR_MOCK_EXTERNAL_APIS:
            from contactmgr.services.mock_registrar_service import MockRegistrarService

            mock_registrar_service = MockRegistrarService()
            mock_registrar_service.start()
