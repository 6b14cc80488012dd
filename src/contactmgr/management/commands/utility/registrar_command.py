import logging
from contextlib import contextmanager

from django.core.management.base import CommandError

from registrarwrapper import AuthenticationError, RateLimitError, RegistrarError

from contactmgr.services.credentials import CredentialProvider
from contactmgr.services.registrar_service import RegistrarService
from contactmgr.services.template_store import TemplateStore
from contactmgr.utility.constants import ContactRole
from contactmgr.utility.contact_data import ContactSet
from contactmgr.utility.errors import ContactError, NotConfiguredError

logger = logging.getLogger(__name__)

AUTHENTICATION_REMEDIATION = (
    "Check that REGISTRAR_EMAIL is the account's login email and that "
    "REGISTRAR_API_KEY is the Global API Key, not a scoped API token."
)


class RegistrarCommandMixin:
    """Shared setup for the commands that talk to the registrar."""

    def get_registrar_service(self) -> RegistrarService:
        credentials = CredentialProvider()
        if not credentials.is_configured():
            raise CommandError(str(NotConfiguredError()))
        logger.debug(f"Using registrar credentials for {credentials.email} ({credentials.masked_api_key()})")
        return RegistrarService(credentials=credentials)

    def load_contact_set(self, template_name: str, registrant_only: bool = False) -> ContactSet:
        """The template's record applied to every role, or to the registrant alone"""
        with self.registrar_errors():
            record = TemplateStore().load_template(template_name)
        roles = [ContactRole.REGISTRANT] if registrant_only else None
        return ContactSet.uniform(record, roles=roles)

    @contextmanager
    def registrar_errors(self):
        """Turns registrar and contact errors into CommandErrors"""
        try:
            yield
        except AuthenticationError as err:
            raise CommandError(f"{err.message}\n{AUTHENTICATION_REMEDIATION}") from err
        except RateLimitError as err:
            raise CommandError(f"{err.message} Wait, then run the command again.") from err
        except RegistrarError as err:
            raise CommandError(f"Registrar request failed: {err}") from err
        except ContactError as err:
            raise CommandError(str(err)) from err
