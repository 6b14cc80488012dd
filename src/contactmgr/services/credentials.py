import logging

from django.conf import settings

logger = logging.getLogger(__name__)


class CredentialProvider:
    """Read access to the registrar credentials.

    Defaults come from Django settings, which in turn read the cloud.gov
    credentials service or the environment. Tests pass values in directly.
    """

    def __init__(self, email=None, api_key=None, account_id=None):
        self.email = email if email is not None else settings.REGISTRAR_EMAIL
        self.api_key = api_key if api_key is not None else settings.REGISTRAR_API_KEY
        self.account_id = account_id if account_id is not None else settings.REGISTRAR_ACCOUNT_ID

    def is_configured(self) -> bool:
        """Both the account email and the API key are needed to talk to the registrar."""
        return bool(self.email) and bool(self.api_key)

    def masked_api_key(self) -> str:
        """Shows enough of the key to tell keys apart without leaking it to the logs"""
        if not self.api_key:
            return ""
        return f"{self.api_key[:4]}{'*' * max(len(self.api_key) - 4, 0)}"
