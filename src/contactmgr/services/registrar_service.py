from typing import List, Optional
import logging

from registrarwrapper import APIError, RegistrarClient, RegistrarError
from registrarwrapper.errors import ErrorCode

from contactmgr.services.credentials import CredentialProvider
from contactmgr.utility.constants import ContactRole
from contactmgr.utility.contact_data import ContactSet, DomainTarget

logger = logging.getLogger(__name__)


class RegistrarService:
    """Account-scoped registrar operations.

    The account id is resolved on first use and kept for the life of the
    instance, so a bulk run makes a single /accounts call at most.
    """

    def __init__(self, client: Optional[RegistrarClient] = None, credentials: Optional[CredentialProvider] = None):
        self.credentials = credentials or CredentialProvider()
        # Only a client built here is closed by `close`
        self._owns_client = client is None
        if client is None:
            client = RegistrarClient(email=self.credentials.email, api_key=self.credentials.api_key)
        self.client = client
        self._account_id = self.credentials.account_id or None

    def close(self):
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _result(self, data, what):
        """The `result` member of a response envelope. Any other body shape is an APIError."""
        if not isinstance(data, dict):
            raise APIError(f"Unexpected response for {what}", body=data)
        return data.get("result")

    def _domains_url(self, domain: Optional[str] = None) -> str:
        account_id = self.resolve_account()
        appended_url = f"/accounts/{account_id}/registrar/domains"
        if domain:
            appended_url = f"{appended_url}/{domain}"
        return appended_url

    def resolve_account(self) -> str:
        """Returns the account id every other call is scoped under"""
        if self._account_id:
            return self._account_id

        try:
            logger.info("Resolving registrar account id")
            data = self.client.get("/accounts")
        except RegistrarError as e:
            logger.error(f"Failed to fetch account id: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to fetch account id: {e}")
            raise APIError(f"Failed to fetch account ID: {e}") from e

        accounts = self._result(data, "accounts") or []
        if not accounts:
            raise APIError("No accounts found")
        if not isinstance(accounts, list) or not isinstance(accounts[0], dict) or not accounts[0].get("id"):
            raise APIError("Unexpected response for accounts", body=data)

        self._account_id = accounts[0]["id"]
        logger.info(f"Using registrar account {self._account_id}")
        return self._account_id

    def list_domains(self) -> List[dict]:
        try:
            logger.info("Getting all of the account's registrar domains")
            data = self.client.get(self._domains_url())
        except RegistrarError as e:
            logger.error(f"Failed to list domains: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to list domains: {e}")
            raise APIError(f"Failed to list domains: {e}") from e
        domains = self._result(data, "the domain list") or []
        if not isinstance(domains, list):
            raise APIError("Unexpected response for the domain list", body=data)
        return domains

    def get_domain_state(self, domain: str) -> DomainTarget:
        """Fetches the domain's lock flag, pending material changes and current contacts"""
        try:
            logger.info(f"Fetching registrar state for {domain}")
            data = self.client.get(self._domains_url(domain))
        except RegistrarError as e:
            logger.error(f"Failed to fetch domain info for {domain}: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to fetch domain info for {domain}: {e}")
            raise APIError(f"Failed to fetch domain info for {domain}: {e}") from e

        result = self._result(data, domain)
        if not result:
            raise APIError(f"Domain {domain} not found", status_code=ErrorCode.NOT_FOUND)
        if not isinstance(result, dict):
            raise APIError(f"Unexpected response for {domain}", body=data)

        material_changes = result.get("material_changes") or []
        if not isinstance(material_changes, list):
            raise APIError(f"Unexpected response for {domain}", body=data)

        return DomainTarget(
            name=result.get("name") or domain,
            locked=bool(result.get("locked")),
            material_changes=tuple(str(change) for change in material_changes),
            contacts={
                role.value: result[role.value]
                for role in ContactRole.ordered()
                if isinstance(result.get(role.value), dict)
            },
            details=result,
        )

    def apply_contact_update(self, domain: str, contact_set: ContactSet) -> dict:
        """Replaces the domain's contacts.

        Sends `{registrant: ...}` when only the registrant is being changed and
        every present role otherwise. The registrar treats the PUT as a full replace.
        """
        if ContactRole.REGISTRANT not in contact_set.roles:
            raise ValueError("A contact update must include the registrant")

        payload = contact_set.to_payload()
        try:
            logger.info(f"Updating {', '.join(payload)} contact(s) for {domain}")
            url = self._domains_url(domain)
            logger.debug(f"PUT {url} payload: {payload}")
            data = self.client.put(url, json=payload)
        except RegistrarError as e:
            logger.error(f"Failed to update domain {domain}: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to update domain {domain}: {e}")
            raise APIError(f"Failed to update domain {domain}: {e}") from e

        logger.debug(f"Registrar response for {domain}: {data}")
        result = self._result(data, domain) or {}
        if not isinstance(result, dict):
            raise APIError(f"Unexpected response for {domain}", body=data)
        return result
