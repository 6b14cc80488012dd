import httpx
import json
import respx
import logging
from datetime import datetime, timedelta, timezone
from functools import partial
from faker import Faker

from django.conf import settings

from contactmgr.utility.constants import ContactRole

logger = logging.getLogger(__name__)

fake = Faker()

MOCK_ACCOUNT_ID = "023e105f4ecef8ad9ca31a8372d0c353"

# Domains the fake registrar knows about
MOCK_UNLOCKED_DOMAINS = ["example.com", "example.org"]
# Has a registrant change waiting for email verification
MOCK_LOCKED_DOMAIN = "pending-example.net"
# Every update to this domain is rejected
MOCK_REJECTING_DOMAIN = "rejected-example.io"


def fake_contact():
    return {
        "first_name": fake.first_name(),
        "last_name": fake.last_name(),
        "organization": fake.company(),
        "email": fake.email(),
        "phone": "+12025550143",
        "address": fake.street_address(),
        "city": fake.city(),
        "state": fake.state_abbr(include_territories=False),
        "zip": fake.zipcode(),
        "country": "US",
    }


class MockRegistrarService:
    """Serves the registrar API from memory so the commands can be tried without credentials"""

    _instance = None
    _mock_context = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not hasattr(self, "initialized"):
            self.initialized = True
            self.is_active = False
            self.domains = {}
            self.reset()

    def reset(self):
        """Rebuilds the fake domains, forgetting any updates"""
        self.domains = {}
        for name in [*MOCK_UNLOCKED_DOMAINS, MOCK_LOCKED_DOMAIN, MOCK_REJECTING_DOMAIN]:
            contact = fake_contact()
            self.domains[name] = {
                "name": name,
                "current_registrar": "Cloudflare",
                "last_known_status": "registrationActive",
                "expires_at": (datetime.now(timezone.utc) + timedelta(days=365)).isoformat(),
                "privacy": True,
                "locked": name == MOCK_LOCKED_DOMAIN,
                "material_changes": ["registrant email"] if name == MOCK_LOCKED_DOMAIN else [],
                **{role.value: dict(contact) for role in ContactRole.ordered()},
            }

    def start(self):
        """Start mocking external APIs"""
        if self.is_active:
            self.stop()  # to ensure clean start
        base_url = settings.REGISTRAR_API_BASE_URL
        self._mock_context = respx.mock(base_url=base_url, assert_all_called=False, assert_all_mocked=False)
        self._mock_context.start()

        # Register all mock routes
        self._register_account_mocks()
        self._register_domain_mocks()

        self.is_active = True
        logger.debug("👌 Mock registrar API: STARTED")

    def stop(self):
        """Stop mocking"""
        if self._mock_context and self.is_active:
            self._mock_context.stop()
            self.is_active = False
            logger.debug("🛑 Mock registrar API: STOPPED")

    def _register_account_mocks(self):
        self._mock_context.get("/accounts").mock(side_effect=self._mock_get_accounts_response)

    def _register_domain_mocks(self):
        domains_url = f"/accounts/{MOCK_ACCOUNT_ID}/registrar/domains"
        self._mock_context.get(domains_url).mock(side_effect=self._mock_list_domains_response)
        for name in self.domains:
            self._mock_context.get(f"{domains_url}/{name}").mock(
                side_effect=partial(self._mock_get_domain_response, domain=name)
            )
            self._mock_context.put(f"{domains_url}/{name}").mock(
                side_effect=partial(self._mock_update_domain_response, domain=name)
            )

    def _mock_get_accounts_response(self, request):
        logger.debug("😎 Mocking accounts get")
        return httpx.Response(
            200,
            json={
                "success": True,
                "errors": [],
                "messages": [],
                "result": [{"id": MOCK_ACCOUNT_ID, "name": "Mock registrar account"}],
            },
        )

    def _mock_list_domains_response(self, request):
        logger.debug("😎 Mocking registrar domain list")
        return httpx.Response(
            200,
            json={"success": True, "errors": [], "messages": [], "result": list(self.domains.values())},
        )

    def _mock_get_domain_response(self, request, domain):
        logger.debug(f"😎 Mocking registrar domain get for {domain}")
        return httpx.Response(
            200,
            json={"success": True, "errors": [], "messages": [], "result": self.domains[domain]},
        )

    def _mock_update_domain_response(self, request, domain):
        logger.debug(f"😃 Mocking registrar domain update for {domain}")
        if domain == MOCK_REJECTING_DOMAIN:
            return httpx.Response(
                400,
                json={
                    "success": False,
                    "errors": [{"code": 1001, "message": "Domain contacts cannot be changed at this time"}],
                    "messages": [],
                    "result": None,
                },
            )

        request_as_json = json.loads(request.content.decode("utf-8"))
        for role, contact in request_as_json.items():
            self.domains[domain][role] = contact
        return httpx.Response(
            200,
            json={"success": True, "errors": [], "messages": [], "result": self.domains[domain]},
        )
