import httpx
from django.test import SimpleTestCase

from contactmgr.services.credentials import CredentialProvider
from contactmgr.services.mock_registrar_service import (
    MOCK_ACCOUNT_ID,
    MOCK_LOCKED_DOMAIN,
    MOCK_REJECTING_DOMAIN,
    MOCK_UNLOCKED_DOMAINS,
    MockRegistrarService,
)
from contactmgr.services.registrar_service import RegistrarService
from contactmgr.tests.common import less_console_noise_decorator, valid_contact
from contactmgr.utility.contact_data import ContactRecord, ContactSet
from registrarwrapper import APIError, RegistrarClient


class TestMockRegistrarServiceBasics(SimpleTestCase):
    """Test the MockRegistrarService lifecycle"""

    mock_api_service = MockRegistrarService()

    def tearDown(self):
        if self.mock_api_service.is_active:
            self.mock_api_service.stop()

    def test_service_is_a_singleton(self):
        self.assertIs(MockRegistrarService(), self.mock_api_service)

    def test_service_starts_and_stops(self):
        self.assertFalse(self.mock_api_service.is_active)

        self.mock_api_service.start()
        self.assertTrue(self.mock_api_service.is_active)

        self.mock_api_service.stop()
        self.assertFalse(self.mock_api_service.is_active)

    def test_start_when_already_active_is_safe(self):
        self.mock_api_service.start()
        self.mock_api_service.start()

        self.assertTrue(self.mock_api_service.is_active)

    def test_stop_when_already_stopped_is_safe(self):
        self.mock_api_service.stop()
        self.mock_api_service.stop()

        self.assertFalse(self.mock_api_service.is_active)


class TestMockRegistrarServiceRoutes(SimpleTestCase):
    """Drive the registrar service against the mocked API"""

    mock_api_service = MockRegistrarService()

    def setUp(self):
        self.mock_api_service.reset()
        self.mock_api_service.start()
        self.client = RegistrarClient(email="ops@example.com", api_key="key", client=httpx.Client())
        self.service = RegistrarService(
            client=self.client, credentials=CredentialProvider(email="ops@example.com", api_key="key", account_id="")
        )

    def tearDown(self):
        self.client.close()
        self.mock_api_service.stop()

    @less_console_noise_decorator
    def test_lists_every_fake_domain(self):
        names = [entry["name"] for entry in self.service.list_domains()]

        self.assertEqual(self.service.resolve_account(), MOCK_ACCOUNT_ID)
        self.assertEqual(names, [*MOCK_UNLOCKED_DOMAINS, MOCK_LOCKED_DOMAIN, MOCK_REJECTING_DOMAIN])

    @less_console_noise_decorator
    def test_locked_domain(self):
        target = self.service.get_domain_state(MOCK_LOCKED_DOMAIN)

        self.assertTrue(target.locked)
        self.assertEqual(target.material_changes, ("registrant email",))
        self.assertFalse(self.service.get_domain_state(MOCK_UNLOCKED_DOMAINS[0]).locked)

    @less_console_noise_decorator
    def test_update_is_remembered_until_reset(self):
        record = ContactRecord.from_mapping(valid_contact())

        self.service.apply_contact_update(MOCK_UNLOCKED_DOMAINS[0], ContactSet.from_roles(registrant=record))

        target = self.service.get_domain_state(MOCK_UNLOCKED_DOMAINS[0])
        self.assertEqual(target.contacts["registrant"]["email"], "jane@example.com")
        self.assertNotEqual(target.contacts["admin"]["email"], "jane@example.com")

        self.mock_api_service.reset()
        target = self.service.get_domain_state(MOCK_UNLOCKED_DOMAINS[0])
        self.assertNotEqual(target.contacts["registrant"]["email"], "jane@example.com")

    @less_console_noise_decorator
    def test_rejecting_domain(self):
        record = ContactRecord.from_mapping(valid_contact())

        with self.assertRaises(APIError) as context:
            self.service.apply_contact_update(MOCK_REJECTING_DOMAIN, ContactSet.uniform(record))

        self.assertEqual(str(context.exception), "Domain contacts cannot be changed at this time")
        self.assertEqual(context.exception.status_code, 400)
