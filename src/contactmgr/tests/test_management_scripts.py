import json
import tempfile
from io import StringIO
from pathlib import Path
from unittest.mock import patch

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings

from contactmgr.models import ContactTemplate
from contactmgr.services.mock_registrar_service import (
    MOCK_LOCKED_DOMAIN,
    MOCK_REJECTING_DOMAIN,
    MOCK_UNLOCKED_DOMAINS,
    MockRegistrarService,
)
from contactmgr.services.template_store import TemplateStore
from contactmgr.tests.common import less_console_noise, less_console_noise_decorator, valid_contact
from registrarwrapper import AuthenticationError

QUERY_YES_NO = "contactmgr.management.commands.utility.terminal_helper.TerminalHelper.query_yes_no"

CONFIGURED = {
    "REGISTRAR_EMAIL": "ops@example.com",
    "REGISTRAR_API_KEY": "0123456789abcdef",
    "REGISTRAR_ACCOUNT_ID": None,
    "REGISTRAR_REQUEST_INTERVAL": 0,
}


class MockRegistrarTestCase(TestCase):
    """Runs each test against the in-memory registrar, with credentials configured"""

    mock_api_service = MockRegistrarService()

    def setUp(self):
        self.settings_override = override_settings(**CONFIGURED)
        self.settings_override.enable()
        self.mock_api_service.reset()
        self.mock_api_service.start()
        with less_console_noise():
            TemplateStore().save_template("ops", valid_contact())
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.mock_api_service.stop()
        self.settings_override.disable()
        self.tmpdir.cleanup()

    def write_file(self, name, content):
        path = Path(self.tmpdir.name) / name
        path.write_text(content, encoding="utf-8")
        return str(path)

    def contacts_of(self, domain):
        return self.mock_api_service.domains[domain]


class TestBulkUpdateContacts(MockRegistrarTestCase):
    @less_console_noise_decorator
    @patch(QUERY_YES_NO, return_value=True)
    def test_updates_domains_from_file(self, mock_query):
        domains_file = self.write_file("domains.txt", "# ours\nexample.com\nexample.org\n")
        out = StringIO()

        call_command("bulk_update_contacts", template="ops", domains=domains_file, json=True, stdout=out)

        result = json.loads(out.getvalue())
        self.assertEqual(result["successful"], 2)
        self.assertEqual(result["total"], 2)
        self.assertFalse(result["dryRun"])
        for domain in MOCK_UNLOCKED_DOMAINS:
            for role in ("registrant", "admin", "technical", "billing"):
                self.assertEqual(self.contacts_of(domain)[role]["email"], "jane@example.com")
        # Only the dispatch gate, nothing is locked
        self.assertEqual(mock_query.call_count, 1)

    @less_console_noise_decorator
    @patch(QUERY_YES_NO, return_value=True)
    def test_registrant_only(self, mock_query):
        domains_file = self.write_file("domains.json", '["example.com"]')

        call_command("bulk_update_contacts", template="ops", domains=domains_file, registrant_only=True)

        self.assertEqual(self.contacts_of("example.com")["registrant"]["email"], "jane@example.com")
        self.assertNotEqual(self.contacts_of("example.com")["admin"]["email"], "jane@example.com")

    @less_console_noise_decorator
    @patch(QUERY_YES_NO, return_value=True)
    def test_every_account_domain_with_a_rejection(self, mock_query):
        with self.assertRaisesRegex(CommandError, "1 of 4 domain updates failed"):
            call_command("bulk_update_contacts", template="ops")

        # Locked gate and dispatch gate
        self.assertEqual(mock_query.call_count, 2)
        self.assertEqual(self.contacts_of(MOCK_LOCKED_DOMAIN)["registrant"]["email"], "jane@example.com")
        self.assertNotEqual(self.contacts_of(MOCK_REJECTING_DOMAIN)["registrant"]["email"], "jane@example.com")

    @less_console_noise_decorator
    @patch(QUERY_YES_NO, return_value=False)
    def test_declining_locked_gate_changes_nothing(self, mock_query):
        domains_file = self.write_file("domains.txt", f"example.com\n{MOCK_LOCKED_DOMAIN}\n")
        out = StringIO()

        call_command("bulk_update_contacts", template="ops", domains=domains_file, json=True, stdout=out)

        result = json.loads(out.getvalue())
        self.assertTrue(result["cancelled"])
        self.assertEqual(result["total"], 0)
        self.assertEqual(mock_query.call_count, 1)
        self.assertNotEqual(self.contacts_of("example.com")["registrant"]["email"], "jane@example.com")

    @less_console_noise_decorator
    @patch(QUERY_YES_NO, return_value=True)
    def test_dry_run(self, mock_query):
        domains_file = self.write_file("domains.txt", "example.com\n")
        out = StringIO()

        call_command("bulk_update_contacts", template="ops", domains=domains_file, dry_run=True, json=True, stdout=out)

        result = json.loads(out.getvalue())
        self.assertTrue(result["dryRun"])
        self.assertEqual(result["results"], [{"domain": "example.com", "success": True, "message": "Would be updated"}])
        self.assertNotEqual(self.contacts_of("example.com")["registrant"]["email"], "jane@example.com")

    @less_console_noise_decorator
    def test_invalid_template_contact_makes_no_requests(self):
        # Saved before validation rules tightened, for example
        ContactTemplate.objects.create(name="stale", contact=valid_contact(country="ZZ", state=""))
        domains_file = self.write_file("domains.txt", "example.com\n")

        with patch(QUERY_YES_NO) as mock_query:
            with self.assertRaisesRegex(CommandError, "country must be a valid ISO 3166-1 alpha-2 code"):
                call_command("bulk_update_contacts", template="stale", domains=domains_file)
        mock_query.assert_not_called()

    @less_console_noise_decorator
    @patch(QUERY_YES_NO, return_value=True)
    def test_repeated_domains_in_file_are_updated_once(self, mock_query):
        domains_file = self.write_file("domains.txt", "example.com\nexample.org\nexample.com\n")
        out = StringIO()

        call_command("bulk_update_contacts", template="ops", domains=domains_file, json=True, stdout=out)

        result = json.loads(out.getvalue())
        self.assertEqual([entry["domain"] for entry in result["results"]], ["example.com", "example.org"])

    @less_console_noise_decorator
    @patch(QUERY_YES_NO, return_value=True)
    def test_registrar_client_is_closed(self, mock_query):
        domains_file = self.write_file("domains.txt", "example.com\n")

        with patch("registrarwrapper.client.RegistrarClient.close") as mock_close:
            call_command("bulk_update_contacts", template="ops", domains=domains_file)
        mock_close.assert_called_once()

    @less_console_noise_decorator
    def test_missing_template(self):
        with self.assertRaisesRegex(CommandError, 'Template "nope" not found'):
            call_command("bulk_update_contacts", template="nope")

    @less_console_noise_decorator
    def test_bad_domain_file(self):
        domains_file = self.write_file("domains.json", "[example.com")
        with self.assertRaisesRegex(CommandError, "Invalid JSON format"):
            call_command("bulk_update_contacts", template="ops", domains=domains_file)

    @less_console_noise_decorator
    def test_empty_domain_file(self):
        domains_file = self.write_file("domains.txt", "# nothing yet\n")
        with self.assertRaisesRegex(CommandError, "No domains to update"):
            call_command("bulk_update_contacts", template="ops", domains=domains_file)

    @less_console_noise_decorator
    def test_not_configured(self):
        with override_settings(REGISTRAR_API_KEY=None):
            with self.assertRaisesRegex(CommandError, "Registrar credentials are not configured"):
                call_command("bulk_update_contacts", template="ops")


class TestUpdateContacts(MockRegistrarTestCase):
    @less_console_noise_decorator
    @patch(QUERY_YES_NO, return_value=True)
    def test_updates_one_domain(self, mock_query):
        out = StringIO()

        call_command("update_contacts", "example.com", template="ops", json=True, stdout=out)

        result = json.loads(out.getvalue())
        self.assertEqual(result["registrant"]["email"], "jane@example.com")
        self.assertEqual(mock_query.call_count, 1)

    @less_console_noise_decorator
    @patch(QUERY_YES_NO, return_value=False)
    def test_locked_domain_can_be_left_alone(self, mock_query):
        call_command("update_contacts", MOCK_LOCKED_DOMAIN, template="ops")

        self.assertEqual(mock_query.call_count, 1)
        self.assertNotEqual(self.contacts_of(MOCK_LOCKED_DOMAIN)["registrant"]["email"], "jane@example.com")

    @less_console_noise_decorator
    @patch(QUERY_YES_NO, return_value=True)
    def test_rejected_update(self, mock_query):
        with self.assertRaisesRegex(CommandError, "Domain contacts cannot be changed at this time"):
            call_command("update_contacts", MOCK_REJECTING_DOMAIN, template="ops")

    @less_console_noise_decorator
    def test_unknown_domain(self):
        with self.assertRaises(CommandError):
            call_command("update_contacts", "unknown.example", template="ops")


class TestDomainStatus(MockRegistrarTestCase):
    @less_console_noise_decorator
    def test_shows_lock_state_and_contacts(self):
        out = StringIO()

        call_command("domain_status", MOCK_LOCKED_DOMAIN, stdout=out)

        output = out.getvalue()
        self.assertIn(f"Domain:    {MOCK_LOCKED_DOMAIN}", output)
        self.assertIn("  - registrant email", output)
        self.assertIn("Registrant (Domain Owner):", output)
        self.assertIn("Billing:", output)


class TestListDomains(MockRegistrarTestCase):
    @less_console_noise_decorator
    def test_json_output_with_filter(self):
        out = StringIO()

        call_command("list_domains", filter=r"\.(com|org)$", json=True, stdout=out)

        names = [entry["name"] for entry in json.loads(out.getvalue())]
        self.assertEqual(names, MOCK_UNLOCKED_DOMAINS)

    @less_console_noise_decorator
    def test_table_output(self):
        out = StringIO()

        call_command("list_domains", stdout=out)

        output = out.getvalue()
        for domain in [*MOCK_UNLOCKED_DOMAINS, MOCK_LOCKED_DOMAIN, MOCK_REJECTING_DOMAIN]:
            self.assertIn(domain, output)

    def test_invalid_filter(self):
        with self.assertRaisesRegex(CommandError, "Invalid filter pattern"):
            call_command("list_domains", filter="(")

    @less_console_noise_decorator
    def test_rejected_credentials(self):
        with self.assertRaisesRegex(CommandError, "Global API Key"):
            with patch("registrarwrapper.client.RegistrarClient.get", side_effect=AuthenticationError()):
                call_command("list_domains")

    @less_console_noise_decorator
    def test_registrar_client_is_closed_after_an_error(self):
        with patch("registrarwrapper.client.RegistrarClient.close") as mock_close:
            with self.assertRaises(CommandError):
                with patch("registrarwrapper.client.RegistrarClient.get", side_effect=AuthenticationError()):
                    call_command("list_domains")
        mock_close.assert_called_once()


class TestContactTemplate(TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def write_contact(self, contact):
        path = Path(self.tmpdir.name) / "contact.json"
        path.write_text(json.dumps(contact), encoding="utf-8")
        return str(path)

    @less_console_noise_decorator
    def test_save_and_show(self):
        call_command("contact_template", "save", "ops", self.write_contact(valid_contact(email="OPS@EXAMPLE.COM")))
        out = StringIO()

        call_command("contact_template", "show", "ops", stdout=out)

        self.assertIn("email: ops@example.com", out.getvalue())

    @less_console_noise_decorator
    def test_save_invalid_contact(self):
        with self.assertRaisesRegex(CommandError, "phone must be in E.164 format"):
            call_command("contact_template", "save", "ops", self.write_contact(valid_contact(phone="555-1234")))
        self.assertFalse(ContactTemplate.objects.exists())

    @less_console_noise_decorator
    def test_save_invalid_name(self):
        with self.assertRaisesRegex(CommandError, "alphanumeric characters"):
            call_command("contact_template", "save", "ops team", self.write_contact(valid_contact()))

    @less_console_noise_decorator
    def test_list(self):
        TemplateStore().save_template("ops", valid_contact())
        out = StringIO()

        call_command("contact_template", "list", stdout=out)

        self.assertIn("Jane Doe", out.getvalue())

    @less_console_noise_decorator
    @patch(QUERY_YES_NO, return_value=True)
    def test_delete(self, mock_query):
        TemplateStore().save_template("ops", valid_contact())

        call_command("contact_template", "delete", "ops")

        self.assertFalse(ContactTemplate.objects.exists())

    @less_console_noise_decorator
    @patch(QUERY_YES_NO, return_value=False)
    def test_delete_cancelled(self, mock_query):
        TemplateStore().save_template("ops", valid_contact())

        call_command("contact_template", "delete", "ops")

        self.assertTrue(ContactTemplate.objects.exists())

    @less_console_noise_decorator
    def test_show_missing(self):
        with self.assertRaisesRegex(CommandError, 'Template "nope" not found'):
            call_command("contact_template", "show", "nope")
