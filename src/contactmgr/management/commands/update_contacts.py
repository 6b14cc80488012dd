import argparse
import json
import logging

from django.core.management import BaseCommand

from contactmgr.management.commands.utility.registrar_command import RegistrarCommandMixin
from contactmgr.management.commands.utility.terminal_helper import TerminalHelper
from contactmgr.validations import clean_contact_set

logger = logging.getLogger(__name__)


class Command(RegistrarCommandMixin, BaseCommand):
    help = "Updates the contacts of a single domain from a saved contact template"

    def add_arguments(self, parser):
        parser.add_argument("domain", help="Domain to update, e.g. example.com")
        parser.add_argument("--template", required=True, help="Name of the saved contact template to apply")
        parser.add_argument(
            "--registrant-only",
            action=argparse.BooleanOptionalAction,
            default=False,
            help="Only update the registrant contact",
        )
        parser.add_argument(
            "--json",
            action=argparse.BooleanOptionalAction,
            default=False,
            help="Print the registrar's response as JSON",
        )

    def handle(self, domain, **kwargs):
        template_name = kwargs.get("template")
        contact_set = self.load_contact_set(template_name, registrant_only=kwargs.get("registrant_only"))
        with self.get_registrar_service() as registrar_service, self.registrar_errors():
            contact_set = clean_contact_set(contact_set)

            logger.info(f"Fetching current contacts for {domain}...")
            target = registrar_service.get_domain_state(domain)

            if target.locked:
                TerminalHelper.colorful_logger(
                    "WARNING",
                    "YELLOW",
                    "Domain is currently LOCKED with pending changes.\n"
                    "A previous update is awaiting email verification. "
                    "Verify it from the registrar's email before making new updates.",
                    exc_info=False,
                )
                if target.material_changes:
                    logger.info(f"Pending material changes: {', '.join(target.material_changes)}")
                if not TerminalHelper.prompt_for_execution(
                    system_exit_on_terminate=False,
                    prompt_message=target.describe(),
                    prompt_title="Continue with new update anyway? (Not recommended)",
                ):
                    logger.info("Cancelled. Please verify the pending changes first.")
                    return

            current = target.contacts.get("registrant") or {}
            new_registrant = contact_set.to_payload()["registrant"]
            changes = [
                f"{field}: {current.get(field) or '(none)'} -> {value}"
                for field, value in new_registrant.items()
                if current.get(field) != value
            ]
            if not TerminalHelper.prompt_for_execution(
                system_exit_on_terminate=False,
                prompt_message=(
                    f"Domain: {domain}\n"
                    f"Template: {template_name}\n"
                    f"Contacts to update: {', '.join(role.value for role in contact_set.roles)}\n"
                    "==Registrant changes==\n"
                    f"{TerminalHelper.array_as_string(changes) or 'No changes'}"
                ),
                prompt_title="Apply these changes?",
            ):
                logger.info("Cancelled")
                return

            result = registrar_service.apply_contact_update(domain, contact_set)

        if kwargs.get("json"):
            self.stdout.write(json.dumps(result, indent=2))
        else:
            TerminalHelper.colorful_logger("INFO", "OKGREEN", f"Domain {domain} updated successfully", exc_info=False)
