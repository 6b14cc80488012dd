"""Applies one contact template to many domains at once."""

import argparse
import json
import logging

from django.core.management import BaseCommand, CommandError

from contactmgr.management.commands.utility.registrar_command import RegistrarCommandMixin
from contactmgr.management.commands.utility.terminal_helper import TerminalHelper
from contactmgr.services.bulk_update_service import BulkUpdateService
from contactmgr.utility.domain_list import parse_domain_file

logger = logging.getLogger(__name__)


class Command(RegistrarCommandMixin, BaseCommand):
    help = (
        "Updates the contacts of many domains from a saved contact template. "
        "Without --domains every domain in the registrar account is updated."
    )

    def add_arguments(self, parser):
        parser.add_argument("--template", required=True, help="Name of the saved contact template to apply")
        parser.add_argument(
            "--domains",
            help="Path to a domain list: a text file with one domain per line, or a JSON array",
        )
        parser.add_argument(
            "--registrant-only",
            action=argparse.BooleanOptionalAction,
            default=False,
            help="Only update the registrant contact",
        )
        parser.add_argument(
            "--dry-run",
            action=argparse.BooleanOptionalAction,
            default=False,
            help="Show what would be updated without sending any updates",
        )
        parser.add_argument(
            "--strict-lock-probe",
            action=argparse.BooleanOptionalAction,
            default=False,
            help="Ask before updating domains whose lock state could not be checked",
        )
        parser.add_argument(
            "--json",
            action=argparse.BooleanOptionalAction,
            default=False,
            help="Print the result as JSON",
        )

    def handle(self, **kwargs):
        template_name = kwargs.get("template")
        dry_run = kwargs.get("dry_run")

        contact_set = self.load_contact_set(template_name, registrant_only=kwargs.get("registrant_only"))

        def confirm_dispatch(plan):
            return TerminalHelper.prompt_for_execution(
                system_exit_on_terminate=False,
                prompt_message=TerminalHelper.bulk_update_prompt(plan, template_name=template_name),
                prompt_title="Preview this bulk update?" if plan.dry_run else "Apply this bulk update?",
            )

        with self.get_registrar_service() as registrar_service, self.registrar_errors():
            service = BulkUpdateService(
                registrar_service,
                confirm_locked=TerminalHelper.confirm_locked_domains,
                confirm_dispatch=confirm_dispatch,
                strict_lock_probe=kwargs.get("strict_lock_probe"),
            )
            # Bad contact data must fail before the account's domains are fetched
            contact_set = service.prepare(contact_set)
            domains = self.get_domains(registrar_service, kwargs.get("domains"))
            try:
                result = service.run(domains, contact_set, dry_run=dry_run)
            except ValueError as err:
                raise CommandError(str(err)) from err

        if kwargs.get("json"):
            self.stdout.write(json.dumps(result.to_dict(), indent=2))
        else:
            TerminalHelper.log_batch_summary(result)

        if result.failed:
            raise CommandError(f"{result.failed} of {result.total} domain updates failed")

    def get_domains(self, registrar_service, domains_file=None):
        """Domains from the given file, or every domain in the account"""
        if domains_file:
            try:
                domains = parse_domain_file(domains_file)
            except (OSError, ValueError) as err:
                raise CommandError(f"Could not read domain list: {err}") from err
            logger.info(f"Loaded {len(domains)} domain(s) from {domains_file}")
            unique = list(dict.fromkeys(domains))
            if len(unique) < len(domains):
                logger.warning(f"Skipping {len(domains) - len(unique)} repeated domain(s) in {domains_file}")
            return unique

        logger.info("No domain list given. Fetching every domain in the account...")
        domains = [entry.get("name") for entry in registrar_service.list_domains() if entry.get("name")]
        logger.info(f"Found {len(domains)} domain(s)")
        return domains
