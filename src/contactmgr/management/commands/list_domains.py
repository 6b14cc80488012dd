import argparse
import json
import logging
import re

from django.core.management import BaseCommand, CommandError

from contactmgr.management.commands.utility.registrar_command import RegistrarCommandMixin

logger = logging.getLogger(__name__)


class Command(RegistrarCommandMixin, BaseCommand):
    help = "Lists the domains in the registrar account with their registrant"

    def add_arguments(self, parser):
        parser.add_argument("--filter", help="Only show domains whose name matches this regular expression")
        parser.add_argument(
            "--json",
            action=argparse.BooleanOptionalAction,
            default=False,
            help="Print the domains as JSON",
        )

    def handle(self, **kwargs):
        pattern = None
        if kwargs.get("filter"):
            try:
                pattern = re.compile(kwargs["filter"], re.IGNORECASE)
            except re.error as err:
                raise CommandError(f"Invalid filter pattern: {err}") from err

        with self.get_registrar_service() as registrar_service, self.registrar_errors():
            domains = registrar_service.list_domains()
        logger.info(f"Found {len(domains)} domain(s)")

        if pattern:
            domains = [entry for entry in domains if pattern.search(entry.get("name") or entry.get("domain") or "")]
            logger.info(f"Filtered to {len(domains)} domain(s) matching pattern")

        if not domains:
            logger.warning("No domains found")
            return

        if kwargs.get("json"):
            self.stdout.write(json.dumps(domains, indent=2))
            return

        self.stdout.write(f"{'Domain':<30} {'Registrant':<25} {'Email':<30} {'Expires':<12}")
        for entry in domains:
            registrant = entry.get("registrant") or {}
            name = f"{registrant.get('first_name', '')} {registrant.get('last_name', '')}".strip() or "N/A"
            expires_at = entry.get("expires_at")
            self.stdout.write(
                f"{entry.get('name') or entry.get('domain'):<30} "
                f"{name:<25} "
                f"{registrant.get('email') or 'N/A':<30} "
                f"{expires_at.split('T')[0] if expires_at else 'N/A':<12}"
            )
