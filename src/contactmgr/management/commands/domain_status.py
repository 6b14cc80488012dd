import logging

from django.core.management import BaseCommand

from contactmgr.management.commands.utility.registrar_command import RegistrarCommandMixin
from contactmgr.management.commands.utility.terminal_helper import TerminalHelper
from contactmgr.utility.constants import ContactRole

logger = logging.getLogger(__name__)

ROLE_LABELS = {
    ContactRole.REGISTRANT: "Registrant (Domain Owner)",
    ContactRole.ADMIN: "Administrator",
    ContactRole.TECHNICAL: "Technical",
    ContactRole.BILLING: "Billing",
}


class Command(RegistrarCommandMixin, BaseCommand):
    help = "Shows a domain's registration status, lock state and current contacts"

    def add_arguments(self, parser):
        parser.add_argument("domain", help="Domain to check, e.g. example.com")

    def handle(self, domain, **kwargs):
        with self.get_registrar_service() as registrar_service, self.registrar_errors():
            target = registrar_service.get_domain_state(domain)

        details = target.details
        expires_at = details.get("expires_at")
        lines = [
            "Domain Status",
            "-" * 50,
            f"  Domain:    {target.name}",
            f"  Registrar: {details.get('current_registrar') or 'N/A'}",
            f"  Status:    {details.get('last_known_status') or 'N/A'}",
            f"  Expires:   {expires_at.split('T')[0] if expires_at else 'N/A'}",
            f"  Privacy:   {'Enabled' if details.get('privacy') else 'Disabled'}",
        ]
        self.stdout.write("\n".join(lines))

        if target.locked:
            TerminalHelper.colorful_logger(
                "WARNING", "YELLOW", "Domain is LOCKED pending verification of material changes", exc_info=False
            )
            if target.material_changes:
                self.stdout.write("Pending material changes")
                for change in target.material_changes:
                    self.stdout.write(f"  - {change}")
            self.stdout.write(
                "Action required: check your email for a verification message from the registrar "
                "and follow its link. The domain unlocks once the changes are verified."
            )
        else:
            TerminalHelper.colorful_logger(
                "INFO", "OKGREEN", "Domain is unlocked and ready for updates", exc_info=False
            )

        self.stdout.write("\nCurrent Contacts\n" + "-" * 50)
        for role in ContactRole.ordered():
            contact = target.contacts.get(role.value)
            if not contact:
                continue
            address = contact.get("address", "")
            if contact.get("address2"):
                address = f"{address}, {contact['address2']}"
            self.stdout.write(
                "\n".join(
                    [
                        f"  {ROLE_LABELS[role]}:",
                        f"    Name:    {contact.get('first_name', '')} {contact.get('last_name', '')}",
                        f"    Email:   {contact.get('email', '')}",
                        f"    Phone:   {contact.get('phone', '')}",
                        f"    Address: {address}",
                        f"    City:    {contact.get('city', '')}, "
                        f"{contact.get('state') or ''} {contact.get('zip', '')}",
                        f"    Country: {contact.get('country', '')}",
                    ]
                )
            )
