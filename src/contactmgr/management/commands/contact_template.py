"""Saves, lists, shows and deletes named contact templates."""

import json
import logging
from pathlib import Path

from django.core.management import BaseCommand, CommandError

from contactmgr.management.commands.utility.registrar_command import RegistrarCommandMixin
from contactmgr.management.commands.utility.terminal_helper import TerminalHelper
from contactmgr.services.template_store import TemplateStore

logger = logging.getLogger(__name__)


class Command(RegistrarCommandMixin, BaseCommand):
    help = "Manage contact templates"

    def add_arguments(self, parser):
        subparsers = parser.add_subparsers(dest="action", required=True)

        save = subparsers.add_parser("save", help="Save a contact template from a JSON file")
        save.add_argument("name", help="Template name: letters, digits, - and _ only")
        save.add_argument("file", help="Path to a JSON object with the contact fields")

        subparsers.add_parser("list", help="List all saved templates")

        show = subparsers.add_parser("show", help="Display a template")
        show.add_argument("name")

        delete = subparsers.add_parser("delete", help="Delete a template")
        delete.add_argument("name")

    def handle(self, action, **kwargs):
        self.store = TemplateStore()
        handler = getattr(self, f"handle_{action}")
        with self.registrar_errors():
            handler(**kwargs)

    def handle_save(self, name, file, **kwargs):
        try:
            contact = json.loads(Path(file).read_text(encoding="utf-8"))
        except OSError as err:
            raise CommandError(f"Could not read {file}: {err}") from err
        except json.JSONDecodeError as err:
            raise CommandError(f"Invalid JSON format in {file}") from err

        overwriting = self.store.template_exists(name)
        record = self.store.save_template(name, contact)
        self.stdout.write(self.format_contact(record.to_payload()))
        verb = "updated" if overwriting else "saved"
        TerminalHelper.colorful_logger("INFO", "OKGREEN", f'Template "{name}" {verb}', exc_info=False)

    def handle_list(self, **kwargs):
        templates = self.store.list_templates()
        if not templates:
            logger.warning("No templates saved")
            logger.info("Create a template with: ./manage.py contact_template save NAME FILE")
            return

        self.stdout.write(f"{'Name':<25} {'Contact':<30} {'Email':<30} {'Updated':<12}")
        for template in templates:
            contact = template.contact
            full_name = f"{contact.get('first_name', '')} {contact.get('last_name', '')}".strip()
            self.stdout.write(
                f"{template.name:<25} {full_name:<30} {contact.get('email', ''):<30} "
                f"{template.updated_at.date().isoformat():<12}"
            )

    def handle_show(self, name, **kwargs):
        record = self.store.load_template(name)
        self.stdout.write(self.format_contact(record.to_payload()))

    def handle_delete(self, name, **kwargs):
        if not self.store.template_exists(name):
            raise CommandError(f'Template "{name}" not found')

        if not TerminalHelper.prompt_for_execution(
            system_exit_on_terminate=False,
            prompt_message=f"Template: {name}",
            prompt_title="Delete this template? This cannot be undone.",
        ):
            logger.info("Cancelled")
            return

        self.store.delete_template(name)
        TerminalHelper.colorful_logger("INFO", "OKGREEN", f'Template "{name}" deleted', exc_info=False)

    @staticmethod
    def format_contact(contact):
        lines = [f"  {field}: {value}" for field, value in contact.items()]
        return "\n".join(lines)
