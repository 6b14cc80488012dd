import logging
import re
from typing import List

from django.db import transaction

from contactmgr.models import ContactTemplate
from contactmgr.utility.constants import TEMPLATE_NAME_PATTERN
from contactmgr.utility.contact_data import ContactRecord
from contactmgr.utility.errors import ContactValidationError, InvalidTemplateNameError, TemplateNotFoundError
from contactmgr.validations import normalize_contact, validate_contact

logger = logging.getLogger(__name__)


class TemplateStore:
    """Named contact templates, stored normalized in the database."""

    def _check_name(self, name):
        if not name or not isinstance(name, str) or not re.match(TEMPLATE_NAME_PATTERN, name, re.IGNORECASE):
            raise InvalidTemplateNameError(name)

    def save_template(self, name: str, contact) -> ContactRecord:
        """Normalizes, validates and saves `contact` under `name`, replacing any template of that name.

        Raises:
            InvalidTemplateNameError: name has characters other than letters, digits, - and _
            ContactValidationError: the contact is not valid once normalized
        """
        self._check_name(name)
        record = normalize_contact(contact)
        errors = validate_contact(record)
        if errors:
            raise ContactValidationError({"contact": errors})

        with transaction.atomic():
            _, created = ContactTemplate.objects.update_or_create(
                name=name,
                defaults={"contact": record.to_payload()},
            )
        logger.info(f"{'Created' if created else 'Updated'} contact template {name}")
        return record

    def load_template(self, name: str) -> ContactRecord:
        try:
            template = ContactTemplate.objects.get(name=name)
        except ContactTemplate.DoesNotExist:
            logger.info(f"No contact template found by name {name}")
            raise TemplateNotFoundError(name)
        return ContactRecord.from_mapping(template.contact)

    def list_templates(self) -> List[ContactTemplate]:
        return list(ContactTemplate.objects.all())

    def get_template_names(self) -> List[str]:
        return list(ContactTemplate.objects.values_list("name", flat=True))

    def template_exists(self, name: str) -> bool:
        return ContactTemplate.objects.filter(name=name).exists()

    def delete_template(self, name: str):
        deleted, _ = ContactTemplate.objects.filter(name=name).delete()
        if not deleted:
            raise TemplateNotFoundError(name)
        logger.info(f"Deleted contact template {name}")
