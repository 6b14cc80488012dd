import logging

from enum import IntEnum

logger = logging.getLogger(__name__)


class ContactErrorCodes(IntEnum):
    """Used when contact data or templates cannot be used.
    Overview of contact error codes:
        - 1 INVALID_CONTACT one or more roles failed validation
        - 2 TEMPLATE_NOT_FOUND no template by that name
        - 3 INVALID_TEMPLATE_NAME the template name has characters we do not allow
        - 4 NOT_CONFIGURED registrar credentials are missing
    """

    INVALID_CONTACT = 1
    TEMPLATE_NOT_FOUND = 2
    INVALID_TEMPLATE_NAME = 3
    NOT_CONFIGURED = 4


class ContactError(Exception):
    """
    Base class for contact related errors.
    Uses `ContactErrorCodes` as an enum.
    """

    _error_mapping = {
        ContactErrorCodes.INVALID_CONTACT: "Contact validation failed.",
        ContactErrorCodes.TEMPLATE_NOT_FOUND: "Template not found.",
        ContactErrorCodes.INVALID_TEMPLATE_NAME: (
            "Template name must contain only alphanumeric characters, hyphens, and underscores."
        ),
        ContactErrorCodes.NOT_CONFIGURED: (
            "Registrar credentials are not configured. Set REGISTRAR_EMAIL and REGISTRAR_API_KEY."
        ),
    }

    def __init__(self, *args, code=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.code = code
        self.message = str(args[0]) if args else self._error_mapping.get(code, "")

    def __str__(self):
        return f"{self.message}"

    @classmethod
    def get_error_message(cls, code=None):
        return cls._error_mapping.get(code)


class ContactValidationError(ContactError):
    """Raised when contact data fails validation. Never retried.

    `violations` maps a role name ("registrant", "admin", ...) or "contact"
    to the complete list of problems found for it.
    """

    def __init__(self, violations):
        self.violations = dict(violations)
        super().__init__(code=ContactErrorCodes.INVALID_CONTACT)

    def __str__(self):
        details = "; ".join(f"{role}: {', '.join(errors)}" for role, errors in self.violations.items())
        return f"{self.message} {details}".strip()


class TemplateNotFoundError(ContactError):
    def __init__(self, name):
        super().__init__(f'Template "{name}" not found', code=ContactErrorCodes.TEMPLATE_NOT_FOUND)
        self.name = name


class InvalidTemplateNameError(ContactError):
    def __init__(self, name=None):
        super().__init__(code=ContactErrorCodes.INVALID_TEMPLATE_NAME)
        self.name = name


class NotConfiguredError(ContactError):
    def __init__(self):
        super().__init__(code=ContactErrorCodes.NOT_CONFIGURED)
