from django.db import models


class ContactRole(models.TextChoices):
    """The contact roles the registrar accepts on a domain."""

    REGISTRANT = "registrant", "Registrant"
    ADMIN = "admin", "Administrative"
    TECHNICAL = "technical", "Technical"
    BILLING = "billing", "Billing"

    @classmethod
    def ordered(cls):
        """Roles in the order the registrar lists them."""
        return [cls.REGISTRANT, cls.ADMIN, cls.TECHNICAL, cls.BILLING]


# Countries the registrar accepts contacts for. Deliberately narrower than ISO 3166-1.
SUPPORTED_COUNTRY_CODES = frozenset(
    {
        "US", "GB", "CA", "AU", "NZ", "DE", "FR", "IT", "ES", "NL", "BE", "CH",
        "AT", "SE", "NO", "DK", "FI", "PL", "CZ", "HU", "RO", "GR", "PT", "IE",
        "JP", "CN", "IN", "BR", "MX", "KR", "SG", "HK", "RU", "ZA", "AE",
    }
)  # fmt: skip

# US states, DC and territories
US_STATE_CODES = frozenset(
    {
        "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
        "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
        "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
        "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
        "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
        "DC", "PR", "VI", "GU", "AS", "MP",
    }
)  # fmt: skip

# Canadian provinces and territories
CA_PROVINCE_CODES = frozenset(
    {"AB", "BC", "MB", "NB", "NL", "NS", "NT", "NU", "ON", "PE", "QC", "SK", "YT"}
)

# Countries whose contacts must carry a state/province, mapped to the valid codes
SUBDIVISION_CODES = {
    "US": US_STATE_CODES,
    "CA": CA_PROVINCE_CODES,
}

# Template names are stored as-is and typed on the command line
TEMPLATE_NAME_PATTERN = r"^[a-z0-9_-]+$"
