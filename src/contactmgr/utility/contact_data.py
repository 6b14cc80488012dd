"""
Value types passed between the validator, the registrar service and the bulk update service.

Regarding our dataclasses:
Not intended to be used as models but rather as an alternative to passing dictionaries around.
They are frozen, so a record that has been normalized and validated cannot drift
while a bulk update is being dispatched.
"""

from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from contactmgr.utility.constants import ContactRole

REQUIRED_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "address",
    "city",
    "zip",
    "country",
)

OPTIONAL_FIELDS = ("organization", "address2", "state", "fax")


@dataclass(frozen=True)
class ContactRecord:
    """One postal/legal contact, as the registrar stores it"""

    first_name: str = field(default="", repr=True)
    last_name: str = field(default="", repr=True)
    email: str = field(default="", repr=True)
    phone: str = field(default="", repr=False)
    address: str = field(default="", repr=False)
    city: str = field(default="", repr=False)
    zip: str = field(default="", repr=False)
    country: str = field(default="", repr=True)
    organization: Optional[str] = field(default=None, repr=False)
    address2: Optional[str] = field(default=None, repr=False)
    state: Optional[str] = field(default=None, repr=True)
    fax: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_mapping(cls, data: Mapping) -> "ContactRecord":
        """Builds a record out of a wire or template mapping. Unknown keys are dropped."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def to_payload(self) -> Dict[str, str]:
        """The wire representation. Absent optional fields are left out rather than sent as null."""
        payload = {name: getattr(self, name) for name in REQUIRED_FIELDS}
        for name in OPTIONAL_FIELDS:
            value = getattr(self, name)
            if value is not None:
                payload[name] = value
        return payload

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self):
        return f"{self.full_name} <{self.email}>"


class ContactSet(Mapping):
    """Up to four independent contact records keyed by role.

    Behaves like a read-only mapping of ContactRole -> ContactRecord and keeps
    the registrar's role order when iterated.
    """

    def __init__(self, records: Mapping):
        ordered = {}
        for role in ContactRole.ordered():
            record = records.get(role, records.get(role.value))
            if record is not None:
                ordered[role] = record
        unknown = {getattr(key, "value", key) for key in records} - {role.value for role in ContactRole}
        if unknown:
            raise ValueError(f"Unknown contact role(s): {', '.join(sorted(unknown))}")
        self._records = MappingProxyType(ordered)

    @classmethod
    def uniform(cls, record, roles=None) -> "ContactSet":
        """Applies the same record to every role in `roles` (all four by default)."""
        roles = roles or ContactRole.ordered()
        return cls({role: record for role in roles})

    @classmethod
    def from_roles(cls, **records) -> "ContactSet":
        """ContactSet.from_roles(registrant=a, admin=b)"""
        return cls(records)

    def __getitem__(self, role):
        try:
            role = ContactRole(role)
        except ValueError:
            raise KeyError(role) from None
        return self._records[role]

    def __iter__(self):
        return iter(self._records)

    def __len__(self):
        return len(self._records)

    def __eq__(self, other):
        if isinstance(other, ContactSet):
            return dict(self._records) == dict(other._records)
        return NotImplemented

    def __hash__(self):
        return hash(tuple(self._records.items()))

    def __repr__(self):
        return f"ContactSet({dict(self._records)!r})"

    @property
    def roles(self) -> List[ContactRole]:
        return list(self._records)

    @property
    def registrant_only(self) -> bool:
        return self.roles == [ContactRole.REGISTRANT]

    def to_payload(self) -> Dict[str, Dict[str, str]]:
        return {role.value: record.to_payload() for role, record in self._records.items()}


@dataclass
class DomainTarget:
    """A domain plus the state the registrar last reported for it. Never cached between runs."""

    name: str
    locked: bool = False
    material_changes: Tuple[str, ...] = ()
    contacts: Dict[str, dict] = field(default_factory=dict)
    details: dict = field(default_factory=dict, repr=False)
    # Set when the lock state could not be read and the domain was routed through the lock gate anyway
    lock_state_unknown: bool = False

    def describe(self) -> str:
        """e.g. `example.com (registrant email, registrant name)`"""
        if self.lock_state_unknown:
            return f"{self.name} (lock state unknown)"
        if self.material_changes:
            return f"{self.name} ({', '.join(self.material_changes)})"
        return self.name


@dataclass(frozen=True)
class UpdateOutcome:
    """The result of updating a single domain"""

    domain: str
    success: bool
    error_message: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"domain": self.domain, "success": self.success}
        if self.message:
            data["message"] = self.message
        if self.error_message:
            data["error"] = self.error_message
        return data


@dataclass(frozen=True)
class BatchResult:
    """Everything a bulk update produced, in the order the domains were given."""

    outcomes: Tuple[UpdateOutcome, ...] = ()
    dry_run: bool = False
    cancelled: bool = False

    @property
    def successful(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.success)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def failed_outcomes(self) -> List[UpdateOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]

    def to_dict(self) -> dict:
        return {
            "results": [outcome.to_dict() for outcome in self.outcomes],
            "successful": self.successful,
            "failed": self.failed,
            "total": self.total,
            "dryRun": self.dry_run,
            "cancelled": self.cancelled,
        }


@dataclass(frozen=True)
class BulkUpdatePlan:
    """What the operator is asked to approve before anything is dispatched"""

    domains: Tuple[str, ...]
    locked: Tuple[DomainTarget, ...]
    roles: Tuple[ContactRole, ...]
    dry_run: bool = False
