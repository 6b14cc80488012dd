import logging
from typing import Callable, Iterable, List, Optional

from django.conf import settings

from registrarwrapper import AuthenticationError, RegistrarError

from contactmgr.services.registrar_service import RegistrarService
from contactmgr.utility.contact_data import (
    BatchResult,
    BulkUpdatePlan,
    ContactSet,
    DomainTarget,
    UpdateOutcome,
)
from contactmgr.utility.pacing import FixedIntervalPacer
from contactmgr.validations import clean_contact_set

logger = logging.getLogger(__name__)


class BulkUpdateService:
    """Applies one validated contact change to many domains.

    A run goes through these phases, in order, whatever the number of domains:
        1. prepare: normalize and validate every role (nothing is sent if this fails)
        2. resolve targets: the domain list in the order given, blanks skipped
        3. probe locks: read each domain's lock flag
        4. locked gate: ask `confirm_locked` when any domain is locked
        5. dispatch gate: ask `confirm_dispatch`, always
        6. dispatch: update domains one at a time, pausing between them
        7. aggregate: return a BatchResult

    Failures on a single domain become failed outcomes and never stop the run.
    Only bad contact data, a declined gate, or rejected credentials end it early.
    """

    def __init__(
        self,
        registrar_service: RegistrarService,
        confirm_locked: Callable[[List[DomainTarget]], bool],
        confirm_dispatch: Callable[[BulkUpdatePlan], bool],
        pacer=None,
        strict_lock_probe: bool = False,
    ):
        """
        Args:
            registrar_service: gateway used for lock probes and updates
            confirm_locked: shown the locked domains; return False to cancel the run
            confirm_dispatch: shown the plan; return False to cancel the run
            pacer: anything with a `wait()` method, called between dispatches
            strict_lock_probe: when True, a domain whose lock state could not be read
                goes through the locked gate instead of being treated as unlocked
        """
        self.registrar_service = registrar_service
        self.confirm_locked = confirm_locked
        self.confirm_dispatch = confirm_dispatch
        self.pacer = pacer or FixedIntervalPacer(settings.REGISTRAR_REQUEST_INTERVAL)
        self.strict_lock_probe = strict_lock_probe

    def run(self, domains: Iterable[str], contact_set: ContactSet, dry_run: bool = False) -> BatchResult:
        """Runs every phase and returns the aggregated result.

        Raises:
            ContactValidationError: the contact set is invalid. No network call has been made.
            ValueError: no domains were given.
            AuthenticationError: the registrar rejected the credentials.
        """
        contact_set = self.prepare(contact_set)
        targets = self.resolve_targets(domains)

        logger.info("Checking domain lock status...")
        probed = self.probe_locks(targets)
        locked = [target for target in probed if target.locked]

        if locked:
            logger.warning(f"{len(locked)} domain(s) are LOCKED with pending changes")
            if not self.confirm_locked(locked):
                logger.info("Cancelled. Please verify pending changes on locked domains first.")
                return BatchResult(dry_run=dry_run, cancelled=True)

        plan = BulkUpdatePlan(
            domains=tuple(targets),
            locked=tuple(locked),
            roles=tuple(contact_set.roles),
            dry_run=dry_run,
        )
        if not self.confirm_dispatch(plan):
            logger.info("Cancelled")
            return BatchResult(dry_run=dry_run, cancelled=True)

        outcomes = self.dispatch(targets, contact_set, dry_run=dry_run)
        result = BatchResult(outcomes=tuple(outcomes), dry_run=dry_run)
        logger.info(
            f"Bulk update finished{' (dry run)' if dry_run else ''}: "
            f"{result.successful} successful, {result.failed} failed, {result.total} total"
        )
        return result

    def prepare(self, contact_set: ContactSet) -> ContactSet:
        """Normalizes then validates every role. Raises ContactValidationError."""
        return clean_contact_set(contact_set)

    def resolve_targets(self, domains: Iterable[str]) -> List[str]:
        """Trims each name and skips blank entries, keeping the order domains were given in.

        A domain given twice is updated twice and gets two outcomes.
        """
        targets: List[str] = []
        for domain in domains:
            name = (domain or "").strip()
            if name:
                targets.append(name)
        if not targets:
            raise ValueError("No domains to update")
        return targets

    def probe_locks(self, domains: List[str]) -> List[DomainTarget]:
        """Reads each distinct domain's lock state once, in the order given.

        A failed probe is logged and does not stop the run. The domain is
        treated as unlocked, or as locked when `strict_lock_probe` is set.
        """
        probed = []
        for domain in dict.fromkeys(domains):
            try:
                target = self.registrar_service.get_domain_state(domain)
            except AuthenticationError:
                raise
            except RegistrarError as err:
                logger.warning(f"Could not check status for {domain}: {err}")
                target = DomainTarget(name=domain, locked=self.strict_lock_probe, lock_state_unknown=True)
            probed.append(target)
        return probed

    def dispatch(self, domains: List[str], contact_set: ContactSet, dry_run: bool = False) -> List[UpdateOutcome]:
        """Updates the domains strictly one after the other, in order."""
        total = len(domains)
        outcomes: List[UpdateOutcome] = []
        for index, domain in enumerate(domains, start=1):
            progress = f"[{index}/{total}]"
            if dry_run:
                logger.info(f"{progress} {domain} (would be updated)")
                outcomes.append(UpdateOutcome(domain=domain, success=True, message="Would be updated"))
            else:
                outcomes.append(self._update_domain(domain, contact_set, progress, completed=outcomes))

            # Be nice to the registrar's rate limits
            if index < total:
                self.pacer.wait()
        return outcomes

    def _update_domain(
        self, domain: str, contact_set: ContactSet, progress: str, completed: Optional[List[UpdateOutcome]] = None
    ) -> UpdateOutcome:
        logger.info(f"{progress} Updating {domain}...")
        try:
            self.registrar_service.apply_contact_update(domain, contact_set)
        except AuthenticationError:
            done = len(completed or [])
            logger.error(f"{progress} Credentials rejected while updating {domain}. Stopping after {done} domain(s).")
            raise
        except RegistrarError as err:
            message = str(err) or err.__class__.__name__
            logger.warning(f"{progress} {domain} failed: {message}")
            return UpdateOutcome(domain=domain, success=False, error_message=message)

        logger.info(f"{progress} {domain} updated")
        return UpdateOutcome(domain=domain, success=True)
