import logging
import sys
from typing import List

from contactmgr.utility.contact_data import BatchResult, BulkUpdatePlan, DomainTarget

logger = logging.getLogger(__name__)


class TerminalColors:
    """Colors for terminal outputs
    (makes reading the logs WAY easier)"""

    HEADER = "\033[95m"
    OKBLUE = "\033[94m"
    OKCYAN = "\033[96m"
    OKGREEN = "\033[92m"
    YELLOW = "\033[93m"
    MAGENTA = "\033[35m"
    FAIL = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"
    UNDERLINE = "\033[4m"
    BackgroundLightYellow = "\033[103m"


class TerminalHelper:

    @staticmethod
    def log_batch_summary(result: BatchResult, log_header=None, failed_header=None):
        """Logs the outcome of a bulk update with colored output.

        Output Format:
            [Header]
            Updated: X domains (or "Would update" on a dry run)
            ----- UPDATE FAILED -----
            Failed to update: Y domains
              • domain: error
        """
        if log_header is None:
            log_header = "============= FINISHED ==============="
            if result.dry_run:
                log_header = "========== FINISHED (DRY RUN) =========="

        if failed_header is None:
            failed_header = "----- UPDATE FAILED -----"

        if result.cancelled:
            message = f"\n{log_header}\nCancelled. No domains were updated."
            TerminalHelper.colorful_logger("INFO", "YELLOW", message, exc_info=False)
            return

        label = "Would update" if result.dry_run else "Updated"
        messages = [f"\n{log_header}", f"{label} {result.successful} of {result.total} domains"]

        if result.failed > 0:
            messages.append(failed_header)
            messages.append(f"Failed to update {result.failed} domains")
            for outcome in result.failed_outcomes:
                messages.append(f"  • {outcome.domain}: {outcome.error_message}")
            TerminalHelper.colorful_logger("ERROR", "FAIL", "\n".join(messages), exc_info=False)
        else:
            TerminalHelper.colorful_logger("INFO", "OKGREEN", "\n".join(messages), exc_info=False)

    @staticmethod
    def query_yes_no(question: str, default="yes"):
        """Ask a yes/no question via input() and return their answer.

        "question" is a string that is presented to the user.
        "default" is the presumed answer if the user just hits <Enter>.
                It must be "yes" (the default), "no" or None (meaning
                an answer is required of the user).

        The "answer" return value is True for "yes" or False for "no".

        Raises:
            ValueError: When "default" is not "yes", "no", or None.
        """
        valid = {"yes": True, "y": True, "ye": True, "no": False, "n": False}
        if default is None:
            prompt = " [y/n] "
        elif default == "yes":
            prompt = " [Y/n] "
        elif default == "no":
            prompt = " [y/N] "
        else:
            raise ValueError("invalid default answer: '%s'" % default)

        while True:
            logger.info(question + prompt)
            choice = input().lower()
            if default is not None and choice == "":
                return valid[default]
            elif choice in valid:
                return valid[choice]
            else:
                logger.info("Please respond with 'yes' or 'no' " "(or 'y' or 'n').\n")

    @staticmethod
    def array_as_string(array_to_convert: List[str]) -> str:
        array_as_string = "{}".format("\n".join(map(str, array_to_convert)))
        return array_as_string

    @staticmethod
    def prompt_for_execution(
        system_exit_on_terminate: bool, prompt_message: str, prompt_title: str, verify_message=None, default="no"
    ) -> bool:
        """Create to reduce code complexity.
        Prompts the user to inspect the given string
        and asks if they wish to proceed.
        If the user responds (y), returns TRUE
        If the user responds (n), either returns FALSE
        or exits the system if system_exit_on_terminate = TRUE"""

        action_description_for_selecting_no = "cancel"
        if system_exit_on_terminate:
            action_description_for_selecting_no = "exit"

        if verify_message is None:
            verify_message = "*** IMPORTANT:  VERIFY THE FOLLOWING LOOKS CORRECT ***"

        # Allow the user to inspect the command string
        # and ask if they wish to proceed
        proceed_execution = TerminalHelper.query_yes_no(
            f"\n{TerminalColors.OKCYAN}"
            "=====================================================\n"
            f"{prompt_title}\n"
            "=====================================================\n"
            f"{verify_message}\n"
            f"{prompt_message}\n"
            f"{TerminalColors.FAIL}"
            f"Proceed? (Y = proceed, N = {action_description_for_selecting_no})"
            f"{TerminalColors.ENDC}",
            default=default,
        )

        # If the user decided to proceed return true.
        # Otherwise, either return false or exit this subroutine.
        if not proceed_execution:
            if system_exit_on_terminate:
                sys.exit()
            return False
        return True

    @staticmethod
    def confirm_locked_domains(locked: List[DomainTarget]) -> bool:
        """Locked-domain gate for the bulk update service"""
        described = TerminalHelper.array_as_string([f"  • {target.describe()}" for target in locked])
        return TerminalHelper.prompt_for_execution(
            system_exit_on_terminate=False,
            prompt_message=(
                f"{len(locked)} domain(s) are LOCKED with pending changes:\n{described}\n"
                "These domains are waiting for email verification.\n"
                "Updates will be queued but won't take effect until verified."
            ),
            prompt_title="Proceed with update on locked domains?",
            verify_message="** Some domains have unverified pending changes. **",
        )

    @staticmethod
    def bulk_update_prompt(plan: BulkUpdatePlan, template_name=None) -> str:
        """The summary shown before a bulk update is dispatched"""
        lines = ["==Bulk Update Summary=="]
        if template_name:
            lines.append(f"Template: {template_name}")
        lines.append(f"Contacts to update: {', '.join(role.value for role in plan.roles)}")
        lines.append(f"Domains to update: {len(plan.domains)}")
        if plan.locked:
            lines.append(f"Locked domains (update will be queued): {len(plan.locked)}")
        lines.append(f"Dry run: {'Yes' if plan.dry_run else 'No'}")
        return "\n".join(lines)

    @staticmethod
    def colorful_logger(log_level, color, message, exc_info=True):
        """Adds some color to your log output.

        Args:
            log_level: str | Logger.method -> Desired log level. ex: logger.info or "INFO"
            color: str | TerminalColors -> Output color. ex: TerminalColors.YELLOW or "YELLOW"
            message: str -> Message to display.
            exc_info: bool -> Whether the log should print exc_info or not
        """

        if isinstance(log_level, str) and hasattr(logger, log_level.lower()):
            log_method = getattr(logger, log_level.lower())
        else:
            log_method = log_level

        if isinstance(color, str) and hasattr(TerminalColors, color.upper()):
            terminal_color = getattr(TerminalColors, color.upper())
        else:
            terminal_color = color

        colored_message = f"{terminal_color}{message}{TerminalColors.ENDC}"
        log_method(colored_message, exc_info=exc_info)
