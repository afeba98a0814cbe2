#!/usr/bin/env python3
"""Command-line interface for the membership renewal job.

This CLI runs one renewal pass: fetch payments and members, update
membership status, send renewal reminders and report statistics.

Usage:
    python -m membership_renewal.reconciliation.cli run
    python -m membership_renewal.reconciliation.cli run --dry-run --format text
    python -m membership_renewal.reconciliation.cli run --output report.json
"""

import argparse
import logging
import sys
from typing import Optional

from ..config import ConfigurationError, Settings
from ..connectors import (
    BaserowMemberStore,
    BrevoEmailSender,
    DryRunMemberStore,
    HelloAssoPaymentSource,
    RecordingEmailSender,
)
from .models import RunStatus
from .report import ReportGenerator
from .service import RenewalService

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # one INFO line per request is too chatty next to our own logs
    logging.getLogger("httpx").setLevel(logging.WARNING)


def run_renewal(
    settings: Settings,
    dry_run: bool = False,
    output_file: Optional[str] = None,
    output_format: str = "text",
) -> int:
    """Run a renewal pass and emit its report.

    Args:
        settings: Application settings.
        dry_run: If True, no email is sent and no member is written back.
        output_file: Optional output file path.
        output_format: Output format ('json' or 'text').

    Returns:
        Exit code (0 for success, 1 for per-member failures, 2 for fatal errors).
    """
    payment_source = HelloAssoPaymentSource(settings)
    baserow = BaserowMemberStore(settings)
    brevo = None

    try:
        if dry_run:
            logger.info("Dry run: emails are recorded and member updates are not written")
            member_store = DryRunMemberStore(baserow)
            email_sender = RecordingEmailSender()
        else:
            member_store = baserow
            brevo = BrevoEmailSender(settings)
            email_sender = brevo

        service = RenewalService(
            settings,
            payment_source=payment_source,
            member_store=member_store,
            email_sender=email_sender,
            dry_run=dry_run,
        )
        report = service.run()
    finally:
        payment_source.close()
        baserow.close()
        if brevo is not None:
            brevo.close()

    generator = ReportGenerator(report)
    output = generator.to_json() if output_format == "json" else generator.to_summary_text()

    if output_file:
        with open(output_file, "w") as f:
            f.write(output)
        logger.info(f"Report written to {output_file}")
    else:
        print(output)

    if report.status != RunStatus.COMPLETED:
        logger.error(f"Renewal run failed: {report.error_message}")
        return 2
    if report.has_failures:
        logger.warning(
            f"Renewal run completed with issues: "
            f"{report.send_failures} send failures, "
            f"{report.update_failures} update failures"
        )
        return 1
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="membership-renewal",
        description="Reconcile membership payments, update member status and send renewal reminders.",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser(
        "run",
        help="Run a renewal pass",
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and reconcile, but do not send emails or update members",
    )
    run_parser.add_argument(
        "--output", "-o",
        help="Output file path (default: stdout)",
    )
    run_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)",
    )
    run_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: LOG_LEVEL or INFO)",
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Optional list of command-line arguments (for testing).

    Returns:
        Exit code.
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == "run":
        try:
            settings = Settings.from_env()
        except ConfigurationError as e:
            configure_logging(parsed_args.log_level or "INFO")
            logger.error(str(e))
            return 2

        configure_logging(parsed_args.log_level or settings.log_level)
        return run_renewal(
            settings,
            dry_run=parsed_args.dry_run,
            output_file=parsed_args.output,
            output_format=parsed_args.format,
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
