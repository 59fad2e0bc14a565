from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from . import config
from .alerts import build_directory, group_alerts
from .email_formatter import build_email_body, build_email_subject
from .mailer import MailError, MailSender, build_mailer
from .models import AlertGroup, Item, RunReport, RunState
from .supabase_client import SupabaseClient, SupabaseError
from .utils import utc_now

logger = logging.getLogger(__name__)


class DirectoryFetchError(Exception):
    """Raised when the user directory cannot be listed."""


class ItemFetchError(Exception):
    """Raised when the cycle items cannot be listed."""


def run(
    settings: config.Settings,
    *,
    now: Optional[datetime] = None,
    supabase: Optional[SupabaseClient] = None,
    mailer: Optional[MailSender] = None,
) -> RunReport:
    # naive timestamps are read as local time
    now = (now or utc_now()).astimezone(timezone.utc)
    report = RunReport()
    client = supabase or SupabaseClient(url=settings.supabase_url, service_key=settings.supabase_service_key)
    logger.info("Starting daily cycle item check (now=%s)", now.isoformat())

    try:
        try:
            directory = load_directory(client)
        except DirectoryFetchError as exc:
            logger.error("Failed to list users; aborting run: %s", exc)
            return report
        report.state = RunState.DIRECTORY_LOADED
        logger.info("Loaded %s users with a notify email", len(directory))

        try:
            items = load_items(client, settings.items_table)
        except ItemFetchError as exc:
            logger.error("Failed to list items; aborting run: %s", exc)
            return report
        report.state = RunState.ITEMS_LOADED
        logger.info("Loaded %s items", len(items))
    finally:
        if supabase is None:
            client.close()

    groups = group_alerts(items, directory, now)
    report.state = RunState.GROUPED
    report.groups = len(groups)
    if not groups:
        logger.info("No users need a reminder.")
        report.state = RunState.DONE
        return report

    logger.info("Preparing reminders for %s users", len(groups))
    report.state = RunState.NOTIFYING
    notify(groups, settings, report, mailer)
    report.state = RunState.DONE
    logger.info("Run completed. Groups=%s Sent=%s Failed=%s", report.groups, len(report.sent), len(report.failed))
    return report


def load_directory(client: SupabaseClient) -> Dict[str, str]:
    try:
        users = client.list_users()
    except SupabaseError as exc:
        raise DirectoryFetchError(str(exc)) from exc
    return build_directory(users)


def load_items(client: SupabaseClient, table: str) -> List[Item]:
    try:
        return client.list_items(table=table)
    except SupabaseError as exc:
        raise ItemFetchError(str(exc)) from exc


def notify(
    groups: Dict[str, AlertGroup],
    settings: config.Settings,
    report: RunReport,
    mailer: Optional[MailSender] = None,
) -> None:
    if mailer is None:
        try:
            mailer = build_mailer(
                resend_api_key=settings.resend_api_key,
                brevo_api_key=settings.brevo_api_key,
                sendgrid_api_key=settings.sendgrid_api_key,
                from_email=settings.from_email,
                from_name=settings.from_name,
            )
        except MailError as exc:
            logger.error("Cannot send reminders: %s", exc)
            report.failed.extend(group.email for group in groups.values())
            return
    logger.info("Using mail provider=%s", mailer.provider)

    for group in groups.values():
        subject = build_email_subject(group)
        text_body, html_body = build_email_body(group, settings.details_url)
        try:
            mailer.send(group.email, subject, html_body, text_body)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Failed to send reminder to %s: %s", group.email, exc)
            report.failed.append(group.email)
            continue
        logger.info("Sent reminder to %s (%s items)", group.email, len(group.items))
        report.sent.append(group.email)
