"""Command-line entry point for the clinical triage engine."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Any

from clinical_triage.core import AppSettings, configure_logging, load_app_settings
from clinical_triage.core.datetime_utils import display_datetime
from clinical_triage.core.interfaces import MessageSource
from clinical_triage.ingestion import (
    JsonFileSource,
    email_loader,
    notification_loader,
    sample_sources,
)
from clinical_triage.storage import (
    EmailStore,
    NotificationStore,
    select_filtered_emails,
    select_filtered_notifications,
)


def build_parser() -> argparse.ArgumentParser:
    """Create and configure the CLI argument parser."""
    parser = argparse.ArgumentParser(description="Clinical message triage")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file containing configuration overrides.",
    )
    parser.add_argument(
        "--source",
        type=Path,
        default=None,
        help="JSON file with 'emails' and 'notifications' lists "
        "(default: configured path, else the built-in samples).",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="info",
        choices=["info", "emails", "notifications"],
        help="Operation to execute.",
    )
    parser.add_argument(
        "--folder",
        default=None,
        help="Folder to list for the emails command (default: configured folder).",
    )
    parser.add_argument(
        "--sort",
        dest="sort_by",
        choices=["priority", "date", "sender"],
        default=None,
        help="Sort key for the emails command.",
    )
    parser.add_argument(
        "--order",
        dest="sort_order",
        choices=["asc", "desc"],
        default=None,
        help="Sort direction for the emails command.",
    )
    return parser


def execute(args: argparse.Namespace, settings: AppSettings) -> int:
    """Execute the requested CLI command and return an exit code."""
    email_source, notification_source = _resolve_sources(args.source, settings)
    command = args.command
    if command == "info":
        source_path = args.source or settings.source.json_path
        print("Clinical triage engine is ready.")
        print(f"Source: {source_path or 'built-in samples'}")
        refresh = (
            f"every {settings.refresh.interval_seconds:.0f}s"
            if settings.refresh.enabled
            else "disabled"
        )
        print(f"Refresh: {refresh}")
        return 0
    if command == "emails":
        return _run_emails(
            settings,
            email_source,
            folder=args.folder,
            sort_by=args.sort_by,
            sort_order=args.sort_order,
        )
    return _run_notifications(notification_source)


def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    settings = load_app_settings(env_file=args.env_file)
    configure_logging(settings.logging)
    raise SystemExit(execute(args, settings))


def _resolve_sources(
    override: Path | None, settings: AppSettings
) -> tuple[MessageSource[Any], MessageSource[Any]]:
    path = override or settings.source.json_path
    if path is not None:
        json_source = JsonFileSource(path)
        return json_source.emails, json_source.notifications
    return sample_sources()


def _run_emails(
    settings: AppSettings,
    source: MessageSource[Any],
    *,
    folder: str | None,
    sort_by: str | None,
    sort_order: str | None,
) -> int:
    store = EmailStore(settings.inbox)
    if not asyncio.run(email_loader(store, source).refresh()):
        print(f"Loading emails failed: {store.load_state.error}")
        return 1
    if folder is not None:
        store.set_active_folder(folder)
    if sort_by is not None:
        store.set_sort_by(sort_by)  # type: ignore[arg-type]
    if sort_order is not None:
        store.set_sort_order(sort_order)  # type: ignore[arg-type]

    snapshot = store.snapshot()
    emails = select_filtered_emails(snapshot)
    counts = snapshot.folder_counts
    badges = "  ".join(
        f"{name}={entry.unread}/{entry.total}" for name, entry in counts.items()
    )
    print(f"Folders (unread/total): {badges}")
    if not emails:
        print(f"No emails in folder '{snapshot.active_folder}'.")
        return 0

    print(f"Showing {len(emails)} email(s) in '{snapshot.active_folder}':")
    header = f"{'ID':<10}  {'Priority':<8}  {'Conf':>4}  {'Respond':<14}  {'Received':<20}  Subject"
    print(header)
    print("-" * len(header))
    for email in emails:
        marker = " " if email.read else "*"
        received = display_datetime(email.timestamp) or "-"
        print(
            f"{email.id:<10}  {email.analysis.priority:<8}  {email.analysis.confidence:>4}  "
            f"{email.analysis.estimated_response_time:<14}  {received:<20}  {marker}{email.subject}"
        )
    return 0


def _run_notifications(source: MessageSource[Any]) -> int:
    store = NotificationStore()
    if not asyncio.run(notification_loader(store, source).refresh()):
        print(f"Loading notifications failed: {store.load_state.error}")
        return 1

    notifications = select_filtered_notifications(store.snapshot())
    if not notifications:
        print("No notifications.")
        return 0

    print(
        f"Showing {len(notifications)} notification(s), "
        f"{store.unread_count()} unread, {store.critical_count()} critical:"
    )
    header = f"{'ID':<10}  {'Level':<8}  {'Conf':>4}  {'Age':>6}  {'Category':<22}  Title"
    print(header)
    print("-" * len(header))
    for item in notifications:
        analysis = item.analysis
        marker = " " if item.read else "*"
        age = f"{analysis.time_context.minutes_ago}m"
        print(
            f"{item.id:<10}  {analysis.criticality:<8}  {analysis.confidence:>4}  "
            f"{age:>6}  {analysis.category:<22}  {marker}{item.title}"
        )
    return 0


if __name__ == "__main__":
    main()
