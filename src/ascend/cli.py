"""CLI commands for ascend."""

from __future__ import annotations

import argparse
import logging
import threading
from datetime import datetime
from pathlib import Path

from rich.live import Live
from rich.markup import escape

from ascend import i18n
from ascend.analytics import aggregate, calendar_grid, parse_month
from ascend.badges import benefits_timeline, get_badge, get_next_badge
from ascend.config import (
    get_feed_cookies,
    get_feed_url,
    get_language,
    load_config,
    set_feed_session,
    set_feed_url,
    set_language,
)
from ascend.db import PROGRESSION_KEY, Database, ProgressionStore
from ascend.display import (
    console,
    print_analytics,
    print_badges,
    print_dashboard,
    print_history,
    print_journal,
    print_message,
    print_posts,
    print_unlocked,
    render_dashboard,
)
from ascend.feed import FeedClient, FeedError
from ascend.ranks import rank_progress
from ascend.session import Snapshot, StreakSession
from ascend.streaks import SECONDS_PER_DAY


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ascend",
        description="Streak tracker with ranks, badges and relapse analytics",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("dashboard", help="Show current streak, rank and points")
    subparsers.add_parser("start", help="Start your streak")
    relapse_parser = subparsers.add_parser("relapse", help="Record a relapse and restart the streak")
    relapse_parser.add_argument("--note", "-n", default="", help="What happened")
    journal_parser = subparsers.add_parser("journal", help="Write or read journal entries")
    journal_sub = journal_parser.add_subparsers(dest="journal_command")
    journal_add = journal_sub.add_parser("add", help="Add a journal entry")
    journal_add.add_argument("text", help="Entry text")
    journal_sub.add_parser("list", help="List journal entries")
    subparsers.add_parser("history", help="Show relapse history")
    subparsers.add_parser("badges", help="List all badges")
    analytics_parser = subparsers.add_parser("analytics", help="Relapse analytics and calendar")
    analytics_parser.add_argument("--month", "-m", default=None, help="Calendar month as YYYY-MM")
    subparsers.add_parser("watch", help="Live dashboard, updated every second")
    config_parser = subparsers.add_parser("config", help="Show or change settings")
    config_parser.add_argument("--language", "-l", default=None, help=f"One of: {', '.join(i18n.LANGUAGES)}")
    config_parser.add_argument("--feed-url", default=None, help="Community feed backend URL")
    config_parser.add_argument("--feed-session", default=None, help="Feed session id from the login callback")
    export_parser = subparsers.add_parser("export", help="Export progression data as JSON")
    export_parser.add_argument("path", help="Output file")
    import_parser = subparsers.add_parser("import", help="Replace progression data from a JSON export")
    import_parser.add_argument("path", help="Input file")
    reset_parser = subparsers.add_parser("reset", help="Delete all progression data")
    reset_parser.add_argument("--yes", action="store_true", help="Confirm the reset")
    feed_parser = subparsers.add_parser("feed", help="Community feed")
    feed_sub = feed_parser.add_subparsers(dest="feed_command")
    feed_sub.add_parser("show", help="List posts")
    feed_post = feed_sub.add_parser("post", help="Publish a post")
    feed_post.add_argument("text", help="Post content")
    feed_comment = feed_sub.add_parser("comment", help="Comment on a post")
    feed_comment.add_argument("post_id", type=int, help="Post id")
    feed_comment.add_argument("text", help="Comment content")
    feed_sub.add_parser("me", help="Show the logged-in user")
    feed_sub.add_parser("login", help="Print the Google login URL")
    feed_sub.add_parser("logout", help="Log out of the feed")
    return parser


def main() -> None:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    command = args.command or "dashboard"

    if command == "config":
        do_config(language=args.language, feed_url=args.feed_url, feed_session=args.feed_session)
        return
    if command == "feed":
        _run_feed(args)
        return

    language = get_language()
    db = Database()

    try:
        if command == "export":
            do_export(db, Path(args.path))
            return
        if command == "import":
            do_import(db, Path(args.path))
            return
        if command == "reset":
            do_reset(db, confirmed=args.yes)
            return

        session = StreakSession(ProgressionStore(db), language=language)
        if command == "dashboard":
            do_dashboard(session, language)
        elif command == "start":
            do_start(session)
        elif command == "relapse":
            do_relapse(session, note=args.note)
        elif command == "journal":
            if getattr(args, "journal_command", None) == "add":
                do_journal_add(session, args.text)
            else:
                do_journal_list(session)
        elif command == "history":
            do_history(session)
        elif command == "badges":
            do_badges(session, language)
        elif command == "analytics":
            do_analytics(session, month=args.month)
        elif command == "watch":
            do_watch(session, language)
    finally:
        db.close()


def _run_feed(args: argparse.Namespace) -> None:
    feed_cmd = getattr(args, "feed_command", None) or "show"
    with FeedClient(get_feed_url(), cookies=get_feed_cookies()) as client:
        if feed_cmd == "post":
            do_feed_post(client, args.text)
        elif feed_cmd == "comment":
            do_feed_comment(client, args.post_id, args.text)
        elif feed_cmd == "me":
            do_feed_me(client)
        elif feed_cmd == "login":
            do_feed_login(client)
        elif feed_cmd == "logout":
            do_feed_logout(client)
        else:
            do_feed_show(client)


# ── Views ─────────────────────────────────────────────────────────────────────


def _badge_view(badge_id: str, language: str | None) -> dict:
    badge = get_badge(badge_id)
    if badge is None:
        return {"id": badge_id, "icon": "", "name": badge_id, "description": ""}
    return {
        "id": badge.id,
        "icon": badge.icon,
        "name": i18n.badge_name(badge.id, language),
        "description": i18n.badge_description(badge.id, language),
    }


def build_dashboard_data(session: StreakSession, snapshot: Snapshot, language: str | None = None) -> dict:
    """Flatten a snapshot into the dict the dashboard renderer expects."""
    duration = snapshot.elapsed
    rank = snapshot.rank
    upcoming = get_next_badge(duration.days, session.catalog)
    return {
        "started": duration.started,
        "days": duration.days,
        "hours": duration.hours,
        "minutes": duration.minutes,
        "seconds": duration.seconds,
        "total_seconds": duration.total_seconds,
        "rank_id": rank.id if rank else None,
        "rank_name": rank.display_name(language) if rank else "",
        "rank_color": rank.color if rank else "grey62",
        "next_rank_name": snapshot.next_rank.display_name(language) if snapshot.next_rank else None,
        "rank_progress": rank_progress(duration.days, session.ranks),
        "points": snapshot.points,
        "best_streak_seconds": snapshot.best_streak_seconds,
        "best_streak_days": snapshot.best_streak_seconds // SECONDS_PER_DAY,
        "badges_unlocked": len(snapshot.unlocked_badges),
        "badges_total": len(session.catalog),
        "relapse_count": snapshot.relapse_count,
        "next_badge": (
            {
                "icon": upcoming.icon,
                "name": i18n.badge_name(upcoming.id, language),
                "days_left": upcoming.days - duration.days,
            }
            if upcoming and duration.started
            else None
        ),
        "benefits": [
            {
                "days": milestone.days,
                "title": milestone.title(language),
                "reached": reached,
            }
            for milestone, reached in benefits_timeline(duration.days)
        ],
    }


def _fmt(moment: datetime) -> str:
    return moment.astimezone().strftime("%Y-%m-%d %H:%M")


# ── Commands ──────────────────────────────────────────────────────────────────


def do_dashboard(session: StreakSession, language: str | None = None) -> dict:
    """Tick once (so badges and best streak are current) and show the dashboard."""
    delta = session.tick()
    data = build_dashboard_data(session, delta.snapshot, language)
    print_dashboard(data)
    print_unlocked([_badge_view(b, language) for b in sorted(delta.newly_unlocked)])
    data["new_badges"] = sorted(delta.newly_unlocked)
    return data


def do_start(session: StreakSession) -> dict:
    if not session.start():
        print_message(
            "Already Running",
            "A streak is already active. Use [bold]ascend relapse[/] to restart it.",
            "yellow",
        )
        return {"ok": False, "reason": "already_active"}
    start = session.state.start_instant
    print_message("Streak Started", f"Clock started at {_fmt(start)}. Stay strong.", "green")
    return {"ok": True, "start": start}


def do_relapse(session: StreakSession, note: str = "") -> dict:
    before = session.snapshot()
    state = session.relapse(note)
    event = state.relapses[0]
    print_message(
        "Streak Reset",
        f"Logged relapse: \"{escape(event.note)}\". Previous streak: {before.elapsed.days} days. "
        "A new streak starts now.",
        "red",
    )
    return {
        "ok": True,
        "note": event.note,
        "previous_days": before.elapsed.days,
        "best_streak_seconds": state.best_streak_seconds,
        "relapse_count": len(state.relapses),
    }


def do_journal_add(session: StreakSession, text: str) -> dict:
    if not session.journal(text):
        print_message("Journal", "Nothing to save: the entry is empty.", "grey50")
        return {"ok": False, "reason": "empty"}
    print_message("Journal", "Entry saved.", "green")
    return {"ok": True, "count": len(session.state.journal)}


def do_journal_list(session: StreakSession) -> list[dict]:
    entries = [{"date": _fmt(e.date), "content": e.content} for e in session.state.journal]
    print_journal(entries)
    return entries


def do_history(session: StreakSession) -> list[dict]:
    relapses = [{"date": _fmt(r.date), "note": r.note} for r in session.state.relapses]
    print_history(relapses)
    return relapses


def do_badges(session: StreakSession, language: str | None = None) -> list[dict]:
    delta = session.tick()
    days = delta.snapshot.elapsed.days
    unlocked = set(delta.snapshot.unlocked_badges)
    rows = [
        {
            **_badge_view(badge.id, language),
            "days": badge.days,
            "unlocked": badge.id in unlocked,
            "days_left": max(0, badge.days - days),
        }
        for badge in session.catalog
    ]
    print_badges(rows)
    return rows


def do_analytics(session: StreakSession, month: str | None = None) -> dict:
    snapshot = session.snapshot()
    parsed = parse_month(month, snapshot.now)
    if parsed is None:
        print_message("Analytics", f"Invalid month '{escape(str(month))}'. Use YYYY-MM.", "red")
        return {"ok": False, "reason": "invalid_month"}
    year, month_num = parsed
    data = aggregate(
        session.state.relapses,
        snapshot.now,
        current_days=snapshot.elapsed.days,
        elapsed_seconds=snapshot.elapsed.total_seconds,
    )
    data["calendar"] = {
        "year": year,
        "month": month_num,
        "cells": calendar_grid(year, month_num),
        "today": snapshot.now.astimezone().date(),
    }
    print_analytics(data)
    return {"ok": True, **data}


def do_watch(session: StreakSession, language: str | None = None, duration: float | None = None) -> None:
    """Live dashboard refreshed by the session's 1 Hz tick until Ctrl+C (or `duration` seconds)."""
    first = session.tick()
    stop = threading.Event()
    with Live(render_dashboard(build_dashboard_data(session, first.snapshot, language)), console=console) as live:

        def on_tick(delta) -> None:
            live.update(render_dashboard(build_dashboard_data(session, delta.snapshot, language)))
            for badge_id in sorted(delta.newly_unlocked):
                view = _badge_view(badge_id, language)
                live.console.print(f"{view['icon']} New badge: [bold]{view['name']}[/]")

        unsubscribe = session.subscribe(on_tick)
        session.run()
        try:
            stop.wait(duration)
        except KeyboardInterrupt:
            pass
        finally:
            unsubscribe()
            session.close()


def do_config(
    language: str | None = None,
    feed_url: str | None = None,
    feed_session: str | None = None,
    config_path: Path | None = None,
) -> dict:
    """Update any given settings and print the resulting configuration."""
    if language:
        set_language(language, config_path)
    if feed_url:
        set_feed_url(feed_url, config_path)
    if feed_session is not None:
        set_feed_session(feed_session or None, config_path)
    config = load_config(config_path)
    result = {
        "language": get_language(config_path),
        "feed_url": get_feed_url(config_path),
        "feed_logged_in": bool(config.get("feed_session")),
    }
    print_message(
        "Settings",
        f"Language: {result['language']}\n  Feed URL: {escape(result['feed_url'])}\n"
        f"  Feed session: {'set' if result['feed_logged_in'] else 'not set'}",
        "cyan",
    )
    return result


def do_export(db: Database, path: Path) -> dict:
    if not db.export_document(PROGRESSION_KEY, path):
        print_message("Export", "Nothing to export yet.", "grey50")
        return {"ok": False, "reason": "no_data"}
    print_message("Export", f"Saved to [bold]{escape(str(path.resolve()))}[/]", "green")
    return {"ok": True, "output": str(path.resolve())}


def do_import(db: Database, path: Path) -> dict:
    if not path.is_file():
        print_message("Import", f"File not found: {escape(str(path))}", "red")
        return {"ok": False, "reason": "not_found"}
    try:
        db.import_document(PROGRESSION_KEY, path)
    except ValueError as exc:
        print_message("Import", escape(str(exc)), "red")
        return {"ok": False, "reason": "invalid"}
    state = ProgressionStore(db).load()
    print_message("Import", f"Imported {len(state.relapses)} relapses and {len(state.journal)} journal entries.", "green")
    return {"ok": True, "relapses": len(state.relapses), "journal": len(state.journal)}


def do_reset(db: Database, confirmed: bool = False) -> dict:
    if not confirmed:
        print_message("Reset", "This deletes all progress. Re-run with [bold]--yes[/] to confirm.", "yellow")
        return {"ok": False, "reason": "not_confirmed"}
    removed = db.reset_document(PROGRESSION_KEY)
    print_message("Reset", "All progress deleted." if removed else "Nothing to delete.", "red")
    return {"ok": True, "removed": removed}


# ── Feed ──────────────────────────────────────────────────────────────────────


def _feed_failed(exc: FeedError) -> dict:
    print_message("Community", f"{escape(str(exc))} Please try again.", "red")
    return {"ok": False, "reason": "feed_error", "status_code": exc.status_code}


def do_feed_show(client: FeedClient) -> dict:
    try:
        posts = client.list_posts()
    except FeedError as exc:
        return _feed_failed(exc)
    print_posts(posts)
    return {"ok": True, "count": len(posts)}


def do_feed_post(client: FeedClient, text: str) -> dict:
    if not text.strip():
        print_message("Community", "Write something first.", "grey50")
        return {"ok": False, "reason": "empty"}
    try:
        post_id = client.create_post(text.strip())
    except FeedError as exc:
        return _feed_failed(exc)
    print_message("Community", f"Posted (#{post_id}).", "green")
    return {"ok": True, "id": post_id}


def do_feed_comment(client: FeedClient, post_id: int, text: str) -> dict:
    if not text.strip():
        print_message("Community", "Write something first.", "grey50")
        return {"ok": False, "reason": "empty"}
    try:
        success = client.add_comment(post_id, text.strip())
    except FeedError as exc:
        return _feed_failed(exc)
    print_message("Community", "Comment added." if success else "Comment was not saved.", "green" if success else "red")
    return {"ok": success}


def do_feed_me(client: FeedClient) -> dict:
    try:
        user = client.me()
    except FeedError as exc:
        return _feed_failed(exc)
    if user is None:
        print_message("Community", "Not logged in. Run [bold]ascend feed login[/].", "grey50")
        return {"ok": True, "user": None}
    print_message("Community", f"Logged in as [bold]{escape(str(user.get('name', '')))}[/] ({escape(str(user.get('email', '')))})", "green")
    return {"ok": True, "user": user}


def do_feed_login(client: FeedClient) -> dict:
    try:
        url = client.google_auth_url()
    except FeedError as exc:
        return _feed_failed(exc)
    print_message(
        "Community",
        f"Open this URL to log in:\n  {escape(url)}\n  Then run [bold]ascend config --feed-session <id>[/].",
        "cyan",
    )
    return {"ok": True, "url": url}


def do_feed_logout(client: FeedClient, config_path: Path | None = None) -> dict:
    try:
        client.logout()
    except FeedError as exc:
        return _feed_failed(exc)
    set_feed_session(None, config_path)
    print_message("Community", "Logged out.", "green")
    return {"ok": True}
