"""Tests for CLI commands and display helpers."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from ascend.cli import (
    build_dashboard_data,
    build_parser,
    do_analytics,
    do_badges,
    do_config,
    do_dashboard,
    do_export,
    do_feed_comment,
    do_feed_login,
    do_feed_logout,
    do_feed_me,
    do_feed_post,
    do_feed_show,
    do_history,
    do_import,
    do_journal_add,
    do_journal_list,
    do_relapse,
    do_reset,
    do_start,
    do_watch,
)
from ascend.config import FEED_URL_ENV, load_config, set_feed_session
from ascend.db import PROGRESSION_KEY, Database, ProgressionStore
from ascend.display import format_number, render_calendar
from ascend.feed import FeedClient
from ascend.session import StreakSession

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def db(tmp_path):
    """Create a temporary database for testing."""
    db_path = tmp_path / "test.db"
    database = Database(db_path=db_path)
    yield database
    database.close()


@pytest.fixture
def clock():
    return FakeClock(T0)


@pytest.fixture
def session(db, clock):
    s = StreakSession(ProgressionStore(db), clock=clock)
    yield s
    s.close()


def _feed(handler, cookies=None):
    return FeedClient("http://feed.test", cookies=cookies, transport=httpx.MockTransport(handler))


# ── Argument Parsing ──────────────────────────────────────────────────────────


class TestArgumentParsing:
    def test_no_args_defaults_to_none_command(self):
        args = build_parser().parse_args([])
        assert args.command is None
        assert args.verbose is False

    def test_relapse_with_note(self):
        args = build_parser().parse_args(["relapse", "--note", "stress"])
        assert args.command == "relapse"
        assert args.note == "stress"

    def test_journal_add(self):
        args = build_parser().parse_args(["journal", "add", "hello"])
        assert args.journal_command == "add"
        assert args.text == "hello"

    def test_analytics_month(self):
        args = build_parser().parse_args(["analytics", "--month", "2024-02"])
        assert args.month == "2024-02"

    def test_feed_comment(self):
        args = build_parser().parse_args(["feed", "comment", "3", "nice"])
        assert args.feed_command == "comment"
        assert args.post_id == 3

    def test_verbose_flag(self):
        args = build_parser().parse_args(["-v", "dashboard"])
        assert args.verbose is True

    def test_invalid_command_raises(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["nonexistent"])


# ── format_number ─────────────────────────────────────────────────────────────


class TestFormatNumber:
    def test_small_number(self):
        assert format_number(42) == "42"

    def test_number_with_commas(self):
        assert format_number(1200) == "1,200"

    def test_thousands(self):
        assert format_number(421543) == "421.5K"

    def test_millions(self):
        assert format_number(1234567) == "1.2M"


# ── Streak commands ──────────────────────────────────────────────────────────


class TestStart:
    def test_start(self, session):
        result = do_start(session)
        assert result["ok"] is True
        assert result["start"] == T0

    def test_start_twice(self, session, clock):
        do_start(session)
        clock.advance(days=1)
        result = do_start(session)
        assert result == {"ok": False, "reason": "already_active"}
        assert session.state.start_instant == T0


class TestDashboard:
    def test_not_started(self, session):
        data = do_dashboard(session)
        assert data["started"] is False
        assert data["points"] == 0
        assert data["next_badge"] is None

    def test_running_streak(self, session, clock):
        do_start(session)
        clock.advance(days=8, hours=3)
        data = do_dashboard(session)
        assert data["days"] == 8
        assert data["hours"] == 3
        assert data["rank_id"] == "apprentice"
        assert data["next_rank_name"] == "Warrior"
        assert data["rank_progress"] == (0, 7)
        assert data["new_badges"] == ["sapling", "seed", "sprout"]
        assert data["next_badge"]["days_left"] == 6
        # 195 hourly + 10 * (1 + 3 + 7)
        assert data["points"] == 195 + 110
        assert [b["reached"] for b in data["benefits"]] == [True, True, True, False, False, False]

    def test_localized(self, session, clock):
        do_start(session)
        clock.advance(days=15)
        data = build_dashboard_data(session, session.snapshot(), "es")
        assert data["rank_name"] == "Guerrero"

    def test_second_dashboard_reports_no_new_badges(self, session, clock):
        do_start(session)
        clock.advance(days=1)
        assert do_dashboard(session)["new_badges"] == ["seed"]
        assert do_dashboard(session)["new_badges"] == []


class TestRelapse:
    def test_relapse_resets_and_keeps_best(self, session, clock):
        do_start(session)
        clock.advance(days=3, hours=2)
        result = do_relapse(session, note="stress")
        assert result["ok"] is True
        assert result["note"] == "stress"
        assert result["previous_days"] == 3
        assert result["best_streak_seconds"] == 3 * 86400 + 2 * 3600
        assert result["relapse_count"] == 1
        assert do_dashboard(session)["days"] == 0

    def test_empty_note(self, session):
        do_start(session)
        assert do_relapse(session)["note"] == "No note provided"

    def test_history_newest_first(self, session, clock):
        do_start(session)
        clock.advance(days=1)
        do_relapse(session, note="first")
        clock.advance(days=1)
        do_relapse(session, note="second")
        assert [r["note"] for r in do_history(session)] == ["second", "first"]


class TestJournal:
    def test_add_and_list(self, session, clock):
        assert do_journal_add(session, "day one")["ok"] is True
        clock.advance(hours=1)
        do_journal_add(session, "day one, later")
        entries = do_journal_list(session)
        assert [e["content"] for e in entries] == ["day one, later", "day one"]

    def test_empty_entry(self, session):
        assert do_journal_add(session, "  ") == {"ok": False, "reason": "empty"}


class TestBadges:
    def test_catalog_with_state(self, session, clock):
        do_start(session)
        clock.advance(days=3)
        rows = do_badges(session)
        assert len(rows) == 9
        by_id = {row["id"]: row for row in rows}
        assert by_id["seed"]["unlocked"] is True
        assert by_id["sprout"]["unlocked"] is True
        assert by_id["sapling"]["unlocked"] is False
        assert by_id["sapling"]["days_left"] == 4

    def test_badges_survive_relapse(self, session, clock):
        do_start(session)
        clock.advance(days=7)
        do_relapse(session, note="x")
        rows = do_badges(session)
        assert {row["id"] for row in rows if row["unlocked"]} == {"seed", "sprout", "sapling"}


class TestAnalytics:
    def test_invalid_month(self, session):
        assert do_analytics(session, month="2024-13") == {"ok": False, "reason": "invalid_month"}

    def test_year_out_of_range(self, session):
        assert do_analytics(session, month="10000-01") == {"ok": False, "reason": "invalid_month"}
        assert do_analytics(session, month="0000-05") == {"ok": False, "reason": "invalid_month"}

    def test_invalid_month_with_markup_characters(self, session):
        assert do_analytics(session, month="[/]")["reason"] == "invalid_month"

    def test_histogram_and_average(self, session, clock):
        clock.now = datetime(2024, 3, 5, tzinfo=timezone.utc)
        do_start(session)
        do_relapse(session, note="a")
        clock.now = datetime(2024, 3, 20, tzinfo=timezone.utc)
        do_relapse(session, note="b")
        clock.now = datetime(2024, 3, 25, tzinfo=timezone.utc)
        result = do_analytics(session, month="2024-03")
        assert result["ok"] is True
        assert result["monthly_histogram"][-1]["count"] == 2
        assert result["avg_streak_days"] == 15
        assert result["total_relapses"] == 2
        assert result["calendar"]["year"] == 2024
        assert result["calendar"]["cells"][:5] == [None] * 5

    def test_no_relapses_uses_current_days(self, session, clock):
        do_start(session)
        clock.advance(days=5)
        assert do_analytics(session)["avg_streak_days"] == 5

    def test_render_calendar_rows(self):
        from ascend.analytics import calendar_grid

        table = render_calendar(2024, 3, calendar_grid(2024, 3), set())
        assert len(table.columns) == 7
        assert table.row_count == 6


class TestUserTextWithMarkup:
    def test_relapse_note_printed_literally(self, session, capsys):
        do_start(session)
        result = do_relapse(session, note="[/]")
        assert result["note"] == "[/]"
        assert "[/]" in capsys.readouterr().out

    def test_history_with_stored_markup(self, session, clock, capsys):
        do_start(session)
        do_relapse(session, note="feeling [/] bad")
        clock.advance(days=1)
        do_relapse(session, note="[bold]loud[/bold]")
        capsys.readouterr()
        do_history(session)
        out = capsys.readouterr().out
        assert "feeling [/] bad" in out
        assert "[bold]loud[/bold]" in out

    def test_journal_with_markup(self, session, capsys):
        do_journal_add(session, "[red]not red[/] \\")
        capsys.readouterr()
        do_journal_list(session)
        assert "[red]not red[/]" in capsys.readouterr().out

    def test_feed_posts_with_markup(self, capsys):
        posts = [
            {
                "id": 1,
                "userName": "[/]",
                "content": "day [1] of [/]",
                "createdAt": "[x]",
                "comments": [{"id": 2, "postId": 1, "userName": "[b]", "content": "[/i]"}],
            }
        ]
        with _feed(lambda request: httpx.Response(200, json=posts)) as client:
            assert do_feed_show(client) == {"ok": True, "count": 1}
        out = capsys.readouterr().out
        assert "day [1] of [/]" in out
        assert "[/i]" in out

    def test_feed_error_message_with_markup(self):
        with _feed(lambda request: httpx.Response(500, json={"error": "[/] broke"})) as client:
            result = do_feed_show(client)
        assert result == {"ok": False, "reason": "feed_error", "status_code": 500}

    def test_feed_user_with_markup(self):
        user = {"id": "1", "name": "[/]", "email": "a@b[c]"}
        with _feed(lambda request: httpx.Response(200, json={"user": user})) as client:
            assert do_feed_me(client) == {"ok": True, "user": user}


class TestWatch:
    def test_runs_for_duration_and_stops_ticker(self, session):
        do_start(session)
        do_watch(session, duration=0.05)
        assert session._ticker is None
        assert session._subscribers == []


# ── Settings and data ────────────────────────────────────────────────────────


class TestConfig:
    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv(FEED_URL_ENV, raising=False)
        result = do_config(config_path=tmp_path / "config.json")
        assert result == {
            "language": "en",
            "feed_url": "http://localhost:3000",
            "feed_logged_in": False,
        }

    def test_updates(self, tmp_path, monkeypatch):
        monkeypatch.delenv(FEED_URL_ENV, raising=False)
        path = tmp_path / "config.json"
        result = do_config(language="id", feed_url="https://f.example/", feed_session="7", config_path=path)
        assert result["language"] == "id"
        assert result["feed_url"] == "https://f.example"
        assert result["feed_logged_in"] is True

    def test_empty_session_logs_out(self, tmp_path):
        path = tmp_path / "config.json"
        do_config(feed_session="7", config_path=path)
        assert do_config(feed_session="", config_path=path)["feed_logged_in"] is False


class TestExportImportReset:
    def test_export_without_data(self, db, tmp_path):
        assert do_export(db, tmp_path / "out.json") == {"ok": False, "reason": "no_data"}

    def test_export_then_import(self, db, session, tmp_path):
        do_start(session)
        do_relapse(session, note="x")
        out = tmp_path / "out.json"
        assert do_export(db, out)["ok"] is True
        exported = json.loads(out.read_text(encoding="utf-8"))
        assert exported["relapses"][0]["note"] == "x"

        do_reset(db, confirmed=True)
        result = do_import(db, out)
        assert result == {"ok": True, "relapses": 1, "journal": 0}
        assert ProgressionStore(db).load().relapses[0].note == "x"

    def test_import_missing_file(self, db, tmp_path):
        assert do_import(db, tmp_path / "missing.json")["reason"] == "not_found"

    def test_import_invalid_file(self, db, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("[]", encoding="utf-8")
        assert do_import(db, path)["reason"] == "invalid"

    def test_reset_requires_confirmation(self, db, session):
        do_start(session)
        assert do_reset(db) == {"ok": False, "reason": "not_confirmed"}
        assert db.get_document(PROGRESSION_KEY) is not None

    def test_reset(self, db, session):
        do_start(session)
        assert do_reset(db, confirmed=True) == {"ok": True, "removed": True}
        assert db.get_document(PROGRESSION_KEY) is None


# ── Feed ──────────────────────────────────────────────────────────────────────


class TestFeedCommands:
    def test_show(self):
        posts = [{"id": 1, "userName": "Ana", "content": "hi", "createdAt": "now", "comments": []}]
        with _feed(lambda request: httpx.Response(200, json=posts)) as client:
            assert do_feed_show(client) == {"ok": True, "count": 1}

    def test_show_backend_down(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with _feed(handler) as client:
            result = do_feed_show(client)
        assert result["ok"] is False
        assert result["reason"] == "feed_error"

    def test_post(self):
        with _feed(lambda request: httpx.Response(200, json={"id": 4})) as client:
            assert do_feed_post(client, "  day 4  ") == {"ok": True, "id": 4}

    def test_post_empty(self):
        with _feed(lambda request: httpx.Response(200, json={})) as client:
            assert do_feed_post(client, "   ")["reason"] == "empty"

    def test_post_unauthorized(self):
        with _feed(lambda request: httpx.Response(401, json={"error": "Unauthorized"})) as client:
            result = do_feed_post(client, "hi")
        assert result == {"ok": False, "reason": "feed_error", "status_code": 401}

    def test_comment(self):
        with _feed(lambda request: httpx.Response(200, json={"success": True})) as client:
            assert do_feed_comment(client, 1, "nice") == {"ok": True}

    def test_me_logged_out(self):
        with _feed(lambda request: httpx.Response(200, json={"user": None})) as client:
            assert do_feed_me(client) == {"ok": True, "user": None}

    def test_login_url(self):
        with _feed(lambda request: httpx.Response(200, json={"url": "https://login"})) as client:
            assert do_feed_login(client) == {"ok": True, "url": "https://login"}

    def test_logout_clears_session(self, tmp_path):
        path = tmp_path / "config.json"
        set_feed_session("42", path)
        with _feed(lambda request: httpx.Response(200, json={"success": True})) as client:
            assert do_feed_logout(client, config_path=path) == {"ok": True}
        assert "feed_session" not in load_config(path)

    def test_show_malformed_body(self):
        posts = [{"id": None, "userName": "Ana"}]
        with _feed(lambda request: httpx.Response(200, json=posts)) as client:
            result = do_feed_show(client)
        assert result["reason"] == "feed_error"

    def test_post_without_id_in_response(self):
        with _feed(lambda request: httpx.Response(200, json={"ok": 1})) as client:
            assert do_feed_post(client, "hi")["reason"] == "feed_error"
