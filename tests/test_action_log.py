from collections import Counter
from datetime import date, datetime, timedelta
from unittest import mock

from quiz_bank.action_log import ActionLog, compute_rollup, dashboard_lines, render_action
from quiz_bank.constants import ACTION_LOG_TABLE
from quiz_bank.errors import StoreError
from quiz_bank.identity import StaticIdentity
from quiz_bank.schemas import ActionKind, LogEntry


class SteppingClock:
    def __init__(self, times):
        self.times = list(times)
        self.current = self.times[0]

    def __call__(self):
        if self.times:
            self.current = self.times.pop(0)
        return self.current


def test_render_action_known_and_unknown():
    assert render_action(ActionKind.PARSE) == "📋 Parse"
    assert render_action("Similar") == "⚠️ Similar"
    assert render_action("Archive") == "📝 Archive"


def test_setup_reserves_dashboard_region(store, identity, clock):
    log = ActionLog(store, identity=identity, clock=clock)
    log.setup()
    log.setup()
    assert len(store.read_all(ACTION_LOG_TABLE)) == 8


def test_append_writes_below_reserved_region(action_log, store, now):
    action_log.append(ActionKind.EDIT, "S1D01Q01A02", "Changed text")

    rows = store.read_all(ACTION_LOG_TABLE)
    assert len(rows) == 9
    assert rows[8] == [
        now.strftime("%Y-%m-%d %H:%M:%S"),
        "lois@example.com",
        "✏️ Edit",
        "S1D01Q01A02",
        "Changed text",
        "Active",
    ]
    assert rows[0] == ["📅 Today's Activities: 1"]
    assert rows[3] == ["👤 Active Admins: 1"]


def test_entries_round_trip(action_log):
    action_log.append(ActionKind.PARSE, "SYSTEM", "Processed 2 questions")
    action_log.append("Archive", "S1D01Q01A02")

    entries = action_log.entries()
    assert [e.action_kind for e in entries] == ["Parse", "Archive"]
    assert entries[0].subject_id == "SYSTEM"


def test_rollup_matches_direct_recount(store):
    base = datetime(2024, 3, 5, 9, 0, 0)
    times = [base - timedelta(days=d, hours=h) for d, h in [(0, 0), (0, 2), (1, 0), (3, 0), (6, 0), (9, 0), (20, 0)]]
    kinds = [ActionKind.PARSE, ActionKind.EDIT, "Archive", ActionKind.PARSE, ActionKind.REMOVE, ActionKind.EDIT, ActionKind.PARSE]
    actors = ["lois", "tye", "lois", "sam", "tye", "lois", "lois"]

    identity = mock.Mock()
    identity.current_actor_identity.side_effect = actors
    log = ActionLog(store, identity=identity, clock=SteppingClock(times + [base]))
    for kind in kinds:
        log.append(kind, "SYSTEM")

    snapshot = log.rollup(base)
    entries = log.entries()
    assert len(entries) == len(kinds)
    assert snapshot.today_count == sum(1 for e in entries if e.timestamp.date() == base.date())
    assert snapshot.week_count == sum(1 for e in entries if e.timestamp >= base - timedelta(days=7))
    assert snapshot.action_histogram == dict(Counter(e.action_kind for e in entries))
    assert snapshot.distinct_admin_count == len(set(actors))
    assert (snapshot.today_count, snapshot.week_count) == (2, 5)


def test_dashboard_reflects_latest_rollup(action_log, store):
    action_log.append(ActionKind.PARSE, "SYSTEM")
    action_log.append(ActionKind.PARSE, "SYSTEM")
    action_log.append(ActionKind.REMOVE, "Q1")

    dashboard = [row[0] for row in store.read_all(ACTION_LOG_TABLE)[:4]]
    assert dashboard == [
        "📅 Today's Activities: 3",
        "📊 This Week: 3",
        "🎯 Actions: Parse(2), Remove(1)",
        "👤 Active Admins: 1",
    ]


def test_unparseable_timestamp_counts_only_in_histogram():
    entries = [
        LogEntry(timestamp=None, actor_identity="a", action_kind="Parse", subject_id="x"),
        LogEntry(timestamp=datetime(2024, 3, 5, 8), actor_identity="b", action_kind="Parse", subject_id="y"),
    ]
    snapshot = compute_rollup(entries, datetime(2024, 3, 5, 12))
    assert snapshot.today_count == 1
    assert snapshot.week_count == 1
    assert snapshot.action_histogram == {"Parse": 2}
    assert snapshot.distinct_admin_count == 2
    assert dashboard_lines(snapshot)[2] == "🎯 Actions: Parse(2)"


def test_append_failure_never_propagates(clock):
    broken = mock.Mock()
    broken.create_table.side_effect = StoreError("sheet unavailable")
    log = ActionLog(broken, identity=StaticIdentity("x"), clock=clock)

    log.append(ActionKind.PARSE, "SYSTEM", "details")

    broken.write_row.assert_not_called()


def test_filter_by_date_action_and_text(store):
    times = [datetime(2024, 3, 1, 9), datetime(2024, 3, 3, 9), datetime(2024, 3, 5, 9)]
    log = ActionLog(store, identity=StaticIdentity("lois"), clock=SteppingClock(times))
    log.append(ActionKind.PARSE, "SYSTEM", "Processed 3 questions")
    log.append(ActionKind.EDIT, "S1D01Q01A02", "Changed wording")
    log.append(ActionKind.REMOVE, "S1D01Q02A02", "Question marked as removed")

    assert [e.subject_id for e in log.filter(date_from=date(2024, 3, 2))] == ["S1D01Q01A02", "S1D01Q02A02"]
    assert [e.subject_id for e in log.filter(date_to=date(2024, 3, 3))] == ["SYSTEM", "S1D01Q01A02"]
    assert [e.action_kind for e in log.filter(action="Remove")] == ["Remove"]
    assert [e.subject_id for e in log.filter(search_text="WORDING")] == ["S1D01Q01A02"]
    assert log.filter(date_from=date(2024, 3, 4), action="Edit") == []


def test_clear_filter_records_entry(action_log):
    action_log.clear_filter()
    assert action_log.entries()[-1].action_kind == "Clear"


def test_blank_actor_not_counted_as_admin():
    stamp = datetime(2024, 3, 5, 9)
    entries = [
        LogEntry(timestamp=stamp, actor_identity="lois@example.com", action_kind="Parse", subject_id="x"),
        LogEntry(timestamp=stamp, actor_identity="", action_kind="Parse", subject_id="y"),
        LogEntry(timestamp=stamp, actor_identity="  ", action_kind="Error", subject_id="z"),
    ]
    snapshot = compute_rollup(entries, datetime(2024, 3, 5, 12))
    assert snapshot.distinct_admin_count == 1
    assert snapshot.today_count == 3
