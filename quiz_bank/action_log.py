"""Append-only admin action log with a rollup dashboard above the body."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Callable, Iterable, List, Optional, Union

from dateutil import parser as dt_parser

from .constants import (
    ACTION_EMOJIS,
    ACTION_LOG_HEADERS,
    ACTION_LOG_RESERVED_ROWS,
    ACTION_LOG_TABLE,
    GENERIC_ACTION_EMOJI,
)
from .identity import IdentityProvider, SystemIdentity
from .logging_utils import get_logger
from .schemas import ActionKind, LogEntry, RollupSnapshot
from .storage import TableStore

logger = get_logger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
WEEK_WINDOW = timedelta(days=7)


def _kind_name(action_kind: Union[ActionKind, str]) -> str:
    return action_kind.value if isinstance(action_kind, ActionKind) else str(action_kind)


def render_action(action_kind: Union[ActionKind, str]) -> str:
    """``"<emoji> <Kind>"``; unknown kinds get the generic marker."""
    name = _kind_name(action_kind)
    return f"{ACTION_EMOJIS.get(name, GENERIC_ACTION_EMOJI)} {name}"


def parse_action(cell: str) -> str:
    """Recover the kind name from a rendered action cell."""
    parts = (cell or "").strip().split(" ", 1)
    return parts[-1].strip()


def _parse_timestamp(value: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return dt_parser.parse(value)
    except (ValueError, OverflowError):
        return None


def compute_rollup(entries: Iterable[LogEntry], now: datetime) -> RollupSnapshot:
    """Recount all four figures from scratch over ``entries``."""
    snapshot = RollupSnapshot()
    week_start = now - WEEK_WINDOW
    admins = set()
    for entry in entries:
        ts = entry.timestamp
        if ts is not None:
            if ts.date() == now.date():
                snapshot.today_count += 1
            if ts >= week_start:
                snapshot.week_count += 1
        snapshot.action_histogram[entry.action_kind] = snapshot.action_histogram.get(entry.action_kind, 0) + 1
        if entry.actor_identity.strip():
            admins.add(entry.actor_identity)
    snapshot.distinct_admin_count = len(admins)
    return snapshot


def dashboard_lines(snapshot: RollupSnapshot) -> List[str]:
    actions = ", ".join(f"{kind}({count})" for kind, count in snapshot.action_histogram.items())
    return [
        f"📅 Today's Activities: {snapshot.today_count}",
        f"📊 This Week: {snapshot.week_count}",
        f"🎯 Actions: {actions}",
        f"👤 Active Admins: {snapshot.distinct_admin_count}",
    ]


class ActionLog:
    """Records admin actions; rollups are always recomputed from the full body."""

    def __init__(
        self,
        store: TableStore,
        identity: Optional[IdentityProvider] = None,
        reserved_rows: int = ACTION_LOG_RESERVED_ROWS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.identity = identity or SystemIdentity()
        self.reserved_rows = reserved_rows
        self.clock = clock or datetime.now

    def setup(self) -> None:
        """Create the table and pad the dashboard region. Safe to repeat."""
        self.store.create_table(ACTION_LOG_TABLE, ACTION_LOG_HEADERS)
        existing = len(self.store.read_all(ACTION_LOG_TABLE))
        for index in range(existing, self.reserved_rows):
            self.store.write_row(ACTION_LOG_TABLE, index, [""])

    def append(self, action_kind: Union[ActionKind, str], subject_id: str, details: str = "") -> None:
        """Best effort: a failing log must never block the action it records."""
        try:
            self.setup()
            now = self.clock()
            row = [
                now.strftime(TIMESTAMP_FORMAT),
                self.identity.current_actor_identity(),
                render_action(action_kind),
                subject_id,
                details,
                "Active",
            ]
            next_index = max(len(self.store.read_all(ACTION_LOG_TABLE)), self.reserved_rows)
            self.store.write_row(ACTION_LOG_TABLE, next_index, row)
            self.refresh_dashboard(now)
        except Exception as exc:
            logger.warning("Could not record %s action for %s: %s", _kind_name(action_kind), subject_id, exc)

    def _body(self) -> List[List[str]]:
        if not self.store.has_table(ACTION_LOG_TABLE):
            return []
        return self.store.read_all(ACTION_LOG_TABLE)[self.reserved_rows:]

    def entries(self) -> List[LogEntry]:
        out: List[LogEntry] = []
        for row in self._body():
            if not any(cell for cell in row):
                continue
            cells = list(row) + [""] * (6 - len(row))
            out.append(
                LogEntry(
                    timestamp=_parse_timestamp(cells[0]),
                    actor_identity=cells[1],
                    action_kind=parse_action(cells[2]),
                    subject_id=cells[3],
                    details=cells[4],
                    status=cells[5],
                )
            )
        return out

    def rollup(self, now: Optional[datetime] = None) -> RollupSnapshot:
        return compute_rollup(self.entries(), now or self.clock())

    def refresh_dashboard(self, now: Optional[datetime] = None) -> RollupSnapshot:
        snapshot = self.rollup(now)
        for index, line in enumerate(dashboard_lines(snapshot)):
            self.store.write_row(ACTION_LOG_TABLE, index, [line])
        return snapshot

    def filter(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        action: Optional[str] = None,
        search_text: Optional[str] = None,
    ) -> List[LogEntry]:
        """Entries matching every given criterion; dates are inclusive."""
        needle = (search_text or "").lower()
        matches: List[LogEntry] = []
        for entry in self.entries():
            if date_from or date_to:
                if entry.timestamp is None:
                    continue
                day = entry.timestamp.date()
                if date_from and day < date_from:
                    continue
                if date_to and day > date_to:
                    continue
            if action and action not in entry.action_kind:
                continue
            if needle:
                haystack = " ".join(
                    [entry.actor_identity, entry.action_kind, entry.subject_id, entry.details, entry.status]
                ).lower()
                if needle not in haystack:
                    continue
            matches.append(entry)
        return matches

    def clear_filter(self) -> None:
        self.append(ActionKind.CLEAR, "SYSTEM", "Cleared Admin Log filters")
