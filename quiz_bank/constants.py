"""Static lookup tables: topics, question types, admin codes, table layouts."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class Category:
    """One row of an ordered classification table."""

    name: str
    emoji: str
    keywords: Tuple[str, ...]


# Order is priority: the first category with any matching keyword wins.
TOPIC_CATEGORIES: Tuple[Category, ...] = (
    Category(
        "QBO",
        "📚",
        ("quickbooks", "qbo", "invoice", "bill", "reconcile", "bank feed",
         "transaction", "vendor", "customer"),
    ),
    Category(
        "Excel",
        "📊",
        ("excel", "spreadsheet", "formula", "calculation", "worksheet", "cell", "pivot"),
    ),
    Category(
        "Bkpg/Actg",
        "💰",
        ("journal entry", "debit", "credit", "balance", "account", "ledger", "reconciliation"),
    ),
    Category(
        "Vocab/Terms",
        "📖",
        ("define", "what is", "term", "meaning", "definition", "explain term"),
    ),
    Category(
        "TGB Internal",
        "⚙️",
        ("process", "internal", "tgb", "procedure", "policy", "workflow"),
    ),
    Category(
        "PBS",
        "🏢",
        ("pbs", "review", "checklist", "month end", "verification"),
    ),
    Category(
        "Client",
        "👥",
        ("cwp", "bd", "avc", "client", "customer specific"),
    ),
)
FALLBACK_TOPIC = Category("General", "📝", ())

QUESTION_TYPES: Tuple[Category, ...] = (
    Category("Sequential", "1️⃣", ("next step", "following", "sequence", "first", "then", "after")),
    Category("Multiple Choice", "📝", ("choose", "select", "which of the following", "options")),
    Category("True/False", "✅", ("true or false", "true/false", "t/f")),
    Category("Fill in Blank", "⬜", ("fill in", "complete", "enter the")),
    Category("Excel Exercise", "📊", ("excel", "spreadsheet", "formula", "calculate")),
    Category("Short Answer", "✍️", ("explain", "describe", "how do you", "what is", "why")),
)
FALLBACK_TYPE = Category("Short Answer", "✍️", ())

ADMIN_CODES: Mapping[str, str] = MappingProxyType({
    "Tye": "A01",
    "Lois": "A02",
})
FALLBACK_ADMIN_CODE = "A00"
DEFAULT_SET = "S1"

ACTION_EMOJIS: Mapping[str, str] = MappingProxyType({
    "Parse": "📋",
    "Edit": "✏️",
    "Remove": "🗑️",
    "Restore": "♻️",
    "Override": "⚡",
    "Reset": "🧹",
    "Clear": "🔄",
    "Test": "🧪",
    "Error": "❌",
    "Review": "👀",
    "Similar": "⚠️",
    "Approve": "✅",
})
GENERIC_ACTION_EMOJI = "📝"

# Table names and header rows. Column order is load-bearing.
RAW_DATA_TABLE = "Raw Data"
RESULTS_TABLE = "Parsing Results"
IMAGE_TABLE = "Image Library"
ACTION_LOG_TABLE = "Admin Log"
QUESTION_BANK_TABLE = "Question Bank"

RAW_DATA_HEADERS: Tuple[str, ...] = ("Raw Data",)

RESULTS_HEADERS: Tuple[str, ...] = (
    "Question ID",
    "Date",
    "Author",
    "Question Text",
    "Answer Text",
    "Screenshots",
    "Topic Emoji",
    "Topic",
    "Type Emoji",
    "Question Type",
    "Status",
    "Parse Confidence",
    "Needs Review",
    "Set",
    "Day",
)

IMAGE_HEADERS: Tuple[str, ...] = (
    "Image ID",
    "URL",
    "Preview",
    "Used in Questions",
    "Description",
    "Topic/Category",
    "Date Added",
)

ACTION_LOG_HEADERS: Tuple[str, ...] = (
    "📅 Timestamp",
    "👤 Admin",
    "🎯 Action",
    "🔑 Question ID",
    "📝 Details",
    "🚦 Status",
)

QUESTION_BANK_HEADERS: Tuple[str, ...] = (
    "Question ID",
    "Question",
    "Context",
    "Has Image",
    "Image URL",
    "Topic",
    "Author",
    "Date Added",
    "Is Edited",
)

# Results table column indexes.
COL_QUESTION_ID = 0
COL_DATE = 1
COL_AUTHOR = 2
COL_QUESTION_TEXT = 3
COL_ANSWER_TEXT = 4
COL_SCREENSHOT = 5
COL_TOPIC_EMOJI = 6
COL_TOPIC = 7
COL_TYPE_EMOJI = 8
COL_QUESTION_TYPE = 9
COL_STATUS = 10
COL_PARSE_CONFIDENCE = 11
COL_NEEDS_REVIEW = 12
COL_SET = 13
COL_DAY = 14

# Image table column indexes.
IMG_COL_ID = 0
IMG_COL_URL = 1
IMG_COL_PREVIEW = 2
IMG_COL_QUESTIONS = 3
IMG_COL_DESCRIPTION = 4
IMG_COL_TOPIC = 5
IMG_COL_DATE = 6

# Rows under the action log header held for the rollup dashboard
# (sheet rows 2-9); the log body starts at sheet row 10.
ACTION_LOG_RESERVED_ROWS = 8
