"""Splits question-bearing lines into individual question candidates."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from .identifiers import pad_number
from .schemas import ParserState, RawQuestionCandidate
from .tokenizer import QUESTION_MARKER


DAY_RE = re.compile(r"day\s+(\d+)", re.IGNORECASE)
LEADING_NUMBER_RE = re.compile(r"^(\d+:?\s*)")
EDITED_RE = re.compile(r"\s*\(edited\)\s*$", re.IGNORECASE)
ATTACHED_PREFIX_RE = re.compile(r"^\s*for the attached", re.IGNORECASE)
QUESTION_WORD_SPLIT_RE = re.compile(r",\s*(?=(?:what|how|why|when|where)\b)", re.IGNORECASE)
DRIVE_URL_RE = re.compile(r"https?://drive\.google\.com/\S+", re.IGNORECASE)


def update_day(line: str, state: ParserState) -> bool:
    """Read a ``Day N`` marker into ``state.current_day``; return True if it changed."""
    if "day" not in line.lower():
        return False
    match = DAY_RE.search(line)
    if not match:
        return False
    state.current_day = pad_number(int(match.group(1)), 2)
    return True


def strip_edited_marker(text: str) -> Tuple[str, bool]:
    cleaned, count = EDITED_RE.subn("", text)
    if not count:
        return text, False
    return re.sub(r"\s+", " ", cleaned).strip(), True


def split_context(text: str) -> Tuple[str, str]:
    """Split ``"For the attached, ..., What ...?"`` into (context, question).

    The split point is the last comma followed by a question word. Without
    one, the first comma is used; without any comma there is no context.
    """
    if not ATTACHED_PREFIX_RE.match(text):
        return "", text
    anchors = list(QUESTION_WORD_SPLIT_RE.finditer(text))
    if anchors:
        last = anchors[-1]
        return text[: last.start()].strip(), text[last.end():].strip()
    if "," in text:
        context, _, question = text.partition(",")
        return context.strip(), question.strip()
    return "", text


def find_drive_url(text: str) -> str:
    if not text:
        return ""
    match = DRIVE_URL_RE.search(text)
    return match.group(0) if match else ""


def ensure_question_mark(text: str) -> str:
    text = text.strip()
    if not text.endswith("?"):
        text += "?"
    return text


def extract_questions(
    line: str,
    state: ParserState,
    raw_input: Optional[str] = None,
) -> List[RawQuestionCandidate]:
    """Return one candidate per ``Question #`` marker on ``line``.

    Mutates ``state.current_day`` when the line carries a day marker. The
    screenshot URL comes from ``raw_input`` (falling back to the line) or the
    state's pending screenshot.
    """
    update_day(line, state)

    segments = line.split(QUESTION_MARKER)[1:]
    if not segments:
        return []

    screenshot_url = find_drive_url(raw_input if raw_input is not None else line)
    if not screenshot_url:
        screenshot_url = state.pending_screenshot_url

    candidates: List[RawQuestionCandidate] = []
    for index, segment in enumerate(segments, start=1):
        text = LEADING_NUMBER_RE.sub("", segment.strip()).strip()
        # Anything after a newline belongs to the message body, e.g. a pasted URL.
        text = text.split("\n", 1)[0].strip()
        text, is_edited = strip_edited_marker(text)
        context, text = split_context(text)
        candidates.append(
            RawQuestionCandidate(
                index=index,
                text=ensure_question_mark(text),
                context=context,
                screenshot_url=screenshot_url,
                has_image=bool(screenshot_url) or bool(context),
                is_edited=is_edited,
            )
        )
    return candidates


def parse_message(text: str, state: Optional[ParserState] = None) -> List[RawQuestionCandidate]:
    """Extract questions from one multi-line chat message.

    The message's question lines are joined so a URL on a later line still
    attaches to the questions above it.
    """
    state = state or ParserState()
    lines = [ln.strip() for ln in (text or "").splitlines() if ln.strip()]
    question_lines = [ln for ln in lines if QUESTION_MARKER in ln]
    if not question_lines:
        return []
    return extract_questions(" ".join(question_lines), state, raw_input=text)
