"""Line-level classification of transcript text."""

from __future__ import annotations

from typing import Tuple

from .schemas import LineKind

AUTHOR_SEPARATOR = "—"
QUESTION_MARKER = "Question #"
IMAGE_HOSTS = ("drive.google.com",)
IMAGE_SUFFIXES = (".jpg", ".png")


def is_screenshot_line(line: str) -> bool:
    if "http" not in line:
        return False
    return any(host in line for host in IMAGE_HOSTS) or any(suffix in line for suffix in IMAGE_SUFFIXES)


def classify_line(line: str) -> LineKind:
    """Classify one raw line; the first matching rule wins."""
    if line is None or not line.strip():
        return LineKind.BLANK
    if AUTHOR_SEPARATOR in line:
        return LineKind.AUTHOR_HEADER
    if is_screenshot_line(line):
        return LineKind.SCREENSHOT_URL
    if QUESTION_MARKER in line:
        return LineKind.QUESTION_LINE
    return LineKind.UNCLASSIFIED


def split_author_header(line: str) -> Tuple[str, str]:
    """Split ``"Author — date"`` into its trimmed parts."""
    author, _, date = line.partition(AUTHOR_SEPARATOR)
    return author.strip(), date.strip()
