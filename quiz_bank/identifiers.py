"""Question ID synthesis and admin-code lookup."""

from __future__ import annotations

import re
from typing import Mapping, Optional

from .constants import ADMIN_CODES, FALLBACK_ADMIN_CODE


def pad_number(num: int, size: int) -> str:
    """Zero-pad ``num`` and keep the last ``size`` digits."""
    padded = f"{int(num):0{size}d}"
    return padded[-size:]


def generate_id(set_token: str, day: str, question_index: str, admin_code: str) -> str:
    """Build ``{set}D{day}Q{index}{admin}``; day and index arrive pre-padded."""
    return f"{set_token}D{day}Q{question_index}{admin_code}"


def resolve_admin_code(
    author: str,
    admin_codes: Optional[Mapping[str, str]] = None,
    fallback: str = FALLBACK_ADMIN_CODE,
) -> str:
    """Map an author display name to its admin code.

    Only the token before the first underscore or whitespace is looked up,
    so ``Lois_Eleven`` and ``Lois`` resolve the same. Unknown names get the
    fallback code instead of failing.
    """
    codes = ADMIN_CODES if admin_codes is None else admin_codes
    base_name = re.split(r"[_\s]", (author or "").strip(), maxsplit=1)[0]
    return codes.get(base_name, fallback)
