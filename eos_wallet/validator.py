"""
Grammar checks for account names and transfer memos.

Account names are exactly twelve characters drawn from ``a-z`` and
``1-5``.  Memos are limited to 256 bytes of UTF-8.
"""

from __future__ import annotations

import re
from typing import Any

ACCOUNT_NAME_RE = re.compile(r"^[a-z1-5]{12}$")
MAX_MEMO_BYTES = 256


def validate_account_name(name: Any) -> bool:
    return isinstance(name, str) and ACCOUNT_NAME_RE.fullmatch(name) is not None


def validate_memo(memo: Any) -> bool:
    if not isinstance(memo, str):
        return False
    return len(memo.encode("utf-8")) <= MAX_MEMO_BYTES
