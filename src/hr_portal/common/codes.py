from __future__ import annotations

from typing import Optional

from ..core.constants import CODE_NUMBER_WIDTH


def next_sequential_code(prefix: str, last_code: Optional[str], *, width: int = CODE_NUMBER_WIDTH) -> str:
    """Human-readable sequential code: EMP001 -> EMP002, none yet -> EMP001.

    Codes that do not carry the prefix followed by digits restart the sequence.
    """

    number = 0
    if last_code and last_code.startswith(prefix):
        digits = last_code[len(prefix):]
        if digits.isdigit():
            number = int(digits)
    return f"{prefix}{number + 1:0{width}d}"
