"""Helpers for decoding Supabase row values."""
import json
from datetime import datetime
from typing import Any, List, Optional


def parse_timestamp(timestamp_str: Optional[str]) -> Optional[datetime]:
    """
    Parse timestamp string from Supabase, handling various formats.

    Supabase can return timestamps with varying microsecond precision,
    which Python's fromisoformat() can't always handle. This normalizes
    the fractional part to six digits.
    """
    if not timestamp_str:
        return None

    timestamp_str = timestamp_str.replace("Z", "+00:00")

    # Format: 2026-02-21T02:08:26.18976+00:00
    if "." in timestamp_str:
        head, tail = timestamp_str.split(".", 1)
        tz = ""
        for sign in ("+", "-"):
            if sign in tail:
                tail, tz = tail.split(sign, 1)
                tz = sign + tz
                break
        timestamp_str = f"{head}.{tail[:6].ljust(6, '0')}{tz}"

    return datetime.fromisoformat(timestamp_str)


def parse_vector(value: Any) -> Optional[List[float]]:
    """pgvector columns come back as a JSON string like "[0.1,0.2]"."""
    if value is None:
        return None
    if isinstance(value, str):
        value = json.loads(value)
    return [float(v) for v in value]
