import time
from datetime import datetime, timezone
from typing import Tuple


def now_ms_iso() -> Tuple[int, str]:
    """Current UTC time as (epoch ms, ISO-8601 with trailing 'Z')."""
    now_ms = int(time.time() * 1000)
    return now_ms, ms_to_iso(now_ms)


def ms_to_iso(ts_ms: int) -> str:
    dt = datetime.fromtimestamp(ts_ms / 1000.0, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def safe_pct(part: float, total: float) -> float:
    # allocation helpers treat an empty book as 0% on both sides
    if total <= 0:
        return 0.0
    return part / total * 100.0
