"""Score ratings, number/date formatting and UI strings shared by the renderers."""

import math
import re
from datetime import datetime, timezone
from typing import Any, List, Optional, Union
from urllib.parse import urlsplit

from .schema import Audit, ScoreDisplayMode

NBSP = "\xa0"

# Minimum score (inclusive) for each rating, highest first.
PASS_THRESHOLD = 0.9
AVERAGE_THRESHOLD = 0.5

UI_STRINGS = {
    "varianceDisclaimer": "Values are estimated and may vary.",
    "opportunityResourceColumnLabel": "Opportunity",
    "opportunitySavingsColumnLabel": "Estimated Savings",
    "errorMissingAuditInfo": "Report error: no audit information",
    "errorLabel": "Error!",
    "warningHeader": "Warnings: ",
    "auditGroupExpandTooltip": "Show audits",
    "passedAuditsGroupTitle": "Passed audits",
    "malformedAuditLabel": "Audit could not be rendered",
    "crcInitialNavigation": "Initial Navigation",
    "crcLongestDurationLabel": "Maximum critical path latency:",
    "notApplicableScore": "?",
}

_FORMAT_TOKEN = re.compile(r"%(\d*)([sd])")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score_to_percent(score: Optional[float]) -> int:
    """Score in [0, 1] as the integer shown in gauges and navigation (0 for null)."""
    return _round_half_up(float(score or 0) * 100)


def calculate_rating(score: Optional[float], score_display_mode: Optional[str] = None) -> str:
    """Map a score to one of pass / average / fail / error."""
    if score_display_mode in (ScoreDisplayMode.MANUAL.value, ScoreDisplayMode.NOT_APPLICABLE.value):
        return "pass"
    if score_display_mode == ScoreDisplayMode.ERROR.value:
        return "error"
    if score is None:
        return "fail"
    if score >= PASS_THRESHOLD:
        return "pass"
    if score >= AVERAGE_THRESHOLD:
        return "average"
    return "fail"


def show_as_passed(audit: Audit) -> bool:
    mode = audit.mode
    if mode in (ScoreDisplayMode.MANUAL, ScoreDisplayMode.NOT_APPLICABLE):
        return True
    if mode in (ScoreDisplayMode.ERROR, ScoreDisplayMode.INFORMATIVE):
        return False
    return audit.score is not None and audit.score >= PASS_THRESHOLD


def _decimals(granularity: float) -> int:
    if granularity >= 1:
        return 0
    return max(0, -int(math.floor(math.log10(granularity))))


def format_number(number: float, granularity: float = 0.1) -> str:
    coarse = _round_half_up(number / granularity) * granularity
    return f"{coarse:,.{_decimals(granularity)}f}"


def format_bytes_to_kb(size: float, granularity: float = 0.1) -> str:
    return f"{format_number(size / 1024, granularity)}{NBSP}KB"


def format_milliseconds(ms: float, granularity: float = 10) -> str:
    return f"{format_number(ms, granularity)}{NBSP}ms"


def format_seconds(ms: float, granularity: float = 0.1) -> str:
    return f"{format_number(ms / 1000, granularity)}{NBSP}s"


def format_duration(ms: float) -> str:
    """Human duration such as '1 h 2 m 5 s'; 'None' when it rounds to zero seconds."""
    seconds = ms / 1000
    if round(seconds) == 0:
        return "None"
    parts: List[str] = []
    for label, unit in (("d", 86400), ("h", 3600), ("m", 60), ("s", 1)):
        count = int(seconds // unit)
        if count > 0:
            seconds -= count * unit
            parts.append(f"{count}{NBSP}{label}")
    return " ".join(parts)


def format_date_time(timestamp: str) -> str:
    """Format an ISO-8601 timestamp as e.g. 'Feb 13, 2018, 3:36 PM UTC'.

    Unparseable values are returned unchanged.
    """
    try:
        dt = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return str(timestamp)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"
    return f"{dt:%b} {dt.day}, {dt.year}, {hour}:{dt:%M} {meridiem} {dt.tzname()}"


def format_display_value(display_value: Union[str, List[Any], None]) -> str:
    """Display values are plain strings or printf-style ``[format, *args]`` lists."""
    if display_value is None:
        return ""
    if isinstance(display_value, str):
        return display_value
    if not display_value:
        return ""
    template, args = str(display_value[0]), list(display_value[1:])

    def _substitute(match: "re.Match") -> str:
        if not args:
            return match.group(0)
        value = args.pop(0)
        if match.group(2) == "d":
            granularity = float(match.group(1)) if match.group(1) else 1
            try:
                return format_number(float(value), granularity)
            except (TypeError, ValueError):
                return str(value)
        return str(value)

    return _FORMAT_TOKEN.sub(_substitute, template)


def parse_url(url: str) -> dict:
    """Split a URL into the display pieces used by the URL cell renderer.

    Raises ValueError for anything that is not an absolute http(s) URL.
    """
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValueError(f"not an http(s) URL: {url}")
    path = parts.path or "/"
    segments = [s for s in path.split("/") if s]
    if len(segments) > 2:
        path = "…/" + "/".join(segments[-2:])
    file = path + (f"?{parts.query}" if parts.query else "")
    return {
        "file": file,
        "hostname": parts.hostname or "",
        "origin": f"{parts.scheme}://{parts.netloc}",
    }
