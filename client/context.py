"""
Ambient browsing context attached to a submission as its metadata bag
"""
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Dict, Optional


def _resolve_timezone() -> Optional[str]:
    try:
        tz = datetime.now().astimezone().tzinfo
    except (OverflowError, OSError, ValueError):
        return None
    if tz is None:
        return None
    # zoneinfo.ZoneInfo carries the IANA key, fixed offsets only a tzname
    name = getattr(tz, "key", None) or tz.tzname(None)
    return name or None


@dataclass
class BrowsingContext:
    """Best-effort values; anything left as None is omitted from the request."""

    referrer: Optional[str] = None
    screen_width: Optional[int] = None
    screen_height: Optional[int] = None
    timezone: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None

    @classmethod
    def from_environment(cls, **overrides) -> "BrowsingContext":
        values = {"timezone": _resolve_timezone()}
        values.update(overrides)
        return cls(**values)

    def as_metadata(self) -> Dict[str, Any]:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or value == "":
                continue
            out[f.name] = value
        return out
