"""Region timezone policy.

Maps region codes to a timezone and converts local broadcast wall-clock
timestamps to UTC. The region table is injected so callers (and tests) can
supply synthetic regions.

A zone spec is either an IANA name (``Australia/Adelaide``, DST-aware, half-hour
offsets included) or a fixed offset written ``UTC+HH:MM`` / ``UTC-HH:MM``.
Unknown region codes resolve to the default region's zone; the resolution
reports ``is_default=True`` and a warning is logged.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_REGION_ZONES: dict[str, str] = {
    "SYD": "Australia/Sydney",  # AEDT/AEST (UTC+11/+10, has DST)
    "MEL": "Australia/Melbourne",  # AEDT/AEST (UTC+11/+10, has DST)
    "BNE": "Australia/Brisbane",  # AEST (UTC+10, no DST)
    "PER": "Australia/Perth",  # AWST (UTC+8, no DST)
    "ADL": "Australia/Adelaide",  # ACDT/ACST (UTC+10:30/+09:30, has DST)
}

REGION_ALIASES: dict[str, str] = {
    "BRI": "BNE",
    "ADE": "ADL",
}

_FIXED_OFFSET = re.compile(r"^UTC([+-])(\d{2}):(\d{2})$")


@dataclass(frozen=True)
class ZoneResolution:
    """Outcome of resolving a region code."""

    region: str
    zone_name: str
    tz: tzinfo
    is_default: bool


def parse_zone_spec(spec: str) -> tzinfo:
    """Build a tzinfo from an IANA name or a ``UTC±HH:MM`` fixed offset."""
    match = _FIXED_OFFSET.match(spec)
    if match:
        sign, hours, minutes = match.groups()
        delta = timedelta(hours=int(hours), minutes=int(minutes))
        return timezone(-delta if sign == "-" else delta, name=spec)
    return ZoneInfo(spec)


class TimeZoneResolver:
    """Resolves region codes to timezones and converts local times to UTC."""

    def __init__(
        self,
        region_zones: Mapping[str, str] | None = None,
        *,
        default_region: str = "SYD",
        aliases: Mapping[str, str] | None = None,
    ) -> None:
        table = dict(DEFAULT_REGION_ZONES if region_zones is None else region_zones)
        self._aliases = {k.upper(): v.upper() for k, v in (REGION_ALIASES if aliases is None else aliases).items()}
        self._zones: dict[str, tuple[str, tzinfo]] = {
            code.upper(): (spec, parse_zone_spec(spec)) for code, spec in table.items()
        }
        default_code = self.canonical_region(default_region)
        if default_code not in self._zones:
            raise ValueError(f"default region {default_region!r} is not in the region table")
        self._default_region = default_code
        self._cache: dict[str, ZoneResolution] = {}

    @property
    def default_region(self) -> str:
        return self._default_region

    @property
    def regions(self) -> list[str]:
        return sorted(self._zones)

    def canonical_region(self, region: str) -> str:
        code = (region or "").strip().upper()
        return self._aliases.get(code, code)

    def resolve(self, region: str) -> ZoneResolution:
        """Return the timezone for ``region``, falling back to the default zone."""
        code = self.canonical_region(region)
        cached = self._cache.get(code)
        if cached is not None:
            return cached

        if code in self._zones:
            name, tz = self._zones[code]
            resolution = ZoneResolution(region=code, zone_name=name, tz=tz, is_default=False)
        else:
            name, tz = self._zones[self._default_region]
            resolution = ZoneResolution(region=code, zone_name=name, tz=tz, is_default=True)
            logger.warning(
                "unknown_region_default_zone",
                region=region,
                default_region=self._default_region,
                zone=name,
            )
        self._cache[code] = resolution
        return resolution

    def to_utc(self, local: datetime, region: str) -> datetime:
        """Interpret naive wall-clock ``local`` in the region's zone and return a UTC instant.

        Ambiguous wall-clock times (DST fall-back) take the earlier offset
        (``fold=0``); wall-clock times skipped by a DST jump are shifted by the
        gap, as ``zoneinfo`` does.
        """
        if local.tzinfo is not None:
            raise ValueError("local datetime must be naive wall-clock time")
        tz = self.resolve(region).tz
        return local.replace(tzinfo=tz).astimezone(timezone.utc)

    def to_local(self, instant: datetime, region: str) -> datetime:
        """Convert an aware instant to naive wall-clock time in the region's zone."""
        if instant.tzinfo is None:
            raise ValueError("datetime must be timezone-aware")
        tz = self.resolve(region).tz
        return instant.astimezone(tz).replace(tzinfo=None)
