"""Log filename convention: ``YYYYMMDD_REGION-CHANNEL.LOG`` (case-insensitive)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime

from ..infra.exceptions import FilenameError
from ..shared.types import Channel, Region

_LOG_FILENAME = re.compile(r"(\d{8})_(\w+)-(\w+)\.LOG", re.IGNORECASE)

REGION_CODES: dict[str, Region] = {
    "SYD": Region.SYD,
    "MEL": Region.MEL,
    "BRI": Region.BNE,
    "BNE": Region.BNE,
    "PER": Region.PER,
    "ADL": Region.ADL,
    "ADE": Region.ADL,
}

CHANNEL_CODES: dict[str, Channel] = {
    "NINE": Channel.CH9,
    "GO": Channel.GO,
    "GEM": Channel.GEM,
}


@dataclass(frozen=True)
class LogFileMetadata:
    broadcast_date: date
    region: Region
    channel: Channel
    filename: str


def map_region(code: str) -> Region | None:
    return REGION_CODES.get(code.upper())


def map_channel(code: str) -> Channel | None:
    return CHANNEL_CODES.get(code.upper())


def parse_log_filename(key: str) -> LogFileMetadata:
    """Recover date, region and channel from an object key or path.

    Raises FilenameError when the name does not follow the convention or the
    region/channel is not supported.
    """
    filename = key.replace("\\", "/").rsplit("/", 1)[-1]
    match = _LOG_FILENAME.search(filename)
    if not match:
        raise FilenameError(f"unrecognized log filename: {filename!r}")

    date_str, region_str, channel_str = match.groups()
    region = map_region(region_str)
    channel = map_channel(channel_str)
    if region is None or channel is None:
        raise FilenameError(
            f"unsupported region ({region_str}) or channel ({channel_str}) in {filename!r}"
        )

    try:
        broadcast_date = datetime.strptime(date_str, "%Y%m%d").date()
    except ValueError as exc:
        raise FilenameError(f"invalid date {date_str!r} in {filename!r}") from exc

    return LogFileMetadata(
        broadcast_date=broadcast_date,
        region=region,
        channel=channel,
        filename=filename,
    )
