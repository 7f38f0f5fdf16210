"""
AS-RUN log decoding and broadcast segmentation.

Pure, in-memory transformations over one file's text: decoding, program
matching, segment grouping and billboard association. No persistence or
network dependencies.
"""

from .billboards import BillboardAssociator
from .decoder import FixedWidthLogDecoder, decode_log
from .log_types import BroadcastSegment, BroadcastWindow, DecodeStats, LogEntry, ParsedLogData
from .matcher import ProgramMatcher
from .program_index import ProgramIndex
from .segments import SegmentBuilder
from .timezones import TimeZoneResolver, ZoneResolution

__all__ = [
    "BillboardAssociator",
    "BroadcastSegment",
    "BroadcastWindow",
    "DecodeStats",
    "FixedWidthLogDecoder",
    "LogEntry",
    "ParsedLogData",
    "ProgramIndex",
    "ProgramMatcher",
    "SegmentBuilder",
    "TimeZoneResolver",
    "ZoneResolution",
    "decode_log",
]
