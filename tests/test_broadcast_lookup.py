"""Tests for clip-window lookup.

Verifies:
- The Day is chosen on the fixed-offset (UTC+10) calendar
- The Broadcast must cover the whole clip window
- Missing program, day or broadcast raise the matching not-found error
- Invalid clip offsets are rejected
- Analysis launch hands the broadcast id to the launcher and marks it PROCESSING
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from uuid import uuid4

import pytest

from asrun_ingest.domain.entities import Broadcast
from asrun_ingest.domain.interfaces import ClipExtractor, PipelineLauncher
from asrun_ingest.infra.broadcast_repository import BroadcastRepository
from asrun_ingest.infra.exceptions import (
    BroadcastNotFoundError,
    DayNotFoundError,
    NotFoundError,
    ProgramNotFoundError,
    ValidationError,
)
from asrun_ingest.shared.types import BroadcastStatus, Channel, Region
from asrun_ingest.usecases.broadcast_lookup import (
    build_stream_url,
    day_date_for,
    locate_clip_window,
    request_clip,
    start_analysis,
)

UTC = timezone.utc


class RecordingLauncher(PipelineLauncher):
    def __init__(self) -> None:
        self.launched: list[str] = []

    def launch(self, broadcast_id: str) -> str:
        self.launched.append(broadcast_id)
        return f"job-{len(self.launched)}"


class RecordingExtractor(ClipExtractor):
    def __init__(self) -> None:
        self.calls: list[tuple[str, datetime, int]] = []

    def extract_clip(self, stream_url: str, start: datetime, duration_seconds: int) -> str:
        self.calls.append((stream_url, start, duration_seconds))
        return f"clips/{int(start.timestamp())}.mp4"


@pytest.fixture
def repo(db, add_program):
    program = add_program("United Cup", "UNITED CUP", slug="united-cup")
    repository = BroadcastRepository(db)
    day, _ = repository.get_or_create_day(program.id, program.name, date(2026, 1, 4))
    repository.create_broadcast(
        name="UNITED CUP DAY 4 (BNE)",
        start_time=datetime(2026, 1, 3, 20, 0, tzinfo=UTC),
        end_time=datetime(2026, 1, 3, 22, 0, tzinfo=UTC),
        channel=Channel.CH9,
        region=Region.BNE,
        day_id=day.id,
    )
    db.commit()
    return repository


def _request(**overrides):
    request = {
        "program_slug": "united-cup",
        "channel": Channel.CH9,
        "region": Region.BNE,
        "center_utc": datetime(2026, 1, 3, 21, 0, tzinfo=UTC),
        "seconds_before": 60,
        "seconds_after": 120,
    }
    request.update(overrides)
    return request


# ---------------------------------------------------------------------------
# Day anchor
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("instant", "expected"),
    [
        (datetime(2026, 1, 3, 14, 0, tzinfo=UTC), date(2026, 1, 4)),
        (datetime(2026, 1, 3, 13, 59, tzinfo=UTC), date(2026, 1, 3)),
        (datetime(2026, 7, 3, 14, 0, tzinfo=UTC), date(2026, 7, 4)),
    ],
)
def test_day_date_for(instant, expected):
    assert day_date_for(instant) == expected


def test_day_date_for_custom_offset():
    assert day_date_for(datetime(2026, 1, 3, 14, 0, tzinfo=UTC), anchor_offset_hours=8) == date(2026, 1, 3)


def test_day_date_for_rejects_naive():
    with pytest.raises(ValidationError):
        day_date_for(datetime(2026, 1, 3, 14, 0))


# ---------------------------------------------------------------------------
# locate_clip_window
# ---------------------------------------------------------------------------


def test_locates_covering_broadcast(repo):
    window = locate_clip_window(repo, **_request())

    assert window.start == datetime(2026, 1, 3, 20, 59, tzinfo=UTC)
    assert window.end == datetime(2026, 1, 3, 21, 2, tzinfo=UTC)
    assert window.duration_seconds == 180
    assert "/bne/ch9/" in window.stream_url
    assert f"start={int(window.start.timestamp())}" in window.stream_url


def test_unknown_program(repo):
    with pytest.raises(ProgramNotFoundError):
        locate_clip_window(repo, **_request(program_slug="australian-open"))


def test_no_day_on_anchor_date(repo):
    with pytest.raises(DayNotFoundError):
        locate_clip_window(repo, **_request(center_utc=datetime(2026, 1, 4, 21, 0, tzinfo=UTC)))


@pytest.mark.parametrize(
    "overrides",
    [
        {"center_utc": datetime(2026, 1, 3, 21, 59, 30, tzinfo=UTC)},
        {"center_utc": datetime(2026, 1, 3, 20, 0, 30, tzinfo=UTC)},
        {"channel": Channel.GEM},
        {"region": Region.SYD},
    ],
)
def test_no_covering_broadcast(repo, overrides):
    with pytest.raises(BroadcastNotFoundError):
        locate_clip_window(repo, **_request(**overrides))


def test_not_found_errors_share_base(repo):
    with pytest.raises(NotFoundError):
        locate_clip_window(repo, **_request(program_slug="missing"))


@pytest.mark.parametrize(
    "overrides",
    [{"seconds_before": -1}, {"seconds_after": -5}, {"seconds_before": 0, "seconds_after": 0}],
)
def test_invalid_offsets(repo, overrides):
    with pytest.raises(ValidationError):
        locate_clip_window(repo, **_request(**overrides))


# ---------------------------------------------------------------------------
# request_clip
# ---------------------------------------------------------------------------


def test_request_clip_hands_window_to_extractor(repo):
    extractor = RecordingExtractor()

    window, clip_key = request_clip(repo, extractor, **_request())

    assert extractor.calls == [(window.stream_url, window.start, 180)]
    assert clip_key == f"clips/{int(window.start.timestamp())}.mp4"


def test_request_clip_not_called_when_not_found(repo):
    extractor = RecordingExtractor()
    with pytest.raises(BroadcastNotFoundError):
        request_clip(repo, extractor, **_request(channel=Channel.GO))
    assert extractor.calls == []


def test_build_stream_url_lowercases_codes():
    url = build_stream_url(
        Channel.GEM,
        Region.MEL,
        datetime(2026, 1, 1, tzinfo=UTC),
        datetime(2026, 1, 1, 0, 1, tzinfo=UTC),
    )
    assert "simulcast-mel-gem" in url
    assert url.endswith("start=1767225600&end=1767225660")


# ---------------------------------------------------------------------------
# start_analysis
# ---------------------------------------------------------------------------


def test_start_analysis_launches_and_marks_processing(repo, db):
    [broadcast] = db.query(Broadcast).all()
    launcher = RecordingLauncher()

    job_id = start_analysis(repo, launcher, str(broadcast.id))
    db.commit()

    assert job_id == "job-1"
    assert launcher.launched == [str(broadcast.id)]
    assert repo.get_broadcast(broadcast.id).status is BroadcastStatus.PROCESSING


def test_start_analysis_retries_failed_but_not_running(repo, db):
    [broadcast] = db.query(Broadcast).all()
    launcher = RecordingLauncher()

    broadcast.status = BroadcastStatus.FAILED
    db.commit()
    start_analysis(repo, launcher, str(broadcast.id))

    with pytest.raises(ValidationError):
        start_analysis(repo, launcher, str(broadcast.id))
    assert launcher.launched == [str(broadcast.id)]


@pytest.mark.parametrize("broadcast_id", ["not-a-uuid", str(uuid4())])
def test_start_analysis_rejects_unknown_broadcast(repo, broadcast_id):
    launcher = RecordingLauncher()
    with pytest.raises((ValidationError, BroadcastNotFoundError)):
        start_analysis(repo, launcher, broadcast_id)
    assert launcher.launched == []
