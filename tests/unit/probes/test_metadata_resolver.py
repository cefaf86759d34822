from __future__ import annotations

import pytest

from clipstitch.probes.metadata_resolver import MetadataResolver, parse_duration_seconds
from clipstitch.render.render_errors import MetadataResolutionError
from clipstitch.render.render_schemas import ClipSpec
from tests.mocks.collaborators import FakeProbe

CLIP_URL = "https://clips.example.com/a.mp4"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("12.500000", 12.5),
        ("12.500000\n", 12.5),
        ("  7\n8.0", 7.0),
        ("0.04", 0.04),
    ],
)
def test_parse_duration_accepts_positive_numbers(raw: str, expected: float) -> None:
    assert parse_duration_seconds(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", ["", "   ", None, "N/A", "abc", "nan", "inf", "0", "-1.5"])
def test_parse_duration_rejects_unusable_output(raw) -> None:
    with pytest.raises(ValueError):
        parse_duration_seconds(raw)


@pytest.mark.asyncio
async def test_missing_end_uses_probe() -> None:
    probe = FakeProbe(default="12.500000")
    resolver = MetadataResolver(probe=probe)

    resolved = await resolver.resolve(ClipSpec(url=CLIP_URL))

    assert probe.calls == [CLIP_URL]
    assert resolved.start_time_ms == 0
    assert resolved.end_time_ms == 12500
    assert resolved.url == CLIP_URL
    assert resolved.source_url == CLIP_URL


@pytest.mark.asyncio
async def test_explicit_end_is_trusted() -> None:
    probe = FakeProbe()
    resolver = MetadataResolver(probe=probe)

    resolved = await resolver.resolve(ClipSpec(url=CLIP_URL, start_time_ms=100, end_time_ms=5000))

    assert probe.calls == []
    assert (resolved.start_time_ms, resolved.end_time_ms) == (100, 5000)


@pytest.mark.asyncio
async def test_probe_target_and_render_url_are_honoured() -> None:
    probe = FakeProbe(default="2.0")
    resolver = MetadataResolver(probe=probe)

    resolved = await resolver.resolve(
        ClipSpec(url=CLIP_URL),
        probe_target="/scratch/input-1.mp4",
        render_url="file:///scratch/input-1.mp4",
    )

    assert probe.calls == ["/scratch/input-1.mp4"]
    assert resolved.url == "file:///scratch/input-1.mp4"
    assert resolved.source_url == CLIP_URL
    assert resolved.end_time_ms == 2000


@pytest.mark.asyncio
async def test_duration_is_rounded_to_nearest_millisecond() -> None:
    resolver = MetadataResolver(probe=FakeProbe(default="3.0006"))

    resolved = await resolver.resolve(ClipSpec(url=CLIP_URL))

    assert resolved.end_time_ms == 3001


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["nan", "N/A", "", "0"])
async def test_unusable_probe_output_names_clip(raw: str) -> None:
    resolver = MetadataResolver(probe=FakeProbe(default=raw))

    with pytest.raises(MetadataResolutionError) as excinfo:
        await resolver.resolve(ClipSpec(url=CLIP_URL))

    assert excinfo.value.url == CLIP_URL
    assert CLIP_URL in str(excinfo.value)


@pytest.mark.asyncio
async def test_probe_launch_failure_is_resolution_error() -> None:
    resolver = MetadataResolver(probe=FakeProbe(launch_error=True))

    with pytest.raises(MetadataResolutionError, match="probe failed"):
        await resolver.resolve(ClipSpec(url=CLIP_URL))


@pytest.mark.asyncio
async def test_probed_end_before_start_is_rejected() -> None:
    resolver = MetadataResolver(probe=FakeProbe(default="12.5"))

    with pytest.raises(MetadataResolutionError) as excinfo:
        await resolver.resolve(ClipSpec(url=CLIP_URL, start_time_ms=20000))

    assert "endTimeMs (12500)" in str(excinfo.value)
    assert CLIP_URL in str(excinfo.value)


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["https://cdn.example.com", "https://cdn.example.com/a b.mp4"])
async def test_errors_name_the_url_as_submitted(url: str) -> None:
    resolver = MetadataResolver(probe=FakeProbe(default="nan"))

    with pytest.raises(MetadataResolutionError) as excinfo:
        await resolver.resolve(ClipSpec(url=url))

    assert excinfo.value.url == url
    assert str(excinfo.value).startswith(f"Failed to resolve metadata for clip {url}: ")
