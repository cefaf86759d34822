from __future__ import annotations

import sys

import pytest

from clipstitch.probes.duration_probe import (
    PROBE_ARGS,
    CommandDurationProbe,
    FallbackDurationProbe,
    build_probe,
)
from clipstitch.render.render_errors import ProbeLaunchError
from tests.mocks.collaborators import FakeProbe

MISSING_BINARY = "/nonexistent/bin/ffprobe-clipstitch"


def _python_probe(script: str, name: str = "python") -> CommandDurationProbe:
    return CommandDurationProbe(command=[sys.executable, "-c", script], name=name)


def test_argv_appends_probe_arguments_and_target() -> None:
    probe = CommandDurationProbe(command=["npx", "remotion", "ffprobe"])

    assert probe.argv("/tmp/a.mp4") == ["npx", "remotion", "ffprobe", *PROBE_ARGS, "/tmp/a.mp4"]


@pytest.mark.asyncio
async def test_command_probe_returns_stdout() -> None:
    probe = _python_probe("print('12.500000')")

    assert await probe.probe("/tmp/a.mp4") == "12.500000"


@pytest.mark.asyncio
async def test_command_probe_receives_target_last() -> None:
    probe = _python_probe("import sys; print(sys.argv[-1])")

    assert await probe.probe("/tmp/clip.mp4") == "/tmp/clip.mp4"


@pytest.mark.asyncio
async def test_missing_binary_is_launch_error() -> None:
    probe = CommandDurationProbe(command=[MISSING_BINARY], name="primary")

    with pytest.raises(ProbeLaunchError, match="primary"):
        await probe.probe("/tmp/a.mp4")


@pytest.mark.asyncio
async def test_silent_non_zero_exit_is_launch_error() -> None:
    probe = _python_probe("import sys; sys.stderr.write('not installed'); sys.exit(3)")

    with pytest.raises(ProbeLaunchError, match="status 3"):
        await probe.probe("/tmp/a.mp4")


@pytest.mark.asyncio
async def test_timeout_is_launch_error() -> None:
    probe = CommandDurationProbe(
        command=[sys.executable, "-c", "import time; time.sleep(10)"],
        timeout_seconds=0.2,
    )

    with pytest.raises(ProbeLaunchError, match="timed out"):
        await probe.probe("/tmp/a.mp4")


@pytest.mark.asyncio
async def test_fallback_used_when_primary_cannot_launch() -> None:
    primary = FakeProbe(launch_error=True, name="primary")
    fallback = FakeProbe(default="4.2", name="fallback")
    probe = FallbackDurationProbe(strategies=[primary, fallback])

    assert await probe.probe("/tmp/a.mp4") == "4.2"
    assert primary.calls == ["/tmp/a.mp4"]
    assert fallback.calls == ["/tmp/a.mp4"]


@pytest.mark.asyncio
async def test_fallback_not_used_when_primary_answers() -> None:
    primary = FakeProbe(default="N/A", name="primary")
    fallback = FakeProbe(default="4.2", name="fallback")

    assert await FallbackDurationProbe(strategies=[primary, fallback]).probe("/tmp/a.mp4") == "N/A"
    assert fallback.calls == []


@pytest.mark.asyncio
async def test_all_strategies_failing_reports_each() -> None:
    probe = FallbackDurationProbe(
        strategies=[FakeProbe(launch_error=True, name="primary"), FakeProbe(launch_error=True, name="fallback")]
    )

    with pytest.raises(ProbeLaunchError) as excinfo:
        await probe.probe("/tmp/a.mp4")

    assert "primary" in str(excinfo.value)
    assert "fallback" in str(excinfo.value)


@pytest.mark.asyncio
async def test_build_probe_falls_back_to_second_command() -> None:
    probe = build_probe([MISSING_BINARY], [sys.executable, "-c", "print('9.75')"])

    assert await probe.probe("/tmp/a.mp4") == "9.75"


@pytest.mark.asyncio
async def test_empty_strategy_list_is_launch_error() -> None:
    with pytest.raises(ProbeLaunchError):
        await build_probe([], []).probe("/tmp/a.mp4")
