"""Abstract duration probe and its subprocess-backed strategies."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field

from ..render.render_errors import ProbeLaunchError

logger = logging.getLogger(__name__)

PROBE_ARGS: tuple[str, ...] = (
    "-v",
    "error",
    "-show_entries",
    "format=duration",
    "-of",
    "default=noprint_wrappers=1:nokey=1",
)


class DurationProbe(ABC):
    """Capability returning the raw textual duration of a media source."""

    name: str = "probe"

    @abstractmethod
    async def probe(self, target: str) -> str:
        """Return the probe's stdout for ``target`` or raise ProbeLaunchError."""


@dataclass(slots=True)
class CommandDurationProbe(DurationProbe):
    """Run an ffprobe-compatible command as a subprocess."""

    command: Sequence[str]
    name: str = "command"
    timeout_seconds: float | None = None
    log: logging.Logger = field(default_factory=lambda: logger)

    def argv(self, target: str) -> list[str]:
        return [*self.command, *PROBE_ARGS, target]

    async def probe(self, target: str) -> str:
        argv = self.argv(target)
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ProbeLaunchError(f"{self.name}: cannot start {argv[0]}: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as exc:
            process.kill()
            await process.wait()
            raise ProbeLaunchError(
                f"{self.name}: timed out after {self.timeout_seconds}s"
            ) from exc

        output = stdout.decode(errors="ignore").strip()
        if process.returncode != 0 and not output:
            tail = stderr.decode(errors="ignore").strip()[-500:]
            raise ProbeLaunchError(
                f"{self.name}: exited with status {process.returncode}: {tail or 'no output'}"
            )
        return output


@dataclass(slots=True)
class FallbackDurationProbe(DurationProbe):
    """Try each strategy in order until one of them manages to run."""

    strategies: Sequence[DurationProbe]
    name: str = "fallback"
    log: logging.Logger = field(default_factory=lambda: logger)

    async def probe(self, target: str) -> str:
        if not self.strategies:
            raise ProbeLaunchError("no probe strategies configured")
        failures: list[str] = []
        for strategy in self.strategies:
            try:
                return await strategy.probe(target)
            except ProbeLaunchError as exc:
                failures.append(str(exc))
                self.log.warning(
                    "probe.strategy.failed",
                    extra={"strategy": strategy.name, "target": target, "error": str(exc)},
                )
        raise ProbeLaunchError("; ".join(failures))


def build_probe(
    primary: Sequence[str],
    fallback: Sequence[str],
    *,
    timeout_seconds: float | None = None,
) -> DurationProbe:
    """Compose the primary probe with its PATH-resolved fallback."""
    strategies: list[DurationProbe] = []
    if primary:
        strategies.append(
            CommandDurationProbe(command=list(primary), name="primary", timeout_seconds=timeout_seconds)
        )
    if fallback:
        strategies.append(
            CommandDurationProbe(command=list(fallback), name="fallback", timeout_seconds=timeout_seconds)
        )
    return FallbackDurationProbe(strategies=strategies)


__all__ = [
    "CommandDurationProbe",
    "DurationProbe",
    "FallbackDurationProbe",
    "PROBE_ARGS",
    "build_probe",
]
