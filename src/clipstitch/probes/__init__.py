"""Duration probing strategies and the metadata resolver built on them."""

from .duration_probe import CommandDurationProbe, DurationProbe, FallbackDurationProbe, build_probe
from .metadata_resolver import MetadataResolver, parse_duration_seconds

__all__ = [
    "CommandDurationProbe",
    "DurationProbe",
    "FallbackDurationProbe",
    "MetadataResolver",
    "build_probe",
    "parse_duration_seconds",
]
