"""External renderer integration."""

from .bundle_cache import BundleCache
from .renderer_base import BundleHandle, CompositionDescriptor, CompositionRenderer
from .render_executor import RenderExecutor

__all__ = [
    "BundleCache",
    "BundleHandle",
    "CompositionDescriptor",
    "CompositionRenderer",
    "RenderExecutor",
]
