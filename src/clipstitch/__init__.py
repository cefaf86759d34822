"""clipstitch: render a list of trimmed source clips into one video file."""

__version__ = "0.1.0"

__all__ = ["__version__"]
