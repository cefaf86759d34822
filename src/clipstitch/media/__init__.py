"""Temporary media handling: artifact tracking, downloads and stale sweeps."""
