"""Render job orchestration: validation, job lifecycle and HTTP routes."""
