"""Shared helpers for the GST portal observability core."""

from gp_common.api import configure_logging

__all__ = ["configure_logging"]
