"""Shared utilities and configuration."""

from econ_timeline.shared.config import Config
from econ_timeline.shared.utils import setup_logger, to_utc

__all__ = ["Config", "setup_logger", "to_utc"]
