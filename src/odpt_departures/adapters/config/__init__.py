"""Configuration adapters."""

from odpt_departures.adapters.config.app_config import AppConfig

__all__ = ["AppConfig"]
