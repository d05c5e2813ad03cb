"""Core config-domain exports."""

from triptrack.core.config.loader import load_config, write_config

__all__ = ["load_config", "write_config"]
