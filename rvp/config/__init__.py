"""
Configuration module for extraction configs.

Provides:
- TOML/JSON config loading with validation
- Environment variable substitution
- Saving configs back to disk
"""

from .loader import ConfigLoader, load_config, dumps, loads

__all__ = ["ConfigLoader", "load_config", "dumps", "loads"]
