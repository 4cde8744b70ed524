"""
rvp - Remote Value Parser.

Extracts named values from static web pages with CSS selectors.

Architecture:
- core/: Stable foundation (models, normalizer, resolver, selectors, extraction, HTTP)
- config/: TOML/JSON configuration files
- orchestrator: Concurrent batch execution with ordered results
- output: Table and JSON rendering
- builder: Interactive config creation
"""

__version__ = "0.2.0"
__all__ = ["__version__"]
