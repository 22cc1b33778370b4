from __future__ import annotations


class ConfigurationError(ValueError):
    """Contradictory or underspecified layout parameters, fixable by the caller."""
