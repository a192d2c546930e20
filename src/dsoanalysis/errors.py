"""Exception types shared across the analyzer."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised for unsupported or missing analyzer settings.

    Examples are an unknown spectrum window name, an unknown trigger slope,
    or a math channel that is enabled without a combination mode.
    """
