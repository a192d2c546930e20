"""Configuration objects and helpers for the analyzer.

The analyzer reads a snapshot of :class:`~dsoanalysis.config.runtime.AnalysisConfig`
at the start of every pass: channel count, per-channel enable flags and
trigger levels, math-channel mode, trigger slope, spectrum window and the
reference/limit levels of the dB scale. Settings can be built in code or
loaded from a YAML descriptor with :func:`load_config`.
"""

from .runtime import (
    AnalysisConfig,
    ChannelSettings,
    ConfigurationError,
    config_from_mapping,
    load_config,
)

__all__ = [
    "AnalysisConfig",
    "ChannelSettings",
    "ConfigurationError",
    "config_from_mapping",
    "load_config",
]
