"""Oscilloscope capture analysis: measurements, math channel and spectra.

The :class:`~dsoanalysis.core.analyzer.DataAnalyzer` accepts raw captures from
an acquisition layer, derives per-channel peak-to-peak amplitude, frequency
and a windowed dB spectrum, and exposes the results to a renderer behind a
lock.
"""

from .config import AnalysisConfig, ChannelSettings, ConfigurationError, load_config
from .core import ChannelAnalysis, DataAnalyzer

__all__ = [
    "AnalysisConfig",
    "ChannelAnalysis",
    "ChannelSettings",
    "ConfigurationError",
    "DataAnalyzer",
    "load_config",
]
