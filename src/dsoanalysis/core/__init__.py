"""Analysis engine: per-channel buffers and the pass orchestrator.

:mod:`channel_store` owns the time- and frequency-domain buffers of every
channel, and :mod:`analyzer` runs one analysis pass at a time on a worker
thread, dropping captures that arrive while a pass is in flight.
"""

from .analyzer import AnalysisReport, DataAnalyzer, PendingCapture
from .channel_store import ChannelAnalysis, ChannelBufferStore, SampleBuffer

__all__ = [
    "AnalysisReport",
    "ChannelAnalysis",
    "ChannelBufferStore",
    "DataAnalyzer",
    "PendingCapture",
    "SampleBuffer",
]
