"""Per-channel sample buffers for analysed data."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SampleBuffer:
    """
    Equally spaced samples plus their spacing.

    ``interval`` is seconds per sample for time-domain data and Hz per bin for
    spectra. :meth:`resize` is destructive: a new length replaces the array
    and drops its contents, an unchanged length keeps array and contents.
    """

    samples: Optional[np.ndarray] = None
    interval: float = 0.0

    @property
    def count(self) -> int:
        return 0 if self.samples is None else int(self.samples.size)

    @property
    def allocated(self) -> bool:
        return self.samples is not None

    def resize(self, count: int) -> bool:
        """Ensure room for exactly ``count`` samples; return True if reallocated."""
        count = int(count)
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        if count == self.count:
            return False
        self.samples = None
        self.samples = np.zeros(count, dtype=np.float64)
        return True

    def release(self) -> None:
        """Free the samples and reset the interval."""
        self.samples = None
        self.interval = 0.0


@dataclass(slots=True)
class ChannelAnalysis:
    """Analysed data of one channel."""

    time_domain: SampleBuffer = field(default_factory=SampleBuffer)
    freq_domain: SampleBuffer = field(default_factory=SampleBuffer)
    amplitude: float = 0.0
    frequency: float = 0.0

    def spectrum_frequencies(self) -> np.ndarray:
        """Frequency in Hz of every spectrum bin."""
        return np.arange(self.freq_domain.count, dtype=np.float64) * self.freq_domain.interval

    def release(self) -> None:
        self.time_domain.release()
        self.freq_domain.release()


class ChannelBufferStore:
    """Ordered list of :class:`ChannelAnalysis`, physical channels first.

    The store does no locking of its own; the analyzer guards it.
    """

    def __init__(self) -> None:
        self._channels: List[ChannelAnalysis] = []

    def adapt(self, count: int) -> None:
        """Grow with zeroed entries or shrink from the end to ``count`` channels."""
        count = max(0, int(count))
        while len(self._channels) < count:
            self._channels.append(ChannelAnalysis())
        while len(self._channels) > count:
            removed = self._channels.pop()
            removed.release()
        logger.debug("Channel store holds %d channels", len(self._channels))

    def get(self, channel: int) -> Optional[ChannelAnalysis]:
        if channel < 0 or channel >= len(self._channels):
            return None
        return self._channels[channel]

    def snapshot(self) -> tuple[ChannelAnalysis, ...]:
        return tuple(self._channels)

    def release_all(self) -> None:
        for entry in self._channels:
            entry.release()
        self._channels.clear()

    def __getitem__(self, channel: int) -> ChannelAnalysis:
        return self._channels[channel]

    def __len__(self) -> int:
        return len(self._channels)

    def __iter__(self) -> Iterator[ChannelAnalysis]:
        return iter(self._channels)
