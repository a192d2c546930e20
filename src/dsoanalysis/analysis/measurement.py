"""Trigger-based peak-to-peak amplitude and frequency measurement."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np
from numpy.typing import ArrayLike

from ..errors import ConfigurationError


class TriggerSlope(Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"

    @classmethod
    def parse(cls, value: "TriggerSlope | str | None") -> "TriggerSlope":
        if value is None:
            return cls.POSITIVE
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key in {"rising", "rise", "up", "+"}:
            key = "positive"
        elif key in {"falling", "fall", "down", "-"}:
            key = "negative"
        try:
            return cls(key)
        except ValueError:
            raise ConfigurationError(f"Unknown trigger slope: {value!r}") from None


@dataclass(frozen=True)
class Measurement:
    """Result of :func:`measure`."""

    amplitude: float
    frequency: float
    cycles: int = 0


def measure(
    samples: ArrayLike,
    interval: float,
    trigger_level: float,
    slope: TriggerSlope | str = TriggerSlope.POSITIVE,
) -> Measurement:
    """
    Measure peak-to-peak amplitude and fundamental frequency of a capture.

    Every crossing of ``trigger_level`` in the direction of ``slope`` is a
    counted edge. Between two consecutive counted edges the swing
    ``max - min`` is recorded; crossings in the other direction belong to the
    same cycle and their samples are not part of the swing. With ``k`` full
    cycles between the first and last counted edge the result is

    - ``amplitude``: mean swing over the ``k`` cycles,
    - ``frequency``: ``k / (last - first) / interval``.

    When fewer than two counted edges exist the amplitude falls back to the
    swing of the whole buffer and the frequency is ``0``.

    Parameters
    ----------
    samples:
        1-D time-domain samples. Empty input measures as ``0``/``0``.
    interval:
        Sampling interval in seconds.
    trigger_level:
        Voltage the signal has to cross.
    slope:
        Direction of the counted crossings.
    """
    slope = TriggerSlope.parse(slope)
    arr = np.asarray(samples, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"samples must be 1-D, got shape {arr.shape}")
    if arr.size == 0:
        return Measurement(amplitude=0.0, frequency=0.0)

    above = arr > trigger_level
    crossing = np.zeros(arr.size, dtype=bool)
    crossing[1:] = above[1:] != above[:-1]
    rising = slope is TriggerSlope.POSITIVE
    edges = np.flatnonzero(crossing & (above == rising))

    cycles = int(edges.size) - 1
    if cycles < 1:
        return Measurement(amplitude=float(np.ptp(arr)), frequency=0.0)

    # Opposite-direction crossings are left out of the swing tracking.
    tracked = ~(crossing & (above != rising))
    total = 0.0
    for start, stop in zip(edges[:-1], edges[1:]):
        segment = arr[start:stop][tracked[start:stop]]
        total += float(segment.max() - segment.min())

    span = int(edges[-1] - edges[0])
    frequency = 0.0
    if span > 0 and interval > 0:
        frequency = cycles / span / float(interval)
    return Measurement(amplitude=total / cycles, frequency=frequency, cycles=cycles)
