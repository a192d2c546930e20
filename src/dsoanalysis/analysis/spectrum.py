"""Windowed, dB-scaled magnitude spectrum of a channel."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike

from .transform import HalfComplexTransform
from .windows import WindowCache, WindowFunction

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..core.channel_store import SampleBuffer

# Full-scale offset of the dB scale before the reference level is applied.
FULL_SCALE_DB = 60.0


def decibel_scale(
    raw: ArrayLike,
    bin_count: int,
    reference_db: float,
    limit_db: float,
) -> np.ndarray:
    """
    Convert raw transform values to dB relative to ``reference_db``.

    Each value becomes ``20 log10(|raw|) + offset`` with
    ``offset = 60 - reference_db - 20 log10(sqrt(bin_count))``. Results below
    ``limit_db - reference_db`` are raised to that floor (silent bins
    included, which would otherwise be ``-inf``).
    """
    values = np.abs(np.asarray(raw, dtype=np.float64))
    if bin_count <= 0:
        return np.empty(0, dtype=np.float64)
    offset = FULL_SCALE_DB - reference_db - 20.0 * math.log10(math.sqrt(bin_count))
    floor = limit_db - reference_db
    with np.errstate(divide="ignore"):
        scaled = 20.0 * np.log10(values) + offset
    return np.maximum(scaled, floor, out=scaled)


def compute_spectrum(
    time_domain: "SampleBuffer",
    freq_domain: "SampleBuffer",
    kind: WindowFunction,
    reference_db: float,
    limit_db: float,
    windows: WindowCache,
    transform: HalfComplexTransform,
) -> None:
    """
    Fill ``freq_domain`` with the spectrum of ``time_domain``.

    ``freq_domain`` ends up with ``n // 2`` bins spaced
    ``1 / (interval * n)`` Hz apart, ``n`` being the time-domain count. The
    transform itself runs over all ``n`` samples in the plan's scratch
    buffer; only the leading ``n // 2`` half-complex values are kept.
    """
    samples = time_domain.samples
    if samples is None or samples.size == 0:
        raise ValueError("time-domain buffer is empty")
    count = int(samples.size)

    coefficients = windows.coefficients(kind, count)
    if time_domain.interval > 0:
        freq_domain.interval = 1.0 / (time_domain.interval * count)
    else:
        freq_domain.interval = 0.0
    freq_domain.resize(count // 2)

    windowed = coefficients * samples
    half_complex = transform(windowed)
    bins = freq_domain.count
    if bins == 0:
        return
    freq_domain.samples[:] = decibel_scale(half_complex[:bins], bins, reference_db, limit_db)
