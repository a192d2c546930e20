"""Real-to-half-complex discrete Fourier transform."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike
from scipy import fft as sp_fft

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TransformPlan:
    """Length-specific state reused while consecutive inputs keep their size."""

    length: int
    output: np.ndarray = field(init=False, repr=False)
    _imag_stop: int = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.output = np.empty(self.length, dtype=np.float64)
        # Imaginary parts i1 .. i((n+1)/2 - 1) fill the tail in reverse order.
        self._imag_stop = (self.length + 1) // 2

    def execute(self, values: np.ndarray) -> np.ndarray:
        spectrum = sp_fft.rfft(values)
        half = self.length // 2
        self.output[: half + 1] = spectrum.real[: half + 1]
        self.output[half + 1 :] = spectrum.imag[1 : self._imag_stop][::-1]
        return self.output


class HalfComplexTransform:
    """
    Compute the half-complex spectrum of real input.

    For ``n`` input samples the output holds ``n`` reals laid out as
    ``r0, r1, ..., r(n/2), i((n+1)/2 - 1), ..., i2, i1`` where ``rk``/``ik``
    are the real/imaginary parts of frequency bin ``k``. The adapter keeps a
    single :class:`TransformPlan` for the last length it saw and replaces it
    when the length changes.
    """

    def __init__(self) -> None:
        self._plan: Optional[TransformPlan] = None

    @property
    def plan_length(self) -> int:
        """Length of the cached plan (``0`` when none is cached)."""
        return 0 if self._plan is None else self._plan.length

    def plan(self, length: int) -> TransformPlan:
        if self._plan is None or self._plan.length != length:
            logger.debug("Creating transform plan for %d samples", length)
            self._plan = None
            self._plan = TransformPlan(int(length))
        return self._plan

    def __call__(self, values: ArrayLike) -> np.ndarray:
        """
        Transform ``values`` and return the half-complex sequence.

        The returned array is the plan's output buffer; it is overwritten by
        the next call with the same length.
        """
        arr = np.asarray(values, dtype=np.float64)
        if arr.ndim != 1:
            raise ValueError(f"values must be 1-D, got shape {arr.shape}")
        if arr.size == 0:
            raise ValueError("values must contain at least one sample")
        return self.plan(arr.size).execute(arr)

    def clear(self) -> None:
        self._plan = None
