"""Window functions applied to a capture before the spectral transform."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

import numpy as np

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

GAUSS_SIGMA = 0.4
BLACKMAN_ALPHA = 0.16


class WindowFunction(Enum):
    """Supported spectrum windows."""

    RECTANGULAR = "rectangular"
    HAMMING = "hamming"
    HANN = "hann"
    COSINE = "cosine"
    LANCZOS = "lanczos"
    BARTLETT = "bartlett"
    TRIANGULAR = "triangular"
    GAUSS = "gauss"
    BARTLETT_HANN = "bartlett-hann"
    BLACKMAN = "blackman"
    NUTTALL = "nuttall"
    BLACKMAN_HARRIS = "blackman-harris"
    BLACKMAN_NUTTALL = "blackman-nuttall"
    FLAT_TOP = "flat-top"

    @classmethod
    def parse(cls, value: "WindowFunction | str | None") -> "WindowFunction":
        """Resolve ``value`` to a member; ``None`` selects the rectangular window.

        Names are matched case-insensitively and ``_``/spaces are accepted in
        place of ``-`` (``"Blackman_Harris"`` -> :attr:`BLACKMAN_HARRIS`).
        """
        if value is None:
            return cls.RECTANGULAR
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("_", "-").replace(" ", "-")
        if key in {"flattop"}:
            key = "flat-top"
        elif key in {"hanning"}:
            key = "hann"
        try:
            return cls(key)
        except ValueError:
            raise ConfigurationError(f"Unknown window function: {value!r}") from None


def _cosine_sum(phase: np.ndarray, *coefficients: float) -> np.ndarray:
    """Evaluate ``a0 - a1 cos(x) + a2 cos(2x) - a3 cos(3x) ...`` for ``x = phase``."""
    out = np.full(phase.shape, coefficients[0], dtype=np.float64)
    sign = -1.0
    for order, coeff in enumerate(coefficients[1:], start=1):
        out += sign * coeff * np.cos(order * phase)
        sign = -sign
    return out


def window(kind: WindowFunction | str, length: int) -> np.ndarray:
    """
    Return ``length`` window coefficients of the given ``kind``.

    Parameters
    ----------
    kind:
        Window function (member or name accepted by :meth:`WindowFunction.parse`).
    length:
        Number of coefficients. ``0`` yields an empty array; ``1`` yields
        ``[1.0]`` for every kind since the formulas divide by ``length - 1``.

    Returns
    -------
    np.ndarray
        ``float64`` coefficients, identical for identical arguments.
    """
    kind = WindowFunction.parse(kind)
    length = int(length)
    if length < 0:
        raise ValueError(f"length must be >= 0, got {length}")
    if length == 0:
        return np.empty(0, dtype=np.float64)
    if length == 1 or kind is WindowFunction.RECTANGULAR:
        return np.ones(length, dtype=np.float64)

    end = float(length - 1)
    position = np.arange(length, dtype=np.float64)
    phase = 2.0 * np.pi * position / end

    if kind is WindowFunction.HAMMING:
        return _cosine_sum(phase, 0.54, 0.46)
    if kind is WindowFunction.HANN:
        return 0.5 * (1.0 - np.cos(phase))
    if kind is WindowFunction.COSINE:
        return np.sin(np.pi * position / end)
    if kind is WindowFunction.LANCZOS:
        # np.sinc is the normalised sinc, sin(pi x) / (pi x), with sinc(0) = 1.
        return np.sinc(2.0 * position / end - 1.0)
    if kind is WindowFunction.BARTLETT:
        return 2.0 / end * (end / 2.0 - np.abs(position - end / 2.0))
    if kind is WindowFunction.TRIANGULAR:
        return 2.0 / length * (length / 2.0 - np.abs(position - end / 2.0))
    if kind is WindowFunction.GAUSS:
        return np.exp(-0.5 * ((position - end / 2.0) / (GAUSS_SIGMA * end / 2.0)) ** 2)
    if kind is WindowFunction.BARTLETT_HANN:
        return 0.62 - 0.48 * np.abs(position / end - 0.5) - 0.38 * np.cos(phase)
    if kind is WindowFunction.BLACKMAN:
        return _cosine_sum(phase, (1.0 - BLACKMAN_ALPHA) / 2.0, 0.5, BLACKMAN_ALPHA / 2.0)
    if kind is WindowFunction.NUTTALL:
        return _cosine_sum(phase, 0.355768, 0.487396, 0.144232, 0.012604)
    if kind is WindowFunction.BLACKMAN_HARRIS:
        return _cosine_sum(phase, 0.35875, 0.48829, 0.14128, 0.01168)
    if kind is WindowFunction.BLACKMAN_NUTTALL:
        return _cosine_sum(phase, 0.3635819, 0.4891775, 0.1365995, 0.0106411)
    if kind is WindowFunction.FLAT_TOP:
        return _cosine_sum(phase, 1.0, 1.93, 1.29, 0.388, 0.032)
    raise ValueError(f"Unhandled window function: {kind}")  # pragma: no cover


class WindowCache:
    """
    Coefficients for the most recent ``(kind, length)`` pair.

    Owned by one analyzer and written only by its running pass. A lookup with
    an unchanged key returns the same array object; any change of kind or
    length drops the old coefficients and computes new ones.
    """

    __slots__ = ("_kind", "_length", "_coefficients")

    def __init__(self) -> None:
        self._kind: Optional[WindowFunction] = None
        self._length = 0
        self._coefficients: Optional[np.ndarray] = None

    @property
    def kind(self) -> Optional[WindowFunction]:
        return self._kind

    @property
    def length(self) -> int:
        return self._length

    def coefficients(self, kind: WindowFunction | str, length: int) -> np.ndarray:
        """Return cached coefficients, recomputing them when the key changed."""
        kind = WindowFunction.parse(kind)
        if self._coefficients is None or kind is not self._kind or length != self._length:
            logger.debug("Computing %s window for %d samples", kind.value, length)
            # release before allocating the new length
            self._coefficients = None
            self._coefficients = window(kind, length)
            self._kind = kind
            self._length = int(length)
        return self._coefficients

    def clear(self) -> None:
        self._kind = None
        self._length = 0
        self._coefficients = None
