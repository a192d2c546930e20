"""Math channel derived element-wise from two physical channels."""

from __future__ import annotations

from enum import Enum
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike

from ..errors import ConfigurationError


class MathMode(Enum):
    ADD = "A+B"
    SUBTRACT = "A-B"
    REVERSE_SUBTRACT = "B-A"

    @classmethod
    def parse(cls, value: "MathMode | str | None") -> Optional["MathMode"]:
        """Resolve ``value``; ``None`` means no mode has been selected."""
        if value is None or isinstance(value, cls):
            return value
        key = str(value).strip().upper().replace(" ", "")
        key = key.replace("CH1", "A").replace("CH2", "B").replace("−", "-")
        aliases = {"ADD": "A+B", "SUB": "A-B", "SUBTRACT": "A-B", "RSUB": "B-A"}
        key = aliases.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ConfigurationError(f"Unknown math mode: {value!r}") from None


def derive(
    mode: Optional[MathMode],
    first: ArrayLike,
    second: ArrayLike,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Combine two channel buffers sample by sample.

    Parameters
    ----------
    mode:
        Combination rule (``A`` is ``first``, ``B`` is ``second``).
    first, second:
        Equal-length 1-D sample arrays.
    out:
        Optional destination with the same length; allocated when omitted.

    Raises
    ------
    ConfigurationError
        If ``mode`` is not a :class:`MathMode` (unset or unsupported).
    ValueError
        If the input lengths differ.
    """
    if not isinstance(mode, MathMode):
        raise ConfigurationError(f"Math channel mode is not configured: {mode!r}")
    a = np.asarray(first, dtype=np.float64)
    b = np.asarray(second, dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(f"math inputs differ in length: {a.shape} vs {b.shape}")
    if mode is MathMode.ADD:
        return np.add(a, b, out=out)
    if mode is MathMode.SUBTRACT:
        return np.subtract(a, b, out=out)
    return np.subtract(b, a, out=out)
