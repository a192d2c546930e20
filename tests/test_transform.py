from __future__ import annotations

import numpy as np
import pytest

from dsoanalysis.analysis.transform import HalfComplexTransform


def _expected_half_complex(values: np.ndarray) -> np.ndarray:
    n = values.size
    spectrum = np.fft.fft(values)
    out = np.empty(n)
    for k in range(n // 2 + 1):
        out[k] = spectrum[k].real
    for k in range(1, (n + 1) // 2):
        out[n - k] = spectrum[k].imag
    return out


@pytest.mark.parametrize("length", [1, 2, 7, 8, 1024])
def test_half_complex_layout(length: int) -> None:
    rng = np.random.default_rng(1234)
    values = rng.standard_normal(length)

    result = HalfComplexTransform()(values)

    assert result.shape == (length,)
    np.testing.assert_allclose(result, _expected_half_complex(values), atol=1e-9)


def test_plan_is_reused_until_length_changes() -> None:
    transform = HalfComplexTransform()
    assert transform.plan_length == 0

    plan = transform.plan(16)
    first = transform(np.ones(16))
    assert transform.plan(16) is plan
    assert transform(np.zeros(16)) is first
    assert transform.plan_length == 16

    transform(np.ones(32))
    assert transform.plan_length == 32
    assert transform.plan(32) is not plan

    transform.clear()
    assert transform.plan_length == 0


def test_constant_input_has_only_dc() -> None:
    result = HalfComplexTransform()(np.full(8, 2.0))
    assert result[0] == pytest.approx(16.0)
    np.testing.assert_allclose(result[1:], 0.0, atol=1e-12)


def test_invalid_input_is_rejected() -> None:
    transform = HalfComplexTransform()
    with pytest.raises(ValueError):
        transform(np.empty(0))
    with pytest.raises(ValueError):
        transform(np.ones((2, 2)))
