from __future__ import annotations

import math

import numpy as np
import pytest
from scipy.signal import windows as sp_windows

from dsoanalysis.analysis.windows import WindowCache, WindowFunction, window
from dsoanalysis.errors import ConfigurationError


@pytest.mark.parametrize("kind", list(WindowFunction))
@pytest.mark.parametrize("length", [2, 3, 16, 257])
def test_window_has_requested_length_and_is_deterministic(kind: WindowFunction, length: int) -> None:
    first = window(kind, length)
    second = window(kind, length)
    assert first.shape == (length,)
    assert first.dtype == np.float64
    assert np.all(np.isfinite(first))
    np.testing.assert_array_equal(first, second)


@pytest.mark.parametrize("kind", list(WindowFunction))
def test_single_sample_window_is_rectangular(kind: WindowFunction) -> None:
    np.testing.assert_array_equal(window(kind, 1), [1.0])


def test_empty_window() -> None:
    assert window(WindowFunction.HANN, 0).size == 0


def test_negative_length_is_rejected() -> None:
    with pytest.raises(ValueError):
        window(WindowFunction.HANN, -1)


@pytest.mark.parametrize("length", [1, 5, 1024])
def test_rectangular_window_is_all_ones(length: int) -> None:
    np.testing.assert_array_equal(window(WindowFunction.RECTANGULAR, length), np.ones(length))


@pytest.mark.parametrize(
    ("kind", "reference"),
    [
        (WindowFunction.HAMMING, np.hamming),
        (WindowFunction.HANN, np.hanning),
        (WindowFunction.BLACKMAN, np.blackman),
        (WindowFunction.BARTLETT, np.bartlett),
        (WindowFunction.BLACKMAN_HARRIS, sp_windows.blackmanharris),
        # scipy's "nuttall" uses the Blackman-Nuttall coefficients.
        (WindowFunction.BLACKMAN_NUTTALL, sp_windows.nuttall),
    ],
)
def test_window_matches_reference_implementation(kind: WindowFunction, reference) -> None:
    for length in (8, 33, 512):
        np.testing.assert_allclose(window(kind, length), reference(length), atol=1e-12)


def test_symmetric_window_shapes() -> None:
    length = 101  # odd, so the centre sample sits at end / 2
    centre = length // 2

    cosine = window(WindowFunction.COSINE, length)
    assert cosine[0] == pytest.approx(0.0, abs=1e-12)
    assert cosine[centre] == pytest.approx(1.0)

    lanczos = window(WindowFunction.LANCZOS, length)
    assert lanczos[0] == pytest.approx(0.0, abs=1e-12)
    assert lanczos[-1] == pytest.approx(0.0, abs=1e-12)
    assert lanczos[centre] == 1.0

    gauss = window(WindowFunction.GAUSS, length)
    assert gauss[centre] == pytest.approx(1.0)
    assert gauss[0] == pytest.approx(math.exp(-0.5 / 0.4**2))

    triangular = window(WindowFunction.TRIANGULAR, length)
    assert triangular[centre] == pytest.approx(1.0)
    assert triangular[0] == pytest.approx(1.0 / length)

    bartlett_hann = window(WindowFunction.BARTLETT_HANN, length)
    assert bartlett_hann[0] == pytest.approx(0.0, abs=1e-12)
    assert bartlett_hann[centre] == pytest.approx(1.0)

    flat_top = window(WindowFunction.FLAT_TOP, length)
    assert flat_top[centre] == pytest.approx(1.0 + 1.93 + 1.29 + 0.388 + 0.032)
    assert flat_top[0] == pytest.approx(1.0 - 1.93 + 1.29 - 0.388 + 0.032)

    nuttall = window(WindowFunction.NUTTALL, length)
    assert nuttall[0] == pytest.approx(0.355768 - 0.487396 + 0.144232 - 0.012604)
    np.testing.assert_allclose(nuttall, nuttall[::-1], atol=1e-12)


def test_parse_window_names() -> None:
    assert WindowFunction.parse("Blackman_Harris") is WindowFunction.BLACKMAN_HARRIS
    assert WindowFunction.parse("flattop") is WindowFunction.FLAT_TOP
    assert WindowFunction.parse(None) is WindowFunction.RECTANGULAR
    assert WindowFunction.parse(WindowFunction.HANN) is WindowFunction.HANN
    with pytest.raises(ConfigurationError):
        WindowFunction.parse("kaiser")


def test_window_cache_reuses_coefficients_for_same_key() -> None:
    cache = WindowCache()
    first = cache.coefficients(WindowFunction.HANN, 64)
    assert cache.coefficients(WindowFunction.HANN, 64) is first
    assert cache.kind is WindowFunction.HANN
    assert cache.length == 64


def test_window_cache_recomputes_when_kind_or_length_changes() -> None:
    cache = WindowCache()
    hann = cache.coefficients(WindowFunction.HANN, 64)

    longer = cache.coefficients(WindowFunction.HANN, 128)
    assert longer is not hann
    assert longer.size == 128

    hamming = cache.coefficients(WindowFunction.HAMMING, 128)
    assert hamming is not longer
    np.testing.assert_array_equal(hamming, window(WindowFunction.HAMMING, 128))

    cache.clear()
    assert cache.kind is None
    assert cache.length == 0
