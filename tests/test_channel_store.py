from __future__ import annotations

import numpy as np
import pytest

from dsoanalysis.core.channel_store import ChannelAnalysis, ChannelBufferStore, SampleBuffer


def test_new_buffer_is_empty() -> None:
    buf = SampleBuffer()
    assert buf.count == 0
    assert buf.interval == 0.0
    assert not buf.allocated


def test_resize_to_same_count_keeps_allocation_and_contents() -> None:
    buf = SampleBuffer()
    assert buf.resize(8) is True
    buf.samples[:] = np.arange(8)
    array = buf.samples

    assert buf.resize(8) is False
    assert buf.samples is array
    np.testing.assert_array_equal(buf.samples, np.arange(8))


def test_resize_to_new_count_discards_contents() -> None:
    buf = SampleBuffer()
    buf.resize(4)
    buf.samples[:] = 7.0

    assert buf.resize(6) is True
    assert buf.count == 6
    np.testing.assert_array_equal(buf.samples, np.zeros(6))


def test_resize_rejects_negative_count() -> None:
    with pytest.raises(ValueError):
        SampleBuffer().resize(-1)


def test_release_clears_samples_and_interval() -> None:
    buf = SampleBuffer(interval=1e-6)
    buf.resize(16)
    buf.release()
    assert buf.samples is None
    assert buf.count == 0
    assert buf.interval == 0.0


def test_adapt_grows_with_zeroed_entries() -> None:
    store = ChannelBufferStore()
    store.adapt(3)

    assert len(store) == 3
    for entry in store:
        assert entry.time_domain.count == 0
        assert entry.freq_domain.count == 0
        assert entry.amplitude == 0.0
        assert entry.frequency == 0.0


def test_adapt_shrinks_from_the_end_and_releases_buffers() -> None:
    store = ChannelBufferStore()
    store.adapt(3)
    first = store[0]
    last = store[2]
    last.time_domain.resize(10)
    last.freq_domain.resize(5)

    store.adapt(2)

    assert len(store) == 2
    assert store[0] is first
    assert last.time_domain.samples is None
    assert last.freq_domain.samples is None


def test_get_returns_none_out_of_range() -> None:
    store = ChannelBufferStore()
    store.adapt(2)
    assert store.get(1) is store[1]
    assert store.get(2) is None
    assert store.get(-1) is None


def test_release_all_empties_store() -> None:
    store = ChannelBufferStore()
    store.adapt(2)
    store[0].time_domain.resize(4)
    store.release_all()
    assert len(store) == 0


def test_spectrum_frequencies_follow_bin_interval() -> None:
    entry = ChannelAnalysis()
    entry.freq_domain.resize(4)
    entry.freq_domain.interval = 250.0
    np.testing.assert_array_equal(entry.spectrum_frequencies(), [0.0, 250.0, 500.0, 750.0])
