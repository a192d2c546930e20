"""Analysis orchestrator: one pass at a time on a dedicated worker thread.

Typical use from an acquisition thread::

    analyzer = DataAnalyzer(config)
    future = analyzer.submit_capture(samples, counts, sample_rate, capture_lock)
    if future is None:
        ...  # a pass is still running; keep filling the same buffers

and from the renderer::

    with analyzer.current_snapshot() as channels:
        for entry in channels:
            draw(entry.time_domain.samples, entry.freq_domain.samples)
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Protocol, Sequence

import numpy as np

from ..analysis.math_channel import derive
from ..analysis.measurement import measure
from ..analysis.spectrum import compute_spectrum
from ..analysis.transform import HalfComplexTransform
from ..analysis.windows import WindowCache
from ..config.runtime import AnalysisConfig
from ..tools.debug import time_block
from .channel_store import ChannelAnalysis, ChannelBufferStore

logger = logging.getLogger(__name__)


class CaptureGuard(Protocol):
    """Lock-like object the acquisition layer uses to protect its raw buffers."""

    def acquire(self, *args: Any, **kwargs: Any) -> Any:  # pragma: no cover - protocol
        ...

    def release(self) -> None:  # pragma: no cover - protocol
        ...


@dataclass(slots=True)
class PendingCapture:
    """Raw data handed over by the acquisition layer for exactly one pass."""

    samples: Sequence[Optional[np.ndarray]]
    counts: Sequence[int]
    sample_rate: float
    guard: Optional[CaptureGuard] = None

    def release_guard(self) -> None:
        """Hand the raw buffers back to the acquisition layer (idempotent)."""
        guard, self.guard = self.guard, None
        if guard is not None:
            guard.release()


@dataclass(slots=True)
class AnalysisReport:
    """Outcome of one analysis pass."""

    channels: List[int] = field(default_factory=list)
    measured: List[int] = field(default_factory=list)
    spectra: List[int] = field(default_factory=list)
    errors: Dict[int, str] = field(default_factory=dict)
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class DataAnalyzer:
    """
    Turn raw captures into measurements and spectra for every channel.

    Only one pass runs at a time. :meth:`submit_capture` never blocks on a
    running pass: captures that arrive meanwhile are dropped and the call
    returns ``None``. A pass holds :attr:`guard` for its whole duration, so
    readers that take the same lock (see :meth:`current_snapshot`) never see
    half-updated buffers.

    Parameters
    ----------
    config:
        Initial settings; replaced later with :meth:`update_config`.
    thread_name:
        Name of the worker thread (aids debugging / profiling).
    """

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        *,
        thread_name: str = "dsoanalysis-analyzer",
    ) -> None:
        self._config = (config or AnalysisConfig()).sanitized()
        self._store = ChannelBufferStore()
        self._guard = threading.RLock()
        self._busy = threading.Lock()
        self._windows = WindowCache()
        self._transform = HalfComplexTransform()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=thread_name)
        self._alive = True

    # ------------------------------------------------------------------ state
    @property
    def config(self) -> AnalysisConfig:
        return self._config

    def update_config(self, config: AnalysisConfig) -> None:
        """Use ``config`` from the next pass on; a running pass keeps its snapshot."""
        self._config = config.sanitized()

    @property
    def guard(self) -> threading.RLock:
        """Lock protecting the analysed data."""
        return self._guard

    @property
    def is_running(self) -> bool:
        return self._busy.locked()

    # ------------------------------------------------------------------ input
    def submit_capture(
        self,
        samples: Sequence[Optional[np.ndarray]],
        counts: Sequence[int],
        sample_rate: float,
        release: Optional[CaptureGuard] = None,
    ) -> Optional[Future[AnalysisReport]]:
        """
        Start a pass over a new capture unless one is already running.

        Parameters
        ----------
        samples:
            One raw sample array per physical channel; ``None`` for channels
            without new data.
        counts:
            Number of valid samples in each entry of ``samples``.
        sample_rate:
            Samples per second. Must be > 0.
        release:
            Optional unlocked guard of the acquisition layer. It is acquired
            here when the pass is accepted and released by the pass as soon
            as the raw samples are copied.

        Returns
        -------
        Future or None
            Future resolving to the pass's :class:`AnalysisReport`, or
            ``None`` when the capture was dropped because a pass is running.
        """
        if not self._alive:
            raise RuntimeError("DataAnalyzer is shut down")
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be > 0, got {sample_rate}")
        if len(samples) != len(counts):
            raise ValueError(
                f"samples and counts differ in length: {len(samples)} vs {len(counts)}"
            )

        if not self._busy.acquire(blocking=False):
            logger.debug("Analysis pass still running; dropping capture")
            return None
        acquired = False
        try:
            if release is not None:
                release.acquire()
                acquired = True
            capture = PendingCapture(
                samples=list(samples),
                counts=[int(c) for c in counts],
                sample_rate=float(sample_rate),
                guard=release,
            )
            return self._executor.submit(self._run_pass, capture, self._config)
        except BaseException:
            if acquired:
                release.release()
            self._busy.release()
            raise

    # ----------------------------------------------------------------- output
    @contextmanager
    def current_snapshot(self) -> Iterator[tuple[ChannelAnalysis, ...]]:
        """Hold the data lock and yield the analysed channels."""
        with self._guard:
            yield self._store.snapshot()

    def channel(self, index: int) -> Optional[ChannelAnalysis]:
        """Return analysed data of ``index`` or ``None`` when out of range.

        Callers should hold :attr:`guard` while reading the entry.
        """
        return self._store.get(index)

    def __len__(self) -> int:
        return len(self._store)

    # -------------------------------------------------------------- lifecycle
    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker and free all buffers. Safe to call multiple times."""
        self._alive = False
        self._executor.shutdown(wait=wait)
        with self._guard:
            self._store.release_all()
            self._windows.clear()
            self._transform.clear()

    def __enter__(self) -> DataAnalyzer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    # ------------------------------------------------------------------- pass
    def _run_pass(self, capture: PendingCapture, config: AnalysisConfig) -> AnalysisReport:
        report = AnalysisReport()
        try:
            with self._guard:
                try:
                    with time_block("time-domain", timings=report.timings):
                        self._store.adapt(config.channel_count)
                        for channel in range(len(self._store)):
                            self._isolate(
                                report, channel, self._populate, channel, capture, config, report
                            )
                finally:
                    capture.release_guard()

                # Measurements and spectra do not need the raw buffers any more.
                with time_block("measurement/spectrum", timings=report.timings):
                    for channel in range(len(self._store)):
                        self._isolate(report, channel, self._measure, channel, config, report)
                    for channel in range(len(self._store)):
                        self._isolate(report, channel, self._spectrum, channel, config, report)
            return report
        except Exception:
            logger.exception("Analysis pass failed")
            raise
        finally:
            self._busy.release()

    def _isolate(self, report: AnalysisReport, channel: int, step: Any, *args: Any) -> None:
        try:
            step(*args)
        except Exception as exc:
            logger.warning("Channel %d analysis failed: %s", channel, exc)
            report.errors.setdefault(channel, str(exc))
            entry = self._store[channel]
            entry.release()
            entry.amplitude = 0.0
            entry.frequency = 0.0

    def _populate(
        self,
        channel: int,
        capture: PendingCapture,
        config: AnalysisConfig,
        report: AnalysisReport,
    ) -> None:
        entry = self._store[channel]
        time_domain = entry.time_domain

        if channel < config.physical_channels:
            raw = capture.samples[channel] if channel < len(capture.samples) else None
            count = capture.counts[channel] if raw is not None else 0
            if count <= 0:
                self._clear(channel)
                return
            data = np.asarray(raw, dtype=np.float64).reshape(-1)
            if data.size < count:
                raise ValueError(f"capture holds {data.size} samples, {count} announced")
            time_domain.interval = 1.0 / capture.sample_rate
            time_domain.resize(count)
            time_domain.samples[:] = data[:count]
        elif config.is_math_channel(channel) and self._math_inputs_ready(channel, config):
            first = self._store[0].time_domain
            second = self._store[1].time_domain
            time_domain.interval = first.interval
            if time_domain.resize(first.count):
                logger.debug("Math channel resized to %d samples", first.count)
            derive(config.math_mode, first.samples, second.samples, out=time_domain.samples)
        else:
            self._clear(channel)
            return
        report.channels.append(channel)

    def _clear(self, channel: int) -> None:
        entry = self._store[channel]
        entry.time_domain.release()
        entry.amplitude = 0.0
        entry.frequency = 0.0

    def _math_inputs_ready(self, channel: int, config: AnalysisConfig) -> bool:
        settings = config.settings(channel)
        if not (settings.used or settings.spectrum):
            return False
        if config.physical_channels < 2 or len(self._store) < 2:
            return False
        return self._store[0].time_domain.count > 0 and self._store[1].time_domain.count > 0

    def _measure(self, channel: int, config: AnalysisConfig, report: AnalysisReport) -> None:
        entry = self._store[channel]
        settings = config.settings(channel)
        if not settings.used or entry.time_domain.count == 0:
            return
        result = measure(
            entry.time_domain.samples,
            entry.time_domain.interval,
            settings.trigger_level,
            config.trigger_slope,
        )
        entry.amplitude = result.amplitude
        entry.frequency = result.frequency
        report.measured.append(channel)

    def _spectrum(self, channel: int, config: AnalysisConfig, report: AnalysisReport) -> None:
        entry = self._store[channel]
        if config.settings(channel).spectrum and entry.time_domain.count > 0:
            compute_spectrum(
                entry.time_domain,
                entry.freq_domain,
                config.spectrum_window,
                config.spectrum_reference,
                config.spectrum_limit,
                self._windows,
                self._transform,
            )
            report.spectra.append(channel)
        elif entry.freq_domain.allocated:
            entry.freq_domain.release()
