"""Runtime configuration for the analysis engine."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional, Sequence

import yaml

from ..analysis.math_channel import MathMode
from ..analysis.measurement import TriggerSlope
from ..analysis.windows import WindowFunction
from ..errors import ConfigurationError

DEFAULT_SPECTRUM_REFERENCE_DB = 0.0
DEFAULT_SPECTRUM_LIMIT_DB = -20.0


@dataclass(frozen=True)
class ChannelSettings:
    """Per-channel switches and trigger level."""

    used: bool = True
    spectrum: bool = False
    trigger_level: float = 0.0

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> "ChannelSettings":
        payload: Mapping[str, Any] = mapping or {}
        if not isinstance(payload, Mapping):
            raise ConfigurationError(f"Channel settings must be a mapping, got {payload!r}")
        try:
            trigger = float(payload.get("trigger_level", payload.get("trigger", 0.0)))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid trigger level: {exc}") from exc
        return cls(
            used=bool(payload.get("used", True)),
            spectrum=bool(payload.get("spectrum", False)),
            trigger_level=trigger,
        )


@dataclass(slots=True)
class AnalysisConfig:
    """
    Settings consumed by :class:`~dsoanalysis.core.analyzer.DataAnalyzer`.

    Channels ``0 .. physical_channels - 1`` are fed by the acquisition layer.
    When ``math_channel`` is enabled one more channel follows, computed from
    the first two physical channels with ``math_mode``.
    """

    physical_channels: int = 2
    math_channel: bool = True
    math_mode: Optional[MathMode] = MathMode.ADD
    channels: tuple[ChannelSettings, ...] = field(default_factory=tuple)
    trigger_slope: TriggerSlope = TriggerSlope.POSITIVE
    spectrum_window: WindowFunction = WindowFunction.RECTANGULAR
    spectrum_reference: float = DEFAULT_SPECTRUM_REFERENCE_DB
    spectrum_limit: float = DEFAULT_SPECTRUM_LIMIT_DB

    @property
    def channel_count(self) -> int:
        """Number of analysed channels (physical plus the optional math channel)."""
        return self.physical_channels + (1 if self.math_channel else 0)

    def settings(self, channel: int) -> ChannelSettings:
        """Return settings for ``channel``; unconfigured channels get defaults."""
        if 0 <= channel < len(self.channels):
            return self.channels[channel]
        return ChannelSettings()

    def is_math_channel(self, channel: int) -> bool:
        return self.math_channel and channel == self.physical_channels

    def sanitized(self) -> AnalysisConfig:
        """Return a copy with the channel table padded/truncated to ``channel_count``.

        Slope, math mode and window names given as strings are resolved to
        their enum members.
        """
        physical = max(0, int(self.physical_channels))
        math_enabled = bool(self.math_channel)
        count = physical + (1 if math_enabled else 0)
        table = list(self.channels[:count])
        table.extend(ChannelSettings() for _ in range(count - len(table)))
        return replace(
            self,
            physical_channels=physical,
            math_channel=math_enabled,
            channels=tuple(table),
            math_mode=MathMode.parse(self.math_mode),
            trigger_slope=TriggerSlope.parse(self.trigger_slope),
            spectrum_window=WindowFunction.parse(self.spectrum_window),
            spectrum_reference=float(self.spectrum_reference),
            spectrum_limit=float(self.spectrum_limit),
        )


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`AnalysisConfig`."""
    return {f.name for f in fields(AnalysisConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten a top-level ``analysis`` block into the root mapping."""
    if "analysis" in data and isinstance(data["analysis"], Mapping):
        merged: MutableMapping[str, Any] = {}
        for key, value in data.items():
            if key == "analysis":
                merged.update(value)
            else:
                merged[key] = value
        return merged
    return dict(data)


def _parse_channels(raw: Any) -> tuple[ChannelSettings, ...]:
    if raw is None:
        return ()
    if isinstance(raw, (Mapping, str, bytes)) or not isinstance(raw, Sequence):
        raise ConfigurationError(f"'channels' must be a list, got {type(raw).__name__}")
    return tuple(ChannelSettings.from_mapping(item) for item in raw)


def config_from_mapping(data: Mapping[str, Any] | None) -> AnalysisConfig:
    """Build :class:`AnalysisConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return AnalysisConfig().sanitized()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}

    if "channels" in payload:
        payload["channels"] = _parse_channels(payload["channels"])
    if "math_mode" in payload:
        payload["math_mode"] = MathMode.parse(payload["math_mode"])
    if "trigger_slope" in payload:
        payload["trigger_slope"] = TriggerSlope.parse(payload["trigger_slope"])
    if "spectrum_window" in payload:
        payload["spectrum_window"] = WindowFunction.parse(payload["spectrum_window"])
    if "physical_channels" in payload:
        try:
            payload["physical_channels"] = int(payload["physical_channels"])
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"Invalid physical_channels: {payload['physical_channels']!r}"
            ) from exc
    return AnalysisConfig(**payload).sanitized()


def load_config(path: str | Path | None) -> AnalysisConfig:
    """
    Load configuration from ``path``.

    Missing files fall back to default :class:`AnalysisConfig`.
    """
    if path is None:
        return AnalysisConfig().sanitized()
    cfg_path = Path(path)
    if not cfg_path.exists():
        return AnalysisConfig().sanitized()
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = [
    "AnalysisConfig",
    "ChannelSettings",
    "ConfigurationError",
    "config_from_mapping",
    "load_config",
]
