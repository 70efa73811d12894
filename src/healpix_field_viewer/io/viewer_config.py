# FILE: src/healpix_field_viewer/io/viewer_config.py
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from ..engine.errors import UnknownProjectionType
from ..engine.reproject import ProjectionType
from .field_file_io import load_json

logger = logging.getLogger(__name__)

Pair = Tuple[float, float]


@dataclass(frozen=True)
class ViewerConfig:
    """
    Visualization parameters. Ranges left as None are "searching": the
    input ranges get autoscaled, the relief output range takes its default.
    """
    order_reduce: int = 0
    use_relief: bool = False
    colourmap_type: str = "plasma"
    colourmap_input_range: Optional[Pair] = None
    reliefmap_input_range: Optional[Pair] = None
    reliefmap_output_range: Optional[Pair] = None
    projection: Optional[ProjectionType] = None
    projection_position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    projection_radius: float = 1.0


def sidecar_path(input_path: str) -> str:
    return input_path + ".json"


def resolve_projection(name: str) -> ProjectionType:
    try:
        return ProjectionType(name.strip().lower())
    except ValueError as exc:
        raise UnknownProjectionType(name) from exc


def parse_override(arg: str) -> Tuple[str, Any]:
    """
    "key=value" -> (key, value). The value is read as JSON when it parses,
    otherwise kept as the raw string (so colourmap_type=viridis works).
    """
    if "=" not in arg:
        raise ValueError(f"override must look like key=value, got {arg!r}")
    key, raw = arg.split("=", 1)
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return key.strip(), value


def _as_int(v: Any) -> int:
    if isinstance(v, bool) or not isinstance(v, (int, float)) or int(v) != v:
        raise ValueError("expected an integer")
    return int(v)


def _as_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str) and v.lower() in ("true", "false"):
        return v.lower() == "true"
    raise ValueError("expected true or false")


def _as_str(v: Any) -> str:
    if not isinstance(v, str):
        raise ValueError("expected a string")
    return v


def _as_float(v: Any) -> float:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ValueError("expected a number")
    return float(v)


def _as_floats(n: int) -> Callable[[Any], Tuple[float, ...]]:
    def parse(v: Any) -> Tuple[float, ...]:
        if not isinstance(v, (list, tuple)) or len(v) != n:
            raise ValueError(f"expected a list of {n} numbers")
        return tuple(_as_float(x) for x in v)
    return parse


def _as_range(v: Any) -> Pair:
    lo, hi = _as_floats(2)(v)
    if hi < lo:
        raise ValueError("range max is below min")
    return (lo, hi)


_PARSERS: Dict[str, Callable[[Any], Any]] = {
    "order_reduce": _as_int,
    "use_relief": _as_bool,
    "colourmap_type": _as_str,
    "colourmap_input_range": _as_range,
    "reliefmap_input_range": _as_range,
    "reliefmap_output_range": _as_range,
    "projection": _as_str,
    "projection_position": _as_floats(3),
    "projection_radius": _as_float,
}


class ViewerConfigBuilder:
    """
    Two-stage configuration: sidecar JSON file first, then command line
    key=value overrides, then build() one immutable ViewerConfig.
    """

    def __init__(self) -> None:
        self._raw: Dict[str, Any] = {}

    def load_file(self, path: str) -> "ViewerConfigBuilder":
        if not os.path.exists(path):
            logger.info("No JSON config at %s, using defaults", path)
            return self
        try:
            obj = load_json(path)
        except (OSError, ValueError) as exc:
            logger.warning("Could not read JSON config at %s (%s), using defaults", path, exc)
            return self
        logger.info("Read JSON config at %s", path)
        self._raw.update(obj)
        return self

    def apply_overrides(self, overrides: Iterable[str]) -> "ViewerConfigBuilder":
        for arg in overrides:
            key, value = parse_override(arg)
            self._raw[key] = value
        return self

    def set(self, key: str, value: Any) -> "ViewerConfigBuilder":
        self._raw[key] = value
        return self

    def build(self) -> ViewerConfig:
        parsed: Dict[str, Any] = {}
        for key, value in self._raw.items():
            parser = _PARSERS.get(key)
            if parser is None:
                logger.warning("Ignoring unknown config key %r", key)
                continue
            try:
                parsed[key] = parser(value)
            except (ValueError, TypeError) as exc:
                logger.warning("Ignoring config %s=%r: %s", key, value, exc)

        projection_name = parsed.pop("projection", "")
        projection: Optional[ProjectionType] = None
        if projection_name:
            try:
                projection = resolve_projection(projection_name)
            except UnknownProjectionType:
                logger.warning("Unknown projection %s, reverting to equirectangular", projection_name)
                projection = ProjectionType.EQUIRECTANGULAR

        return ViewerConfig(projection=projection, **parsed)


def load_viewer_config(input_path: str, overrides: Iterable[str] = ()) -> ViewerConfig:
    return ViewerConfigBuilder().load_file(sidecar_path(input_path)).apply_overrides(overrides).build()
