from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
import math
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence, Tuple

from spirokin_core import SpiroGraph
from spirokin_curves import DEFAULT_RESOLUTION
from spirokin_math import DEFAULT_VELOCITY, arc_length_at

Point = Tuple[float, float]
_LOGGER = logging.getLogger(__name__)

CONFIG_VERSION = 1


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class MeshKind:
    builder: Callable[..., SpiroGraph]
    params: Tuple[str, ...]
    uses_resolution: bool = False


MESH_KINDS: Dict[str, MeshKind] = {
    "two_circles_outer": MeshKind(SpiroGraph.two_circles_outer, ("r1", "r2")),
    "two_circles_inner": MeshKind(SpiroGraph.two_circles_inner, ("r1", "r2")),
    "circle_ellipse_outer": MeshKind(SpiroGraph.circle_ellipse_outer, ("r1", "a", "b"), True),
    "circle_ellipse_inner": MeshKind(SpiroGraph.circle_ellipse_inner, ("r1", "a", "b"), True),
    "ellipse_circle_outer": MeshKind(SpiroGraph.ellipse_circle_outer, ("a", "b", "r2"), True),
    "ellipse_circle_inner": MeshKind(SpiroGraph.ellipse_circle_inner, ("a", "b", "r2"), True),
    "oblong_circle_outer": MeshKind(SpiroGraph.oblong_circle_outer, ("radius", "straight", "r2")),
    "oblong_circle_inner": MeshKind(SpiroGraph.oblong_circle_inner, ("radius", "straight", "r2")),
}


@dataclass
class SpiroConfig:
    name: str = "Spirograph"
    kind: str = "two_circles_inner"
    params: Dict[str, float] = field(default_factory=lambda: {"r1": 100.0, "r2": 30.0})
    pen: Point = (20.0, 0.0)
    velocity: float = DEFAULT_VELOCITY   # length units per second
    resolution: int = DEFAULT_RESOLUTION  # ellipse normalisation samples


def _number(value: Any, what: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{what} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{what} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise ConfigError(f"{what} must be finite, got {value!r}")
    return number


def _pen(value: Any) -> Point:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ConfigError(f"pen must be a pair of numbers, got {value!r}")
    return (_number(value[0], "pen x"), _number(value[1], "pen y"))


def build_spirograph(config: SpiroConfig) -> SpiroGraph:
    kind = MESH_KINDS.get(config.kind)
    if kind is None:
        raise ConfigError(f"Unknown spirograph kind: {config.kind!r}")
    missing = [name for name in kind.params if name not in config.params]
    if missing:
        raise ConfigError(f"{config.kind} is missing parameters: {', '.join(missing)}")
    extra = sorted(set(config.params) - set(kind.params))
    if extra:
        _LOGGER.warning("Ignoring parameters for %s (%s): %s", config.name, config.kind, ", ".join(extra))
    args = [_number(config.params[name], name) for name in kind.params]
    kwargs = {}
    if kind.uses_resolution:
        kwargs["resolution"] = config.resolution
    return kind.builder(*args, _pen(config.pen), **kwargs)


def config_arc_length(config: SpiroConfig, elapsed: float) -> float:
    """Gear parameter reached after ``elapsed`` seconds at the config's velocity."""
    return arc_length_at(elapsed, config.velocity)


def config_from_dict(data: Dict[str, Any]) -> SpiroConfig:
    if not isinstance(data, dict):
        raise ConfigError(f"spirograph entry must be an object, got {data!r}")
    default = SpiroConfig()
    params = data.get("params", default.params)
    if not isinstance(params, dict):
        raise ConfigError(f"params must be an object, got {params!r}")
    resolution = data.get("resolution", default.resolution)
    if isinstance(resolution, bool) or not isinstance(resolution, int):
        raise ConfigError(f"resolution must be an integer, got {resolution!r}")
    config = SpiroConfig(
        name=str(data.get("name", default.name)),
        kind=str(data.get("kind", default.kind)),
        params={str(k): _number(v, str(k)) for k, v in params.items()},
        pen=_pen(data.get("pen", default.pen)),
        velocity=_number(data.get("velocity", default.velocity), "velocity"),
        resolution=resolution,
    )
    unknown = sorted(set(data) - {"name", "kind", "params", "pen", "velocity", "resolution"})
    if unknown:
        _LOGGER.warning("Unknown keys in spirograph %s: %s", config.name, ", ".join(unknown))
    return config


def config_to_dict(config: SpiroConfig) -> Dict[str, Any]:
    return {
        "name": config.name,
        "kind": config.kind,
        "params": dict(config.params),
        "pen": [config.pen[0], config.pen[1]],
        "velocity": config.velocity,
        "resolution": config.resolution,
    }


def load_configs(path: Path | str) -> List[SpiroConfig]:
    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a JSON object at top level")
    version = data.get("version", CONFIG_VERSION)
    if version != CONFIG_VERSION:
        raise ConfigError(f"{path}: unsupported config version {version!r}")
    entries = data.get("spirographs", [])
    if not isinstance(entries, list):
        raise ConfigError(f"{path}: 'spirographs' must be a list")
    return [config_from_dict(entry) for entry in entries]


def save_configs(path: Path | str, configs: Sequence[SpiroConfig]) -> None:
    data = {
        "version": CONFIG_VERSION,
        "spirographs": [config_to_dict(c) for c in configs],
    }
    with Path(path).open("w", encoding="utf-8") as handle:
        json.dump(data, handle, indent=2, ensure_ascii=False)


__all__ = [
    "CONFIG_VERSION",
    "ConfigError",
    "MESH_KINDS",
    "MeshKind",
    "SpiroConfig",
    "build_spirograph",
    "config_arc_length",
    "config_from_dict",
    "config_to_dict",
    "load_configs",
    "save_configs",
]
