from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Sequence, Tuple

import yaml


def load_yaml(path: str | Path) -> Dict[str, Any]:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path.resolve()}")
    with config_path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get(cfg: Dict[str, Any], key: str, default: Any = None) -> Any:
    """
    Dot-access helper:
      get(cfg, "tracking.target_class", "sports ball")
    """
    cur: Any = cfg
    for part in key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return default
        cur = cur[part]
    return cur


def get_vec3(cfg: Dict[str, Any], key: str, default: Sequence[float]) -> Tuple[float, float, float]:
    value = get(cfg, key, None)
    if value is None:
        value = default
    if len(value) != 3:
        raise ValueError(f"{key} must have 3 components, got {value!r}")
    return float(value[0]), float(value[1]), float(value[2])
