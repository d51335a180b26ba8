# cimille/config.py
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional
import logging
import os
import tomllib

log = logging.getLogger(__name__)

# Material in pawn units.
PIECE_VALUES = {
    "PAWN": 1.0,
    "KNIGHT": 3.0,
    "BISHOP": 3.0,
    "ROOK": 5.0,
    "QUEEN": 9.0,
    "KING": 0.0,
}

# Piece-square tables, row 0 is rank 8 seen from White.
PST = {
    "PAWN": [
        [0, 0, 0, 0, 0, 0, 0, 0],
        [5, 5, 5, -5, -5, 5, 5, 5],
        [1, 1, 2, 3, 3, 2, 1, 1],
        [0.5, 0.5, 1, 2.5, 2.5, 1, 0.5, 0.5],
        [0, 0, 0, 2, 2, 0, 0, 0],
        [0.5, -0.5, -1, 0, 0, -1, -0.5, 0.5],
        [0.5, 1, 1, -2, -2, 1, 1, 0.5],
        [0, 0, 0, 0, 0, 0, 0, 0],
    ],
    "KNIGHT": [
        [-5, -4, -3, -3, -3, -3, -4, -5],
        [-4, -2, 0, 0, 0, 0, -2, -4],
        [-3, 0, 1, 1.5, 1.5, 1, 0, -3],
        [-3, 0.5, 1.5, 2, 2, 1.5, 0.5, -3],
        [-3, 0, 1.5, 2, 2, 1.5, 0, -3],
        [-3, 0.5, 1, 1.5, 1.5, 1, 0.5, -3],
        [-4, -2, 0, 0.5, 0.5, 0, -2, -4],
        [-5, -4, -3, -3, -3, -3, -4, -5],
    ],
    "BISHOP": [
        [-2, -1, -1, -1, -1, -1, -1, -2],
        [-1, 0, 0, 0, 0, 0, 0, -1],
        [-1, 0, 0.5, 1, 1, 0.5, 0, -1],
        [-1, 0.5, 0.5, 1, 1, 0.5, 0.5, -1],
        [-1, 0, 1, 1, 1, 1, 0, -1],
        [-1, 1, 1, 1, 1, 1, 1, -1],
        [-1, 0.5, 0, 0, 0, 0, 0.5, -1],
        [-2, -1, -1, -1, -1, -1, -1, -2],
    ],
    "ROOK": [
        [0, 0, 0, 0.5, 0.5, 0, 0, 0],
        [-0.5, 0, 0, 0, 0, 0, 0, -0.5],
        [-0.5, 0, 0, 0, 0, 0, 0, -0.5],
        [-0.5, 0, 0, 0, 0, 0, 0, -0.5],
        [-0.5, 0, 0, 0, 0, 0, 0, -0.5],
        [-0.5, 0, 0, 0, 0, 0, 0, -0.5],
        [0.5, 1, 1, 1, 1, 1, 1, 0.5],
        [0, 0, 0, 0, 0, 0, 0, 0],
    ],
    "QUEEN": [
        [-2, -1, -1, -0.5, -0.5, -1, -1, -2],
        [-1, 0, 0, 0, 0, 0, 0, -1],
        [-1, 0, 0.5, 0.5, 0.5, 0.5, 0, -1],
        [-0.5, 0, 0.5, 0.5, 0.5, 0.5, 0, -0.5],
        [0, 0, 0.5, 0.5, 0.5, 0.5, 0, -0.5],
        [-1, 0.5, 0.5, 0.5, 0.5, 0.5, 0, -1],
        [-1, 0, 0.5, 0, 0, 0, 0, -1],
        [-2, -1, -1, -0.5, -0.5, -1, -1, -2],
    ],
    "KING": [
        [-3, -4, -4, -5, -5, -4, -4, -3],
        [-3, -4, -4, -5, -5, -4, -4, -3],
        [-3, -4, -4, -5, -5, -4, -4, -3],
        [-3, -4, -4, -5, -5, -4, -4, -3],
        [-2, -3, -3, -4, -4, -3, -3, -2],
        [-1, -2, -2, -2, -2, -2, -2, -1],
        [2, 2, 0, 0, 0, 0, 2, 2],
        [2, 3, 1, 0, 0, 1, 3, 2],
    ],
}

@dataclass
class SearchConfig:
    depth: int = 3  # default for `go` without limits
    max_depth: int = 64
    time_growth_factor: float = 3.0  # predicted cost of the next iteration vs the last
    min_iteration_ms: int = 5
    random_seed: Optional[int] = None

@dataclass
class TimeConfig:
    fallback_budget_ms: int = 1000
    fallback_depth: int = 3
    moves_divisor: int = 30
    max_budget_ms: int = 30000
    safety_buffer_ms: int = 50
    min_budget_ms: int = 10
    infinite_budget_ms: int = 24 * 60 * 60 * 1000

@dataclass
class EvalConfig:
    piece_values: Dict[str, float] = field(default_factory=lambda: PIECE_VALUES.copy())
    pst: Dict[str, List[List[float]]] = field(default_factory=lambda: {k: [row[:] for row in v] for k, v in PST.items()})
    pst_divisor: float = 10.0
    mobility_weight: float = 0.1
    # pawn units; a 30-point check term would outweigh three queens on this scale
    check_bonus: float = 0.5

@dataclass
class OrderingConfig:
    capture_bonus: int = 1000
    check_bonus: int = 100
    promotion_bonus: int = 50

@dataclass
class UIConfig:
    engine_name: str = "Cimille 0.1.0"
    engine_author: str = "Ssimille, Phrygia"

@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    time: TimeConfig = field(default_factory=TimeConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    ordering: OrderingConfig = field(default_factory=OrderingConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = "cimille.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("search", "time", "eval", "ordering", "ui"):
            target = getattr(cfg, section)
            for k, v in raw.get(section, {}).items():
                if hasattr(target, k):
                    setattr(target, k, v)
                else:
                    log.warning("config: unknown key %s.%s in %s", section, k, path)
        if "log_level" in raw:
            cfg.log_level = str(raw["log_level"])
        return cfg


def apply_env_overrides(cfg: Config, environ: Mapping[str, str] = os.environ) -> Config:
    """Env overrides for quick debugging: CIMILLE_SEARCH_DEPTH, CIMILLE_LOG_LEVEL."""
    override_depth = environ.get("CIMILLE_SEARCH_DEPTH")
    if override_depth:
        try:
            cfg.search.depth = int(override_depth)
        except ValueError:
            log.warning("config: ignoring non-integer CIMILLE_SEARCH_DEPTH=%r", override_depth)
    cfg.log_level = environ.get("CIMILLE_LOG_LEVEL", cfg.log_level)
    return cfg


# single globally importable config instance
CONFIG = apply_env_overrides(Config.load_from_toml(os.environ.get("CIMILLE_CONFIG_TOML", "cimille.toml")))
