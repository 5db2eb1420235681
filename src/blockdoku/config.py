"""
Game configuration.

Scoring constants, power-up rewards, difficulty tiers and session limits.
Defaults reproduce the shipped game; a YAML file can override any subset.
"""
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Tuple, Union
import yaml


@dataclass(frozen=True)
class DifficultyTier:
    """A score threshold unlocking a harder shape pool."""
    score: int
    level: int
    name: str


DEFAULT_TIERS: Tuple[DifficultyTier, ...] = (
    DifficultyTier(0, 1, "Easy"),
    DifficultyTier(800, 2, "Medium"),
    DifficultyTier(2000, 3, "Hard"),
)


@dataclass(frozen=True)
class ScoringConfig:
    block_placed: int = 1
    line_clear_base: int = 10
    hammer_clear_points: int = 2
    combo_multiplier_base: float = 0.5
    streak_multiplier: float = 0.2
    max_combo_multiplier: float = 5


@dataclass(frozen=True)
class PowerUpRewards:
    """Hammer charges credited for multi-region clears."""
    double_clear: int = 1
    triple_clear: int = 1
    ultra_clear: int = 2


@dataclass(frozen=True)
class InitialPowerUps:
    hammer: int = 1
    refresh: int = 0


@dataclass(frozen=True)
class GameConfig:
    """Complete engine configuration."""
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    powerup_rewards: PowerUpRewards = field(default_factory=PowerUpRewards)
    initial_powerups: InitialPowerUps = field(default_factory=InitialPowerUps)
    tiers: Tuple[DifficultyTier, ...] = DEFAULT_TIERS
    tray_size: int = 3
    deal_attempts: int = 50
    history_limit: int = 20

    def __post_init__(self):
        if self.history_limit < 1:
            raise ValueError(f"history_limit must be positive, got {self.history_limit}")
        if self.deal_attempts < 1:
            raise ValueError(f"deal_attempts must be positive, got {self.deal_attempts}")
        if not self.tiers or self.tiers[0].score != 0:
            raise ValueError("The first difficulty tier must start at score 0")
        scores = [tier.score for tier in self.tiers]
        if any(a >= b for a, b in zip(scores, scores[1:])):
            raise ValueError(f"Tier scores must be strictly ascending, got {scores}")
        levels = [tier.level for tier in self.tiers]
        if any(level not in (1, 2, 3) for level in levels):
            raise ValueError(f"Tier levels must be 1, 2 or 3, got {levels}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameConfig":
        """
        Build a config from a nested dictionary.

        Sections: ``scoring``, ``powerup_rewards``, ``initial_powerups``,
        ``difficulty`` (list of tiers) and ``session``. Missing keys keep
        their defaults; unknown keys raise ``ValueError``.
        """
        data = dict(data or {})
        config = cls()
        sections = {
            "scoring": ("scoring", ScoringConfig),
            "powerup_rewards": ("powerup_rewards", PowerUpRewards),
            "initial_powerups": ("initial_powerups", InitialPowerUps),
        }
        for key, (attr, section_cls) in sections.items():
            if key in data:
                values = _check_keys(key, data.pop(key) or {}, section_cls)
                config = replace(config, **{attr: replace(getattr(config, attr), **values)})

        if "difficulty" in data:
            tiers = []
            for i, entry in enumerate(data.pop("difficulty") or []):
                where = f"difficulty[{i}]"
                if not isinstance(entry, dict):
                    raise ValueError(f"'{where}' must be a mapping, got {entry!r}")
                values = _check_keys(where, entry, DifficultyTier)
                missing = {f.name for f in fields(DifficultyTier)} - set(values)
                if missing:
                    raise ValueError(f"Missing keys in '{where}': {sorted(missing)}")
                tiers.append(DifficultyTier(int(values["score"]), int(values["level"]), str(values["name"])))
            config = replace(config, tiers=tuple(tiers))

        if "session" in data:
            values = _check_keys("session", data.pop("session") or {}, None,
                                 allowed=("tray_size", "deal_attempts", "history_limit"))
            config = replace(config, **{k: int(v) for k, v in values.items()})

        if data:
            raise ValueError(f"Unknown config sections: {sorted(data)}")
        return config

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "GameConfig":
        """Load a config from a YAML file."""
        with open(path, "r") as f:
            return cls.from_dict(yaml.safe_load(f) or {})


def _check_keys(section: str, values: Dict[str, Any], section_cls, allowed=None) -> Dict[str, Any]:
    if allowed is None:
        allowed = tuple(f.name for f in fields(section_cls))
    unknown = set(values) - set(allowed)
    if unknown:
        raise ValueError(f"Unknown keys in '{section}': {sorted(unknown)}")
    return dict(values)


DEFAULT_CONFIG = GameConfig()
