"""
Configuration

Pipeline settings and named flip option sets.

Settings come from, in increasing priority:
1. ``ComputeConfig`` defaults
2. A YAML profile file (``load_profile``)
3. Environment variables (``ComputeConfig.from_env``):
   FLOATPLACE_MAX_RESETS, FLOATPLACE_STRATEGY, FLOATPLACE_PLACEMENT

Profile file layout:

```yaml
compute:
  max_resets: 20
  placement: top-start
flip:
  menu:
    fallback_placements: [top-start, bottom-end]
    padding: 8
```
"""

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from .geometry.primitives import Placement, PlacementLike, Strategy

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESETS = 50


class ConfigError(ValueError):
    """Raised for invalid configuration values or profile files."""
    pass


@dataclass
class ComputeConfig:
    """Settings for one ``compute_position`` call."""
    max_resets: int = DEFAULT_MAX_RESETS  # pipeline restarts before giving up
    strategy: Strategy = Strategy.ABSOLUTE
    placement: PlacementLike = "bottom"

    def __post_init__(self):
        try:
            self.strategy = Strategy(self.strategy)
            self.placement = Placement.parse(self.placement)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        if (isinstance(self.max_resets, bool) or not isinstance(self.max_resets, int)
                or self.max_resets < 0):
            raise ConfigError(f"max_resets must be a non-negative integer, got {self.max_resets!r}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ComputeConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown compute settings: {sorted(unknown)}")
        return cls(**data)

    def with_env(self, environ: Optional[Mapping[str, str]] = None) -> "ComputeConfig":
        """Copy of this config with environment overrides applied.

        Invalid values are logged and ignored.
        """
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}

        max_resets = environ.get("FLOATPLACE_MAX_RESETS", "").strip()
        if max_resets:
            if max_resets.isdigit():
                overrides["max_resets"] = int(max_resets)
            else:
                logger.warning("Ignoring FLOATPLACE_MAX_RESETS=%r: not a non-negative integer",
                               max_resets)

        strategy = environ.get("FLOATPLACE_STRATEGY", "").lower().strip()
        if strategy:
            if strategy in (s.value for s in Strategy):
                overrides["strategy"] = Strategy(strategy)
            else:
                logger.warning("Unknown FLOATPLACE_STRATEGY value: %s, ignoring", strategy)

        placement = environ.get("FLOATPLACE_PLACEMENT", "").strip()
        if placement:
            try:
                overrides["placement"] = Placement.parse(placement)
            except ValueError:
                logger.warning("Unknown FLOATPLACE_PLACEMENT value: %s, ignoring", placement)

        return replace(self, **overrides)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ComputeConfig":
        return cls().with_env(environ)


# Built-in flip option sets, as keyword mappings for FlipOptions.from_mapping
FLIP_PRESETS: Dict[str, Dict[str, Any]] = {
    "default": {},
    # Leave the alignment axis to a shift step
    "main_axis_only": {"cross_axis": False},
    # Also try the perpendicular sides, start side first
    "perpendicular": {"fallback_axis_side_direction": "start"},
    # Never end up somewhere the caller did not ask for
    "keep_initial": {"fallback_strategy": "initialPlacement"},
}


@dataclass
class PositioningProfile:
    """Compute settings plus named flip option sets loaded from a file."""
    compute: ComputeConfig = field(default_factory=ComputeConfig)
    flip: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    source_file: Optional[Path] = None

    def flip_names(self) -> List[str]:
        return sorted(set(FLIP_PRESETS) | set(self.flip))


def load_profile(path: Union[str, Path], apply_env: bool = True) -> PositioningProfile:
    """
    Load a YAML positioning profile.

    Args:
        path: Profile file
        apply_env: Apply FLOATPLACE_* environment overrides on top

    Raises:
        ConfigError: If the file is missing, malformed or has unknown keys
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Profile not found: {path}")

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Profile {path} must be a mapping")
    unknown = set(data) - {"compute", "flip"}
    if unknown:
        raise ConfigError(f"Unknown sections in {path}: {sorted(unknown)}")

    compute_section = data.get("compute") or {}
    if not isinstance(compute_section, dict):
        raise ConfigError(f"'compute' in {path} must be a mapping")
    compute = ComputeConfig.from_mapping(compute_section)
    if apply_env:
        compute = compute.with_env()

    flip_sets = data.get("flip") or {}
    if not isinstance(flip_sets, dict) or not all(isinstance(v, dict) for v in flip_sets.values()):
        raise ConfigError(f"'flip' in {path} must map names to option mappings")

    profile = PositioningProfile(compute=compute, flip=flip_sets, source_file=path)
    # Validate eagerly so a bad profile fails at load time
    for name in flip_sets:
        get_flip_options(name, profile)

    logger.debug("Loaded profile %s: %d flip option sets", path, len(flip_sets))
    return profile


def get_flip_options(name: str, profile: Optional[PositioningProfile] = None):
    """
    Get flip options by name, from the profile first, then the presets.

    Returns:
        FlipOptions instance

    Raises:
        ConfigError: If the name is unknown or the options are invalid
    """
    from .middleware.flip import FlipOptions

    if profile is not None and name in profile.flip:
        options = profile.flip[name]
    elif name in FLIP_PRESETS:
        options = FLIP_PRESETS[name]
    else:
        available = ", ".join(profile.flip_names() if profile else sorted(FLIP_PRESETS))
        raise ConfigError(f"Unknown flip options '{name}'. Available: {available}")

    try:
        return FlipOptions.from_mapping(options)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid flip options '{name}': {e}") from e
