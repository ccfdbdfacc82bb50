"""Routing profiles and the request preferences shared by every profile."""
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple
import json
from joyride.config import CONFIGS_DIR
from joyride.core.routing.weighting import DEFAULT_CONGESTION_BY_TYPE


@dataclass(frozen=True)
class RoutingProfile:
    """
    A named routing preference set.

    identifier: profile id understood by the Directions API
    weight: edge attribute minimized by the local graph provider
    """
    name: str
    identifier: str = "driving"
    weight: str = "travel_time"
    congestion_by_type: Dict[str, float] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class RoutePreferences:
    avoid_motorway: bool = True
    include_alternatives: bool = True
    shape_resolution: str = "full"
    step_attributes: Tuple[str, ...] = ("congestion", "duration", "distance", "maxspeed")
    max_alternatives: int = 2

    @property
    def road_classes_to_avoid(self) -> Tuple[str, ...]:
        return ("motorway",) if self.avoid_motorway else ()

    @property
    def max_routes(self) -> int:
        return 1 + self.max_alternatives if self.include_alternatives else 1


AUTOMOBILE = RoutingProfile(name="automobile", identifier="driving", weight="travel_time")
AUTOMOBILE_AVOIDING_TRAFFIC = RoutingProfile(
    name="automobile-avoiding-traffic",
    identifier="driving-traffic",
    weight="congested_time",
    congestion_by_type=dict(DEFAULT_CONGESTION_BY_TYPE),
)

PRESET_PROFILES = {p.name: p for p in (AUTOMOBILE, AUTOMOBILE_AVOIDING_TRAFFIC)}
DEFAULT_PROFILES = (AUTOMOBILE, AUTOMOBILE_AVOIDING_TRAFFIC)


def get_profile_path(profile_name: str) -> Path:
    """Get the file path for a profile."""
    # Sanitize profile name to be filesystem-safe
    safe_name = "".join(c for c in profile_name if c.isalnum() or c in (' ', '-', '_')).strip()
    safe_name = safe_name.replace(' ', '_')
    if not safe_name:
        raise ValueError("Profile name must contain at least one alphanumeric character")
    return CONFIGS_DIR / f"{safe_name}.json"


def load_profile(profile_name: str) -> RoutingProfile:
    """Load a preset, or a custom profile from disk."""
    if profile_name in PRESET_PROFILES:
        return PRESET_PROFILES[profile_name]

    profile_path = get_profile_path(profile_name)
    if not profile_path.exists():
        raise FileNotFoundError(f"Profile '{profile_name}' not found")

    with open(profile_path, 'r') as f:
        data = json.load(f)
    return RoutingProfile(
        name=data.get("name", profile_name),
        identifier=data.get("identifier", "driving"),
        weight=data.get("weight", "travel_time"),
        congestion_by_type=data.get("congestion_by_type", {}),
    )


def save_profile(profile: RoutingProfile) -> Path:
    """Save a custom profile to disk."""
    if profile.name in PRESET_PROFILES:
        raise ValueError(f"Cannot overwrite preset profile '{profile.name}'")
    if profile.weight not in ("travel_time", "congested_time", "length"):
        raise ValueError(f"Unsupported profile weight '{profile.weight}'")

    CONFIGS_DIR.mkdir(parents=True, exist_ok=True)

    profile_path = get_profile_path(profile.name)
    with open(profile_path, 'w') as f:
        json.dump(asdict(profile), f, indent=2)
    return profile_path


def list_profiles() -> List[str]:
    """List preset and custom profile names."""
    profiles = list(PRESET_PROFILES)
    if not CONFIGS_DIR.exists():
        return profiles

    custom = []
    for file_path in CONFIGS_DIR.glob("*.json"):
        try:
            with open(file_path, 'r') as f:
                data = json.load(f)
                if isinstance(data, dict) and "name" in data:
                    custom.append(data["name"])
        except (json.JSONDecodeError, KeyError):
            # Skip invalid JSON files
            continue

    return profiles + sorted(custom)
