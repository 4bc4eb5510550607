"""
Scenario presets for orbital pursuit matches.

A scenario bundles everything a match needs that does not change during
play: map size, the Evader's column band, win and turn thresholds, starting
positions, the physical scale of a grid cell and the range thresholds in km,
plus the fog-of-war and weather feature flags.

Grid layout: columns are longitude cells (km_per_cell_x wide), rows are
orbits (km_per_cell_y apart). The centre row is the drift-free orbit.
"""

import math
from dataclasses import dataclass, replace, fields
from typing import Any, Dict, List, Optional

from models import Position


class ScenarioError(Exception):
    """Raised when a scenario cannot be built from user supplied data."""
    pass


@dataclass(frozen=True)
class Scenario:
    """Immutable scenario definition. Swapping it means starting a new match."""
    id: str
    name: str
    grid_w: int
    grid_h: int
    a_min_x: int
    a_max_x: int
    win_time: int
    max_turns: int
    initial_a_pos: Position
    initial_b_pos: Position
    km_per_cell_x: float = 35.0
    km_per_cell_y: float = 15.0
    identification_km: float = 50.0  # Capture ("lock") range
    visual_km: float = 100.0  # Mutual visibility range under fog of war
    long_scan_km: float = 175.0  # Radius of a long-range scan
    fog_of_war: bool = False
    weather_enabled: bool = False
    observation_cost_short: int = 0
    observation_cost_long: int = 0
    description: str = ''

    def validate(self) -> None:
        """
        Check the structural rules a playable scenario must satisfy.

        Raises:
            ScenarioError: Naming the first rule that fails
        """
        if self.grid_w < 1 or self.grid_h < 1:
            raise ScenarioError("Grid must be at least 1x1")
        # An even height puts the drift-free orbit between two rows
        if self.grid_h % 2 == 0:
            raise ScenarioError(f"grid_h must be odd, got {self.grid_h}")
        if not 0 <= self.a_min_x <= self.a_max_x < self.grid_w:
            raise ScenarioError(
                f"Evader band [{self.a_min_x}, {self.a_max_x}] must lie inside 0..{self.grid_w - 1}"
            )
        for name in ('initial_a_pos', 'initial_b_pos'):
            pos = getattr(self, name)
            if not (0 <= pos.x < self.grid_w and 0 <= pos.y < self.grid_h):
                raise ScenarioError(f"{name} ({pos.x}, {pos.y}) is off the grid")
        if not self.a_min_x <= self.initial_a_pos.x <= self.a_max_x:
            raise ScenarioError("initial_a_pos must start inside the Evader band")
        if self.win_time < 1 or self.max_turns < 1:
            raise ScenarioError("win_time and max_turns must be at least 1")
        for name in ('km_per_cell_x', 'km_per_cell_y', 'identification_km', 'visual_km', 'long_scan_km'):
            value = getattr(self, name)
            if not (math.isfinite(value) and value > 0):
                raise ScenarioError(f"{name} must be a positive number, got {value}")
        if self.observation_cost_short < 0 or self.observation_cost_long < 0:
            raise ScenarioError("Observation costs cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            data[f.name] = value.to_dict() if isinstance(value, Position) else value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: Optional['Scenario'] = None) -> 'Scenario':
        """
        Build a scenario from a dict of overrides.

        Args:
            data: Field values keyed by Scenario field name. Positions may be
                given as {'x': .., 'y': ..} dicts or [x, y] pairs.
            base: Scenario supplying every field not present in data
                (default: the realistic preset)

        Returns:
            New Scenario instance

        Raises:
            ScenarioError: On unknown fields, values of the wrong shape, or a
                scenario that fails validate()
        """
        base = base or SCENARIO_REALISTIC
        known = {f.name: f for f in fields(cls)}
        overrides: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                raise ScenarioError(f"Unknown scenario field: {key}")
            try:
                if key in ('initial_a_pos', 'initial_b_pos'):
                    overrides[key] = _parse_position(value)
                elif key in ('fog_of_war', 'weather_enabled'):
                    if not isinstance(value, bool):
                        raise ScenarioError(f"{key} must be true or false, got {value!r}")
                    overrides[key] = value
                elif key in ('id', 'name', 'description'):
                    overrides[key] = str(value)
                elif key.startswith('km_') or key.endswith('_km'):
                    overrides[key] = float(value)
                else:
                    overrides[key] = int(value)
            except (TypeError, ValueError, KeyError, OverflowError) as e:
                raise ScenarioError(f"Invalid value for {key}: {value!r}") from e
        scenario = replace(base, **overrides)
        scenario.validate()
        return scenario


def _parse_position(value: Any) -> Position:
    if isinstance(value, Position):
        return value
    if isinstance(value, dict):
        return Position(int(value['x']), int(value['y']))
    x, y = value
    return Position(int(x), int(y))


SCENARIO_CLASSIC = Scenario(
    id='classic',
    name='Classic',
    description='Small map, no fog of war.',
    grid_w=11,
    grid_h=7,
    a_min_x=2,
    a_max_x=8,
    win_time=2,
    max_turns=15,
    initial_a_pos=Position(5, 3),
    initial_b_pos=Position(1, 3),
)

SCENARIO_REALISTIC = Scenario(
    id='realistic',
    name='Realistic',
    description='Large 21x11 map with fog of war and reconnaissance.',
    grid_w=21,
    grid_h=11,
    a_min_x=5,
    a_max_x=14,
    win_time=2,
    max_turns=20,
    initial_a_pos=Position(10, 5),
    initial_b_pos=Position(2, 5),
    fog_of_war=True,
    observation_cost_short=1,
    observation_cost_long=2,
)

SCENARIO_HARDCORE = replace(
    SCENARIO_REALISTIC,
    id='hardcore',
    name='Hardcore',
    description='Realistic rules plus weather and a day/night cycle over a longer match.',
    max_turns=30,
    weather_enabled=True,
)

SCENARIO_CUSTOM = replace(
    SCENARIO_REALISTIC,
    id='custom',
    name='Custom (Sandbox)',
    description='User customised rules configuration.',
)

SCENARIOS: List[Scenario] = [SCENARIO_CLASSIC, SCENARIO_REALISTIC, SCENARIO_HARDCORE]


def get_scenario(scenario_id: str) -> Scenario:
    """Look up a preset by id. 'custom' returns the sandbox defaults."""
    for scenario in SCENARIOS + [SCENARIO_CUSTOM]:
        if scenario.id == scenario_id:
            return scenario
    raise ScenarioError(f"Unknown scenario: {scenario_id}")
