# Models for match elements: sides, positions, resource ledgers and scan records

from dataclasses import dataclass, replace
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar('T')


class Side(Enum):
    """The two sides of a match. Values double as the short labels 'A' and 'B'."""
    EVADER = 'A'
    PURSUER = 'B'

    @property
    def opponent(self) -> 'Side':
        return Side.PURSUER if self is Side.EVADER else Side.EVADER


class Mode(Enum):
    HOTSEAT = 'hotseat'
    AI = 'ai'


class MatchPhase(Enum):
    PLAYING = 'playing'
    GAMEOVER = 'gameover'


class ScanType(Enum):
    SHORT = 'SHORT'
    LONG = 'LONG'


class TimeOfDay(Enum):
    NIGHT = 'NIGHT'
    DAWN = 'DAWN'
    DAY = 'DAY'
    DUSK = 'DUSK'


class Weather(Enum):
    CLEAR = 'CLEAR'
    CLOUDY = 'CLOUDY'


@dataclass(frozen=True)
class Position:
    """A grid cell. x is the column, y is the row (orbit)."""
    x: int
    y: int

    def to_dict(self) -> dict:
        return {'x': self.x, 'y': self.y}


@dataclass(frozen=True)
class Resources:
    """
    Per-side resource ledger.

    Fuel is charged per row changed; lateral drift is free. Both counters
    only ever grow during a match. fuel_capacity is the starting tank and is
    only used to report what remains.
    """
    fuel_capacity: float = 100.0
    fuel_used: float = 0.0
    scan_points_used: int = 0

    @property
    def fuel_remaining(self) -> float:
        return self.fuel_capacity - self.fuel_used

    def burn_fuel(self, amount: float) -> 'Resources':
        return replace(self, fuel_used=self.fuel_used + amount)

    def spend_scan_points(self, amount: int) -> 'Resources':
        return replace(self, scan_points_used=self.scan_points_used + amount)


@dataclass(frozen=True)
class ScanArea:
    """Circle queried by a long-range scan."""
    center: Position
    radius_km: float


@dataclass(frozen=True)
class ScanResult:
    """
    Outcome of one scan.

    A short scan always reveals the opponent's column. A long scan reveals the
    opponent's full position when covered, otherwise both detections stay None
    (a miss) while scanned_area still records where the scan looked.
    """
    turn: int
    scan_type: ScanType
    detected_column: Optional[int] = None
    detected_position: Optional[Position] = None
    scanned_area: Optional[ScanArea] = None

    @property
    def is_miss(self) -> bool:
        return self.detected_column is None and self.detected_position is None


@dataclass(frozen=True)
class PerSide(Generic[T]):
    """Fixed two-slot map keyed by Side."""
    evader: T
    pursuer: T

    def get(self, side: Side) -> T:
        return self.evader if side is Side.EVADER else self.pursuer

    def replace(self, side: Side, value: T) -> 'PerSide[T]':
        if side is Side.EVADER:
            return replace(self, evader=value)
        return replace(self, pursuer=value)

    @classmethod
    def both(cls, value: T) -> 'PerSide[T]':
        return cls(evader=value, pursuer=value)
