from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

Triple = Tuple[float, float, float]

AXES = ("width", "depth", "height")


def _coords(values: Triple) -> Dict[str, float]:
    return dict(zip(AXES, values))


@dataclass(frozen=True)
class Box:
    """Axis-aligned box in container space, ordered (width, depth, height)."""
    start: Triple
    end: Triple

    @classmethod
    def from_origin(cls, origin: Triple, dims: Triple) -> "Box":
        return cls(
            start=tuple(float(o) for o in origin),
            end=tuple(float(o) + float(d) for o, d in zip(origin, dims)),
        )

    @classmethod
    def from_dict(cls, position: Dict) -> "Box":
        start = position["startCoordinates"]
        end = position["endCoordinates"]
        return cls(
            start=tuple(float(start[axis]) for axis in AXES),
            end=tuple(float(end[axis]) for axis in AXES),
        )

    @property
    def dims(self) -> Triple:
        return tuple(e - s for s, e in zip(self.start, self.end))

    def volume(self) -> float:
        w, d, h = self.dims
        return w * d * h

    def overlaps(self, other: "Box") -> bool:
        # Separating axis: disjoint iff separated along at least one axis
        return all(
            s1 < e2 and s2 < e1
            for s1, e1, s2, e2 in zip(self.start, self.end, other.start, other.end)
        )

    def as_row(self) -> Tuple[float, ...]:
        return self.start + self.end

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            "startCoordinates": _coords(self.start),
            "endCoordinates": _coords(self.end),
        }

    def to_coordinate_string(self) -> str:
        def fmt(v: float) -> str:
            return str(int(v)) if float(v).is_integer() else str(v)
        start = ",".join(fmt(v) for v in self.start)
        end = ",".join(fmt(v) for v in self.end)
        return f"({start}),({end})"


@dataclass
class CargoItem:
    itemId: str
    name: str
    width: float
    depth: float
    height: float
    mass: float = 0.0
    priority: int = 0
    preferredZone: Optional[str] = None
    expiryDate: Optional[date] = None
    usageLimit: Optional[int] = None
    remainingUses: Optional[int] = None
    containerId: Optional[str] = None
    position: Optional[Box] = None

    def __post_init__(self):
        if self.remainingUses is None:
            self.remainingUses = self.usageLimit

    @property
    def dims(self) -> Triple:
        return (float(self.width), float(self.depth), float(self.height))

    @property
    def is_placed(self) -> bool:
        return self.containerId is not None and self.position is not None

    def volume(self) -> float:
        return float(self.width) * float(self.depth) * float(self.height)

    def is_expired(self, today: date) -> bool:
        return self.expiryDate is not None and self.expiryDate < today

    def is_out_of_uses(self) -> bool:
        return self.remainingUses is not None and self.remainingUses <= 0

    def waste_reason(self, today: date) -> Optional[str]:
        if self.is_expired(today):
            return "Expired"
        if self.is_out_of_uses():
            return "Out of Uses"
        return None

    def use(self) -> Optional[int]:
        """Consume one use. Items without a usage limit are never used up."""
        if self.remainingUses is not None and self.remainingUses > 0:
            self.remainingUses -= 1
        return self.remainingUses


@dataclass
class ItemPlacement:
    itemId: str
    containerId: str
    position: Box

    def to_dict(self) -> Dict:
        return {
            "itemId": self.itemId,
            "containerId": self.containerId,
            "position": self.position.to_dict(),
        }


@dataclass
class RetrievalStep:
    step: int
    action: str  # "remove", "setAside", "retrieve", "placeBack"
    itemId: str
    item_name: str

    def to_dict(self) -> Dict:
        return {
            "step": self.step,
            "action": self.action,
            "itemId": self.itemId,
            "item_name": self.item_name,
        }


@dataclass
class RearrangementStep:
    step: int
    action: str  # "remove", "place"
    itemId: str
    from_container: Optional[str] = None
    from_position: Optional[Box] = None
    to_container: Optional[str] = None
    to_position: Optional[Box] = None

    def to_dict(self) -> Dict:
        return {
            "step": self.step,
            "action": self.action,
            "itemId": self.itemId,
            "from_container": self.from_container,
            "from_position": self.from_position.to_dict() if self.from_position else None,
            "to_container": self.to_container,
            "to_position": self.to_position.to_dict() if self.to_position else None,
        }


@dataclass
class PlacementResult:
    placements: List[ItemPlacement] = field(default_factory=list)
    rearrangements: List[RearrangementStep] = field(default_factory=list)
    unplaced: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.unplaced
