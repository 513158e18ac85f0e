import logging
import math
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from algos.cargo_types import Box, CargoItem, Triple
from errors import ItemNotFoundError

logger = logging.getLogger(__name__)

# Axis indices into a (start_w, start_d, start_h, end_w, end_d, end_h) row
W, D, H = 0, 1, 2
EPSILON = 1e-9


class SpatialContainer:
    """A storage container and the boxes currently stowed inside it.

    Records are keyed by item id and kept in insertion order, which is the
    order ``items_blocking`` reports. The only mutators are ``add`` and
    ``remove``; both keep the no-overlap invariant.
    """

    def __init__(self, containerId: str, zone: str, width: float, depth: float, height: float):
        self.containerId = containerId
        self.zone = zone
        self.width = float(width)
        self.depth = float(depth)
        self.height = float(height)
        self._records: Dict[str, Box] = {}
        self._boxes: Optional[np.ndarray] = None

    def __repr__(self):
        return (f"SpatialContainer({self.containerId!r}, zone={self.zone!r}, "
                f"{self.width:g}x{self.depth:g}x{self.height:g}, items={len(self._records)})")

    def __contains__(self, item_id) -> bool:
        return item_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    @property
    def dims(self) -> Triple:
        return (self.width, self.depth, self.height)

    def item_ids(self) -> List[str]:
        return list(self._records)

    def records(self) -> Iterator[Tuple[str, Box]]:
        return iter(list(self._records.items()))

    def position_of(self, item_id) -> Optional[Box]:
        return self._records.get(item_id)

    def boxes(self) -> np.ndarray:
        """Occupied boxes as an (n, 6) array in insertion order."""
        if self._boxes is None:
            if self._records:
                self._boxes = np.array([box.as_row() for box in self._records.values()], dtype=float)
            else:
                self._boxes = np.empty((0, 6), dtype=float)
        return self._boxes

    def total_volume(self) -> float:
        return self.width * self.depth * self.height

    def occupied_volume(self) -> float:
        return sum(box.volume() for box in self._records.values())

    def available_volume(self) -> float:
        return self.total_volume() - self.occupied_volume()

    def in_bounds(self, position: Box) -> bool:
        return (all(s >= 0 for s in position.start) and
                all(e <= limit for e, limit in zip(position.end, self.dims)))

    def overlapping(self, position: Box) -> np.ndarray:
        """Boolean mask over ``boxes()`` of records overlapping ``position``."""
        boxes = self.boxes()
        start = np.asarray(position.start, dtype=float)
        end = np.asarray(position.end, dtype=float)
        return np.all((boxes[:, :3] < end) & (start < boxes[:, 3:]), axis=1)

    def can_fit(self, item: CargoItem, position: Box) -> bool:
        if any(abs(p - d) > EPSILON for p, d in zip(position.dims, item.dims)):
            return False
        if not self.in_bounds(position):
            return False
        return not self.overlapping(position).any()

    def add(self, item: CargoItem, position: Box) -> bool:
        if item.itemId in self._records:
            return False
        if not self.can_fit(item, position):
            return False
        self._records[item.itemId] = position
        self._boxes = None
        return True

    def remove(self, item_id) -> Optional[Box]:
        position = self._records.pop(item_id, None)
        if position is not None:
            self._boxes = None
        return position

    def items_blocking(self, target_id) -> List[str]:
        """Items between the container opening and ``target_id``.

        An item blocks when it starts at a lower depth than the target and its
        width/height footprint overlaps the target's. Returned in insertion
        order, not sorted by distance to the opening.
        """
        target = self._records.get(target_id)
        if target is None:
            raise ItemNotFoundError(target_id, where=f"container {self.containerId}")

        blocking = []
        for item_id, box in self._records.items():
            if item_id == target_id:
                continue
            if box.start[D] >= target.start[D]:
                continue
            if (box.start[W] < target.end[W] and target.start[W] < box.end[W] and
                    box.start[H] < target.end[H] and target.start[H] < box.end[H]):
                blocking.append(item_id)
        return blocking


def find_position(item: CargoItem, container: SpatialContainer, scan_limit: int = 0) -> Optional[Box]:
    """First-fit origin for ``item`` in ``container``.

    Integer origins are visited height outermost, depth middle, width
    innermost, and the first origin whose box fits is returned. Along the
    width axis the scan jumps past the furthest-reaching overlapping box,
    since every origin before that extent still overlaps it; the result is
    the same origin an exhaustive unit-step scan finds.

    ``scan_limit`` caps the number of origins tested (0 = unbounded).
    """
    w, d, h = item.dims
    if w > container.width or d > container.depth or h > container.height:
        return None

    boxes = container.boxes()
    tested = 0
    z = 0
    while z + h <= container.height:
        slab = boxes[(boxes[:, H] < z + h) & (boxes[:, 3 + H] > z)]
        y = 0
        while y + d <= container.depth:
            row = slab[(slab[:, D] < y + d) & (slab[:, 3 + D] > y)]
            x = 0
            while x + w <= container.width:
                tested += 1
                if scan_limit and tested > scan_limit:
                    logger.warning("Scan limit %d reached for item %s in container %s",
                                   scan_limit, item.itemId, container.containerId)
                    return None
                hits = row[(row[:, W] < x + w) & (row[:, 3 + W] > x)]
                if not len(hits):
                    return Box.from_origin((x, y, z), (w, d, h))
                x = max(x + 1, math.ceil(hits[:, 3 + W].max()))
            y += 1
        z += 1
    return None
