import logging
from typing import Optional, Sequence

from algos.cargo_types import Box, CargoItem, ItemPlacement, PlacementResult
from algos.rearrange_algo import RearrangementPlanner
from algos.spatial_container import SpatialContainer, find_position

logger = logging.getLogger(__name__)


class PlacementEngine:
    """Batch placement: preferred zone first, any zone second, eviction last."""

    def __init__(self, store, scan_limit: int = 0):
        self.store = store
        self.scan_limit = scan_limit

    def find_position(self, item: CargoItem, container: SpatialContainer) -> Optional[Box]:
        return find_position(item, container, self.scan_limit)

    def _first_fit(self, item: CargoItem, containers: Sequence[SpatialContainer]) -> Optional[ItemPlacement]:
        preferred = [c for c in containers if c.zone == item.preferredZone]
        others = [c for c in containers if c.zone != item.preferredZone]
        for container in preferred + others:
            position = self.find_position(item, container)
            if position is not None:
                return ItemPlacement(item.itemId, container.containerId, position)
        return None

    def place_all(self, items: Sequence[CargoItem],
                  containers: Sequence[SpatialContainer]) -> PlacementResult:
        """Place ``items`` into ``containers``, committing through the store.

        Items go highest priority first (stable for ties). Whatever fits
        nowhere is handed to the rearrangement planner as one batch.
        """
        ordered = sorted(items, key=lambda item: -item.priority)
        result = PlacementResult()
        leftovers = []

        for item in ordered:
            placement = self._first_fit(item, containers)
            if placement is None:
                leftovers.append(item)
                continue
            self.store.place_item(item.itemId, placement.containerId, placement.position)
            result.placements.append(placement)
            logger.debug("Placed %s in %s at %s", item.itemId, placement.containerId,
                         placement.position.to_coordinate_string())

        if leftovers:
            logger.info("%d item(s) found no free space; attempting rearrangement", len(leftovers))
            rearranged = RearrangementPlanner(self.store, self.scan_limit).resolve(leftovers, containers)
            result.placements.extend(rearranged.placements)
            result.rearrangements.extend(rearranged.rearrangements)
            result.unplaced.extend(rearranged.unplaced)

        logger.info("Placement summary: %d placed, %d rearrangement steps, %d unplaced",
                    len(result.placements), len(result.rearrangements), len(result.unplaced))
        return result
