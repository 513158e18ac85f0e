import logging
from typing import List, Optional, Sequence, Tuple

from algos.cargo_types import Box, CargoItem, ItemPlacement, PlacementResult, RearrangementStep
from algos.spatial_container import SpatialContainer, find_position

logger = logging.getLogger(__name__)


class RearrangementPlanner:
    """Makes room for items that found no free space by evicting
    lower-priority occupants, one eviction per item at most."""

    def __init__(self, store, scan_limit: int = 0):
        self.store = store
        self.scan_limit = scan_limit
        self._step = 0
        self._transcript: List[RearrangementStep] = []

    def _record(self, action: str, item_id: str, **kwargs) -> None:
        self._step += 1
        self._transcript.append(RearrangementStep(step=self._step, action=action, itemId=item_id, **kwargs))

    def _find(self, item: CargoItem, container: SpatialContainer) -> Optional[Box]:
        return find_position(item, container, self.scan_limit)

    def resolve(self, unplaced_items: Sequence[CargoItem],
                containers: Sequence[SpatialContainer]) -> PlacementResult:
        """Place ``unplaced_items`` (already priority ordered) by eviction.

        Every evicted occupant ends up in exactly one container: re-homed in
        another container, back in its own slot, or elsewhere in its own
        container. An eviction that cannot re-home its occupant is undone.
        """
        result = PlacementResult()
        self._step = 0
        self._transcript = result.rearrangements

        for item in unplaced_items:
            ranked = sorted(containers, key=lambda c: c.available_volume(), reverse=True)
            placement = None
            for container in ranked:
                position = self._find(item, container)
                if position is not None:
                    self.store.place_item(item.itemId, container.containerId, position)
                    placement = ItemPlacement(item.itemId, container.containerId, position)
                    break
                placement = self._evict_for(item, container, ranked)
                if placement is not None:
                    break

            if placement is None:
                logger.warning("Item %s could not be placed even after rearrangement", item.itemId)
                result.unplaced.append(item.itemId)
            else:
                result.placements.append(placement)
        return result

    def _evict_for(self, item: CargoItem, container: SpatialContainer,
                   ranked: Sequence[SpatialContainer]) -> Optional[ItemPlacement]:
        occupants = [self.store.get_item(item_id) for item_id in container.item_ids()]
        candidates = sorted(
            (occupant for occupant in occupants if occupant.priority < item.priority),
            key=lambda occupant: occupant.priority,
        )

        for occupant in candidates:
            original = self.store.unplace_item(occupant.itemId)
            position = self._find(item, container)
            if position is None:
                self.store.place_item(occupant.itemId, container.containerId, original)
                continue

            self.store.place_item(item.itemId, container.containerId, position)
            home = self._new_home(occupant, container, original, ranked)
            if home is None:
                logger.info("No home for evicted item %s; keeping it in %s at its slot",
                            occupant.itemId, container.containerId)
                self.store.unplace_item(item.itemId)
                self.store.place_item(occupant.itemId, container.containerId, original)
                continue

            home_container, home_position = home
            self._record("remove", occupant.itemId,
                         from_container=container.containerId, from_position=original)
            self._record("place", item.itemId,
                         to_container=container.containerId, to_position=position)
            self.store.place_item(occupant.itemId, home_container.containerId, home_position)
            self._record("place", occupant.itemId,
                         to_container=home_container.containerId, to_position=home_position)
            logger.info("Evicted %s (priority %s) from %s to make room for %s; re-homed in %s",
                        occupant.itemId, occupant.priority, container.containerId,
                        item.itemId, home_container.containerId)
            return ItemPlacement(item.itemId, container.containerId, position)
        return None

    def _new_home(self, occupant: CargoItem, container: SpatialContainer, original: Box,
                  ranked: Sequence[SpatialContainer]) -> Optional[Tuple[SpatialContainer, Box]]:
        for other in ranked:
            if other.containerId == container.containerId:
                continue
            position = self._find(occupant, other)
            if position is not None:
                return other, position
        if container.can_fit(occupant, original):
            return container, original
        position = self._find(occupant, container)
        if position is not None:
            return container, position
        return None
