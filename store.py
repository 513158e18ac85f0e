import copy
import logging
import threading
from contextlib import contextmanager
from datetime import date
from typing import Dict, Iterator, List, Optional

import numpy as np
import polars as pl

from algos.cargo_types import Box, CargoItem
from algos.spatial_container import SpatialContainer
from errors import (
    ContainerNotFoundError,
    ItemNotFoundError,
    PlacementInvariantError,
)

logger = logging.getLogger(__name__)

ARRANGEMENT_COLUMNS = ["Item ID", "Container ID", "Coordinates"]


class CargoStore:
    """Owns every container and item record.

    All placement changes go through ``place_item`` / ``unplace_item`` so that
    the container's record and the item's ``containerId``/``position`` always
    move together.
    """

    def __init__(self, current_date: Optional[date] = None):
        self._items: Dict[str, CargoItem] = {}
        self._containers: Dict[str, SpatialContainer] = {}
        self.current_date = current_date or date.today()
        self._lock = threading.RLock()
        self._rolled_back = False

    # Items

    def get_item(self, item_id) -> CargoItem:
        item = self._items.get(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    def find_item(self, item_id) -> Optional[CargoItem]:
        return self._items.get(item_id)

    def find_item_by_name(self, name: str) -> Optional[CargoItem]:
        for item in self._items.values():
            if item.name == name:
                return item
        return None

    def put_item(self, item: CargoItem) -> CargoItem:
        existing = self._items.get(item.itemId)
        if existing is not None and existing.is_placed:
            if (item.containerId, item.position) != (existing.containerId, existing.position):
                raise PlacementInvariantError(
                    f"Item {item.itemId} is stowed in {existing.containerId}; unplace it before replacing")
        self._items[item.itemId] = item
        return item

    def remove_item(self, item_id) -> CargoItem:
        item = self.get_item(item_id)
        if item.is_placed:
            self.unplace_item(item_id)
        return self._items.pop(item_id)

    def list_items(self) -> List[CargoItem]:
        return list(self._items.values())

    def use_item(self, item_id) -> Optional[int]:
        return self.get_item(item_id).use()

    # Containers

    def get_container(self, container_id) -> SpatialContainer:
        container = self._containers.get(container_id)
        if container is None:
            raise ContainerNotFoundError(container_id)
        return container

    def find_container(self, container_id) -> Optional[SpatialContainer]:
        return self._containers.get(container_id)

    def put_container(self, container: SpatialContainer) -> SpatialContainer:
        existing = self._containers.get(container.containerId)
        if existing is not None and existing is not container and len(existing):
            raise PlacementInvariantError(
                f"Container {container.containerId} holds {len(existing)} items and cannot be replaced")
        self._containers[container.containerId] = container
        return container

    def remove_container(self, container_id) -> SpatialContainer:
        container = self.get_container(container_id)
        if len(container):
            raise PlacementInvariantError(
                f"Container {container_id} still holds items {container.item_ids()}")
        return self._containers.pop(container_id)

    def list_containers(self) -> List[SpatialContainer]:
        return list(self._containers.values())

    # Placement choke point

    def place_item(self, item_id, container_id, position: Box) -> None:
        item = self.get_item(item_id)
        container = self.get_container(container_id)
        if item.is_placed:
            raise PlacementInvariantError(
                f"Item {item_id} is already placed in {item.containerId}")
        if not container.add(item, position):
            raise PlacementInvariantError(
                f"Item {item_id} does not fit in {container_id} at {position.to_coordinate_string()}")
        item.containerId = container_id
        item.position = position

    def unplace_item(self, item_id) -> Box:
        item = self.get_item(item_id)
        if not item.is_placed:
            raise PlacementInvariantError(f"Item {item_id} is not placed")
        container = self.get_container(item.containerId)
        position = container.remove(item_id)
        if position is None:
            raise PlacementInvariantError(
                f"Item {item_id} claims container {item.containerId} but has no record there")
        item.containerId = None
        item.position = None
        return position

    def move_item(self, item_id, container_id, position: Box) -> bool:
        """Relocate an item, keeping its previous slot if the target is rejected."""
        item = self.get_item(item_id)
        container = self.get_container(container_id)
        previous = None
        if item.is_placed:
            previous = (item.containerId, self.unplace_item(item_id))
        if container.can_fit(item, position):
            self.place_item(item_id, container_id, position)
            return True
        if previous is not None:
            self.place_item(item_id, *previous)
        return False

    # Transactions

    def clone(self) -> "CargoStore":
        staged = CargoStore(self.current_date)
        staged._items = copy.deepcopy(self._items)
        staged._containers = copy.deepcopy(self._containers)
        return staged

    def rollback(self) -> None:
        self._rolled_back = True

    @contextmanager
    def transaction(self) -> Iterator["CargoStore"]:
        """Stage mutations on a copy; commit on normal exit unless rolled back."""
        with self._lock:
            staged = self.clone()
            yield staged
            if staged._rolled_back:
                logger.info("Transaction rolled back")
                return
            staged.check_consistency()
            self._items = staged._items
            self._containers = staged._containers

    def check_consistency(self) -> None:
        seen = set()
        for container in self._containers.values():
            rows = list(container.records())
            for item_id, box in rows:
                item = self._items.get(item_id)
                if item is None:
                    raise PlacementInvariantError(
                        f"Container {container.containerId} references unknown item {item_id}")
                if item.containerId != container.containerId or item.position != box:
                    raise PlacementInvariantError(
                        f"Item {item_id} disagrees with container {container.containerId}")
                if item_id in seen:
                    raise PlacementInvariantError(f"Item {item_id} recorded in two containers")
                seen.add(item_id)
                if not container.in_bounds(box):
                    raise PlacementInvariantError(f"Item {item_id} is out of bounds")
            for i, (first_id, first) in enumerate(rows):
                # Rows and the box array share insertion order
                mask = container.overlapping(first)
                mask[i] = False
                if mask.any():
                    second_id = rows[int(np.argmax(mask))][0]
                    raise PlacementInvariantError(
                        f"Items {first_id} and {second_id} overlap in {container.containerId}")
        for item in self._items.values():
            if item.is_placed and item.itemId not in seen:
                raise PlacementInvariantError(
                    f"Item {item.itemId} claims container {item.containerId} without a record")
            if (item.containerId is None) != (item.position is None):
                raise PlacementInvariantError(f"Item {item.itemId} is partially placed")

    # Export

    def arrangement_frame(self) -> pl.DataFrame:
        rows = [
            {
                "Item ID": item.itemId,
                "Container ID": item.containerId,
                "Coordinates": item.position.to_coordinate_string(),
            }
            for item in self._items.values()
            if item.is_placed
        ]
        if not rows:
            return pl.DataFrame(schema={column: pl.Utf8 for column in ARRANGEMENT_COLUMNS})
        return pl.DataFrame(rows).select(ARRANGEMENT_COLUMNS)

    def export_arrangement_csv(self) -> str:
        return self.arrangement_frame().write_csv()
