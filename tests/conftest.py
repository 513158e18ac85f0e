"""
Shared fixtures: an isolated store per test plus factories for stowing
containers and items through the store's placement choke point.
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from algos.cargo_types import Box, CargoItem
from algos.spatial_container import SpatialContainer
from config import Settings
from main import create_app
from store import CargoStore

MISSION_DATE = date(2025, 1, 1)


@pytest.fixture
def store() -> CargoStore:
    return CargoStore(current_date=MISSION_DATE)


@pytest.fixture
def add_container(store):
    def _add(container_id, dims=(10, 10, 10), zone="A"):
        return store.put_container(SpatialContainer(container_id, zone, *dims))
    return _add


@pytest.fixture
def add_item(store):
    def _add(item_id, dims, priority=0, zone=None, container_id=None, origin=(0, 0, 0), **kwargs):
        width, depth, height = dims
        item = store.put_item(CargoItem(
            itemId=item_id,
            name=kwargs.pop("name", f"item-{item_id}"),
            width=width,
            depth=depth,
            height=height,
            priority=priority,
            preferredZone=zone,
            **kwargs,
        ))
        if container_id is not None:
            store.place_item(item_id, container_id, Box.from_origin(origin, item.dims))
        return item
    return _add


@pytest.fixture
def client(store) -> TestClient:
    return TestClient(create_app(store=store, settings=Settings(scan_limit=0)))
