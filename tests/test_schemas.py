"""Tests for request models and their conversion to engine types."""

import warnings
from datetime import date

import pytest
from pydantic import ValidationError

from algos.cargo_types import Box
from schemas import Container, Item, PlacementRequest, Position


def item_payload(item_id, **extra):
    payload = {"itemId": item_id, "name": f"Item {item_id}", "width": 2, "depth": 3, "height": 4}
    payload.update(extra)
    return payload


CONTAINER = {"containerId": "C1", "zone": "A", "width": 10, "depth": 10, "height": 10}


class TestConversions:
    def test_conversions_emit_no_deprecation_warnings(self):
        item = Item(**item_payload(" I1 ", usageLimit=3, expiryDate="2025-06-01"))
        container = Container(**CONTAINER)
        position = Position.from_box(Box.from_origin((1, 0, 0), (2, 3, 4)))

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            cargo = item.to_cargo_item()
            spatial = container.to_spatial_container()
            box = position.to_box()

        assert cargo.itemId == "I1"
        assert cargo.remainingUses == 3
        assert cargo.expiryDate == date(2025, 6, 1)
        assert spatial.dims == (10.0, 10.0, 10.0)
        assert box == Box((1, 0, 0), (3, 3, 4))


class TestPlacementRequest:
    def test_duplicate_item_ids_rejected(self):
        with pytest.raises(ValidationError, match="duplicate itemId: D"):
            PlacementRequest(items=[item_payload("D"), item_payload("D")], containers=[CONTAINER])

    def test_ids_compared_after_trimming(self):
        with pytest.raises(ValidationError, match="duplicate itemId"):
            PlacementRequest(items=[item_payload("D"), item_payload(" D ")], containers=[CONTAINER])

    def test_duplicate_container_ids_rejected(self):
        with pytest.raises(ValidationError, match="duplicate containerId: C1"):
            PlacementRequest(items=[item_payload("A")], containers=[CONTAINER, CONTAINER])

    def test_distinct_ids_accepted(self):
        request = PlacementRequest(
            items=[item_payload("A"), item_payload("B")],
            containers=[CONTAINER, dict(CONTAINER, containerId="C2")],
        )
        assert [item.itemId for item in request.items] == ["A", "B"]
