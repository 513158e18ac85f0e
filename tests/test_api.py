"""HTTP-level tests through FastAPI's TestClient."""

from algos.cargo_types import Box


def item_spec(item_id, dims, priority=1, zone="A", **extra):
    width, depth, height = dims
    spec = {
        "itemId": item_id,
        "name": f"Item {item_id}",
        "width": width,
        "depth": depth,
        "height": height,
        "mass": 1.0,
        "priority": priority,
        "preferredZone": zone,
    }
    spec.update(extra)
    return spec


CONTAINER = {"containerId": "C1", "zone": "A", "width": 10, "depth": 10, "height": 10}


def start_of(placement):
    coords = placement["position"]["startCoordinates"]
    return (coords["width"], coords["depth"], coords["height"])


def place(client, items, containers=(CONTAINER,)):
    return client.post("/api/placement", json={"items": items, "containers": list(containers)})


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


class TestPlacementEndpoint:
    def test_places_by_priority_first_fit(self, client):
        resp = place(client, [item_spec("B", (4, 4, 4), priority=3), item_spec("A", (4, 4, 4), priority=5)])

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["committed"] is True
        assert [(p["itemId"], start_of(p)) for p in body["placements"]] == [
            ("A", (0, 0, 0)),
            ("B", (4, 0, 0)),
        ]
        assert body["rearrangements"] == []

    def test_existing_container_keeps_occupancy(self, client):
        place(client, [item_spec("A", (4, 4, 4))])
        body = place(client, [item_spec("B", (4, 4, 4))]).json()
        assert start_of(body["placements"][0]) == (4, 0, 0)

    def test_failed_batch_is_not_committed(self, client):
        body = place(client, [item_spec("small", (1, 1, 1)), item_spec("huge", (20, 1, 1))]).json()

        assert body["success"] is False
        assert body["unplaced"] == ["huge"]
        assert body["committed"] is False
        assert client.get("/api/search", params={"itemId": "small"}).json()["found"] is False

    def test_rearrangement_transcript(self, client, store):
        place(client, [item_spec("L", (2, 2, 1), priority=1)])
        store.move_item("L", "C1", Box.from_origin((0, 0, 5), (2, 2, 1)))

        body = place(client, [item_spec("H", (10, 10, 9), priority=9)]).json()

        assert body["success"] is True
        assert [(s["step"], s["action"], s["itemId"]) for s in body["rearrangements"]] == [
            (1, "remove", "L"), (2, "place", "H"), (3, "place", "L"),
        ]
        store.check_consistency()

    def test_restowing_placed_item_conflicts(self, client):
        place(client, [item_spec("A", (4, 4, 4))])
        resp = place(client, [item_spec("A", (4, 4, 4))])
        assert resp.status_code == 409

    def test_rejects_non_positive_dimensions(self, client):
        resp = place(client, [item_spec("bad", (0, 1, 1))])
        assert resp.status_code == 422

    def test_rejects_duplicate_item_ids(self, client):
        resp = place(client, [item_spec("D", (2, 2, 2)), item_spec("D", (3, 3, 3))])

        assert resp.status_code == 422
        assert client.get("/api/search", params={"itemId": "D"}).json()["found"] is False

    def test_rejects_duplicate_container_ids(self, client):
        resp = place(client, [item_spec("A", (2, 2, 2))], containers=(CONTAINER, dict(CONTAINER, zone="B")))
        assert resp.status_code == 422


class TestSearchEndpoint:
    def test_retrieval_steps_for_blocked_item(self, client):
        place(client, [
            item_spec("A", (4, 4, 4), priority=5),
            item_spec("B", (4, 4, 4), priority=4),
            item_spec("C", (4, 4, 4), priority=3),
        ])

        body = client.get("/api/search", params={"itemId": "C"}).json()

        assert body["found"] is True
        assert body["item"]["containerId"] == "C1"
        assert body["item"]["zone"] == "A"
        assert [(s["action"], s["itemId"]) for s in body["retrieval_steps"]] == [
            ("remove", "A"), ("setAside", "A"), ("retrieve", "C"), ("placeBack", "A"),
        ]

    def test_search_by_name(self, client):
        place(client, [item_spec("A", (4, 4, 4))])
        body = client.get("/api/search", params={"itemName": "Item A"}).json()
        assert body["item"]["itemId"] == "A"
        assert body["retrieval_steps"][0]["action"] == "retrieve"

    def test_requires_id_or_name(self, client):
        assert client.get("/api/search").status_code == 400

    def test_unknown_item(self, client):
        body = client.get("/api/search", params={"itemId": "ghost"}).json()
        assert body == {"success": True, "found": False, "item": None, "retrieval_steps": []}


class TestRetrieveAndPlace:
    def test_retrieve_decrements_uses(self, client):
        place(client, [item_spec("A", (4, 4, 4), usageLimit=1)])

        first = client.post("/api/retrieve", json={"itemId": "A", "userId": "astro"}).json()
        second = client.post("/api/retrieve", json={"itemId": "A", "userId": "astro"}).json()

        assert first == {"success": True, "remainingUses": 0}
        assert second["success"] is False

    def test_retrieve_unknown_item(self, client):
        resp = client.post("/api/retrieve", json={"itemId": "ghost", "userId": "astro"})
        assert resp.status_code == 404

    def test_place_moves_item(self, client):
        place(client, [item_spec("A", (4, 4, 4))])
        position = {
            "startCoordinates": {"width": 0, "depth": 0, "height": 4},
            "endCoordinates": {"width": 4, "depth": 4, "height": 8},
        }

        resp = client.post("/api/place", json={"itemId": "A", "userId": "astro",
                                               "containerId": "C1", "position": position})

        assert resp.json() == {"success": True}
        found = client.get("/api/search", params={"itemId": "A"}).json()
        assert found["item"]["position"]["startCoordinates"]["height"] == 4

    def test_place_rejects_overlap(self, client):
        place(client, [item_spec("A", (4, 4, 4)), item_spec("B", (4, 4, 4))])
        position = {
            "startCoordinates": {"width": 2, "depth": 0, "height": 0},
            "endCoordinates": {"width": 6, "depth": 4, "height": 4},
        }

        resp = client.post("/api/place", json={"itemId": "B", "containerId": "C1", "position": position})

        assert resp.json() == {"success": False}

    def test_place_unknown_container(self, client):
        place(client, [item_spec("A", (4, 4, 4))])
        position = {
            "startCoordinates": {"width": 0, "depth": 0, "height": 0},
            "endCoordinates": {"width": 4, "depth": 4, "height": 4},
        }
        resp = client.post("/api/place", json={"itemId": "A", "containerId": "nope", "position": position})
        assert resp.status_code == 404


class TestWasteAndExport:
    def test_waste_flow(self, client):
        place(client, [
            item_spec("old", (2, 2, 2), expiryDate="2024-06-01"),
            item_spec("new", (2, 2, 2), expiryDate="2030-06-01"),
        ], containers=(CONTAINER, {"containerId": "U1", "zone": "Airlock",
                                   "width": 5, "depth": 5, "height": 5}))

        waste = client.get("/api/waste/identify").json()
        assert [w["itemId"] for w in waste["waste_items"]] == ["old"]
        assert waste["waste_items"][0]["reason"] == "Expired"

        plan = client.post("/api/waste/return-plan", json={
            "undocking_container_id": "U1", "undocking_date": "2025-01-02", "max_weight": 5,
        }).json()
        assert [s["itemId"] for s in plan["return_plan"]] == ["old"]
        assert plan["return_manifest"]["total_weight"] == 1.0

        done = client.post("/api/waste/complete-undocking", json={"undocking_container_id": "U1"}).json()
        assert done == {"success": True, "items_removed": 0}

    def test_return_plan_unknown_container(self, client):
        resp = client.post("/api/waste/return-plan", json={"undocking_container_id": "X", "max_weight": 1})
        assert resp.status_code == 404

    def test_export_arrangement(self, client):
        place(client, [item_spec("A", (4, 4, 4))])

        resp = client.get("/api/export/arrangement")

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        lines = resp.text.splitlines()
        assert lines[0] == "Item ID,Container ID,Coordinates"
        assert lines[1] == 'A,C1,"(0,0,0),(4,4,4)"'
