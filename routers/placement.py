import logging

from fastapi import APIRouter, Depends, HTTPException

from algos.placement_algo import PlacementEngine
from config import Settings
from dependencies import get_settings, get_store
from errors import ItemAlreadyStowedError
from schemas import (
    ItemPlacement,
    PlacementRequest,
    PlacementResponse,
    Position,
    RearrangementStep,
)
from store import CargoStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["placement"],
)


def _to_response(result) -> PlacementResponse:
    return PlacementResponse(
        success=result.success,
        committed=result.success,
        placements=[
            ItemPlacement(
                itemId=p.itemId,
                containerId=p.containerId,
                position=Position.from_box(p.position),
            ) for p in result.placements
        ],
        rearrangements=[RearrangementStep(**step.to_dict()) for step in result.rearrangements],
        unplaced=result.unplaced,
    )


@router.post("/placement", response_model=PlacementResponse)
async def placement(
    request: PlacementRequest,
    store: CargoStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    try:
        with store.transaction() as staged:
            containers = []
            for spec in request.containers:
                # Known containers keep their current occupancy
                container = staged.find_container(spec.containerId)
                if container is None:
                    container = staged.put_container(spec.to_spatial_container())
                containers.append(container)

            items = []
            for spec in request.items:
                existing = staged.find_item(spec.itemId)
                if existing is not None and existing.is_placed:
                    raise ItemAlreadyStowedError(spec.itemId, existing.containerId)
                items.append(staged.put_item(spec.to_cargo_item()))

            result = PlacementEngine(staged, settings.scan_limit).place_all(items, containers)
            if not result.success:
                logger.info("Placement incomplete (unplaced: %s); discarding staged changes",
                            ", ".join(result.unplaced))
                staged.rollback()
    except ItemAlreadyStowedError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return _to_response(result)
