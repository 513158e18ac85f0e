import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from algos.retrieve_algo import RetrievalPathPlanner
from dependencies import get_store
from errors import ContainerNotFoundError, ItemNotFoundError
from schemas import (
    Item_for_search,
    PlaceItemRequest,
    PlaceItemResponse,
    Position,
    RetrievalStep,
    RetrieveItemRequest,
    RetrieveResponse,
    SearchResponse,
)
from store import CargoStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["search_retrieve"],
)


@router.get("/search", response_model=SearchResponse)
async def search_item(
    itemId: Optional[str] = Query(None),
    itemName: Optional[str] = Query(None),
    userId: Optional[str] = Query(None, description="Optional user ID for logging purposes"),
    store: CargoStore = Depends(get_store),
):
    if itemId is not None:
        item = store.find_item(itemId)
    elif itemName is not None:
        item = store.find_item_by_name(itemName)
    else:
        raise HTTPException(status_code=400, detail="Either itemId or itemName must be provided")

    if item is None:
        return SearchResponse(success=True, found=False)

    if not item.is_placed:
        return SearchResponse(
            success=True,
            found=True,
            item=Item_for_search(itemId=item.itemId, name=item.name),
        )

    container = store.get_container(item.containerId)
    steps = RetrievalPathPlanner(store).steps_to_retrieve(item.itemId, container)
    if userId:
        logger.info("User %s searched for %s (%d retrieval steps)", userId, item.itemId, len(steps))

    return SearchResponse(
        success=True,
        found=True,
        item=Item_for_search(
            itemId=item.itemId,
            name=item.name,
            containerId=container.containerId,
            zone=container.zone,
            position=Position.from_box(item.position),
        ),
        retrieval_steps=[RetrievalStep(**step.to_dict()) for step in steps],
    )


@router.post("/retrieve", response_model=RetrieveResponse)
async def retrieve_item(request: RetrieveItemRequest, store: CargoStore = Depends(get_store)):
    try:
        with store.transaction() as staged:
            item = staged.get_item(request.itemId)
            if not item.is_placed:
                logger.info("Item %s is not stowed anywhere", item.itemId)
                staged.rollback()
                return RetrieveResponse(success=False)
            if item.is_out_of_uses():
                logger.info("Item %s has no uses left", item.itemId)
                staged.rollback()
                return RetrieveResponse(success=False, remainingUses=item.remainingUses)
            remaining = staged.use_item(item.itemId)
    except ItemNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    logger.info("User %s retrieved %s from %s (remaining uses: %s)",
                request.userId, request.itemId, item.containerId, remaining)
    return RetrieveResponse(success=True, remainingUses=remaining)


@router.post("/place", response_model=PlaceItemResponse)
async def place_item(request: PlaceItemRequest, store: CargoStore = Depends(get_store)):
    try:
        with store.transaction() as staged:
            moved = staged.move_item(request.itemId, request.containerId, request.position.to_box())
            if not moved:
                staged.rollback()
    except (ItemNotFoundError, ContainerNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))

    if not moved:
        logger.info("Cannot place item %s in container %s at the requested position",
                    request.itemId, request.containerId)
        return PlaceItemResponse(success=False)

    logger.info("User %s placed %s in %s", request.userId, request.itemId, request.containerId)
    return PlaceItemResponse(success=True)
