import logging

from fastapi import APIRouter, Depends, HTTPException

from algos.waste_algo import complete_undocking, identify_waste, plan_return
from dependencies import get_store
from errors import ContainerNotFoundError
from schemas import (
    CompleteUndockingRequest,
    CompleteUndockingResponse,
    ReturnItem,
    ReturnManifest,
    ReturnPlanRequest,
    ReturnPlanResponse,
    ReturnPlanStep,
    RetrievalStep,
    WasteItem,
    WasteItemResponse,
)
from store import CargoStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/waste",
    tags=["waste"],
)


@router.get("/identify", response_model=WasteItemResponse)
async def identify(store: CargoStore = Depends(get_store)):
    waste = identify_waste(store)
    return WasteItemResponse(
        success=True,
        waste_items=[WasteItem(**entry.to_dict()) for entry in waste],
    )


@router.post("/return-plan", response_model=ReturnPlanResponse)
async def return_plan(request: ReturnPlanRequest, store: CargoStore = Depends(get_store)):
    try:
        plan = plan_return(
            store,
            request.undocking_container_id,
            request.max_weight,
            request.undocking_date,
        )
    except ContainerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ReturnPlanResponse(
        success=True,
        return_plan=[ReturnPlanStep(**step) for step in plan.return_plan],
        retrieval_steps=[RetrievalStep(**step.to_dict()) for step in plan.retrieval_steps],
        return_manifest=ReturnManifest(
            undocking_container_id=plan.undocking_container_id,
            undocking_date=plan.undocking_date,
            return_items=[ReturnItem(**item) for item in plan.return_items],
            total_volume=plan.total_volume,
            total_weight=plan.total_weight,
        ),
    )


@router.post("/complete-undocking", response_model=CompleteUndockingResponse)
async def undock(request: CompleteUndockingRequest, store: CargoStore = Depends(get_store)):
    try:
        with store.transaction() as staged:
            removed = complete_undocking(staged, request.undocking_container_id)
    except ContainerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return CompleteUndockingResponse(success=True, items_removed=removed)
