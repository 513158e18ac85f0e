from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, validator

from algos.cargo_types import Box, CargoItem
from algos.spatial_container import SpatialContainer


def _clean_id(v):
    if isinstance(v, int):
        v = str(v)
    if not isinstance(v, str) or not v.strip():
        raise ValueError("id must be a non-empty string")
    return v.strip()


class Coordinates(BaseModel):
    width: float = Field(..., ge=0)
    depth: float = Field(..., ge=0)
    height: float = Field(..., ge=0)


class Position(BaseModel):
    startCoordinates: Coordinates
    endCoordinates: Coordinates

    @classmethod
    def from_box(cls, box: Box) -> "Position":
        return cls(**box.to_dict())

    def to_box(self) -> Box:
        return Box.from_dict(self.model_dump())


class Item(BaseModel):
    itemId: str
    name: str
    width: float = Field(..., gt=0)
    depth: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    mass: float = Field(0.0, ge=0)
    priority: int = 0
    preferredZone: Optional[str] = None
    expiryDate: Optional[date] = None
    usageLimit: Optional[int] = Field(None, ge=0)
    remainingUses: Optional[int] = Field(None, ge=0)

    @validator("itemId", pre=True)
    def validate_item_id(cls, v):
        return _clean_id(v)

    def to_cargo_item(self) -> CargoItem:
        return CargoItem(**self.model_dump())


class Container(BaseModel):
    containerId: str
    zone: str
    width: float = Field(..., gt=0)
    depth: float = Field(..., gt=0)
    height: float = Field(..., gt=0)

    @validator("containerId", pre=True)
    def validate_container_id(cls, v):
        return _clean_id(v)

    def to_spatial_container(self) -> SpatialContainer:
        return SpatialContainer(**self.model_dump())


class ItemPlacement(BaseModel):
    itemId: str
    containerId: str
    position: Position


class RetrievalStep(BaseModel):
    step: int
    action: str
    itemId: str
    item_name: str


class RearrangementStep(BaseModel):
    step: int
    action: str  # "remove", "place"
    itemId: str
    from_container: Optional[str] = None
    from_position: Optional[Position] = None
    to_container: Optional[str] = None
    to_position: Optional[Position] = None


def _reject_duplicates(ids, kind):
    seen = set()
    duplicates = []
    for i in ids:
        if i in seen and i not in duplicates:
            duplicates.append(i)
        seen.add(i)
    if duplicates:
        raise ValueError(f"duplicate {kind}: {', '.join(duplicates)}")


class PlacementRequest(BaseModel):
    items: List[Item]
    containers: List[Container]

    @validator("items")
    def validate_unique_items(cls, v):
        _reject_duplicates([item.itemId for item in v], "itemId")
        return v

    @validator("containers")
    def validate_unique_containers(cls, v):
        _reject_duplicates([container.containerId for container in v], "containerId")
        return v


class PlacementResponse(BaseModel):
    success: bool
    # False when the batch was rolled back; placements then describe the
    # attempted plan, not the stored arrangement
    committed: bool = False
    placements: List[ItemPlacement]
    rearrangements: List[RearrangementStep]
    unplaced: List[str] = []


class Item_for_search(BaseModel):
    itemId: str
    name: str
    containerId: Optional[str] = None
    zone: Optional[str] = None
    position: Optional[Position] = None


class SearchResponse(BaseModel):
    success: bool
    found: bool
    item: Optional[Item_for_search] = None
    retrieval_steps: List[RetrievalStep] = []


class RetrieveItemRequest(BaseModel):
    itemId: str
    userId: Optional[str] = None
    timestamp: Optional[str] = None

    @validator("itemId", pre=True)
    def validate_item_id(cls, v):
        return _clean_id(v)


class RetrieveResponse(BaseModel):
    success: bool
    remainingUses: Optional[int] = None


class PlaceItemRequest(BaseModel):
    itemId: str
    userId: Optional[str] = None
    containerId: str
    position: Position
    timestamp: Optional[str] = None

    @validator("itemId", "containerId", pre=True)
    def validate_ids(cls, v):
        return _clean_id(v)


class PlaceItemResponse(BaseModel):
    success: bool


class WasteItem(BaseModel):
    itemId: str
    name: str
    reason: str
    containerId: Optional[str] = None
    position: Optional[Position] = None


class WasteItemResponse(BaseModel):
    success: bool
    waste_items: List[WasteItem] = []


class ReturnPlanRequest(BaseModel):
    undocking_container_id: str
    undocking_date: Optional[date] = None
    max_weight: float = Field(..., ge=0)


class ReturnPlanStep(BaseModel):
    step: int
    itemId: str
    item_name: str
    from_container: str
    to_container: str


class ReturnItem(BaseModel):
    itemId: str
    name: str
    reason: str


class ReturnManifest(BaseModel):
    undocking_container_id: str
    undocking_date: Optional[date] = None
    return_items: List[ReturnItem]
    total_volume: float
    total_weight: float


class ReturnPlanResponse(BaseModel):
    success: bool
    return_plan: List[ReturnPlanStep]
    retrieval_steps: List[RetrievalStep]
    return_manifest: ReturnManifest


class CompleteUndockingRequest(BaseModel):
    undocking_container_id: str
    timestamp: Optional[str] = None


class CompleteUndockingResponse(BaseModel):
    success: bool
    items_removed: int
