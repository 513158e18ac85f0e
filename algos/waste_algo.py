import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from algos.cargo_types import CargoItem, RetrievalStep
from algos.retrieve_algo import RetrievalPathPlanner

logger = logging.getLogger(__name__)


@dataclass
class WasteEntry:
    item: CargoItem
    reason: str

    def to_dict(self) -> Dict:
        return {
            "itemId": self.item.itemId,
            "name": self.item.name,
            "reason": self.reason,
            "containerId": self.item.containerId,
            "position": self.item.position.to_dict() if self.item.position else None,
        }


@dataclass
class ReturnPlan:
    undocking_container_id: str
    undocking_date: Optional[date]
    return_plan: List[Dict] = field(default_factory=list)
    retrieval_steps: List[RetrievalStep] = field(default_factory=list)
    return_items: List[Dict] = field(default_factory=list)
    total_volume: float = 0.0
    total_weight: float = 0.0


def identify_waste(store, today: Optional[date] = None) -> List[WasteEntry]:
    """Expired or used-up items, in store order."""
    today = today or store.current_date
    waste = []
    for item in store.list_items():
        reason = item.waste_reason(today)
        if reason:
            waste.append(WasteEntry(item, reason))
    return waste


def plan_return(store, undocking_container_id: str, max_weight: float,
                undocking_date: Optional[date] = None) -> ReturnPlan:
    """Pick waste lowest priority first while it stays under ``max_weight``.

    Only stowed waste is eligible. Each selected item gets its retrieval
    path, and the steps are numbered as one continuous sequence.
    """
    store.get_container(undocking_container_id)
    planner = RetrievalPathPlanner(store)
    plan = ReturnPlan(undocking_container_id, undocking_date)

    candidates = sorted(identify_waste(store, undocking_date), key=lambda entry: entry.item.priority)
    for entry in candidates:
        item = entry.item
        if not item.is_placed:
            continue
        if plan.total_weight + item.mass > max_weight:
            logger.debug("Skipping %s: %.2f kg would exceed the %.2f kg budget",
                         item.itemId, item.mass, max_weight)
            continue

        container = store.get_container(item.containerId)
        steps = planner.steps_to_retrieve(item.itemId, container,
                                          first_step=len(plan.retrieval_steps) + 1)
        plan.retrieval_steps.extend(steps)
        plan.return_plan.append({
            "step": len(plan.return_plan) + 1,
            "itemId": item.itemId,
            "item_name": item.name,
            "from_container": container.containerId,
            "to_container": undocking_container_id,
        })
        plan.return_items.append({"itemId": item.itemId, "name": item.name, "reason": entry.reason})
        plan.total_weight += item.mass
        plan.total_volume += item.volume()

    logger.info("Return plan for %s: %d item(s), %.2f kg",
                undocking_container_id, len(plan.return_items), plan.total_weight)
    return plan


def complete_undocking(store, undocking_container_id: str) -> int:
    """Drop every item stowed in the undocking container from the store."""
    container = store.get_container(undocking_container_id)
    removed = 0
    for item_id in container.item_ids():
        store.remove_item(item_id)
        removed += 1
    logger.info("Undocked %s: %d item(s) removed", undocking_container_id, removed)
    return removed
