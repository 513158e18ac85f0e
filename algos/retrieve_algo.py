from typing import List

from algos.cargo_types import RetrievalStep
from algos.spatial_container import SpatialContainer


class RetrievalPathPlanner:
    """Read-only planner for reaching a stowed item.

    Blocking items are taken out in the order the container reports them
    and put back in reverse, so the last item set aside is the first one
    restored.
    """

    def __init__(self, store):
        self.store = store

    def _name(self, item_id) -> str:
        return self.store.get_item(item_id).name

    def steps_to_retrieve(self, item_id, container: SpatialContainer, first_step: int = 1) -> List[RetrievalStep]:
        blocking = container.items_blocking(item_id)
        steps = []
        step = first_step

        def emit(action, target):
            nonlocal step
            steps.append(RetrievalStep(step=step, action=action, itemId=target, item_name=self._name(target)))
            step += 1

        for blocker in blocking:
            emit("remove", blocker)
            emit("setAside", blocker)
        emit("retrieve", item_id)
        for blocker in reversed(blocking):
            emit("placeBack", blocker)
        return steps
