class CargoError(Exception):
    """Base class for stowage errors."""


class ItemNotFoundError(CargoError, LookupError):
    def __init__(self, item_id, where: str = "store"):
        self.item_id = item_id
        super().__init__(f"Item {item_id} not found in {where}")


class ContainerNotFoundError(CargoError, LookupError):
    def __init__(self, container_id):
        self.container_id = container_id
        super().__init__(f"Container {container_id} not found")


class ItemAlreadyStowedError(CargoError):
    def __init__(self, item_id, container_id):
        self.item_id = item_id
        self.container_id = container_id
        super().__init__(f"Item {item_id} is already stowed in container {container_id}")


class PlacementInvariantError(CargoError):
    """An add/remove broke the non-overlap or item/container consistency contract."""
