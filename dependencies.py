from fastapi import Request

from config import Settings
from store import CargoStore


def get_store(request: Request) -> CargoStore:
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
