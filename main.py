import logging
from typing import Optional

from fastapi import FastAPI

from config import Settings
from routers import export, placement, search_retrieve, waste
from store import CargoStore


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(store: Optional[CargoStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Interstellar Stowage API", version="0.1.0")
    app.state.settings = settings
    app.state.store = store or CargoStore(settings.start_date)

    app.include_router(placement.router)
    app.include_router(search_retrieve.router)
    app.include_router(waste.router)
    app.include_router(export.router)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=app.state.settings.api_host, port=app.state.settings.api_port)
