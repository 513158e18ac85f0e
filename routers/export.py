from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from config import Settings
from dependencies import get_settings, get_store
from store import CargoStore

router = APIRouter(
    prefix="/api/export",
    tags=["export"],
)


@router.get("/arrangement", response_class=PlainTextResponse)
async def export_arrangement(
    store: CargoStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    return PlainTextResponse(
        store.export_arrangement_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{settings.export_filename}"'},
    )
