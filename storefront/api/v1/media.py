"""Serve generated product images."""

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse

from storefront.services.asset_storage import get_asset_path

router = APIRouter()


@router.get("/generated/{store_id}/{filename}")
async def get_generated_asset(store_id: str, filename: str) -> FileResponse:
    path = get_asset_path(store_id, filename)
    if path is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Asset not found",
        )
    return FileResponse(path)
