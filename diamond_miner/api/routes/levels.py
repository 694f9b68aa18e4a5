"""Level catalogue API routes."""
from fastapi import APIRouter, Depends, HTTPException

from ...models.schemas import LevelListResponse
from ...models.catalogue import LevelCatalogue
from ..deps import get_level_catalogue

router = APIRouter(prefix="/api/levels", tags=["levels"])


@router.get("", response_model=LevelListResponse)
async def list_levels(
    catalogue: LevelCatalogue = Depends(get_level_catalogue),
) -> LevelListResponse:
    """List every level in the catalogue."""
    return LevelListResponse(levels=catalogue.to_list())


@router.get("/{number}")
async def get_level(
    number: int,
    catalogue: LevelCatalogue = Depends(get_level_catalogue),
):
    """Get a single level definition by 1-based number."""
    if number < 1 or number > len(catalogue):
        raise HTTPException(status_code=404, detail=f"Level {number} not found")
    return {"number": number, **catalogue.get(number).to_dict()}
