"""Board generation API routes."""
from fastapi import APIRouter, Depends, HTTPException

from ...models.schemas import (
    GenerateRequest,
    GenerateResponse,
    ErrorResponse,
)
from ...core.generator import LevelGenerator, InvalidSpecError
from ..deps import get_level_generator

router = APIRouter(prefix="/api", tags=["generate"])


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={400: {"model": ErrorResponse}},
)
async def generate_board(
    request: GenerateRequest,
    generator: LevelGenerator = Depends(get_level_generator),
) -> GenerateResponse:
    """
    Generate a board from a level definition.

    Args:
        request: GenerateRequest with the level definition and optional seed.
        generator: LevelGenerator dependency.

    Returns:
        GenerateResponse with the grid and summary counts.
    """
    try:
        result = generator.generate_result(request.level.to_level_spec(), seed=request.seed)
    except InvalidSpecError as e:
        raise HTTPException(status_code=400, detail=f"Generation failed: {str(e)}")

    return GenerateResponse(**result.to_dict())
