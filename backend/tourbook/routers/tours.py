from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from tourbook.db import get_db
from tourbook.services import tour_catalog

router = APIRouter(prefix="/api/tours", tags=["tours"])


@router.get("")
async def list_tours(db=Depends(get_db)) -> List[Dict[str, Any]]:
    return await tour_catalog.list_tours(db)


@router.get("/{tour_id}")
async def get_tour(tour_id: str, db=Depends(get_db)) -> Dict[str, Any]:
    return await tour_catalog.get_tour(db, tour_id)
