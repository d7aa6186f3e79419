from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ...contracts import ErrandIn, ErrandOut
from ...errand_registry import ErrandRegistry, registry
from ...itinerary.types import ErrandDescriptor

router = APIRouter(tags=["errands"])


def get_registry() -> ErrandRegistry:
    return registry


def _errand_out(errand_id: UUID, errand: ErrandDescriptor) -> ErrandOut:
    return ErrandOut(
        id=errand_id,
        lat=errand.coordinate.lat,
        lng=errand.coordinate.lng,
        place_name=errand.place_name,
        errand_name=errand.errand_name,
        label=errand.label,
    )


@router.get("/errands", response_model=list[ErrandOut])
def list_errands(errands: ErrandRegistry = Depends(get_registry)):
    return [_errand_out(errand_id, errand) for errand_id, errand in errands.items()]


@router.post("/errands", response_model=ErrandOut, status_code=status.HTTP_201_CREATED)
def create_errand(payload: ErrandIn, errands: ErrandRegistry = Depends(get_registry)):
    errand_id = errands.add(payload.lat, payload.lng, payload.place_name, payload.errand_name)
    return _errand_out(errand_id, errands.get(errand_id))


@router.delete("/errands/{errand_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_errand(errand_id: UUID, errands: ErrandRegistry = Depends(get_registry)):
    if not errands.remove(errand_id):
        raise HTTPException(404, "Errand not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/errands", status_code=status.HTTP_204_NO_CONTENT)
def clear_errands(errands: ErrandRegistry = Depends(get_registry)):
    errands.clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router", "get_registry"]
