from fastapi import APIRouter, Depends

from app.dependencies import get_registry

router = APIRouter()


@router.get("/api/health")
async def health(registry=Depends(get_registry)):
    return {
        "status": "ok",
        "providers": {name.value: adapter.configured for name, adapter in registry.items()},
    }
