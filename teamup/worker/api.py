from fastapi import APIRouter

from teamup.worker.cache_policy import RUNTIME_CACHING, STATIC_CACHE_RULE

router = APIRouter(prefix="/api/offline", tags=["offline"])


@router.get("/policy")
async def get_offline_policy():
    """Table de cache du worker, consommée au build du service worker."""
    return {
        "default": STATIC_CACHE_RULE.to_dict(),
        "runtimeCaching": [rule.to_dict() for rule in RUNTIME_CACHING],
    }
