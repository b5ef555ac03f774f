from fastapi import APIRouter

# Import routers from modules
from app.api.v1.endpoints import collector, feed, social, shared_items, profiles, health

api_router = APIRouter()

# Event Collector
api_router.include_router(collector.router, prefix="/collector", tags=["collector"])

# Feed personal y Friends Feed
api_router.include_router(feed.router, prefix="/feed", tags=["feed"])

# Grafo social
api_router.include_router(social.router, prefix="/social", tags=["social"])

# Shares y votos
api_router.include_router(shared_items.router, prefix="/shared-items", tags=["shared-items"])

# Directorio de usuarios
api_router.include_router(profiles.router, prefix="/profiles", tags=["profiles"])

# Health check
api_router.include_router(health.router, tags=["health"])
