from fastapi import APIRouter
from app.routers import reviews

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(reviews.router, tags=["Performance Reviews"])
api_router.include_router(reviews.team_router, tags=["Team"])
