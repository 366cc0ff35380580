from fastapi import APIRouter

from podscript.api.routes import audio, health, research, scripts, topics

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(research.router)
api_router.include_router(topics.router)
api_router.include_router(scripts.router)
api_router.include_router(audio.router)
