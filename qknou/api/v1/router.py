from fastapi import APIRouter

from .endpoints import auth, health, exams, crawler

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(exams.router, prefix="/exams", tags=["exams"])

# Scraping runs inside the API process; long batches block the request until done
api_router.include_router(crawler.router, prefix="/crawler", tags=["crawler"])
