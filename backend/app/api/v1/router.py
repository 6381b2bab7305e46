from fastapi import APIRouter

from app.api.v1 import import_routes

api_router = APIRouter()

api_router.include_router(import_routes.router, prefix="/contacts", tags=["import"])
