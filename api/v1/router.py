# api/v1/router.py
from fastapi import APIRouter

from . import diets

api_router = APIRouter()

api_router.include_router(diets.router, prefix="/diets", tags=["Diets"])
