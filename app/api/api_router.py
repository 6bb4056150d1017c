from fastapi import APIRouter
from app.api.endpoints import interest_list

api_router = APIRouter(prefix="/api")

api_router.include_router(interest_list.router, tags=["Interest List"])
