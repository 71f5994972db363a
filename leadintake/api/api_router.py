from fastapi import APIRouter
from leadintake.api.endpoints import lead

api_router = APIRouter(prefix="/api")

api_router.include_router(lead.router, tags=["Leads"])
