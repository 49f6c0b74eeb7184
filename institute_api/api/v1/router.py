"""Main API router aggregating all module routers."""

from fastapi import APIRouter

from institute_api.api.v1.endpoints import students

api_router = APIRouter()

# Students
api_router.include_router(
    students.router,
    prefix="/Students",
    tags=["Students"],
)
