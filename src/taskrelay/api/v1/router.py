from fastapi import APIRouter

from src.taskrelay.api.v1 import auth, invites, members, projects

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(projects.router)
api_router.include_router(invites.router)
api_router.include_router(members.router)
