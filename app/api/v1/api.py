from fastapi import APIRouter
from app.api.v1.endpoints import auth, users, entries, todos, tasks, moods, notes

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(entries.router, prefix="/entries", tags=["entries"])
api_router.include_router(todos.router, prefix="/todo", tags=["todos"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(moods.router, prefix="/moods", tags=["moods"])
api_router.include_router(notes.router, prefix="/notes", tags=["notes"])
