import os
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse, RedirectResponse
from logging_config import get_logger

logger = get_logger(__name__)

views_router = APIRouter(tags=["views"])


def _view(request: Request, name: str) -> FileResponse:
    path = os.path.join(request.app.state.static_dir, name, "index.html")
    if not os.path.isfile(path):
        logger.warning(f"View asset missing: {path}")
        raise HTTPException(status_code=404, detail="Not found")
    return FileResponse(path)


@views_router.get("/")
async def index():
    return RedirectResponse(url="/game")


@views_router.get("/game")
async def game_view(request: Request):
    return _view(request, "game")


@views_router.get("/controller")
async def controller_view(request: Request):
    return _view(request, "controller")
