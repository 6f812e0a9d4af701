"""
Memos Backend — HTML Client Route
==================================

What:  GET / serves the bundled single-page client.
How:   The page ships as package data (memos/static/index.html) and is read
       once, then cached for the life of the process.
"""

from functools import lru_cache
from importlib import resources

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["Client"])


@lru_cache(maxsize=1)
def load_client_html() -> str:
    return resources.files("memos").joinpath("static", "index.html").read_text(encoding="utf-8")


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index() -> HTMLResponse:
    return HTMLResponse(content=load_client_html())
