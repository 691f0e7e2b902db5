"""FastAPI entrypoint for the glossary backend."""

from __future__ import annotations

import asyncio
import logging
import os

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from app_state import GlossaryAppState
from models import (
    AlphabetResponsePayload,
    CategoriesResponsePayload,
    CategoryDetailPayload,
    CrossContentPayload,
    LinkRequest,
    LinkResponsePayload,
    MentionRequest,
    MentionsResponsePayload,
    StatsPayload,
    TermDetailPayload,
    TermsResponsePayload,
    WarningsResponsePayload,
)
from services import GlossaryService

logging.basicConfig(
    level=os.environ.get("GLOSSARY_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Glossary Backend", description="Term indexing and cross-linking API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# The engine is built on first use, not at import time.
app_state = GlossaryAppState()
glossary_service = GlossaryService(state=app_state)


@app.get("/", tags=["health"])
async def root():
    return {"status": "ok", "message": "Glossary backend is running"}


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok", "message": "Glossary backend is running"}


@app.get("/terms", response_model=TermsResponsePayload, tags=["terms"])
async def terms():
    try:
        return glossary_service.list_terms()
    except Exception as exc:
        logger.exception("Listing terms failed")
        raise HTTPException(status_code=500, detail=str(exc))


@app.get("/terms/{term_id}", response_model=TermDetailPayload, tags=["terms"])
async def term_detail(term_id: str):
    try:
        detail = glossary_service.term_detail(term_id)
    except Exception as exc:
        logger.exception("Term lookup failed for %s", term_id)
        raise HTTPException(status_code=500, detail=str(exc))
    if detail is None:
        raise HTTPException(status_code=404, detail="Term not found")
    return detail


@app.get("/terms/{term_id}/cross-content", response_model=CrossContentPayload, tags=["terms"])
async def term_cross_content(term_id: str):
    try:
        links = glossary_service.cross_content(term_id)
    except Exception as exc:
        logger.exception("Cross-content lookup failed for %s", term_id)
        raise HTTPException(status_code=500, detail=str(exc))
    if links is None:
        raise HTTPException(status_code=404, detail="Term not found")
    return links


@app.get("/categories", response_model=CategoriesResponsePayload, tags=["categories"])
async def categories():
    try:
        return glossary_service.categories()
    except Exception as exc:
        logger.exception("Listing categories failed")
        raise HTTPException(status_code=500, detail=str(exc))


@app.get("/categories/{category_id}", response_model=CategoryDetailPayload, tags=["categories"])
async def category_detail(category_id: str):
    try:
        detail = glossary_service.category_detail(category_id)
    except Exception as exc:
        logger.exception("Category lookup failed for %s", category_id)
        raise HTTPException(status_code=500, detail=str(exc))
    if detail is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return detail


@app.get("/alphabet", response_model=AlphabetResponsePayload, tags=["terms"])
async def alphabet():
    try:
        return glossary_service.alphabet()
    except Exception as exc:
        logger.exception("Building alphabet listing failed")
        raise HTTPException(status_code=500, detail=str(exc))


@app.post("/link", response_model=LinkResponsePayload, tags=["linking"])
async def link(request: LinkRequest):
    try:
        return await asyncio.to_thread(glossary_service.link, request)
    except Exception as exc:
        logger.exception("Linking text failed")
        raise HTTPException(status_code=500, detail=str(exc))


@app.post("/mentions", response_model=MentionsResponsePayload, tags=["linking"])
async def mentions(request: MentionRequest):
    try:
        return await asyncio.to_thread(glossary_service.mentions, request)
    except Exception as exc:
        logger.exception("Finding mentions failed")
        raise HTTPException(status_code=500, detail=str(exc))


@app.get("/stats", response_model=StatsPayload, tags=["admin"])
async def stats():
    try:
        return glossary_service.stats()
    except Exception as exc:
        logger.exception("Collecting stats failed")
        raise HTTPException(status_code=500, detail=str(exc))


@app.get("/admin/warnings", response_model=WarningsResponsePayload, tags=["admin"])
async def warnings():
    try:
        return glossary_service.warnings()
    except Exception as exc:
        logger.exception("Listing load warnings failed")
        raise HTTPException(status_code=500, detail=str(exc))


@app.post("/admin/reload", response_model=StatsPayload, tags=["admin"])
async def reload():
    try:
        return await asyncio.to_thread(glossary_service.reload)
    except Exception as exc:
        logger.exception("Reloading content failed")
        raise HTTPException(status_code=500, detail=str(exc))


if __name__ == "__main__":
    uvicorn.run(
        app,
        host=os.environ.get("GLOSSARY_HOST", "127.0.0.1"),
        port=int(os.environ.get("GLOSSARY_PORT", "8000")),
    )
