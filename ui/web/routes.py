"""
Web Routes - API endpoints and page routes
=========================================

This module defines the question answering and pattern management
routes.
"""

from datetime import datetime, timezone
from typing import Optional, List

from fastapi import APIRouter, Request, HTTPException, Query
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from core.logging import get_logger
from core.exceptions import PatternValidationError
from matching.catalog import category_stats, list_categories, sample_questions
from matching.store import DEFAULT_CATEGORY, DEFAULT_CONFIDENCE, PatternOptions

logger = get_logger("web.routes")

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# === Page Routes ===

@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Render the question page with the pattern list."""
    templates = request.app.state.templates
    config = request.app.state.config
    patterns = request.app.state.matcher.get_all_patterns()

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "app_name": config.app_name,
            "patterns": patterns,
            "categories": category_stats(patterns),
        }
    )


# === API Routes ===

class AskRequest(BaseModel):
    """Question model."""
    question: str = ""


class PatternCreate(BaseModel):
    """Pattern creation model."""
    pattern: Optional[str] = None
    template: Optional[str] = None
    confidence: Optional[float] = None
    category: Optional[str] = None
    keywords: Optional[List[str]] = None


@router.post("/api/ask")
async def ask(request: Request, data: AskRequest):
    """Answer a question from the trained patterns."""
    matcher = request.app.state.matcher

    result = matcher.get_response(data.question)

    return {
        "matched": result is not None,
        "result": result.to_dict() if result else None,
        "question": data.question,
        "timestamp": _now(),
    }


@router.get("/api/patterns")
async def get_patterns(request: Request):
    """Get all training patterns."""
    patterns = request.app.state.matcher.get_all_patterns()

    return {
        "patterns": [record.to_dict() for record in patterns],
        "totalCount": len(patterns),
    }


@router.post("/api/patterns")
async def add_pattern(request: Request, data: PatternCreate):
    """Add a new training pattern."""
    matcher = request.app.state.matcher

    if not (data.pattern or "").strip() or not (data.template or "").strip():
        raise HTTPException(status_code=400, detail="Pattern and template are required")

    options = PatternOptions(
        confidence=DEFAULT_CONFIDENCE if data.confidence is None else data.confidence,
        category=data.category or DEFAULT_CATEGORY,
        keywords=data.keywords or [],
    )

    try:
        record = matcher.add_pattern(data.pattern, data.template, options)
    except PatternValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    return {
        "message": "Training pattern added successfully",
        "pattern": record.to_dict(),
    }


# Plain def: the source read runs in the threadpool, off the event loop
@router.post("/api/patterns/reload")
def reload_patterns(request: Request):
    """Reload training patterns from the pattern source."""
    count = request.app.state.matcher.reload_patterns()

    return {
        "message": "Training patterns reloaded successfully",
        "totalCount": count,
    }


@router.get("/api/sample-questions")
async def get_sample_questions(
    request: Request,
    category: Optional[str] = Query(None),
    limit: int = Query(10, ge=0, le=500)
):
    """Get example questions, optionally for one category."""
    patterns = request.app.state.matcher.get_all_patterns()

    if category and category != "all":
        filtered_count = sum(1 for record in patterns if record.category == category)
    else:
        filtered_count = len(patterns)

    return {
        "questions": sample_questions(patterns, category=category, limit=limit),
        "categories": list_categories(patterns),
        "totalPatterns": len(patterns),
        "filteredCount": filtered_count,
    }


@router.get("/api/question-categories")
async def get_question_categories(request: Request):
    """Get all categories with their pattern counts."""
    patterns = request.app.state.matcher.get_all_patterns()
    stats = category_stats(patterns)

    return {
        "categories": stats,
        "totalCategories": len(stats),
        "totalQuestions": len(patterns),
    }


@router.get("/api/status")
async def get_status(request: Request):
    """Get matcher status."""
    matcher = request.app.state.matcher
    source = matcher.source

    return {
        "patterns": len(matcher),
        "minThreshold": matcher.min_threshold,
        "keywordWeight": matcher.keyword_weight,
        "source": source.describe() if source is not None else None,
        "timestamp": _now(),
    }
