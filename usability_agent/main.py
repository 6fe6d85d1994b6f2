from __future__ import annotations

import logging
import time
from pathlib import Path

from fastapi import FastAPI
from fastapi import HTTPException
from fastapi.middleware.cors import CORSMiddleware

from dotenv import load_dotenv

from .collectors import collect_bundle
from .config import configure_logging, load_settings
from .criteria import DEFAULT_CRITERIA, DESCRIPTIONS
from .engine import evaluate
from .errors import InvalidURLError, UnreachableSiteError
from .intake import normalize_url, require_reachable
from .models import (
    AnalyzeRequest,
    AnalyzeResponse,
    CriterionInfo,
    EvaluateRequest,
    UsabilityReport,
)


# Load environment variables from the project root .env (PAGESPEED_API_KEY etc. in local dev)
_HERE = Path(__file__).resolve()
load_dotenv(_HERE.parents[1] / ".env", override=False)

settings = load_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Usability Agent", version="0.1.0")

# Defaults to http://localhost:3000; set USABILITY_CORS_ORIGINS for deployed frontends.
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.get("/criteria", response_model=list[CriterionInfo])
def criteria_endpoint():
    return [
        CriterionInfo(
            key=c.key,
            name=c.name,
            description=DESCRIPTIONS.get(c.key, ""),
            weight=c.weight,
            terms=dict(c.terms),
        )
        for c in DEFAULT_CRITERIA
    ]


@app.post("/evaluate", response_model=UsabilityReport)
def evaluate_endpoint(req: EvaluateRequest):
    return evaluate(req.bundle, req.url)


@app.post("/analyze", response_model=AnalyzeResponse)
def analyze_endpoint(req: AnalyzeRequest):
    timings: dict[str, int] = {}
    started = time.perf_counter()

    try:
        url = normalize_url(req.url)
    except InvalidURLError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if req.check_reachability:
        t0 = time.perf_counter()
        try:
            require_reachable(url, timeout_ms=req.timeout_ms, user_agent=settings.user_agent)
        except UnreachableSiteError as e:
            raise HTTPException(status_code=422, detail=e.message)
        finally:
            timings["reachability"] = int((time.perf_counter() - t0) * 1000)

    collected = collect_bundle(url, settings)
    timings.update(collected.timings_ms)

    t0 = time.perf_counter()
    report = evaluate(collected.bundle, url)
    timings["scoring"] = int((time.perf_counter() - t0) * 1000)
    timings["total"] = int((time.perf_counter() - started) * 1000)

    logger.info(
        "analyzed %s: average %d (%s), %d warnings",
        url, report.summary.average, report.summary.rating, len(collected.warnings),
    )
    return AnalyzeResponse(
        normalized_url=url,
        report=report,
        warnings=collected.warnings,
        timings_ms=timings,
    )
