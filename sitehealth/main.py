"""
Site Health Engine — FastAPI Backend

Endpoints:
  POST /normalize      — Canonical record from raw provider payloads
  POST /score          — Site health score + recommendations
  POST /compare        — Your site vs competitor report
  GET  /health         — Health check
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Literal

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, HTTPException, Header  # noqa: E402
from pydantic import BaseModel, Field  # noqa: E402

from . import config  # noqa: E402
from .engine import run_comparison, run_health_check  # noqa: E402
from .normalizer import clean_domain, normalize  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config.configure_logging()
    if not config.GOOGLE_API_KEY:
        logger.warning("GOOGLE_API_KEY not set. Fresh PageSpeed fetches will be skipped.")
    yield


app = FastAPI(
    title="Site Health Engine",
    version="1.0.0",
    lifespan=lifespan,
)


class SiteSources(BaseModel):
    domain: str = Field(min_length=1)
    sources: dict = Field(default_factory=dict)


class ScoreRequest(SiteSources):
    mode: Literal["basic", "enhanced"] = "enhanced"
    fetchFresh: bool = True


class CompareRequest(BaseModel):
    yourSite: SiteSources
    competitorSite: SiteSources
    fetchFresh: bool = True


def _check_key(x_api_key: str):
    if config.API_SECRET and x_api_key != config.API_SECRET:
        raise HTTPException(status_code=401, detail="Invalid API key")


@app.get("/health")
async def health():
    return {"status": "ok", "engine": "sitehealth"}


@app.post("/normalize")
async def normalize_sources(req: SiteSources, x_api_key: str = Header(default="")):
    _check_key(x_api_key)
    return normalize(req.sources, req.domain)


@app.post("/score")
async def score(req: ScoreRequest, x_api_key: str = Header(default="")):
    _check_key(x_api_key)
    try:
        return await run_health_check(
            req.domain, req.sources, mode=req.mode, fetch_fresh=req.fetchFresh,
        )
    except Exception as e:
        logger.exception("Health check failed for %s", req.domain)
        raise HTTPException(status_code=500, detail=f"Analysis failed: {str(e)}")


@app.post("/compare")
async def compare(req: CompareRequest, x_api_key: str = Header(default="")):
    _check_key(x_api_key)
    if clean_domain(req.yourSite.domain) == clean_domain(req.competitorSite.domain):
        raise HTTPException(status_code=400, detail="yourSite and competitorSite must differ")

    try:
        result = await run_comparison(
            req.yourSite.domain,
            req.competitorSite.domain,
            req.yourSite.sources,
            req.competitorSite.sources,
            fetch_fresh=req.fetchFresh,
        )
    except Exception as e:
        logger.exception("Comparison failed")
        raise HTTPException(status_code=500, detail=f"Comparison failed: {str(e)}")

    if not result["success"]:
        raise HTTPException(status_code=422, detail=result["error"])
    return result


if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("sitehealth.main:app", host="0.0.0.0", port=port, reload=True)
