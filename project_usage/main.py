"""FastAPI application entry point"""

from fastapi import FastAPI, HTTPException, Query
from typing import Any, Dict
import logging

from project_usage.config.settings import settings
from project_usage.errors import (
    ConfigurationError,
    FormatError,
    NoResultsError,
    ProjectUsageError,
)
from project_usage.orchestrator import UsageOrchestrator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="go-project-usage",
    description="GitHub projects importing a Go package, ranked by popularity",
    version=settings.APP_VERSION,
)


def get_orchestrator() -> UsageOrchestrator:
    return UsageOrchestrator()


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@app.get("/api/dependents")
async def get_dependents(
    package: str = Query(..., min_length=1, description="Go package path"),
    sort: str = Query("stars", pattern="^(stars|forks)$"),
) -> Dict[str, Any]:
    """Report the GitHub projects importing `package`, ascending by `sort`."""
    logger.info(f"Dependents report requested for {package}")

    try:
        report = await get_orchestrator().run(package, metric=sort)
    except (FormatError, NoResultsError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConfigurationError as e:
        logger.error(f"Report for {package} misconfigured: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except ProjectUsageError as e:
        logger.error(f"Report for {package} failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return {
        "package": report.package_path,
        "truncated": report.truncated,
        "discovered": report.discovered,
        "queried": report.queried,
        "projects": [project.model_dump(by_alias=True) for project in report.projects],
    }
