from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from activity_connector.adapters.store.base import AbstractActivityStore
from activity_connector.adapters.store.factory import get_store
from activity_connector.core.auth import verify_credentials
from activity_connector.core.config import settings
from activity_connector.core.rate_limit import enforce_rate_limit
from activity_connector.schemas.activity import Commit, ErrorResponse, Page, Repository
from activity_connector.services.activity_service import ActivityService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Activity"])

# Authentication runs before rate limiting so only verified users consume budget
_GUARDS = [Depends(verify_credentials), Depends(enforce_rate_limit)]

_ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Missing, malformed or invalid PAT."},
    429: {"model": ErrorResponse, "description": "Per-user rate limit exceeded."},
}


def get_activity_service(store: AbstractActivityStore = Depends(get_store)) -> ActivityService:
    return ActivityService(store)


@router.get(
    "/activity/{username}",
    response_model=Page[Repository],
    dependencies=_GUARDS,
    responses=_ERROR_RESPONSES,
)
async def get_user_activity(
    username: str,
    page: int = Query(0, description="Zero-based page index."),
    service: ActivityService = Depends(get_activity_service),
) -> Page[Repository]:
    """Return one page of the user's repositories, each with recent commits.

    The page size is fixed by configuration (20 by default). Pages past the
    end, or negative pages, are empty but still report the total.
    """
    size = settings.app.page_size
    logger.info(
        "activity.request",
        extra={"username": username, "page": page, "size": size},
    )
    return await service.get_repositories_page(username, page, size)


@router.get(
    "/commits/{username}/{repo}",
    response_model=Page[Commit],
    dependencies=_GUARDS,
    responses=_ERROR_RESPONSES,
)
async def get_repository_commits(
    username: str,
    repo: str,
    page: int = Query(0, description="Zero-based page index."),
    service: ActivityService = Depends(get_activity_service),
) -> Page[Commit]:
    """Return one page of commits for a single repository, newest first.

    Store failures yield an empty page with ``totalElements`` 0.
    """
    size = settings.app.page_size
    logger.info(
        "commits.request",
        extra={"username": username, "repo": repo, "page": page, "size": size},
    )
    return await service.get_commits_page(username, repo, page, size)
