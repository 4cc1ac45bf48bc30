"""Paginated reads of repositories and commits from the activity store.

The read path is best-effort: store faults degrade to empty collections (or
an empty page with ``total_elements=0`` for commit pages) instead of failing
the request. Malformed individual records are skipped and logged.
"""

from __future__ import annotations

import logging
from typing import Iterable

from pydantic import ValidationError

from activity_connector.adapters.store.base import AbstractActivityStore
from activity_connector.adapters.store.keys import commits_key, repos_key
from activity_connector.core.config import AppSettings, RedisSettings, settings
from activity_connector.schemas.activity import Commit, Page, Repository, UserActivity

logger = logging.getLogger(__name__)


def _page_bounds(page: int, size: int, total: int) -> tuple[int, int] | None:
    """Return the [start, end) slice for a page, or None if out of range."""
    if page < 0:
        return None
    start = page * size
    if start >= total:
        return None
    return start, min(start + size, total)


def _validate_size(size: int) -> None:
    if size < 1:
        raise ValueError("size must be >= 1")


class ActivityService:
    """Assemble repository and commit pages for a user.

    Attributes:
        recent_commits_limit: Commits attached to each repository.
        batch_commit_fetch: Fetch commits for a page in one pipeline instead
            of one read per repository.
    """

    def __init__(
        self,
        store: AbstractActivityStore,
        *,
        app_settings: AppSettings | None = None,
        redis_settings: RedisSettings | None = None,
    ) -> None:
        cfg = app_settings or settings.app
        self._store = store
        self._redis_settings = redis_settings
        self.recent_commits_limit = cfg.recent_commits_limit
        self.batch_commit_fetch = cfg.batch_commit_fetch

    def _parse_commits(self, raw_items: Iterable[str], *, username: str, repo_name: str) -> list[Commit]:
        commits: list[Commit] = []
        for raw in raw_items:
            try:
                commits.append(Commit.model_validate_json(raw))
            except ValidationError as exc:
                logger.warning(
                    "activity.malformed_commit",
                    extra={"username": username, "repo": repo_name, "error_count": exc.error_count()},
                )
        return commits

    async def list_repositories(self, username: str) -> list[Repository]:
        """Return every repository stored for ``username``, ordered by name.

        Store failures yield an empty list.
        """
        result = await self._store.hash_values(repos_key(username, self._redis_settings))
        if result.degraded:
            logger.warning(
                "activity.repositories_unavailable",
                extra={"username": username, "error_msg": result.error},
            )
            return []

        repositories: list[Repository] = []
        for field_name, raw in result.value.items():
            try:
                repositories.append(Repository.model_validate_json(raw))
            except ValidationError as exc:
                logger.warning(
                    "activity.malformed_repository",
                    extra={"username": username, "repo": field_name, "error_count": exc.error_count()},
                )

        repositories.sort(key=lambda repo: repo.name)
        logger.debug(
            "activity.repositories_listed",
            extra={"username": username, "count": len(repositories)},
        )
        return repositories

    async def list_recent_commits(self, username: str, repo_name: str) -> list[Commit]:
        """Return the most recent commits of one repository (unpaginated).

        Store failures yield an empty list.
        """
        result = await self._store.list_range(
            commits_key(username, repo_name, self._redis_settings),
            0,
            self.recent_commits_limit - 1,
        )
        if result.degraded:
            logger.warning(
                "activity.commits_unavailable",
                extra={"username": username, "repo": repo_name, "error_msg": result.error},
            )
            return []
        return self._parse_commits(result.value, username=username, repo_name=repo_name)

    async def _attach_commits(self, username: str, repositories: list[Repository]) -> None:
        if not repositories:
            return

        if not self.batch_commit_fetch:
            # One read per repository
            for repo in repositories:
                repo.recent_commits = await self.list_recent_commits(username, repo.name)
            return

        keys = [commits_key(username, repo.name, self._redis_settings) for repo in repositories]
        result = await self._store.list_ranges(keys, 0, self.recent_commits_limit - 1)
        if result.degraded:
            logger.warning(
                "activity.commits_unavailable",
                extra={"username": username, "repo_count": len(repositories), "error_msg": result.error},
            )
        for repo, raw_items in zip(repositories, result.value):
            repo.recent_commits = self._parse_commits(raw_items, username=username, repo_name=repo.name)

    async def get_repositories_page(self, username: str, page: int, size: int) -> Page[Repository]:
        """Return one page of repositories with recent commits attached.

        Args:
            username: Owner of the repositories.
            page: Zero-based page index; negative or past-the-end pages are empty.
            size: Page size (>= 1).

        Returns:
            Page[Repository] with ``total_elements`` equal to the number of
            repositories read.
        """
        _validate_size(size)

        repositories = await self.list_repositories(username)
        total = len(repositories)

        bounds = _page_bounds(page, size, total)
        items = repositories[bounds[0]:bounds[1]] if bounds else []
        await self._attach_commits(username, items)

        logger.debug(
            "activity.repositories_page",
            extra={"username": username, "page": page, "size": size, "items": len(items), "total": total},
        )
        return Page[Repository](items=items, page=page, size=size, total_elements=total)

    async def get_commits_page(
        self, username: str, repo_name: str, page: int, size: int
    ) -> Page[Commit]:
        """Return one page of a repository's commits using a store range read.

        Any store failure yields an empty page with ``total_elements=0``.
        """
        _validate_size(size)

        key = commits_key(username, repo_name, self._redis_settings)
        empty = Page[Commit](items=[], page=page, size=size, total_elements=0)

        length = await self._store.list_length(key)
        if length.degraded:
            logger.warning(
                "activity.commits_unavailable",
                extra={"username": username, "repo": repo_name, "error_msg": length.error},
            )
            return empty

        total = int(length.value)
        bounds = _page_bounds(page, size, total)
        if bounds is None:
            return Page[Commit](items=[], page=page, size=size, total_elements=total)

        start, end = bounds
        result = await self._store.list_range(key, start, end - 1)
        if result.degraded:
            logger.warning(
                "activity.commits_unavailable",
                extra={"username": username, "repo": repo_name, "error_msg": result.error},
            )
            return empty

        items = self._parse_commits(result.value, username=username, repo_name=repo_name)
        logger.debug(
            "activity.commits_page",
            extra={"username": username, "repo": repo_name, "page": page, "items": len(items), "total": total},
        )
        return Page[Commit](items=items, page=page, size=size, total_elements=total)

    async def get_user_activity(self, username: str) -> UserActivity:
        """Return every repository of ``username`` with recent commits attached."""
        repositories = await self.list_repositories(username)
        await self._attach_commits(username, repositories)
        logger.info(
            "activity.user_activity",
            extra={"username": username, "repo_count": len(repositories)},
        )
        return UserActivity(username=username, repositories=repositories)
