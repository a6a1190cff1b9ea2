"""GitHub ProjectV2 board source: items currently "In Progress"."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import requests

from clawdash import config
from clawdash.date_utils import utc_now_iso
from clawdash.models import ActivityEntry, ProjectItem, ProjectsSection
from clawdash.observability import record_source_fetch

logger = logging.getLogger("clawdash.sources.github")

_IN_PROGRESS_VALUES = {"in progress", "in_progress"}

PROJECT_BOARD_QUERY = """
query($login: String!, $number: Int!) {
  user(login: $login) {
    projectV2(number: $number) {
      id
      title
      items(first: 50) {
        nodes {
          id
          fieldValueByName(name: "Status") {
            ... on ProjectV2ItemFieldSingleSelectValue {
              name
            }
          }
          content {
            ... on Issue {
              number
              title
              repository { nameWithOwner }
              updatedAt
            }
            ... on PullRequest {
              number
              title
              repository { nameWithOwner }
              updatedAt
            }
          }
        }
      }
    }
  }
}
"""


def unavailable_projects() -> ProjectsSection:
    return ProjectsSection(status="unavailable")


def is_in_progress(item: dict[str, Any]) -> bool:
    field = item.get("fieldValueByName") or {}
    status = str(field.get("name") or "").strip().lower() if isinstance(field, dict) else ""
    return status in _IN_PROGRESS_VALUES


def build_projects_section(nodes: list[Any], board_title: str = "") -> ProjectsSection:
    """Turn board items into the projects section, keeping only in-progress ones."""
    source = board_title or "Project board"
    active: list[ProjectItem] = []
    recent: list[ActivityEntry] = []
    log: list[str] = []

    for item in nodes:
        if not isinstance(item, dict) or not is_in_progress(item):
            continue
        content = item.get("content") or {}
        repository = content.get("repository") or {}
        name_with_owner = str(repository.get("nameWithOwner") or "")
        repo = (name_with_owner.split("/")[1:2] or [""])[0] or "unknown"
        number = content.get("number") or "?"
        title = content.get("title") or "Untitled"
        label = f"{repo} #{number}: {title}"

        active.append(ProjectItem(name=label, status="In Progress", owner="GitHub"))
        recent.append(
            ActivityEntry(
                type="github",
                label=label,
                detail="In Progress",
                timestamp=content.get("updatedAt") or utc_now_iso(),
                source=source,
            )
        )
        log.append(label)

    if not active:
        logger.warning("No board items found with 'In Progress' status")
    return ProjectsSection(status="available", active=active, recentActivity=recent, activityLog=log)


class GitHubProjectsSource:
    def __init__(
        self,
        token: str | None = None,
        owner: str | None = None,
        project_number: int | None = None,
        url: str | None = None,
        timeout_seconds: float | None = None,
        session: requests.Session | None = None,
    ):
        self.token = config.GITHUB_TOKEN if token is None else token
        self.owner = config.GITHUB_PROJECT_OWNER if owner is None else owner
        self.project_number = config.GITHUB_PROJECT_NUMBER if project_number is None else project_number
        self.url = url or config.GITHUB_GRAPHQL_URL
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else config.GITHUB_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def fetch(self) -> ProjectsSection:
        started = time.perf_counter()
        section = unavailable_projects()
        try:
            section = self._fetch()
            return section
        except Exception as exc:  # noqa: BLE001
            logger.error("GitHub project board fetch failed: %s", exc)
            return unavailable_projects()
        finally:
            result = "ok" if section.status == "available" else "unavailable"
            record_source_fetch("github:projects", result, (time.perf_counter() - started) * 1000)

    def _fetch(self) -> ProjectsSection:
        if not self.token:
            logger.warning("GITHUB_TOKEN unavailable, skipping GitHub data")
            return unavailable_projects()
        if not self.owner:
            logger.warning("CLAWDASH_GITHUB_PROJECT_OWNER not set, skipping GitHub data")
            return unavailable_projects()

        response = self.session.post(
            self.url,
            json={
                "query": PROJECT_BOARD_QUERY,
                "variables": {"login": self.owner, "number": self.project_number},
            },
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json",
                "User-Agent": "clawdash",
            },
            timeout=self.timeout_seconds,
        )
        logger.info("GitHub GraphQL response status %s", response.status_code)
        if not response.ok:
            logger.warning("GitHub GraphQL API returned %s: %s", response.status_code, response.text[:300])
            return unavailable_projects()

        payload = response.json()
        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            messages = "; ".join(str(err.get("message", err)) if isinstance(err, dict) else str(err) for err in errors)
            logger.warning("GraphQL errors: %s", messages)
            return unavailable_projects()

        data = payload.get("data") if isinstance(payload, dict) else None
        project = ((data or {}).get("user") or {}).get("projectV2")
        if not project:
            logger.warning("Project #%s for %s not accessible", self.project_number, self.owner)
            return unavailable_projects()

        nodes = (project.get("items") or {}).get("nodes") or []
        logger.info("Found project board '%s' with %s items", project.get("title", ""), len(nodes))
        return build_projects_section(nodes, str(project.get("title") or ""))

    async def fetch_async(self) -> ProjectsSection:
        return await asyncio.to_thread(self.fetch)
