"""
GitHub REST API integration.

Lists an organization's archived repositories and toggles the archived flag
so the tool can push to them.
"""

import time
from typing import Any, Callable, Dict, List, Optional

import requests

from .constants import (
    API_TIMEOUT,
    DEFAULT_GITHUB_BASE_URL,
    DEFAULT_MAIN_BRANCH,
    GITHUB_API_VERSION,
    GITHUB_PAGE_SIZE,
    MAX_RETRIES,
)
from .helpers import call_with_retry, is_transient_error
from .logger import RunLogger
from .models import RepositoryDescriptor


class GitHubAPI:
    """GitHub REST client scoped to a single organization."""

    def __init__(self, token: str, org: str, logger: RunLogger,
                 base_url: str = DEFAULT_GITHUB_BASE_URL,
                 session: Optional[requests.Session] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.org = org
        self.logger = logger
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self._sleep = sleep

        self.session.headers.update({
            'Authorization': f'Bearer {token}',
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': GITHUB_API_VERSION,
        })

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """Send a request and raise for HTTP error statuses."""
        response = self.session.request(
            method, f"{self.base_url}{path}", timeout=API_TIMEOUT, **kwargs
        )
        response.raise_for_status()
        return response

    @staticmethod
    def _parse_repository(data: Dict[str, Any]) -> RepositoryDescriptor:
        """Map a raw API repository object onto a RepositoryDescriptor."""
        owner = data.get('owner') or {}
        return RepositoryDescriptor(
            id=data['id'],
            name=data['name'],
            full_name=data['full_name'],
            owner_login=owner.get('login') or 'unknown',
            owner_type=owner.get('type') or 'unknown',
            html_url=data['html_url'],
            archived=bool(data.get('archived', False)),
            private=bool(data.get('private', False)),
            default_branch=data.get('default_branch') or DEFAULT_MAIN_BRANCH,
        )

    def _log_retry(self, attempt: int, delay_ms: int, error: BaseException) -> None:
        self.logger.warn(
            f"GitHub request failed ({error}), retrying in {delay_ms}ms "
            f"(attempt {attempt + 1}/{MAX_RETRIES})"
        )

    def _fetch_page(self, page: int) -> List[Dict[str, Any]]:
        params = {
            'type': 'all',
            'per_page': GITHUB_PAGE_SIZE,
            'page': page,
            'sort': 'updated',
            'direction': 'desc',
        }
        return call_with_retry(
            lambda: self._request('GET', f"/orgs/{self.org}/repos", params=params).json(),
            is_retryable=is_transient_error,
            sleep=self._sleep,
            on_retry=self._log_retry,
        )

    def list_archived_repositories(self) -> List[RepositoryDescriptor]:
        """
        List every archived repository in the organization.

        Pages through the organization's repositories until an empty page is
        returned and keeps the archived ones. Transient failures are retried
        per page.

        Returns:
            RepositoryDescriptor objects in the order GitHub returned them

        Raises:
            requests.RequestException: if a page cannot be fetched
        """
        self.logger.debug(f"Fetching archived repositories for organization: {self.org}")

        repos = []
        page = 1
        while True:
            try:
                items = self._fetch_page(page)
            except requests.RequestException as e:
                self.logger.error("Failed to list archived repositories", e)
                raise

            if not items:
                break

            repos.extend(self._parse_repository(item) for item in items if item.get('archived') is True)
            page += 1

        self.logger.info(f"Found {len(repos)} archived repositories")
        for repo in repos:
            self.logger.debug(f"  - {repo.name}", url=repo.html_url, private=repo.private)

        return repos

    def get_repository(self, name: str) -> RepositoryDescriptor:
        """Fetch a single repository of the organization."""
        self.logger.debug(f"Fetching repository: {self.org}/{name}")
        try:
            response = self._request('GET', f"/repos/{self.org}/{name}")
        except requests.RequestException as e:
            self.logger.error(f"Failed to fetch repository {name}", e)
            raise
        return self._parse_repository(response.json())

    def verify_auth(self) -> bool:
        """Check that the token is accepted by GitHub."""
        self.logger.debug("Verifying GitHub authentication...")
        try:
            response = self._request('GET', "/user")
        except requests.RequestException as e:
            self.logger.error("GitHub authentication verification failed", e)
            return False

        self.logger.debug(f"Authenticated as: {response.json().get('login', 'unknown')}")
        return True

    def verify_organization(self) -> bool:
        """Check that the configured organization exists and is visible."""
        self.logger.debug(f"Verifying organization: {self.org}")
        try:
            self._request('GET', f"/orgs/{self.org}")
        except requests.RequestException as e:
            self.logger.error(f"Organization verification failed for {self.org}", e)
            return False

        self.logger.debug(f"Organization verified: {self.org}")
        return True

    def set_archived(self, name: str, archived: bool) -> bool:
        """
        Set or clear a repository's archived flag.

        Requires the token to have administration write access on the
        repository.

        Returns:
            True on success, False if GitHub refused or the call failed
        """
        action = "archive" if archived else "unarchive"
        self.logger.debug(f"Setting archived={archived} on {self.org}/{name}")
        try:
            self._request('PATCH', f"/repos/{self.org}/{name}", json={'archived': archived})
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status == 403:
                self.logger.error(
                    f"Permission denied trying to {action} {name}. Ensure the GitHub token has "
                    f"repo admin scope or fine-grained \"Administration\" write permission",
                    e,
                )
            else:
                self.logger.error(f"Failed to {action} repository {name}", e)
            return False
        except requests.RequestException as e:
            self.logger.error(f"Failed to {action} repository {name}", e)
            return False

        self.logger.debug(f"Repository {name} {action}d")
        return True

    def unarchive_repository(self, name: str) -> bool:
        return self.set_archived(name, False)

    def rearchive_repository(self, name: str) -> bool:
        return self.set_archived(name, True)
