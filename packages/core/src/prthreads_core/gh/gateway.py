"""Hosting API gateway, the only module that talks to GitHub over HTTP.

REST and GraphQL calls both go through PyGithub's Requester so they share
authentication, base URL, and timeout. GraphQL is posted to the requester's
own graphql_url, which for GitHub Enterprise is /api/graphql rather than
under the /api/v3 REST prefix. Failures are translated into the
prthreads error taxonomy here; callers never see GithubException.
"""

from __future__ import annotations

import logging

import requests
from github import Auth, Github, GithubException

from prthreads_core.errors import ParseFailure, PermissionFailure, TransportFailure
from prthreads_core.gh import queries

logger = logging.getLogger(__name__)

_PAGE_SIZE = 100


def split_repo(repo: str) -> tuple[str, str]:
    """Split ``owner/name`` into its parts, rejecting anything else."""
    owner, _, name = (repo or "").partition("/")
    if not owner or not name or "/" in name:
        raise ValueError(f"Invalid repository {repo!r}. Expected 'owner/name'.")
    return owner, name


def _error_message(exc: GithubException) -> str:
    data = exc.data
    if not isinstance(data, dict):
        return str(data or exc)
    parts = [str(data.get("message") or "")]
    for err in data.get("errors") or []:
        parts.append(err.get("message", "") if isinstance(err, dict) else str(err))
    return "; ".join(p for p in parts if p) or str(exc)


class GitHubGateway:
    def __init__(
        self,
        repo: str,
        token: str | None = None,
        base_url: str = "https://api.github.com",
        timeout: int = 30,
        requester=None,
    ):
        self.owner, self.name = split_repo(repo)
        if requester is None:
            auth = Auth.Token(token) if token else None
            requester = Github(auth=auth, base_url=base_url, timeout=timeout).requester
        self._requester = requester

    @property
    def repo(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.name}"

    # ------------------------------------------------------------------ #
    # Raw calls                                                            #
    # ------------------------------------------------------------------ #

    def rest(self, verb: str, path: str, payload: dict | None = None, parameters: dict | None = None):
        """Issue one REST call and return the decoded JSON body."""
        logger.debug("%s %s", verb, path)
        try:
            _, data = self._requester.requestJsonAndCheck(verb, path, parameters=parameters, input=payload)
        except GithubException as e:
            message = _error_message(e)
            cls = PermissionFailure if e.status in (401, 403) else TransportFailure
            raise cls(f"{verb} {path} failed ({e.status}): {message}", status=e.status, data=e.data) from e
        except requests.RequestException as e:
            raise TransportFailure(f"{verb} {path} failed: {e}") from e
        return data

    def graphql(self, query: str, variables: dict) -> dict:
        """Run a GraphQL query or mutation and return its ``data`` object."""
        body = self.rest("POST", self._requester.graphql_url, payload={"query": query, "variables": variables})
        if not isinstance(body, dict):
            raise ParseFailure("GraphQL response was not a JSON object.")

        errors = body.get("errors")
        if errors:
            messages = "; ".join(e.get("message", str(e)) if isinstance(e, dict) else str(e) for e in errors)
            types = {e.get("type") for e in errors if isinstance(e, dict)}
            cls = PermissionFailure if "FORBIDDEN" in types else TransportFailure
            raise cls(f"GraphQL error: {messages}", data=body)

        data = body.get("data")
        if not isinstance(data, dict):
            raise ParseFailure("GraphQL response is missing 'data'.")
        return data

    # ------------------------------------------------------------------ #
    # Endpoints                                                            #
    # ------------------------------------------------------------------ #

    def list_review_comments(self, pr_number: int) -> list[dict]:
        """Return every inline review comment on a PR, following pagination."""
        comments: list[dict] = []
        page = 1
        while True:
            batch = self.rest(
                "GET",
                f"{self.repo_path}/pulls/{pr_number}/comments",
                parameters={"per_page": _PAGE_SIZE, "page": page},
            )
            if not isinstance(batch, list):
                raise ParseFailure(f"Expected a list of review comments for PR #{pr_number}.")
            comments.extend(batch)
            if len(batch) < _PAGE_SIZE:
                return comments
            page += 1

    def open_pulls_for_branch(self, branch: str) -> list[dict]:
        pulls = self.rest(
            "GET",
            f"{self.repo_path}/pulls",
            parameters={"state": "open", "head": f"{self.owner}:{branch}"},
        )
        if not isinstance(pulls, list):
            raise ParseFailure("Expected a list of pull requests.")
        return pulls

    def review_threads(self, pr_number: int) -> list[dict]:
        """Return up to 100 review threads (each with up to 100 comments)."""
        data = self.graphql(
            queries.REVIEW_THREADS,
            {"owner": self.owner, "name": self.name, "number": pr_number},
        )
        try:
            threads = data["repository"]["pullRequest"]["reviewThreads"]["nodes"]
        except (KeyError, TypeError) as e:
            raise ParseFailure(f"Unexpected reviewThreads response shape: missing {e}") from e
        return [t for t in threads or [] if t]

    def set_thread_resolved(self, thread_id: str, resolved: bool) -> bool:
        """Resolve or unresolve a thread and return its new isResolved flag."""
        mutation, field = (
            (queries.RESOLVE_THREAD, "resolveReviewThread")
            if resolved
            else (queries.UNRESOLVE_THREAD, "unresolveReviewThread")
        )
        data = self.graphql(mutation, {"threadId": thread_id})
        try:
            return bool(data[field]["thread"]["isResolved"])
        except (KeyError, TypeError) as e:
            raise ParseFailure(f"Unexpected {field} response shape: missing {e}") from e
