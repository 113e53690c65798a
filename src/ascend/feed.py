"""Client for the community feed backend.

Plain request/response calls against the feed REST API; the session cookie
set by the OAuth callback is kept on the underlying httpx client. Failures
are raised as FeedError and are never retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)

FEED_TIMEOUT = 10.0


class FeedError(Exception):
    """A transient failure talking to the feed backend."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class FeedComment:
    id: int
    post_id: int
    user_name: str
    content: str
    created_at: str


@dataclass
class FeedPost:
    id: int
    user_name: str
    content: str
    image: str | None
    created_at: str
    comments: list[FeedComment] = field(default_factory=list)


def _comment_from(raw: dict) -> FeedComment:
    return FeedComment(
        id=int(raw.get("id", 0)),
        post_id=int(raw.get("postId", 0)),
        user_name=str(raw.get("userName") or ""),
        content=str(raw.get("content") or ""),
        created_at=str(raw.get("createdAt") or ""),
    )


def _post_from(raw: dict) -> FeedPost:
    return FeedPost(
        id=int(raw.get("id", 0)),
        user_name=str(raw.get("userName") or ""),
        content=str(raw.get("content") or ""),
        image=raw.get("image") if isinstance(raw.get("image"), str) else None,
        created_at=str(raw.get("createdAt") or ""),
        comments=[_comment_from(c) for c in raw.get("comments", []) if isinstance(c, dict)],
    )


class FeedClient:
    def __init__(
        self,
        base_url: str,
        cookies: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.client = httpx.Client(
            base_url=base_url,
            cookies=cookies,
            timeout=FEED_TIMEOUT,
            transport=transport,
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self.client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = _error_detail(exc.response)
            logger.warning("Feed %s %s failed: %s", method, path, detail)
            raise FeedError(detail, exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            logger.warning("Feed %s %s failed: %s", method, path, exc)
            raise FeedError(f"Could not reach feed backend: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise FeedError("Feed backend returned invalid JSON", response.status_code) from exc

    def me(self) -> dict | None:
        """Return the logged-in user, or None."""
        data = _expect_dict(self._request("GET", "/api/auth/me"))
        user = data.get("user")
        if user is not None and not isinstance(user, dict):
            raise FeedError("Unexpected user payload")
        return user or None

    def is_authenticated(self) -> bool:
        return self.me() is not None

    def list_posts(self) -> list[FeedPost]:
        data = self._request("GET", "/api/posts")
        if not isinstance(data, list):
            raise FeedError("Unexpected posts payload")
        try:
            return [_post_from(p) for p in data if isinstance(p, dict)]
        except (TypeError, ValueError) as exc:
            raise FeedError(f"Unexpected posts payload: {exc}") from exc

    def create_post(self, content: str, image: str | None = None) -> int:
        """Publish a post. Returns the new post id."""
        if not content and not image:
            raise ValueError("Content or image required")
        data = _expect_dict(self._request("POST", "/api/posts", json={"content": content, "image": image}))
        post_id = data.get("id")
        if isinstance(post_id, bool) or not isinstance(post_id, int):
            raise FeedError("Feed backend did not return a post id")
        return post_id

    def add_comment(self, post_id: int, content: str) -> bool:
        if not content:
            raise ValueError("Content required")
        data = _expect_dict(
            self._request("POST", f"/api/posts/{post_id}/comments", json={"content": content})
        )
        return bool(data.get("success"))

    def google_auth_url(self) -> str:
        url = _expect_dict(self._request("GET", "/api/auth/google/url")).get("url")
        if not isinstance(url, str) or not url:
            raise FeedError("Feed backend did not return a login URL")
        return url

    def logout(self) -> bool:
        data = _expect_dict(self._request("POST", "/api/auth/logout"))
        return bool(data.get("success"))

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> FeedClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP {response.status_code}"


def _expect_dict(data: Any) -> dict:
    if not isinstance(data, dict):
        raise FeedError("Unexpected response payload")
    return data
