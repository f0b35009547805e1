"""Mailing list synchronisation through the Mailchimp Marketing HTTP API.

Every operation is best-effort: failures are logged and reported through
the return value, never raised.
"""

import hashlib
from typing import Any, Literal

import httpx
from loguru import logger

from mutuals.core.config import MailingListConfig
from mutuals.infrastructure.constants import MAILCHIMP_API_URL_TEMPLATE

type MemberStatus = Literal["subscribed", "unsubscribed", "cleaned", "pending"]

MEMBER_EXISTS_TITLE = "Member Exists"


def subscriber_hash(email: str) -> str:
    """Mailchimp member id: MD5 of the lowercased address."""
    return hashlib.md5(email.lower().encode(), usedforsecurity=False).hexdigest()


class MailingListClient:
    """Keep the Mailchimp audience in step with local subscribers.

    Args:
        config: Mailchimp credentials and audience id.
        http_client: Shared HTTP client; the caller owns its lifecycle.
    """

    def __init__(
        self, config: MailingListConfig, http_client: httpx.AsyncClient
    ) -> None:
        self.config = config
        self._http = http_client
        if not config.is_configured:
            logger.warning("Mailchimp not configured, newsletter syncing is skipped")

    @property
    def _base_url(self) -> str:
        base = MAILCHIMP_API_URL_TEMPLATE.format(server=self.config.server_prefix)
        return f"{base}/lists/{self.config.list_id}/members"

    async def _request(
        self, method: str, path: str = "", json: dict[str, Any] | None = None
    ) -> httpx.Response:
        return await self._http.request(
            method,
            f"{self._base_url}{path}",
            json=json,
            auth=("mutuals", self.config.api_key or ""),
            timeout=self.config.timeout,
        )

    async def add_subscriber(
        self, email: str, name: str | None = None, source: str | None = None
    ) -> bool:
        """Add an address to the audience, updating it if already present.

        Returns:
            bool: True if Mailchimp accepted the change.
        """
        if not self.config.is_configured:
            return False

        payload = {
            "email_address": email,
            "status": "subscribed",
            "merge_fields": {"FNAME": name or ""},
            "tags": [source] if source else [],
        }
        try:
            response = await self._request("POST", json=payload)
        except httpx.HTTPError as e:
            logger.error("Failed to add subscriber to Mailchimp: {}", e)
            return False

        if response.status_code == httpx.codes.BAD_REQUEST:
            body = response.json() if response.content else {}
            if body.get("title") == MEMBER_EXISTS_TITLE:
                logger.info("Subscriber already exists in Mailchimp, updating")
                return await self.update_subscriber(email, "subscribed", name)

        if response.is_error:
            logger.error(
                "Failed to add subscriber to Mailchimp: {}",
                response.status_code,
                status_code=response.status_code,
            )
            return False

        logger.info("Added subscriber to Mailchimp")
        return True

    async def update_subscriber(
        self, email: str, status: MemberStatus, name: str | None = None
    ) -> bool:
        """Change the status (and optionally the name) of a member."""
        if not self.config.is_configured:
            return False

        payload: dict[str, Any] = {"status": status}
        if name:
            payload["merge_fields"] = {"FNAME": name}

        try:
            response = await self._request(
                "PATCH", f"/{subscriber_hash(email)}", json=payload
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Failed to update subscriber in Mailchimp: {}", e)
            return False

        logger.info("Updated subscriber in Mailchimp -> {}", status)
        return True

    async def unsubscribe_subscriber(self, email: str) -> bool:
        """Mark a member as unsubscribed."""
        return await self.update_subscriber(email, "unsubscribed")

    async def delete_subscriber(self, email: str) -> bool:
        """Permanently remove a member from the audience."""
        if not self.config.is_configured:
            return False

        try:
            response = await self._request(
                "POST", f"/{subscriber_hash(email)}/actions/delete-permanent"
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Failed to delete subscriber from Mailchimp: {}", e)
            return False
        return True

    async def get_subscriber(self, email: str) -> dict[str, Any] | None:
        """Fetch a member record, or None if unknown or unreachable."""
        if not self.config.is_configured:
            return None

        try:
            response = await self._request("GET", f"/{subscriber_hash(email)}")
        except httpx.HTTPError as e:
            logger.error("Failed to get subscriber from Mailchimp: {}", e)
            return None

        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        if response.is_error:
            logger.error("Failed to get subscriber from Mailchimp: {}", response.status_code)
            return None
        return response.json()
