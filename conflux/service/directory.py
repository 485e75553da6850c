"""
Group directories: the external systems of record for SRAM collaboration
groups and their members.
"""

import abc
from json import JSONDecodeError

import httpx
from pydantic import ValidationError

from conflux.config.settings import Settings
from conflux.core.scim import ScimGroup, ScimGroupsResult


class DirectoryError(Exception):
    pass


class GroupDirectory(abc.ABC):
    """
    The base class for group directories. Downstream must implement:

    - get_group: fetch a single group by its directory id, or None if the
                 directory does not know it.
    - list_all_groups: fetch every group, or None if no listing could be
                       obtained.
    """

    @abc.abstractmethod
    async def get_group(self, scim_id: str) -> ScimGroup | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_all_groups(self) -> list[ScimGroup] | None:
        raise NotImplementedError


class ScimGroupDirectory(GroupDirectory):
    """
    The SRAM SCIM API. Requests are authenticated with the service's bearer
    token.
    """

    base_url: str
    bearer_token: str | None
    timeout: float
    client: httpx.AsyncClient | None

    def __init__(
        self,
        base_url: str,
        bearer_token: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.bearer_token = bearer_token
        self.timeout = timeout
        self.client = client

    @property
    def headers(self) -> dict[str, str]:
        headers = {"Accept": "application/scim+json, application/json"}

        if self.bearer_token:
            headers["Authorization"] = f"Bearer {self.bearer_token}"

        return headers

    async def _get(self, path: str) -> httpx.Response:
        url = f"{self.base_url}{path}"

        if self.client is not None:
            return await self.client.get(url, headers=self.headers, timeout=self.timeout)

        async with httpx.AsyncClient() as client:
            return await client.get(url, headers=self.headers, timeout=self.timeout)

    @staticmethod
    def _content(response: httpx.Response) -> dict:
        try:
            return response.json()
        except JSONDecodeError as e:
            raise DirectoryError(
                f"Invalid JSON returned by {response.request.url}"
            ) from e

    async def get_group(self, scim_id: str) -> ScimGroup | None:
        """
        GET /Groups/{id}

        Raises
        ------
        DirectoryError
            If the directory answers with anything but a group or a 404.
        """
        response = await self._get(f"Groups/{scim_id}")

        if response.status_code == 404:
            return None

        if response.status_code != 200:
            raise DirectoryError(
                f"Error contacting {response.request.url}: {response.status_code}"
            )

        try:
            return ScimGroup.model_validate(self._content(response))
        except ValidationError as e:
            raise DirectoryError(f"Malformed group {scim_id}: {e}") from e

    async def list_all_groups(self) -> list[ScimGroup] | None:
        """
        GET /Groups

        Returns None when the response carries no `Resources`.

        Raises
        ------
        DirectoryError
            If the directory answers with an error status.
        """
        response = await self._get("Groups")

        if response.status_code != 200:
            raise DirectoryError(
                f"Error contacting {response.request.url}: {response.status_code}"
            )

        try:
            result = ScimGroupsResult.model_validate(self._content(response))
        except ValidationError as e:
            raise DirectoryError(f"Malformed group listing: {e}") from e

        return result.resources


def directory_from_settings(settings: Settings) -> GroupDirectory:
    """
    The SCIM directory when SRAM is enabled, otherwise the development one.
    """
    if not settings.sram_enabled:
        from .mock import DevelopmentGroupDirectory

        return DevelopmentGroupDirectory()

    if not settings.scim_secret:
        raise RuntimeError("CONFLUX_SCIM_SECRET must be set when SRAM is enabled")

    return ScimGroupDirectory(
        base_url=settings.scim_base_url,
        bearer_token=settings.scim_secret,
        timeout=settings.scim_timeout,
    )
