"""
Backblaze B2 Client

Downloads audio either from the public bucket URL or through the
authenticated flow for the private bucket:

1. b2_authorize_account with the application key (HTTP Basic)
2. b2_get_download_authorization scoped to the language prefix
3. GET {downloadUrl}/file/{bucket}/{path} with the download token

API Docs: https://www.backblaze.com/apidocs/
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from app.config.settings import settings
from app.infrastructure.exceptions import ExternalServiceError, ServiceUnavailableError


logger = logging.getLogger(__name__)

PROVIDER = "backblaze-b2"


@dataclass
class B2Authorization:
    api_url: str
    download_url: str
    authorization_token: str


class B2Client:
    """
    Async Backblaze B2 client.

    Authorization failures raise ServiceUnavailableError (routes answer
    503); download failures raise ExternalServiceError (routes answer 502).
    """

    AUTHORIZE_URL = "https://api.backblazeb2.com/b2api/v2/b2_authorize_account"
    DOWNLOAD_AUTH_SECONDS = 3600

    def __init__(
        self,
        key_id: Optional[str] = None,
        application_key: Optional[str] = None,
        bucket_id: Optional[str] = None,
        bucket_name: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.key_id = key_id if key_id is not None else settings.b2_application_key_id
        self.application_key = (
            application_key if application_key is not None else settings.b2_application_key
        )
        self.bucket_id = bucket_id or settings.b2_bucket_id
        self.bucket_name = bucket_name or settings.b2_bucket_name
        self.timeout = timeout or settings.audio_fetch_timeout

    @property
    def configured(self) -> bool:
        return bool(self.key_id and self.application_key)

    async def authorize_account(self) -> B2Authorization:
        if not self.configured:
            raise ServiceUnavailableError("B2 credentials not configured", provider=PROVIDER)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    self.AUTHORIZE_URL,
                    auth=(self.key_id, self.application_key),
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"[B2] Authorization failed: HTTP {e.response.status_code}")
            raise ServiceUnavailableError(
                "B2 authorization failed",
                provider=PROVIDER,
                status_code=e.response.status_code,
                original_error=e,
            )
        except httpx.HTTPError as e:
            logger.error(f"[B2] Authorization request error: {e}")
            raise ServiceUnavailableError("B2 authorization failed", provider=PROVIDER, original_error=e)

        return B2Authorization(
            api_url=data["apiUrl"],
            download_url=data["downloadUrl"],
            authorization_token=data["authorizationToken"],
        )

    async def get_download_authorization(self, auth: B2Authorization, prefix: str) -> str:
        """Download token valid for one hour under ``prefix``."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{auth.api_url}/b2api/v2/b2_get_download_authorization",
                    headers={"Authorization": auth.authorization_token},
                    json={
                        "bucketId": self.bucket_id,
                        "fileNamePrefix": prefix,
                        "validDurationInSeconds": self.DOWNLOAD_AUTH_SECONDS,
                    },
                )
                response.raise_for_status()
                return response.json()["authorizationToken"]
        except httpx.HTTPStatusError as e:
            logger.error(f"[B2] Download authorization failed: HTTP {e.response.status_code}")
            raise ServiceUnavailableError(
                "Download authorization failed",
                provider=PROVIDER,
                status_code=e.response.status_code,
                original_error=e,
            )
        except httpx.HTTPError as e:
            logger.error(f"[B2] Download authorization request error: {e}")
            raise ServiceUnavailableError("Download authorization failed", provider=PROVIDER, original_error=e)

    async def download_private(self, auth: B2Authorization, token: str, file_path: str) -> bytes:
        url = f"{auth.download_url}/file/{self.bucket_name}/{file_path}"
        return await self._fetch(url, headers={"Authorization": token})

    async def download_public(self, url: str) -> bytes:
        return await self._fetch(url)

    async def _fetch(self, url: str, headers: Optional[dict] = None) -> bytes:
        logger.info(f"[B2] Fetching {url}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers=headers)
                response.raise_for_status()
                return response.content
        except httpx.HTTPStatusError as e:
            logger.error(f"[B2] Download failed: HTTP {e.response.status_code} for {url}")
            raise ExternalServiceError(
                "Failed to fetch audio from B2",
                provider=PROVIDER,
                status_code=e.response.status_code,
                original_error=e,
            )
        except httpx.HTTPError as e:
            logger.error(f"[B2] Download error for {url}: {e}")
            raise ExternalServiceError("Failed to fetch audio from B2", provider=PROVIDER, original_error=e)


def get_b2_client() -> B2Client:
    return B2Client()
