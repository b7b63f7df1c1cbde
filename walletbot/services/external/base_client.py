import httpx
import logging
from typing import Any, Optional
from walletbot.core.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

class LedgerApiError(Exception):
    """Error talking to the ledger API."""
    pass

class BaseClient:
    """
    Base HTTP client for the ledger API.
    Single responsibility: HTTP configuration and transport error handling.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        if settings.API_PORT:
            self.base_url = f"{settings.API_URL}:{settings.API_PORT}/api/v{settings.API_VERSION}"
        else:
            self.base_url = f"{settings.API_URL}/api/v{settings.API_VERSION}"

        self.headers = {
            "Content-Type": "application/json",
            "x-api-token": settings.API_TOKEN
        }

        # Reusable HTTP client; a custom transport is only injected by tests
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(10.0, connect=5.0),
            headers=self.headers,
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
            transport=transport,
        )

    @staticmethod
    def _loggable_url(url: str) -> str:
        """URL without its query string (identity endpoints carry the API key there)."""
        return url.split('?', 1)[0]

    async def _make_request(
        self,
        method: str,
        url: str,
        client: Optional[httpx.AsyncClient] = None,
        **kwargs,
    ) -> httpx.Response:
        """
        Central request method with error handling.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            url: Relative path or absolute URL
            client: HTTP client to use instead of the ledger one
            **kwargs: Extra httpx arguments

        Returns:
            httpx.Response: Server response

        Raises:
            LedgerApiError: The API could not be reached
        """
        full_url = url if url.startswith('http') else f"{self.base_url}/{url.lstrip('/')}"
        log_url = self._loggable_url(full_url)
        try:
            logger.debug(f"[API] {method} {log_url}")

            response = await (client or self.client).request(method, full_url, **kwargs)
            logger.debug(f"[API] {method} {log_url} -> {response.status_code}")

            if response.status_code >= 400:
                logger.error(f"[API] Error {response.status_code}: {response.text}")

            return response

        except httpx.TimeoutException:
            logger.error(f"[API] Timeout on {method} {log_url}")
            raise LedgerApiError("Timeout talking to the API")
        except httpx.RequestError as e:
            logger.error(f"[API] Connection error on {method} {log_url}: {e}")
            raise LedgerApiError(f"Connection error: {str(e)}")

    @staticmethod
    def _extract_data(response: httpx.Response) -> Any:
        """Unwraps the {"data": ...} envelope of the ledger API."""
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    @staticmethod
    def _extract_error(response: httpx.Response) -> str:
        """Best effort human readable error of a failed response."""
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict):
            error = body.get("error") or body.get("message")
            if isinstance(error, dict):
                error = error.get("message")
            if error:
                return str(error)
        return f"HTTP {response.status_code}"

    async def close(self):
        """Closes the HTTP client."""
        try:
            await self.client.aclose()
            logger.debug("[API] HTTP client closed")
        except Exception as e:
            logger.error(f"[API] Error closing client: {e}")
