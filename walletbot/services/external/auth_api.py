import logging
from datetime import datetime, timezone
from typing import Dict, Optional

import httpx

from walletbot.core.config import get_settings
from walletbot.models.session import Session
from .base_client import BaseClient
from .result import ApiResult

logger = logging.getLogger(__name__)
settings = get_settings()

class AuthApi(BaseClient):
    """
    Email/password accounts through the Firebase Identity Toolkit REST API,
    user profiles (name, surname) through the ledger API.
    Single responsibility: turn credentials into a Session.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(transport)
        self.identity_url = settings.IDENTITY_TOOLKIT_URL

        # Separate client: the ledger token must never reach the identity provider
        self.identity_client = httpx.AsyncClient(
            timeout=httpx.Timeout(10.0, connect=5.0),
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    def _identity_endpoint(self, action: str) -> str:
        return f"{self.identity_url}/accounts:{action}?key={settings.FIREBASE_API_KEY}"

    async def sign_in(self, email: str, password: str) -> ApiResult[Session]:
        """
        Signs a user in.

        Args:
            email: Account email
            password: Account password

        Returns:
            ApiResult with the Session, or the provider error message
        """
        try:
            response = await self._make_request(
                "POST",
                self._identity_endpoint("signInWithPassword"),
                client=self.identity_client,
                json={"email": email, "password": password, "returnSecureToken": True},
            )
            body = response.json()

            if "error" in body:
                error = self._extract_error(response)
                logger.warning(f"[AUTH] Sign in rejected for {email}: {error}")
                return ApiResult.failure(error)

            profile = await self.get_user_profile(body["localId"]) or {}
            logger.info(f"[AUTH] User signed in: {body['localId']}")

            return ApiResult.success(Session(
                subject_id=body["localId"],
                email=body.get("email", email),
                display_name=profile.get("name", ""),
                surname=profile.get("surname", ""),
            ))

        except Exception as e:
            logger.error(f"[AUTH] Error signing in: {e}")
            return ApiResult.failure(str(e))

    async def sign_up(self, email: str, password: str, name: str, surname: str) -> ApiResult[Session]:
        """
        Creates an account and its profile.

        Returns:
            ApiResult with the Session of the new account
        """
        try:
            response = await self._make_request(
                "POST",
                self._identity_endpoint("signUp"),
                client=self.identity_client,
                json={"email": email, "password": password, "returnSecureToken": True},
            )
            body = response.json()

            if "error" in body:
                error = self._extract_error(response)
                logger.warning(f"[AUTH] Sign up rejected for {email}: {error}")
                return ApiResult.failure(error)

            uid = body["localId"]
            await self.create_user_profile(uid, email, name, surname)
            logger.info(f"[AUTH] Account created: {uid}")

            return ApiResult.success(Session(
                subject_id=uid,
                email=body.get("email", email),
                display_name=name,
                surname=surname,
            ))

        except Exception as e:
            logger.error(f"[AUTH] Error signing up: {e}")
            return ApiResult.failure(str(e))

    async def get_user_profile(self, uid: str) -> Optional[Dict]:
        """Profile document of a user or None. Failures are not fatal for sign in."""
        try:
            response = await self._make_request("GET", "users", params={"uid": uid})
            if response.status_code != 200:
                return None
            data = self._extract_data(response)
            if isinstance(data, list):
                return data[0] if data else None
            return data
        except Exception as e:
            logger.error(f"[AUTH] Error getting profile of {uid}: {e}")
            return None

    async def create_user_profile(self, uid: str, email: str, name: str, surname: str) -> bool:
        try:
            response = await self._make_request("POST", "users", json={
                "uid": uid,
                "name": name,
                "surname": surname,
                "email": email,
                "createdAt": datetime.now(timezone.utc).isoformat(),
            })
            return response.status_code in [200, 201]
        except Exception as e:
            logger.error(f"[AUTH] Error creating profile of {uid}: {e}")
            return False

    async def close(self):
        """Closes the ledger and identity HTTP clients."""
        await super().close()
        try:
            await self.identity_client.aclose()
        except Exception as e:
            logger.error(f"[AUTH] Error closing identity client: {e}")
