"""
Google identity verification for SkillVerse
Accepts either an ID token (JWT) or an OAuth access token
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from skillverse.core.exceptions import AuthenticationException, ExternalServiceException

logger = logging.getLogger(__name__)

GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"


@dataclass
class ExternalIdentity:
    """Verified identity returned by the provider"""
    subject: str
    email: str
    name: str
    picture: Optional[str] = None


class GoogleIdentityVerifier:
    """Verifies Google credentials over a shared httpx client"""

    def __init__(self, client: httpx.AsyncClient, client_id: Optional[str] = None):
        self.client = client
        self.client_id = client_id

    @staticmethod
    def is_id_token(token: str) -> bool:
        return token.count(".") == 2

    async def verify(self, token: str) -> ExternalIdentity:
        """
        Verify a Google credential

        Raises:
            AuthenticationException: If Google rejects the credential
            ExternalServiceException: If Google cannot be reached
        """
        try:
            if self.is_id_token(token):
                response = await self.client.get(GOOGLE_TOKENINFO_URL, params={"id_token": token})
            else:
                response = await self.client.get(
                    GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {token}"}
                )
        except httpx.HTTPError as e:
            logger.error(f"Google identity request failed: {e}")
            raise ExternalServiceException("Google", "Identity provider unavailable")

        if response.status_code >= 500:
            raise ExternalServiceException("Google", "Identity provider unavailable")
        if response.status_code != 200:
            logger.warning(f"Google rejected credential with status {response.status_code}")
            raise AuthenticationException("Invalid Google credential")

        data = response.json()

        if self.is_id_token(token) and self.client_id and data.get("aud") != self.client_id:
            raise AuthenticationException("Google credential issued for another client")

        subject = data.get("sub")
        email = data.get("email")
        if not subject or not email:
            raise AuthenticationException("Google credential carries no verified email")

        return ExternalIdentity(
            subject=subject,
            email=email.lower(),
            name=data.get("name") or email.split("@")[0],
            picture=data.get("picture"),
        )
