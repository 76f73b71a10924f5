"""Discord OAuth2 client for player login."""

import logging
from typing import Optional
from urllib.parse import urlencode

import httpx

from wuwa_draft.exceptions import DiscordAuthError
from wuwa_draft.models.room import DiscordUser

logger = logging.getLogger(__name__)


class DiscordOAuthClient:
    """Exchanges OAuth codes for Discord identities."""

    AUTHORIZE_URL = "https://discord.com/api/oauth2/authorize"
    TOKEN_URL = "https://discord.com/api/oauth2/token"
    USER_URL = "https://discord.com/api/users/@me"
    CDN_URL = "https://cdn.discordapp.com"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the OAuth client.

        Args:
            client_id: Discord application id
            client_secret: Discord application secret
            redirect_uri: Callback URL registered with Discord
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    def authorize_url(self) -> str:
        """URL that starts the Discord login flow."""
        params = urlencode({
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": "identify",
        })
        return f"{self.AUTHORIZE_URL}?{params}"

    async def fetch_user(self, code: str) -> DiscordUser:
        """Exchange an authorization code and look up the Discord user.

        Raises:
            DiscordAuthError: If the token exchange or user lookup fails
        """
        client = await self._get_client()
        try:
            token_response = await client.post(
                self.TOKEN_URL,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self.redirect_uri,
                },
            )
            token_response.raise_for_status()
            access_token = token_response.json()["access_token"]

            user_response = await client.get(
                self.USER_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            user_response.raise_for_status()
            data = user_response.json()
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.error(f"Discord OAuth failed: {e}")
            raise DiscordAuthError(str(e)) from e

        avatar = None
        if data.get("avatar"):
            avatar = f"{self.CDN_URL}/avatars/{data['id']}/{data['avatar']}.png"

        return DiscordUser(discord_id=data["id"], username=data["username"], avatar=avatar)
