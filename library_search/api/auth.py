"""
Bearer-token validation for the search API.

The endpoint only needs to know whether a token belongs to a signed-in
user. The default validator asks the Supabase auth service; tests inject
their own TokenValidator.
"""

from typing import Optional, Tuple

import httpx

from ..core import get_config, get_logger, ConfigurationError

logger = get_logger(__name__)


BEARER_PREFIX = "Bearer "


def extract_bearer_token(header: Optional[str]) -> Optional[str]:
    """
    Get the token from an Authorization header value.

    Returns:
        The token, or None if the header is absent, empty or not a bearer
        credential.
    """
    if not header or not header.startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX):].strip()
    return token or None


class TokenValidator:
    """Interface for resolving a bearer token to a user id."""

    requires_token = True

    def validate(self, token: str) -> Tuple[Optional[str], Optional[str]]:
        """
        Check a token.

        Args:
            token: Bearer token without the "Bearer " prefix.

        Returns:
            (user_id, None) for a valid token, (None, error message) otherwise.
        """
        raise NotImplementedError


class SupabaseTokenValidator(TokenValidator):
    """Validates tokens against the Supabase auth REST endpoint."""

    def __init__(self, auth_config=None, client: httpx.Client = None):
        """
        Initialize the validator.

        Args:
            auth_config: AuthConfig; defaults to the global config.
            client: Optional httpx client, mainly for tests.
        """
        self.config = auth_config or get_config().auth
        self._client = client

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.config.timeout_seconds)
        return self._client

    def validate(self, token: str) -> Tuple[Optional[str], Optional[str]]:
        if not self.config.url:
            raise ConfigurationError(
                "Auth URL not configured",
                {"hint": "set auth.url or SUPABASE_URL"}
            )

        url = f"{self.config.url.rstrip('/')}/auth/v1/user"
        headers = {
            "Authorization": f"{BEARER_PREFIX}{token}",
            "apikey": self.config.anon_key
        }

        try:
            response = self._get_client().get(url, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"Auth service unreachable: {e}")
            return None, f"Auth service unreachable: {e}"

        if response.status_code != 200:
            message = self._error_message(response)
            logger.info(f"Token rejected ({response.status_code}): {message}")
            return None, message

        user_id = response.json().get("id")
        if not user_id:
            return None, "Auth service returned no user"

        return user_id, None

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"

        if not isinstance(data, dict):
            return f"HTTP {response.status_code}"

        return (
            data.get("msg")
            or data.get("error_description")
            or data.get("message")
            or data.get("error")
            or f"HTTP {response.status_code}"
        )


class NoAuthValidator(TokenValidator):
    """Accepts any request; used when auth.enabled is false."""

    requires_token = False

    def validate(self, token: str) -> Tuple[Optional[str], Optional[str]]:
        return "anonymous", None


def get_token_validator() -> TokenValidator:
    """Build the validator selected by the configuration."""
    auth_config = get_config().auth
    if not auth_config.enabled:
        logger.warning("Authentication is disabled")
        return NoAuthValidator()
    return SupabaseTokenValidator(auth_config)
