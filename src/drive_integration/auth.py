"""
Google Drive authentication module.

This module handles the interactive OAuth2 sign-in for Google Drive API
access, including optional token caching and token refresh.
"""

import json
from typing import Optional, Dict, Any

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from ..core.logging import get_logger
from ..core.exceptions import AuthenticationError
from ..settings import GoogleSettings


logger = get_logger(__name__)


AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URI = "https://oauth2.googleapis.com/token"


class DriveAuthenticator:
    """
    Google Drive OAuth2 authentication handler.

    Runs the installed-app consent flow on demand, keeps the resulting
    credentials in memory and, when a token file is configured, reuses
    and refreshes the cached token across restarts.
    """

    def __init__(self, settings: GoogleSettings, client_id: Optional[str] = None) -> None:
        """
        Initialize the Drive authenticator.

        Args:
            settings: Google settings with client secrets and scopes
            client_id: OAuth client ID overriding the one in settings
        """
        self.settings = settings
        self.client_id = client_id or settings.client_id
        self.scopes = list(settings.scopes)
        self.credentials: Optional[Credentials] = None
        self.token_file = settings.token_file

        logger.info(f"Initialized Drive authenticator for scopes: {', '.join(self.scopes)}")

    def authenticate(self, force_reauth: bool = False) -> Credentials:
        """
        Authenticate and return valid credentials.

        Blocks until the user finishes (or abandons) the consent screen.

        Args:
            force_reauth: Ignore cached tokens and run the consent flow

        Returns:
            Valid Google OAuth2 credentials

        Raises:
            AuthenticationError: If authentication fails
        """
        try:
            if not force_reauth and not self.credentials:
                self.credentials = self._load_existing_token()

            if force_reauth or not self.credentials or not self.credentials.valid:
                if (not force_reauth and self.credentials
                        and self.credentials.expired and self.credentials.refresh_token):
                    logger.info("Refreshing expired credentials...")
                    self._refresh_credentials()
                else:
                    logger.info("Starting OAuth2 flow...")
                    self._perform_oauth_flow()

                self._save_token()

            logger.info("Authentication successful")
            return self.credentials

        except AuthenticationError:
            raise
        except Exception as e:
            logger.error(f"Authentication failed: {e}")
            raise AuthenticationError(
                f"Google Drive authentication failed: {str(e)}",
                service="Google Drive",
                auth_type="OAuth2"
            )

    def client_config(self) -> Dict[str, Any]:
        """Build the installed-app client configuration from settings."""
        if not self.client_id:
            raise AuthenticationError(
                "No OAuth client ID configured (set GOOGLE_CLIENT_ID)",
                service="Google Drive",
                auth_type="OAuth2"
            )

        installed = {
            "client_id": self.client_id,
            "auth_uri": AUTH_URI,
            "token_uri": TOKEN_URI,
            "redirect_uris": ["http://localhost"],
        }
        if self.settings.client_secret:
            installed["client_secret"] = self.settings.client_secret

        return {"installed": installed}

    def _load_existing_token(self) -> Optional[Credentials]:
        """
        Load existing token from file.

        Returns:
            Credentials if valid token file exists, None otherwise
        """
        if not self.token_file or not self.token_file.exists():
            logger.debug("No existing token file found")
            return None

        try:
            with open(self.token_file, 'r') as token:
                credentials = Credentials.from_authorized_user_info(
                    json.load(token), self.scopes
                )

            logger.debug("Loaded existing credentials from token file")
            return credentials

        except Exception as e:
            logger.warning(f"Failed to load existing token: {e}")
            return None

    def _refresh_credentials(self) -> None:
        """
        Refresh expired credentials.

        Raises:
            AuthenticationError: If refresh fails
        """
        try:
            self.credentials.refresh(Request())
            logger.info("Credentials refreshed successfully")

        except Exception as e:
            logger.error(f"Failed to refresh credentials: {e}")
            raise AuthenticationError(
                f"Failed to refresh Google Drive credentials: {str(e)}",
                service="Google Drive",
                auth_type="OAuth2 Refresh"
            )

    def _perform_oauth_flow(self) -> None:
        """
        Perform the OAuth2 authorization flow.

        Raises:
            AuthenticationError: If OAuth flow fails or is cancelled
        """
        secrets_file = self.settings.client_secrets_file

        try:
            if secrets_file and secrets_file.exists():
                flow = InstalledAppFlow.from_client_secrets_file(str(secrets_file), self.scopes)
            else:
                flow = InstalledAppFlow.from_client_config(self.client_config(), self.scopes)

            self.credentials = flow.run_local_server(
                port=0,
                prompt='consent',
                authorization_prompt_message='Please visit this URL to authorize the application: {url}',
                success_message='Authorization successful. You can close this window.'
            )

            logger.info("OAuth2 flow completed successfully")

        except AuthenticationError:
            raise
        except Exception as e:
            logger.error(f"OAuth2 flow failed: {e}")
            raise AuthenticationError(
                f"OAuth2 flow failed: {str(e)}",
                service="Google Drive",
                auth_type="OAuth2"
            )

    def _save_token(self) -> None:
        """Save credentials to the token file, if one is configured."""
        if not self.token_file:
            return

        try:
            self.token_file.parent.mkdir(parents=True, exist_ok=True)

            with open(self.token_file, 'w') as token:
                token.write(self.credentials.to_json())

            logger.debug(f"Credentials saved to {self.token_file}")

        except OSError as e:
            # The in-memory session is still usable
            logger.warning(f"Failed to save credentials: {e}")

    def access_token(self) -> str:
        """
        Return a bearer token for raw HTTP calls, refreshing it if needed.

        Raises:
            AuthenticationError: If not signed in
        """
        if self.credentials is None:
            raise AuthenticationError("Not signed in", service="Google Drive", auth_type="OAuth2")

        if self.credentials.expired and self.credentials.refresh_token:
            self._refresh_credentials()

        return self.credentials.token

    def forget(self) -> None:
        """Drop in-memory credentials; the token file is left in place."""
        self.credentials = None

    @property
    def is_authenticated(self) -> bool:
        """Check if currently authenticated with valid credentials."""
        return (self.credentials is not None
                and self.credentials.valid
                and not self.credentials.expired)
