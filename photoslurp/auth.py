import logging
from pathlib import Path

from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from photoslurp.config import SCOPES
from photoslurp.errors import AuthFailure, NetworkError, StoreFailure

logger = logging.getLogger(__name__)


class TokenSupplier:
    """
    Hands out a bearer token for the Sheets API from a service account
    JSON key, refreshing the google-auth credentials when asked.
    """

    def __init__(self, credentials_path, scopes=SCOPES):
        self.credentials_path = Path(credentials_path)
        self.scopes = scopes
        self.creds = None

    def authenticate(self):
        """
        Loads the service account key. Never writes anything back to disk.
        """
        try:
            self.creds = service_account.Credentials.from_service_account_file(
                str(self.credentials_path),
                scopes=self.scopes
            )
        except FileNotFoundError:
            raise StoreFailure(
                f"Could not find Google credentials at {self.credentials_path}. Pass "
                "--google-application-credentials=/path/to/key.json or set "
                "GOOGLE_APPLICATION_CREDENTIALS."
            )
        except ValueError as e:
            raise StoreFailure(
                f"Google credentials at {self.credentials_path} don't seem to be working: {e}"
            )
        return self.creds

    def get_token(self) -> str:
        if self.creds is None:
            self.authenticate()
        if not self.creds.valid:
            return self.refresh()
        return self.creds.token

    def refresh(self) -> str:
        if self.creds is None:
            self.authenticate()
        try:
            self.creds.refresh(Request())
        except RefreshError as e:
            raise AuthFailure(f"Google rejected the credentials: {e}") from e
        except TransportError as e:
            raise NetworkError(f"Could not reach Google to refresh the token: {e}") from e
        logger.debug("Refreshed Google access token")
        return self.creds.token
