"""
GitHub Actions OIDC Credential Helper

Exchanges the GitHub Actions runner's ID token request credentials for a
short-lived OIDC token and hands it to the host as a registry password.
"""

from typing import Dict, Mapping, Optional, Tuple
from urllib.parse import quote_plus

import requests

from .base import CredentialHelper, Credentials
from ..config import OidcEnvironment, IDENTITY, USER_AGENT
from ..errors import CredentialsNotFound
from ..loggingx import AuditLog


class GitHubActionsOidcHelper(CredentialHelper):
    """Credential helper backed by the GitHub Actions OIDC token endpoint."""

    def __init__(self, audit: AuditLog, environ: Optional[Mapping[str, str]] = None):
        """
        Args:
            audit: Audit log receiving one entry per step of each operation
            environ: Environment to read the token request settings from,
                defaults to ``os.environ`` at call time
        """
        super().__init__("github_actions_oidc", audit)
        self.environ = environ

    def store(self, credentials: Credentials) -> None:
        """Nothing is persisted; tokens are minted on demand."""
        self.audit.write(f"Adding credentials for server: {credentials.server_url}")
        self.logger.debug("Ignoring store request", provider=self.name,
                          **self.mask_sensitive_data(credentials.to_json()))

    def erase(self, server_url: str) -> None:
        """Nothing is stored, so there is nothing to erase."""
        self.audit.write(f"Deleting credentials for server: {server_url}")

    def list_credentials(self) -> Dict[str, str]:
        self.audit.write("Listing credentials")
        return {}

    def get(self, server_url: str) -> Tuple[str, str]:
        """
        Retrieve an OIDC token for a registry.

        The server URL is only recorded in the audit log. To scope the token
        to the registry, set ACTIONS_ID_TOKEN_REQUEST_AUDIENCE to it.

        Args:
            server_url: Registry the host needs credentials for

        Returns:
            Tuple of ("github_actions", token)

        Raises:
            CredentialsNotFound: On any failure along the way
        """
        self.audit.write(f"Getting OIDC token: {server_url}")

        try:
            token = self._request_token(OidcEnvironment.from_env(self.environ))
        except CredentialsNotFound as e:
            self.log_credential_access(server_url, False, str(e))
            raise

        self.log_credential_access(server_url, True)
        return IDENTITY, token

    def build_request_url(self, env: OidcEnvironment) -> str:
        """
        Return the token endpoint URL, carrying the audience when one is set.

        Args:
            env: Token request settings

        Returns:
            Request URL
        """
        if not env.audience:
            return env.request_url

        separator = "&" if "?" in env.request_url else "?"
        request_url = f"{env.request_url}{separator}audience={quote_plus(env.audience)}"
        self.audit.write(f"Added OIDC audience to request URL: {request_url}")
        return request_url

    def _request_token(self, env: OidcEnvironment) -> str:
        if not env.is_complete:
            self.audit.write("Missing OIDC request URL or token")
            raise CredentialsNotFound()

        request_url = self.build_request_url(env)

        with requests.Session() as session:
            try:
                request = requests.Request(
                    'GET',
                    request_url,
                    headers={
                        'Authorization': f'Bearer {env.request_token}',
                        'User-Agent': USER_AGENT,
                    }
                ).prepare()
            except (requests.exceptions.RequestException, ValueError) as e:
                self.audit.write(f"Failed to create HTTP request: {e}")
                raise CredentialsNotFound()

            try:
                settings = session.merge_environment_settings(request.url, {}, None, None, None)
                response = session.send(request, **settings)
            except (requests.exceptions.RequestException, ValueError) as e:
                # Header values http.client cannot encode surface as ValueError.
                self.audit.write(f"Failed to send HTTP request: {e}")
                raise CredentialsNotFound()

            with response:
                if response.status_code != requests.codes.ok:
                    self.audit.write(f"Received non-OK HTTP status: {response.status_code}")
                    raise CredentialsNotFound()

                try:
                    token = self._decode_token(response)
                except ValueError as e:
                    self.audit.write(f"Failed to decode HTTP response: {e}")
                    raise CredentialsNotFound()

        self.audit.write(f"Successfully retrieved OIDC token: {token}")
        return token

    @staticmethod
    def _decode_token(response: requests.Response) -> str:
        """Extract the token from a ``{"value": "<token>"}`` body."""
        body = response.json()
        if not isinstance(body, dict):
            raise ValueError(f"expected a JSON object, got {type(body).__name__}")

        value = body.get('value')
        if not isinstance(value, str):
            raise ValueError("missing string field 'value'")

        return value
