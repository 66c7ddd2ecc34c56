"""
Helper Configuration

Environment variable names and defaults used by the credential helper.
"""

import os
import tempfile
from dataclasses import dataclass
from typing import Mapping, Optional


REQUEST_URL_VAR = "ACTIONS_ID_TOKEN_REQUEST_URL"
REQUEST_TOKEN_VAR = "ACTIONS_ID_TOKEN_REQUEST_TOKEN"
AUDIENCE_VAR = "ACTIONS_ID_TOKEN_REQUEST_AUDIENCE"

LOG_FILE_VAR = "GITHUB_ACTIONS_OIDC_LOG_FILE"
LOG_LEVEL_VAR = "GITHUB_ACTIONS_OIDC_LOG_LEVEL"

DEFAULT_LOG_FILE = os.path.join(tempfile.gettempdir(), "github_actions_oidc.log")
DEFAULT_LOG_LEVEL = "WARNING"

USER_AGENT = "Docker-Credential-Helper-GitHubActionsOIDC"
IDENTITY = "github_actions"


@dataclass(frozen=True)
class OidcEnvironment:
    """Snapshot of the token request settings exposed by the Actions runner."""

    request_url: str = ""
    request_token: str = ""
    audience: str = ""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "OidcEnvironment":
        """
        Read the token request settings.

        Args:
            environ: Mapping to read from, defaults to ``os.environ``

        Returns:
            A fresh OidcEnvironment
        """
        if environ is None:
            environ = os.environ

        return cls(
            request_url=environ.get(REQUEST_URL_VAR, ""),
            request_token=environ.get(REQUEST_TOKEN_VAR, ""),
            audience=environ.get(AUDIENCE_VAR, ""),
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.request_url and self.request_token)
