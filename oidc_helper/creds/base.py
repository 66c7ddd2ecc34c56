"""
Base Credential Helper

Abstract base class for credential helpers driven by a credential host.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Any, Optional, Tuple
import structlog

from ..errors import MissingServerURLError, MissingUsernameError
from ..loggingx import AuditLog


@dataclass
class Credentials:
    """Credentials exchanged with the host for a single server."""

    server_url: str
    username: str = ""
    secret: str = ""

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "Credentials":
        """
        Build credentials from the host's JSON payload.

        Args:
            payload: Decoded object with ServerURL, Username and Secret keys

        Returns:
            Credentials instance

        Raises:
            MissingServerURLError: If ServerURL is empty
            MissingUsernameError: If Username is empty
        """
        credentials = cls(
            server_url=payload.get('ServerURL') or "",
            username=payload.get('Username') or "",
            secret=payload.get('Secret') or "",
        )
        if not credentials.server_url:
            raise MissingServerURLError()
        if not credentials.username:
            raise MissingUsernameError()
        return credentials

    def to_json(self) -> Dict[str, str]:
        return {
            'ServerURL': self.server_url,
            'Username': self.username,
            'Secret': self.secret,
        }


class CredentialHelper(ABC):
    """Abstract base class for the four-operation credential helper contract."""

    def __init__(self, name: str, audit: AuditLog):
        self.name = name
        self.audit = audit
        self.logger = structlog.get_logger(__name__)

    @abstractmethod
    def store(self, credentials: Credentials) -> None:
        """
        Store credentials for a server.

        Args:
            credentials: Credentials sent by the host
        """
        pass

    @abstractmethod
    def erase(self, server_url: str) -> None:
        """
        Erase the credentials stored for a server.

        Args:
            server_url: Server whose credentials should be removed
        """
        pass

    @abstractmethod
    def get(self, server_url: str) -> Tuple[str, str]:
        """
        Retrieve credentials for a server.

        Args:
            server_url: Server the host needs credentials for

        Returns:
            Tuple of (username, secret)

        Raises:
            CredentialsNotFound: If no credentials are available
        """
        pass

    @abstractmethod
    def list_credentials(self) -> Dict[str, str]:
        """
        List stored credentials.

        Returns:
            Mapping of server URL to username
        """
        pass

    def mask_sensitive_data(self, credential: Dict[str, Any],
                            sensitive_fields: list[str] = None) -> Dict[str, Any]:
        """
        Create a copy of credential with sensitive fields masked.

        Args:
            credential: Original credential dictionary
            sensitive_fields: List of sensitive field names to mask

        Returns:
            Copy of credential with sensitive fields masked
        """
        if sensitive_fields is None:
            sensitive_fields = ['Secret', 'secret', 'password', 'token']

        masked = credential.copy()
        for field in sensitive_fields:
            if field in masked:
                masked[field] = '***MASKED***'

        return masked

    def log_credential_access(self, server_url: str,
                              success: bool, error: Optional[str] = None) -> None:
        """
        Log credential access attempt.

        Args:
            server_url: Server the credentials were requested for
            success: Whether access was successful
            error: Error message if access failed
        """
        if success:
            self.logger.info("Credential accessed successfully",
                             provider=self.name, server_url=server_url)
        else:
            self.logger.warning("Credential access failed",
                                provider=self.name, server_url=server_url, error=error)
