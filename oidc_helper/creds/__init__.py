"""
Credentials Package

Credential helpers implementing the store/get/erase/list host contract.
"""

from .base import CredentialHelper, Credentials
from .github_actions import GitHubActionsOidcHelper

__all__ = ["CredentialHelper", "Credentials", "GitHubActionsOidcHelper"]
