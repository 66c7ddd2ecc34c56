"""
GitHub Actions OIDC Credential Helper

Serves short-lived GitHub Actions OIDC tokens to credential hosts such as
the Docker CLI.
"""

__version__ = "1.0.0"
__author__ = "Automation Team"

from .cli import cli
from .creds import GitHubActionsOidcHelper

__all__ = ["cli", "GitHubActionsOidcHelper"]
