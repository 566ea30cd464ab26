"""Helpers for Azure DevOps organization URLs."""

import re
from typing import Optional
from urllib.parse import quote

_ACCOUNT_URL_PATTERN = re.compile(
    r"https://dev\.azure\.com/(?P<account>[^./]+)", re.IGNORECASE
)
_ACCOUNT_URL_LEGACY_PATTERN = re.compile(
    r"https://(?P<account>[^./]+)\.visualstudio\.com", re.IGNORECASE
)


def extract_account_name(account_url: Optional[str]) -> Optional[str]:
    """
    Extract the account (organization) name from an Azure DevOps URL.

    Supports https://dev.azure.com/<org> and the legacy
    https://<org>.visualstudio.com form.

    Returns:
        Account name, or None if the URL matches neither form
    """
    if not account_url:
        return None

    match = _ACCOUNT_URL_PATTERN.match(account_url)
    if match:
        return match.group("account")

    match = _ACCOUNT_URL_LEGACY_PATTERN.match(account_url)
    if match:
        return match.group("account")

    return None


def build_api_base(account_url: str, project: Optional[str] = None) -> str:
    """Build the REST base URL for an organization and optional project."""
    base = account_url.rstrip("/")
    if project:
        base = f"{base}/{quote(project, safe='')}"
    return base
