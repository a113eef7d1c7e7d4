"""Status display functionality for CLI"""

from typing import Optional

from rich.table import Table

from auth.errors import RefreshError, RefreshRejected, RefreshUnavailable
from client import ITDClient


def mask_token(token: Optional[str], visible: int = 12) -> str:
    """Show only the head of a token"""
    if not token:
        return "-"
    if len(token) <= visible:
        return token
    return f"{token[:visible]}..."


def build_status_table(client: ITDClient) -> Table:
    """
    Build the session status table

    Args:
        client: ITDClient instance

    Returns:
        Rich table ready to print
    """
    table = Table(title="Session Status")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Base URL", client.base_url)
    table.add_row("Access Token", "Yes" if client.check_auth() else "No")
    table.add_row("Token", mask_token(client.access_token))
    table.add_row("Refresh Cookie", "Yes" if client.has_refresh_token() else "No")
    table.add_row("Token File", str(client.env_path))
    table.add_row("Cookies File", str(client.cookies_path))

    return table


def describe_refresh_error(error: Optional[RefreshError]) -> str:
    """
    Operator-facing explanation of a failed refresh

    Args:
        error: Error recorded by the refresh coordinator

    Returns:
        One-line reason with the corrective action where there is one
    """
    if error is None:
        return "Unknown failure"
    if isinstance(error, RefreshUnavailable):
        return "No refresh_token cookie: copy the Cookie header from a logged-in browser into .cookies"
    if isinstance(error, RefreshRejected):
        return f"Refresh credential rejected ({error}): update .cookies from the browser"
    return str(error)
