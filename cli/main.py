"""CLI entry point and argument parsing"""

import argparse
import asyncio
import sys
from typing import Optional

from rich.console import Console

import settings
from client import ITDClient
from cli.debug_setup import setup_logging
from cli.status_display import build_status_table, describe_refresh_error, mask_token


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="итд.com client session tools")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument("--base-url", default=None, help="Override the site base URL (default: from config)")
    parser.add_argument("--env-file", default=None, help="Path to the .env file holding ITD_ACCESS_TOKEN")
    parser.add_argument("--cookies-file", default=None, help="Path to the .cookies file")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("status", help="Show local session state")
    subparsers.add_parser("refresh", help="Refresh the access token using the refresh_token cookie")
    subparsers.add_parser("validate", help="Check the token against the API, refreshing if needed")
    subparsers.add_parser("logout", help="Log out and clear the session")
    subparsers.add_parser("whoami", help="Print the current user's profile")
    return parser


async def run_command(client: ITDClient, command: str, console: Console) -> int:
    """
    Execute one CLI command

    Args:
        client: Configured ITDClient
        command: Subcommand name
        console: Rich console for output

    Returns:
        Process exit code
    """
    if command == "status":
        console.print(build_status_table(client))
        return 0

    if command == "refresh":
        token = await client.refresh_access_token()
        if token:
            console.print(f"[green][OK][/green] Access token refreshed: {mask_token(token)}")
            return 0
        console.print(f"[red]Refresh failed:[/red] {describe_refresh_error(client.last_refresh_error)}")
        return 1

    if command == "validate":
        if not client.check_auth() and not client.has_refresh_token():
            console.print("[red]No access token and no refresh_token cookie[/red]")
            return 1
        if not client.check_auth():
            # No token yet: obtain one from the refresh cookie first
            if not await client.refresh_access_token():
                console.print(f"[red]Refresh failed:[/red] {describe_refresh_error(client.last_refresh_error)}")
                return 1
        if await client.validate_and_refresh_token():
            console.print("[green][OK][/green] Token is valid")
            return 0
        console.print("[red]Token is not valid[/red]")
        return 1

    if command == "logout":
        if await client.logout():
            console.print("[green][OK][/green] Logged out")
            return 0
        console.print("[red]Logout failed[/red]")
        return 1

    if command == "whoami":
        profile = await client.users.get_my_profile()
        if not profile:
            console.print("[red]Could not fetch profile[/red]")
            return 1
        console.print_json(data=profile)
        return 0

    console.print(f"[red]Unknown command:[/red] {command}")
    return 1


async def _main_async(args: argparse.Namespace, console: Console) -> int:
    async with ITDClient(
        base_url=args.base_url,
        env_path=args.env_file,
        cookies_path=args.cookies_file,
    ) as client:
        return await run_command(client, args.command, console)


def main(argv: Optional[list] = None) -> int:
    """Entry point for the CLI"""
    parser = build_parser()
    args = parser.parse_args(argv)

    console = setup_logging(args.debug, settings.LOG_LEVEL, settings.DEBUG_LOG_FILE)

    try:
        return asyncio.run(_main_async(args, console))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130
    except Exception as e:
        console.print(f"\n[red]Fatal error:[/red] {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
