#!/usr/bin/env python3
"""Ad hoc search runner for Head Cook AI.

Runs one search against a running backend and prints the recipes.

Usage:
    python query.py "chicken, rice"
    python query.py --cuisine Italian --cuisine Thai "chicken, rice"
    python query.py --token <firebase-id-token> "eggs, spinach"
    python query.py --debug "chicken, rice"   # Show the final session state as JSON

The token may also be provided via HEADCOOK_TOKEN. The backend URL comes from
API_BASE_URL (default: http://localhost:8080).
"""

import asyncio
import os
import sys
from typing import Optional

from rich.console import Console
from rich.markdown import Markdown

from headcook.client.api import HeadCookClient
from headcook.client.identity import ClientIdentity, IdentityBroker
from headcook.client.session import SearchSession, SessionState
from headcook.utils.config import config
from headcook.utils.logger import logger

console = Console()


def render_recipes(state: SessionState) -> str:
    """Render the session's recipes as markdown."""
    lines = []
    for recipe in state.recipes:
        lines.append(f"## {recipe.name}")
        if recipe.image:
            kind = "generated photo" if recipe.image.startswith("data:") else recipe.image
            lines.append(f"*Image: {kind}*")
        else:
            lines.append("*No image available*")
        lines.append("")
        lines.append(recipe.instructions)
        lines.append("")
    return "\n".join(lines)


async def run_query(ingredients: str, cuisines: list[str], token: Optional[str], debug: bool = False) -> int:
    """Execute a single search and print the result.

    Returns:
        Process exit code (0 on success).
    """
    identity = IdentityBroker(ClientIdentity(uid="cli", email="", token=token) if token else None)
    async with HeadCookClient() as client:
        session = SearchSession(client, identity)
        logger.info(f"Searching {config.API_BASE_URL}: ingredients={ingredients!r} cuisines={cuisines}")
        state = await session.search(ingredients, cuisines)

    console.print()
    if debug:
        console.print("[bold cyan]Debug Mode: Final Session State[/bold cyan]")
        console.print_json(data=state.to_dict())
        console.print()

    if state.error:
        console.print(f"[red]✗ {state.error}[/red]")
        return 1

    console.print(Markdown(render_recipes(state)))
    if state.search_count is not None:
        console.print(f"[dim]Searches so far: {state.search_count}[/dim]")
    return 0


def parse_args(argv: list[str]) -> tuple[str, list[str], Optional[str], bool]:
    cuisines: list[str] = []
    token = os.getenv("HEADCOOK_TOKEN")
    debug = False
    index = 0

    while index < len(argv) and argv[index].startswith("--"):
        flag = argv[index]
        if flag == "--debug":
            debug = True
            index += 1
        elif flag in ("--cuisine", "--token"):
            if index + 1 >= len(argv):
                raise SystemExit(f"Error: {flag} flag requires a value")
            if flag == "--cuisine":
                cuisines.append(argv[index + 1])
            else:
                token = argv[index + 1]
            index += 2
        else:
            raise SystemExit(f"Unknown flag: {flag}")

    ingredients = " ".join(argv[index:])
    return ingredients, cuisines, token, debug


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print('Usage: python query.py [--debug] [--token TOKEN] [--cuisine NAME ...] "<ingredients>"')
        print("")
        print("Examples:")
        print('  python query.py "chicken, rice"')
        print('  python query.py --cuisine Italian "chicken, rice"')
        sys.exit(1)

    ingredients, cuisines, token, debug = parse_args(sys.argv[1:])
    try:
        sys.exit(asyncio.run(run_query(ingredients, cuisines, token, debug=debug)))
    except KeyboardInterrupt:
        logger.info("Query interrupted by user.")
        sys.exit(0)
