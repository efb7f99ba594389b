"""CLI interface: search loop, colors, /help /pin /exclude /nick /perm /quit."""

import asyncio
import shutil

from quicksearch.contracts.search_v1 import (
    ExclusionPurpose,
    SearchSnapshot,
    SectionId,
    ShortcutNavigation,
    SourceType,
)
from quicksearch.core.logger import logger
from quicksearch.interfaces.catalog import Catalog, CatalogError, SearchStack, build_stack
from quicksearch.interfaces.oneshot import resolve_catalog_path
from quicksearch.preferences.permissions import Permission


class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"


def colorize(text: str, *colors: str) -> str:
    color_codes = "".join(colors)
    return f"{color_codes}{text}{Colors.RESET}"


def print_help():
    help_text = """
    ╭──────────────────────────────────────────────────────────╮
    │  Commands                                                │
    ├──────────────────────────────────────────────────────────┤
    │  <text>                         - Search for <text>      │
    │  /type <text>                   - Type it key by key     │
    │  /clear                         - Clear the query        │
    │  /unlock                        - Drop the locked engine │
    │  /pin <source> <key>            - Pin an item            │
    │  /unpin <source> <key>          - Unpin an item          │
    │  /exclude <source> <key> [suggestions]                   │
    │  /include <source> <key> [suggestions]                   │
    │  /nick <source> <key> [name]    - Set or clear nickname  │
    │  /perm grant|revoke <perm>      - contacts, files        │
    │  /order <s1,s2,...>             - Reorder sections       │
    │  /hide <section>, /show <section>                        │
    │  /recent clear | forget <text>  - Recent queries         │
    │  /quit                          - Exit                   │
    ╰──────────────────────────────────────────────────────────╯
    Sources: apps, app_shortcuts, contacts, files, settings
    """
    print(colorize(help_text, Colors.CYAN))


def format_snapshot(snapshot: SearchSnapshot) -> str:
    try:
        width = shutil.get_terminal_size().columns
    except OSError:
        width = 80
    lines = [
        colorize(
            f"  #{snapshot.generation} {snapshot.mode.value}  '{snapshot.query}'",
            Colors.DIM,
        )
    ]
    if snapshot.navigation is not None:
        nav = snapshot.navigation
        lines.append(colorize(f"  ↗ {nav.target.target_id}: {nav.query}", Colors.YELLOW))
    if snapshot.locked_target is not None:
        lines.append(colorize(f"  ⌕ {snapshot.locked_target.target_id}", Colors.YELLOW))
    if snapshot.calculator is not None:
        calc = snapshot.calculator
        lines.append(colorize(f"  = {calc.result}", Colors.GREEN, Colors.BOLD))
    for section in snapshot.sections:
        source_type = section.section.source_type
        result_set = snapshot.results.get(source_type)
        pinned = snapshot.pinned.get(source_type, ())
        if not pinned and (result_set is None or not result_set.items):
            continue
        lines.append(colorize(f"  {section.section.value}", Colors.MAGENTA, Colors.BOLD))
        for candidate in pinned:
            lines.append(f"    📌 {candidate.name}"[:width])
        for item in result_set.items if result_set else ():
            nick = f" ({item.candidate.nickname})" if item.candidate.nickname else ""
            tier = colorize(item.priority.name.lower(), Colors.DIM)
            lines.append(f"    {item.candidate.name}{nick}  {tier}  [{item.candidate.key}]")
    if snapshot.recent_queries:
        lines.append(colorize("  recent", Colors.MAGENTA, Colors.BOLD))
        lines.extend(f"    ↺ {query}"[:width] for query in snapshot.recent_queries)
    if len(lines) == 1 and snapshot.query.strip():
        lines.append(colorize("  No results", Colors.DIM))
    return "\n".join(lines)


def _parse_source(value: str) -> SourceType:
    return SourceType(value.strip().lower())


def handle_command(stack: SearchStack, command: str) -> str | None:
    """Apply a /command. Returns a message to print, or None for unknown commands."""
    parts = command.split()
    name, args = parts[0].lower(), parts[1:]
    prefs = stack.preferences

    if name in ("/pin", "/unpin") and len(args) == 2:
        source, key = _parse_source(args[0]), args[1]
        (prefs.pin if name == "/pin" else prefs.unpin)(source, key)
        return f"{name[1:]}ned {source.value}:{key}"

    if name in ("/exclude", "/include") and len(args) in (2, 3):
        source, key = _parse_source(args[0]), args[1]
        purpose = ExclusionPurpose(args[2]) if len(args) == 3 else ExclusionPurpose.RESULTS
        (prefs.exclude if name == "/exclude" else prefs.include)(source, key, purpose)
        return f"{name[1:]}d {source.value}:{key} ({purpose.value})"

    if name == "/nick" and len(args) >= 2:
        source, key = _parse_source(args[0]), args[1]
        nickname = " ".join(args[2:]) or None
        prefs.set_nickname(source, key, nickname)
        return f"nickname for {source.value}:{key} = {nickname or '(cleared)'}"

    if name == "/perm" and len(args) == 2 and args[0] in ("grant", "revoke"):
        permission = Permission(args[1].lower())
        if args[0] == "grant":
            stack.permissions.grant(permission)
        else:
            stack.permissions.revoke(permission)
        return f"{args[0]}ed {permission.value}"

    if name == "/order" and len(args) == 1:
        prefs.set_section_order([SectionId(s) for s in args[0].split(",") if s])
        return "section order updated"

    if name == "/recent" and args == ["clear"]:
        prefs.clear_recent_queries()
        return "recent queries cleared"

    if name == "/recent" and len(args) >= 2 and args[0] == "forget":
        text = " ".join(args[1:])
        prefs.delete_recent_query(text)
        return f"forgot '{text}'"

    if name in ("/hide", "/show") and len(args) == 1:
        section = SectionId(args[0].lower())
        prefs.set_section_enabled(section, name == "/show")
        return f"{section.value} {'shown' if name == '/show' else 'hidden'}"

    return None


async def run_cli(catalog_path: str | None = None):
    try:
        catalog = Catalog.load(resolve_catalog_path(catalog_path))
        stack = build_stack(catalog)
    except CatalogError as e:
        print(colorize(f"  Error: {e}", Colors.RED))
        return

    controller = stack.controller

    def on_navigate(navigation: ShortcutNavigation):
        print(colorize(f"  Opening {navigation.target.target_id} with '{navigation.query}'", Colors.YELLOW))

    controller.on_navigate(on_navigate)
    print(colorize("  QuickSearch. Type /help for commands\n", Colors.DIM))

    controller.clear()
    await controller.wait_idle()
    print(format_snapshot(controller.state))

    while True:
        try:
            user_input = await asyncio.to_thread(input, colorize("\n❯ ", Colors.GREEN, Colors.BOLD))
        except EOFError:
            break
        command = user_input.strip()

        if command.lower() in ("/quit", "/exit", "/q"):
            break
        if command.lower() == "/help":
            print_help()
            continue
        if command.lower() == "/clear":
            controller.clear()
        elif command.lower() == "/unlock":
            controller.clear_locked_target()
        elif command.lower().startswith("/type "):
            text = user_input.split(" ", 1)[1]
            for i in range(1, len(text) + 1):
                controller.on_query_change(text[:i])
                await asyncio.sleep(0.03)
        elif command.startswith("/"):
            try:
                message = handle_command(stack, command)
            except ValueError as e:
                print(colorize(f"  Error: {e}", Colors.RED))
                continue
            if message is None:
                print(colorize("  Unknown command, see /help", Colors.RED))
                continue
            print(colorize(f"  {message}", Colors.DIM))
            controller.refresh()
        else:
            controller.on_query_change(user_input)
            # Enter submits, so the query counts as recent
            stack.preferences.add_recent_query(user_input)

        await controller.wait_idle()
        print(format_snapshot(controller.state))

    logger.close()
    print(colorize("\n  Bye\n", Colors.MAGENTA))
