"""Entry point: cli | oneshot."""

import asyncio
import sys


def _catalog_arg(args: list[str]) -> tuple[str | None, list[str]]:
    if "--catalog" in args:
        idx = args.index("--catalog")
        if idx + 1 < len(args):
            return args[idx + 1], args[:idx] + args[idx + 2 :]
    return None, args


def main():
    mode = "cli"
    if len(sys.argv) > 1:
        mode = sys.argv[1].lower()

    catalog, rest = _catalog_arg(sys.argv[2:])

    if mode == "cli":
        from quicksearch.interfaces.cli import run_cli

        asyncio.run(run_cli(catalog_path=catalog))

    elif mode == "oneshot":
        from quicksearch.interfaces.oneshot import main as run_oneshot_main

        if rest:
            query = " ".join(rest).strip()
        else:
            query = sys.stdin.read().strip()
        sys.exit(run_oneshot_main(query=query, catalog_path=catalog))

    elif mode == "check-config":
        from quicksearch.core.config import config

        errors = config.validate()
        for error in errors:
            print(f"  - {error}")
        sys.exit(1 if errors else 0)

    else:
        print(f"Unknown mode: {mode}")
        print("Usage: python -m quicksearch.main [cli|oneshot|check-config] [--catalog PATH]")
        sys.exit(1)


if __name__ == "__main__":
    main()
