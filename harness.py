"""
Interactive harness for testing fs-watch-mcp without MCP integration.

Usage:
    python harness.py <DIRECTORY> [--filters dist,misc,git] [--poll-ms 500]

Watches the directory, prints added/changed/deleted events as they happen,
and drops you into a REPL where you can call watcher methods directly.
Runs one synchronous cycle on startup as a smoke test.
"""

import json
import logging
import sys
from pathlib import Path

# Add src/ to path so imports work
sys.path.insert(0, str(Path(__file__).parent / "src"))

from filters import resolve_filters
from handles.fs_handles import StaticDirectoryPicker
from models.config import WatcherConfig
from models.errors import WatchError
from watcher.fs_watcher import FileSystemWatcher


def _print_event(kind: str):
    def callback(delta, previous):
        for path in sorted(delta):
            print(f"\n  [{kind}] {path} ({len(delta[path])} chars)")

    return callback


def smoke_test(watcher: FileSystemWatcher) -> None:
    """Quick automated checks after the first cycle."""
    changes = watcher.run_cycle()
    st = watcher.status()
    print("\n=== Smoke Test ===")
    print(f"  Roots:          {st['roots']}")
    print(f"  Files tracked:  {st['files_tracked']}")
    print(f"  Cache entries:  {st['cache_entries']}")
    if changes is not None:
        print(f"  First cycle:    {changes.summary()}")

    paths = watcher.list_files()
    print(f"\n  Files (first 10 of {len(paths)}):")
    for path in paths[:10]:
        print(f"    {path}")

    print("\n=== Smoke Test Complete ===\n")


def repl(watcher: FileSystemWatcher) -> None:
    """Simple REPL for interactive exploration."""
    print("Interactive mode. Type 'help' for commands, 'quit' to exit.\n")

    commands = {
        "help":     "Show this help",
        "status":   "Show watcher status",
        "ls":       "List files. Usage: ls [prefix]",
        "cat":      "Print a file. Usage: cat <path>",
        "write":    "Replace a file. Usage: write <path> <text...>",
        "touch":    "Create an empty file under a root. Usage: touch <path>",
        "rm":       "Delete a file. Usage: rm <path>",
        "cycle":    "Run one poll cycle now and print its changes",
        "clear":    "Stop watching and drop all state",
        "quit":     "Exit",
    }

    while True:
        try:
            line = input("fs-watch> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not line:
            continue

        parts = line.split()
        cmd = parts[0].lower()

        try:
            if cmd == "quit" or cmd == "exit":
                break

            elif cmd == "help":
                for k, v in commands.items():
                    print(f"  {k:12s} {v}")

            elif cmd == "status":
                print(json.dumps(watcher.status(), indent=2, default=str))

            elif cmd == "ls":
                prefix = parts[1] if len(parts) > 1 else None
                paths = watcher.list_files(prefix)
                print(f"{len(paths)} files:")
                for path in paths:
                    print(f"  {path}")

            elif cmd == "cat":
                if len(parts) < 2:
                    print("Usage: cat <path>")
                    continue
                print(watcher.read_file(parts[1]))

            elif cmd == "write":
                if len(parts) < 3:
                    print("Usage: write <path> <text...>")
                    continue
                text = line.split(None, 2)[2]
                watcher.write_file(parts[1], text + "\n", truncate=True)
                print(f"  Wrote {parts[1]}")

            elif cmd == "touch":
                if len(parts) < 2:
                    print("Usage: touch <path>")
                    continue
                watcher.create_file(parts[1])
                print(f"  Created {parts[1]}")

            elif cmd == "rm":
                if len(parts) < 2:
                    print("Usage: rm <path>")
                    continue
                watcher.delete_file(parts[1])
                print(f"  Deleted {parts[1]}")

            elif cmd == "cycle":
                changes = watcher.run_cycle()
                print(f"  {changes.summary() if changes else 'no cycle ran'}")

            elif cmd == "clear":
                watcher.clear()
                print("  Cleared")

            else:
                print(f"Unknown command: {cmd}. Type 'help' for available commands.")
        except (WatchError, ValueError) as e:
            print(f"  Error: {e}")


def main():
    if len(sys.argv) < 2:
        print("Usage: python harness.py <DIRECTORY> [--filters dist,misc,git] [--poll-ms 500]")
        sys.exit(1)

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    root = Path(sys.argv[1]).resolve()
    filter_names = ["dist", "misc", "git"]
    poll_ms = 500.0
    args = sys.argv[2:]
    for i, arg in enumerate(args):
        if arg == "--filters" and i + 1 < len(args):
            filter_names = [n for n in args[i + 1].split(",") if n]
        elif arg == "--poll-ms" and i + 1 < len(args):
            poll_ms = float(args[i + 1])

    config = WatcherConfig(
        filters=resolve_filters(filter_names),
        poll_interval=poll_ms / 1000.0,
        on_files_added=_print_event("added"),
        on_files_changed=_print_event("changed"),
        on_files_deleted=_print_event("deleted"),
    )
    watcher = FileSystemWatcher(config)

    print(f"Watching: {root}")
    print(f"Filters:  {filter_names}")
    result = watcher.select_root(StaticDirectoryPicker(root))
    if not result.ok:
        print(f"Error: {result.error}")
        sys.exit(1)

    smoke_test(watcher)
    try:
        repl(watcher)
    finally:
        watcher.clear()

    print("Done.")


if __name__ == "__main__":
    main()
