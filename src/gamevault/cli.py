"""
Command-line interface for GameVault.

Scans the game library, enriches entries from Steam and moves metadata
between the database and the per-folder sidecar files. Every command
prints a JSON envelope on stdout; logs and progress go to stderr.
"""

import asyncio
import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from gamevault.config import get_settings
from gamevault.logger import get_logger, setup_logging
from gamevault.storage import LibraryStore

logger = get_logger(__name__, component="cli")

# edit flags and the EntryUpdate field each one sets
_EDIT_FLAGS: dict[str, str] = {
    "--title": "title",
    "--summary": "summary",
    "--genres": "genres",
    "--developers": "developers",
    "--publishers": "publishers",
    "--release-date": "release_date",
    "--review-score": "review_score",
}
_LIST_FIELDS = {"genres", "developers", "publishers"}


class CLIOutput(BaseModel):
    """Structured output for CLI commands."""

    success: bool
    command: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    data: dict[str, Any] | list[Any] | None = None
    error: str | None = None


class UsageError(Exception):
    """Raised for missing or malformed command arguments."""


def print_json(output: CLIOutput) -> None:
    """Print output as formatted JSON."""
    print(json.dumps(output.model_dump(), indent=2, default=str))


@contextmanager
def open_store() -> Iterator[LibraryStore]:
    """Open the configured library store for the duration of a command."""
    store = LibraryStore.from_url(get_settings().library.database_url)
    try:
        yield store
    finally:
        store.dispose()


def parse_edit_args(args: list[str]) -> dict[str, Any]:
    """
    Turn ``--flag value`` pairs into EntryUpdate fields.

    List fields take a comma-separated value.
    """
    fields: dict[str, Any] = {}
    it = iter(args)
    for flag in it:
        if flag not in _EDIT_FLAGS:
            raise UsageError(f"Unknown edit option: {flag}")
        try:
            value = next(it)
        except StopIteration:
            raise UsageError(f"{flag} requires a value") from None
        name = _EDIT_FLAGS[flag]
        if name in _LIST_FIELDS:
            fields[name] = [part.strip() for part in value.split(",") if part.strip()]
        elif name == "review_score":
            try:
                fields[name] = int(value)
            except ValueError:
                raise UsageError(f"{flag} must be an integer") from None
        else:
            fields[name] = value
    return fields


def _entry_id(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise UsageError(f"Invalid entry id: {value}") from None


def _positive_int(value: str, name: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise UsageError(f"{name} must be an integer") from None
    if number <= 0:
        raise UsageError(f"{name} must be positive")
    return number


async def cmd_test_config() -> None:
    """Show the effective configuration."""
    settings = get_settings()

    output = CLIOutput(
        success=True,
        command="test-config",
        data={
            "environment": settings.environment,
            "game_library": str(settings.library.game_library),
            "database_url": settings.library.database_url,
            "sidecar_dir_name": settings.library.sidecar_dir_name,
            "steam_store_url": settings.steam.store_url,
            "steam_search_url": settings.steam.search_url,
            "steam_timeout_seconds": settings.steam.timeout_seconds,
            "batch_size": settings.enrichment.batch_size,
            "request_delay_seconds": settings.enrichment.request_delay_seconds,
        },
    )
    print_json(output)


async def cmd_normalize(raw_name: str) -> None:
    """Show how a folder name is cleaned and whether it is kept."""
    from gamevault.catalog import exclusion_reason, normalize

    result = normalize(raw_name)
    output = CLIOutput(
        success=True,
        command="normalize",
        data={
            "raw_name": raw_name,
            "clean_title": result.clean_title,
            "included": result.included,
            "exclusion_reason": exclusion_reason(raw_name),
        },
    )
    print_json(output)


async def cmd_resolve(title: str) -> None:
    """Resolve a title to a Steam app id."""
    from gamevault.matching import CatalogResolver

    async with CatalogResolver() as resolver:
        match = await resolver.resolve(title)

    output = CLIOutput(
        success=match is not None,
        command="resolve",
        data={
            "title": title,
            "app_id": match.app_id,
            "confidence": round(match.confidence, 4),
            "source": match.source.value,
        }
        if match
        else None,
        error=None if match else f"No match for {title!r}",
    )
    print_json(output)


async def cmd_scan(path: str | None) -> None:
    """Register game folders found under the library root."""
    from gamevault.catalog import LibraryScanner

    root = Path(path) if path else get_settings().library.game_library
    with open_store() as store:
        summary = LibraryScanner(store).scan(root)

    print_json(CLIOutput(success=True, command="scan", data=summary.to_dict()))


async def cmd_enrich() -> None:
    """Run one enrichment batch."""
    from gamevault.ingestion.orchestrator import EnrichmentOrchestrator, EnrichmentProgress

    def on_progress(progress: EnrichmentProgress) -> None:
        bar_length = 30
        filled = int(bar_length * progress.percentage / 100)
        bar = "█" * filled + "░" * (bar_length - filled)
        print(
            f"\r  [{bar}] {progress.percentage:.1f}% "
            f"| {progress.completed}/{progress.total} "
            f"| {(progress.current_title or '')[:30]:<30}",
            end="",
            file=sys.stderr,
            flush=True,
        )

    with open_store() as store:
        async with EnrichmentOrchestrator(store) as orchestrator:
            summary = await orchestrator.run(on_progress=on_progress)
    print(file=sys.stderr)

    print_json(
        CLIOutput(
            success=True,
            command="enrich",
            data=summary.to_dict(include_outcomes=True),
        )
    )


async def cmd_export() -> None:
    """Write sidecars for every matched entry."""
    from gamevault.sync import SyncReconciler

    with open_store() as store:
        summary = SyncReconciler(store).export_all()
    print_json(CLIOutput(success=True, command="export", data=summary.to_dict()))


async def cmd_import() -> None:
    """Merge newer sidecars into the database."""
    from gamevault.sync import SyncReconciler

    with open_store() as store:
        summary = SyncReconciler(store).import_all()
    print_json(CLIOutput(success=True, command="import", data=summary.to_dict()))


async def cmd_stats() -> None:
    """Show library counts."""
    with open_store() as store:
        stats = store.stats()
    print_json(CLIOutput(success=True, command="stats", data=stats.model_dump()))


async def cmd_search(query: str) -> None:
    """Find entries whose title contains the query."""
    with open_store() as store:
        entries = store.search(query)
    print_json(
        CLIOutput(
            success=True,
            command="search",
            data=[e.model_dump(mode="json") for e in entries],
        )
    )


async def cmd_recent(limit: int) -> None:
    """Show the most recently discovered entries."""
    with open_store() as store:
        entries = store.list_recent(limit)
    print_json(
        CLIOutput(
            success=True,
            command="recent",
            data=[e.model_dump(mode="json") for e in entries],
        )
    )


async def cmd_storage(entry_id: int) -> None:
    """Show whether a game folder is writable and which save backups it holds."""
    from gamevault.local import folder_status
    from gamevault.storage import EntryNotFoundError

    with open_store() as store:
        folder = store.get_folder_for(entry_id)
    if folder is None:
        raise EntryNotFoundError(entry_id)

    status = folder_status(folder)
    data = {"entry_id": entry_id, "folder": folder, **status.model_dump()}
    print_json(CLIOutput(success=True, command="storage", data=data))


async def cmd_edit(entry_id: int, fields: dict[str, Any]) -> None:
    """Apply a manual edit."""
    from gamevault.library import EntryUpdate, LibraryEditor

    update = EntryUpdate(**fields)
    with open_store() as store:
        async with LibraryEditor(store) as editor:
            entry = editor.update_entry(entry_id, update)
    print_json(CLIOutput(success=True, command="edit", data=entry.model_dump(mode="json")))


async def cmd_rematch(entry_id: int, steam_input: str, confirm: bool) -> None:
    """Preview or confirm pointing an entry at another Steam app."""
    from gamevault.library import LibraryEditor

    with open_store() as store:
        async with LibraryEditor(store) as editor:
            if confirm:
                entry = await editor.confirm_rematch(entry_id, steam_input)
                data = entry.model_dump(mode="json")
            else:
                preview = await editor.preview_rematch(entry_id, steam_input)
                data = preview.model_dump()
    print_json(CLIOutput(success=True, command="rematch", data=data))


def print_usage() -> None:
    """Print CLI usage information."""
    usage = """
GameVault CLI
=============

Usage: gamevault <command> [arguments]

Commands:
  test-config                     Show the effective configuration
  normalize <folder_name>         Clean a folder name and show the verdict
  resolve <title>                 Resolve a title to a Steam app id
  scan [path]                     Register game folders under the library root
  enrich                          Enrich one batch of pending entries
  export                          Write metadata sidecars for matched entries
  import                          Merge newer sidecars into the database
  stats                           Show library counts
  search <query>                  Find entries by title
  recent [limit]                  Show the most recently discovered entries
  storage <id>                    Show folder writability and save backups
  edit <id> [--title T] [--summary S] [--genres A,B] [--developers A,B]
            [--publishers A,B] [--release-date D] [--review-score N]
                                  Manually edit an entry
  rematch <id> <app_id|url> [--confirm]
                                  Preview (or apply) a different Steam match

Examples:
  gamevault scan /mnt/games
  gamevault rematch 12 https://store.steampowered.com/app/292030/ --confirm
"""
    print(usage)


def _require(args: list[str], count: int, message: str) -> None:
    if len(args) < count:
        raise UsageError(message)


def main() -> None:
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print_usage()
        sys.exit(1)

    setup_logging()
    command = sys.argv[1]
    args = sys.argv[2:]

    try:
        if command == "test-config":
            asyncio.run(cmd_test_config())

        elif command == "normalize":
            _require(args, 1, "folder name required")
            asyncio.run(cmd_normalize(args[0]))

        elif command == "resolve":
            _require(args, 1, "title required")
            asyncio.run(cmd_resolve(" ".join(args)))

        elif command == "scan":
            asyncio.run(cmd_scan(args[0] if args else None))

        elif command == "enrich":
            asyncio.run(cmd_enrich())

        elif command == "export":
            asyncio.run(cmd_export())

        elif command == "import":
            asyncio.run(cmd_import())

        elif command == "stats":
            asyncio.run(cmd_stats())

        elif command == "search":
            _require(args, 1, "search query required")
            asyncio.run(cmd_search(" ".join(args)))

        elif command == "recent":
            asyncio.run(cmd_recent(_positive_int(args[0], "limit") if args else 10))

        elif command == "storage":
            _require(args, 1, "entry id required")
            asyncio.run(cmd_storage(_entry_id(args[0])))

        elif command == "edit":
            _require(args, 1, "entry id required")
            asyncio.run(cmd_edit(_entry_id(args[0]), parse_edit_args(args[1:])))

        elif command == "rematch":
            confirm = "--confirm" in args
            positional = [a for a in args if a != "--confirm"]
            _require(positional, 2, "entry id and Steam app id or URL required")
            asyncio.run(cmd_rematch(_entry_id(positional[0]), positional[1], confirm))

        elif command in ("help", "--help", "-h"):
            print_usage()

        else:
            print(f"Unknown command: {command}", file=sys.stderr)
            print_usage()
            sys.exit(1)

    except UsageError as e:
        print_json(CLIOutput(success=False, command=command, error=str(e)))
        sys.exit(2)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        logger.exception("CLI error", error=str(e))
        output = CLIOutput(
            success=False,
            command=command,
            error=str(e),
        )
        print_json(output)
        sys.exit(1)


if __name__ == "__main__":
    main()
