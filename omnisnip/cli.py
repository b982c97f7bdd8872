from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Sequence

from pydantic import ValidationError

from .config import Settings, normalize_log_level
from .errors import StorageError
from .exception_handler import ErrorHandler
from .snippet import (
    SNIPPET_CATEGORIES,
    SNIPPET_LANGUAGES,
    SORT_FIELDS,
    Snippet,
    SnippetFilter,
    StorageService,
)

logger = logging.getLogger("omnisnip")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="omnisnip",
        description="Manage personal code snippets stored as JSON on local disk",
    )
    parser.add_argument(
        "--dir",
        dest="storage_dir",
        default=None,
        help="Storage directory (defaults to OMNISNIP_HOME or ~/.omnisnip)",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=None,
        help="Logging level (defaults to OMNISNIP_LOG_LEVEL or WARNING)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    add = commands.add_parser("add", help="Add a new snippet")
    add.add_argument("--title", required=True)
    add.add_argument("--description", default="")
    _add_code_source(add, required=True)
    add.add_argument("--language", required=True, choices=SNIPPET_LANGUAGES)
    add.add_argument("--category", required=True, choices=SNIPPET_CATEGORIES)
    add.add_argument("--tag", dest="tags", action="append", default=None, help="Tag (repeatable)")
    add.add_argument("--favorite", action="store_true", help="Mark as favorite")

    listing = commands.add_parser("list", help="List snippets, optionally filtered and sorted")
    listing.add_argument("--query", default=None, help="Case-insensitive text in title, description or code")
    listing.add_argument("--language", choices=SNIPPET_LANGUAGES, default=None)
    listing.add_argument("--category", choices=SNIPPET_CATEGORIES, default=None)
    listing.add_argument("--tag", dest="tags", action="append", default=None, help="Match any of these tags (repeatable)")
    listing.add_argument("--favorite", action=argparse.BooleanOptionalAction, default=None)
    listing.add_argument("--sort-by", dest="sort_by", choices=SORT_FIELDS, default=None)
    listing.add_argument("--desc", action="store_true", help="Sort in descending order")

    view = commands.add_parser("view", help="Show one snippet in full")
    view.add_argument("id")

    update = commands.add_parser("update", help="Change fields of an existing snippet")
    update.add_argument("id")
    update.add_argument("--title", default=None)
    update.add_argument("--description", default=None)
    _add_code_source(update, required=False)
    update.add_argument("--language", choices=SNIPPET_LANGUAGES, default=None)
    update.add_argument("--category", choices=SNIPPET_CATEGORIES, default=None)
    update.add_argument("--tag", dest="tags", action="append", default=None, help="Replace tags (repeatable)")
    update.add_argument("--favorite", action=argparse.BooleanOptionalAction, default=None)

    delete = commands.add_parser("delete", help="Delete one snippet")
    delete.add_argument("id")

    search = commands.add_parser("search", help="Search title, description and code")
    search.add_argument("text")

    commands.add_parser("clear", help="Delete every snippet")
    commands.add_parser("purge", help="Remove the storage directory entirely")

    return parser


def _add_code_source(parser: argparse.ArgumentParser, *, required: bool) -> None:
    source = parser.add_mutually_exclusive_group(required=required)
    source.add_argument("--code", default=None, help="Snippet code as text")
    source.add_argument("--file", default=None, help="Read snippet code from this file")


def _read_code(args: argparse.Namespace) -> str | None:
    if args.file:
        return Path(args.file).read_text(encoding="utf-8")
    return args.code


def format_snippet(snippet: Snippet, *, with_code: bool = True) -> str:
    star = " *" if snippet.favorite else ""
    lines = [
        f"{snippet.title}{star}",
        f"   ID: {snippet.id}",
        f"   Description: {snippet.description}",
        f"   Language: {snippet.language}",
        f"   Category: {snippet.category}",
        f"   Tags: {', '.join(snippet.tags) if snippet.tags else '-'}",
        f"   Created: {snippet.created_at.isoformat()}",
        f"   Updated: {snippet.updated_at.isoformat()}",
    ]
    if with_code:
        lines.extend(["   Code:", "   ```"])
        for code_line in snippet.code.splitlines() or [""]:
            lines.append(f"   {code_line}")
        lines.append("   ```")
    return "\n".join(lines)


def format_snippets(snippets: Sequence[Snippet]) -> str:
    if not snippets:
        return "List of Snippets (0)\nNo results found."

    lines: List[str] = [f"List of Snippets ({len(snippets)})"]
    for index, snippet in enumerate(snippets, start=1):
        lines.extend(["", f"{index}. {format_snippet(snippet, with_code=False)}"])
    return "\n".join(lines)


async def _cmd_add(store: StorageService, args: argparse.Namespace) -> int:
    snippet = await store.add(
        {
            "title": args.title,
            "description": args.description,
            "code": _read_code(args),
            "language": args.language,
            "category": args.category,
            "tags": args.tags,
            "favorite": args.favorite,
        }
    )
    print(f"Added snippet {snippet.id}")
    return EXIT_OK


async def _cmd_list(store: StorageService, args: argparse.Namespace) -> int:
    criteria = SnippetFilter(
        query=args.query,
        language=args.language,
        category=args.category,
        tags=args.tags,
        favorite=args.favorite,
        sort_by=args.sort_by,
        sort_order="desc" if args.desc else "asc",
    )
    print(format_snippets(await store.filter(criteria)))
    return EXIT_OK


async def _cmd_view(store: StorageService, args: argparse.Namespace) -> int:
    snippet = await store.get_by_id(args.id)
    if snippet is None:
        print(f"Snippet not found: {args.id}", file=sys.stderr)
        return EXIT_FAILURE
    print(format_snippet(snippet))
    return EXIT_OK


async def _cmd_update(store: StorageService, args: argparse.Namespace) -> int:
    changes: Dict[str, Any] = {
        "title": args.title,
        "description": args.description,
        "code": _read_code(args),
        "language": args.language,
        "category": args.category,
        "tags": args.tags,
        "favorite": args.favorite,
    }
    snippet = await store.update(args.id, changes)
    if snippet is None:
        print(f"Snippet not found: {args.id}", file=sys.stderr)
        return EXIT_FAILURE
    print(f"Updated snippet {snippet.id}")
    return EXIT_OK


async def _cmd_delete(store: StorageService, args: argparse.Namespace) -> int:
    if not await store.delete(args.id):
        print(f"Snippet not found: {args.id}", file=sys.stderr)
        return EXIT_FAILURE
    print(f"Deleted snippet {args.id}")
    return EXIT_OK


async def _cmd_search(store: StorageService, args: argparse.Namespace) -> int:
    print(format_snippets(await store.search(args.text)))
    return EXIT_OK


async def _cmd_clear(store: StorageService, args: argparse.Namespace) -> int:
    await store.delete_all()
    print("Deleted all snippets")
    return EXIT_OK


async def _cmd_purge(store: StorageService, args: argparse.Namespace) -> int:
    await store.cleanup()
    print(f"Removed {store.storage_path}")
    return EXIT_OK


COMMANDS: Dict[str, Callable[[StorageService, argparse.Namespace], Awaitable[int]]] = {
    "add": _cmd_add,
    "list": _cmd_list,
    "view": _cmd_view,
    "update": _cmd_update,
    "delete": _cmd_delete,
    "search": _cmd_search,
    "clear": _cmd_clear,
    "purge": _cmd_purge,
}


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = Settings.from_env()
    if args.storage_dir:
        settings.storage_dir = Path(args.storage_dir).expanduser()
    if args.log_level:
        settings.log_level = normalize_log_level(args.log_level, settings.log_level)

    handler = ErrorHandler(settings.log_level)
    store = StorageService(settings.storage_dir)
    logger.debug("Running %s against %s", args.command, settings.storage_dir)

    try:
        return asyncio.run(COMMANDS[args.command](store, args))
    except StorageError as exc:
        error_info = handler.collect_storage_error(exc, args.command)
        print(f"Error: {error_info['user_message']}", file=sys.stderr)
        return EXIT_FAILURE
    except ValidationError as exc:
        error_info = handler.handle_error(exc, {"command": args.command})
        print(f"Error: {error_info['user_message']}", file=sys.stderr)
        return EXIT_USAGE
    except OSError as exc:
        # Only --file reads reach here; store I/O is wrapped in StorageError.
        handler.handle_error(exc, {"command": args.command, "file": getattr(args, "file", None)})
        print(f"Error: cannot read {exc.filename or 'input file'}: {exc.strerror or exc}", file=sys.stderr)
        return EXIT_USAGE


__all__ = ["build_parser", "format_snippet", "format_snippets", "main"]
