"""Command-line utilities for inspecting note buffers and highlight spans.

Developer tooling only: the editor and viewer surfaces call the engines
directly.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from marginalia.highlights import (
    InvalidSpanError,
    OverlappingSpansError,
    build_chunks,
    classify_score,
    clip_spans,
    parse_segments_payload,
    realign_span,
    validate_spans,
)
from marginalia.markup import body_has_delimiter, format_block, parse_blocks
from marginalia.models import ContentBlockType
from marginalia.render import render_highlight_html

if TYPE_CHECKING:
    from collections.abc import Sequence

    from marginalia.models import ScoredSpan

console = Console()
logger = logging.getLogger(__name__)

_APPENDABLE_TYPES = ("source", "ai", "user", "default")


def _preview(text: str, width: int = 60) -> str:
    flat = text.replace("\n", "⏎")
    return flat if len(flat) <= width else flat[: width - 1] + "…"


def _build_parser() -> argparse.ArgumentParser:
    """Build argparse parser for the marginalia subcommands."""
    parser = argparse.ArgumentParser(
        prog="marginalia",
        description="Inspect provenance-tagged notes and scored highlights.",
    )
    parser.add_argument(
        "--log", action="store_true", help="Write a debug log under APP__LOG_DIR"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # blocks
    blocks_p = sub.add_parser("blocks", help="Parse a note buffer into blocks")
    blocks_p.add_argument("note", type=Path, help="Note buffer file")

    # append
    append_p = sub.add_parser("append", help="Append a tagged block to a note")
    append_p.add_argument("note", type=Path, help="Note buffer file")
    append_p.add_argument("body", help="Block content")
    append_p.add_argument(
        "--type",
        dest="block_type",
        choices=_APPENDABLE_TYPES,
        default="user",
        help="Block provenance (default: user)",
    )
    append_p.add_argument("--label", default="", help="Source title or model name")
    append_p.add_argument(
        "--force",
        action="store_true",
        help="Append even if the body would end the block early",
    )

    # chunks
    chunks_p = sub.add_parser("chunks", help="Partition a text against spans")
    chunks_p.add_argument("text", type=Path, help="Source document file")
    chunks_p.add_argument("spans", type=Path, help="Scorer JSON payload file")
    chunks_p.add_argument(
        "--clip", action="store_true", help="Clip overlapping spans instead of failing"
    )
    chunks_p.add_argument("--dark", action="store_true", help="Use the dark palette")
    chunks_p.add_argument("--html", action="store_true", help="Print HTML instead")

    return parser


def _cmd_blocks(note: Path, *, con: Console) -> None:
    """Print the blocks of a note buffer as a Rich table."""
    blocks = parse_blocks(note.read_text(encoding="utf-8"))
    if not blocks:
        con.print("[yellow]No blocks found.[/]")
        return

    table = Table(title=str(note))
    table.add_column("#", justify="right")
    table.add_column("Type", style="cyan")
    table.add_column("Metadata")
    table.add_column("Body")

    for i, block in enumerate(blocks):
        if block.type is ContentBlockType.IMAGE:
            meta = f"id={block.image_id} filename={block.filename or ''}"
        else:
            meta = ", ".join(f"{k}={v}" for k, v in block.metadata.items())
        table.add_row(
            str(i), block.type.value, escape(meta), escape(_preview(block.text))
        )

    con.print(table)


def _cmd_append(
    note: Path,
    body: str,
    *,
    block_type: str,
    label: str,
    con: Console,
    force: bool = False,
) -> None:
    """Format a block and append it to the note file.

    Raises:
        ValueError: If *body* has a line that would end the block early and
            *force* is not set.
    """
    content_type = ContentBlockType(block_type)
    if body_has_delimiter(body, content_type):
        if not force:
            msg = (
                "Body contains a tag or image reference line that would split "
                "the block; pass --force to append anyway"
            )
            raise ValueError(msg)
        con.print("[yellow]Warning:[/] body will not parse back as one block")
    existing = note.read_text(encoding="utf-8") if note.exists() else ""
    addition = format_block(body, label, content_type)
    note.write_text(existing + addition, encoding="utf-8")
    con.print(f"[green]Appended[/] {block_type} block to {note} at {len(existing)}")


def _prepare_spans(text: str, raw: str, *, clip: bool) -> list[ScoredSpan]:
    spans = [realign_span(text, s) for s in parse_segments_payload(raw)]
    if clip:
        return clip_spans(text, spans)
    validate_spans(text, spans)
    return spans


def _print_chunk_table(
    text: str, spans: Sequence[ScoredSpan], con: Console, dark: bool
) -> None:
    table = Table(title="Chunks")
    table.add_column("Range", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Bucket")
    table.add_column("Text")

    for chunk in build_chunks(text, spans):
        if chunk.highlighted:
            style = classify_score(chunk.score, dark)
            score = f"{chunk.score:.2f}"
            bucket = style.level.name
        else:
            score = bucket = ""
        table.add_row(
            f"{chunk.start}-{chunk.end}", score, bucket, escape(_preview(chunk.text))
        )
    con.print(table)


def _cmd_chunks(
    text_path: Path,
    spans_path: Path,
    *,
    clip: bool,
    dark: bool,
    as_html: bool,
    con: Console,
) -> None:
    """Print the chunk partition of a document."""
    text = text_path.read_text(encoding="utf-8")
    spans = _prepare_spans(text, spans_path.read_text(encoding="utf-8"), clip=clip)

    if as_html:
        rendered = render_highlight_html(text, spans, dark_mode=dark, enabled=True)
        con.print(rendered, markup=False, highlight=False, soft_wrap=True)
        return
    _print_chunk_table(text, spans, con, dark)


def main(argv: Sequence[str] | None = None) -> None:
    """Run a marginalia subcommand.

    Usage:
        marginalia blocks NOTE
        marginalia append NOTE BODY [--type TYPE] [--label L] [--force]
        marginalia chunks TEXT SPANS_JSON [--clip] [--dark] [--html]
    """
    parser = _build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else list(argv))

    if args.log:
        from marginalia import setup_logging

        log_file = setup_logging()
        console.print(Panel(f"Logging to {log_file}", style="dim"))

    try:
        match args.command:
            case "blocks":
                _cmd_blocks(args.note, con=console)
            case "append":
                _cmd_append(
                    args.note,
                    args.body,
                    block_type=args.block_type,
                    label=args.label,
                    con=console,
                    force=args.force,
                )
            case "chunks":
                _cmd_chunks(
                    args.text,
                    args.spans,
                    clip=args.clip,
                    dark=args.dark,
                    as_html=args.html,
                    con=console,
                )
    except (InvalidSpanError, OverlappingSpansError) as e:
        logger.error("Rejected spans: %s", e)
        console.print(f"[red]Invalid spans:[/] {escape(str(e))}")
        sys.exit(1)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(1)
