"""Tests for the note block parser.

Covers the round-trip property for typed blocks, untagged-line coalescing,
metadata stripping, image references and fail-soft handling of malformed
markup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from marginalia.markup.formatter import format_block, format_image_ref
from marginalia.markup.parser import parse_blocks, strip_metadata
from marginalia.models import ContentBlock, ContentBlockType

if TYPE_CHECKING:
    from datetime import datetime

TYPED = [ContentBlockType.SOURCE, ContentBlockType.AI, ContentBlockType.USER]


class TestRoundTrip:
    """parse(format(body, label, type)) yields one block with the same body."""

    def test_hello_world_source(self, fixed_now: datetime) -> None:
        buffer = format_block(
            "Hello world", "Diary", ContentBlockType.SOURCE, now=fixed_now
        )
        blocks = parse_blocks(buffer)

        assert len(blocks) == 1
        assert blocks[0].type is ContentBlockType.SOURCE
        assert blocks[0].body == ["Hello world"]
        assert blocks[0].metadata == {
            "TITLE": "Diary",
            "DATE": "Mar 04, 09:15 PM",
            "QUOTE": "",
        }

    @pytest.mark.parametrize("block_type", TYPED)
    @pytest.mark.parametrize(
        "body",
        [
            "single line",
            "",
            "first\nsecond",
            "para one\n\npara two\n",
            "TITLE: looks like metadata",
            "DATE: also metadata-like",
            "<source-content-ish>",
            "  indented\ttext  ",
        ],
    )
    def test_body_survives(
        self, block_type: ContentBlockType, body: str, fixed_now: datetime
    ) -> None:
        buffer = format_block(body, "Label", block_type, now=fixed_now)
        blocks = parse_blocks(buffer)

        assert len(blocks) == 1
        assert blocks[0].type is block_type
        assert blocks[0].body == body.split("\n")

    @pytest.mark.parametrize("block_type", TYPED)
    def test_metadata_keys_in_order(
        self, block_type: ContentBlockType, fixed_now: datetime
    ) -> None:
        expected = {
            ContentBlockType.SOURCE: ["TITLE", "DATE", "QUOTE"],
            ContentBlockType.AI: ["MODEL", "DATE", "CONTENT"],
            ContentBlockType.USER: ["DATE", "NOTE"],
        }[block_type]
        (block,) = parse_blocks(format_block("x", "L", block_type, now=fixed_now))
        assert list(block.metadata) == expected

    def test_several_blocks_in_one_buffer(self, fixed_now: datetime) -> None:
        buffer = (
            "Opening thoughts"
            + format_block("quoted", "Letters", ContentBlockType.SOURCE, now=fixed_now)
            + format_block("summary", "gpt-4o", ContentBlockType.AI, now=fixed_now)
            + format_image_ref("img-1", "map.png")
            + format_block("mine", "", ContentBlockType.USER, now=fixed_now)
        )
        blocks = parse_blocks(buffer)

        assert [b.type for b in blocks] == [
            ContentBlockType.DEFAULT,
            ContentBlockType.SOURCE,
            ContentBlockType.AI,
            ContentBlockType.IMAGE,
            ContentBlockType.USER,
        ]
        # the blank line before the first tag belongs to the untagged run
        assert blocks[0].body == ["Opening thoughts", ""]
        assert blocks[1].body == ["quoted"]
        assert blocks[2].metadata["MODEL"] == "gpt-4o"
        assert blocks[3].image_id == "img-1"
        assert blocks[4].body == ["mine"]


class TestUntaggedLines:
    def test_plain_lines_form_one_default_block(self) -> None:
        blocks = parse_blocks("plain line 1\nplain line 2")

        assert blocks == [
            ContentBlock(
                type=ContentBlockType.DEFAULT, body=["plain line 1", "plain line 2"]
            )
        ]

    def test_blank_lines_inside_default_block_kept(self) -> None:
        (block,) = parse_blocks("a\n\nb")
        assert block.body == ["a", "", "b"]

    def test_blank_only_runs_dropped(self) -> None:
        assert parse_blocks("\n\n  \n") == []

    def test_empty_buffer(self) -> None:
        assert parse_blocks("") == []

    def test_default_after_closed_block_is_new_block(self) -> None:
        buffer = "before\n<user-note>\nx\n</user-note>\nafter"
        blocks = parse_blocks(buffer)
        assert [b.type for b in blocks] == [
            ContentBlockType.DEFAULT,
            ContentBlockType.USER,
            ContentBlockType.DEFAULT,
        ]
        assert blocks[2].body == ["after"]

    def test_default_format_is_not_typed(self, fixed_now: datetime) -> None:
        """The DEFAULT fallback parses as plain text, heading included."""
        buffer = format_block("body", "Diary", ContentBlockType.DEFAULT, now=fixed_now)
        (block,) = parse_blocks(buffer)
        assert block.type is ContentBlockType.DEFAULT
        assert "DIARY" in block.body
        assert "body" in block.body

    def test_crlf_buffer(self) -> None:
        blocks = parse_blocks("<user-note>\r\nhi\r\n</user-note>\r\n")
        assert len(blocks) == 1
        assert blocks[0].type is ContentBlockType.USER
        assert blocks[0].body == ["hi"]


class TestMalformedMarkup:
    def test_unclosed_block_flushed_by_next_open(self) -> None:
        buffer = "<source-content>\nquoted\n<ai-content>\ncommentary\n</ai-content>"
        blocks = parse_blocks(buffer)

        assert [b.type for b in blocks] == [
            ContentBlockType.SOURCE,
            ContentBlockType.AI,
        ]
        assert blocks[0].body == ["quoted"]
        assert blocks[1].body == ["commentary"]

    def test_unclosed_block_at_end_flushed(self) -> None:
        (block,) = parse_blocks("<ai-content>\nMODEL: m\nstill going")
        assert block.type is ContentBlockType.AI
        assert block.metadata == {"MODEL": "m"}
        assert block.body == ["still going"]

    def test_mismatched_close_tag_is_body(self) -> None:
        (block,) = parse_blocks("<source-content>\nq\n</ai-content>\n</source-content>")
        assert block.type is ContentBlockType.SOURCE
        assert block.body == ["q", "</ai-content>"]

    def test_close_tag_without_open_is_default_text(self) -> None:
        (block,) = parse_blocks("text\n</user-note>")
        assert block.type is ContentBlockType.DEFAULT
        assert block.body == ["text", "</user-note>"]

    def test_tag_with_surrounding_text_is_body(self) -> None:
        """Tags must be whole lines."""
        (block,) = parse_blocks("see <source-content> here")
        assert block.type is ContentBlockType.DEFAULT

    def test_embedded_close_tag_closes_block_early(self, fixed_now: datetime) -> None:
        """Known limitation: body lines equal to the close tag are not escaped."""
        body = "first\n</user-note>\nsecond"
        blocks = parse_blocks(
            format_block(body, "", ContentBlockType.USER, now=fixed_now)
        )
        assert blocks[0].body == ["first"]
        assert blocks[1].type is ContentBlockType.DEFAULT
        assert "second" in blocks[1].body


class TestImageReferences:
    def test_image_block(self) -> None:
        (block,) = parse_blocks('<img-ref id="img-42" filename="scan.jpg">')
        assert block.type is ContentBlockType.IMAGE
        assert block.image_id == "img-42"
        assert block.filename == "scan.jpg"
        assert block.body == []

    def test_image_closes_open_block(self) -> None:
        buffer = '<source-content>\nq\n<img-ref id="a" filename="b.png">\nafter'
        blocks = parse_blocks(buffer)
        assert [b.type for b in blocks] == [
            ContentBlockType.SOURCE,
            ContentBlockType.IMAGE,
            ContentBlockType.DEFAULT,
        ]
        assert blocks[0].body == ["q"]

    def test_reference_without_filename(self) -> None:
        (block,) = parse_blocks('<img-ref id="legacy">')
        assert block.image_id == "legacy"
        assert block.filename is None

    def test_consecutive_images_stay_separate(self) -> None:
        buffer = format_image_ref("a", "1.png") + format_image_ref("b", "2.png")
        blocks = parse_blocks(buffer)
        assert [b.image_id for b in blocks] == ["a", "b"]

    def test_empty_id_is_not_a_reference(self) -> None:
        (block,) = parse_blocks('<img-ref id="" filename="x.png">')
        assert block.type is ContentBlockType.DEFAULT


class TestStripMetadata:
    def test_positional_prefix_only(self) -> None:
        """A missing key stops stripping; later keys stay in the body."""
        metadata, body = strip_metadata(
            ContentBlockType.SOURCE, ["TITLE: T", "QUOTE:", "text"]
        )
        assert metadata == {"TITLE": "T"}
        assert body == ["QUOTE:", "text"]

    def test_out_of_order_keys_left_as_body(self) -> None:
        metadata, body = strip_metadata(
            ContentBlockType.AI, ["DATE: d", "MODEL: m", "x"]
        )
        assert metadata == {}
        assert body == ["DATE: d", "MODEL: m", "x"]

    def test_all_keys_consumed(self) -> None:
        metadata, body = strip_metadata(ContentBlockType.USER, ["DATE: d", "NOTE:"])
        assert metadata == {"DATE": "d", "NOTE": ""}
        assert body == []

    def test_untagged_types_have_no_keys(self) -> None:
        metadata, body = strip_metadata(ContentBlockType.DEFAULT, ["DATE: d"])
        assert metadata == {}
        assert body == ["DATE: d"]


class TestIdempotentParse:
    @pytest.mark.parametrize(
        "buffer",
        [
            "plain",
            "<source-content>\nTITLE: t\nbody",
            "a\n</ai-content>\n<user-note>\nDATE: x\nNOTE:\nn\n</user-note>\nz",
            '<img-ref id="1" filename="f">\n\n<ai-content>\n',
        ],
    )
    def test_parse_twice_equal(self, buffer: str) -> None:
        assert parse_blocks(buffer) == parse_blocks(buffer)

    def test_results_are_fresh_objects(self) -> None:
        first = parse_blocks("plain")
        first[0].body.append("mutated")
        assert parse_blocks("plain")[0].body == ["plain"]
