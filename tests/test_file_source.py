# tests/test_file_source.py

import msgspec
import pytest

from staking_indexer.source.file_source import FileBlockSource
from staking_indexer.types import CallItem, EventItem, SourceError

from conftest import PK1, TARGET, block, stake_event, unregister_call, EVM1


def write_jsonl(path, blocks):
    path.write_bytes(b"\n".join(msgspec.json.encode(b) for b in blocks) + b"\n")
    return path


def test_reads_json_lines_in_batches(tmp_path):
    path = write_jsonl(tmp_path / "blocks.jsonl", [block(h) for h in range(100, 105)])

    batches = list(FileBlockSource(path, batch_size=2).batches())

    assert [[b.height for b in batch] for batch in batches] == [[100, 101], [102, 103], [104]]


def test_reads_json_array_with_tagged_items(tmp_path):
    blocks = [
        block(900000, stake_event("BondAndStake", PK1, 500, TARGET, "e-1")),
        block(900001, unregister_call(900001, EVM1, "c-1")),
    ]
    path = tmp_path / "blocks.json"
    path.write_bytes(msgspec.json.encode(blocks))

    (batch,) = list(FileBlockSource(path, batch_size=10))

    assert isinstance(batch[0].items[0], EventItem)
    assert batch[0].items[0].args[2] == "500"
    assert isinstance(batch[1].items[0], CallItem)
    assert batch[1].header.timestamp == blocks[1].header.timestamp


def test_start_block_skips_earlier_blocks(tmp_path):
    path = write_jsonl(tmp_path / "blocks.jsonl", [block(h) for h in (10, 11, 12)])

    heights = [b.height for b in FileBlockSource(path, start_block=11).blocks()]

    assert heights == [11, 12]


def test_gaps_are_allowed(tmp_path):
    path = write_jsonl(tmp_path / "blocks.jsonl", [block(10), block(15)])
    assert [b.height for b in FileBlockSource(path).blocks()] == [10, 15]


def test_non_increasing_heights_raise(tmp_path):
    path = write_jsonl(tmp_path / "blocks.jsonl", [block(10), block(10)])
    with pytest.raises(SourceError):
        list(FileBlockSource(path).blocks())


def test_invalid_line_raises_with_location(tmp_path):
    path = tmp_path / "blocks.jsonl"
    path.write_bytes(msgspec.json.encode(block(1)) + b"\n{not json}\n")

    with pytest.raises(SourceError, match=":2:"):
        list(FileBlockSource(path).blocks())


def test_missing_file_raises(tmp_path):
    with pytest.raises(SourceError):
        list(FileBlockSource(tmp_path / "absent.jsonl").blocks())


def test_batch_size_must_be_positive(tmp_path):
    with pytest.raises(ValueError):
        FileBlockSource(tmp_path / "blocks.jsonl", batch_size=0)
