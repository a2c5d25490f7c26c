# staking_indexer/source/file_source.py

from pathlib import Path
from typing import Iterator, List, Optional, Union

import msgspec

from ..core.logging import LoggingMixin
from ..types import ChainBlock, SourceError

JSON_LINES_SUFFIXES = (".jsonl", ".ndjson")


class FileBlockSource(LoggingMixin):
    """
    Block archive on disk, either a JSON array of blocks or JSON Lines with
    one block per line. Blocks below start_block are skipped; heights must be
    strictly increasing and gaps are logged.
    """

    def __init__(self, path: Union[str, Path], batch_size: int = 100, start_block: int = 0):
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive: {batch_size}")

        self.path = Path(path)
        self.batch_size = batch_size
        self.start_block = start_block
        self._block_decoder = msgspec.json.Decoder(ChainBlock)
        self._array_decoder = msgspec.json.Decoder(List[ChainBlock])

    @property
    def is_json_lines(self) -> bool:
        return self.path.suffix.lower() in JSON_LINES_SUFFIXES

    def _read_blocks(self) -> Iterator[ChainBlock]:
        if not self.path.exists():
            raise SourceError(f"Block archive not found: {self.path}")

        if self.is_json_lines:
            with open(self.path, 'rb') as f:
                for line_number, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    try:
                        yield self._block_decoder.decode(line)
                    except msgspec.DecodeError as e:
                        raise SourceError(f"{self.path}:{line_number}: {e}") from e
        else:
            try:
                yield from self._array_decoder.decode(self.path.read_bytes())
            except msgspec.DecodeError as e:
                raise SourceError(f"{self.path}: {e}") from e

    def blocks(self) -> Iterator[ChainBlock]:
        previous: Optional[int] = None
        for block in self._read_blocks():
            if previous is not None:
                if block.height <= previous:
                    raise SourceError(
                        f"Block {block.height} follows {previous}; heights must strictly increase"
                    )
                if block.height > previous + 1:
                    self.log_warning("Gap in block archive",
                                     block_number=block.height,
                                     previous_block=previous,
                                     missing=block.height - previous - 1)
            previous = block.height

            if block.height < self.start_block:
                continue
            yield block

    def batches(self) -> Iterator[List[ChainBlock]]:
        batch: List[ChainBlock] = []
        for block in self.blocks():
            batch.append(block)
            if len(batch) >= self.batch_size:
                yield batch
                batch = []
        if batch:
            yield batch

    def __iter__(self) -> Iterator[List[ChainBlock]]:
        return self.batches()
