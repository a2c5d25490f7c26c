# staking_indexer/pipeline/batch_pipeline.py

from typing import Iterable, List, Optional
import time

from msgspec import Struct, field

from ..core.config import IndexerConfig
from ..core.logging import LoggingMixin
from ..database.writers.ledger_writer import LedgerWriter
from ..ledger.aggregator import LedgerAggregator
from ..ledger.interfaces import LedgerReader
from ..ledger.mapping_view import MappingView
from ..transform.classifier import EventClassifier
from ..transform.extractor import OperationExtractor
from ..types import (
    ChainBlock,
    DecodeError,
    Irrelevant,
    MalformedPayloadError,
    MappingOp,
    Operation,
    ProcessingError,
    StakeOp,
    create_classify_error,
    create_extract_error,
)

ITEM_ERRORS = (DecodeError, MalformedPayloadError)


def _error_type(error: Exception) -> str:
    return "decode_failed" if isinstance(error, DecodeError) else "malformed_payload"


class BatchResult(Struct):
    first_block: Optional[int] = None
    last_block: Optional[int] = None
    blocks_processed: int = 0
    blocks_skipped: int = 0
    candidates: int = 0
    stake_ops: int = 0
    mapping_ops: int = 0
    stakers_written: int = 0
    transactions_written: int = 0
    transactions_skipped: int = 0
    errors: List[ProcessingError] = field(default_factory=list)
    duration_seconds: float = 0.0


class RunSummary(Struct):
    batches: int = 0
    blocks_processed: int = 0
    blocks_skipped: int = 0
    transactions_written: int = 0
    errors: int = 0
    last_block: Optional[int] = None

    def add(self, result: BatchResult) -> None:
        self.batches += 1
        self.blocks_processed += result.blocks_processed
        self.blocks_skipped += result.blocks_skipped
        self.transactions_written += result.transactions_written
        self.errors += len(result.errors)
        if result.last_block is not None:
            self.last_block = result.last_block


class BatchPipeline(LoggingMixin):
    """
    Classify, extract, aggregate and persist one batch of blocks at a time.

    Blocks at or below the committed checkpoint are skipped, so a batch that
    is delivered again after a successful commit changes nothing. Items that
    fail to decode are dropped and reported in the BatchResult; a failed
    write raises PersistenceError and stops the run.
    """

    def __init__(
        self,
        classifier: EventClassifier,
        extractor: OperationExtractor,
        aggregator: LedgerAggregator,
        reader: LedgerReader,
        writer: LedgerWriter,
        config: IndexerConfig,
    ):
        self.classifier = classifier
        self.extractor = extractor
        self.aggregator = aggregator
        self.reader = reader
        self.writer = writer
        self.config = config
        self.indexer_name = config.processing.indexer_name

        self.log_info("BatchPipeline initialized",
                      indexer_name=self.indexer_name,
                      contract_address=config.chain.target_contract)

    def process_batch(self, blocks: List[ChainBlock]) -> BatchResult:
        started = time.time()
        result = BatchResult()

        checkpoint = self.reader.get_checkpoint(self.indexer_name)
        pending = [b for b in blocks if checkpoint is None or b.height > checkpoint]
        result.blocks_skipped = len(blocks) - len(pending)

        if result.blocks_skipped:
            self.log_info("Skipping blocks at or below checkpoint",
                          block_number=checkpoint,
                          skipped=result.blocks_skipped)
        if not pending:
            return result

        result.first_block = pending[0].height
        result.last_block = pending[-1].height

        mapping_view = MappingView(self.reader)
        operations: List[Operation] = []
        for block in pending:
            operations.extend(self._process_block(block, mapping_view, result))

        result.stake_ops = sum(1 for op in operations if isinstance(op, StakeOp))
        result.mapping_ops = sum(1 for op in operations if isinstance(op, MappingOp))
        result.blocks_processed = len(pending)

        delta = self.aggregator.aggregate(operations, self.reader)
        written = self.writer.write_batch(
            delta,
            self.indexer_name,
            last_block=pending[-1].height,
            last_timestamp=pending[-1].header.timestamp,
        )

        result.stakers_written = written.stakers_written
        result.transactions_written = written.transactions_written
        result.transactions_skipped = written.transactions_skipped + delta.skipped_transactions
        result.duration_seconds = time.time() - started

        self.log_info("Batch processed",
                      block_number=result.last_block,
                      first_block=result.first_block,
                      candidates=result.candidates,
                      stake_ops=result.stake_ops,
                      mapping_ops=result.mapping_ops,
                      transactions_written=result.transactions_written,
                      errors=len(result.errors))
        return result

    def _process_block(self, block: ChainBlock, mapping_view: MappingView, result: BatchResult) -> List[Operation]:
        operations: List[Operation] = []

        for position, item in enumerate(block.items):
            context = self.log_block_context(block.height, event_id=item.id, tx_hash=item.extrinsic_hash)

            try:
                candidate = self.classifier.classify(item, block.header, position)
            except ITEM_ERRORS as e:
                error = create_classify_error(_error_type(e), str(e), item.id, block.height)
                result.errors.append(error)
                self.log_warning("Item dropped during classification", error=str(e), **context)
                continue

            if isinstance(candidate, Irrelevant):
                continue
            result.candidates += 1

            try:
                item_ops = self.extractor.extract(candidate, mapping_view.holders)
            except ITEM_ERRORS as e:
                error = create_extract_error(_error_type(e), str(e), item.id, block.height, item.extrinsic_hash)
                result.errors.append(error)
                self.log_warning("Item dropped during extraction", error=str(e), **context)
                continue

            for op in item_ops:
                if isinstance(op, MappingOp):
                    mapping_view.apply(op)
            operations.extend(item_ops)

        return operations

    def run(self, batches: Iterable[List[ChainBlock]]) -> RunSummary:
        summary = RunSummary()
        for blocks in batches:
            summary.add(self.process_batch(blocks))

        self.log_info("Run complete",
                      block_number=summary.last_block,
                      batches=summary.batches,
                      blocks_processed=summary.blocks_processed,
                      transactions_written=summary.transactions_written,
                      errors=summary.errors)
        return summary
