# staking_indexer/cli/commands/run.py

import sys
from pathlib import Path

import click

from ...pipeline.batch_pipeline import BatchPipeline
from ...source.file_source import FileBlockSource
from ...types import PersistenceError, SourceError


@click.command('run')
@click.argument('source', required=False, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--batch-size', type=int, help='Blocks per batch (default: INDEXER_BATCH_SIZE or 100)')
@click.option('--start-block', type=int, help='Ignore blocks below this height')
@click.pass_context
def run(ctx, source, batch_size, start_block):
    """Index a block archive (JSON array or JSON Lines)

    SOURCE defaults to INDEXER_DATA_FILE when omitted.

    Examples:
        # Process an archive with the configured batch size
        run blocks.jsonl

        # Resume from a given height in batches of 50
        run blocks.jsonl --batch-size 50 --start-block 900000

        # Process the archive named by INDEXER_DATA_FILE
        run
    """
    if batch_size is not None and batch_size < 1:
        raise click.BadParameter("must be positive", param_hint="--batch-size")

    cli_context = ctx.obj['cli_context']
    cli_context.override(batch_size=batch_size, start_block=start_block)

    config = cli_context.config
    source = source or config.processing.data_file
    if source is None:
        raise click.UsageError("No block archive given: pass SOURCE or set INDEXER_DATA_FILE")

    block_source = FileBlockSource(
        source,
        batch_size=config.processing.batch_size,
        start_block=config.chain.start_block,
    )
    pipeline = cli_context.get(BatchPipeline)

    try:
        summary = pipeline.run(block_source.batches())
    except SourceError as e:
        click.echo(f"❌ Unreadable block archive: {e}", err=True)
        sys.exit(1)
    except PersistenceError as e:
        click.echo(f"❌ Batch write failed, run aborted: {e}", err=True)
        sys.exit(1)

    click.echo(f"✅ Processed {summary.blocks_processed} blocks in {summary.batches} batches")
    click.echo(f"   Transactions written: {summary.transactions_written}")
    if summary.blocks_skipped:
        click.echo(f"   Already indexed blocks skipped: {summary.blocks_skipped}")
    if summary.errors:
        click.echo(f"   ⚠️ Items dropped: {summary.errors}")
    if summary.last_block is not None:
        click.echo(f"   Checkpoint: {summary.last_block}")
