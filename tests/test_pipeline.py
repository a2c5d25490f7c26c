# tests/test_pipeline.py
"""
End-to-end batch processing against an in-memory SQLite ledger
"""

import pytest

from staking_indexer.core import constants
from staking_indexer.types import CallItem, EventItem, PersistenceError, StakeAction

from conftest import (
    EVM1, OTHER, PK1, PK2, POST_H1, TARGET,
    block, register_log, stake_event, transact_args, unregister_call,
)


def stored_staker(ledger_reader, staker_id):
    return ledger_reader.find_stakers([staker_id]).get(staker_id)


def test_bond_on_target_is_recorded(pipeline, ledger_reader, db_manager):
    result = pipeline.process_batch([
        block(900000, stake_event("BondAndStake", PK1, 500, TARGET, "0000900000-000001",
                                  tx_hash="0x" + "aa" * 32)),
    ])

    assert result.transactions_written == 1
    assert result.errors == []

    assert stored_staker(ledger_reader, PK1).balance == 500
    assert ledger_reader.find_contract(TARGET).total_staked == 500

    with db_manager.get_session() as session:
        (transaction,) = db_manager.get_transaction_repo().get_by_user(session, PK1)
        assert transaction.action == StakeAction.BOND
        assert transaction.amount == 500
        assert transaction.block == 900000
        assert transaction.transaction_hash == "0x" + "aa" * 32


def test_register_after_log_layout_change_maps_staker(pipeline, ledger_reader, decoder, codec):
    pipeline.process_batch([block(POST_H1, register_log(decoder, POST_H1, PK1, EVM1, "reg-1"))])

    staker = stored_staker(ledger_reader, PK1)
    assert staker.evm_address == EVM1
    assert staker.native_address == codec.encode(PK1)
    assert staker.balance == 0


def test_register_then_unregister_in_one_batch(pipeline, ledger_reader, decoder):
    pipeline.process_batch([
        block(POST_H1, register_log(decoder, POST_H1, PK1, EVM1, "reg-1")),
        block(POST_H1 + 1, unregister_call(POST_H1 + 1, EVM1, "unreg-1")),
    ])

    assert stored_staker(ledger_reader, PK1).evm_address is None


def test_unregister_of_stored_mapping(pipeline, ledger_reader, decoder):
    pipeline.process_batch([
        block(POST_H1, stake_event("BondAndStake", PK1, 70, TARGET, "s-1"),
              register_log(decoder, POST_H1, PK1, EVM1, "reg-1")),
    ])
    result = pipeline.process_batch([block(POST_H1 + 5, unregister_call(POST_H1 + 5, EVM1, "unreg-1"))])

    staker = stored_staker(ledger_reader, PK1)
    assert result.mapping_ops == 1
    assert staker.evm_address is None
    assert staker.balance == 70


def test_nomination_transfers(pipeline, ledger_reader):
    pipeline.process_batch([
        block(900000,
              stake_event("BondAndStake", PK1, 100, TARGET, "a"),
              stake_event("NominationTransfer", PK1, 40, TARGET, "b", target=OTHER),
              stake_event("NominationTransfer", PK2, 25, OTHER, "c", target=TARGET),
              stake_event("NominationTransfer", PK2, 99, TARGET, "d", target=TARGET)),
    ])

    assert stored_staker(ledger_reader, PK1).balance == 60
    assert stored_staker(ledger_reader, PK2).balance == 25
    assert ledger_reader.find_contract(TARGET).total_staked == 85
    assert ledger_reader.existing_transaction_ids(["a", "b", "c", "d"]) == {"a", "b", "c"}


def test_irrelevant_items_produce_nothing(pipeline, ledger_reader):
    result = pipeline.process_batch([
        block(900000,
              stake_event("BondAndStake", PK1, 500, OTHER, "x"),
              EventItem(name="Balances.Transfer", id="y", args=[PK1, PK2, "1"])),
    ])

    assert result.candidates == 0
    assert result.transactions_written == 0
    assert ledger_reader.find_contract(TARGET) is None
    assert ledger_reader.get_checkpoint("astar-degens") == 900000


def test_malformed_items_are_reported_and_batch_continues(pipeline, ledger_reader):
    result = pipeline.process_batch([
        block(900000,
              EventItem(name=constants.BOND_AND_STAKE, id="bad", args=[PK1]),
              CallItem(name="Ethereum.transact", id="short",
                       args=transact_args(900000, constants.UNREGISTER_SELECTOR)),
              stake_event("BondAndStake", PK1, 5, TARGET, "good")),
    ])

    assert [(e.stage, e.error_type) for e in result.errors] == [
        ("classify", "malformed_payload"),
        ("extract", "malformed_payload"),
    ]
    assert result.errors[0].context["item_id"] == "bad"
    assert stored_staker(ledger_reader, PK1).balance == 5


def test_balances_accumulate_across_batches(pipeline, ledger_reader):
    pipeline.process_batch([block(900000, stake_event("BondAndStake", PK1, 100, TARGET, "a"))])
    pipeline.process_batch([block(900001, stake_event("UnbondAndUnstake", PK1, 30, TARGET, "b"))])

    assert stored_staker(ledger_reader, PK1).balance == 70
    assert ledger_reader.find_contract(TARGET).total_staked == 70


def test_redelivered_batch_changes_nothing(pipeline, ledger_reader, db_manager):
    blocks = [
        block(900000, stake_event("BondAndStake", PK1, 100, TARGET, "a")),
        block(900001, stake_event("UnbondAndUnstake", PK1, 30, TARGET, "b")),
    ]
    pipeline.process_batch(blocks)

    result = pipeline.process_batch(blocks)

    assert result.blocks_skipped == 2
    assert result.blocks_processed == 0
    assert stored_staker(ledger_reader, PK1).balance == 70
    with db_manager.get_session() as session:
        assert db_manager.get_transaction_repo().count(session) == 2


def test_overlapping_batch_applies_only_new_events(pipeline, ledger_reader):
    pipeline.process_batch([block(900000, stake_event("BondAndStake", PK1, 100, TARGET, "a"))])

    result = pipeline.process_batch([
        block(900000, stake_event("BondAndStake", PK1, 100, TARGET, "a")),
        block(900001, stake_event("BondAndStake", PK1, 1, TARGET, "b")),
    ])

    assert result.blocks_skipped == 1
    assert result.transactions_written == 1
    assert stored_staker(ledger_reader, PK1).balance == 101


def test_failed_write_leaves_store_untouched(pipeline, ledger_reader, db_manager, monkeypatch):
    def fail(session, items):
        raise RuntimeError("disk full")

    monkeypatch.setattr(db_manager.get_transaction_repo(), "bulk_create_skip_existing", fail)

    with pytest.raises(PersistenceError):
        pipeline.process_batch([block(900000, stake_event("BondAndStake", PK1, 500, TARGET, "a"))])

    assert stored_staker(ledger_reader, PK1) is None
    assert ledger_reader.find_contract(TARGET) is None
    assert ledger_reader.get_checkpoint("astar-degens") is None


def test_run_processes_every_batch(pipeline, ledger_reader):
    batches = [
        [block(900000, stake_event("BondAndStake", PK1, 10, TARGET, "a"))],
        [block(900001, stake_event("BondAndStake", PK2, 20, TARGET, "b"))],
    ]

    summary = pipeline.run(batches)

    assert summary.batches == 2
    assert summary.blocks_processed == 2
    assert summary.transactions_written == 2
    assert summary.last_block == 900001
    assert ledger_reader.find_contract(TARGET).total_staked == 30
