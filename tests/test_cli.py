# tests/test_cli.py

import json

import msgspec
import pytest
from click.testing import CliRunner

from staking_indexer.cli.__main__ import cli
from staking_indexer.core import constants
from staking_indexer.decode.address_codec import NativeAddressCodec

from conftest import EVM1, PK1, TARGET, block, register_input, stake_event


@pytest.fixture
def cli_env(tmp_path):
    return {
        "INDEXER_DB_URL": f"sqlite:///{tmp_path / 'ledger.db'}",
        "INDEXER_LOG_CONSOLE": "false",
        "INDEXER_LOG_FILE": "false",
    }


@pytest.fixture
def archive(tmp_path):
    path = tmp_path / "blocks.jsonl"
    blocks = [
        block(900000, stake_event("BondAndStake", PK1, 500, TARGET, "a")),
        block(900001, stake_event("UnbondAndUnstake", PK1, 120, TARGET, "b")),
    ]
    path.write_bytes(b"\n".join(msgspec.json.encode(b) for b in blocks))
    return path


def test_init_run_and_status(cli_env, archive):
    runner = CliRunner()

    result = runner.invoke(cli, ["db", "init"], env=cli_env)
    assert result.exit_code == 0, result.output
    assert "Ledger schema ready" in result.output

    result = runner.invoke(cli, ["run", str(archive), "--batch-size", "1"], env=cli_env)
    assert result.exit_code == 0, result.output
    assert "Processed 2 blocks in 2 batches" in result.output
    assert "Checkpoint: 900001" in result.output

    result = runner.invoke(cli, ["status"], env=cli_env)
    assert result.exit_code == 0, result.output
    assert "Checkpoint:   900001" in result.output
    assert "Total staked: 380" in result.output
    assert "Stakers:      1 (0 with EVM mapping)" in result.output


def test_run_rejects_non_positive_batch_size(cli_env, archive):
    result = CliRunner().invoke(cli, ["run", str(archive), "--batch-size", "0"], env=cli_env)
    assert result.exit_code != 0


def test_decode_call(cli_env, decoder):
    result = CliRunner().invoke(cli, ["decode", "call", register_input(decoder, PK1)], env=cli_env)

    assert result.exit_code == 0, result.output
    decoded = json.loads(result.output)
    assert decoded["name"] == "register"
    assert decoded["args"]["ss58PublicKey"] == PK1


def test_decode_log(cli_env, decoder):
    topic = decoder.topic_of("AstarBaseRegistered(address)")
    result = CliRunner().invoke(
        cli, ["decode", "log", "--topic", topic, "0x" + "00" * 12 + EVM1[2:]], env=cli_env
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["attributes"] == {"newEntry": EVM1}


def test_decode_unknown_selector_fails(cli_env):
    result = CliRunner().invoke(cli, ["decode", "call", "0xdeadbeef"], env=cli_env)
    assert result.exit_code == 1


def test_decode_address(cli_env):
    result = CliRunner().invoke(cli, ["decode", "address", PK1], env=cli_env)
    assert result.exit_code == 0, result.output
    assert result.output.strip() == NativeAddressCodec(constants.ASTAR_SS58_FORMAT).encode(PK1)


def test_run_falls_back_to_configured_archive(cli_env, archive):
    env = {**cli_env, "INDEXER_DATA_FILE": str(archive)}
    runner = CliRunner()

    assert runner.invoke(cli, ["db", "init"], env=env).exit_code == 0
    result = runner.invoke(cli, ["run"], env=env)

    assert result.exit_code == 0, result.output
    assert "Processed 2 blocks in 1 batches" in result.output
    assert "Checkpoint: 900001" in result.output


def test_run_without_any_archive_is_a_usage_error(cli_env):
    result = CliRunner().invoke(cli, ["run"], env={**cli_env, "INDEXER_DATA_FILE": None})

    assert result.exit_code == 2
    assert "INDEXER_DATA_FILE" in result.output
