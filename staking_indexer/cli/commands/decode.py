# staking_indexer/cli/commands/decode.py

import json
import sys

import click
import msgspec

from ...decode.address_codec import NativeAddressCodec
from ...decode.payload_decoder import PayloadDecoder
from ...types import DecodeError, MalformedPayloadError


def _echo_json(value) -> None:
    click.echo(json.dumps(msgspec.to_builtins(value), indent=2))


@click.group()
def decode():
    """Decode AstarBase payloads"""
    pass


@decode.command('call')
@click.argument('call_input')
@click.pass_context
def decode_call(ctx, call_input):
    """Decode selector-prefixed call input"""
    decoder = ctx.obj['cli_context'].get(PayloadDecoder)
    try:
        _echo_json(decoder.decode_function_call(call_input))
    except DecodeError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)


@decode.command('log')
@click.option('--topic', 'topics', multiple=True, required=True, help='Log topic, repeat in order')
@click.argument('data', default="0x")
@click.pass_context
def decode_log(ctx, topics, data):
    """Decode an EVM log from its topics and data"""
    decoder = ctx.obj['cli_context'].get(PayloadDecoder)
    try:
        _echo_json(decoder.decode_event_log(list(topics), data))
    except DecodeError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)


@decode.command('address')
@click.argument('public_key')
@click.pass_context
def decode_address(ctx, public_key):
    """SS58 address of a 32-byte public key"""
    codec = ctx.obj['cli_context'].get(NativeAddressCodec)
    try:
        click.echo(codec.encode(public_key))
    except MalformedPayloadError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)
