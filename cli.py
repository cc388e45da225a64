"""
Command line front end: ``tx-util``.

Every subcommand reads its input from the INPUT argument (``-`` or nothing for stdin) and
writes its result to stdout. Options can also be set through ``TX_UTIL_<COMMAND>_<OPTION>``
environment variables, e.g. ``TX_UTIL_ENCODE_TX_SIGNER``.
"""
import functools
import logging
from contextlib import ExitStack

import click
from web3 import Web3

import codec
import notation
import schema
from errors import TxUtilError
from keys import Keys
from model import SET_CODE_AUTH_MAGIC, decode_envelope, decode_transaction
from recover import recover_envelope
from signer import sign_payload, sign_transaction
from utils import hex_to_bytes, setup_logging, to_hex

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'], auto_envvar_prefix='TX_UTIL')


class PrivateKeyType(click.ParamType):
    """A hex-encoded 32-byte private key, loaded into a `Keys` container."""

    name = 'key'

    def convert(self, value, param, ctx):
        if isinstance(value, Keys):
            return value
        try:
            return Keys.from_hex(value)
        except TxUtilError as e:
            self.fail(str(e), param, ctx)


PRIVATE_KEY = PrivateKeyType()

input_argument = click.argument('input_file', metavar='INPUT', type=click.File('r'), default='-')


def reports_errors(func):
    """Turns a `TxUtilError` raised by a command into a clean error message and exit code 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except TxUtilError as e:
            raise click.ClickException(str(e)) from e

    return wrapper


@click.group('tx-util', context_settings=CONTEXT_SETTINGS, invoke_without_command=True)
@click.option('-v', '--verbose', count=True, help='Log to stderr; -v for info, -vv for debug.')
@click.pass_context
def tx_util(ctx, verbose: int):
    """
    Encode, decode, sign and recover EIP-1559 and EIP-7702 transactions.

    WARNING: meant for generating test transactions only. Do not use it for the Ethereum
    mainnet; it provides no guarantees of security or correctness.
    """
    setup_logging(verbose)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@tx_util.command(short_help='Encode bracket notation into RLP hex.')
@input_argument
@reports_errors
def encode_rlp(input_file):
    """
    Encode the value in INPUT into RLP and print it as hex.

    A value is a hex string (``0x`` alone is the empty string) or whitespace separated
    values in square brackets, nested as deep as needed:

        \b
        [
          0x1
          0x2
          [
            0x3
            0x4
          ]
          0x
          []
        ]
    """
    item = notation.parse(input_file.read())
    click.echo(to_hex(codec.encode(item)))


@tx_util.command(short_help='Decode RLP hex into bracket notation.')
@click.option('--strict', is_flag=True, help='Reject non-canonical encodings and trailing bytes.')
@input_argument
@reports_errors
def decode_rlp(input_file, strict: bool):
    """Decode the RLP hex in INPUT and print it in bracket notation."""
    item = codec.decode(hex_to_bytes(input_file.read()), strict=strict)
    click.echo(notation.format_item(item))


@tx_util.command(short_help='Encode (and sign) a JSON transaction.')
@click.option('-t', '--tx-type', type=click.IntRange(0, 0x7F),
              help='Transaction type (2 or 4); defaults to the "type" field of the JSON.')
@click.option('-s', '--signer', type=PRIVATE_KEY, help='Private key that signs the transaction.')
@click.option('-a', '--authorizer', 'authorizers', type=PRIVATE_KEY, multiple=True,
              help='Private key for the next unsigned authorization; repeat once per authorization.')
@input_argument
@reports_errors
def encode_tx(input_file, tx_type, signer, authorizers):
    """
    Encode the JSON transaction in INPUT into a signed EIP-2718 envelope.

    With --signer, unsigned authorizations are signed with the --authorizer keys in order and
    then the transaction itself is signed. Without it, the JSON must already carry yParity, r and s.
    """
    tx = schema.parse_transaction(input_file.read(), tx_type)
    with ExitStack() as stack:
        for key in (signer, *authorizers):
            if key is not None:
                stack.enter_context(key)
        if signer is not None:
            tx = sign_transaction(tx, signer, authorizers)
        elif authorizers:
            raise click.UsageError('--authorizer requires --signer')
    if tx.signature is None:
        raise click.ClickException('transaction is not signed; pass --signer or include yParity, r and s')
    encoded = tx.encode()
    logger.info('encoded type 0x%02x transaction of %d bytes', tx.tx_type, len(encoded))
    click.echo(to_hex(encoded))


@tx_util.command(short_help='Decode a typed transaction envelope.')
@click.option('--json', 'as_json', is_flag=True, help='Print the transaction as JSON.')
@click.option('--strict', is_flag=True, help='Reject non-canonical encodings and trailing bytes.')
@input_argument
@reports_errors
def decode_tx(input_file, as_json: bool, strict: bool):
    """
    Decode the hex of an EIP-2718 transaction in INPUT.

    By default the type byte and the raw payload are printed in bracket notation, which works
    for any type. --json interprets the fields and only supports types 2 and 4.
    """
    data = hex_to_bytes(input_file.read())
    if as_json:
        click.echo(schema.dump_transaction(decode_transaction(data, strict=strict)))
        return
    tx_type, item = decode_envelope(data, strict=strict)
    click.echo(f'Transaction Type: 0x{tx_type:02x}')
    click.echo('Transaction Payload:')
    click.echo(notation.format_item(item))


@tx_util.command(short_help='Sign an unsigned transaction envelope.')
@click.option('-k', '--private-key', type=PRIVATE_KEY, required=True, help='Private key in hex encoding.')
@input_argument
@reports_errors
def sign_tx(input_file, private_key: Keys):
    """
    Sign INPUT, an unsigned EIP-2718 envelope in hex (type byte followed by the RLP field list),
    and print the signed envelope.
    """
    with private_key:
        tx_type, item = decode_envelope(hex_to_bytes(input_file.read()))
        signed = sign_payload(tx_type, item, private_key)
    click.echo(to_hex(bytes([tx_type]) + codec.encode(signed)))


@tx_util.command(short_help='Sign an unsigned EIP-7702 authorization.')
@click.option('-k', '--private-key', type=PRIVATE_KEY, required=True, help='Private key in hex encoding.')
@click.option('-m', '--magic', type=click.IntRange(0, 0xFF), default=SET_CODE_AUTH_MAGIC, show_default=True,
              help='Byte prepended to the RLP payload before hashing.')
@input_argument
@reports_errors
def sign_auth(input_file, private_key: Keys, magic: int):
    """Sign the RLP-encoded authorization ``[chain_id, address, [nonce]]`` in INPUT."""
    with private_key:
        signed = sign_payload(magic, codec.decode(hex_to_bytes(input_file.read())), private_key)
    click.echo(to_hex(codec.encode(signed)))


@tx_util.command(short_help='Recover the sender of a signed transaction.')
@click.option('--checksum', is_flag=True, help='Print the address with EIP-55 mixed-case checksum.')
@input_argument
@reports_errors
def recover_address(input_file, checksum: bool):
    """Recover the signing hash and the sender address of the signed envelope in INPUT."""
    hashed, address = recover_envelope(hex_to_bytes(input_file.read()))
    click.echo(f'Transaction Hash: {to_hex(hashed)}')
    click.echo(f'Address: {Web3.to_checksum_address(address) if checksum else to_hex(address)}')


def main():
    tx_util()


if __name__ == '__main__':
    main()
