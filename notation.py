"""
Human-readable notation for RLP values.

A byte string is written as ``0x`` followed by hex digits (``0x`` alone is the
empty string; an odd number of digits gets a leading zero nibble). A list is a
pair of square brackets around its items, separated by whitespace::

    [
      0x01
      0x
      [
        0x03
        0x04
      ]
      []
    ]
"""
import re
from typing import List, NamedTuple, Tuple

from codec import RlpItem
from errors import NotationError

_TOKEN = re.compile(r'(?P<space>\s+)|(?P<open>\[)|(?P<close>\])|(?P<data>0x[0-9a-fA-F]*)')

INDENT = 2


class _Token(NamedTuple):
    kind: str
    text: str
    pos: int
    spaced: bool  # whitespace precedes the token


def _tokenize(text: str) -> List[_Token]:
    tokens = []
    pos = 0
    spaced = False
    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if match is None:
            raise NotationError(f'unexpected character {text[pos]!r} at offset {pos}')
        if match.lastgroup == 'space':
            spaced = True
        else:
            tokens.append(_Token(match.lastgroup, match.group(), pos, spaced))
            spaced = False
        pos = match.end()
    return tokens


def parse(text: str) -> RlpItem:
    """
    Parses bracket-and-hex notation into an RLP value.

    Raises:
        NotationError: If the text is not a single well-formed value.
    """
    tokens = _tokenize(text)
    if not tokens:
        raise NotationError('no value given')
    item, index = _parse_item(tokens, 0)
    if index != len(tokens):
        token = tokens[index]
        raise NotationError(f'unexpected {token.text!r} at offset {token.pos} after the value')
    return item


def _parse_item(tokens: List[_Token], index: int) -> Tuple[RlpItem, int]:
    token = tokens[index]
    if token.kind == 'data':
        digits = token.text[2:]
        if len(digits) % 2:
            digits = '0' + digits
        return bytes.fromhex(digits), index + 1
    if token.kind == 'close':
        raise NotationError(f"unbalanced ']' at offset {token.pos}")

    items = []
    index += 1
    while True:
        if index >= len(tokens):
            raise NotationError(f"list opened at offset {token.pos} is never closed")
        current = tokens[index]
        if current.kind == 'close':
            return items, index + 1
        if items and not current.spaced:
            raise NotationError(f'list items must be separated by whitespace (offset {current.pos})')
        item, index = _parse_item(tokens, index)
        items.append(item)


def format_item(item: RlpItem, depth: int = 0) -> str:
    """Renders an RLP value in bracket notation, one item per line."""
    pad = ' ' * depth
    if isinstance(item, bytes):
        return f'{pad}0x{item.hex()}'
    if not item:
        return f'{pad}[]'
    children = '\n'.join(format_item(child, depth + INDENT) for child in item)
    return f'{pad}[\n{children}\n{pad}]'
