"""Binary wire format for terms, used to hand terms to other layers (compiler, VM) without going through text.

Prefix encoding, little-endian:

```
Var(n)     ::= 0x01 <n: u64>
Lam(body)  ::= 0x02 <body>
App(f, a)  ::= 0x03 <f> <a>
```
"""

import struct

from lckernel.lang.error import GenericException
from lckernel.pure.lexical import Abstraction, Application, Variable


VAR_TAG = 0x01
LAM_TAG = 0x02
APP_TAG = 0x03

_INDEX = struct.Struct("<Q")


class CodecError(GenericException):
    """Raised when bytes can't be decoded into a term."""


class EmptyInput(CodecError):

    def __init__(self):
        super().__init__("cannot decode a λ-term from empty input", diagnosis=False)


class IncompleteData(CodecError):

    def __init__(self, offset):
        super().__init__("input ends mid-term at byte {}", str(offset), diagnosis=False)
        self.offset = offset


class InvalidTag(CodecError):

    def __init__(self, tag, offset):
        super().__init__("invalid tag {} at byte {}", [f"0x{tag:02X}", str(offset)], diagnosis=False)
        self.tag = tag
        self.offset = offset


class TrailingData(CodecError):

    def __init__(self, offset):
        super().__init__("unexpected bytes after a complete λ-term at byte {}", str(offset), diagnosis=False)
        self.offset = offset


def encode(term):
    """Serializes term. Raises ValueError for indices that don't fit in 64 bits."""
    out = bytearray()
    stack = [term]
    while stack:
        node = stack.pop()
        if isinstance(node, Variable):
            if node.index >= 1 << 64:
                raise ValueError(f"De Bruijn index {node.index} does not fit in 64 bits")
            out.append(VAR_TAG)
            out += _INDEX.pack(node.index)
        elif isinstance(node, Abstraction):
            out.append(LAM_TAG)
            stack.append(node.body)
        else:
            out.append(APP_TAG)
            stack.extend([node.argument, node.function])
    return bytes(out)


def decode(data):
    """Deserializes exactly one term from data (bytes-like). Raises a CodecError subclass on malformed input."""
    data = bytes(data)
    if not data:
        raise EmptyInput()

    # tags in prefix order; rebuilt afterwards by reading them back to front
    tags = []
    indices = []
    offset = 0
    pending = 1  # number of terms still to be read
    while pending:
        if offset >= len(data):
            raise IncompleteData(offset)

        tag = data[offset]
        if tag == VAR_TAG:
            if offset + 1 + _INDEX.size > len(data):
                raise IncompleteData(offset)
            indices.append(_INDEX.unpack_from(data, offset + 1)[0])
            offset += 1 + _INDEX.size
            pending -= 1
        elif tag == LAM_TAG:
            offset += 1
        elif tag == APP_TAG:
            offset += 1
            pending += 1
        else:
            raise InvalidTag(tag, offset)
        tags.append(tag)

    if offset != len(data):
        raise TrailingData(offset)

    terms = []
    for tag in reversed(tags):
        if tag == VAR_TAG:
            terms.append(Variable(indices.pop()))
        elif tag == LAM_TAG:
            terms.append(Abstraction(terms.pop()))
        else:
            function = terms.pop()
            terms.append(Application(function, terms.pop()))
    return terms.pop()

