"""Bidirectional codec between the configuration model and the server JSON.

Usage:
    from cloudhealth_perspectives.codec import decode, encode

    perspective = decode(response_body)
    body = encode(perspective)
"""

from cloudhealth_perspectives.codec.decoder import decode, from_wire
from cloudhealth_perspectives.codec.encoder import encode, to_wire
from cloudhealth_perspectives.codec.refs import RefIdAllocator, assign_ref_ids

__all__ = [
    "RefIdAllocator",
    "assign_ref_ids",
    "decode",
    "encode",
    "from_wire",
    "to_wire",
]
