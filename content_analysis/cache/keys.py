from __future__ import annotations

import struct
from dataclasses import dataclass

# Collection holding recognized image content, distinct from other cached artifacts.
CACHED_IMAGE_RECOGNIZED_CONTENT = 16

_KEY_FORMAT = ">ii"  # big-endian namespace, then id
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


@dataclass(frozen=True)
class MessageId:
    namespace: int
    id: int

    def __post_init__(self) -> None:
        for name in ("namespace", "id"):
            value = getattr(self, name)
            if not _INT32_MIN <= value <= _INT32_MAX:
                raise ValueError(f"MessageId.{name}={value} does not fit in 32 bits")


def cache_key(message_id: MessageId) -> bytes:
    """Pack *message_id* into the fixed 8-byte cache key."""
    return struct.pack(_KEY_FORMAT, message_id.namespace, message_id.id)
