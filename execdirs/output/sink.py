from __future__ import annotations

import sys
import threading
from enum import Enum
from typing import BinaryIO, Iterable


class Channel(Enum):
    OUT = "stdout"
    ERR = "stderr"


class Sink:
    """Serialized destination for prefixed output lines.

    Each channel has its own lock, held for the whole multi-token write of a
    single line so that lines from concurrent jobs never interleave.
    """

    def __init__(self, out: BinaryIO, err: BinaryIO):
        self._streams = {Channel.OUT: out, Channel.ERR: err}
        self._locks = {Channel.OUT: threading.Lock(), Channel.ERR: threading.Lock()}

    @classmethod
    def from_stdio(cls) -> Sink:
        # Anything already written through the text layers goes out first
        sys.stdout.flush()
        sys.stderr.flush()
        return cls(sys.stdout.buffer, sys.stderr.buffer)

    def write_line(self, channel: Channel, tokens: Iterable[bytes]) -> bool:
        stream = self._streams[channel]
        with self._locks[channel]:
            try:
                for token in tokens:
                    stream.write(token)
                stream.flush()
            except (OSError, ValueError):
                # The reader may have closed its end; nowhere else to send it
                return False
        return True
