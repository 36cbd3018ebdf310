from __future__ import annotations

import logging
import os
from typing import BinaryIO

from execdirs.config.types import PartialLine

from .sink import Channel, Sink

logger = logging.getLogger(__name__)

SEPARATOR = b": "


def directory_prefix(directory: str | bytes) -> bytes:
    raw = os.fsencode(directory)
    seps = os.sep.encode()
    if os.altsep:
        seps += os.altsep.encode()

    stripped = raw.rstrip(seps)
    if not stripped and raw:
        # Root directory: keep one separator rather than an empty prefix
        return raw[:1]
    return stripped


def tee_lines(
    stream: BinaryIO,
    prefix: bytes,
    sink: Sink,
    channel: Channel,
    *,
    partial: PartialLine = PartialLine.FLUSH,
) -> int:
    forwarded = 0
    while True:
        try:
            line = stream.readline()
        except (OSError, ValueError):
            logger.debug("%r: %s read failed, stopping", prefix, channel.value)
            break

        if not line:
            break

        if not line.endswith(b"\n"):
            if partial is PartialLine.DROP:
                logger.debug(
                    "%r: dropping %d byte partial line on %s",
                    prefix,
                    len(line),
                    channel.value,
                )
                break
            line += b"\n"

        if not sink.write_line(channel, (prefix, SEPARATOR, line)):
            break
        forwarded += 1

    return forwarded
