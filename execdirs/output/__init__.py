from .sink import Channel, Sink
from .tee import directory_prefix, tee_lines

__all__ = ["Channel", "Sink", "directory_prefix", "tee_lines"]
