"""Stream identifiers: the global stream or a named stream."""

from dataclasses import dataclass
from typing import Union


GLOBAL_STREAM_NAME = "all"


@dataclass(frozen=True)
class GlobalStream:
    """The implicit stream holding every event in global append order."""

    @property
    def name(self) -> str:
        return GLOBAL_STREAM_NAME

    @property
    def is_global(self) -> bool:
        return True


@dataclass(frozen=True)
class NamedStream:
    """A stream explicitly named at publish (or link) time."""

    name: str

    @property
    def is_global(self) -> bool:
        return False


Stream = Union[GlobalStream, NamedStream]


def parse_stream(name: str) -> Stream:
    """Map a stream name from a URL to a stream; ``all`` is the global stream."""
    if name == GLOBAL_STREAM_NAME:
        return GlobalStream()
    return NamedStream(name)
