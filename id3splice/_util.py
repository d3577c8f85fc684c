# Copyright 2006 Joe Wreschnig
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Utility functions for id3splice.

You should not rely on the interfaces here being stable. They are
intended for internal use in id3splice only.
"""

from __future__ import annotations

import codecs
from collections.abc import Callable, Iterator
from functools import wraps
from typing import ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")


class Id3SpliceError(Exception):
    """Base class for all custom exceptions in id3splice"""

    __module__ = "id3splice"


def convert_error(exc_src: type[BaseException] | tuple[type[BaseException], ...],
                  exc_dest: type[Exception]) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """A decorator for reraising exceptions with a different type.
    Mostly useful for IOError.

    Args:
        exc_src (type): The source exception type
        exc_dest (type): The target exception type.
    """

    def wrap(func: Callable[P, R]) -> Callable[P, R]:

        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return func(*args, **kwargs)
            except exc_dest:
                raise
            except exc_src as err:
                raise exc_dest(err) from err

        return wrapper

    return wrap


def iterbytes(b: bytes) -> Iterator[bytes]:
    return (bytes([v]) for v in b)


def bchr(x: int) -> bytes:
    return bytes([x])


def decode_terminated(data: bytes, encoding: str, strict: bool = True) -> tuple[str, bytes]:
    """Returns the decoded data until the first NULL terminator
    and all data after it.

    In case the data can't be decoded raises UnicodeError.
    In case the encoding is not found raises LookupError.
    In case the data isn't null terminated (even if it is encoded correctly)
    raises ValueError except if strict is False, then the decoded string
    will be returned anyway.
    """

    codec_info = codecs.lookup(encoding)

    # normalize encoding name so we can compare by name
    encoding = codec_info.name

    # fast path
    if encoding in ("utf-8", "iso8859-1"):
        index = data.find(b"\x00")
        if index == -1:
            # make sure we raise UnicodeError first, like in the slow path
            res = data.decode(encoding), b""
            if strict:
                raise ValueError("not null terminated")
            else:
                return res
        return data[:index].decode(encoding), data[index + 1:]

    # slow path
    decoder = codec_info.incrementaldecoder()
    r: list[str] = []
    for i, b in enumerate(iterbytes(data)):
        c = decoder.decode(b)
        if c == "\x00":
            return "".join(r), data[i + 1:]
        r.append(c)
    # make sure the decoder is finished
    r.append(decoder.decode(b"", True))
    if strict:
        raise ValueError("not null terminated")
    return "".join(r), b""
