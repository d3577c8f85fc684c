# Copyright (C) 2005  Michael Urman
#               2006  Lukas Lalinsky
#               2013  Christoph Reiter
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from enum import IntEnum

from .._tags import FieldSet
from .._util import convert_error
from ._tags import decode, encode
from ._util import MAX_FILE_SIZE, FileTooLargeError, ID3IOError, \
    ID3SaveConfig

log = logging.getLogger(__name__)


class ID3v1SaveOptions(IntEnum):

    REMOVE = 0
    """ID3v1 tags will be removed"""

    KEEP = 1
    """Trailing data, ID3v1 tags included, is copied unchanged"""


def splice(data: bytes, tag_size: int, new_tag: bytes) -> bytes:
    """Replaces the first tag_size bytes of data with new_tag.

    Everything after the old tag is copied unchanged.

    Raises:
        ValueError: if tag_size isn't inside data
    """

    if not 0 <= tag_size <= len(data):
        raise ValueError(
            "tag size %d outside of data (%d bytes)" % (tag_size, len(data)))
    return bytes(new_tag) + bytes(data[tag_size:])


def find_id3v1(data: bytes) -> int:
    """Returns the size of a trailing ID3v1 tag, or 0 if there is none.

    An enhanced 'TAG+' block in front of the tag is included.
    """

    if len(data) < 128 or data[-128:-125] != b"TAG":
        return 0
    if len(data) >= 355 and data[-355:-351] == b"TAG+":
        return 355
    return 128


def strip_id3v1(data: bytes) -> bytes:
    """Returns data without a trailing ID3v1 tag"""

    size = find_id3v1(data)
    if size:
        log.debug("removing %d byte ID3v1 tag", size)
        return bytes(data[:-size])
    return bytes(data)


def retag(data: bytes, fields: FieldSet, config: ID3SaveConfig | None = None,
          v1: ID3v1SaveOptions = ID3v1SaveOptions.KEEP,
          max_size: int = MAX_FILE_SIZE) -> bytes:
    """Returns data with its ID3v2 tag replaced by one built from fields.

    Raises:
        FileTooLargeError
        ID3TagTooLargeError
        id3splice.id3.error
    """

    tag = decode(data, max_size=max_size)
    if v1 == ID3v1SaveOptions.REMOVE:
        data = data[:tag.size] + strip_id3v1(data[tag.size:])
    new_tag = encode(fields, config, available=tag.size,
                     trailing_size=len(data) - tag.size)
    return splice(data, tag.size, new_tag)


def _guard_size(path: str | os.PathLike[str], max_size: int) -> None:
    size = os.path.getsize(path)
    if size > max_size:
        raise FileTooLargeError(
            "%s: %d bytes exceeds the limit of %d bytes" % (
                os.fspath(path), size, max_size))


@convert_error(OSError, ID3IOError)
def read_file(path: str | os.PathLike[str],
              max_size: int = MAX_FILE_SIZE) -> bytes:
    """Reads a whole file into memory.

    Raises:
        FileTooLargeError: if the file is larger than max_size
        ID3IOError: if reading failed
    """

    _guard_size(path, max_size)
    with open(path, "rb") as h:
        data = h.read(max_size + 1)
    if len(data) > max_size:
        # the file grew after the check
        raise FileTooLargeError(
            "%s exceeds the limit of %d bytes" % (os.fspath(path), max_size))
    return data


def _remove(path: str) -> None:
    with contextlib.suppress(OSError):
        os.unlink(path)


@convert_error(OSError, ID3IOError)
def write_file(path: str | os.PathLike[str], data: bytes) -> None:
    """Writes data to path, replacing the file as a whole.

    The data goes to a temporary file next to the target first, so the
    target is either left untouched or completely written.

    Raises:
        ID3IOError: if writing failed
    """

    dirname = os.path.dirname(os.path.abspath(path))
    fd, temp = tempfile.mkstemp(
        prefix=".%s." % os.path.basename(path), suffix=".tmp", dir=dirname)
    try:
        h = os.fdopen(fd, "wb")
    except BaseException:
        os.close(fd)
        _remove(temp)
        raise

    try:
        with h:
            h.write(data)
            h.flush()
            os.fsync(h.fileno())
        os.replace(temp, path)
    except BaseException:
        _remove(temp)
        raise


def edited_filename(path: str | os.PathLike[str]) -> str:
    """The default output name for an edited file, next to the input"""

    dirname, basename = os.path.split(os.fspath(path))
    return os.path.join(dirname, "Edited_" + basename)


def score(filename: str | os.PathLike[str], data: bytes) -> int:
    """How much data looks like an MP3 file, 0 if not at all"""

    tag = decode(data, max_size=len(data))
    offset = tag.size
    # skip zero padding some writers put after the tag
    while offset < len(data) and data[offset] == 0:
        offset += 1
    audio = data[offset:offset + 2]
    sync = len(audio) == 2 and audio[0] == 0xFF and (audio[1] & 0xE0) == 0xE0

    return (tag.version is not None) * 2 + sync * 2 + \
        os.fspath(filename).lower().endswith(".mp3")
