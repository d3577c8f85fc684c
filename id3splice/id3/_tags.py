# Copyright 2005 Michael Urman
# Copyright 2016 Christoph Reiter
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

import logging
import struct
from collections.abc import Callable, Iterator
from io import BytesIO
from typing import Final, NamedTuple, override

from .._tags import FieldSet, PaddingInfo, Picture
from ._frames import APIC, TALB, TCON, TIT2, TPE1, USLT, Frame, Frames, \
    TextFrame, UnknownFrame
from ._specs import Encoding, PictureType
from ._util import (
    MAX_FILE_SIZE,
    SYNCSAFE_MAX,
    BitPaddedInt,
    FileTooLargeError,
    ID3EncryptionUnsupportedError,
    ID3NoHeaderError,
    ID3SaveConfig,
    ID3TagTooLargeError,
    ID3TruncatedFrameError,
    ID3UnsupportedVersionError,
    ID3ValueTooLargeError,
    decode_syncsafe,
    encode_syncsafe,
    error,
    is_valid_frame_id,
    unsynch,
)

log = logging.getLogger(__name__)

LYRICS_LANG: Final = "eng"
LYRICS_DESC: Final = "Song Lyrics"
PICTURE_DESC: Final = "Cover"


class ID3Header:
    """The ten byte ID3v2 header plus an optional extended header.

    Reading is permissive: flags outside the known set are ignored and the
    top bit of the sync-safe size is masked.
    """

    _V24: Final = (2, 4, 0)
    _V23: Final = (2, 3, 0)

    version: tuple[int, int, int] = _V24
    _flags: int = 0
    body_size: int = 0

    f_unsynch = property(lambda s: bool(s._flags & 0x80))
    f_extended = property(lambda s: bool(s._flags & 0x40))
    f_footer = property(lambda s: bool(s._flags & 0x10))

    def __init__(self, fileobj: BytesIO | None = None):
        """Raises ID3NoHeaderError, ID3UnsupportedVersionError"""

        if fileobj is None:
            # for tests
            return

        data = fileobj.read(10)
        if len(data) != 10:
            raise ID3NoHeaderError("too small")

        id3, vmaj, vrev, flags, size = struct.unpack('>3sBBB4s', data)
        if id3 != b'ID3':
            raise ID3NoHeaderError("doesn't start with an ID3 tag")

        if vmaj not in (3, 4):
            raise ID3UnsupportedVersionError(
                "ID3v2.%d not supported" % vmaj)

        self._flags = flags
        if not BitPaddedInt.has_valid_padding(size):
            log.debug("tag size %r is not sync-safe, top bits ignored", size)
        self.body_size = decode_syncsafe(size)
        self.version = (2, vmaj, vrev)

        if self.f_extended:
            self._read_extended(fileobj)

    def _read_extended(self, fileobj: BytesIO) -> None:
        extsize_data = fileobj.read(4)
        if len(extsize_data) != 4:
            return

        frame_id = extsize_data.decode("ascii", "replace")
        if is_valid_frame_id(frame_id):
            # Some taggers set the extended header flag but
            # don't write an extended header; in this case, the
            # extended header size looks like a frame ID.
            fileobj.seek(-4, 1)
            return

        if self.version >= self._V24:
            # "Where the 'Extended header size' is the size of the whole
            # extended header, stored as a 32 bit synchsafe integer."
            extsize = decode_syncsafe(extsize_data) - 4
        else:
            # "Where the 'Extended header size', currently 6 or 10 bytes,
            # excludes itself."
            extsize = struct.unpack('>L', extsize_data)[0]

        if extsize > 0:
            fileobj.seek(extsize, 1)

    @property
    def size(self) -> int:
        """Declared size of the whole tag, header and footer included"""

        size = 10 + self.body_size
        if self.f_footer:
            size += 10
        return size

    @override
    def __repr__(self) -> str:
        return "<%s version=%r flags=%#04x size=%d>" % (
            type(self).__name__, self.version, self._flags, self.size)


def _count_frames(data: bytes, bpi: Callable[[int], int]) -> tuple[int, int]:
    """Walks the frame headers with the given size reader.

    Returns the number of plausible frame IDs seen and how far the walk
    ended past (positive) or before (negative) the end of the data.
    """

    o = 0
    count = 0
    while o < len(data) - 10:
        part = data[o:o + 10]
        if part == b"\x00" * 10:
            return count, -((len(data) - o) % 10)
        name, size, flags = struct.unpack('>4sLH', part)
        o += 10 + bpi(size)
        if is_valid_frame_id(name.decode("ascii", "replace")):
            count += 1
    return count, o - len(data)


def _determine_bpi(data: bytes) -> Callable[[int], int]:
    """Takes id3v2.4 frame data and determines if ints or bitpaddedints
    should be used for parsing. Needed because iTunes used to write
    normal ints for frame sizes.
    """

    asbpi, bpioff = _count_frames(data, BitPaddedInt)
    asint, intoff = _count_frames(data, int)

    # if more tags as int, or equal and bpi is past and int is not
    if asint > asbpi or (asint == asbpi and (bpioff >= 1 and intoff <= 1)):
        return int
    return BitPaddedInt


def read_frames(header: ID3Header, data: bytes,
                frames: dict[str, type[Frame]] = Frames,
                skipped: list[str] | None = None) -> Iterator[Frame]:
    """Yields frames from the frame stream following the header.

    Frames which can't be decoded are dropped; their IDs get appended
    to `skipped` if given.
    """

    if header.version < header._V24 and header.f_unsynch:
        try:
            data = unsynch.decode(data)
        except ValueError:
            pass

    if header.version < header._V24:
        bpi: Callable[[int], int] = int
    else:
        bpi = _determine_bpi(data)

    while len(data) >= 10:
        frame_header = data[:10]
        name, size, flags = struct.unpack('>4sLH', frame_header)
        if name.strip(b'\x00') == b'':
            # padding
            break

        size = int(bpi(size))
        framedata = data[10:10 + size]
        overrun = 10 + size > len(data)
        data = data[10 + size:]

        try:
            frame_id = name.decode('ascii')
        except UnicodeDecodeError:
            log.debug("skipping frame with invalid ID %r", name)
            continue

        if overrun:
            log.debug("%s: frame size %d runs past the end of the tag",
                      frame_id, size)
            if skipped is not None:
                skipped.append(frame_id)
            continue

        if size == 0:
            # drop empty frames
            continue

        try:
            tag = frames[frame_id]
        except KeyError:
            if is_valid_frame_id(frame_id):
                yield UnknownFrame._fromRawData(header, frame_id, framedata)
            continue

        try:
            yield tag._fromData(header, flags, framedata)
        except (ID3TruncatedFrameError, ID3EncryptionUnsupportedError) as e:
            log.debug("%s: dropping frame: %r", frame_id, e)
            if skipped is not None:
                skipped.append(frame_id)


class DecodedTag(NamedTuple):
    """The result of :func:`decode`.

    Attributes:
        fields (FieldSet): the extracted fields, empty if there was no tag
        size (int): length of the tag block at the start of the data, 0
            if there is none
        version (tuple[int, int, int] | None): ID3v2 version of the tag
        skipped (tuple[str]): IDs of frames that were dropped as truncated
            or undecodable
    """

    fields: FieldSet
    size: int = 0
    version: tuple[int, int, int] | None = None
    skipped: tuple[str, ...] = ()


def fold_frames(frames: Iterator[Frame] | list[Frame],
                version: tuple[int, int, int]) -> FieldSet:
    """Builds a FieldSet from frames, the last frame of a kind wins"""

    fields = FieldSet()
    for frame in frames:
        if isinstance(frame, TextFrame):
            setattr(fields, frame.FIELD, frame.get_value(version))
        elif isinstance(frame, USLT):
            fields.lyrics = frame.text
        elif isinstance(frame, APIC):
            fields.picture = Picture(
                frame.mime, frame.data, int(frame.type), frame.desc)
        else:
            log.debug("ignoring frame %s", frame.FrameID)
    return fields


def decode(data: bytes, max_size: int = MAX_FILE_SIZE) -> DecodedTag:
    """Extracts the fields of the ID3v2 tag at the start of data.

    A missing tag, or one with a version other than 2.3 or 2.4, is not an
    error and results in an empty FieldSet and a size of 0.

    Raises:
        FileTooLargeError: if data is larger than max_size
    """

    if len(data) > max_size:
        raise FileTooLargeError(
            "%d bytes exceeds the limit of %d bytes" % (len(data), max_size))

    data = bytes(data)
    fileobj = BytesIO(data)
    try:
        header = ID3Header(fileobj)
    except (ID3NoHeaderError, ID3UnsupportedVersionError) as e:
        log.debug("no usable ID3v2 tag: %s", e)
        return DecodedTag(FieldSet())

    end = 10 + header.body_size
    if end > len(data):
        log.debug("tag size %d clamped to %d", end, len(data))
        end = len(data)
    size = min(header.size, len(data))

    skipped: list[str] = []
    frames = read_frames(header, data[fileobj.tell():end], skipped=skipped)
    fields = fold_frames(frames, header.version)
    return DecodedTag(fields, size, header.version, tuple(skipped))


def save_frame(frame: Frame, config: ID3SaveConfig | None = None) -> bytes:
    """Serializes frame including its ten byte header.

    Raises:
        ID3ValueTooLargeError: if the frame doesn't fit the size field
    """

    if config is None:
        config = ID3SaveConfig()

    framedata = frame._writeData(config)
    if config.v2_version == 4:
        try:
            size = encode_syncsafe(len(framedata))
        except ID3ValueTooLargeError as e:
            raise ID3ValueTooLargeError(
                "%s: frame too large for ID3v2.4" % frame.FrameID) from e
    else:
        try:
            size = struct.pack('>L', len(framedata))
        except struct.error as e:
            raise ID3ValueTooLargeError(
                "%s: frame too large for ID3v2.3" % frame.FrameID) from e

    header = struct.pack('>4s4sH', frame.FrameID.encode('ascii'), size, 0)
    return header + framedata


def guess_mime(data: bytes) -> str | None:
    """Guesses the MIME type of an image from its magic bytes"""

    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    elif data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    elif data.startswith((b"GIF87a", b"GIF89a")):
        return "image/gif"
    elif data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    elif data.startswith(b"BM"):
        return "image/bmp"
    return None


def iter_fields(fields: FieldSet) -> Iterator[Frame]:
    """Yields the frames for all populated fields in a fixed order"""

    for kind in (TIT2, TPE1, TALB, TCON):
        value = getattr(fields, kind.FIELD)
        if value:
            if kind is TCON:
                value = TCON.escape(value)
            yield kind(encoding=Encoding.UTF8, text=[value])

    if fields.lyrics:
        yield USLT(encoding=Encoding.UTF8, lang=LYRICS_LANG, desc=LYRICS_DESC,
                   text=fields.lyrics)

    if fields.picture is not None:
        picture = fields.picture
        mime = picture.mime or guess_mime(picture.data) or "image/jpeg"
        yield APIC(encoding=Encoding.UTF8, mime=mime,
                   type=PictureType.COVER_FRONT, desc=PICTURE_DESC,
                   data=picture.data)


def encode(fields: FieldSet, config: ID3SaveConfig | None = None,
           available: int = 0, trailing_size: int = 0) -> bytes:
    """Builds a complete ID3v2 tag for fields.

    Args:
        fields (FieldSet): the fields to write, empty ones are left out
        config (ID3SaveConfig): version, size limit and padding
        available (int): size of the tag being replaced, passed to the
            padding callback
        trailing_size (int): amount of audio data following the tag,
            passed to the padding callback

    Raises:
        ID3TagTooLargeError: if the frames don't fit config.max_size
        ID3ValueTooLargeError: if a single frame doesn't fit its size field
        error: if a value can't be encoded
    """

    if config is None:
        config = ID3SaveConfig()

    if config.v2_version not in (3, 4):
        raise ValueError("Only 3 or 4 allowed for v2_version")

    framedata = b"".join(save_frame(f, config) for f in iter_fields(fields))
    try:
        encode_syncsafe(len(framedata), config.max_size)
    except ID3ValueTooLargeError as e:
        raise ID3TagTooLargeError(
            "frames need %d bytes, at most %d allowed" % (
                len(framedata), min(config.max_size, SYNCSAFE_MAX))) from e

    needed = len(framedata) + 10
    info = PaddingInfo(available - needed, trailing_size)
    padding = info._get_padding(config.padding)
    if padding < 0:
        raise error("invalid padding")
    try:
        body_size = encode_syncsafe(len(framedata) + padding)
    except ID3ValueTooLargeError as e:
        raise ID3TagTooLargeError(
            "padding of %d bytes too large" % padding) from e
    header = struct.pack(
        '>3sBBB4s', b'ID3', config.v2_version, 0, 0, body_size)

    return header + framedata + b'\x00' * padding
