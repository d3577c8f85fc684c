# Copyright (C) 2005  Michael Urman
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

import re
import zlib
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Final, override

from .._constants import GENRES
from ._specs import (
    BinaryDataSpec,
    EncodedTextListSpec,
    EncodedTextSpec,
    Encoding,
    EncodingSpec,
    Latin1TextSpec,
    PictureTypeSpec,
    Spec,
    SpecError,
    StringSpec,
)
from ._util import (
    ID3EncryptionUnsupportedError,
    ID3SaveConfig,
    ID3TruncatedFrameError,
    error,
    unsynch,
)

if TYPE_CHECKING:
    from ._tags import ID3Header


class Frame:
    """Base class of all frames.

    Subclasses list their fields in `_framespec`; reading, writing,
    validation and comparison all go through those specs.
    """

    # format flags of the frame header, the status flags are ignored
    FLAG23_COMPRESS: Final = 0x0080
    FLAG23_ENCRYPT: Final = 0x0040

    FLAG24_COMPRESS: Final = 0x0008
    FLAG24_ENCRYPT: Final = 0x0004
    FLAG24_UNSYNCH: Final = 0x0002
    FLAG24_DATALEN: Final = 0x0001

    _framespec: Sequence[Spec[Any]] = []

    def __init__(self, **kwargs: object):
        for checker in self._framespec:
            setattr(self, checker.name,
                    kwargs.get(checker.name, checker.default))

    @override
    def __setattr__(self, name: str, value: object) -> None:
        for checker in self._framespec:
            if checker.name == name:
                self._setattr(name, checker.validate(self, value))
                return
        super().__setattr__(name, value)

    def _setattr(self, name: str, value: object) -> None:
        self.__dict__[name] = value

    @property
    def FrameID(self) -> str:
        """ID3v2 four character frame ID"""

        return type(self).__name__

    @override
    def __repr__(self) -> str:
        kw = [f"{spec.name}={getattr(self, spec.name)!r}"
              for spec in self._framespec if spec.name in self.__dict__]
        return "%s(%s)" % (type(self).__name__, ", ".join(kw))

    @override
    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return all(getattr(self, s.name) == getattr(other, s.name)
                   for s in self._framespec)

    @override
    def __hash__(self) -> int:
        raise TypeError("Frame objects are unhashable")

    def _readData(self, id3: ID3Header | None, data: bytes) -> bytes:
        """Raises ID3TruncatedFrameError; Returns leftover data"""

        for reader in self._framespec:
            if len(data) or reader.handle_nodata:
                try:
                    value, data = reader.read(id3, self, data)
                except SpecError as e:
                    raise ID3TruncatedFrameError(e) from e
            else:
                raise ID3TruncatedFrameError(
                    "no data left for %s" % reader.name)
            self._setattr(reader.name, value)

        return data

    def _writeData(self, config: ID3SaveConfig | None = None) -> bytes:
        """Raises error"""

        if config is None:
            config = ID3SaveConfig()

        data: list[bytes] = []
        for writer in self._framespec:
            try:
                data.append(
                    writer.write(config, self, getattr(self, writer.name)))
            except SpecError as e:
                raise error(e) from e

        return b''.join(data)

    @classmethod
    def _fromData(cls, header: ID3Header, tflags: int, data: bytes) -> Frame:
        """Builds a frame from the body of a frame in a tag.

        Raises:
            ID3TruncatedFrameError: if a field is missing or broken
            ID3EncryptionUnsupportedError: if the frame is encrypted
        """

        data = _unwrap_frame_data(header, tflags, data)
        frame = cls()
        frame._readData(header, data)
        return frame


def _unwrap_frame_data(header: ID3Header, tflags: int, data: bytes) -> bytes:
    """Undoes per frame compression and unsynchronisation"""

    if header.version >= header._V24:
        if tflags & (Frame.FLAG24_COMPRESS | Frame.FLAG24_DATALEN):
            # 4 byte data length indicator, kept for broken zlib streams
            datalen_bytes = data[:4]
            data = data[4:]
        if tflags & Frame.FLAG24_UNSYNCH or header.f_unsynch:
            try:
                data = unsynch.decode(data)
            except ValueError:
                # flag set but data not unsynchronised, use it as is
                pass
        if tflags & Frame.FLAG24_ENCRYPT:
            raise ID3EncryptionUnsupportedError
        if tflags & Frame.FLAG24_COMPRESS:
            try:
                data = zlib.decompress(data)
            except zlib.error:
                # some writers leave out the 4 bytes of uncompressed size
                data = datalen_bytes + data
                try:
                    data = zlib.decompress(data)
                except zlib.error as err:
                    raise ID3TruncatedFrameError(f'zlib: {err}') from err

    elif header.version >= header._V23:
        if tflags & Frame.FLAG23_COMPRESS:
            if len(data) < 4:
                raise ID3TruncatedFrameError(f'frame too small: {data!r}')
            # skip the uncompressed size
            data = data[4:]
        if tflags & Frame.FLAG23_ENCRYPT:
            raise ID3EncryptionUnsupportedError
        if tflags & Frame.FLAG23_COMPRESS:
            try:
                data = zlib.decompress(data)
            except zlib.error as err:
                raise ID3TruncatedFrameError(f'zlib: {err}') from err

    return data


class UnknownFrame(Frame):
    """A frame with an ID that is not mapped to a field.

    Kept around while decoding, never written back.
    """

    _framespec = [BinaryDataSpec('data')]

    data: bytes

    def __init__(self, frame_id: str = "XXXX", **kwargs: object):
        self._setattr("_frame_id", frame_id)
        super().__init__(**kwargs)

    @property
    @override
    def FrameID(self) -> str:
        return self.__dict__["_frame_id"]

    @override
    def __repr__(self) -> str:
        return '%s(%r, data=<%d bytes>)' % (
            type(self).__name__, self.FrameID, len(self.data))

    @classmethod
    def _fromRawData(cls, header: ID3Header, frame_id: str,
                     data: bytes) -> UnknownFrame:
        frame = cls(frame_id)
        frame._readData(header, data)
        return frame


class TextFrame(Frame):
    """Text strings.

    `text` holds all values. In ID3v2.4 they are separated by a null
    character, older writers used anything.
    """

    FIELD: str = ""
    """Name of the :class:`id3splice.FieldSet` attribute this frame fills"""

    encoding: Encoding
    text: list[str]

    _framespec = [
        EncodingSpec('encoding', default=Encoding.UTF8),
        EncodedTextListSpec('text'),
    ]

    def get_value(self, version: tuple[int, int, int]) -> str | None:
        """The field value; non-empty values joined with a slash"""

        return "/".join(v for v in self.text if v) or None


class TALB(TextFrame):
    "Album"

    FIELD = "album"


class TIT2(TextFrame):
    "Title"

    FIELD = "title"


class TPE1(TextFrame):
    "Artist"

    FIELD = "artist"


class TCON(TextFrame):
    """Genre

    Values are free text, optionally led by ID3v1 references like
    "(17)Rock"; `genres` resolves the references to names. A literal
    leading parenthesis is written doubled, see `escape`.
    """

    FIELD = "genre"

    GENRES: Final = GENRES

    _GENRE_RE: Final = re.compile(
        r"((?:\((?P<id>[0-9]+|RX|CR)\))*)(?P<str>.+)?", re.DOTALL)

    def _resolve(self, gid: str) -> str:
        if gid.isdecimal():
            try:
                return self.GENRES[int(gid)]
            except IndexError:
                return "Unknown"
        elif gid == "CR":
            return "Cover"
        elif gid == "RX":
            return "Remix"
        return "Unknown"

    @staticmethod
    def escape(genre: str) -> str:
        """Returns genre in the form that reads back unchanged"""

        if genre.startswith("("):
            return "(" + genre
        return genre

    @property
    def genres(self) -> list[str]:
        """All genre names, references resolved.

        Bare numbers are kept as text, only the parenthesised form is a
        reference.
        """

        genres: list[str] = []
        for value in self.text:
            if not value:
                continue
            newgenres: list[str] = []
            match = self._GENRE_RE.match(value)
            assert match is not None
            genreid, dummy, genrename = match.groups()

            if genreid:
                for gid in genreid[1:-1].split(")("):
                    newgenres.append(self._resolve(gid))

            if genrename:
                # "((" escapes a literal parenthesis
                if genrename.startswith("(("):
                    genrename = genrename[1:]
                if genrename not in newgenres:
                    newgenres.append(genrename)

            genres.extend(newgenres)

        return genres

    @override
    def get_value(self, version: tuple[int, int, int]) -> str | None:
        """Only the first genre is used.

        ID3v2.3 writers commonly put several genres into one value
        separated by a semicolon; only then is the value trimmed.
        """

        for genre in self.genres:
            if version < (2, 4, 0) and ";" in genre:
                genre = genre.split(";", 1)[0].strip()
            if genre:
                return genre
        return None


class APIC(Frame):
    """Attached picture

    Only embedded images are supported, a "-->" link MIME type is read
    like any other.
    """

    encoding: Encoding
    mime: str
    type: int
    desc: str
    data: bytes

    _framespec = [
        EncodingSpec('encoding', default=Encoding.UTF8),
        Latin1TextSpec('mime'),
        PictureTypeSpec('type'),
        EncodedTextSpec('desc'),
        BinaryDataSpec('data'),
    ]

    @override
    def __repr__(self) -> str:
        return '%s(encoding=%r, mime=%r, type=%r, desc=%r, data=<%d bytes>)' % (
            type(self).__name__, self.encoding, self.mime, self.type,
            self.desc, len(self.data))


class USLT(Frame):
    """Unsynchronised lyrics

    `lang` is an ISO-639-2 code, `text` may span several lines.
    """

    encoding: Encoding
    lang: str
    desc: str
    text: str

    _framespec = [
        EncodingSpec('encoding', default=Encoding.UTF8),
        StringSpec('lang', length=3, default="XXX"),
        EncodedTextSpec('desc'),
        EncodedTextSpec('text', terminated=False),
    ]


Frames: dict[str, type[Frame]] = {
    'TIT2': TIT2,
    'TPE1': TPE1,
    'TALB': TALB,
    'TCON': TCON,
    'APIC': APIC,
    'USLT': USLT,
}
"""Frame classes by ID, everything else is read as UnknownFrame"""
