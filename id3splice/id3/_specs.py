# Copyright (C) 2005  Michael Urman
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

import codecs
from collections.abc import Iterator
from enum import IntEnum
from typing import TYPE_CHECKING, Final, override

from .._util import bchr, decode_terminated

if TYPE_CHECKING:
    from ._frames import Frame
    from ._tags import ID3Header
    from ._util import ID3SaveConfig


class PictureType(IntEnum):
    """APIC picture types, members are named after the ID3v2.4 list"""

    OTHER = 0
    FILE_ICON = 1  # 32x32 PNG
    OTHER_FILE_ICON = 2
    COVER_FRONT = 3
    COVER_BACK = 4
    LEAFLET_PAGE = 5
    MEDIA = 6
    LEAD_ARTIST = 7
    ARTIST = 8
    CONDUCTOR = 9
    BAND = 10
    COMPOSER = 11
    LYRICIST = 12
    RECORDING_LOCATION = 13
    DURING_RECORDING = 14
    DURING_PERFORMANCE = 15
    SCREEN_CAPTURE = 16
    FISH = 17
    ILLUSTRATION = 18
    BAND_LOGOTYPE = 19
    PUBLISHER_LOGOTYPE = 20


class Encoding(IntEnum):
    """Text Encoding"""

    LATIN1 = 0
    """ISO-8859-1"""

    UTF16 = 1
    """UTF-16 with BOM"""

    UTF16BE = 2
    """UTF-16BE without BOM"""

    UTF8 = 3
    """UTF-8"""


class SpecError(Exception):
    pass


class Spec[T]:

    handle_nodata: bool = False
    """If reading empty data is possible and writing it back will again
    result in no data.
    """
    name: str
    default: T

    def __init__(self, name: str, default: T):
        self.name = name
        self.default = default

    @override
    def __hash__(self) -> int:
        raise TypeError("Spec objects are unhashable")

    def read(self, header: ID3Header | None, frame: Frame,
             data: bytes) -> tuple[T, bytes]:
        """
        Returns:
            (value: object, left_data: bytes)
        Raises:
            SpecError
        """

        raise NotImplementedError

    def write(self, config: ID3SaveConfig | None, frame: Frame,
              value: T) -> bytes:
        """
        Returns:
            bytes: The serialized data
        Raises:
            SpecError
        """

        raise NotImplementedError

    def validate(self, frame: Frame, value: object) -> T:
        """
        Returns:
            the validated value
        Raises:
            ValueError
            TypeError
        """

        raise NotImplementedError


class ByteSpec(Spec[int]):

    def __init__(self, name: str, default: int = 0):
        super().__init__(name, default)

    @override
    def read(self, header, frame, data):
        if not data:
            raise SpecError("no data left")
        return data[0], data[1:]

    @override
    def write(self, config, frame, value):
        return bchr(value)

    @override
    def validate(self, frame, value):
        if value is not None:
            _ = bchr(value)
        return value


class PictureTypeSpec(ByteSpec):

    def __init__(self, name: str,
                 default: PictureType = PictureType.COVER_FRONT):
        super().__init__(name, default)

    @override
    def read(self, header, frame, data):
        value, data = super().read(header, frame, data)
        try:
            return PictureType(value), data
        except ValueError:
            # keep unknown types as plain ints
            return value, data

    @override
    def validate(self, frame, value):
        value = super().validate(frame, value)
        if value is not None and value in PictureType._value2member_map_:
            return PictureType(value)
        return value


class EncodingSpec(ByteSpec):

    def __init__(self, name: str, default: Encoding = Encoding.UTF8):
        super().__init__(name, default)

    @override
    def read(self, header, frame, data):
        enc, data = super().read(header, frame, data)
        if enc not in (Encoding.LATIN1, Encoding.UTF16, Encoding.UTF16BE,
                       Encoding.UTF8):
            raise SpecError(f'Invalid Encoding: {enc!r}')
        return Encoding(enc), data

    @override
    def validate(self, frame, value):
        if value is None:
            raise TypeError
        if value not in (Encoding.LATIN1, Encoding.UTF16, Encoding.UTF16BE,
                         Encoding.UTF8):
            raise ValueError(f'Invalid Encoding: {value!r}')
        return Encoding(value)


class StringSpec(Spec[str]):
    """A fixed size ASCII only payload."""

    len: int

    def __init__(self, name: str, length: int, default: str | None = None):
        if default is None:
            default = " " * length
        super().__init__(name, default)
        self.len = length

    @override
    def read(self, header, frame, data):
        chunk = data[:self.len]
        if len(chunk) < self.len:
            raise SpecError("truncated")
        try:
            ascii = chunk.decode("ascii")
        except UnicodeDecodeError:
            raise SpecError("not ascii") from None
        return ascii, data[self.len:]

    @override
    def write(self, config, frame, value):
        return (bytes(value.encode("ascii")) + b'\x00' * self.len)[:self.len]

    @override
    def validate(self, frame, value):
        if value is None:
            raise TypeError

        if not isinstance(value, str):
            raise TypeError(f"{self.name} has to be str")
        value.encode("ascii")

        if len(value) == self.len:
            return value

        raise ValueError('Invalid StringSpec[%d] data: %r' % (self.len, value))


class BinaryDataSpec(Spec[bytes]):

    handle_nodata: bool = True

    def __init__(self, name: str, default: bytes = b""):
        super().__init__(name, default)

    @override
    def read(self, header, frame, data):
        return data, b''

    @override
    def write(self, config, frame, value):
        return value

    @override
    def validate(self, frame, value):
        if value is None:
            raise TypeError
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        raise TypeError(f"{self.name} has to be bytes")


class Latin1TextSpec(Spec[str]):
    """A null terminated Latin-1 string, the terminator is required"""

    def __init__(self, name: str, default: str = ""):
        super().__init__(name, default)

    @override
    def read(self, header, frame, data):
        if b'\x00' not in data:
            raise SpecError("%s not null terminated" % self.name)
        value, ret = data.split(b'\x00', 1)
        return value.decode('latin1'), ret

    @override
    def write(self, config, frame, value):
        try:
            return value.encode('latin1') + b'\x00'
        except UnicodeEncodeError as e:
            raise SpecError(e) from e

    @override
    def validate(self, frame, value):
        return str(value)


_ENCODINGS: Final = {
    Encoding.LATIN1: ('latin1', b'\x00'),
    Encoding.UTF16: ('utf16', b'\x00\x00'),
    Encoding.UTF16BE: ('utf_16_be', b'\x00\x00'),
    Encoding.UTF8: ('utf8', b'\x00'),
}


def iter_text_fixups(data: bytes, encoding: Encoding) -> Iterator[bytes]:
    """Yields a series of repaired text values for decoding"""

    yield data
    if encoding == Encoding.UTF16BE:
        # wrong termination
        yield data + b"\x00"
    elif encoding == Encoding.UTF16:
        # wrong termination
        yield data + b"\x00"
        # utf-16 is missing BOM, content is usually utf-16-le
        yield codecs.BOM_UTF16_LE + data
        # both cases combined
        yield codecs.BOM_UTF16_LE + data + b"\x00"


def decode_text(data: bytes, encoding: Encoding) -> str:
    """Decodes an unterminated text payload leniently.

    Trailing terminators are stripped, broken bytes get replaced.
    """

    enc, term = _ENCODINGS[encoding]
    if len(term) == 2:
        if len(data) % 2:
            # odd trailing byte
            data = data[:-1]
        while data[-2:] == term:
            data = data[:-2]
        if encoding == Encoding.UTF16 and \
                data[:2] not in (codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE):
            data = codecs.BOM_UTF16_LE + data
    else:
        data = data.rstrip(term)
    return data.decode(enc, "replace")


def encode_text(value: str, encoding: Encoding) -> bytes:
    if encoding == Encoding.UTF16:
        return codecs.BOM_UTF16_LE + value.encode("utf-16-le")
    enc, term = _ENCODINGS[encoding]
    return value.encode(enc)


class EncodedTextSpec(Spec[str]):
    """Text in the frame encoding.

    If terminated is False the value takes all remaining data.
    """

    def __init__(self, name: str, default: str = "", terminated: bool = True):
        super().__init__(name, default)
        self.terminated = terminated
        # an unterminated value may be empty
        self.handle_nodata = not terminated

    @override
    def read(self, header, frame, data):
        if not self.terminated:
            return decode_text(data, frame.encoding), b""

        enc, term = _ENCODINGS[frame.encoding]
        err = None
        for fixed in iter_text_fixups(data, frame.encoding):
            try:
                value, rest = decode_terminated(fixed, enc)
            except ValueError as e:
                err = e
            else:
                return value, rest
        raise SpecError(err)

    @override
    def write(self, config, frame, value):
        enc, term = _ENCODINGS[frame.encoding]
        try:
            data = encode_text(value, frame.encoding)
        except UnicodeEncodeError as e:
            raise SpecError(e) from e
        if self.terminated:
            data += term
        return data

    @override
    def validate(self, frame, value):
        return str(value)


class EncodedTextListSpec(Spec[list[str]]):
    """Null separated text values taking all remaining data.

    The last value is written without a terminator.
    """

    handle_nodata: bool = True

    def __init__(self, name: str, default: list[str] | None = None):
        super().__init__(name, default if default is not None else [])

    @override
    def read(self, header, frame, data):
        text = decode_text(data, frame.encoding)
        if not text:
            return [], b""
        # every value of a UTF-16 list carries its own BOM
        return [v.lstrip("\ufeff") for v in text.split("\x00")], b""

    @override
    def write(self, config, frame, value):
        enc, term = _ENCODINGS[frame.encoding]
        try:
            return term.join(encode_text(v, frame.encoding) for v in value)
        except UnicodeEncodeError as e:
            raise SpecError(e) from e

    @override
    def validate(self, frame, value):
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [str(v) for v in value]
        raise ValueError(f'Invalid text list: {value!r}')
