# Copyright (C) 2005  Michael Urman
#               2013  Christoph Reiter
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

from typing import NamedTuple

from .._tags import PaddingFunction
from .._util import Id3SpliceError

SYNCSAFE_MAX = (1 << 28) - 1
"""Largest value a four byte sync-safe integer can hold"""

MAX_FILE_SIZE = 512 * 1024 * 1024
"""Default upper bound for whole files held in memory"""


class error(Id3SpliceError):
    pass


class ID3NoHeaderError(error, ValueError):
    pass


class ID3UnsupportedVersionError(error, NotImplementedError):
    pass


class ID3EncryptionUnsupportedError(error, NotImplementedError):
    pass


class ID3TruncatedFrameError(error, ValueError):
    pass


class ID3ValueTooLargeError(error, ValueError):
    pass


class ID3TagTooLargeError(ID3ValueTooLargeError):
    pass


class ID3IOError(error, IOError):
    pass


class FileTooLargeError(error, ValueError):
    pass


class ID3SaveConfig(NamedTuple):

    v2_version: int = 3
    """ID3v2 major version to write, 3 or 4"""

    max_size: int = SYNCSAFE_MAX
    """Upper bound for the size of the frame stream"""

    padding: PaddingFunction | None = None
    """Optional padding callback, see :class:`id3splice.PaddingInfo`"""


def is_valid_frame_id(frame_id: str) -> bool:
    return frame_id.isalnum() and frame_id.isupper()


class unsynch:
    @staticmethod
    def decode(value: bytes) -> bytes:
        """Reverses unsynchronisation, FF 00 becomes FF.

        Raises:
            ValueError: if value contains a false sync
        """

        fragments = bytearray(value).split(b'\xff')
        if len(fragments) > 1 and not fragments[-1]:
            raise ValueError('string ended unsafe')

        for f in fragments[1:]:
            if (not f) or (f[0] >= 0xE0):
                raise ValueError('invalid sync-safe string')

            if f[0] == 0x00:
                del f[0]

        return bytes(bytearray(b'\xff').join(fragments))


class BitPaddedInt(int):
    """An int read from bytes that only use their low `bits` bits,
    most significant byte first.
    """

    bits: int

    def __new__(cls, value: int | bytes, bits: int = 7) -> BitPaddedInt:
        mask = (1 << bits) - 1
        numeric_value = 0

        if isinstance(value, int):
            if value < 0:
                raise ValueError
            shift = 0
            while value:
                numeric_value += (value & mask) << shift
                value >>= 8
                shift += bits
        elif isinstance(value, bytes):
            for byte in value:
                numeric_value = (numeric_value << bits) | (byte & mask)
        else:
            raise TypeError

        self = int.__new__(BitPaddedInt, numeric_value)
        self.bits = bits
        return self

    @staticmethod
    def to_str(value: int, bits: int = 7, width: int = 4) -> bytes:
        mask = (1 << bits) - 1
        data = bytearray(width)
        index = width - 1
        while value:
            if index < 0:
                raise ID3ValueTooLargeError(
                    'Value too wide (>%d bytes)' % width)
            data[index] = value & mask
            value >>= bits
            index -= 1
        return bytes(data)

    @staticmethod
    def has_valid_padding(value: int | bytes, bits: int = 7) -> bool:
        """Whether the unused top bits are all zero"""

        assert bits <= 8

        mask = (((1 << (8 - bits)) - 1) << bits)

        if isinstance(value, int):
            while value:
                if value & mask:
                    return False
                value >>= 8
        elif isinstance(value, bytes):
            return not any(byte & mask for byte in value)
        else:
            raise TypeError

        return True


def decode_syncsafe(data: bytes) -> int:
    """Decodes a four byte sync-safe integer.

    The top bit of each byte is masked, not validated.
    """

    if len(data) != 4:
        raise ValueError("sync-safe integers are 4 bytes, got %d" % len(data))
    return int(BitPaddedInt(data))


def encode_syncsafe(value: int, max_value: int = SYNCSAFE_MAX) -> bytes:
    """Encodes value as a four byte sync-safe integer.

    Raises:
        ID3ValueTooLargeError: if value is larger than max_value or
            doesn't fit into 28 bits
    """

    if value < 0:
        raise ValueError("negative size: %d" % value)
    if value > min(max_value, SYNCSAFE_MAX):
        raise ID3ValueTooLargeError(
            "%d does not fit into a sync-safe integer (max %d)" % (
                value, min(max_value, SYNCSAFE_MAX)))
    return BitPaddedInt.to_str(value, width=4)
