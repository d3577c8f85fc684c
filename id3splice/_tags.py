# Copyright (C) 2005  Michael Urman
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Final, NamedTuple, override


class PaddingInfo:
    """Abstract padding information object.

    This will be passed to the callback function that can be used
    for saving tags.

    ::

        def my_callback(info: PaddingInfo):
            return info.get_default_padding()

    The callback should return the amount of padding to use (>= 0) based on
    the content size and the padding of the file after saving.

    By default no padding is written at all; the callback is only consulted
    if passed explicitly through :class:`id3splice.id3.ID3SaveConfig`.
    """

    padding: int = 0
    """The amount of padding left after saving in bytes (can be negative if
    more data needs to be added as padding is available)
    """

    size: int = 0
    """The amount of data following the padding"""

    def __init__(self, padding: int, size: int):
        self.padding = padding
        self.size = size

    def get_default_padding(self) -> int:
        """A reasonable amount of padding for tools that grow tags in place.

        :return: Amount of padding after saving
        :rtype: int
        """

        high = 1024 * 10 + self.size // 100  # 10 KiB + 1% of trailing data
        low = 1024 + self.size // 1000  # 1 KiB + 0.1% of trailing data

        if self.padding >= 0:
            # enough padding left
            if self.padding > high:
                # padding too large, reduce
                return low
            # just use existing padding as is
            return self.padding
        else:
            # not enough padding, add some
            return low

    def _get_padding(self, user_func: PaddingFunction | None) -> int:
        if user_func is None:
            return 0
        else:
            return user_func(self)

    @override
    def __repr__(self) -> str:
        return "<%s size=%d padding=%d>" % (
            type(self).__name__, self.size, self.padding)


PaddingFunction = Callable[[PaddingInfo], int]


class Picture(NamedTuple):
    """An embedded image.

    Attributes:
        mime (str): MIME type, e.g. ``image/jpeg``. May be empty, in which
            case it gets guessed from the data on save.
        data (bytes): the raw image file
        type (int): ID3 picture type, 3 is the front cover
        desc (str): description as found in the tag
    """

    mime: str
    data: bytes
    type: int = 3
    desc: str = ""

    @override
    def __repr__(self) -> str:
        return "%s(mime=%r, data=<%d bytes>, type=%d, desc=%r)" % (
            type(self).__name__, self.mime, len(self.data), self.type,
            self.desc)


class FieldSet:
    """The editable part of a tag.

    All text attributes are either a non-empty ``str`` or `None`; assigning
    an empty string clears the field. ``picture`` is a :class:`Picture` or
    `None`.

    ::

        fields = FieldSet(title="Hello World")
        fields.genre = "Rock"
        fields.genre = ""  # same as None
    """

    __module__ = "id3splice"

    TEXT_FIELDS: Final = ("title", "artist", "album", "genre", "lyrics")

    title: str | None
    artist: str | None
    album: str | None
    genre: str | None
    lyrics: str | None
    picture: Picture | None

    def __init__(self, title: str | None = None, artist: str | None = None,
                 album: str | None = None, genre: str | None = None,
                 lyrics: str | None = None, picture: Picture | None = None):
        self.title = title
        self.artist = artist
        self.album = album
        self.genre = genre
        self.lyrics = lyrics
        self.picture = picture

    @override
    def __setattr__(self, name: str, value: object) -> None:
        if name in self.TEXT_FIELDS:
            if value is not None and not isinstance(value, str):
                raise TypeError(f"{name} has to be str or None")
            value = value or None
        elif name == "picture":
            if value is not None and not isinstance(value, Picture):
                raise TypeError("picture has to be a Picture or None")
        else:
            raise AttributeError(f"{type(self).__name__} has no field {name!r}")
        super().__setattr__(name, value)

    def replace(self, **kwargs: str | Picture | None) -> FieldSet:
        """Returns a copy with the given fields changed."""

        values = dict(self.items())
        values["picture"] = self.picture
        values.update(kwargs)
        return type(self)(**values)

    def items(self) -> Iterator[tuple[str, str]]:
        """Yields (name, value) for all populated text fields"""

        for name in self.TEXT_FIELDS:
            value = getattr(self, name)
            if value is not None:
                yield name, value

    def is_empty(self) -> bool:
        return self.picture is None and not any(True for _ in self.items())

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldSet):
            return NotImplemented
        return dict(self.items()) == dict(other.items()) and \
            self.picture == other.picture

    __hash__ = None  # type: ignore[assignment]

    @override
    def __repr__(self) -> str:
        kw = [f"{k}={v!r}" for k, v in self.items()]
        if self.picture is not None:
            kw.append(f"picture={self.picture!r}")
        return "{}({})".format(type(self).__name__, ", ".join(kw))

    def pprint(self) -> str:
        """Return a human-readable listing, one field per line"""

        lines: list[str] = []
        for name, value in self.items():
            if name == "lyrics":
                value = value.replace("\n", " / ")
            lines.append(f"{name}={value}")
        if self.picture is not None:
            lines.append("picture=%s (%d bytes)" % (
                self.picture.mime or "unknown", len(self.picture.data)))
        return "\n".join(lines)
