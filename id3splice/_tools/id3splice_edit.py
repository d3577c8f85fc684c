# Copyright 2005 Joe Wreschnig
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Show or rewrite the ID3v2 tag of an MP3 file.

The edited file is written next to the input as 'Edited_<name>' unless
an output path is given; the input itself is never modified.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from ._util import SignalHandler, setup_logging

_sig = SignalHandler()

log = logging.getLogger(__name__)

PICTURE_MIMES = ("image/jpeg", "image/png")


class Arguments(argparse.Namespace):
    file: str = ""
    list: bool = False
    title: str | None = None
    artist: str | None = None
    album: str | None = None
    genre: str | None = None
    lyrics: str | None = None
    lyrics_file: str | None = None
    picture: str | None = None
    remove_picture: bool = False
    output: str | None = None
    strip_v1: bool = False
    force: bool = False
    verbose: bool = False


def _read_lyrics(path: str) -> str:
    try:
        with open(path, encoding="utf-8") as h:
            return h.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SystemExit(f"{path}: {e}") from e


def _read_picture(path: str):
    from id3splice import Picture
    from id3splice.id3 import error, guess_mime, read_file

    try:
        data = read_file(path)
    except error as e:
        raise SystemExit(f"{path}: {e}") from e

    mime = guess_mime(data)
    if mime not in PICTURE_MIMES:
        raise SystemExit(f"{path}: Invalid image format, use JPEG or PNG")
    return Picture(mime, data)


def get_edits(args: Arguments) -> dict[str, object]:
    """Collects the field changes requested on the command line"""

    edits: dict[str, object] = {}
    for name in ("title", "artist", "album", "genre", "lyrics"):
        value = getattr(args, name)
        if value is not None:
            edits[name] = value
    if args.lyrics_file is not None:
        edits["lyrics"] = _read_lyrics(args.lyrics_file)
    if args.picture is not None:
        edits["picture"] = _read_picture(args.picture)
    elif args.remove_picture:
        edits["picture"] = None
    return edits


def main(argv: Sequence[str]) -> None:
    from id3splice import version_string
    from id3splice.id3 import ID3v1SaveOptions, decode, edited_filename, \
        error, find_id3v1, read_file, retag, score, write_file

    parser = argparse.ArgumentParser(
        usage="%(prog)s [options] FILE",
        description="Show or rewrite the ID3v2 tag of an MP3 file.")

    _ = parser.add_argument(
        "--version", action="version",
        version=f"id3splice {version_string}")
    _ = parser.add_argument(
        "-l", "--list", action="store_true",
        help="list the tag, the default without edit options")
    _ = parser.add_argument(
        "-t", "--title", metavar="TITLE", help="set the title")
    _ = parser.add_argument(
        "-a", "--artist", metavar="ARTIST", help="set the artist")
    _ = parser.add_argument(
        "-A", "--album", metavar="ALBUM", help="set the album")
    _ = parser.add_argument(
        "-g", "--genre", metavar="GENRE", help="set the genre")
    lyrics = parser.add_mutually_exclusive_group()
    _ = lyrics.add_argument(
        "--lyrics", metavar="TEXT", help="set the lyrics")
    _ = lyrics.add_argument(
        "--lyrics-file", metavar="PATH",
        help="set the lyrics from a UTF-8 text file")
    picture = parser.add_mutually_exclusive_group()
    _ = picture.add_argument(
        "-p", "--picture", metavar="PATH",
        help="attach a JPEG or PNG image as front cover")
    _ = picture.add_argument(
        "--remove-picture", action="store_true",
        help="remove the cover image")
    _ = parser.add_argument(
        "-o", "--output", metavar="PATH",
        help="where to write the edited file (default 'Edited_FILE')")
    _ = parser.add_argument(
        "--strip-v1", action="store_true",
        help="remove a trailing ID3v1 tag")
    _ = parser.add_argument(
        "--force", action="store_true",
        help="edit files which don't look like MP3 files")
    _ = parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="print debug messages to stderr")
    _ = parser.add_argument(
        "file", metavar="FILE", help="the MP3 file")

    args = parser.parse_args(argv[1:], namespace=Arguments())
    setup_logging(args.verbose)

    try:
        data = read_file(args.file)
    except error as e:
        raise SystemExit(f"{args.file}: {e}") from e

    if not args.force and score(args.file, data) < 2:
        raise SystemExit(
            f"{args.file}: doesn't look like an MP3 file, use --force")

    edits = get_edits(args)
    tag = decode(data)
    for frame_id in tag.skipped:
        log.warning("%s: dropped broken %s frame", args.file, frame_id)

    if args.list or not (edits or args.strip_v1):
        print(f"ID3v2.{tag.version[1]} tag info for {args.file}"
              if tag.version else f"No ID3v2 tag found in {args.file}")
        listing = tag.fields.pprint()
        if listing:
            print(listing)
        if find_id3v1(data[tag.size:]):
            print("ID3v1 tag present")
        if not (edits or args.strip_v1):
            return

    fields = tag.fields.replace(**edits)
    v1 = ID3v1SaveOptions.REMOVE if args.strip_v1 else ID3v1SaveOptions.KEEP
    try:
        new_data = retag(data, fields, v1=v1)
    except error as e:
        raise SystemExit(f"{args.file}: {e}") from e

    output = args.output or edited_filename(args.file)
    with _sig.block():
        try:
            write_file(output, new_data)
        except error as e:
            raise SystemExit(f"{output}: {e}") from e
    print(f"Saved {output}")


def entry_point() -> None:
    _sig.init()
    return main(sys.argv)
