# Copyright (C) 2005  Michael Urman
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""id3splice rebuilds the ID3v2 tag of an MP3 file without touching
the audio that follows it.

::

    from id3splice import id3

    data = id3.read_file("song.mp3")
    tag = id3.decode(data)
    fields = tag.fields.replace(title="New Title")
    id3.write_file(id3.edited_filename("song.mp3"),
                   id3.retag(data, fields))

The engine works on complete in-memory buffers and keeps no state
between calls.
"""

from ._tags import FieldSet, PaddingInfo, Picture
from ._util import Id3SpliceError

version = (1, 0, 0)
"""Version tuple."""

version_string = ".".join(map(str, version))
"""Version string."""

__all__ = ['FieldSet', 'Picture', 'PaddingInfo', 'Id3SpliceError',
           'version', 'version_string']
