# Copyright (C) 2005  Michael Urman
#               2006  Lukas Lalinsky
#               2013  Christoph Reiter
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""ID3v2 tag decoding, encoding and splicing.

This is based off of the following references:

* http://id3.org/id3v2.4.0-structure
* http://id3.org/id3v2.4.0-frames
* http://id3.org/id3v2.3.0

Only ID3v2.3 and ID3v2.4 tags are read, and only the frames which map
to a :class:`id3splice.FieldSet` attribute are kept: TIT2, TPE1, TALB,
TCON, USLT and APIC. Tags are always written from scratch in UTF-8,
ID3v2.3 unless :class:`ID3SaveConfig` says otherwise.

Decoding is permissive and never fails on a broken frame; encoding is
strict and either returns a complete tag or raises.
"""

from ._file import ID3v1SaveOptions as ID3v1SaveOptions, splice as splice, \
    retag as retag, read_file as read_file, write_file as write_file, \
    find_id3v1 as find_id3v1, strip_id3v1 as strip_id3v1, \
    edited_filename as edited_filename, score as score
from ._specs import Encoding as Encoding, PictureType as PictureType
from ._frames import Frames as Frames, Frame as Frame, \
    TextFrame as TextFrame, UnknownFrame as UnknownFrame, APIC as APIC, \
    TALB as TALB, TCON as TCON, TIT2 as TIT2, TPE1 as TPE1, USLT as USLT
from ._tags import ID3Header as ID3Header, DecodedTag as DecodedTag, \
    decode as decode, encode as encode, read_frames as read_frames, \
    save_frame as save_frame, guess_mime as guess_mime
from ._util import error as error, ID3NoHeaderError as ID3NoHeaderError, \
    ID3UnsupportedVersionError as ID3UnsupportedVersionError, \
    ID3EncryptionUnsupportedError as ID3EncryptionUnsupportedError, \
    ID3TruncatedFrameError as ID3TruncatedFrameError, \
    ID3ValueTooLargeError as ID3ValueTooLargeError, \
    ID3TagTooLargeError as ID3TagTooLargeError, ID3IOError as ID3IOError, \
    FileTooLargeError as FileTooLargeError, ID3SaveConfig as ID3SaveConfig, \
    BitPaddedInt as BitPaddedInt, unsynch as unsynch, \
    decode_syncsafe as decode_syncsafe, encode_syncsafe as encode_syncsafe, \
    MAX_FILE_SIZE as MAX_FILE_SIZE, SYNCSAFE_MAX as SYNCSAFE_MAX
