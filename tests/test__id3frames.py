
import zlib
from struct import pack

from id3splice._constants import GENRES
from id3splice.id3 import APIC, TALB, TCON, TIT2, TPE1, USLT, Encoding, \
    Frames, ID3EncryptionUnsupportedError, ID3Header, \
    ID3SaveConfig, ID3TruncatedFrameError, PictureType, TextFrame, \
    UnknownFrame, save_frame
from id3splice.id3._util import BitPaddedInt, is_valid_frame_id
from tests import TestCase, JPEG

_23 = ID3Header()
_23.version = (2, 3, 0)

_24 = ID3Header()
_24.version = (2, 4, 0)


class TFrame(TestCase):

    def test_frames_mapping(self):
        self.assertEqual(
            sorted(Frames), ["APIC", "TALB", "TCON", "TIT2", "TPE1", "USLT"])
        for frame_id, kind in Frames.items():
            self.assertEqual(kind().FrameID, frame_id)
            self.assertTrue(is_valid_frame_id(frame_id))

    def test_is_valid_frame_id(self):
        self.assertTrue(is_valid_frame_id("TIT2"))
        self.assertFalse(is_valid_frame_id("tit2"))
        self.assertFalse(is_valid_frame_id("TIT "))
        self.assertFalse(is_valid_frame_id("\x00\x00\x00\x00"))

    def test_unhashable(self):
        self.assertRaises(TypeError, hash, TIT2(text=["a"]))

    def test_eq(self):
        self.assertReallyEqual(TIT2(text=["a"]), TIT2(text=["a"]))
        self.assertReallyNotEqual(TIT2(text=["a"]), TIT2(text=["b"]))
        self.assertReallyNotEqual(TIT2(text=["a"]), TPE1(text=["a"]))

    def test_repr(self):
        self.assertEqual(
            repr(TIT2(encoding=Encoding.UTF8, text=["a"])),
            "TIT2(encoding=<Encoding.UTF8: 3>, text=['a'])")

    def test_validation(self):
        self.assertEqual(TIT2(text="a").text, ["a"])
        self.assertRaises(ValueError, TIT2, encoding=7)
        self.assertRaises(ValueError, USLT, lang="en")
        self.assertRaises(TypeError, APIC, data="not bytes")


class TTextFrame(TestCase):

    def test_read(self):
        frame = TIT2._fromData(_23, 0, b"\x03Hello World")
        self.assertEqual(frame.text, ["Hello World"])
        self.assertEqual(frame.encoding, Encoding.UTF8)

    def test_read_terminated(self):
        frame = TALB._fromData(_24, 0, b"\x00Album\x00")
        self.assertEqual(frame.text, ["Album"])
        self.assertEqual(frame.encoding, Encoding.LATIN1)

    def test_read_utf16(self):
        data = b"\x01" + u"\xe4rtist".encode("utf-16") + b"\x00\x00"
        self.assertEqual(TPE1._fromData(_23, 0, data).text, [u"\xe4rtist"])

    def test_read_utf16be(self):
        data = b"\x02" + u"Title".encode("utf-16-be")
        self.assertEqual(TIT2._fromData(_24, 0, data).text, ["Title"])

    def test_read_multi(self):
        frame = TPE1._fromData(_24, 0, b"\x03a\x00b")
        self.assertEqual(frame.text, ["a", "b"])
        self.assertEqual(frame.get_value((2, 4, 0)), "a/b")

    def test_read_bad_encoding(self):
        self.assertRaises(
            ID3TruncatedFrameError, TIT2._fromData, _23, 0, b"\x05abc")

    def test_empty_text(self):
        frame = TIT2._fromData(_23, 0, b"\x03")
        self.assertEqual(frame.text, [])
        self.assertEqual(frame.get_value((2, 3, 0)), None)

    def test_get_value_skips_empty(self):
        frame = TIT2(text=["a", "", "b"])
        self.assertEqual(frame.get_value((2, 4, 0)), "a/b")
        self.assertEqual(TIT2(text=[""]).get_value((2, 4, 0)), None)

    def test_write(self):
        frame = TIT2(encoding=Encoding.UTF8, text=["a", u"\xe4"])
        self.assertEqual(frame._writeData(), b"\x03a\x00\xc3\xa4")

    def test_fields(self):
        self.assertEqual(
            [k.FIELD for k in (TIT2, TPE1, TALB, TCON)],
            ["title", "artist", "album", "genre"])
        self.assertTrue(issubclass(TCON, TextFrame))


class TTCON(TestCase):

    def _g(self, *values):
        return TCON(text=list(values)).genres

    def test_genre_list(self):
        self.assertEqual(len(GENRES), 192)
        self.assertEqual(GENRES[17], "Rock")
        self.assertEqual(TCON.GENRES, GENRES)

    def test_plain(self):
        self.assertEqual(self._g("Rock"), ["Rock"])
        self.assertEqual(self._g("Pop", "Rock"), ["Pop", "Rock"])

    def test_numeric(self):
        self.assertEqual(self._g("(17)"), ["Rock"])
        self.assertEqual(self._g("(17)Rock"), ["Rock"])
        self.assertEqual(self._g("(17)(9)"), ["Rock", "Metal"])
        self.assertEqual(self._g("(0)Bluesy"), ["Blues", "Bluesy"])

    def test_special(self):
        self.assertEqual(self._g("(RX)"), ["Remix"])
        self.assertEqual(self._g("(CR)"), ["Cover"])
        self.assertEqual(self._g("(RX)(CR)"), ["Remix", "Cover"])

    def test_unknown(self):
        self.assertEqual(self._g("(255)"), ["Unknown"])
        self.assertEqual(self._g("(200)"), ["Unknown"])

    def test_bare_references_are_text(self):
        self.assertEqual(self._g("17"), ["17"])
        self.assertEqual(self._g("RX"), ["RX"])
        self.assertEqual(self._g("CR", "255"), ["CR", "255"])
        self.assertEqual(self._g("(17"), ["(17"])

    def test_escaped_paren(self):
        self.assertEqual(self._g("((foo)"), ["(foo)"])
        self.assertEqual(self._g("(("), ["("])
        self.assertEqual(self._g("(17)((x)"), ["Rock", "(x)"])

    def test_escape(self):
        self.assertEqual(TCON.escape("Rock"), "Rock")
        self.assertEqual(TCON.escape("17"), "17")
        self.assertEqual(TCON.escape("(CR)"), "((CR)")
        self.assertEqual(TCON.escape("("), "((")
        self.assertEqual(TCON.escape(""), "")
        for genre in ["(17)Rock", "(", "((x", " (RX)", "17", "RX"]:
            frame = TCON(text=[TCON.escape(genre)])
            self.assertEqual(frame.genres, [genre])

    def test_empty(self):
        self.assertEqual(self._g(""), [])
        self.assertEqual(self._g("", "Jazz"), ["Jazz"])

    def test_get_value_first(self):
        frame = TCON(text=["Pop", "Rock"])
        self.assertEqual(frame.get_value((2, 4, 0)), "Pop")
        self.assertEqual(TCON(text=["(17)(9)"]).get_value((2, 3, 0)), "Rock")

    def test_get_value_semicolon(self):
        frame = TCON(text=["Rock; Pop"])
        self.assertEqual(frame.get_value((2, 3, 0)), "Rock")
        self.assertEqual(frame.get_value((2, 4, 0)), "Rock; Pop")

    def test_get_value_none(self):
        self.assertEqual(TCON(text=[]).get_value((2, 3, 0)), None)
        self.assertEqual(TCON(text=[""]).get_value((2, 3, 0)), None)
        self.assertEqual(TCON(text=[" ; Pop"]).get_value((2, 3, 0)), None)
        self.assertEqual(
            TCON(text=[" ; Pop", "Jazz"]).get_value((2, 3, 0)), "Jazz")

    def test_get_value_keeps_whitespace(self):
        self.assertEqual(TCON(text=[" "]).get_value((2, 3, 0)), " ")
        self.assertEqual(TCON(text=[" Rock"]).get_value((2, 3, 0)), " Rock")
        self.assertEqual(TCON(text=["Rock "]).get_value((2, 4, 0)), "Rock ")


class TAPIC(TestCase):

    DATA = b"\x03image/jpeg\x00\x03Cover\x00" + JPEG

    def test_read(self):
        frame = APIC._fromData(_23, 0, self.DATA)
        self.assertEqual(frame.encoding, Encoding.UTF8)
        self.assertEqual(frame.mime, "image/jpeg")
        self.assertEqual(frame.type, PictureType.COVER_FRONT)
        self.assertEqual(frame.desc, "Cover")
        self.assertEqual(frame.data, JPEG)

    def test_read_utf16_desc(self):
        data = b"\x01image/png\x00\x04" + u"d".encode("utf-16") + \
            b"\x00\x00" + b"\x00\x01\x02"
        frame = APIC._fromData(_24, 0, data)
        self.assertEqual(frame.desc, "d")
        self.assertEqual(frame.type, PictureType.COVER_BACK)
        self.assertEqual(frame.data, b"\x00\x01\x02")

    def test_read_empty_image(self):
        frame = APIC._fromData(_23, 0, b"\x00image/png\x00\x03\x00")
        self.assertEqual(frame.data, b"")

    def test_truncated(self):
        for data in [b"\x03", b"\x03image/png", b"\x03image/png\x00",
                     b"\x03image/png\x00\x03desc"]:
            self.assertRaises(
                ID3TruncatedFrameError, APIC._fromData, _23, 0, data)

    def test_write(self):
        frame = APIC(encoding=Encoding.UTF8, mime="image/jpeg",
                     type=PictureType.COVER_FRONT, desc="Cover", data=JPEG)
        self.assertEqual(frame._writeData(), self.DATA)

    def test_repr(self):
        frame = APIC._fromData(_23, 0, self.DATA)
        self.assertTrue("data=<%d bytes>" % len(JPEG) in repr(frame))


class TUSLT(TestCase):

    def test_read(self):
        frame = USLT._fromData(_23, 0, b"\x03engSong Lyrics\x00la\nla")
        self.assertEqual(frame.lang, "eng")
        self.assertEqual(frame.desc, "Song Lyrics")
        self.assertEqual(frame.text, "la\nla")

    def test_read_trailing_null(self):
        frame = USLT._fromData(_24, 0, b"\x03eng\x00words\x00")
        self.assertEqual(frame.text, "words")

    def test_read_empty_text(self):
        frame = USLT._fromData(_23, 0, b"\x03engdesc\x00")
        self.assertEqual(frame.text, "")

    def test_read_utf16(self):
        data = b"\x01eng" + u"d".encode("utf-16") + b"\x00\x00" + \
            u"w\xf6rds".encode("utf-16")
        frame = USLT._fromData(_23, 0, data)
        self.assertEqual(frame.desc, "d")
        self.assertEqual(frame.text, u"w\xf6rds")

    def test_truncated(self):
        for data in [b"\x03", b"\x03en", b"\x03engdesc"]:
            self.assertRaises(
                ID3TruncatedFrameError, USLT._fromData, _23, 0, data)

    def test_write(self):
        frame = USLT(encoding=Encoding.UTF8, lang="eng", desc="Song Lyrics",
                     text="la")
        self.assertEqual(frame._writeData(), b"\x03engSong Lyrics\x00la")


class TUnknownFrame(TestCase):

    def test_raw(self):
        frame = UnknownFrame._fromRawData(_23, "PRIV", b"abc")
        self.assertEqual(frame.FrameID, "PRIV")
        self.assertEqual(frame.data, b"abc")
        self.assertEqual(repr(frame), "UnknownFrame('PRIV', data=<3 bytes>)")

    def test_default(self):
        self.assertEqual(UnknownFrame().FrameID, "XXXX")


class TFrameFlags(TestCase):

    BODY = b"\x03image/jpeg\x00\x03\x00" + b"\xff\xd8\xff\xe0" * 8

    def test_v23_compressed(self):
        data = pack(">L", len(self.BODY)) + zlib.compress(self.BODY)
        frame = APIC._fromData(_23, APIC.FLAG23_COMPRESS, data)
        self.assertEqual(frame.data, b"\xff\xd8\xff\xe0" * 8)

    def test_v23_compressed_broken(self):
        self.assertRaises(
            ID3TruncatedFrameError, APIC._fromData, _23,
            APIC.FLAG23_COMPRESS, b"\x00\x00\x00\x10garbage")
        self.assertRaises(
            ID3TruncatedFrameError, APIC._fromData, _23,
            APIC.FLAG23_COMPRESS, b"\x00")

    def test_v24_compressed(self):
        data = BitPaddedInt.to_str(len(self.BODY)) + zlib.compress(self.BODY)
        flags = APIC.FLAG24_COMPRESS | APIC.FLAG24_DATALEN
        frame = APIC._fromData(_24, flags, data)
        self.assertEqual(frame.data, b"\xff\xd8\xff\xe0" * 8)

    def test_v24_compressed_without_datalen(self):
        frame = APIC._fromData(
            _24, APIC.FLAG24_COMPRESS, zlib.compress(self.BODY))
        self.assertEqual(frame.data, b"\xff\xd8\xff\xe0" * 8)

    def test_v24_unsynch(self):
        data = self.BODY.replace(b"\xff", b"\xff\x00")
        self.assertNotEqual(data, self.BODY)
        frame = APIC._fromData(_24, APIC.FLAG24_UNSYNCH, data)
        self.assertEqual(frame.data, b"\xff\xd8\xff\xe0" * 8)

    def test_v24_datalen(self):
        data = BitPaddedInt.to_str(7) + b"\x03Title"
        frame = TIT2._fromData(_24, TIT2.FLAG24_DATALEN, data)
        self.assertEqual(frame.text, ["Title"])

    def test_encrypted(self):
        self.assertRaises(
            ID3EncryptionUnsupportedError, TIT2._fromData, _23,
            TIT2.FLAG23_ENCRYPT, b"\x03abc")
        self.assertRaises(
            ID3EncryptionUnsupportedError, TIT2._fromData, _24,
            TIT2.FLAG24_ENCRYPT, b"\x03abc")


class Tsave_frame(TestCase):

    def test_v23(self):
        frame = TIT2(encoding=Encoding.UTF8, text=["Hello World"])
        self.assertEqual(
            save_frame(frame, ID3SaveConfig(3)),
            b"TIT2\x00\x00\x00\x0c\x00\x00\x03Hello World")

    def test_v24_syncsafe(self):
        frame = TIT2(encoding=Encoding.UTF8, text=["a" * 199])
        data = save_frame(frame, ID3SaveConfig(4))
        self.assertEqual(data[4:10], b"\x00\x00\x01\x48\x00\x00")
        self.assertEqual(len(data), 10 + 200)

    def test_v23_plain(self):
        frame = TIT2(encoding=Encoding.UTF8, text=["a" * 199])
        data = save_frame(frame)
        self.assertEqual(data[4:10], b"\x00\x00\x00\xc8\x00\x00")

    def test_roundtrip_v24(self):
        frame = USLT(encoding=Encoding.UTF8, lang="eng", desc="d", text="t")
        data = save_frame(frame, ID3SaveConfig(4))
        size = BitPaddedInt(data[4:8])
        self.assertEqual(USLT._fromData(_24, 0, data[10:10 + size]), frame)
