"""Tests for EXIF reading and decoding."""

import io
import struct

from PIL import Image

from ..exif import (
    TYPE_ASCII,
    TYPE_BYTE,
    TYPE_DOUBLE,
    TYPE_LONG,
    TYPE_RATIONAL,
    TYPE_SHORT,
    TYPE_SLONG,
    TYPE_SRATIONAL,
    TYPE_UNDEFINED,
    decode_entries,
    decode_entry,
    read_exif_entries,
    tag_label,
)
from ..models import ExifEntry


def build_tiff(entries: list[tuple[int, int, int, bytes]], order: str = "<") -> bytes:
    """Build a single-IFD TIFF block from (tag, type, count, value bytes) tuples."""
    header = (b"II" if order == "<" else b"MM") + struct.pack(order + "HI", 42, 8)
    data_offset = 8 + 2 + len(entries) * 12 + 4

    ifd = struct.pack(order + "H", len(entries))
    extra = b""
    for tag, type_code, count, value in entries:
        if len(value) <= 4:
            ifd += struct.pack(order + "HHI", tag, type_code, count) + value.ljust(4, b"\x00")
        else:
            ifd += struct.pack(order + "HHII", tag, type_code, count, data_offset + len(extra))
            extra += value
    ifd += struct.pack(order + "I", 0)
    return header + ifd + extra


class TestTagLabel:
    """Test cases for tag_label."""

    def test_known_tags(self) -> None:
        """Test that mapped tags get their human label."""
        assert tag_label(0x010F) == "Camera Manufacturer"
        assert tag_label(0x829D) == "F-Number"
        assert tag_label(0xA434) == "Lens Model"

    def test_unknown_tag_falls_back_to_hex(self) -> None:
        """Test the four-digit hex fallback label."""
        assert tag_label(0x0001) == "Tag 0x0001"
        assert tag_label(0xC4A5) == "Tag 0xC4A5"


class TestDecodeEntry:
    """Test cases for decode_entry."""

    def test_unsigned_rational(self) -> None:
        """Test that 1/2 renders with a two-decimal ratio."""
        entry = ExifEntry(tag_id=0x829A, type_code=TYPE_RATIONAL, raw_bytes=struct.pack("<II", 1, 2))

        assert decode_entry(entry) == ("Exposure Time", "1/2 (0.50)")

    def test_rational_zero_denominator(self) -> None:
        """Test that a zero denominator renders as "0" instead of dividing."""
        entry = ExifEntry(tag_id=0x829A, type_code=TYPE_RATIONAL, raw_bytes=struct.pack("<II", 1, 0))

        assert decode_entry(entry) == ("Exposure Time", "0")

    def test_signed_rational(self) -> None:
        """Test signed rationals keep their sign."""
        entry = ExifEntry(
            tag_id=0x9204, type_code=TYPE_SRATIONAL, raw_bytes=struct.pack("<ii", -1, 3)
        )

        assert decode_entry(entry) == ("Exposure Bias", "-1/3 (-0.33)")

    def test_ascii_strips_trailing_nulls(self) -> None:
        """Test that trailing NUL terminators are removed."""
        entry = ExifEntry(tag_id=0x010F, type_code=TYPE_ASCII, raw_bytes=b"Canon\x00\x00")

        assert decode_entry(entry) == ("Camera Manufacturer", "Canon")

    def test_short_and_long(self) -> None:
        """Test unsigned and signed integer types."""
        short = ExifEntry(tag_id=0x8827, type_code=TYPE_SHORT, raw_bytes=struct.pack("<H", 400))
        long = ExifEntry(tag_id=0x0001, type_code=TYPE_LONG, raw_bytes=struct.pack("<I", 70000))
        slong = ExifEntry(tag_id=0x0002, type_code=TYPE_SLONG, raw_bytes=struct.pack("<i", -5))

        assert decode_entry(short) == ("ISO Speed", "400")
        assert decode_entry(long) == ("Tag 0x0001", "70000")
        assert decode_entry(slong) == ("Tag 0x0002", "-5")

    def test_big_endian_values(self) -> None:
        """Test that Motorola byte order is honoured."""
        entry = ExifEntry(
            tag_id=0x8827, type_code=TYPE_SHORT, raw_bytes=struct.pack(">H", 800), byte_order=">"
        )

        assert decode_entry(entry) == ("ISO Speed", "800")

    def test_byte_and_undefined_hex_dump(self) -> None:
        """Test that byte arrays become uppercase space-separated hex."""
        byte_entry = ExifEntry(tag_id=0xA406, type_code=TYPE_BYTE, raw_bytes=b"\x01\xab")
        undefined = ExifEntry(tag_id=0x9286, type_code=TYPE_UNDEFINED, raw_bytes=b"\x00\xff\x10")

        assert decode_entry(byte_entry) == ("Scene Type", "01 AB")
        assert decode_entry(undefined) == ("User Comment", "00 FF 10")

    def test_length_mismatch_is_skipped(self) -> None:
        """Test that a short with more than two bytes yields nothing."""
        entry = ExifEntry(tag_id=0x8827, type_code=TYPE_SHORT, raw_bytes=b"\x01\x00\x02\x00")

        assert decode_entry(entry) is None

    def test_truncated_rational_is_skipped(self) -> None:
        """Test that a rational shorter than eight bytes yields nothing."""
        entry = ExifEntry(tag_id=0x829D, type_code=TYPE_RATIONAL, raw_bytes=b"\x01\x00\x00\x00")

        assert decode_entry(entry) is None

    def test_unsupported_type_is_skipped(self) -> None:
        """Test that types outside the supported set yield nothing."""
        entry = ExifEntry(tag_id=0x829D, type_code=TYPE_DOUBLE, raw_bytes=struct.pack("<d", 2.8))

        assert decode_entry(entry) is None

    def test_blank_values_are_skipped(self) -> None:
        """Test that empty and whitespace-only strings yield nothing."""
        empty = ExifEntry(tag_id=0x013B, type_code=TYPE_ASCII, raw_bytes=b"\x00\x00")
        blank = ExifEntry(tag_id=0x013B, type_code=TYPE_ASCII, raw_bytes=b"   \x00")
        no_bytes = ExifEntry(tag_id=0xA406, type_code=TYPE_UNDEFINED, raw_bytes=b"")

        assert decode_entry(empty) is None
        assert decode_entry(blank) is None
        assert decode_entry(no_bytes) is None

    def test_decode_entries_keeps_order_and_drops_bad_tags(self) -> None:
        """Test that one bad tag does not stop the rest."""
        entries = [
            ExifEntry(tag_id=0x010F, type_code=TYPE_ASCII, raw_bytes=b"Nikon\x00"),
            ExifEntry(tag_id=0x8827, type_code=TYPE_SHORT, raw_bytes=b"\x01"),
            ExifEntry(tag_id=0x0110, type_code=TYPE_ASCII, raw_bytes=b"Z 6\x00"),
        ]

        assert decode_entries(entries) == [("Camera Manufacturer", "Nikon"), ("Camera Model", "Z 6")]


class TestReadExifEntries:
    """Test cases for reading EXIF directories."""

    def test_reads_inline_and_offset_values(self) -> None:
        """Test that short values are read inline and long ones from their offset."""
        tiff = build_tiff(
            [
                (0x010F, TYPE_ASCII, 4, b"Sony"),
                (0x0110, TYPE_ASCII, 9, b"ILCE-7M3\x00"),
                (0x0112, TYPE_SHORT, 1, struct.pack("<H", 6)),
            ]
        )

        entries = read_exif_entries(tiff)

        assert [e.tag_id for e in entries] == [0x010F, 0x0110, 0x0112]
        assert entries[0].raw_bytes == b"Sony"
        assert entries[1].raw_bytes == b"ILCE-7M3\x00"
        assert entries[2].raw_bytes == struct.pack("<H", 6)
        assert decode_entries(entries) == [
            ("Camera Manufacturer", "Sony"),
            ("Camera Model", "ILCE-7M3"),
            ("Orientation", "6"),
        ]

    def test_accepts_exif_prefix(self) -> None:
        """Test that the JPEG APP1 "Exif" prefix is stripped."""
        tiff = build_tiff([(0x013B, TYPE_ASCII, 4, b"Ann\x00")])

        entries = read_exif_entries(b"Exif\x00\x00" + tiff)

        assert decode_entries(entries) == [("Artist", "Ann")]

    def test_big_endian_block(self) -> None:
        """Test a Motorola-order block."""
        tiff = build_tiff([(0x8827, TYPE_SHORT, 1, struct.pack(">H", 200))], order=">")

        entries = read_exif_entries(tiff)

        assert entries[0].byte_order == ">"
        assert decode_entries(entries) == [("ISO Speed", "200")]

    def test_follows_exif_sub_ifd(self) -> None:
        """Test that tags in the EXIF sub-directory are read after IFD0."""
        ifd0 = struct.pack("<H", 1) + struct.pack("<HHII", 0x8769, TYPE_LONG, 1, 26)
        ifd0 += struct.pack("<I", 0)
        exif_ifd = struct.pack("<H", 1) + struct.pack("<HHII", 0x829D, TYPE_RATIONAL, 1, 44)
        exif_ifd += struct.pack("<I", 0)
        tiff = b"II" + struct.pack("<HI", 42, 8) + ifd0 + exif_ifd + struct.pack("<II", 28, 10)

        rows = decode_entries(read_exif_entries(tiff))

        assert rows == [("Tag 0x8769", "26"), ("F-Number", "28/10 (2.80)")]

    def test_gps_sub_ifd_follows_exif_sub_ifd(self) -> None:
        """Test that GPS tags come after the EXIF sub-directory."""
        ifd0 = struct.pack("<H", 2)
        ifd0 += struct.pack("<HHII", 0x8769, TYPE_LONG, 1, 38)
        ifd0 += struct.pack("<HHII", 0x8825, TYPE_LONG, 1, 56)
        ifd0 += struct.pack("<I", 0)
        exif_ifd = struct.pack("<H", 1) + struct.pack("<HHI", 0x8827, TYPE_SHORT, 1)
        exif_ifd += struct.pack("<HH", 400, 0) + struct.pack("<I", 0)
        gps_ifd = struct.pack("<H", 1) + struct.pack("<HHI", 0x0000, TYPE_BYTE, 4)
        gps_ifd += b"\x02\x03\x00\x00" + struct.pack("<I", 0)
        tiff = b"II" + struct.pack("<HI", 42, 8) + ifd0 + exif_ifd + gps_ifd

        rows = decode_entries(read_exif_entries(tiff))

        assert rows == [
            ("Tag 0x8769", "38"),
            ("Tag 0x8825", "56"),
            ("ISO Speed", "400"),
            ("Tag 0x0000", "02 03 00 00"),
        ]

    def test_pointer_loop_terminates(self) -> None:
        """Test that a sub-IFD pointing back at IFD0 is not followed twice."""
        ifd0 = struct.pack("<H", 1) + struct.pack("<HHII", 0x8769, TYPE_LONG, 1, 8)
        tiff = b"II" + struct.pack("<HI", 42, 8) + ifd0 + struct.pack("<I", 0)

        entries = read_exif_entries(tiff)

        assert len(entries) == 1

    def test_garbage_returns_empty(self) -> None:
        """Test that non-TIFF data yields no entries rather than an error."""
        assert read_exif_entries(None) == []
        assert read_exif_entries(b"") == []
        assert read_exif_entries(b"not a tiff block at all") == []
        assert read_exif_entries(b"II*\x00") == []

    def test_truncated_directory_keeps_complete_entries(self) -> None:
        """Test that a directory cut short returns the entries before the cut."""
        tiff = build_tiff(
            [
                (0x010F, TYPE_ASCII, 4, b"Leic"),
                (0x0112, TYPE_SHORT, 1, struct.pack("<H", 1)),
            ]
        )

        entries = read_exif_entries(tiff[: 8 + 2 + 12 + 6])

        assert [e.tag_id for e in entries] == [0x010F]

    def test_value_outside_block_ends_directory(self) -> None:
        """Test that an offset pointing past the end keeps the entries before it."""
        ifd0 = struct.pack("<H", 2)
        ifd0 += struct.pack("<HHI", 0x8827, TYPE_SHORT, 1) + struct.pack("<HH", 100, 0)
        ifd0 += struct.pack("<HHII", 0x0110, TYPE_ASCII, 20, 5000)
        tiff = b"II" + struct.pack("<HI", 42, 8) + ifd0 + struct.pack("<I", 0)

        rows = decode_entries(read_exif_entries(tiff))

        assert rows == [("ISO Speed", "100")]

    def test_reads_exif_written_by_pillow(self) -> None:
        """Test reading the EXIF block of a JPEG saved by Pillow."""
        exif = Image.Exif()
        exif[0x010F] = "Canon"
        exif[0x0110] = "EOS R5"
        buffer = io.BytesIO()
        Image.new("RGB", (16, 16), (200, 10, 10)).save(buffer, "JPEG", exif=exif.tobytes())

        with Image.open(io.BytesIO(buffer.getvalue())) as img:
            rows = decode_entries(read_exif_entries(img.info.get("exif")))

        assert ("Camera Manufacturer", "Canon") in rows
        assert ("Camera Model", "EOS R5") in rows
