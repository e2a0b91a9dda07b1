"""EXIF tag reading and decoding."""

import io
import logging
import struct

from PIL import TiffImagePlugin

from .errors import DecodeSkip
from .models import ExifEntry

logger = logging.getLogger(__name__)

# TIFF field types
TYPE_BYTE = 1
TYPE_ASCII = 2
TYPE_SHORT = 3
TYPE_LONG = 4
TYPE_RATIONAL = 5
TYPE_SBYTE = 6
TYPE_UNDEFINED = 7
TYPE_SSHORT = 8
TYPE_SLONG = 9
TYPE_SRATIONAL = 10
TYPE_FLOAT = 11
TYPE_DOUBLE = 12

EXIF_IFD_POINTER = 0x8769
GPS_IFD_POINTER = 0x8825

TAG_LABELS = {
    0x010F: "Camera Manufacturer",
    0x0110: "Camera Model",
    0x0112: "Orientation",
    0x829A: "Exposure Time",
    0x829D: "F-Number",
    0x8827: "ISO Speed",
    0x9003: "Date/Time Original",
    0x9004: "Date/Time Digitized",
    0x920A: "Focal Length",
    0xA402: "Exposure Mode",
    0xA403: "White Balance",
    0xA406: "Scene Type",
    0xA407: "Gain Control",
    0xA408: "Contrast",
    0xA409: "Saturation",
    0xA40A: "Sharpness",
    0x8822: "Exposure Program",
    0x9207: "Metering Mode",
    0x9209: "Flash",
    0x9201: "Shutter Speed",
    0x9202: "Aperture",
    0x9204: "Exposure Bias",
    0x9286: "User Comment",
    0x0132: "Date/Time Modified",
    0x013B: "Artist",
    0x8298: "Copyright",
    0xA433: "Lens Make",
    0xA434: "Lens Model",
}

EXIF_HEADER = b"Exif\x00\x00"


def tag_label(tag_id: int) -> str:
    """Human-readable label for an EXIF tag, or a hex fallback."""
    return TAG_LABELS.get(tag_id, f"Tag 0x{tag_id:04X}")


def _format_rational(numerator: int, denominator: int) -> str:
    if denominator == 0:
        return "0"
    return f"{numerator}/{denominator} ({numerator / denominator:.2f})"


def _decode_value(entry: ExifEntry) -> str:
    data = entry.raw_bytes
    order = entry.byte_order
    type_code = entry.type_code

    if type_code in (TYPE_BYTE, TYPE_UNDEFINED):
        return " ".join(f"{b:02X}" for b in data)

    if type_code == TYPE_ASCII:
        return data.decode("ascii", errors="replace").rstrip("\x00")

    expected = {
        TYPE_SHORT: (2, "H"),
        TYPE_LONG: (4, "I"),
        TYPE_SLONG: (4, "i"),
        TYPE_RATIONAL: (8, "II"),
        TYPE_SRATIONAL: (8, "ii"),
    }.get(type_code)
    if expected is None:
        raise DecodeSkip(f"Unsupported type code {type_code}")

    width, fmt = expected
    if len(data) != width:
        raise DecodeSkip(f"Expected {width} bytes for type {type_code}, got {len(data)}")

    values = struct.unpack(order + fmt, data)
    if type_code in (TYPE_RATIONAL, TYPE_SRATIONAL):
        return _format_rational(*values)
    return str(values[0])


def decode_entry(entry: ExifEntry) -> tuple[str, str] | None:
    """
    Convert a raw EXIF entry into a display row.

    Args:
        entry: Raw entry read from the file

    Returns:
        (label, value) tuple, or None if the value is empty, of an
        unsupported type, or malformed
    """
    try:
        value = _decode_value(entry)
    except DecodeSkip as e:
        logger.debug(f"Skipping tag 0x{entry.tag_id:04X}: {e}")
        return None
    except (UnicodeDecodeError, struct.error, ValueError) as e:
        logger.debug(f"Could not decode tag 0x{entry.tag_id:04X}: {e}")
        return None

    if not value.strip():
        return None
    return tag_label(entry.tag_id), value


def decode_entries(entries: list[ExifEntry]) -> list[tuple[str, str]]:
    """Decode a list of entries, dropping those that yield nothing."""
    rows = []
    for entry in entries:
        row = decode_entry(entry)
        if row is not None:
            rows.append(row)
    return rows


def _load_directory(
    fp: io.BytesIO, head: bytes, offset: int
) -> TiffImagePlugin.ImageFileDirectory_v1:
    """Load one image file directory with its values left as raw bytes."""
    directory = TiffImagePlugin.ImageFileDirectory_v1(head)
    fp.seek(offset)
    directory.load(fp)
    return directory


def _directory_entries(
    directory: TiffImagePlugin.ImageFileDirectory_v1, order: str
) -> list[ExifEntry]:
    return [
        ExifEntry(
            tag_id=tag_id,
            type_code=directory.tagtype[tag_id],
            raw_bytes=bytes(raw),
            byte_order=order,
        )
        for tag_id, raw in directory.tagdata.items()
    ]


def read_exif_entries(exif_bytes: bytes | None) -> list[ExifEntry]:
    """
    Read the raw directory entries from an EXIF block.

    Pillow parses IFD0 and the EXIF and GPS sub-directories it points to.
    Structural damage ends a directory early; whatever was read up to that
    point is returned.

    Args:
        exif_bytes: EXIF payload, with or without the "Exif\\0\\0" prefix

    Returns:
        Entries of IFD0, then the EXIF sub-directory, then the GPS one
    """
    if not exif_bytes:
        return []

    tiff = exif_bytes[len(EXIF_HEADER) :] if exif_bytes.startswith(EXIF_HEADER) else exif_bytes
    if len(tiff) < 8:
        return []

    fp = io.BytesIO(tiff)
    head = fp.read(8)
    try:
        ifd0 = TiffImagePlugin.ImageFileDirectory_v1(head)
    except (SyntaxError, struct.error) as e:
        logger.debug(f"EXIF block is not a TIFF structure: {e}")
        return []

    order = "<" if ifd0.prefix == b"II" else ">"
    byteorder = "little" if order == "<" else "big"
    visited = {ifd0.next}

    entries: list[ExifEntry] = []
    try:
        fp.seek(ifd0.next)
        ifd0.load(fp)
        entries.extend(_directory_entries(ifd0, order))

        for pointer_tag in (EXIF_IFD_POINTER, GPS_IFD_POINTER):
            raw = ifd0.tagdata.get(pointer_tag)
            if raw is None or len(raw) != 4:
                continue
            offset = int.from_bytes(raw, byteorder)
            if offset in visited:
                continue
            visited.add(offset)
            entries.extend(_directory_entries(_load_directory(fp, head, offset), order))

    except (OSError, ValueError, struct.error) as e:
        logger.debug(f"Stopped reading malformed EXIF block: {e}")

    return entries
