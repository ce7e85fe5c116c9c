"""Per-tag formatting rules.

RULES maps a tag id to the function that renders its display value. Tags
sharing a rule (a primary tag and its thumbnail alias) point at the same
function. Tags without an entry use generic().
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from imgprops.core.modules.decoder.decoder import decode_text
from imgprops.core.modules.decoder.models import DecodedValue, Empty, Multiple, Opaque, Scalar, Single, components
from imgprops.core.modules.pipeline.models import DisplayValue
from imgprops.errors import FormatError
from imgprops.utils import format_number


@dataclass(frozen=True)
class RuleInput:
    """Everything a rule may look at."""

    tag_id: int
    tag_name: str
    decoded: DecodedValue
    raw: bytes | None


Rule = Callable[[RuleInput], DisplayValue]


def unwrap(values: tuple[Scalar, ...]) -> DisplayValue:
    """None for no values, the bare value for one, the tuple otherwise."""
    match len(values):
        case 0:
            return None
        case 1:
            return values[0]
        case _:
            return values


def generic(item: RuleInput) -> DisplayValue:
    match item.decoded:
        case Empty():
            return None
        case Single(value=value):
            return value
        case Multiple(values=values):
            return values
        case Opaque(value=value):
            return value  # type: ignore[return-value]


def _first(item: RuleInput) -> Scalar:
    values = components(item.decoded)
    if not values:
        raise FormatError(f"{item.tag_name} has no value to format", tag_id=item.tag_id)
    return values[0]


def _number(item: RuleInput) -> float:
    value = _first(item)
    if isinstance(value, str):
        raise FormatError(f"{item.tag_name} expects a numeric value, got '{value}'", tag_id=item.tag_id)
    return value


def enumeration(labels: Mapping[Scalar, str]) -> Rule:
    """Rule mapping every component through a label table; unmapped values render as their string form."""

    def rule(item: RuleInput) -> DisplayValue:
        return unwrap(tuple(labels.get(value, str(value)) for value in components(item.decoded)))

    return rule


def flags(labels: Mapping[int, str]) -> Rule:
    """Rule listing the label of every set bit, lowest bit first."""

    def rule(item: RuleInput) -> DisplayValue:
        value = int(_number(item))
        return tuple(label for bit, label in sorted(labels.items()) if value & (1 << bit))

    return rule


# Enumeration tables

COMPRESSION = {
    1: "Uncompressed",
    2: "CCITT 1D",
    3: "T4/Group 3 Fax",
    4: "T6/Group 4 Fax",
    5: "LZW",
    6: "JPEG (old-style)",
    7: "JPEG",
    8: "Adobe Deflate",
    9: "JBIG B&W",
    10: "JBIG Color",
    99: "JPEG",
    262: "Kodak 262",
    32766: "Next",
    32767: "Sony ARW Compressed",
    32769: "Packed RAW",
    32770: "Samsung SRW Compressed",
    32771: "CCIRLEW",
    32772: "Samsung SRW Compressed 2",
    32773: "PackBits",
    32809: "Thunderscan",
    32867: "Kodak KDC Compressed",
    32895: "IT8CTPAD",
    32896: "IT8LW",
    32897: "IT8MP",
    32898: "IT8BL",
    32908: "PixarFilm",
    32909: "PixarLog",
    32946: "Deflate",
    32947: "DCS",
    34661: "JBIG",
    34676: "SGILog",
    34677: "SGILog24",
    34712: "JPEG 2000",
    34713: "Nikon NEF Compressed",
    34715: "JBIG2 TIFF FX",
    34892: "Lossy JPEG",
    34925: "LZMA2",
    34926: "Zstd",
    34927: "WebP",
    34933: "PNG",
    34934: "JPEG XR",
    65000: "Kodak DCR Compressed",
    65535: "Pentax PEF Compressed",
}

PHOTOMETRIC_INTERPRETATION = {
    0: "WhiteIsZero",
    1: "BlackIsZero",
    2: "RGB",
    3: "RGB Palette",
    4: "Transparency Mask",
    5: "CMYK",
    6: "YCbCr",
    8: "CIELab",
    9: "ICCLab",
    10: "ITULab",
    32803: "Color Filter Array",
    32844: "Pixar LogL",
    32845: "Pixar LogLuv",
    34892: "Linear Raw",
}

THRESHHOLDING = {
    1: "No dithering or halftoning",
    2: "Ordered dither or halftone",
    3: "Randomized dither",
}

FILL_ORDER = {
    1: "Normal",
    2: "Reversed",
}

ORIENTATION = {
    1: "Horizontal (normal) (top left)",
    2: "Mirror horizontal (top right)",
    3: "Rotate 180° (bottom right)",
    4: "Mirror vertical (bottom left)",
    5: "Mirror horizontal and rotate 270° CW (left top)",
    6: "Rotate 90° CW (right top)",
    7: "Mirror horizontal and rotate 90° CW (right bottom)",
    8: "Rotate 270° CW (left bottom)",
}

PLANAR_CONFIGURATION = {
    1: "Chunky",
    2: "Planar",
}

GRAY_RESPONSE_UNIT = {
    1: "0.1",
    2: "0.001",
    3: "0.0001",
    4: "1e-05",
    5: "1e-06",
}

RESOLUTION_UNIT = {
    1: "None",
    2: "inches",
    3: "cm",
}

PREDICTOR = {
    1: "None",
    2: "Horizontal differencing",
    3: "Floating point",
    34892: "Horizontal difference X2",
    34893: "Horizontal difference X4",
    34894: "Floating point X2",
    34895: "Floating point X4",
}

INK_SET = {
    1: "CMYK",
    2: "Not CMYK",
}

EXTRA_SAMPLES = {
    0: "Unspecified",
    1: "Associated Alpha",
    2: "Unassociated Alpha",
}

SAMPLE_FORMAT = {
    1: "Unsigned",
    2: "Signed",
    3: "Float",
    4: "Undefined",
    5: "Complex int",
    6: "Complex float",
}

JPEG_PROCESS = {
    1: "Baseline",
    14: "Lossless",
}

YCBCR_POSITIONING = {
    1: "Centered",
    2: "Co-sited",
}

YCBCR_SUBSAMPLING = {
    (1, 1): "YCbCr4:4:4 (1 1)",
    (1, 2): "YCbCr4:4:0 (1 2)",
    (1, 4): "YCbCr4:4:1 (1 4)",
    (2, 1): "YCbCr4:2:2 (2 1)",
    (2, 2): "YCbCr4:2:0 (2 2)",
    (2, 4): "YCbCr4:2:1 (2 4)",
    (4, 1): "YCbCr4:1:1 (4 1)",
    (4, 2): "YCbCr4:1:0 (4 2)",
}

RENDERING_INTENT = {
    0: "Perceptual",
    1: "Relative Colorimetric",
    2: "Saturation",
    3: "Absolute Colorimetric",
}

PIXELS_PER_UNIT = {
    1: "Pixels per inch",
    2: "Pixels per centimeter",
}

LENGTH_UNIT = {
    1: "Inches",
    2: "Centimeters",
    3: "Points",
    4: "Picas",
    5: "Columns",
}

HALFTONE_LPI_UNIT = {
    1: "Lines per inch",
    2: "Lines per centimeter",
}

HALFTONE_SHAPE = {
    0: "Round",
    1: "Ellipse",
    2: "Line",
    3: "Square",
    4: "Cross",
    6: "Diamond",
}

THUMBNAIL_FORMAT = {
    0: "Raw RGB",
    1: "JPEG",
}

PIXEL_UNIT = {
    0: "Unspecified",
    1: "Meter",
}

EXPOSURE_PROGRAM = {
    0: "Not Defined",
    1: "Manual",
    2: "Program AE",
    3: "Aperture-priority AE",
    4: "Shutter speed priority AE",
    5: "Creative (Slow speed)",
    6: "Action (High speed)",
    7: "Portrait",
    8: "Landscape",
}

METERING_MODE = {
    0: "Unknown",
    1: "Average",
    2: "Center-weighted average",
    3: "Spot",
    4: "Multi-spot",
    5: "Multi-segment",
    6: "Partial",
    255: "Other",
}

LIGHT_SOURCE = {
    0: "Unknown",
    1: "Daylight",
    2: "Fluorescent",
    3: "Tungsten (Incandescent)",
    4: "Flash",
    9: "Fine Weather",
    10: "Cloudy",
    11: "Shade",
    12: "Daylight Fluorescent",
    13: "Day White Fluorescent",
    14: "Cool White Fluorescent",
    15: "White Fluorescent",
    16: "Warm White Fluorescent",
    17: "Standard Light A",
    18: "Standard Light B",
    19: "Standard Light C",
    20: "D55",
    21: "D65",
    22: "D75",
    23: "D50",
    24: "ISO Studio Tungsten",
    255: "Other",
}

FLASH = {
    0x00: "No Flash",
    0x01: "Fired",
    0x05: "Fired, Return not detected",
    0x07: "Fired, Return detected",
    0x08: "On, Did not fire",
    0x09: "On, Fired",
    0x0D: "On, Return not detected",
    0x0F: "On, Return detected",
    0x10: "Off, Did not fire",
    0x14: "Off, Did not fire, Return not detected",
    0x18: "Auto, Did not fire",
    0x19: "Auto, Fired",
    0x1D: "Auto, Fired, Return not detected",
    0x1F: "Auto, Fired, Return detected",
    0x20: "No flash function",
    0x30: "Off, No flash function",
    0x41: "Fired, Red-eye reduction",
    0x45: "Fired, Red-eye reduction, Return not detected",
    0x47: "Fired, Red-eye reduction, Return detected",
    0x49: "On, Red-eye reduction",
    0x4D: "On, Red-eye reduction, Return not detected",
    0x4F: "On, Red-eye reduction, Return detected",
    0x50: "Off, Red-eye reduction",
    0x58: "Auto, Did not fire, Red-eye reduction",
    0x59: "Auto, Fired, Red-eye reduction",
    0x5D: "Auto, Fired, Red-eye reduction, Return not detected",
    0x5F: "Auto, Fired, Red-eye reduction, Return detected",
}

COLOR_SPACE = {
    1: "sRGB",
    2: "Adobe RGB",
    0xFFFD: "Wide Gamut RGB",
    0xFFFE: "ICC Profile",
    0xFFFF: "Uncalibrated",
}

SENSING_METHOD = {
    1: "Not defined",
    2: "One-chip color area",
    3: "Two-chip color area",
    4: "Three-chip color area",
    5: "Color sequential area",
    7: "Trilinear",
    8: "Color sequential linear",
}

FILE_SOURCE = {
    1: "Film scanner",
    2: "Reflection print scanner",
    3: "Digital camera",
}

SCENE_TYPE = {
    1: "Directly photographed",
}

COMPONENTS = {
    0: "-",
    1: "Y",
    2: "Cb",
    3: "Cr",
    4: "R",
    5: "G",
    6: "B",
}

CFA_COLORS = {
    0: "R",
    1: "G",
    2: "B",
    3: "C",
    4: "M",
    5: "Y",
    6: "W",
}

T4_OPTIONS = {
    0: "2-Dimensional encoding",
    1: "Uncompressed",
    2: "Fill bits added",
}

T6_OPTIONS = {
    1: "Uncompressed",
}

GPS_ALTITUDE_REF = {
    0: "Above sea level",
    1: "Below sea level",
}

GPS_LATITUDE_REF = {"N": "North", "S": "South"}
GPS_LONGITUDE_REF = {"E": "East", "W": "West"}
GPS_STATUS = {"A": "Measurement Active", "V": "Measurement Void"}
GPS_MEASURE_MODE = {"2": "2-Dimensional Measurement", "3": "3-Dimensional Measurement"}
GPS_SPEED_REF = {"K": "km/h", "M": "mph", "N": "knots"}
GPS_DIRECTION_REF = {"M": "Magnetic North", "T": "True North"}
GPS_DISTANCE_REF = {"K": "Kilometers", "M": "Miles", "N": "Nautical Miles"}


# Computed formats


def aperture(item: RuleInput) -> DisplayValue:
    """APEX aperture value -> f-number."""
    return f"f/{2 ** (_number(item) / 2):.1f}"


def shutter_speed(item: RuleInput) -> DisplayValue:
    """APEX shutter speed value -> exposure time fraction."""
    value = _number(item)
    if value < 0:
        return "0 sec"
    return f"1/{round(2**value)} sec"


def exposure_time(item: RuleInput) -> DisplayValue:
    value = _number(item)
    if 0 < value < 1.0:
        return f"1/{round(1 / value)} sec"
    return f"{format_number(value)} sec"


def f_number(item: RuleInput) -> DisplayValue:
    value = _number(item)
    if value < 1.0:
        return f"f/{value:.2f}"
    return f"f/{value:.1f}"


def focal_length(item: RuleInput) -> DisplayValue:
    return f"{format_number(_number(item))}mm"


def iso_speed(item: RuleInput) -> DisplayValue:
    return f"ISO {format_number(_number(item))}"


def exposure_bias(item: RuleInput) -> DisplayValue:
    return f"{_number(item):+.2f} EV"


def meters(item: RuleInput) -> DisplayValue:
    return f"{format_number(_number(item))} m"


def gps_version(item: RuleInput) -> DisplayValue:
    return ".".join(str(value) for value in components(item.decoded))


def gps_coordinate(item: RuleInput) -> DisplayValue:
    """Degrees, minutes, seconds -> DDD° MM' SS.SSSS".

    Producers that store fractional minutes (or fractional degrees) and a
    zero seconds component get the fraction carried into the smaller units.
    """
    values = components(item.decoded)
    if len(values) < 3:
        raise FormatError(f"{item.tag_name} needs 3 components, got {len(values)}", tag_id=item.tag_id)
    degrees, minutes, seconds = (float(value) for value in values[:3])

    if seconds == 0 and minutes == 0 and not degrees.is_integer():
        degrees, fraction = divmod(degrees, 1)
        minutes = fraction * 60
    if seconds == 0 and not minutes.is_integer():
        minutes, fraction = divmod(minutes, 1)
        seconds = fraction * 60

    seconds = round(seconds, 4)
    if seconds >= 60:
        minutes, seconds = minutes + 1, 0.0
    if minutes >= 60:
        degrees, minutes = degrees + 1, 0.0

    return f"{int(degrees):03d}° {int(minutes):02d}' {seconds:07.4f}\""


def gps_time(item: RuleInput) -> DisplayValue:
    values = components(item.decoded)
    if len(values) < 3:
        raise FormatError(f"{item.tag_name} needs 3 components, got {len(values)}", tag_id=item.tag_id)
    hours, minutes, seconds = (float(value) for value in values[:3])
    return f"{int(hours):02d}:{int(minutes):02d}:{seconds:06.3f}+0"


def ycbcr_subsampling(item: RuleInput) -> DisplayValue:
    values = components(item.decoded)
    key = tuple(int(value) for value in values[:2])
    return YCBCR_SUBSAMPLING.get(key, " ".join(str(value) for value in values))


def components_configuration(item: RuleInput) -> DisplayValue:
    if not item.raw:
        return generic(item)
    return ", ".join(COMPONENTS.get(b, str(b)) for b in item.raw)


def file_source(item: RuleInput) -> DisplayValue:
    if not item.raw:
        return generic(item)
    # Sigma cameras write the source as a 4-byte value
    if len(item.raw) == 4:
        return "Sigma Digital camera"
    return FILE_SOURCE.get(item.raw[0], str(item.raw[0]))


def scene_type(item: RuleInput) -> DisplayValue:
    if not item.raw:
        return generic(item)
    return SCENE_TYPE.get(item.raw[0], str(item.raw[0]))


def _cfa_dimensions(raw: bytes) -> tuple[int, int]:
    columns, rows = int.from_bytes(raw[0:2], "little"), int.from_bytes(raw[2:4], "little")
    if columns * rows != len(raw) - 4:
        # Written in Motorola byte order
        columns, rows = int.from_bytes(raw[0:2], "big"), int.from_bytes(raw[2:4], "big")
    return columns, rows


def cfa_pattern(item: RuleInput) -> DisplayValue:
    """Color filter array grid -> one string of color letters per row."""
    raw = item.raw
    if not raw or len(raw) < 4:
        return generic(item)
    columns, _ = _cfa_dimensions(raw)
    if columns == 0:
        raise FormatError(f"{item.tag_name} declares zero columns", tag_id=item.tag_id)
    colors = "".join(CFA_COLORS.get(b, "?") for b in raw[4:])
    return tuple(colors[i : i + columns] for i in range(0, len(colors), columns))


_USER_COMMENT_CODECS = {
    b"ASCII": None,
    b"UNICODE": "utf-16-le",
    b"JIS": "shift_jis",
}


def user_comment(item: RuleInput) -> DisplayValue:
    """Comment text behind its 8-byte character code header."""
    raw = item.raw
    if not raw or len(raw) < 8:
        return generic(item)
    header, body = raw[:8].rstrip(b"\x00 "), raw[8:]
    codec = _USER_COMMENT_CODECS.get(header)
    text = body.decode(codec, errors="replace") if codec else decode_text(body)
    return text.strip("\x00 \t\r\n")


RULES: dict[int, Rule] = {
    0x0000: gps_version,
    0x0001: enumeration(GPS_LATITUDE_REF),
    0x0002: gps_coordinate,
    0x0003: enumeration(GPS_LONGITUDE_REF),
    0x0004: gps_coordinate,
    0x0005: enumeration(GPS_ALTITUDE_REF),
    0x0006: meters,
    0x0007: gps_time,
    0x0009: enumeration(GPS_STATUS),
    0x000A: enumeration(GPS_MEASURE_MODE),
    0x000C: enumeration(GPS_SPEED_REF),
    0x000E: enumeration(GPS_DIRECTION_REF),
    0x0010: enumeration(GPS_DIRECTION_REF),
    0x0013: enumeration(GPS_LATITUDE_REF),
    0x0014: gps_coordinate,
    0x0015: enumeration(GPS_LONGITUDE_REF),
    0x0016: gps_coordinate,
    0x0017: enumeration(GPS_DIRECTION_REF),
    0x0019: enumeration(GPS_DISTANCE_REF),
    0x0103: enumeration(COMPRESSION),
    0x0106: enumeration(PHOTOMETRIC_INTERPRETATION),
    0x0107: enumeration(THRESHHOLDING),
    0x010A: enumeration(FILL_ORDER),
    0x0112: enumeration(ORIENTATION),
    0x011C: enumeration(PLANAR_CONFIGURATION),
    0x0122: enumeration(GRAY_RESPONSE_UNIT),
    0x0124: flags(T4_OPTIONS),
    0x0125: flags(T6_OPTIONS),
    0x0128: enumeration(RESOLUTION_UNIT),
    0x013D: enumeration(PREDICTOR),
    0x014C: enumeration(INK_SET),
    0x0152: enumeration(EXTRA_SAMPLES),
    0x0153: enumeration(SAMPLE_FORMAT),
    0x0200: enumeration(JPEG_PROCESS),
    0x0212: ycbcr_subsampling,
    0x0213: enumeration(YCBCR_POSITIONING),
    0x0303: enumeration(RENDERING_INTENT),
    0x5001: enumeration(PIXELS_PER_UNIT),
    0x5002: enumeration(PIXELS_PER_UNIT),
    0x5003: enumeration(LENGTH_UNIT),
    0x5004: enumeration(LENGTH_UNIT),
    0x500B: enumeration(HALFTONE_LPI_UNIT),
    0x500D: enumeration(HALFTONE_SHAPE),
    0x5012: enumeration(THUMBNAIL_FORMAT),
    0x5023: enumeration(COMPRESSION),
    0x5024: enumeration(PHOTOMETRIC_INTERPRETATION),
    0x5029: enumeration(ORIENTATION),
    0x502F: enumeration(PLANAR_CONFIGURATION),
    0x5030: enumeration(RESOLUTION_UNIT),
    0x5038: ycbcr_subsampling,
    0x5039: enumeration(YCBCR_POSITIONING),
    0x5110: enumeration(PIXEL_UNIT),
    0x829A: exposure_time,
    0x829D: f_number,
    0x8822: enumeration(EXPOSURE_PROGRAM),
    0x8827: iso_speed,
    0x9101: components_configuration,
    0x9201: shutter_speed,
    0x9202: aperture,
    0x9204: exposure_bias,
    0x9205: aperture,
    0x9206: meters,
    0x9207: enumeration(METERING_MODE),
    0x9208: enumeration(LIGHT_SOURCE),
    0x9209: enumeration(FLASH),
    0x920A: focal_length,
    0x9286: user_comment,
    0xA001: enumeration(COLOR_SPACE),
    0xA210: enumeration(RESOLUTION_UNIT),
    0xA217: enumeration(SENSING_METHOD),
    0xA300: file_source,
    0xA301: scene_type,
    0xA302: cfa_pattern,
}

# Tags whose payload is vendor-proprietary: both decoded and display values are dropped
SUPPRESSED_TAGS = frozenset({0x927C})
