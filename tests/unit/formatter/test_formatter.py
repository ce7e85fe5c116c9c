"""Tests for the semantic formatter and its rule table."""

import pytest

from imgprops.core.modules.decoder.models import Empty, Multiple, Single
from imgprops.core.modules.formatter.formatter import Formatter
from imgprops.core.modules.formatter.rules import RULES, generic
from imgprops.core.modules.pipeline.models import DecodedEntry
from imgprops.errors import FormatError


@pytest.fixture
def formatter():
    return Formatter()


class TestGenericFallback:
    """Tests for tags without a dedicated rule."""

    def test_empty_is_none(self, formatter):
        """Test that no components display as None."""
        assert formatter.format(0x0116, "RowsPerStrip", Empty()) is None

    def test_single_is_unwrapped(self, formatter):
        """Test that one component displays bare."""
        assert formatter.format(0x0116, "RowsPerStrip", Single(16)) == 16

    def test_multiple_is_sequence(self, formatter):
        """Test that several components display as the full sequence."""
        assert formatter.format(0x0102, "BitsPerSample", Multiple((8, 8, 8))) == (8, 8, 8)

    def test_strings_are_trimmed(self, formatter):
        """Test that surrounding whitespace is removed from text."""
        assert formatter.format(0x010F, "EquipMake", Single("  Canon  ")) == "Canon"

    def test_unknown_tag_uses_fallback(self, formatter):
        """Test that an id outside the rule table uses generic()."""
        assert formatter.rule_for(0xBEEF) is generic


class TestEnumerations:
    """Tests for enumeration lookups."""

    @pytest.mark.parametrize("tag_id", [274, 0x5029])
    def test_orientation(self, formatter, tag_id):
        """Test orientation labels for the primary tag and its thumbnail alias."""
        assert formatter.format(tag_id, "Orientation", Single(1)) == "Horizontal (normal) (top left)"
        assert formatter.format(tag_id, "Orientation", Single(6)) == "Rotate 90° CW (right top)"

    @pytest.mark.parametrize("tag_id", [0x0103, 0x5023])
    def test_compression_shared_rule(self, formatter, tag_id):
        """Test that Compression and ThumbnailCompression share a rule."""
        assert formatter.format(tag_id, "Compression", Single(6)) == "JPEG (old-style)"

    @pytest.mark.parametrize(
        "tag_id",
        [0x0103, 0x0106, 0x010A, 0x0112, 0x011C, 0x0128, 0x013D, 0x0153, 0x8822, 0x9207, 0x9208, 0xA001],
    )
    def test_unmapped_value_renders_decimal(self, formatter, tag_id):
        """Test that values missing from a table display as their decimal string."""
        assert formatter.format(tag_id, "Tag", Single(4242)) == "4242"

    def test_exposure_program(self, formatter):
        assert formatter.format(0x8822, "ExifExposureProg", Single(3)) == "Aperture-priority AE"

    def test_metering_mode(self, formatter):
        assert formatter.format(0x9207, "ExifMeteringMode", Single(5)) == "Multi-segment"

    def test_light_source(self, formatter):
        assert formatter.format(0x9208, "ExifLightSource", Single(21)) == "D65"

    def test_flash(self, formatter):
        assert formatter.format(0x9209, "ExifFlash", Single(0x19)) == "Auto, Fired"

    def test_color_space(self, formatter):
        assert formatter.format(0xA001, "ExifColorSpace", Single(0xFFFF)) == "Uncalibrated"

    def test_resolution_unit(self, formatter):
        assert formatter.format(0x0128, "ResolutionUnit", Single(2)) == "inches"

    def test_sample_format_per_sample(self, formatter):
        """Test that multi-valued enumerations map every component."""
        assert formatter.format(0x0153, "SampleFormat", Multiple((1, 3))) == ("Unsigned", "Float")

    def test_gps_reference_letters(self, formatter):
        """Test text-coded GPS references and their pass-through fallback."""
        assert formatter.format(0x0001, "GpsLatitudeRef", Single("N")) == "North"
        assert formatter.format(0x0003, "GpsLongitudeRef", Single("W")) == "West"
        assert formatter.format(0x0001, "GpsLatitudeRef", Single("X")) == "X"

    def test_gps_altitude_ref(self, formatter):
        assert formatter.format(0x0005, "GpsAltitudeRef", Single(1)) == "Below sea level"

    def test_ycbcr_subsampling(self, formatter):
        assert formatter.format(0x0212, "YCbCrSubsampling", Multiple((2, 1))) == "YCbCr4:2:2 (2 1)"
        assert formatter.format(0x0212, "YCbCrSubsampling", Multiple((3, 3))) == "3 3"


class TestComputedFormats:
    """Tests for rules computing a display value."""

    def test_exposure_time_fraction(self, formatter):
        """Test that sub-second exposures render as a fraction."""
        assert formatter.format(0x829A, "ExifExposureTime", Single(0.01)) == "1/100 sec"

    def test_exposure_time_seconds(self, formatter):
        """Test that exposures of a second or more render in seconds."""
        assert formatter.format(0x829A, "ExifExposureTime", Single(2.0)) == "2 sec"
        assert formatter.format(0x829A, "ExifExposureTime", Single(2)) == "2 sec"
        assert formatter.format(0x829A, "ExifExposureTime", Single(1.5)) == "1.5 sec"

    def test_f_number(self, formatter):
        """Test one decimal place from 1.0 up, two below."""
        assert formatter.format(0x829D, "ExifFNumber", Single(2.8)) == "f/2.8"
        assert formatter.format(0x829D, "ExifFNumber", Single(0.95)) == "f/0.95"

    @pytest.mark.parametrize("tag_id", [0x9202, 0x9205])
    def test_aperture(self, formatter, tag_id):
        """Test that APEX aperture values render as f-numbers."""
        assert formatter.format(tag_id, "ExifAperture", Single(4.0)) == "f/4.0"
        assert formatter.format(tag_id, "ExifAperture", Single(5.0)) == "f/5.7"

    def test_shutter_speed(self, formatter):
        """Test APEX shutter speed values."""
        assert formatter.format(0x9201, "ExifShutterSpeed", Single(7.0)) == "1/128 sec"
        assert formatter.format(0x9201, "ExifShutterSpeed", Single(0.0)) == "1/1 sec"
        assert formatter.format(0x9201, "ExifShutterSpeed", Single(-1.0)) == "0 sec"

    def test_focal_length(self, formatter):
        assert formatter.format(0x920A, "ExifFocalLength", Single(50.0)) == "50mm"
        assert formatter.format(0x920A, "ExifFocalLength", Single(4.2)) == "4.2mm"

    def test_iso(self, formatter):
        assert formatter.format(0x8827, "ExifISOSpeed", Single(200)) == "ISO 200"

    def test_exposure_bias(self, formatter):
        assert formatter.format(0x9204, "ExifExposureBias", Single(-1 / 3)) == "-0.33 EV"

    def test_gps_altitude(self, formatter):
        assert formatter.format(0x0006, "GpsAltitude", Single(112.5)) == "112.5 m"

    def test_gps_version(self, formatter):
        assert formatter.format(0x0000, "GpsVer", Multiple((2, 2, 0, 0))) == "2.2.0.0"


class TestCoordinates:
    """Tests for GPS coordinate and time formatting."""

    @pytest.mark.parametrize("tag_id", [0x0002, 0x0004, 0x0014, 0x0016])
    def test_fractional_minutes_redistributed(self, formatter, tag_id):
        """Test that fractional minutes with zero seconds carry into seconds."""
        assert formatter.format(tag_id, "GpsLatitude", Multiple((40.0, 26.77, 0.0))) == "040° 26' 46.2000\""

    def test_degrees_minutes_seconds(self, formatter):
        """Test a coordinate already in degrees, minutes and seconds."""
        assert formatter.format(0x0004, "GpsLongitude", Multiple((2.0, 17.0, 40.5))) == "002° 17' 40.5000\""

    def test_fractional_degrees_redistributed(self, formatter):
        """Test that fractional degrees with zero minutes and seconds are spread out."""
        assert formatter.format(0x0002, "GpsLatitude", Multiple((40.5, 0.0, 0.0))) == "040° 30' 00.0000\""

    def test_carried_seconds_roll_over(self, formatter):
        """Test that seconds rounding up to 60 carry into the next minute."""
        assert formatter.format(0x0002, "GpsLatitude", Multiple((40.0, 26.999999999, 0.0))) == "040° 27' 00.0000\""

    def test_carried_minutes_roll_over(self, formatter):
        """Test that a minute carry reaching 60 moves into the next degree."""
        assert formatter.format(0x0002, "GpsLatitude", Multiple((40.0, 59.999999999, 0.0))) == "041° 00' 00.0000\""

    def test_missing_component(self, formatter):
        """Test that fewer than three components is a format fault."""
        with pytest.raises(FormatError):
            formatter.format(0x0002, "GpsLatitude", Multiple((40.0, 26.0)))

    def test_gps_time(self, formatter):
        assert formatter.format(0x0007, "GpsGpsTime", Multiple((14.0, 30.0, 5.25))) == "14:30:05.250+0"


class TestBitFlags:
    """Tests for bit-flag decomposition."""

    def test_t4_options(self, formatter):
        """Test that each set bit contributes its label in bit order."""
        assert formatter.format(0x0124, "T4Option", Single(5)) == ("2-Dimensional encoding", "Fill bits added")
        assert formatter.format(0x0124, "T4Option", Single(7)) == (
            "2-Dimensional encoding",
            "Uncompressed",
            "Fill bits added",
        )

    def test_no_flags(self, formatter):
        assert formatter.format(0x0124, "T4Option", Single(0)) == ()

    def test_t6_options(self, formatter):
        assert formatter.format(0x0125, "T6Option", Single(2)) == ("Uncompressed",)


class TestRawByteRules:
    """Tests for rules reading the raw payload."""

    def test_file_source_digital_camera(self, formatter):
        assert formatter.format(0xA300, "ExifFileSource", Single("\x03"), b"\x03") == "Digital camera"

    def test_file_source_sigma(self, formatter):
        """Test that a 4-byte payload is taken as the Sigma signature."""
        assert formatter.format(0xA300, "ExifFileSource", Single("\x03\x00\x00\x00"), b"\x03\x00\x00\x00") == (
            "Sigma Digital camera"
        )

    def test_file_source_scanner(self, formatter):
        assert formatter.format(0xA300, "ExifFileSource", Single("\x01"), b"\x01") == "Film scanner"

    def test_scene_type(self, formatter):
        assert formatter.format(0xA301, "ExifSceneType", Single("\x01"), b"\x01") == "Directly photographed"

    def test_components_configuration(self, formatter):
        raw = bytes([1, 2, 3, 0])
        assert formatter.format(0x9101, "ExifCompConfig", Single("\x01\x02\x03\x00"), raw) == "Y, Cb, Cr, -"

    def test_cfa_pattern(self, formatter):
        """Test that the color grid becomes one letter string per row."""
        raw = bytes([2, 0, 2, 0, 0, 1, 1, 2])
        assert formatter.format(0xA302, "ExifCfaPattern", Single(""), raw) == ("RG", "GB")

    def test_cfa_pattern_motorola_dimensions(self, formatter):
        """Test a grid whose dimensions were written big-endian."""
        raw = bytes([0, 2, 0, 2, 1, 0, 2, 1])
        assert formatter.format(0xA302, "ExifCfaPattern", Single(""), raw) == ("GR", "BG")

    def test_user_comment_ascii(self, formatter):
        raw = b"ASCII\x00\x00\x00Hello world  "
        assert formatter.format(0x9286, "ExifUserComment", Single(""), raw) == "Hello world"

    def test_user_comment_unicode(self, formatter):
        raw = b"UNICODE\x00" + "Grüße".encode("utf-16-le")
        assert formatter.format(0x9286, "ExifUserComment", Single(""), raw) == "Grüße"


class TestApply:
    """Tests for Formatter.apply on whole entries."""

    def test_maker_note_suppressed(self, formatter):
        """Test that the maker note loses both decoded and display values."""
        entry = DecodedEntry(
            id_dec=0x927C,
            tag_name="ExifMakerNote",
            type_code=7,
            type_desc="UNDEFINED",
            length=4,
            raw_bytes=b"Nikon",
            decoded=Single("Nikon"),
        )
        result = formatter.apply(entry)
        assert result.decoded == Empty()
        assert result.display is None

    def test_custom_suppressed_set(self):
        """Test that the suppressed set is configurable and drives both format and apply."""
        formatter = Formatter(suppressed=frozenset({0x010F}))
        assert formatter.is_suppressed(0x010F)
        assert not formatter.is_suppressed(0x927C)
        assert formatter.format(0x010F, "EquipMake", Single("Canon")) is None
        entry = DecodedEntry(0x010F, "EquipMake", 2, "ASCII", 6, b"Canon\x00", Single("Canon"))
        assert formatter.apply(entry).decoded == Empty()

    def test_decoded_text_trimmed(self, formatter):
        """Test that decoded text is trimmed as well as the display value."""
        entry = DecodedEntry(
            id_dec=0x0110,
            tag_name="EquipModel",
            type_code=2,
            type_desc="ASCII",
            length=9,
            decoded=Single(" EOS 5D "),
        )
        result = formatter.apply(entry)
        assert result.decoded == Single("EOS 5D")
        assert result.display == "EOS 5D"

    def test_rule_fault_wrapped(self, formatter):
        """Test that a rule failing on bad input raises FormatError."""
        with pytest.raises(FormatError):
            formatter.format(0x829A, "ExifExposureTime", Single("fast"))

    def test_rules_cover_thumbnail_aliases(self):
        """Test that thumbnail aliases use the same rule as their primary tag."""
        assert RULES[0x0212] is RULES[0x5038]
