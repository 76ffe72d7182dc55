"""Tests for field normalization and the free-text height parser."""

import math

import pytest

from src.qualification.normalizer import (
    clean_str,
    normalize_activity,
    normalize_email,
    normalize_extraction,
    normalize_height,
    normalize_lift_type,
    normalize_positive_int,
    normalize_terrain,
    parse_height,
)
from src.schemas.extraction import ExtractionResult
from src.schemas.qualification import Activity, LiftType, QualificationField, Terrain


class TestScalars:

    def test_clean_str(self):
        assert clean_str("  Monterrey ") == "Monterrey"
        assert clean_str("   ") is None
        assert clean_str("") is None
        assert clean_str(14) is None
        assert clean_str(None) is None

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("BRAZO", LiftType.ARM),
            ("brazo articulado", LiftType.ARM),
            ("arm", LiftType.ARM),
            ("Tijera", LiftType.SCISSOR),
            ("SCISSOR", LiftType.SCISSOR),
            ("grua", None),
            ("", None),
            (None, None),
        ],
    )
    def test_lift_type(self, raw, expected):
        assert normalize_lift_type(raw) == expected

    def test_activity_and_terrain(self):
        assert normalize_activity("pintura") == Activity.PAINTING
        assert normalize_activity("GENERAL") == Activity.GENERAL
        assert normalize_activity("soldadura") is None
        assert normalize_terrain("piso firme") == Terrain.FIRM_GROUND
        assert normalize_terrain("piso-firme") == Terrain.FIRM_GROUND
        assert normalize_terrain("terracería") == Terrain.UNPAVED
        assert normalize_terrain("UNPAVED") == Terrain.UNPAVED
        assert normalize_terrain("lodo") is None

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (5, 5),
            (5.0, 5),
            ("7", 7),
            (" 30 ", 30),
            (2.5, None),
            (0, None),
            (-3, None),
            (True, None),
            ("cinco", None),
            (math.inf, None),
            (math.nan, None),
            ("²", None),
            ("³", None),
            ("١٢", None),
            ("9" * 400, None),
        ],
    )
    def test_positive_int(self, raw, expected):
        assert normalize_positive_int(raw) == expected

    def test_height_taken_as_provided(self):
        assert normalize_height(14, None) == (14.0, None)
        assert normalize_height(None, 45) == (None, 45)
        # Not re-derived from each other
        assert normalize_height(14, 10) == (14.0, 10)

    def test_height_invalid_units(self):
        assert normalize_height(0, -4) == (None, None)
        assert normalize_height(math.inf, 45.5) == (None, None)
        assert normalize_height(None, "³") == (None, None)

    def test_email(self):
        assert normalize_email("  Ana@Empresa.MX ") == "ana@empresa.mx"
        assert normalize_email("ana@empresa") is None
        assert normalize_email("no tengo") is None
        assert normalize_email(None) is None


class TestParseHeight:

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("14m", (14.0, 46)),
            ("14 metros", (14.0, 46)),
            ("necesito como 12,5 mts", (12.5, 41)),
            ("45ft", (13.7, 45)),
            ("45 pies", (13.7, 45)),
            ("14", (14.0, 46)),
            ("25", (25.0, 82)),
            ("45", (13.7, 45)),
        ],
    )
    def test_units(self, text, expected):
        assert parse_height(text) == expected

    @pytest.mark.parametrize("text", ["", None, "alto", "70 metros", "250 pies", "0", "mañana"])
    def test_unparseable(self, text):
        assert parse_height(text) == (None, None)


class TestNormalizeExtraction:

    def test_none_result(self):
        fields = normalize_extraction(None)
        assert fields.qualification == {}
        assert fields.rejected == set()
        assert fields.name is None

    def test_full_extraction(self):
        result = ExtractionResult(
            name=" Sergio ",
            height_m=14,
            type="BRAZO",
            activity="PINTURA",
            terrain="PISO_FIRME",
            city="Saltillo",
            duration_days=5,
            email="SERGIO@MAIL.COM",
        )
        fields = normalize_extraction(result)

        assert fields.name == "Sergio"
        assert fields.email == "sergio@mail.com"
        assert fields.qualification == {
            "height_meters": 14.0,
            "lift_type": LiftType.ARM,
            "activity": Activity.PAINTING,
            "terrain": Terrain.FIRM_GROUND,
            "city": "Saltillo",
            "duration_days": 5,
        }
        assert fields.rejected == set()

    def test_rejected_values_are_reported(self):
        result = ExtractionResult(
            type="GRUA",
            duration_days=2.5,
            height_m=-1,
            email="sin-correo",
            terrain="",
        )
        fields = normalize_extraction(result)

        assert fields.qualification == {}
        assert fields.rejected == {
            QualificationField.LIFT_TYPE,
            QualificationField.DURATION_DAYS,
            QualificationField.HEIGHT,
            QualificationField.CONTACT_EMAIL,
        }

    def test_empty_strings_never_stored(self):
        fields = normalize_extraction(ExtractionResult(city="   ", name=""))
        assert "city" not in fields.qualification
        assert fields.name is None


class TestExtractionResult:
    """Boundary validation of extractor payloads."""

    def test_wrong_shapes_become_null(self):
        result = ExtractionResult.model_validate(
            {
                "name": 42,
                "height_m": "14",
                "height_ft": True,
                "type": ["BRAZO"],
                "duration_days": "cinco",
                "confidence": 3,
                "missing": ["city", 7, " ", "terrain"],
                "unexpected": "ignored",
            }
        )
        assert result.name is None
        assert result.height_m == 14.0
        assert result.height_ft is None
        assert result.type is None
        assert result.duration_days is None
        assert result.confidence == 1.0
        assert result.missing_fields == ["city", "terrain"]
