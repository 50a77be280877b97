"""Tests for sanitization and model-output validation."""

import pytest

from fakes import VALID_EXPLANATION, fit_payload, search_payload
from plantfit.errors import ErrorKind, OpenRouterError
from plantfit.models import MIN_EXPLANATION_LENGTH, FitResult, PlantCandidate
from plantfit.validation import (
    MAX_INPUT_LENGTH,
    sanitize_text,
    validate_fit_response,
    validate_response,
    validate_search_response,
)


class TestSanitizeText:
    def test_trims(self) -> None:
        assert sanitize_text("  tomato  ") == "tomato"

    def test_strips_angle_brackets(self) -> None:
        assert sanitize_text("<script>alert(1)</script>") == "scriptalert(1)/script"

    def test_folds_newlines(self) -> None:
        assert sanitize_text("Solanum\r\n\nlycopersicum") == "Solanum lycopersicum"

    def test_caps_length(self) -> None:
        assert len(sanitize_text("a" * 500)) == MAX_INPUT_LENGTH

    def test_only_brackets_becomes_empty(self) -> None:
        assert sanitize_text(" <> ") == ""


def _validation_detail(excinfo: pytest.ExceptionInfo[OpenRouterError]) -> str:
    assert excinfo.value.kind is ErrorKind.VALIDATION
    return excinfo.value.detail or ""


class TestSearchResponse:
    def test_valid(self) -> None:
        result = validate_search_response(
            search_payload(("Pomidor", "Solanum lycopersicum"), ("Pomidor koktajlowy", "Solanum lycopersicum var. cerasiforme"))
        )
        assert result == [
            PlantCandidate(name="Pomidor", latin_name="Solanum lycopersicum"),
            PlantCandidate(name="Pomidor koktajlowy", latin_name="Solanum lycopersicum var. cerasiforme"),
        ]

    def test_fields_sanitized(self) -> None:
        result = validate_search_response(search_payload(("  <i>Tomato</i>\n", "Solanum\nlycopersicum")))
        assert result[0].name == "iTomato/i"
        assert result[0].latin_name == "Solanum lycopersicum"

    def test_blank_latin_name_becomes_none(self) -> None:
        result = validate_search_response(search_payload(("Tomato", "   ")))
        assert result[0].latin_name is None

    def test_five_candidates_accepted(self) -> None:
        names = [(f"Plant {i}", f"Genus species{i}") for i in range(5)]
        assert len(validate_search_response(search_payload(*names))) == 5

    def test_six_candidates_rejected(self) -> None:
        names = [(f"Plant {i}", f"Genus species{i}") for i in range(6)]
        with pytest.raises(OpenRouterError) as excinfo:
            validate_search_response(search_payload(*names))
        assert "candidates" in _validation_detail(excinfo)

    def test_zero_candidates_rejected(self) -> None:
        with pytest.raises(OpenRouterError) as excinfo:
            validate_search_response({"candidates": []})
        assert "candidates" in _validation_detail(excinfo)

    def test_wrong_source_rejected(self) -> None:
        with pytest.raises(OpenRouterError) as excinfo:
            validate_search_response({"candidates": [{"name": "Tomato", "latin_name": "S. l.", "source": "human"}]})
        assert "candidates.0.source" in _validation_detail(excinfo)

    def test_all_violations_reported(self) -> None:
        with pytest.raises(OpenRouterError) as excinfo:
            validate_search_response({"candidates": [{"name": "", "source": "ai"}]})
        detail = _validation_detail(excinfo)
        assert "candidates.0.name" in detail
        assert "candidates.0.latin_name" in detail

    def test_name_empty_after_sanitization(self) -> None:
        with pytest.raises(OpenRouterError) as excinfo:
            validate_search_response(search_payload(("<>", "Solanum lycopersicum")))
        assert "candidates.0.name" in _validation_detail(excinfo)

    def test_not_an_object(self) -> None:
        with pytest.raises(OpenRouterError) as excinfo:
            validate_search_response(["Tomato"])
        assert excinfo.value.kind is ErrorKind.VALIDATION
        assert excinfo.value.retryable is False


class TestFitResponse:
    def test_valid(self) -> None:
        result = validate_fit_response(fit_payload())
        assert result == FitResult(
            sunlight_score=5,
            humidity_score=4,
            precip_score=4,
            temperature_score=3,
            overall_score=4,
            explanation=VALID_EXPLANATION,
        )

    def test_score_above_range_names_field(self) -> None:
        with pytest.raises(OpenRouterError) as excinfo:
            validate_fit_response(fit_payload(sunlight_score=6))
        assert "sunlight_score" in _validation_detail(excinfo)

    def test_score_below_range(self) -> None:
        with pytest.raises(OpenRouterError) as excinfo:
            validate_fit_response(fit_payload(overall_score=0))
        assert "overall_score" in _validation_detail(excinfo)

    def test_whole_float_score_accepted(self) -> None:
        result = validate_fit_response(fit_payload(sunlight_score=4.0, overall_score=5.0))
        assert result.sunlight_score == 4
        assert isinstance(result.sunlight_score, int)
        assert result.overall_score == 5

    def test_explanation_length_boundary(self) -> None:
        assert validate_fit_response(fit_payload(explanation="x" * MIN_EXPLANATION_LENGTH))
        with pytest.raises(OpenRouterError):
            validate_fit_response(fit_payload(explanation="x" * (MIN_EXPLANATION_LENGTH - 1)))

    @pytest.mark.parametrize("value", [4.5, "4", True, False, None])
    def test_non_integer_score_rejected(self, value) -> None:
        with pytest.raises(OpenRouterError) as excinfo:
            validate_fit_response(fit_payload(humidity_score=value))
        assert "humidity_score" in _validation_detail(excinfo)

    def test_short_explanation(self) -> None:
        with pytest.raises(OpenRouterError) as excinfo:
            validate_fit_response(fit_payload(explanation="Looks fine."))
        assert "explanation" in _validation_detail(excinfo)

    def test_missing_field(self) -> None:
        payload = fit_payload()
        del payload["precip_score"]
        with pytest.raises(OpenRouterError) as excinfo:
            validate_fit_response(payload)
        assert "precip_score" in _validation_detail(excinfo)


class TestValidateResponse:
    def test_dispatch(self) -> None:
        assert isinstance(validate_response(fit_payload(), "fit"), FitResult)
        assert validate_response(search_payload(("Basil", "Ocimum basilicum")), "search")[0].name == "Basil"

    def test_unknown_task(self) -> None:
        with pytest.raises(ValueError):
            validate_response({}, "translate")  # type: ignore[arg-type]
