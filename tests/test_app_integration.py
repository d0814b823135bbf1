from __future__ import annotations

import base64
import json
from pathlib import Path

import numpy as np
import pytest

from rngvalidator import RandomnessValidator, ValidateRequest, validate
from rngvalidator.config import load_config
from rngvalidator.errors import InvalidRequestError


def _dice_rolls(count: int, seed: int = 2024) -> str:
    rng = np.random.default_rng(seed)
    return ",".join(str(v) for v in rng.integers(1, 7, size=count))


def _bytes_numbers(count: int, seed: int = 99) -> str:
    rng = np.random.default_rng(seed)
    values = [0, *rng.integers(0, 256, size=count - 1).tolist()]
    return "\n".join(str(v) for v in values)


def test_letters_are_rejected() -> None:
    result = validate("1,2,abc")

    assert result.valid is False
    assert result.quality_score == 0.0
    assert result.error_code == "InvalidCharacter"
    assert result.tests == ()


def test_nonzero_minimum_without_range_is_rejected() -> None:
    result = validate("1,2,3")

    assert result.error_code == "RangeRequired"
    assert "range_min" in result.message


def test_dice_rolls_with_range_run_nist_suite() -> None:
    result = validate(_dice_rolls(600), range_min=1, range_max=6)

    assert result.error_code is None
    assert result.fallback_used is False
    # ceil(600 * log2(6)) bits
    assert result.bit_count == 1551
    assert result.tier is not None and result.tier.level == 2
    assert result.total_tests == len(result.tests) > 0
    assert result.message == (
        f"Analyzed 1551 bits using {result.total_tests} NIST tests "
        f"({result.tests_passed}/{result.total_tests} passed)"
    )
    assert result.raw_output.startswith("NIST Statistical Test Suite - Results")
    assert 0.0 <= result.quality_score <= 1.0
    assert result.started_at is not None
    assert result.duration is not None


def test_byte_values_use_fixed_width() -> None:
    result = validate(_bytes_numbers(200))

    assert result.bit_count == 1600
    assert [t.name for t in result.tests] == sorted(t.name for t in result.tests)


def test_base64_input_ignores_range(caplog: pytest.LogCaptureFixture) -> None:
    payload = base64.b64encode(np.random.default_rng(5).bytes(64)).decode("ascii")

    with caplog.at_level("WARNING"):
        result = validate(payload, input_format="base64", range_min=1, range_max=6)

    assert result.error_code is None
    assert result.bit_count == 512
    assert "ignored for base64 input" in caplog.text


def test_small_input_switches_to_fallback() -> None:
    result = validate("0,255,17")

    assert result.fallback_used is True
    assert result.tier is None
    assert result.bit_count == 24
    assert result.total_tests == 6
    assert result.message.startswith(
        "Insufficient data for NIST tests: 24 bits provided, 100 required (76 more bits, ~10 more numbers)."
    )
    assert result.message.endswith(f"Ran 6 enhanced statistical tests ({result.tests_passed}/6 passed)")
    assert result.quality_score == pytest.approx(result.tests_passed / 6)
    assert result.raw_output.startswith("Enhanced Statistical Analysis (Small Dataset)")


def test_small_base64_fallback_omits_number_hint() -> None:
    result = validate("AAEC", input_format="base64")

    assert result.fallback_used is True
    assert "(76 more bits). Ran 6" in result.message


def test_debug_dump_via_request(tmp_path: Path) -> None:
    config_path = tmp_path / "config.ini"
    config_path.write_text("[debug]\ndirectory = dumps\n", encoding="utf-8")
    validator = RandomnessValidator(load_config(config_path))

    result = validator.validate(ValidateRequest(numbers="0,1,2,3", debug_log=True))

    assert result.debug_file is not None
    assert result.debug_file.parent == (tmp_path / "dumps").resolve()
    assert "# Total bits: 32" in result.debug_file.read_text(encoding="utf-8")


def test_debug_dump_via_config(tmp_path: Path) -> None:
    config_path = tmp_path / "config.ini"
    config_path.write_text("[debug]\nwrite_bitstream = true\n", encoding="utf-8")

    result = validate("0,1,2,3", config=load_config(config_path))

    assert result.debug_file is not None
    assert result.debug_file.parent == (tmp_path / "debug").resolve()


def test_no_debug_dump_by_default() -> None:
    assert validate("0,1,2,3").debug_file is None


def test_strict_validity_threshold(tmp_path: Path) -> None:
    config_path = tmp_path / "config.ini"
    config_path.write_text("[validation]\nvalidity_threshold = 1.0\n", encoding="utf-8")

    result = validate(_bytes_numbers(200), config=load_config(config_path))

    assert result.valid is (result.quality_score >= 1.0)


def test_to_dict_is_json_serialisable() -> None:
    result = validate(_dice_rolls(100), range_min=1, range_max=6)

    payload = json.loads(json.dumps(result.to_dict()))

    assert payload["bit_count"] == result.bit_count
    assert payload["tier"]["level"] == 1
    assert len(payload["tests"]) == result.total_tests
    assert {"name", "passed", "p_value", "p_values", "description"} <= set(payload["tests"][0])


def test_request_from_mapping() -> None:
    request = ValidateRequest.from_mapping(
        {"numbers": "1,2", "input_format": "numbers", "range_min": 1, "range_max": 6}
    )

    assert request.range_min == 1
    assert request.bit_width is None
    assert request.debug_log is False


@pytest.mark.parametrize(
    "payload",
    [
        {"numbers": 12},
        {"numbers": "1", "range_min": -1},
        {"numbers": "1", "bit_width": True},
        {"numbers": "1", "debug_log": "yes"},
        {"numbers": "1", "input_format": "hex"},
    ],
)
def test_request_from_mapping_rejects_bad_fields(payload: dict) -> None:
    with pytest.raises(InvalidRequestError):
        ValidateRequest.from_mapping(payload)


def test_debug_dump_failure_is_logged(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    def _fail(*args, **kwargs):
        raise OSError("read-only file system")

    monkeypatch.setattr("rngvalidator.app.write_bits_to_debug_file", _fail)

    with caplog.at_level("WARNING"):
        result = validate("0,1,2,3", debug_log=True)

    assert result.error_code is None
    assert result.debug_file is None
    assert "Failed to write debug file" in caplog.text


@pytest.mark.parametrize(
    "numbers, input_format, code",
    [
        ("", "numbers", "EmptyInput"),
        ("4294967296", "numbers", "NumericOverflow"),
        ("1," + "9" * 5000, "numbers", "NumericOverflow"),
        ("!!!not-base64!!!", "base64", "InvalidEncoding"),
    ],
)
def test_malformed_input_is_rejected(numbers: str, input_format: str, code: str) -> None:
    result = validate(numbers, input_format=input_format)

    assert result.valid is False
    assert result.quality_score == 0.0
    assert result.error_code == code


def test_zero_padded_numbers_are_accepted() -> None:
    result = validate("0" * 5000 + "7,0,1")

    assert result.error_code is None
    assert result.bit_count == 24


def test_range_encoding_length() -> None:
    result = validate("1,50,100", range_min=1, range_max=100)

    assert result.error_code is None
    assert 16 <= result.bit_count <= 24


@pytest.mark.parametrize(
    "numbers, input_format, bit_count",
    [("SGVsbG8=", "base64", 40), ("0,42", "numbers", 16)],
)
def test_encoded_bit_counts(numbers: str, input_format: str, bit_count: int) -> None:
    assert validate(numbers, input_format=input_format).bit_count == bit_count


def test_single_value_range_goes_to_fallback() -> None:
    result = validate("5,5,5", range_min=5, range_max=5)

    assert result.error_code is None
    assert result.bit_count == 0
    assert result.fallback_used is True
    assert result.total_tests == 6
