"""Tests for pbclient.coercion -- string coercion and form encoding."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from pbclient.coercion import UNSET, coerce, coerce_string, normalize_fields, to_form_fields


class TestCoerceString:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("true", True),
            ("FALSE", False),
            (" True ", True),
            ("null", None),
            ("42", 42),
            ("-7", -7),
            ("0", 0),
            ("3.5", 3.5),
            ("-0.25", -0.25),
        ],
    )
    def test_scalars(self, raw: str, expected: object) -> None:
        result = coerce_string(raw)
        assert result == expected
        assert type(result) is type(expected)

    @pytest.mark.parametrize("raw", ["007", "1e5", "1.", ".5", "+3", "12abc"])
    def test_non_canonical_numbers_stay_strings(self, raw: str) -> None:
        assert coerce_string(raw) == raw

    def test_json_object_and_array(self) -> None:
        assert coerce_string('{"a": [1, 2]}') == {"a": [1, 2]}
        assert coerce_string("[1, \"x\"]") == [1, "x"]

    def test_oversized_integer_stays_string(self) -> None:
        digits = "1" * 5000
        assert coerce_string(digits) == digits
        assert coerce({"n": digits}) == {"n": digits}

    def test_non_ascii_digits_stay_strings(self) -> None:
        # Arabic-Indic and fullwidth digits
        for raw in ["\u0661\u0662", "\uff11\uff12"]:
            assert coerce_string(raw) == raw

    def test_malformed_json_returned_verbatim(self) -> None:
        assert coerce_string("{not json}") == "{not json}"
        assert coerce_string("[1,") == "[1,"

    def test_whitespace_only_preserved(self) -> None:
        assert coerce_string("   ") == "   "
        assert coerce_string("") == ""

    def test_unmatched_string_keeps_original_whitespace(self) -> None:
        assert coerce_string("  hello ") == "  hello "


class TestCoerce:
    def test_recurses_through_mappings_and_lists(self) -> None:
        value = {"a": "1", "b": ["true", {"c": "null"}], "d": ("2.5",)}
        assert coerce(value) == {"a": 1, "b": [True, {"c": None}], "d": [2.5]}

    def test_preserves_key_order(self) -> None:
        value = {"z": "1", "a": "2", "m": "3"}
        assert list(coerce(value)) == ["z", "a", "m"]

    def test_disabled_returns_input(self) -> None:
        value = {"a": "1"}
        assert coerce(value, enabled=False) is value

    def test_dates_become_iso_strings(self) -> None:
        assert coerce(date(2024, 5, 1)) == "2024-05-01"
        assert coerce(datetime(2024, 5, 1, 12, 30)) == "2024-05-01T12:30:00"

    def test_non_string_leaves_pass_through(self) -> None:
        assert coerce(5) == 5
        assert coerce(False) is False

    def test_input_not_mutated(self) -> None:
        value = {"a": ["1"]}
        coerce(value)
        assert value == {"a": ["1"]}


class TestNormalizeFields:
    def test_drops_unset_keeps_none(self) -> None:
        fields = {"title": "Hi", "views": "3", "draft": UNSET, "note": None}
        assert normalize_fields(fields) == {"title": "Hi", "views": 3, "note": None}

    def test_without_coercion(self) -> None:
        assert normalize_fields({"views": "3"}, enabled=False) == {"views": "3"}

    def test_unset_is_falsy_singleton(self) -> None:
        assert not UNSET
        assert repr(UNSET) == "UNSET"
        assert type(UNSET)() is UNSET


class TestToFormFields:
    def test_encoding_rules(self) -> None:
        form = to_form_fields(
            {
                "title": "Hello",
                "views": 3,
                "ratio": 0.5,
                "draft": False,
                "note": None,
                "tags": ["a", "b"],
                "meta": {"k": 1},
                "skip": UNSET,
                "day": date(2024, 1, 2),
            }
        )
        assert form == {
            "title": "Hello",
            "views": "3",
            "ratio": "0.5",
            "draft": "false",
            "note": "",
            "tags": '["a","b"]',
            "meta": '{"k":1}',
            "day": "2024-01-02",
        }

    def test_every_value_is_a_string(self) -> None:
        form = to_form_fields({"a": 1, "b": True, "c": [1], "d": None})
        assert all(isinstance(v, str) for v in form.values())

    def test_structured_values_survive_the_trip_back(self) -> None:
        original = {"meta": {"tags": ["a"], "n": 2}, "list": [1, "x"]}
        form = to_form_fields(original)
        assert {key: coerce(value) for key, value in form.items()} == original
