"""Tests for the constraint engine."""

from datetime import datetime, timedelta, timezone

import pytest

from board.constraints import (
    BooleanString,
    BooleanType,
    ConstraintKind,
    DateTimeRange,
    Email,
    Format,
    IdentifierArray,
    Inclusion,
    Length,
    Numeric,
    ObjectType,
    Polygon,
    Rule,
    Violation,
    evaluate,
    parse_iso8601,
    prettify,
    strict_equals,
)

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def codes(constraint, value, now=NOW):
    return [v.code for v in constraint.check(value, now)]


class TestEvaluate:

    def test_required_missing_field_is_blank(self):
        result = evaluate({"title": Rule(True, Length())}, {})
        assert not result.valid
        assert result.details == {"title": ["Title can't be blank"]}

    def test_none_counts_as_absent(self):
        result = evaluate({"title": Rule(True, Length())}, {"title": None})
        assert [v.code for v in result.violations["title"]] == ["blank"]

    def test_optional_absent_field_skips_type_checks(self):
        rules = {"page": Rule(False, Numeric(minimum=0))}
        assert evaluate(rules, {}).valid
        assert evaluate(rules, {"page": None}).valid

    def test_optional_present_field_is_checked(self):
        rules = {"page": Rule(False, Numeric(minimum=0))}
        result = evaluate(rules, {"page": -1})
        assert result.details == {"page": ["Page must be greater than or equal to 0"]}

    def test_presence_only_accepts_any_value(self):
        rules = {"anything": Rule(True)}
        assert rules["anything"].kind is ConstraintKind.presence
        assert evaluate(rules, {"anything": ""}).valid
        assert evaluate(rules, {"anything": 0}).valid

    def test_non_mapping_input_is_treated_as_empty(self):
        rules = {"content": Rule(True, Length()), "page": Rule(False, Numeric())}
        result = evaluate(rules, ["not", "a", "dict"])
        assert list(result.violations) == ["content"]

    def test_all_failing_fields_are_reported(self):
        rules = {
            "title": Rule(True, Length(maximum=3)),
            "sort": Rule(False, Inclusion(["ts"])),
            "content": Rule(True, Length()),
        }
        result = evaluate(rules, {"title": "abcd", "sort": "x"})
        assert set(result.details) == {"title", "sort", "content"}

    def test_evaluation_is_repeatable(self):
        rules = {"id": Rule(True, Numeric(greater_than=0, allow_strings=True))}
        first = evaluate(rules, {"id": "0"}, now=NOW)
        second = evaluate(rules, {"id": "0"}, now=NOW)
        assert first.details == second.details

    def test_naive_now_is_treated_as_utc(self):
        rules = {"at": Rule(True, DateTimeRange(date_only=False))}
        result = evaluate(rules, {"at": "2026-10-19T11:00:00Z"}, now=datetime(2026, 10, 19, 12, 0))
        assert result.valid


class TestNumeric:

    def test_numeric_strings_accepted_when_allowed(self):
        constraint = Numeric(allow_strings=True)
        assert codes(constraint, "42") == []
        assert codes(constraint, "-3") == []

    def test_numeric_strings_rejected_for_native_values(self):
        assert codes(Numeric(), "42") == ["not_a_number"]

    @pytest.mark.parametrize("value", ["", "4x", "01", "1e3", " 1"])
    def test_malformed_strings_are_not_numbers(self, value):
        assert codes(Numeric(allow_strings=True), value) == ["not_a_number"]

    def test_booleans_are_not_numbers(self):
        assert codes(Numeric(), True) == ["not_a_number"]

    def test_integer_only(self):
        assert codes(Numeric(), 1.5) == ["not_an_integer"]
        assert codes(Numeric(allow_strings=True), "1.5") == ["not_an_integer"]
        assert codes(Numeric(integer_only=False), 1.5) == []
        assert codes(Numeric(integer_only=False, allow_strings=True), "1.5") == []

    def test_range_violations_accumulate(self):
        constraint = Numeric(minimum=5, greater_than=10)
        assert codes(constraint, 3) == ["greater_than", "greater_than_or_equal_to"]

    def test_maximum(self):
        assert codes(Numeric(maximum=10), 11) == ["less_than_or_equal_to"]
        assert codes(Numeric(maximum=10), 10) == []

    def test_nan_is_rejected(self):
        assert codes(Numeric(integer_only=False), float("nan")) == ["not_a_number"]


class TestLength:

    def test_bounds(self):
        assert codes(Length(minimum=3), "ab") == ["too_short"]
        assert codes(Length(maximum=3), "abcd") == ["too_long"]
        assert codes(Length(minimum=1, maximum=3), "abc") == []

    def test_non_string_has_incorrect_length(self):
        assert codes(Length(), 42) == ["wrong_length"]
        assert codes(Length(), ["a"]) == ["wrong_length"]

    def test_message(self):
        violation = Length(maximum=255).check("x" * 256, NOW)[0]
        assert violation.render("title") == "Title is too long (maximum is 255 characters)"


class TestInclusionAndBoolean:

    def test_inclusion(self):
        constraint = Inclusion(["asc", "desc"])
        assert codes(constraint, "asc") == []
        assert codes(constraint, "up") == ["inclusion"]

    def test_inclusion_does_not_mix_booleans_and_numbers(self):
        constraint = Inclusion([True, False])
        assert codes(constraint, True) == []
        assert codes(constraint, 1) == ["inclusion"]
        assert codes(constraint, 0) == ["inclusion"]

    def test_strict_equals(self):
        assert strict_equals(1, 1.0)
        assert not strict_equals(1, True)
        assert not strict_equals("1", 1)

    def test_boolean_type(self):
        assert codes(BooleanType(), False) == []
        assert codes(BooleanType(), "false") == ["not_a_boolean"]

    def test_boolean_string(self):
        assert codes(BooleanString(), "true") == []
        assert codes(BooleanString(), "True") == ["inclusion"]
        assert BooleanString.kind is ConstraintKind.boolean


class TestDateTimeRange:

    def test_past_rejects_now_and_accepts_earlier(self):
        constraint = DateTimeRange(only_past=True, date_only=False)
        assert codes(constraint, NOW.isoformat()) == ["too_late"]
        assert codes(constraint, (NOW - timedelta(seconds=1)).isoformat()) == []

    def test_past_including_today(self):
        constraint = DateTimeRange(only_past=True, include_today=True, date_only=False)
        assert codes(constraint, (NOW + timedelta(hours=12)).isoformat()) == []
        assert codes(constraint, (NOW + timedelta(days=2)).isoformat()) == ["too_late"]

    def test_future(self):
        constraint = DateTimeRange(only_past=False, only_future=True, date_only=False)
        assert codes(constraint, "2026-10-20T00:00:00Z") == []
        assert codes(constraint, NOW.isoformat()) == ["too_early"]

    def test_future_including_today(self):
        constraint = DateTimeRange(only_past=False, only_future=True, include_today=True, date_only=False)
        assert codes(constraint, (NOW - timedelta(hours=12)).isoformat()) == []
        assert codes(constraint, (NOW - timedelta(days=2)).isoformat()) == ["too_early"]

    def test_past_and_future_together_reject_everything(self):
        constraint = DateTimeRange(only_past=True, only_future=True, date_only=False)
        assert codes(constraint, NOW.isoformat()) == ["too_late", "too_early"]
        assert codes(constraint, "2020-01-01T00:00:00Z") == ["too_early"]
        assert codes(constraint, "2030-01-01T00:00:00Z") == ["too_late"]

    def test_date_only(self):
        constraint = DateTimeRange(only_past=True)
        assert codes(constraint, "2026-10-18") == []
        assert codes(constraint, "2026-13-01") == ["invalid_date"]
        assert codes(constraint, "2026-10-18T10:00:00") == ["invalid_date"]

    def test_unparseable_datetime(self):
        constraint = DateTimeRange(only_past=False, date_only=False)
        assert codes(constraint, "yesterday") == ["invalid_datetime"]
        assert codes(constraint, 1700000000) == ["invalid_datetime"]

    def test_no_bounds(self):
        assert codes(DateTimeRange(only_past=False, date_only=False), "2999-01-01T00:00:00Z") == []

    def test_too_late_message_uses_date_format(self):
        violation = DateTimeRange(only_past=True).check("2027-01-01", NOW)[0]
        assert violation.render("birthday") == "Birthday must be no later than 2026-10-19"

    def test_custom_parser(self):
        constraint = DateTimeRange(only_past=False, parser=lambda value, date_only: NOW)
        assert codes(constraint, "whatever") == []


class TestParseIso8601:

    def test_zulu_suffix(self):
        assert parse_iso8601("2026-10-19T12:00:00Z", False) == NOW

    def test_offset_is_converted_to_utc(self):
        assert parse_iso8601("2026-10-19T21:00:00+09:00", False) == NOW

    def test_naive_is_utc(self):
        assert parse_iso8601("2026-10-19T12:00:00", False) == NOW

    def test_date_only(self):
        assert parse_iso8601("2026-10-19", True) == datetime(2026, 10, 19, tzinfo=timezone.utc)

    def test_invalid(self):
        assert parse_iso8601("nope", False) is None
        assert parse_iso8601(None, True) is None


class TestShapes:

    def test_format_must_match_entirely(self):
        constraint = Format(r"[a-z]+")
        assert codes(constraint, "abc") == []
        assert codes(constraint, "abc1") == ["invalid_format"]
        assert codes(constraint, 5) == ["invalid_format"]

    def test_email(self):
        assert codes(Email(), "someone@example.com") == []
        assert codes(Email(), "someone@") == ["invalid_email"]

    def test_identifier_array(self):
        assert codes(IdentifierArray(), [1, 2, 3]) == []
        assert codes(IdentifierArray(), []) == []
        assert codes(IdentifierArray(), [1, 0]) == ["not_an_identifier_array"]
        assert codes(IdentifierArray(), [True]) == ["not_an_identifier_array"]
        assert codes(IdentifierArray(), "1,2") == ["not_an_identifier_array"]

    def test_polygon(self):
        triangle = [[0, 0], [10.5, 20], [-45, 179]]
        assert codes(Polygon(), triangle) == []
        assert codes(Polygon(), triangle[:2]) == ["not_a_polygon"]
        assert codes(Polygon(), [[91, 0], [0, 0], [0, 0]]) == ["not_a_polygon"]
        assert codes(Polygon(), [[0, 181], [0, 0], [0, 0]]) == ["not_a_polygon"]
        assert codes(Polygon(), [[0, 0, 0], [0, 0], [0, 0]]) == ["not_a_polygon"]
        assert codes(Polygon(), [["0", 0], [0, 0], [0, 0]]) == ["not_a_polygon"]

    def test_object(self):
        assert codes(ObjectType(), {"a": 1}) == []
        assert codes(ObjectType(), [1]) == ["not_an_object"]
        assert codes(ObjectType(), "x") == ["not_an_object"]


def test_prettify():
    assert prettify("post_id") == "Post id"
    assert prettify("lat") == "Lat"


def test_violation_render_with_params():
    assert Violation("greater_than", {"count": 0}).render("id") == "Id must be greater than 0"
