"""Tests for spoken set parsing."""
import logging

import pytest

from gymtrack.voice_parser import (
    ParsedSetInput,
    convert_word_numbers_to_digits,
    parse_set_input,
)


class TestConvertWordNumbers:
    def test_single_words(self):
        assert convert_word_numbers_to_digits("Twelve reps") == "12 reps"

    def test_hyphenated_before_parts(self):
        assert convert_word_numbers_to_digits("twenty-one") == "21"

    def test_hundreds(self):
        assert convert_word_numbers_to_digits("one hundred for five") == "100 for 5"
        assert convert_word_numbers_to_digits("two hundred and ten") == "200 and 10"

    def test_whole_words_only(self):
        assert convert_word_numbers_to_digits("Often TEN") == "often 10"
        assert convert_word_numbers_to_digits("someone done") == "someone done"


class TestParseSetInput:
    def test_weight_with_units_and_reps(self):
        assert parse_set_input("135 pounds for 12 reps") == ParsedSetInput(weight=135.0, reps=12)

    def test_two_plates(self):
        assert parse_set_input("two plates for ten") == ParsedSetInput(weight=225.0, reps=10)

    def test_three_plates(self):
        assert parse_set_input("three plates for five") == ParsedSetInput(weight=315.0, reps=5)

    def test_one_plate_and_bare_plate(self):
        assert parse_set_input("one plate for 8") == ParsedSetInput(weight=135.0, reps=8)
        assert parse_set_input("a plate for six") == ParsedSetInput(weight=135.0, reps=6)

    def test_bodyweight(self):
        assert parse_set_input("bodyweight for fifteen reps") == ParsedSetInput(weight=0.0, reps=15)

    def test_body_weight_times(self):
        assert parse_set_input("body weight ten times") == ParsedSetInput(weight=0.0, reps=10)

    def test_i_did_x_for_y(self):
        assert parse_set_input("I did 135 for 12") == ParsedSetInput(weight=135.0, reps=12)

    def test_kilograms(self):
        assert parse_set_input("100 kg for 5") == ParsedSetInput(weight=100.0, reps=5)
        assert parse_set_input("twenty-five kilos, eight reps") == ParsedSetInput(weight=25.0, reps=8)

    def test_decimal_weight(self):
        assert parse_set_input("12.5 kg for 10") == ParsedSetInput(weight=12.5, reps=10)

    def test_times_x_shorthand(self):
        assert parse_set_input("225 x 5") == ParsedSetInput(weight=225.0, reps=5)

    def test_small_number_only_is_reps(self):
        assert parse_set_input("15") == ParsedSetInput(weight=None, reps=15)

    def test_reps_fallback_skips_the_weight(self):
        assert parse_set_input("30 and 30") == ParsedSetInput(weight=30.0, reps=None)

    def test_did_fallback_overwrites_reps(self):
        # "8 reps" sets reps first; nothing marks a weight, so "did 15 for 10"
        # fires and replaces both fields.
        assert parse_set_input("8 reps, did 15 for 10") == ParsedSetInput(weight=15.0, reps=10)

    @pytest.mark.parametrize("text", ["", None, "hello there", "let's go"])
    def test_nothing_to_parse(self, text):
        parsed = parse_set_input(text)
        assert parsed.is_empty
        assert parsed.to_dict() == {"weight": None, "reps": None}

    def test_oversized_digit_run_is_ignored(self):
        assert parse_set_input("1" * 5000 + " reps") == ParsedSetInput()

    def test_weight_too_large_for_a_float_is_ignored(self):
        parsed = parse_set_input("1" * 400 + " pounds for 5")
        assert parsed == ParsedSetInput(weight=None, reps=5)

    def test_oversized_did_fallback_keeps_fields(self):
        # The "did X for Y" numbers do not convert, so the earlier result stands
        assert parse_set_input("did " + "9" * 400 + ".5 for 8") == ParsedSetInput(weight=None, reps=8)

    def test_parse_is_deterministic(self):
        text = "one hundred eighty five for eight"
        assert parse_set_input(text) == parse_set_input(text)

    def test_logs_trace_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="gymtrack.voice_parser"):
            parse_set_input("135 pounds for 12 reps")
        assert "Final result: weight=135.0, reps=12" in caplog.text
