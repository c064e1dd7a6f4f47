from habit_hub.services.report_values import (
    BooleanValue, DurationValue, NumberValue, OptionValue, TimeValue,
    dump_report_value, load_report_value, normalize_report_value, parse_number
)


def test_parse_number():
    assert parse_number("10") == 10.0
    assert parse_number(" 2.5 ") == 2.5
    assert parse_number(3) == 3.0
    assert parse_number("ten") is None
    assert parse_number(True) is None
    assert parse_number("nan") is None
    assert parse_number(None) is None


def test_numeric_types_normalize_to_float():
    value = normalize_report_value("duration", "10")
    assert isinstance(value, DurationValue)
    assert value.value == 10.0
    assert value.magnitude == 10.0
    assert value.display() == "10"

    value = normalize_report_value("number", 2.5)
    assert isinstance(value, NumberValue)
    assert value.display() == "2.5"


def test_non_numeric_kept_but_counts_zero():
    value = normalize_report_value("number", "a few")
    assert value.value == "a few"
    assert value.magnitude == 0.0


def test_boolean_is_always_true():
    assert isinstance(normalize_report_value("boolean", "false"), BooleanValue)
    assert normalize_report_value("boolean", None).value is True


def test_label_types_keep_text():
    assert normalize_report_value("time", "07:00") == TimeValue(value="07:00")
    assert normalize_report_value("options", "Yes") == OptionValue(value="Yes")


def test_stored_payload_round_trip():
    stored = dump_report_value(normalize_report_value("duration", 15))
    assert stored == {"kind": "duration", "value": 15.0}
    assert load_report_value("duration", stored) == DurationValue(value=15.0)


def test_untyped_legacy_payload_is_normalized():
    assert load_report_value("number", 4) == NumberValue(value=4.0)
    assert load_report_value("boolean", True) == BooleanValue()
