import pytest

from bbkmeasure.jsonparse import JsonParse, JsonParseError, MultiParse, parse, parse_multi
from bbkmeasure.jsonvalue import Json

SIMPLE = '{"k1":"v1", "k2":42, "k3":["a",123,true,false,null]}'

COMMENTED = """{
      // comment /* with nested comment */
      "a": 1,
      // comment
      // continued
      "b": "text",
      /* multi
         line
         comment */
      // and single-line comment
      "c": [1, 2, 3]
    }"""


def test_simple_document():
    value = parse(SIMPLE)
    assert value["k1"].string_value() == "v1"
    assert value["k3"] == Json(["a", 123, True, False, None])
    assert value == Json({"k1": "v1", "k2": 42.0, "k3": ["a", 123.0, True, False, None]})


def test_comments_strategy():
    value = parse(COMMENTED, JsonParse.COMMENTS)
    assert value == Json({"a": 1, "b": "text", "c": [1, 2, 3]})


def test_comments_rejected_in_standard_mode():
    with pytest.raises(JsonParseError, match="expected '\"' in object"):
        parse(COMMENTED)


@pytest.mark.parametrize(
    "text, message",
    [
        ('{\n      /* bad comment\n      "a": 1,\n    }', "unexpected end of input inside multi-line comment"),
        ("{\n      / / bad comment }", "malformed comment"),
        ("{// bad comment }", "unexpected end of input"),
        ('{\n          "a": 1\n        }/', "unexpected end of input after start of comment"),
        ("{/* bad\n                                  comment *}", "unexpected end of input inside multi-line comment"),
    ],
)
def test_failing_comments(text, message):
    with pytest.raises(JsonParseError) as info:
        parse(text, JsonParse.COMMENTS)
    assert str(info.value) == message


def test_unicode_escapes_and_surrogates():
    text = r'[ "blah\ud83d\udca9blah\ud83dblah\udca9blah\u0000blah\u1234" ]'
    expected = (
        b"blah" b"\xf0\x9f\x92\xa9" b"blah" b"\xed\xa0\xbd" b"blah"
        b"\xed\xb2\xa9" b"blah" b"\0" b"blah" b"\xe1\x88\xb4"
    )
    value = parse(text)
    assert value[0].string_value().encode("utf-8", "surrogatepass") == expected


def test_integers_and_doubles():
    assert parse("123456789").dump() == "123456789"
    assert parse("-12").int_value() == -12
    assert parse("1.5").number_value() == 1.5
    assert parse("2e3").number_value() == 2000.0
    assert parse("1234567890") == Json(1234567890)


@pytest.mark.parametrize(
    "text, message",
    [
        ("01", "leading 0s not permitted in numbers"),
        ("1.", "at least one digit required in fractional part"),
        ("1e+", "at least one digit required in exponent"),
        ("", "unexpected end of input"),
        ('"abc', "unexpected end of input in string"),
        ("[1,", "unexpected end of input"),
    ],
)
def test_number_and_eof_errors(text, message):
    with pytest.raises(JsonParseError) as info:
        parse(text)
    assert str(info.value) == message


def test_literal_mismatch():
    with pytest.raises(JsonParseError) as info:
        parse("tru")
    assert str(info.value) == "parse error: expected true, got tru"


def test_string_errors():
    with pytest.raises(JsonParseError, match="unescaped"):
        parse('"a\x01"')
    with pytest.raises(JsonParseError, match="invalid escape character"):
        parse('"\\x"')
    with pytest.raises(JsonParseError, match="bad \\\\u escape"):
        parse('"\\u12g4"')


def test_trailing_garbage_and_bad_separators():
    with pytest.raises(JsonParseError, match="unexpected trailing"):
        parse("1 x")
    with pytest.raises(JsonParseError, match="expected ',' in list"):
        parse("[1 2]")
    with pytest.raises(JsonParseError, match="expected ':' in object"):
        parse('{"a" 1}')
    with pytest.raises(JsonParseError, match="expected value"):
        parse("[1,]")


def test_null_input():
    with pytest.raises(JsonParseError, match="null input"):
        parse(None)


def test_nesting_depth_limit():
    assert parse("[" * 201 + "]" * 201).is_array()
    with pytest.raises(JsonParseError, match="exceeded maximum nesting depth"):
        parse("[" * 202 + "]" * 202)


def test_duplicate_keys_keep_last():
    assert parse('{"a": 1, "a": 2}')["a"].int_value() == 2


@pytest.mark.parametrize(
    "value",
    [
        {"k1": "v1", "k2": False, "k3": [1, 2, 3]},
        ["a", "line\nbreak\t\"quoted\"", "\u2028", None, True],
        {"nested": {"x": [0.25, -7, {}]}},
    ],
)
def test_dump_parse_round_trip(value):
    original = Json(value)
    assert parse(original.dump()) == original


def test_parse_multi_success():
    text = '{"a":1} [2]  3 '
    outcome = parse_multi(text)
    assert isinstance(outcome, MultiParse)
    assert outcome.ok
    assert outcome.values == [Json({"a": 1}), Json([2]), Json(3)]
    assert outcome.stop_pos == len(text)


def test_parse_multi_stops_at_error():
    outcome = parse_multi("1 2 x")
    assert not outcome.ok
    assert outcome.values == [Json(1), Json(2)]
    assert outcome.stop_pos == 4
    assert outcome.error.startswith("expected value")


def test_parse_multi_with_comments():
    outcome = parse_multi("1 /* c */ 2 // end", JsonParse.COMMENTS)
    assert outcome.ok
    assert outcome.values == [Json(1), Json(2)]
    assert outcome.stop_pos == len("1 /* c */ 2 // end")