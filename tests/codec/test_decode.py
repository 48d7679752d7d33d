import re
from datetime import datetime, timedelta, timezone

import pytest

from formwire import FormSettings, unmarshal
from formwire.core.errors import (
    DecodeError,
    PatternError,
    ShapeMismatchError,
    UnsupportedKindError,
)

from sample_forms import (
    BracketKey,
    Celsius,
    Envelope,
    FrozenForm,
    FrozenProfile,
    Limits,
    Nested,
    Odd,
    Profile,
    Reading,
    SampleForm,
    TreeNode,
)


def _decode(src, dest=None):
    dest = SampleForm() if dest is None else dest
    unmarshal(src, dest)
    return dest


def test_decode_literals_and_slices() -> None:
    src = {
        "stringParam": ["one"],
        "stringPtrParam": ["two"],
        "int_param": ["2"],
        "int_ptr_param": ["3"],
        "int64_param": ["4"],
        "uint_param": ["4"],
        "uint_ptr_param": ["5"],
        "float32_param": ["6"],
        "float32_ptr_param": ["7"],
        "float64_param": ["8"],
        "float64_ptr_param": ["9"],
        "bool_param": ["true"],
        "bool_ptr_param": ["false"],
        "timeParam": ["2024-08-19T05:09:29-01:00"],
        "time_ptr_param": ["2024-08-19T05:09:29Z"],
        "durationParam": ["30s"],
        "duration_ptr_param": ["30m"],
        "slice_param": ["4", "5"],
        "slice_int_ptr_param": ["6", "7"],
        "privateParam": ["ignored"],
    }

    got = _decode(src)

    assert got == SampleForm(
        string_param="one",
        string_opt_param="two",
        int_param=2,
        int_opt_param=3,
        int64_param=4,
        uint_param=4,
        uint_opt_param=5,
        float32_param=6.0,
        float32_opt_param=7.0,
        float64_param=8.0,
        float64_opt_param=9.0,
        bool_param=True,
        bool_opt_param=False,
        time_param=datetime(2024, 8, 19, 5, 9, 29, tzinfo=timezone(timedelta(hours=-1))),
        time_opt_param=datetime(2024, 8, 19, 5, 9, 29, tzinfo=timezone.utc),
        duration_param=timedelta(seconds=30),
        duration_opt_param=timedelta(minutes=30),
        slice_param=["4", "5"],
        slice_int_opt_param=[6, 7],
    )


def test_decode_maps() -> None:
    src = {
        "map_string_slice[keyOne]": ["one", "two"],
        "map_string_slice[keyTwo]": ["three"],
        "map_string[keyOne]": ["one"],
        "map_string[keyTwo]": ["two"],
        "map_string_int_slice[keyOne]": ["1", "2"],
        "map_string_int_slice[keyTwo]": ["3"],
        "map_string_int[keyOne]": ["1"],
        "map_string_int[keyTwo]": ["2"],
    }

    got = _decode(src)

    assert got.map_string_slice == {"keyOne": ["one", "two"], "keyTwo": ["three"]}
    assert got.map_string == {"keyOne": "one", "keyTwo": "two"}
    assert got.map_string_int_slice == {"keyOne": [1, 2], "keyTwo": [3]}
    assert got.map_string_int == {"keyOne": 1, "keyTwo": 2}


@pytest.mark.parametrize(
    "key,raw",
    [
        ("int_param", "two"),
        ("int_ptr_param", "three"),
        ("int64_param", "four"),
        ("uint_param", "-4"),
        ("uint_ptr_param", "five"),
        ("float32_param", "six"),
        ("float32_ptr_param", "seven"),
        ("float64_param", "eight"),
        ("float64_ptr_param", "nine"),
        ("bool_param", "yes"),
        ("bool_ptr_param", "no"),
        ("timeParam", "not a time"),
        ("time_ptr_param", "not a time"),
        ("durationParam", "not a duration"),
        ("duration_ptr_param", "not a duration"),
        ("slice_int_ptr_param", "x"),
    ],
)
def test_decode_bad_values_name_the_field(key, raw) -> None:
    with pytest.raises(DecodeError) as exc_info:
        _decode({key: [raw]})

    err = exc_info.value
    assert err.field == key
    assert isinstance(err.cause, ValueError)
    assert str(err).startswith(f"unable to decode tag '{key}': ")


def test_decode_error_message_for_int_literal() -> None:
    with pytest.raises(DecodeError, match=re.escape("unable to decode tag 'int_param': parsing 'two': invalid syntax")):
        _decode({"int_param": ["two"]})


def test_decode_map_value_error_wraps_sub_path() -> None:
    expected = (
        "unable to decode tag 'map_string_int': error decoding map value: "
        "unable to decode tag 'map_string_int[keyOne]': parsing 'not an int': invalid syntax"
    )
    with pytest.raises(DecodeError, match=re.escape(expected)) as exc_info:
        _decode({"map_string_int[keyOne]": ["not an int"]})
    assert exc_info.value.field == "map_string_int"


def test_decode_map_slice_error_wraps_sub_path() -> None:
    expected = (
        "unable to decode tag 'map_string_int_slice': error decoding map slice: "
        "unable to decode tag 'map_string_int_slice[keyOne]': parsing 'x': invalid syntax"
    )
    with pytest.raises(DecodeError, match=re.escape(expected)):
        _decode({"map_string_int_slice[keyOne]": ["1", "x"]})


def test_decode_takes_first_value_for_single_fields() -> None:
    got = _decode({"int_param": ["1", "2"], "stringParam": ["a", "b"]})
    assert got.int_param == 1
    assert got.string_param == "a"


def test_decode_ignores_unknown_and_excluded_keys() -> None:
    src = {
        "unexpected": ["value"],
        "-": ["dash"],
        "ignore_param": ["x"],
        "missing_param": ["x"],
        "privateParam": ["x"],
        "_private_param": ["x"],
    }
    assert _decode(src) == SampleForm()


def test_decode_empty_value_list_is_absent() -> None:
    got = _decode({"int_ptr_param": [], "slice_param": []})
    assert got.int_opt_param is None
    assert got.slice_param is None


def test_decode_empty_string_is_a_value() -> None:
    got = _decode({"stringPtrParam": [""], "slice_param": [""]})
    assert got.string_opt_param == ""
    assert got.slice_param == [""]


def test_decode_omitempty_has_no_effect() -> None:
    got = _decode({"int_param": ["0"], "int_ptr_param": ["0"]})
    assert got.int_param == 0
    assert got.int_opt_param == 0


def test_decode_nested_record_shares_key_space() -> None:
    got = _decode({"nestedString": ["inner"], "nestedInt": ["3"]})
    assert got.nested == Nested(nested_string="inner", nested_int=3)


def test_decode_absent_optional_record_stays_unset() -> None:
    got = _decode({"title": ["x"], "nestedInt": ["3"]}, Envelope())
    assert got.meta is None
    assert got.title == "x"


def test_decode_optional_record_with_submitted_key() -> None:
    got = _decode({"meta": [""], "nestedInt": ["3"]}, Envelope())
    assert got.meta == Nested(nested_int=3)


def test_decode_existing_optional_record_needs_its_key() -> None:
    skipped = _decode({"nestedString": ["x"]}, Envelope(meta=Nested()))
    assert skipped.meta == Nested()

    filled = _decode({"meta": [""], "nestedString": ["x"]}, Envelope(meta=Nested()))
    assert filled.meta == Nested(nested_string="x")


def test_decode_self_referencing_record() -> None:
    root = _decode({"name": ["root"]}, TreeNode())
    assert root == TreeNode(name="root")


def test_decode_bare_string_value() -> None:
    got = _decode({"int_param": "12", "slice_param": "a", "map_string[k]": "v"})
    assert got.int_param == 12
    assert got.slice_param == ["a"]
    assert got.map_string == {"k": "v"}


def test_decode_sequence_failure_leaves_field_unset() -> None:
    env = Envelope()
    with pytest.raises(DecodeError) as exc_info:
        unmarshal({"id": ["1", "x"]}, env)
    assert exc_info.value.field == "id"
    assert env.ids is None


def test_decode_sequence_appends_to_existing_list() -> None:
    env = Envelope(counts=[9])
    unmarshal({"count": ["1", "2"]}, env)
    assert env.counts == [9, 1, 2]


def test_decode_sized_int_range() -> None:
    assert _decode({"level": ["-128"]}, Limits()).level == -128
    with pytest.raises(DecodeError, match="out of range"):
        _decode({"level": ["128"]}, Limits())


def test_decode_integer_base_prefixes() -> None:
    got = _decode({"int_param": ["0x1f"], "int_ptr_param": ["0b101"], "int64_param": ["010"]})
    assert (got.int_param, got.int_opt_param, got.int64_param) == (31, 5, 8)


def test_decode_text_capability_everywhere() -> None:
    src = {
        "temp": ["21.5C"],
        "peak": ["30C"],
        "history": ["1C", "2C"],
        "room[kitchen]": ["19C"],
    }
    reading = Reading()
    unmarshal(src, reading)
    assert reading == Reading(
        temp=Celsius(21.5),
        peak=Celsius(30),
        history=[Celsius(1), Celsius(2)],
        by_room={"kitchen": Celsius(19)},
    )


def test_decode_text_capability_failure() -> None:
    with pytest.raises(DecodeError) as exc_info:
        unmarshal({"temp": ["hot"]}, Reading())
    assert exc_info.value.field == "temp"
    assert isinstance(exc_info.value.cause, ValueError)

    with pytest.raises(DecodeError, match="error decoding map value"):
        unmarshal({"room[attic]": ["hot"]}, Reading())


def test_decode_unsupported_kind_only_when_reached() -> None:
    odd = Odd()
    unmarshal({}, odd)
    assert odd.ratio == 0j

    with pytest.raises(DecodeError) as exc_info:
        unmarshal({"ratio": ["1"]}, odd)
    assert exc_info.value.field == "ratio"
    assert isinstance(exc_info.value.cause, UnsupportedKindError)


def test_decode_bracket_in_map_key_is_rejected() -> None:
    with pytest.raises(PatternError):
        unmarshal({}, BracketKey())


def test_decode_map_subkey_keeps_special_characters() -> None:
    env = SampleForm()
    unmarshal({"map_string[a.b*c]": ["x"], "map_string[]": ["empty"]}, env)
    assert env.map_string == {"a.b*c": "x", "": "empty"}


def test_decode_map_unset_when_nothing_matches() -> None:
    assert _decode({"map_string": ["x"], "map_stringX[a]": ["y"]}).map_string is None


def test_decode_pydantic_model() -> None:
    profile = Profile()
    unmarshal(
        {"name": ["ada"], "age": ["36"], "tag": ["a", "b"], "pref[theme]": ["dark"], "secret": ["s"], "note": ["n"]},
        profile,
    )
    assert profile.model_dump() == {
        "name": "ada",
        "age": 36,
        "tags": ["a", "b"],
        "prefs": {"theme": "dark"},
        "secret": "",
        "note": "",
    }


def test_decode_pydantic_sized_int_range() -> None:
    with pytest.raises(DecodeError, match="out of range"):
        unmarshal({"age": ["300"]}, Profile())


def test_decode_custom_tag_name() -> None:
    settings = FormSettings(tag_name="query")
    form = SampleForm()
    unmarshal({"stringParam": ["x"]}, form, settings)
    assert form == SampleForm()


@pytest.mark.parametrize(
    "dest,shown",
    [
        (5, "int"),
        ({}, "dict"),
        (None, "NoneType"),
        (SampleForm, "type[SampleForm]"),
        (Profile, "type[Profile]"),
    ],
)
def test_decode_rejects_non_record_destination(dest, shown) -> None:
    with pytest.raises(ShapeMismatchError, match=re.escape(f"destination ({shown})")):
        unmarshal({"stringParam": ["x"]}, dest)


@pytest.mark.parametrize("dest", [FrozenForm(), FrozenProfile()])
def test_decode_rejects_frozen_destination(dest) -> None:
    with pytest.raises(ShapeMismatchError, match="is frozen"):
        unmarshal({"name": ["x"]}, dest)
