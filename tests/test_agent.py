import pytest

from bbkmeasure.agent import (
    LifecycleError,
    MeasurementState,
    TestLifecycle,
    insert_hashkey,
    log_sent_status,
    task_complete_json,
    task_progress_json,
)
from bbkmeasure.jsonparse import parse


def test_initial_state_is_idle():
    assert TestLifecycle().state is MeasurementState.IDLE


def test_start_moves_to_started():
    life = TestLifecycle()
    assert life.start() is MeasurementState.STARTED
    assert life.state is MeasurementState.STARTED


def test_start_twice_raises():
    life = TestLifecycle()
    life.start()
    with pytest.raises(LifecycleError):
        life.start()


def test_abort_during_test():
    life = TestLifecycle()
    life.start()
    assert life.abort() is MeasurementState.ABORTED


def test_abort_when_idle_raises():
    with pytest.raises(LifecycleError):
        TestLifecycle().abort()


def test_full_cycle_returns_to_idle():
    life = TestLifecycle()
    life.start()
    life.finish()
    assert life.reset() is True
    assert life.state is MeasurementState.IDLE
    assert life.start() is MeasurementState.STARTED


def test_aborted_test_finishes_then_resets():
    life = TestLifecycle()
    life.start()
    life.abort()
    assert life.finish() is MeasurementState.FINISHED
    assert life.reset() is True


def test_reset_when_idle_is_noop():
    life = TestLifecycle()
    assert life.reset() is False
    assert life.state is MeasurementState.IDLE


@pytest.mark.parametrize("abort", [False, True])
def test_reset_during_measurement_raises(abort):
    life = TestLifecycle()
    life.start()
    if abort:
        life.abort()
    with pytest.raises(LifecycleError) as info:
        life.reset()
    assert info.value.errno == "X02"
    obj = parse(info.value.to_json())
    assert obj["error"].string_value() == "got resetTest during measurement"
    assert obj["errno"].string_value() == "X02"
    assert life.state is not MeasurementState.IDLE


def test_task_complete_without_result():
    assert task_complete_json("global") == '{"task": "global"}'


def test_task_complete_with_result():
    text = task_complete_json("download", "93.5")
    obj = parse(text)
    assert obj["task"].string_value() == "download"
    assert obj["result"].number_value() == 93.5


def test_task_progress_round_trip():
    text = task_progress_json("download", 12.5, 0.25)
    obj = parse(text)
    assert obj["task"].string_value() == "download"
    assert obj["result"].number_value() == 12.5
    assert obj["progress"].number_value() == 0.25


def test_task_progress_format():
    assert task_progress_json("upload", 3, 0.5) == (
        '{"task": "upload", "result": 3, "progress": 0.5}'
    )


def test_insert_hashkey_appends_when_missing():
    result = insert_hashkey('{"ispname": ""}', "", "0123456789abcdef")
    assert result == '{"ispname": "","hashkey":"0123456789abcdef"}'
    assert parse(result)["hashkey"].string_value() == "0123456789abcdef"


def test_insert_hashkey_replaces_existing():
    original = '{"hashkey": "aaaaaaaaaaaa", "ispname": "x"}'
    result = insert_hashkey(original, "aaaaaaaaaaaa", "bbbbbbbbbbbb")
    obj = parse(result)
    assert obj["hashkey"].string_value() == "bbbbbbbbbbbb"
    assert obj["ispname"].string_value() == "x"


def test_insert_hashkey_same_key_unchanged():
    original = '{"hashkey": "aaaaaaaaaaaa"}'
    assert insert_hashkey(original, "aaaaaaaaaaaa", "aaaaaaaaaaaa") == original


def test_insert_hashkey_requires_closing_brace():
    assert insert_hashkey("[1, 2]", "", "bbbbbbbbbbbb") == "[1, 2]"


@pytest.mark.parametrize(
    "result, expected",
    [
        ('{"status": 1}', "OK"),
        ('{"status": 0}', "NOK"),
        ('{"other": 1}', "NOK"),
        ("", "NOK"),
        ("not json", "NOK"),
    ],
)
def test_log_sent_status(result, expected):
    assert log_sent_status(result) == expected