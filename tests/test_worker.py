import signal
import threading

import pytest

from boom.worker import (
    WorkerCmd,
    WorkerType,
    check_exit,
    check_flag,
    get_check_command_interval,
    sig_int_handler,
)


def test_check_flag_follows_event():
    flag = threading.Event()
    assert check_flag(flag) is False
    flag.set()
    assert check_flag(flag) is True


def test_check_exit_exits_with_zero_when_set():
    flag = threading.Event()
    flag.set()
    with pytest.raises(SystemExit) as info:
        check_exit(flag)
    assert info.value.code == 0


def test_check_exit_returns_when_unset():
    flag = threading.Event()
    assert check_exit(flag) is None
    assert check_flag(flag) is False


def test_sig_int_handler_sets_flag():
    flag = threading.Event()
    previous = sig_int_handler(flag)
    try:
        assert check_flag(flag) is False
        signal.raise_signal(signal.SIGINT)
        assert check_flag(flag) is True
    finally:
        signal.signal(signal.SIGINT, previous)


def test_get_check_command_interval():
    conf = {"workers": {"ZTF": {"command_interval": 500}, "LSST": {"command_interval": 250}}}
    assert get_check_command_interval(conf, "ZTF") == 500
    assert get_check_command_interval(conf, "LSST") == 250


def test_get_check_command_interval_parses_string():
    conf = {"workers": {"ZTF": {"command_interval": "42"}}}
    assert get_check_command_interval(conf, "ZTF") == 42


def test_missing_workers_table():
    with pytest.raises(KeyError, match="worker table"):
        get_check_command_interval({}, "ZTF")


def test_missing_stream():
    with pytest.raises(KeyError, match="stream name LSST"):
        get_check_command_interval({"workers": {"ZTF": {}}}, "LSST")


def test_missing_command_interval():
    with pytest.raises(KeyError, match="command_interval"):
        get_check_command_interval({"workers": {"ZTF": {}}}, "ZTF")


def test_non_integer_command_interval():
    with pytest.raises(ValueError):
        get_check_command_interval({"workers": {"ZTF": {"command_interval": "soon"}}}, "ZTF")


def test_stream_not_a_table():
    with pytest.raises(ValueError):
        get_check_command_interval({"workers": {"ZTF": 5}}, "ZTF")


def test_worker_type_display():
    names = ["Alert", "Filter", "ML"]
    assert [str(WorkerType(name)) for name in names] == names


def test_worker_cmd_display():
    assert str(WorkerCmd.TERM) == "TERM"
    assert WorkerCmd("TERM") is WorkerCmd.TERM