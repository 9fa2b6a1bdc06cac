import subprocess
from unittest import mock

import pytest

from bbkmeasure import defs


@pytest.mark.parametrize(
    "system, machine, expected",
    [
        ("Linux", "x86_64", "Bredbandskollen Linux amd64"),
        ("Windows", "AMD64", "Bredbandskollen Windows amd64"),
        ("Darwin", "arm64", "Bredbandskollen Mac ARM64"),
        ("FreeBSD", "i386", "Bredbandskollen FreeBSD i386"),
        ("Linux", "armv7l", "Bredbandskollen Linux ARM"),
        ("Linux", "mips", "Bredbandskollen Linux mips"),
    ],
)
def test_app_name_combinations(system, machine, expected):
    assert defs.app_name(system, machine) == expected


def test_app_name_unknown_system_is_linux_and_unknown_machine_omitted():
    assert defs.app_name("Plan9", "riscv64") == "Bredbandskollen Linux"


def test_app_name_defaults_start_with_base_name():
    assert defs.app_name().startswith("Bredbandskollen ")
    assert defs.APP_NAME == defs.app_name()


def test_user_agent_contains_version():
    assert defs.USER_AGENT.endswith(" " + defs.APP_VERSION)
    assert defs.APP_VERSION == "1.2.1"


def test_hardware_model_is_short_and_stripped():
    model = defs.hardware_model()
    assert len(model) <= 50
    assert model == model.rstrip(" \t\r\n")


def test_os_info_is_short_and_stripped():
    info = defs.os_info()
    assert len(info) <= 50
    assert info == info.rstrip(" \t\r\n")


def test_hardware_model_truncates_command_output():
    long_output = subprocess.CompletedProcess(
        args=["uname", "-m"], returncode=0, stdout="x" * 80 + "\n"
    )
    defs.hardware_model.cache_clear()
    try:
        with mock.patch("platform.system", return_value="Linux"), mock.patch(
            "subprocess.run", return_value=long_output
        ):
            assert defs.hardware_model() == "x" * 50
    finally:
        defs.hardware_model.cache_clear()


def test_os_info_strips_trailing_whitespace_from_command():
    output = subprocess.CompletedProcess(
        args=["uname", "-sr"], returncode=0, stdout="Linux 6.1.0 \r\n"
    )
    defs.os_info.cache_clear()
    try:
        with mock.patch("platform.system", return_value="Linux"), mock.patch(
            "subprocess.run", return_value=output
        ):
            assert defs.os_info() == "Linux 6.1.0"
    finally:
        defs.os_info.cache_clear()