"""Copyright (c) 2024 Aiven Ltd
See LICENSE for details.

Test graphbr.common.utils

"""

from graphbr.common import utils
from graphbr.common.utils import build_netloc, host_of, split_netloc
from pathlib import Path

import pytest


def test_build_netloc_does_not_change_hostname() -> None:
    assert build_netloc("example.org") == "example.org"


def test_build_netloc_escapes_ipv6() -> None:
    assert build_netloc("::1") == "[::1]"


def test_build_netloc_adds_port_to_ipv6() -> None:
    assert build_netloc("::1", 1234) == "[::1]:1234"


@pytest.mark.parametrize(
    "netloc,expected",
    [
        ("example.org", ("example.org", None)),
        ("example.org:9559", ("example.org", 9559)),
        ("10.0.0.1:9559", ("10.0.0.1", 9559)),
        ("[::1]:9559", ("::1", 9559)),
        ("[::1]", ("::1", None)),
        ("fe80::1", ("fe80::1", None)),
    ],
)
def test_split_netloc(netloc: str, expected: tuple[str, int | None]) -> None:
    assert split_netloc(netloc) == expected


@pytest.mark.parametrize("netloc", ["[::1", "[::1]x", "host:port"])
def test_split_netloc_invalid(netloc: str) -> None:
    with pytest.raises(ValueError):
        split_netloc(netloc)


def test_host_of() -> None:
    assert host_of("10.0.0.2:9780") == "10.0.0.2"


def test_open_path_with_atomic_rename(tmp_path: Path) -> None:
    # default is bytes
    f1_path = tmp_path / "f1"
    with utils.open_path_with_atomic_rename(f1_path) as f1:
        f1.write(b"test1")
    assert f1_path.read_text() == "test1"

    # text mode requires passing mode flag but should work
    f2_path = tmp_path / "f2"
    with utils.open_path_with_atomic_rename(f2_path, mode="w") as f2:
        f2.write("test2")
    assert f2_path.read_text() == "test2"

    # rewriting should be fine too
    with utils.open_path_with_atomic_rename(f2_path, mode="w") as f2:
        f2.write("test2-new")
    assert f2_path.read_text() == "test2-new"

    # erroneous cases should not produce file at all
    f3_path = tmp_path / "f3"

    class TestException(RuntimeError):
        pass

    with pytest.raises(TestException):
        with utils.open_path_with_atomic_rename(f3_path):
            raise TestException()
    assert not f3_path.exists()
    assert not list(tmp_path.glob("*.tmp"))
