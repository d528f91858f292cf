# tests/test_output.py
"""OutputManager routing and formatting helpers."""

from __future__ import annotations

import pytest
from colorama import Fore, Style

from partnum.fmt import abbr_int_fast, format_duration, strip_ansi
from partnum.output_manager import OutputManager, resolve_output_path, validate_output_setting
from partnum.utility import UserInputError, dec_digits, parse_range


def test_screen_only(capsys):
    om = OutputManager()
    om.write(f"{Fore.RED}hi{Style.RESET_ALL}")
    om.close()
    assert om.mode == "none"
    assert "hi" in capsys.readouterr().out


def test_quiet_suppresses_screen(capsys):
    om = OutputManager(quiet=True)
    om.write("hidden")
    assert capsys.readouterr().out == ""
    assert om.getvalue() == "hidden\n"


def test_single_file_appends_without_ansi(isolated_workspace, capsys):
    for text in ("one", "two"):
        with OutputManager(output_file="logs/out.txt", quiet=True) as om:
            om.write(f"{Fore.GREEN}{text}{Style.RESET_ALL}")
    path = isolated_workspace / "logs" / "out.txt"
    assert path.read_text(encoding="utf-8") == "one\n\ntwo\n\n"


def test_split_mode_writes_per_number(isolated_workspace):
    om = OutputManager(output_file="results/", quiet=True, number=100)
    om.write("P(100) = 190569292")
    om.close()
    om.close()  # idempotent
    path = isolated_workspace / "results" / "P100.txt"
    assert path.read_text(encoding="utf-8") == "P(100) = 190569292\n"


def test_split_mode_named_report(isolated_workspace):
    with OutputManager(output_file="results/", quiet=True, name="check") as om:
        om.write("PASS")
    assert (isolated_workspace / "results" / "check.txt").read_text(encoding="utf-8") == "PASS\n"


def test_split_mode_needs_number():
    with pytest.raises(ValueError):
        OutputManager(output_file="results/")


def test_resolve_output_path(tmp_path):
    assert resolve_output_path("a/b.txt", tmp_path) == str(tmp_path / "a" / "b.txt")
    absolute = str(tmp_path / "x.txt")
    assert resolve_output_path(absolute, "/elsewhere") == absolute
    with pytest.raises(ValueError):
        resolve_output_path("", tmp_path)


def test_validate_output_setting():
    assert validate_output_setting(None) is None
    assert validate_output_setting("  ") == ""
    assert validate_output_setting("out/") == "out/"
    assert validate_output_setting("out.txt") == "out.txt"
    with pytest.raises(ValueError):
        validate_output_setting("profiles/default.toml")


@pytest.mark.parametrize("n", [0, 9, 10, 99, 100, 10**30 - 1, 10**30, 2**200])
def test_dec_digits(n):
    assert dec_digits(n) == len(str(n))


def test_abbr_int_fast():
    assert abbr_int_fast(12345) == "12345"
    big = int("1234567890" * 5)
    assert abbr_int_fast(big, head=4, tail=4, threshold=20) == "1234…7890"
    assert abbr_int_fast(-big, head=3, tail=3, threshold=20) == "-123…890"


def test_format_duration():
    assert format_duration(0.0000042) == "4 µs"
    assert format_duration(0.25) == "250 ms"
    assert format_duration(2.5) == "2.500 s"
    assert format_duration(61.5) == "1:01.500"


def test_strip_ansi():
    assert strip_ansi(f"{Fore.RED}x{Style.RESET_ALL}") == "x"
    assert strip_ansi(None) == ""


@pytest.mark.parametrize("text,expected", [("0:20", (0, 20)), ("5:5", (5, 5)), ("12", (0, 12)), ("1_0:2_0", (10, 20))])
def test_parse_range(text, expected):
    assert parse_range(text) == expected


@pytest.mark.parametrize("text", ["", "a:b", "5:1", "-1:3", "1:2:3"])
def test_parse_range_rejects(text):
    with pytest.raises(UserInputError):
        parse_range(text)
