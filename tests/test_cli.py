# tests/test_cli.py
"""
End-to-end runs of the command line entry point.

Run: pytest -v
"""

from __future__ import annotations

import pytest

from partnum.cli import main, parse_query
from partnum.fmt import strip_ansi
from partnum.runtime import APPLY
from partnum.utility import UserInputError

# ---------- helpers -----------------------------------------------------------


def _run(capsys, *argv: str) -> tuple[int, str, str]:
    code = main(list(argv))
    cap = capsys.readouterr()
    return code, strip_ansi(cap.out), strip_ansi(cap.err)


def _profile(ws, name: str, body: str) -> None:
    pdir = ws / "profiles"
    pdir.mkdir(parents=True, exist_ok=True)
    (pdir / f"{name}.toml").write_text(body, encoding="utf-8")


# ---------- one-shot queries --------------------------------------------------

def test_single_value(capsys):
    code, out, _ = _run(capsys, "10")
    assert code == 0
    assert "P(10) = 42" in out


def test_expressions_and_several_values(capsys):
    code, out, _ = _run(capsys, "10**2", "2e1", "4!")
    assert code == 0
    assert "P(100) = 190569292" in out
    assert "P(20) = 627" in out
    assert "P(24) = 1575" in out


def test_long_values_are_abbreviated(capsys, isolated_workspace):
    _profile(isolated_workspace, "short", "[OUTPUT]\nABBREVIATE_OVER = 10\nSHOW_TIMING = false\n")
    code, out, _ = _run(capsys, "--profile", "short", "1000")
    assert code == 0
    assert "P(1000) = 24061467864032622473692149727991" in out
    assert "(32 digits)" in out
    assert "[" not in out


def test_negative_input_is_user_error(capsys):
    code, _, err = _run(capsys, "-5")
    assert code == 2
    assert "non-negative" in err


def test_garbage_input_is_user_error(capsys):
    code, _, err = _run(capsys, "twelve")
    assert code == 2
    assert "Error:" in err


def test_max_n_from_profile(capsys, isolated_workspace):
    _profile(isolated_workspace, "small", "[BEHAVIOUR]\nMAX_N = 100\n")
    code, _, err = _run(capsys, "--profile", "small", "101")
    assert code == 2
    assert "MAX_N" in err


def test_parse_query_limits():
    APPLY({"BEHAVIOUR": {"MAX_N": 50}})
    assert parse_query("7*7") == 49
    with pytest.raises(UserInputError):
        parse_query("51")
    with pytest.raises(UserInputError):
        parse_query("hello")


# ---------- commands ----------------------------------------------------------

def test_table(capsys):
    code, out, _ = _run(capsys, "--table", "0:5")
    assert code == 0
    rows = [line.split() for line in out.strip().splitlines()]
    assert rows == [["0", "1"], ["1", "1"], ["2", "2"], ["3", "3"], ["4", "5"], ["5", "7"]]


def test_table_bad_range(capsys):
    code, _, err = _run(capsys, "--table", "9:3")
    assert code == 2
    assert "greater than" in err


def test_check_passes(capsys):
    code, out, _ = _run(capsys, "--check")
    assert code == 0
    assert "PASS" in out
    assert "50 values match" in out


def test_cross_check(capsys):
    code, out, _ = _run(capsys, "--cross-check", "120")
    assert code == 0
    assert "PASS sympy partition(), n = 0..120: 121 values match." in out


def test_compare(capsys):
    code, out, _ = _run(capsys, "--compare", "12")
    assert code == 0
    assert "naive" in out
    assert "cold cache" in out
    assert "warm cache" in out
    assert "= 77" in out


def test_compare_above_naive_limit(capsys, isolated_workspace):
    _profile(isolated_workspace, "tiny", "[COMPARE]\nNAIVE_LIMIT = 5\n")
    code, out, _ = _run(capsys, "--profile", "tiny", "--compare", "12")
    assert code == 0
    assert "naive run skipped" in out


def test_output_file(capsys, isolated_workspace):
    code, out, _ = _run(capsys, "--output", "results.txt", "--quiet", "7")
    assert code == 0
    assert out == ""
    text = (isolated_workspace / "results.txt").read_text(encoding="utf-8")
    assert "P(7) = 15" in text
    assert "\x1b[" not in text


def test_init_where_active(capsys, isolated_workspace):
    code, out, _ = _run(capsys, "init")
    assert code == 0
    assert "Copied -> profiles: 1" in out
    assert (isolated_workspace / "profiles" / "default.toml").exists()

    code, out, _ = _run(capsys, "where")
    assert code == 0
    assert str(isolated_workspace.resolve()) in out

    code, out, _ = _run(capsys, "active")
    assert code == 0
    assert "Active profile: default" in out


def test_explicit_profile_is_remembered(capsys, isolated_workspace):
    _profile(isolated_workspace, "quiet", "[OUTPUT]\nSHOW_TIMING = false\n")
    assert _run(capsys, "--profile", "quiet", "3")[0] == 0
    code, out, _ = _run(capsys, "active")
    assert "Active profile: quiet" in out


def test_unknown_profile(capsys):
    code, _, err = _run(capsys, "--profile", "missing", "3")
    assert code == 2
    assert "not found" in err


def test_debug_diagnostics(capsys):
    code, _, err = _run(capsys, "--debug", "30")
    assert code == 0
    assert "[debug] active profile: default" in err
    assert "[debug] P(30): " in err
    assert "30 new values" in err


def test_output_directory_gets_a_file_per_result(capsys, isolated_workspace):
    code, out, _ = _run(capsys, "--output", "res/", "--quiet", "7", "--table", "0:3", "--check", "--cross-check", "10")
    assert code == 0
    assert out == ""
    res = isolated_workspace / "res"
    assert sorted(p.name for p in res.iterdir()) == ["P7.txt", "check.txt", "cross-check_10.txt", "table_0-3.txt"]
    assert "P(7) = 15" in (res / "P7.txt").read_text(encoding="utf-8")
    assert "3" in (res / "table_0-3.txt").read_text(encoding="utf-8")
    assert "PASS" in (res / "check.txt").read_text(encoding="utf-8")


def test_output_file_from_profile_is_validated(capsys, isolated_workspace):
    _profile(isolated_workspace, "unsafe", '[OUTPUT]\nOUTPUT_FILE = "profiles/default.toml"\n')
    code, _, err = _run(capsys, "--profile", "unsafe", "5")
    assert code == 2
    assert "OUTPUT.OUTPUT_FILE" in err
    assert not (isolated_workspace / "profiles" / "default.toml").exists()


def test_oversized_shift_is_user_error(capsys):
    code, _, err = _run(capsys, "1<<10**13")
    assert code == 2
    assert "decimal digits" in err


def test_cross_check_respects_max_n(capsys, isolated_workspace):
    _profile(isolated_workspace, "small", "[BEHAVIOUR]\nMAX_N = 100\n")
    code, _, err = _run(capsys, "--profile", "small", "--cross-check", "101")
    assert code == 2
    assert "MAX_N" in err


def test_negative_cross_check_bound(capsys):
    code, _, err = _run(capsys, "--cross-check", "-1")
    assert code == 2
    assert "non-negative" in err


def test_debug_reports_time_without_timing_display(capsys, isolated_workspace):
    _profile(isolated_workspace, "plain", "[OUTPUT]\nSHOW_TIMING = false\n")
    code, out, err = _run(capsys, "--profile", "plain", "--debug", "40")
    assert code == 0
    assert "[" not in out
    debug_line = next(line for line in err.splitlines() if line.startswith("[debug] P(40): "))
    assert " in " in debug_line
    assert debug_line.endswith(("µs", "ms", " s"))


# ---------- REPL --------------------------------------------------------------

def test_repl_session(capsys, monkeypatch):
    answers = iter(["4", "20", "stats", "t 0:2", "bogus", "reset", "stats", "q"])
    monkeypatch.setattr("builtins.input", lambda _prompt="": next(answers))
    code, out, err = _run(capsys)
    assert code == 0
    assert "P(4) = 5" in out
    assert "P(20) = 627" in out
    assert "Cache: 21 entries, largest n = 20" in out
    assert "Cache cleared." in out
    assert "Cache: 1 entries, largest n = 0" in out
    assert "'bogus' is not an integer" in err


def test_repl_eof_quits(capsys, monkeypatch):
    def _eof(_prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", _eof)
    code, _, _ = _run(capsys)
    assert code == 0
