# src/partnum/display.py
from __future__ import annotations

from colorama import Fore, Style

from partnum.compare import ComparisonRow
from partnum.config import list_profiles_with_descriptions
from partnum.evaluator import PartitionEvaluator
from partnum.fmt import abbr_int_fast, format_count, format_duration
from partnum.output_manager import OutputManager
from partnum.runtime import CFG
from partnum.utility import dec_digits
from partnum.verify import Mismatch


def _abbr(value: int) -> str:
    threshold = int(CFG("OUTPUT.ABBREVIATE_OVER", 60))
    return abbr_int_fast(value, head=20, tail=20, threshold=threshold)


def print_value(n: int, value: int, *, om: OutputManager, elapsed: float | None = None) -> None:
    """One query result: 'P(n) = value', digit count for long values, optional timing."""
    line = f"{Fore.CYAN}P({n}){Style.RESET_ALL} = {Style.BRIGHT}{_abbr(value)}{Style.RESET_ALL}"
    digits = dec_digits(value)
    if digits > int(CFG("OUTPUT.ABBREVIATE_OVER", 60)):
        line += f"  {Fore.YELLOW}({digits} digits){Style.RESET_ALL}"
    if elapsed is not None and CFG("OUTPUT.SHOW_TIMING", True):
        line += f"  {Style.DIM}[{format_duration(elapsed)}]{Style.RESET_ALL}"
    om.write(line)


def print_table(evaluator: PartitionEvaluator, lo: int, hi: int, *, om: OutputManager) -> None:
    """P(lo)..P(hi), one per line, right-aligned index column."""
    width = len(str(hi))
    for n in range(lo, hi + 1):
        om.write(f"{Fore.CYAN}{n:>{width}}{Style.RESET_ALL}  {_abbr(evaluator.evaluate(n))}")


def print_check_report(title: str, mismatches: list[Mismatch], total: int, *, om: OutputManager) -> None:
    if not mismatches:
        om.write(f"{Fore.GREEN}{Style.BRIGHT}PASS{Style.RESET_ALL} {title}: {total} values match.")
        return
    om.write(f"{Fore.RED}{Style.BRIGHT}FAIL{Style.RESET_ALL} {title}: {len(mismatches)} of {total} values differ.")
    for m in mismatches:
        om.write(f"  n={m.n}: expected {_abbr(m.expected)}, got {_abbr(m.got)}")


def print_comparison(n: int, rows: list[ComparisonRow], *, om: OutputManager, naive_limit: int) -> None:
    om.write(f"{Fore.YELLOW}{Style.BRIGHT}P({n}) three ways{Style.RESET_ALL}")
    for row in rows:
        om.write(
            f"  {row.label:<11} {format_count(row.calls):>13} calls  "
            f"{format_duration(row.seconds):>10}   = {_abbr(row.value)}"
        )
    if not any(r.label == "naive" for r in rows):
        om.write(f"  {Style.DIM}naive run skipped: n > COMPARE.NAIVE_LIMIT ({naive_limit}){Style.RESET_ALL}")


def print_stats(evaluator: PartitionEvaluator, *, om: OutputManager) -> None:
    st = evaluator.stats
    hit_rate = (st.hits / st.calls * 100) if st.calls else 0.0
    om.write(f"{Fore.YELLOW}Cache:{Style.RESET_ALL} {len(evaluator)} entries, largest n = {evaluator.max_cached}")
    om.write(
        f"{Fore.YELLOW}Calls:{Style.RESET_ALL} {format_count(st.calls)} total, "
        f"{format_count(st.hits)} cache hits ({hit_rate:.1f}%), {format_count(st.computed)} computed"
    )


def print_profiles_with_descriptions() -> None:
    items = list_profiles_with_descriptions()
    if not items:
        print("No profiles found. Run 'partnum init' to create the workspace.")
        return
    width = max(len(name) for name, _ in items)
    for name, desc in items:
        print(f"  {Fore.CYAN}{name:<{width}}{Style.RESET_ALL}  {desc}")


def show_intro_help(*, om: OutputManager) -> None:
    om.write(f"{Fore.YELLOW}{Style.BRIGHT}Commands{Style.RESET_ALL}")
    om.write("  <n>            P(n); n may be an expression: 1_000, 10**3, 2e3, 5!")
    om.write("  t A:B          table of P(A)..P(B)")
    om.write("  check          compare P(0)..P(49) with OEIS A000041")
    om.write("  compare <n>    naive vs cold cache vs warm cache")
    om.write("  stats          cache size and call counters")
    om.write("  reset          start over with an empty cache")
    om.write("  p              list profiles; type a profile name to switch")
    om.write("  debug on|off   toggle [debug] diagnostics")
    om.write("  h, q           help, quit")
