"""
CLI interface and shared display-data computation for the
Pay Down vs Invest simulator.
"""

from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional

import config as cfg
from simulation import (
    PostPayoffPolicy,
    SimInputs,
    SimResults,
    SweepResult,
    extra_payment_sweep,
    fixed_monthly_payment,
    simulate,
)
import report


# ═══════════════════════════════════════════════════════════════════
# Formatting helpers
# ═══════════════════════════════════════════════════════════════════

def fmt(val: float, decimals: int = 0) -> str:
    """Format number as $X,XXX (negatives as -$X,XXX)."""
    sign = "-" if val < 0 else ""
    return f"{sign}{cfg.CURRENCY_SYMBOL}{abs(val):,.{decimals}f}"


def pct(val: float, decimals: int = 1) -> str:
    return f"{val:.{decimals}f}%"


def months_label(months: int) -> str:
    """Render a month count as 'Xy Ym'."""
    years, rem = divmod(int(months), 12)
    if years and rem:
        return f"{years}y {rem}m"
    if years:
        return f"{years}y"
    return f"{rem}m"


# ═══════════════════════════════════════════════════════════════════
# Input collection (CLI)
# ═══════════════════════════════════════════════════════════════════

def _strip_currency(s: str) -> str:
    """Remove currency symbols, commas, spaces."""
    return s.replace(cfg.CURRENCY_SYMBOL, "").replace(",", "").replace(" ", "")


def _prompt_float(
    label: str,
    default: Any,
    min_val: float | None = None,
    max_val: float | None = None,
    currency: bool = False,
) -> float:
    while True:
        raw = input(f"  {label} [{default}]: ").strip()
        if not raw:
            return float(_strip_currency(str(default))) if currency else float(default)
        try:
            val = float(_strip_currency(raw) if currency else raw.replace("%", ""))
            if min_val is not None and val < min_val:
                print(f"    Must be at least {min_val}")
                continue
            if max_val is not None and val > max_val:
                print(f"    Must be at most {max_val}")
                continue
            return val
        except ValueError:
            print("    Invalid number, try again.")


def _prompt_int(
    label: str,
    default: int,
    min_val: int | None = None,
    max_val: int | None = None,
) -> int:
    while True:
        raw = input(f"  {label} [{default}]: ").strip()
        if not raw:
            return default
        try:
            val = int(float(_strip_currency(raw)))
            if min_val is not None and val < min_val:
                print(f"    Must be at least {min_val}")
                continue
            if max_val is not None and val > max_val:
                print(f"    Must be at most {max_val}")
                continue
            return val
        except ValueError:
            print("    Invalid number, try again.")


def _prompt_choice(label: str, options: list[str], default: str) -> str:
    opts = "/".join(options)
    while True:
        raw = input(f"  {label} ({opts}) [{default}]: ").strip().lower()
        if not raw:
            return default
        if raw in options:
            return raw
        print(f"    Choose from: {opts}")


def collect_inputs() -> SimInputs:
    """Prompt the user for all simulation parameters."""
    print("\n  Enter your details (press Enter for defaults):\n")

    sym = cfg.CURRENCY_SYMBOL
    principal = _prompt_float("Loan amount", f"{sym}{cfg.DEFAULT_PRINCIPAL:,}", 0, currency=True)
    rate = _prompt_float("Annual interest rate %", cfg.DEFAULT_ANNUAL_RATE_PERCENT,
                         0, cfg.MAX_RATE_PERCENT)
    years = _prompt_int("Loan term (years)", cfg.DEFAULT_TERM_YEARS, 1, cfg.MAX_TERM_YEARS)
    extra = _prompt_float("Monthly extra payment", f"{sym}{cfg.DEFAULT_MONTHLY_EXTRA:,}",
                          0, currency=True)
    inv_ret = _prompt_float("Expected annual investment return %",
                            cfg.DEFAULT_INVESTMENT_RETURN_PERCENT, 0, cfg.MAX_RATE_PERCENT)
    inflation = _prompt_float("Expected annual inflation %", cfg.DEFAULT_INFLATION_PERCENT,
                              0, cfg.MAX_RATE_PERCENT)
    lump = _prompt_float("One-time payment amount", f"{sym}{cfg.DEFAULT_ONE_TIME_AMOUNT}",
                         0, currency=True)
    lump_month = 0
    if lump > 0:
        lump_month = _prompt_int("One-time payment month", 12, 1, years * 12)

    payment = fixed_monthly_payment(principal, rate, years)
    reinvest = _prompt_choice(
        f"After payoff, invest the {fmt(payment)}/mo payment + extra?",
        ["yes", "no"], "yes",
    )
    if reinvest == "yes":
        policy = PostPayoffPolicy.reinvest_payment()
    else:
        amount = _prompt_float("Monthly amount to invest after payoff", f"{sym}0",
                               0, currency=True)
        policy = PostPayoffPolicy.fixed_amount(amount)

    return SimInputs(
        principal=principal,
        annual_rate_percent=rate,
        term_years=years,
        monthly_extra_payment=extra,
        investment_return_percent=inv_ret,
        inflation_percent=inflation,
        one_time_payment_amount=lump,
        one_time_payment_month=lump_month,
        post_payoff=policy,
    )


# ═══════════════════════════════════════════════════════════════════
# Shared display-data computation (used by CLI and web app)
# ═══════════════════════════════════════════════════════════════════

def post_payoff_monthly(inputs: SimInputs) -> float:
    """Monthly amount Scenario A invests once the loan is gone."""
    if inputs.continue_investing_after_payoff:
        payment = fixed_monthly_payment(
            inputs.principal, inputs.annual_rate_percent, inputs.term_years,
        )
        return payment + inputs.monthly_extra_payment
    return inputs.post_payoff_investment_amount


def yearly_rows(results: SimResults) -> List[Dict[str, Any]]:
    """Year-end rows for the amortization table."""
    rows = []
    for r in results.yearly():
        rows.append({
            "year": (r.month + 11) // 12,
            "month": r.month,
            "balance": r.remaining_balance,
            "baseline_balance": r.baseline_balance,
            "interest_paid": r.total_interest_paid,
            "interest_saved": r.cumulative_interest_saved,
            "investment_value": r.investment_value,
            "net_worth_a": r.net_worth_a,
            "net_worth_b": r.net_worth_b,
            "net_worth_a_real": r.net_worth_a_real,
            "net_worth_b_real": r.net_worth_b_real,
        })
    return rows


def compute_display_data(
    inputs: SimInputs,
    results: SimResults,
    sweep: Optional[SweepResult] = None,
) -> Dict[str, Any]:
    """Extract every metric needed for the output sections."""
    s = results.summary
    n = inputs.total_months
    payoff = results.payoff_months
    months_early = max(n - payoff, 0) if not results.is_empty else 0
    baseline_interest = (
        results.schedule[-1].baseline_cumulative_interest if not results.is_empty else 0.0
    )

    # ── Verdict ─────────────────────────────────────────────────
    a_nw, b_nw = s.net_worth_a, s.net_worth_b
    if a_nw - b_nw > cfg.TIE_TOLERANCE:
        winner = "paydown"
        adv_abs = a_nw - b_nw
        adv_real = s.net_worth_a_real - s.net_worth_b_real
    else:
        winner = "invest"
        adv_abs = b_nw - a_nw
        adv_real = s.net_worth_b_real - s.net_worth_a_real
    loser_nw = min(a_nw, b_nw)
    adv_pct = (adv_abs / loser_nw * 100) if loser_nw > 0 else 0.0

    return {
        # Inputs echo
        "principal": inputs.principal,
        "rate": inputs.annual_rate_percent,
        "term_years": inputs.term_years,
        "total_months": n,
        "extra": inputs.monthly_extra_payment,
        "inv_return": inputs.investment_return_percent,
        "inflation": inputs.inflation_percent,
        "lump_amount": inputs.one_time_payment_amount,
        "lump_month": inputs.one_time_payment_month,
        "continue_investing": inputs.continue_investing_after_payoff,
        "post_payoff_monthly": post_payoff_monthly(inputs),
        "empty": results.is_empty,
        # Loan
        "monthly_payment": results.monthly_payment,
        "payoff_months": payoff,
        "months_early": months_early,
        "years_investing": months_early / 12,
        # Option A
        "a_total_interest": results.total_interest,
        "a_total_interest_real": s.total_interest_real,
        "a_total_paid": results.total_paid,
        "a_reinvest_value": s.reinvestment_value,
        "a_reinvest_growth": s.reinvestment_growth,
        "a_nw": a_nw,
        "a_nw_real": s.net_worth_a_real,
        "interest_saved": s.interest_saved,
        "interest_saved_real": s.interest_saved_real,
        # Option B
        "b_total_interest": baseline_interest,
        "b_total_interest_real": s.baseline_interest_real,
        "b_total_invested": s.total_invested,
        "b_inv_value": s.investment_value,
        "b_inv_yield": s.investment_yield,
        "b_nw": b_nw,
        "b_nw_real": s.net_worth_b_real,
        # Verdict
        "winner": winner,
        "adv_abs": adv_abs,
        "adv_pct": adv_pct,
        "adv_real": adv_real,
        # Sweep
        "sweep": sweep,
        "breakeven": sweep.breakeven_amount if sweep is not None else None,
        "yearly": yearly_rows(results),
    }


def generate_verdict_text(d: Dict[str, Any]) -> str:
    """Build a 2-3 sentence plain-English verdict."""
    if d["empty"]:
        return "There is no loan to compare: the term must be at least one year."

    extra = fmt(d["extra"])
    adv = fmt(d["adv_abs"])
    adv_p = pct(d["adv_pct"])
    years = d["term_years"]
    rate = pct(d["rate"], 2)
    ret = pct(d["inv_return"])
    real = fmt(d["adv_real"])

    if d["winner"] == "invest":
        if d["months_early"] == 0:
            return (
                f"Investing {extra}/mo wins by {adv} ({adv_p}) after "
                f"{years} years ({real} in today's money). The extra "
                f"payments never retire the loan early, so paying down "
                f"only saves interest while the invested extra compounds "
                f"at ~{ret} for the full term."
            )
        return (
            f"Investing {extra}/mo wins by {adv} ({adv_p}) after {years} "
            f"years ({real} in today's money). Paying down would clear "
            f"the loan {months_label(d['months_early'])} early and save "
            f"{fmt(d['interest_saved'])} of {rate} interest, but investing "
            f"from day one at ~{ret} outweighs it."
        )
    return (
        f"Paying down {extra}/mo wins by {adv} ({adv_p}) after {years} "
        f"years ({real} in today's money). Clearing the loan in month "
        f"{d['payoff_months']} frees {fmt(d['post_payoff_monthly'])}/mo to "
        f"invest for {d['years_investing']:.1f} years, and the "
        f"{fmt(d['interest_saved'])} of {rate} interest saved beats "
        f"investing {extra}/mo at ~{ret} from day one."
    )


# ═══════════════════════════════════════════════════════════════════
# Box-drawing CLI output
# ═══════════════════════════════════════════════════════════════════

W = 78  # box width (characters)
H = "═"


def _box_top(title: str) -> str:
    inner = W - 2
    return (
        f"╔{H * inner}╗\n"
        f"║  {title:<{inner - 2}}║\n"
        f"╠{H * inner}╣"
    )


def _box_line(text: str = "") -> str:
    inner = W - 4
    if len(text) > inner:
        text = text[:inner]
    return f"║  {text:<{inner}}║"


def _box_row(label: str, value: str, lw: int = 38) -> str:
    return _box_line(f"{label:<{lw}}{value}")


def _box_bottom() -> str:
    return f"╚{H * (W - 2)}╝"


def _print_section(title: str, rows: List[str]) -> None:
    """Print a titled box with content rows."""
    print(_box_top(title))
    for r in rows:
        print(r)
    print(_box_bottom())
    print()


def _wrap(text: str, width: int = W - 6) -> List[str]:
    lines, line = [], ""
    for word in text.split():
        if len(line) + len(word) + 1 <= width:
            line = f"{line} {word}" if line else word
        else:
            lines.append(line)
            line = word
    if line:
        lines.append(line)
    return lines


# ═══════════════════════════════════════════════════════════════════
# CLI Section Printers
# ═══════════════════════════════════════════════════════════════════

def _print_loan(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Loan amount", fmt(d["principal"])),
        _box_row("Interest rate", pct(d["rate"], 2)),
        _box_row("Term", f"{d['term_years']} years ({d['total_months']} months)"),
        _box_row("Scheduled monthly payment", fmt(d["monthly_payment"], 2)),
        _box_line(),
        _box_row("Investment return", pct(d["inv_return"])),
        _box_row("Inflation", pct(d["inflation"])),
    ]
    if d["lump_amount"] > 0:
        rows.append(_box_row("One-time payment",
                             f"{fmt(d['lump_amount'])} in month {d['lump_month']}"))
    _print_section("YOUR LOAN", rows)


def _print_option_a(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Loan paid off in", f"month {d['payoff_months']} "
                                     f"({months_label(d['payoff_months'])})"),
        _box_row("Ahead of schedule by", months_label(d["months_early"])),
        _box_row("Total interest paid", fmt(d["a_total_interest"])),
        _box_row("Interest saved vs minimum", fmt(d["interest_saved"])),
        _box_line(),
        _box_row("Invested monthly after payoff", fmt(d["post_payoff_monthly"])),
        _box_row("Investment pot at end", fmt(d["a_reinvest_value"])),
        _box_row("  of which growth", fmt(d["a_reinvest_growth"])),
        _box_line(),
        _box_row("Net worth at end", fmt(d["a_nw"])),
        _box_row("  in today's money", fmt(d["a_nw_real"])),
    ]
    _print_section(f"OPTION A — PAY DOWN {fmt(d['extra'])}/MO EXTRA", rows)


def _print_option_b(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Loan paid off in", f"{d['term_years']} years (full term)"),
        _box_row("Total interest paid", fmt(d["b_total_interest"])),
        _box_line(),
        _box_row("Invested per month", fmt(d["extra"])),
        _box_row("Total contributions", fmt(d["b_total_invested"])),
        _box_row("Investment pot at end", fmt(d["b_inv_value"])),
        _box_row("  of which growth", fmt(d["b_inv_yield"])),
        _box_line(),
        _box_row("Net worth at end", fmt(d["b_nw"])),
        _box_row("  in today's money", fmt(d["b_nw_real"])),
    ]
    _print_section(f"OPTION B — INVEST {fmt(d['extra'])}/MO INSTEAD", rows)


def _print_verdict(d: Dict[str, Any]) -> None:
    winner_label = "INVESTING WINS" if d["winner"] == "invest" else "PAYING DOWN WINS"
    rows = [
        _box_row("Winner", winner_label),
        _box_row("Advantage", f"{fmt(d['adv_abs'])} ({pct(d['adv_pct'])})"),
        _box_row("  in today's money", fmt(d["adv_real"])),
        _box_line(),
    ]
    rows.extend(_box_line(line) for line in _wrap(generate_verdict_text(d)))
    _print_section("THE VERDICT", rows)


def _print_yearly(d: Dict[str, Any]) -> None:
    h1 = (f"{'Year':>4}  {'Balance A':>11}  {'Balance B':>11}  "
          f"{'Saved':>9}  {'NW A':>11}  {'NW B':>11}")
    rows = [_box_line(h1), _box_line("─" * (W - 6))]
    for r in d["yearly"]:
        rows.append(_box_line(
            f"{r['year']:>4}  {fmt(r['balance']):>11}  "
            f"{fmt(r['baseline_balance']):>11}  {fmt(r['interest_saved']):>9}  "
            f"{fmt(r['net_worth_a']):>11}  {fmt(r['net_worth_b']):>11}"
        ))
    _print_section("YEAR BY YEAR (NOMINAL)", rows)


def _print_sweep(d: Dict[str, Any]) -> None:
    sweep: Optional[SweepResult] = d["sweep"]
    if sweep is None or not sweep.rows:
        return

    h1 = f"{'Extra':>8}  {'Payoff':>8}  {'NW A':>11}  {'NW B':>11}  {'Winner':>8}  {'By':>10}"
    rows = [_box_line(h1), _box_line("─" * (W - 6))]
    for r in sweep.rows:
        marker = " <<" if r.monthly_extra_payment == sweep.breakeven_amount else ""
        rows.append(_box_line(
            f"{fmt(r.monthly_extra_payment):>8}  "
            f"{months_label(r.payoff_months):>8}  "
            f"{fmt(r.net_worth_a):>11}  {fmt(r.net_worth_b):>11}  "
            f"{r.winner:>8}  {fmt(r.advantage):>10}{marker}"
        ))
    rows.append(_box_line())

    if sweep.breakeven_amount is not None:
        summary = (f"Paying down wins from {fmt(sweep.breakeven_amount)}/mo extra "
                   f"at these rates.")
    else:
        top = fmt(sweep.rows[-1].monthly_extra_payment)
        summary = f"Investing wins at every level up to {top}/mo."
    rows.append(_box_line(summary))
    _print_section("WHAT EXTRA PAYMENT WOULD MAKE PAYING DOWN WIN?", rows)


def _print_report(pdf_path: str | None) -> None:
    rows = []
    if pdf_path:
        rows.append(_box_line(f"PDF report saved to: {pdf_path}"))
    else:
        rows.append(_box_line("Charts available in the web app:"))
        rows.append(_box_line(f"  python main.py  (opens {cfg.WEB_HOST}:{cfg.WEB_PORT})"))
    _print_section("CHARTS", rows)


# ═══════════════════════════════════════════════════════════════════
# Main CLI entry point
# ═══════════════════════════════════════════════════════════════════

def run_cli(pdf_path: str = cfg.REPORT_PATH) -> None:
    """Run the full CLI workflow."""
    # Ensure box-drawing characters render on Windows
    try:
        sys.stdout.reconfigure(encoding="utf-8")
    except (AttributeError, OSError):
        pass
    print()
    print("=" * W)
    print("  Pay Down vs Invest Simulator")
    print("=" * W)

    inputs = collect_inputs()

    print(f"\n  Running simulation ({inputs.total_months} months)...")
    results = simulate(inputs)
    print("  Done.")

    print("\n  Running extra-payment sweep...")
    sweep = extra_payment_sweep(inputs)
    print("  Done.")

    d = compute_display_data(inputs, results, sweep)

    print()
    _print_loan(d)
    _print_option_a(d)
    _print_option_b(d)
    _print_verdict(d)
    _print_yearly(d)
    _print_sweep(d)

    saved = None
    if not results.is_empty:
        print("\n  Generating PDF report...")
        saved = report.generate_pdf(inputs, results, sweep, d,
                                    generate_verdict_text(d), pdf_path)
        print(f"  Saved to {saved}\n")

    _print_report(saved)


if __name__ == "__main__":
    run_cli()
