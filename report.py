"""
PDF report generation and reusable chart rendering for the
Pay Down vs Invest simulator.

Provides:
  - Multi-page PDF report (generate_pdf)
  - Base64-encoded chart images for web embedding (get_web_charts)
  - Individual chart renderers reusable by both CLI and web

Charts plot yearly points (month 1, every 12th month after it, and the
final month) rather than every month.
"""

from __future__ import annotations

import base64
import io
from typing import Any, Dict, List, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.ticker import FuncFormatter
import numpy as np

import config as cfg
from simulation import (
    MonthRecord,
    SimInputs,
    SimResults,
    SweepResult,
)

# ═══════════════════════════════════════════════════════════════════
# Style constants
# ═══════════════════════════════════════════════════════════════════

BG = "#0a101f"
CARD = "#131b2e"
TEXT = "#f1f5f9"
TEXT2 = "#cbd5e1"
INDIGO = "#818cf8"
EMERALD = "#34d399"
AMBER = "#fbbf24"
RED = "#f87171"
SLATE = "#94a3b8"
BORDER = "#1e293b"
INDIGO_DEEP = "#6366f1"
EMERALD_DEEP = "#10b981"

A4W, A4H = 8.27, 11.69
WEB_W, WEB_H = 10, 7


# ═══════════════════════════════════════════════════════════════════
# Axis formatters
# ═══════════════════════════════════════════════════════════════════

def _money_fmt(x, _):
    sym = cfg.CURRENCY_SYMBOL
    sign = "-" if x < 0 else ""
    x = abs(x)
    if x >= 1e6:
        return f"{sign}{sym}{x / 1e6:.1f}M"
    if x >= 1e3:
        return f"{sign}{sym}{x / 1e3:.0f}k"
    return f"{sign}{sym}{x:.0f}"


MONEY_FMT = FuncFormatter(_money_fmt)


# ═══════════════════════════════════════════════════════════════════
# Style helpers
# ═══════════════════════════════════════════════════════════════════

def _style(fig, *axes):
    """Apply dark theme to figure and all axes."""
    fig.patch.set_facecolor(BG)
    for ax in axes:
        ax.set_facecolor(CARD)
        ax.tick_params(colors=TEXT, labelsize=8)
        ax.xaxis.label.set_color(TEXT)
        ax.yaxis.label.set_color(TEXT)
        ax.title.set_color(TEXT)
        for spine in ax.spines.values():
            spine.set_color(BORDER)
        ax.grid(True, alpha=0.15, color=SLATE)


def _legend(ax, loc="upper left"):
    ax.legend(loc=loc, fontsize=8, facecolor=CARD, edgecolor=BORDER, labelcolor=TEXT)


def yearly_points(results: SimResults) -> List[MonthRecord]:
    """Downsample the schedule to one point per year plus the last month."""
    schedule = results.schedule
    points = [r for i, r in enumerate(schedule) if i % 12 == 0]
    if schedule and points[-1] is not schedule[-1]:
        points.append(schedule[-1])
    return points


def _series(points: List[MonthRecord], name: str) -> np.ndarray:
    return np.array([getattr(p, name) for p in points], dtype=float)


def _years(points: List[MonthRecord]) -> np.ndarray:
    return np.array([p.month for p in points], dtype=float) / 12


# ═══════════════════════════════════════════════════════════════════
# Page 1: Summary (text only, dark background)
# ═══════════════════════════════════════════════════════════════════

def _page1_summary(inputs: SimInputs, d: Dict, verdict_text: str) -> plt.Figure:
    sym = cfg.CURRENCY_SYMBOL
    fig = plt.figure(figsize=(A4W, A4H))
    fig.patch.set_facecolor(BG)

    fig.text(0.50, 0.93, "Pay Down vs Invest",
             ha="center", fontsize=18, color=TEXT, fontweight="bold")
    fig.text(0.50, 0.91, "Loan Payoff Simulation Report",
             ha="center", fontsize=11, color=TEXT2)

    y = 0.86
    fig.text(0.08, y, "Your Parameters", fontsize=13, color=TEXT, fontweight="bold")
    y -= 0.028
    params = [
        f"Loan: {sym}{inputs.principal:,.0f}  |  Rate: {inputs.annual_rate_percent:.2f}%  |  "
        f"Term: {inputs.term_years} years  |  Payment: {sym}{d['monthly_payment']:,.2f}/mo",
        f"Extra: {sym}{inputs.monthly_extra_payment:,.0f}/mo  |  "
        f"Return: {inputs.investment_return_percent:.1f}%  |  "
        f"Inflation: {inputs.inflation_percent:.1f}%",
    ]
    if inputs.one_time_payment_amount > 0:
        params.append(f"One-time payment: {sym}{inputs.one_time_payment_amount:,.0f} "
                      f"in month {inputs.one_time_payment_month}")
    for p in params:
        fig.text(0.10, y, p, fontsize=9, color=TEXT2)
        y -= 0.024

    # Option A
    y -= 0.025
    fig.text(0.08, y,
             f"Option A — Pay Down {sym}{inputs.monthly_extra_payment:,.0f}/mo Extra",
             fontsize=13, color=INDIGO, fontweight="bold")
    y -= 0.028
    a_lines = [
        f"Paid off in month {d['payoff_months']} ({d['months_early']} months early)",
        f"Total interest: {sym}{d['a_total_interest']:,.0f}  |  "
        f"Interest saved: {sym}{d['interest_saved']:,.0f}",
        f"Invests {sym}{d['post_payoff_monthly']:,.0f}/mo after payoff  |  "
        f"Pot at end: {sym}{d['a_reinvest_value']:,.0f}",
        f"Net worth at end: {sym}{d['a_nw']:,.0f}  "
        f"({sym}{d['a_nw_real']:,.0f} in today's money)",
    ]
    for line in a_lines:
        fig.text(0.10, y, line, fontsize=9.5, color=TEXT2)
        y -= 0.024

    # Option B
    y -= 0.025
    fig.text(0.08, y,
             f"Option B — Invest {sym}{inputs.monthly_extra_payment:,.0f}/mo Instead",
             fontsize=13, color=EMERALD, fontweight="bold")
    y -= 0.028
    b_lines = [
        f"Total interest: {sym}{d['b_total_interest']:,.0f}",
        f"Contributions: {sym}{d['b_total_invested']:,.0f}  |  "
        f"Pot at end: {sym}{d['b_inv_value']:,.0f}",
        f"Net worth at end: {sym}{d['b_nw']:,.0f}  "
        f"({sym}{d['b_nw_real']:,.0f} in today's money)",
    ]
    for line in b_lines:
        fig.text(0.10, y, line, fontsize=9.5, color=TEXT2)
        y -= 0.024

    # Verdict
    y -= 0.03
    winner_color = EMERALD if d["winner"] == "invest" else INDIGO
    winner_label = "INVESTING WINS" if d["winner"] == "invest" else "PAYING DOWN WINS"
    fig.text(0.08, y, "The Verdict", fontsize=13, color=TEXT, fontweight="bold")
    y -= 0.03
    fig.text(0.10, y,
             f"{winner_label} — by {sym}{d['adv_abs']:,.0f} ({d['adv_pct']:.1f}%)",
             fontsize=12, color=winner_color, fontweight="bold")
    y -= 0.03

    words = verdict_text.split()
    line = ""
    for word in words:
        if len(line) + len(word) + 1 <= 85:
            line = f"{line} {word}" if line else word
        else:
            fig.text(0.10, y, line, fontsize=9, color=TEXT2)
            y -= 0.022
            line = word
    if line:
        fig.text(0.10, y, line, fontsize=9, color=TEXT2)
        y -= 0.022

    # Breakeven
    y -= 0.03
    fig.text(0.08, y, "Extra-Payment Breakeven", fontsize=13, color=TEXT, fontweight="bold")
    y -= 0.028
    if d.get("breakeven") is not None:
        be_text = f"Paying down wins from {sym}{d['breakeven']:,.0f}/mo extra."
    else:
        be_text = "Investing wins at every extra-payment level tested."
    fig.text(0.10, y, be_text, fontsize=10, color=AMBER)

    fig.text(0.50, 0.03,
             "This is not financial advice. Returns and inflation are assumed constant.",
             ha="center", fontsize=8, color=SLATE, style="italic")
    return fig


# ═══════════════════════════════════════════════════════════════════
# Net Worth Comparison (the key chart)
# ═══════════════════════════════════════════════════════════════════

def _chart_net_worth(results: SimResults, real: bool = False,
                     figsize=(A4W, A4H * 0.6)) -> plt.Figure:
    points = yearly_points(results)
    x = _years(points)
    suffix = "_real" if real else ""
    a = _series(points, "net_worth_a" + suffix)
    b = _series(points, "net_worth_b" + suffix)

    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    ax.plot(x, a, color=INDIGO, linewidth=2.2, label="A: Pay down, then invest")
    ax.plot(x, b, color=EMERALD, linewidth=2.2, label="B: Invest from day one")
    ax.axhline(0, color=SLATE, linewidth=0.8, alpha=0.6)

    payoff_year = results.payoff_months / 12
    if results.payoff_months < len(results.schedule):
        ax.axvline(payoff_year, color=AMBER, linewidth=1.2, linestyle="--",
                   alpha=0.7, label=f"A: loan paid off (year {payoff_year:.1f})")

    ax.yaxis.set_major_formatter(MONEY_FMT)
    ax.set_xlabel("Year")
    ax.set_ylabel("Net Worth (today's money)" if real else "Net Worth")
    title = "Net Worth Comparison"
    ax.set_title(f"{title} (Inflation-Adjusted)" if real else title, fontsize=14, pad=15)
    _legend(ax)

    gap = b[-1] - a[-1]
    winner_color = EMERALD if gap >= 0 else INDIGO
    ax.annotate(
        f"{_money_fmt(abs(gap), None)} difference",
        xy=(x[-1], (a[-1] + b[-1]) / 2), fontsize=11, color=winner_color,
        fontweight="bold", ha="right",
        xytext=(-15, 0), textcoords="offset points",
        bbox=dict(boxstyle="round,pad=0.3", facecolor=BG,
                  edgecolor=winner_color, alpha=0.9),
    )

    # First year where A overtakes B
    cross_mask = (a[:-1] <= b[:-1]) & (a[1:] > b[1:])
    cross_idxs = np.where(cross_mask)[0]
    if len(cross_idxs) > 0:
        ci = cross_idxs[0] + 1
        ax.annotate(
            f"Paying down overtakes\nin year {x[ci]:.0f}",
            xy=(x[ci], a[ci]), fontsize=9, color=INDIGO,
            xytext=(10, 20), textcoords="offset points",
            arrowprops=dict(arrowstyle="->", color=INDIGO, lw=1.2),
            bbox=dict(boxstyle="round,pad=0.3", facecolor=BG,
                      edgecolor=INDIGO, alpha=0.9),
        )
    return fig


# ═══════════════════════════════════════════════════════════════════
# Loan Balance + Investment Piles
# ═══════════════════════════════════════════════════════════════════

def _chart_balances(results: SimResults, figsize=(A4W, A4H)) -> plt.Figure:
    points = yearly_points(results)
    x = _years(points)
    balance_a = _series(points, "remaining_balance")
    balance_b = _series(points, "baseline_balance")
    # Reinvestment pile is not a record field; recover it from net worth A
    pile_a = _series(points, "net_worth_a") + balance_a
    pile_b = _series(points, "investment_value")

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=figsize, constrained_layout=True)
    _style(fig, ax1, ax2)

    ax1.plot(x, balance_a, color=INDIGO, linewidth=2, label="A: With extra payments")
    ax1.plot(x, balance_b, color=EMERALD, linewidth=2, label="B: Scheduled payment only")
    ax1.yaxis.set_major_formatter(MONEY_FMT)
    ax1.set_ylabel("Loan Balance")
    ax1.set_xlabel("Year")
    ax1.set_title("Loan Balance Over Time", fontsize=11, pad=10)
    _legend(ax1, loc="upper right")

    ax2.plot(x, pile_a, color=INDIGO, linewidth=2, label="A: Invest after payoff")
    ax2.plot(x, pile_b, color=EMERALD, linewidth=2, label="B: Invest from day one")
    ax2.yaxis.set_major_formatter(MONEY_FMT)
    ax2.set_ylabel("Investment Pot")
    ax2.set_xlabel("Year")
    ax2.set_title("Investment Growth", fontsize=11, pad=10)
    _legend(ax2)

    return fig


# ═══════════════════════════════════════════════════════════════════
# Cumulative Interest
# ═══════════════════════════════════════════════════════════════════

def _chart_interest(results: SimResults, figsize=(A4W, A4H * 0.5)) -> plt.Figure:
    points = yearly_points(results)
    x = _years(points)
    paid_a = _series(points, "total_interest_paid")
    paid_b = _series(points, "baseline_cumulative_interest")

    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    ax.fill_between(x, paid_a, paid_b, color=AMBER, alpha=0.18, label="Interest saved")
    ax.plot(x, paid_a, color=INDIGO, linewidth=2, label="A: Interest paid")
    ax.plot(x, paid_b, color=EMERALD, linewidth=2, label="B: Interest paid")
    ax.yaxis.set_major_formatter(MONEY_FMT)
    ax.set_xlabel("Year")
    ax.set_ylabel("Cumulative Interest")
    ax.set_title("Cumulative Interest Paid", fontsize=13, pad=12)
    _legend(ax)
    return fig


# ═══════════════════════════════════════════════════════════════════
# Extra-Payment Sweep (grouped bar)
# ═══════════════════════════════════════════════════════════════════

def _chart_sweep(sweep: SweepResult, figsize=(WEB_W, WEB_H - 1)) -> plt.Figure:
    """Grouped bar chart showing final net worth at each extra-payment level."""
    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    extras = [r.monthly_extra_payment for r in sweep.rows]
    nw_a = [r.net_worth_a for r in sweep.rows]
    nw_b = [r.net_worth_b for r in sweep.rows]

    x = np.arange(len(extras))
    w = 0.35
    ax.bar(x - w / 2, nw_a, w, color=INDIGO, label="A: Pay down NW",
           edgecolor=INDIGO_DEEP, linewidth=0.5)
    ax.bar(x + w / 2, nw_b, w, color=EMERALD, label="B: Invest NW",
           edgecolor=EMERALD_DEEP, linewidth=0.5)
    ax.set_xticks(x)
    ax.set_xticklabels([f"{cfg.CURRENCY_SYMBOL}{int(e):,}" for e in extras],
                       fontsize=7.5, rotation=45, ha="right")
    ax.yaxis.set_major_formatter(MONEY_FMT)
    ax.set_xlabel("Monthly Extra Payment")
    ax.set_ylabel("Net Worth at End of Term")
    ax.set_title("Net Worth by Extra-Payment Level", fontsize=13, pad=12)

    if sweep.breakeven_amount is not None:
        be_idx = extras.index(sweep.breakeven_amount)
        ax.annotate(
            "Breakeven", xy=(be_idx, max(nw_a[be_idx], nw_b[be_idx])),
            fontsize=9, color=AMBER, fontweight="bold",
            xytext=(0, 15), textcoords="offset points", ha="center",
            arrowprops=dict(arrowstyle="->", color=AMBER, lw=1.5),
        )
    else:
        ax.annotate(
            "Investing wins at all levels tested",
            xy=(0.5, 0.94), xycoords="axes fraction",
            fontsize=10, color=EMERALD, ha="center", fontweight="bold",
        )
    _legend(ax)
    return fig


# ═══════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════

def figure_to_base64(fig: plt.Figure) -> str:
    """Convert a matplotlib figure to a base64-encoded PNG string."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", facecolor=fig.get_facecolor(),
                dpi=150, bbox_inches="tight")
    buf.seek(0)
    b64 = base64.b64encode(buf.read()).decode()
    buf.close()
    return b64


def generate_pdf(
    inputs: SimInputs,
    results: SimResults,
    sweep: Optional[SweepResult],
    d: Dict[str, Any],
    verdict_text: str,
    path: str = cfg.REPORT_PATH,
) -> str:
    """Generate the full PDF report. Returns the file path."""
    pages = [
        _page1_summary(inputs, d, verdict_text),
        _chart_net_worth(results),
        _chart_net_worth(results, real=True),
        _chart_balances(results),
        _chart_interest(results),
    ]
    if sweep is not None and sweep.rows:
        pages.append(_chart_sweep(sweep, figsize=(A4W, A4H * 0.55)))

    with PdfPages(path) as pdf:
        for fig in pages:
            pdf.savefig(fig, facecolor=fig.get_facecolor())
    for fig in pages:
        plt.close(fig)
    return path


def get_web_charts(
    results: SimResults,
    sweep: Optional[SweepResult],
    real: bool = False,
) -> List[str]:
    """Return base64-encoded PNG chart images for web embedding.

    Returns up to 4 charts:
      [0] Net Worth Comparison  (nominal or inflation-adjusted)
      [1] Loan Balance & Investment Pot
      [2] Cumulative Interest
      [3] Extra-Payment Sweep  (only when a sweep was run)
    """
    chart_figs = [
        _chart_net_worth(results, real=real, figsize=(WEB_W, WEB_H)),
        _chart_balances(results, figsize=(WEB_W, WEB_H + 2)),
        _chart_interest(results, figsize=(WEB_W, WEB_H - 1)),
    ]
    if sweep is not None and sweep.rows:
        chart_figs.append(_chart_sweep(sweep))

    images = [figure_to_base64(f) for f in chart_figs]
    for f in chart_figs:
        plt.close(f)
    return images
