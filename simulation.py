"""
Deterministic simulation engine for the pay-down-vs-invest comparison.

Compares two strategies over the full term of a fixed-rate loan:
  A) Pay extra towards the loan, invest the freed cash flow after payoff
  B) Pay only the scheduled amount, invest the extra from month one

The month loop (term x 12 steps) is a plain Python loop; conversion to
real (inflation-adjusted) values is vectorised with numpy.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional

import numpy as np

import config as cfg


class InvalidInputError(ValueError):
    """Simulation inputs that are negative or contradict each other."""


# ─── Data Classes ─────────────────────────────────────────────────────

class PostPayoffMode(Enum):
    REINVEST_PAYMENT = "reinvest_payment"
    FIXED_AMOUNT = "fixed_amount"


@dataclass(frozen=True)
class PostPayoffPolicy:
    """What Scenario A does with its cash flow once the loan is retired.

    ``REINVEST_PAYMENT`` keeps paying the scheduled payment plus the
    monthly extra into the reinvestment pile.  ``FIXED_AMOUNT`` invests
    ``amount`` every month instead.
    """

    mode: PostPayoffMode = PostPayoffMode.REINVEST_PAYMENT
    amount: float = 0.0

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise InvalidInputError("Post-payoff investment amount must be >= 0")
        if self.mode is PostPayoffMode.REINVEST_PAYMENT and self.amount != 0:
            raise InvalidInputError(
                "A fixed post-payoff amount only applies when the payment "
                "is not reinvested"
            )

    @classmethod
    def reinvest_payment(cls) -> PostPayoffPolicy:
        return cls(PostPayoffMode.REINVEST_PAYMENT)

    @classmethod
    def fixed_amount(cls, amount: float) -> PostPayoffPolicy:
        return cls(PostPayoffMode.FIXED_AMOUNT, float(amount))

    @property
    def continue_investing(self) -> bool:
        return self.mode is PostPayoffMode.REINVEST_PAYMENT


def _total_months(term_years: float) -> int:
    return max(int(term_years * 12), 0)


@dataclass(frozen=True)
class SimInputs:
    """User inputs for one simulation run. Rates are in percent."""

    principal: float
    annual_rate_percent: float
    term_years: int
    monthly_extra_payment: float = 0.0
    investment_return_percent: float = 0.0
    inflation_percent: float = 0.0
    one_time_payment_amount: float = 0.0
    one_time_payment_month: int = 0      # 1-indexed; 0 = never
    post_payoff: PostPayoffPolicy = field(default_factory=PostPayoffPolicy.reinvest_payment)

    def __post_init__(self) -> None:
        non_negative = {
            "Principal": self.principal,
            "Annual rate": self.annual_rate_percent,
            "Monthly extra payment": self.monthly_extra_payment,
            "Investment return": self.investment_return_percent,
            "Inflation": self.inflation_percent,
            "One-time payment": self.one_time_payment_amount,
        }
        for label, value in non_negative.items():
            if not math.isfinite(value):
                raise InvalidInputError(f"{label} must be a finite number")
            if value < 0:
                raise InvalidInputError(f"{label} must be >= 0")
        if self.term_years > cfg.MAX_TERM_YEARS:
            raise InvalidInputError(f"Loan term must be at most {cfg.MAX_TERM_YEARS} years")
        capped = {
            "Annual rate": self.annual_rate_percent,
            "Investment return": self.investment_return_percent,
            "Inflation": self.inflation_percent,
        }
        for label, value in capped.items():
            if value > cfg.MAX_RATE_PERCENT:
                raise InvalidInputError(f"{label} must be at most {cfg.MAX_RATE_PERCENT:g}%")

    @property
    def total_months(self) -> int:
        return _total_months(self.term_years)

    @property
    def monthly_rate(self) -> float:
        return self.annual_rate_percent / 100 / 12

    @property
    def investment_monthly_rate(self) -> float:
        return self.investment_return_percent / 100 / 12

    @property
    def inflation_monthly_rate(self) -> float:
        return self.inflation_percent / 100 / 12

    @property
    def continue_investing_after_payoff(self) -> bool:
        return self.post_payoff.continue_investing

    @property
    def post_payoff_investment_amount(self) -> float:
        return self.post_payoff.amount

    def lump_for_month(self, month: int) -> float:
        """One-time payment due in ``month`` (0.0 in every other month)."""
        if month == self.one_time_payment_month and self.one_time_payment_amount > 0:
            return self.one_time_payment_amount
        return 0.0


@dataclass(frozen=True)
class MonthRecord:
    """One month of the combined schedule.

    Every monetary field has a ``*_real`` twin equal to the nominal value
    divided by ``deflator`` = (1 + monthly inflation) ** month.
    """

    month: int
    deflator: float

    # Scenario A: accelerated loan
    payment: float
    interest: float
    principal: float
    extra_payment: float
    remaining_balance: float
    total_interest_paid: float

    # Scenario B: baseline loan
    baseline_balance: float
    baseline_interest: float
    baseline_cumulative_interest: float

    # Asset piles
    investment_value: float
    investment_gain: float
    reinvestment_growth: float

    # Comparison
    cumulative_interest_saved: float
    net_worth_a: float
    net_worth_b: float

    payment_real: float
    interest_real: float
    principal_real: float
    extra_payment_real: float
    remaining_balance_real: float
    total_interest_paid_real: float
    baseline_balance_real: float
    baseline_interest_real: float
    baseline_cumulative_interest_real: float
    investment_value_real: float
    investment_gain_real: float
    reinvestment_growth_real: float
    cumulative_interest_saved_real: float
    net_worth_a_real: float
    net_worth_b_real: float


@dataclass(frozen=True)
class Summary:
    """Final totals. All zero for the empty (no loan) result."""

    total_invested: float = 0.0
    investment_value: float = 0.0
    investment_yield: float = 0.0
    interest_saved: float = 0.0
    reinvestment_value: float = 0.0
    reinvestment_growth: float = 0.0
    net_worth_a: float = 0.0
    net_worth_b: float = 0.0

    # Deflated by the final month's factor
    total_invested_real: float = 0.0
    investment_value_real: float = 0.0
    investment_yield_real: float = 0.0
    interest_saved_real: float = 0.0
    reinvestment_growth_real: float = 0.0
    net_worth_a_real: float = 0.0
    net_worth_b_real: float = 0.0

    # Each month's interest deflated by that month's factor, summed
    total_interest_real: float = 0.0
    baseline_interest_real: float = 0.0


@dataclass(frozen=True)
class SimResults:
    """Output of one simulation run."""

    monthly_payment: float
    total_interest: float
    total_paid: float
    payoff_months: int
    schedule: tuple[MonthRecord, ...] = field(repr=False)
    summary: Summary

    @classmethod
    def empty(cls) -> SimResults:
        return cls(
            monthly_payment=0.0,
            total_interest=0.0,
            total_paid=0.0,
            payoff_months=0,
            schedule=(),
            summary=Summary(),
        )

    @property
    def is_empty(self) -> bool:
        return not self.schedule

    @property
    def months(self) -> np.ndarray:
        return np.arange(1, len(self.schedule) + 1)

    def column(self, name: str) -> np.ndarray:
        """One MonthRecord field across the whole schedule."""
        return np.array([getattr(r, name) for r in self.schedule], dtype=float)

    def yearly(self) -> tuple[MonthRecord, ...]:
        """Year-end records (month 12, 24, ...) plus a trailing partial year."""
        rows = [r for r in self.schedule if r.month % 12 == 0]
        if self.schedule and self.schedule[-1].month % 12 != 0:
            rows.append(self.schedule[-1])
        return tuple(rows)


# ─── Fixed Payment ────────────────────────────────────────────────────

def fixed_monthly_payment(principal: float, annual_rate_percent: float,
                          term_years: float) -> float:
    """Level payment that fully amortizes ``principal`` over the term.

    Also used by the CLI and web form to preview the amount reinvested
    after payoff, so both always agree with the engine.
    """
    n = _total_months(term_years)
    if n <= 0:
        return 0.0
    r = annual_rate_percent / 100 / 12
    if r > 0:
        growth = (1 + r) ** n
        return principal * r * growth / (growth - 1)
    return principal / n


def _amortize_month(balance: float, rate: float,
                    payment: float) -> tuple[float, float, float, float]:
    """Apply one month's payment to an active balance.

    Returns (interest, principal, amount paid, new balance).  A payment
    that covers balance + interest retires the loan with a balance of
    exactly 0 and is capped at what is owed.
    """
    interest = balance * rate
    if payment + cfg.PAYOFF_TOLERANCE >= balance + interest:
        return interest, balance, balance + interest, 0.0
    principal = payment - interest
    return interest, principal, payment, balance - principal


# ─── Baseline Amortizer ───────────────────────────────────────────────

def _baseline_schedule(inputs: SimInputs, payment: float) -> dict[str, np.ndarray]:
    """Scheduled payment only: Scenario B's liability side."""
    n = inputs.total_months
    rate = inputs.monthly_rate

    balances = np.zeros(n)
    interests = np.zeros(n)

    balance = float(inputs.principal)
    for i in range(n):
        if balance > 0:
            interests[i], _, _, balance = _amortize_month(balance, rate, payment)
        balances[i] = balance

    return {
        "balance": balances,
        "interest": interests,
        "cumulative_interest": np.cumsum(interests),
    }


# ─── Accelerated Amortizer + Investment Ledger ────────────────────────

def _accelerated_schedule(inputs: SimInputs, payment: float) -> dict[str, np.ndarray]:
    """Scheduled payment + extras, plus both asset piles.

    The reinvestment pile (Scenario A) only receives money once the loan
    is gone; the invest-the-difference pile (Scenario B) receives the
    extra every month.  Both earn yield on their opening balance before
    the month's contribution is added.
    """
    n = inputs.total_months
    rate = inputs.monthly_rate
    inv_rate = inputs.investment_monthly_rate
    policy = inputs.post_payoff
    extra = inputs.monthly_extra_payment

    names = (
        "payment", "interest", "principal", "extra_payment",
        "remaining_balance", "investment_value", "investment_gain",
        "reinvestment_value", "reinvestment_growth", "total_invested",
    )
    out = {name: np.zeros(n) for name in names}

    balance = float(inputs.principal)
    pile = 0.0              # Scenario A: reinvestment pile
    pile_growth = 0.0
    invested = 0.0          # Scenario B: invest-the-difference pile
    contributed = 0.0

    for i in range(n):
        lump = inputs.lump_for_month(i + 1)

        if balance > 0:
            applied_extra = extra + lump
            intended = payment + applied_extra
            interest, principal, paid, balance = _amortize_month(balance, rate, intended)

            # Open question kept as observed: overflow is only captured
            # when the payment itself is being reinvested.
            if balance == 0.0 and policy.continue_investing:
                overflow = intended - paid
                if overflow > 0:
                    pile += overflow

            out["payment"][i] = paid
            out["interest"][i] = interest
            out["principal"][i] = principal
            out["extra_payment"][i] = applied_extra
        else:
            growth = pile * inv_rate
            pile += growth
            pile_growth += growth
            if policy.continue_investing:
                pile += payment + extra + lump
            else:
                pile += policy.amount

        gain = invested * inv_rate
        invested += gain
        contribution = extra + lump
        invested += contribution
        contributed += contribution

        out["remaining_balance"][i] = balance
        out["investment_value"][i] = invested
        out["investment_gain"][i] = invested - contributed
        out["reinvestment_value"][i] = pile
        out["reinvestment_growth"][i] = pile_growth
        out["total_invested"][i] = contributed

    out["total_interest_paid"] = np.cumsum(out["interest"])
    return out


# ─── Aggregator ───────────────────────────────────────────────────────

def simulate(inputs: SimInputs) -> SimResults:
    """Run both amortizers and merge them into one schedule + summary."""
    n = inputs.total_months
    if n <= 0:
        return SimResults.empty()

    payment = fixed_monthly_payment(
        inputs.principal, inputs.annual_rate_percent, inputs.term_years,
    )
    deflators = (1 + inputs.inflation_monthly_rate) ** np.arange(1, n + 1)

    baseline = _baseline_schedule(inputs, payment)
    accel = _accelerated_schedule(inputs, payment)

    nominal = {
        "payment": accel["payment"],
        "interest": accel["interest"],
        "principal": accel["principal"],
        "extra_payment": accel["extra_payment"],
        "remaining_balance": accel["remaining_balance"],
        "total_interest_paid": accel["total_interest_paid"],
        "baseline_balance": baseline["balance"],
        "baseline_interest": baseline["interest"],
        "baseline_cumulative_interest": baseline["cumulative_interest"],
        "investment_value": accel["investment_value"],
        "investment_gain": accel["investment_gain"],
        "reinvestment_growth": accel["reinvestment_growth"],
        "cumulative_interest_saved": np.maximum(
            baseline["cumulative_interest"] - accel["total_interest_paid"], 0.0,
        ),
        "net_worth_a": accel["reinvestment_value"] - accel["remaining_balance"],
        "net_worth_b": accel["investment_value"] - baseline["balance"],
    }
    columns = dict(nominal)
    for name, values in nominal.items():
        columns[f"{name}_real"] = values / deflators

    schedule = tuple(
        MonthRecord(
            month=i + 1,
            deflator=float(deflators[i]),
            **{name: float(values[i]) for name, values in columns.items()},
        )
        for i in range(n)
    )

    paid_off = np.flatnonzero(accel["remaining_balance"] == 0.0)
    payoff_months = int(paid_off[0]) + 1 if paid_off.size else n

    final = float(deflators[-1])
    last = schedule[-1]
    total_interest = float(accel["total_interest_paid"][-1])
    total_invested = float(accel["total_invested"][-1])
    interest_saved = max(0.0, float(baseline["cumulative_interest"][-1]) - total_interest)
    pile_growth = float(accel["reinvestment_growth"][-1])

    summary = Summary(
        total_invested=total_invested,
        investment_value=last.investment_value,
        investment_yield=last.investment_gain,
        interest_saved=interest_saved,
        reinvestment_value=float(accel["reinvestment_value"][-1]),
        reinvestment_growth=pile_growth,
        net_worth_a=last.net_worth_a,
        net_worth_b=last.net_worth_b,
        total_invested_real=total_invested / final,
        investment_value_real=last.investment_value / final,
        investment_yield_real=last.investment_gain / final,
        interest_saved_real=interest_saved / final,
        reinvestment_growth_real=pile_growth / final,
        net_worth_a_real=last.net_worth_a / final,
        net_worth_b_real=last.net_worth_b / final,
        total_interest_real=float(np.sum(accel["interest"] / deflators)),
        baseline_interest_real=float(np.sum(baseline["interest"] / deflators)),
    )

    return SimResults(
        monthly_payment=payment,
        total_interest=total_interest,
        total_paid=float(accel["payment"].sum()),
        payoff_months=payoff_months,
        schedule=schedule,
        summary=summary,
    )


run_simulation = simulate


# ─── Extra-Payment Sweep ──────────────────────────────────────────────

@dataclass(frozen=True)
class SweepRow:
    """One row of the extra-payment sweep table."""

    monthly_extra_payment: float
    payoff_months: int
    interest_saved: float
    net_worth_a: float
    net_worth_b: float
    net_worth_a_real: float
    net_worth_b_real: float
    winner: str                 # 'paydown' or 'invest'
    advantage: float            # winner's margin, >= 0


@dataclass(frozen=True)
class SweepResult:
    """Output of the extra-payment sweep."""

    rows: tuple[SweepRow, ...]
    breakeven_amount: Optional[float]   # None if paying down never wins


def extra_payment_sweep(
    inputs: SimInputs,
    levels: Optional[Iterable[float]] = None,
) -> SweepResult:
    """Re-run the simulation for a range of monthly extra payments.

    Parameters
    ----------
    inputs : SimInputs
        Base inputs. ``monthly_extra_payment`` is overridden per level.
    levels : iterable of float, optional
        Extra payments to test, ascending. Defaults to
        ``config.SWEEP_EXTRA_PAYMENTS``.

    Returns
    -------
    SweepResult
        Table rows and the lowest level where paying down wins on final
        nominal net worth (None if it never does). Ties go to investing.
    """
    if inputs.total_months <= 0:
        return SweepResult(rows=(), breakeven_amount=None)
    if levels is None:
        levels = cfg.SWEEP_EXTRA_PAYMENTS

    rows: list[SweepRow] = []
    breakeven: Optional[float] = None

    for extra in levels:
        res = simulate(replace(inputs, monthly_extra_payment=float(extra)))
        s = res.summary

        if s.net_worth_a - s.net_worth_b > cfg.TIE_TOLERANCE:
            winner = "paydown"
            advantage = s.net_worth_a - s.net_worth_b
        else:
            winner = "invest"
            advantage = s.net_worth_b - s.net_worth_a

        rows.append(SweepRow(
            monthly_extra_payment=float(extra),
            payoff_months=res.payoff_months,
            interest_saved=s.interest_saved,
            net_worth_a=s.net_worth_a,
            net_worth_b=s.net_worth_b,
            net_worth_a_real=s.net_worth_a_real,
            net_worth_b_real=s.net_worth_b_real,
            winner=winner,
            advantage=advantage,
        ))

        if breakeven is None and winner == "paydown":
            breakeven = float(extra)

    return SweepResult(rows=tuple(rows), breakeven_amount=breakeven)
