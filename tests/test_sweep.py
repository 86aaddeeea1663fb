"""Extra-payment sweep: one simulation per extra-payment level."""
import pytest

import config as cfg
from simulation import PostPayoffPolicy, SimInputs, extra_payment_sweep, simulate


def _inputs(**overrides) -> SimInputs:
    defaults = dict(
        principal=300_000,
        annual_rate_percent=5.5,
        term_years=30,
        monthly_extra_payment=200,
        investment_return_percent=7,
        inflation_percent=2.5,
    )
    defaults.update(overrides)
    return SimInputs(**defaults)


def test_default_levels_from_config():
    sweep = extra_payment_sweep(_inputs())
    assert [r.monthly_extra_payment for r in sweep.rows] == [float(x) for x in cfg.SWEEP_EXTRA_PAYMENTS]


def test_custom_levels():
    sweep = extra_payment_sweep(_inputs(), levels=[0, 250, 500])
    assert len(sweep.rows) == 3
    assert [r.monthly_extra_payment for r in sweep.rows] == [0.0, 250.0, 500.0]


def test_zero_extra_is_a_tie_reported_as_invest():
    row = extra_payment_sweep(_inputs(), levels=[0]).rows[0]
    assert row.payoff_months == 360
    assert row.interest_saved == 0.0
    assert row.net_worth_a == pytest.approx(0, abs=cfg.TIE_TOLERANCE)
    assert row.net_worth_b == 0.0
    assert row.winner == "invest"
    assert row.advantage == pytest.approx(0, abs=cfg.TIE_TOLERANCE)


def test_more_extra_pays_off_sooner_and_saves_more():
    rows = extra_payment_sweep(_inputs()).rows
    for prev, cur in zip(rows, rows[1:]):
        assert cur.payoff_months <= prev.payoff_months
        assert cur.interest_saved >= prev.interest_saved


def test_rows_match_individual_runs():
    sweep = extra_payment_sweep(_inputs(), levels=[300])
    direct = simulate(_inputs(monthly_extra_payment=300))
    row = sweep.rows[0]
    assert row.payoff_months == direct.payoff_months
    assert row.net_worth_a == direct.summary.net_worth_a
    assert row.net_worth_b == direct.summary.net_worth_b
    assert row.net_worth_a_real == direct.summary.net_worth_a_real


def test_breakeven_when_investing_earns_nothing():
    """With a 0% return, paying down wins by exactly the interest saved."""
    sweep = extra_payment_sweep(
        _inputs(annual_rate_percent=8, investment_return_percent=0),
        levels=[0, 100, 200],
    )
    assert sweep.rows[0].winner == "invest"
    assert sweep.breakeven_amount == 100.0
    for row in sweep.rows[1:]:
        assert row.winner == "paydown"
        assert row.advantage == pytest.approx(row.interest_saved, rel=1e-6)


def test_no_breakeven_when_investing_always_wins():
    sweep = extra_payment_sweep(
        _inputs(annual_rate_percent=2, investment_return_percent=10),
        levels=[100, 500],
    )
    assert all(r.winner == "invest" for r in sweep.rows)
    assert sweep.breakeven_amount is None


def test_advantage_never_negative():
    for row in extra_payment_sweep(_inputs(post_payoff=PostPayoffPolicy.fixed_amount(100))).rows:
        assert row.advantage >= -cfg.TIE_TOLERANCE


def test_empty_for_non_positive_term():
    sweep = extra_payment_sweep(_inputs(term_years=0))
    assert sweep.rows == ()
    assert sweep.breakeven_amount is None
