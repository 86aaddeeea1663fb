"""CLI helpers, input prompts and the shared display-data builder."""
import pytest

import cli
from cli import (
    collect_inputs,
    compute_display_data,
    fmt,
    generate_verdict_text,
    months_label,
    pct,
    post_payoff_monthly,
    yearly_rows,
)
from simulation import (
    PostPayoffPolicy,
    SimInputs,
    extra_payment_sweep,
    fixed_monthly_payment,
    simulate,
)


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


def _display(**overrides):
    inputs = _inputs(**overrides)
    return compute_display_data(inputs, simulate(inputs))


def _answers(monkeypatch, values):
    it = iter(values)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(it))


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def test_fmt():
    assert fmt(1234.4) == "$1,234"
    assert fmt(-500) == "-$500"
    assert fmt(1.5, 2) == "$1.50"
    assert fmt(0) == "$0"


def test_pct():
    assert pct(5.5) == "5.5%"
    assert pct(5.5, 2) == "5.50%"


@pytest.mark.parametrize("months, label", [
    (306, "25y 6m"),
    (360, "30y"),
    (5, "5m"),
    (0, "0m"),
])
def test_months_label(months, label):
    assert months_label(months) == label


# ---------------------------------------------------------------------------
# Input prompts
# ---------------------------------------------------------------------------


def test_collect_inputs_defaults(monkeypatch):
    _answers(monkeypatch, [""] * 8)
    inputs = collect_inputs()
    assert inputs == SimInputs(
        principal=300_000,
        annual_rate_percent=5.5,
        term_years=30,
        monthly_extra_payment=200,
        investment_return_percent=7.0,
        inflation_percent=2.5,
        one_time_payment_amount=0,
        one_time_payment_month=0,
        post_payoff=PostPayoffPolicy.reinvest_payment(),
    )


def test_collect_inputs_custom_with_retry(monkeypatch, capsys):
    _answers(monkeypatch, [
        "250000", "abc", "6", "25", "", "", "", "10000", "24", "no", "500",
    ])
    inputs = collect_inputs()
    assert "Invalid number" in capsys.readouterr().out
    assert inputs.principal == 250_000
    assert inputs.annual_rate_percent == 6
    assert inputs.term_years == 25
    assert inputs.monthly_extra_payment == 200
    assert inputs.one_time_payment_amount == 10_000
    assert inputs.one_time_payment_month == 24
    assert inputs.post_payoff == PostPayoffPolicy.fixed_amount(500)


def test_collect_inputs_accepts_currency_formatting(monkeypatch):
    _answers(monkeypatch, ["$450,000", "4.25%", "", "$1,000", "", "", "", ""])
    inputs = collect_inputs()
    assert inputs.principal == 450_000
    assert inputs.annual_rate_percent == 4.25
    assert inputs.monthly_extra_payment == 1_000


def test_prompt_int_enforces_bounds(monkeypatch, capsys):
    _answers(monkeypatch, ["60", "0", "20"])
    assert cli._prompt_int("Loan term (years)", 30, 1, 50) == 20
    out = capsys.readouterr().out
    assert "Must be at most 50" in out
    assert "Must be at least 1" in out


def test_prompt_choice_rejects_unknown(monkeypatch, capsys):
    _answers(monkeypatch, ["maybe", "NO"])
    assert cli._prompt_choice("Reinvest?", ["yes", "no"], "yes") == "no"
    assert "Choose from: yes/no" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# Display data
# ---------------------------------------------------------------------------


def test_post_payoff_monthly_reinvest():
    inputs = _inputs()
    expected = fixed_monthly_payment(300_000, 5.5, 30) + 200
    assert post_payoff_monthly(inputs) == pytest.approx(expected)


def test_post_payoff_monthly_fixed():
    assert post_payoff_monthly(_inputs(post_payoff=PostPayoffPolicy.fixed_amount(350))) == 350


def test_display_data_matches_results():
    inputs = _inputs()
    results = simulate(inputs)
    d = compute_display_data(inputs, results)

    assert d["empty"] is False
    assert d["monthly_payment"] == results.monthly_payment
    assert d["payoff_months"] == results.payoff_months
    assert d["months_early"] == 360 - results.payoff_months
    assert d["years_investing"] == pytest.approx(d["months_early"] / 12)
    assert d["a_total_interest"] == results.total_interest
    assert d["b_total_interest"] == results.schedule[-1].baseline_cumulative_interest
    assert d["interest_saved"] == pytest.approx(d["b_total_interest"] - d["a_total_interest"])
    assert d["a_nw"] == results.summary.net_worth_a
    assert d["b_nw"] == results.summary.net_worth_b
    assert d["b_total_invested"] == pytest.approx(200 * 360)
    assert d["sweep"] is None
    assert d["breakeven"] is None
    assert len(d["yearly"]) == 30


def test_display_data_winner_and_advantage():
    d = _display()
    if d["winner"] == "invest":
        assert d["adv_abs"] == pytest.approx(d["b_nw"] - d["a_nw"])
        assert d["adv_real"] == pytest.approx(d["b_nw_real"] - d["a_nw_real"])
    else:
        assert d["adv_abs"] == pytest.approx(d["a_nw"] - d["b_nw"])
    assert d["adv_pct"] == pytest.approx(d["adv_abs"] / min(d["a_nw"], d["b_nw"]) * 100)


def test_display_data_carries_sweep():
    inputs = _inputs()
    sweep = extra_payment_sweep(inputs, levels=[0, 500])
    d = compute_display_data(inputs, simulate(inputs), sweep)
    assert d["sweep"] is sweep
    assert d["breakeven"] == sweep.breakeven_amount


def test_yearly_rows_are_year_ends():
    rows = yearly_rows(simulate(_inputs()))
    assert len(rows) == 30
    assert rows[0]["year"] == 1
    assert rows[0]["month"] == 12
    assert rows[-1]["year"] == 30
    assert rows[-1]["balance"] == 0.0


def test_yearly_rows_partial_final_year():
    rows = yearly_rows(simulate(_inputs(term_years=2.5)))
    assert [r["month"] for r in rows] == [12, 24, 30]
    assert rows[-1]["year"] == 3


def test_display_data_for_empty_result():
    inputs = _inputs(term_years=0)
    d = compute_display_data(inputs, simulate(inputs))
    assert d["empty"] is True
    assert d["months_early"] == 0
    assert d["b_total_interest"] == 0.0
    assert d["yearly"] == []
    assert d["winner"] == "invest"
    assert d["adv_abs"] == 0.0


# ---------------------------------------------------------------------------
# Verdict text
# ---------------------------------------------------------------------------


def test_verdict_paydown_wins():
    d = _display(annual_rate_percent=8, investment_return_percent=0)
    assert d["winner"] == "paydown"
    text = generate_verdict_text(d)
    assert text.startswith("Paying down $200/mo wins by")
    assert f"month {d['payoff_months']}" in text


def test_verdict_invest_wins():
    d = _display(annual_rate_percent=2, investment_return_percent=10)
    assert d["winner"] == "invest"
    text = generate_verdict_text(d)
    assert text.startswith("Investing $200/mo wins by")
    assert "early" in text


def test_verdict_without_extra_payment():
    d = _display(monthly_extra_payment=0)
    assert d["winner"] == "invest"
    assert "never retire the loan early" in generate_verdict_text(d)


def test_verdict_empty():
    d = _display(term_years=0)
    assert generate_verdict_text(d) == (
        "There is no loan to compare: the term must be at least one year."
    )


# ---------------------------------------------------------------------------
# Full CLI run
# ---------------------------------------------------------------------------


def test_run_cli_end_to_end(monkeypatch, capsys, tmp_path):
    _answers(monkeypatch, [""] * 8)
    pdf_path = tmp_path / "report.pdf"

    cli.run_cli(str(pdf_path))

    out = capsys.readouterr().out
    for heading in ("YOUR LOAN", "OPTION A", "OPTION B", "THE VERDICT",
                    "YEAR BY YEAR (NOMINAL)", "WHAT EXTRA PAYMENT", "CHARTS"):
        assert heading in out
    assert "PDF report saved to:" in out
    assert f"Saved to {pdf_path}" in out
    assert pdf_path.read_bytes().startswith(b"%PDF")
