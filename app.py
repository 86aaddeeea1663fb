"""
Flask web application for the Pay Down vs Invest simulator.

Single-file app using render_template_string.  Run via ``python main.py``
which starts the dev server on localhost:5000.  ``POST /api/simulate``
returns the full month-by-month result as JSON.
"""

from __future__ import annotations

import dataclasses
import os
from typing import Any, Dict

from flask import Flask, jsonify, render_template_string, request, send_file

import config as cfg
from simulation import (
    PostPayoffMode,
    PostPayoffPolicy,
    SimInputs,
    extra_payment_sweep,
    fixed_monthly_payment,
    simulate,
)
from cli import (
    compute_display_data,
    generate_verdict_text,
    fmt,
    months_label,
    pct,
)
import report

app = Flask(__name__)
app.config["REPORT_PATH"] = cfg.REPORT_PATH

# ═══════════════════════════════════════════════════════════════════
# Input parsing
# ═══════════════════════════════════════════════════════════════════

def _parse_currency(s: str) -> float:
    return float(s.replace(cfg.CURRENCY_SYMBOL, "").replace(",", "").replace(" ", "") or 0)


def parse_form(form: dict) -> SimInputs:
    """Parse the HTML form into SimInputs."""
    if form.get("reinvest", "yes") == "yes":
        policy = PostPayoffPolicy.reinvest_payment()
    else:
        policy = PostPayoffPolicy.fixed_amount(
            _parse_currency(form.get("post_payoff_amount", "0")))
    return SimInputs(
        principal=_parse_currency(form.get("principal", str(cfg.DEFAULT_PRINCIPAL))),
        annual_rate_percent=float(form.get("rate", cfg.DEFAULT_ANNUAL_RATE_PERCENT)),
        term_years=int(form.get("years", cfg.DEFAULT_TERM_YEARS)),
        monthly_extra_payment=_parse_currency(form.get("extra", str(cfg.DEFAULT_MONTHLY_EXTRA))),
        investment_return_percent=float(
            form.get("inv_return", cfg.DEFAULT_INVESTMENT_RETURN_PERCENT)),
        inflation_percent=float(form.get("inflation", cfg.DEFAULT_INFLATION_PERCENT)),
        one_time_payment_amount=_parse_currency(form.get("lump_amount", "0")),
        one_time_payment_month=int(form.get("lump_month", "0") or 0),
        post_payoff=policy,
    )


def parse_json(payload: Dict[str, Any]) -> SimInputs:
    """Parse an API request body (SimInputs field names) into SimInputs.

    ``continue_investing_after_payoff`` and ``post_payoff_investment_amount``
    are combined into a PostPayoffPolicy, which rejects a nonzero amount
    when the payment is being reinvested.
    """
    continue_investing = payload.get("continue_investing_after_payoff", True)
    if not isinstance(continue_investing, bool):
        raise ValueError("continue_investing_after_payoff must be true or false")
    mode = PostPayoffMode.REINVEST_PAYMENT if continue_investing else PostPayoffMode.FIXED_AMOUNT
    policy = PostPayoffPolicy(mode, float(payload.get("post_payoff_investment_amount", 0)))
    return SimInputs(
        principal=float(payload["principal"]),
        annual_rate_percent=float(payload["annual_rate_percent"]),
        term_years=int(payload["term_years"]),
        monthly_extra_payment=float(payload.get("monthly_extra_payment", 0)),
        investment_return_percent=float(payload.get("investment_return_percent", 0)),
        inflation_percent=float(payload.get("inflation_percent", 0)),
        one_time_payment_amount=float(payload.get("one_time_payment_amount", 0)),
        one_time_payment_month=int(payload.get("one_time_payment_month", 0)),
        post_payoff=policy,
    )


def _payment_preview(form: dict) -> float:
    """Scheduled payment for the form's loan, shown before a run."""
    try:
        return fixed_monthly_payment(
            _parse_currency(form.get("principal", str(cfg.DEFAULT_PRINCIPAL))),
            float(form.get("rate", cfg.DEFAULT_ANNUAL_RATE_PERCENT)),
            int(form.get("years", cfg.DEFAULT_TERM_YEARS)),
        )
    except (ValueError, OverflowError):
        return 0.0


# ═══════════════════════════════════════════════════════════════════
# HTML Template
# ═══════════════════════════════════════════════════════════════════

HTML_TEMPLATE = r"""
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Pay Down vs Invest</title>
<style>
  *{margin:0;padding:0;box-sizing:border-box}
  :root{
    --bg-deep:#050816;
    --bg-surface:rgba(15,23,42,0.55);
    --bg-input:rgba(8,11,22,0.85);
    --border-subtle:rgba(99,102,241,0.1);
    --text-primary:#f1f5f9;
    --text-secondary:#94a3b8;
    --indigo:#818cf8;
    --indigo-deep:#6366f1;
    --violet:#8b5cf6;
    --emerald:#34d399;
    --emerald-deep:#10b981;
    --amber:#fbbf24;
    --red:#f87171;
    --radius-lg:16px;
    --radius-md:10px;
  }
  body{
    background:var(--bg-deep);color:var(--text-primary);
    font-family:system-ui,-apple-system,sans-serif;line-height:1.6;min-height:100vh;
  }
  .container{max-width:1140px;margin:0 auto;padding:2rem 1.5rem}

  .hero{text-align:center;padding:1.5rem 0 2.5rem}
  .hero h1{
    font-size:clamp(1.5rem,4vw,2.5rem);font-weight:800;letter-spacing:-.035em;
    background:linear-gradient(135deg,#e2e8f0 0%,#818cf8 45%,#34d399 100%);
    -webkit-background-clip:text;-webkit-text-fill-color:transparent;background-clip:text;
  }
  .hero-sub{color:var(--text-secondary);margin-top:.6rem;font-size:.92rem}

  .card{
    background:var(--bg-surface);border:1px solid var(--border-subtle);
    border-radius:var(--radius-lg);padding:1.8rem;margin-bottom:1.4rem;
  }
  .winner-glow-emerald{border-color:rgba(52,211,153,.35)}
  .winner-glow-indigo{border-color:rgba(129,140,248,.35)}
  h2{font-size:1.1rem;font-weight:700;margin-bottom:1rem}

  .form-grid{display:grid;grid-template-columns:repeat(auto-fill,minmax(240px,1fr));gap:1rem 1.5rem}
  .form-group{display:flex;flex-direction:column}
  .form-group label{font-size:.78rem;color:var(--text-secondary);margin-bottom:.3rem;font-weight:500}
  .form-group input,.form-group select{
    background:var(--bg-input);border:1px solid rgba(71,85,105,.35);
    border-radius:var(--radius-md);color:var(--text-primary);padding:.6rem .85rem;font-size:.88rem;
  }
  .hint{font-size:.78rem;color:var(--text-secondary);margin-top:.3rem}

  .btn{
    display:inline-flex;align-items:center;justify-content:center;
    padding:.75rem 2rem;border:none;border-radius:var(--radius-md);
    font-size:.95rem;font-weight:600;cursor:pointer;text-decoration:none;margin-top:1.2rem;
  }
  .btn-primary{background:linear-gradient(135deg,var(--indigo-deep),var(--violet));color:#fff}
  .btn-success{background:linear-gradient(135deg,var(--emerald-deep),var(--emerald));color:#fff}

  .error{
    background:rgba(248,113,113,.08);border:1px solid rgba(248,113,113,.3);
    border-radius:var(--radius-md);padding:.75rem 1rem;margin-bottom:1.4rem;color:var(--red);
  }

  .options-grid{display:grid;grid-template-columns:1fr 1fr;gap:1.4rem;margin-bottom:1.4rem}
  @media(max-width:768px){.options-grid{grid-template-columns:1fr}}
  .stat-row{display:flex;justify-content:space-between;padding:.5rem 0;border-bottom:1px solid rgba(51,65,85,.3)}
  .stat-row:last-child{border-bottom:none}
  .stat-label{color:var(--text-secondary);font-size:.86rem}
  .stat-value{font-weight:600;font-size:.86rem;font-variant-numeric:tabular-nums}
  .option-a .stat-value{color:var(--indigo)}
  .option-b .stat-value{color:var(--emerald)}

  .verdict-winner{font-size:clamp(1.15rem,3vw,1.5rem);font-weight:800}
  .verdict-by{font-size:.95rem;color:var(--text-secondary);margin-bottom:.9rem}
  .verdict-text{color:var(--text-secondary);line-height:1.75;font-size:.9rem}
  .tag-paydown{color:var(--indigo)}
  .tag-invest{color:var(--emerald)}

  .table-wrap{overflow-x:auto;border-radius:var(--radius-md);border:1px solid rgba(51,65,85,.25)}
  .data-table{width:100%;border-collapse:collapse;font-size:.84rem}
  .data-table th{
    text-align:right;padding:.65rem .8rem;background:rgba(15,23,42,.45);
    color:var(--text-secondary);font-weight:600;font-size:.76rem;text-transform:uppercase;
  }
  .data-table td{text-align:right;padding:.5rem .8rem;border-bottom:1px solid rgba(51,65,85,.15);font-variant-numeric:tabular-nums}
  .data-table .breakeven-row{background:rgba(16,185,129,.07)}

  .chart img{width:100%;border-radius:var(--radius-md)}
  .disclaimer{text-align:center;color:var(--text-secondary);font-size:.78rem;font-style:italic;margin-top:2rem}
</style>
</head>
<body>
<div class="container">

  <div class="hero">
    <h1>Pay Down vs Invest</h1>
    <p class="hero-sub">Pay extra on your loan and invest after payoff, or invest the extra from day one?</p>
  </div>

  {% if error %}
  <div class="error">{{ error }}</div>
  {% endif %}

  <form method="post" class="card">
    <h2>Your Loan</h2>
    <div class="form-grid">
      <div class="form-group"><label>Loan amount</label>
        <input name="principal" value="{{ form.get('principal', defaults.principal) }}"></div>
      <div class="form-group"><label>Annual interest rate %</label>
        <input name="rate" value="{{ form.get('rate', defaults.rate) }}"></div>
      <div class="form-group"><label>Term (years)</label>
        <input name="years" value="{{ form.get('years', defaults.years) }}"></div>
      <div class="form-group"><label>Monthly extra payment</label>
        <input name="extra" value="{{ form.get('extra', defaults.extra) }}"></div>
      <div class="form-group"><label>Investment return %</label>
        <input name="inv_return" value="{{ form.get('inv_return', defaults.inv_return) }}"></div>
      <div class="form-group"><label>Inflation %</label>
        <input name="inflation" value="{{ form.get('inflation', defaults.inflation) }}"></div>
      <div class="form-group"><label>One-time payment amount</label>
        <input name="lump_amount" value="{{ form.get('lump_amount', 0) }}"></div>
      <div class="form-group"><label>One-time payment month</label>
        <input name="lump_month" value="{{ form.get('lump_month', 0) }}"></div>
      <div class="form-group"><label>After payoff</label>
        <select name="reinvest">
          <option value="yes" {% if form.get('reinvest', 'yes') == 'yes' %}selected{% endif %}>Invest the payment + extra</option>
          <option value="no" {% if form.get('reinvest') == 'no' %}selected{% endif %}>Invest a custom amount</option>
        </select>
        <span class="hint">Scheduled payment: {{ fmt(preview, 2) }}/mo</span></div>
      <div class="form-group"><label>Custom monthly amount after payoff</label>
        <input name="post_payoff_amount" value="{{ form.get('post_payoff_amount', 0) }}"></div>
      <div class="form-group"><label>Charts</label>
        <select name="real">
          <option value="no" {% if form.get('real', 'no') == 'no' %}selected{% endif %}>Nominal</option>
          <option value="yes" {% if form.get('real') == 'yes' %}selected{% endif %}>Inflation-adjusted</option>
        </select></div>
    </div>
    <button type="submit" class="btn btn-primary">Run Simulation</button>
  </form>

  {% if d %}
  <div class="card {% if d.winner == 'invest' %}winner-glow-emerald{% else %}winner-glow-indigo{% endif %}">
    <h2>The Verdict</h2>
    <div class="verdict-winner tag-{{ d.winner }}">
      {% if d.winner == 'invest' %}Investing wins{% else %}Paying down wins{% endif %}
    </div>
    <div class="verdict-by">by {{ fmt(d.adv_abs) }} ({{ pct(d.adv_pct) }}), {{ fmt(d.adv_real) }} in today's money</div>
    <p class="verdict-text">{{ verdict_text }}</p>
  </div>

  <div class="options-grid">
    <div class="card option-a">
      <h2 class="tag-paydown">A: Pay down {{ fmt(d.extra) }}/mo extra</h2>
      <div class="stat-row"><span class="stat-label">Paid off</span><span class="stat-value">month {{ d.payoff_months }} ({{ months_label(d.payoff_months) }})</span></div>
      <div class="stat-row"><span class="stat-label">Total interest</span><span class="stat-value">{{ fmt(d.a_total_interest) }}</span></div>
      <div class="stat-row"><span class="stat-label">Interest saved</span><span class="stat-value">{{ fmt(d.interest_saved) }}</span></div>
      <div class="stat-row"><span class="stat-label">Invested after payoff</span><span class="stat-value">{{ fmt(d.post_payoff_monthly) }}/mo</span></div>
      <div class="stat-row"><span class="stat-label">Pot at end</span><span class="stat-value">{{ fmt(d.a_reinvest_value) }}</span></div>
      <div class="stat-row"><span class="stat-label">Net worth</span><span class="stat-value">{{ fmt(d.a_nw) }}</span></div>
      <div class="stat-row"><span class="stat-label">Net worth (today's money)</span><span class="stat-value">{{ fmt(d.a_nw_real) }}</span></div>
    </div>
    <div class="card option-b">
      <h2 class="tag-invest">B: Invest {{ fmt(d.extra) }}/mo instead</h2>
      <div class="stat-row"><span class="stat-label">Paid off</span><span class="stat-value">full term ({{ d.term_years }} years)</span></div>
      <div class="stat-row"><span class="stat-label">Total interest</span><span class="stat-value">{{ fmt(d.b_total_interest) }}</span></div>
      <div class="stat-row"><span class="stat-label">Contributions</span><span class="stat-value">{{ fmt(d.b_total_invested) }}</span></div>
      <div class="stat-row"><span class="stat-label">Investment growth</span><span class="stat-value">{{ fmt(d.b_inv_yield) }}</span></div>
      <div class="stat-row"><span class="stat-label">Pot at end</span><span class="stat-value">{{ fmt(d.b_inv_value) }}</span></div>
      <div class="stat-row"><span class="stat-label">Net worth</span><span class="stat-value">{{ fmt(d.b_nw) }}</span></div>
      <div class="stat-row"><span class="stat-label">Net worth (today's money)</span><span class="stat-value">{{ fmt(d.b_nw_real) }}</span></div>
    </div>
  </div>

  {% for img in charts %}
  <div class="card chart"><img src="data:image/png;base64,{{ img }}" alt="chart {{ loop.index }}"></div>
  {% endfor %}

  {% if d.yearly %}
  <div class="card">
    <h2>Year by Year</h2>
    <div class="table-wrap">
      <table class="data-table">
        <thead><tr><th>Year</th><th>Balance A</th><th>Balance B</th><th>Interest saved</th><th>Invest pot B</th><th>NW A</th><th>NW B</th></tr></thead>
        <tbody>
        {% for r in d.yearly %}
          <tr><td>{{ r.year }}</td><td>{{ fmt(r.balance) }}</td><td>{{ fmt(r.baseline_balance) }}</td>
              <td>{{ fmt(r.interest_saved) }}</td><td>{{ fmt(r.investment_value) }}</td>
              <td>{{ fmt(r.net_worth_a) }}</td><td>{{ fmt(r.net_worth_b) }}</td></tr>
        {% endfor %}
        </tbody>
      </table>
    </div>
  </div>
  {% endif %}

  {% if schedule %}
  <div class="card">
    <details>
      <summary><h2 style="display:inline">Month by Month</h2></summary>
      <div class="table-wrap">
        <table class="data-table monthly-table">
          <thead><tr><th>Month</th><th>Payment</th><th>Interest</th><th>Principal</th><th>Extra</th><th>Balance A</th><th>Balance B</th><th>Interest saved</th><th>NW A</th><th>NW B</th></tr></thead>
          <tbody>
          {% for r in schedule %}
            <tr><td>{{ r.month }}</td><td>{{ fmt(r.payment, 2) }}</td><td>{{ fmt(r.interest, 2) }}</td>
                <td>{{ fmt(r.principal, 2) }}</td><td>{{ fmt(r.extra_payment, 2) }}</td>
                <td>{{ fmt(r.remaining_balance, 2) }}</td><td>{{ fmt(r.baseline_balance, 2) }}</td>
                <td>{{ fmt(r.cumulative_interest_saved, 2) }}</td>
                <td>{{ fmt(r.net_worth_a, 2) }}</td><td>{{ fmt(r.net_worth_b, 2) }}</td></tr>
          {% endfor %}
          </tbody>
        </table>
      </div>
    </details>
  </div>
  {% endif %}

  {% if d.sweep and d.sweep.rows %}
  <div class="card">
    <h2>What extra payment would make paying down win?</h2>
    <div class="table-wrap">
      <table class="data-table">
        <thead><tr><th>Extra/mo</th><th>Payoff</th><th>NW A</th><th>NW B</th><th>Winner</th><th>By</th></tr></thead>
        <tbody>
        {% for r in d.sweep.rows %}
          <tr {% if r.monthly_extra_payment == d.breakeven %}class="breakeven-row"{% endif %}>
            <td>{{ fmt(r.monthly_extra_payment) }}</td><td>{{ months_label(r.payoff_months) }}</td>
            <td>{{ fmt(r.net_worth_a) }}</td><td>{{ fmt(r.net_worth_b) }}</td>
            <td class="tag-{{ r.winner }}">{{ r.winner }}</td><td>{{ fmt(r.advantage) }}</td></tr>
        {% endfor %}
        </tbody>
      </table>
    </div>
  </div>
  {% endif %}

  {% if charts %}
  <a href="/download-pdf" class="btn btn-success">Download PDF report</a>
  {% endif %}
  {% endif %}

  <p class="disclaimer">This is not financial advice. Returns and inflation are assumed constant.</p>
</div>
</body>
</html>
"""

DEFAULTS = {
    "principal": cfg.DEFAULT_PRINCIPAL,
    "rate": cfg.DEFAULT_ANNUAL_RATE_PERCENT,
    "years": cfg.DEFAULT_TERM_YEARS,
    "extra": cfg.DEFAULT_MONTHLY_EXTRA,
    "inv_return": cfg.DEFAULT_INVESTMENT_RETURN_PERCENT,
    "inflation": cfg.DEFAULT_INFLATION_PERCENT,
}


def _render(form: dict, status: int = 200, **context: Any):
    page = render_template_string(
        HTML_TEMPLATE,
        form=form,
        defaults=DEFAULTS,
        preview=_payment_preview(form),
        d=context.get("d"),
        charts=context.get("charts", []),
        verdict_text=context.get("verdict_text", ""),
        schedule=context.get("schedule", ()),
        error=context.get("error"),
        fmt=fmt,
        pct=pct,
        months_label=months_label,
    )
    return page, status


# ═══════════════════════════════════════════════════════════════════
# Routes
# ═══════════════════════════════════════════════════════════════════

@app.route("/", methods=["GET", "POST"])
def index():
    if request.method == "GET":
        return _render({})

    # POST: run simulation
    form = request.form.to_dict()
    try:
        inputs = parse_form(form)
    except ValueError as exc:
        app.logger.warning("Rejected form input: %s", exc)
        return _render(form, 400, error=str(exc))

    results = simulate(inputs)
    sweep = extra_payment_sweep(inputs)
    d = compute_display_data(inputs, results, sweep)
    verdict_text = generate_verdict_text(d)

    charts = []
    if not results.is_empty:
        charts = report.get_web_charts(results, sweep, real=form.get("real") == "yes")
        report.generate_pdf(inputs, results, sweep, d, verdict_text,
                            app.config["REPORT_PATH"])

    return _render(form, d=d, charts=charts, verdict_text=verdict_text,
                   schedule=results.schedule)


@app.route("/api/simulate", methods=["POST"])
def api_simulate():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400
    try:
        inputs = parse_json(payload)
    except KeyError as exc:
        return jsonify({"error": f"Missing field: {exc.args[0]}"}), 400
    except (TypeError, ValueError) as exc:
        app.logger.warning("Rejected API input: %s", exc)
        return jsonify({"error": str(exc)}), 400

    return jsonify(dataclasses.asdict(simulate(inputs)))


@app.route("/download-pdf")
def download_pdf():
    path = app.config["REPORT_PATH"]
    if os.path.exists(path):
        return send_file(os.path.abspath(path), as_attachment=True,
                         download_name=os.path.basename(cfg.REPORT_PATH))
    return "No report generated yet. Run a simulation first.", 404


# ═══════════════════════════════════════════════════════════════════
# Entry point
# ═══════════════════════════════════════════════════════════════════

def run_web(debug: bool = True) -> None:
    """Start the Flask development server and open browser."""
    import webbrowser
    import threading

    url = f"http://{cfg.WEB_HOST}:{cfg.WEB_PORT}"
    print(f"Starting web app at {url}")
    threading.Timer(1.0, lambda: webbrowser.open(url)).start()
    app.run(host=cfg.WEB_HOST, port=cfg.WEB_PORT, debug=debug)


if __name__ == "__main__":
    run_web()
