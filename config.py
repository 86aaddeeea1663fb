"""
Constants for the Pay Down vs Invest simulator.

Monetary values are in the display currency. Rates are entered as
percentages (5.5 means 5.5% per annum) to match the input form.
"""

# ── Default inputs ───────────────────────────────────────────────────
DEFAULT_PRINCIPAL = 300_000
DEFAULT_ANNUAL_RATE_PERCENT = 5.5
DEFAULT_TERM_YEARS = 30
DEFAULT_MONTHLY_EXTRA = 200
DEFAULT_INVESTMENT_RETURN_PERCENT = 7.0
DEFAULT_INFLATION_PERCENT = 2.5
DEFAULT_ONE_TIME_AMOUNT = 0
DEFAULT_ONE_TIME_MONTH = 0

# ── Input limits (CLI prompts and web form) ──────────────────────────
MAX_TERM_YEARS = 50
MAX_RATE_PERCENT = 30.0

# ── Engine ───────────────────────────────────────────────────────────
# A payment within this much of balance + interest retires the loan,
# so float residue never leaves a sub-cent (or negative) balance.
PAYOFF_TOLERANCE = 1e-6

# Final net worths closer than this are a tie (investing is reported).
TIE_TOLERANCE = 0.01

# ── Extra-payment sweep ──────────────────────────────────────────────
SWEEP_EXTRA_PAYMENTS = [0, 50, 100, 200, 300, 500, 750, 1_000, 1_500, 2_000]

# ── Presentation ─────────────────────────────────────────────────────
CURRENCY_SYMBOL = "$"
REPORT_PATH = "paydown_vs_invest_report.pdf"

# ── Web server ───────────────────────────────────────────────────────
WEB_HOST = "127.0.0.1"
WEB_PORT = 5000
