"""Flask routes: HTML form, PDF download and the JSON API."""
import pytest

from app import app


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setitem(app.config, "REPORT_PATH", str(tmp_path / "report.pdf"))
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


FORM = {
    "principal": "300,000",
    "rate": "5.5",
    "years": "30",
    "extra": "200",
    "inv_return": "7",
    "inflation": "2.5",
    "lump_amount": "0",
    "lump_month": "0",
    "reinvest": "yes",
    "post_payoff_amount": "0",
    "real": "no",
}

API_BODY = {
    "principal": 300_000,
    "annual_rate_percent": 5.5,
    "term_years": 30,
    "monthly_extra_payment": 200,
    "investment_return_percent": 7,
    "inflation_percent": 2.5,
}


# ---------------------------------------------------------------------------
# HTML form
# ---------------------------------------------------------------------------


def test_index_get(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"Pay Down vs Invest" in resp.data
    assert b"The Verdict" not in resp.data


def test_index_post_runs_simulation(client):
    resp = client.post("/", data=FORM)
    assert resp.status_code == 200
    assert b"The Verdict" in resp.data
    assert b"Year by Year" in resp.data
    assert b"data:image/png;base64," in resp.data
    assert b"/download-pdf" in resp.data
    assert b"Month by Month" in resp.data
    assert resp.data.count(b"<tr><td>") >= 360 + 30

    pdf = client.get("/download-pdf")
    assert pdf.status_code == 200
    assert pdf.data.startswith(b"%PDF")


def test_index_post_fixed_amount_and_real_charts(client):
    form = dict(FORM, reinvest="no", post_payoff_amount="$500", real="yes",
                lump_amount="20,000", lump_month="6")
    resp = client.post("/", data=form)
    assert resp.status_code == 200
    assert b"$500/mo" in resp.data


def test_index_post_zero_term_has_no_charts(client):
    resp = client.post("/", data=dict(FORM, years="0"))
    assert resp.status_code == 200
    assert b"There is no loan to compare" in resp.data
    assert b"data:image/png;base64," not in resp.data


@pytest.mark.parametrize("field, value", [
    ("rate", "abc"),
    ("years", "thirty"),
    ("principal", "-5000"),
    ("post_payoff_amount", "-1"),
])
def test_index_post_invalid_input(client, field, value):
    form = dict(FORM, **{field: value})
    if field == "post_payoff_amount":
        form["reinvest"] = "no"
    resp = client.post("/", data=form)
    assert resp.status_code == 400
    assert b'class="error"' in resp.data


def test_index_post_term_above_limit(client):
    resp = client.post("/", data=dict(FORM, years="3000", rate="30"))
    assert resp.status_code == 400
    assert b"Loan term must be at most 50 years" in resp.data


def test_index_post_rate_above_limit(client):
    resp = client.post("/", data=dict(FORM, inv_return="45"))
    assert resp.status_code == 400
    assert b"Investment return must be at most 30%" in resp.data


def test_download_before_run(client):
    resp = client.get("/download-pdf")
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# JSON API
# ---------------------------------------------------------------------------


def test_api_simulate(client):
    resp = client.post("/api/simulate", json=API_BODY)
    assert resp.status_code == 200
    body = resp.get_json()
    assert len(body["schedule"]) == 360
    assert body["payoff_months"] < 360
    assert body["monthly_payment"] == pytest.approx(1703.37, abs=0.01)
    first = body["schedule"][0]
    assert first["month"] == 1
    assert "net_worth_a_real" in first
    assert body["summary"]["net_worth_b"] > 0


def test_api_fixed_amount(client):
    body = dict(API_BODY, continue_investing_after_payoff=False,
                post_payoff_investment_amount=400)
    resp = client.post("/api/simulate", json=body)
    assert resp.status_code == 200


def test_api_missing_field(client):
    body = dict(API_BODY)
    del body["principal"]
    resp = client.post("/api/simulate", json=body)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Missing field: principal"}


def test_api_rejects_amount_with_reinvest(client):
    body = dict(API_BODY, continue_investing_after_payoff=True,
                post_payoff_investment_amount=100)
    resp = client.post("/api/simulate", json=body)
    assert resp.status_code == 400
    assert "error" in resp.get_json()


@pytest.mark.parametrize("body", [
    dict(API_BODY, principal=-1),
    dict(API_BODY, principal=None),
    dict(API_BODY, term_years="ten"),
])
def test_api_rejects_bad_values(client, body):
    resp = client.post("/api/simulate", json=body)
    assert resp.status_code == 400


def test_api_requires_json_object(client):
    resp = client.post("/api/simulate", data="not json", content_type="text/plain")
    assert resp.status_code == 400
    resp = client.post("/api/simulate", json=[1, 2, 3])
    assert resp.status_code == 400


def test_api_zero_term_is_empty(client):
    resp = client.post("/api/simulate", json=dict(API_BODY, term_years=0))
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["schedule"] == []
    assert body["payoff_months"] == 0
    assert body["summary"]["net_worth_a"] == 0.0


def test_api_term_above_limit(client):
    body = dict(API_BODY, annual_rate_percent=30, term_years=3_000)
    resp = client.post("/api/simulate", json=body)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Loan term must be at most 50 years"}


def test_api_rate_above_limit(client):
    resp = client.post("/api/simulate", json=dict(API_BODY, inflation_percent=31))
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Inflation must be at most 30%"}


@pytest.mark.parametrize("flag", ["false", "no", 0, None])
def test_api_continue_investing_must_be_boolean(client, flag):
    body = dict(API_BODY, continue_investing_after_payoff=flag)
    resp = client.post("/api/simulate", json=body)
    assert resp.status_code == 400
    assert "continue_investing_after_payoff" in resp.get_json()["error"]


def test_api_false_flag_selects_fixed_amount(client):
    reinvest = client.post("/api/simulate", json=API_BODY).get_json()
    fixed = client.post("/api/simulate", json=dict(
        API_BODY, continue_investing_after_payoff=False,
    )).get_json()
    assert fixed["summary"]["net_worth_a"] == 0.0
    assert reinvest["summary"]["net_worth_a"] > 0
