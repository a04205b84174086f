from datetime import datetime, timedelta, timezone
from fastapi import FastAPI, HTTPException

app = FastAPI(title="Mock Bank & Payroll Server", version="1.0.0")

# balance, inflows as (days_from_today, amount), payroll runs as (days_from_today, amount, employees)
COMPANIES = {
    "company_healthy": {
        "balance": 150_000.00,
        "inflows": [(5, 40_000.00)],
        "payroll_runs": [(3, 60_000.00, 24), (17, 60_000.00, 24)],
    },
    "company_tight": {
        "balance": 50_000.00,
        "inflows": [(10, 15_000.00)],
        "payroll_runs": [(2, 48_000.00, 18), (16, 48_000.00, 18)],
    },
    "company_short": {
        "balance": 12_500.00,
        "inflows": [],
        "payroll_runs": [(1, 30_000.00, 11)],
    },
}


def _company(company_id: str) -> dict:
    if company_id not in COMPANIES:
        raise HTTPException(status_code=404, detail="company not found")
    return COMPANIES[company_id]


def _on(days: int) -> str:
    return (datetime.now(timezone.utc).date() + timedelta(days=days)).isoformat()


@app.get("/health")
def health(): return {"status": "ok"}


@app.get("/bank/balance")
def get_balance(company_id: str):
    return {"company_id": company_id, "available_balance": _company(company_id)["balance"]}


@app.get("/bank/inflows")
def get_inflows(company_id: str):
    return {
        "inflows": [
            {"amount": amount, "date": _on(days), "description": "Customer receivable", "confidence": "medium"}
            for days, amount in _company(company_id)["inflows"]
        ]
    }


@app.get("/payroll/runs")
def get_payroll_runs(company_id: str):
    # Deliberately newest first; the client sorts
    runs = sorted(_company(company_id)["payroll_runs"], reverse=True)
    return {
        "payroll_runs": [
            {"amount": amount, "date": _on(days), "employee_count": employees}
            for days, amount, employees in runs
        ]
    }
