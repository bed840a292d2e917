"""Tests for the HTTP endpoints."""

from decimal import Decimal

from sqlalchemy.exc import OperationalError

import app.matching.engine as engine_module
from app.models import InvoiceStatus
from tests.factories import TENANT, build_invoice, build_transaction, persist


def _seed(db_session):
    inv = build_invoice(invoice_number="INV-100", total_amount=Decimal("1000000"))
    exact = build_transaction(amount=Decimal("1000000"), description="TT INV-100")
    partial = build_transaction(amount=Decimal("250000"), reference="INV-100 dot 1")
    persist(db_session, inv, exact, partial)
    return inv.id, exact.id, partial.id


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "running"

    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["components"]["database"] == "healthy"


def test_config_exposes_matching_settings(client):
    matching = client.get("/config").json()["matching"]

    assert matching["auto_apply_threshold"] == 80
    assert matching["min_candidate_confidence"] == 40
    assert matching["weights"]["exact_amount"] == 50


def test_run_without_auto_apply_returns_suggestions(client, db_session):
    inv_id, exact_id, partial_id = _seed(db_session)

    response = client.post("/api/v1/reconciliation/run", json={"tenant_id": TENANT})

    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "done"
    assert body["applied_count"] == 0
    assert {s["transaction_id"] for s in body["suggested"]} == {exact_id, partial_id}
    assert body["stats"]["matched_transactions"] == 0


def test_run_with_auto_apply(client, db_session):
    inv_id, exact_id, partial_id = _seed(db_session)

    response = client.post(
        "/api/v1/reconciliation/run",
        json={"tenant_id": TENANT, "auto_apply": True},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["applied_count"] == 1
    assert body["applied"][0]["transaction_id"] == exact_id
    assert body["applied"][0]["invoice_status"] == "paid"
    # Partial (70) stays a suggestion even though its invoice is now paid
    assert [s["transaction_id"] for s in body["suggested"]] == [partial_id]
    assert body["stats"]["auto_match_rate"] == 50


def test_run_fetch_failure_returns_503(client, monkeypatch):
    def broken(db, tenant_id):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(engine_module, "list_open_invoices", broken)

    response = client.post("/api/v1/reconciliation/run", json={"tenant_id": TENANT})

    assert response.status_code == 503


def test_apply_confirms_suggestion(client, db_session):
    inv_id, exact_id, partial_id = _seed(db_session)
    payload = {
        "transaction_id": partial_id,
        "invoice_id": inv_id,
        "confidence": 70,
        "match_type": "partial",
        "reason_codes": ["amount_partial", "invoice_number"],
    }

    response = client.post("/api/v1/reconciliation/apply", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["invoice_status"] == "partially_paid"
    assert Decimal(body["amount"]) == Decimal("250000")
    assert Decimal(body["remaining_amount"]) == Decimal("750000")

    again = client.post("/api/v1/reconciliation/apply", json=payload)
    assert again.status_code == 409
    assert again.json()["detail"]["code"] == "already_matched"


def test_apply_error_status_codes(client, db_session):
    closed = build_invoice(invoice_number="INV-C", status=InvoiceStatus.CANCELLED)
    small = build_invoice(invoice_number="INV-S", total_amount=Decimal("100000"))
    txn = build_transaction(amount=Decimal("500000"))
    persist(db_session, closed, small, txn)

    def apply(invoice_id, transaction_id=txn.id):
        return client.post(
            "/api/v1/reconciliation/apply",
            json={
                "transaction_id": transaction_id,
                "invoice_id": invoice_id,
                "confidence": 50,
                "match_type": "suggested",
            },
        )

    assert apply(closed.id).status_code == 409
    overpay = apply(small.id)
    assert overpay.status_code == 422
    assert overpay.json()["detail"]["code"] == "overpayment"
    assert apply("missing").status_code == 404
    assert apply(small.id, transaction_id="missing").status_code == 404


def test_apply_validates_confidence(client):
    response = client.post(
        "/api/v1/reconciliation/apply",
        json={
            "transaction_id": "t",
            "invoice_id": "i",
            "confidence": 150,
            "match_type": "exact",
        },
    )

    assert response.status_code == 422


def test_stats_endpoint(client, db_session):
    _seed(db_session)

    response = client.get("/api/v1/reconciliation/stats", params={"tenant_id": TENANT})

    assert response.status_code == 200
    assert response.json() == {
        "total_invoices": 1,
        "matched_invoices": 0,
        "partial_matches": 0,
        "unmatched_invoices": 1,
        "total_transactions": 2,
        "matched_transactions": 0,
        "unmatched_transactions": 2,
        "auto_match_rate": 0,
    }


def test_stats_requires_tenant(client):
    assert client.get("/api/v1/reconciliation/stats").status_code == 422
