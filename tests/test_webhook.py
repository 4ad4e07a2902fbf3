import json
from app.modules.billing.webhook import WebhookService, extract_ledger_context
from tests.fakes import FakeSupabase, post_webhook, stripe_signature, subscription_event


def seed_subscriber(db: FakeSupabase, user_id="user-1", customer_id="cus_1"):
    db.rows("profiles").append({
        "id": user_id, "role": "talent", "account_type": "talent",
        "stripe_customer_id": customer_id, "subscription_status": "none",
    })


def ledger_row(db: FakeSupabase, event_id: str):
    return next(r for r in db.rows("stripe_webhook_events") if r["event_id"] == event_id)


class FakeGateway:
    def __init__(self, subscription=None):
        self.subscription = subscription
        self.retrieved = []

    def retrieve_subscription(self, subscription_id):
        self.retrieved.append(subscription_id)
        return self.subscription


class TestSignature:
    def test_missing_signature(self, client):
        response = client.post("/api/stripe/webhook", content="{}")
        assert response.status_code == 400

    def test_invalid_signature(self, client):
        payload = json.dumps(subscription_event("evt_1", 1000))
        response = client.post(
            "/api/stripe/webhook",
            content=payload,
            headers={"stripe-signature": stripe_signature(payload, secret="whsec_wrong")},
        )
        assert response.status_code == 400


class TestIdempotency:
    def test_duplicate_event_updates_profile_once(self, client, fake_db):
        seed_subscriber(fake_db)
        event = subscription_event("evt_dupe_1", 1000)

        first = post_webhook(client, event)
        assert first.status_code == 200
        assert len(fake_db.writes_to("profiles", "update")) == 1

        second = post_webhook(client, event)
        assert second.status_code == 200
        assert second.json()["duplicate"] is True
        assert len(fake_db.writes_to("profiles", "update")) == 1

        profile = fake_db.rows("profiles")[0]
        assert profile["subscription_status"] == "active"
        assert profile["subscription_plan"] == "monthly"
        assert profile["stripe_subscription_id"] == "sub_1"
        assert ledger_row(fake_db, "evt_dupe_1")["status"] == "processed"

    def test_in_flight_duplicate_is_acknowledged(self, client, fake_db):
        seed_subscriber(fake_db)
        fake_db.rows("stripe_webhook_events").append({"event_id": "evt_busy", "status": "processing", "attempt_count": 1})
        response = post_webhook(client, subscription_event("evt_busy", 1000))
        assert response.status_code == 200
        assert response.json() == {"received": True, "duplicate": True, "in_flight": True}
        assert fake_db.writes_to("profiles", "update") == []

    def test_failed_event_is_retried(self, client, fake_db):
        seed_subscriber(fake_db)
        fake_db.rows("stripe_webhook_events").append({"event_id": "evt_retry", "status": "failed", "attempt_count": 2})
        response = post_webhook(client, subscription_event("evt_retry", 1000))
        assert response.status_code == 200
        row = ledger_row(fake_db, "evt_retry")
        assert row["status"] == "processed"
        assert row["attempt_count"] == 3
        assert len(fake_db.writes_to("profiles", "update")) == 1

    def test_ledger_insert_failure_is_500(self, client, fake_db):
        seed_subscriber(fake_db)
        fake_db.fail("stripe_webhook_events", "insert")
        response = post_webhook(client, subscription_event("evt_1", 1000))
        assert response.status_code == 500
        assert fake_db.writes_to("profiles", "update") == []


class TestOrdering:
    def test_older_event_is_ignored(self, client, fake_db):
        seed_subscriber(fake_db)
        fake_db.rows("stripe_webhook_events").append({
            "event_id": "evt_newer", "status": "processed", "customer_id": "cus_1", "stripe_created": 2000,
        })
        response = post_webhook(client, subscription_event("evt_older", 1000, status="past_due"))
        assert response.status_code == 200
        assert response.json()["ignored"] == "out_of_order"
        assert fake_db.writes_to("profiles", "update") == []
        assert ledger_row(fake_db, "evt_older")["status"] == "ignored"

    def test_unhandled_type_is_ignored(self, client, fake_db):
        event = {"id": "evt_x", "type": "charge.refunded", "created": 1, "livemode": False,
                 "data": {"object": {"id": "ch_1", "customer": "cus_1"}}}
        response = post_webhook(client, event)
        assert response.status_code == 200
        assert ledger_row(fake_db, "evt_x")["status"] == "ignored"


class TestFailures:
    def test_profile_update_failure_marks_failed(self, client, fake_db):
        seed_subscriber(fake_db)
        fake_db.fail("profiles", "update")
        response = post_webhook(client, subscription_event("evt_fail", 1000))
        assert response.status_code == 500
        assert ledger_row(fake_db, "evt_fail")["status"] == "failed"

    def test_unknown_customer_in_live_mode_is_retried(self, client, fake_db):
        response = post_webhook(client, subscription_event("evt_nobody", 1000, customer="cus_ghost"))
        assert response.status_code == 500
        assert ledger_row(fake_db, "evt_nobody")["status"] == "failed"

    def test_unknown_customer_in_test_mode_is_orphaned(self, client, fake_db):
        response = post_webhook(client, subscription_event("evt_test", 1000, customer="cus_ghost", livemode=False))
        assert response.status_code == 200
        assert response.json()["orphaned"] is True
        assert ledger_row(fake_db, "evt_test")["status"] == "orphaned"

    def test_unknown_customer_orphaned_after_retries(self, client, fake_db):
        fake_db.rows("stripe_webhook_events").append({"event_id": "evt_old", "status": "failed", "attempt_count": 4, "livemode": True})
        response = post_webhook(client, subscription_event("evt_old", 1000, customer="cus_ghost"))
        assert response.status_code == 200
        assert ledger_row(fake_db, "evt_old")["status"] == "orphaned"


class TestHandlers:
    def test_metadata_user_id_wins_over_customer(self, client, fake_db):
        seed_subscriber(fake_db, user_id="user-1", customer_id="cus_1")
        fake_db.rows("profiles").append({"id": "user-2", "role": "talent", "stripe_customer_id": None})
        event = subscription_event("evt_meta", 1000, metadata={"supabase_user_id": "user-2"})
        assert post_webhook(client, event).status_code == 200
        updated = fake_db.writes_to("profiles", "update")[0]
        assert ("eq", "id", "user-2") in updated["filters"]

    def test_deleted_subscription_clears_fields(self, client, fake_db):
        seed_subscriber(fake_db)
        event = subscription_event("evt_del", 1000, event_type="customer.subscription.deleted", status="canceled")
        assert post_webhook(client, event).status_code == 200
        profile = fake_db.rows("profiles")[0]
        assert profile["subscription_status"] == "canceled"
        assert profile["stripe_subscription_id"] is None
        assert profile["subscription_plan"] is None

    def test_deleted_without_profile_is_orphaned(self, client, fake_db):
        event = subscription_event("evt_del2", 1000, customer="cus_ghost", event_type="customer.subscription.deleted")
        response = post_webhook(client, event)
        assert response.status_code == 200
        assert ledger_row(fake_db, "evt_del2")["status"] == "orphaned"

    def test_checkout_completed_fetches_subscription(self, test_settings):
        db = FakeSupabase()
        seed_subscriber(db)
        subscription = subscription_event("unused", 0, price_id="price_annual")["data"]["object"]
        gateway = FakeGateway(subscription)
        event = {
            "id": "evt_checkout", "type": "checkout.session.completed", "created": 1000, "livemode": True,
            "data": {"object": {
                "id": "cs_1", "mode": "subscription", "customer": "cus_1", "subscription": "sub_1",
                "client_reference_id": "user-1", "customer_details": {"email": "jane@example.com"},
            }},
        }
        outcome = WebhookService(db, gateway).process(event)
        assert outcome.status_code == 200
        assert gateway.retrieved == ["sub_1"]
        assert db.rows("profiles")[0]["subscription_plan"] == "annual"
        assert ledger_row(db, "evt_checkout")["checkout_session_id"] == "cs_1"

    def test_payment_failed_only_logs(self, client, fake_db):
        seed_subscriber(fake_db)
        event = {"id": "evt_inv", "type": "invoice.payment_failed", "created": 1000, "livemode": True,
                 "data": {"object": {"id": "in_1", "customer": "cus_1", "customer_email": "jane@example.com"}}}
        assert post_webhook(client, event).status_code == 200
        assert fake_db.writes_to("profiles", "update") == []
        assert ledger_row(fake_db, "evt_inv")["customer_email"] == "jane@example.com"


class TestLedgerContext:
    def test_subscription_event(self):
        context = extract_ledger_context(subscription_event("evt_1", 1234, customer="cus_9"))
        assert context.customer_id == "cus_9"
        assert context.subscription_id == "sub_1"
        assert context.stripe_created == 1234
