"""
Tests for the donation ledger: recording, status changes and the
campaign totals that must always match the completed donations
"""
import asyncio

import pytest
from sqlalchemy import func

from conftest import auth, future_deadline, insert_campaign, register_user
from fundflow.core.exceptions import UpstreamError
from fundflow.models import Campaign, Donation, PaymentStatus


def load_campaign(session_factory, campaign_id):
    with session_factory() as session:
        return session.get(Campaign, campaign_id)


def completed_totals(session_factory, campaign_id):
    """Sum and count of completed donations, straight from the donations table"""
    with session_factory() as session:
        total, count = (
            session.query(func.coalesce(func.sum(Donation.amount), 0.0), func.count(Donation.id))
            .filter(Donation.campaign_id == campaign_id, Donation.payment_status == PaymentStatus.COMPLETED)
            .one()
        )
        return float(total), count


def assert_ledger_consistent(session_factory, campaign_id):
    campaign = load_campaign(session_factory, campaign_id)
    total, count = completed_totals(session_factory, campaign_id)
    assert campaign.raised_amount == pytest.approx(total)
    assert campaign.donors_count == count


async def record(client, token, campaign_id, amount, payment_id, **extra):
    payload = {"campaign_id": campaign_id, "amount": amount, "payment_id": payment_id}
    payload.update(extra)
    return await client.post("/donations/record-stripe-donation", headers=auth(token), json=payload)


# ============================================================================
# PAYMENT INTENT
# ============================================================================

class TestPaymentIntent:

    @pytest.mark.asyncio
    async def test_returns_client_secret(self, client, db_session, creator, payment_client):
        _, user = creator
        campaign = insert_campaign(db_session, user["id"])

        response = await client.post(
            "/donations/create-payment-intent",
            json={"amount": 25.5, "campaign_id": campaign.id},
        )

        assert response.status_code == 200
        assert response.json() == {"client_secret": "pi_test_secret_123"}
        payment_client.create_payment_intent.assert_awaited_once_with(25.5, campaign.id)

    @pytest.mark.asyncio
    async def test_does_not_touch_ledger(self, client, db_session, session_factory, creator):
        _, user = creator
        campaign = insert_campaign(db_session, user["id"])

        await client.post("/donations/create-payment-intent", json={"amount": 25, "campaign_id": campaign.id})

        assert load_campaign(session_factory, campaign.id).raised_amount == 0
        assert db_session.query(Donation).count() == 0

    @pytest.mark.asyncio
    async def test_unknown_campaign(self, client, payment_client):
        response = await client.post("/donations/create-payment-intent", json={"amount": 25, "campaign_id": "nope"})

        assert response.status_code == 404
        payment_client.create_payment_intent.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_positive_amount(self, client, db_session, creator):
        _, user = creator
        campaign = insert_campaign(db_session, user["id"])

        response = await client.post("/donations/create-payment-intent", json={"amount": 0, "campaign_id": campaign.id})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_provider_failure_surfaces_as_upstream_error(self, client, db_session, creator, payment_client):
        _, user = creator
        campaign = insert_campaign(db_session, user["id"])
        payment_client.create_payment_intent.side_effect = UpstreamError("Payment provider timeout")

        response = await client.post("/donations/create-payment-intent", json={"amount": 25, "campaign_id": campaign.id})

        assert response.status_code == 502
        assert response.json() == {"message": "Payment provider timeout", "error": "UpstreamError"}


# ============================================================================
# RECORD DONATION
# ============================================================================

class TestRecordDonation:

    @pytest.mark.asyncio
    async def test_record_credits_campaign(self, client, db_session, session_factory, creator, donor):
        _, creator_user = creator
        donor_token, donor_user = donor
        campaign = insert_campaign(db_session, creator_user["id"])

        response = await record(client, donor_token, campaign.id, 75, "pi_001", message="Good luck!")

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["donation"]["payment_status"] == "completed"
        assert body["donation"]["donor_id"] == donor_user["id"]
        assert body["donation"]["message"] == "Good luck!"
        stored = load_campaign(session_factory, campaign.id)
        assert stored.raised_amount == 75
        assert stored.donors_count == 1

    @pytest.mark.asyncio
    async def test_record_requires_token(self, client, db_session, creator):
        _, user = creator
        campaign = insert_campaign(db_session, user["id"])

        response = await client.post(
            "/donations/record-stripe-donation",
            json={"campaign_id": campaign.id, "amount": 10, "payment_id": "pi_x"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_campaign(self, client, donor):
        token, _ = donor

        response = await record(client, token, "missing", 10, "pi_missing")

        assert response.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0, -10])
    async def test_non_positive_amount(self, client, db_session, creator, donor, amount):
        _, creator_user = creator
        token, _ = donor
        campaign = insert_campaign(db_session, creator_user["id"])

        response = await record(client, token, campaign.id, amount, "pi_bad")

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_payment_id_applied_once(self, client, db_session, session_factory, creator, donor):
        _, creator_user = creator
        token, _ = donor
        campaign = insert_campaign(db_session, creator_user["id"])

        first = await record(client, token, campaign.id, 50, "pi_dup")
        second = await record(client, token, campaign.id, 50, "pi_dup")

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["error"] == "ConflictError"
        stored = load_campaign(session_factory, campaign.id)
        assert stored.raised_amount == 50
        assert stored.donors_count == 1

    @pytest.mark.asyncio
    async def test_manual_donation_generates_payment_token(self, client, db_session, session_factory, creator, donor):
        _, creator_user = creator
        token, _ = donor
        campaign = insert_campaign(db_session, creator_user["id"])

        response = await client.post(
            "/donations",
            headers=auth(token),
            json={"campaign_id": campaign.id, "amount": 30, "anonymous": True},
        )

        assert response.status_code == 201
        donation = response.json()["donation"]
        assert donation["payment_id"].startswith("demo_")
        assert donation["anonymous"] is True
        assert load_campaign(session_factory, campaign.id).raised_amount == 30

    @pytest.mark.asyncio
    async def test_ledger_matches_completed_donations(self, client, db_session, session_factory, creator, donor):
        _, creator_user = creator
        token, _ = donor
        campaign = insert_campaign(db_session, creator_user["id"])

        for i, amount in enumerate([10, 25.5, 100, 0.99]):
            response = await record(client, token, campaign.id, amount, f"pi_seq_{i}")
            assert response.status_code == 201

        assert_ledger_consistent(session_factory, campaign.id)
        assert load_campaign(session_factory, campaign.id).donors_count == 4


# ============================================================================
# CONCURRENCY
# ============================================================================

class TestConcurrentDonations:

    @pytest.mark.asyncio
    async def test_concurrent_donations_do_not_lose_updates(self, client, db_session, session_factory, creator):
        _, creator_user = creator
        first_token, _ = await register_user(client, "First Donor", "first@example.com")
        second_token, _ = await register_user(client, "Second Donor", "second@example.com")
        campaign = insert_campaign(db_session, creator_user["id"])

        responses = await asyncio.gather(
            record(client, first_token, campaign.id, 100, "pi_concurrent_a"),
            record(client, second_token, campaign.id, 200, "pi_concurrent_b"),
        )

        assert [r.status_code for r in responses] == [201, 201]
        stored = load_campaign(session_factory, campaign.id)
        assert stored.raised_amount == 300
        assert stored.donors_count == 2

    @pytest.mark.asyncio
    async def test_many_concurrent_donations(self, client, db_session, session_factory, creator, donor):
        _, creator_user = creator
        token, _ = donor
        campaign = insert_campaign(db_session, creator_user["id"])

        responses = await asyncio.gather(
            *[record(client, token, campaign.id, 10, f"pi_burst_{i}") for i in range(8)]
        )

        assert all(r.status_code == 201 for r in responses)
        assert load_campaign(session_factory, campaign.id).raised_amount == 80
        assert_ledger_consistent(session_factory, campaign.id)


# ============================================================================
# STATUS UPDATES
# ============================================================================

class TestUpdateDonationStatus:

    async def update_status(self, client, token, payment_id, status):
        return await client.post(
            "/donations/update-status",
            headers=auth(token),
            json={"payment_id": payment_id, "status": status},
        )

    @pytest.mark.asyncio
    async def test_transitions_keep_ledger_consistent(self, client, db_session, session_factory, creator, donor):
        _, creator_user = creator
        token, _ = donor
        campaign = insert_campaign(db_session, creator_user["id"])
        await record(client, token, campaign.id, 40, "pi_keep")
        await record(client, token, campaign.id, 60, "pi_flip")

        for status in ["failed", "failed", "pending", "completed", "completed", "completed"]:
            response = await self.update_status(client, token, "pi_flip", status)
            assert response.status_code == 200
            assert response.json()["payment_status"] == status
            assert_ledger_consistent(session_factory, campaign.id)

        stored = load_campaign(session_factory, campaign.id)
        assert stored.raised_amount == 100
        assert stored.donors_count == 2

    @pytest.mark.asyncio
    async def test_failing_a_donation_removes_it_from_totals(self, client, db_session, session_factory, creator, donor):
        _, creator_user = creator
        token, _ = donor
        campaign = insert_campaign(db_session, creator_user["id"])
        await record(client, token, campaign.id, 60, "pi_refund")

        await self.update_status(client, token, "pi_refund", "failed")

        stored = load_campaign(session_factory, campaign.id)
        assert stored.raised_amount == 0
        assert stored.donors_count == 0

    @pytest.mark.asyncio
    async def test_unknown_payment_id(self, client, donor):
        token, _ = donor

        response = await self.update_status(client, token, "pi_unknown", "failed")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_status(self, client, donor):
        token, _ = donor

        response = await self.update_status(client, token, "pi_any", "refunded")

        assert response.status_code == 400


# ============================================================================
# NOTIFICATIONS
# ============================================================================

class TestDonationNotifications:

    @pytest.mark.asyncio
    async def test_donor_and_creator_are_emailed(self, client, db_session, creator, donor, notifier):
        _, creator_user = creator
        token, _ = donor
        campaign = insert_campaign(db_session, creator_user["id"], title="Library Books")

        await record(client, token, campaign.id, 42, "pi_mail", anonymous=True)

        notifier.send_donor_thank_you.assert_awaited_once()
        notifier.send_creator_alert.assert_awaited_once()
        notice = notifier.send_creator_alert.await_args.args[0]
        assert notice.donor_email == "donor@example.com"
        assert notice.creator_email == "creator@example.com"
        assert notice.campaign_title == "Library Books"
        assert notice.amount == 42
        assert notice.anonymous is True

    @pytest.mark.asyncio
    async def test_email_failure_does_not_undo_donation(self, client, db_session, session_factory, creator, donor, notifier):
        _, creator_user = creator
        token, _ = donor
        campaign = insert_campaign(db_session, creator_user["id"])
        notifier.send_donor_thank_you.side_effect = RuntimeError("mail provider down")

        response = await record(client, token, campaign.id, 15, "pi_mail_fail")

        assert response.status_code == 201
        assert load_campaign(session_factory, campaign.id).raised_amount == 15

    @pytest.mark.asyncio
    async def test_duplicate_payment_sends_no_email(self, client, db_session, creator, donor, notifier):
        _, creator_user = creator
        token, _ = donor
        campaign = insert_campaign(db_session, creator_user["id"])
        await record(client, token, campaign.id, 15, "pi_once")
        notifier.send_donor_thank_you.reset_mock()

        await record(client, token, campaign.id, 15, "pi_once")

        notifier.send_donor_thank_you.assert_not_awaited()


# ============================================================================
# END TO END
# ============================================================================

class TestDonationJourney:

    @pytest.mark.asyncio
    async def test_creator_to_donor_flow(self, client, session_factory, admin):
        admin_token, _ = admin
        creator_token, _ = await register_user(client, "Casey Creator", "casey@example.com", role="creator")

        created = await client.post(
            "/campaigns",
            headers=auth(creator_token),
            json={
                "title": "Community Garden",
                "description": "Raised beds and a tool shed",
                "goal": 10000,
                "deadline": future_deadline(30),
                "category": "Environment",
            },
        )
        assert created.status_code == 201
        campaign_id = created.json()["id"]

        approved = await client.put(
            f"/admin/campaigns/{campaign_id}",
            headers=auth(admin_token),
            json={"status": "active"},
        )
        assert approved.status_code == 200

        donor_token, donor_user = await register_user(client, "Dana Donor", "dana@example.com")
        donated = await record(client, donor_token, campaign_id, 500, "pi_journey")
        assert donated.status_code == 201

        detail = await client.get(f"/campaigns/{campaign_id}")
        assert detail.json()["campaign"]["raised_amount"] == 500
        assert detail.json()["campaign"]["donors_count"] == 1
        assert detail.json()["campaign"]["progress"] == 5

        history = await client.get(f"/donations/user/{donor_user['id']}", headers=auth(donor_token))
        assert history.status_code == 200
        assert len(history.json()) == 1
        assert history.json()[0]["campaign"]["id"] == campaign_id
        assert history.json()[0]["campaign"]["title"] == "Community Garden"
