from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session
from typing import List

from fundflow.api.deps import get_current_user, get_notifier, get_payment_client
from fundflow.database.database import get_db
from fundflow.models.user import User
from fundflow.schemas.donation import (
    PaymentIntentRequest,
    PaymentIntentResponse,
    CreateDonationRequest,
    RecordDonationRequest,
    UpdateDonationStatusRequest,
    DonationResponse,
    RecordDonationResponse,
    DonorDonationResponse,
)
from fundflow.services.donation import DonationService
from fundflow.services.notifications import EmailNotifier, notify_donation
from fundflow.services.payment_client import StripePaymentClient

router = APIRouter(prefix="/donations", tags=["donations"])


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    intent_data: PaymentIntentRequest,
    db: Session = Depends(get_db),
    payment_client: StripePaymentClient = Depends(get_payment_client),
):
    """Start a card payment with the payment provider"""
    client_secret = await DonationService.create_payment_intent(db, payment_client, intent_data)
    return PaymentIntentResponse(client_secret=client_secret)


@router.post("/record-stripe-donation", response_model=RecordDonationResponse, status_code=201)
def record_stripe_donation(
    donation_data: RecordDonationRequest,
    background_tasks: BackgroundTasks,
    donor: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: EmailNotifier = Depends(get_notifier),
):
    """Record a donation the payment provider confirmed"""
    donation, notice = DonationService.record_stripe_donation(db, donor, donation_data)
    background_tasks.add_task(notify_donation, notifier, notice)
    return RecordDonationResponse(message="Donation recorded successfully", donation=donation)


@router.post("", response_model=RecordDonationResponse, status_code=201)
def create_donation(
    donation_data: CreateDonationRequest,
    background_tasks: BackgroundTasks,
    donor: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: EmailNotifier = Depends(get_notifier),
):
    """Record a donation without a payment gateway"""
    donation, notice = DonationService.create_manual_donation(db, donor, donation_data)
    background_tasks.add_task(notify_donation, notifier, notice)
    return RecordDonationResponse(message="Donation created successfully", donation=donation)


@router.post("/update-status", response_model=DonationResponse)
def update_donation_status(
    update_data: UpdateDonationStatusRequest,
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return DonationService.update_donation_status(db, update_data.payment_id, update_data.status)


@router.get("/user/{user_id}", response_model=List[DonorDonationResponse])
def list_user_donations(
    user_id: str,
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """A donor's donations, newest first"""
    return DonationService.list_by_donor(db, user_id)
