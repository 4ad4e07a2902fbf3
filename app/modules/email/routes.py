from fastapi import APIRouter, Depends, HTTPException
from app.core.dependencies import require_internal_email_key
from app.modules.email import templates
from app.modules.email.schemas import (
    ApplicationAcceptedEmailRequest, ApplicationReceivedEmailRequest, ApplicationRejectedEmailRequest,
    BookingConfirmedEmailRequest, EmailSendResponse, NewApplicationClientEmailRequest, WelcomeEmailRequest
)
from app.modules.email.service import EmailSendError, EmailService, get_email_service
from app.modules.email.templates import EmailContent

router = APIRouter(
    prefix="/email",
    tags=["email"],
    dependencies=[Depends(require_internal_email_key)],
)


def _send(service: EmailService, to: str, content: EmailContent, template: str) -> EmailSendResponse:
    try:
        message_id = service.send(to, content, template)
    except EmailSendError:
        raise HTTPException(status_code=500, detail=f"Failed to send {template.replace('-', ' ')} email")
    return EmailSendResponse(message_id=message_id)


@router.post("/send-welcome", response_model=EmailSendResponse)
async def send_welcome(request: WelcomeEmailRequest, service: EmailService = Depends(get_email_service)):
    name = request.first_name or request.email.split("@")[0]
    return _send(service, request.email, templates.welcome_email(name), "welcome")


@router.post("/send-application-received", response_model=EmailSendResponse)
async def send_application_received(
    request: ApplicationReceivedEmailRequest,
    service: EmailService = Depends(get_email_service)
):
    content = templates.application_received_email(request.first_name, request.gig_title)
    return _send(service, request.email, content, "application-received")


@router.post("/send-application-accepted", response_model=EmailSendResponse)
async def send_application_accepted(
    request: ApplicationAcceptedEmailRequest,
    service: EmailService = Depends(get_email_service)
):
    content = templates.application_accepted_email(
        request.talent_name,
        request.gig_title,
        request.client_name or "the client",
        request.dashboard_url,
    )
    return _send(service, request.email, content, "application-accepted")


@router.post("/send-application-rejected", response_model=EmailSendResponse)
async def send_application_rejected(
    request: ApplicationRejectedEmailRequest,
    service: EmailService = Depends(get_email_service)
):
    content = templates.application_rejected_email(request.talent_name, request.gig_title)
    return _send(service, request.email, content, "application-rejected")


@router.post("/send-booking-confirmed", response_model=EmailSendResponse)
async def send_booking_confirmed(
    request: BookingConfirmedEmailRequest,
    service: EmailService = Depends(get_email_service)
):
    content = templates.booking_confirmed_email(
        request.talent_name,
        request.gig_title,
        booking_date=request.booking_date,
        booking_time=request.booking_time,
        booking_location=request.booking_location,
        compensation=request.compensation,
        dashboard_url=request.dashboard_url,
    )
    return _send(service, request.email, content, "booking-confirmed")


@router.post("/send-new-application-client", response_model=EmailSendResponse)
async def send_new_application_client(
    request: NewApplicationClientEmailRequest,
    service: EmailService = Depends(get_email_service)
):
    content = templates.new_application_client_email(request.client_name, request.gig_title, request.dashboard_url)
    return _send(service, request.email, content, "new-application-client")
