from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional


class EmailRequest(BaseModel):
    # Callers post camelCase JSON
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr


class WelcomeEmailRequest(EmailRequest):
    first_name: Optional[str] = Field(default=None, alias="firstName")


class ApplicationReceivedEmailRequest(EmailRequest):
    first_name: str = Field(alias="firstName", min_length=1)
    gig_title: str = Field(alias="gigTitle", min_length=1)


class ApplicationAcceptedEmailRequest(EmailRequest):
    talent_name: str = Field(alias="talentName", min_length=1)
    gig_title: str = Field(alias="gigTitle", min_length=1)
    client_name: Optional[str] = Field(default=None, alias="clientName")
    dashboard_url: Optional[str] = Field(default=None, alias="dashboardUrl")


class ApplicationRejectedEmailRequest(EmailRequest):
    talent_name: str = Field(alias="talentName", min_length=1)
    gig_title: str = Field(alias="gigTitle", min_length=1)


class BookingConfirmedEmailRequest(EmailRequest):
    talent_name: str = Field(alias="talentName", min_length=1)
    gig_title: str = Field(alias="gigTitle", min_length=1)
    booking_date: Optional[str] = Field(default=None, alias="bookingDate")
    booking_time: Optional[str] = Field(default=None, alias="bookingTime")
    booking_location: Optional[str] = Field(default=None, alias="bookingLocation")
    compensation: Optional[str] = None
    dashboard_url: Optional[str] = Field(default=None, alias="dashboardUrl")


class NewApplicationClientEmailRequest(EmailRequest):
    client_name: str = Field(alias="clientName", min_length=1)
    gig_title: str = Field(alias="gigTitle", min_length=1)
    dashboard_url: Optional[str] = Field(default=None, alias="dashboardUrl")


class EmailSendResponse(BaseModel):
    success: bool = True
    message_id: Optional[str] = None
