"""
HTML bodies for transactional email. Every interpolated value is escaped.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from html import escape
from typing import Optional
from app.config.settings import settings


@dataclass
class EmailContent:
    subject: str
    html: str


def absolute_url(path: str) -> str:
    return f"{settings.site_url.rstrip('/')}{path}"


def _button(url: str, label: str) -> str:
    return f'<div style="text-align: center;"><a href="{escape(url)}" class="button">{escape(label)}</a></div>'


def _signoff(greeting: str) -> str:
    return f"<p>{greeting},<br><strong>The TOTL Agency Team</strong></p>"


def _details(rows) -> str:
    items = "".join(
        f"<li><strong>{label}:</strong> {escape(value)}</li>" for label, value in rows if value
    )
    return f"<ul>{items}</ul>" if items else ""


def base_template(title: str, content: str, preview_text: str = "") -> str:
    year = datetime.now(timezone.utc).year
    description = f'<meta name="description" content="{escape(preview_text)}">' if preview_text else ""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{escape(title)}</title>
  {description}
  <style>
    body {{ margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; background-color: #f5f5f5; }}
    .container {{ max-width: 600px; margin: 0 auto; background-color: #ffffff; }}
    .header {{ background-color: #000000; padding: 30px; text-align: center; }}
    .content {{ padding: 40px 30px; color: #333333; }}
    .highlight {{ background-color: #f8f9fa; border-left: 4px solid #000000; padding: 20px; margin: 20px 0; }}
    .button {{ display: inline-block; background-color: #000000; color: #ffffff !important; padding: 14px 28px; text-decoration: none; border-radius: 6px; font-weight: 600; margin: 20px 0; }}
    .footer {{ background-color: #f8f9fa; padding: 30px; text-align: center; font-size: 14px; color: #999999; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <img src="{escape(absolute_url('/images/totl-logo-transparent.png'))}" alt="TOTL Agency" style="max-width: 150px;" />
    </div>
    <div class="content">
      {content}
    </div>
    <div class="footer">
      <p>&copy; {year} TOTL Agency. All rights reserved.</p>
      <p><a href="{escape(absolute_url('/privacy'))}" style="color: #999999;">Privacy Policy</a></p>
    </div>
  </div>
</body>
</html>"""


def welcome_email(name: str) -> EmailContent:
    content = f"""
    <h1>Welcome to TOTL Agency, {escape(name)}!</h1>
    <p>Thank you for joining TOTL Agency. We're excited to have you on board.</p>
    <p>To get started, log in to your account and complete your profile:</p>
    {_button(absolute_url('/login'), 'Log In to Your Account')}
    {_signoff('Best regards')}
    """
    return EmailContent(
        subject="Welcome to TOTL Agency - Your Journey Begins Now",
        html=base_template("Welcome to TOTL Agency", content, "Your journey with TOTL Agency begins now"),
    )


def application_received_email(name: str, gig_title: str) -> EmailContent:
    content = f"""
    <h1>Application Received</h1>
    <p>Hello {escape(name)},</p>
    <p>Thank you for applying to <strong>{escape(gig_title)}</strong> through TOTL Agency.</p>
    <div class="highlight">
      <p><strong>What happens next:</strong></p>
      <p>The client will review your application and you'll receive updates on its status.</p>
    </div>
    {_button(absolute_url('/talent/dashboard'), 'View Dashboard')}
    {_signoff('Best regards')}
    """
    return EmailContent(
        subject=f"Application Received - {gig_title}",
        html=base_template("Application Received", content, "Your application has been received by TOTL Agency"),
    )


def application_accepted_email(name: str, gig_title: str, client_name: str,
                               dashboard_url: Optional[str] = None) -> EmailContent:
    content = f"""
    <h1>Congratulations, {escape(name)}!</h1>
    <p>Your application for <strong>{escape(gig_title)}</strong> has been accepted!</p>
    <div class="highlight">
      <p>The client, <strong>{escape(client_name)}</strong>, has selected you for this opportunity.</p>
      <p>A booking has been created in your dashboard. Review the details and confirm your availability.</p>
    </div>
    {_button(dashboard_url or absolute_url('/talent/dashboard'), 'View Booking Details')}
    {_signoff('Best of luck')}
    """
    return EmailContent(
        subject=f"Application Accepted - {gig_title}",
        html=base_template("Application Accepted!", content, "Congratulations! Your application has been accepted"),
    )


def application_rejected_email(name: str, gig_title: str) -> EmailContent:
    content = f"""
    <h1>Application Update</h1>
    <p>Hello {escape(name)},</p>
    <p>Thank you for your interest in <strong>{escape(gig_title)}</strong>.</p>
    <p>After careful consideration, your application was not selected for this particular opportunity.
    We encourage you to keep applying to gigs that match your profile.</p>
    {_button(absolute_url('/gigs'), 'Browse More Gigs')}
    {_signoff('Keep pushing forward')}
    """
    return EmailContent(
        subject=f"Application Update - {gig_title}",
        html=base_template("Application Update", content, "Update on your application"),
    )


def booking_confirmed_email(name: str, gig_title: str, booking_date: Optional[str] = None,
                            booking_time: Optional[str] = None, booking_location: Optional[str] = None,
                            compensation: Optional[str] = None,
                            dashboard_url: Optional[str] = None) -> EmailContent:
    details = _details([
        ("Date", booking_date),
        ("Time", booking_time),
        ("Location", booking_location),
        ("Compensation", compensation),
    ])
    content = f"""
    <h1>Booking Confirmed</h1>
    <p>Hello {escape(name)},</p>
    <p>Your booking for <strong>{escape(gig_title)}</strong> has been confirmed!</p>
    <div class="highlight">
      <p><strong>Booking Details</strong></p>
      {details}
    </div>
    {_button(dashboard_url or absolute_url('/talent/dashboard'), 'View Booking Dashboard')}
    {_signoff('Break a leg')}
    """
    return EmailContent(
        subject=f"Booking Confirmed - {gig_title}",
        html=base_template("Booking Confirmed", content, "Your booking has been confirmed"),
    )


def new_application_client_email(name: str, gig_title: str,
                                 dashboard_url: Optional[str] = None) -> EmailContent:
    content = f"""
    <h1>New Application Received</h1>
    <p>Hello {escape(name)},</p>
    <p>You've received a new application for your gig <strong>{escape(gig_title)}</strong>.</p>
    <p>Review the talent's profile and accept the application to create a booking.</p>
    {_button(dashboard_url or absolute_url('/client/dashboard'), 'Review Application')}
    {_signoff('Best regards')}
    """
    return EmailContent(
        subject=f"New Application - {gig_title}",
        html=base_template("New Application Received", content, "You have a new application to review"),
    )
