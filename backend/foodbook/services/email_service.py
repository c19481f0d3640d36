# Overview: Outbound email sender; fire-and-forget delivery of OTP codes and welcome messages.

"""
Outbound email.

Delivery uses SMTP with STARTTLS when both SMTP_HOST and SMTP_USER are
configured. Without them the message is only logged (development mode).
Failures are logged and reported as False; they never propagate to the
caller, so a mail outage cannot block login or signup.
"""

from __future__ import annotations

import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from flask import current_app

OTP_SUBJECTS = {
    "login": ("Your Login Code - FoodBook", "Your login verification code is:"),
    "signup": ("Verify & Welcome to FoodBook!", "Verify your email to create your account:"),
    "security": ("Security Verification - Action Required", "Verify your identity for Admin Settings access:"),
    "delete_account": ("URGENT: Account Deletion Request", "Use this code to PERMANENTLY DELETE your account:"),
}


def is_configured() -> bool:
    config = current_app.config
    return bool(config.get("SMTP_HOST") and config.get("SMTP_USER"))


def send_email(to: str, subject: str, html: str, text: str | None = None) -> bool:
    """Send one message. Returns True when the SMTP server accepted it."""
    if not is_configured():
        current_app.logger.info("SMTP not configured. Email to %s not sent: %s", to, subject)
        return False

    config = current_app.config
    message = EmailMessage()
    message["From"] = formataddr((config["MAIL_SENDER_NAME"], config["SMTP_USER"]))
    message["To"] = to
    message["Subject"] = subject
    message.set_content(text or f"Email from {config['MAIL_SENDER_NAME']}")
    message.add_alternative(html, subtype="html")

    try:
        with smtplib.SMTP(config["SMTP_HOST"], config["SMTP_PORT"], timeout=10) as smtp:
            smtp.starttls()
            smtp.login(config["SMTP_USER"], config.get("SMTP_PASS") or "")
            smtp.send_message(message)
    except (smtplib.SMTPException, OSError):
        current_app.logger.exception("Failed to send email to %s", to)
        return False

    current_app.logger.info("Email sent to %s", to)
    return True


def send_otp_email(email: str, code: str, purpose: str) -> bool:
    subject, title = OTP_SUBJECTS.get(purpose, OTP_SUBJECTS["login"])
    ttl = current_app.config["OTP_TTL_MINUTES"]

    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
        <p style="margin: 0 0 10px; font-size: 16px;">{title}</p>
        <h2 style="margin: 0; letter-spacing: 5px; font-size: 32px;">{code}</h2>
        <p style="margin: 10px 0 0; color: #666; font-size: 14px;">This code expires in {ttl} minutes.</p>
    </div>
    """
    if purpose == "delete_account":
        html += "<p><strong>WARNING: This action is irreversible. All your data will be lost forever.</strong></p>"

    return send_email(email, subject, html, text=f"{title} {code}")


def send_welcome_email(email: str) -> bool:
    base_url = current_app.config["APP_BASE_URL"]
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
        <h2>Welcome Aboard!</h2>
        <p>Thank you for choosing <strong>FoodBook App</strong> to manage your dining and orders.</p>
        <p>Get started by setting up your menu and company details in the dashboard.</p>
        <p><a href="{base_url}/admin">Go to Dashboard</a></p>
    </div>
    """
    return send_email(email, "Welcome to FoodBook!", html)
