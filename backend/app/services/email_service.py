"""Email notification service using Resend API."""
import logging
from html import escape
from typing import Protocol

import resend

from app.config import settings
from app.models.payout import Payout
from app.models.support_message import SupportMessage
from app.services.currency import format_currency

logger = logging.getLogger(__name__)

# Configure Resend API
resend.api_key = settings.RESEND_API_KEY

# Posterhub brand colors
POSTERHUB_PRIMARY = "#111827"  # Ink
POSTERHUB_ACCENT = "#e11d48"   # Rose
POSTERHUB_SUCCESS = "#10b981"  # Green
POSTERHUB_DARK = "#1f2937"     # Dark gray
POSTERHUB_LIGHT = "#f9fafb"    # Light gray


class Recipient(Protocol):
    """Anything with a name and an email: a User or a payout-run creator snapshot."""
    name: str
    email: str


def get_email_template(title: str, content: str, cta_text: str = None, cta_url: str = None, cta_color: str = POSTERHUB_PRIMARY) -> str:
    """
    Generate a branded email template.

    Args:
        title: Email title/heading
        content: HTML content for the email body
        cta_text: Optional call-to-action button text
        cta_url: Optional call-to-action button URL
        cta_color: Button background color

    Returns:
        Complete HTML email template
    """
    cta_button = ""
    if cta_text and cta_url:
        cta_button = f"""
        <div style="text-align: center; margin: 30px 0;">
            <a href="{cta_url}" style="display: inline-block; background-color: {cta_color}; color: white; padding: 14px 28px; text-decoration: none; border-radius: 6px; font-weight: 600; font-size: 16px;">
                {cta_text}
            </a>
        </div>
        """

    return f"""
    <!DOCTYPE html>
    <html>
        <head>
            <meta charset="utf-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
        </head>
        <body style="margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; background-color: #f3f4f6;">
            <table width="100%" cellpadding="0" cellspacing="0" style="background-color: #f3f4f6; padding: 40px 20px;">
                <tr>
                    <td align="center">
                        <table width="600" cellpadding="0" cellspacing="0" style="background-color: white; border-radius: 8px; overflow: hidden;">
                            <tr>
                                <td style="background-color: {POSTERHUB_PRIMARY}; padding: 32px 40px; text-align: center;">
                                    <h1 style="margin: 0 0 16px 0; color: white; font-size: 26px; font-weight: 800; letter-spacing: 2px;">
                                        POSTERHUB
                                    </h1>
                                    <h2 style="margin: 0; color: white; font-size: 20px; font-weight: 500;">
                                        {title}
                                    </h2>
                                </td>
                            </tr>
                            <tr>
                                <td style="padding: 40px;">
                                    {content}
                                    {cta_button}
                                </td>
                            </tr>
                            <tr>
                                <td style="background-color: {POSTERHUB_LIGHT}; padding: 24px 40px; border-top: 1px solid #e5e7eb;">
                                    <p style="margin: 0; color: #6b7280; font-size: 14px; line-height: 1.6;">
                                        Best regards,<br>
                                        <strong style="color: {POSTERHUB_DARK};">The Posterhub Team</strong>
                                    </p>
                                </td>
                            </tr>
                        </table>
                    </td>
                </tr>
            </table>
        </body>
    </html>
    """


def _paragraph(text: str) -> str:
    return f'<p style="margin: 0 0 20px 0; color: {POSTERHUB_DARK}; font-size: 16px; line-height: 1.6;">{text}</p>'


def _send(to: str, subject: str, html: str) -> None:
    resend.Emails.send({
        "from": settings.EMAIL_FROM,
        "to": to,
        "subject": subject,
        "html": html,
    })


class EmailService:
    """Service for sending email notifications via Resend."""

    @staticmethod
    def send_welcome_email(user: Recipient) -> bool:
        """Confirm a new creator registration; the account still awaits approval."""
        try:
            if not settings.RESEND_API_KEY:
                logger.warning("RESEND_API_KEY not configured, skipping email")
                return False

            content = (
                _paragraph(f"Hi <strong>{escape(user.name or '')}</strong>,")
                + _paragraph("Thanks for applying to sell your posters on Posterhub.")
                + _paragraph(
                    "Our team reviews every new creator. We'll email you as soon as your "
                    "account is approved and you can start uploading designs."
                )
            )
            _send(user.email, "Welcome to Posterhub", get_email_template("Application received", content))

            logger.info(f"Welcome email sent to {user.email}")
            return True

        except Exception as e:
            logger.error(f"Failed to send welcome email: {e}")
            return False

    @staticmethod
    def send_creator_approved_email(user: Recipient) -> bool:
        """
        Tell a creator their account was approved.

        Returns:
            True if email sent successfully, False otherwise
        """
        try:
            if not settings.RESEND_API_KEY:
                logger.warning("RESEND_API_KEY not configured, skipping email")
                return False

            content = (
                _paragraph(f"Hi <strong>{escape(user.name or '')}</strong>,")
                + _paragraph("Good news! Your Posterhub creator account has been approved.")
                + _paragraph("You can now upload posters. Each design is reviewed before it goes live in the shop.")
            )
            html_content = get_email_template(
                title="You're approved!",
                content=content,
                cta_text="Upload your first poster",
                cta_url=f"{settings.FRONTEND_URL}/dashboard/upload",
                cta_color=POSTERHUB_SUCCESS,
            )
            _send(user.email, "Your Posterhub account is approved", html_content)

            logger.info(f"Approval email sent to {user.email}")
            return True

        except Exception as e:
            logger.error(f"Failed to send approval email: {e}")
            return False

    @staticmethod
    def send_payout_created_email(user: Recipient, payout: Payout) -> bool:
        """
        Notify a creator that a monthly payout was recorded.

        Args:
            user: Creator receiving the payout
            payout: Newly created payout row

        Returns:
            True if email sent successfully, False otherwise
        """
        try:
            if not settings.RESEND_API_KEY:
                logger.warning("RESEND_API_KEY not configured, skipping email")
                return False

            amount = format_currency(payout.amount, payout.currency)
            content = (
                _paragraph(f"Hi <strong>{escape(user.name or '')}</strong>,")
                + _paragraph(
                    f"Your earnings for {payout.period_start:%B %Y} have been calculated. "
                    f"A payout of <strong>{amount}</strong> is on its way via {escape(payout.method or 'bank transfer')}."
                )
                + _paragraph("Payouts are usually completed within 5 business days.")
            )
            html_content = get_email_template(
                title=f"Payout of {amount}",
                content=content,
                cta_text="View earnings",
                cta_url=f"{settings.FRONTEND_URL}/dashboard/earnings",
                cta_color=POSTERHUB_ACCENT,
            )
            _send(user.email, f"Your Posterhub payout for {payout.period_start:%B %Y}", html_content)

            logger.info(f"Payout email sent to {user.email} for payout {payout.uuid}")
            return True

        except Exception as e:
            logger.error(f"Failed to send payout email: {e}")
            return False

    @staticmethod
    def send_support_confirmation_email(message: SupportMessage) -> bool:
        """Acknowledge a support request to the sender."""
        try:
            if not settings.RESEND_API_KEY:
                logger.warning("RESEND_API_KEY not configured, skipping email")
                return False

            content = (
                _paragraph(f"Hi <strong>{escape(message.name or '')}</strong>,")
                + _paragraph(f'We received your message "<em>{escape(message.subject)}</em>" and will get back to you shortly.')
            )
            _send(message.email, f"Re: {message.subject}", get_email_template("We got your message", content))

            logger.info(f"Support confirmation sent to {message.email}")
            return True

        except Exception as e:
            logger.error(f"Failed to send support confirmation email: {e}")
            return False
