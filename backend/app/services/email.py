"""Email service for sending notifications and magic links."""
import asyncio
import html
import logging
from dataclasses import dataclass
from typing import Optional
from app.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html_content: str
    text_content: str


def render_job_application_email(
    company_name: str,
    job_title: str,
    student_name: str,
    student_email: str,
    subject: Optional[str],
    message: Optional[str],
    application_url: str,
) -> RenderedEmail:
    """Notification sent to each company owner when a student applies to one of their jobs."""
    esc = {
        "company_name": html.escape(company_name or ""),
        "job_title": html.escape(job_title or ""),
        "student_name": html.escape(student_name or ""),
        "student_email": html.escape(student_email or ""),
        "subject": html.escape(subject or "(no subject)"),
        "message": html.escape(message or "").replace("\n", "<br>"),
        "application_url": html.escape(application_url, quote=True),
    }

    html_content = f"""
    <html>
        <body style="font-family: Arial, sans-serif; background-color: #f4f4f4; padding: 20px;">
            <div style="max-width: 600px; margin: 0 auto; background-color: white; padding: 40px; border-radius: 8px; box-shadow: 0 2px 8px rgba(0,0,0,0.1);">
                <h2 style="color: #333; margin-bottom: 20px;">New application at {esc["company_name"]}</h2>
                <p style="color: #666; font-size: 16px; line-height: 1.6;">
                    <strong>{esc["student_name"]}</strong> ({esc["student_email"]}) applied for
                    <strong>{esc["job_title"]}</strong>.
                </p>
                <p style="color: #333; font-size: 16px; margin-top: 20px;"><strong>{esc["subject"]}</strong></p>
                <p style="color: #666; font-size: 15px; line-height: 1.6;">{esc["message"]}</p>
                <p style="margin: 30px 0;">
                    <a href="{esc["application_url"]}" style="background-color: #007bff; color: white; padding: 12px 30px; text-decoration: none; border-radius: 5px; display: inline-block; font-weight: bold;">
                        View application
                    </a>
                </p>
            </div>
        </body>
    </html>
    """

    text_content = f"""
    New application at {company_name}

    {student_name} ({student_email}) applied for {job_title}.

    {subject or "(no subject)"}
    {message or ""}

    View application: {application_url}
    """

    return RenderedEmail(
        subject=f"New application for: {job_title}",
        html_content=html_content,
        text_content=text_content,
    )


class EmailService:
    """Handles email sending in dev and production modes."""

    def __init__(self):
        self.mode = settings.email_mode
        if self.mode == "prod":
            from sendgrid import SendGridAPIClient
            self.sendgrid_client = SendGridAPIClient(settings.sendgrid_api_key)
        else:
            self.sendgrid_client = None

    async def send_magic_link_email(self, email: str, magic_link: str, first_name: Optional[str] = None) -> bool:
        """Send magic link email to user."""
        subject = "Welcome to StudyLink - your sign-in link"
        greeting = f"Hello {html.escape(first_name)}," if first_name else "Hello,"

        html_content = f"""
        <html>
            <body style="font-family: Arial, sans-serif; background-color: #f4f4f4; padding: 20px;">
                <div style="max-width: 600px; margin: 0 auto; background-color: white; padding: 40px; border-radius: 8px; box-shadow: 0 2px 8px rgba(0,0,0,0.1);">
                    <h2 style="color: #333; margin-bottom: 20px;">{greeting}</h2>
                    <p style="color: #666; font-size: 16px; line-height: 1.6;">
                        Click the link below to sign in to StudyLink:
                    </p>
                    <p style="margin: 30px 0;">
                        <a href="{magic_link}" style="background-color: #007bff; color: white; padding: 12px 30px; text-decoration: none; border-radius: 5px; display: inline-block; font-weight: bold;">
                            Sign in
                        </a>
                    </p>
                    <p style="color: #999; font-size: 12px; margin-top: 20px;">
                        This link expires in {settings.magic_link_ttl_minutes} minutes.
                    </p>
                </div>
            </body>
        </html>
        """

        text_content = f"""
        Sign in to StudyLink:
        {magic_link}

        This link expires in {settings.magic_link_ttl_minutes} minutes.
        """

        return await self.send_email(email, subject, html_content, text_content)

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """Send one email via SendGrid or the dev console. Returns False on provider errors."""
        if self.mode == "dev":
            logger.info(f"[DEV MODE] Email to {to_email}: {subject}")
            if text_content:
                logger.info(f"[DEV MODE] Content:\n{text_content}")
            return True

        try:
            from sendgrid.helpers.mail import Mail, Email, To, Content

            mail = Mail(
                from_email=Email(settings.mail_from_address, settings.mail_from_name),
                to_emails=To(to_email),
                subject=subject,
                plain_text_content=Content("text/plain", text_content) if text_content else None,
                html_content=Content("text/html", html_content)
            )

            # SendGrid's client is blocking
            response = await asyncio.to_thread(self.sendgrid_client.send, mail)

            if 200 <= response.status_code < 300:
                logger.info(f"Email sent to {to_email}: {subject}")
                return True
            else:
                logger.error(f"Failed to send email to {to_email}: {response.status_code}")
                return False
        except Exception as e:
            logger.error(f"Error sending email to {to_email}: {str(e)}")
            return False


# Global email service instance
email_service = EmailService()
