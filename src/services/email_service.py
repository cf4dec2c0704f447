"""Email service using Resend for transactional emails."""

import html
import logging
from typing import Any

import resend
from resend.exceptions import ApplicationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.core.config import get_settings

logger = logging.getLogger(__name__)

# Retry configuration
MAX_RETRIES = 3
MIN_WAIT_SECONDS = 1
MAX_WAIT_SECONDS = 10


class EmailService:
    """Service for sending transactional emails via Resend.

    Sends never raise: failures are logged and reported in the returned dict,
    so callers treating email as a side effect can ignore them.
    """

    def __init__(self) -> None:
        """Initialize email service with Resend API key."""
        settings = get_settings()
        resend.api_key = settings.resend_api_key
        self.from_email = settings.email_from_address
        self.frontend_url = settings.frontend_url
        self.expiration_days = settings.invitation_expiration_days

    async def send_invitation_email(
        self,
        to_email: str,
        inviter_name: str,
        company_name: str,
        invitation_id: str,
    ) -> dict[str, Any]:
        """Send a company invitation email.

        Args:
            to_email: Recipient email address.
            inviter_name: Name of the person who sent the invite.
            company_name: Name of the company being invited to.
            invitation_id: UUID of the invitation for the accept link.

        Returns:
            dict: ``success`` plus the Resend email id or the error.
        """
        accept_url = f"{self.frontend_url}/invitations/{invitation_id}/accept"

        html_content = f"""
<!DOCTYPE html>
<html>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="font-size: 22px;">You're invited to {html.escape(company_name)}</h1>
    <p><strong>{html.escape(inviter_name)}</strong> has invited you to join the board of <strong>{html.escape(company_name)}</strong>.</p>
    <p style="text-align: center; margin: 30px 0;">
        <a href="{accept_url}" style="background: #1f2937; color: white; padding: 12px 28px; text-decoration: none; border-radius: 6px; font-weight: 600;">Accept Invitation</a>
    </p>
    <p style="font-size: 12px; color: #9ca3af;">This invitation expires in {self.expiration_days} days. If you didn't expect it, you can ignore this email.</p>
    <p style="font-size: 12px; color: #9ca3af;">If the button doesn't work, open: {accept_url}</p>
</body>
</html>
"""

        text_content = f"""
You're invited to {company_name}

{inviter_name} has invited you to join the board of {company_name}.

Accept your invitation here:
{accept_url}

This invitation expires in {self.expiration_days} days.
"""

        return self._send(
            to_email,
            f"You're invited to join {company_name}",
            html_content,
            text_content,
            kind="invitation",
        )

    async def send_meeting_summary_email(
        self,
        to_email: str,
        company_name: str,
        summary: dict[str, Any],
        notes: str | None = None,
    ) -> dict[str, Any]:
        """Send the post-meeting summary to one attendee.

        Args:
            to_email: Recipient email address.
            company_name: Company the meeting belongs to.
            summary: The structured summary persisted on completion.
            notes: Free-text meeting notes, if any.

        Returns:
            dict: ``success`` plus the Resend email id or the error.
        """
        title = summary.get("title", "Meeting")

        attendee_lines = [
            f"{a['name']} ({'present' if a.get('present') else 'absent'})"
            for a in summary.get("attendees", [])
        ]
        agenda_lines = [item["title"] for item in summary.get("agendaItems", [])]
        decision_lines = [
            "{title}: {outcome} (for {f}, against {a}, abstain {ab})".format(
                title=d["title"],
                outcome=d.get("outcome") or "TABLED",
                f=d["votes"]["for"],
                a=d["votes"]["against"],
                ab=d["votes"]["abstain"],
            )
            for d in summary.get("decisions", [])
        ]

        def _html_list(lines: list[str]) -> str:
            if not lines:
                return "<p style=\"color: #6b7280;\">None</p>"
            return "<ul>" + "".join(f"<li>{html.escape(line)}</li>" for line in lines) + "</ul>"

        html_content = f"""
<!DOCTYPE html>
<html>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="font-size: 22px;">{html.escape(title)}</h1>
    <p style="color: #6b7280;">{html.escape(company_name)} &middot; {html.escape(str(summary.get("date", "")))}</p>
    <h2 style="font-size: 16px;">Attendees</h2>
    {_html_list(attendee_lines)}
    <h2 style="font-size: 16px;">Agenda</h2>
    {_html_list(agenda_lines)}
    <h2 style="font-size: 16px;">Decisions</h2>
    {_html_list(decision_lines)}
    {f'<h2 style="font-size: 16px;">Notes</h2><p>{html.escape(notes)}</p>' if notes else ''}
</body>
</html>
"""

        text_parts = [
            f"{title} - {company_name}",
            "",
            "Attendees:",
            *[f"- {line}" for line in attendee_lines],
            "",
            "Agenda:",
            *[f"- {line}" for line in agenda_lines],
            "",
            "Decisions:",
            *[f"- {line}" for line in decision_lines],
        ]
        if notes:
            text_parts += ["", "Notes:", notes]

        return self._send(
            to_email,
            f"Meeting summary: {title}",
            html_content,
            "\n".join(text_parts),
            kind="meeting summary",
        )

    def _send(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: str,
        kind: str,
    ) -> dict[str, Any]:
        try:
            response = self._send_with_retry({
                "from": self.from_email,
                "to": [to_email],
                "subject": subject,
                "html": html_content,
                "text": text_content,
            })

            logger.info("%s email sent to %s, id: %s", kind.capitalize(), to_email, response.get("id"))
            return {"success": True, "email_id": response.get("id")}

        except Exception as e:
            logger.error("Failed to send %s email to %s: %s", kind, to_email, str(e))
            return {"success": False, "error": str(e)}

    @retry(
        retry=retry_if_exception_type((ApplicationError, ConnectionError, TimeoutError)),
        stop=stop_after_attempt(MAX_RETRIES),
        wait=wait_exponential(multiplier=1, min=MIN_WAIT_SECONDS, max=MAX_WAIT_SECONDS),
        reraise=True,
    )
    def _send_with_retry(self, params: dict[str, Any]) -> Any:
        """Send through Resend, retrying provider-side and network failures."""
        return resend.Emails.send(params)
