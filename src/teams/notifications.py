"""Best-effort team notification emails via fastapi-mail."""

import logging
from typing import Optional

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType

from src.settings import Settings

logger = logging.getLogger(__name__)


def build_invite_url(client_url: str, team_id: object, token: str) -> str:
    """Build the client link an invitee follows to accept."""
    return f"{client_url.rstrip('/')}/teams/join/{team_id}/{token}"


class TeamMailer:
    """Sends invitation and membership emails.

    Delivery never affects the outcome of the team operation that triggered
    it: every send returns ``True``/``False`` and failures are logged, not
    raised. When ``mail_enabled`` is off, sends are skipped.

    Args:
        settings: Application settings with ``mail_*`` configuration.
        client: Optional pre-built FastMail client (tests inject a mock).
    """

    def __init__(self, settings: Settings, client: Optional[FastMail] = None) -> None:
        self._settings = settings
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._settings.mail_enabled

    def _get_client(self) -> FastMail:
        if self._client is None:
            config = ConnectionConfig(
                MAIL_USERNAME=self._settings.mail_username,
                MAIL_PASSWORD=self._settings.mail_password,
                MAIL_FROM=self._settings.mail_from,
                MAIL_FROM_NAME=self._settings.mail_from_name,
                MAIL_PORT=self._settings.mail_port,
                MAIL_SERVER=self._settings.mail_server,
                MAIL_STARTTLS=self._settings.mail_starttls,
                MAIL_SSL_TLS=self._settings.mail_ssl_tls,
                USE_CREDENTIALS=bool(self._settings.mail_username),
                SUPPRESS_SEND=int(self._settings.mail_suppress_send),
            )
            self._client = FastMail(config)
        return self._client

    async def send(self, to: str, subject: str, html: str) -> bool:
        """Send one HTML email.

        Returns:
            True if handed to the mail server, False if skipped or failed.
        """
        if not self.enabled:
            logger.debug(f"mail_skipped: reason=disabled, subject={subject}")
            return False

        try:
            message = MessageSchema(
                subject=subject,
                recipients=[to],
                body=html,
                subtype=MessageType.html,
            )
            await self._get_client().send_message(message)
        except Exception as e:
            logger.warning(f"mail_send_failed: subject={subject}, error={str(e)}")
            return False

        logger.info(f"mail_sent: subject={subject}")
        return True

    async def send_invitation(
        self,
        email: str,
        team_name: str,
        role: str,
        inviter_name: str,
        invite_url: str,
        expiry_days: int,
    ) -> bool:
        """Email an invitation link to an address with no account yet."""
        html = (
            "<h2>Team Invitation</h2>"
            f"<p>You've been invited by {inviter_name} to join the <strong>{team_name}</strong> "
            f"team as a <strong>{role}</strong>.</p>"
            "<p>Click the button below to accept:</p>"
            f'<a href="{invite_url}" style="display:inline-block;background:#4F46E5;color:white;'
            'padding:10px 20px;text-decoration:none;border-radius:4px;">Accept Invitation</a>'
            f"<p>This invitation expires in {expiry_days} days.</p>"
        )
        return await self.send(email, f"You've been invited to join {team_name} team", html)

    async def send_member_added(
        self,
        email: str,
        team_name: str,
        role: str,
        added_by_name: str,
    ) -> bool:
        """Tell an existing user they were added to a team."""
        html = (
            f"<p>You have been added as a <strong>{role}</strong> to the "
            f"<strong>{team_name}</strong> team by {added_by_name}.</p>"
        )
        return await self.send(email, f"You've been added to the {team_name} team", html)
