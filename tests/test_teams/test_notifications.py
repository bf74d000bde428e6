"""Unit tests for best-effort team notification emails."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.settings import Settings
from src.teams.notifications import TeamMailer, build_invite_url


@pytest.fixture
def mail_settings() -> Settings:
    return Settings(mail_enabled=True, client_url="https://tracker.example.com/")


@pytest.fixture
def fast_mail() -> MagicMock:
    client = MagicMock()
    client.send_message = AsyncMock()
    return client


@pytest.mark.unit
def test_build_invite_url() -> None:
    url = build_invite_url("https://tracker.example.com/", "team-1", "abc")
    assert url == "https://tracker.example.com/teams/join/team-1/abc"


@pytest.mark.unit
class TestTeamMailer:
    """TeamMailer never raises."""

    @pytest.mark.asyncio
    async def test_send_invitation(self, mail_settings: Settings, fast_mail: MagicMock) -> None:
        mailer = TeamMailer(mail_settings, client=fast_mail)

        sent = await mailer.send_invitation(
            email="new@example.com",
            team_name="Platform",
            role="developer",
            inviter_name="Olivia Owner",
            invite_url="https://tracker.example.com/teams/join/t/tok",
            expiry_days=7,
        )

        assert sent is True
        message = fast_mail.send_message.await_args.args[0]
        assert message.subject == "You've been invited to join Platform team"
        assert message.recipients[0].email == "new@example.com"
        assert "https://tracker.example.com/teams/join/t/tok" in message.body
        assert "expires in 7 days" in message.body

    @pytest.mark.asyncio
    async def test_send_member_added(self, mail_settings: Settings, fast_mail: MagicMock) -> None:
        mailer = TeamMailer(mail_settings, client=fast_mail)

        sent = await mailer.send_member_added(
            email="dev@example.com", team_name="Platform", role="tester", added_by_name="Olivia"
        )

        assert sent is True
        message = fast_mail.send_message.await_args.args[0]
        assert message.subject == "You've been added to the Platform team"
        assert "<strong>tester</strong>" in message.body

    @pytest.mark.asyncio
    async def test_failure_is_swallowed(self, mail_settings: Settings, fast_mail: MagicMock) -> None:
        fast_mail.send_message.side_effect = ConnectionError("smtp down")
        mailer = TeamMailer(mail_settings, client=fast_mail)

        sent = await mailer.send_member_added(
            email="dev@example.com", team_name="Platform", role="tester", added_by_name="Olivia"
        )

        assert sent is False

    @pytest.mark.asyncio
    async def test_disabled_skips_send(self, fast_mail: MagicMock) -> None:
        mailer = TeamMailer(Settings(mail_enabled=False), client=fast_mail)

        sent = await mailer.send("dev@example.com", "subject", "<p>body</p>")

        assert sent is False
        fast_mail.send_message.assert_not_awaited()
