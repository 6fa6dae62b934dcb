"""SMTP mail transport."""

import asyncio
import smtplib
from email.mime.text import MIMEText

import structlog

logger = structlog.get_logger()


class SMTPMailer:
    """IMailer over stdlib smtplib.

    smtplib blocks, so every send runs in a worker thread.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        sender: str = "",
        timeout: float = 30.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._sender = sender or username
        self._timeout = timeout

    async def send(self, to: str, subject: str, html: str) -> str:
        """Send an HTML email. Returns the server's reply to the DATA command."""
        return await asyncio.to_thread(self._smtp_send, to, subject, html)

    def _smtp_send(self, to: str, subject: str, html: str) -> str:
        msg = MIMEText(html, "html", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self._sender
        msg["To"] = to

        server = smtplib.SMTP(self._host, self._port, timeout=self._timeout)
        try:
            if self._use_tls:
                server.starttls()
            if self._username:
                server.login(self._username, self._password)
            server.sendmail(self._sender, [to], msg.as_string())
            code, reply = server.noop()
        finally:
            server.quit()

        logger.info("email_sent", to=to, subject=subject)
        return f"{code} {reply.decode(errors='replace')}"
