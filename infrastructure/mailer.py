"""SMTP email sender for the transactional email endpoint"""
import logging
import smtplib
from email.message import EmailMessage

from domain.errors import InternalError, ValidationError

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """Sends plain-text emails over implicit TLS (SMTPS, port 465 by default).

    The SMTP username doubles as the From address. Each call opens its
    own connection; nothing is queued or retried.
    """

    def __init__(self, host: str, port: int, username: str, password: str, timeout: float = 30.0):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.timeout = timeout

    def build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.username
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    def send(self, to: str, subject: str, body: str) -> None:
        try:
            msg = self.build_message(to, subject, body)
        except ValueError as exc:
            # header values with CR/LF
            raise ValidationError(str(exc), error="Campos inválidos!") from exc

        if not self.host:
            raise InternalError("SMTP_HOST não configurado.", error="Erro ao enviar o email")

        try:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as server:
                if self.username:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", to, exc)
            raise InternalError(str(exc), error="Erro ao enviar o email") from exc

        logger.info("Email sent by %s to %s", self.username, to)
