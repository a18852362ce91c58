import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from flask import current_app


def send_email(to_email: str, subject: str, body: str):
    """Send a plain-text email. Returns ``(sent, error)``; never raises."""
    host = current_app.config.get("SMTP_HOST")
    port = current_app.config.get("SMTP_PORT", 587)
    username = current_app.config.get("SMTP_USERNAME")
    password = current_app.config.get("SMTP_PASSWORD")
    from_email = current_app.config.get("SMTP_FROM_EMAIL") or username
    sender_name = current_app.config.get("MAIL_SENDER_NAME")
    use_tls = current_app.config.get("SMTP_USE_TLS", True)

    if not to_email:
        return False, "Recipient has no email"
    if not host or not from_email:
        return False, "Email not configured"

    msg = EmailMessage()
    msg["From"] = formataddr((sender_name, from_email)) if sender_name else from_email
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)

    try:
        with smtplib.SMTP(host, port, timeout=10) as server:
            if use_tls:
                server.starttls()
            if username and password:
                server.login(username, password)
            server.send_message(msg)
        current_app.logger.info("Email sent to %s: %s", to_email, subject)
        return True, None
    except (smtplib.SMTPException, OSError) as exc:
        return False, str(exc)
