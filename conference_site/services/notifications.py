"""Outbound participant emails sent through Flask-Mail.

Emails are addressed by a subject id and a template id so callers never build
message text themselves. Sending never raises: failures are logged and
reported through the boolean return value.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from flask_mail import Mail, Message

logger = logging.getLogger(__name__)

SUBJECTS = {
    'registration': 'Registration for {conference}',
}

TEMPLATES = {
    'registration_confirmation': (
        "Dear {name},\n\n"
        "Thank you for registering for {conference}.\n\n"
        "Your participant code is: {code}\n\n"
        "Keep this code: you will need it to upload your article.\n"
    ),
}


class Notifier:
    def __init__(self, mail: Mail, sender: Optional[str] = None, conference: str = ''):
        self.mail = mail
        self.sender = sender or 'no-reply@example.com'
        self.conference = conference

    def send(self, recipient_name: str, recipient_email: str, subject_id: str, template_id: str, **context: Any) -> bool:
        """Attempt a single delivery. Returns True when the message was handed to SMTP."""
        try:
            values = {'name': recipient_name, 'conference': self.conference, **context}
            subject = SUBJECTS[subject_id].format(**values)
            body = TEMPLATES[template_id].format(**values)
            msg = Message(subject=subject, body=body, recipients=[recipient_email], sender=self.sender)
            logger.info("Sending '%s' email to %s", subject_id, recipient_email)
            self.mail.send(msg)
            return True
        except Exception:
            logger.exception("Failed to send '%s' email to %s", subject_id, recipient_email)
            return False
