import pytest
from botocore.exceptions import ClientError

from hrms.core.exceptions import ExternalServiceError
from hrms.services.email import RecordingEmailSender, SESEmailSender

def test_leave_email_escapes_user_text():
    outbox = RecordingEmailSender()
    outbox.send_leave_notification("lead@example.com", "submit", {
        "employee_name": "Eve <b>Admin</b>",
        "leave_type": "pto",
        "start_date": "2025-10-06",
        "end_date": "2025-10-08",
        "total_days": 3,
        "reason": "<script>alert(1)</script>",
    })
    html = outbox.sent[0]["html"]
    assert "<script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "Eve &lt;b&gt;Admin&lt;/b&gt;" in html

def test_rejection_email_escapes_reason():
    outbox = RecordingEmailSender()
    outbox.send_leave_notification("ada@example.com", "reject", {
        "leave_type": "pto",
        "start_date": "2025-10-06",
        "end_date": "2025-10-08",
        "total_days": 3,
        "rejection_reason": "Team & <release>",
    })
    assert "Team &amp; &lt;release&gt;" in outbox.sent[0]["html"]

def test_reminder_escapes_name():
    outbox = RecordingEmailSender()
    outbox.send_checkout_reminder("ada@example.com", "<i>Ada</i>")
    assert "Hello &lt;i&gt;Ada&lt;/i&gt;," in outbox.sent[0]["html"]

class _FailingSesClient:
    def send_email(self, **kwargs):
        raise ClientError({"Error": {"Code": "MessageRejected", "Message": "rejected"}}, "SendEmail")

def test_ses_failure_becomes_external_service_error():
    sender = SESEmailSender("no-reply@example.com", client=_FailingSesClient())
    with pytest.raises(ExternalServiceError):
        sender.send_checkout_reminder("ada@example.com", "Ada")
