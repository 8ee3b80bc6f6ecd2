from jinja2 import Template

RESET_PIN_SUBJECT = "Reset Your PIN"

RESET_PIN_HTML = Template(
    """
<h1>PIN Reset Request</h1>
<h2>From: {{ sender_name }}</h2>
<p>Click the link below to reset your PIN. This link will expire in {{ ttl_minutes }} minutes:</p>
<a href="{{ reset_url }}">{{ reset_url }}</a>
<p>If you didn't request this, please ignore this email.</p>
""",
    autoescape=True,
)

RESET_PIN_TEXT = Template(
    """PIN Reset Request
From: {{ sender_name }}

Use the link below to reset your PIN. This link will expire in {{ ttl_minutes }} minutes:

{{ reset_url }}

If you didn't request this, please ignore this email.
"""
)


def render_reset_pin_email(reset_url: str, ttl_minutes: int, sender_name: str) -> tuple[str, str]:
    """Return (html, text) bodies for the reset email"""
    context = {
        "reset_url": reset_url,
        "ttl_minutes": ttl_minutes,
        "sender_name": sender_name,
    }
    return RESET_PIN_HTML.render(**context), RESET_PIN_TEXT.render(**context)
