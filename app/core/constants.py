"""Application constants.

Contains the profile update allow-list and the client-facing messages.
"""

# ---------------------------------------------------------------------------
# Profile update allow-list
# Only these columns may be written through /users/update-profile.
# ---------------------------------------------------------------------------
PROFILE_UPDATE_FIELDS: tuple[str, ...] = (
    "name",
    "age",
    "role",
    "phone",
    "experience",
    "specialization",
    "skills",
)

USERS_TABLE: str = "users"

# ---------------------------------------------------------------------------
# Client-facing messages
# ---------------------------------------------------------------------------
MSG_EMAIL_REQUIRED: str = "Email is required"
MSG_EMAIL_AND_OTP_REQUIRED: str = "Email and OTP are required"
MSG_USER_NOT_FOUND: str = "User not found"
MSG_AUTH_FAILED: str = "Authentication failed"
MSG_OTP_GENERIC: str = "If the email exists, an OTP has been sent"
MSG_OTP_SENT: str = "OTP sent successfully"
MSG_OTP_SEND_FAILED: str = "Failed to send OTP"
MSG_OTP_MISSING: str = "OTP expired or invalid"
MSG_OTP_EXPIRED: str = "OTP expired"
MSG_OTP_INVALID: str = "Invalid OTP"
MSG_SERVER_ERROR: str = "Server error"
MSG_INTERNAL_ERROR: str = "Internal server error"
MSG_INVALID_REQUEST: str = "Invalid request"

# Greeting used in the OTP email when the profile has no name yet
DEFAULT_GREETING_NAME: str = "there"
