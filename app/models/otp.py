"""In-memory OTP challenge record.

Entries live only in the process-local registry; they are never persisted.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class OtpEntry(BaseModel):
    """Live OTP challenge for one email."""
    model_config = ConfigDict(frozen=True)

    email: str
    secret: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """True once ``now`` is strictly past ``expires_at``."""
        return now > self.expires_at
