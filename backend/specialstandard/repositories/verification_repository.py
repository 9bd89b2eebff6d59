"""
SpecialStandard Backend — Verification Code Repository
=======================================================

Six-digit email verification codes. Issuing a code retires the user's
earlier unused codes in the same statement; verifying consumes a code
only if it is unused and unexpired.
"""

import datetime as dt
import uuid

from specialstandard.database import Database
from specialstandard.query import RowMapper
from specialstandard.repositories.base import Repository
from specialstandard.schemas.auth import VerificationCode

verification_mapper = RowMapper(
    VerificationCode, ["id", "user_id", "code", "expires_at", "used", "created_at"]
)

_ISSUE = """WITH retired AS (
    UPDATE verification_codes
    SET used = true
    WHERE user_id = $1 AND used = false
)
INSERT INTO verification_codes (user_id, code, expires_at)
VALUES ($1, $2, $3)
RETURNING id, user_id, code, expires_at, used, created_at"""

_CONSUME = """UPDATE verification_codes
SET used = true
WHERE user_id = $1
  AND code = $2
  AND used = false
  AND expires_at > NOW()
RETURNING id"""


class VerificationRepository(Repository):
    resource_name = "verification code"

    async def issue(
        self, db: Database, user_id: uuid.UUID, code: str, expires_at: dt.datetime
    ) -> VerificationCode:
        row = await self._fetchrow(db, _ISSUE, [user_id, code, expires_at])
        return verification_mapper.scan(row)

    async def consume(self, db: Database, user_id: uuid.UUID, code: str) -> bool:
        """Mark a matching live code used; False when none matched."""
        return await self._fetchval(db, _CONSUME, [user_id, code]) is not None


verification_repository = VerificationRepository()
