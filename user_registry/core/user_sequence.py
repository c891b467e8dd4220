"""User Id Assignment — pure rule for the id of the next appended user.

Invariants:
    - Result is always > every existing id (uniqueness)
    - On a gapless store (ids 1..n) the result is n + 1, i.e. count + 1
"""

from user_registry.core.domain_types import UserId
from user_registry.schemas.user import UserRecord


def next_user_id(records: list[UserRecord]) -> UserId:
    """Return count + 1, bumped past the highest id if the file has gaps."""
    highest = max((r.id for r in records), default=0)
    return UserId(max(len(records), highest) + 1)
