"""Closed value sets for every status and kind column.

Stored as non-native SQLAlchemy enums (VARCHAR holding ``.value``) so the
schema stays portable between SQLite and PostgreSQL while Python code can
only ever see one of the listed members.
"""

from enum import Enum

from sqlalchemy import Enum as SAEnum


class ActorType(str, Enum):
    """Who performed an action: a human user or an AI assistant."""
    USER = "user"
    AI = "ai"


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    ORGANIZATION = "organization"
    TEAM = "team"


class MergeStrategy(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


class BranchRequestStatus(str, Enum):
    """pending -> approved | rejected, exactly once."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PendingChangeStatus(str, Enum):
    """pending -> accepted | rejected, exactly once."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ChangeType(str, Enum):
    AI_SUGGESTION = "ai_suggestion"
    USER_EDIT = "user_edit"


def enum_column_type(enum_cls: type[Enum]) -> SAEnum:
    """Column type storing the enum's values (not member names) as VARCHAR."""
    return SAEnum(
        enum_cls,
        native_enum=False,
        validate_strings=True,
        length=20,
        values_callable=lambda members: [m.value for m in members],
    )
