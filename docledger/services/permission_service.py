"""Permission checking: single pure function.

This is the one place where the document access rule lives:

    - private documents: only the owner
    - public / organization / team documents: any authenticated caller
      (organization and team membership is enforced outside this core)

Read and write operations share the rule.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..models.enums import Visibility

if TYPE_CHECKING:
    from ..core.auth import Principal
    from ..models import Document


def can_access(document: Document, principal: Principal) -> bool:
    """Whether *principal* may read or write *document* and its history."""
    if document.visibility == Visibility.PRIVATE:
        return document.owner_id == principal.user_id
    return True
