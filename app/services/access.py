"""
Access control - which dashboard pages a signed-in user may open.

The dashboard asks an AccessPolicy for the grant of the current user's
email. StaticAccessPolicy reads the role mapping from settings
(ROLE_ASSIGNMENTS / DEFAULT_ROLE); another backend (e.g. a "members"
sheet) only needs to implement grant_for().
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from app.core.config import settings


logger = logging.getLogger("studio.services.access")


# Pages each role may open
ROLE_PAGES: Dict[str, List[str]] = {
    "admin": ["projects", "schedule", "drive", "settings"],
    "staff": ["projects", "schedule", "drive"],
    "viewer": ["schedule"],
}


@dataclass
class AccessGrant:
    role: str
    pages: List[str] = field(default_factory=list)

    def allows(self, page: str) -> bool:
        return page in self.pages


class AccessPolicy(ABC):
    """Maps a signed-in email to a role and its pages."""

    @abstractmethod
    def grant_for(self, email: Optional[str]) -> AccessGrant:
        pass


class StaticAccessPolicy(AccessPolicy):
    """Role mapping from configuration; unknown emails get the default role."""

    def __init__(
        self,
        assignments: Optional[Dict[str, str]] = None,
        default_role: Optional[str] = None,
    ):
        self.assignments = (
            {k.lower(): v for k, v in assignments.items()}
            if assignments is not None
            else settings.get_role_assignments()
        )
        self.default_role = default_role or settings.DEFAULT_ROLE

    def grant_for(self, email: Optional[str]) -> AccessGrant:
        """
        Grant for a signed-in user's email.

        None means nobody is signed in. An empty email (profile lookup
        failed after sign-in) gets the default role.
        """
        if email is None:
            return AccessGrant(role="anonymous", pages=[])

        if email:
            role = self.assignments.get(email.lower(), self.default_role)
        else:
            logger.warning("Signed in without a profile email, using the default role")
            role = self.default_role
        pages = ROLE_PAGES.get(role)
        if pages is None:
            logger.warning(f"Unknown role '{role}' for {email or '(no email)'}, no pages granted")
            pages = []
        return AccessGrant(role=role, pages=list(pages))
