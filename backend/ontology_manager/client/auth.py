"""
Client-side session handling.

A session hands out a freshly minted bearer token on every call to
``get_token``; tokens are short-lived and callers must not cache them.
"""
from typing import Callable, Dict, List, Optional
import logging

from pydantic import BaseModel

from ontology_manager.core.security import create_access_token
from ontology_manager.errors import AuthenticationError

logger = logging.getLogger(__name__)


class DemoUser(BaseModel):
    id: str
    name: str
    email: str
    role: str = "researcher"
    department: Optional[str] = None


DEMO_USERS: List[DemoUser] = [
    DemoUser(id="demo-admin-1", name="Dr. Sarah Chen", email="sarah.chen@university.edu",
             role="admin", department="Computer Science"),
    DemoUser(id="demo-researcher-1", name="Prof. Michael Rodriguez", email="michael.rodriguez@research.org",
             role="researcher", department="Biomedical Engineering"),
    DemoUser(id="demo-researcher-2", name="Dr. Emily Watson", email="emily.watson@medcenter.edu",
             role="researcher", department="Medical Informatics"),
    DemoUser(id="demo-student-1", name="Alex Thompson", email="alex.thompson@student.edu",
             role="student", department="Data Science"),
    DemoUser(id="demo-student-2", name="Jordan Kim", email="jordan.kim@student.edu",
             role="student", department="Information Systems"),
]


class AuthSession:
    """Tracks the signed-in user and mints tokens for them."""

    def __init__(self, users: Optional[List[DemoUser]] = None):
        self._users: Dict[str, DemoUser] = {u.id: u for u in (users or DEMO_USERS)}
        self.current_user: Optional[DemoUser] = None
        self._listeners: List[Callable[[Optional[DemoUser]], None]] = []

    @property
    def available_users(self) -> List[DemoUser]:
        return list(self._users.values())

    def is_authenticated(self) -> bool:
        return self.current_user is not None

    def sign_in(self, user_id: str) -> DemoUser:
        """
        Sign in as a known user.

        Raises:
            AuthenticationError: If the user is unknown
        """
        user = self._users.get(user_id)
        if not user:
            raise AuthenticationError(f"Unknown user: {user_id}")
        self.current_user = user
        logger.info(f"Signed in as {user.id}")
        self._notify()
        return user

    def sign_out(self) -> None:
        if self.current_user:
            logger.info(f"Signed out {self.current_user.id}")
        self.current_user = None
        self._notify()

    def on_auth_state_changed(self, callback: Callable[[Optional[DemoUser]], None]) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(callback)
        callback(self.current_user)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def get_token(self) -> str:
        """
        Mint a fresh bearer token for the current user.

        Raises:
            AuthenticationError: If nobody is signed in
        """
        if not self.current_user:
            raise AuthenticationError("User not authenticated. Please log in to access the API.")
        return create_access_token(
            user_id=self.current_user.id,
            email=self.current_user.email,
            full_name=self.current_user.name
        )

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.current_user)
