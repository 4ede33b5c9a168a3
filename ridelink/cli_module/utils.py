"""Utility functions for the CLI interface."""

from functools import wraps
import os
import json
from typing import Optional, List

import click

from ridelink.models.user import User, UserRole
from ridelink.services.matcher_service import MatcherService
from ridelink.services.storage_service import load_registry, save_registry, StorageServiceError

# Default directory for data and session files
CONFIG_DIR = os.path.expanduser("~/.ridelink")
DATA_DIR_ENV = "RIDELINK_DATA_DIR"
SESSION_FILE = "session.json"
DATETIME_FORMAT = "%Y-%m-%d %H:%M"


class SessionError(Exception):
    """Raised when the session file cannot be read or written."""
    pass


def save_session(data_dir: str, user_id: str) -> None:
    """Remember which user is selected."""
    if not os.path.exists(data_dir):
        os.makedirs(data_dir)

    try:
        with open(os.path.join(data_dir, SESSION_FILE), 'w') as f:
            json.dump({"user_id": user_id}, f)
    except OSError as e:
        raise SessionError(f"Could not save session: {str(e)}")


def get_session_user_id(data_dir: str) -> Optional[str]:
    """Get the selected user ID, if any."""
    session_file = os.path.join(data_dir, SESSION_FILE)
    if not os.path.exists(session_file):
        return None

    try:
        with open(session_file, 'r') as f:
            return json.load(f).get("user_id")
    except json.JSONDecodeError:
        return None


def clear_session(data_dir: str) -> bool:
    """Forget the selected user. Returns False if nobody was selected."""
    session_file = os.path.join(data_dir, SESSION_FILE)
    if not os.path.exists(session_file):
        return False
    os.remove(session_file)
    return True


class RideLinkContext:
    """State shared by every command of one CLI invocation."""

    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        self._matcher = None

    @property
    def matcher(self) -> MatcherService:
        """Load the registry on first use."""
        if self._matcher is None:
            self._matcher = load_registry(self.data_dir)
        return self._matcher

    def save(self) -> None:
        """Write the registry back to disk."""
        if self._matcher is not None:
            save_registry(self._matcher, self.data_dir)

    def current_user(self) -> Optional[User]:
        user_id = get_session_user_id(self.data_dir)
        if not user_id:
            return None
        return self.matcher.get_user_by_id(user_id)


def require_role(required_roles: List[UserRole]):
    """
    Decorator to require a selected user with one of the given roles.
    """
    def decorator(f):
        @wraps(f)
        def wrapped(*args, **kwargs):
            ctx = click.get_current_context().find_object(RideLinkContext)
            try:
                user = ctx.current_user()
            except StorageServiceError as e:
                click.echo(f"Error: {str(e)}", err=True)
                return

            if user is None:
                click.echo("You are not logged in. Use 'ridelink user login <ID>' first.", err=True)
                return

            if user.role not in required_roles:
                roles = " or ".join(role.value.lower() for role in required_roles)
                click.echo(f"Only a {roles} can do that.", err=True)
                return

            return f(*args, **kwargs)
        return wrapped
    return decorator


def format_time(value) -> str:
    """Format a departure time for display."""
    return value.strftime(DATETIME_FORMAT)
