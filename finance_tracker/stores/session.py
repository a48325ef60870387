"""
Settings and Session Stores

The settings singleton and the signed-in identity. Both are mirrored the
same way as the financial stores: written first, then committed.

Logging out removes only the identity. Expenses, budgets and settings stay
on disk and come back on the next login.
"""

from typing import Optional

from finance_tracker.audit import AuditLogger
from finance_tracker.models.expense import User, UserSettings
from finance_tracker.services.persistence import PersistenceSync
from finance_tracker.validation import (
    InputError,
    parse_currency,
    parse_language,
    parse_login,
)


class NotAuthenticatedError(Exception):
    """A financial operation was attempted without a signed-in user."""
    pass


class SettingsStore:
    """Display currency and interface language."""

    def __init__(
        self,
        settings: Optional[UserSettings] = None,
        persistence: Optional[PersistenceSync] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or UserSettings()
        self._persistence = persistence
        self._audit_logger = audit_logger

    @property
    def current(self) -> UserSettings:
        return self._settings

    def update(self, currency_code=None, language=None) -> UserSettings:
        """
        Change currency, language, or both. None leaves a field as is.

        Raises:
            InvalidSetting: Unsupported currency code or language
            PersistenceWriteFailure: Storage write failed, settings unchanged
        """
        try:
            currency = parse_currency(currency_code) if currency_code is not None else self._settings.currency
            lang = parse_language(language) if language is not None else self._settings.language
        except InputError as e:
            if self._audit_logger:
                self._audit_logger.log_input_rejected("settings", e.field, str(e))
            raise

        updated = UserSettings(currency=currency, language=lang)
        if self._persistence:
            self._persistence.save_settings(updated)
        self._settings = updated

        if self._audit_logger:
            self._audit_logger.log_settings_updated(currency.code, lang.value)
        return updated


class SessionStore:
    """
    Tracks who is signed in.

    States: unauthenticated (no user) and authenticated. Logging in while
    authenticated switches to the new identity.
    """

    def __init__(
        self,
        user: Optional[User] = None,
        persistence: Optional[PersistenceSync] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._user = user
        self._persistence = persistence
        self._audit_logger = audit_logger

    @property
    def current_user(self) -> Optional[User]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def require_user(self) -> User:
        """
        The signed-in user.

        Raises:
            NotAuthenticatedError: Nobody is signed in
        """
        if self._user is None:
            raise NotAuthenticatedError("Sign in to manage expenses and budgets")
        return self._user

    def login(self, email, name) -> User:
        """
        Create and persist a session for this identity.

        Raises:
            InvalidUser: Blank name or malformed email
            PersistenceWriteFailure: Storage write failed, still signed out
        """
        try:
            clean_email, clean_name = parse_login(email, name)
        except InputError as e:
            if self._audit_logger:
                self._audit_logger.log_input_rejected("user", e.field, str(e))
            raise

        user = User(email=clean_email, name=clean_name)
        if self._persistence:
            self._persistence.save_user(user)
        self._user = user

        if self._audit_logger:
            self._audit_logger.log_user_logged_in(user.id)
        return user

    def logout(self) -> None:
        """
        End the session. Only the identity document is removed.

        Raises:
            PersistenceWriteFailure: The identity could not be removed
        """
        user_id = self._user.id if self._user else None
        if self._persistence:
            self._persistence.clear_user()
        self._user = None

        if self._audit_logger:
            self._audit_logger.log_user_logged_out(user_id)
