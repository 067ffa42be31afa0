"""
Venue_POS.services.admin_password_service

Admin screen lock and venue rules, both kept as plain store settings:
- admin_password_hash : SHA-256 hex digest of the admin password
- global_rules        : free text printed at the bottom of every receipt
"""

from __future__ import annotations

import hashlib
from typing import Optional

from Venue_POS.services.pos_store import PosStore

PASSWORD_SETTING = "admin_password_hash"
RULES_SETTING = "global_rules"
MIN_PASSWORD_LENGTH = 4


class PasswordError(ValueError):
    """User-facing password validation failure."""


def hash_password(password: str) -> str:
    return hashlib.sha256((password or "").encode("utf-8")).hexdigest()


def has_password(store: PosStore) -> bool:
    return store.get_setting(PASSWORD_SETTING) is not None


def check_password(store: PosStore, password: str) -> bool:
    """No password set means the admin screen is open."""
    saved = store.get_setting(PASSWORD_SETTING)
    if saved is None:
        return True
    return hash_password(password) == saved


def set_password(store: PosStore, current: str, new: str, confirm: str) -> None:
    if not new:
        raise PasswordError("Enter a new password.")
    if len(new) < MIN_PASSWORD_LENGTH:
        raise PasswordError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if new != confirm:
        raise PasswordError("Passwords do not match.")
    if has_password(store) and not check_password(store, current):
        raise PasswordError("Current password is wrong.")
    store.set_setting(PASSWORD_SETTING, hash_password(new))


def remove_password(store: PosStore, current: str) -> None:
    if not has_password(store):
        return
    if not check_password(store, current):
        raise PasswordError("Wrong password.")
    store.set_setting(PASSWORD_SETTING, None)


# --- Venue rules ----------------------------------------------------------


def get_global_rules(store: PosStore) -> str:
    return store.get_setting(RULES_SETTING) or ""


def set_global_rules(store: PosStore, text: Optional[str]) -> None:
    """Blank text clears the rules."""
    cleaned = (text or "").strip()
    store.set_setting(RULES_SETTING, cleaned or None)
