from __future__ import annotations

import sqlite3
from typing import Any

from ..database import store
from ..domain import User
from ..errors import NotFoundError, ValidationError
from ..utils import row_to_dict, utc_now_iso

PROFILE_FIELDS = ("first_name", "last_name", "state", "avatar_url")


def get_profile(user: User) -> dict[str, Any]:
    row = store.fetchone("SELECT * FROM profiles WHERE id = ?", (user.id,))
    if row is None:
        raise NotFoundError("Perfil não encontrado")
    return {**row_to_dict(row), "email": user.email}


def update_profile(user: User, changes: dict[str, Any]) -> dict[str, Any]:
    """Apply only the keys present in ``changes``; the row is created when missing."""
    email = changes.get("email")
    if email and email.strip().lower() != user.email:
        email = email.strip().lower()
        if "@" not in email:
            raise ValidationError("E-mail inválido")
        try:
            store.execute("UPDATE users SET email = ? WHERE id = ?", (email, user.id))
        except sqlite3.IntegrityError as exc:
            raise ValidationError("E-mail já está em uso") from exc
        user = User(id=user.id, email=email)

    now = utc_now_iso()
    store.execute(
        "INSERT INTO profiles (id, created_at, updated_at) VALUES (?, ?, ?) ON CONFLICT(id) DO NOTHING",
        (user.id, now, now),
    )

    fields = [name for name in PROFILE_FIELDS if name in changes]
    if fields:
        assignments = ", ".join(f"{name} = ?" for name in fields)
        store.execute(
            f"UPDATE profiles SET {assignments}, updated_at = ? WHERE id = ?",
            (*[changes[name] for name in fields], now, user.id),
        )

    return get_profile(user)
