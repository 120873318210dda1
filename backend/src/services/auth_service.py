from __future__ import annotations

import hashlib
import logging
import secrets
import sqlite3

from ..database import store
from ..domain import User
from ..errors import AuthenticationError, ConflictError, ValidationError
from ..utils import new_id, new_token, utc_now_iso

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 100_000
MIN_PASSWORD_LENGTH = 6

NOT_AUTHENTICATED = "Não autenticado"
INVALID_USER = "Usuário inválido"
INVALID_CREDENTIALS = "E-mail ou senha inválidos"


def hash_password(password: str, salt: str | None = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        _, iterations, salt, expected = encoded.split("$")
    except ValueError:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), int(iterations))
    return secrets.compare_digest(digest.hex(), expected)


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def sign_up(email: str, password: str, first_name: str | None = None, last_name: str | None = None, state: str | None = None) -> User:
    email = _normalize_email(email)
    if "@" not in email:
        raise ValidationError("E-mail inválido")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"A senha deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres")

    user_id = new_id()
    now = utc_now_iso()
    try:
        store.execute(
            "INSERT INTO users (id, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
            (user_id, email, hash_password(password), now),
        )
    except sqlite3.IntegrityError as exc:
        raise ConflictError("E-mail já cadastrado") from exc

    store.execute(
        """
        INSERT INTO profiles (id, first_name, last_name, state, avatar_url, created_at, updated_at)
        VALUES (?, ?, ?, ?, NULL, ?, ?)
        """,
        (user_id, first_name, last_name, state, now, now),
    )
    logger.info("Created user %s", user_id)
    return User(id=user_id, email=email)


def sign_in(email: str, password: str) -> tuple[User, str]:
    row = store.fetchone("SELECT id, email, password_hash FROM users WHERE email = ?", (_normalize_email(email),))
    if row is None or not verify_password(password or "", row["password_hash"]):
        raise AuthenticationError(INVALID_CREDENTIALS)

    token = new_token()
    store.execute(
        "INSERT INTO sessions (token, user_id, created_at) VALUES (?, ?, ?)",
        (token, row["id"], utc_now_iso()),
    )
    return User(id=row["id"], email=row["email"]), token


def sign_out(token: str) -> None:
    store.execute("DELETE FROM sessions WHERE token = ?", (token,))


def resolve_user(token: str | None) -> User:
    if not token:
        raise AuthenticationError(NOT_AUTHENTICATED)

    row = store.fetchone(
        """
        SELECT users.id, users.email
        FROM sessions
        JOIN users ON users.id = sessions.user_id
        WHERE sessions.token = ?
        """,
        (token,),
    )
    if row is None:
        raise AuthenticationError(INVALID_USER)
    return User(id=row["id"], email=row["email"])
