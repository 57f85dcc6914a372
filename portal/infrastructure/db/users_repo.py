from __future__ import annotations

from datetime import datetime
from typing import Optional

import psycopg
from psycopg import errors as pg_errors

from portal.domain.entities import User
from portal.domain.errors import UserAlreadyExists
from portal.domain.ports.user_repository import UserRepositoryPort

_USER_COLUMNS = "id, email, name, email_verified, is_active"


def _row_to_user(row) -> User:
    id_, email, name, email_verified, is_active = row
    return User(
        id=str(id_),
        email=str(email),
        name=name,
        email_verified=email_verified,
        is_active=bool(is_active),
    )


class PgUserRepository(UserRepositoryPort):
    """
    Postgres implementation of UserRepositoryPort.

    NOTE:
    - This repo is constructed with an *active async connection* supplied by the UoW.
    - It does not commit; the UnitOfWork controls the transaction boundary.
    """

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self._conn = conn

    async def create(self, email: str, password_hash: str, name: str | None = None) -> User:
        sql = f"""
        INSERT INTO users (email, name, password_hash)
        VALUES (LOWER(TRIM(%s)), %s, %s)
        RETURNING {_USER_COLUMNS}
        """
        try:
            async with self._conn.cursor() as cur:
                await cur.execute(sql, (email, name, password_hash))
                row = await cur.fetchone()
        except pg_errors.UniqueViolation as e:
            raise UserAlreadyExists() from e

        if not row:
            raise RuntimeError("create returned no row")
        return _row_to_user(row)

    async def get_by_email(self, email: str) -> Optional[User]:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE email = LOWER(TRIM(%s))"
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (email,))
            row = await cur.fetchone()
        return _row_to_user(row) if row else None

    async def get_by_id(self, user_id: str) -> Optional[User]:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s"
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (user_id,))
            row = await cur.fetchone()
        return _row_to_user(row) if row else None

    async def get_by_email_with_hash(
        self, email: str
    ) -> Optional[tuple[User, str | None]]:
        sql = f"""
        SELECT {_USER_COLUMNS}, password_hash
        FROM users
        WHERE email = LOWER(TRIM(%s))
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (email,))
            row = await cur.fetchone()
        if not row:
            return None
        return _row_to_user(row[:5]), row[5]

    async def set_email_verified(self, user_id: str, when: datetime) -> None:
        sql = """
        UPDATE users
        SET email_verified = %s, updated_at = now()
        WHERE id = %s AND email_verified IS NULL
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (when, user_id))

    async def set_password(self, user_id: str, password_hash: str) -> None:
        sql = """
        UPDATE users
        SET password_hash = %s, updated_at = now()
        WHERE id = %s
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (password_hash, user_id))
