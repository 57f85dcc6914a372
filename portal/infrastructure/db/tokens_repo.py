from __future__ import annotations

from datetime import datetime
from typing import Optional

import psycopg

from portal.domain.entities import TokenType, VerificationToken
from portal.domain.ports.token_repository import TokenRepositoryPort


class PgTokenRepository(TokenRepositoryPort):
    """
    Postgres implementation of TokenRepositoryPort, bound to an *active async connection*.
    This class DOES NOT COMMIT; the caller (UoW) controls transactions.
    """

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self._conn = conn

    async def create(self, token: VerificationToken) -> VerificationToken:
        sql = """
        INSERT INTO verification_tokens (identifier, token, type, expires)
        VALUES (%s, %s, %s, %s)
        RETURNING id
        """
        async with self._conn.cursor() as cur:
            await cur.execute(
                sql, (token.identifier, token.token, token.type.value, token.expires)
            )
            row = await cur.fetchone()
        token.id = str(row[0])
        return token

    async def find_by_token(self, token: str) -> Optional[VerificationToken]:
        sql = """
        SELECT id, identifier, token, type, expires
        FROM verification_tokens
        WHERE token = %s
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (token,))
            row = await cur.fetchone()
        if not row:
            return None
        id_, identifier, value, type_, expires = row
        return VerificationToken(
            id=str(id_),
            identifier=str(identifier),
            token=str(value),
            type=TokenType(type_),
            expires=expires,
        )

    async def delete(self, token_id: str) -> None:
        async with self._conn.cursor() as cur:
            await cur.execute("DELETE FROM verification_tokens WHERE id = %s", (token_id,))

    async def delete_for_identifier(self, identifier: str, token_type: TokenType) -> int:
        sql = """
        DELETE FROM verification_tokens
        WHERE identifier = %s AND type = %s
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (identifier, token_type.value))
            return cur.rowcount

    async def delete_expired(self, now: datetime) -> int:
        async with self._conn.cursor() as cur:
            await cur.execute("DELETE FROM verification_tokens WHERE expires < %s", (now,))
            return cur.rowcount
