"""Relógio do domínio: datas sempre com timezone (UTC)."""

from datetime import date, datetime, timezone


def agora() -> datetime:
    return datetime.now(timezone.utc)


def hoje() -> date:
    return agora().date()
