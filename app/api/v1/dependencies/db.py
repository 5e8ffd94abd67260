"""DB session and propagation engine dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services.propagation_engine import PropagationEngine
from app.core.config import get_settings
from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.services import build_propagation_engine

ReadSession = Annotated[AsyncSession, Depends(get_db)]
WriteSession = Annotated[AsyncSession, Depends(get_db_transactional)]


async def get_propagation_engine(db: WriteSession) -> PropagationEngine:
    """Engine bound to the request's transaction; all status writes commit or roll back together."""
    return build_propagation_engine(db, get_settings())


async def get_read_engine(db: ReadSession) -> PropagationEngine:
    """Engine for read-only routes (status, history, ledger lookups)."""
    return build_propagation_engine(db, get_settings())
