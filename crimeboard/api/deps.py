# =============================================================================
# API Dependencies: FastAPI Dependency Injection
# =============================================================================
#
#   get_board_store()   BoardStore bound to the request's session
#   get_agent_client()  the process-wide agent client (services/llm.py)
#
# Route handlers only ever receive these through Depends(), so tests swap
# both for fakes via `app.dependency_overrides` without a database or
# network.
# =============================================================================

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from crimeboard.db.engine import get_async_session
from crimeboard.services.board_store import BoardStore


async def get_board_store(
    session: AsyncSession = Depends(get_async_session),
) -> BoardStore:
    return BoardStore(session)