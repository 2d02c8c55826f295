"""Scheme repository."""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select

from schemedesk.infra.database.models.scheme import Scheme
from schemedesk.infra.database.repositories.base import BaseRepository


class SchemeRepository(BaseRepository[Scheme]):
    model = Scheme

    async def get_by_slug(self, slug: str) -> Optional[Scheme]:
        result = await self.session.execute(select(Scheme).where(Scheme.slug == slug))
        return result.scalar_one_or_none()

    async def list_active(self) -> List[Scheme]:
        return await self.list_where(Scheme.status == "ACTIVE", order_by=Scheme.name)
