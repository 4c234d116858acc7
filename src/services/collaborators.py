from typing import Optional, Protocol, runtime_checkable

from pydantic import BaseModel


class MemberInfo(BaseModel):
    """Display information for a card assignee"""
    id: str
    display_name: str
    email: Optional[str] = None


@runtime_checkable
class MemberDirectory(Protocol):
    """Resolves member identifiers (external user directory)"""

    async def get_member(self, member_id: str) -> Optional[MemberInfo]:
        ...


@runtime_checkable
class ActivityCatalog(Protocol):
    """Scheduled-activity catalog, used only for existence checks"""

    async def activity_exists(self, activity_id: int) -> bool:
        ...
