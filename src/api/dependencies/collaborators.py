from typing import Optional

from fastapi import Request

from src.services.collaborators import ActivityCatalog, MemberDirectory


def get_activity_catalog(request: Request) -> Optional[ActivityCatalog]:
    """Activity catalog registered on app.state, None disables existence checks"""
    return getattr(request.app.state, "activity_catalog", None)


def get_member_directory(request: Request) -> Optional[MemberDirectory]:
    """Member directory registered on app.state, None disables member checks"""
    return getattr(request.app.state, "member_directory", None)
