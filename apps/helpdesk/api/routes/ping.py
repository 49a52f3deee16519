from fastapi import APIRouter

from apps.helpdesk.dependencies.auth import CurrentUser
from apps.helpdesk.response import Envelope, ok

router = APIRouter(prefix="/ping", tags=["health"])


@router.get("", response_model=Envelope[dict[str, str]], summary="Public health check")
async def ping() -> Envelope[dict[str, str]]:
    return ok({"status": "ok"})


@router.get("/whoami", response_model=Envelope[dict[str, str]], summary="Echo the authenticated actor")
async def whoami(user: CurrentUser) -> Envelope[dict[str, str]]:
    return ok({"id": user.id, "username": user.username, "role": user.role.value})
