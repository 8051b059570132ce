"""候补名单路由：提交公开，查看与删除需要管理员会话。"""

from fastapi import APIRouter, Depends

from app.packages.portal.api.v1.schemas.common import ErrorResponse, SuccessResponse
from app.packages.portal.api.v1.schemas.waitlist import WaitlistCreate, WaitlistEntryOut
from app.packages.portal.core.dependencies import EntityStore, get_store, require_authenticated
from app.packages.portal.core.responses import success_response
from app.packages.portal.services.waitlist_service import waitlist_service

router = APIRouter(prefix="/waitlist", tags=["waitlist"])


@router.get("", response_model=list[WaitlistEntryOut], dependencies=[Depends(require_authenticated)])
def list_entries(store: EntityStore = Depends(get_store)):
    """按提交时间倒序返回全部候补记录。"""
    return waitlist_service.list_entries(store)


@router.post("", response_model=WaitlistEntryOut, responses={400: {"model": ErrorResponse}})
def join_waitlist(payload: WaitlistCreate, store: EntityStore = Depends(get_store)):
    return waitlist_service.join(store, email=str(payload.email), name=payload.name, company=payload.company)


@router.delete("/{entry_id}", response_model=SuccessResponse, dependencies=[Depends(require_authenticated)])
def delete_entry(entry_id: int, store: EntityStore = Depends(get_store)) -> SuccessResponse:
    waitlist_service.remove(store, entry_id)
    return success_response()
