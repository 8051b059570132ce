"""文件夹路由。"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.packages.portal.api.v1.schemas.common import ErrorResponse, SuccessResponse
from app.packages.portal.api.v1.schemas.folders import FolderCreate, FolderOut, FolderUpdate
from app.packages.portal.core.dependencies import (
    EntityStore,
    LocalFileStorage,
    get_file_storage,
    get_store,
    require_authenticated,
)
from app.packages.portal.core.responses import success_response
from app.packages.portal.services.file_service import file_service

router = APIRouter(
    prefix="/folders",
    tags=["folders"],
    dependencies=[Depends(require_authenticated)],
    responses={401: {"model": ErrorResponse}},
)


@router.get("", response_model=list[FolderOut])
def list_folders(
    parent_id: Optional[int] = Query(None, alias="parentId"),
    store: EntityStore = Depends(get_store),
):
    """列出指定父文件夹下的子文件夹；不传 ``parentId`` 时返回根目录。"""
    return file_service.list_folders(store, parent_id)


@router.get("/{folder_id}", response_model=FolderOut, responses={404: {"model": ErrorResponse}})
def get_folder(folder_id: int, store: EntityStore = Depends(get_store)):
    return file_service.get_folder(store, folder_id)


@router.post("", response_model=FolderOut, responses={400: {"model": ErrorResponse}})
def create_folder(payload: FolderCreate, store: EntityStore = Depends(get_store)):
    return file_service.create_folder(
        store,
        name=payload.name,
        description=payload.description,
        parent_id=payload.parent_id,
    )


@router.patch(
    "/{folder_id}",
    response_model=FolderOut,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_folder(folder_id: int, payload: FolderUpdate, store: EntityStore = Depends(get_store)):
    return file_service.update_folder(store, folder_id, payload.model_dump(exclude_unset=True))


@router.delete("/{folder_id}", response_model=SuccessResponse)
def delete_folder(
    folder_id: int,
    store: EntityStore = Depends(get_store),
    storage: LocalFileStorage = Depends(get_file_storage),
) -> SuccessResponse:
    """删除文件夹及其直接包含的文件；子文件夹保留。"""
    file_service.delete_folder(store, storage, folder_id)
    return success_response()
