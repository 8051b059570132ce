"""文件路由：元数据查询与修改、上传、单文件下载与整目录打包下载。

涉及磁盘读写的操作通过线程池执行，不阻塞事件循环。
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import FileResponse, Response
from starlette.concurrency import run_in_threadpool

from app.packages.portal.api.v1.schemas.common import ErrorResponse, SuccessResponse
from app.packages.portal.api.v1.schemas.files import FileRecordOut, FileUpdate
from app.packages.portal.core.dependencies import (
    EntityStore,
    LocalFileStorage,
    get_file_storage,
    get_store,
    require_authenticated,
)
from app.packages.portal.core.exceptions import BadRequestError
from app.packages.portal.core.responses import success_response
from app.packages.portal.services.file_service import UploadItem, file_service

router = APIRouter(
    prefix="/files",
    tags=["files"],
    dependencies=[Depends(require_authenticated)],
    responses={401: {"model": ErrorResponse}},
)


@router.get("", response_model=list[FileRecordOut])
def list_files(
    folder_id: Optional[int] = Query(None, alias="folderId"),
    store: EntityStore = Depends(get_store),
):
    """列出指定文件夹下的文件（按更新时间倒序）；不传 ``folderId`` 时返回根目录文件。"""
    return file_service.list_files(store, folder_id)


@router.post("", response_model=list[FileRecordOut], responses={400: {"model": ErrorResponse}})
async def upload_files(
    files: list[UploadFile] = File(...),
    paths: Optional[list[str]] = Form(None),
    folder_id: Optional[int] = Form(None, alias="folderId"),
    store: EntityStore = Depends(get_store),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    """上传一个或多个文件；``paths`` 与 ``files`` 一一对应，保留浏览器目录上传的相对路径。"""
    if paths is not None and len(paths) != len(files):
        raise BadRequestError("The number of paths does not match the number of files")

    items: list[UploadItem] = []
    for index, upload in enumerate(files):
        content = await upload.read()
        items.append(
            UploadItem(
                filename=upload.filename or "",
                content=content,
                content_type=upload.content_type,
                relative_path=paths[index] if paths else None,
            )
        )
    return await run_in_threadpool(
        file_service.upload,
        store,
        storage,
        items=items,
        folder_id=folder_id,
    )


@router.get("/download-all", responses={404: {"model": ErrorResponse}})
async def download_all(
    folder_id: Optional[int] = Query(None, alias="folderId"),
    store: EntityStore = Depends(get_store),
    storage: LocalFileStorage = Depends(get_file_storage),
) -> Response:
    """把文件夹下直接包含的文件打包为 ZIP 下载。"""
    filename, content = await run_in_threadpool(file_service.build_archive, store, storage, folder_id)
    return Response(
        content=content,
        media_type="application/zip",
        headers={"Content-Disposition": f"attachment; filename*=utf-8''{quote(filename)}"},
    )


@router.get("/{file_id}", response_model=FileRecordOut, responses={404: {"model": ErrorResponse}})
def get_file(file_id: int, store: EntityStore = Depends(get_store)):
    return file_service.get_file(store, file_id)


@router.patch(
    "/{file_id}",
    response_model=FileRecordOut,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_file(file_id: int, payload: FileUpdate, store: EntityStore = Depends(get_store)):
    return file_service.update_file(store, file_id, payload.model_dump(exclude_unset=True))


@router.get("/{file_id}/download", responses={404: {"model": ErrorResponse}})
def download_file(
    file_id: int,
    store: EntityStore = Depends(get_store),
    storage: LocalFileStorage = Depends(get_file_storage),
) -> FileResponse:
    record = file_service.get_file(store, file_id)
    return FileResponse(
        str(storage.open_path(record.path)),
        media_type=record.type,
        filename=record.name,
    )


@router.delete("/{file_id}", response_model=SuccessResponse)
def delete_file(
    file_id: int,
    store: EntityStore = Depends(get_store),
    storage: LocalFileStorage = Depends(get_file_storage),
) -> SuccessResponse:
    file_service.delete_file(store, storage, file_id)
    return success_response()
