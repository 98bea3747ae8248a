# wastebin/api/pastes.py

import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response
from pydantic import BaseModel, Field

from wastebin.config import Settings
from wastebin.core.errors import (
    AuthenticationFailure,
    CryptoFailure,
    IdSpaceExhausted,
    NotFound,
    PasteError,
    StorageUnavailable,
)
from wastebin.core.expiry import parse_expires
from wastebin.core.lifecycle import PasteManager

logger = logging.getLogger(__name__)

router = APIRouter()

# printable ASCII without quotes or path separators
_DOWNLOAD_EXT_RE = re.compile(r'^[!#-.0-~]{1,32}$')

# shared by NotFound and AuthenticationFailure
NOT_FOUND_DETAIL = "Paste not found"


class CreatePasteSchema(BaseModel):
    text: str
    extension: Optional[str] = Field(default=None, pattern=r"^[A-Za-z0-9_+-]{1,32}$")
    expires: str = ""
    password: Optional[str] = None


class CreatedPasteSchema(BaseModel):
    id: str
    url: str
    burn_after_reading: bool


class PasteSchema(BaseModel):
    id: str
    extension: Optional[str] = None
    formatted: str
    burn_after_reading: bool


def get_manager(request: Request) -> PasteManager:
    return request.app.state.manager


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _raise_http(exc: PasteError):
    if isinstance(exc, (NotFound, AuthenticationFailure)):
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL) from exc
    if isinstance(exc, (IdSpaceExhausted, StorageUnavailable)):
        logger.error("Transient failure: %s", exc)
        raise HTTPException(status_code=503, detail="Storage temporarily unavailable") from exc
    if isinstance(exc, CryptoFailure):
        logger.error("Integrity failure: %s", exc)
        raise HTTPException(status_code=500, detail="Paste data is corrupt") from exc
    raise HTTPException(status_code=500, detail="Internal error") from exc


def _split_key(key: str):
    """`id` or `id.ext`; the extension overrides the stored one for display."""
    paste_id, _, extension = key.partition(".")
    return paste_id, extension or None


@router.post("/", status_code=201, response_model=CreatedPasteSchema)
def create_paste(
    payload: CreatePasteSchema,
    manager: PasteManager = Depends(get_manager),
    settings: Settings = Depends(get_settings),
):
    if len(payload.text.encode("utf-8")) > settings.max_body_size:
        raise HTTPException(status_code=413, detail="Paste too large")

    policy = parse_expires(payload.expires)
    try:
        paste_id = manager.create(
            payload.text,
            extension=payload.extension,
            password=payload.password,
            policy=policy,
        )
    except PasteError as exc:
        _raise_http(exc)

    url = f"/{paste_id}.{payload.extension}" if payload.extension else f"/{paste_id}"
    return CreatedPasteSchema(id=paste_id, url=url, burn_after_reading=policy.burn_after_read)


@router.get("/download/{paste_id}/{extension}")
def download_paste(
    paste_id: str,
    extension: str,
    x_paste_password: Optional[str] = Header(default=None),
    manager: PasteManager = Depends(get_manager),
):
    if not _DOWNLOAD_EXT_RE.match(extension):
        raise HTTPException(status_code=400, detail="Illegal characters in extension")

    try:
        raw = manager.read_raw(paste_id, password=x_paste_password)
    except PasteError as exc:
        _raise_http(exc)

    return Response(
        content=raw.data,
        media_type="text/plain; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{paste_id}.{extension}"'},
    )


@router.get("/{key}", response_model=PasteSchema)
def show_paste(
    key: str,
    x_paste_password: Optional[str] = Header(default=None),
    manager: PasteManager = Depends(get_manager),
):
    paste_id, extension = _split_key(key)
    try:
        paste = manager.read(paste_id, password=x_paste_password, extension=extension)
    except PasteError as exc:
        _raise_http(exc)

    return PasteSchema(
        id=paste.id,
        extension=paste.extension,
        formatted=paste.formatted,
        burn_after_reading=paste.burn_after_read,
    )


@router.delete("/{paste_id}", status_code=204)
def delete_paste(paste_id: str, manager: PasteManager = Depends(get_manager)):
    try:
        manager.delete(paste_id)
    except PasteError as exc:
        _raise_http(exc)
    return Response(status_code=204)
