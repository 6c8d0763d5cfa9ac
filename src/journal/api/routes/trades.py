"""Trade CRUD endpoints.

Create and edit accept multipart forms so screenshots can be uploaded with
the trade. A storage failure answers 503 with the submitted text fields
echoed back.

Every route acting on one trade takes the user_id and account_id query
parameters; a trade outside that scope answers 404.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from journal.api.parsing import echo_form, parse_submission
from journal.api.responses import error_response, json_response
from journal.exceptions import JournalError
from journal.service import JournalService, ScreenshotUpload

log = structlog.get_logger(__name__)

router = APIRouter()


async def _upload(form, name: str) -> ScreenshotUpload | None:  # type: ignore[no-untyped-def]
    """Read an uploaded file field; an empty file input counts as no upload."""
    value = form.get(name)
    if not isinstance(value, UploadFile) or not value.filename:
        return None
    content = await value.read()
    if not content:
        return None
    return ScreenshotUpload(
        content=content,
        filename=value.filename,
        content_type=value.content_type,
    )


def _scope(request: Request) -> tuple[str, str] | JSONResponse:
    user_id = request.query_params.get("user_id", "").strip()
    account_id = request.query_params.get("account_id", "").strip()
    missing = {
        name: f"{name} is required"
        for name, value in (("user_id", user_id), ("account_id", account_id))
        if not value
    }
    if missing:
        return json_response({"error": "validation_failed", "fields": missing}, 422)
    return user_id, account_id


@router.get("/trades")
async def list_trades(request: Request) -> JSONResponse:
    """All trades of one user and account, newest first."""
    service: JournalService = request.app.state.service
    scope = _scope(request)
    if isinstance(scope, JSONResponse):
        return scope

    try:
        trades = await service.list_trades(*scope)
    except JournalError as e:
        return error_response(e)
    return json_response([t.to_dict() for t in trades])


@router.post("/trades")
async def create_trade(request: Request) -> JSONResponse:
    """Create a trade from the entry form (multipart, optional screenshots)."""
    service: JournalService = request.app.state.service
    form = await request.form()

    try:
        submission = parse_submission(form)
        record = await service.create_trade(
            submission,
            before=await _upload(form, "before_screenshot"),
            after=await _upload(form, "after_screenshot"),
        )
    except JournalError as e:
        log.info("trade_create_rejected", error=str(e))
        return error_response(e, payload=echo_form(form))

    return json_response(record.to_dict(), 201)


@router.get("/trades/{trade_id}")
async def get_trade(request: Request, trade_id: str) -> JSONResponse:
    service: JournalService = request.app.state.service
    scope = _scope(request)
    if isinstance(scope, JSONResponse):
        return scope

    try:
        record = await service.get_trade(*scope, trade_id)
    except JournalError as e:
        return error_response(e)
    return json_response(record.to_dict())


@router.put("/trades/{trade_id}")
async def edit_trade(request: Request, trade_id: str) -> JSONResponse:
    """Full edit: every derived field is recalculated from the new inputs."""
    service: JournalService = request.app.state.service
    scope = _scope(request)
    if isinstance(scope, JSONResponse):
        return scope
    form = await request.form()

    try:
        submission = parse_submission(form)
        record = await service.edit_trade(
            *scope,
            trade_id,
            submission,
            before=await _upload(form, "before_screenshot"),
            after=await _upload(form, "after_screenshot"),
        )
    except JournalError as e:
        log.info("trade_edit_rejected", trade_id=trade_id, error=str(e))
        return error_response(e, payload=echo_form(form))

    return json_response(record.to_dict())


@router.patch("/trades/{trade_id}/notes")
async def update_notes(request: Request, trade_id: str) -> JSONResponse:
    """Notes-only update from the trade detail view (form or JSON)."""
    service: JournalService = request.app.state.service
    scope = _scope(request)
    if isinstance(scope, JSONResponse):
        return scope
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            return json_response({"error": "Invalid JSON body"}, 400)
        notes = body.get("notes", "") if isinstance(body, dict) else ""
    else:
        form = await request.form()
        notes = form.get("notes", "")
    if not isinstance(notes, str):
        return json_response(
            {"error": "validation_failed", "fields": {"notes": "notes must be text"}}, 422
        )

    try:
        record = await service.update_notes(*scope, trade_id, notes)
    except JournalError as e:
        return error_response(e, payload={"notes": notes})
    return json_response(record.to_dict())


@router.delete("/trades/{trade_id}")
async def delete_trade(request: Request, trade_id: str) -> JSONResponse:
    service: JournalService = request.app.state.service
    scope = _scope(request)
    if isinstance(scope, JSONResponse):
        return scope

    try:
        await service.delete_trade(*scope, trade_id)
    except JournalError as e:
        return error_response(e)
    return json_response({"deleted": trade_id})
