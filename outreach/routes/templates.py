import logging

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from outreach.auth import require_auth
from outreach.errors import StoreError, error_response
from outreach.metrics import record_template_operation
from outreach.storage import create_template, delete_template, get_db, get_templates
from outreach.schemas import (
    ErrorResponse,
    SuccessResponse,
    TemplateCreateRequest,
    TemplateDeleteRequest,
    TemplateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["templates"])

MISSING_MESSAGE_TEXT = "Please Enter Message Text!"


@router.post(
    "/newTemplate",
    response_model=SuccessResponse,
    dependencies=[Depends(require_auth)],
    responses={
        400: {"content": {"text/plain": {}}, "description": "Missing message text"},
        500: {"model": ErrorResponse},
    }
)
def new_template(body: TemplateCreateRequest, db: Session = Depends(get_db)):
    """Store a message template. An attached `image` is ignored."""
    if not body.message_txt:
        record_template_operation("rejected")
        return PlainTextResponse(MISSING_MESSAGE_TEXT, status_code=status.HTTP_400_BAD_REQUEST)

    template = create_template(db, language=body.language, text=body.message_txt, type=body.type)
    if template is None:
        return error_response("Unable to save template")

    record_template_operation("created")
    return SuccessResponse(success=True)


@router.post(
    "/deleteTemplate",
    responses={
        200: {"description": "Template deleted (empty body)"},
        500: {"model": ErrorResponse},
    }
)
def remove_template(body: TemplateDeleteRequest, db: Session = Depends(get_db)):
    if not delete_template(db, body.id):
        return error_response("Unable to delete template")

    record_template_operation("deleted")
    return Response(status_code=status.HTTP_200_OK)


@router.get(
    "/templates",
    response_model=list[TemplateResponse],
    dependencies=[Depends(require_auth)],
    responses={500: {"model": ErrorResponse}}
)
def list_templates(db: Session = Depends(get_db)):
    try:
        templates = get_templates(db)
    except StoreError as e:
        return error_response(str(e))

    logger.info(f"Listing {len(templates)} templates")
    return [TemplateResponse.from_record(template) for template in templates]
