from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from core.config import logger, SUBMIT_EMAIL_PATH
from core.database import get_db
from core.errors import (
    SignupError,
    InputValidationError,
    DuplicateEmailError,
    UnclassifiedPersistenceError,
)
from utils.validation import parse_submission
from utils.signup_store import insert_signup, Inserted, Conflict, Failed

USER_AGENT_MAX_LENGTH = 512


router = APIRouter(tags=["signups"])  # POST /api/submit-email


def _error_response(err: SignupError) -> JSONResponse:
    return JSONResponse(err.to_response(), status_code=err.status_code)


@router.post(SUBMIT_EMAIL_PATH)
async def submit_email(request: Request, db: Session = Depends(get_db)):
    try:
        body = await request.json()
        submission = parse_submission(body)

        # Transport header only; the body cannot set this
        ua = (request.headers.get("user-agent") or "").strip()
        user_agent = ua[:USER_AGENT_MAX_LENGTH] or None

        outcome = insert_signup(
            db,
            email=submission.email,
            source=submission.source,
            user_agent=user_agent,
            metadata=submission.metadata_dict(),
        )

        if isinstance(outcome, Conflict):
            logger.info(f"[submit-email] duplicate signup rejected (source={submission.source})")
            return _error_response(DuplicateEmailError(outcome.email))
        if isinstance(outcome, Failed):
            raise UnclassifiedPersistenceError(outcome.cause) from outcome.cause
        if not isinstance(outcome, Inserted):
            raise UnclassifiedPersistenceError()

        rec = outcome.record
        logger.info(f"[submit-email] signup stored id={rec.id} source={rec.source}")
        return {
            "success": True,
            "message": "Email submitted successfully",
            "data": rec.to_dict(),
        }
    except InputValidationError as ex:
        logger.info(f"[submit-email] invalid submission: {len(ex.details)} issue(s)")
        return _error_response(ex)
    except UnclassifiedPersistenceError as ex:
        logger.exception(f"[submit-email] insert failed: {ex.cause!r}")
        return _error_response(ex)
    except Exception as ex:
        logger.exception(f"[submit-email] submission failed: {ex!r}")
        return _error_response(UnclassifiedPersistenceError(ex))
