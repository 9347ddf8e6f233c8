from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from ...dependencies import get_exam_service
from ..schemas import ExamQuestionsResponse, SubmitExamRequest, SubmitExamResponse
from ....config import get_settings
from ....exceptions import ExamNotFoundError, ValidationError
from ....models.enums import QuestionMode
from ....services.exam_service import ExamService

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/{exam_id}/questions", response_model=ExamQuestionsResponse, response_model_exclude_unset=True)
async def get_exam_questions(
    exam_id: int,
    mode: QuestionMode = Query(QuestionMode.TEST, description="study includes answers and explanations"),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=get_settings().max_page_limit),
    exam_service: ExamService = Depends(get_exam_service)
) -> ExamQuestionsResponse:
    try:
        return exam_service.find_questions(exam_id, mode=mode, page=page, limit=limit)
    except ExamNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Failed to get exam questions", exam_id=exam_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to retrieve exam questions")


@router.post("/{exam_id}/submit", response_model=SubmitExamResponse)
async def submit_exam(
    exam_id: int,
    submission: SubmitExamRequest,
    exam_service: ExamService = Depends(get_exam_service)
) -> SubmitExamResponse:
    if not submission.answers:
        raise HTTPException(status_code=400, detail="At least one answer is required")

    try:
        answers = [answer.model_dump() for answer in submission.answers]
        return exam_service.submit_exam(exam_id, answers)
    except ExamNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Failed to submit exam", exam_id=exam_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to score submission")
