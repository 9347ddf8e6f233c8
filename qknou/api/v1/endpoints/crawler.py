import structlog
from fastapi import APIRouter, Depends, HTTPException

from ...dependencies import get_current_user_conditional, get_exam_crawler_service, get_crawl_orchestrator
from ..schemas import CrawlExamRequest, CrawlExamResponse, CrawlAllRequest, CrawlAllResponse
from ....config import get_settings
from ....exceptions import DatabaseError, ExamConflictError, NetworkError, ParsingError, ValidationError
from ....models.user import User
from ....services.crawl_orchestrator import CrawlOrchestrator
from ....services.exam_crawler_service import ExamCrawlerService

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/exam", response_model=CrawlExamResponse)
async def crawl_exam(
    request: CrawlExamRequest,
    current_user: User = Depends(get_current_user_conditional),
    crawler: ExamCrawlerService = Depends(get_exam_crawler_service)
) -> CrawlExamResponse:
    logger.info("Single exam crawl requested", url=request.url, user_id=current_user.user_id)
    try:
        result = await crawler.crawl_exam(request.url, force_retry=request.force_retry)
        return CrawlExamResponse(**result.to_dict())
    except ExamConflictError as e:
        raise HTTPException(status_code=409, detail={"message": str(e), **e.to_dict()})
    except (ParsingError, ValidationError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except NetworkError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except DatabaseError as e:
        logger.error("Crawled exam could not be stored", url=request.url, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to store crawled exam")


@router.post("/all", response_model=CrawlAllResponse)
async def crawl_all(
    request: CrawlAllRequest,
    current_user: User = Depends(get_current_user_conditional),
    orchestrator: CrawlOrchestrator = Depends(get_crawl_orchestrator)
) -> CrawlAllResponse:
    main_url = request.main_url or get_settings().crawl_main_url
    logger.info("Batch crawl requested", main_url=main_url, user_id=current_user.user_id)
    try:
        result = await orchestrator.crawl_all(
            main_url,
            force_retry=request.force_retry,
            subject_filter=request.subject_filter,
            delay_ms=request.delay_ms
        )
        return CrawlAllResponse(**result.to_dict())
    except NetworkError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
