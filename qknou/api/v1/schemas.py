from typing import Optional, List

from pydantic import BaseModel, Field, field_validator

from ...models.enums import CrawlErrorType, CrawlStatus


# Exam Schemas
class ChoiceResponse(BaseModel):
    number: int
    text: str
    image_url: Optional[str] = None


class QuestionResponse(BaseModel):
    id: int
    question_number: int
    question_text: str
    example_text: Optional[str] = None
    question_image_url: Optional[str] = None
    choices: List[ChoiceResponse] = Field(default_factory=list)
    correct_answers: Optional[List[int]] = Field(None, description="Only present in study mode")
    explanation: Optional[str] = Field(None, description="Only present in study mode")


class ExamSummary(BaseModel):
    id: int
    title: str
    year: int
    exam_type: int
    exam_type_label: str
    display_name: str
    total_questions: int
    subject_id: int


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool


class ExamQuestionsResponse(BaseModel):
    exam: ExamSummary
    questions: List[QuestionResponse]
    pagination: Optional[Pagination] = None


class SubmittedAnswer(BaseModel):
    question_id: int
    selected_answer: Optional[int] = Field(None, ge=1, le=4, description="Chosen option, null when left blank")


class SubmitExamRequest(BaseModel):
    answers: List[SubmittedAnswer]


class AnswerResult(BaseModel):
    question_id: int
    question_number: int
    selected_answer: Optional[int] = None
    correct_answers: List[int]
    is_correct: bool


class SubmitExamResponse(BaseModel):
    exam_id: int
    score: int = Field(..., description="Percentage of correct answers, rounded")
    correct_count: int
    total_questions: int
    results: List[AnswerResult]


# Crawler Schemas
class CrawlExamRequest(BaseModel):
    url: str = Field(..., description="Exam page URL")
    force_retry: bool = Field(False, description="Replace the stored exam when it already exists")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return v


class CrawlExamResponse(BaseModel):
    exam_id: int
    title: str
    status: CrawlStatus
    saved_question_count: int
    total_scraped_question_count: int
    skipped_question_numbers: List[int] = Field(default_factory=list)


class CrawlAllRequest(BaseModel):
    main_url: Optional[str] = Field(None, description="Subject index page; defaults to the configured main URL")
    force_retry: bool = False
    subject_filter: Optional[List[str]] = Field(None, description="Exact subject names to crawl")
    delay_ms: Optional[int] = Field(None, ge=0, description="Pause between exam pages")


class CrawlErrorLogResponse(BaseModel):
    timestamp: str
    url: str
    subject_name: Optional[str] = None
    error_type: CrawlErrorType
    error_message: str
    stack_trace: Optional[str] = None
    skipped_questions: Optional[List[int]] = None


class CrawlAllResponse(BaseModel):
    success_count: int
    fail_count: int
    conflict_count: int
    error_logs: List[CrawlErrorLogResponse]
    failed_urls: List[str]
    error_log_file: Optional[str] = None
    failed_url_file: Optional[str] = None


# Auth Schemas
class TokenVerificationResponse(BaseModel):
    valid: bool
    provider_uid: str
    email: Optional[str] = None
    name: Optional[str] = None
    provider: str


class UserResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    provider: str


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    environment: str
    database: str
    timestamp: str
