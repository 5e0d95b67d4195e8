"""
REST API implementation for the academic registry using FastAPI.

The caller identity travels in the ``X-Caller-Identity`` header. Registry
errors are turned into a JSON envelope by a single exception handler.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Header, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..core.entities import GradeInput
from ..core.enums import EventType
from ..core.exceptions import RegistryError
from ..services.registry import AcademicRegistry

logger = logging.getLogger(__name__)

CALLER_HEADER = "X-Caller-Identity"


# Pydantic models for API
class InstitutionCreate(BaseModel):
    identity: str = Field(..., min_length=1, max_length=200)
    name: str = Field(..., min_length=1, max_length=200)
    document: str = Field(..., min_length=1, max_length=100)


class InstitutionResponse(BaseModel):
    identity: str
    name: str
    document: str
    created_at: datetime


class CourseCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    course_type: str = Field(..., min_length=1, max_length=100)
    semesters: int = Field(..., ge=1, le=40)


class CourseResponse(BaseModel):
    institution: str
    code: str
    name: str
    course_type: str
    semesters: int
    created_at: datetime


class DisciplineCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    syllabus: str = Field(default="", max_length=10000)
    workload: int = Field(..., ge=0)
    credits: int = Field(..., ge=0)


class DisciplineResponse(BaseModel):
    institution: str
    course_code: str
    code: str
    name: str
    syllabus: str
    workload: int
    credits: int


class StudentCreate(BaseModel):
    identity: str = Field(..., min_length=1, max_length=200)
    name: Optional[str] = Field(default=None, max_length=200)
    document: Optional[str] = Field(default=None, max_length=100)


class StudentResponse(BaseModel):
    identity: str
    institution: str
    course_code: Optional[str] = None
    public_key: str = ""


class EnrollmentCreate(BaseModel):
    course_code: str = Field(..., min_length=1)
    discipline_code: str = Field(..., min_length=1)


class GradeCreate(BaseModel):
    discipline_code: str = Field(..., min_length=1)
    period: int = Field(..., ge=0)
    score: int = Field(..., ge=0)
    attendance: int = Field(..., ge=0, le=100)
    passed: bool

    def to_input(self) -> GradeInput:
        return GradeInput(discipline_code=self.discipline_code, period=self.period,
                          score=self.score, attendance=self.attendance, passed=self.passed)


class GradeBatchCreate(BaseModel):
    grades: List[GradeCreate] = Field(..., min_length=1)


class GradeResponse(BaseModel):
    student: str
    discipline_code: str
    period: int
    score: int
    attendance: int
    passed: bool
    created_at: datetime


class TranscriptResponse(BaseModel):
    student: str
    grades: List[GradeResponse]
    disciplines: List[DisciplineResponse]


class StudentInstitutionResponse(BaseModel):
    institution: InstitutionResponse
    course: CourseResponse


class AllowedAddressCreate(BaseModel):
    reader: str = Field(..., min_length=1, max_length=200)


class AllowedAddressResponse(BaseModel):
    student: str
    reader: str


class StudentInformationUpdate(BaseModel):
    encrypted_information: str = Field(..., min_length=1)
    public_key: Optional[str] = None


class StudentInformationResponse(BaseModel):
    encrypted_information: str
    public_key: str


class PermissionResponse(BaseModel):
    caller: str
    role: str


class EventResponse(BaseModel):
    id: str
    sequence: int
    event_type: str
    stream_id: str
    event_data: Dict[str, Any]
    created_at: datetime


class RegistryRestAPI:
    """REST API implementation for the academic registry."""

    def __init__(self, registry: AcademicRegistry, cors_origins: Optional[List[str]] = None):
        self._registry = registry

        self.app = FastAPI(
            title="Academic Registry API",
            description="Permissioned registry of institutions, courses, students and grades",
            version="1.0.0",
            docs_url="/docs",
            redoc_url="/redoc"
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins or ["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._register_error_handlers()
        self._setup_routes()

    def _register_error_handlers(self):
        @self.app.exception_handler(RegistryError)
        async def registry_error_handler(request: Request, exc: RegistryError):
            logger.info(
                "Rejected %s %s: %s", request.method, request.url.path, exc.message,
                extra={"error_code": exc.error_code, "path": request.url.path},
            )
            return JSONResponse(status_code=exc.http_status, content=exc.to_response())

        @self.app.exception_handler(RequestValidationError)
        async def validation_error_handler(request: Request, exc: RequestValidationError):
            logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={
                    "error": {
                        "code": "VALIDATION_ERROR",
                        "message": "Request validation failed",
                        "details": {"errors": [
                            {"field": ".".join(str(p) for p in err.get("loc", ())),
                             "message": err.get("msg", "")}
                            for err in exc.errors()
                        ]},
                    }
                },
            )

    def _setup_routes(self):
        """Setup API routes."""
        registry = self._registry

        @self.app.get("/health", response_model=Dict[str, str])
        def health_check():
            return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

        @self.app.get("/permission", response_model=PermissionResponse)
        def get_permission(caller: str = Header(..., alias=CALLER_HEADER)):
            """Resolve the caller's role."""
            return PermissionResponse(caller=caller, role=registry.get_permission(caller).value)

        # Institution endpoints
        @self.app.post("/institutions", response_model=InstitutionResponse,
                       status_code=status.HTTP_201_CREATED)
        def add_institution(data: InstitutionCreate,
                            caller: str = Header(..., alias=CALLER_HEADER)):
            institution = registry.add_institution(caller, data.identity, data.name, data.document)
            return InstitutionResponse(**institution.to_dict())

        @self.app.get("/institutions", response_model=List[InstitutionResponse])
        def get_institution_list():
            return [InstitutionResponse(**i.to_dict()) for i in registry.get_institution_list()]

        @self.app.get("/institutions/{institution}", response_model=InstitutionResponse)
        def get_institution(institution: str):
            return InstitutionResponse(**registry.get_institution(institution).to_dict())

        # Course endpoints
        @self.app.post("/institutions/{institution}/courses", response_model=CourseResponse,
                       status_code=status.HTTP_201_CREATED)
        def add_course(institution: str, data: CourseCreate,
                       caller: str = Header(..., alias=CALLER_HEADER)):
            course = registry.add_course(caller, institution, data.code, data.name,
                                         data.course_type, data.semesters)
            return CourseResponse(**course.to_dict())

        @self.app.get("/institutions/{institution}/courses", response_model=List[CourseResponse])
        def get_courses_from_institution(institution: str):
            return [CourseResponse(**c.to_dict())
                    for c in registry.get_courses_from_institution(institution)]

        # Discipline endpoints
        @self.app.post("/institutions/{institution}/courses/{course_code}/disciplines",
                       response_model=DisciplineResponse, status_code=status.HTTP_201_CREATED)
        def add_discipline_to_course(institution: str, course_code: str, data: DisciplineCreate,
                                     caller: str = Header(..., alias=CALLER_HEADER)):
            discipline = registry.add_discipline_to_course(
                caller, institution, course_code, data.code, data.name, data.syllabus,
                data.workload, data.credits)
            return DisciplineResponse(**discipline.to_dict())

        @self.app.get("/institutions/{institution}/courses/{course_code}/disciplines",
                      response_model=List[DisciplineResponse])
        def get_disciplines_from_course(institution: str, course_code: str):
            return [DisciplineResponse(**d.to_dict())
                    for d in registry.get_disciplines_from_course(institution, course_code)]

        # Student endpoints issued by institutions
        @self.app.post("/institutions/{institution}/students", response_model=StudentResponse,
                       status_code=status.HTTP_201_CREATED)
        def add_student(institution: str, data: StudentCreate,
                        caller: str = Header(..., alias=CALLER_HEADER)):
            student = registry.add_student(caller, institution, data.identity, data.name, data.document)
            return StudentResponse(**student.to_view().to_dict())

        @self.app.post("/institutions/{institution}/students/{student}/enrollments",
                       response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
        def enroll_student_in_discipline(institution: str, student: str, data: EnrollmentCreate,
                                         caller: str = Header(..., alias=CALLER_HEADER)):
            record = registry.enroll_student_in_discipline(
                caller, institution, student, data.discipline_code, data.course_code)
            return StudentResponse(**record.to_view().to_dict())

        @self.app.post("/institutions/{institution}/students/{student}/grades",
                       response_model=GradeResponse, status_code=status.HTTP_201_CREATED)
        def add_grade(institution: str, student: str, data: GradeCreate,
                      caller: str = Header(..., alias=CALLER_HEADER)):
            grade = registry.add_grade(caller, institution, student, data.discipline_code,
                                       data.period, data.score, data.attendance, data.passed)
            return GradeResponse(**grade.to_dict())

        @self.app.post("/institutions/{institution}/students/{student}/grades/batch",
                       response_model=List[GradeResponse], status_code=status.HTTP_201_CREATED)
        def add_grades(institution: str, student: str, data: GradeBatchCreate,
                       caller: str = Header(..., alias=CALLER_HEADER)):
            grades = registry.add_grades(caller, institution, student,
                                         [g.to_input() for g in data.grades])
            return [GradeResponse(**g.to_dict()) for g in grades]

        # Student-controlled endpoints
        @self.app.put("/students/me/information", status_code=status.HTTP_204_NO_CONTENT)
        def add_student_information(data: StudentInformationUpdate,
                                    caller: str = Header(..., alias=CALLER_HEADER)):
            registry.add_student_information(caller, data.encrypted_information, data.public_key)

        @self.app.post("/students/{student}/allowed", response_model=AllowedAddressResponse,
                       status_code=status.HTTP_201_CREATED)
        def add_allowed_address(student: str, data: AllowedAddressCreate,
                                caller: str = Header(..., alias=CALLER_HEADER)):
            registry.add_allowed_address(caller, data.reader, student)
            return AllowedAddressResponse(student=student, reader=data.reader)

        @self.app.get("/students/{student}/allowed", response_model=List[str])
        def get_allowed_readers(student: str, caller: str = Header(..., alias=CALLER_HEADER)):
            return registry.get_allowed_readers(caller, student)

        # Student reads
        @self.app.get("/students/{student}", response_model=StudentResponse)
        def get_student(student: str):
            return StudentResponse(**registry.get_student(student).to_dict())

        @self.app.get("/students/{student}/information", response_model=StudentInformationResponse)
        def retrieve_student_information(student: str,
                                         caller: str = Header(..., alias=CALLER_HEADER)):
            info = registry.retrieve_student_information(caller, student)
            return StudentInformationResponse(encrypted_information=info.encrypted_information,
                                              public_key=info.public_key)

        @self.app.get("/students/{student}/grades", response_model=List[GradeResponse])
        def get_grades(student: str, caller: str = Header(..., alias=CALLER_HEADER)):
            return [GradeResponse(**g.to_dict()) for g in registry.get_grades(caller, student)]

        @self.app.get("/students/{student}/transcript", response_model=TranscriptResponse)
        def get_student_transcript(student: str, caller: str = Header(..., alias=CALLER_HEADER)):
            transcript = registry.get_student_transcript(caller, student)
            return TranscriptResponse(
                student=student,
                grades=[GradeResponse(**g.to_dict()) for g in transcript.grades],
                disciplines=[DisciplineResponse(**d.to_dict()) for d in transcript.disciplines],
            )

        @self.app.get("/students/{student}/institution", response_model=StudentInstitutionResponse)
        def get_student_institution_data(student: str):
            institution, course = registry.get_student_institution_data(student)
            return StudentInstitutionResponse(
                institution=InstitutionResponse(**institution.to_dict()),
                course=CourseResponse(**course.to_dict()),
            )

        # Notifications
        @self.app.get("/events", response_model=List[EventResponse])
        def get_events(event_type: Optional[EventType] = Query(default=None),
                       stream_id: Optional[str] = Query(default=None)):
            """Notification journal in commit order."""
            if stream_id is not None:
                events = registry.event_service.get_events(stream_id)
                if event_type is not None:
                    events = [e for e in events if e.event_type == event_type]
            else:
                events = registry.event_service.get_all_events(event_type)
            return [EventResponse(**e.to_dict()) for e in events]

        @self.app.get("/statistics", response_model=Dict[str, Any])
        def get_statistics():
            return registry.get_statistics()
