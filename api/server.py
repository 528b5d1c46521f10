from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ndawonga.catalog import ContactStore, DocumentStore, ProjectStore, TeamStore, TenderStore
from ndawonga.chat import ChatLogStore, ChatResponder
from ndawonga.config import Settings
from ndawonga.db import init_db
from ndawonga.errors import NotFound, StorageFailure, ValidationGap
from ndawonga.logging import configure_logging, json_logger_middleware
from ndawonga.pricing import PricingTable, clamp_area, estimate, load_pricing_table
from ndawonga.quotes import QuoteRequestStore

from api.models import (
    ChatPayload,
    ChatReply,
    ContactPayload,
    Created,
    ErrorEnvelope,
    EstimatePayload,
    EstimateResponse,
    PricingInfo,
    ProjectPayload,
    QuotePayload,
    TenderPayload,
)

logger = logging.getLogger(__name__)

DB_READ_ERROR = "Database error"
DB_INSERT_ERROR = "Database insert error"
SERVER_ERROR = "Server error"


def create_app(
    settings: Optional[Settings] = None, pricing: Optional[PricingTable] = None
) -> FastAPI:
    """Build the API from settings. Initialises the schema and pricing table once."""
    settings = settings or Settings()
    configure_logging(settings.LOG_LEVEL)
    init_db(settings.DB_PATH)
    pricing = pricing or load_pricing_table(settings.PRICING_TABLE_PATH)

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if settings.REQUEST_LOGS:
        app.middleware("http")(json_logger_middleware())

    db_path = settings.DB_PATH
    projects = ProjectStore(db_path)
    tenders = TenderStore(db_path)
    team = TeamStore(db_path)
    documents = DocumentStore(db_path)
    contacts = ContactStore(db_path)
    quotes = QuoteRequestStore(db_path)
    responder = ChatResponder(
        tenders,
        ChatLogStore(db_path),
        tender_limit=settings.TENDER_REPLY_LIMIT,
        default_session_id=settings.DEFAULT_SESSION_ID,
    )

    app.state.settings = settings
    app.state.pricing = pricing
    app.state.quotes = quotes
    app.state.responder = responder

    # ------------ Routes ------------

    @app.get("/health")
    def health() -> dict:
        return {"ok": True, "service": settings.APP_NAME, "version": settings.APP_VERSION}

    @app.get("/api/projects")
    def list_projects() -> List[dict]:
        try:
            return projects.active()
        except StorageFailure:
            logger.exception("GET /api/projects")
            raise HTTPException(status_code=500, detail=DB_READ_ERROR)

    @app.get("/api/projects/{project_id}")
    def get_project(project_id: int) -> dict:
        try:
            return projects.get(project_id)
        except NotFound:
            raise HTTPException(status_code=404, detail="Not found")
        except StorageFailure:
            logger.exception("GET /api/projects/%s", project_id)
            raise HTTPException(status_code=500, detail=DB_READ_ERROR)

    @app.post("/api/projects", response_model=Created)
    def create_project(payload: ProjectPayload) -> Created:
        try:
            new_id = projects.create(payload.to_record())
        except StorageFailure:
            logger.exception("POST /api/projects")
            raise HTTPException(status_code=500, detail=DB_INSERT_ERROR)
        return Created(id=new_id, message="Project created")

    @app.get("/api/tenders")
    def list_tenders() -> List[dict]:
        try:
            return tenders.all()
        except StorageFailure:
            logger.exception("GET /api/tenders")
            raise HTTPException(status_code=500, detail=DB_READ_ERROR)

    @app.post("/api/tenders", response_model=Created)
    def create_tender(payload: TenderPayload) -> Created:
        try:
            new_id = tenders.create(payload.to_record())
        except StorageFailure:
            logger.exception("POST /api/tenders")
            raise HTTPException(status_code=500, detail=DB_INSERT_ERROR)
        return Created(id=new_id, message="Tender created")

    @app.get("/api/team")
    def list_team() -> List[dict]:
        try:
            return team.all()
        except StorageFailure:
            logger.exception("GET /api/team")
            raise HTTPException(status_code=500, detail=DB_READ_ERROR)

    @app.get("/api/documents")
    def list_documents() -> List[dict]:
        try:
            return documents.visible()
        except StorageFailure:
            logger.exception("GET /api/documents")
            raise HTTPException(status_code=500, detail=DB_READ_ERROR)

    @app.post("/api/contact", response_model=Created)
    def contact(payload: ContactPayload) -> Created:
        try:
            new_id = contacts.save(payload.to_record())
        except StorageFailure:
            logger.exception("POST /api/contact")
            raise HTTPException(status_code=500, detail=DB_INSERT_ERROR)
        return Created(id=new_id, message="Message saved")

    @app.get("/api/pricing", response_model=PricingInfo)
    def pricing_info() -> dict:
        return app.state.pricing.as_dict()

    @app.post("/api/quotes/estimate", response_model=EstimateResponse)
    def quote_estimate(payload: EstimatePayload) -> EstimateResponse:
        table: PricingTable = app.state.pricing
        area = clamp_area(payload.area_sq_m)
        rule = table.rule_for(payload.project_type)
        factor = table.multiplier_for(payload.complexity)
        return EstimateResponse(
            estimated_cost=estimate(payload.project_type, area, payload.complexity, table),
            category=rule.category,
            complexity=factor.level,
            base_rate=rule.base_rate,
            multiplier=factor.factor,
            contingency_rate=table.contingency_rate,
        )

    @app.post("/api/quotes", response_model=Created)
    def submit_quote(payload: QuotePayload) -> Created:
        try:
            new_id = quotes.submit(payload.to_record())
        except ValidationGap as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except StorageFailure:
            raise HTTPException(status_code=500, detail=DB_INSERT_ERROR)
        return Created(id=new_id, message="Quote request saved")

    @app.post("/api/chat", response_model=ChatReply)
    def chat(request: Request, payload: Optional[ChatPayload] = None) -> ChatReply:
        session_id = request.headers.get(settings.SESSION_HEADER)
        try:
            turn = responder.respond(payload.message if payload else None, session_id)
        except StorageFailure:
            logger.exception("POST /api/chat")
            raise HTTPException(status_code=500, detail=SERVER_ERROR)
        request.state.selected_intent = turn.intent
        return ChatReply(reply=turn.reply)

    # ------------ Exception Handlers ------------

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        env = ErrorEnvelope(
            error=str(exc.detail or "HTTP error"),
            code=str(exc.status_code),
            details={"path": request.url.path},
        )
        return JSONResponse(status_code=exc.status_code, content=env.model_dump())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        env = ErrorEnvelope(
            error="Invalid request",
            code="validation_error",
            details={
                "path": request.url.path,
                "fields": [".".join(str(p) for p in e.get("loc", ())) for e in exc.errors()],
            },
        )
        return JSONResponse(status_code=400, content=env.model_dump())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        env = ErrorEnvelope(
            error=SERVER_ERROR,
            code="internal_error",
            details={"path": request.url.path},
        )
        return JSONResponse(status_code=500, content=env.model_dump())

    return app


app = create_app()
