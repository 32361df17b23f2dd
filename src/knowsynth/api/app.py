"""FastAPI application exposing knowsynth services."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from knowsynth.analysis import (
    AnalysisCache,
    DashboardService,
    DocumentAnalysisService,
    FanOutOrchestrator,
    GenerativeAnalyst,
    InsightService,
    NoteService,
    TaskService,
    make_cache_key,
)
from knowsynth.api.schemas import (
    AnalysisRequest,
    CacheInvalidationResponse,
    DashboardRequest,
    NotesRequest,
    NotesResponse,
    QueryRequest,
    QueryResponse,
    RelevanceRequest,
    RelevanceResponse,
    RerankRequest,
    RerankResponse,
    ScoredChunkModel,
    SynthesisRequest,
    SynthesisResponse,
    TaskPlanRequest,
    TaskPlanResponse,
)
from knowsynth.backend import GeminiRestClient
from knowsynth.config import Settings, get_settings
from knowsynth.embeddings import build_embedding_gateway
from knowsynth.errors import BackendError, DimensionMismatchError
from knowsynth.metrics.observability import (
    bind_correlation_id,
    clear_correlation_id,
    configure_logging,
    get_correlation_id,
    get_logger,
)
from knowsynth.models import ScoredChunk
from knowsynth.retrieval import RerankConfig, Reranker
from knowsynth.services import (
    ChatTurn,
    EmptyDocumentStore,
    GeminiDocumentStore,
    KnowledgeQueryService,
    build_generation_backend,
)


@dataclass(frozen=True)
class AppDependencies:
    reranker: Reranker
    query_service: KnowledgeQueryService
    documents: DocumentAnalysisService
    insights: InsightService
    dashboard: DashboardService
    tasks: TaskService
    notes: NoteService


def _build_dependencies(settings: Settings) -> AppDependencies:
    rest_client = None
    if settings.uses_remote_backend:
        rest_client = GeminiRestClient(
            api_key=settings.google_api_key,
            base_url=settings.api_base_url,
            timeout=settings.request_timeout_seconds,
        )
    gateway = build_embedding_gateway(settings, rest_client=rest_client)
    reranker = Reranker(
        gateway,
        RerankConfig(top_k=settings.rerank_top_k, min_relevance_score=settings.rerank_min_relevance_score),
    )
    generator = build_generation_backend(settings, rest_client=rest_client)
    document_store = (
        GeminiDocumentStore(rest_client)
        if rest_client is not None and settings.generation_provider == "gemini"
        else EmptyDocumentStore()
    )
    orchestrator = FanOutOrchestrator(AnalysisCache(ttl_seconds=settings.analysis_cache_ttl_seconds))
    analyst = GenerativeAnalyst(generator, model=settings.generation_model)
    insights = InsightService(analyst)
    documents = DocumentAnalysisService(
        analyst,
        document_store,
        orchestrator,
        insights,
        summary_max_documents=settings.summary_max_documents,
        page_size=settings.document_page_size,
    )
    return AppDependencies(
        reranker=reranker,
        query_service=KnowledgeQueryService(generator, reranker),
        documents=documents,
        insights=insights,
        dashboard=DashboardService(insights, documents),
        tasks=TaskService(analyst, documents),
        notes=NoteService(analyst),
    )


def _chunk_model(chunk: ScoredChunk) -> ScoredChunkModel:
    return ScoredChunkModel(
        title=chunk.title,
        text=chunk.text,
        source_collection=chunk.source_collection,
        relevance_score=chunk.relevance_score,
        reranking_error=chunk.reranking_error,
    )


def _correlation_id(request: Request) -> str:
    bound = get_correlation_id()
    if bound != "-":
        return bound
    # the catch-all handler runs after the middleware has cleared the context
    return getattr(request.state, "correlation_id", None) or uuid4().hex


def create_app(*, settings: Settings | None = None, dependencies: AppDependencies | None = None) -> FastAPI:
    settings = settings or get_settings()
    deps = dependencies or _build_dependencies(settings)

    configure_logging()
    logger = get_logger("api")
    app = FastAPI(title="knowsynth API", version="0.1.0")
    app.state.dependencies = deps

    # Optional CORS
    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_allow_origins),
            allow_credentials=settings.cors_allow_credentials,
            allow_methods=list(settings.cors_allow_methods),
            allow_headers=list(settings.cors_allow_headers),
        )

    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next):  # type: ignore[override]
        correlation_id = request.headers.get("X-Request-ID", uuid4().hex)
        request.state.correlation_id = correlation_id
        bind_correlation_id(correlation_id)
        try:
            response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers["X-Correlation-ID"] = correlation_id
        return response

    def require_api_key(request: Request) -> None:
        expected = settings.api_key
        if not expected:
            return
        provided = request.headers.get("X-API-Key")
        if provided != expected:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")

    @app.exception_handler(BackendError)
    async def handle_backend_error(request: Request, exc: BackendError) -> JSONResponse:
        correlation_id = _correlation_id(request)
        logger.error("backend.error", correlation_id=correlation_id, detail=str(exc), status_code=exc.status_code)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": str(exc), "correlation_id": correlation_id},
        )

    @app.exception_handler(DimensionMismatchError)
    async def handle_dimension_mismatch(request: Request, exc: DimensionMismatchError) -> JSONResponse:
        correlation_id = _correlation_id(request)
        logger.warning("embedding.dimension_mismatch", correlation_id=correlation_id, detail=str(exc))
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc), "correlation_id": correlation_id},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        correlation_id = _correlation_id(request)
        logger.error("unhandled.error", correlation_id=correlation_id, detail=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal Server Error", "correlation_id": correlation_id},
        )

    def get_dependencies(request: Request) -> AppDependencies:
        return request.app.state.dependencies

    @app.post("/rerank", response_model=RerankResponse)
    async def rerank_chunks(
        payload: RerankRequest,
        dep: AppDependencies = Depends(get_dependencies),
        _auth: None = Depends(require_api_key),
    ) -> RerankResponse:
        chunks = [
            ScoredChunk(title=chunk.title, text=chunk.text, source_collection=chunk.source_collection)
            for chunk in payload.chunks
        ]
        ranked = await dep.reranker.rerank(
            payload.query,
            chunks,
            top_k=payload.top_k,
            min_relevance_score=payload.min_relevance_score,
        )
        return RerankResponse(
            chunks=[_chunk_model(chunk) for chunk in ranked],
            degraded=any(chunk.reranking_error for chunk in ranked),
        )

    @app.post("/relevance", response_model=RelevanceResponse)
    async def relevance(
        payload: RelevanceRequest,
        dep: AppDependencies = Depends(get_dependencies),
        _auth: None = Depends(require_api_key),
    ) -> RelevanceResponse:
        score = await dep.reranker.calculate_relevance(payload.query, payload.document_text)
        return RelevanceResponse(score=score)

    @app.post("/query", response_model=QueryResponse)
    async def query_knowledge(
        payload: QueryRequest,
        dep: AppDependencies = Depends(get_dependencies),
        _auth: None = Depends(require_api_key),
    ) -> QueryResponse:
        answer = await dep.query_service.ask(
            payload.stores,
            payload.question,
            [ChatTurn(role=turn.role, text=turn.text) for turn in payload.history],
            top_k=payload.top_k,
            min_relevance_score=payload.min_relevance_score,
        )
        return QueryResponse(
            query_id=answer.query_id,
            answer=answer.text,
            citations=[_chunk_model(chunk) for chunk in answer.citations],
            latency_ms=answer.latency_ms,
            generation_ms=answer.generation_ms,
            rerank_ms=answer.rerank_ms,
        )

    @app.post("/analysis")
    async def analyze_store(
        payload: AnalysisRequest,
        dep: AppDependencies = Depends(get_dependencies),
        _auth: None = Depends(require_api_key),
    ) -> dict:
        return await dep.documents.analyze_store(payload.store, use_cache=payload.use_cache)

    @app.delete("/analysis/cache", response_model=CacheInvalidationResponse)
    async def clear_analysis_cache(
        store: str | None = None,
        dep: AppDependencies = Depends(get_dependencies),
        _auth: None = Depends(require_api_key),
    ) -> CacheInvalidationResponse:
        dep.documents.clear_cache(store)
        return CacheInvalidationResponse(invalidated=make_cache_key(store) if store else "*")

    @app.post("/synthesize", response_model=SynthesisResponse)
    async def synthesize(
        payload: SynthesisRequest,
        dep: AppDependencies = Depends(get_dependencies),
        _auth: None = Depends(require_api_key),
    ) -> SynthesisResponse:
        text = await dep.documents.synthesize_knowledge(payload.stores, payload.query)
        return SynthesisResponse(synthesis=text)

    @app.post("/insights/dashboard")
    async def insights_dashboard(
        payload: DashboardRequest,
        dep: AppDependencies = Depends(get_dependencies),
        _auth: None = Depends(require_api_key),
    ) -> dict:
        return await dep.dashboard.build(payload.stores)

    @app.post("/tasks", response_model=TaskPlanResponse)
    async def plan_tasks(
        payload: TaskPlanRequest,
        dep: AppDependencies = Depends(get_dependencies),
        _auth: None = Depends(require_api_key),
    ) -> TaskPlanResponse:
        plan = await dep.tasks.plan_workflow(payload.store)
        return TaskPlanResponse(tasks=plan["tasks"])

    @app.post("/notes", response_model=NotesResponse)
    async def comprehensive_notes(
        payload: NotesRequest,
        dep: AppDependencies = Depends(get_dependencies),
        _auth: None = Depends(require_api_key),
    ) -> NotesResponse:
        notes = await dep.notes.generate_comprehensive_notes(payload.store, payload.documents)
        return NotesResponse(**notes)

    @app.get("/metrics")
    async def metrics() -> Response:
        payload = generate_latest()
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    @app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        from knowsynth import __version__

        return {"status": "ok", "version": __version__, "environment": settings.environment}

    @app.head("/healthz")
    async def healthcheck_head() -> Response:
        return Response(status_code=status.HTTP_200_OK)

    @app.get("/livez")
    async def liveness() -> dict[str, str]:
        return {"status": "alive"}

    return app


app = create_app()
