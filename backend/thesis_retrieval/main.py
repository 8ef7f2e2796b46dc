"""Main entry point for the Thesis Copilot retrieval API."""
import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import CORS_ORIGINS, PORT, LOG_LEVEL
from .errors import RetrievalServiceError
from .logger import setup_logging
from .models.api import (
    BasicRetrievalRequest,
    BasicRetrievalResponse,
    EnhancedRetrievalRequest,
    EnhancedRetrievalResponse,
    IntentRequest,
    QueryIntentSchema,
    ScoredChunkSchema,
)
from .services.chunk_store import ChunkStore
from .services.embedding_provider import EmbeddingProvider
from .services.query_intent import QueryIntentClassifier
from .services.retrieval_engine import RetrievalEngine
from .services.retrieval_logger import RetrievalLogger
from .services.retrieval_orchestrator import RetrievalOrchestrator

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Thesis Copilot Retrieval",
    description="Evidence retrieval and ranking for thesis drafting",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialized on startup
retrieval_engine: RetrievalEngine = None
orchestrator: RetrievalOrchestrator = None
intent_classifier: QueryIntentClassifier = None
retrieval_logger: RetrievalLogger = None


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global retrieval_engine, orchestrator, intent_classifier, retrieval_logger

    logger.info("Initializing Thesis Copilot retrieval services...")

    try:
        embedding_provider = EmbeddingProvider()
        chunk_store = ChunkStore()
        retrieval_engine = RetrievalEngine(chunk_store, embedding_provider)
        intent_classifier = QueryIntentClassifier()
        retrieval_logger = RetrievalLogger()
        orchestrator = RetrievalOrchestrator(
            chunk_store,
            embedding_provider,
            basic_engine=retrieval_engine,
            intent_classifier=intent_classifier,
            retrieval_logger=retrieval_logger,
        )
        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


@app.on_event("shutdown")
async def shutdown_event():
    if retrieval_logger is not None:
        retrieval_logger.close()


@app.get("/health")
async def health():
    """Health check."""
    return {
        "status": "healthy",
        "service": "thesis-copilot-retrieval",
        "version": "1.0.0"
    }


@app.post("/retrieval/query", response_model=BasicRetrievalResponse)
def basic_retrieval_endpoint(request: BasicRetrievalRequest) -> BasicRetrievalResponse:
    """Semantic-only retrieval of the chunks most similar to the query."""
    try:
        results = retrieval_engine.retrieve(request.query, request.project_id, limit=request.limit)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RetrievalServiceError as e:
        logger.error(f"Retrieval service error: {e.error.message}")
        raise HTTPException(
            status_code=503,
            detail={
                "error": {
                    "code": e.error.code,
                    "message": e.error.message,
                    "details": e.error.details
                }
            }
        )
    except Exception as e:
        logger.error(f"Unexpected error during retrieval: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    return BasicRetrievalResponse(
        query=request,
        chunks=[ScoredChunkSchema.from_scored_chunk(r) for r in results]
    )


@app.post("/retrieval/enhanced", response_model=EnhancedRetrievalResponse)
def enhanced_retrieval_endpoint(request: EnhancedRetrievalRequest) -> EnhancedRetrievalResponse:
    """
    Multi-factor retrieval for drafting and rewrite requests.

    Retrieval failures never surface here: the orchestrator falls back to
    semantic-only retrieval or an empty result. Only malformed requests fail.
    """
    try:
        context = request.to_context()
        response = orchestrator.perform_enhanced_retrieval(context, max_chunks=request.max_chunks)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Enhanced retrieval returned {response.total_retrieved} chunks")
    return EnhancedRetrievalResponse.from_response(response)


@app.post("/retrieval/intent", response_model=QueryIntentSchema)
def intent_endpoint(request: IntentRequest) -> QueryIntentSchema:
    """Advisory query intent classification."""
    return QueryIntentSchema.from_intent(intent_classifier.classify(request.query))


if __name__ == "__main__":
    import uvicorn
    setup_logging(LOG_LEVEL)
    logger.info(f"Starting Thesis Copilot retrieval API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
