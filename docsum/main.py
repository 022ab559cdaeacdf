import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from .config import settings
from .routers.extract import router as extract_router
from .routers.summaries import router as summaries_router
from .routers.summarizer import router as summarizer_router
from .routers.transcribe import router as transcribe_router
from .services.document_processor import DocumentProcessor
from .services.extractor_service import TextExtractor
from .services.firebase_service import create_firebase_service
from .services.openai_service import OpenAIService

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    openai_service = OpenAIService(settings)
    extractor = TextExtractor(ocr=openai_service)

    app.state.openai_service = openai_service
    app.state.extractor = extractor
    app.state.processor = DocumentProcessor(
        extractor, openai_service, max_concurrency=settings.max_concurrent_files
    )
    app.state.firebase_service = create_firebase_service(settings.firebase_credentials)

    if not openai_service.is_configured():
        logger.warning("OPENAI_API_KEY is not set; summarization requests will fail with 503.")
    yield


app = FastAPI(title="Docsum API", lifespan=lifespan)

app.include_router(summarizer_router)
app.include_router(extract_router)
app.include_router(transcribe_router)
app.include_router(summaries_router)


@app.get("/")
def root():
    return {"message": "API is running!"}


@app.get("/health")
def health(request: Request) -> dict[str, bool]:
    openai_service = getattr(request.app.state, "openai_service", None)
    return {
        "ok": True,
        "openai": bool(openai_service and openai_service.is_configured()),
        "firebase": getattr(request.app.state, "firebase_service", None) is not None,
    }
