"""HTTP server: health, stats, and a publish trigger for the sample publishers."""

from dotenv import load_dotenv
load_dotenv()

import logging
import time
from concurrent.futures import Executor
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from kafka_template.broker import BrokerClient
from kafka_template.config import BrokerSettings, build_client, build_executor, load_settings
from kafka_template.observability import Metrics
from kafka_template.publisher import PublisherTemplate
from kafka_template.samples import (
    SAMPLE_LISTEN_TOPIC,
    SAMPLE_TOPIC_ONE,
    SAMPLE_TOPIC_TWO,
    AlertingFailureHandler,
    SampleListener,
)
from kafka_template.subscriber import SubscriberTemplate

router = APIRouter(prefix="/api/v1")


class PublishBody(BaseModel):
    payload: Dict[str, Any]


# ---- Health ----

@router.get("/health")
def health(request: Request) -> JSONResponse:
    """GET /health → { uptime_sec, backend, publishers, subscribers }."""
    state = request.app.state
    body = {
        "uptime_sec": int(time.time() - state.start_time),
        "backend": state.settings.backend,
        "publishers": len(state.publishers),
        "subscribers": len(state.subscribers),
    }
    return JSONResponse(content=body, status_code=200)


# ---- Stats ----

@router.get("/stats")
def stats(request: Request) -> JSONResponse:
    """GET /stats → { counters: { name: count } }."""
    return JSONResponse(content=request.app.state.metrics.snapshot(), status_code=200)


# ---- Publish ----

@router.post("/publish/{destination}")
def publish(destination: str, body: PublishBody, request: Request) -> JSONResponse:
    """POST /publish/{destination} { payload } → 202 accepted, or 404 for an unknown destination."""
    publisher = request.app.state.publishers.get(destination)
    if publisher is None:
        return JSONResponse(
            content={"error": "destination not found", "destination": destination},
            status_code=404,
        )
    publisher.publish(body.payload)
    return JSONResponse(
        content={"status": "accepted", "destination": destination},
        status_code=202,
    )


def create_app(
    settings: Optional[BrokerSettings] = None,
    client: Optional[BrokerClient] = None,
    executor: Optional[Executor] = None,
) -> FastAPI:
    """Composition root: build the client, the sample templates, and the app around them."""
    settings = settings or load_settings()
    client = client or build_client(settings)
    owns_executor = executor is None
    executor = executor or build_executor(settings)
    metrics = Metrics()

    publishers = {
        SAMPLE_TOPIC_ONE: PublisherTemplate(SAMPLE_TOPIC_ONE, client, executor, metrics=metrics),
        SAMPLE_TOPIC_TWO: PublisherTemplate(
            SAMPLE_TOPIC_TWO, client, executor, AlertingFailureHandler(), metrics
        ),
        SAMPLE_LISTEN_TOPIC: PublisherTemplate(SAMPLE_LISTEN_TOPIC, client, executor, metrics=metrics),
    }
    subscribers = [SubscriberTemplate(SAMPLE_LISTEN_TOPIC, SampleListener(), metrics)]

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        for subscriber in subscribers:
            subscriber.bind(client)
        yield
        if owns_executor:
            executor.shutdown(wait=True)
        client.close()

    app = FastAPI(title="Kafka Template API", lifespan=lifespan)
    app.state.settings = settings
    app.state.metrics = metrics
    app.state.publishers = publishers
    app.state.subscribers = subscribers
    app.state.start_time = time.time()
    app.include_router(router)
    return app


_settings = load_settings()
logging.basicConfig(level=_settings.log_level)
app = create_app(_settings)
