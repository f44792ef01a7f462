"""
Tasks Service - append-only task log gated by the internal auth service
"""
from fastapi import FastAPI, Depends, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from .config import settings
from .errors import StoreError
from .gate import get_record_store, get_verifier, require_principal
from .record_store import RecordStore
from .schemas import TaskCreate, TaskCreatedResponse, TaskListResponse, TaskRecord
from .utils.event_logger import log_gate_event

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info(
        "Tasks service starting: store=%s auth=%s timeout=%ss",
        settings.tasks_file_path, settings.auth_base_url, settings.AUTH_TIMEOUT_SECONDS
    )
    yield
    if get_verifier.cache_info().currsize:
        get_verifier().close()


app = FastAPI(
    title="Tasks Service",
    description="Append-only task log gated by the internal auth service",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.get("/tasks", response_model=TaskListResponse)
def list_tasks(
    request: Request,
    principal: str = Depends(require_principal),
    store: RecordStore = Depends(get_record_store),
):
    try:
        tasks = store.read_all()
    except StoreError as exc:
        log_gate_event(exc.event_type, request, detail=str(exc), principal=principal)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Loading the tasks failed. {exc}"
        ) from exc

    log_gate_event("tasks_loaded", request, detail=f"count={len(tasks)}", principal=principal)
    return TaskListResponse(message="Tasks loaded.", tasks=tasks)


@app.post("/tasks", response_model=TaskCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    request: Request,
    principal: str = Depends(require_principal),
    store: RecordStore = Depends(get_record_store),
):
    task = TaskRecord(title=payload.title, text=payload.text)
    try:
        store.append(task)
    except StoreError as exc:
        log_gate_event(exc.event_type, request, detail=str(exc), principal=principal)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Storing the task failed. {exc}"
        ) from exc

    log_gate_event("task_stored", request, detail=f"title={task.title!r}", principal=principal)
    return TaskCreatedResponse(message="Task stored.", created_task=task)
