"""
Ponto de entrada da API do Sistema de Gestão Escolar.
Execução: uvicorn gestao_escolar.main:app --reload (a partir de backend/)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gestao_escolar.config import settings
from gestao_escolar.database import init_db
from gestao_escolar.exceptions import StorageError
from gestao_escolar.routers import (
    assignments,
    backup,
    calendar_events,
    planning,
    school,
    staff,
    students,
    teachers,
)
from gestao_escolar.scheduler import start_scheduler, stop_scheduler

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

API_VERSION = "3.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cria a tabela de armazenamento e controla o backup automático."""
    init_db()
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title="Gestão Escolar API",
    description="Cadastro escolar com importação de planilhas e backup completo",
    version=API_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS: qualquer porta de localhost em desenvolvimento
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


app.include_router(school.router)
app.include_router(students.router)
app.include_router(teachers.router)
app.include_router(staff.router)
app.include_router(assignments.router)
app.include_router(calendar_events.router)
app.include_router(planning.router)
app.include_router(backup.router)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Falha de gravação em %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Captura as exceções não tratadas para que a resposta 500 passe pelo
    CORSMiddleware. Sem este handler o navegador só vê "Failed to fetch".
    """
    logger.error("Exceção não tratada: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Ocorreu um erro interno."},
    )


@app.get("/api/health", tags=["Saúde"])
def health_check():
    """Verifica se a API está no ar."""
    return {"status": "ok", "service": "Gestão Escolar API", "version": API_VERSION}
