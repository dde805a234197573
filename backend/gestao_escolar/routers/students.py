"""
Router dos alunos.
Cadastro: GET/POST /api/v1/students, GET/PUT/DELETE /api/v1/students/{id}
Importação de planilha: POST /api/v1/students/upload
Resumos: GET /api/v1/students/classes, GET /api/v1/students/aee
Responsáveis, ficha de saúde e ocorrências: rotas aninhadas em /{id}
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from gestao_escolar.config import settings
from gestao_escolar.database import get_db
from gestao_escolar.exceptions import FileFormatError, RecordNotFoundError
from gestao_escolar.schemas.student import (
    ClassSummary,
    Guardian,
    HealthRecord,
    Incident,
    StudentCreate,
    StudentImportReport,
    StudentResponse,
    StudentUpdate,
)
from gestao_escolar.services import student_import, student_service
from gestao_escolar.services.app_state import AppState

router = APIRouter(prefix="/api/v1/students", tags=["Alunos"])


@router.get("", response_model=List[StudentResponse], summary="Listar alunos")
def list_students(
    search: Optional[str] = Query(None, description="Nome, RA ou RM"),
    turma: Optional[str] = Query(None),
    situacao: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Retorna os alunos ordenados por turma e número de chamada."""
    return student_service.list_students(AppState(db), search, turma, situacao)


@router.get("/classes", response_model=List[ClassSummary], summary="Resumo por turma")
def list_classes(db: Session = Depends(get_db)):
    return student_service.class_summaries(AppState(db))


@router.get("/aee", response_model=List[StudentResponse], summary="Alunos público-alvo do AEE")
def list_special_education(db: Session = Depends(get_db)):
    return student_service.special_education_students(AppState(db))


@router.post("", response_model=StudentResponse, status_code=201, summary="Cadastrar um aluno")
def create_student(data: StudentCreate, db: Session = Depends(get_db)):
    """Cadastra um aluno manualmente (fora da importação de planilha)."""
    return student_service.create_student(AppState(db), data)


@router.delete("", summary="Remover todos os alunos")
def delete_all_students(db: Session = Depends(get_db)):
    """Esvazia a coleção de alunos. Retorna quantos foram removidos."""
    return {"deleted": student_service.delete_all_students(AppState(db))}


ALLOWED_CONTENT_TYPES = {
    "text/csv",
    "text/plain",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/octet-stream",
}


@router.post("/upload", response_model=StudentImportReport, summary="Importar alunos de uma planilha")
async def upload_students(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    """
    Importa alunos da primeira aba de uma planilha (.xlsx, .xls ou .csv).

    - Os cabeçalhos são reconhecidos por várias grafias (ex.: `Nome do Aluno`,
      `NOME`, `Nome`); colunas desconhecidas são ignoradas.
    - Linhas sem nome são ignoradas e listadas no relatório.
    - CSV: separador vírgula ou ponto e vírgula, UTF-8 (com ou sem BOM).

    Os alunos importados são acrescentados aos existentes.
    """
    filename = file.filename or ""
    if file.content_type not in ALLOWED_CONTENT_TYPES and not filename.lower().endswith(
        student_import.SUPPORTED_EXTENSIONS
    ):
        raise HTTPException(
            status_code=400,
            detail="Formato inválido. Formatos aceitos: .xlsx, .xls, .csv",
        )

    content = await file.read()

    if len(content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"Arquivo muito grande. Tamanho máximo: {settings.MAX_UPLOAD_SIZE_MB} MB.",
        )

    try:
        rows = student_import.read_spreadsheet(content, filename)
    except FileFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return student_import.import_student_rows(AppState(db), rows)


@router.get("/{student_id}", response_model=StudentResponse, summary="Detalhe de um aluno")
def get_student(student_id: str, db: Session = Depends(get_db)):
    try:
        return student_service.get_student(AppState(db), student_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{student_id}", response_model=StudentResponse, summary="Alterar um aluno")
def update_student(student_id: str, data: StudentUpdate, db: Session = Depends(get_db)):
    """Atualiza os campos enviados. Os campos ausentes não mudam."""
    try:
        return student_service.update_student(AppState(db), student_id, data)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{student_id}", status_code=204, summary="Remover um aluno")
def delete_student(student_id: str, db: Session = Depends(get_db)):
    try:
        student_service.delete_student(AppState(db), student_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# --- Responsáveis ---

@router.post("/{student_id}/guardians", response_model=StudentResponse, status_code=201,
             summary="Adicionar um responsável")
def add_guardian(student_id: str, data: Guardian, db: Session = Depends(get_db)):
    try:
        return student_service.add_guardian(AppState(db), student_id, data)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{student_id}/guardians/{guardian_id}", response_model=StudentResponse,
            summary="Alterar um responsável")
def update_guardian(student_id: str, guardian_id: str, data: Guardian, db: Session = Depends(get_db)):
    try:
        return student_service.update_guardian(AppState(db), student_id, guardian_id, data)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{student_id}/guardians/{guardian_id}", response_model=StudentResponse,
               summary="Remover um responsável")
def remove_guardian(student_id: str, guardian_id: str, db: Session = Depends(get_db)):
    try:
        return student_service.remove_guardian(AppState(db), student_id, guardian_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# --- Ficha de saúde ---

@router.put("/{student_id}/health-record", response_model=StudentResponse, summary="Gravar a ficha de saúde")
def set_health_record(student_id: str, data: HealthRecord, db: Session = Depends(get_db)):
    try:
        return student_service.set_health_record(AppState(db), student_id, data)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{student_id}/health-record", response_model=StudentResponse, summary="Remover a ficha de saúde")
def remove_health_record(student_id: str, db: Session = Depends(get_db)):
    try:
        return student_service.remove_health_record(AppState(db), student_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# --- Ocorrências ---

@router.post("/{student_id}/incidents", response_model=StudentResponse, status_code=201,
             summary="Registrar uma ocorrência")
def add_incident(student_id: str, data: Incident, db: Session = Depends(get_db)):
    try:
        return student_service.add_incident(AppState(db), student_id, data)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{student_id}/incidents/{incident_id}", response_model=StudentResponse,
            summary="Alterar uma ocorrência")
def update_incident(student_id: str, incident_id: str, data: Incident, db: Session = Depends(get_db)):
    try:
        return student_service.update_incident(AppState(db), student_id, incident_id, data)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{student_id}/incidents/{incident_id}", response_model=StudentResponse,
               summary="Remover uma ocorrência")
def remove_incident(student_id: str, incident_id: str, db: Session = Depends(get_db)):
    try:
        return student_service.remove_incident(AppState(db), student_id, incident_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
