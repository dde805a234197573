"""
Router das atribuições de aulas: CRUD em /api/v1/assignments.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from gestao_escolar.database import get_db
from gestao_escolar.exceptions import RecordNotFoundError
from gestao_escolar.schemas.registry import AssignmentCreate, AssignmentUpdate, RegistryRecord
from gestao_escolar.services import registry_service
from gestao_escolar.services.app_state import AppState
from gestao_escolar.services.registry_service import ASSIGNMENTS

router = APIRouter(prefix="/api/v1/assignments", tags=["Atribuições"])


@router.get("", response_model=List[RegistryRecord], summary="Listar atribuições")
def list_records(
    turma: Optional[str] = Query(None),
    docente: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Atribuições, opcionalmente filtradas por turma e/ou docente."""
    records = registry_service.list_records(AppState(db), ASSIGNMENTS)
    if turma:
        records = [r for r in records if r.get("turma") == turma]
    if docente:
        records = [r for r in records if r.get("docente") == docente]
    return records


@router.post("", response_model=RegistryRecord, status_code=201, summary="Cadastrar uma atribuição")
def create_record(data: AssignmentCreate, db: Session = Depends(get_db)):
    return registry_service.create_record(AppState(db), ASSIGNMENTS, data)


@router.get("/{record_id}", response_model=RegistryRecord, summary="Detalhe de uma atribuição")
def get_record(record_id: str, db: Session = Depends(get_db)):
    try:
        return registry_service.get_record(AppState(db), ASSIGNMENTS, record_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{record_id}", response_model=RegistryRecord, summary="Alterar uma atribuição")
def update_record(record_id: str, data: AssignmentUpdate, db: Session = Depends(get_db)):
    """Só os campos enviados são alterados."""
    try:
        return registry_service.update_record(AppState(db), ASSIGNMENTS, record_id, data)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{record_id}", status_code=204, summary="Remover uma atribuição")
def delete_record(record_id: str, db: Session = Depends(get_db)):
    try:
        registry_service.delete_record(AppState(db), ASSIGNMENTS, record_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
