"""
Router dos servidores: CRUD em /api/v1/staff.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from gestao_escolar.database import get_db
from gestao_escolar.exceptions import RecordNotFoundError
from gestao_escolar.schemas.registry import StaffCreate, StaffUpdate, RegistryRecord
from gestao_escolar.services import registry_service
from gestao_escolar.services.app_state import AppState
from gestao_escolar.services.registry_service import STAFF

router = APIRouter(prefix="/api/v1/staff", tags=["Servidores"])


@router.get("", response_model=List[RegistryRecord], summary="Listar servidores")
def list_records(db: Session = Depends(get_db)):
    return registry_service.list_records(AppState(db), STAFF)


@router.post("", response_model=RegistryRecord, status_code=201, summary="Cadastrar um servidor")
def create_record(data: StaffCreate, db: Session = Depends(get_db)):
    return registry_service.create_record(AppState(db), STAFF, data)


@router.get("/{record_id}", response_model=RegistryRecord, summary="Detalhe de um servidor")
def get_record(record_id: str, db: Session = Depends(get_db)):
    try:
        return registry_service.get_record(AppState(db), STAFF, record_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{record_id}", response_model=RegistryRecord, summary="Alterar um servidor")
def update_record(record_id: str, data: StaffUpdate, db: Session = Depends(get_db)):
    """Só os campos enviados são alterados."""
    try:
        return registry_service.update_record(AppState(db), STAFF, record_id, data)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{record_id}", status_code=204, summary="Remover um servidor")
def delete_record(record_id: str, db: Session = Depends(get_db)):
    try:
        registry_service.delete_record(AppState(db), STAFF, record_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
