"""
Router do calendário escolar (feriados, reuniões, conselhos, eventos).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from gestao_escolar.database import get_db
from gestao_escolar.exceptions import RecordNotFoundError
from gestao_escolar.schemas.registry import CalendarEventCreate, CalendarEventUpdate, RegistryRecord
from gestao_escolar.services import registry_service
from gestao_escolar.services.app_state import AppState
from gestao_escolar.services.registry_service import CALENDAR_EVENTS

router = APIRouter(prefix="/api/v1/calendar-events", tags=["Calendário"])


@router.get("", response_model=List[RegistryRecord], summary="Listar eventos do calendário")
def list_events(
    ano: Optional[int] = Query(None, ge=1900, le=2999),
    mes: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
):
    """Eventos ordenados por data, opcionalmente filtrados por ano e mês."""
    return registry_service.list_calendar_events(AppState(db), ano, mes)


@router.post("", response_model=RegistryRecord, status_code=201, summary="Criar um evento")
def create_event(data: CalendarEventCreate, db: Session = Depends(get_db)):
    return registry_service.create_record(AppState(db), CALENDAR_EVENTS, data)


@router.put("/{event_id}", response_model=RegistryRecord, summary="Alterar um evento")
def update_event(event_id: str, data: CalendarEventUpdate, db: Session = Depends(get_db)):
    try:
        return registry_service.update_record(AppState(db), CALENDAR_EVENTS, event_id, data)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{event_id}", status_code=204, summary="Remover um evento")
def delete_event(event_id: str, db: Session = Depends(get_db)):
    try:
        registry_service.delete_record(AppState(db), CALENDAR_EVENTS, event_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
