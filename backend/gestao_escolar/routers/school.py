"""
Router do cadastro da escola (registro único).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gestao_escolar.database import get_db
from gestao_escolar.schemas.school import School
from gestao_escolar.services import school_service
from gestao_escolar.services.app_state import AppState

router = APIRouter(prefix="/api/v1/school", tags=["Escola"])


@router.get("", summary="Cadastro da escola")
def get_school(db: Session = Depends(get_db)):
    """Retorna o cadastro gravado, completado com os valores padrão."""
    return school_service.get_school(AppState(db))


@router.put("", summary="Gravar o cadastro da escola")
def save_school(data: School, db: Session = Depends(get_db)):
    return school_service.save_school(AppState(db), data)
