"""
Router das coleções lidas e gravadas em bloco: áreas de conhecimento,
grade horária e projetos (com suas turmas e atribuições).
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from gestao_escolar.database import get_db
from gestao_escolar.services import registry_service
from gestao_escolar.services.app_state import AppState

router = APIRouter(prefix="/api/v1", tags=["Coleções"])

Record = Dict[str, Any]


class KnowledgeAreasBody(BaseModel):
    areasConhecimento: List[Record] = Field(default_factory=list)
    bloqueiosArea: List[Record] = Field(default_factory=list)


class SchedulesBody(BaseModel):
    horarios: List[Record] = Field(default_factory=list)
    bloqueios: List[Record] = Field(default_factory=list)
    # ausente: mantém a configuração gravada
    configuracaoHorario: Optional[Record] = None


class ProjectsBody(BaseModel):
    projetos: List[Record] = Field(default_factory=list)
    projetoTurmas: List[Record] = Field(default_factory=list)
    projetoAtribuicoes: List[Record] = Field(default_factory=list)


@router.get("/knowledge-areas", summary="Áreas de conhecimento e bloqueios")
def get_knowledge_areas(db: Session = Depends(get_db)):
    return registry_service.get_knowledge_areas(AppState(db))


@router.put("/knowledge-areas", summary="Substituir as áreas de conhecimento")
def replace_knowledge_areas(body: KnowledgeAreasBody, db: Session = Depends(get_db)):
    return registry_service.replace_knowledge_areas(AppState(db), body.areasConhecimento, body.bloqueiosArea)


@router.get("/schedules", summary="Grade horária")
def get_schedules(db: Session = Depends(get_db)):
    return registry_service.get_schedules(AppState(db))


@router.put("/schedules", summary="Substituir a grade horária")
def replace_schedules(body: SchedulesBody, db: Session = Depends(get_db)):
    """Horários e bloqueios são substituídos juntos."""
    return registry_service.replace_schedules(
        AppState(db), body.horarios, body.bloqueios, body.configuracaoHorario,
    )


@router.get("/projects", summary="Projetos")
def get_projects(db: Session = Depends(get_db)):
    return registry_service.get_projects(AppState(db))


@router.put("/projects", summary="Substituir os projetos")
def replace_projects(body: ProjectsBody, db: Session = Depends(get_db)):
    return registry_service.replace_projects(
        AppState(db), body.projetos, body.projetoTurmas, body.projetoAtribuicoes,
    )
