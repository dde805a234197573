"""
Serviço genérico dos cadastros simples (docentes, servidores, atribuições,
eventos do calendário) e das coleções opacas (áreas de conhecimento,
horários, projetos), que só são lidas e substituídas em bloco.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import BaseModel

from gestao_escolar.exceptions import RecordNotFoundError
from gestao_escolar.services.app_state import AppState, new_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Registry:
    """Descreve uma coleção de registros com id."""
    name: str
    load: Callable[[AppState], list[dict]]
    save: Callable[[AppState, list[dict]], None]
    not_found: str


TEACHERS = Registry("docentes", lambda s: s.teachers, AppState.set_teachers, "Docente não encontrado.")
STAFF = Registry("servidores", lambda s: s.staff, AppState.set_staff, "Servidor não encontrado.")
ASSIGNMENTS = Registry("atribuicoes", lambda s: s.assignments, AppState.set_assignments, "Atribuição não encontrada.")
CALENDAR_EVENTS = Registry(
    "eventosCalendario", lambda s: s.calendar_events, AppState.set_calendar_events, "Evento não encontrado.",
)


def _find_index(records: list[dict], record_id: str, registry: Registry) -> int:
    for index, record in enumerate(records):
        if str(record.get("id")) == record_id:
            return index
    raise RecordNotFoundError(registry.not_found)


def list_records(state: AppState, registry: Registry) -> list[dict]:
    return list(registry.load(state))


def get_record(state: AppState, registry: Registry, record_id: str) -> dict:
    records = registry.load(state)
    return records[_find_index(records, record_id, registry)]


def create_record(state: AppState, registry: Registry, data: BaseModel) -> dict:
    record = {**data.model_dump(by_alias=True, mode="json"), "id": new_id()}
    registry.save(state, registry.load(state) + [record])
    logger.info("Registro criado em %s: %s", registry.name, record["id"])
    return record


def update_record(state: AppState, registry: Registry, record_id: str, data: BaseModel) -> dict:
    """Atualização parcial: só os campos enviados mudam."""
    records = list(registry.load(state))
    index = _find_index(records, record_id, registry)

    changes = data.model_dump(by_alias=True, mode="json", exclude_unset=True)
    changes.pop("id", None)
    records[index] = {**records[index], **changes}
    registry.save(state, records)
    return records[index]


def delete_record(state: AppState, registry: Registry, record_id: str) -> None:
    records = list(registry.load(state))
    del records[_find_index(records, record_id, registry)]
    registry.save(state, records)
    logger.info("Registro removido de %s: %s", registry.name, record_id)


# --- Calendário ---

def list_calendar_events(state: AppState, year: Optional[int] = None, month: Optional[int] = None) -> list[dict]:
    """Eventos ordenados por data; filtra por ano e/ou mês (data AAAA-MM-DD)."""
    events = state.calendar_events
    if year is not None:
        events = [e for e in events if str(e.get("data", "")).startswith(f"{year:04d}-")]
    if month is not None:
        events = [e for e in events if str(e.get("data", ""))[5:7] == f"{month:02d}"]
    return sorted(events, key=lambda e: str(e.get("data", "")))


# --- Coleções opacas (substituídas em bloco) ---

def get_knowledge_areas(state: AppState) -> dict[str, Any]:
    return {"areasConhecimento": state.knowledge_areas, "bloqueiosArea": state.area_blocks}


def replace_knowledge_areas(state: AppState, areas: list[dict], blocks: list[dict]) -> dict[str, Any]:
    state.restore_areas(areas, blocks)
    return get_knowledge_areas(state)


def get_schedules(state: AppState) -> dict[str, Any]:
    return {
        "horarios": state.schedules,
        "bloqueios": state.schedule_blocks,
        "configuracaoHorario": state.schedule_config,
    }


def replace_schedules(
    state: AppState,
    schedules: list[dict],
    blocks: list[dict],
    config: Optional[dict] = None,
) -> dict[str, Any]:
    state.restore_schedules(schedules, blocks, config)
    return get_schedules(state)


def get_projects(state: AppState) -> dict[str, Any]:
    return {
        "projetos": state.projects,
        "projetoTurmas": state.project_classes,
        "projetoAtribuicoes": state.project_assignments,
    }


def replace_projects(
    state: AppState,
    projects: list[dict],
    classes: list[dict],
    assignments: list[dict],
) -> dict[str, Any]:
    state.restore_projects(projects, classes, assignments)
    return get_projects(state)
