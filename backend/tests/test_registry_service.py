"""
Testes unitários dos cadastros simples (docentes, servidores, atribuições,
calendário) e das coleções gravadas em bloco.
"""

import pytest
from pydantic import ValidationError

from gestao_escolar.exceptions import RecordNotFoundError
from gestao_escolar.schemas.registry import (
    AssignmentCreate,
    CalendarEventCreate,
    StaffCreate,
    TeacherCreate,
    TeacherUpdate,
)
from gestao_escolar.services import registry_service
from gestao_escolar.services.app_state import AppState
from gestao_escolar.services.registry_service import ASSIGNMENTS, CALENDAR_EVENTS, STAFF, TEACHERS


# --- CRUD genérico ---

def test_criar_e_listar_docentes(state, db):
    teacher = registry_service.create_record(
        state, TEACHERS, TeacherCreate(nome="Maria Souza", disciplinas=["Arte"], email=""),
    )

    assert teacher["id"]
    assert teacher["email"] is None
    assert registry_service.list_records(AppState(db), TEACHERS) == [teacher]


def test_atualizacao_parcial_de_docente(state):
    teacher = registry_service.create_record(state, TEACHERS, TeacherCreate(nome="Maria", cargaHoraria=20))

    updated = registry_service.update_record(state, TEACHERS, teacher["id"], TeacherUpdate(ativo=False))

    assert updated["ativo"] is False
    assert updated["cargaHoraria"] == 20
    assert updated["id"] == teacher["id"]


def test_remover_servidor(state):
    staff = registry_service.create_record(state, STAFF, StaffCreate(nome="José", cargo="Inspetor"))

    registry_service.delete_record(state, STAFF, staff["id"])

    assert state.staff == []
    with pytest.raises(RecordNotFoundError):
        registry_service.get_record(state, STAFF, staff["id"])


def test_atribuicao_exige_campos():
    with pytest.raises(ValidationError):
        AssignmentCreate(docente="Maria", turma=" ", disciplina="Arte", aulas=2)
    with pytest.raises(ValidationError):
        AssignmentCreate(docente="Maria", turma="6A", disciplina="Arte", aulas=-1)


def test_atribuicao_gravada(state, db):
    registry_service.create_record(
        state, ASSIGNMENTS, AssignmentCreate(docente="Maria", turma="6A", disciplina="Arte", aulas=2),
    )

    assignment = AppState(db).assignments[0]
    assert assignment["docente"] == "Maria"
    assert assignment["aulas"] == 2


# --- Calendário ---

def test_eventos_por_mes(state):
    for title, day in (("Conselho", "2024-04-10"), ("Feriado", "2024-04-01"), ("Reunião", "2024-05-02")):
        registry_service.create_record(
            state, CALENDAR_EVENTS, CalendarEventCreate(titulo=title, data=day, tipo="evento"),
        )

    april = registry_service.list_calendar_events(state, 2024, 4)

    assert [e["titulo"] for e in april] == ["Feriado", "Conselho"]
    assert april[0]["data"] == "2024-04-01"
    assert len(registry_service.list_calendar_events(state)) == 3


def test_tipo_de_evento_invalido():
    with pytest.raises(ValidationError):
        CalendarEventCreate(titulo="Festa", data="2024-06-20", tipo="festa")


# --- Coleções em bloco ---

def test_substituir_areas(state, db):
    result = registry_service.replace_knowledge_areas(state, [{"nome": "Linguagens"}], [{"dia": "seg"}])

    assert result["areasConhecimento"][0]["nome"] == "Linguagens"
    assert result["areasConhecimento"][0]["id"]
    assert AppState(db).area_blocks == [{"dia": "seg"}]


def test_substituir_projetos(state):
    registry_service.replace_projects(state, [{"id": "p1"}], [{"id": "t1"}], [])

    result = registry_service.replace_projects(state, [{"id": "p2"}], [], [])

    assert result == {"projetos": [{"id": "p2"}], "projetoTurmas": [], "projetoAtribuicoes": []}
