"""
Serviço de cadastro de alunos: CRUD, responsáveis, ficha de saúde,
ocorrências, busca e resumos por turma.

Toda alteração regrava a coleção inteira de alunos (write-through).
"""

import logging
import unicodedata
from typing import Optional

from gestao_escolar.exceptions import RecordNotFoundError
from gestao_escolar.schemas.student import (
    ClassSummary,
    Guardian,
    HealthRecord,
    Incident,
    StudentCreate,
    StudentUpdate,
)
from gestao_escolar.services.app_state import AppState, new_id, now_iso
from gestao_escolar.services.student_import import calculate_age, parse_birth_date

logger = logging.getLogger(__name__)


def _fold(text: object) -> str:
    """Minúsculas sem acentos, para busca."""
    decomposed = unicodedata.normalize("NFKD", str(text or ""))
    return "".join(c for c in decomposed if not unicodedata.combining(c)).lower()


def _age_from(birth_date: object) -> int:
    return calculate_age(parse_birth_date(birth_date))


def _find_index(students: list[dict], student_id: str) -> int:
    for index, student in enumerate(students):
        if str(student.get("id")) == student_id:
            return index
    raise RecordNotFoundError("Aluno não encontrado.")


# --- Consulta ---

def list_students(
    state: AppState,
    search: Optional[str] = None,
    class_name: Optional[str] = None,
    status: Optional[str] = None,
) -> list[dict]:
    """
    Lista os alunos ordenados por turma e número de chamada.
    `search` procura no nome, RA e RM (sem diferenciar maiúsculas nem acentos).
    """
    students = state.students
    if search:
        term = _fold(search.strip())
        students = [
            s for s in students
            if term in _fold(s.get("nome")) or term in _fold(s.get("ra")) or term in _fold(s.get("rm"))
        ]
    if class_name:
        students = [s for s in students if s.get("turma") == class_name]
    if status:
        students = [s for s in students if s.get("situacao") == status]

    def sort_key(student: dict):
        call_number = student.get("numeroChamada")
        return (
            str(student.get("turma") or ""),
            call_number if isinstance(call_number, int) else 0,
            _fold(student.get("nome")),
        )

    return sorted(students, key=sort_key)


def get_student(state: AppState, student_id: str) -> dict:
    return state.students[_find_index(state.students, student_id)]


def class_summaries(state: AppState) -> list[ClassSummary]:
    """Resumo por turma: total de alunos e alunos ativos, ordenado pelo nome da turma."""
    totals: dict[str, list[int]] = {}
    for student in state.students:
        class_name = str(student.get("turma") or "")
        if not class_name:
            continue
        counters = totals.setdefault(class_name, [0, 0])
        counters[0] += 1
        if student.get("situacao", "Ativo") == "Ativo":
            counters[1] += 1

    return [
        ClassSummary(class_name=name, total_students=total, active_students=active)
        for name, (total, active) in sorted(totals.items())
    ]


def special_education_students(state: AppState) -> list[dict]:
    """Alunos público-alvo do AEE (deficiência informada)."""
    return [s for s in list_students(state) if str(s.get("deficiencia") or "").strip()]


# --- Alteração ---

def create_student(state: AppState, data: StudentCreate) -> dict:
    timestamp = now_iso()
    student = {
        **data.model_dump(by_alias=True, mode="json"),
        "id": new_id(),
        "idade": _age_from(data.birth_date),
        "responsaveis": [],
        "fichaSaude": None,
        "ocorrencias": [],
        "createdAt": timestamp,
        "updatedAt": timestamp,
    }
    state.set_students(state.students + [student])
    logger.info("Aluno cadastrado: %s (%s)", student["id"], student["turma"])
    return student


def update_student(state: AppState, student_id: str, data: StudentUpdate) -> dict:
    """Atualiza os campos enviados; a idade é recalculada se a data de nascimento mudar."""
    students = list(state.students)
    index = _find_index(students, student_id)

    changes = data.model_dump(by_alias=True, mode="json", exclude_unset=True)
    changes.pop("id", None)
    student = {**students[index], **changes, "updatedAt": now_iso()}
    if "dataNascimento" in changes:
        student["idade"] = _age_from(student["dataNascimento"])

    students[index] = student
    state.set_students(students)
    return student


def delete_student(state: AppState, student_id: str) -> None:
    students = list(state.students)
    del students[_find_index(students, student_id)]
    state.set_students(students)


def delete_all_students(state: AppState) -> int:
    count = len(state.students)
    state.set_students([])
    logger.info("Todos os alunos removidos (%d).", count)
    return count


def _update_nested(state: AppState, student_id: str, **fields) -> dict:
    students = list(state.students)
    index = _find_index(students, student_id)
    student = {**students[index], **fields, "updatedAt": now_iso()}
    students[index] = student
    state.set_students(students)
    return student


def _replace_item(items: list[dict], item_id: str, new_item: dict, not_found: str) -> list[dict]:
    for position, item in enumerate(items):
        if str(item.get("id")) == item_id:
            result = list(items)
            result[position] = new_item
            return result
    raise RecordNotFoundError(not_found)


def _remove_item(items: list[dict], item_id: str, not_found: str) -> list[dict]:
    result = [item for item in items if str(item.get("id")) != item_id]
    if len(result) == len(items):
        raise RecordNotFoundError(not_found)
    return result


# --- Responsáveis ---

def add_guardian(state: AppState, student_id: str, data: Guardian) -> dict:
    student = get_student(state, student_id)
    guardian = {**data.model_dump(by_alias=True, mode="json"), "id": new_id()}
    return _update_nested(
        state, student_id,
        responsaveis=list(student.get("responsaveis") or []) + [guardian],
    )


def update_guardian(state: AppState, student_id: str, guardian_id: str, data: Guardian) -> dict:
    student = get_student(state, student_id)
    guardian = {**data.model_dump(by_alias=True, mode="json"), "id": guardian_id}
    guardians = _replace_item(
        list(student.get("responsaveis") or []), guardian_id, guardian, "Responsável não encontrado.",
    )
    return _update_nested(state, student_id, responsaveis=guardians)


def remove_guardian(state: AppState, student_id: str, guardian_id: str) -> dict:
    student = get_student(state, student_id)
    guardians = _remove_item(list(student.get("responsaveis") or []), guardian_id, "Responsável não encontrado.")
    return _update_nested(state, student_id, responsaveis=guardians)


# --- Ficha de saúde ---

def set_health_record(state: AppState, student_id: str, data: HealthRecord) -> dict:
    return _update_nested(state, student_id, fichaSaude=data.model_dump(by_alias=True, mode="json"))


def remove_health_record(state: AppState, student_id: str) -> dict:
    return _update_nested(state, student_id, fichaSaude=None)


# --- Ocorrências ---

def add_incident(state: AppState, student_id: str, data: Incident) -> dict:
    student = get_student(state, student_id)
    incident = {**data.model_dump(by_alias=True, mode="json"), "id": new_id()}
    return _update_nested(
        state, student_id,
        ocorrencias=list(student.get("ocorrencias") or []) + [incident],
    )


def update_incident(state: AppState, student_id: str, incident_id: str, data: Incident) -> dict:
    student = get_student(state, student_id)
    incident = {**data.model_dump(by_alias=True, mode="json"), "id": incident_id}
    incidents = _replace_item(
        list(student.get("ocorrencias") or []), incident_id, incident, "Ocorrência não encontrada.",
    )
    return _update_nested(state, student_id, ocorrencias=incidents)


def remove_incident(state: AppState, student_id: str, incident_id: str) -> dict:
    student = get_student(state, student_id)
    incidents = _remove_item(list(student.get("ocorrencias") or []), incident_id, "Ocorrência não encontrada.")
    return _update_nested(state, student_id, ocorrencias=incidents)
