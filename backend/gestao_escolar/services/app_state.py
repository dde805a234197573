"""
Coordenador do estado da aplicação.

Um AppState por unidade de trabalho (requisição HTTP, job agendado): ele
detém o valor em memória de cada coleção, carregado sob demanda a partir do
armazenamento, e toda alteração passa por um setter que regrava a coleção
inteira (write-through).

Os métodos restore_* são os pontos de substituição em bloco chamados pela
restauração de backup: um por família de entidades.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.orm import Session

from gestao_escolar.services import local_store

logger = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


def now_iso() -> str:
    """Timestamp UTC no formato ISO-8601 com milissegundos e sufixo Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def with_ids(records: list[dict]) -> list[dict]:
    """Copia os registros, gerando um id para os que não têm."""
    result = []
    for record in records:
        record = dict(record)
        if not record.get("id"):
            record["id"] = new_id()
        result.append(record)
    return result


class AppState:
    def __init__(self, db: Session):
        self.db = db
        self._cache: dict[str, Any] = {}

    def _get(self, key: str) -> Any:
        if key not in self._cache:
            self._cache[key] = local_store.load_collection(self.db, key)
        return self._cache[key]

    def _set(self, key: str, value: Any) -> None:
        local_store.save_collection(self.db, key, value)
        self._cache[key] = value

    # --- Leitura ---

    @property
    def school(self) -> Optional[dict]:
        return self._get(local_store.SCHOOL_KEY)

    @property
    def students(self) -> list[dict]:
        return self._get(local_store.STUDENTS_KEY)

    @property
    def teachers(self) -> list[dict]:
        return self._get(local_store.TEACHERS_KEY)

    @property
    def staff(self) -> list[dict]:
        return self._get(local_store.STAFF_KEY)

    @property
    def assignments(self) -> list[dict]:
        return self._get(local_store.ASSIGNMENTS_KEY)

    @property
    def calendar_events(self) -> list[dict]:
        return self._get(local_store.CALENDAR_KEY)

    @property
    def knowledge_areas(self) -> list[dict]:
        return self._get(local_store.AREAS_KEY)

    @property
    def area_blocks(self) -> list[dict]:
        return self._get(local_store.AREA_BLOCKS_KEY)

    @property
    def schedules(self) -> list[dict]:
        return self._get(local_store.SCHEDULES_KEY)

    @property
    def schedule_blocks(self) -> list[dict]:
        return self._get(local_store.SCHEDULE_BLOCKS_KEY)

    @property
    def schedule_config(self) -> Optional[dict]:
        return self._get(local_store.SCHEDULE_CONFIG_KEY)

    @property
    def projects(self) -> list[dict]:
        return self._get(local_store.PROJECTS_KEY)

    @property
    def project_classes(self) -> list[dict]:
        return self._get(local_store.PROJECT_CLASSES_KEY)

    @property
    def project_assignments(self) -> list[dict]:
        return self._get(local_store.PROJECT_ASSIGNMENTS_KEY)

    def snapshot(self) -> dict[str, Any]:
        """Valor atual de todas as coleções (usado pela exportação)."""
        return {
            "school": self.school,
            "teachers": self.teachers,
            "students": self.students,
            "staff": self.staff,
            "assignments": self.assignments,
            "knowledge_areas": self.knowledge_areas,
            "area_blocks": self.area_blocks,
            "schedules": self.schedules,
            "schedule_blocks": self.schedule_blocks,
            "schedule_config": self.schedule_config,
            "projects": self.projects,
            "project_classes": self.project_classes,
            "project_assignments": self.project_assignments,
            "calendar_events": self.calendar_events,
        }

    # --- Setters (uso interno dos serviços) ---

    def set_school(self, school: dict) -> None:
        self._set(local_store.SCHOOL_KEY, school)

    def set_students(self, students: list[dict]) -> None:
        self._set(local_store.STUDENTS_KEY, students)

    def set_teachers(self, teachers: list[dict]) -> None:
        self._set(local_store.TEACHERS_KEY, teachers)

    def set_staff(self, staff: list[dict]) -> None:
        self._set(local_store.STAFF_KEY, staff)

    def set_assignments(self, assignments: list[dict]) -> None:
        self._set(local_store.ASSIGNMENTS_KEY, assignments)

    def set_calendar_events(self, events: list[dict]) -> None:
        self._set(local_store.CALENDAR_KEY, events)

    # --- Substituição em bloco (restauração de backup) ---

    def restore_school(self, school: dict) -> None:
        self.set_school(dict(school))

    def restore_students(self, students: list[dict]) -> None:
        self.set_students(with_ids(students))

    def restore_teachers(self, teachers: list[dict]) -> None:
        self.set_teachers(with_ids(teachers))

    def restore_staff(self, staff: list[dict]) -> None:
        self.set_staff(with_ids(staff))

    def restore_assignments(self, assignments: list[dict]) -> None:
        """Os ids das atribuições não viajam no backup: sempre regenerados."""
        self.set_assignments(
            [{**{k: v for k, v in a.items() if k != "id"}, "id": new_id()} for a in assignments]
        )

    def restore_areas(self, areas: list[dict], blocks: list[dict]) -> None:
        self._set(local_store.AREAS_KEY, with_ids(areas))
        self._set(local_store.AREA_BLOCKS_KEY, list(blocks))

    def restore_schedules(
        self,
        schedules: list[dict],
        blocks: list[dict],
        config: Optional[dict] = None,
    ) -> None:
        """Sem configuração no backup, a configuração gravada é mantida."""
        self._set(local_store.SCHEDULES_KEY, with_ids(schedules))
        self._set(local_store.SCHEDULE_BLOCKS_KEY, list(blocks))
        if config is not None:
            self._set(local_store.SCHEDULE_CONFIG_KEY, dict(config))

    def restore_projects(
        self,
        projects: list[dict],
        classes: list[dict],
        assignments: list[dict],
    ) -> None:
        self._set(local_store.PROJECTS_KEY, with_ids(projects))
        self._set(local_store.PROJECT_CLASSES_KEY, with_ids(classes))
        self._set(local_store.PROJECT_ASSIGNMENTS_KEY, with_ids(assignments))

    def restore_calendar(self, events: list[dict]) -> None:
        self.set_calendar_events(with_ids(events))
