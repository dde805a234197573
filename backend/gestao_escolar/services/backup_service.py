"""
Backup completo do sistema: exportação, validação e restauração.

Exportação: um único documento JSON versionado com todas as coleções.
Importação: o arquivo é validado e fica pendente até confirmação explícita.
Nada é aplicado automaticamente.
Restauração: cada coleção presente e não vazia substitui integralmente a
coleção gravada; coleções ausentes do documento não são tocadas.

A leitura passa por uma cadeia de parsers versionados, tentados em ordem.
Cada um devolve o documento normalizado ou recusa (None):
1. formato atual (3.0 e versões futuras, tratadas da mesma forma);
2. formato antigo 1.0: lista genérica `data` de atribuições.
"""

import json
import logging
import math
import re
import threading
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from pydantic import ValidationError

from gestao_escolar.config import settings
from gestao_escolar.exceptions import FileFormatError, NoValidDataError, RecordNotFoundError
from gestao_escolar.schemas.backup import (
    BACKUP_FORMAT_VERSION,
    BackupDocument,
    BackupSummary,
    PendingImportResponse,
    RestoreResult,
)
from gestao_escolar.services.app_state import AppState

logger = logging.getLogger(__name__)

# Campos de coleção reconhecidos no documento
COLLECTION_FIELDS = (
    "escola",
    "docentes",
    "alunos",
    "servidores",
    "atribuicoes",
    "areasConhecimento",
    "bloqueiosArea",
    "horarios",
    "bloqueios",
    "configuracaoHorario",
    "projetos",
    "projetoTurmas",
    "projetoAtribuicoes",
    "eventosCalendario",
)

LEGACY_ASSIGNMENT_FIELDS = ("docente", "turma", "disciplina")
MAX_PENDING_IMPORTS = 20

INVALID_FILE_MESSAGE = "Arquivo inválido: estrutura de dados não reconhecida."
NO_DATA_MESSAGE = "Nenhum dado válido encontrado no arquivo."


# ============================================================
# Exportação
# ============================================================

def _iso_utc(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def backup_filename(school: Optional[dict], day: date) -> str:
    """
    backup-<nome-da-escola>-<AAAA-MM-DD>.json, ou backup-completo-<data>.json
    quando a escola não tem nome.
    """
    name = ((school or {}).get("nome") or "").strip()
    if name:
        slug = re.sub(r"\s+", "-", name.lower())
        return f"backup-{slug}-{day.isoformat()}.json"
    return f"backup-completo-{day.isoformat()}.json"


def build_backup_document(state: AppState, exported_at: Optional[datetime] = None) -> dict[str, Any]:
    """Monta o documento de backup a partir do estado atual."""
    exported_at = exported_at or datetime.now(timezone.utc)
    snapshot = state.snapshot()
    school = snapshot["school"]

    # os ids das atribuições não são exportados: regenerados na importação
    assignments = [
        {k: v for k, v in a.items() if k != "id"}
        for a in snapshot["assignments"]
    ]

    return {
        "version": BACKUP_FORMAT_VERSION,
        "exportDate": _iso_utc(exported_at),
        "schoolName": (school or {}).get("nome") or settings.DEFAULT_SCHOOL_NAME,
        "escola": school,
        "docentes": snapshot["teachers"],
        "totalDocentes": len(snapshot["teachers"]),
        "alunos": snapshot["students"],
        "totalAlunos": len(snapshot["students"]),
        "servidores": snapshot["staff"],
        "totalServidores": len(snapshot["staff"]),
        "atribuicoes": assignments,
        "totalAtribuicoes": len(assignments),
        "areasConhecimento": snapshot["knowledge_areas"],
        "bloqueiosArea": snapshot["area_blocks"],
        "horarios": snapshot["schedules"],
        "bloqueios": snapshot["schedule_blocks"],
        "configuracaoHorario": snapshot["schedule_config"],
        "projetos": snapshot["projects"],
        "projetoTurmas": snapshot["project_classes"],
        "projetoAtribuicoes": snapshot["project_assignments"],
        "eventosCalendario": snapshot["calendar_events"],
    }


def export_backup(state: AppState, exported_at: Optional[datetime] = None) -> tuple[dict[str, Any], str]:
    """Retorna (documento, nome do arquivo para download)."""
    exported_at = exported_at or datetime.now(timezone.utc)
    document = build_backup_document(state, exported_at)
    filename = backup_filename(state.school, exported_at.date())

    logger.info(
        "Backup exportado: %d alunos, %d docentes, %d servidores, %d atribuições",
        document["totalAlunos"], document["totalDocentes"],
        document["totalServidores"], document["totalAtribuicoes"],
    )
    return document, filename


# ============================================================
# Resumo
# ============================================================

def _summarize(
    school: Optional[dict],
    teachers: list,
    students: list,
    staff: list,
    assignments: list,
    areas: list,
    schedules: list,
    projects: list,
    events: list,
) -> BackupSummary:
    students = [s for s in students if isinstance(s, dict)]
    return BackupSummary(
        school=bool(school and school.get("nome")),
        teachers=len(teachers),
        students=len(students),
        staff=len(staff),
        guardians=sum(len(s.get("responsaveis") or []) for s in students),
        health_records=sum(1 for s in students if s.get("fichaSaude")),
        incidents=sum(len(s.get("ocorrencias") or []) for s in students),
        assignments=len(assignments),
        knowledge_areas=len(areas),
        schedules=len(schedules),
        projects=len(projects),
        calendar_events=len(events),
    )


def summarize_document(document: BackupDocument) -> BackupSummary:
    return _summarize(
        document.escola,
        document.docentes or [],
        document.alunos or [],
        document.servidores or [],
        document.atribuicoes or [],
        document.areasConhecimento or [],
        document.horarios or [],
        document.projetos or [],
        document.eventosCalendario or [],
    )


def summarize_state(state: AppState) -> BackupSummary:
    return _summarize(
        state.school,
        state.teachers,
        state.students,
        state.staff,
        state.assignments,
        state.knowledge_areas,
        state.schedules,
        state.projects,
        state.calendar_events,
    )


# ============================================================
# Validação (cadeia de parsers versionados)
# ============================================================

def has_recognized_data(document: BackupDocument) -> bool:
    """Verdadeiro se ao menos uma coleção reconhecida contém dados."""
    return any(getattr(document, name) for name in COLLECTION_FIELDS)


def _is_legacy_assignment(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    if not all(item.get(field) for field in LEGACY_ASSIGNMENT_FIELDS):
        return False
    aulas = item.get("aulas")
    return isinstance(aulas, (int, float)) and not isinstance(aulas, bool)


def _parse_current(document: BackupDocument) -> Optional[BackupDocument]:
    """Formato 3.0; versões desconhecidas são lidas da mesma forma."""
    if not has_recognized_data(document):
        return None
    if document.version != BACKUP_FORMAT_VERSION:
        logger.info("Backup versão %s lido como versão %s.", document.version, BACKUP_FORMAT_VERSION)
    return document


def _parse_legacy_v1(document: BackupDocument) -> Optional[BackupDocument]:
    """Formato 1.0: só as entradas {docente, turma, disciplina, aulas} completas."""
    if not isinstance(document.data, list):
        return None

    valid = [item for item in document.data if _is_legacy_assignment(item)]
    if not valid:
        return None

    logger.info(
        "Backup no formato antigo: %d atribuições válidas de %d entradas.",
        len(valid), len(document.data),
    )
    return document.model_copy(update={"atribuicoes": valid, "totalAtribuicoes": len(valid)})


BACKUP_PARSERS: tuple[tuple[str, Callable[[BackupDocument], Optional[BackupDocument]]], ...] = (
    ("3.0", _parse_current),
    ("1.0", _parse_legacy_v1),
)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Valor JSON não padrão: {name}")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"Número fora do intervalo: {text}")
    return value


def decode_backup(content: bytes) -> tuple[BackupDocument, str]:
    """
    Lê e valida um arquivo de backup.

    Retorna (documento normalizado, formato reconhecido).
    Levanta FileFormatError se o JSON é ilegível (NaN e Infinity incluídos)
    ou sem `version`,
    NoValidDataError se nenhuma coleção reconhecida contém dados.
    """
    try:
        raw = json.loads(
            content.decode("utf-8-sig"), parse_constant=_reject_constant, parse_float=_finite_float,
        )
    except (UnicodeDecodeError, ValueError) as exc:
        logger.warning("Backup ilegível: %s", exc)
        raise FileFormatError("Erro ao ler o arquivo. Verifique se é um arquivo de backup válido.") from exc

    if not isinstance(raw, dict) or not raw.get("version"):
        raise FileFormatError(INVALID_FILE_MESSAGE)

    raw = {**raw, "version": str(raw["version"])}
    try:
        document = BackupDocument.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Estrutura de backup inválida: %s", exc)
        raise FileFormatError(INVALID_FILE_MESSAGE) from exc

    for format_name, parser in BACKUP_PARSERS:
        parsed = parser(document)
        if parsed is not None:
            return parsed, format_name

    raise NoValidDataError(NO_DATA_MESSAGE)


# ============================================================
# Importações pendentes
# ============================================================

@dataclass
class PendingImport:
    token: uuid.UUID
    document: BackupDocument
    format_name: str
    received_at: datetime


class PendingImports:
    """
    Backups validados aguardando confirmação, mantidos em memória.
    Só os MAX_PENDING_IMPORTS mais recentes são conservados.
    """

    def __init__(self, max_items: int = MAX_PENDING_IMPORTS):
        self.max_items = max_items
        self._items: dict[uuid.UUID, PendingImport] = {}
        self._lock = threading.Lock()

    def add(self, document: BackupDocument, format_name: str) -> PendingImport:
        pending = PendingImport(
            token=uuid.uuid4(),
            document=document,
            format_name=format_name,
            received_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._items[pending.token] = pending
            while len(self._items) > self.max_items:
                oldest = next(iter(self._items))
                del self._items[oldest]
                logger.debug("Importação pendente descartada (limite): %s", oldest)
        return pending

    def get(self, token: uuid.UUID) -> Optional[PendingImport]:
        with self._lock:
            return self._items.get(token)

    def pop(self, token: uuid.UUID) -> Optional[PendingImport]:
        with self._lock:
            return self._items.pop(token, None)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()


pending_imports = PendingImports()


def _as_optional_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _to_response(pending: PendingImport) -> PendingImportResponse:
    document = pending.document
    return PendingImportResponse(
        token=pending.token,
        version=document.version,
        export_date=_as_optional_text(document.exportDate),
        school_name=_as_optional_text(document.schoolName),
        legacy_format=pending.format_name != BACKUP_FORMAT_VERSION,
        summary=summarize_document(document),
    )


def stage_import(content: bytes) -> PendingImportResponse:
    """Valida o arquivo e o guarda como importação pendente."""
    document, format_name = decode_backup(content)
    pending = pending_imports.add(document, format_name)
    logger.info(
        "Backup validado (formato %s, versão %s), aguardando confirmação %s",
        format_name, document.version, pending.token,
    )
    return _to_response(pending)


def get_pending_import(token: uuid.UUID) -> PendingImportResponse:
    pending = pending_imports.get(token)
    if pending is None:
        raise RecordNotFoundError("Importação pendente não encontrada.")
    return _to_response(pending)


def discard_import(token: uuid.UUID) -> bool:
    """Cancela uma importação pendente. Retorna False se o token não existe."""
    return pending_imports.pop(token) is not None


# ============================================================
# Restauração
# ============================================================

def apply_backup(state: AppState, document: BackupDocument) -> RestoreResult:
    """
    Substitui cada família de coleções presente e não vazia no documento.
    Não é atômico entre famílias: cada coleção é gravada separadamente.
    """
    restored: list[str] = []

    if document.escola:
        state.restore_school(document.escola)
        restored.append("escola")

    if document.docentes:
        state.restore_teachers(document.docentes)
        restored.append("docentes")

    if document.alunos:
        state.restore_students(document.alunos)
        restored.append("alunos")

    if document.servidores:
        state.restore_staff(document.servidores)
        restored.append("servidores")

    if document.atribuicoes:
        state.restore_assignments(document.atribuicoes)
        restored.append("atribuicoes")

    if document.areasConhecimento or document.bloqueiosArea:
        state.restore_areas(document.areasConhecimento or [], document.bloqueiosArea or [])
        restored.append("areasConhecimento")

    if document.horarios or document.bloqueios or document.configuracaoHorario:
        state.restore_schedules(
            document.horarios or [],
            document.bloqueios or [],
            document.configuracaoHorario or None,
        )
        restored.append("horarios")

    if document.projetos or document.projetoTurmas or document.projetoAtribuicoes:
        state.restore_projects(
            document.projetos or [],
            document.projetoTurmas or [],
            document.projetoAtribuicoes or [],
        )
        restored.append("projetos")

    if document.eventosCalendario:
        state.restore_calendar(document.eventosCalendario)
        restored.append("eventosCalendario")

    logger.info("Backup restaurado: %s", ", ".join(restored) or "nada")
    return RestoreResult(restored=restored, reload_required=True)


def confirm_import(state: AppState, token: uuid.UUID) -> RestoreResult:
    """Aplica uma importação pendente; o token é consumido."""
    pending = pending_imports.pop(token)
    if pending is None:
        raise RecordNotFoundError("Importação pendente não encontrada.")
    return apply_backup(state, pending.document)
