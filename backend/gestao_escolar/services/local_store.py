"""
Armazenamento durável das coleções: uma chave por coleção.

Leitura: o JSON gravado é desserializado; ausência ou conteúdo corrompido
retornam a coleção vazia (com um aviso no log).
Escrita: a coleção inteira é serializada e gravada de uma vez sob sua chave.
A menor unidade de consistência é portanto "uma coleção completa": duas
coleções nunca são gravadas na mesma transação.
"""

import copy
import json
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gestao_escolar.exceptions import StorageError
from gestao_escolar.models.storage import StorageEntry

logger = logging.getLogger(__name__)

# Chaves de armazenamento (mesmos nomes usados pela versão navegador)
SCHOOL_KEY = "escola-cadastro"
STUDENTS_KEY = "alunos"
TEACHERS_KEY = "docentes"
STAFF_KEY = "servidores"
ASSIGNMENTS_KEY = "atribuicoes"
CALENDAR_KEY = "calendario_eventos"
AREAS_KEY = "areas_conhecimento"
AREA_BLOCKS_KEY = "bloqueios_area"
SCHEDULES_KEY = "horarios"
SCHEDULE_BLOCKS_KEY = "bloqueios"
SCHEDULE_CONFIG_KEY = "configuracao_horario"
PROJECTS_KEY = "projetos"
PROJECT_CLASSES_KEY = "projeto_turmas"
PROJECT_ASSIGNMENTS_KEY = "projeto_atribuicoes"

# Valor padrão de cada coleção quando a chave está ausente ou ilegível
STORAGE_DEFAULTS: dict[str, Any] = {
    SCHOOL_KEY: None,
    STUDENTS_KEY: [],
    TEACHERS_KEY: [],
    STAFF_KEY: [],
    ASSIGNMENTS_KEY: [],
    CALENDAR_KEY: [],
    AREAS_KEY: [],
    AREA_BLOCKS_KEY: [],
    SCHEDULES_KEY: [],
    SCHEDULE_BLOCKS_KEY: [],
    SCHEDULE_CONFIG_KEY: None,
    PROJECTS_KEY: [],
    PROJECT_CLASSES_KEY: [],
    PROJECT_ASSIGNMENTS_KEY: [],
}


def _default_for(key: str) -> Any:
    if key not in STORAGE_DEFAULTS:
        raise KeyError(f"Chave de armazenamento desconhecida: {key}")
    # cópia para que o chamador nunca altere o valor padrão compartilhado
    return copy.deepcopy(STORAGE_DEFAULTS[key])


def load_collection(db: Session, key: str) -> Any:
    """
    Lê a coleção gravada sob `key`.
    Retorna o valor padrão da coleção se a chave não existe ou se o JSON é inválido.
    """
    default = _default_for(key)
    entry = db.get(StorageEntry, key)
    if entry is None:
        return default

    try:
        return json.loads(entry.value)
    except (TypeError, ValueError):
        logger.warning("Conteúdo ilegível na chave '%s', coleção vazia utilizada.", key)
        return default


def save_collection(db: Session, key: str, value: Any) -> None:
    """
    Serializa a coleção inteira e a grava sob `key` (commit imediato).
    Levanta StorageError se a gravação falhar; não há nova tentativa.
    """
    _default_for(key)
    payload = json.dumps(value, ensure_ascii=False)

    try:
        entry = db.get(StorageEntry, key)
        if entry is None:
            db.add(StorageEntry(key=key, value=payload))
        else:
            entry.value = payload
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Falha ao gravar a chave '%s': %s", key, exc)
        raise StorageError(f"Não foi possível gravar a coleção '{key}'.") from exc

    logger.debug("Coleção '%s' gravada (%d bytes).", key, len(payload))
