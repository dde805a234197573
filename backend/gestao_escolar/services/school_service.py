"""
Serviço do cadastro da escola (registro único, nunca removido).
"""

import copy
import logging

from gestao_escolar.schemas.school import School
from gestao_escolar.services.app_state import AppState, new_id

logger = logging.getLogger(__name__)

EMPTY_SCHOOL: dict = School().model_dump(by_alias=True, mode="json")


def _deep_merge(base: dict, override: dict) -> dict:
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def get_school(state: AppState) -> dict:
    """
    Cadastro atual mesclado sobre o cadastro vazio: campos aninhados
    ausentes (endereço, AEE, infraestrutura) voltam com o valor padrão.
    """
    return _deep_merge(EMPTY_SCHOOL, state.school or {})


def save_school(state: AppState, data: School) -> dict:
    """Sobrescreve o cadastro inteiro; gera ids para projetos e anos/séries novos."""
    school = data.model_dump(by_alias=True, mode="json")
    for key in ("projetos", "anosSeries"):
        school[key] = [
            item if item.get("id") else {**item, "id": new_id()}
            for item in school[key]
        ]
    state.set_school(school)
    logger.info("Cadastro da escola salvo: %s", school["nome"] or "(sem nome)")
    return get_school(state)
