"""
Schemas pydantic dos cadastros simples: docentes, servidores,
atribuições de aulas e eventos do calendário escolar.
"""

from datetime import date
from typing import Any, List, Optional

from pydantic import EmailStr, Field, field_validator

from gestao_escolar.schemas.student import RecordModel, _empty_email_to_none

VALID_EVENT_TYPES = ("feriado", "reuniao", "evento", "recesso", "conselho", "formacao", "outro")


def _not_blank(v: Optional[str], message: str) -> Optional[str]:
    if v is not None and not v.strip():
        raise ValueError(message)
    return v.strip() if v else v


# --- Docentes ---

class TeacherCreate(RecordModel):
    name: str = Field(alias="nome")
    cpf: str = ""
    email: Optional[EmailStr] = None
    phone: str = Field("", alias="telefone")
    subjects: List[str] = Field(default_factory=list, alias="disciplinas")
    category: str = Field("", alias="categoria")
    weekly_hours: int = Field(0, ge=0, alias="cargaHoraria")
    active: bool = Field(True, alias="ativo")
    notes: str = Field("", alias="observacoes")

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        return _not_blank(v, "O nome do docente é obrigatório.")

    @field_validator("email", mode="before")
    @classmethod
    def empty_email(cls, v):
        return _empty_email_to_none(v)


class TeacherUpdate(RecordModel):
    name: Optional[str] = Field(None, alias="nome")
    cpf: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, alias="telefone")
    subjects: Optional[List[str]] = Field(None, alias="disciplinas")
    category: Optional[str] = Field(None, alias="categoria")
    weekly_hours: Optional[int] = Field(None, ge=0, alias="cargaHoraria")
    active: Optional[bool] = Field(None, alias="ativo")
    notes: Optional[str] = Field(None, alias="observacoes")

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return _not_blank(v, "O nome do docente é obrigatório.")

    @field_validator("email", mode="before")
    @classmethod
    def empty_email(cls, v):
        return _empty_email_to_none(v)


# --- Servidores ---

class StaffCreate(RecordModel):
    name: str = Field(alias="nome")
    cpf: str = ""
    role: str = Field("", alias="cargo")
    function: str = Field("", alias="funcao")
    shift: str = Field("", alias="turno")
    email: Optional[EmailStr] = None
    phone: str = Field("", alias="telefone")
    active: bool = Field(True, alias="ativo")
    notes: str = Field("", alias="observacoes")

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        return _not_blank(v, "O nome do servidor é obrigatório.")

    @field_validator("email", mode="before")
    @classmethod
    def empty_email(cls, v):
        return _empty_email_to_none(v)


class StaffUpdate(RecordModel):
    name: Optional[str] = Field(None, alias="nome")
    cpf: Optional[str] = None
    role: Optional[str] = Field(None, alias="cargo")
    function: Optional[str] = Field(None, alias="funcao")
    shift: Optional[str] = Field(None, alias="turno")
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, alias="telefone")
    active: Optional[bool] = Field(None, alias="ativo")
    notes: Optional[str] = Field(None, alias="observacoes")

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return _not_blank(v, "O nome do servidor é obrigatório.")

    @field_validator("email", mode="before")
    @classmethod
    def empty_email(cls, v):
        return _empty_email_to_none(v)


# --- Atribuições (docente × turma × disciplina × aulas semanais) ---

class AssignmentCreate(RecordModel):
    teacher: str = Field(alias="docente")
    class_name: str = Field(alias="turma")
    subject: str = Field(alias="disciplina")
    weekly_classes: int = Field(ge=0, alias="aulas")

    @field_validator("teacher", "class_name", "subject")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _not_blank(v, "Docente, turma e disciplina são obrigatórios.")


class AssignmentUpdate(RecordModel):
    teacher: Optional[str] = Field(None, alias="docente")
    class_name: Optional[str] = Field(None, alias="turma")
    subject: Optional[str] = Field(None, alias="disciplina")
    weekly_classes: Optional[int] = Field(None, ge=0, alias="aulas")

    @field_validator("teacher", "class_name", "subject")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        return _not_blank(v, "Docente, turma e disciplina são obrigatórios.")


# --- Calendário escolar ---

class CalendarEventCreate(RecordModel):
    title: str = Field(alias="titulo")
    event_date: date = Field(alias="data")
    type: str = Field("evento", alias="tipo")
    description: Optional[str] = Field(None, alias="descricao")
    color: Optional[str] = Field(None, alias="cor")

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: str) -> str:
        return _not_blank(v, "O título do evento é obrigatório.")

    @field_validator("type")
    @classmethod
    def valid_type(cls, v: str) -> str:
        if v not in VALID_EVENT_TYPES:
            raise ValueError(f"Tipo de evento inválido. Valores aceitos: {', '.join(VALID_EVENT_TYPES)}")
        return v


class CalendarEventUpdate(RecordModel):
    title: Optional[str] = Field(None, alias="titulo")
    event_date: Optional[date] = Field(None, alias="data")
    type: Optional[str] = Field(None, alias="tipo")
    description: Optional[str] = Field(None, alias="descricao")
    color: Optional[str] = Field(None, alias="cor")

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return _not_blank(v, "O título do evento é obrigatório.")

    @field_validator("type")
    @classmethod
    def valid_type(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in VALID_EVENT_TYPES:
            raise ValueError(f"Tipo de evento inválido. Valores aceitos: {', '.join(VALID_EVENT_TYPES)}")
        return v


class RegistryRecord(RecordModel):
    """Registro genérico tal como gravado (resposta dos cadastros simples)."""
    id: Any

