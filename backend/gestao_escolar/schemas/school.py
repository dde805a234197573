"""
Schemas pydantic do cadastro da escola (registro único por instalação).
"""

from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from gestao_escolar.schemas.student import RecordModel, _empty_email_to_none

EDUCATION_LEVELS = ("educacao_infantil", "fundamental_1", "fundamental_2", "medio", "eja", "profissional")
SHIFT_TYPES = ("manha", "tarde", "noite", "integral")
PROJECT_ORIGINS = ("federal", "estadual", "municipal", "proprio")
DISABILITY_CATEGORIES = (
    "visual_cegueira", "visual_baixa_visao", "auditiva_surdez", "auditiva_hipoacusia",
    "fisica", "intelectual", "tea", "altas_habilidades", "deficiencia_multipla", "tgd",
)


class Address(RecordModel):
    street: str = Field("", alias="logradouro")
    number: str = Field("", alias="numero")
    complement: str = Field("", alias="complemento")
    district: str = Field("", alias="bairro")
    city: str = Field("", alias="cidade")
    state: str = Field("", alias="uf")
    zip_code: str = Field("", alias="cep")


class GradeLevel(RecordModel):
    """Par tipo de ensino / ano-série oferecido (ex.: fundamental_2 / "6º ano")."""
    id: Optional[str] = None
    name: str = Field(alias="nome")
    education_level: str = Field(alias="tipoEnsino")
    active: bool = Field(True, alias="ativo")

    @field_validator("education_level")
    @classmethod
    def valid_level(cls, v: str) -> str:
        if v not in EDUCATION_LEVELS:
            raise ValueError(f"Tipo de ensino inválido: {v}")
        return v


class Shift(RecordModel):
    type: str = Field(alias="tipo")
    active: bool = Field(True, alias="ativo")
    start_time: str = Field("", alias="horaInicio")
    end_time: str = Field("", alias="horaFim")

    @field_validator("type")
    @classmethod
    def valid_type(cls, v: str) -> str:
        if v not in SHIFT_TYPES:
            raise ValueError(f"Turno inválido: {v}")
        return v


class SpecialEducation(RecordModel):
    """Perfil AEE (atendimento educacional especializado)."""
    available: bool = Field(False, alias="possui")
    resource_room: bool = Field(False, alias="salaRecursos")
    resource_room_count: int = Field(0, ge=0, alias="salaRecursosQuantidade")
    categories_served: List[str] = Field(default_factory=list, alias="deficienciasAtendidas")
    professionals: int = Field(0, ge=0, alias="profissionaisAEE")
    notes: str = Field("", alias="observacoes")

    @field_validator("categories_served")
    @classmethod
    def valid_categories(cls, v: List[str]) -> List[str]:
        unknown = [c for c in v if c not in DISABILITY_CATEGORIES]
        if unknown:
            raise ValueError(f"Deficiências desconhecidas: {', '.join(unknown)}")
        return v


class SchoolProject(RecordModel):
    id: Optional[str] = None
    name: str = Field(alias="nome")
    origin: str = Field("proprio", alias="origem")
    description: str = Field("", alias="descricao")
    start_date: str = Field("", alias="dataInicio")
    end_date: str = Field("", alias="dataFim")
    manager: str = Field("", alias="responsavel")
    active: bool = Field(True, alias="ativo")

    @field_validator("origin")
    @classmethod
    def valid_origin(cls, v: str) -> str:
        if v not in PROJECT_ORIGINS:
            raise ValueError(f"Origem de projeto inválida: {v}")
        return v


class Accessibility(RecordModel):
    ramp: bool = Field(False, alias="rampa")
    elevator: bool = Field(False, alias="elevador")
    adapted_restroom: bool = Field(False, alias="banheiroAdaptado")
    tactile_floor: bool = Field(False, alias="pisoTatil")
    braille_signage: bool = Field(False, alias="sinalizacaoBraille")


class Spaces(RecordModel):
    resource_room: bool = Field(False, alias="salaRecursos")
    resource_room_count: int = Field(0, ge=0, alias="salaRecursosQuantidade")
    computer_lab: bool = Field(False, alias="laboratorioInformatica")
    science_lab: bool = Field(False, alias="laboratorioCiencias")
    library: bool = Field(False, alias="biblioteca")
    sports_court: bool = Field(False, alias="quadraEsportiva")
    covered_court: bool = Field(False, alias="quadraCoberta")
    auditorium: bool = Field(False, alias="auditorio")
    cafeteria: bool = Field(False, alias="refeitorio")
    playground: bool = Field(False, alias="parqueInfantil")


class Infrastructure(RecordModel):
    accessibility: Accessibility = Field(default_factory=Accessibility, alias="acessibilidade")
    spaces: Spaces = Field(default_factory=Spaces, alias="espacos")
    total_rooms: int = Field(0, ge=0, alias="totalSalas")


class School(RecordModel):
    name: str = Field("", alias="nome")
    cnpj: str = ""
    inep_code: str = Field("", alias="codigoInep")
    email: Optional[EmailStr] = None
    phone: str = Field("", alias="telefone")
    address: Address = Field(default_factory=Address, alias="endereco")
    education_levels: List[str] = Field(default_factory=list, alias="tiposEnsino")
    grade_levels: List[GradeLevel] = Field(default_factory=list, alias="anosSeries")
    shifts: List[Shift] = Field(default_factory=list, alias="turnos")
    special_education: SpecialEducation = Field(default_factory=SpecialEducation, alias="aee")
    projects: List[SchoolProject] = Field(default_factory=list, alias="projetos")
    infrastructure: Infrastructure = Field(default_factory=Infrastructure, alias="infraestrutura")
    principal: str = Field("", alias="diretor")
    vice_principal: str = Field("", alias="viceDiretor")

    @field_validator("education_levels")
    @classmethod
    def valid_levels(cls, v: List[str]) -> List[str]:
        unknown = [level for level in v if level not in EDUCATION_LEVELS]
        if unknown:
            raise ValueError(f"Tipos de ensino desconhecidos: {', '.join(unknown)}")
        return v

    @field_validator("shifts")
    @classmethod
    def unique_shifts(cls, v: List[Shift]) -> List[Shift]:
        types = [s.type for s in v]
        if len(types) != len(set(types)):
            raise ValueError("Cada turno só pode aparecer uma vez.")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def empty_email(cls, v):
        return _empty_email_to_none(v)
