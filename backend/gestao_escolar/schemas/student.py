"""
Schemas pydantic para os alunos.

Os atributos Python são em inglês; os aliases seguem os nomes de campo do
arquivo de backup (nome, ra, turma...), que também são as chaves gravadas no
armazenamento. Campos desconhecidos são preservados (extra="allow").
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

VALID_STATUSES = ("Ativo", "Transferido", "Evadido", "Concluído", "Remanejado")
VALID_KINSHIPS = (
    "Mãe", "Pai", "Avó", "Avô", "Tia", "Tio", "Irmã", "Irmão",
    "Padrasto", "Madrasta", "Responsável Legal", "Outro",
)
VALID_INCIDENT_TYPES = ("Disciplinar", "Pedagógico", "Saúde", "Família", "Bullying", "Elogio", "Outro")
VALID_INCIDENT_STATUSES = ("Aberto", "Em andamento", "Concluído", "Arquivado")
VALID_BLOOD_TYPES = ("Não informado", "A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")


def _empty_email_to_none(v):
    """Formulários enviam "" quando o e-mail não é informado."""
    if isinstance(v, str) and not v.strip():
        return None
    return v


class RecordModel(BaseModel):
    """Base comum: aceita os aliases e os nomes Python, preserva campos extras."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")


# --- Responsáveis ---

class Guardian(RecordModel):
    id: Optional[str] = None
    name: str = Field(alias="nome")
    kinship: str = Field("Mãe", alias="parentesco")
    cpf: str = ""
    rg: str = ""
    mobile_phone: str = Field("", alias="telefoneCelular")
    home_phone: str = Field("", alias="telefoneResidencial")
    email: Optional[EmailStr] = None
    occupation: str = Field("", alias="profissao")
    workplace: str = Field("", alias="localTrabalho")
    address: str = Field("", alias="endereco")
    financial_guardian: bool = Field(False, alias="responsavelFinanceiro")
    pedagogical_guardian: bool = Field(False, alias="responsavelPedagogico")
    authorized_pickup: bool = Field(True, alias="autorizadoBuscar")

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("O nome do responsável é obrigatório.")
        return v.strip()

    @field_validator("kinship")
    @classmethod
    def valid_kinship(cls, v: str) -> str:
        if v not in VALID_KINSHIPS:
            raise ValueError(f"Parentesco inválido. Valores aceitos: {', '.join(VALID_KINSHIPS)}")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def empty_email(cls, v):
        return _empty_email_to_none(v)


# --- Ficha de saúde ---

class HealthRecord(RecordModel):
    blood_type: str = Field("Não informado", alias="tipoSanguineo")
    allergies: List[str] = Field(default_factory=list, alias="alergias")
    medications: List[str] = Field(default_factory=list, alias="medicamentosUso")
    dietary_restrictions: List[str] = Field(default_factory=list, alias="restricoesAlimentares")
    chronic_diseases: List[str] = Field(default_factory=list, alias="doencasCronicas")
    disabilities: List[str] = Field(default_factory=list, alias="deficiencias")
    health_plan: str = Field("", alias="planoSaude")
    sus_card_number: str = Field("", alias="numeroCartaoSus")
    emergency_contact: str = Field("", alias="contatoEmergencia")
    emergency_phone: str = Field("", alias="telefoneEmergencia")
    doctor: str = Field("", alias="medicoResponsavel")
    doctor_phone: str = Field("", alias="telefoneMedico")
    allows_emergency_care: bool = Field(True, alias="autorizaAtendimentoEmergencia")
    allows_medication: bool = Field(False, alias="autorizaMedicacao")
    vaccines_up_to_date: bool = Field(True, alias="vacinasEmDia")

    @field_validator("blood_type")
    @classmethod
    def valid_blood_type(cls, v: str) -> str:
        if v not in VALID_BLOOD_TYPES:
            raise ValueError(f"Tipo sanguíneo inválido: {v}")
        return v

    @field_validator("allergies", "medications", "dietary_restrictions", "chronic_diseases", "disabilities")
    @classmethod
    def strip_items(cls, v: List[str]) -> List[str]:
        return [item.strip() for item in v if item and item.strip()]


# --- Ocorrências ---

class Incident(RecordModel):
    id: Optional[str] = None
    title: str = Field(alias="titulo")
    type: str = Field("Pedagógico", alias="tipo")
    date: str = Field(alias="data")
    time: str = Field("", alias="hora")
    description: str = Field("", alias="descricao")
    actions_taken: str = Field("", alias="providencias")
    recorded_by: str = Field("", alias="responsavelRegistro")
    recorded_by_role: str = Field("", alias="cargoResponsavel")
    status: str = "Aberto"

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("O título da ocorrência é obrigatório.")
        return v.strip()

    @field_validator("type")
    @classmethod
    def valid_type(cls, v: str) -> str:
        if v not in VALID_INCIDENT_TYPES:
            raise ValueError(f"Tipo de ocorrência inválido. Valores aceitos: {', '.join(VALID_INCIDENT_TYPES)}")
        return v

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: str) -> str:
        if v not in VALID_INCIDENT_STATUSES:
            raise ValueError(f"Status inválido. Valores aceitos: {', '.join(VALID_INCIDENT_STATUSES)}")
        return v


# --- Aluno ---

class StudentCreate(RecordModel):
    """Cadastro manual de um aluno (POST /students)."""
    year_label: str = Field("", alias="ano")
    class_name: str = Field("", alias="turma")
    registration_number: str = Field("", alias="rm")
    call_number: int = Field(1, alias="numeroChamada")
    name: str = Field(alias="nome")
    ra: str = ""
    ra_check_digit: str = Field("", alias="dvRa")
    ra_state: str = Field("SP", alias="ufRa")
    birth_date: str = Field("", alias="dataNascimento")
    status: str = Field("Ativo", alias="situacao")
    disability: str = Field("", alias="deficiencia")
    address: str = Field("", alias="endereco")
    mother_name: str = Field("", alias="nomeMae")
    father_name: str = Field("", alias="nomePai")
    phone: str = Field("", alias="telefone")
    email: Optional[EmailStr] = None
    notes: str = Field("", alias="observacoes")

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("O nome do aluno é obrigatório.")
        return v.strip()

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: str) -> str:
        if v not in VALID_STATUSES:
            raise ValueError(f"Situação inválida. Valores aceitos: {', '.join(VALID_STATUSES)}")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def empty_email(cls, v):
        return _empty_email_to_none(v)


class StudentUpdate(RecordModel):
    """Atualização parcial (PUT /students/{id}): só os campos enviados mudam."""
    year_label: Optional[str] = Field(None, alias="ano")
    class_name: Optional[str] = Field(None, alias="turma")
    registration_number: Optional[str] = Field(None, alias="rm")
    call_number: Optional[int] = Field(None, alias="numeroChamada")
    name: Optional[str] = Field(None, alias="nome")
    ra: Optional[str] = None
    ra_check_digit: Optional[str] = Field(None, alias="dvRa")
    ra_state: Optional[str] = Field(None, alias="ufRa")
    birth_date: Optional[str] = Field(None, alias="dataNascimento")
    status: Optional[str] = Field(None, alias="situacao")
    disability: Optional[str] = Field(None, alias="deficiencia")
    address: Optional[str] = Field(None, alias="endereco")
    mother_name: Optional[str] = Field(None, alias="nomeMae")
    father_name: Optional[str] = Field(None, alias="nomePai")
    phone: Optional[str] = Field(None, alias="telefone")
    email: Optional[EmailStr] = None
    notes: Optional[str] = Field(None, alias="observacoes")

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("O nome do aluno é obrigatório.")
        return v.strip() if v else v

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in VALID_STATUSES:
            raise ValueError(f"Situação inválida. Valores aceitos: {', '.join(VALID_STATUSES)}")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def empty_email(cls, v):
        return _empty_email_to_none(v)


class StudentResponse(RecordModel):
    """
    Aluno tal como gravado. Tolerante: registros vindos de backups antigos
    podem não ter todos os campos, nem os mesmos tipos.
    """
    id: Any
    year_label: Any = Field("", alias="ano")
    class_name: Any = Field("", alias="turma")
    registration_number: Any = Field("", alias="rm")
    call_number: Any = Field(None, alias="numeroChamada")
    name: Any = Field("", alias="nome")
    ra: Any = ""
    ra_check_digit: Any = Field("", alias="dvRa")
    ra_state: Any = Field("", alias="ufRa")
    birth_date: Any = Field("", alias="dataNascimento")
    age: Any = Field(None, alias="idade")
    status: Any = Field("Ativo", alias="situacao")
    disability: Any = Field("", alias="deficiencia")
    guardians: Any = Field(default_factory=list, alias="responsaveis")
    health_record: Optional[Any] = Field(None, alias="fichaSaude")
    incidents: Any = Field(default_factory=list, alias="ocorrencias")
    created_at: Any = Field(None, alias="createdAt")
    updated_at: Any = Field(None, alias="updatedAt")

    @field_validator("guardians", "incidents", mode="before")
    @classmethod
    def null_list_to_empty(cls, v):
        return [] if v is None else v


class ClassSummary(BaseModel):
    """Resumo por turma (aba "Por Turma")."""
    class_name: str
    total_students: int
    active_students: int


# --- Importação de planilha ---

class ImportError(BaseModel):
    """Detalhe de uma linha ignorada na importação."""
    row: int
    content: str
    reason: str


class StudentImportReport(BaseModel):
    """Relatório retornado após a importação de uma planilha."""
    total_rows: int
    inserted: int
    skipped: int
    errors: List[ImportError]
