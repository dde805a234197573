"""
Schemas pydantic do backup completo (formato de arquivo versão 3.0).

Os registros das coleções viajam como objetos JSON livres: o backup não
valida o conteúdo dos registros, apenas a forma do documento.
"""

import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

BACKUP_FORMAT_VERSION = "3.0"

Record = Dict[str, Any]


class BackupDocument(BaseModel):
    """Documento de backup normalizado (nomes de campo do arquivo)."""
    model_config = ConfigDict(extra="allow")

    version: str
    # informativos: nunca invalidam o documento
    exportDate: Optional[Any] = None
    schoolName: Optional[Any] = None
    escola: Optional[Record] = None
    docentes: Optional[List[Record]] = None
    alunos: Optional[List[Record]] = None
    servidores: Optional[List[Record]] = None
    atribuicoes: Optional[List[Record]] = None
    areasConhecimento: Optional[List[Record]] = None
    bloqueiosArea: Optional[List[Record]] = None
    horarios: Optional[List[Record]] = None
    bloqueios: Optional[List[Record]] = None
    configuracaoHorario: Optional[Record] = None
    projetos: Optional[List[Record]] = None
    projetoTurmas: Optional[List[Record]] = None
    projetoAtribuicoes: Optional[List[Record]] = None
    eventosCalendario: Optional[List[Record]] = None
    # Contadores (compatibilidade, informativos)
    totalAtribuicoes: Optional[Any] = None
    totalDocentes: Optional[Any] = None
    totalAlunos: Optional[Any] = None
    totalServidores: Optional[Any] = None
    # Formato antigo (versão 1.0): lista genérica de atribuições
    data: Optional[List[Any]] = None


class BackupSummary(BaseModel):
    """Contadores de um documento de backup ou do estado atual."""
    school: bool
    teachers: int
    students: int
    staff: int
    guardians: int
    health_records: int
    incidents: int
    assignments: int
    knowledge_areas: int
    schedules: int
    projects: int
    calendar_events: int


class PendingImportResponse(BaseModel):
    """Backup validado, aguardando confirmação explícita."""
    token: uuid.UUID
    version: str
    export_date: Optional[str]
    school_name: Optional[str]
    legacy_format: bool
    summary: BackupSummary


class RestoreResult(BaseModel):
    """Resultado da restauração: famílias substituídas."""
    restored: List[str] = Field(default_factory=list)
    reload_required: bool = True
