"""
Serviço de importação de planilhas de alunos (xlsx, xls, csv).

Só a primeira aba é lida; a linha de cabeçalho determina o mapeamento.
Cada campo aceita uma lista de grafias de cabeçalho, tentadas em ordem de
prioridade: primeiro a grafia exata, depois uma comparação normalizada
(sem acentos, maiúsculas ou espaços repetidos). Colunas não reconhecidas
são ignoradas.

A importação só acrescenta alunos: os existentes nunca são substituídos.
Uma linha sem nome é ignorada (registrada no relatório) e o lote continua.
"""

import csv
import io
import logging
import os
import re
import unicodedata
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional

import pandas as pd

from gestao_escolar.exceptions import FileFormatError
from gestao_escolar.schemas.student import VALID_STATUSES, ImportError, StudentImportReport
from gestao_escolar.services.app_state import AppState, new_id, now_iso

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".xlsx", ".xls", ".csv")

# Grafias aceitas por campo, em ordem de prioridade
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "ano": ("Ano", "ANO", "ano", "Ano/Série", "Série", "Serie"),
    "turma": ("Turma", "TURMA", "turma", "Classe"),
    "rm": ("RM", "rm", "Rm"),
    "numeroChamada": (
        "Nº CH", "N° CH", "Nº", "N°", "Nº Chamada", "Número de Chamada",
        "Numero Chamada", "numeroChamada", "Chamada", "CH",
    ),
    "nome": ("Nome do Aluno", "NOME DO ALUNO", "Nome", "NOME", "nome", "Aluno", "Nome Completo"),
    "ra": ("RA", "ra", "Ra"),
    "dvRa": ("DV RA", "Dig. RA", "Dígito RA", "DV", "dvRa"),
    "ufRa": ("UF RA", "UF", "ufRa"),
    "dataNascimento": (
        "Data de Nascimento", "DATA DE NASCIMENTO", "Data Nascimento",
        "Data Nasc.", "Nascimento", "dataNascimento",
    ),
    "situacao": ("Situação", "SITUAÇÃO", "Situacao", "Status"),
    "deficiencia": ("Deficiência", "DEFICIÊNCIA", "Deficiencia", "AEE"),
    "endereco": ("Endereço", "ENDEREÇO", "Endereco", "endereco"),
}

DATE_FORMATS = ("%d/%m/%Y", "%Y-%m-%d", "%d-%m-%Y", "%d/%m/%y", "%Y-%m-%d %H:%M:%S")
EXCEL_EPOCH = date(1899, 12, 30)
NO_DISABILITY = {"", "-", "--", "nao", "nao possui", "nenhuma", "nenhum", "n/a", "na"}
DEFAULT_RA_STATE = "SP"

# Palavras-chave das situações nas exportações da secretaria (ex.: "BAIXA - TRANSFERÊNCIA")
STATUS_KEYWORDS = (
    ("transfer", "Transferido"),
    ("remanej", "Remanejado"),
    ("evad", "Evadido"),
    ("abandon", "Evadido"),
    ("conclu", "Concluído"),
    ("ativo", "Ativo"),
)


def _normalize_header(raw: str) -> str:
    """Normaliza um nome de coluna: minúsculas, sem acentos, espaços simples."""
    text = raw.replace("°", "º")
    text = unicodedata.normalize("NFKD", text)
    text = "".join(c for c in text if not unicodedata.combining(c))
    return re.sub(r"\s+", " ", text).strip().lower()


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _as_text(value: Any) -> str:
    if _is_blank(value):
        return ""
    # números inteiros lidos do Excel chegam como float (123456789.0)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def extract_fields(row: dict) -> dict[str, Any]:
    """
    Extrai os campos reconhecidos de uma linha de planilha.
    Campos sem coluna correspondente (ou com célula vazia) ficam None.
    """
    normalized = {
        _normalize_header(key): value
        for key, value in row.items()
        if isinstance(key, str)
    }

    fields: dict[str, Any] = {}
    for field, aliases in FIELD_ALIASES.items():
        value = None
        for alias in aliases:
            candidate = row.get(alias)
            if not _is_blank(candidate):
                value = candidate
                break
        if value is None:
            for alias in aliases:
                candidate = normalized.get(_normalize_header(alias))
                if not _is_blank(candidate):
                    value = candidate
                    break
        fields[field] = value
    return fields


def parse_birth_date(value: Any) -> Optional[date]:
    """Aceita dd/mm/aaaa, aaaa-mm-dd, células de data e números de série do Excel."""
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if 0 < value < 100000:
            return EXCEL_EPOCH + timedelta(days=int(value))
        return None

    text = str(value).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def calculate_age(birth_date: Optional[date], today: Optional[date] = None) -> int:
    """Idade em anos completos; 0 quando a data de nascimento é desconhecida."""
    if birth_date is None:
        return 0
    today = today or date.today()
    age = today.year - birth_date.year - ((today.month, today.day) < (birth_date.month, birth_date.day))
    return max(age, 0)


def normalize_status(value: Any) -> str:
    text = _normalize_header(_as_text(value))
    if not text:
        return "Ativo"
    for status in VALID_STATUSES:
        if text == _normalize_header(status):
            return status
    for keyword, status in STATUS_KEYWORDS:
        if keyword in text:
            return status
    logger.debug("Situação desconhecida '%s', considerada Ativo.", value)
    return "Ativo"


def normalize_disability(value: Any) -> str:
    text = _as_text(value)
    if _normalize_header(text) in NO_DISABILITY:
        return ""
    return text


def _parse_call_number(value: Any) -> int:
    text = _as_text(value).replace(",", ".")
    try:
        return int(float(text))
    except (ValueError, OverflowError):
        return 0


def build_student(fields: dict[str, Any], today: Optional[date] = None) -> dict:
    """Monta o registro de aluno a partir dos campos extraídos de uma linha."""
    birth = parse_birth_date(fields["dataNascimento"])
    year_label = _as_text(fields["ano"])
    timestamp = now_iso()

    return {
        "id": new_id(),
        "ano": year_label,
        "turma": _as_text(fields["turma"]) or year_label,
        "rm": _as_text(fields["rm"]),
        "numeroChamada": _parse_call_number(fields["numeroChamada"]),
        "nome": _as_text(fields["nome"]),
        "ra": _as_text(fields["ra"]),
        "dvRa": _as_text(fields["dvRa"]),
        "ufRa": _as_text(fields["ufRa"]).upper() or DEFAULT_RA_STATE,
        "dataNascimento": birth.isoformat() if birth else _as_text(fields["dataNascimento"]),
        "idade": calculate_age(birth, today),
        "situacao": normalize_status(fields["situacao"]),
        "deficiencia": normalize_disability(fields["deficiencia"]),
        "endereco": _as_text(fields["endereco"]),
        "nomeMae": "",
        "nomePai": "",
        "telefone": "",
        "email": None,
        "observacoes": "",
        "responsaveis": [],
        "fichaSaude": None,
        "ocorrencias": [],
        "createdAt": timestamp,
        "updatedAt": timestamp,
    }


def _row_preview(row: dict) -> str:
    return ", ".join(_as_text(v) for v in row.values() if not _is_blank(v))[:200]


def import_student_rows(
    state: AppState,
    rows: Iterable[dict],
    today: Optional[date] = None,
) -> StudentImportReport:
    """
    Converte as linhas em alunos e os acrescenta à coleção.

    Linhas totalmente vazias são ignoradas silenciosamente; linhas sem nome
    entram no relatório como ignoradas. `inserted` é o número de alunos
    importados.
    """
    students: list[dict] = []
    errors: list[ImportError] = []
    total_rows = 0

    for row_num, row in enumerate(rows, start=2):  # linha 1 = cabeçalho
        if not isinstance(row, dict) or all(_is_blank(v) for v in row.values()):
            continue
        total_rows += 1

        fields = extract_fields(row)
        if not _as_text(fields["nome"]):
            errors.append(ImportError(
                row=row_num,
                content=_row_preview(row),
                reason="Nome do aluno ausente",
            ))
            continue

        students.append(build_student(fields, today))

    if students:
        state.set_students(state.students + students)

    logger.info(
        "Importação de planilha: %d linhas, %d alunos importados, %d ignoradas",
        total_rows, len(students), len(errors),
    )

    return StudentImportReport(
        total_rows=total_rows,
        inserted=len(students),
        skipped=len(errors),
        errors=errors,
    )


# ============================================================
# Leitura de arquivos
# ============================================================

def _detect_separator(sample: str) -> str:
    """Detecta o separador CSV (vírgula ou ponto e vírgula)."""
    if sample.count(";") >= sample.count(","):
        return ";"
    return ","


def _decode(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")  # utf-8-sig trata o BOM do Excel
    except UnicodeDecodeError:
        return content.decode("latin-1")


def _read_csv(content: bytes) -> list[dict]:
    text = _decode(content)
    lines = text.splitlines()
    separator = _detect_separator(lines[0] if lines else "")

    try:
        reader = csv.DictReader(io.StringIO(text), delimiter=separator)
        if reader.fieldnames is None:
            raise FileFormatError("Arquivo CSV vazio ou ilegível.")
        return [
            {(k.strip() if isinstance(k, str) else k): v for k, v in row.items()}
            for row in reader
        ]
    except csv.Error as exc:
        raise FileFormatError("Erro ao ler o arquivo CSV.") from exc


def _read_excel(content: bytes) -> list[dict]:
    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0, dtype=object)
    except Exception as exc:  # openpyxl, xlrd e pandas levantam tipos variados
        logger.warning("Planilha ilegível: %s", exc)
        raise FileFormatError(
            "Erro ao ler o arquivo. Verifique se é um arquivo Excel válido."
        ) from exc

    return [
        {str(key).strip(): (None if _is_blank(value) else value) for key, value in record.items()}
        for record in df.to_dict(orient="records")
    ]


def read_spreadsheet(content: bytes, filename: str) -> list[dict]:
    """
    Lê a primeira aba de uma planilha e retorna uma lista de linhas
    (dicionários cabeçalho → valor). Levanta FileFormatError se o arquivo
    não puder ser lido.
    """
    extension = os.path.splitext(filename or "")[1].lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise FileFormatError("Formato inválido. Formatos aceitos: .xlsx, .xls, .csv")
    if not content:
        raise FileFormatError("O arquivo está vazio.")

    if extension == ".csv":
        return _read_csv(content)
    return _read_excel(content)
