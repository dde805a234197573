"""
Testes unitários da importação de planilhas de alunos (xlsx, xls, csv).
"""

import io
from datetime import date, datetime

import pytest
from openpyxl import Workbook

from gestao_escolar.exceptions import FileFormatError
from gestao_escolar.services.app_state import AppState
from gestao_escolar.services.student_import import (
    FIELD_ALIASES,
    build_student,
    calculate_age,
    extract_fields,
    import_student_rows,
    normalize_disability,
    normalize_status,
    parse_birth_date,
    read_spreadsheet,
)

TODAY = date(2024, 3, 15)


def make_xlsx(rows: list[list]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


# --- Mapeamento de colunas ---

def test_grafia_exata_tem_prioridade():
    fields = extract_fields({"Nome": "Secundário", "Nome do Aluno": "Principal"})
    assert fields["nome"] == "Principal"


def test_grafia_normalizada():
    fields = extract_fields({"  NOME   do aluno ": "Ana", "n° ch": "7", "situacao": "Ativo"})

    assert fields["nome"] == "Ana"
    assert fields["numeroChamada"] == "7"
    assert fields["situacao"] == "Ativo"


def test_celula_vazia_passa_para_a_proxima_grafia():
    fields = extract_fields({"Nome do Aluno": "", "Nome": "Ana"})
    assert fields["nome"] == "Ana"


def test_colunas_desconhecidas_ignoradas():
    fields = extract_fields({"Nome": "Ana", "Cor favorita": "Azul"})

    assert fields["nome"] == "Ana"
    assert "Cor favorita" not in fields
    assert fields["ra"] is None


SAMPLE_VALUES = {
    "ano": "6º ano",
    "turma": "6A",
    "rm": "4321",
    "numeroChamada": "7",
    "nome": "Ana Lima",
    "ra": "123456789",
    "dvRa": "X",
    "ufRa": "MG",
    "dataNascimento": "15/03/2012",
    "situacao": "Ativo",
    "deficiencia": "TEA",
    "endereco": "Rua das Flores, 10",
}


@pytest.mark.parametrize("field, alias", [
    (field, alias) for field, aliases in FIELD_ALIASES.items() for alias in aliases
])
def test_todas_as_grafias_aceitas(db, field, alias):
    row = {alias: SAMPLE_VALUES[field]}
    if field != "nome":
        row["Nome do Aluno"] = "Ana Lima"

    assert extract_fields(row)[field] == SAMPLE_VALUES[field]

    report = import_student_rows(AppState(db), [row], TODAY)

    assert report.inserted == 1
    assert report.skipped == 0


# --- Conversões ---

@pytest.mark.parametrize("value, expected", [
    ("15/03/2012", date(2012, 3, 15)),
    ("2012-03-15", date(2012, 3, 15)),
    (datetime(2012, 3, 15, 0, 0), date(2012, 3, 15)),
    (45000, date(2023, 3, 15)),
    ("", None),
    ("data ruim", None),
])
def test_data_de_nascimento(value, expected):
    assert parse_birth_date(value) == expected


def test_idade_antes_e_depois_do_aniversario():
    assert calculate_age(date(2012, 3, 16), TODAY) == 11
    assert calculate_age(date(2012, 3, 15), TODAY) == 12
    assert calculate_age(None, TODAY) == 0


@pytest.mark.parametrize("value, expected", [
    ("", "Ativo"),
    (None, "Ativo"),
    ("ATIVO", "Ativo"),
    ("Concluido", "Concluído"),
    ("BAIXA - TRANSFERÊNCIA", "Transferido"),
    ("Remanejamento", "Remanejado"),
    ("qualquer coisa", "Ativo"),
])
def test_situacao(value, expected):
    assert normalize_status(value) == expected


def test_deficiencia():
    assert normalize_disability("Não") == ""
    assert normalize_disability("-") == ""
    assert normalize_disability("TEA") == "TEA"


def test_registro_montado():
    fields = extract_fields({
        "Ano": "6º ano", "Nº CH": 3.0, "Nome do Aluno": "Ana Lima", "RA": 123456789.0,
        "Data de Nascimento": "15/03/2012", "UF": "mg",
    })

    student = build_student(fields, TODAY)

    assert student["nome"] == "Ana Lima"
    assert student["ra"] == "123456789"
    assert student["numeroChamada"] == 3
    assert student["turma"] == "6º ano"  # sem coluna Turma, usa o ano
    assert student["ufRa"] == "MG"
    assert student["dataNascimento"] == "2012-03-15"
    assert student["idade"] == 12
    assert student["situacao"] == "Ativo"
    assert student["responsaveis"] == []
    assert student["fichaSaude"] is None
    assert student["id"]


def test_uf_padrao_e_chamada_invalida():
    student = build_student(extract_fields({"Nome": "Ana", "Nº": "x"}), TODAY)

    assert student["ufRa"] == "SP"
    assert student["numeroChamada"] == 0
    for value in ("inf", "-inf", "1e999"):
        assert build_student(extract_fields({"Nome": "Ana", "Nº": value}), TODAY)["numeroChamada"] == 0


def test_chamada_infinita_nao_interrompe_o_lote(db):
    rows = [{"Nome": "Ana", "Nº": "inf"}, {"Nome": "Bia", "Nº": "2"}]

    report = import_student_rows(AppState(db), rows, TODAY)

    assert report.inserted == 2
    assert [s["numeroChamada"] for s in AppState(db).students] == [0, 2]


# --- Importação ---

def test_linhas_sem_nome_ignoradas(db):
    state = AppState(db)
    rows = [
        {"Nome do Aluno": "Ana Lima", "Turma": "6A"},
        {"Nome do Aluno": "", "Turma": "6A", "RA": "999"},
        {"Nome do Aluno": None, "Turma": None},  # linha vazia
        {"Nome do Aluno": "Bruno Reis", "Turma": "6B"},
    ]

    report = import_student_rows(state, rows, TODAY)

    assert report.inserted == 2
    assert report.skipped == 1
    assert report.total_rows == 3
    assert report.errors[0].row == 3
    assert report.errors[0].reason == "Nome do aluno ausente"
    assert [s["nome"] for s in AppState(db).students] == ["Ana Lima", "Bruno Reis"]


def test_importacao_acrescenta_aos_existentes(db):
    state = AppState(db)
    state.set_students([{"id": "x", "nome": "Existente"}])

    report = import_student_rows(state, [{"Nome": "Nova"}], TODAY)

    assert report.inserted == 1
    assert [s["nome"] for s in AppState(db).students] == ["Existente", "Nova"]


def test_planilha_sem_alunos_nao_grava(db):
    report = import_student_rows(AppState(db), [{"RA": "1"}], TODAY)

    assert report.inserted == 0
    assert AppState(db).students == []


# --- Leitura de arquivos ---

def test_csv_ponto_e_virgula():
    content = "Nome do Aluno;RA;Turma\nAna Lima;123;6A\nBruno;456;6B\n".encode("utf-8")
    rows = read_spreadsheet(content, "alunos.csv")

    assert len(rows) == 2
    assert rows[0]["Nome do Aluno"] == "Ana Lima"


def test_csv_virgula_com_bom():
    content = "Nome,Turma\nAna,6A\n".encode("utf-8-sig")
    rows = read_spreadsheet(content, "ALUNOS.CSV")

    assert rows == [{"Nome": "Ana", "Turma": "6A"}]


def test_csv_latin1():
    content = "Nome;Turma\nJoão;6A\n".encode("latin-1")
    rows = read_spreadsheet(content, "alunos.csv")

    assert rows[0]["Nome"] == "João"


def test_xlsx(db):
    content = make_xlsx([
        ["Nº CH", "Nome do Aluno", "RA", "Data de Nascimento", "Situação"],
        [1, "Ana Lima", 123456789, datetime(2012, 3, 15), "Ativo"],
        [2, None, 987, None, None],
    ])

    rows = read_spreadsheet(content, "turma.xlsx")
    report = import_student_rows(AppState(db), rows, TODAY)

    assert report.inserted == 1
    assert report.skipped == 1
    student = AppState(db).students[0]
    assert student["ra"] == "123456789"
    assert student["dataNascimento"] == "2012-03-15"
    assert student["numeroChamada"] == 1


def test_extensao_invalida():
    with pytest.raises(FileFormatError):
        read_spreadsheet(b"conteudo", "alunos.pdf")


def test_arquivo_vazio():
    with pytest.raises(FileFormatError):
        read_spreadsheet(b"", "alunos.xlsx")


def test_excel_corrompido():
    with pytest.raises(FileFormatError):
        read_spreadsheet(b"isto nao e uma planilha", "alunos.xlsx")
