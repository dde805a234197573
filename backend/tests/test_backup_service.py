"""
Testes unitários do backup completo: exportação, validação (formato atual e
formato antigo 1.0), importação pendente e restauração por família.
"""

import json
import uuid
from datetime import date, datetime, timezone

import pytest

from gestao_escolar.config import settings
from gestao_escolar.exceptions import FileFormatError, NoValidDataError, RecordNotFoundError
from gestao_escolar.schemas.backup import BackupDocument
from gestao_escolar.services.app_state import AppState
from gestao_escolar.services.backup_service import (
    PendingImports,
    apply_backup,
    backup_filename,
    build_backup_document,
    confirm_import,
    decode_backup,
    discard_import,
    export_backup,
    get_pending_import,
    stage_import,
    summarize_document,
)


# --- Helpers ---

EXPORTED_AT = datetime(2024, 3, 15, 12, 30, tzinfo=timezone.utc)


def encode(document: dict) -> bytes:
    return json.dumps(document, ensure_ascii=False).encode("utf-8")


def populate(state: AppState) -> None:
    state.set_school({"nome": "Escola Estadual Modelo", "cidade": "Campinas"})
    state.set_teachers([{"id": "t1", "nome": "Maria Souza"}])
    state.set_students([
        {
            "id": "s1", "nome": "Ana Lima", "turma": "6º A",
            "responsaveis": [{"id": "g1", "nome": "Carla Lima"}],
            "fichaSaude": {"tipoSanguineo": "O+"},
            "ocorrencias": [],
        },
        {"id": "s2", "nome": "Bruno Reis", "turma": "6º A"},
    ])
    state.set_staff([{"id": "f1", "nome": "José Alves", "cargo": "Inspetor"}])
    state.set_assignments([{"id": "a1", "docente": "Maria Souza", "turma": "6º A", "disciplina": "Arte", "aulas": 2}])
    state.set_calendar_events([{"id": "e1", "titulo": "Conselho", "data": "2024-04-10"}])


# --- Exportação ---

def test_nome_do_arquivo_com_escola():
    filename = backup_filename({"nome": "Escola Estadual  Modelo"}, date(2024, 3, 15))
    assert filename == "backup-escola-estadual-modelo-2024-03-15.json"


def test_nome_do_arquivo_sem_escola():
    assert backup_filename(None, date(2024, 3, 15)) == "backup-completo-2024-03-15.json"
    assert backup_filename({"nome": "  "}, date(2024, 3, 15)) == "backup-completo-2024-03-15.json"


def test_documento_exportado(state):
    populate(state)

    document = build_backup_document(state, EXPORTED_AT)

    assert document["version"] == "3.0"
    assert document["exportDate"] == "2024-03-15T12:30:00.000Z"
    assert document["schoolName"] == "Escola Estadual Modelo"
    assert document["totalAlunos"] == 2
    assert document["totalDocentes"] == 1
    assert document["totalServidores"] == 1
    assert document["totalAtribuicoes"] == 1
    assert "id" not in document["atribuicoes"][0]
    assert document["eventosCalendario"][0]["titulo"] == "Conselho"


def test_documento_de_estado_vazio(state):
    document = build_backup_document(state, EXPORTED_AT)

    assert document["schoolName"] == settings.DEFAULT_SCHOOL_NAME
    assert document["escola"] is None
    assert document["alunos"] == []
    assert document["configuracaoHorario"] is None


def test_export_retorna_nome_do_arquivo(state):
    populate(state)
    _, filename = export_backup(state, EXPORTED_AT)
    assert filename == "backup-escola-estadual-modelo-2024-03-15.json"


# --- Validação ---

def test_json_invalido():
    with pytest.raises(FileFormatError):
        decode_backup(b"{isto nao e json")


def test_json_que_nao_e_objeto():
    with pytest.raises(FileFormatError):
        decode_backup(b"[1, 2, 3]")


def test_sem_versao():
    with pytest.raises(FileFormatError):
        decode_backup(encode({"alunos": [{"nome": "Ana"}]}))


def test_colecao_com_tipo_errado():
    with pytest.raises(FileFormatError):
        decode_backup(encode({"version": "3.0", "alunos": "Ana"}))


def test_sem_dados_reconhecidos():
    with pytest.raises(NoValidDataError):
        decode_backup(encode({"version": "3.0", "alunos": [], "outraCoisa": [1]}))


def test_formato_atual_com_bom():
    content = json.dumps({"version": "3.0", "docentes": [{"nome": "Maria"}]}).encode("utf-8-sig")
    document, format_name = decode_backup(content)

    assert format_name == "3.0"
    assert document.docentes == [{"nome": "Maria"}]


def test_versao_futura_lida_como_atual():
    document, format_name = decode_backup(encode({"version": "4.0", "alunos": [{"nome": "Ana"}]}))

    assert format_name == "3.0"
    assert document.version == "4.0"


def test_versao_numerica():
    document, _ = decode_backup(encode({"version": 3, "alunos": [{"nome": "Ana"}]}))
    assert document.version == "3"


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity", "1e999"])
def test_numeros_fora_do_padrao_json(literal):
    content = ('{"version": "3.0", "alunos": [{"nome": "Ana", "peso": %s}]}' % literal).encode("utf-8")

    with pytest.raises(FileFormatError):
        decode_backup(content)


def test_contadores_e_data_sao_informativos():
    pending = stage_import(encode({
        "version": "3.0",
        "exportDate": 1710505800,
        "totalAlunos": "dois",
        "alunos": [{"nome": "Ana"}],
    }))

    assert pending.export_date == "1710505800"
    assert pending.summary.students == 1


def test_contadores_sozinhos_nao_validam():
    with pytest.raises(NoValidDataError):
        decode_backup(encode({"version": "3.0", "totalAlunos": 5, "totalDocentes": 2}))


def test_formato_antigo_filtra_atribuicoes_incompletas():
    content = encode({
        "version": "1.0",
        "data": [
            {"docente": "Maria", "turma": "6A", "disciplina": "Arte", "aulas": 2},
            {"docente": "João", "turma": "6B", "disciplina": "", "aulas": 2},
            {"docente": "Rita", "turma": "7A", "disciplina": "Música", "aulas": "2"},
            "lixo",
        ],
    })

    document, format_name = decode_backup(content)

    assert format_name == "1.0"
    assert document.atribuicoes == [{"docente": "Maria", "turma": "6A", "disciplina": "Arte", "aulas": 2}]
    assert document.totalAtribuicoes == 1


def test_formato_antigo_sem_entradas_validas():
    with pytest.raises(NoValidDataError):
        decode_backup(encode({"version": "1.0", "data": [{"docente": "Maria"}]}))


def test_resumo_do_documento():
    document = BackupDocument(
        version="3.0",
        escola={"nome": "Escola"},
        alunos=[
            {"nome": "Ana", "responsaveis": [{"nome": "A"}, {"nome": "B"}], "fichaSaude": {"x": 1}},
            {"nome": "Bia", "ocorrencias": [{"titulo": "Atraso"}]},
        ],
        docentes=[{"nome": "Maria"}],
    )

    summary = summarize_document(document)

    assert summary.school is True
    assert summary.students == 2
    assert summary.guardians == 2
    assert summary.health_records == 1
    assert summary.incidents == 1
    assert summary.teachers == 1
    assert summary.staff == 0


# --- Restauração ---

def test_ida_e_volta(state, db):
    populate(state)
    content = encode(build_backup_document(state, EXPORTED_AT))
    original = AppState(db).snapshot()

    for setter in (state.set_students, state.set_teachers, state.set_staff,
                   state.set_assignments, state.set_calendar_events):
        setter([])

    document, _ = decode_backup(content)
    apply_backup(state, document)
    restored = AppState(db).snapshot()

    assert restored["school"] == original["school"]
    assert restored["students"] == original["students"]
    assert restored["teachers"] == original["teachers"]
    assert restored["staff"] == original["staff"]
    assert restored["calendar_events"] == original["calendar_events"]
    # atribuições: mesmos dados, ids novos
    assert [{k: v for k, v in a.items() if k != "id"} for a in restored["assignments"]] == \
        [{k: v for k, v in a.items() if k != "id"} for a in original["assignments"]]


def test_restaura_so_a_escola(state, db):
    populate(state)
    document = BackupDocument(version="3.0", escola={"nome": "Outra Escola"})

    result = apply_backup(state, document)

    reloaded = AppState(db)
    assert result.restored == ["escola"]
    assert reloaded.school == {"nome": "Outra Escola"}
    assert len(reloaded.students) == 2
    assert len(reloaded.teachers) == 1


def test_restaura_alunos_sem_id(state, db):
    populate(state)
    document, _ = decode_backup(encode({"version": "3.0", "alunos": [{"nome": "Ana", "turma": "6A"}]}))

    apply_backup(state, document)

    students = AppState(db).students
    assert len(students) == 1
    assert students[0]["nome"] == "Ana"
    assert students[0]["turma"] == "6A"
    assert students[0]["id"]


def test_colecao_vazia_nao_apaga_a_gravada(state, db):
    populate(state)
    document = BackupDocument(version="3.0", escola={"nome": "Escola"}, alunos=[])

    apply_backup(state, document)

    assert len(AppState(db).students) == 2


def test_familia_de_projetos_substituida_junta(state, db):
    state.restore_projects([{"id": "p1"}], [{"id": "pt1"}], [{"id": "pa1"}])
    document = BackupDocument(version="3.0", projetos=[{"id": "p2", "nome": "Horta"}])

    result = apply_backup(state, document)

    reloaded = AppState(db)
    assert "projetos" in result.restored
    assert reloaded.projects == [{"id": "p2", "nome": "Horta"}]
    assert reloaded.project_classes == []
    assert reloaded.project_assignments == []


def test_backup_antigo_restaura_atribuicoes(state, db):
    document, _ = decode_backup(encode({
        "version": "1.0",
        "data": [{"docente": "Maria", "turma": "6A", "disciplina": "Arte", "aulas": 2}],
    }))

    result = apply_backup(state, document)

    assert result.restored == ["atribuicoes"]
    assert AppState(db).assignments[0]["disciplina"] == "Arte"


# --- Importação pendente ---

def test_importacao_pendente_confirmada(state, db):
    pending = stage_import(encode({"version": "3.0", "schoolName": "Escola X", "alunos": [{"nome": "Ana"}]}))

    assert pending.school_name == "Escola X"
    assert pending.legacy_format is False
    assert pending.summary.students == 1
    # nada é aplicado antes da confirmação
    assert AppState(db).students == []
    assert get_pending_import(pending.token).token == pending.token

    result = confirm_import(state, pending.token)

    assert result.reload_required is True
    assert AppState(db).students[0]["nome"] == "Ana"
    with pytest.raises(RecordNotFoundError):
        confirm_import(state, pending.token)


def test_importacao_pendente_cancelada(state):
    pending = stage_import(encode({"version": "1.0", "data": [
        {"docente": "Maria", "turma": "6A", "disciplina": "Arte", "aulas": 2},
    ]}))

    assert pending.legacy_format is True
    assert discard_import(pending.token) is True
    assert discard_import(pending.token) is False
    with pytest.raises(RecordNotFoundError):
        get_pending_import(pending.token)


def test_token_desconhecido(state):
    with pytest.raises(RecordNotFoundError):
        confirm_import(state, uuid.uuid4())


def test_limite_de_importacoes_pendentes():
    store = PendingImports(max_items=2)
    document = BackupDocument(version="3.0", alunos=[{"nome": "Ana"}])

    first = store.add(document, "3.0")
    second = store.add(document, "3.0")
    third = store.add(document, "3.0")

    assert store.get(first.token) is None
    assert store.get(second.token) is not None
    assert store.get(third.token) is not None
