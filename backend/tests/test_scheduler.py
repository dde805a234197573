"""
Testes do backup automático agendado.
"""

import json
from unittest.mock import patch

from gestao_escolar import scheduler
from gestao_escolar.services.app_state import AppState


def test_grava_backup_e_remove_antigos(db, tmp_path, monkeypatch):
    AppState(db).set_students([{"id": "1", "nome": "Ana"}])
    for i in range(3):
        (tmp_path / f"auto-backup-20200101-00000{i}.json").write_text("{}", encoding="utf-8")
    monkeypatch.setattr(scheduler.settings, "AUTO_BACKUP_KEEP", 2)

    with patch.object(scheduler, "SessionLocal", return_value=db):
        path = scheduler.write_auto_backup(tmp_path)

    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["totalAlunos"] == 1
    remaining = sorted(p.name for p in tmp_path.glob("auto-backup-*.json"))
    assert len(remaining) == 2
    assert path.name in remaining


def test_scheduler_desativado_sem_diretorio(monkeypatch):
    monkeypatch.setattr(scheduler.settings, "AUTO_BACKUP_DIR", "")

    scheduler.start_scheduler()

    assert not scheduler.scheduler.running
