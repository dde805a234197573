"""
Backup automático com APScheduler.

Ativo só quando AUTO_BACKUP_DIR está configurado: a cada
AUTO_BACKUP_INTERVAL_HOURS grava um backup completo no diretório e mantém
apenas os AUTO_BACKUP_KEEP arquivos mais recentes.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler

from gestao_escolar.config import settings
from gestao_escolar.database import SessionLocal

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()

AUTO_BACKUP_PATTERN = "auto-backup-*.json"


def write_auto_backup(directory: Path) -> Path:
    """Grava o backup do estado atual e remove os arquivos mais antigos."""
    from gestao_escolar.services.app_state import AppState
    from gestao_escolar.services.backup_service import build_backup_document

    exported_at = datetime.now(timezone.utc)
    db = SessionLocal()
    try:
        document = build_backup_document(AppState(db), exported_at)
    finally:
        db.close()

    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"auto-backup-{exported_at.strftime('%Y%m%d-%H%M%S')}.json"
    path.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")

    old_files = sorted(directory.glob(AUTO_BACKUP_PATTERN), reverse=True)[settings.AUTO_BACKUP_KEEP:]
    for old in old_files:
        old.unlink()
    logger.info("Backup automático gravado: %s (%d antigos removidos)", path.name, len(old_files))
    return path


def _auto_backup_job() -> None:
    try:
        write_auto_backup(Path(settings.AUTO_BACKUP_DIR))
    except Exception as exc:
        logger.error("Erro no backup automático: %s", exc, exc_info=True)


def start_scheduler() -> None:
    """Inicia o agendador em segundo plano (chamado na subida da API)."""
    if not settings.AUTO_BACKUP_DIR:
        logger.info("Backup automático desativado (AUTO_BACKUP_DIR vazio).")
        return
    scheduler.add_job(
        _auto_backup_job,
        trigger="interval",
        hours=settings.AUTO_BACKUP_INTERVAL_HOURS,
        id="auto_backup",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        "Scheduler iniciado: backup a cada %d h em %s.",
        settings.AUTO_BACKUP_INTERVAL_HOURS, settings.AUTO_BACKUP_DIR,
    )


def stop_scheduler() -> None:
    """Encerra o agendador (chamado na parada da API)."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler encerrado.")
