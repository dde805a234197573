"""
Router do backup completo.
Exportação: GET /api/v1/backup/export (download do arquivo JSON)
Importação em duas etapas:
  1. POST /api/v1/backup/import valida o arquivo e devolve um token
  2. POST /api/v1/backup/import/{token}/confirm aplica o backup
Nada é restaurado sem a confirmação explícita.
"""

import uuid
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from gestao_escolar.config import settings
from gestao_escolar.database import get_db
from gestao_escolar.exceptions import FileFormatError, NoValidDataError, RecordNotFoundError
from gestao_escolar.schemas.backup import BackupSummary, PendingImportResponse, RestoreResult
from gestao_escolar.services import backup_service
from gestao_escolar.services.app_state import AppState

router = APIRouter(prefix="/api/v1/backup", tags=["Backup"])


@router.get("/export", summary="Exportar backup completo")
def export_backup(db: Session = Depends(get_db)):
    """
    Retorna o documento de backup (versão 3.0) como anexo
    `backup-<escola>-<AAAA-MM-DD>.json`.
    """
    document, filename = backup_service.export_backup(AppState(db))
    return JSONResponse(
        content=document,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )


@router.get("/summary", response_model=BackupSummary, summary="Contadores dos dados atuais")
def backup_summary(db: Session = Depends(get_db)):
    return backup_service.summarize_state(AppState(db))


@router.post("/import", response_model=PendingImportResponse, status_code=201,
             summary="Validar um arquivo de backup")
async def import_backup(file: UploadFile = File(...)):
    """
    Valida o arquivo e o guarda como importação pendente.
    Retorna o resumo do conteúdo e o token a confirmar.

    - 400: arquivo ilegível ou sem campo `version`
    - 422: nenhuma coleção reconhecida com dados
    """
    if not (file.filename or "").lower().endswith(".json"):
        raise HTTPException(status_code=400, detail="Formato inválido. Envie um arquivo .json.")

    content = await file.read()

    if len(content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"Arquivo muito grande. Tamanho máximo: {settings.MAX_UPLOAD_SIZE_MB} MB.",
        )
    if not content:
        raise HTTPException(status_code=400, detail="O arquivo está vazio.")

    try:
        return backup_service.stage_import(content)
    except FileFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NoValidDataError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/import/{token}", response_model=PendingImportResponse, summary="Consultar uma importação pendente")
def get_pending_import(token: uuid.UUID):
    try:
        return backup_service.get_pending_import(token)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/import/{token}", status_code=204, summary="Cancelar uma importação pendente")
def discard_import(token: uuid.UUID):
    if not backup_service.discard_import(token):
        raise HTTPException(status_code=404, detail="Importação pendente não encontrada.")


@router.post("/import/{token}/confirm", response_model=RestoreResult, summary="Confirmar a restauração")
def confirm_import(token: uuid.UUID, db: Session = Depends(get_db)):
    """
    Aplica o backup: cada coleção presente e não vazia substitui a gravada.
    O cliente deve recarregar os dados após a resposta.
    """
    try:
        return backup_service.confirm_import(AppState(db), token)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
