"""
Erros de domínio levantados pelos serviços.
Os routers os convertem em HTTPException; derivam de ValueError como os
demais erros de negócio da aplicação.
"""


class FileFormatError(ValueError):
    """Arquivo ilegível: JSON inválido, planilha corrompida, extensão não aceita."""


class NoValidDataError(ValueError):
    """Backup válido como JSON, mas sem nenhuma coleção reconhecida com dados."""


class RecordNotFoundError(ValueError):
    """Registro inexistente na coleção consultada."""


class StorageError(RuntimeError):
    """Falha de gravação no armazenamento durável (não é repetida)."""
