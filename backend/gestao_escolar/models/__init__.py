# Importa todos os modelos para registrar suas tabelas em Base.metadata
# antes do create_all executado na inicialização.

from gestao_escolar.models.storage import StorageEntry  # noqa: F401
