"""
Configuração central da aplicação via variáveis de ambiente.
Em desenvolvimento, os valores podem vir de um arquivo .env.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Banco de dados (armazenamento chave-valor das coleções)
    DATABASE_URL: str = "sqlite:///./gestao_escolar.db"

    # Limite de tamanho para planilhas e arquivos de backup enviados
    MAX_UPLOAD_SIZE_MB: int = 10

    # Nome usado no backup quando a escola ainda não foi cadastrada
    DEFAULT_SCHOOL_NAME: str = "Sistema de Gestão Escolar"

    # Backup automático (desativado enquanto AUTO_BACKUP_DIR estiver vazio)
    AUTO_BACKUP_DIR: str = ""
    AUTO_BACKUP_INTERVAL_HOURS: int = 24
    AUTO_BACKUP_KEEP: int = 7

    # Ambiente
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
