"""
Configuração da conexão com o banco de dados.
SQLite por padrão; PostgreSQL (ou outro) via DATABASE_URL.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

from gestao_escolar.config import settings

# O SQLite recusa por padrão conexões usadas fora da thread que as criou
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db() -> None:
    """Cria as tabelas ausentes (chamado na inicialização da API)."""
    import gestao_escolar.models  # noqa: F401 registra os modelos em Base.metadata

    Base.metadata.create_all(bind=engine)


def get_db():
    """Dependência FastAPI: fornece uma sessão e a fecha após o uso."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
