"""
Modelo SQLAlchemy para a tabela local_storage.
Uma linha por coleção: a chave identifica a coleção, o valor guarda a
coleção inteira serializada em JSON.
"""

from sqlalchemy import Column, DateTime, String, Text, func

from gestao_escolar.database import Base


class StorageEntry(Base):
    __tablename__ = "local_storage"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
