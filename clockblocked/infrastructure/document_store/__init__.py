from .sqlalchemy_document_store import COLLECTIONS, SqlAlchemyDocumentStore

__all__ = ["COLLECTIONS", "SqlAlchemyDocumentStore"]
