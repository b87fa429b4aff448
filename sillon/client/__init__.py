from .couch import CouchClient

__all__ = ["CouchClient"]
