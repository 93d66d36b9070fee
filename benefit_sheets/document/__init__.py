from .codec import MalformedDocumentError, dump_document, load_document, parse_document, serialize_document

__all__ = [
    "MalformedDocumentError",
    "parse_document",
    "serialize_document",
    "load_document",
    "dump_document",
]
