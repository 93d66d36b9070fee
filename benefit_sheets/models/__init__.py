"""Domain models for the benefit request <-> spreadsheet converter.

This package contains the record/grid/document value objects that flow through the
translation engine plus the batch bookkeeping models used by the orchestrator.
"""

from .config_models import ConvertConfig, HeaderStyleConfig
from .document import PLACEHOLDER, CarriedFields, Document
from .record import AttributeValue, Entity, Grid, Record

__all__ = [
    # Translation models
    "AttributeValue",
    "Record",
    "Entity",
    "Grid",
    "CarriedFields",
    "Document",
    "PLACEHOLDER",
    # Configuration models
    "ConvertConfig",
    "HeaderStyleConfig",
]
