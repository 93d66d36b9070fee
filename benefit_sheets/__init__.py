"""Benefit request JSON <-> spreadsheet conversion.

Converts the ``benefitRequest.dataSet.CVS`` key-value document into one sheet per
entity and reconstructs the document from those sheets.
"""

__version__ = "0.1.0"
