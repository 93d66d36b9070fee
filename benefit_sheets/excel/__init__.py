"""Tabular collaborators: workbook / CSV <-> Grid."""
