"""I/O layer: workbook readers, database loader and repositories."""
