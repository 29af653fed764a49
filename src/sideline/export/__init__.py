from .service import ExportService, export_tables

__all__ = ["ExportService", "export_tables"]
