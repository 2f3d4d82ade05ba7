# FILE: court_core/__init__.py
"""
court_core package: court formations, drawing paths, hit testing, overlap
constraints, the interaction controller, history, persistence and export.
"""
__all__ = [
    "constants",
    "config",
    "models",
    "geometry",
    "formation",
    "paths",
    "render",
    "hittest",
    "constraints",
    "history",
    "controller",
    "events",
    "store",
    "board",
    "io",
    "export_pdf",
]
