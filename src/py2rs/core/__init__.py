"""
Core Package.

Contains the translation machinery:
- Pattern Catalog and Rule schema
- Matcher and Renderer
- Ingestion (LibCST) and type/expression mapping
- Translation Engine
"""
