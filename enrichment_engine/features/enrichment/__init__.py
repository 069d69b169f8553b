# enrichment_engine/features/enrichment/__init__.py
