# enrichment_engine/enrichment/__init__.py
"""
Profile enrichment pipeline.

Queries search providers in parallel, extracts facts from result snippets
with ordered regex rules, merges them under a fixed provider precedence and
caches the merged profile. Entry point: orchestrator.ProfileEnrichmentOrchestrator.
"""
