"""
Infrastructure Layer - external collaborators.

- cache: per-entry expiring cache
- delivery: location validation and delivery terms
- sources: source adapters
"""
