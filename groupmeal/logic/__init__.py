"""Core business logic layer.

Subpackages:
- planning: candidate filtering, scoring, plan assembly and the cross-plan optimizer
- shopping: unit normalization, grocery consolidation and delivery text
- reporting: run metrics and nutrition summaries
"""
__all__ = ["planning", "shopping", "reporting"]
