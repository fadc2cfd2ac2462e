"""
Breed compatibility matching engine.

Responsibilities:
- Normalize raw adopter input into canonical ``MatchPreferences``.
- Score every catalog breed against those preferences (0-100, explainable).
- Rank breeds with a hard size filter and deterministic tie-breaks.
- Map puppies to their breed's score for "Best Match" ordering.
- Orchestrate preference persistence and recommendation retrieval, falling
  back to plain listing filters when the recommendation call fails.
"""
