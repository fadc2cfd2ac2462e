"""
Remote client for the matching API.

Responsibilities:
- Fetch ranked recommendations from the server-side scoring endpoint.
- Save adopter preferences for signed-in users.
- Search the puppy listing endpoint (the fallback path).
- Wire these calls into a ``RecommendationOrchestrator``.
"""
