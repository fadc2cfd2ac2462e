"""
Breed catalog.

Responsibilities:
- Load the canonical breed dataset (size, characteristic vector, tags).
- Serve it as an immutable snapshot to the matching engine.
- Tolerate unknown characteristics (blank cells) without failing.
"""
