"""
Puppy listings.

Responsibilities:
- Load available puppies from the listing dataset.
- Apply adopter-selected criteria (breed, size, gender, shipping, verified,
  country, state) as hard filters.
"""
