"""
Recipe search engine.

Responsibilities:
- Parse a raw query into free-text terms and implicit category boosters.
- Retrieve a bounded candidate set from the inverted indices and hard filters.
- Remove every candidate containing one of the user's allergens.
- Score candidates on title rarity, time of day, pantry coverage and boosters,
  and return the top results.
"""
