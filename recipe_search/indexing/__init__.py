"""
Corpus indexing package.

Responsibilities:
- Normalise recipe titles and ingredient names into comparable tokens.
- Derive time buckets and difficulty for every recipe.
- Build the inverted indices and IDF statistics in one pass.
- Publish the finished index to the SQLite store as a single atomic swap.
"""
