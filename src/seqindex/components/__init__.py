"""Building blocks of the indexing and retrieval engine."""
