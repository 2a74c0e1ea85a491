"""Transit service alert sync: feed ingestion, per-route merging and queries."""
