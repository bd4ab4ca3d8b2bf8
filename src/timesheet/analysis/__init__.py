"""Date-range resolution, entry filtering, aggregation and reports."""
