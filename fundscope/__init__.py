"""fundscope: fund composition resolution, ratio enrichment and exposure aggregation."""
