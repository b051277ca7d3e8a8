"""Core pipeline: time windows, query dispatch, dataset merging, gap filling."""
