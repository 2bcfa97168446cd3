"""Pure analysis functions: aggregation, thresholding, hashing, duplicates."""
