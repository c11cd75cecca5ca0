"""Record-keeping services: 1RM estimation, PR detection, comparisons."""
