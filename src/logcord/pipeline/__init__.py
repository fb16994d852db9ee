"""Change-detection pipeline: normalizer, diff engine, audit attribution and routing."""
