"""license_detect: fuzzy license text detection.

Fingerprint a corpus of known licenses, then rank them against unknown text with
either a positional block hash or MinHash/LSH, optionally refining low scores through
a pipeline of text transforms.
"""

__version__ = "0.1.0"
