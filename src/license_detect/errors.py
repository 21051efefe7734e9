"""Exception taxonomy.

- MalformedInputError: bad pattern, bad fingerprint token, bad config value. Fatal.
- StoreIOError: a store path exists but cannot be read or written.
- TransformError: a pipeline segment failed mid-run; the run is aborted.
- NormalizationMismatchError: normalization swapped on a populated registry.

Corrupt or absent stores are not errors: loads degrade to zero entries.
"""

from __future__ import annotations


class LicenseDetectError(Exception):
    """Base class for every error raised by license_detect."""


class MalformedInputError(LicenseDetectError, ValueError):
    pass


class StoreIOError(LicenseDetectError, OSError):
    pass


class TransformError(LicenseDetectError):
    pass


class NormalizationMismatchError(LicenseDetectError):
    pass
