from .local_folder import RawLicense, load_licenses_from_folder

__all__ = ["RawLicense", "load_licenses_from_folder"]
