"""GitOps demo service: health, version and deployment history."""

__version__ = '1.0.0'
