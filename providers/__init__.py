"""
Metadata Providers Package
This package contains providers for looking up song metadata remotely.
"""
from .base import MetadataProvider, LookupResult
from .itunes import ItunesMetadataProvider

__all__ = [
    'MetadataProvider',
    'LookupResult',
    'ItunesMetadataProvider',
]
