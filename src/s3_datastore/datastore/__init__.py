"""Datastore interface and its S3 implementation."""

from .batch import S3Batch
from .interface import Batch, Datastore
from .listing import KeyListing
from .mapping import KeyMapper
from .query import Query, QueryEntry
from .s3 import S3Datastore, S3DatastoreOptions

__all__ = [
    "Batch",
    "Datastore",
    "KeyListing",
    "KeyMapper",
    "Query",
    "QueryEntry",
    "S3Batch",
    "S3Datastore",
    "S3DatastoreOptions",
]
