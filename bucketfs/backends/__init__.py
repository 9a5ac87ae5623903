"""Bucket handles for concrete object stores.

Import the submodule for the backend you use (``bucketfs.backends.gcs`` or
``bucketfs.backends.s3``); each one pulls in its own client library.
"""
