"""
Storage module for the Sanity content store.

The upload API sends photo bytes to the Sanity asset pipeline and
creates photo documents through the mutation API.
"""
from app.storage.sanity_client import SanityClient, SanityError

__all__ = ["SanityClient", "SanityError"]
