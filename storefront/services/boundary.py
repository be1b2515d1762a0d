"""
Service boundary helpers

Converts whatever a repository raised into a StoreError so services can turn
it into an ActionResult.
"""
import psycopg2
from pydantic import ValidationError

from storefront.core.auth import Identity
from storefront.core.errors import BackendUnavailable, InvalidRecord, NotFound, StoreError, Unauthenticated

# Everything a service action catches and reports as a failed result.
# ValidationError comes from rows that don't fit the domain models.
BOUNDARY_ERRORS = (StoreError, psycopg2.Error, ValidationError)


def to_store_error(error: Exception) -> StoreError:
    if isinstance(error, StoreError):
        return error
    if isinstance(error, psycopg2.OperationalError):
        return BackendUnavailable()
    # Malformed IDs (e.g. not a UUID) can't match any row
    if isinstance(error, psycopg2.DataError):
        return NotFound()
    if isinstance(error, ValidationError):
        return InvalidRecord()
    return StoreError()


def require_identity(identity: Identity) -> str:
    """Return the caller's ID or raise Unauthenticated"""
    if identity is None:
        raise Unauthenticated()
    return identity.id
