"""Mark-and-sweep reconciliation of a collection against a fresh snapshot."""
import logging
from typing import Any, Dict, Iterable

from normalizer.models import SyncResult

logger = logging.getLogger(__name__)


def reconcile(collection, documents: Dict[str, Any], reserved_keys: Iterable[str] = ()) -> SyncResult:
    """
    Make a collection hold exactly the given documents.
    
    Every document in the snapshot is written (full replace, no field
    diffing) and every stored document missing from the snapshot is
    deleted. Reserved keys hold auxiliary data and are never deleted.
    Re-running with the same snapshot leaves the collection unchanged.
    
    Args:
        collection: Store collection exposing keys(), set_many() and delete_many()
        documents: Mapping of document key to document body
        reserved_keys: Keys excluded from the sweep
        
    Returns:
        SyncResult with counts of added, updated and deleted documents
    """
    reserved = set(reserved_keys)
    
    # Collect previously stored keys
    existing_keys = set(collection.keys()) - reserved
    
    # Keys in the latest fetch
    new_keys = set(documents) - reserved
    
    keys_to_delete = existing_keys - new_keys
    added = len(new_keys - existing_keys)
    updated = len(new_keys & existing_keys)
    
    logger.info(
        f"Reconcile plan for {collection.name}: {added} to add, "
        f"{updated} to overwrite, {len(keys_to_delete)} to delete"
    )
    
    errors = []
    
    written = collection.set_many({key: documents[key] for key in new_keys})
    if written < len(new_keys):
        errors.append(
            f"Wrote {written} of {len(new_keys)} documents to {collection.name}"
        )
    
    # Delete old / abandoned documents
    deleted = collection.delete_many(sorted(keys_to_delete))
    if deleted < len(keys_to_delete):
        errors.append(
            f"Deleted {deleted} of {len(keys_to_delete)} stale documents from {collection.name}"
        )
    
    for error in errors:
        logger.error(error)
    
    logger.info(
        f"Reconcile complete for {collection.name}: {added} added, "
        f"{updated} updated, {deleted} deleted"
    )
    return SyncResult(added=added, updated=updated, deleted=deleted, errors=errors)
