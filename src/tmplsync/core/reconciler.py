"""Version identity reconciliation.

Maps each declared version to a version created by an earlier pass so that
unchanged versions keep their identity across runs instead of being
recreated. Candidates are grouped by content hash in the checkpoint; each
bucket is a FIFO queue shared by the whole declared list.

Matching runs in two passes:

1. Exact match: a declared entry with an explicit name consumes the record
   in its bucket carrying the same name.
2. Leftovers: every entry still unresolved consumes the first remaining
   record in its bucket, adopting the record's name unless it declared one.

Entries whose bucket is missing or exhausted are left unresolved (id None)
and will be created. Exact name matches always win over positional ones, so
renaming one of several identical versions never steals a sibling's
identity.
"""

import logging

from ..models import (
    LastVersionsByHash,
    PreviousVersionRecord,
    ResolvedVersion,
    VersionDefinition,
)

logger = logging.getLogger(__name__)


def _compatible(
    record: PreviousVersionRecord,
    definition: VersionDefinition,
    match_variables: bool,
) -> bool:
    """Return True if record may be reused for definition."""
    if not match_variables:
        return True
    return record.tf_vars == definition.tf_vars()


def _bind(entry: ResolvedVersion, record: PreviousVersionRecord) -> None:
    entry.id = record.id
    entry.previous = record
    if entry.definition.name is None:
        entry.name = record.name


def reconcile_versions(
    definitions: list[VersionDefinition],
    last_versions: LastVersionsByHash,
    match_variables: bool = False,
) -> list[ResolvedVersion]:
    """Resolve the identity of each declared version against the checkpoint.

    Args:
        definitions: Declared versions in order, each with its content hash
        last_versions: Checkpoint from the previous pass (not modified)
        match_variables: Only reuse a record whose variables equal the declared ones

    Returns:
        One ResolvedVersion per definition, in declared order. ``id`` is a
        record ID from the checkpoint or None for versions to create.
    """
    buckets = {content_hash: list(records) for content_hash, records in last_versions.items()}
    resolved = [
        ResolvedVersion(index=i, definition=definition, name=definition.name)
        for i, definition in enumerate(definitions)
    ]

    for entry in resolved:
        bucket = buckets.get(entry.definition.content_hash)
        if not bucket or entry.definition.name is None:
            continue
        for j, record in enumerate(bucket):
            if record.name == entry.definition.name and _compatible(
                record, entry.definition, match_variables
            ):
                _bind(entry, record)
                del bucket[j]
                logger.debug("Matched %s to %s by name", entry.label, record.id)
                break

    for entry in resolved:
        if not entry.is_new:
            continue
        bucket = buckets.get(entry.definition.content_hash)
        if not bucket:
            continue
        j = next(
            (
                j
                for j, record in enumerate(bucket)
                if _compatible(record, entry.definition, match_variables)
            ),
            None,
        )
        if j is None:
            continue
        record = bucket.pop(j)
        _bind(entry, record)
        logger.debug("Matched %s to leftover %s", entry.label, record.id)

    for entry in resolved:
        if entry.is_new:
            logger.debug("%s has new content and will be created", entry.label)
    return resolved


def build_last_versions(versions: list[ResolvedVersion]) -> LastVersionsByHash:
    """Build the next checkpoint from versions that all exist remotely.

    Records are grouped by content hash in declared order, so identical
    versions are matched back in the same order on the next pass.

    Args:
        versions: Resolved versions after apply, each with id and name set

    Returns:
        Mapping of content hash to ordered records

    Raises:
        ValueError: If a version has no remote identity yet
    """
    last_versions: LastVersionsByHash = {}
    for version in versions:
        last_versions.setdefault(version.definition.content_hash, []).append(version.to_record())
    return last_versions
