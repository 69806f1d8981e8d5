"""
SCO Extractor

Flattens the item tree of the first organization and resolves every leaf
item to a launch file that actually exists in the package.
"""

import logging
from typing import Callable, Dict, List, Optional

from ..models.scorm import Item, Manifest, Resource, Sco

logger = logging.getLogger(__name__)

HasEntry = Callable[[str], bool]


def flatten_items(items: Optional[List[Item]]) -> List[Item]:
    """Pre-order depth-first flattening: a node comes before its children."""
    result: List[Item] = []
    for item in items or []:
        result.append(item)
        if item.items:
            result.extend(flatten_items(item.items))
    return result


def _launch_path(resource: Resource) -> Optional[str]:
    if resource.href:
        return resource.href
    if resource.files and resource.files[0].href:
        return resource.files[0].href
    return None


def extract_scos(manifest: Manifest, has_entry: HasEntry) -> List[Sco]:
    """
    Extract the launchable SCOs of a manifest

    Args:
        manifest: Parsed manifest
        has_entry: Predicate telling whether a path exists in the archive

    Returns:
        SCOs in authoring order. ``orderIndex`` is the item's position in the
        full flattened tree, so indices have gaps where items were skipped.
    """
    if not manifest.organizations:
        return []

    organization = manifest.organizations[0]
    resources: Dict[str, Resource] = {}
    for resource in manifest.resources:
        # first declaration wins on duplicate identifiers
        resources.setdefault(resource.identifier, resource)

    scos: List[Sco] = []
    for index, item in enumerate(flatten_items(organization.items)):
        if not item.identifierref:
            continue

        resource = resources.get(item.identifierref)
        if resource is None:
            logger.debug(
                "Item %r references unknown resource %r",
                item.identifier, item.identifierref,
            )
            continue

        launch_file = _launch_path(resource)
        if not launch_file:
            logger.debug("Resource %r has no launch file", resource.identifier)
            continue

        if not has_entry(launch_file):
            logger.info(
                "Skipping item %r: launch file %r is not in the package",
                item.identifier, launch_file,
            )
            continue

        scos.append(Sco(
            identifier=item.identifier,
            title=item.title,
            launchUrl=launch_file,
            entryPoint=launch_file,
            metadata={
                "resourceType": resource.type,
                "parameters": item.parameters,
            },
            orderIndex=index,
        ))

    return scos
