"""
Manifest Validator

Structural checks over a parsed manifest. Errors make a package unusable;
warnings are advisory. A failed validation is a normal return value so the
caller keeps both the messages and the parsed manifest.
"""

from typing import List

from ..models.scorm import Manifest, ValidationResult


def validate_manifest(manifest: Manifest) -> ValidationResult:
    """
    Validate a SCORM manifest

    Args:
        manifest: Manifest to check

    Returns:
        ValidationResult with ``valid`` False when any error was found
    """
    errors: List[str] = []
    warnings: List[str] = []

    if not manifest.identifier:
        errors.append("Manifest is missing identifier")
    if not manifest.title:
        warnings.append("Manifest is missing title")
    if not manifest.organizations:
        errors.append("Manifest must contain at least one organization")
    if not manifest.resources:
        warnings.append("Manifest contains no resources")

    for idx, org in enumerate(manifest.organizations):
        if not org.identifier:
            errors.append(f"Organization {idx} is missing identifier")
        if not org.items:
            warnings.append(f"Organization {idx} contains no items")

    for idx, res in enumerate(manifest.resources):
        if not res.identifier:
            errors.append(f"Resource {idx} is missing identifier")
        if not res.files:
            warnings.append(f"Resource {idx} contains no files")

    return ValidationResult(
        valid=not errors,
        errors=errors,
        warnings=warnings,
        manifest=manifest,
    )
