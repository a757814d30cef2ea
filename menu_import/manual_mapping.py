"""
Manual Mapping Module
Turns a reviewer's column assignments into the same DetectionResult the
automatic detector produces, so rows are transformed the same way.
"""
import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from menu_import.exceptions import InvalidMappingError
from menu_import.patterns import (
    VARIANT_GROUPS, VARIANT_ROLES, VariantGroup, find_group_for_role,
)
from menu_import.schemas import (
    SINGULAR_ROLES, ColumnMapping, DetectionResult, ManualMappingRequest,
    PricingType, SemanticRole, UnitType, VariantColumn, VariantType,
)

logger = logging.getLogger(__name__)

IGNORE = "ignore"
MANUAL_CONFIDENCE = 0.8
MISSING_PRODUCT_CONFIDENCE = 0.2


def _parse_role(column_index: int, role_name: str) -> SemanticRole:
    try:
        return SemanticRole(role_name)
    except ValueError:
        raise InvalidMappingError(
            f"Unknown role '{role_name}' assigned to column {column_index}")


def _group_for_roles(roles: Sequence[SemanticRole]) -> VariantGroup:
    """
    Group the assigned variant roles belong to.

    The first declared group holding every role wins, so a kilo column next to
    250g takes the coffee label. Otherwise the first variant's group is used.
    """
    for group in VARIANT_GROUPS:
        if all(role in group.member_roles for role in roles):
            return group
    return find_group_for_role(roles[0])


def apply_manual_mapping(
    headers: Sequence[str],
    assignments: Mapping[int, str],
    pricing_type: PricingType,
    variant_type: Optional[VariantType] = None,
    unit_type: Optional[UnitType] = None,
) -> DetectionResult:
    """
    Build a detection result from explicit column assignments.

    Args:
        headers: Header row of the sheet
        assignments: Column index -> role name ("ignore" to skip a column)
        pricing_type: Pricing model chosen by the reviewer
        variant_type: Variant kind, defaults to the first variant's group type
        unit_type: Default unit for the sheet

    Raises:
        InvalidMappingError: Unknown role name or column outside the header row
    """
    singular: Dict[SemanticRole, int] = {}
    variant_roles: List[Tuple[int, SemanticRole]] = []
    suggestions: List[str] = []

    for column_index in sorted(assignments):
        role_name = assignments[column_index]
        if role_name == IGNORE:
            continue
        if column_index < 0 or column_index >= len(headers):
            raise InvalidMappingError(
                f"Column {column_index} is outside the header row ({len(headers)} columns)")
        role = _parse_role(column_index, role_name)

        if role in VARIANT_ROLES:
            variant_roles.append((column_index, role))
        elif role in singular:
            suggestions.append(
                f'Column "{headers[column_index]}" ignored: {role.value} is already '
                f'assigned to "{headers[singular[role]]}"')
        else:
            singular[role] = column_index

    variants: List[VariantColumn] = []
    variant_group_id = None
    if variant_roles:
        preferred = _group_for_roles([role for _, role in variant_roles])
        variant_group_id = preferred.id
        for column_index, role in variant_roles:
            group = preferred if role in preferred.member_roles else find_group_for_role(role)
            label = group.label_for(role)
            variants.append(VariantColumn(
                column_index=column_index,
                role=role,
                name_ar=label.name_ar,
                name_en=label.name_en,
                variant_type=variant_type or group.variant_type,
                multiplier=label.multiplier,
            ))

    if variants and pricing_type != PricingType.VARIANTS:
        suggestions.append(
            f"{len(variants)} variant columns ignored for {pricing_type.value} pricing")
        variants = []
        variant_group_id = None
    elif pricing_type == PricingType.VARIANTS and not variants:
        suggestions.append("Variant pricing selected but no variant columns were assigned")

    if pricing_type == PricingType.VARIANTS and variant_type is None and variants:
        variant_type = variants[0].variant_type

    mapping = ColumnMapping(
        variants=variants,
        **{role.value: singular.get(role) for role in SINGULAR_ROLES},
    )

    if mapping.product is not None:
        confidence = MANUAL_CONFIDENCE
    else:
        confidence = MISSING_PRODUCT_CONFIDENCE
        suggestions.append("A product name column must be assigned")

    logger.info(
        f"Applied manual mapping: {len(singular)} columns, {len(variants)} variants, "
        f"pricing={pricing_type.value}")

    return DetectionResult(
        mapping=mapping,
        confidence=confidence,
        pricing_type=pricing_type,
        variant_type=variant_type if pricing_type == PricingType.VARIANTS else None,
        unit_type=unit_type,
        variant_group_id=variant_group_id,
        suggestions=suggestions,
        headers=list(headers),
    )


def detection_from_request(headers: Sequence[str],
                           request: ManualMappingRequest) -> DetectionResult:
    """Apply a ManualMappingRequest received from the review UI"""
    return apply_manual_mapping(
        headers,
        request.assignments,
        request.pricing_type,
        variant_type=request.variant_type,
        unit_type=request.unit_type,
    )
