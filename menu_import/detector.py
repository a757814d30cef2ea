"""
Column Detection Module
Works out which spreadsheet column plays which role (product, price, size
columns, ...) and which pricing model the sheet uses.

Decision order, first applicable step wins for each concern:
    1. singular roles by keyword, in SINGULAR_ROLES priority order
       (left-most header matching exactly or by substring; claimed headers
       are skipped by later roles)
    2. product column guess when no product header matched
    3. named variant group with the most matched columns (ties: declaration order);
       a winning group takes precedence over a matched price column
    4. the matched price column
    5. numeric-column sniffing: one numeric column is the price, several are
       ad-hoc variants
    6. pricing type: variant columns > per-unit sheet hint > variant-group
       sheet hint > fixed
"""
import logging
import re
from typing import Dict, List, Optional, Sequence, Set, Tuple

from menu_import.cells import CellValue, is_probably_numeric_column
from menu_import.config import LOW_CONFIDENCE_THRESHOLD, MIN_VARIANT_COLUMNS
from menu_import.patterns import (
    HEADER_CONTAINS_KEYWORD, NO_MATCH, ROLE_KEYWORDS, VARIANT_GROUPS, VARIANT_ROLES,
    VariantGroup, classify_variant_headers, match_strength, normalize_header,
    resolve_sheet_hint, role_match_strength,
)
from menu_import.schemas import (
    SINGULAR_ROLES, ColumnMapping, DetectionResult, PricingType, SemanticRole,
    VariantColumn,
)

logger = logging.getLogger(__name__)

_DIGIT_RE = re.compile(r'\d')

Rows = Sequence[Sequence[CellValue]]


def detect_columns(headers: Sequence[str], rows: Optional[Rows] = None,
                   sheet_name: Optional[str] = None) -> DetectionResult:
    """
    Detect the column mapping and pricing model of one sheet.

    Args:
        headers: Header row as read from the sheet
        rows: Optional data rows, used for numeric-column sniffing
        sheet_name: Optional worksheet title, used as a pricing hint

    Returns:
        DetectionResult with mapping, confidence and reviewer suggestions
    """
    headers = [str(h) if h is not None else "" for h in headers]
    normalized = [normalize_header(h) for h in headers]
    hint = resolve_sheet_hint(sheet_name)
    suggestions: List[str] = []

    # Singular roles; the price claim stays provisional until variants are known
    assigned = _match_singular_roles(normalized)
    provisional_price = assigned.pop(SemanticRole.PRICE, None)
    taken: Set[int] = set(assigned.values())
    matched_slots = len(assigned)

    if SemanticRole.PRODUCT not in assigned:
        excluded = taken | ({provisional_price} if provisional_price is not None else set())
        guess = _guess_product_column(normalized, excluded, rows)
        if guess is not None:
            assigned[SemanticRole.PRODUCT] = guess
            taken.add(guess)
            suggestions.append(f'Guessed product column: "{headers[guess]}"')

    # Named variant groups
    group, variant_columns = _match_variant_group(headers, normalized, taken)
    price_column = None
    variant_type = group.variant_type if group else None
    variant_group_id = group.id if group else None

    if not variant_columns:
        if provisional_price is not None:
            price_column = provisional_price
        elif rows:
            price_column, variant_columns = _sniff_numeric_columns(headers, rows, taken)
            if price_column is not None:
                suggestions.append(
                    f'Using numeric column "{headers[price_column]}" as the price')
            elif variant_columns:
                variant_type = variant_columns[0].variant_type
                suggestions.append(
                    f'Treating {len(variant_columns)} numeric columns as price options')

    if price_column is not None:
        matched_slots += 1
    matched_slots += len(variant_columns)

    # Pricing model; the sheet hint only applies without variant columns
    unit_type = None
    if variant_columns:
        pricing_type = PricingType.VARIANTS
    elif hint.pricing_type == PricingType.PER_UNIT:
        pricing_type = PricingType.PER_UNIT
        unit_type = hint.unit_type
    elif hint.variant_group_id is not None:
        pricing_type = PricingType.VARIANTS
        variant_type = hint.variant_type
        variant_group_id = hint.variant_group_id
        unit_type = hint.unit_type
        suggestions.append(
            f'Sheet name suggests {variant_group_id} pricing but no variant columns were found')
    else:
        pricing_type = PricingType.FIXED
        unit_type = hint.unit_type

    mapping = ColumnMapping(
        product=assigned.get(SemanticRole.PRODUCT),
        category=assigned.get(SemanticRole.CATEGORY),
        description=assigned.get(SemanticRole.DESCRIPTION),
        name_en=assigned.get(SemanticRole.NAME_EN),
        unit=assigned.get(SemanticRole.UNIT),
        image_url=assigned.get(SemanticRole.IMAGE_URL),
        price=price_column,
        variants=variant_columns,
    )

    total_possible = max(4 + max(1, len(variant_columns)), 1)
    confidence = min(1.0, max(0.0, matched_slots / total_possible))

    if confidence < LOW_CONFIDENCE_THRESHOLD:
        suggestions.append('Some columns were not recognized, please check the mapping')
    if mapping.product is None:
        suggestions.append('Product name column not found')

    logger.info(
        f"Detected columns for sheet '{sheet_name or ''}': pricing={pricing_type.value}, "
        f"variants={len(variant_columns)}, confidence={confidence:.2f}")

    return DetectionResult(
        mapping=mapping,
        confidence=confidence,
        pricing_type=pricing_type,
        variant_type=variant_type,
        unit_type=unit_type,
        variant_group_id=variant_group_id,
        suggestions=suggestions,
        headers=list(headers),
    )


def _first_header_for_role(normalized: Sequence[str], role: SemanticRole,
                           taken: Set[int]) -> Optional[int]:
    """Left-most free header matching the role's keywords"""
    for index, header in enumerate(normalized):
        if index in taken:
            continue
        if role_match_strength(header, role) > NO_MATCH:
            return index
    return None


def _match_singular_roles(normalized: Sequence[str]) -> Dict[SemanticRole, int]:
    """Assign singular roles in priority order; a claimed header is not reused"""
    assigned: Dict[SemanticRole, int] = {}
    taken: Set[int] = set()
    for role in SINGULAR_ROLES:
        index = _first_header_for_role(normalized, role, taken)
        if index is not None:
            assigned[role] = index
            taken.add(index)
            logger.debug(f"Column {index} ('{normalized[index]}') -> {role.value}")
    return assigned


def _is_variant_header(header: str) -> bool:
    return any(match_strength(header, ROLE_KEYWORDS[role]) >= HEADER_CONTAINS_KEYWORD
               for role in VARIANT_ROLES)


def _guess_product_column(normalized: Sequence[str], taken: Set[int],
                          rows: Optional[Rows]) -> Optional[int]:
    """First free text-looking column when no header names the product"""
    for index, header in enumerate(normalized):
        if index in taken or not header or _DIGIT_RE.search(header):
            continue
        if _is_variant_header(header):
            continue
        if rows and is_probably_numeric_column(rows, index):
            continue
        return index
    return None


def _match_group_members(group: VariantGroup, normalized: Sequence[str],
                         taken: Set[int]) -> List[Tuple[int, SemanticRole]]:
    """
    Match a group's roles to distinct free headers.

    Stronger matches are placed first so that a header named "كيلو" goes to
    the kilo role and not to "ربع كيلو" through a partial match.
    """
    candidates = []
    for order, role in enumerate(group.member_roles):
        keywords = ROLE_KEYWORDS[role]
        for index, header in enumerate(normalized):
            if index in taken:
                continue
            strength = match_strength(header, keywords)
            if strength:
                candidates.append((-strength, order, index, role))
    candidates.sort(key=lambda c: (c[0], c[1], c[2]))

    used_roles = set()
    used_columns = set()
    matched = []
    for _, _, index, role in candidates:
        if role in used_roles or index in used_columns:
            continue
        used_roles.add(role)
        used_columns.add(index)
        matched.append((index, role))
    return sorted(matched, key=lambda m: m[0])


def _match_variant_group(headers: Sequence[str], normalized: Sequence[str],
                         taken: Set[int]) -> Tuple[Optional[VariantGroup], List[VariantColumn]]:
    """Pick the group with the most matched columns, first declared on ties"""
    best_group = None
    best_matches: List[Tuple[int, SemanticRole]] = []
    for group in VARIANT_GROUPS:
        matches = _match_group_members(group, normalized, taken)
        if len(matches) >= MIN_VARIANT_COLUMNS and len(matches) > len(best_matches):
            best_group, best_matches = group, matches

    if best_group is None:
        return None, []

    columns = []
    for index, role in best_matches:
        label = headers[index].strip()
        columns.append(VariantColumn(
            column_index=index,
            role=role,
            name_ar=label,
            name_en=label,
            variant_type=best_group.variant_type,
            multiplier=best_group.label_for(role).multiplier,
        ))
    logger.debug(f"Variant group '{best_group.id}' matched {len(columns)} columns")
    return best_group, columns


def _sniff_numeric_columns(headers: Sequence[str], rows: Rows,
                           taken: Set[int]) -> Tuple[Optional[int], List[VariantColumn]]:
    """Fall back to columns whose sampled cells are numbers"""
    numeric = [index for index in range(len(headers))
               if index not in taken and is_probably_numeric_column(rows, index)]
    if len(numeric) == 1:
        return numeric[0], []
    if len(numeric) < 2:
        return None, []

    labels = [headers[i].strip() or f"Column {i + 1}" for i in numeric]
    variant_type = classify_variant_headers(labels)
    columns = [
        VariantColumn(column_index=index, name_ar=label, name_en=label,
                      variant_type=variant_type)
        for index, label in zip(numeric, labels)
    ]
    return None, columns
