"""
Pattern Registry
Bilingual header keywords per column role, the predefined variant groups and
pricing hints derived from worksheet titles.

Every table here is read-only and shared by all imports.
"""
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from menu_import.config import MIN_SUBSTRING_MATCH_LENGTH
from menu_import.schemas import (
    ColumnTypeOption, PricingType, SemanticRole, SheetHint, UnitType, VariantType
)

# Match strengths, strongest first
EXACT_MATCH = 3
HEADER_CONTAINS_KEYWORD = 2
KEYWORD_CONTAINS_HEADER = 1
NO_MATCH = 0

_WHITESPACE_RE = re.compile(r'\s+')


def normalize_header(text: str) -> str:
    """Lowercase, collapse whitespace and trim"""
    return _WHITESPACE_RE.sub(' ', str(text or '')).strip().lower()


def _keywords(*words: str) -> Tuple[str, ...]:
    return tuple(normalize_header(w) for w in words)


ROLE_KEYWORDS: Mapping[SemanticRole, Tuple[str, ...]] = MappingProxyType({
    SemanticRole.PRODUCT: _keywords(
        'المنتج', 'اسم المنتج', 'المنتجات', 'الاسم', 'اسم الصنف', 'الصنف', 'الأصناف',
        'البند', 'product', 'product name', 'name', 'item', 'item name'),
    SemanticRole.CATEGORY: _keywords(
        'القسم', 'الأقسام', 'الفئة', 'التصنيف', 'نوع', 'النوع',
        'category', 'section', 'type'),
    SemanticRole.PRICE: _keywords(
        'السعر', 'سعر', 'الثمن', 'التكلفة', 'price', 'cost'),
    SemanticRole.DESCRIPTION: _keywords(
        'الوصف', 'وصف', 'المكونات', 'تفاصيل', 'التفاصيل',
        'description', 'details', 'ingredients'),
    SemanticRole.NAME_EN: _keywords(
        'الاسم بالانجليزي', 'الاسم الانجليزي', 'الاسم بالإنجليزي', 'الاسم الإنجليزي',
        'english name', 'name en', 'name (en)', 'english'),
    SemanticRole.UNIT: _keywords(
        'الوحدة', 'الوحده', 'وحدة', 'وحدة القياس', 'unit', 'uom'),
    SemanticRole.IMAGE_URL: _keywords(
        'الصورة', 'صورة', 'صوره', 'رابط الصورة', 'image', 'image url', 'photo',
        'picture', 'img'),

    # Size variants (S/M/L)
    SemanticRole.SIZE_SMALL: _keywords('صغير', 'small', 's', 'ص', 'سمول'),
    SemanticRole.SIZE_MEDIUM: _keywords('وسط', 'medium', 'm', 'و', 'متوسط', 'ميديم', 'med'),
    SemanticRole.SIZE_LARGE: _keywords('كبير', 'large', 'l', 'ك', 'لارج'),
    SemanticRole.SIZE_XLARGE: _keywords(
        'كبير جداً', 'كبير جدا', 'xlarge', 'x-large', 'xl', 'اكس لارج',
        'عائلي', 'family', 'جامبو', 'jumbo'),

    # Weight variants (restaurants - ربع/نص/كيلو)
    SemanticRole.WEIGHT_QUARTER: _keywords('ربع', 'ربع كيلو', '¼', '1/4', 'quarter'),
    SemanticRole.WEIGHT_HALF: _keywords('نص', 'نص كيلو', 'نصف', 'نصف كيلو', '½', '1/2', 'half'),
    SemanticRole.WEIGHT_THREE_QUARTER: _keywords(
        'ثلاثة أرباع', 'ثلاثة ارباع', 'ثلاث ارباع', 'تلت ارباع', '¾', '3/4', 'three quarter'),
    SemanticRole.WEIGHT_KILO: _keywords(
        'كيلو', 'كامل', '1 كيلو', 'كيلو جرام', 'kilo', 'kg', '1kg', '1000جم', '1000g'),

    # Weight variants (coffee - grams)
    SemanticRole.WEIGHT_100G: _keywords('100جم', '100g', '100 جم', '100 جرام', '100 غرام'),
    SemanticRole.WEIGHT_250G: _keywords('250جم', '250g', '250 جم', '250 جرام', '250 غرام'),
    SemanticRole.WEIGHT_500G: _keywords('500جم', '500g', '500 جم', '500 جرام', '500 غرام'),

    # Options
    SemanticRole.OPTION_REGULAR: _keywords('عادي', 'عادى', 'regular', 'سينجل', 'single'),
    SemanticRole.OPTION_LARGE: _keywords('دابل', 'double', 'سوبر', 'مميز', 'كبير', 'large'),
})

# Headers matching these roles' keywords are never taken by the keyed role,
# e.g. "English Name" must not become the product column through "name" and
# "سعر الوحدة" (unit price) is a price, not a unit.
ROLE_EXCLUSIONS: Mapping[SemanticRole, Tuple[SemanticRole, ...]] = MappingProxyType({
    SemanticRole.PRODUCT: (SemanticRole.NAME_EN,),
    SemanticRole.UNIT: (SemanticRole.PRICE,),
})


@dataclass(frozen=True)
class VariantLabel:
    """Canonical bilingual label of a variant role"""
    name_ar: str
    name_en: str
    multiplier: Optional[float] = None


@dataclass(frozen=True)
class VariantGroup:
    """Predefined set of mutually exclusive variant columns"""
    id: str
    variant_type: VariantType
    member_roles: Tuple[SemanticRole, ...]
    labels: Mapping[SemanticRole, VariantLabel]

    def label_for(self, role: SemanticRole) -> VariantLabel:
        return self.labels[role]


def _group(group_id: str, variant_type: VariantType,
           labels: Sequence[Tuple[SemanticRole, VariantLabel]]) -> VariantGroup:
    return VariantGroup(
        id=group_id,
        variant_type=variant_type,
        member_roles=tuple(role for role, _ in labels),
        labels=MappingProxyType(dict(labels)),
    )


# Declaration order breaks ties between equally matched groups
VARIANT_GROUPS: Tuple[VariantGroup, ...] = (
    _group('sizes', VariantType.SIZE, [
        (SemanticRole.SIZE_SMALL, VariantLabel('صغير', 'Small')),
        (SemanticRole.SIZE_MEDIUM, VariantLabel('وسط', 'Medium')),
        (SemanticRole.SIZE_LARGE, VariantLabel('كبير', 'Large')),
        (SemanticRole.SIZE_XLARGE, VariantLabel('كبير جداً', 'X-Large')),
    ]),
    _group('weights_restaurant', VariantType.WEIGHT, [
        (SemanticRole.WEIGHT_QUARTER, VariantLabel('ربع كيلو', 'Quarter', 0.25)),
        (SemanticRole.WEIGHT_HALF, VariantLabel('نص كيلو', 'Half', 0.5)),
        (SemanticRole.WEIGHT_THREE_QUARTER, VariantLabel('ثلاثة أرباع', '3/4', 0.75)),
        (SemanticRole.WEIGHT_KILO, VariantLabel('كيلو', 'Kilo', 1.0)),
    ]),
    _group('weights_coffee', VariantType.COFFEE_WEIGHT, [
        (SemanticRole.WEIGHT_100G, VariantLabel('100 جرام', '100g', 0.1)),
        (SemanticRole.WEIGHT_250G, VariantLabel('250 جرام', '250g', 0.25)),
        (SemanticRole.WEIGHT_500G, VariantLabel('500 جرام', '500g', 0.5)),
        (SemanticRole.WEIGHT_KILO, VariantLabel('كيلو', '1kg', 1.0)),
    ]),
    _group('options', VariantType.OPTION, [
        (SemanticRole.OPTION_REGULAR, VariantLabel('عادي', 'Regular')),
        (SemanticRole.OPTION_LARGE, VariantLabel('كبير/دابل', 'Large/Double')),
    ]),
)

VARIANT_ROLES = frozenset(role for g in VARIANT_GROUPS for role in g.member_roles)


def get_variant_group(group_id: Optional[str]) -> Optional[VariantGroup]:
    """Get a variant group by id"""
    for group in VARIANT_GROUPS:
        if group.id == group_id:
            return group
    return None


def find_group_for_role(role: SemanticRole) -> Optional[VariantGroup]:
    """First declared group containing a variant role"""
    for group in VARIANT_GROUPS:
        if role in group.member_roles:
            return group
    return None


def match_strength(header: str, keywords: Sequence[str]) -> int:
    """
    How well a normalized header matches a keyword list.

    Exact matches always count. Substring matches in either direction need
    both sides to be at least MIN_SUBSTRING_MATCH_LENGTH characters, so
    single-letter headers like "s" or "m" only ever match exactly.
    """
    if not header:
        return NO_MATCH
    best = NO_MATCH
    for keyword in keywords:
        if header == keyword:
            return EXACT_MATCH
        if len(keyword) >= MIN_SUBSTRING_MATCH_LENGTH and keyword in header:
            best = max(best, HEADER_CONTAINS_KEYWORD)
        elif len(header) >= MIN_SUBSTRING_MATCH_LENGTH and header in keyword:
            best = max(best, KEYWORD_CONTAINS_HEADER)
    return best


def role_match_strength(header: str, role: SemanticRole) -> int:
    """Match strength of a header for a role, honouring role exclusions"""
    for excluded in ROLE_EXCLUSIONS.get(role, ()):
        if match_strength(header, ROLE_KEYWORDS[excluded]) >= HEADER_CONTAINS_KEYWORD:
            return NO_MATCH
    return match_strength(header, ROLE_KEYWORDS.get(role, ()))


# Keywords that classify ad-hoc numeric columns
WEIGHT_HEADER_WORDS = _keywords(
    'ربع', 'نص', 'نصف', 'أرباع', 'ارباع', 'كيلو', 'جرام', 'غرام',
    'quarter', 'half', 'kilo', 'kg', 'gram', '¼', '½', '¾')
SIZE_HEADER_WORDS = _keywords(
    'صغير', 'وسط', 'متوسط', 'كبير', 'عائلي', 'جامبو',
    'small', 'medium', 'large', 'family', 'jumbo')
_GRAM_AMOUNT_RE = re.compile(r'\d+\s*(?:g|gm|gr|جم|جرام|غرام)(?![a-z])')


def classify_variant_headers(headers: Sequence[str]) -> VariantType:
    """Guess the variant type of a set of ad-hoc price columns"""
    normalized = [normalize_header(h) for h in headers]
    if any(any(w in h for w in WEIGHT_HEADER_WORDS) or _GRAM_AMOUNT_RE.search(h)
           for h in normalized):
        return VariantType.WEIGHT
    if any(any(w in h for w in SIZE_HEADER_WORDS) for h in normalized):
        return VariantType.SIZE
    return VariantType.OPTION


@dataclass(frozen=True)
class SheetNameRule:
    """Sheet title keywords and the pricing model they suggest"""
    keywords: Tuple[str, ...]
    pricing_type: PricingType
    unit_type: Optional[UnitType] = None
    variant_group_id: Optional[str] = None


# Checked in order, first match wins
SHEET_NAME_RULES: Tuple[SheetNameRule, ...] = (
    SheetNameRule(_keywords('خضار', 'خضروات', 'فاكهة', 'فواكه', 'vegetables', 'fruits'),
                  PricingType.PER_UNIT, unit_type=UnitType.KG),
    SheetNameRule(_keywords('سوبر', 'بقالة', 'supermarket', 'grocery'),
                  PricingType.FIXED, unit_type=UnitType.PIECE),
    SheetNameRule(_keywords('أحجام', 'احجام', 'بيتزا', 'pizza', 'sizes'),
                  PricingType.VARIANTS, variant_group_id='sizes'),
    SheetNameRule(_keywords('مشويات', 'كباب', 'كفتة', 'لحوم', 'أوزان', 'اوزان',
                            'grills', 'grill', 'meat', 'kebab', 'weights'),
                  PricingType.VARIANTS, variant_group_id='weights_restaurant'),
    SheetNameRule(_keywords('قهوة', 'جرامات', 'coffee', 'grams'),
                  PricingType.VARIANTS, variant_group_id='weights_coffee'),
    SheetNameRule(_keywords('مطعم', 'وجبات', 'restaurant', 'meals'),
                  PricingType.FIXED, unit_type=UnitType.PIECE),
)


def resolve_sheet_hint(sheet_name: Optional[str]) -> SheetHint:
    """Propose a default pricing model from a worksheet title"""
    name = normalize_header(sheet_name or '')
    if name:
        for rule in SHEET_NAME_RULES:
            if any(keyword in name for keyword in rule.keywords):
                group = get_variant_group(rule.variant_group_id)
                return SheetHint(
                    pricing_type=rule.pricing_type,
                    variant_type=group.variant_type if group else None,
                    unit_type=rule.unit_type,
                    variant_group_id=rule.variant_group_id,
                )
    return SheetHint()


_SINGULAR_OPTIONS: List[Tuple[str, str, str]] = [
    ('ignore', 'تجاهل', 'Ignore'),
    ('category', 'القسم', 'Category'),
    ('product', 'اسم المنتج', 'Product Name'),
    ('description', 'الوصف', 'Description'),
    ('name_en', 'الاسم بالإنجليزي', 'English Name'),
    ('unit', 'الوحدة', 'Unit'),
    ('image_url', 'رابط الصورة', 'Image URL'),
    ('price', 'السعر', 'Price'),
]


def get_column_type_options() -> List[ColumnTypeOption]:
    """Role choices offered to a reviewer when assigning columns by hand"""
    options = [ColumnTypeOption(value=v, label_ar=ar, label_en=en)
               for v, ar, en in _SINGULAR_OPTIONS]
    seen: Dict[SemanticRole, bool] = {}
    for group in VARIANT_GROUPS:
        for role in group.member_roles:
            if role in seen:
                continue
            seen[role] = True
            label = group.label_for(role)
            options.append(ColumnTypeOption(
                value=role.value, label_ar=label.name_ar, label_en=label.name_en))
    return options
