"""
Unit Types
Quantity rules per unit of measurement and the words merchants use for them
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, Tuple

from menu_import.schemas import UnitType


@dataclass(frozen=True)
class UnitConfig:
    """Ordering rules for a unit"""
    unit: UnitType
    name_ar: str
    name_en: str
    divisible: bool
    min_quantity: float
    step: float
    aliases: Tuple[str, ...] = ()


_UNITS = (
    # Weight units
    UnitConfig(UnitType.KG, 'كيلوجرام', 'Kilogram', True, 0.25, 0.25,
               ('كيلو', 'كيلوجرام', 'كجم', 'كغ', 'kg', 'kilo', 'kilogram')),
    UnitConfig(UnitType.GRAM, 'جرام', 'Gram', True, 50, 50,
               ('جرام', 'جم', 'غرام', 'g', 'gram', 'grams')),
    # Volume units
    UnitConfig(UnitType.LITER, 'لتر', 'Liter', True, 0.25, 0.25,
               ('لتر', 'l', 'liter', 'litre')),
    UnitConfig(UnitType.ML, 'مللي', 'Milliliter', True, 100, 50,
               ('مللي', 'مل', 'ml', 'milliliter')),
    # Count units
    UnitConfig(UnitType.PIECE, 'قطعة', 'Piece', False, 1, 1,
               ('قطعة', 'قطعه', 'حبة', 'حبه', 'pc', 'pcs', 'piece', 'each')),
    UnitConfig(UnitType.BOTTLE, 'زجاجة', 'Bottle', False, 1, 1,
               ('زجاجة', 'زجاجه', 'ازازة', 'bottle', 'btl')),
    UnitConfig(UnitType.BOX, 'علبة', 'Box', False, 1, 1, ('علبة', 'علبه', 'box')),
    UnitConfig(UnitType.CAN, 'علبة صفيح', 'Can', False, 1, 1, ('علبة صفيح', 'كانز', 'can')),
    UnitConfig(UnitType.BAG, 'كيس', 'Bag', False, 1, 1, ('كيس', 'bag')),
    UnitConfig(UnitType.BUNDLE, 'حزمة', 'Bundle', False, 1, 1, ('حزمة', 'حزمه', 'ربطة', 'bundle')),
    UnitConfig(UnitType.PACK, 'باكيت', 'Pack', False, 1, 1, ('باكيت', 'باكو', 'pack')),
    UnitConfig(UnitType.CARTON, 'كرتونة', 'Carton', False, 1, 1, ('كرتونة', 'كرتونه', 'carton', 'ctn')),
    UnitConfig(UnitType.DOZEN, 'دستة', 'Dozen', False, 1, 1, ('دستة', 'دسته', 'dozen')),
    # Portion units
    UnitConfig(UnitType.PLATE, 'طبق', 'Plate', False, 1, 1, ('طبق', 'plate')),
    UnitConfig(UnitType.MEAL, 'وجبة', 'Meal', False, 1, 1, ('وجبة', 'وجبه', 'meal')),
    UnitConfig(UnitType.SANDWICH, 'ساندوتش', 'Sandwich', False, 1, 1, ('ساندوتش', 'sandwich')),
    UnitConfig(UnitType.CUP, 'كوب', 'Cup', False, 1, 1, ('كوب', 'cup')),
    UnitConfig(UnitType.BOWL, 'طبق عميق', 'Bowl', False, 1, 1, ('طبق عميق', 'bowl')),
    UnitConfig(UnitType.TRAY, 'صينية', 'Tray', False, 1, 1, ('صينية', 'صينيه', 'tray')),
    UnitConfig(UnitType.ROLL, 'رول', 'Roll', False, 1, 1, ('رول', 'roll')),
    UnitConfig(UnitType.SLICE, 'شريحة', 'Slice', False, 1, 1, ('شريحة', 'شريحه', 'slice')),
    UnitConfig(UnitType.PORTION, 'حصة', 'Portion', False, 1, 1, ('حصة', 'حصه', 'portion')),
)

UNIT_TYPES = MappingProxyType({u.unit: u for u in _UNITS})

_ALIASES = MappingProxyType({
    alias: u.unit for u in _UNITS for alias in (u.unit.value,) + u.aliases
})


# Usual unit for common category names, checked in order
CATEGORY_UNITS: Tuple[Tuple[str, UnitType], ...] = (
    # Vegetables & Fruits
    ('خضار', UnitType.KG),
    ('فاكهة', UnitType.KG),
    ('فواكه', UnitType.KG),
    ('vegetables', UnitType.KG),
    ('fruits', UnitType.KG),
    # Meat & Poultry
    ('لحوم', UnitType.KG),
    ('دواجن', UnitType.KG),
    ('meat', UnitType.KG),
    ('poultry', UnitType.KG),
    # Drinks
    ('مشروبات', UnitType.BOTTLE),
    ('عصائر', UnitType.BOTTLE),
    ('drinks', UnitType.BOTTLE),
    ('beverages', UnitType.BOTTLE),
    # Restaurant
    ('مطعم', UnitType.PIECE),
    ('وجبات', UnitType.MEAL),
    ('restaurant', UnitType.PIECE),
    ('meals', UnitType.MEAL),
    # Bakery
    ('مخبوزات', UnitType.PIECE),
    ('حلويات', UnitType.PIECE),
    ('bakery', UnitType.PIECE),
    ('sweets', UnitType.PIECE),
)


def get_unit_config(unit: Optional[UnitType]) -> Optional[UnitConfig]:
    """Get unit configuration, None for unknown or missing units"""
    if unit is None:
        return None
    return UNIT_TYPES.get(unit)


def quantity_rules(unit: Optional[UnitType]) -> Tuple[float, float]:
    """(min_quantity, quantity_step) for a unit; whole items when unknown"""
    config = get_unit_config(unit)
    if config is None:
        return 1, 1
    return config.min_quantity, config.step


def resolve_unit(text: str) -> Optional[UnitType]:
    """Map a unit cell such as 'كيلو' or 'KG' to a unit type"""
    normalized = ' '.join(text.lower().split())
    if not normalized:
        return None
    return _ALIASES.get(normalized)


def suggest_unit(category_name: str) -> Optional[UnitType]:
    """Usual unit for a category name such as 'مشروبات', None if unknown"""
    normalized = ' '.join(category_name.lower().split())
    if not normalized:
        return None
    for keyword, unit in CATEGORY_UNITS:
        if keyword in normalized:
            return unit
    return None
