"""
Catalog Schema Definitions
Pydantic models for column detection results and the extracted menu catalog
"""
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional, Dict
from enum import Enum


class PricingType(str, Enum):
    """How a product is priced"""
    FIXED = "fixed"
    PER_UNIT = "per_unit"
    VARIANTS = "variants"


class VariantType(str, Enum):
    """Kinds of priced options"""
    SIZE = "size"
    WEIGHT = "weight"
    COFFEE_WEIGHT = "coffee_weight"
    OPTION = "option"


class UnitType(str, Enum):
    """Units of measurement for products"""
    KG = "kg"
    GRAM = "gram"
    LITER = "liter"
    ML = "ml"
    PIECE = "piece"
    BOTTLE = "bottle"
    BOX = "box"
    CAN = "can"
    BAG = "bag"
    BUNDLE = "bundle"
    PACK = "pack"
    CARTON = "carton"
    DOZEN = "dozen"
    PLATE = "plate"
    MEAL = "meal"
    SANDWICH = "sandwich"
    CUP = "cup"
    BOWL = "bowl"
    TRAY = "tray"
    ROLL = "roll"
    SLICE = "slice"
    PORTION = "portion"


class SemanticRole(str, Enum):
    """Purpose of a spreadsheet column"""
    CATEGORY = "category"
    PRODUCT = "product"
    PRICE = "price"
    DESCRIPTION = "description"
    NAME_EN = "name_en"
    UNIT = "unit"
    IMAGE_URL = "image_url"

    # Variant slots
    SIZE_SMALL = "size_small"
    SIZE_MEDIUM = "size_medium"
    SIZE_LARGE = "size_large"
    SIZE_XLARGE = "size_xlarge"
    WEIGHT_QUARTER = "weight_quarter"
    WEIGHT_HALF = "weight_half"
    WEIGHT_THREE_QUARTER = "weight_three_quarter"
    WEIGHT_KILO = "weight_kilo"
    WEIGHT_100G = "weight_100g"
    WEIGHT_250G = "weight_250g"
    WEIGHT_500G = "weight_500g"
    OPTION_REGULAR = "option_regular"
    OPTION_LARGE = "option_large"


# Roles that hold a single column each, in detection priority order
SINGULAR_ROLES = (
    SemanticRole.PRODUCT,
    SemanticRole.CATEGORY,
    SemanticRole.DESCRIPTION,
    SemanticRole.NAME_EN,
    SemanticRole.UNIT,
    SemanticRole.IMAGE_URL,
    SemanticRole.PRICE,
)


class VariantColumn(BaseModel):
    """A spreadsheet column holding the price of one variant"""
    column_index: int
    role: Optional[SemanticRole] = Field(
        None, description="Variant role, absent for ad-hoc numeric columns")
    name_ar: str
    name_en: str
    variant_type: VariantType
    multiplier: Optional[float] = Field(
        None, description="Fraction of the canonical unit (quarter = 0.25)")


class ColumnMapping(BaseModel):
    """Resolved column index for each semantic role of one sheet"""
    product: Optional[int] = None
    category: Optional[int] = None
    description: Optional[int] = None
    name_en: Optional[int] = None
    unit: Optional[int] = None
    image_url: Optional[int] = None
    price: Optional[int] = None
    variants: List[VariantColumn] = Field(default_factory=list)

    @property
    def is_usable(self) -> bool:
        return self.product is not None

    def assigned_columns(self) -> List[int]:
        """Every column index claimed by a role"""
        columns = [getattr(self, role.value) for role in SINGULAR_ROLES]
        columns = [c for c in columns if c is not None]
        columns.extend(v.column_index for v in self.variants)
        return columns


class SheetHint(BaseModel):
    """Pricing model guessed from a worksheet title"""
    pricing_type: PricingType = PricingType.FIXED
    variant_type: Optional[VariantType] = None
    unit_type: Optional[UnitType] = None
    variant_group_id: Optional[str] = None


class DetectionResult(BaseModel):
    """Column mapping for one sheet plus how much we trust it"""
    mapping: ColumnMapping
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    pricing_type: PricingType = PricingType.FIXED
    variant_type: Optional[VariantType] = None
    unit_type: Optional[UnitType] = None
    variant_group_id: Optional[str] = None
    suggestions: List[str] = Field(default_factory=list)
    headers: List[str] = Field(default_factory=list)


class ExtractedVariant(BaseModel):
    """One priced option of a product"""
    name_ar: str
    name_en: str
    price: float = Field(..., gt=0)
    is_default: bool = False
    display_order: int = 1
    multiplier: Optional[float] = None


class ExtractedProduct(BaseModel):
    """
    Product extracted from one spreadsheet row.
    Rows that could not be fully priced are kept and flagged for review.
    """
    name_ar: str
    name_en: Optional[str] = None
    description_ar: Optional[str] = None

    # Pricing
    pricing_type: PricingType = PricingType.FIXED
    variant_type: Optional[VariantType] = None
    price: Optional[float] = Field(None, gt=0)
    unit_type: Optional[UnitType] = None
    min_quantity: float = 1
    quantity_step: float = 1
    variants: Optional[List[ExtractedVariant]] = None

    # Media
    image_url: Optional[str] = None

    # Source Tracking
    needs_review: bool = Field(False, description="Flag for QC review")
    source_note: str = ""
    source_row: Optional[int] = Field(
        None, description="Spreadsheet row number this product was read from")

    @model_validator(mode='after')
    def check_variant_pricing(self):
        if self.pricing_type == PricingType.VARIANTS:
            if not self.variants:
                raise ValueError("variant-priced products need at least one variant")
            if self.price != self.variants[0].price:
                raise ValueError("product price must equal the first variant's price")
        return self


class ExtractedCategory(BaseModel):
    """Category and the products filed under it"""
    name_ar: str
    name_en: Optional[str] = None
    display_order: int = 1
    products: List[ExtractedProduct] = Field(default_factory=list)
    default_pricing_type: PricingType = PricingType.FIXED
    default_unit_type: Optional[UnitType] = None
    default_variant_type: Optional[VariantType] = None


class ParsedExcelData(BaseModel):
    """Catalog extracted from one sheet, or merged across sheets"""
    categories: List[ExtractedCategory] = Field(default_factory=list)
    totalProducts: int = 0
    warnings: List[str] = Field(default_factory=list)
    pricing_type: PricingType = PricingType.FIXED
    variant_type: Optional[VariantType] = None
    unit_type: Optional[UnitType] = None

    @property
    def products_needing_review(self) -> int:
        return sum(1 for p in self.get_all_products() if p.needs_review)

    def get_all_products(self) -> List[ExtractedProduct]:
        products = []
        for category in self.categories:
            products.extend(category.products)
        return products


class SheetResult(BaseModel):
    """Detection and extraction output for a single sheet"""
    name: str
    detection: DetectionResult
    data: ParsedExcelData


class MultiSheetResult(BaseModel):
    """Complete workbook extraction result"""
    sheets: List[SheetResult] = Field(default_factory=list)
    combined: ParsedExcelData = Field(default_factory=ParsedExcelData)
    skipped_sheets: List[str] = Field(
        default_factory=list, description="Sheets without a header and data rows")


class ManualMappingRequest(BaseModel):
    """Column assignment made by a human reviewer"""
    assignments: Dict[int, str] = Field(
        default_factory=dict, description="Column index -> role name or 'ignore'")
    pricing_type: PricingType = PricingType.FIXED
    variant_type: Optional[VariantType] = None
    unit_type: Optional[UnitType] = None


class ColumnTypeOption(BaseModel):
    """Role choice offered to the reviewer for a column"""
    value: str
    label_ar: str
    label_en: str
