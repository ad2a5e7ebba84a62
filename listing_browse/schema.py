"""Declarative filter schemas for the listing page variants.

A schema says which record fields the free-text query searches, which
numeric ranges, single selects and yes/no flags a page offers, and under
which URL parameters they travel. FilterEngine and UrlStateSync are both
driven by it, so category, brand and model pages share one engine.
"""
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple

from .config import (
    BRACELET_MATERIAL_OPTIONS,
    CASE_TYPE_OPTIONS,
    CONDITION_OPTIONS,
    GENDER_OPTIONS,
    MOVEMENT_OPTIONS,
)


@dataclass(frozen=True)
class RangeFilter:
    key: str
    record_field: str
    min_param: str
    max_param: str
    label: str = ""


@dataclass(frozen=True)
class SelectFilter:
    key: str
    record_field: str
    options: Tuple[str, ...]
    param: str
    label: str = ""
    option_labels: Dict[str, str] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class FlagFilter:
    """A yes/no filter resolved from the first field that coerces cleanly.

    ``fields`` are looked up on the record, ``nested_fields`` inside its
    nested ``attributes`` mapping.
    """

    key: str
    fields: Tuple[str, ...]
    param: str
    nested_fields: Tuple[str, ...] = ()
    label: str = ""
    yes_label: str = "Evet"
    no_label: str = "Hayır"


@dataclass(frozen=True)
class FilterSchema:
    name: str
    text_fields: Tuple[str, ...]
    ranges: Tuple[RangeFilter, ...] = ()
    selects: Tuple[SelectFilter, ...] = ()
    flags: Tuple[FlagFilter, ...] = ()

    def range(self, key: str) -> Optional[RangeFilter]:
        return next((r for r in self.ranges if r.key == key), None)

    def select(self, key: str) -> Optional[SelectFilter]:
        return next((s for s in self.selects if s.key == key), None)

    def flag(self, key: str) -> Optional[FlagFilter]:
        return next((f for f in self.flags if f.key == key), None)

    def with_options(self, key: str, options: Tuple[str, ...]) -> "FilterSchema":
        """Copy of the schema with a select's whitelist replaced (e.g. a brand's model ids)."""
        selects = tuple(
            replace(s, options=tuple(options)) if s.key == key else s for s in self.selects
        )
        return replace(self, selects=selects)


PRICE_RANGE = RangeFilter("price", "price", "minPrice", "maxPrice", label="Fiyat")

TRADABLE_FLAG = FlagFilter(
    "tradable",
    fields=("isTradable",),
    nested_fields=("isTradable", "tradable", "isTradableBool"),
    param="tradable",
    label="Takas",
)

SHIPPING_FLAG = FlagFilter(
    "shipping",
    fields=("shippingAvailable", "isShippable"),
    nested_fields=("shippingAvailable", "isShippable", "kargoUygun", "shipping"),
    param="shipping",
    label="Kargo",
    yes_label="Uygun",
    no_label="Uygun değil",
)

CATEGORY_SCHEMA = FilterSchema(
    name="category",
    text_fields=("title", "subCategoryName", "categoryName"),
    ranges=(PRICE_RANGE,),
    selects=(
        SelectFilter(
            "condition",
            "conditionKey",
            tuple(CONDITION_OPTIONS),
            param="condition",
            label="Durum",
            option_labels=dict(CONDITION_OPTIONS),
        ),
    ),
    flags=(TRADABLE_FLAG, SHIPPING_FLAG),
)

BRAND_SCHEMA = FilterSchema(
    name="brand",
    text_fields=("title", "modelName", "brandName"),
    ranges=(
        PRICE_RANGE,
        RangeFilter("year", "productionYear", "yearMin", "yearMax", label="Yıl"),
        RangeFilter("diameter", "diameterMm", "diaMin", "diaMax", label="Çap"),
    ),
    selects=(
        # Options are filled in per brand once its models are known.
        SelectFilter("model", "modelId", (), param="modelId", label="Model"),
        SelectFilter("gender", "gender", GENDER_OPTIONS, param="gender", label="Cinsiyet"),
        SelectFilter(
            "movement", "movementType", MOVEMENT_OPTIONS, param="movementType", label="Mekanizma"
        ),
        SelectFilter("caseType", "caseType", CASE_TYPE_OPTIONS, param="caseType", label="Kasa"),
        SelectFilter(
            "bracelet",
            "braceletMaterial",
            BRACELET_MATERIAL_OPTIONS,
            param="braceletMaterial",
            label="Kordon",
        ),
    ),
    flags=(
        FlagFilter(
            "wear",
            fields=("wearExists",),
            param="wear",
            label="Aşınma",
            yes_label="Var",
            no_label="Yok",
        ),
    ),
)

# Model pages are brand pages already pinned to one model remotely.
MODEL_SCHEMA = replace(
    BRAND_SCHEMA,
    name="model",
    selects=tuple(s for s in BRAND_SCHEMA.selects if s.key != "model"),
)

SCHEMAS = {schema.name: schema for schema in (CATEGORY_SCHEMA, BRAND_SCHEMA, MODEL_SCHEMA)}

# Record field each page variant pins remotely to the slug in its path.
NAVIGATION_FIELDS = {"category": "categoryId", "brand": "brandId", "model": "modelId"}

# Selects whose options come from the store at navigation time: variant -> {select key: record field}.
RUNTIME_SELECTS = {"brand": {"model": "modelId"}}
