"""
Reference catalogs for stand specs.

Product-category profiles used to fill missing form values, the stand material
catalog used by contracts, unit factors, and the two reference specs the
studio was calibrated against.
"""

from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, Optional

from .contracts import Layout, ProductDims, Spec, StandDims

# Length unit -> centimeters, exact so decimal inputs convert without drift
CM_PER_UNIT = {
    "mm": Fraction(1, 10),
    "cm": Fraction(1),
    "m": Fraction(100),
    "in": Fraction("2.54"),
    "ft": Fraction("30.48"),
}

UNIT_ALIASES = {
    "millimeter": "mm",
    "millimeters": "mm",
    "centimeter": "cm",
    "centimeters": "cm",
    "meter": "m",
    "meters": "m",
    "inch": "in",
    "inches": "in",
    '"': "in",
    "foot": "ft",
    "feet": "ft",
    "'": "ft",
}


@dataclass(frozen=True)
class ProductProfile:
    """Default stand/product numbers for one product category."""

    name: str
    product: ProductDims
    stand: StandDims
    depth_count: int


# Wafer cookie is the reference profile (1x12 single-file queue, 15x30x30 stand).
PRODUCT_PROFILES: Dict[str, ProductProfile] = {
    "wafer_cookie": ProductProfile(
        name="Wafer Cookie",
        product=ProductDims(width=13.0, height=5.0, depth=2.5),
        stand=StandDims(width=15.0, depth=30.0, height=30.0, shelf_thickness=2.0),
        depth_count=12,
    ),
    "chocolate_bar": ProductProfile(
        name="Chocolate Bar",
        product=ProductDims(width=8.0, height=15.0, depth=1.2),
        stand=StandDims(width=20.0, depth=25.0, height=25.0, shelf_thickness=2.0),
        depth_count=18,
    ),
    "beverage_can": ProductProfile(
        name="Beverage Can",
        product=ProductDims(width=6.6, height=12.2, depth=6.6),
        stand=StandDims(width=40.0, depth=40.0, height=150.0, shelf_thickness=2.0),
        depth_count=6,
    ),
    "cosmetics_box": ProductProfile(
        name="Cosmetics Box",
        product=ProductDims(width=5.0, height=12.0, depth=5.0),
        stand=StandDims(width=25.0, depth=20.0, height=35.0, shelf_thickness=1.8),
        depth_count=4,
    ),
}

DEFAULT_PROFILE_KEY = "wafer_cookie"


@dataclass(frozen=True)
class StandMaterial:
    """A stand body material offered by the studio."""

    name: str
    labels: tuple = ()


MATERIALS: Dict[str, StandMaterial] = {
    "metal": StandMaterial(name="Metal", labels=("metal",)),
    "wood": StandMaterial(name="Wood", labels=("ahşap (wood)", "ahsap", "ahşap")),
    "plastic": StandMaterial(name="Plastic", labels=("plastik (plastic)", "plastik")),
    "glass": StandMaterial(name="Glass", labels=("cam (glass)", "cam")),
    "cardboard": StandMaterial(name="Cardboard", labels=("karton (cardboard)", "karton")),
    "acrylic": StandMaterial(name="Acrylic", labels=("akrilik (acrylic)", "akrilik")),
    "mdf": StandMaterial(name="MDF", labels=("mdf",)),
    "aluminum": StandMaterial(
        name="Aluminum",
        labels=("alüminyum (aluminum)", "aluminyum", "aluminium"),
    ),
}

DEFAULT_MATERIAL_KEY = "plastic"


def resolve_material_key(label: Optional[str]) -> str:
    """Map a catalog key or a free-text form label to a material key."""
    if label is None or not str(label).strip():
        return DEFAULT_MATERIAL_KEY
    text = str(label).strip().lower()
    if text in MATERIALS:
        return text
    for key, material in MATERIALS.items():
        if text == material.name.lower() or text in material.labels:
            return key
    raise ValueError(f"Unknown stand material: {label!r}")


def get_profile(key: Optional[str]) -> ProductProfile:
    if key is None:
        return PRODUCT_PROFILES[DEFAULT_PROFILE_KEY]
    profile = PRODUCT_PROFILES.get(str(key).strip().lower())
    if profile is None:
        raise ValueError(
            f"Unknown product category {key!r}; "
            f"expected one of {sorted(PRODUCT_PROFILES)}"
        )
    return profile


SPEC_A = Spec(
    stand=StandDims(width=15.0, depth=30.0, height=30.0, shelf_thickness=2.0),
    product=ProductDims(width=13.0, height=5.0, depth=2.5),
    layout=Layout(columns=1, depth_count=12, gaps_depth=0.0),
)

# Same stand with 0.8cm breathing gaps between packs.
SPEC_B = Spec(
    stand=StandDims(width=15.0, depth=30.0, height=30.0, shelf_thickness=2.0),
    product=ProductDims(width=13.0, height=5.0, depth=2.5),
    layout=Layout(columns=1, depth_count=9, gaps_depth=0.8),
)
