# decorops/constants.py
"""
Fixed vocabularies for the decor inventory: state-machine actions, requirement
statuses, the monthly grid's decor columns and the predefined categories.
"""

# action -> (source counter, destination counter, rejection message)
ACTIONS = {
    "hire": ("in_store", "hired", "No items available to hire"),
    "return": ("hired", "in_store", "No items to return"),
    "damage": ("in_store", "damaged", "No items to damage"),
    "repair": ("damaged", "in_store", "No items to repair"),
}

COUNTERS = ("in_store", "hired", "damaged")

REQUIREMENT_STATUSES = ("pending", "confirmed", "delivered")
DEFAULT_REQUIREMENT_STATUS = "pending"

# Monthly allocation grid columns, in display order
DECOR_COLUMNS = (
    "walkway_stands",
    "arc",
    "aisle_stands",
    "photobooth",
    "lecturn",
    "stage_boards",
    "backdrop_boards",
    "dance_floor",
    "walkway_boards",
    "white_sticker",
    "centerpieces",
    "glass_charger_plates",
    "melamine_charger_plates",
    "african_mats",
    "gold_napkin_holders",
    "silver_napkin_holders",
    "roof_top_decor",
    "parcan_lights",
    "revolving_heads",
    "fairy_lights",
    "snake_lights",
    "neon_lights",
    "small_chandeliers",
    "large_chandeliers",
    "african_lampshades",
)

# Category -> starter item used by `decorops seed-inventory`
STARTER_ITEMS = {
    "table_clothes": "White Table Cloth",
    "satin_table_clothes": "Gold Satin Table Cloth",
    "runners": "Gold Table Runner",
    "elastic_tiebacks": "White Elastic Tieback",
    "sheer_curtains": "White Sheer Curtain",
    "spandex": "White Spandex Cover",
    "drops": "White Backdrop Drop",
    "traditional_items": "Kikoy Traditional Cloth",
    "charger_plates": "Gold Charger Plate",
    "table_mirrors": "Round Table Mirror",
    "holders": "Candle Holder Gold",
    "artificial_flowers": "White Rose Arrangement",
    "hanging_flowers": "White Hanging Bouquet",
    "centrepieces": "Gold Centrepiece",
}

EXPECTED_CATEGORIES = tuple(STARTER_ITEMS)

MIN_MONTH, MAX_MONTH = 1, 12
MAX_CATEGORY_LENGTH = 128
MAX_ITEM_NAME_LENGTH = 200
MAX_CUSTOMER_NAME_LENGTH = 200
# Upper bound for stored integers (32-bit signed column on every backend)
MAX_INT = 2**31 - 1
