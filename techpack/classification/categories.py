"""Product category vocabulary and normalization.

Categories are a closed set; free-text category strings coming from users,
AI output or legacy ``category_Subcategory`` values are folded onto it.
"""

from __future__ import annotations

PRODUCT_CATEGORIES: tuple[str, ...] = (
    "apparel",
    "footwear",
    "accessories",
    "bags",
    "jewellery",
    "toys",
    "hats",
    "furniture",
    "other",
)

CATEGORY_LABELS: dict[str, str] = {
    "apparel": "Apparel / Garment",
    "footwear": "Footwear",
    "accessories": "Accessories",
    "bags": "Bags",
    "jewellery": "Jewellery",
    "toys": "Toys",
    "hats": "Hats",
    "furniture": "Furniture",
    "other": "Other",
}

CATEGORY_SUBCATEGORIES: dict[str, list[str]] = {
    "apparel": [
        "shirt", "dress", "jacket", "pants", "trousers", "hoodie", "sweater",
        "coat", "skirt", "blouse", "shorts", "vest", "jumpsuit", "romper",
        "swimwear", "underwear", "sleepwear", "activewear", "uniform", "suit",
    ],
    "footwear": [
        "sneakers", "boots", "sandals", "slippers", "heels", "flats", "loafers",
        "oxfords", "moccasins", "espadrilles", "clogs", "mules", "wedges",
        "platforms", "athletic",
    ],
    "accessories": [
        "belt", "scarf", "gloves", "sunglasses", "watch", "wallet", "tie",
        "bowtie", "cufflinks", "keychain", "lanyard", "phone-case", "umbrella",
        "hair-accessory",
    ],
    "bags": [
        "handbag", "backpack", "tote", "purse", "clutch", "luggage", "suitcase",
        "duffel", "messenger", "crossbody", "shoulder", "weekender", "pouch",
        "cosmetic-bag",
    ],
    "jewellery": [
        "necklace", "bracelet", "ring", "earrings", "pendant", "anklet",
        "brooch", "cufflinks", "charm", "bangle", "choker", "chain",
    ],
    "toys": [
        "plush", "doll", "action-figure", "puzzle", "board-game", "educational",
        "outdoor", "building", "vehicle", "electronic", "stuffed-animal", "puppet",
    ],
    "hats": [
        "cap", "beanie", "fedora", "beret", "visor", "bucket", "snapback",
        "trucker", "sun-hat", "cowboy", "newsboy", "panama",
    ],
    "furniture": [
        "chair", "table", "sofa", "desk", "cabinet", "shelf", "bench", "stool",
        "bed", "couch", "ottoman", "dresser", "nightstand", "bookshelf",
        "wardrobe", "stand", "rack", "console",
    ],
    "other": ["general", "custom", "specialty", "misc"],
}

# Common variations and product nouns -> category
CATEGORY_VARIATIONS: dict[str, str] = {
    # Apparel
    "garment": "apparel",
    "clothing": "apparel",
    "clothes": "apparel",
    "garments": "apparel",
    "apparel/garment": "apparel",
    "shirt": "apparel",
    "dress": "apparel",
    "jacket": "apparel",
    "pants": "apparel",
    "trousers": "apparel",
    "t-shirt": "apparel",
    "tshirt": "apparel",
    "hoodie": "apparel",
    "sweater": "apparel",
    "coat": "apparel",
    "skirt": "apparel",
    "blouse": "apparel",
    # Footwear
    "shoes": "footwear",
    "shoe": "footwear",
    "sneakers": "footwear",
    "boots": "footwear",
    "sandals": "footwear",
    "slippers": "footwear",
    # Bags
    "bag": "bags",
    "handbag": "bags",
    "backpack": "bags",
    "tote": "bags",
    "purse": "bags",
    "clutch": "bags",
    "luggage": "bags",
    "suitcase": "bags",
    # Accessories
    "accessory": "accessories",
    "belt": "accessories",
    "scarf": "accessories",
    "gloves": "accessories",
    "sunglasses": "accessories",
    "watch": "accessories",
    "wallet": "accessories",
    # Jewellery
    "jewelry": "jewellery",
    "necklace": "jewellery",
    "bracelet": "jewellery",
    "ring": "jewellery",
    "earrings": "jewellery",
    "pendant": "jewellery",
    # Toys
    "toy": "toys",
    "plush": "toys",
    "plushie": "toys",
    "stuffed animal": "toys",
    "doll": "toys",
    "action figure": "toys",
    # Hats
    "hat": "hats",
    "cap": "hats",
    "beanie": "hats",
    "headwear": "hats",
    # Furniture
    "chair": "furniture",
    "table": "furniture",
    "sofa": "furniture",
    "desk": "furniture",
    "cabinet": "furniture",
    "shelf": "furniture",
    "bench": "furniture",
    "stool": "furniture",
    "bed": "furniture",
    "couch": "furniture",
    "ottoman": "furniture",
    "dresser": "furniture",
    "nightstand": "furniture",
    "bookshelf": "furniture",
    "wardrobe": "furniture",
    "stand": "furniture",
}


def is_valid_category(category: str | None) -> bool:
    return bool(category) and category.lower() in PRODUCT_CATEGORIES


def normalize_category(category: str | None) -> str:
    """Fold a free-text category onto the closed vocabulary.

    Tries a direct match, then the variation table, then the longest
    variation keyword contained in the text. Anything else is "other".
    """
    if not category:
        return "other"

    normalized = category.lower().strip()
    if normalized in PRODUCT_CATEGORIES:
        return normalized
    if normalized in CATEGORY_VARIATIONS:
        return CATEGORY_VARIATIONS[normalized]

    best_keyword = ""
    for keyword in CATEGORY_VARIATIONS:
        if keyword in normalized and len(keyword) > len(best_keyword):
            best_keyword = keyword
    return CATEGORY_VARIATIONS[best_keyword] if best_keyword else "other"


def extract_category_from_subcategory(category_subcategory: str | None) -> str | None:
    """Leading category of a ``category_Subcategory`` string.

    Examples:
        "Apparel → Shorts → Casual" -> "apparel"
        "Apparel_Clothing" -> "apparel"
    """
    if not category_subcategory:
        return None

    for separator in ("→", "_", " "):
        if separator in category_subcategory:
            return category_subcategory.split(separator)[0].strip().lower()
    return category_subcategory.strip().lower()


def default_subcategory(category: str) -> str:
    subcategories = CATEGORY_SUBCATEGORIES.get(category) or []
    return subcategories[0] if subcategories else "general"


def extract_subcategory(text: str | None, category: str) -> str:
    """Longest subcategory of ``category`` mentioned in ``text``.

    Hyphenated subcategories also match with a space or with no separator
    ("action figure", "actionfigure"). Falls back to the category's first
    subcategory.
    """
    if not text:
        return default_subcategory(category)

    normalized = text.lower().strip()
    best = ""
    for subcategory in CATEGORY_SUBCATEGORIES.get(category) or []:
        variants = (subcategory, subcategory.replace("-", " "), subcategory.replace("-", ""))
        if any(v in normalized for v in variants) and len(subcategory) > len(best):
            best = subcategory
    return best or default_subcategory(category)


def category_from_tech_pack(tech_pack: dict) -> str | None:
    """Normalized category of a tech-pack document.

    Uses ``category`` when present, else the head of ``category_Subcategory``.
    None when the document carries neither.
    """
    raw = tech_pack.get("category")
    if isinstance(raw, str) and raw:
        return normalize_category(raw)

    subcategory = tech_pack.get("category_Subcategory")
    if isinstance(subcategory, str) and subcategory:
        return normalize_category(extract_category_from_subcategory(subcategory))
    return None
