"""
Tastebook - Ingredient categorization.

A keyword dictionary of common (Spanish) kitchen ingredients used to group
shopping-list lines by aisle. Matching is exact first, then partial, then
falls back to "others".
"""

import re
import unicodedata
from typing import Literal, TypedDict

IngredientCategory = Literal[
    "vegetables",
    "fruits",
    "meats",
    "fish",
    "dairy",
    "grains",
    "pantry",
    "spices",
    "others",
]


class CategoryInfo(TypedDict):
    label: str
    icon: str
    color: str


INGREDIENT_CATEGORIES: dict[str, CategoryInfo] = {
    "vegetables": {"label": "Verduras y Hortalizas", "icon": "🥬", "color": "#10b981"},
    "fruits": {"label": "Frutas", "icon": "🍎", "color": "#f59e0b"},
    "meats": {"label": "Carnes", "icon": "🥩", "color": "#ef4444"},
    "fish": {"label": "Pescados y Mariscos", "icon": "🐟", "color": "#06b6d4"},
    "dairy": {"label": "Lácteos y Huevos", "icon": "🥛", "color": "#3b82f6"},
    "grains": {"label": "Cereales y Legumbres", "icon": "🌾", "color": "#d97706"},
    "pantry": {"label": "Despensa", "icon": "🥫", "color": "#8b5cf6"},
    "spices": {"label": "Especias y Condimentos", "icon": "🧂", "color": "#ec4899"},
    "others": {"label": "Otros", "icon": "📦", "color": "#6b7280"},
}

# Normalized name (lowercase, no accents, no plural "s") -> category.
# Order matters: partial matching returns the first hit.
INGREDIENT_DICTIONARY: dict[str, IngredientCategory] = {
    # Verduras y hortalizas
    "tomate": "vegetables",
    "cebolla": "vegetables",
    "ajo": "vegetables",
    "zanahoria": "vegetables",
    "papa": "vegetables",
    "patata": "vegetables",
    "lechuga": "vegetables",
    "espinaca": "vegetables",
    "brocoli": "vegetables",
    "coliflor": "vegetables",
    "pimiento": "vegetables",
    "pimenton": "vegetables",
    "chile": "vegetables",
    "calabacin": "vegetables",
    "berenjena": "vegetables",
    "pepino": "vegetables",
    "apio": "vegetables",
    "champinon": "vegetables",
    "seta": "vegetables",
    "hongo": "vegetables",
    "aguacate": "vegetables",
    "esparrago": "vegetables",
    "remolacha": "vegetables",
    "nabo": "vegetables",
    "rabano": "vegetables",
    "col": "vegetables",
    "repollo": "vegetables",
    "puerro": "vegetables",
    "calabaza": "vegetables",
    # Frutas
    "manzana": "fruits",
    "platano": "fruits",
    "banana": "fruits",
    "naranja": "fruits",
    "limon": "fruits",
    "lima": "fruits",
    "fresa": "fruits",
    "frambuesa": "fruits",
    "arandano": "fruits",
    "mora": "fruits",
    "uva": "fruits",
    "sandia": "fruits",
    "melon": "fruits",
    "pina": "fruits",
    "mango": "fruits",
    "papaya": "fruits",
    "pera": "fruits",
    "durazno": "fruits",
    "melocoton": "fruits",
    "ciruela": "fruits",
    "cereza": "fruits",
    "kiwi": "fruits",
    # Carnes
    "pollo": "meats",
    "pechuga": "meats",
    "muslo": "meats",
    "res": "meats",
    "ternera": "meats",
    "carne": "meats",
    "cerdo": "meats",
    "costilla": "meats",
    "chuleta": "meats",
    "jamon": "meats",
    "salchicha": "meats",
    "chorizo": "meats",
    "tocino": "meats",
    "bacon": "meats",
    "pavo": "meats",
    "cordero": "meats",
    # Pescados y mariscos
    "salmon": "fish",
    "atun": "fish",
    "trucha": "fish",
    "merluza": "fish",
    "bacalao": "fish",
    "pescado": "fish",
    "camaron": "fish",
    "gamba": "fish",
    "langostino": "fish",
    "mejillon": "fish",
    "almeja": "fish",
    "calamar": "fish",
    "pulpo": "fish",
    "langosta": "fish",
    # Lácteos y huevos
    "leche": "dairy",
    "queso": "dairy",
    "yogur": "dairy",
    "yogurt": "dairy",
    "crema": "dairy",
    "nata": "dairy",
    "mantequilla": "dairy",
    "manteca": "dairy",
    "huevo": "dairy",
    "mozzarella": "dairy",
    "parmesano": "dairy",
    "cheddar": "dairy",
    "ricotta": "dairy",
    "requeson": "dairy",
    # Cereales y legumbres
    "arroz": "grains",
    "pasta": "grains",
    "fideo": "grains",
    "espagueti": "grains",
    "macarron": "grains",
    "pan": "grains",
    "harina": "grains",
    "avena": "grains",
    "quinoa": "grains",
    "lenteja": "grains",
    "garbanzo": "grains",
    "frijol": "grains",
    "alubia": "grains",
    "judia": "grains",
    "soja": "grains",
    # Despensa
    "aceite": "pantry",
    "vinagre": "pantry",
    "azucar": "pantry",
    "sal": "pantry",
    "miel": "pantry",
    "salsa": "pantry",
    "caldo": "pantry",
    "conserva": "pantry",
    "mayonesa": "pantry",
    "ketchup": "pantry",
    "mostaza": "pantry",
    "mermelada": "pantry",
    # Especias y condimentos
    "pimienta": "spices",
    "oregano": "spices",
    "albahaca": "spices",
    "perejil": "spices",
    "cilantro": "spices",
    "comino": "spices",
    "curry": "spices",
    "paprika": "spices",
    "canela": "spices",
    "jengibre": "spices",
    "vainilla": "spices",
    "laurel": "spices",
    "tomillo": "spices",
    "romero": "spices",
    "nuez moscada": "spices",
}

_COMBINING_MARKS = re.compile(r"[\u0300-\u036f]")
_PLURAL_S = re.compile(r"s\b")


def normalize_ingredient_name(name: str) -> str:
    """
    Normalize an ingredient name for lookup.

    Operations:
    - Lowercase
    - Strip accents (NFD decomposition, drop combining marks)
    - Drop a trailing "s" on every word (simple plurals)
    - Strip leading/trailing whitespace

    Examples:
        normalize_ingredient_name("Tomates") -> "tomate"
        normalize_ingredient_name("Pimientos rojos") -> "pimiento rojo"
    """
    decomposed = unicodedata.normalize("NFD", name.lower())
    without_accents = _COMBINING_MARKS.sub("", decomposed)
    return _PLURAL_S.sub("", without_accents).strip()


def categorize_ingredient(name: str) -> IngredientCategory:
    """
    Categorize an ingredient using the dictionary.

    1. Exact match on the normalized name
    2. Partial match: the name contains a keyword, or a keyword contains
       the name's first word
    3. "others"

    Examples:
        categorize_ingredient("Tomates cherry") -> "vegetables"
        categorize_ingredient("Pechuga de pollo") -> "meats"
        categorize_ingredient("Ingrediente raro") -> "others"
    """
    normalized = normalize_ingredient_name(name)

    if normalized in INGREDIENT_DICTIONARY:
        return INGREDIENT_DICTIONARY[normalized]

    first_word = normalized.split(" ")[0]
    for key, category in INGREDIENT_DICTIONARY.items():
        if key in normalized or first_word in key:
            return category

    return "others"


def category_info(category: str) -> CategoryInfo:
    """Display metadata for a category; unknown categories render as "others"."""
    return INGREDIENT_CATEGORIES.get(category, INGREDIENT_CATEGORIES["others"])
