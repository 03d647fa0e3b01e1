"""Static icon library and category metadata. No network access."""

from icon_mcp.models import Icon, IconCategory

ICON_LIBRARIES: list[dict[str, str]] = [
    {"id": "heroicons", "name": "Heroicons", "url": "https://heroicons.com/"},
    {"id": "material-symbols", "name": "Material Symbols", "url": "https://fonts.google.com/icons"},
    {"id": "mdi", "name": "Material Design Icons", "url": "https://materialdesignicons.com/"},
    {"id": "fa", "name": "Font Awesome", "url": "https://fontawesome.com/"},
    {"id": "fa6-solid", "name": "Font Awesome 6 Solid", "url": "https://fontawesome.com/"},
    {"id": "fa6-regular", "name": "Font Awesome 6 Regular", "url": "https://fontawesome.com/"},
    {"id": "fa6-brands", "name": "Font Awesome 6 Brands", "url": "https://fontawesome.com/"},
    {"id": "ph", "name": "Phosphor Icons", "url": "https://phosphoricons.com/"},
    {"id": "tabler", "name": "Tabler Icons", "url": "https://tabler-icons.io/"},
    {"id": "ri", "name": "Remix Icon", "url": "https://remixicon.com/"},
    {"id": "lucide", "name": "Lucide Icons", "url": "https://lucide.dev/"},
    {"id": "iconamoon", "name": "Iconamoon", "url": "https://iconamoon.io/"},
    {"id": "bi", "name": "Bootstrap Icons", "url": "https://icons.getbootstrap.com/"},
    {"id": "carbon", "name": "Carbon Icons", "url": "https://carbondesignsystem.com/guidelines/icons/library/"},
    {"id": "fluent", "name": "Fluent Icons", "url": "https://developer.microsoft.com/en-us/fluentui#/styles/web/icons"},
    {"id": "jam", "name": "Jam Icons", "url": "https://jam-icons.com/"},
    {"id": "gg", "name": "css.gg", "url": "https://css.gg/"},
    {"id": "ion", "name": "Ionicons", "url": "https://ionicons.com/"},
    {"id": "bx", "name": "Box Icons", "url": "https://boxicons.com/"},
    {"id": "simple-icons", "name": "Simple Icons", "url": "https://simpleicons.org/"},
    {"id": "ci", "name": "Circum Icons", "url": "https://circumicons.com/"},
    {"id": "feather", "name": "Feather Icons", "url": "https://feathericons.com/"},
    {"id": "uil", "name": "Unicons", "url": "https://iconscout.com/unicons"},
    {"id": "octicon", "name": "Octicons", "url": "https://primer.style/octicons/"},
]

_CATEGORY_NAMES: dict[IconCategory, str] = {
    IconCategory.INTERFACE: "Interface",
    IconCategory.ARROWS: "Arrows",
    IconCategory.COMMUNICATION: "Communication",
    IconCategory.ECOMMERCE: "E-commerce",
    IconCategory.SECURITY: "Security",
    IconCategory.FILES: "Files & Documents",
    IconCategory.USERS: "Users & People",
    IconCategory.MEDIA: "Media",
    IconCategory.TECHNOLOGY: "Technology",
    IconCategory.BUSINESS: "Business",
    IconCategory.MAPS: "Maps & Location",
    IconCategory.SOCIAL: "Social Media",
    IconCategory.HEALTH: "Health & Medical",
    IconCategory.WEATHER: "Weather",
    IconCategory.TRANSPORT: "Transportation",
    IconCategory.DEVELOPMENT: "Development",
    IconCategory.BRANDS: "Brands & Logos",
    IconCategory.FOOD: "Food & Beverage",
    IconCategory.NATURE: "Nature & Environment",
    IconCategory.HOUSEHOLD: "Household & Furniture",
}

# Approximate icon counts for popular libraries (not live)
_LIBRARY_ICON_COUNTS: dict[str, int] = {
    "heroicons": 875,
    "material-symbols": 13941,
    "mdi": 7447,
    "fa": 1612,
    "fa6-solid": 1253,
    "fa6-regular": 162,
    "fa6-brands": 457,
    "ph": 894,
    "tabler": 5880,
    "ri": 3058,
    "lucide": 895,
    "iconamoon": 1781,
    "bi": 1668,
    "carbon": 1442,
    "fluent": 3752,
    "jam": 896,
    "gg": 704,
    "ion": 1200,
    "bx": 962,
    "simple-icons": 2475,
    "ci": 284,
    "feather": 287,
    "uil": 1206,
    "octicon": 224,
}

_STROKE_LIBRARIES = (
    "lucide",
    "tabler",
    "mingcute",
    "line-md",
    "carbon",
    "mdi-light",
    "iconoir",
    "ph",
    "solar",
    "ri",
    "uil",
    "bx",
)

_COLORED_LIBRARIES = (
    "twemoji",
    "noto",
    "emojione",
    "fxemoji",
    "openmoji",
    "fluent-emoji",
    "flat-color",
    "logos",
    "flag",
    "cryptocurrency",
    "circle-flags",
)


def get_library_catalog() -> list[dict[str, str]]:
    return [dict(lib) for lib in ICON_LIBRARIES]


def get_category_catalog() -> list[dict[str, str]]:
    return [{"id": c.value, "name": name} for c, name in _CATEGORY_NAMES.items()]


def get_icon_count_by_library() -> dict[str, int]:
    return dict(_LIBRARY_ICON_COUNTS)


def estimate_total_icon_count() -> int:
    """Sum of the static per-library approximate counts."""
    return sum(_LIBRARY_ICON_COUNTS.values())


def _prefix_of(qualified_name: str) -> str:
    # Accept both "prefix:name" and "prefix/name" handles
    return qualified_name.replace("/", ":").split(":", 1)[0]


def supports_stroke(qualified_name: str) -> bool:
    """Whether the library draws with strokes, so stroke width is meaningful."""
    prefix = _prefix_of(qualified_name)
    return any(lib in prefix for lib in _STROKE_LIBRARIES)


def is_colored_icon(qualified_name: str) -> bool:
    """Whether the library ships multi-colour icons that ignore a colour override."""
    prefix = _prefix_of(qualified_name)
    return any(lib in prefix for lib in _COLORED_LIBRARIES)


def formatted_filename(icon: Icon, size: int, stroke_width: float | None = None) -> str:
    """Download filename, e.g. ``arrow-right-24px-2px.svg``."""
    base = "-".join(icon.name.lower().split())
    suffix = f"-{stroke_width:g}px" if stroke_width else ""
    return f"{base}-{size}px{suffix}.svg"
