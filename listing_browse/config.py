import os

PAGE_SIZE = int(os.getenv("LISTING_BROWSE_PAGE_SIZE", "60")) # Number of raw listings requested per remote page
DEFAULT_VIEW_SIZE = 24 # Number of listings visible on a fresh page
VIEW_SIZE_STEP = 24 # How much "load more" grows the view
MAX_VIEW_SIZE = 2000 # Upper clamp for a view size read from the URL
SEARCH_DEBOUNCE_SECONDS = 0.25 # Silence required before typed text filters the list

CATALOG_PATH = os.getenv("LISTING_BROWSE_CATALOG", "catalog.json") # JSON catalog for the CLI and the API
LOG_LEVEL = os.getenv("LISTING_BROWSE_LOG_LEVEL", "INFO")

# Listings in these moderation states never reach the working set.
MODERATION_HIDE_STATUSES = frozenset({"review", "hidden", "removed"})

CONDITION_OPTIONS = {
    "new": "Yeni / Açılmamış",
    "likeNew": "Çok İyi (Sıfır Ayarında)",
    "good": "İyi",
    "used": "Kullanılmış",
    "forParts": "Parça / Arızalı",
}

GENDER_OPTIONS = ("Erkek", "Kadın", "Unisex", "Diğer")
MOVEMENT_OPTIONS = ("Otomatik", "Quartz", "Manual", "Diğer")
CASE_TYPE_OPTIONS = (
    "Çelik",
    "Titanyum",
    "Altın",
    "Seramik",
    "Karbon",
    "Bronz",
    "Gümüş",
    "Platin",
    "Diğer",
)
BRACELET_MATERIAL_OPTIONS = (
    "Çelik",
    "Deri",
    "Kauçuk",
    "NATO",
    "Titanyum",
    "Tekstil",
    "Seramik",
    "Diğer",
)
