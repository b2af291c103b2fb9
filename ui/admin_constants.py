"""
Shared constants for admin panel components
"""

# ===== RESPONSIVE LAYOUT CONSTANTS =====
BREAKPOINT = 800  # Mobile vs Desktop threshold (px)

# Grid settings for desktop
DESKTOP_COLUMNS = 3  # 3 columns for all grids

# Grid spacing
GRID_SPACING = 10
GRID_RUN_SPACING = 10

# Menu categories
CATEGORIES = ["Snacks", "Breakfast", "Lunch", "Drinks", "Stationery", "Essentials"]

# Accent colour per location
LOCATION_COLORS = {"canteen": "#F97316", "cafeteria": "#2563EB"}
EXPIRED_COLOR = "grey600"

CURRENCY = "₹"
