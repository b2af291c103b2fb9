"""
Orders Tab for Admin Panel
Read-only list of the selected location's orders with bill number search
"""
import flet as ft
from core.revenue_service import list_orders
from core.session_manager import AdminContext
from ui.admin_constants import (
    DESKTOP_COLUMNS, LOCATION_COLORS,
    GRID_SPACING, GRID_RUN_SPACING
)
from ui.admin_utils import format_price

STATUS_COLORS = {"Completed": "green", "Pending": "orange"}

def build_orders_tab(page: ft.Page, db, ctx: AdminContext, is_desktop: bool):
    """
    Build the Orders tab for the context's location

    Args:
        page: Flet page object
        db: Database session
        ctx: Acting admin and selected location
        is_desktop: True if desktop layout, False if mobile

    Returns:
        ft.Tab: search field plus order cards
    """
    accent = LOCATION_COLORS[ctx.location]

    # ===================== CARD BUILDER =====================

    def build_order_card(order):
        lines = ", ".join(f"{oi.item_name} x{oi.quantity}" for oi in order.items)
        return ft.Card(
            content=ft.Container(
                content=ft.Column([
                    ft.Row([
                        ft.Text(f"Bill {order.bill_number or order.id}", weight="bold", size=14, color='black'),
                        ft.Container(
                            content=ft.Text(order.status, color="white", size=12),
                            bgcolor=STATUS_COLORS.get(order.status, "red"),
                            padding=5,
                            border_radius=5
                        )
                    ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                    ft.Text(order.created_at.strftime("%Y-%m-%d %H:%M"), size=12, color="grey700"),
                    ft.Text(lines, size=12, color="grey700", max_lines=2, overflow=ft.TextOverflow.ELLIPSIS),
                    ft.Text(f"Total: {format_price(order.total_price)}", size=14, weight="bold", color="green"),
                ], spacing=3),
                padding=10,
                bgcolor='white',
                border_radius=12
            )
        )

    # ===================== GRID/LIST CONTAINERS =====================

    orders_grid = ft.GridView(
        runs_count=DESKTOP_COLUMNS,
        max_extent=500,
        child_aspect_ratio=3.0,
        spacing=GRID_SPACING,
        run_spacing=GRID_RUN_SPACING,
        expand=True
    )
    orders_list = ft.Column(spacing=10, scroll=ft.ScrollMode.AUTO, expand=True)
    search_field = ft.TextField(label="Search Bill #", width=250, prefix_icon=ft.Icons.SEARCH)

    # ===================== LOAD DATA =====================

    def load_orders(e=None):
        target = orders_grid if is_desktop else orders_list
        target.controls.clear()
        orders = list_orders(db, ctx.location, search_field.value)
        for order in orders:
            target.controls.append(build_order_card(order))
        if not orders:
            target.controls.append(ft.Text("No orders found.", color="grey700"))
        page.update()

    search_field.on_change = load_orders

    # ===================== BUILD TAB =====================

    load_orders()

    return ft.Tab(
        text="Orders",
        icon=ft.Icons.SHOPPING_BAG,
        content=ft.Column([
            ft.Container(
                content=ft.Row([
                    ft.Text(f"{ctx.location.title()} Orders", size=20, weight="bold", color=accent),
                    search_field
                ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                padding=10
            ),
            ft.Container(
                content=orders_grid if is_desktop else orders_list,
                expand=True,
                padding=10
            )
        ], expand=True, spacing=0)
    )
