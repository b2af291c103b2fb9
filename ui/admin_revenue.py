"""
Revenue Tab for Admin Panel
Daily sales of the selected location; the other location is never mixed in
"""
from datetime import date

import flet as ft
from flet.plotly_chart import PlotlyChart
import plotly.graph_objects as go

from core.errors import ValidationError
from core.revenue_service import get_daily_revenue
from core.session_manager import AdminContext
from core.validation import parse_date
from ui.admin_constants import LOCATION_COLORS
from ui.admin_utils import format_price, show_snack

def build_revenue_tab(page: ft.Page, db, ctx: AdminContext, is_desktop: bool):
    """
    Build the Revenue tab for the context's location

    Returns:
        ft.Tab: date picker field, summary cards and product chart
    """
    accent = LOCATION_COLORS[ctx.location]
    day_field = ft.TextField(label="Day (YYYY-MM-DD)", value=date.today().isoformat(), width=200)
    summary_row = ft.Row(spacing=10, wrap=True)
    chart_box = ft.Container(expand=True)

    def summary_card(title, value):
        return ft.Container(
            content=ft.Column([
                ft.Text(title, size=12, color="grey700"),
                ft.Text(value, size=20, weight="bold", color=accent)
            ], spacing=2),
            padding=12,
            bgcolor="white",
            border_radius=12,
            width=200
        )

    def create_product_chart(products):
        """Horizontal bar chart of revenue per product"""
        if not products:
            return ft.Container(
                content=ft.Text("No sales data", size=14, color="grey"),
                alignment=ft.alignment.center,
                padding=30
            )

        names = [p["name"][:20] for p in products]
        revenue = [p["revenue"] for p in products]

        fig = go.Figure(go.Bar(
            x=revenue,
            y=names,
            orientation='h',
            marker=dict(color=accent),
            text=[p["quantity"] for p in products],
            textposition='auto',
        ))
        fig.update_layout(
            title=dict(text=f"Revenue by product ({ctx.location})", font=dict(size=14)),
            xaxis_title="Revenue",
            yaxis_title="",
            height=360 if is_desktop else 280,
            margin=dict(l=120, r=20, t=40, b=40),
            font=dict(size=10)
        )
        return PlotlyChart(fig, expand=True)

    def load_revenue(e=None):
        try:
            day = parse_date(day_field.value, "day") or date.today()
        except ValidationError as ex:
            show_snack(page, str(ex), ok=False)
            return

        data = get_daily_revenue(db, ctx.location, day)
        summary_row.controls = [
            summary_card("Orders", str(data["total_orders"])),
            summary_card("Revenue", format_price(data["total_revenue"])),
            summary_card("Products sold", str(sum(p["quantity"] for p in data["products"]))),
        ]
        chart_box.content = create_product_chart(data["products"])
        page.update()

    load_revenue()

    return ft.Tab(
        text="Revenue",
        icon=ft.Icons.BAR_CHART,
        content=ft.Container(
            content=ft.Column([
                ft.Row([
                    day_field,
                    ft.ElevatedButton("Show", icon=ft.Icons.REFRESH, on_click=load_revenue, bgcolor=accent, color="white")
                ], spacing=10),
                summary_row,
                chart_box
            ], spacing=10, expand=True, scroll=ft.ScrollMode.AUTO),
            padding=10,
            expand=True
        )
    )
