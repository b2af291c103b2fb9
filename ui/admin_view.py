"""
Admin Panel - Main Orchestrator
Location switch, open/closed status, service hours and the
Menu Items, Offers, Orders and Revenue tabs
"""
import flet as ft
from core.config import LOCATIONS
from core.db import SessionLocal
from core.errors import MenuAdminError
from core.session_manager import AdminContext
from core.settings_service import MEALS, get_settings, service_hours, set_open, set_service_hours
from ui.admin_constants import BREAKPOINT, LOCATION_COLORS
from ui.admin_menu_items import build_menu_items_tab
from ui.admin_offers import build_offers_tab
from ui.admin_orders import build_orders_tab
from ui.admin_revenue import build_revenue_tab
from ui.admin_utils import close_dialog, show_snack

def admin_view(page: ft.Page, ctx: AdminContext):
    """
    Main admin panel view for one location.

    Switching location rebuilds the view with a new context; nothing about
    the selected location is stored outside `ctx`.
    """
    db = SessionLocal()
    page.title = f"Admin Panel - {ctx.location.title()}"
    is_desktop = (page.window.width or 400) > BREAKPOINT
    accent = LOCATION_COLORS[ctx.location]

    # ===================== BUILD TABS =====================

    tabs = ft.Tabs(
        selected_index=0,
        animation_duration=300,
        tabs=[
            build_menu_items_tab(page, db, ctx, is_desktop),
            build_offers_tab(page, db, ctx, is_desktop),
            build_orders_tab(page, db, ctx, is_desktop),
            build_revenue_tab(page, db, ctx, is_desktop),
        ],
        expand=True,
        label_color=accent,
        unselected_label_color="black",
        indicator_color=accent,
        indicator_border_radius=0,
        divider_color="grey300"
    )

    # ===================== OPEN / CLOSED STATUS =====================

    settings = get_settings(db, ctx.location)

    def on_status_change(e):
        try:
            updated = set_open(db, ctx, e.control.value)
        except MenuAdminError as ex:
            e.control.value = not e.control.value
            show_snack(page, f"Status update failed: {ex}", ok=False)
            return
        e.control.label = "Open" if updated.is_open else "Closed"
        show_snack(page, f"{ctx.location.title()} is now {'OPEN' if updated.is_open else 'CLOSED'}.", ok=updated.is_open)

    status_switch = ft.Switch(
        label="Open" if settings.is_open else "Closed",
        value=settings.is_open,
        active_color="green",
        on_change=on_status_change
    )

    # ===================== SERVICE HOURS =====================

    def show_hours_dialog(e):
        hours = service_hours(get_settings(db, ctx.location))
        meal_dropdown = ft.Dropdown(
            label="Meal",
            value=MEALS[0],
            width=250,
            options=[ft.dropdown.Option(key=meal, text=meal.title()) for meal in MEALS]
        )
        start_field = ft.TextField(label="Start (HH:MM)", width=120)
        end_field = ft.TextField(label="End (HH:MM)", width=120)
        message = ft.Text("", color="red")

        def fill_times(e=None):
            start, end = hours[meal_dropdown.value]
            start_field.value = start.strftime("%H:%M")
            end_field.value = end.strftime("%H:%M")
            page.update()

        meal_dropdown.on_change = fill_times

        def save_hours(e):
            try:
                updated = set_service_hours(db, ctx, meal_dropdown.value, start_field.value, end_field.value)
            except MenuAdminError as ex:
                message.value = f"❌ {ex}"
                page.update()
                return
            hours.update(service_hours(updated))
            close_dialog(page, dialog)
            show_snack(page, "Service hours saved!")

        dialog = ft.AlertDialog(
            title=ft.Text(f"{ctx.location.title()} Service Hours"),
            content=ft.Column([
                meal_dropdown,
                ft.Row([start_field, end_field], spacing=10),
                message
            ], tight=True),
            actions=[
                ft.TextButton("Cancel", on_click=lambda e: close_dialog(page, dialog)),
                ft.ElevatedButton("Save", on_click=save_hours, bgcolor=accent, color="white")
            ]
        )
        page.overlay.append(dialog)
        dialog.open = True
        fill_times()

    hours_button = ft.IconButton(icon=ft.Icons.SCHEDULE, icon_color=accent, tooltip="Service hours", on_click=show_hours_dialog)

    # ===================== LOCATION SWITCH =====================

    def switch_location(e):
        location = e.control.data
        if location == ctx.location:
            return
        db.close()
        admin_view(page, ctx.switch_location(location))

    location_buttons = ft.Row([
        ft.ElevatedButton(
            location.title(),
            data=location,
            on_click=switch_location,
            bgcolor=LOCATION_COLORS[location] if location == ctx.location else "grey200",
            color="white" if location == ctx.location else "black",
            height=32
        )
        for location in LOCATIONS
    ], spacing=5)

    # ===================== BUILD UI =====================

    page.clean()
    page.add(
        ft.Container(
            content=ft.Column([
                ft.Container(
                    content=ft.Column([
                        ft.Container(
                            content=ft.Row([
                                ft.Column([
                                    ft.Text("Admin Panel", size=20, weight="bold", color="black"),
                                    ft.Text(f"{ctx.location.upper()} MODE · {ctx.admin_email}", size=11, color=accent),
                                ], spacing=0),
                                ft.Row([status_switch, hours_button, location_buttons], spacing=10)
                            ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                            padding=ft.padding.only(top=15, left=15, right=15, bottom=8)
                        ),
                        ft.Divider(height=1, color="grey300", thickness=1)
                    ], spacing=0),
                    bgcolor="white",
                    padding=0
                ),
                ft.Container(
                    content=tabs,
                    expand=True,
                    gradient=ft.LinearGradient(
                        begin=ft.alignment.top_center,
                        end=ft.alignment.bottom_center,
                        colors=["#FFF6F6", "#F1F5F9", "#CBD5E1"]
                    )
                )
            ], expand=True, spacing=0),
            width=page.window.width if is_desktop else 400,
            expand=True,
            padding=0
        )
    )
    page.update()
