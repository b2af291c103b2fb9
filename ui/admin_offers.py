"""
Offers Management Tab for Admin Panel
"""
import flet as ft
from core.errors import MenuAdminError
from core.offer_resolver import discounted_price, offer_status_label
from core.offer_service import (
    list_offers, create_offer, update_offer, delete_offer,
    available_categories, items_for_categories
)
from core.session_manager import AdminContext
from core.validation import OfferForm
from ui.admin_constants import (
    DESKTOP_COLUMNS, LOCATION_COLORS, EXPIRED_COLOR,
    GRID_SPACING, GRID_RUN_SPACING
)
from ui.admin_utils import close_dialog, show_snack, format_price

def build_offers_tab(page: ft.Page, db, ctx: AdminContext, is_desktop: bool):
    """
    Build the Offers management tab for the context's location

    Returns:
        ft.Tab: offer form, item picker and offer cards
    """
    accent = LOCATION_COLORS[ctx.location]
    editing = {"id": None}
    selected_items = []  # ordered menu item ids
    selected_categories = []

    # ===================== FORM FIELDS =====================

    name_field = ft.TextField(label="Offer Name", width=300)
    discount_field = ft.TextField(label="Discount %", hint_text="10", width=300, keyboard_type=ft.KeyboardType.NUMBER)
    start_date_field = ft.TextField(label="Start Date (YYYY-MM-DD)", width=145)
    end_date_field = ft.TextField(label="End Date (YYYY-MM-DD)", width=145)
    start_time_field = ft.TextField(label="Start Time (HH:MM)", width=145)
    end_time_field = ft.TextField(label="End Time (HH:MM)", width=145)
    search_field = ft.TextField(label="Search items", width=300, prefix_icon=ft.Icons.SEARCH)
    form_title = ft.Text(f"New {ctx.location} offer", size=16, weight="bold", color=accent)
    category_chips = ft.Row(wrap=True, spacing=5)
    item_picker = ft.Column(spacing=5, scroll=ft.ScrollMode.AUTO, height=300)
    offers_grid = ft.GridView(
        runs_count=DESKTOP_COLUMNS,
        max_extent=420,
        child_aspect_ratio=1.8,
        spacing=GRID_SPACING,
        run_spacing=GRID_RUN_SPACING,
        expand=True
    )
    offers_list = ft.Column(spacing=10, scroll=ft.ScrollMode.AUTO, expand=True)

    # ===================== ITEM PICKER =====================

    def toggle_category(category):
        if category in selected_categories:
            selected_categories.remove(category)
        else:
            selected_categories.append(category)
        refresh_picker()

    def toggle_item(item_id):
        if item_id in selected_items:
            selected_items.remove(item_id)
        else:
            selected_items.append(item_id)
        refresh_picker()

    def toggle_all(category_items):
        ids = [i.id for i in category_items]
        if all(i in selected_items for i in ids):
            for i in ids:
                selected_items.remove(i)
        else:
            selected_items.extend(i for i in ids if i not in selected_items)
        refresh_picker()

    def preview_price(price):
        try:
            return format_price(discounted_price(price, discount_field.value))
        except (ArithmeticError, ValueError):
            # discount field empty or mid-typing
            return format_price(price)

    def refresh_picker(e=None):
        category_chips.controls = [
            ft.ElevatedButton(
                cat,
                on_click=lambda e, c=cat: toggle_category(c),
                bgcolor=accent if cat in selected_categories else "grey200",
                color="white" if cat in selected_categories else "black",
                height=30
            )
            for cat in available_categories(db, ctx.location)
        ]

        term = (search_field.value or "").lower()
        items = [i for i in items_for_categories(db, ctx.location, selected_categories) if term in i.name.lower()]
        grouped = {}
        for item in items:
            grouped.setdefault(item.category or "Uncategorized", []).append(item)

        item_picker.controls.clear()
        for category, category_items in grouped.items():
            item_picker.controls.append(ft.Row([
                ft.Text(category, weight="bold", color=accent),
                ft.TextButton("Select All", on_click=lambda e, ci=category_items: toggle_all(ci))
            ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN))
            for item in category_items:
                item_picker.controls.append(ft.Checkbox(
                    label=f"{item.name}  {format_price(item.price)} → {preview_price(item.price)}",
                    value=item.id in selected_items,
                    on_change=lambda e, i=item.id: toggle_item(i),
                    active_color=accent
                ))
        page.update()

    search_field.on_change = refresh_picker
    discount_field.on_change = refresh_picker

    # ===================== OFFER CARDS =====================

    def build_offer_card(offer):
        label = offer_status_label(offer)
        color = EXPIRED_COLOR if label == "Expired" else accent
        start_date = offer.start_date.isoformat() if offer.start_date else "—"
        end_date = offer.end_date.isoformat() if offer.end_date else "no end"
        start_time = offer.start_time.strftime("%H:%M") if offer.start_time else "00:00"
        end_time = offer.end_time.strftime("%H:%M") if offer.end_time else "23:59"

        return ft.Card(
            content=ft.Container(
                content=ft.Column([
                    ft.Row([
                        ft.Text(offer.name, weight="bold", size=16, color="black", expand=True),
                        ft.Container(
                            content=ft.Text(label, color="white", size=11),
                            bgcolor=color,
                            padding=5,
                            border_radius=5
                        )
                    ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                    ft.Text(f"{offer.discount_percentage:g}% OFF", color=color, weight="bold"),
                    ft.Text(f"{start_date} — {end_date}", size=12, color="grey700"),
                    ft.Text(f"{start_time} to {end_time}", size=12, color="grey700"),
                    ft.Text(f"{len(offer.applicable_items or [])} item(s)", size=12, color="grey700"),
                    ft.Row([
                        ft.TextButton("Edit", icon=ft.Icons.EDIT, on_click=lambda e, o=offer: open_offer_for_edit(o)),
                        ft.TextButton("Delete", icon=ft.Icons.DELETE, on_click=lambda e, o=offer: confirm_delete_offer(o)),
                    ], alignment=ft.MainAxisAlignment.END)
                ], spacing=3),
                padding=10,
                bgcolor="white",
                border_radius=12,
                border=ft.border.only(top=ft.BorderSide(4, color))
            )
        )

    def load_offers():
        target = offers_grid if is_desktop else offers_list
        target.controls.clear()
        offers = list_offers(db, ctx.location)
        for offer in offers:
            target.controls.append(build_offer_card(offer))
        if not offers:
            target.controls.append(ft.Text(f"No discount campaigns for {ctx.location}.", color="grey700"))
        page.update()

    # ===================== FORM ACTIONS =====================

    def reset_form(e=None):
        editing["id"] = None
        for field in (name_field, discount_field, start_date_field, end_date_field,
                      start_time_field, end_time_field, search_field):
            field.value = ""
        selected_items.clear()
        selected_categories.clear()
        form_title.value = f"New {ctx.location} offer"
        refresh_picker()

    def open_offer_for_edit(offer):
        editing["id"] = offer.id
        name_field.value = offer.name
        discount_field.value = f"{offer.discount_percentage:g}"
        start_date_field.value = offer.start_date.isoformat() if offer.start_date else ""
        end_date_field.value = offer.end_date.isoformat() if offer.end_date else ""
        start_time_field.value = offer.start_time.strftime("%H:%M") if offer.start_time else ""
        end_time_field.value = offer.end_time.strftime("%H:%M") if offer.end_time else ""
        selected_items[:] = list(offer.applicable_items or [])
        selected_categories[:] = list(offer.applicable_categories or [])
        form_title.value = f"Edit offer: {offer.name}"
        refresh_picker()

    def save_offer(e):
        form = OfferForm(
            name=name_field.value,
            discount_percentage=discount_field.value,
            start_date=start_date_field.value,
            end_date=end_date_field.value,
            start_time=start_time_field.value,
            end_time=end_time_field.value,
            applicable_categories=list(selected_categories),
            applicable_items=list(selected_items),
            location=ctx.location
        )
        try:
            if editing["id"]:
                update_offer(db, ctx, editing["id"], form)
                show_snack(page, "Offer Updated Successfully!")
            else:
                create_offer(db, ctx, form)
                show_snack(page, "Offer Created Successfully!")
        except MenuAdminError as ex:
            show_snack(page, f"Failed to save offer: {ex}", ok=False)
            return
        reset_form()
        load_offers()

    def confirm_delete_offer(offer):
        def do_delete(e):
            try:
                delete_offer(db, ctx, offer.id)
            except MenuAdminError as ex:
                close_dialog(page, dialog)
                show_snack(page, f"Delete failed: {ex}", ok=False)
                return
            close_dialog(page, dialog)
            if editing["id"] == offer.id:
                reset_form()
            load_offers()

        dialog = ft.AlertDialog(
            title=ft.Text("Confirm Delete"),
            content=ft.Text(f"Delete offer '{offer.name}'?"),
            actions=[
                ft.TextButton("Cancel", on_click=lambda e: close_dialog(page, dialog)),
                ft.ElevatedButton("Delete", on_click=do_delete, style=ft.ButtonStyle(bgcolor="red", color="white"))
            ]
        )
        page.overlay.append(dialog)
        dialog.open = True
        page.update()

    # ===================== BUILD TAB =====================

    form_panel = ft.Container(
        content=ft.Column([
            form_title,
            name_field,
            discount_field,
            ft.Row([start_date_field, end_date_field], spacing=10),
            ft.Row([start_time_field, end_time_field], spacing=10),
            ft.Text("Filter by category", size=12, color="grey700"),
            category_chips,
            search_field,
            item_picker,
            ft.Row([
                ft.TextButton("Clear", on_click=reset_form),
                ft.ElevatedButton("Save Offer", icon=ft.Icons.SAVE, on_click=save_offer, bgcolor=accent, color="white")
            ], alignment=ft.MainAxisAlignment.END)
        ], spacing=8, scroll=ft.ScrollMode.AUTO),
        padding=10,
        bgcolor="white",
        border_radius=12,
        width=340
    )

    refresh_picker()
    load_offers()

    offers_panel = ft.Container(content=offers_grid if is_desktop else offers_list, expand=True, padding=10)
    body = ft.Row([form_panel, offers_panel], expand=True, vertical_alignment=ft.CrossAxisAlignment.START) \
        if is_desktop else ft.Column([form_panel, offers_panel], expand=True, scroll=ft.ScrollMode.AUTO)

    return ft.Tab(
        text="Offers",
        icon=ft.Icons.LOCAL_OFFER,
        content=ft.Container(content=body, padding=10, expand=True)
    )
