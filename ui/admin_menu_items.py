"""
Menu Items Management Tab for Admin Panel
"""
import flet as ft
from core.errors import MenuAdminError, ValidationError
from core.menu_service import list_menu_items, delete_menu_item, find_twin, set_stock
from core.offer_resolver import annotate_menu
from core.offer_service import list_offers
from core.logger import log_action
from core.session_manager import AdminContext, other_location
from core.subcategory_service import (
    list_sub_categories, create_sub_category, update_sub_category, delete_sub_category
)
from core.sync_engine import save_menu_item
from core.validation import MenuItemForm, SUBCATEGORY_REQUIRED_CATEGORY, parse_stock
from ui.admin_constants import (
    CATEGORIES, DESKTOP_COLUMNS, LOCATION_COLORS,
    GRID_SPACING, GRID_RUN_SPACING
)
from ui.admin_utils import close_dialog, show_snack, format_price, image_box, image_src

def build_menu_items_tab(page: ft.Page, db, ctx: AdminContext, is_desktop: bool):
    """
    Build the Menu Items management tab for the context's location

    Args:
        page: Flet page object
        db: Database session
        ctx: Acting admin and selected location
        is_desktop: True if desktop layout, False if mobile

    Returns:
        ft.Tab: Complete menu items tab with all functionality
    """
    accent = LOCATION_COLORS[ctx.location]

    # ===================== CARD BUILDER =====================

    def build_price_row(info, item):
        if not info.is_offer:
            return ft.Text(format_price(item.price), color="green", weight="bold")
        return ft.Row([
            ft.Text(
                format_price(info.original_price),
                color="grey600",
                style=ft.TextStyle(decoration=ft.TextDecoration.LINE_THROUGH)
            ),
            ft.Text(format_price(info.offer_price), color="green", weight="bold"),
            ft.Container(
                content=ft.Text(f"{info.percentage:g}% OFF", color="white", size=10, weight="bold"),
                bgcolor=accent,
                padding=ft.padding.symmetric(horizontal=6, vertical=2),
                border_radius=10,
                tooltip=info.offer_name
            ),
        ], spacing=6)

    def build_menu_card(item, info):
        """Horizontal card: image, name with actions menu, category, stock, price/offer badge"""
        category_text = item.category
        if item.sub_category:
            category_text = f"{item.category} / {item.sub_category.name}"

        return ft.Card(
            content=ft.Container(
                content=ft.Row([
                    ft.Container(
                        content=image_box(item.image),
                        border=ft.border.all(1, "grey300"),
                        border_radius=8
                    ),
                    ft.Column([
                        ft.Row([
                            ft.Text(item.name, weight="bold", size=16, color="black", expand=True),
                            ft.PopupMenuButton(
                                icon=ft.Icons.MORE_VERT,
                                icon_color="black",
                                items=[
                                    ft.PopupMenuItem(
                                        text="Edit",
                                        icon=ft.Icons.EDIT,
                                        on_click=lambda e, i=item: show_item_dialog(i)
                                    ),
                                    ft.PopupMenuItem(
                                        text="Set Stock",
                                        icon=ft.Icons.INVENTORY,
                                        on_click=lambda e, i=item: show_stock_dialog(i)
                                    ),
                                    ft.PopupMenuItem(
                                        text="Delete",
                                        icon=ft.Icons.DELETE,
                                        on_click=lambda e, i=item: confirm_delete_item(i)
                                    ),
                                ],
                                icon_size=20,
                                padding=0,
                                bgcolor='white',
                                menu_position=ft.PopupMenuPosition.OVER,
                            )
                        ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN, spacing=5),
                        ft.Text(f"Category: {category_text}", size=12, color="grey700"),
                        ft.Text(
                            f"Stock: {item.stock}",
                            size=12,
                            color="red" if item.stock == 0 else "grey700"
                        ),
                        build_price_row(info, item),
                    ], spacing=4, expand=True),
                ], spacing=10, vertical_alignment=ft.CrossAxisAlignment.CENTER),
                padding=10,
                bgcolor="white",
                border_radius=12
            )
        )

    # ===================== GRID/LIST CONTAINERS =====================

    menu_grid = ft.GridView(
        runs_count=DESKTOP_COLUMNS,
        max_extent=500,
        child_aspect_ratio=3.2,
        spacing=GRID_SPACING,
        run_spacing=GRID_RUN_SPACING,
        expand=True
    )
    menu_list = ft.Column(spacing=10, scroll=ft.ScrollMode.AUTO, expand=True)
    search_field = ft.TextField(label="Search menu", width=250, prefix_icon=ft.Icons.SEARCH)

    # ===================== LOAD DATA =====================

    def load_menu_items():
        """Load the location's items with their current discount state"""
        target = menu_grid if is_desktop else menu_list
        target.controls.clear()
        term = (search_field.value or "").strip().lower()
        items = [i for i in list_menu_items(db, ctx.location) if term in i.name.lower()]
        offers = list_offers(db, ctx.location)
        for item, info in annotate_menu(items, offers):
            target.controls.append(build_menu_card(item, info))
        if not items:
            empty = f"No items match '{term}'." if term else f"No items on the {ctx.location} menu yet."
            target.controls.append(ft.Text(empty, color="grey700"))
        page.update()

    search_field.on_change = lambda e: load_menu_items()

    # ===================== ADD / EDIT DIALOG =====================

    def show_item_dialog(item=None):
        is_edit_mode = item is not None
        sub_categories = list_sub_categories(db)

        name_field = ft.TextField(label="Item Name", value=item.name if item else "", width=300)
        price_field = ft.TextField(
            label="Price",
            value=str(item.price) if item else "",
            width=300,
            keyboard_type=ft.KeyboardType.NUMBER
        )
        stock_field = ft.TextField(
            label="Stock Count",
            value=str(item.stock) if item else "0",
            width=300,
            keyboard_type=ft.KeyboardType.NUMBER
        )
        category_dropdown = ft.Dropdown(
            label="Category",
            value=item.category if item else SUBCATEGORY_REQUIRED_CATEGORY,
            width=300,
            options=[ft.dropdown.Option(cat) for cat in CATEGORIES]
        )
        sub_category_dropdown = ft.Dropdown(
            label="Sub-category",
            value=str(item.sub_category_id) if item and item.sub_category_id else None,
            width=180,
            options=[ft.dropdown.Option(key=str(s.id), text=s.name) for s in sub_categories]
        )

        def refresh_sub_categories(selected_id=None):
            subs = list_sub_categories(db)
            sub_category_dropdown.options = [ft.dropdown.Option(key=str(s.id), text=s.name) for s in subs]
            sub_category_dropdown.value = str(selected_id) if selected_id else None
            page.update()

        def edit_selected_sub_category(e):
            selected = next((s for s in list_sub_categories(db) if str(s.id) == sub_category_dropdown.value), None)
            if not selected:
                show_snack(page, "Please select a subcategory to edit.", ok=False)
                return
            show_sub_category_dialog(selected, on_saved=lambda sub: refresh_sub_categories(sub.id))

        def delete_selected_sub_category(e):
            selected = next((s for s in list_sub_categories(db) if str(s.id) == sub_category_dropdown.value), None)
            if not selected:
                show_snack(page, "Please select a subcategory to delete.", ok=False)
                return
            confirm_delete_sub_category(selected, on_deleted=lambda: refresh_sub_categories())

        sub_category_row = ft.Row([
            sub_category_dropdown,
            ft.IconButton(
                icon=ft.Icons.ADD, tooltip="Add sub-category",
                on_click=lambda e: show_sub_category_dialog(on_saved=lambda sub: refresh_sub_categories(sub.id))
            ),
            ft.IconButton(icon=ft.Icons.EDIT, tooltip="Edit sub-category", on_click=edit_selected_sub_category),
            ft.IconButton(icon=ft.Icons.DELETE, tooltip="Delete sub-category", on_click=delete_selected_sub_category),
        ], spacing=0, width=300, visible=category_dropdown.value == SUBCATEGORY_REQUIRED_CATEGORY)
        sync_switch = ft.Switch(
            label=f"Also {'update' if is_edit_mode else 'add to'} {other_location(ctx.location)}",
            value=False,
            active_color=accent
        )
        message = ft.Text("", color="red")

        uploaded_image_path = {"value": None}
        image_preview = ft.Container(
            content=image_box(item.image, 300, 120) if item and image_src(item.image)
            else ft.Text("No image selected", size=12, color="grey"),
            width=300,
            height=120,
            bgcolor="grey200",
            border_radius=8,
            alignment=ft.alignment.center,
            border=ft.border.all(1, "grey300")
        )

        def on_category_change(e):
            # Only Snacks carry a sub-category
            is_snack = category_dropdown.value == SUBCATEGORY_REQUIRED_CATEGORY
            sub_category_row.visible = is_snack
            if not is_snack:
                sub_category_dropdown.value = None
            page.update()

        category_dropdown.on_change = on_category_change

        def on_file_pick(e: ft.FilePickerResultEvent):
            if e.files:
                uploaded_image_path["value"] = e.files[0].path
                image_preview.content = ft.Image(
                    src=e.files[0].path,
                    width=300,
                    height=120,
                    fit=ft.ImageFit.COVER,
                    border_radius=8
                )
                page.update()

        file_picker = ft.FilePicker(on_result=on_file_pick)
        page.overlay.append(file_picker)
        page.update()

        def save_item(e):
            form = MenuItemForm(
                name=name_field.value,
                price=price_field.value,
                category=category_dropdown.value,
                stock=stock_field.value,
                sub_category_id=int(sub_category_dropdown.value) if sub_category_dropdown.value else None
            )
            try:
                result = save_menu_item(
                    db, ctx, form,
                    item_id=item.id if is_edit_mode else None,
                    sync_both=sync_switch.value,
                    image_file=uploaded_image_path["value"]
                )
            except ValidationError as ex:
                message.value = f"❌ {ex}"
                page.update()
                return

            if not result.primary.ok:
                message.value = f"❌ {result.message}"
                page.update()
                return

            dialog.open = False
            page.update()
            load_menu_items()
            show_snack(page, result.message, ok=result.ok)

        title = "Edit Menu Item" if is_edit_mode else f"Add New Item ({ctx.location})"
        dialog = ft.AlertDialog(
            title=ft.Container(
                content=ft.Text(title, size=16, weight="bold", overflow=ft.TextOverflow.ELLIPSIS, max_lines=1),
                alignment=ft.alignment.center_left,
                width=320,
                padding=ft.padding.only(left=10)
            ),
            content=ft.Container(
                content=ft.Column([
                    name_field,
                    price_field,
                    category_dropdown,
                    sub_category_row,
                    stock_field,
                    ft.Divider(),
                    ft.Text("Item Image", size=14, weight="bold"),
                    image_preview,
                    ft.ElevatedButton(
                        "Change Image" if is_edit_mode else "Upload Image",
                        icon=ft.Icons.UPLOAD_FILE,
                        on_click=lambda e: file_picker.pick_files(
                            allowed_extensions=["png", "jpg", "jpeg", "webp"],
                            allow_multiple=False
                        ),
                        width=300,
                        bgcolor=accent,
                        color="white"
                    ),
                    sync_switch,
                    message
                ], tight=True, scroll=ft.ScrollMode.AUTO, horizontal_alignment=ft.CrossAxisAlignment.CENTER),
                width=320,
                height=600,
                alignment=ft.alignment.top_center
            ),
            actions=[
                ft.TextButton("Cancel", on_click=lambda e: close_dialog(page, dialog)),
                ft.ElevatedButton("Update Item" if is_edit_mode else "Save Item", on_click=save_item)
            ]
        )
        page.overlay.append(dialog)
        dialog.open = True
        page.update()

    # ===================== SUB-CATEGORY DIALOGS =====================

    def show_sub_category_dialog(sub=None, on_saved=None):
        """Add (sub is None) or edit a sub-category; an image is required on add"""
        name_field = ft.TextField(label="Sub-category Name", value=sub.name if sub else "", width=280)
        picked = {"path": None}
        picked_label = ft.Text("Keep current image" if sub else "No image selected", size=12, color="grey")
        message = ft.Text("", color="red")

        def on_pick(e: ft.FilePickerResultEvent):
            if e.files:
                picked["path"] = e.files[0].path
                picked_label.value = e.files[0].name
                page.update()

        picker = ft.FilePicker(on_result=on_pick)
        page.overlay.append(picker)
        page.update()

        def save(e):
            try:
                if sub:
                    saved = update_sub_category(db, ctx, sub.id, name_field.value, picked["path"])
                else:
                    saved = create_sub_category(db, ctx, name_field.value, picked["path"])
            except MenuAdminError as ex:
                message.value = f"❌ {ex}"
                page.update()
                return
            close_dialog(page, dialog)
            show_snack(page, f"Sub-category {saved.name} saved!")
            if on_saved:
                on_saved(saved)
            load_menu_items()

        dialog = ft.AlertDialog(
            title=ft.Text("Edit Sub-category" if sub else "New Sub-category"),
            content=ft.Column([
                name_field,
                ft.ElevatedButton(
                    "Choose Image",
                    icon=ft.Icons.UPLOAD_FILE,
                    on_click=lambda e: picker.pick_files(
                        allowed_extensions=["png", "jpg", "jpeg", "webp"],
                        allow_multiple=False
                    )
                ),
                picked_label,
                message
            ], tight=True),
            actions=[
                ft.TextButton("Cancel", on_click=lambda e: close_dialog(page, dialog)),
                ft.ElevatedButton("Save", on_click=save, bgcolor=accent, color="white")
            ]
        )
        page.overlay.append(dialog)
        dialog.open = True
        page.update()

    def confirm_delete_sub_category(sub, on_deleted=None):
        def do_delete(e):
            try:
                delete_sub_category(db, ctx, sub.id)
            except MenuAdminError as ex:
                close_dialog(page, dialog)
                show_snack(page, f"Delete failed: {ex}", ok=False)
                return
            close_dialog(page, dialog)
            show_snack(page, f"Sub-category {sub.name} deleted")
            if on_deleted:
                on_deleted()
            load_menu_items()

        dialog = ft.AlertDialog(
            title=ft.Text("Confirm Delete"),
            content=ft.Text(f"Permanently delete sub-category '{sub.name}'? It is shared by both locations."),
            actions=[
                ft.TextButton("Cancel", on_click=lambda e: close_dialog(page, dialog)),
                ft.ElevatedButton("Delete", on_click=do_delete, style=ft.ButtonStyle(bgcolor="red", color="white"))
            ]
        )
        page.overlay.append(dialog)
        dialog.open = True
        page.update()

    # ===================== STOCK =====================

    def show_stock_dialog(item):
        """Set the stock of this location's record only"""
        stock_field = ft.TextField(
            label=f"Stock at {item.location}",
            value=str(item.stock),
            width=200,
            keyboard_type=ft.KeyboardType.NUMBER
        )
        message = ft.Text("", color="red")

        def save(e):
            try:
                updated = set_stock(db, item.id, parse_stock(stock_field.value))
            except MenuAdminError as ex:
                message.value = f"❌ {ex}"
                page.update()
                return
            log_action(db, ctx.admin_email, f"Set stock of {updated.name} to {updated.stock}", updated.location)
            close_dialog(page, dialog)
            load_menu_items()
            show_snack(page, f"{updated.name}: stock {updated.stock}")

        dialog = ft.AlertDialog(
            title=ft.Text(f"Stock: {item.name}"),
            content=ft.Column([stock_field, message], tight=True),
            actions=[
                ft.TextButton("Cancel", on_click=lambda e: close_dialog(page, dialog)),
                ft.ElevatedButton("Save", on_click=save, bgcolor=accent, color="white")
            ]
        )
        page.overlay.append(dialog)
        dialog.open = True
        page.update()

    # ===================== DELETE ITEM =====================

    def confirm_delete_item(item):
        def do_delete(e):
            try:
                delete_menu_item(db, item.id)
            except MenuAdminError as ex:
                close_dialog(page, dialog)
                show_snack(page, f"Delete failed: {ex}", ok=False)
                return
            log_action(db, ctx.admin_email, f"Deleted menu item: {item.name}", item.location)
            dialog.open = False
            page.update()
            load_menu_items()
            show_snack(page, f"✅ {item.name} deleted from {item.location}")

        twin_location = other_location(item.location)
        try:
            has_twin = find_twin(db, item.name, twin_location) is not None
        except MenuAdminError:
            has_twin = True
        note = f"The {twin_location} copy is kept." if has_twin else f"It is not sold at {twin_location}."

        dialog = ft.AlertDialog(
            title=ft.Text("Confirm Delete"),
            content=ft.Text(f"Delete '{item.name}' from the {item.location} menu? {note}"),
            actions=[
                ft.TextButton("Cancel", on_click=lambda e: close_dialog(page, dialog)),
                ft.ElevatedButton("Delete", on_click=do_delete, style=ft.ButtonStyle(bgcolor="red", color="white"))
            ]
        )
        page.overlay.append(dialog)
        dialog.open = True
        page.update()

    # ===================== BUILD TAB =====================

    load_menu_items()

    return ft.Tab(
        text="Menu Items",
        icon=ft.Icons.RESTAURANT_MENU,
        content=ft.Column([
            ft.Container(
                content=ft.Row([
                    ft.Text(f"Manage {ctx.location.title()} Menu", size=20, weight="bold", color='black'),
                    ft.Row([
                        search_field,
                        ft.ElevatedButton(
                            "Add New Item",
                            icon=ft.Icons.ADD,
                            on_click=lambda e: show_item_dialog(),
                            bgcolor=accent,
                            color="white"
                        )
                    ], spacing=10)
                ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN, wrap=True),
                padding=10
            ),
            ft.Container(
                content=menu_grid if is_desktop else menu_list,
                expand=True,
                padding=10
            )
        ], expand=True, spacing=0)
    )
