"""
Shared utility functions for admin panel
"""
import os
import flet as ft
from core.image_store import full_image_url, local_path
from ui.admin_constants import CURRENCY


def close_dialog(page, dialog):
    """Close a dialog and update the page"""
    dialog.open = False
    page.update()


def show_snack(page: ft.Page, text: str, ok: bool = True):
    """Show a green (ok) or red snack bar"""
    page.snack_bar = ft.SnackBar(ft.Text(text), bgcolor=ft.Colors.GREEN if ok else ft.Colors.RED, open=True)
    page.update()


def format_price(value) -> str:
    return f"{CURRENCY}{float(value):.2f}"


def image_src(image_ref: str):
    """Local copy of a stored image when it exists, otherwise its URL on the image host"""
    if not image_ref:
        return None
    if not image_ref.startswith("http"):
        path = local_path(image_ref)
        if os.path.exists(path):
            return path
    return full_image_url(image_ref)


def _placeholder(width, height):
    return ft.Container(
        width=width,
        height=height,
        bgcolor="grey300",
        border_radius=8,
        alignment=ft.alignment.center,
        content=ft.Icon(ft.Icons.RESTAURANT, size=30, color="grey600")
    )


def image_box(image_ref: str, width: int = 80, height: int = 80):
    """Image thumbnail with a placeholder icon when there is no picture"""
    src = image_src(image_ref)
    if src:
        return ft.Image(
            src=src,
            width=width,
            height=height,
            fit=ft.ImageFit.COVER,
            border_radius=8,
            error_content=_placeholder(width, height)
        )
    return _placeholder(width, height)
