"""
Sync engine: one admin save becomes one or two location-scoped writes.

Writes run one after another, primary first, each committed on its own.
There is no rollback across locations; the result reports each write
separately so callers can see a partial failure.

    create, sync off   one item at ctx.location
    create, sync on    one item per location, same descriptive fields,
                       independent ids and stock
    edit,   sync off   update the item by id
    edit,   sync on    update the item by id, then upsert its name-matched
                       twin at the other location (best effort)
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from core.errors import MenuAdminError
from core.image_store import delete_image, save_image
from core.logger import log_action
from core.menu_service import create_menu_item, get_menu_item, update_menu_item, upsert_menu_item_by_name
from core.session_manager import AdminContext, other_location
from core.validation import MenuItemForm, validate_menu_form

logger = logging.getLogger(__name__)

CREATE = "create"
CREATE_SYNC = "create_sync"
EDIT = "edit"
EDIT_SYNC = "edit_sync"


@dataclass
class WriteOutcome:
    location: str
    ok: bool
    item: object = None
    error: Optional[Exception] = None

    @property
    def error_message(self) -> str:
        return str(self.error) if self.error else ""


@dataclass
class SyncResult:
    mode: str
    primary: WriteOutcome
    secondary: Optional[WriteOutcome] = None

    @property
    def ok(self) -> bool:
        """Overall outcome shown to the admin.

        Edit-sync ignores the twin write: the primary edit stands on its own.
        """
        if not self.primary.ok:
            return False
        if self.mode == CREATE_SYNC:
            return self.secondary is not None and self.secondary.ok
        return True

    @property
    def message(self) -> str:
        if not self.primary.ok:
            return f"Failed to save item: {self.primary.error_message}"
        name = self.primary.item.name
        if self.mode == CREATE_SYNC and not self.ok:
            return (
                f"{name} was added to {self.primary.location} but not to "
                f"{self.secondary.location}: {self.secondary.error_message}"
            )
        if self.mode == CREATE_SYNC:
            return f"{name} added to both locations!"
        if self.mode == EDIT_SYNC and self.secondary and not self.secondary.ok:
            return f"{name} updated! (sync to {self.secondary.location} failed)"
        if self.mode == EDIT_SYNC:
            return f"{name} updated in both locations!"
        return f"{name} {'updated' if self.mode == EDIT else 'added'} successfully!"


def _write(target_location: str, func, *args, **kwargs) -> WriteOutcome:
    """Run one location write and capture its outcome.

    `func` receives `*args` and `**kwargs` untouched, so it may take its own
    `location` keyword.
    """
    try:
        item = func(*args, **kwargs)
    except MenuAdminError as ex:
        return WriteOutcome(location=target_location, ok=False, error=ex)
    except Exception as ex:
        # driver errors, timeouts, image copy failures
        logger.exception("Write at %s failed", target_location)
        return WriteOutcome(location=target_location, ok=False, error=ex)
    return WriteOutcome(location=target_location, ok=True, item=item)


def save_menu_item(
    db: Session,
    ctx: AdminContext,
    form: MenuItemForm,
    item_id: int = None,
    sync_both: bool = False,
    image_file: str = None,
) -> SyncResult:
    """
    Save the admin's menu item form.

    Args:
        db: Database session
        ctx: Acting admin and selected location
        form: Raw form values
        item_id: Item being edited, None to create
        sync_both: Also write the other location
        image_file: Path of a newly uploaded image, if any

    Raises:
        ValidationError: form rejected, nothing written
    """
    is_edit_mode = item_id is not None
    form = validate_menu_form(form, is_edit_mode=is_edit_mode, has_image=bool(image_file))

    if is_edit_mode:
        if sync_both:
            return _edit_sync(db, ctx, form, item_id, image_file)
        return _edit(db, ctx, form, item_id, image_file)
    if sync_both:
        return _create_sync(db, ctx, form, image_file)
    return _create(db, ctx, form, image_file)


def _create(db, ctx, form, image_file) -> SyncResult:
    primary = _write(
        ctx.location, create_menu_item, db, ctx.location, form.name, form.price, form.category,
        sub_category_id=form.sub_category_id, stock=form.stock, image_file=image_file,
    )
    if primary.ok:
        log_action(db, ctx.admin_email, f"Added menu item: {form.name}", ctx.location)
    return SyncResult(CREATE, primary)


def _create_sync(db, ctx, form, image_file) -> SyncResult:
    image_ref = None
    if image_file:
        try:
            image_ref = save_image(image_file)
        except (ValueError, OSError) as ex:
            return SyncResult(CREATE_SYNC, WriteOutcome(ctx.location, ok=False, error=ex))

    results = []
    for location in (ctx.location, other_location(ctx.location)):
        outcome = _write(
            location, create_menu_item, db, location, form.name, form.price, form.category,
            sub_category_id=form.sub_category_id, stock=form.stock, image_ref=image_ref,
        )
        results.append(outcome)
        if not outcome.ok:
            break
        log_action(db, ctx.admin_email, f"Added menu item: {form.name}", location)

    primary = results[0]
    secondary = results[1] if len(results) > 1 else None
    if not primary.ok and image_ref:
        # nothing references the copied upload
        delete_image(image_ref)
    if secondary is not None and not secondary.ok:
        # No rollback: the primary location keeps its new item
        logger.error(
            "Created %s at %s but not at %s: %s",
            form.name, primary.location, secondary.location, secondary.error,
        )
    return SyncResult(CREATE_SYNC, primary, secondary)


def _edit(db, ctx, form, item_id, image_file) -> SyncResult:
    location = _location_of(db, item_id, ctx)
    primary = _write(
        location, update_menu_item, db, item_id, form.name, form.price, form.category,
        sub_category_id=form.sub_category_id, stock=form.stock, image_file=image_file,
    )
    if primary.ok:
        log_action(db, ctx.admin_email, f"Updated menu item: {form.name}", location)
    return SyncResult(EDIT, primary)


def _edit_sync(db, ctx, form, item_id, image_file) -> SyncResult:
    location = _location_of(db, item_id, ctx)
    try:
        previous_name = get_menu_item(db, item_id).name
    except MenuAdminError as ex:
        return SyncResult(EDIT_SYNC, WriteOutcome(location, ok=False, error=ex))

    primary = _write(
        location, update_menu_item, db, item_id, form.name, form.price, form.category,
        sub_category_id=form.sub_category_id, stock=form.stock, image_file=image_file,
    )
    if not primary.ok:
        return SyncResult(EDIT_SYNC, primary)
    log_action(db, ctx.admin_email, f"Updated menu item: {form.name}", location)

    # The primary now holds either the new upload or its existing image;
    # both cases forward that reference so the twin never loses its picture.
    twin_location = other_location(location)
    secondary = _write(
        twin_location, upsert_menu_item_by_name, db,
        match_name=previous_name,
        location=twin_location,
        price=form.price,
        category=form.category,
        sub_category_id=form.sub_category_id,
        stock=form.stock,
        existing_image_ref=primary.item.image,
        new_name=form.name,
    )
    if secondary.ok:
        log_action(db, ctx.admin_email, f"Synced menu item: {form.name}", twin_location)
    else:
        logger.warning(
            "Sync of %s to %s failed, primary edit kept: %s",
            form.name, twin_location, secondary.error,
        )
        log_action(db, ctx.admin_email, f"Sync failed for menu item: {form.name} ({secondary.error})", twin_location)
    return SyncResult(EDIT_SYNC, primary, secondary)


def _location_of(db, item_id, ctx) -> str:
    try:
        return get_menu_item(db, item_id).location
    except MenuAdminError:
        return ctx.location
