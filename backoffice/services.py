# backoffice/services.py
"""
Inventory mutations. A logical card is a group of ``Card`` rows, so "stock"
changes are row inserts and deletes; edits to shared fields are cascaded to
every sibling row in the same transaction.
"""
import logging
import time
from dataclasses import dataclass

from django.conf import settings
from django.db import DatabaseError, transaction

from browse.catalog import to_card_row
from shop.exceptions import ImportFailed
from shop.inventory import SHARED_FIELDS, normalize_identity
from shop.models import Card
from shop.query import invalidate

logger = logging.getLogger(__name__)

# per-copy fields; never copied to siblings on edit
COPY_FIELDS = ("condition", "seller_notes", "image_url")


def _cards_changed():
    transaction.on_commit(lambda: invalidate("cards"))


def add_cards(fields, quantity=1):
    """Insert ``quantity`` identical rows (one per physical copy)."""
    quantity = int(quantity)
    if quantity < 1:
        raise ValueError("quantity must be at least 1")
    with transaction.atomic():
        rows = Card.objects.bulk_create([Card(**fields) for _ in range(quantity)])
        _cards_changed()
    logger.info("Added %s × %s (%s #%s)", quantity, fields.get("name"), fields.get("set_name"),
                fields.get("card_number"))
    return rows


def add_variant(card):
    """One more physical copy of ``card``: same fields, its own row."""
    values = {f: getattr(card, f) for f in SHARED_FIELDS + COPY_FIELDS}
    with transaction.atomic():
        copy = Card.objects.create(**values)
        _cards_changed()
    logger.info("Added a copy of %s (row %s)", card, copy.id)
    return copy


@transaction.atomic
def update_card(card, old_identity, apply_to_all=True):
    """
    Save ``card`` (already carrying its new field values) and, when
    ``apply_to_all`` is set, copy the shared fields onto every other row
    that had ``old_identity``. Returns how many sibling rows were updated.
    """
    card.save()
    updated = 0
    if apply_to_all:
        siblings = Card.objects.for_identity(normalize_identity(old_identity)).exclude(id=card.id)
        updated = siblings.update(**{f: getattr(card, f) for f in SHARED_FIELDS})
    _cards_changed()
    logger.info("Updated %s; cascaded to %s sibling rows", card, updated)
    return updated


def delete_card(card):
    """Remove one physical copy (stock - 1)."""
    with transaction.atomic():
        card.delete()
        _cards_changed()
    logger.info("Deleted one copy of %s", card)


def delete_all_copies(card):
    """Remove every unsold copy of ``card``'s logical card. Sold rows stay as order history."""
    with transaction.atomic():
        deleted, _ = Card.objects.available().siblings_of(card).delete()
        _cards_changed()
    logger.info("Deleted %s copies of %s", deleted, card)
    return deleted


@dataclass
class ImportResult:
    requested: int
    imported: int = 0
    failed_batches: int = 0

    @property
    def ok(self):
        return self.imported == self.requested


def import_catalog_cards(catalog_cards, batch_size=None, delay=None):
    """
    Turn catalog cards into ``Card`` rows, inserting ``batch_size`` at a time
    with ``delay`` seconds between batches. A batch that fails is logged and
    skipped; the result says how many rows made it. Raises ImportFailed
    when no row made it at all.
    """
    if batch_size is None:
        batch_size = settings.CATALOG_IMPORT_BATCH_SIZE
    if delay is None:
        delay = settings.CATALOG_IMPORT_BATCH_DELAY

    rows = [to_card_row(c) for c in catalog_cards]
    result = ImportResult(requested=len(rows))

    for start in range(0, len(rows), batch_size):
        if start and delay:
            time.sleep(delay)
        batch = rows[start:start + batch_size]
        try:
            with transaction.atomic():
                Card.objects.bulk_create([Card(**row) for row in batch])
        except DatabaseError:
            result.failed_batches += 1
            logger.exception("Import batch starting at %s failed (%s cards)", start, len(batch))
            continue
        result.imported += len(batch)

    if result.requested and not result.imported:
        raise ImportFailed(f"None of the {result.requested} selected cards could be imported.")

    if result.imported:
        _cards_changed()
    logger.info("Imported %s of %s catalog cards", result.imported, result.requested)
    return result
