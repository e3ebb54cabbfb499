"""
Unit tests for the catalog reconciler.

Run: pytest tests/unit/test_reconciler.py -v
"""

from datetime import datetime, timezone

from services.reconciler import merge_into_archive, reconcile_catalog, to_discontinued
from tests.factories import ProductFactory


NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def ids(rows) -> list[str]:
    return [r.id for r in rows]


class TestReconcileCatalog:
    """Tests for reconcile_catalog()"""

    def test_supplier_replacement_with_open_order(self):
        """
        Acme has A, B, C; an open order holds B; Acme re-imports D, E.

        Active becomes other suppliers + D, E. B is archived tagged with
        the replacing supplier; A and C are dropped.
        """
        # Arrange
        a, b, c = (ProductFactory.build(id=x, supplier="acme") for x in "ABC")
        other = ProductFactory.build(id="O", supplier="bodega-norte")
        d, e = (ProductFactory.build(id=x, supplier="acme") for x in "DE")

        # Act
        result = reconcile_catalog(
            active_rows=[a, other, b, c],
            discontinued_rows=[],
            new_batch=[d, e],
            supplier_key="acme",
            live_referenced_ids={"B"},
            now=NOW,
        )

        # Assert
        assert ids(result.active) == ["O", "D", "E"]
        assert ids(result.discontinued) == ["B"]
        assert result.discontinued[0].replaced_by == "acme"
        assert result.discontinued[0].discontinued_at == NOW
        assert result.archived_ids == ["B"]
        assert sorted(result.dropped_ids) == ["A", "C"]
        assert result.replaced == 3

    def test_partition_keeps_everything_but_droppable(self):
        """Active ∪ archive after covers everything before plus the batch, minus droppables."""
        # Arrange
        old = ProductFactory.build_batch(4, supplier="acme")
        others = ProductFactory.build_batch(2, supplier="other")
        archived = [ProductFactory.build_discontinued(supplier="older")]
        batch = ProductFactory.build_batch(3, supplier="acme")
        live = {old[1].id, old[3].id}

        # Act
        result = reconcile_catalog(old + others, archived, batch, "acme", live, now=NOW)

        # Assert
        before = set(ids(old + others + archived + batch))
        after = set(ids(result.active)) | set(ids(result.discontinued))
        assert after == before - set(result.dropped_ids)
        assert set(result.dropped_ids) == {old[0].id, old[2].id}
        assert not set(ids(result.active)) & set(ids(result.discontinued))

    def test_same_import_twice(self):
        """Second identical import leaves the supplier's rows equal to the batch."""
        # Arrange
        batch = ProductFactory.build_batch(2, supplier="acme")
        other = ProductFactory.build(supplier="other")

        # Act
        first = reconcile_catalog([other], [], batch, "acme", set(), now=NOW)
        second = reconcile_catalog(first.active, first.discontinued, batch, "acme", set(), now=NOW)

        # Assert
        acme_rows = [p for p in second.active if p.supplier == "acme"]
        assert ids(acme_rows) == ids(batch)
        assert len(second.discontinued) >= len(first.discontinued)

    def test_live_product_never_lost(self):
        """A live-referenced id stays in active or archive."""
        product = ProductFactory.build(supplier="acme")

        result = reconcile_catalog([product], [], [], "acme", {product.id}, now=NOW)

        assert product.id in ids(result.active) + ids(result.discontinued)

    def test_rearchiving_replaces_existing_entry(self):
        """An id already in the archive is replaced by the fresh snapshot."""
        # Arrange
        stale = ProductFactory.build_discontinued(id="B", supplier="acme", product_name="Old name")
        current = ProductFactory.build(id="B", supplier="acme", product_name="New name")

        # Act
        result = reconcile_catalog([current], [stale], [], "acme", {"B"}, now=NOW)

        # Assert
        assert ids(result.discontinued) == ["B"]
        assert result.discontinued[0].product_name == "New name"
        assert result.discontinued[0].discontinued_at == NOW

    def test_other_suppliers_untouched(self):
        other = ProductFactory.build(supplier="other")

        result = reconcile_catalog([other], [], [], "acme", set(), now=NOW)

        assert result.active == [other]
        assert result.replaced == 0


class TestArchiveHelpers:
    """Tests for to_discontinued() and merge_into_archive()"""

    def test_to_discontinued_copies_product(self):
        product = ProductFactory.build(product_name="Reserva")

        entry = to_discontinued(product, NOW, None)

        assert entry.id == product.id
        assert entry.product_name == "Reserva"
        assert entry.replaced_by is None

    def test_merge_dedupes_by_id(self):
        first = ProductFactory.build_discontinued(id="X", product_name="First")
        keep = ProductFactory.build_discontinued(id="Y")
        fresh = ProductFactory.build_discontinued(id="X", product_name="Fresh")

        merged = merge_into_archive([first, keep], [fresh])

        assert ids(merged) == ["Y", "X"]
        assert merged[1].product_name == "Fresh"
