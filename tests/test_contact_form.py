"""
Tests for the contact form store and cart snapshot types.
"""

import pytest

from cart import CartSnapshot, InMemoryCart, LineItem
from contact_form import FIELD_NAMES, ContactForm, FormStateStore, UnknownFieldError


class TestFormStateStore:

    def test_starts_empty(self):
        store = FormStateStore()
        assert store.form == ContactForm("", "", "", "")
        assert store.missing_fields() == list(FIELD_NAMES)

    def test_starts_from_initial_form(self, sample_form):
        store = FormStateStore(initial=ContactForm(**sample_form))

        assert store.is_complete()
        assert store.form.name == "Linh"
        assert store.edit_count == 0

    def test_set_field_preserves_other_fields(self, sample_form):
        store = FormStateStore()
        store.update(**sample_form)

        store.set_field("phone", "0911111111")

        assert store.form == ContactForm(
            name="Linh",
            email="a@b.com",
            phone="0911111111",
            address="123 Main St"
        )

    def test_set_field_returns_new_instance(self):
        store = FormStateStore()
        before = store.form
        after = store.set_field("name", "Linh")

        assert before is not after
        assert before.name == ""
        assert after.name == "Linh"

    def test_unknown_field_rejected(self):
        store = FormStateStore()
        with pytest.raises(UnknownFieldError):
            store.set_field("coupon", "FREE")
        assert store.edit_count == 0

    def test_unknown_field_is_value_error(self):
        with pytest.raises(ValueError):
            FormStateStore().set_field("", "x")

    def test_whitespace_only_counts_as_missing(self, sample_form):
        store = FormStateStore()
        store.update(**sample_form)
        store.set_field("address", "   \t")

        assert store.missing_fields() == ["address"]
        assert not store.is_complete()

    def test_complete_form(self, sample_form):
        store = FormStateStore()
        store.update(**sample_form)
        assert store.is_complete()

    def test_values_stored_unmodified(self):
        store = FormStateStore()
        store.set_field("name", "  Linh  ")
        assert store.form.name == "  Linh  "

    def test_reset(self, sample_form):
        store = FormStateStore()
        store.update(**sample_form)
        store.reset()

        assert store.form == ContactForm()
        assert store.edit_count == 0


class TestCart:

    def test_line_item_from_dict(self):
        item = LineItem.from_dict({"name": "Latte", "quantity": "2", "price": "50,000"})
        assert item == LineItem("Latte", 2, "50,000")
        assert item.to_dict() == {"name": "Latte", "quantity": 2, "price": "50,000"}

    def test_snapshot_helpers(self, latte_snapshot):
        assert not latte_snapshot.is_empty()
        assert latte_snapshot.item_count() == 2
        assert CartSnapshot().is_empty()

    def test_in_memory_cart_snapshot(self, latte_cart):
        snapshot = latte_cart.snapshot()

        assert snapshot.items == (LineItem("Latte", 2, "50,000"),)
        assert snapshot.total_amount == 100000

    def test_in_memory_cart_merges_lines(self, latte_cart):
        latte_cart.add_item("Latte", 50000)
        latte_cart.add_item("Mocha", 55000)

        snapshot = latte_cart.snapshot()

        assert [item.name for item in snapshot.items] == ["Latte", "Mocha"]
        assert snapshot.items[0].quantity == 3
        assert snapshot.total_amount == 205000

    def test_in_memory_cart_rejects_bad_lines(self):
        cart = InMemoryCart()
        assert not cart.add_item("Latte", 50000, quantity=0)
        assert not cart.add_item("", 50000)
        assert len(cart) == 0

    def test_snapshot_unaffected_by_later_changes(self, latte_cart):
        snapshot = latte_cart.snapshot()
        latte_cart.clear()

        assert len(latte_cart) == 0
        assert snapshot.total_amount == 100000
        assert latte_cart.snapshot().is_empty()
