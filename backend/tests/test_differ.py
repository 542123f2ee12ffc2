"""Unit tests for batch classification and ownership checks."""
import pytest

from orderdesk.exceptions import OrderValidationError, OwnershipError
from orderdesk.orders.differ import classify, parse_descriptor, verify_ownership

ORDER_NO = "SQ-01-01-24-0001"


class TestClassify:
    def test_partitions_example_batch(self):
        batch = classify(ORDER_NO, [
            {"item_code": "A", "quantity": 2},
            {"id": 10, "quantity": 5},
            {"id": 11, "_deleted": True},
        ])
        assert [d.index for d in batch.to_insert] == [0]
        assert [d.id for d in batch.to_update] == [10]
        assert [d.id for d in batch.to_delete] == [11]
        assert batch.referenced_ids == [11, 10]

    def test_updates_sorted_by_id(self):
        batch = classify(ORDER_NO, [{"id": 30, "quantity": 1}, {"id": 4, "quantity": 1}, {"id": 12}])
        assert [d.id for d in batch.to_update] == [4, 12, 30]

    def test_inserts_keep_submission_order(self):
        batch = classify(ORDER_NO, [{"item_code": "B"}, {"id": 3}, {"item_code": "A"}])
        assert [d.values["item_code"] for d in batch.to_insert] == ["B", "A"]
        assert [d.index for d in batch.live] == [1, 0, 2]

    def test_deleted_without_id_is_ignored(self):
        batch = classify(ORDER_NO, [{"item_code": "A", "_deleted": True}, {"item_code": "B"}])
        assert len(batch.ignored) == 1
        assert len(batch.to_insert) == 1
        assert batch.to_delete == []

    def test_zero_id_means_new_line(self):
        batch = classify(ORDER_NO, [{"id": 0, "item_code": "A"}, {"id": None, "item_code": "B"}])
        assert len(batch.to_insert) == 2

    def test_string_ids_accepted(self):
        batch = classify(ORDER_NO, [{"id": "7", "quantity": 1}])
        assert batch.to_update[0].id == 7

    def test_unknown_keys_dropped(self):
        batch = classify(ORDER_NO, [{"id": 1, "quantity": "3", "foo": "bar", "order_no": "OTHER"}])
        assert batch.to_update[0].values == {"quantity": 3.0}

    def test_update_values_respect_allowlist(self):
        batch = classify(ORDER_NO, [{"id": 1, "customer_name": "Acme", "quantity": 4}])
        descriptor = batch.to_update[0]
        assert descriptor.update_values == {"quantity": 4.0}
        assert descriptor.header_values == {"customer_name": "Acme"}

    def test_delete_descriptor_fields_not_parsed(self):
        batch = classify(ORDER_NO, [{"id": 5, "_deleted": True, "quantity": "lots"}])
        assert batch.to_delete[0].values == {}

    def test_order_no_trimmed(self):
        assert classify(f"  {ORDER_NO} ", [{"item_code": "A"}]).order_no == ORDER_NO


class TestClassifyValidation:
    @pytest.mark.parametrize("order_no", [None, "", "   "])
    def test_order_no_required(self, order_no):
        with pytest.raises(OrderValidationError, match="Order Number is required"):
            classify(order_no, [{"item_code": "A"}])

    @pytest.mark.parametrize("payload", [None, [], {"item_code": "A"}, "lines"])
    def test_payload_must_be_non_empty_list(self, payload):
        with pytest.raises(OrderValidationError, match="No data provided"):
            classify(ORDER_NO, payload)

    def test_collects_every_bad_item(self):
        with pytest.raises(OrderValidationError) as exc_info:
            classify(ORDER_NO, [
                {"item_code": "A", "quantity": "two"},
                "not an object",
                {"id": 3, "gst": "180 %"},
                {"item_code": "B", "quantity": 1},
            ])
        details = exc_info.value.details
        assert len(details) == 3
        assert details[0].startswith("item 0: quantity")
        assert details[1].startswith("item 1:")
        assert details[2].startswith("item 2: gst")
        assert exc_info.value.status_code == 400

    def test_duplicate_ids_rejected(self):
        with pytest.raises(OrderValidationError) as exc_info:
            classify(ORDER_NO, [{"id": 4, "quantity": 1}, {"id": 4, "_deleted": True}])
        assert "already used" in exc_info.value.details[0]

    @pytest.mark.parametrize("bad_id", [-3, "abc", 1.5, True])
    def test_bad_ids_rejected(self, bad_id):
        with pytest.raises(OrderValidationError):
            classify(ORDER_NO, [{"id": bad_id, "quantity": 1}])


class TestParseDescriptor:
    def test_deleted_string_flag(self):
        assert parse_descriptor({"id": 2, "_deleted": "true"}, 0).deleted is True
        assert parse_descriptor({"id": 2, "_deleted": "false"}, 0).deleted is False

    def test_rejects_non_object(self):
        with pytest.raises(ValueError):
            parse_descriptor(["id", 1], 0)


class TestVerifyOwnership:
    def test_owned_ids_pass(self, session, seed_lines):
        rows = seed_lines({"order_no": ORDER_NO}, {"order_no": ORDER_NO})
        verify_ownership(session, ORDER_NO, [r.id for r in rows])

    def test_no_ids_is_noop(self, session):
        verify_ownership(session, ORDER_NO, [])

    def test_missing_id_rejected(self, session, seed_lines):
        seed_lines({"order_no": ORDER_NO})
        with pytest.raises(OwnershipError) as exc_info:
            verify_ownership(session, ORDER_NO, [999])
        assert exc_info.value.ids == [999]
        assert "do not exist" in exc_info.value.message

    def test_foreign_id_rejected(self, session, seed_lines):
        mine, theirs = seed_lines({"order_no": ORDER_NO}, {"order_no": "SQ-01-01-24-0002"})
        with pytest.raises(OwnershipError) as exc_info:
            verify_ownership(session, ORDER_NO, [mine.id, theirs.id])
        assert exc_info.value.ids == [theirs.id]
        assert "SQ-01-01-24-0002" in exc_info.value.message
