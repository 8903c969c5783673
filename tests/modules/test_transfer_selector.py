"""Tests for the transfer read side: lookups and the filtered transfer list."""

from uuid import uuid4

import pytest

from stock_kernel.exceptions import TransferNotFoundError
from stock_modules.transfers.models import TransferItemRequest, TransferStatus
from stock_modules.transfers.selectors import TransferSelector


@pytest.fixture
def three_transfers(create_branch, create_product, transfer_service, test_actor_id, deterministic_clock):
    a, b, c = create_branch("A"), create_branch("B"), create_branch("C")
    p1, p2 = create_product("P-1"), create_product("P-2")

    first = transfer_service.create_transfer(
        a.id, b.id,
        [TransferItemRequest(p1.id, 3), TransferItemRequest(p2.id, 4)],
        test_actor_id,
    )
    deterministic_clock.advance(10)
    second = transfer_service.create_transfer(
        b.id, c.id, [TransferItemRequest(p1.id, 1)], test_actor_id
    )
    deterministic_clock.advance(10)
    third = transfer_service.create_transfer(
        c.id, a.id, [TransferItemRequest(p2.id, 9)], test_actor_id
    )
    transfer_service.transition(third.id, "approve", test_actor_id)
    return (a, b, c), (first, second, third)


class TestLookups:
    def test_get(self, session, three_transfers):
        _, (first, _, _) = three_transfers

        transfer = TransferSelector(session).get(first.id)

        assert transfer.transfer_number == first.transfer_number
        assert transfer.total_quantity == 7

    def test_get_missing(self, session, three_transfers):
        assert TransferSelector(session).get(uuid4()) is None

    def test_get_or_raise(self, session, three_transfers):
        with pytest.raises(TransferNotFoundError):
            TransferSelector(session).get_or_raise(uuid4())

    def test_get_by_number(self, session, three_transfers):
        _, (_, second, _) = three_transfers

        assert TransferSelector(session).get_by_number("ST-00000002").id == second.id


class TestListTransfers:
    def test_newest_first(self, session, three_transfers):
        numbers = [t.transfer_number for t in TransferSelector(session).list_transfers()]

        assert numbers == ["ST-00000003", "ST-00000002", "ST-00000001"]

    def test_branch_names_and_totals(self, session, three_transfers):
        (a, b, _), (first, _, _) = three_transfers

        summary = TransferSelector(session).list_transfers()[-1]

        assert summary.id == first.id
        assert summary.from_branch_name == a.name
        assert summary.to_branch_name == b.name
        assert summary.item_count == 2
        assert summary.total_quantity == 7
        assert summary.to_dict()["from_branch"]["name"] == a.name

    def test_status_filter(self, session, three_transfers):
        _, (_, _, third) = three_transfers

        approved = TransferSelector(session).list_transfers(status=TransferStatus.APPROVED)

        assert [t.id for t in approved] == [third.id]
        assert TransferSelector(session).list_transfers(status="in_transit") == []

    def test_branch_filter_matches_either_side(self, session, three_transfers):
        (a, _, _), (first, _, third) = three_transfers

        touching_a = TransferSelector(session).list_transfers(branch_id=a.id)

        assert {t.id for t in touching_a} == {first.id, third.id}

    def test_limit(self, session, three_transfers):
        assert len(TransferSelector(session).list_transfers(limit=2)) == 2
