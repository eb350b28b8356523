"""Contract tests for the BalanceProjector and ledger replay."""

import pytest

from economy.events.codec import encode
from economy.events.projector import CorruptLedgerError
from economy.policy import STIPEND_NOTE
from tests.fixtures import make_burn, make_mint, make_transaction


class TestProjectorApply:
    def test_mint_credits_recipient(self, projector):
        projector.apply(make_mint(recipient="alice", amount=10_000_000))
        assert projector.balance("alice") == 10_000_000

    def test_transaction_burns_fee(self, projector):
        projector.apply(make_mint(recipient="alice", amount=10_000_000))
        projector.apply(make_transaction(amount=4_000_000, fee=400_000))

        assert projector.balance("alice") == 5_600_000
        assert projector.balance("bob") == 4_000_000
        assert projector.supply() == 9_600_000

    def test_burn_debits_sender(self, projector):
        projector.apply(make_mint(amount=3_000_000))
        projector.apply(make_burn(amount=1_000_000))
        assert projector.balance("alice") == 2_000_000

    def test_unknown_user_has_zero_balance(self, projector):
        assert projector.balance("nobody") == 0
        assert projector.user_count() == 0

    def test_drained_users_still_count(self, projector):
        projector.apply(make_mint(amount=1_000_000))
        projector.apply(make_burn(amount=1_000_000))
        assert projector.balance("alice") == 0
        assert projector.user_count() == 1

    def test_stipend_mint_records_eligibility(self, projector):
        projector.apply(make_mint(note=STIPEND_NOTE, time=1234))
        projector.apply(make_mint(recipient="bob", note="seed", time=99))
        assert projector.last_stipend("alice") == 1234
        assert projector.last_stipend("bob") is None


class TestProjectorReplay:
    def test_replay_lines(self, projector):
        events = [
            make_mint(amount=10_000_000),
            make_transaction(amount=4_000_000, fee=400_000),
            make_burn(sender="bob", amount=1_000_000),
        ]
        projector.replay_lines(encode(e) for e in events)

        assert projector.snapshot() == {"alice": 5_600_000, "bob": 3_000_000}

    def test_replay_is_idempotent(self, projector):
        lines = [
            encode(make_mint(amount=10_000_000)),
            encode(make_transaction(amount=4_000_000, fee=400_000)),
            encode(make_mint(recipient="carol", note=STIPEND_NOTE, time=5)),
        ]
        projector.replay_lines(lines)
        first = projector.snapshot()
        projector.replay_lines(lines)

        assert projector.snapshot() == first
        assert projector.last_stipend("carol") == 5

    def test_replay_resets_previous_state(self, projector):
        projector.apply(make_mint(recipient="zed", amount=1))
        projector.replay_lines([encode(make_mint())])
        assert projector.balance("zed") == 0
        assert projector.user_count() == 1

    def test_overdrawing_transaction_is_corruption(self, projector):
        lines = [
            encode(make_mint(amount=4_000_000)),
            encode(make_transaction(amount=4_000_000, fee=400_000)),
        ]
        with pytest.raises(CorruptLedgerError) as exc:
            projector.replay_lines(lines)
        assert exc.value.position == 2

    def test_overdrawing_burn_is_corruption(self, projector):
        with pytest.raises(CorruptLedgerError) as exc:
            projector.replay_lines([encode(make_burn(amount=1))])
        assert exc.value.position == 1

    def test_unknown_event_type_is_corruption(self, projector):
        lines = [encode(make_mint()), 'Refund {"To":"alice"}']
        with pytest.raises(CorruptLedgerError) as exc:
            projector.replay_lines(lines)
        assert exc.value.position == 2
        assert "Unknown event type" in exc.value.reason

    def test_malformed_record_is_corruption(self, projector):
        with pytest.raises(CorruptLedgerError):
            projector.replay_lines(["Mint {broken"])

    def test_failed_replay_leaves_projection_empty(self, projector):
        lines = [encode(make_mint(amount=10)), encode(make_burn(amount=11))]
        with pytest.raises(CorruptLedgerError):
            projector.replay_lines(lines)
        assert projector.snapshot() == {}
        assert projector.supply() == 0
