"""
Tests for win resolution and payout aggregation
Run with: pytest tests/test_payout_calculator.py -v
"""

import pytest

from slot_engine.core.errors import ConfigurationError, PayoutRangeError, PayoutValidationError
from slot_engine.core.machine_config import MachineConfig, Payline, PaytableEntry, Symbol
from slot_engine.core.providers import MachineSnapshot
from slot_engine.services.payout_calculator import (
    BET_UNIT,
    Win,
    bet_multiplier,
    calculate_payout,
    count_symbols,
    resolve_wins,
    total_payout,
    validate_grid,
    validate_line_count,
    validate_request,
)


A, B, C = Symbol(1, "A"), Symbol(2, "B"), Symbol(3, "C")

TOP_ROW = Payline.from_bitmap_string("111000000", rows=3, columns=3, line_id=1)
MIDDLE_ROW = Payline.from_bitmap_string("000111000", rows=3, columns=3, line_id=2)
DIAGONAL = Payline.from_bitmap_string("100010001", rows=3, columns=3, line_id=3)


def _paytable(*entries):
    return MachineSnapshot.build(MachineConfig.classic_3x3(), [A, B, C], [], list(entries))


def _payout(grid, bet, lines=(TOP_ROW,), paytable=None):
    paytable = paytable or _paytable(PaytableEntry(1, 3, 10))
    return calculate_payout(grid, bet, list(lines), paytable, rows=3, columns=3)


GRID_TOP_AAA = (
    (A, A, A),
    (B, C, B),
    (C, B, C),
)


# ---------------------------------------------------------------------------
# Reference scenarios
# ---------------------------------------------------------------------------

class TestScenarios:

    def test_full_top_row_pays_rate_times_multiplier(self):
        # (A,3) -> 10, bet 100 -> multiplier 2
        assert _payout(GRID_TOP_AAA, 100) == 20

    def test_bet_below_one_unit_pays_zero(self):
        assert _payout(GRID_TOP_AAA, 40) == 0

    def test_count_without_entry_contributes_nothing(self):
        grid = ((A, B, A), (B, C, B), (C, B, C))
        for bet in (0, 50, 100, 1000):
            assert _payout(grid, bet) == 0

    def test_same_combination_on_two_lines_counts_twice(self):
        grid = ((A, A, A), (A, A, A), (B, C, B))
        wins = resolve_wins(grid, [TOP_ROW, MIDDLE_ROW], _paytable(PaytableEntry(1, 3, 10)))

        assert len(wins) == 2
        assert [w.line_index for w in wins] == [0, 1]
        assert _payout(grid, 100, lines=(TOP_ROW, MIDDLE_ROW)) == 40


# ---------------------------------------------------------------------------
# Win resolution
# ---------------------------------------------------------------------------

class TestResolveWins:

    def test_win_record_fields(self):
        wins = resolve_wins(GRID_TOP_AAA, [TOP_ROW], _paytable(PaytableEntry(1, 3, 10)))
        assert wins == [Win(symbol=A, occurrences=3, pay=10, line_index=0, line_id=1)]

    def test_grouping_ignores_position(self):
        # A at both ends of the diagonal, B in the centre
        grid = ((A, C, C), (C, B, C), (C, C, A))
        paytable = _paytable(PaytableEntry(1, 2, 3), PaytableEntry(2, 1, 1))
        wins = resolve_wins(grid, [DIAGONAL], paytable)

        assert {(w.symbol, w.occurrences, w.pay) for w in wins} == {(A, 2, 3), (B, 1, 1)}

    def test_exact_count_only(self):
        # only (A,2) is defined; three A's must not fall back to it
        wins = resolve_wins(GRID_TOP_AAA, [TOP_ROW], _paytable(PaytableEntry(1, 2, 5)))
        assert wins == []

    def test_identity_by_id_not_name(self):
        grid = ((Symbol(1, "A"), Symbol(1, "a-alt"), Symbol(1, "A")), (B, B, B), (C, C, C))
        wins = resolve_wins(grid, [TOP_ROW], _paytable(PaytableEntry(1, 3, 10)))
        assert len(wins) == 1 and wins[0].occurrences == 3

    def test_zero_pay_entry_still_emits_win(self):
        wins = resolve_wins(GRID_TOP_AAA, [TOP_ROW], _paytable(PaytableEntry(1, 3, 0)))
        assert len(wins) == 1 and wins[0].pay == 0

    def test_no_lines_no_wins(self):
        assert resolve_wins(GRID_TOP_AAA, [], _paytable(PaytableEntry(1, 3, 10))) == []

    def test_mismatched_line_raises_before_any_lookup(self):
        wide = Payline.from_bitmap_string("111100000000", rows=3, columns=4)
        with pytest.raises(ConfigurationError):
            resolve_wins(GRID_TOP_AAA, [TOP_ROW, wide], _paytable(PaytableEntry(1, 3, 10)))

    def test_count_symbols(self):
        counts = count_symbols([A, B, A, Symbol(1, "renamed")])
        assert counts[A] == 3
        assert counts[B] == 1


# ---------------------------------------------------------------------------
# Bet multiplier and aggregation
# ---------------------------------------------------------------------------

class TestBetMultiplier:

    def test_default_unit(self):
        assert BET_UNIT == 50

    @pytest.mark.parametrize("bet, expected", [
        (0, 0), (1, 0), (49, 0), (50, 1), (99, 1), (100, 2), (149, 2), (1000, 20),
    ])
    def test_floor_division(self, bet, expected):
        assert bet_multiplier(bet) == expected

    def test_custom_unit(self):
        assert bet_multiplier(30, unit=10) == 3

    def test_non_positive_unit_rejected(self):
        with pytest.raises(ConfigurationError):
            bet_multiplier(100, unit=0)

    def test_total_payout_sums_all_wins(self):
        wins = [
            Win(symbol=A, occurrences=3, pay=10, line_index=0),
            Win(symbol=B, occurrences=2, pay=4, line_index=1),
            Win(symbol=A, occurrences=3, pay=10, line_index=2),
        ]
        assert total_payout(wins, 150) == (3, 72)

    def test_step_function_of_whole_units(self):
        payouts = [_payout(GRID_TOP_AAA, bet) for bet in range(0, 301)]
        for bet, payout in enumerate(payouts):
            assert payout == 10 * (bet // 50)
        assert payouts == sorted(payouts)

    @pytest.mark.parametrize("bet", range(0, 50))
    def test_sub_unit_bets_pay_zero_even_with_wins(self, bet):
        grid = ((A, A, A), (A, A, A), (A, A, A))
        assert _payout(grid, bet, lines=(TOP_ROW, MIDDLE_ROW, DIAGONAL)) == 0

    def test_no_wins_pays_zero_at_any_bet(self):
        grid = ((A, B, C), (B, C, A), (C, A, B))
        for bet in (0, 50, 500, 10_000):
            assert _payout(grid, bet, lines=(TOP_ROW, MIDDLE_ROW, DIAGONAL)) == 0

    def test_pure_function(self):
        assert _payout(GRID_TOP_AAA, 250) == _payout(GRID_TOP_AAA, 250) == 50


# ---------------------------------------------------------------------------
# Boundary validation
# ---------------------------------------------------------------------------

class TestValidation:

    @pytest.mark.parametrize("bet", [-1, 10.0, "100", None, True, [100]])
    def test_invalid_bet(self, bet):
        with pytest.raises(PayoutValidationError):
            _payout(GRID_TOP_AAA, bet)

    @pytest.mark.parametrize("grid", [
        None,
        "AAA",
        (A, A, A),                                   # flat, not a matrix
        ((A, A, A), (B, B, B)),                      # too few rows
        ((A, A, A), (B, B), (C, C, C)),              # ragged
        ((A, A, A), (B, B, B), (C, C, C, C)),        # row too long
        ((A, A, A), (B, "B", B), (C, C, C)),         # non-symbol cell
    ])
    def test_invalid_grid(self, grid):
        with pytest.raises(PayoutValidationError):
            _payout(grid, 100)

    def test_grid_lists_are_accepted(self):
        grid = [[A, A, A], [B, C, B], [C, B, C]]
        assert validate_grid(grid, 3, 3) == GRID_TOP_AAA
        assert _payout(grid, 100) == 20

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            _payout(GRID_TOP_AAA, -5)

    def test_validate_request(self):
        request = validate_request(150, 2)
        assert request.bet == 150
        assert request.n_lines == 2

    def test_line_count(self):
        assert validate_line_count(None) is None
        assert validate_line_count(3) == 3
        with pytest.raises(PayoutRangeError):
            validate_line_count(0)
        with pytest.raises(PayoutValidationError):
            validate_line_count("1")

    def test_range_error_is_validation_error(self):
        with pytest.raises(PayoutValidationError):
            validate_request(100, -1)
