"""
Tests that bitmask legality matches grid-based legality.
"""

import unittest

from engine.bitboard import coords_to_mask
from engine.board import Board
from engine.move_generator import DISTINCT_PLACEMENT_TABLE, PLACEMENT_TABLE, LegalMoveGenerator, Move
from engine.pieces import ALL_ORIENTATIONS
from tests.utils_game_states import generate_random_valid_state


class TestLegalityBitboardEquivalence(unittest.TestCase):

    def setUp(self):
        self.generator = LegalMoveGenerator()

    def test_mask_matches_positions(self):
        for entries in PLACEMENT_TABLE.values():
            for move, mask in entries:
                self.assertEqual(mask, coords_to_mask(move.get_positions()))

    def test_occupancy_mask_matches_grid(self):
        for seed in range(5):
            board, _ = generate_random_valid_state(6, seed=seed)
            occupied = [(r, c) for r in range(Board.SIZE) for c in range(Board.SIZE)
                        if not board.is_empty(r, c)]
            self.assertEqual(board.occupied_bits, coords_to_mask(occupied))

    def test_mask_legality_equals_grid_legality(self):
        for seed in range(5):
            board, _ = generate_random_valid_state(4, seed=seed)
            for entries in PLACEMENT_TABLE.values():
                for move, mask in entries:
                    grid_legal = board.is_legal(move.piece_id, move.orientation,
                                                move.anchor_row, move.anchor_col)
                    self.assertEqual(grid_legal, not (mask & board.occupied_bits), str(move))

    def test_generator_equals_exhaustive_scan(self):
        for seed in range(3):
            board, used = generate_random_valid_state(3, seed=seed)
            expected = set()
            for piece_id in PLACEMENT_TABLE:
                if piece_id in used:
                    continue
                for orientation in ALL_ORIENTATIONS:
                    for row in range(Board.SIZE):
                        for col in range(Board.SIZE):
                            if board.is_legal(piece_id, orientation, row, col):
                                expected.add(Move(piece_id, orientation, row, col))
            self.assertEqual(set(self.generator.get_legal_moves(board, used)), expected)

    def test_distinct_table_drops_exactly_duplicate_masks(self):
        for piece_id, entries in PLACEMENT_TABLE.items():
            all_masks = {mask for _, mask in entries}
            distinct = [mask for _, mask in DISTINCT_PLACEMENT_TABLE[piece_id]]
            self.assertEqual(len(distinct), len(set(distinct)), piece_id)
            self.assertEqual(set(distinct), all_masks, piece_id)

    def test_dedupe_keeps_first_occurrence_in_scan_order(self):
        for seed in range(3):
            board, used = generate_random_valid_state(4, seed=seed)
            seen = set()
            expected = []
            for move in self.generator.get_legal_moves(board, used):
                key = (move.piece_id, coords_to_mask(move.get_positions()))
                if key not in seen:
                    seen.add(key)
                    expected.append(move)
            self.assertEqual(self.generator.get_legal_moves(board, used, dedupe=True), expected)

    def test_off_board_coordinates_rejected(self):
        with self.assertRaises(ValueError):
            coords_to_mask([(8, 0)])


if __name__ == '__main__':
    unittest.main()
