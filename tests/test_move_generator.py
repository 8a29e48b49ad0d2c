"""
Tests for legal move generation.
"""

import unittest

from engine.board import Board, Player
from engine.move_generator import LegalMoveGenerator, Move
from engine.pieces import PIECE_IDS, Orientation
from tests.utils_game_states import board_with_holes, used_except


class TestLegalMoveGenerator(unittest.TestCase):

    def setUp(self):
        self.generator = LegalMoveGenerator()
        self.empty = Board.create_empty()

    def test_empty_board_contains_base_placement(self):
        moves = self.generator.get_legal_moves(self.empty, [])
        self.assertIn(Move("I", Orientation(0, False), 0, 0), moves)

    def test_every_generated_move_is_legal(self):
        for move in self.generator.get_legal_moves(self.empty, []):
            self.assertTrue(self.empty.is_legal(move.piece_id, move.orientation,
                                                move.anchor_row, move.anchor_col))

    def test_i_placement_counts(self):
        used = used_except("I")
        # 8 orientations of a straight line, 32 in-bounds anchors each
        self.assertEqual(len(self.generator.get_legal_moves(self.empty, used)), 256)
        self.assertEqual(len(self.generator.get_legal_moves(self.empty, used, dedupe=True)), 64)
        self.assertEqual(self.generator.count_legal_moves(self.empty, used), 64)
        self.assertEqual(self.generator.count_legal_moves(self.empty, used, dedupe=False), 256)

    def test_used_pieces_excluded(self):
        moves = self.generator.get_legal_moves(self.empty, used_except("X"), dedupe=True)
        self.assertEqual({m.piece_id for m in moves}, {"X"})
        self.assertEqual(len(moves), 36)

    def test_all_pieces_used(self):
        self.assertEqual(self.generator.get_legal_moves(self.empty, PIECE_IDS), [])
        self.assertFalse(self.generator.has_legal_moves(self.empty, PIECE_IDS))

    def test_full_board_has_no_moves(self):
        full = board_with_holes([])
        self.assertEqual(self.generator.get_legal_moves(full, []), [])
        self.assertFalse(self.generator.has_legal_moves(full, []))
        self.assertEqual(self.generator.count_placeable_pieces(full, []), 0)

    def test_has_legal_moves_matches_enumeration(self):
        # A 5x1 vertical hole fits only I
        board = board_with_holes([(r, 3) for r in range(5)])
        self.assertTrue(self.generator.has_legal_moves(board, []))
        self.assertFalse(self.generator.has_legal_moves(board, ["I"]))
        self.assertEqual(self.generator.count_placeable_pieces(board, []), 1)

    def test_empty_board_all_pieces_placeable(self):
        self.assertEqual(self.generator.count_placeable_pieces(self.empty, []), 12)

    def test_find_move(self):
        move = self.generator.find_move(self.empty, [], "I", Orientation(), 0, 0)
        self.assertEqual(move, Move("I", Orientation(), 0, 0))
        self.assertIsNone(self.generator.find_move(self.empty, ["I"], "I", Orientation(), 0, 0))
        self.assertIsNone(self.generator.find_move(self.empty, [], "I", Orientation(), 6, 0))
        self.assertIsNone(self.generator.find_move(self.empty, [], "Q", Orientation(), 0, 0))

    def test_move_positions_and_apply(self):
        move = Move("I", Orientation(1, False), 2, 6)
        # Rotated I extends toward negative columns
        self.assertEqual(sorted(move.get_positions()), [(2, c) for c in range(2, 7)])
        board = move.apply(self.empty, Player.ONE)
        self.assertEqual(board.empty_count(), 59)


if __name__ == '__main__':
    unittest.main()
