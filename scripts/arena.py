"""
Arena script for running round-robin matches between pentomino agents.
"""

import argparse
import json
import logging
import os
import sys
import time
from datetime import datetime
from typing import Any, Dict, Optional

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from agents.heuristic_agent import AIDifficulty, HeuristicAgent
from agents.random_agent import RandomAgent
from engine.board import Player
from engine.game import PentominoGame
from engine.move_generator import LegalMoveGenerator
from schemas.puzzle import Puzzle
from utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)


class ArenaMatch:
    """
    A single game between two agents; agent1 moves first.
    """

    def __init__(self, agent1_name: str, agent2_name: str, agent1, agent2,
                 puzzle: Optional[Puzzle] = None,
                 move_generator: Optional[LegalMoveGenerator] = None):
        self.agent1_name = agent1_name
        self.agent2_name = agent2_name
        self.agent1 = agent1
        self.agent2 = agent2
        self.puzzle = puzzle
        self.move_generator = move_generator or LegalMoveGenerator()

        # Match results
        self.winner = None
        self.moves_made = 0
        self.game_duration = 0.0
        self.error = None

    def play_match(self) -> Dict[str, Any]:
        """
        Play the game to completion.

        Returns:
            Match results dictionary
        """
        start_time = time.time()
        if self.puzzle is not None:
            game = PentominoGame.from_puzzle(self.puzzle, move_generator=self.move_generator)
        else:
            game = PentominoGame(move_generator=self.move_generator)
        names = {Player.ONE: self.agent1_name, Player.TWO: self.agent2_name}
        agents = {Player.ONE: self.agent1, Player.TWO: self.agent2}

        while not game.game_over:
            player = game.current_player
            move = agents[player].select_action(game.board.copy(), game.used_pieces, player)
            if move is None or not game.apply_move(move):
                # A side to move always has a legal move until the game is over
                self.error = f"{names[player]} produced no playable move"
                logger.error(self.error)
                break
            self.moves_made += 1
            logger.debug(f"Move {self.moves_made}: {names[player]} placed {move}")

        self.game_duration = time.time() - start_time
        if game.winner is not None:
            self.winner = names[game.winner]
        logger.info(f"Match {self.agent1_name} vs {self.agent2_name}: winner={self.winner}, "
                    f"moves={self.moves_made}, duration={self.game_duration:.2f}s")
        return self.get_results()

    def get_results(self) -> Dict[str, Any]:
        """Get match results."""
        return {
            "agent1": self.agent1_name,
            "agent2": self.agent2_name,
            "winner": self.winner,
            "moves_made": self.moves_made,
            "game_duration": self.game_duration,
            "error": self.error
        }


class Arena:
    """
    Arena for running round-robin tournaments between agents.
    """

    def __init__(self, agents: Dict[str, Any], output_dir: Optional[str] = None,
                 puzzle: Optional[Puzzle] = None):
        self.agents = agents
        self.output_dir = output_dir
        self.puzzle = puzzle
        self.move_generator = LegalMoveGenerator()
        self.results = []

    def run_round_robin(self, rounds: int = 1) -> Dict[str, Any]:
        """
        Every ordered pair of distinct agents plays ``rounds`` games,
        so each pairing is played with both seatings.
        """
        agent_names = list(self.agents.keys())
        start_time = time.time()

        for round_num in range(rounds):
            logger.info(f"--- Round {round_num + 1}/{rounds} ---")
            for agent1_name in agent_names:
                for agent2_name in agent_names:
                    if agent1_name == agent2_name:
                        continue
                    match = ArenaMatch(agent1_name, agent2_name,
                                       self.agents[agent1_name], self.agents[agent2_name],
                                       puzzle=self.puzzle, move_generator=self.move_generator)
                    self.results.append(match.play_match())

        total_time = time.time() - start_time
        stats = self._calculate_statistics()
        if self.output_dir:
            self._save_results(stats, total_time)
        self._print_summary(stats, total_time)
        return stats

    def _calculate_statistics(self) -> Dict[str, Any]:
        """Calculate tournament statistics."""
        stats = {
            "agents": list(self.agents.keys()),
            "total_matches": len(self.results),
            "agent_stats": {name: {"wins": 0, "losses": 0, "first_player_wins": 0, "win_rate": 0.0}
                            for name in self.agents},
            "match_results": self.results
        }

        for result in self.results:
            if result["error"] or result["winner"] is None:
                continue
            winner = result["winner"]
            loser = result["agent2"] if winner == result["agent1"] else result["agent1"]
            stats["agent_stats"][winner]["wins"] += 1
            stats["agent_stats"][loser]["losses"] += 1
            if winner == result["agent1"]:
                stats["agent_stats"][winner]["first_player_wins"] += 1

        for agent_stat in stats["agent_stats"].values():
            total_games = agent_stat["wins"] + agent_stat["losses"]
            if total_games > 0:
                agent_stat["win_rate"] = agent_stat["wins"] / total_games
        return stats

    def _save_results(self, stats: Dict[str, Any], total_time: float):
        """Save results to a JSON file."""
        os.makedirs(self.output_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        results_file = os.path.join(self.output_dir, f"arena_results_{timestamp}.json")
        with open(results_file, 'w') as f:
            json.dump({"timestamp": timestamp, "total_time": total_time, "stats": stats}, f, indent=2)
        logger.info(f"Results saved to {results_file}")

    def _print_summary(self, stats: Dict[str, Any], total_time: float):
        """Print tournament summary."""
        print("\n" + "=" * 50)
        print("TOURNAMENT SUMMARY")
        print("=" * 50)
        print(f"Total time: {total_time:.2f} seconds")
        print(f"Total matches: {stats['total_matches']}")
        print()
        print("Agent Rankings:")
        print("-" * 20)
        sorted_agents = sorted(stats["agent_stats"].items(), key=lambda x: x[1]["win_rate"], reverse=True)
        for i, (agent_name, agent_stat) in enumerate(sorted_agents, 1):
            print(f"{i}. {agent_name}: win rate {agent_stat['win_rate']:.3f} "
                  f"({agent_stat['wins']}W/{agent_stat['losses']}L, "
                  f"{agent_stat['first_player_wins']} as first player)")


def build_agents(names, seed: Optional[int] = None) -> Dict[str, Any]:
    """Map agent names ("random" or an AI difficulty) to instances."""
    move_generator = LegalMoveGenerator()
    agents = {}
    for offset, name in enumerate(names):
        agent_seed = None if seed is None else seed + offset
        if name == "random":
            agents[name] = RandomAgent(seed=agent_seed, move_generator=move_generator)
        else:
            agents[name] = HeuristicAgent(difficulty=AIDifficulty(name), seed=agent_seed,
                                          move_generator=move_generator)
    return agents


def main():
    choices = ["random"] + [d.value for d in AIDifficulty]
    parser = argparse.ArgumentParser(description="Run a round-robin tournament between agents")
    parser.add_argument("--agents", nargs="+", default=choices, choices=choices,
                        help="Agents to include")
    parser.add_argument("--rounds", type=int, default=2, help="Rounds per pairing")
    parser.add_argument("--seed", type=int, default=None, help="Base random seed")
    parser.add_argument("--builtin-puzzle", default=None,
                        help="Start every match from a built-in puzzle (e.g. endgame_position)")
    parser.add_argument("--output-dir", default=None, help="Directory for JSON results")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    setup_logging(args.log_level)

    puzzle = None
    if args.builtin_puzzle:
        from engine.puzzle_generator import BUILTIN_PUZZLES
        puzzle = BUILTIN_PUZZLES[args.builtin_puzzle]

    if len(set(args.agents)) < 2:
        parser.error("At least two distinct agents are required")
    arena = Arena(build_agents(dict.fromkeys(args.agents), seed=args.seed),
                  output_dir=args.output_dir, puzzle=puzzle)
    arena.run_round_robin(rounds=args.rounds)


if __name__ == "__main__":
    main()
