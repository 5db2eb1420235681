"""
Simulation script for Block Sudoku.

Plays games with a random agent and reports score statistics.
"""
import argparse
import sys
from pathlib import Path
from typing import Any, Dict, Optional
import numpy as np
from tqdm import tqdm

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from blockdoku.config import GameConfig
from blockdoku.engine import play_random_game
from utils.logger import Logger, MetricsTracker


def simulate(
    num_games: int = 100,
    seed: int = 42,
    config: Optional[GameConfig] = None,
    logger: Optional[Logger] = None,
    max_moves: int = 10000,
) -> Dict[str, Any]:
    """
    Play random games.

    Args:
        num_games: Number of games to play
        seed: Base random seed; game i uses seed + i
        config: Game configuration
        logger: Optional event logger shared by all games
        max_moves: Placement cap per game

    Returns:
        Dictionary of simulation statistics
    """
    tracker = MetricsTracker(window_size=num_games)
    tiers: Dict[str, int] = {}

    for i in tqdm(range(num_games), desc="Simulating"):
        stats = play_random_game(seed=seed + i, config=config, logger=logger, max_moves=max_moves)
        tracker.add_all(stats)
        tiers[stats['tier']] = tiers.get(stats['tier'], 0) + 1

    scores = tracker.metrics['score']
    return {
        'num_games': num_games,
        'mean_score': float(np.mean(scores)),
        'std_score': float(np.std(scores)),
        'min_score': float(np.min(scores)),
        'max_score': float(np.max(scores)),
        'median_score': float(np.median(scores)),
        'mean_moves': tracker.get_summary('moves_made')['mean'],
        'mean_clearing_moves': tracker.get_summary('clearing_moves')['mean'],
        'max_streak': tracker.get_summary('max_streak')['max'],
        'final_tiers': tiers,
    }


def print_results(results: Dict[str, Any]) -> None:
    """Print simulation results."""
    print("\n" + "=" * 60)
    print("RANDOM AGENT STATISTICS")
    print("=" * 60)
    print(f"Games: {results['num_games']}")
    print(f"Mean Score: {results['mean_score']:.1f} ± {results['std_score']:.1f}")
    print(f"Median Score: {results['median_score']:.1f}")
    print(f"Min/Max Score: {results['min_score']:.0f} / {results['max_score']:.0f}")
    print(f"Mean Moves: {results['mean_moves']:.1f}")
    print(f"Mean Clearing Moves: {results['mean_clearing_moves']:.1f}")
    print(f"Best Streak: {results['max_streak']:.0f}")
    print(f"Final Tiers: {results['final_tiers']}")
    print("=" * 60)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Simulate random Block Sudoku games")
    parser.add_argument(
        "--games",
        type=int,
        default=100,
        help="Number of games to play"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Base random seed"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a YAML game configuration"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="Directory for the JSONL event log"
    )
    parser.add_argument(
        "--max-moves",
        type=int,
        default=10000,
        help="Placement cap per game"
    )

    args = parser.parse_args()

    config = GameConfig.from_yaml(args.config) if args.config else None
    logger = Logger(args.log_dir, name="simulate") if args.log_dir else None

    results = simulate(
        num_games=args.games,
        seed=args.seed,
        config=config,
        logger=logger,
        max_moves=args.max_moves,
    )
    print_results(results)

    if logger is not None:
        path = logger.save_summary(results)
        print(f"Summary saved to {path}")


if __name__ == "__main__":
    main()
