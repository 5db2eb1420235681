"""
Interactive play script for Block Sudoku.

Play in the terminal, optionally continuing from (and saving to) a JSON
save file.
"""
import argparse
import json
import os
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from blockdoku.board import snap_position
from blockdoku.config import GameConfig
from blockdoku.engine import GameSession
from blockdoku.persistence import restore_or_new, to_save_dict
from blockdoku.state import PowerUpKind
from utils.logger import Logger


HELP = """Controls:
  slot row col   drag tray shape <slot> to (row, col) and drop it
  r<slot>        rotate tray shape (e.g. 'r1')
  h row col      use the hammer on (row, col)
  f              use a refresh
  u              undo
  p              pause / resume
  s              sound on / off
  n              new game
  q              quit"""


def clear_screen():
    """Clear the terminal screen."""
    os.system('cls' if os.name == 'nt' else 'clear')


def load_save(path: Optional[str]) -> Optional[Dict[str, Any]]:
    """Read a save file, returning None when it is missing or unreadable."""
    if path is None or not os.path.exists(path):
        return None
    try:
        with open(path, 'r') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Could not read save file {path}: {e}")
        return None


def write_save(session: GameSession, path: Optional[str]) -> None:
    if path is None:
        return
    with open(path, 'w') as f:
        json.dump(to_save_dict(session.state), f)


def arm(session: GameSession, kind: PowerUpKind) -> None:
    """Select a power-up unless it is already selected."""
    if session.state.active_power_up is not kind:
        session.select_power_up(kind)


def try_place(session: GameSession, slot: int, row: int, col: int) -> bool:
    """Drop a tray shape, snapping to a neighbouring cell if (row, col) does not fit."""
    tray = session.state.tray
    if not 0 <= slot < len(tray):
        return False
    target = snap_position(tray[slot], row, col, session.state.board)
    if target is None:
        return False
    return session.place(slot, *target)


def play_manual(
    seed: Optional[int] = None,
    config: Optional[GameConfig] = None,
    save_path: Optional[str] = None,
    logger: Optional[Logger] = None,
) -> None:
    """
    Play Block Sudoku manually in the terminal.

    Args:
        seed: Random seed
        config: Game configuration
        save_path: JSON file the game is restored from and saved to
        logger: Optional event logger
    """
    session = GameSession(config=config, seed=seed, logger=logger)
    saved = load_save(save_path)
    if saved is not None:
        session.state = restore_or_new(saved, session.rng, session.config)

    message = ""
    while True:
        clear_screen()
        print("=" * 60)
        print("BLOCK SUDOKU")
        print("=" * 60)
        print(session)

        view = session.view()
        if view.combo_label:
            print(f"\n*** {view.combo_label} ***")
        if view.notice:
            print(f"\n{view.notice}")
        if message:
            print(f"\n{message}")
            message = ""

        if view.game_over:
            print("\n*** GAME OVER! ***")
            print(f"Final Score: {view.score:,} | Best: {view.high_score:,}")
        elif view.paused:
            print("\n-- PAUSED (p to resume) --")

        print("\n" + HELP)

        try:
            user_input = input("\n> ").strip().lower()
        except EOFError:
            user_input = 'q'

        parts = user_input.split()
        if not parts:
            continue
        command = parts[0]

        try:
            if command == 'q':
                write_save(session, save_path)
                print("Thanks for playing!")
                break
            elif command == 'u':
                session.undo()
            elif command == 'p':
                session.toggle_pause()
            elif command == 's':
                session.toggle_sound()
            elif command == 'n':
                session.reset()
            elif command == 'f':
                arm(session, PowerUpKind.REFRESH)
                session.use_refresh()
            elif command == 'h' and len(parts) == 3:
                arm(session, PowerUpKind.HAMMER)
                session.use_hammer(int(parts[1]), int(parts[2]))
            elif command.startswith('r') and len(parts) == 1:
                session.rotate_in_tray(int(command[1:]))
            elif len(parts) == 3:
                slot, row, col = int(parts[0]), int(parts[1]), int(parts[2])
                if not try_place(session, slot, row, col):
                    message = "Invalid move! Try again."
            else:
                message = "Unknown command."
        except ValueError:
            message = "Invalid input."

        write_save(session, save_path)
        time.sleep(0.05)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Play Block Sudoku")
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a YAML game configuration"
    )
    parser.add_argument(
        "--save",
        type=str,
        default=None,
        help="JSON save file to restore from and write to"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="Directory for the JSONL event log"
    )

    args = parser.parse_args()

    config = GameConfig.from_yaml(args.config) if args.config else None
    logger = Logger(args.log_dir, name="play") if args.log_dir else None

    play_manual(seed=args.seed, config=config, save_path=args.save, logger=logger)

    if logger is not None:
        logger.save_summary()


if __name__ == "__main__":
    main()
