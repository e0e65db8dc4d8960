"""
Pairs CLI - Command-line interface for the engine.

Usage:
    pairs serve [--host H] [--port P]    Run the HTTP/WebSocket server
    pairs demo [--players N] [--seed S]  Play a full game in the terminal
"""

import argparse
import logging
import random
import sys

from .config import get_config

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point."""
    config = get_config()
    parser = argparse.ArgumentParser(
        description="Pairs - Multiplayer Memory-Matching Engine",
        prog="pairs",
    )
    parser.add_argument("--log-level", default=config.log_level, help="Logging level")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the game server")
    serve_parser.add_argument("--host", default=config.host, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=config.port, help="Bind port")

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Play a game with simulated players")
    demo_parser.add_argument("--players", type=int, default=2, help="Number of players (1-4)")
    demo_parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible games")

    args = parser.parse_args(argv)

    from .api.app import configure_logging
    configure_logging(args.log_level.upper())

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "demo":
        sys.exit(cmd_demo(args))
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the server with uvicorn."""
    import uvicorn

    logger.info("Serving on %s:%d", args.host, args.port)
    uvicorn.run("pairs.api.app:create_app", factory=True, host=args.host, port=args.port)


def cmd_demo(args) -> int:
    """
    Play a whole game in the terminal.

    Simulated players only see sanitized states: they remember values they
    have seen face up and otherwise pick face-down cards at random.
    """
    from .api.schemas import ErrorResponse
    from .api.service import GameService
    from .session import ManualScheduler, SessionRegistry

    rng = random.Random(args.seed)
    scheduler = ManualScheduler()
    service = GameService(
        registry=SessionRegistry(rng=random.Random(args.seed)),
        scheduler=scheduler,
        reveal_delay_ms=get_config().reveal_delay_ms,
    )

    view = service.create_game(args.players)
    if isinstance(view, ErrorResponse):
        print(f"Error: {view.error}")
        return 1

    game_id = view.game_id
    seen: dict[str, str] = {}
    print(f"Game {game_id} with {args.players} player(s)")
    print(render_board(view))

    while view.status.value == "playing":
        first = _pick_card(view, seen, rng)
        response = service.flip_card(game_id, first)
        _remember(response.game, seen)

        second = _pick_card(response.game, seen, rng, partner_of=first)
        response = service.flip_card(game_id, second)
        view = response.game
        _remember(view, seen)

        player = view.players[view.active_player_index]
        print(f"\nPlayer {view.active_player_index + 1} ({player.color}): {response.message}")
        print(render_board(view))

        if response.unlock_after_ms:
            scheduler.advance(response.unlock_after_ms)
            view = service.get_game(game_id)

    print("\nFinal scores:")
    for i, player in enumerate(view.players):
        print(f"  Player {i + 1} ({player.color}): {player.score}")
    return 0


def render_board(view, columns: int = 4) -> str:
    """Render a sanitized view as a grid; face-down cards show as '?'."""
    cells = []
    for card in view.cards:
        if card.is_matched:
            cells.append(f"[{card.value}]")
        elif card.value is not None:
            cells.append(f" {card.value} ")
        else:
            cells.append(" ? ")
    rows = [" ".join(cells[i:i + columns]) for i in range(0, len(cells), columns)]
    return "\n".join(rows)


def _remember(view, seen: dict[str, str]) -> None:
    for card in view.cards:
        if card.value is not None:
            seen[card.id] = card.value


def _pick_card(view, seen: dict[str, str], rng: random.Random, partner_of: str | None = None) -> str:
    """Pick a face-down card, preferring a remembered match."""
    flipped_ids = {c.id for c in view.cards if c.value is not None and not c.is_matched}
    hidden = [c.id for c in view.cards if not c.is_matched and c.id not in flipped_ids]

    if partner_of is not None and partner_of in seen:
        for card_id in hidden:
            if seen.get(card_id) == seen[partner_of]:
                return card_id
    else:
        by_value: dict[str, list[str]] = {}
        for card_id in hidden:
            if card_id in seen:
                by_value.setdefault(seen[card_id], []).append(card_id)
        for ids in by_value.values():
            if len(ids) == 2:
                return ids[0]

    unknown = [card_id for card_id in hidden if card_id not in seen]
    return rng.choice(unknown or hidden)


if __name__ == "__main__":
    main()
