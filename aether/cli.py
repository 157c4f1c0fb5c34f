"""
Aether CLI - Command-line interface for the engine.

Usage:
    aether catalog                                   List the tarot catalog
    aether simulate --hours N [--seed S] [--place SLOT:CARD_ID ...]
                                                     Run hours without timers
    aether decode-save CODE                          Print a save record
    aether serve [--host H] [--port P]               Run the HTTP API
"""

import argparse
import logging
import sys

from . import config


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Aether Cycles - Tarot circle simulation",
        prog="aether",
    )
    parser.add_argument("--log-level", default=config.AETHER_LOG_LEVEL, help="Logging level")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Catalog command
    subparsers.add_parser("catalog", help="List the tarot catalog")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Run hours without timers")
    simulate_parser.add_argument("--hours", type=int, default=24, help="Hours to process")
    simulate_parser.add_argument("--seed", type=int, default=config.AETHER_SEED, help="RNG seed")
    simulate_parser.add_argument(
        "--place",
        action="append",
        default=[],
        metavar="SLOT:CARD_ID",
        help="Put a catalog card into a slot before starting (repeatable)",
    )

    # Decode command
    decode_parser = subparsers.add_parser("decode-save", help="Print the record inside a save code")
    decode_parser.add_argument("code", help="Save code")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "catalog":
        return cmd_catalog(args)
    elif args.command == "simulate":
        return cmd_simulate(args)
    elif args.command == "decode-save":
        return cmd_decode_save(args)
    elif args.command == "serve":
        return cmd_serve(args)
    else:
        parser.print_help()
        return 1


def cmd_catalog(args):
    """List every card with its default marks."""
    from .catalog import all_cards

    for card in all_cards():
        marks = ", ".join(m.name for m in card.marks)
        effect = card.effect_id.value if card.effect_id else "-"
        print(f"{card.id:>3}  {card.name:<20} {effect:<20} [{marks}]")
    return 0


def parse_placement(text: str) -> tuple[int, int]:
    """Parse "SLOT:CARD_ID" into integers."""
    slot, sep, card_id = text.partition(":")
    if not sep:
        raise ValueError(f"Expected SLOT:CARD_ID, got {text!r}")
    return int(slot), int(card_id)


def cmd_simulate(args):
    """Place cards, then process hours back to back and print a daily summary."""
    from .catalog import get_card
    from .engine_core.state import CardInstance, World
    from .session import GameLoop

    loop = GameLoop(World.create(seed=args.seed))
    loop.start()

    for text in args.place:
        try:
            slot_index, card_id = parse_placement(text)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2
        card = get_card(card_id)
        if card is None:
            print(f"Error: unknown card id {card_id}", file=sys.stderr)
            return 2
        loop.world.inventory.append(CardInstance.create(card))
        result = loop.place_card(slot_index, len(loop.world.inventory) - 1)
        if not result.success:
            print(f"Error: {result.error}", file=sys.stderr)
            return 2

    start_currency = loop.world.currency
    for result in loop.advance(args.hours):
        if result.hour % 24 == 0 or result.changes:
            print(
                f"hour {result.hour:>5}  sync {result.global_sync:>3}%  "
                f"+{result.resources:.2f}  currency {loop.world.currency:.2f}"
            )
            for change in result.changes:
                print(f"           {change}")

    world = loop.world
    print(f"\nHours: {world.global_hours}")
    print(f"Currency: {start_currency:.2f} -> {world.currency:.2f}")
    print(f"Synergies: {', '.join(a.synergy.name for a in loop.active_synergies) or 'none'}")
    print(f"Save code: {loop.export_save()}")
    return 0


def cmd_decode_save(args):
    """Decode a save code and print its record as JSON."""
    from .persistence import SaveCodeError, decode_save

    try:
        state = decode_save(args.code)
    except SaveCodeError as e:
        print(f"Invalid save code: {e}", file=sys.stderr)
        return 2
    print(state.model_dump_json(by_alias=True, exclude_none=True, indent=2))
    return 0


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn
    from .api import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
