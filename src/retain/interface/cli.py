"""retain CLI: inspect and advance deck files from the command line."""

import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Annotated, NoReturn

import typer

from retain.application.config import resolve_config
from retain.application.due_selector import build_study_queue, compute_stats, select_due
from retain.application.factory import get_deck_scheduler
from retain.application.scheduling import EnhancedScheduler
from retain.application.utils.common import ensure_aware, utcnow
from retain.domain.errors import SchedulingError
from retain.domain.models import Algorithm, Card, Deck, Quality
from retain.infrastructure.serialization import DeckFormatError, dump_deck, load_deck

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="retain: spaced-repetition scheduling for flashcard decks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage retain configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg="red", err=True)
    raise typer.Exit(1)


def _parse_now(value: str | None) -> datetime:
    if value is None:
        return utcnow()
    try:
        # fromisoformat only accepts a trailing Z from 3.11 on
        return ensure_aware(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        raise typer.BadParameter(f"Not an ISO timestamp: {value}") from None


def _parse_grade(raw: str, algorithm: Algorithm) -> object:
    """
    Grade names map to the four-point scale; numbers are passed through
    for the scheduler to validate against its own scale.
    """
    name = raw.strip().upper()
    if name in Quality.__members__:
        if algorithm is Algorithm.SUPER_MEMO_2_FIVE_POINT:
            _fail(f"{algorithm.value} decks take numeric grades 0-5, got {raw!r}")
        return Quality[name]
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        _fail(f"Unrecognized grade {raw!r}")


def _load(path: Path) -> tuple[Deck, list[Card]]:
    if not path.exists():
        _fail(f"Deck file not found: {path}")
    try:
        return load_deck(path, defaults=resolve_config().deck(name=path.stem))
    except (DeckFormatError, SchedulingError) as e:
        _fail(str(e))


def _find(cards: list[Card], card_id: str) -> int:
    for i, card in enumerate(cards):
        if card.id == card_id:
            return i
    _fail(f"No card with id {card_id!r}")


def _when(moment: datetime | None) -> str:
    return moment.isoformat(timespec="minutes") if moment else "new"


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Show scheduler debug logging."),
    ] = 0,
):
    """Global settings for retain."""
    if verbose:
        logging.getLogger("retain").setLevel(logging.DEBUG)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def due(
    deck_path: Annotated[Path, typer.Argument(help="Path to a JSON deck file.")],
    now: Annotated[str | None, typer.Option(help="Reference time (ISO 8601).")] = None,
    limit: Annotated[
        bool, typer.Option("--limit/--no-limit", help="Apply the deck's daily limits.")
    ] = True,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List the cards due for review, in study order."""
    deck, cards = _load(deck_path)
    moment = _parse_now(now)

    if limit:
        queue = build_study_queue(cards, moment, deck.settings)
        ordered = queue.ordered
        deferred = queue.deferred_new + queue.deferred_reviews
    else:
        ordered = select_due(cards, moment)
        deferred = 0

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "due": [c.id for c in ordered],
                    "deferred": deferred,
                },
                indent=2,
            )
        )
        return

    if not ordered:
        typer.secho("No cards due.", fg="green")
        return

    for card in ordered:
        typer.echo(f"{card.id}  {_when(card.next_review):<22}  {card.front}")
    typer.echo(f"\n{len(ordered)} due")
    if deferred:
        typer.secho(f"{deferred} held back by daily limits", fg="yellow")


@app.command()
def stats(
    deck_path: Annotated[Path, typer.Argument(help="Path to a JSON deck file.")],
    now: Annotated[str | None, typer.Option(help="Reference time (ISO 8601).")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show aggregate study statistics for a deck."""
    deck, cards = _load(deck_path)
    snapshot = compute_stats(cards, _parse_now(now))
    minutes = EnhancedScheduler(deck.settings).recommended_session_minutes(cards)

    data = asdict(snapshot)
    data["recommended_session_minutes"] = minutes

    if json_output:
        typer.echo(json.dumps(data, indent=2))
        return

    typer.echo(f"Deck: {deck.name} ({deck.algorithm.value})")
    typer.echo(f"Cards: {snapshot.total_cards}  Due: {snapshot.due_count}")
    typer.echo(
        f"Mean ease: {snapshot.mean_ease:.2f}  Mean interval: {snapshot.mean_interval:.1f}d"
        f"  Mean difficulty: {snapshot.mean_difficulty:.2f}"
    )
    typer.echo(f"Completion: {snapshot.completion_rate:.1f}%")
    typer.echo(f"Recommended session: {minutes} min")


@app.command()
def review(
    deck_path: Annotated[Path, typer.Argument(help="Path to a JSON deck file.")],
    card_id: Annotated[str, typer.Argument(help="Card to review.")],
    grade: Annotated[
        str,
        typer.Argument(help="again/hard/good/easy or a number on the deck's scale."),
    ],
    adaptive: Annotated[
        bool | None,
        typer.Option(
            "--adaptive/--no-adaptive",
            help="Use the fatigue-aware scheduler for SM-2 decks. Defaults to config.",
        ),
    ] = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Show the result without saving.")
    ] = False,
):
    """Apply one review to a card and save the deck."""
    deck, cards = _load(deck_path)
    index = _find(cards, card_id)
    quality = _parse_grade(grade, deck.algorithm)

    config = resolve_config({"adaptive": adaptive})
    scheduler = get_deck_scheduler(deck, adaptive=config.adaptive)

    try:
        updated = scheduler.calculate_next_review(cards[index], quality)
    except SchedulingError as e:
        _fail(str(e))

    typer.echo(
        f"{updated.id}: interval {cards[index].interval} -> {updated.interval}, "
        f"ease {updated.ease:.2f}, next review {_when(updated.next_review)} ({scheduler.name})"
    )

    if dry_run:
        typer.secho("[DRY RUN] Deck not saved.", fg="yellow")
        return

    cards = cards[:index] + [updated] + cards[index + 1 :]
    dump_deck(deck_path, deck, cards)


@app.command()
def forecast(
    deck_path: Annotated[Path, typer.Argument(help="Path to a JSON deck file.")],
    card_id: Annotated[str, typer.Argument(help="Card to forecast.")],
    count: Annotated[int, typer.Option("--count", "-n", min=1, help="Reviews to project.")] = 5,
    now: Annotated[str | None, typer.Option(help="Reference time (ISO 8601).")] = None,
):
    """Project future review dates assuming the card's ease holds."""
    deck, cards = _load(deck_path)
    card = cards[_find(cards, card_id)]
    schedule = EnhancedScheduler(deck.settings).projected_schedule(card, count, _parse_now(now))
    for i, moment in enumerate(schedule, start=1):
        typer.echo(f"{i}. {moment.date().isoformat()}")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    typer.echo(json.dumps(config.model_dump(mode="json"), indent=2))


@config_app.command("path")
def config_path():
    """Print the config file locations, in lookup order."""
    from retain.application.config import config_file_candidates

    for candidate in config_file_candidates():
        marker = "*" if candidate.exists() else " "
        typer.echo(f"{marker} {candidate}")
