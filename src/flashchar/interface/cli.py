"""flashchar CLI: study sittings, card import/export, settings and stats."""

import asyncio
import json
import logging
import sys
import time
from collections.abc import Awaitable
from dataclasses import replace
from pathlib import Path
from typing import Annotated, TypeVar

import typer

from flashchar.application.config import AppConfig, resolve_config
from flashchar.domain.errors import FlashcharError
from flashchar.domain.models import Card, CardField, DedupeImportMode, Settings, WrongBehavior

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="flashchar: spaced-repetition flashcards for Chinese characters.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

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
# Subgroups
# ---------------------------------------------------------------------------

settings_app = typer.Typer(help="View and change study settings.", no_args_is_help=True)
app.add_typer(settings_app, name="settings")

config_app = typer.Typer(help="Manage flashchar configuration.", no_args_is_help=True)
app.add_typer(config_app, name="config")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve(ctx: typer.Context) -> AppConfig:
    obj = ctx.obj or {}
    # A zero -v count means the flag was not given
    config = resolve_config(
        {"data_file": obj.get("data_file"), "verbose": obj.get("verbose") or None}
    )
    logging.getLogger().setLevel(config.log_level)
    return config


def _run(coro: Awaitable[T]) -> T:
    """Run a coroutine, turning domain errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except FlashcharError as e:
        logger.debug(f"Command failed: {e!r}", exc_info=True)
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1) from e


def _parse_fields(raw: str) -> tuple[CardField, ...]:
    try:
        return tuple(CardField(v.strip()) for v in raw.split(",") if v.strip())
    except ValueError as e:
        choices = ", ".join(f.value for f in CardField)
        raise typer.BadParameter(f"{e}. Choose from: {choices}") from e


def _side(card: Card, fields: tuple[CardField, ...]) -> str:
    return "  |  ".join(card.field_value(f) for f in fields if card.field_value(f))


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    data_file: Annotated[
        Path | None, typer.Option("--data-file", help="Deck file. Defaults to config.")
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for flashchar."""
    ctx.ensure_object(dict)
    ctx.obj["data_file"] = data_file
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def due(
    ctx: typer.Context,
    show: Annotated[bool, typer.Option("--list", help="List the due cards.")] = False,
):
    """Show how many cards are due now."""
    from flashchar.application.factory import get_repository, get_review_service

    config = _resolve(ctx)

    async def run() -> list[Card]:
        repo = get_repository(config)
        return await get_review_service(repo).due_cards()

    cards = _run(run())
    typer.echo(f"Due cards: {len(cards)}")
    if show:
        for card in cards:
            typer.echo(
                f"  {card.characters}  {card.pinyin or ''}  {card.meaning}  (status {card.status})"
            )


@app.command("cards")
def list_cards(
    ctx: typer.Context,
    search: Annotated[
        str | None,
        typer.Option("--search", "-s", help="Filter by characters, pinyin or meaning."),
    ] = None,
):
    """List every card with its status."""
    from flashchar.application.card_io import search_cards
    from flashchar.application.factory import get_repository

    config = _resolve(ctx)
    cards = search_cards(_run(get_repository(config).list_cards()), search)

    if not cards:
        typer.secho("No cards found.", fg="yellow")
        return

    for card in cards:
        typer.echo(f"{card.characters}\t{card.pinyin or ''}\t{card.meaning}\t{card.status}")
    typer.echo(f"{len(cards)} cards")


@app.command()
def seed(ctx: typer.Context):
    """Add the starter deck if the collection is empty."""
    from flashchar.application.demo_deck import seed_demo_cards_if_empty
    from flashchar.application.factory import get_repository

    config = _resolve(ctx)
    added = _run(seed_demo_cards_if_empty(get_repository(config)))
    if added:
        typer.secho(f"Added {added} demo cards.", fg="green")
    else:
        typer.secho("Deck already has cards; nothing seeded.", fg="yellow")


@app.command()
def study(ctx: typer.Context):
    """[bold green]Study[/bold green] every due card until each is answered correctly."""
    from flashchar.application.factory import get_repository, get_review_service
    from flashchar.application.session_queue import (
        current_card_id,
        is_finished,
        session_progress,
    )

    config = _resolve(ctx)

    async def run():
        repo = get_repository(config)
        service = get_review_service(repo)
        settings = await repo.load_settings()

        session = await service.start_session()
        total = len(session.queue)
        if not total:
            typer.secho("No cards due.", fg="yellow")
            return

        while not is_finished(session):
            card = await repo.get_card(current_card_id(session))
            if card is None:
                typer.secho(f"Card {current_card_id(session)} vanished from the deck.", fg="red")
                raise typer.Exit(1)

            progress = session_progress(session, total)
            typer.echo(
                f"\nCard {min(progress.reviewed + 1, total)} of {total}"
                f"  ({progress.remaining} remaining)"
            )
            typer.secho(_side(card, settings.front_fields), bold=True)

            started = time.monotonic()
            typer.prompt("Press Enter to flip", default="", show_default=False)
            answer_ms = round((time.monotonic() - started) * 1000)

            back = (CardField.CHARACTERS,) + tuple(
                f for f in settings.back_fields if f != CardField.CHARACTERS
            )
            typer.echo(_side(card, back))

            correct = typer.confirm("Correct?", default=True)
            outcome = await service.grade(session, correct, answer_ms)
            session = outcome.session

            if not outcome.correct:
                typer.secho("Wrong. This card will come back later.", fg="red")
            elif outcome.fast_eligible:
                typer.secho(f"Fast! Status {outcome.card.status}.", fg="green")
            else:
                typer.secho(f"Correct. Status {outcome.card.status}.", fg="green")

        typer.secho(f"\nSitting complete: {total} cards.", fg="green")

    _run(run())


@app.command("import")
def import_cards(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="CSV or JSON file to import.", exists=True)],
):
    """Import cards from CSV (characters,pinyin,meaning) or a JSON array."""
    from flashchar.application.card_io import import_drafts, parse_import
    from flashchar.application.factory import get_repository

    config = _resolve(ctx)

    async def run():
        repo = get_repository(config)
        settings = await repo.load_settings()
        drafts = parse_import(path.read_text(encoding="utf-8"))
        return await import_drafts(drafts, repo, settings.dedupe_import_mode)

    result = _run(run())
    typer.secho(f"Added {result.added}, merged {result.merged}.", fg="green")


@app.command("export")
def export_cards(
    ctx: typer.Context,
    out: Annotated[Path, typer.Argument(help="Output file.")],
    due_only: Annotated[bool, typer.Option("--due-only", help="Only export due cards.")] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Export JSON instead of CSV.")] = False,
):
    """Export cards to CSV or JSON."""
    from flashchar.application.card_io import to_csv, to_json
    from flashchar.application.factory import get_repository, get_review_service

    config = _resolve(ctx)

    async def run() -> list[Card]:
        repo = get_repository(config)
        if due_only:
            return await get_review_service(repo).due_cards()
        return await repo.list_cards()

    cards = _run(run())
    out.write_text(to_json(cards) if as_json else to_csv(cards), encoding="utf-8")
    typer.echo(f"Exported {len(cards)} cards to {out}")


@app.command()
def stats(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show review statistics."""
    from dataclasses import asdict

    from flashchar.application.factory import get_repository, get_review_service
    from flashchar.application.stats import StatsCalculator

    config = _resolve(ctx)

    async def run():
        repo = get_repository(config)
        due_cards = await get_review_service(repo).due_cards()
        return StatsCalculator().compute(
            await repo.list_reviews(), await repo.list_cards(), due_count=len(due_cards)
        )

    result = _run(run())
    if json_output:
        typer.echo(json.dumps(asdict(result), indent=2))
        return

    typer.echo(f"Cards: {result.total_cards}  Due: {result.due_cards}")
    typer.echo(f"Reviews: {result.total_reviews}  Correct: {result.correct}")
    typer.echo(f"Accuracy: {result.accuracy_percent}%  Best streak: {result.best_streak}")


@app.command()
def schedule(
    ctx: typer.Context,
    status: Annotated[int, typer.Argument(help="Mastery status to preview.", min=0)],
):
    """Preview how a card at STATUS would be scheduled."""
    from flashchar.application.factory import get_repository
    from flashchar.application.scheduler import (
        interval_hours_for_status,
        next_status_on_correct,
        speed_threshold_for_status,
        status_on_wrong,
    )

    config = _resolve(ctx)
    settings = _run(get_repository(config).load_settings())

    fast = next_status_on_correct(status, True, settings)
    slow = next_status_on_correct(status, False, settings)
    wrong = status_on_wrong(status, settings)

    typer.echo(f"Status {status}: due again in {interval_hours_for_status(status, settings):g}h")
    typer.echo(f"  Fast threshold: {speed_threshold_for_status(status, settings):g}s")
    typer.echo(
        f"  Correct (fast): -> {fast}  ({interval_hours_for_status(fast, settings):g}h)"
    )
    typer.echo(
        f"  Correct (slow): -> {slow}  ({interval_hours_for_status(slow, settings):g}h)"
    )
    typer.echo(f"  Wrong:          -> {wrong}  (due date unchanged)")


# ---------------------------------------------------------------------------
# Settings subgroup
# ---------------------------------------------------------------------------


@settings_app.command("show")
def settings_show(ctx: typer.Context):
    """Display the stored study settings as JSON."""
    from flashchar.application.factory import get_repository
    from flashchar.application.utils.serialization import settings_to_dict

    config = _resolve(ctx)
    settings = _run(get_repository(config).load_settings())
    typer.echo(json.dumps(settings_to_dict(settings), indent=2, ensure_ascii=False))


@settings_app.command("set")
def settings_set(
    ctx: typer.Context,
    front: Annotated[
        str | None, typer.Option(help="Comma-separated front fields, e.g. 'characters'.")
    ] = None,
    back: Annotated[
        str | None, typer.Option(help="Comma-separated back fields, e.g. 'pinyin,meaning'.")
    ] = None,
    wrong_behavior: Annotated[
        WrongBehavior | None, typer.Option(help="Status change on a wrong answer.")
    ] = None,
    dedupe: Annotated[
        DedupeImportMode | None, typer.Option(help="How imports treat existing characters.")
    ] = None,
    tts_voice: Annotated[str | None, typer.Option(help="Text-to-speech voice name.")] = None,
    tts_rate: Annotated[float | None, typer.Option(help="Text-to-speech rate.")] = None,
    tts_pitch: Annotated[float | None, typer.Option(help="Text-to-speech pitch.")] = None,
):
    """Change study settings. Invalid combinations are rejected as a whole."""
    from flashchar.application.factory import get_repository, get_settings_service

    config = _resolve(ctx)

    changes: dict = {}
    if front is not None:
        changes["front_fields"] = _parse_fields(front)
    if back is not None:
        changes["back_fields"] = _parse_fields(back)
    if wrong_behavior is not None:
        changes["wrong_behavior"] = wrong_behavior
    if dedupe is not None:
        changes["dedupe_import_mode"] = dedupe
    if tts_voice is not None:
        changes["tts_voice_name"] = tts_voice
    if tts_rate is not None:
        changes["tts_rate"] = tts_rate
    if tts_pitch is not None:
        changes["tts_pitch"] = tts_pitch

    if not changes:
        typer.secho("Nothing to change.", fg="yellow")
        raise typer.Exit()

    async def run() -> Settings:
        service = get_settings_service(get_repository(config))
        current = await service.load()
        return await service.update(replace(current, **changes))

    _run(run())
    typer.secho(f"Updated: {', '.join(sorted(changes))}", fg="green")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _resolve(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
