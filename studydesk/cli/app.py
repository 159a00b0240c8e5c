"""
studydesk: terminal front-end for the study dashboard.

A Rich terminal interface over the dashboard store. Every command loads the
snapshot, applies at most a handful of store operations and exits; the store
persists after each change.

Commands:
- studydesk status      - Countdown, progress, due revisions, today's habits
- studydesk study DECK  - Flashcard study session
- studydesk syllabus    - Topic tree and statuses
- studydesk revisions   - Due and upcoming revisions
- studydesk habits      - Daily habits and consistency
- studydesk tasks       - Task list
- studydesk decks       - Flashcard decks
- studydesk bookmarks   - Saved articles
- studydesk notes       - Topic notebook
- studydesk focus       - Focus log
- studydesk news        - Aggregate fetched feed results
- studydesk prefs       - Reader and feed preferences
- studydesk backup      - GitHub backup and restore
"""

from __future__ import annotations

import json
import random
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.tree import Tree

from config import Settings, get_settings
from studydesk.core.dates import iso_date
from studydesk.core.models import CardStatus, ResourceType, SyllabusTopic, TopicStatus
from studydesk.errors import BackupError, InvalidInputError, SnapshotDecodeError
from studydesk.flashcards.session import StudySession
from studydesk.focus import FOCUS_MINUTES, countdown, focus_minutes_by_topic, total_focus_minutes
from studydesk.habits import completion_rate, consistency, current_streak
from studydesk.logging_setup import configure_logging
from studydesk.news.feeds import (
    FEEDS,
    FeedResult,
    aggregate_feeds,
    bookmark_from_news,
    sources_of,
)
from studydesk.notebook import (
    find_note,
    group_by_paper,
    leaf_topics,
    links_for_topic,
    resource_counts,
    save_note,
    search_topics,
)
from studydesk.scheduling.revisions import due, upcoming
from studydesk.store.dashboard import DashboardStore
from studydesk.store.persistence import JsonFileStorage, KeyValueStorage
from studydesk.store.preferences import BackupCredentials, FeedPreferences, ReaderPreferences
from studydesk.store.schema import decode_snapshot, encode_snapshot
from studydesk.sync.github_backup import GitHubBackupClient
from studydesk.syllabus.tree import (
    compute_completion,
    find_by_id,
    overall_progress,
    paper_progress,
    topic_title,
)
from studydesk.validation import (
    parse_iso_date,
    parse_topic_status,
    require_text,
    validate_bookmark_input,
    validate_url,
)

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="studydesk",
    help="studydesk: exam preparation dashboard",
    no_args_is_help=True,
)
syllabus_app = typer.Typer(help="Syllabus tree and topic statuses", no_args_is_help=True)
revisions_app = typer.Typer(help="Spaced revision queue", no_args_is_help=True)
habits_app = typer.Typer(help="Daily habits", no_args_is_help=True)
tasks_app = typer.Typer(help="Task list", no_args_is_help=True)
decks_app = typer.Typer(help="Flashcard decks", no_args_is_help=True)
bookmarks_app = typer.Typer(help="Saved articles", no_args_is_help=True)
notes_app = typer.Typer(help="Topic notebook", no_args_is_help=True)
focus_app = typer.Typer(help="Focus session log", no_args_is_help=True)
news_app = typer.Typer(help="News briefing from fetched feed results", no_args_is_help=True)
prefs_app = typer.Typer(help="Reader and feed preferences", no_args_is_help=True)
backup_app = typer.Typer(help="GitHub backup and restore", no_args_is_help=True)

app.add_typer(syllabus_app, name="syllabus")
app.add_typer(revisions_app, name="revisions")
app.add_typer(habits_app, name="habits")
app.add_typer(tasks_app, name="tasks")
app.add_typer(decks_app, name="decks")
app.add_typer(bookmarks_app, name="bookmarks")
app.add_typer(notes_app, name="notes")
app.add_typer(focus_app, name="focus")
app.add_typer(news_app, name="news")
app.add_typer(prefs_app, name="prefs")
app.add_typer(backup_app, name="backup")

console = Console()


@dataclass
class AppContext:
    """Per-invocation settings, storage and (lazily) the store."""

    settings: Settings
    storage: KeyValueStorage
    _store: DashboardStore | None = field(default=None, repr=False)

    @property
    def store(self) -> DashboardStore:
        if self._store is None:
            self._store = DashboardStore.open(self.settings, storage=self.storage)
        return self._store


@app.callback()
def main_callback(
    ctx: typer.Context,
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        "-d",
        help="Directory with the dashboard files (overrides STUDYDESK_DATA_DIR)",
    ),
) -> None:
    """Load settings and open local storage."""
    settings = get_settings()
    if data_dir is not None:
        settings = settings.model_copy(update={"data_dir": data_dir})
    ctx.obj = AppContext(settings=settings, storage=JsonFileStorage(settings.data_dir))


def _ctx(ctx: typer.Context) -> AppContext:
    return ctx.obj


@contextmanager
def reported_errors() -> Iterator[None]:
    """Turn expected failures into a red message and exit code 1."""
    try:
        yield
    except InvalidInputError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    except BackupError as e:
        console.print(f"[red]Backup error:[/red] {e}")
        raise typer.Exit(1) from e
    except SnapshotDecodeError as e:
        console.print(f"[red]Invalid snapshot:[/red] {e}")
        raise typer.Exit(1) from e


# =============================================================================
# Styling
# =============================================================================

STATUS_STYLES = {
    TopicStatus.NOT_STARTED: "dim",
    TopicStatus.READING: "yellow",
    TopicStatus.REVISED: "cyan",
    TopicStatus.MASTERED: "bold green",
}

CARD_STYLES = {
    CardStatus.NEW: "dim",
    CardStatus.LEARNING: "yellow",
    CardStatus.MASTERED: "green",
}


def style_status(status: TopicStatus) -> str:
    style = STATUS_STYLES[status]
    return f"[{style}]{status.value}[/{style}]"


def progress_bar(value: int, width: int = 20) -> str:
    filled = round(width * value / 100)
    return f"[green]{'█' * filled}[/green][dim]{'░' * (width - filled)}[/dim] {value}%"


# =============================================================================
# Display Helpers
# =============================================================================


def _add_branch(tree: Tree, topic: SyllabusTopic) -> None:
    if topic.is_leaf:
        tree.add(f"{topic.title} [dim]({topic.id})[/dim]  {style_status(topic.status)}")
        return
    branch = tree.add(
        f"[bold]{topic.title}[/bold] [dim]({topic.id})[/dim]  {compute_completion(topic)}%"
    )
    for child in topic.subtopics:
        _add_branch(branch, child)


def render_syllabus(topics: list[SyllabusTopic]) -> Tree:
    tree = Tree("[bold cyan]Syllabus[/bold cyan]")
    for topic in topics:
        _add_branch(tree, topic)
    return tree


def render_revisions(store: DashboardStore, revisions: list, title: str) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Date")
    table.add_column("Topic")
    for revision in revisions:
        table.add_row(
            revision.id,
            revision.date,
            topic_title(store.state.syllabus, revision.topic_id),
        )
    return table


# =============================================================================
# Top-level Commands
# =============================================================================


@app.command()
def status(ctx: typer.Context) -> None:
    """Show the dashboard overview."""
    app_ctx = _ctx(ctx)
    store = app_ctx.store
    today = store.today()
    today_iso = iso_date(today)

    remaining = countdown(store.clock(), app_ctx.settings.exam_date)
    overall = overall_progress(store.state.syllabus)
    due_now = due(store.state.revisions, today)
    open_tasks = [t for t in store.state.tasks if not t.completed]

    console.print(
        Panel(
            f"Exam in [bold]{remaining}[/bold]\n"
            f"Syllabus: {progress_bar(overall)}\n"
            f"Revisions due: [bold]{len(due_now)}[/bold]\n"
            f"Habits today: [bold]{completion_rate(store.state.habits, today_iso)}%[/bold]\n"
            f"Open tasks: [bold]{len(open_tasks)}[/bold]\n"
            f"Focus today: [bold]{total_focus_minutes(store.state.focus_sessions, today_iso)}m[/bold]",
            title="Mission Control",
            border_style="cyan",
        )
    )

    table = Table(title="Papers")
    table.add_column("Paper")
    table.add_column("Title", style="dim")
    table.add_column("Progress")
    for paper in paper_progress(store.state.syllabus):
        table.add_row(paper.label, paper.title, progress_bar(paper.progress))
    console.print(table)


@app.command()
def study(
    ctx: typer.Context,
    deck_id: str = typer.Argument(..., help="Deck to study"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Shuffle seed"),
) -> None:
    """Study a deck card by card."""
    store = _ctx(ctx).store
    deck = store.find_deck(deck_id)
    if deck is None:
        console.print(f"[red]No deck with id {deck_id}[/red]")
        raise typer.Exit(1)

    session = StudySession(
        deck,
        on_rate=store.update_flashcard_status,
        rng=random.Random(seed) if seed is not None else None,
    )
    if session.started_complete:
        console.print("[yellow]This deck has no cards yet.[/yellow]")
        return

    while not session.is_complete:
        card = session.current
        console.print(
            Panel(
                card.front,
                title=f"{deck.title}  |  Card {session.position}/{session.total}",
                title_align="left",
                border_style="cyan",
            )
        )
        Prompt.ask("[dim]Press Enter to reveal[/dim]", default="", show_default=False)
        session.reveal()
        console.print(Panel(card.back, border_style="green"))

        answer = Prompt.ask(
            "Got it (m) / Needs practice (l) / Quit (q)",
            choices=["m", "l", "q"],
            default="m",
        )
        if answer == "q":
            console.print("[dim]Session ended early.[/dim]")
            return
        rating = CardStatus.MASTERED if answer == "m" else CardStatus.LEARNING
        outcome = session.rate(rating)
        if outcome.completed:
            mastered = sum(1 for s in session.ratings.values() if s is CardStatus.MASTERED)
            console.print(
                Panel(
                    f"[bold]Session Complete![/bold]\n\n"
                    f"Cards reviewed: {session.total}\n"
                    f"Mastered: {mastered}",
                    title="Summary",
                    border_style="green",
                )
            )


# =============================================================================
# Syllabus
# =============================================================================


@syllabus_app.command("show")
def syllabus_show(
    ctx: typer.Context,
    topic_id: Optional[str] = typer.Argument(None, help="Only show this subtree"),
) -> None:
    """Show the topic tree with statuses."""
    store = _ctx(ctx).store
    topics = store.state.syllabus
    if topic_id:
        topic = find_by_id(topics, topic_id)
        if topic is None:
            console.print(f"[red]Unknown topic {topic_id}[/red]")
            raise typer.Exit(1)
        topics = [topic]
    console.print(render_syllabus(topics))


@syllabus_app.command("set")
def syllabus_set(
    ctx: typer.Context,
    topic_id: str = typer.Argument(..., help="Topic id"),
    new_status: str = typer.Argument(..., help="Not Started | Reading | Revised | Mastered"),
) -> None:
    """Change a topic's status (Reading/Revised schedule revisions)."""
    store = _ctx(ctx).store
    with reported_errors():
        parsed = parse_topic_status(new_status)
    if not store.update_syllabus_status(topic_id, parsed):
        console.print(f"[yellow]Unknown topic {topic_id}, nothing changed[/yellow]")
        return
    console.print(f"{topic_title(store.state.syllabus, topic_id)} -> {style_status(parsed)}")
    planned = [r for r in store.state.revisions if r.topic_id == topic_id and r.is_pending]
    if planned:
        console.print(f"[dim]Revisions on {', '.join(r.date for r in planned)}[/dim]")


@syllabus_app.command("progress")
def syllabus_progress(ctx: typer.Context) -> None:
    """Completion per paper."""
    store = _ctx(ctx).store
    for paper in paper_progress(store.state.syllabus):
        console.print(f"{paper.label:<8} {progress_bar(paper.progress)}")
    console.print(f"[bold]{'Overall':<8}[/bold] {progress_bar(overall_progress(store.state.syllabus))}")


# =============================================================================
# Revisions
# =============================================================================


@revisions_app.command("due")
def revisions_due(ctx: typer.Context) -> None:
    """Revisions due today or overdue."""
    store = _ctx(ctx).store
    items = due(store.state.revisions, store.today())
    if not items:
        console.print("[green]No revisions due. Great job![/green]")
        return
    console.print(render_revisions(store, items, "Due Revisions"))


@revisions_app.command("upcoming")
def revisions_upcoming(
    ctx: typer.Context,
    days: int = typer.Option(7, "--days", help="Look-ahead window"),
) -> None:
    """Revisions scheduled in the next few days."""
    store = _ctx(ctx).store
    items = upcoming(store.state.revisions, store.today(), days)
    if not items:
        console.print("[dim]Nothing scheduled.[/dim]")
        return
    console.print(render_revisions(store, items, f"Next {days} Days"))


@revisions_app.command("done")
def revisions_done(ctx: typer.Context, revision_id: str = typer.Argument(...)) -> None:
    """Mark a revision completed."""
    _ctx(ctx).store.complete_revision(revision_id)
    console.print("[green]Revision completed[/green]")


@revisions_app.command("schedule")
def revisions_schedule(ctx: typer.Context, topic_id: str = typer.Argument(...)) -> None:
    """Restart the revision plan of a topic."""
    store = _ctx(ctx).store
    batch = store.schedule_revision(topic_id)
    console.print(f"Scheduled {len(batch)} revisions: {', '.join(r.date for r in batch)}")


# =============================================================================
# Habits
# =============================================================================


@habits_app.command("list")
def habits_list(ctx: typer.Context) -> None:
    """Habits with today's state and streaks."""
    app_ctx = _ctx(ctx)
    store = app_ctx.store
    today = store.today()
    today_iso = iso_date(today)

    table = Table(title=f"Habits  ({completion_rate(store.state.habits, today_iso)}% today)")
    table.add_column("ID", style="dim")
    table.add_column("Habit")
    table.add_column("Today")
    table.add_column("Streak")
    for habit in store.state.habits:
        done = today_iso in habit.completed_dates
        table.add_row(
            habit.id,
            habit.name,
            "[green]✓[/green]" if done else "[dim]·[/dim]",
            str(current_streak(habit, today)),
        )
    console.print(table)

    strip = consistency(store.state.habits, today, app_ctx.settings.habit_window_days)
    cells = " ".join("█" if rate == 100 else "▓" if rate > 0 else "░" for _, rate in strip)
    console.print(f"[dim]Last {len(strip)} days:[/dim] {cells}")


@habits_app.command("add")
def habits_add(ctx: typer.Context, name: str = typer.Argument(...)) -> None:
    with reported_errors():
        name = require_text(name, "name")
    habit = _ctx(ctx).store.add_habit(name)
    console.print(f"[green]Added habit[/green] {habit.name} [dim]({habit.id})[/dim]")


@habits_app.command("remove")
def habits_remove(ctx: typer.Context, habit_id: str = typer.Argument(...)) -> None:
    _ctx(ctx).store.delete_habit(habit_id)
    console.print("[green]Habit removed[/green]")


@habits_app.command("toggle")
def habits_toggle(
    ctx: typer.Context,
    habit_id: str = typer.Argument(...),
    day: Optional[str] = typer.Option(None, "--date", help="ISO date (default today)"),
) -> None:
    """Mark a habit done (or undone) for a day."""
    with reported_errors():
        day = parse_iso_date(day) if day else None
    _ctx(ctx).store.toggle_habit(habit_id, day)
    console.print("[green]Habit toggled[/green]")


# =============================================================================
# Tasks
# =============================================================================


@tasks_app.command("list")
def tasks_list(ctx: typer.Context) -> None:
    store = _ctx(ctx).store
    if not store.state.tasks:
        console.print("[dim]No tasks.[/dim]")
        return
    for task in store.state.tasks:
        mark = "[green]✓[/green]" if task.completed else "[ ]"
        text = f"[dim strike]{task.text}[/dim strike]" if task.completed else task.text
        console.print(f"{mark} {text} [dim]({task.id})[/dim]")


@tasks_app.command("add")
def tasks_add(ctx: typer.Context, text: str = typer.Argument(...)) -> None:
    with reported_errors():
        text = require_text(text, "text")
    task = _ctx(ctx).store.add_task(text)
    console.print(f"[green]Added task[/green] [dim]({task.id})[/dim]")


@tasks_app.command("done")
def tasks_done(ctx: typer.Context, task_id: str = typer.Argument(...)) -> None:
    """Toggle a task's completion."""
    _ctx(ctx).store.toggle_task(task_id)
    console.print("[green]Task toggled[/green]")


@tasks_app.command("edit")
def tasks_edit(
    ctx: typer.Context,
    task_id: str = typer.Argument(...),
    text: str = typer.Argument(...),
) -> None:
    with reported_errors():
        text = require_text(text, "text")
    _ctx(ctx).store.update_task(task_id, text)
    console.print("[green]Task updated[/green]")


@tasks_app.command("remove")
def tasks_remove(ctx: typer.Context, task_id: str = typer.Argument(...)) -> None:
    _ctx(ctx).store.delete_task(task_id)
    console.print("[green]Task removed[/green]")


# =============================================================================
# Decks
# =============================================================================


@decks_app.command("list")
def decks_list(ctx: typer.Context) -> None:
    store = _ctx(ctx).store
    table = Table(title="Decks")
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Cards")
    table.add_column("Mastered")
    for deck in store.state.decks:
        mastered = sum(1 for c in deck.cards if c.status is CardStatus.MASTERED)
        table.add_row(deck.id, deck.title, str(len(deck.cards)), str(mastered))
    console.print(table)


@decks_app.command("show")
def decks_show(ctx: typer.Context, deck_id: str = typer.Argument(...)) -> None:
    """List the cards of a deck."""
    deck = _ctx(ctx).store.find_deck(deck_id)
    if deck is None:
        console.print(f"[red]No deck with id {deck_id}[/red]")
        raise typer.Exit(1)
    table = Table(title=deck.title, caption=deck.description)
    table.add_column("Front")
    table.add_column("Back")
    table.add_column("Status")
    for card in deck.cards:
        style = CARD_STYLES[card.status]
        table.add_row(card.front, card.back, f"[{style}]{card.status.value}[/{style}]")
    console.print(table)


@decks_app.command("add")
def decks_add(
    ctx: typer.Context,
    title: str = typer.Argument(...),
    description: Optional[str] = typer.Option(None, "--description"),
) -> None:
    with reported_errors():
        title = require_text(title, "title")
    deck = _ctx(ctx).store.add_deck(title, description)
    console.print(f"[green]Created deck[/green] {deck.title} [dim]({deck.id})[/dim]")


@decks_app.command("remove")
def decks_remove(ctx: typer.Context, deck_id: str = typer.Argument(...)) -> None:
    _ctx(ctx).store.delete_deck(deck_id)
    console.print("[green]Deck removed[/green]")


@decks_app.command("add-card")
def decks_add_card(
    ctx: typer.Context,
    deck_id: str = typer.Argument(...),
    front: str = typer.Argument(...),
    back: str = typer.Argument(...),
) -> None:
    with reported_errors():
        front = require_text(front, "front")
        back = require_text(back, "back")
    card = _ctx(ctx).store.add_flashcard(deck_id, front, back)
    if card is None:
        console.print(f"[red]No deck with id {deck_id}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Added card[/green] [dim]({card.id})[/dim]")


# =============================================================================
# Bookmarks
# =============================================================================


@bookmarks_app.command("list")
def bookmarks_list(ctx: typer.Context) -> None:
    store = _ctx(ctx).store
    if not store.state.bookmarks:
        console.print("[dim]No bookmarks yet.[/dim]")
        return
    for bookmark in store.state.bookmarks:
        source = f" [dim]· {bookmark.source}[/dim]" if bookmark.source else ""
        console.print(f"[bold]{bookmark.title}[/bold]{source}\n  {bookmark.link}")
        if bookmark.note:
            console.print(f"  [italic]{bookmark.note}[/italic]")


@bookmarks_app.command("add")
def bookmarks_add(
    ctx: typer.Context,
    title: str = typer.Argument(...),
    link: str = typer.Argument(...),
    note: Optional[str] = typer.Option(None, "--note"),
    source: Optional[str] = typer.Option(None, "--source"),
) -> None:
    with reported_errors():
        title, link = validate_bookmark_input(title, link)
    bookmark = _ctx(ctx).store.add_bookmark(title, link, note=note, source=source)
    console.print(f"[green]Bookmarked[/green] {bookmark.title} [dim]({bookmark.id})[/dim]")


@bookmarks_app.command("remove")
def bookmarks_remove(ctx: typer.Context, key: str = typer.Argument(..., help="Id or link")) -> None:
    _ctx(ctx).store.remove_bookmark(key)
    console.print("[green]Bookmark removed[/green]")


@bookmarks_app.command("note")
def bookmarks_note(
    ctx: typer.Context,
    bookmark_id: str = typer.Argument(...),
    note: str = typer.Argument(...),
) -> None:
    """Attach a note to a bookmark."""
    _ctx(ctx).store.update_bookmark(bookmark_id, note=note)
    console.print("[green]Note saved[/green]")


# =============================================================================
# Notebook
# =============================================================================


@notes_app.command("index")
def notes_index(
    ctx: typer.Context,
    query: Optional[str] = typer.Option(None, "--search", "-s", help="Filter by topic or paper"),
) -> None:
    """All leaf topics grouped by paper, with resource counts."""
    store = _ctx(ctx).store
    entries = leaf_topics(store.state.syllabus)
    if query:
        entries = search_topics(entries, query)
    if not entries:
        console.print("[dim]No topics found. Try adjusting your search query.[/dim]")
        return
    for paper, topics in group_by_paper(entries).items():
        table = Table(title=paper, title_justify="left")
        table.add_column("ID", style="dim")
        table.add_column("Topic")
        table.add_column("Notes")
        table.add_column("Links")
        for entry in topics:
            counts = resource_counts(store.state.resources, entry.id)
            table.add_row(entry.id, entry.title, str(counts.notes), str(counts.links))
        console.print(table)


@notes_app.command("show")
def notes_show(ctx: typer.Context, topic_id: str = typer.Argument(...)) -> None:
    """Show a topic's note and links."""
    store = _ctx(ctx).store
    note = find_note(store.state.resources, topic_id)
    console.print(
        Panel(
            note.content if note else "[dim]No note yet.[/dim]",
            title=topic_title(store.state.syllabus, topic_id),
            border_style="cyan",
        )
    )
    for link in links_for_topic(store.state.resources, topic_id):
        console.print(f"• {link.title or link.content}  [dim]{link.content} ({link.id})[/dim]")


@notes_app.command("save")
def notes_save(
    ctx: typer.Context,
    topic_id: str = typer.Argument(...),
    content: str = typer.Argument(..., help="Markdown text"),
) -> None:
    """Create or replace the topic's main note."""
    save_note(_ctx(ctx).store, topic_id, content)
    console.print("[green]Note saved[/green]")


@notes_app.command("link")
def notes_link(
    ctx: typer.Context,
    topic_id: str = typer.Argument(...),
    url: str = typer.Argument(...),
    title: str = typer.Argument(...),
) -> None:
    """Attach a link to a topic."""
    with reported_errors():
        url = validate_url(url, "url")
        title = require_text(title, "title")
    _ctx(ctx).store.add_resource(topic_id, ResourceType.LINK, url, title=title)
    console.print("[green]Link added[/green]")


@notes_app.command("remove")
def notes_remove(ctx: typer.Context, resource_id: str = typer.Argument(...)) -> None:
    _ctx(ctx).store.delete_resource(resource_id)
    console.print("[green]Resource removed[/green]")


# =============================================================================
# Focus
# =============================================================================


@focus_app.command("log")
def focus_log(
    ctx: typer.Context,
    topic_id: str = typer.Argument(...),
    minutes: int = typer.Option(FOCUS_MINUTES, "--minutes", "-m", min=1),
) -> None:
    """Record a finished focus block."""
    store = _ctx(ctx).store
    store.log_focus_session(topic_id, minutes)
    console.print(
        f"[green]Logged {minutes}m on[/green] {topic_title(store.state.syllabus, topic_id)}"
    )


@focus_app.command("stats")
def focus_stats(ctx: typer.Context) -> None:
    """Focus minutes per topic."""
    store = _ctx(ctx).store
    totals = focus_minutes_by_topic(store.state.focus_sessions)
    if not totals:
        console.print("[dim]No focus sessions logged.[/dim]")
        return
    table = Table(title="Focus Time")
    table.add_column("Topic")
    table.add_column("Minutes", justify="right")
    for topic_id, minutes in totals.items():
        table.add_row(topic_title(store.state.syllabus, topic_id), str(minutes))
    console.print(table)


# =============================================================================
# News
# =============================================================================


@news_app.command("show")
def news_show(
    ctx: typer.Context,
    results_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Feed results JSON"),
    source: Optional[str] = typer.Option(None, "--source", help="Only this source"),
    bookmark: Optional[int] = typer.Option(None, "--bookmark", help="Bookmark item N (1-based)"),
) -> None:
    """Show the merged briefing from a file of per-source feed results."""
    app_ctx = _ctx(ctx)
    try:
        results = TypeAdapter(list[FeedResult]).validate_json(results_file.read_text(encoding="utf-8"))
    except ValidationError as e:
        console.print(f"[red]Invalid feed results:[/red] {e.error_count()} error(s)")
        raise typer.Exit(1) from e

    items = aggregate_feeds(results)
    prefs = FeedPreferences.load(app_ctx.storage, app_ctx.settings.feed_preferences_key)
    enabled = prefs.effective(sources_of(items))
    items = [i for i in items if i.source in enabled and (source is None or i.source == source)]

    for failed in (r for r in results if r.error):
        logger.warning("Feed {} failed to load", failed.source)

    store = app_ctx.store
    for index, item in enumerate(items, start=1):
        saved = "[yellow]★[/yellow] " if store.is_bookmarked(item.link) else ""
        console.print(f"{index:>2}. {saved}[bold]{item.title}[/bold] [dim]· {item.source}[/dim]")

    if bookmark is not None:
        if not 1 <= bookmark <= len(items):
            console.print(f"[red]No item {bookmark}[/red]")
            raise typer.Exit(1)
        item = items[bookmark - 1]
        if store.is_bookmarked(item.link):
            store.remove_bookmark(item.link)
            console.print("[green]Bookmark removed[/green]")
        else:
            store.add_bookmark(**bookmark_from_news(item))
            console.print(f"[green]Bookmarked[/green] {item.title}")


# =============================================================================
# Preferences
# =============================================================================


@prefs_app.command("reader")
def prefs_reader(
    ctx: typer.Context,
    font: Optional[str] = typer.Option(None, help="serif | sans | mono"),
    size: Optional[str] = typer.Option(None, help="small | medium | large | xl"),
    theme: Optional[str] = typer.Option(None, help="light | sepia | dark"),
    width: Optional[str] = typer.Option(None, help="narrow | medium | wide"),
    line_height: Optional[str] = typer.Option(None, help="compact | normal | loose"),
    align: Optional[str] = typer.Option(None, help="left | justify"),
) -> None:
    """Show or change reader preferences."""
    app_ctx = _ctx(ctx)
    key = app_ctx.settings.preferences_key
    prefs = ReaderPreferences.load(app_ctx.storage, key)
    updates = {
        name: value
        for name, value in {
            "font": font,
            "size": size,
            "theme": theme,
            "width": width,
            "line_height": line_height,
            "align": align,
        }.items()
        if value is not None
    }
    if updates:
        try:
            prefs = ReaderPreferences.model_validate({**prefs.model_dump(), **updates})
        except ValidationError as e:
            console.print(f"[red]Invalid preference:[/red] {e.errors()[0]['msg']}")
            raise typer.Exit(1) from e
        prefs.save(app_ctx.storage, key)

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="dim")
    table.add_column("Value", style="bold")
    for name, value in prefs.model_dump().items():
        table.add_row(name, str(value))
    console.print(table)


@prefs_app.command("sources")
def prefs_sources(
    ctx: typer.Context,
    toggle: Optional[str] = typer.Option(None, "--toggle", help="Source to enable/disable"),
) -> None:
    """Show or toggle enabled news sources."""
    app_ctx = _ctx(ctx)
    key = app_ctx.settings.feed_preferences_key
    prefs = FeedPreferences.load(app_ctx.storage, key)
    available = [feed.title for feed in FEEDS]
    if toggle:
        prefs.toggle_source(toggle, available)
        prefs.save(app_ctx.storage, key)
    for name in available:
        mark = "[green]✓[/green]" if prefs.is_enabled(name) else "[dim]·[/dim]"
        console.print(f"{mark} {name}")


# =============================================================================
# Backup
# =============================================================================


def _credentials(app_ctx: AppContext) -> BackupCredentials:
    return BackupCredentials.load(
        app_ctx.storage,
        app_ctx.settings.backup_token_key,
        app_ctx.settings.backup_repo_key,
    )


def _backup_client(app_ctx: AppContext) -> GitHubBackupClient:
    creds = _credentials(app_ctx)
    return GitHubBackupClient.from_settings(app_ctx.settings, creds.token, creds.repo)


@backup_app.command("configure")
def backup_configure(
    ctx: typer.Context,
    token: str = typer.Option(..., "--token", prompt=True, hide_input=True),
    repo: str = typer.Option(..., "--repo", prompt=True, help="owner/repo"),
) -> None:
    """Save GitHub credentials."""
    app_ctx = _ctx(ctx)
    with reported_errors():
        token = require_text(token, "token")
        repo = require_text(repo, "repo")
        if repo.count("/") != 1:
            raise InvalidInputError("repo must look like owner/repo")
    BackupCredentials(token=token, repo=repo).save(
        app_ctx.storage,
        app_ctx.settings.backup_token_key,
        app_ctx.settings.backup_repo_key,
    )
    console.print("[green]Settings saved![/green]")


@backup_app.command("push")
def backup_push(ctx: typer.Context) -> None:
    """Upload the current snapshot."""
    app_ctx = _ctx(ctx)
    with reported_errors():
        with _backup_client(app_ctx) as client:
            result = client.push(encode_snapshot(app_ctx.store.state))
    console.print(f"[green]Backup successful![/green] [dim]{result.message}[/dim]")


@backup_app.command("pull")
def backup_pull(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Replace local data with the remote backup."""
    app_ctx = _ctx(ctx)
    if not yes and not Confirm.ask("Replace ALL local data with the backup?", default=False):
        raise typer.Exit(0)
    with reported_errors():
        with _backup_client(app_ctx) as client:
            raw = client.pull()
        state = decode_snapshot(raw)
    app_ctx.store.restore(state)
    console.print("[green]Restore successful![/green]")


@backup_app.command("export")
def backup_export(ctx: typer.Context, output: Path = typer.Argument(...)) -> None:
    """Write the snapshot to a local file."""
    app_ctx = _ctx(ctx)
    output.write_text(
        json.dumps(json.loads(encode_snapshot(app_ctx.store.state)), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    console.print(f"[green]Exported to {output}[/green]")


@backup_app.command("import")
def backup_import(
    ctx: typer.Context,
    source: Path = typer.Argument(..., exists=True, dir_okay=False),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Replace local data with a snapshot file."""
    app_ctx = _ctx(ctx)
    if not yes and not Confirm.ask("Replace ALL local data with this file?", default=False):
        raise typer.Exit(0)
    with reported_errors():
        state = decode_snapshot(source.read_text(encoding="utf-8"))
    app_ctx.store.restore(state)
    console.print("[green]Import complete[/green]")


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """CLI entry point."""
    configure_logging(get_settings())
    app()


if __name__ == "__main__":
    run()
