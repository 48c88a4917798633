"""Interactive CLI application."""
from datetime import date
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.prompt import Prompt, IntPrompt, FloatPrompt

from study_planner.config import load_settings
from study_planner.db import init_db
from study_planner.errors import StudyPlannerError
from study_planner.exams import get_exam_stats, get_performance
from study_planner.flashcards import (
    create_flashcard, get_due_cards, get_review_stats, record_flashcard_result,
)
from study_planner.importer import import_exam_result, import_syllabus
from study_planner.log import setup_logging
from study_planner.performance import topic_session_stats
from study_planner.plans import overdue_sessions, sessions_by_priority, sessions_on, study_streak
from study_planner.study import (
    adapt_study_plan, generate_study_plan, get_upcoming_sessions, list_plans,
    list_syllabi, update_session_status,
)

console = Console()

PRIORITY_COLORS = {"high": "red", "medium": "yellow", "low": "green"}
MASTERY_COLORS = {"high": "green", "medium": "yellow", "low": "red"}
STATUS_COLORS = {"completed": "green", "postponed": "dark_orange", "pending": "cyan"}


class SessionExitRequested(Exception):
    """Raised when the user types q or menu during a drill."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in ("q", "menu"):
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str]) -> int:
    answer = Prompt.ask(prompt + " [dim](q to stop)[/dim]", choices=choices + ["q", "menu"], show_choices=False)
    if answer.strip().lower() in ("q", "menu"):
        raise SessionExitRequested()
    return int(answer)


def show_welcome():
    console.print(Panel(
        "[bold]Study Planner[/bold]\n[dim]Exam plans, adaptive sessions and flashcards[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("syllabi", "List syllabi"),
        ("import", "Import a syllabus file"),
        ("generate", "Generate a study plan"),
        ("plan", "View study plans"),
        ("session", "Update a session's status"),
        ("upcoming", "Sessions for the next days"),
        ("exam", "Import an exam result"),
        ("performance", "Mastery by subject"),
        ("adapt", "Rebalance a plan from exam results"),
        ("flashcards", "Review due flashcards"),
        ("add-card", "Create a flashcard"),
        ("stats", "Exam and review statistics"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def _choose(items, label: str, describe):
    if not items:
        return None
    for i, item in enumerate(items, 1):
        console.print(f"  [cyan]{i}[/cyan]) {describe(item)}")
    index = IntPrompt.ask(f"Select {label}", choices=[str(i) for i in range(1, len(items) + 1)])
    return items[index - 1]


def _active_plans(settings):
    return [p for p in list_plans(settings.db_path, settings.user_id) if p.is_active]


def render_plan(plan) -> None:
    console.print(Panel(
        f"{plan.start_date.isoformat()} → {plan.end_date.isoformat()}  |  "
        f"{plan.daily_hours}h/day  |  {plan.total_hours}h estimated  |  "
        f"Progress [bold]{plan.progress}%[/bold]",
        title=plan.title or plan.id,
    ))
    table = Table()
    table.add_column("#", justify="right")
    table.add_column("Date")
    table.add_column("Topic", style="cyan")
    table.add_column("Subject")
    table.add_column("Min", justify="right")
    table.add_column("Priority")
    table.add_column("Status")
    for i, s in enumerate(plan.sessions, 1):
        pc = PRIORITY_COLORS.get(s.priority, "white")
        sc = STATUS_COLORS.get(s.status, "white")
        table.add_row(
            str(i), s.scheduled_date.strftime("%a %Y-%m-%d"), s.topic_name, s.subject,
            str(s.duration), f"[{pc}]{s.priority}[/{pc}]", f"[{sc}]{s.status}[/{sc}]",
        )
    console.print(table)
    overdue = overdue_sessions(plan.sessions)
    if overdue:
        console.print(f"[yellow]{len(overdue)} overdue session(s).[/yellow]")


def render_plan_summary(plan, today=None) -> None:
    today = today or date.today()
    todays = sessions_on(plan.sessions, today)
    if todays:
        minutes = sum(s.duration for s in todays)
        console.print(f"[bold]Today:[/bold] {len(todays)} session(s), {minutes} min")
    urgent = [s for s in sessions_by_priority(plan.sessions, "high") if s.status == "pending"]
    console.print(f"[red]{len(urgent)}[/red] high-priority session(s) pending.")

    table = Table(title="Progress by Topic")
    table.add_column("Topic", style="cyan")
    table.add_column("Done", justify="right")
    table.add_column("Completion", justify="right")
    table.add_column("Avg performance", justify="right")
    names = {s.topic_id: s.topic_name for s in plan.sessions}
    for row in topic_session_stats(plan.sessions):
        table.add_row(
            names[row["topic_id"]], f"{row['completed_sessions']}/{row['total_sessions']}",
            f"{row['completion_rate']}%", f"{row['average_performance']}",
        )
    console.print(table)


def run_flashcard_session(db_path: str, cards: list) -> int:
    """Drill cards, saving each rating as it is given. Returns cards reviewed."""
    if not cards:
        console.print("[yellow]No flashcards due right now![/yellow]")
        return 0
    console.print(f"\n[bold]Flashcard Session[/bold] — {len(cards)} cards [dim](q to stop)[/dim]\n")
    reviewed = 0
    try:
        for i, card in enumerate(cards, 1):
            console.print(Panel(card.question, title=f"Card {i}/{len(cards)} · {card.subject}", border_style="cyan"))
            session_prompt("[dim]Press Enter to reveal answer[/dim]", default="")
            console.print(Panel(card.answer, border_style="green"))
            quality = session_int_prompt(
                "Rate yourself (0=forgot, 3=hard, 4=good, 5=easy)", choices=["0", "1", "2", "3", "4", "5"],
            )
            state = record_flashcard_result(db_path, card.id, quality)
            reviewed += 1
            console.print(f"[dim]Next review in {state.interval} day(s).[/dim]\n")
    except SessionExitRequested:
        console.print(f"[dim]Stopped after {reviewed} card(s).[/dim]")
    return reviewed


def cmd_syllabi(settings):
    syllabi = list_syllabi(settings.db_path, settings.user_id)
    if not syllabi:
        console.print("[yellow]No syllabi yet. Use 'import' to add one.[/yellow]")
        return
    table = Table(title="Syllabi")
    table.add_column("Title", style="cyan")
    table.add_column("Exam date")
    table.add_column("Topics", justify="right")
    table.add_column("Hours", justify="right")
    for s in syllabi:
        table.add_row(s.title, s.exam_date.isoformat(), str(len(s.topics)),
                      str(sum(t.estimated_hours for t in s.topics)))
    console.print(table)


def cmd_import(settings):
    file_path = Prompt.ask("Syllabus file (.json/.yaml)")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    syllabus = import_syllabus(settings.db_path, file_path, settings.user_id)
    console.print(f"[green]Imported {syllabus.title} ({len(syllabus.topics)} topics, exam {syllabus.exam_date})[/green]")


def cmd_generate(settings):
    syllabi = list_syllabi(settings.db_path, settings.user_id)
    syllabus = _choose(syllabi, "syllabus", lambda s: f"{s.title} [dim]({s.exam_date})[/dim]")
    if syllabus is None:
        console.print("[yellow]No syllabi yet. Use 'import' to add one.[/yellow]")
        return
    daily_hours = FloatPrompt.ask("Study hours per day", default=settings.daily_hours)
    plan = generate_study_plan(settings.db_path, syllabus.id, settings.user_id, daily_hours)
    console.print(f"[green]Plan created with {len(plan.sessions)} sessions.[/green]")
    render_plan(plan)


def cmd_plan(settings):
    plans = list_plans(settings.db_path, settings.user_id)
    plan = _choose(plans, "plan", lambda p: f"{p.title} [dim]({p.progress}%{'' if p.is_active else ', inactive'})[/dim]")
    if plan is None:
        console.print("[yellow]No plans yet. Use 'generate' to create one.[/yellow]")
        return
    render_plan(plan)
    render_plan_summary(plan)


def cmd_session(settings):
    plan = _choose(_active_plans(settings), "plan", lambda p: p.title)
    if plan is None:
        console.print("[yellow]No active plans.[/yellow]")
        return
    render_plan(plan)
    if not plan.sessions:
        return
    index = IntPrompt.ask("Session #", choices=[str(i) for i in range(1, len(plan.sessions) + 1)], show_choices=False)
    session = plan.sessions[index - 1]
    status = Prompt.ask("New status", choices=["pending", "completed", "postponed"], default="completed")
    changes = {}
    if status == "completed":
        changes["actual_duration"] = IntPrompt.ask("Minutes actually studied", default=session.duration)
    notes = Prompt.ask("Notes", default="")
    if notes:
        changes["notes"] = notes
    plan = update_session_status(settings.db_path, plan.id, session.id, status=status, **changes)
    console.print(f"[green]Session updated. Plan progress: {plan.progress}%[/green]")
    streak = study_streak(plan.sessions)
    if streak:
        console.print(f"[bold]Study streak: {streak} day(s)[/bold]")


def cmd_upcoming(settings):
    days = IntPrompt.ask("Days ahead", default=7)
    sessions = get_upcoming_sessions(settings.db_path, settings.user_id, days=days)
    if not sessions:
        console.print("[green]Nothing scheduled.[/green]")
        return
    table = Table(title=f"Next {days} days")
    table.add_column("Date")
    table.add_column("Topic", style="cyan")
    table.add_column("Min", justify="right")
    table.add_column("Plan")
    for s in sessions:
        table.add_row(s["scheduled_date"].isoformat(), s["topic_name"], str(s["duration"]), s["plan_title"])
    console.print(table)


def cmd_exam(settings):
    file_path = Prompt.ask("Exam result file (.json/.yaml)")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_exam_result(settings.db_path, file_path, settings.user_id)
    console.print(f"[green]Recorded {result.title}: {result.correct_answers}/{result.total_questions} "
                  f"({result.score:.0f}%)[/green]")


def cmd_performance(settings):
    metrics = get_performance(settings.db_path, settings.user_id)
    if not metrics:
        console.print("[yellow]No exam results yet. Use 'exam' to import one.[/yellow]")
        return
    table = Table(title="Mastery by Subject")
    table.add_column("Subject", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Attempts", justify="right")
    table.add_column("Minutes", justify="right")
    table.add_column("Mastery")
    for subject, m in metrics.items():
        color = MASTERY_COLORS[m.mastery]
        table.add_row(subject, f"{m.average_score}%", str(m.total_attempts),
                      f"{m.time_spent:.0f}", f"[{color}]{m.mastery}[/{color}]")
    console.print(table)


def cmd_adapt(settings):
    plan = _choose(_active_plans(settings), "plan", lambda p: p.title)
    if plan is None:
        console.print("[yellow]No active plans.[/yellow]")
        return
    adapted = adapt_study_plan(settings.db_path, plan.id)
    changed = sum(
        1 for old, new in zip(plan.sessions, adapted.sessions)
        if (old.duration, old.priority) != (new.duration, new.priority)
    )
    console.print(f"[green]Adapted {changed} of {len(adapted.sessions)} sessions.[/green]")
    render_plan(adapted)


def cmd_flashcards(settings):
    cards = get_due_cards(settings.db_path, settings.user_id, limit=20)
    run_flashcard_session(settings.db_path, cards)


def cmd_add_card(settings):
    question = Prompt.ask("Question")
    answer = Prompt.ask("Answer")
    subject = Prompt.ask("Subject")
    difficulty = Prompt.ask("Difficulty", choices=["easy", "medium", "hard"], default="medium")
    tags = [t.strip() for t in Prompt.ask("Tags (comma separated)", default="").split(",") if t.strip()]
    card = create_flashcard(settings.db_path, settings.user_id, question, answer, subject, difficulty, tags)
    console.print(f"[green]Flashcard {card.id} created, due today.[/green]")


def cmd_stats(settings):
    exams = get_exam_stats(settings.db_path, settings.user_id)
    reviews = get_review_stats(settings.db_path, settings.user_id)
    console.print(f"\n  Exams: [bold]{exams['total_exams']}[/bold]  |  "
                  f"Avg: [bold]{exams['average_score']}%[/bold]  |  "
                  f"Best: [bold]{exams['best_score']}%[/bold]")
    console.print(f"  Cards: [bold]{reviews['total_cards']}[/bold]  |  "
                  f"Due: [bold]{reviews['due_today']}[/bold]  |  "
                  f"Reviewed today: [bold]{reviews['reviewed_today']}[/bold]  |  "
                  f"Avg ease: [bold]{reviews['average_ease_factor']}[/bold]")
    if exams["subjects"]:
        table = Table(title="Exams by Subject")
        table.add_column("Subject", style="cyan")
        table.add_column("Exams", justify="right")
        table.add_column("Avg", justify="right")
        for s in exams["subjects"]:
            table.add_row(s["name"], str(s["count"]), f"{s['average_score']}%")
        console.print(table)


COMMANDS = {
    "syllabi": cmd_syllabi,
    "import": cmd_import,
    "generate": cmd_generate,
    "plan": cmd_plan,
    "session": cmd_session,
    "upcoming": cmd_upcoming,
    "exam": cmd_exam,
    "performance": cmd_performance,
    "adapt": cmd_adapt,
    "flashcards": cmd_flashcards,
    "add-card": cmd_add_card,
    "stats": cmd_stats,
}


def main():
    settings = load_settings()
    setup_logging(settings.log_level)
    init_db(settings.db_path)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="plan").strip().lower()
        if choice in ("quit", "exit", "q"):
            console.print("[dim]Good luck on your exam![/dim]")
            break
        command = COMMANDS.get(choice)
        if command is None:
            console.print("[red]Unknown command. Try again.[/red]")
            continue
        try:
            command(settings)
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except StudyPlannerError as e:
            console.print(f"[red]{e}[/red]")


if __name__ == "__main__":
    main()
