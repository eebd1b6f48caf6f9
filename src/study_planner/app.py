"""Interactive CLI application."""
from datetime import date, timedelta
from pathlib import Path

from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from study_planner.config import DEFAULT_DB_PATH, DEFAULT_USER_ID, setup_logging
from study_planner.db import init_db
from study_planner.exceptions import RevisionSchedulingError, StreakUpdateError, StudyPlannerError
from study_planner.importer import import_file
from study_planner.mistakes import get_mistakes, mark_mistake_reviewed, record_mistake
from study_planner.plan import get_plan_topics, get_profile, get_todays_plan, pull_next_topic, save_profile
from study_planner.progress import get_calendar, get_study_stats, get_subject_progress
from study_planner.quiz import submit_quiz_result
from study_planner.revision import complete_revision, get_due_revisions

console = Console()

EXIT_WORDS = ("q", "menu")
STATUS_COLORS = {
    "strong": "green",
    "needs_revision": "yellow",
    "weak": "red",
    "pending": "dim",
}


class SessionExitRequested(Exception):
    """Raised when the user types q/menu at a prompt inside a command."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str] | None = None, **kwargs) -> int:
    while True:
        answer = session_prompt(prompt, choices=choices, **kwargs)
        try:
            return int(answer)
        except ValueError:
            console.print("[red]Please enter a number.[/red]")


def status_label(status: str | None) -> str:
    status = status or "pending"
    color = STATUS_COLORS.get(status, "white")
    return f"[{color}]{status.replace('_', ' ')}[/{color}]"


def show_welcome(profile):
    name = profile.name if profile else "Student"
    console.print(Panel(
        f"[bold]Hi {name}![/bold]\n[dim]Adaptive study planner[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("plan", "Today's topics"),
        ("more", "Pull one more topic into today"),
        ("quiz", "Record a quiz result"),
        ("revise", "Revision tasks due"),
        ("progress", "Progress by subject"),
        ("calendar", "Tasks for the next two weeks"),
        ("mistakes", "Mistake notebook"),
        ("import", "Import a syllabus (YAML/JSON)"),
        ("profile", "Daily hours and exam date"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def cmd_plan(db_path: str, user_id: str) -> list:
    plan = get_todays_plan(db_path, user_id)
    allocation = plan.allocation
    header = f"Streak: [bold]{plan.profile.current_streak if plan.profile else 0}[/bold] days"
    if plan.days_until_exam is not None:
        header += f"  |  Exam in [bold]{plan.days_until_exam}[/bold] days"
    header += f"\nBudget: {allocation.max_topics_today} topics  |  Assigned: {allocation.total}"
    console.print(Panel(header, title="Today's Plan", border_style="blue"))

    if not plan.topics:
        console.print("[green]No pending topics. Import a syllabus or check your revisions.[/green]")
        return []

    if allocation.breakdown:
        breakdown = Table(title="Subject Split")
        breakdown.add_column("Subject")
        breakdown.add_column("Weight", justify="right")
        breakdown.add_column("Topics", justify="right")
        for sub in allocation.breakdown:
            breakdown.add_row(f"[{sub.color}]{sub.subject_name}[/{sub.color}]", f"{sub.weight:.2f}", str(sub.topic_count))
        console.print(breakdown)

    table = Table(title="Topics")
    table.add_column("#", justify="right")
    table.add_column("Topic")
    table.add_column("Chapter")
    table.add_column("Subject")
    table.add_column("Status")
    for i, topic in enumerate(plan.topics, 1):
        table.add_row(str(i), topic.topic_name, topic.chapter_name, topic.subject_name, status_label(topic.status))
    console.print(table)
    return plan.topics


def ask_quiz_result() -> tuple[int, str]:
    while True:
        score = session_int_prompt("Quiz score (0-100)")
        if 0 <= score <= 100:
            break
        console.print("[red]Score must be between 0 and 100.[/red]")
    confidence = session_prompt("How confident do you feel?", choices=["high", "medium", "low"])
    return score, confidence


def log_mistakes(db_path: str, user_id: str, topic_id: int) -> None:
    while session_prompt("Log a wrong answer?", choices=["y", "n"], default="n") == "y":
        question = session_prompt("Question")
        user_answer = session_prompt("Your answer")
        correct = session_prompt("Correct answer")
        explanation = session_prompt("Explanation", default="")
        record_mistake(db_path, user_id, topic_id, question, user_answer, correct, explanation)
        console.print("[green]Saved to your mistake notebook.[/green]")


def report_outcome(outcome) -> None:
    console.print(f"Status: {status_label(outcome.status)}")
    if outcome.revisions_scheduled:
        console.print(f"[cyan]{outcome.revisions_scheduled} revision task(s) scheduled.[/cyan]")
    else:
        console.print("[dim]Revisions already scheduled.[/dim]")
    if outcome.streak:
        console.print(f"Streak: [bold]{outcome.streak}[/bold] days")


def run_quiz_entry(db_path: str, user_id: str, topic_id: int) -> None:
    score, confidence = ask_quiz_result()
    try:
        outcome = submit_quiz_result(db_path, user_id, topic_id, score, confidence)
    except RevisionSchedulingError as e:
        console.print(f"[yellow]Saved as {e.outcome.status}, but revisions were not scheduled: {e.cause}[/yellow]")
        return
    except StreakUpdateError as e:
        report_outcome(e.outcome)
        console.print(f"[yellow]Your streak could not be updated: {e.cause}[/yellow]")
        log_mistakes(db_path, user_id, topic_id)
        return
    report_outcome(outcome)
    log_mistakes(db_path, user_id, topic_id)


def cmd_quiz(db_path: str, user_id: str):
    topics = cmd_plan(db_path, user_id)
    if not topics:
        return
    choice = session_int_prompt("Topic #", choices=[str(i) for i in range(1, len(topics) + 1)])
    topic = topics[choice - 1]
    console.print(f"\n[bold]{topic.topic_name}[/bold] [dim]({topic.subject_name})[/dim]")
    run_quiz_entry(db_path, user_id, topic.topic_id)


def cmd_more(db_path: str, user_id: str):
    plan = get_todays_plan(db_path, user_id)
    topic = pull_next_topic(plan, get_plan_topics(db_path, user_id))
    if topic is None:
        console.print("[green]No pending topics left. Everything is planned or studied.[/green]")
        return
    console.print(f"Added [bold]{topic.topic_name}[/bold] [dim]({topic.chapter_name}, {topic.subject_name})[/dim]")
    if session_prompt("Quiz it now?", choices=["y", "n"], default="y") == "y":
        run_quiz_entry(db_path, user_id, topic.topic_id)


def cmd_revise(db_path: str, user_id: str):
    tasks = get_due_revisions(db_path, user_id)
    pending = [t for t in tasks if not t["is_completed"]]
    if not pending:
        console.print("[green]No revisions due. Nice work![/green]")
        return
    table = Table(title="Revisions Due")
    table.add_column("#", justify="right")
    table.add_column("Topic")
    table.add_column("Subject")
    table.add_column("Due")
    table.add_column("Status")
    table.add_column("Quiz?")
    for i, t in enumerate(pending, 1):
        table.add_row(
            str(i), t["topic_name"], t["subject_name"], t["scheduled_date"],
            status_label(t["status"]), "yes" if t["require_quiz"] else "",
        )
    console.print(table)
    choice = session_int_prompt("Revise #", choices=[str(i) for i in range(1, len(pending) + 1)])
    task = pending[choice - 1]
    if task["content"]:
        console.print(Panel(task["content"], title=task["topic_name"], border_style="cyan"))
    if task["require_quiz"]:
        console.print("[bold]This revision needs a quiz.[/bold]")
        run_quiz_entry(db_path, user_id, task["topic_id"])
    else:
        session_prompt("[dim]Press Enter when done revising[/dim]", default="")
        complete_revision(db_path, user_id, task["id"])
        console.print("[green]Revision complete![/green]")


def cmd_progress(db_path: str, user_id: str):
    stats = get_study_stats(db_path, user_id)
    console.print(Panel(
        f"Topics: [bold]{stats['topics_done']}/{stats['topics_total']}[/bold] ({stats['percent_complete']}%)  |  "
        f"Hours: [bold]{stats['minutes_studied'] // 60}[/bold]  |  "
        f"Avg Quiz: [bold]{stats['avg_quiz_score']}%[/bold]  |  "
        f"Streak: [bold]{stats['current_streak']}[/bold]",
        title="Progress", border_style="blue",
    ))
    table = Table(title="Subjects")
    table.add_column("Subject", style="cyan")
    table.add_column("Difficulty")
    table.add_column("Done", justify="right")
    table.add_column("Strong", justify="right")
    table.add_column("Revise", justify="right")
    table.add_column("Weak", justify="right")
    for s in get_subject_progress(db_path, user_id):
        table.add_row(
            s["name"], s["difficulty"], f"{s['done']}/{s['total']} ({s['percent']}%)",
            f"[green]{s['strong']}[/green]", f"[yellow]{s['needs_revision']}[/yellow]", f"[red]{s['weak']}[/red]",
        )
    console.print(table)
    if stats["revisions_due"]:
        console.print(f"\n  [yellow]{stats['revisions_due']} revision(s) due. Type 'revise'.[/yellow]")


def cmd_calendar(db_path: str, user_id: str):
    today = date.today()
    days = get_calendar(db_path, user_id, today, today + timedelta(days=14))
    if not days:
        console.print("[dim]Nothing scheduled in the next two weeks.[/dim]")
        return
    table = Table(title="Next Two Weeks")
    table.add_column("Date")
    table.add_column("Tasks")
    table.add_column("Status")
    colors = {"completed": "green", "partial": "yellow", "pending": "cyan"}
    for day, info in sorted(days.items()):
        names = ", ".join(f"{t['topic_name']} ({t['task_type']})" for t in info["tasks"])
        color = colors[info["status"]]
        table.add_row(day, names, f"[{color}]{info['status']}[/{color}]")
    console.print(table)


def cmd_mistakes(db_path: str, user_id: str):
    mistakes = get_mistakes(db_path, user_id, unreviewed_only=True)
    if not mistakes:
        console.print("[green]All caught up![/green]")
        return
    for m in mistakes:
        body = (
            f"[bold]{m['question']}[/bold]\n"
            f"Your answer: [red]{m['user_answer']}[/red]\n"
            f"Correct: [green]{m['correct_answer']}[/green]"
        )
        if m["explanation"]:
            body += f"\n[dim]{m['explanation']}[/dim]"
        console.print(Panel(body, title=f"{m['topic_name']} ({m['subject_name']})", border_style="red"))
        if session_prompt("Mark as reviewed?", choices=["y", "n"], default="y") == "y":
            mark_mistake_reviewed(db_path, user_id, m["id"])


def cmd_import(db_path: str, user_id: str):
    file_path = session_prompt("Syllabus file (.yaml or .json)")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    counts = import_file(db_path, user_id, file_path)
    console.print(
        f"[green]Imported {counts['subjects']} subjects, {counts['chapters']} chapters, "
        f"{counts['topics']} topics.[/green]"
    )


def cmd_profile(db_path: str, user_id: str):
    profile = get_profile(db_path, user_id)
    name = session_prompt("Name", default=profile.name if profile else "Student")
    hours = session_int_prompt("Daily study hours", default=str(profile.daily_study_hours if profile else 2))
    exam = session_prompt("Exam date (YYYY-MM-DD, blank for none)", default=(profile.exam_date or "") if profile else "")
    save_profile(db_path, user_id, name=name, daily_study_hours=hours, exam_date=exam.strip() or None)
    console.print("[green]Profile saved.[/green]")


COMMANDS = {
    "plan": cmd_plan,
    "more": cmd_more,
    "quiz": cmd_quiz,
    "revise": cmd_revise,
    "progress": cmd_progress,
    "calendar": cmd_calendar,
    "mistakes": cmd_mistakes,
    "import": cmd_import,
    "profile": cmd_profile,
}


def main():
    setup_logging()
    db_path = DEFAULT_DB_PATH
    user_id = DEFAULT_USER_ID
    init_db(db_path)
    profile = get_profile(db_path, user_id)
    if profile is None:
        console.print("[dim]Setting up for first use...[/dim]")
        profile = save_profile(db_path, user_id)

    show_welcome(profile)

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="plan").strip().lower()
        if choice in ("quit", "exit", "q"):
            console.print("[dim]Good luck with your exams![/dim]")
            break
        command = COMMANDS.get(choice)
        if command is None:
            console.print("[red]Unknown command. Try again.[/red]")
            continue
        try:
            command(db_path, user_id)
        except SessionExitRequested:
            console.print("[dim]Back to menu.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except StudyPlannerError as e:
            console.print(f"[red]{e}[/red]")
        except Exception as e:
            logger.exception("Command failed")
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
